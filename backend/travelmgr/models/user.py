"""
User model for authentication and participant lookups.
"""
from sqlalchemy import Column, String, Boolean
from sqlalchemy.orm import relationship
from travelmgr.db.base import BaseModel


class User(BaseModel):
    """A principal: owner, payer or participant of expenses and itineraries."""
    __tablename__ = "users"

    name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    hashed_password = Column(String(255), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    # Relationships
    expenses = relationship("Expense", foreign_keys="Expense.user_id", back_populates="owner")
    itineraries = relationship("Itinerary", back_populates="owner")
