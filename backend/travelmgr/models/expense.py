"""
Expense model with optional split among participants.
"""
from sqlalchemy import (
    Column, String, Numeric, Date, ForeignKey, Integer, Text, Boolean,
    Enum as SQLEnum, UniqueConstraint,
)
from sqlalchemy.orm import relationship
from travelmgr.db.base import BaseModel
from datetime import date
import enum


class ExpenseCategory(str, enum.Enum):
    """Expense category enumeration."""
    TRANSPORTATION = "Transportation"
    ACCOMMODATION = "Accommodation"
    FOOD = "Food"
    SHOPPING = "Shopping"
    ENTERTAINMENT = "Entertainment"
    OTHER = "Other"


class SplitType(str, enum.Enum):
    """How a split expense is divided among participants."""
    EQUAL = "equal"
    UNEQUAL = "unequal"
    PERCENTAGE = "percentage"


class Expense(BaseModel):
    """
    A single spending event.

    When ``is_split`` is set, ``participants`` lists only the parties other
    than the payer; the payer's own share is implicit.
    """
    __tablename__ = "expenses"

    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)  # Owner
    paid_by_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    amount = Column(Numeric(15, 2), nullable=False)
    category = Column(
        SQLEnum(ExpenseCategory, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=ExpenseCategory.OTHER,
    )
    date = Column(Date, nullable=False, default=date.today, index=True)
    is_split = Column(Boolean, nullable=False, default=False)
    split_type = Column(
        SQLEnum(SplitType, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=SplitType.EQUAL,
    )
    version_id = Column(Integer, nullable=False)

    # Relationships
    owner = relationship("User", foreign_keys=[user_id], back_populates="expenses")
    paid_by = relationship("User", foreign_keys=[paid_by_id])
    participants = relationship(
        "ExpenseParticipant",
        back_populates="expense",
        cascade="all, delete-orphan",
        order_by="ExpenseParticipant.position",
    )

    __mapper_args__ = {"version_id_col": version_id}


class ExpenseParticipant(BaseModel):
    """One non-payer party's obligation within a split expense."""
    __tablename__ = "expense_participants"
    __table_args__ = (
        UniqueConstraint("expense_id", "user_id", name="uq_expense_participant_user"),
    )

    expense_id = Column(Integer, ForeignKey("expenses.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    amount = Column(Numeric(18, 6), nullable=False)  # Full precision, rounded only for display
    percentage = Column(Numeric(7, 4), nullable=True)  # Only for percentage splits
    paid = Column(Boolean, nullable=False, default=False)
    position = Column(Integer, nullable=False, default=0)

    # Relationships
    expense = relationship("Expense", back_populates="participants")
    user = relationship("User")
