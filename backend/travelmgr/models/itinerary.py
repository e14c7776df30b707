"""
Itinerary model for trip planning, optionally shared with co-travelers.
"""
from sqlalchemy import (
    Column, String, Date, DateTime, Boolean, Text, Enum as SQLEnum,
    ForeignKey, Integer, UniqueConstraint,
)
from sqlalchemy.orm import relationship
from travelmgr.db.base import BaseModel, utcnow
import enum


class ParticipantRole(str, enum.Enum):
    """Role of a member within an itinerary."""
    OWNER = "owner"
    MEMBER = "member"


class Itinerary(BaseModel):
    """A planned trip with its schedule and travelers."""
    __tablename__ = "itineraries"

    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)  # Owner
    trip_name = Column(String(200), nullable=False)
    destination = Column(String(200), nullable=False)
    start_date = Column(Date, nullable=False, index=True)
    end_date = Column(Date, nullable=False)
    description = Column(Text, nullable=True)
    is_group_trip = Column(Boolean, nullable=False, default=False)
    version_id = Column(Integer, nullable=False)

    # Relationships
    owner = relationship("User", back_populates="itineraries")
    participants = relationship(
        "ItineraryParticipant",
        back_populates="itinerary",
        cascade="all, delete-orphan",
        order_by="ItineraryParticipant.position",
    )
    items = relationship(
        "ItineraryItem",
        back_populates="itinerary",
        cascade="all, delete-orphan",
        order_by="ItineraryItem.position",
    )

    __mapper_args__ = {"version_id_col": version_id}


class ItineraryParticipant(BaseModel):
    """Membership of a user in an itinerary."""
    __tablename__ = "itinerary_participants"
    __table_args__ = (
        UniqueConstraint("itinerary_id", "user_id", name="uq_itinerary_participant_user"),
    )

    itinerary_id = Column(Integer, ForeignKey("itineraries.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    role = Column(
        SQLEnum(ParticipantRole, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=ParticipantRole.MEMBER,
    )
    joined_at = Column(DateTime, nullable=False, default=utcnow)
    position = Column(Integer, nullable=False, default=0)

    # Relationships
    itinerary = relationship("Itinerary", back_populates="participants")
    user = relationship("User")


class ItineraryItem(BaseModel):
    """A scheduled activity. Identified within its itinerary by position."""
    __tablename__ = "itinerary_items"

    itinerary_id = Column(Integer, ForeignKey("itineraries.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    location = Column(String(255), nullable=True)
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=True)
    notes = Column(Text, nullable=True)
    position = Column(Integer, nullable=False, default=0)

    itinerary = relationship("Itinerary", back_populates="items")
