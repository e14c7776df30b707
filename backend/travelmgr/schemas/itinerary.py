"""
Pydantic schemas for Itinerary entity.
"""
from pydantic import AliasChoices, BaseModel, Field, field_validator
from typing import List, Optional
from datetime import date, datetime
from travelmgr.db.base import as_naive_utc
from travelmgr.models.itinerary import ParticipantRole
from travelmgr.schemas.user import UserSummary


class ItineraryItemBase(BaseModel):
    """A scheduled activity within a trip."""
    title: str = Field(min_length=1, max_length=200)
    description: Optional[str] = None
    location: Optional[str] = None
    start_time: datetime
    end_time: Optional[datetime] = None
    notes: Optional[str] = None

    @field_validator("start_time", "end_time")
    @classmethod
    def normalize_to_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        # Stored naive, so offset-aware input is converted to UTC
        return as_naive_utc(v)


class ItineraryItemResponse(ItineraryItemBase):
    position: int

    class Config:
        from_attributes = True


class ItineraryCreate(BaseModel):
    """Schema for itinerary creation."""
    trip_name: str = Field(min_length=1, max_length=200)
    destination: str = Field(min_length=1, max_length=200)
    start_date: date
    end_date: date
    description: Optional[str] = None
    is_group_trip: bool = False
    items: List[ItineraryItemBase] = []
    participants: List[int] = []  # User ids, only used for group trips


class ItineraryUpdate(BaseModel):
    """Schema for itinerary update. Omitted fields keep their stored value."""
    trip_name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    destination: Optional[str] = Field(default=None, min_length=1, max_length=200)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    description: Optional[str] = None
    is_group_trip: Optional[bool] = None
    items: Optional[List[ItineraryItemBase]] = None  # Replaces the whole schedule
    participants: Optional[List[int]] = None  # Owner only


class ParticipantAdd(BaseModel):
    """Schema for adding a participant to an itinerary."""
    user_id: int = Field(validation_alias=AliasChoices("user_id", "userId"))


class ItineraryParticipantResponse(BaseModel):
    """Schema for itinerary participant response."""
    id: int  # Entry id, used to remove the participant
    user: UserSummary
    role: ParticipantRole
    joined_at: datetime

    class Config:
        from_attributes = True


class ItineraryResponse(BaseModel):
    """Schema for itinerary response."""
    id: int
    user_id: int  # Owner
    trip_name: str
    destination: str
    start_date: date
    end_date: date
    description: Optional[str] = None
    is_group_trip: bool
    participants: List[ItineraryParticipantResponse] = []
    items: List[ItineraryItemResponse] = []
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
