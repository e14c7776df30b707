"""
Itinerary management routes.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List

from travelmgr.db.session import get_db
from travelmgr.models.user import User
from travelmgr.schemas.itinerary import (
    ItineraryCreate, ItineraryUpdate, ItineraryResponse, ParticipantAdd,
)
from travelmgr.api.dependencies import get_current_user
from travelmgr.services import itinerary_service, query_service

router = APIRouter(prefix="/itineraries", tags=["itineraries"])


@router.get("", response_model=List[ItineraryResponse])
def list_itineraries(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """All itineraries visible to the current user, latest start first."""
    return query_service.list_visible_itineraries(current_user.id, db)


@router.get("/{itinerary_id}", response_model=ItineraryResponse)
def get_itinerary(
    itinerary_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get itinerary details (owner or group member)."""
    return query_service.get_itinerary(itinerary_id, current_user.id, db)


@router.post("", response_model=ItineraryResponse, status_code=status.HTTP_201_CREATED)
def create_itinerary(
    itinerary_data: ItineraryCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Create a new itinerary owned by the current user."""
    return itinerary_service.create_itinerary(itinerary_data, current_user.id, db)


@router.put("/{itinerary_id}", response_model=ItineraryResponse)
def update_itinerary(
    itinerary_id: int,
    itinerary_data: ItineraryUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Update trip details, schedule, or (owner only) the member list."""
    return itinerary_service.update_itinerary(itinerary_id, itinerary_data, current_user.id, db)


@router.post("/{itinerary_id}/participants", response_model=ItineraryResponse)
def add_participant(
    itinerary_id: int,
    invite: ParticipantAdd,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Add a participant to the itinerary (owner only)."""
    return itinerary_service.add_participant(itinerary_id, invite.user_id, current_user.id, db)


@router.delete("/{itinerary_id}/participants/{participant_id}", response_model=ItineraryResponse)
def remove_participant(
    itinerary_id: int,
    participant_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Remove a participant entry from the itinerary (owner only)."""
    return itinerary_service.remove_participant(itinerary_id, participant_id, current_user.id, db)


@router.delete("/{itinerary_id}")
def delete_itinerary(
    itinerary_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Delete an itinerary (owner only)."""
    itinerary_service.delete_itinerary(itinerary_id, current_user.id, db)
    return {"message": "Itinerary deleted successfully"}
