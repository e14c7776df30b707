"""
Itinerary service: trip planning and membership management.
"""
from sqlalchemy.orm import Session, selectinload
from datetime import date
from typing import Iterable, List, Optional
import logging

from travelmgr.core.exceptions import ForbiddenError, NotFoundError, ValidationError
from travelmgr.db.base import utcnow
from travelmgr.db.repository import Repository, commit, run_with_optimistic_retry
from travelmgr.models.itinerary import Itinerary, ItineraryItem, ItineraryParticipant, ParticipantRole
from travelmgr.schemas.itinerary import ItineraryCreate, ItineraryItemBase, ItineraryUpdate
from travelmgr.services import access_policy
from travelmgr.services.user_service import ensure_users_exist

logger = logging.getLogger(__name__)


def itinerary_repository(db: Session) -> Repository[Itinerary]:
    """Repository loading itineraries with members and schedule."""
    return Repository(db, Itinerary, load_options=[
        selectinload(Itinerary.participants).joinedload(ItineraryParticipant.user),
        selectinload(Itinerary.items),
    ])


def load_itinerary(itinerary_id: int, db: Session, refresh: bool = False) -> Itinerary:
    """Load an itinerary or raise NotFoundError."""
    itinerary = itinerary_repository(db).find_by_id(itinerary_id, refresh=refresh)
    if not itinerary:
        raise NotFoundError("Itinerary not found")
    return itinerary


def validate_trip_dates(start_date: date, end_date: date) -> None:
    if end_date < start_date:
        raise ValidationError("End date must be on or after the start date")


def _build_items(items: Iterable[ItineraryItemBase]) -> List[ItineraryItem]:
    rows = []
    for position, item in enumerate(items):
        if item.end_time is not None and item.end_time < item.start_time:
            raise ValidationError(f"Item '{item.title}' ends before it starts")
        rows.append(ItineraryItem(
            title=item.title,
            description=item.description,
            location=item.location,
            start_time=item.start_time,
            end_time=item.end_time,
            notes=item.notes,
            position=position,
        ))
    return rows


def _member_ids(owner_id: int, user_ids: Iterable[int]) -> List[int]:
    """Requested members in order, without the owner and without repeats."""
    seen = {owner_id}
    members = []
    for user_id in user_ids:
        if user_id in seen:
            continue
        seen.add(user_id)
        members.append(user_id)
    return members


def _renumber(participants: List[ItineraryParticipant]) -> None:
    for position, row in enumerate(participants):
        row.position = position


def _touch(itinerary: Itinerary) -> None:
    # Forces a versioned UPDATE even when only child rows changed
    itinerary.updated_at = utcnow()


def create_itinerary(data: ItineraryCreate, creator_id: int, db: Session) -> Itinerary:
    """Create an itinerary; the creator is always its owner participant."""
    validate_trip_dates(data.start_date, data.end_date)
    items = _build_items(data.items)

    now = utcnow()
    participants = [ItineraryParticipant(user_id=creator_id, role=ParticipantRole.OWNER, joined_at=now)]
    if data.is_group_trip:
        member_ids = _member_ids(creator_id, data.participants)
        ensure_users_exist(member_ids, db)
        participants.extend(
            ItineraryParticipant(user_id=user_id, role=ParticipantRole.MEMBER, joined_at=now)
            for user_id in member_ids
        )
    _renumber(participants)

    itinerary = Itinerary(
        user_id=creator_id,
        trip_name=data.trip_name,
        destination=data.destination,
        start_date=data.start_date,
        end_date=data.end_date,
        description=data.description,
        is_group_trip=data.is_group_trip,
        participants=participants,
        items=items,
    )
    itinerary_repository(db).save(itinerary)

    logger.info(f"Created itinerary {itinerary.id} for user {creator_id} ({len(participants)} participants)")
    return load_itinerary(itinerary.id, db, refresh=True)


def _rebuild_participants(itinerary: Itinerary, user_ids: Iterable[int]) -> None:
    """
    Replace the member list. The owner entry always comes first and keeps
    its ``joined_at``; continuing members keep theirs too.
    """
    existing = {row.user_id: row for row in itinerary.participants}
    owner_row = next((row for row in itinerary.participants if row.role == ParticipantRole.OWNER), None)
    if owner_row is None:
        owner_row = existing.get(itinerary.user_id) or ItineraryParticipant(
            user_id=itinerary.user_id, joined_at=utcnow()
        )
        owner_row.role = ParticipantRole.OWNER

    rows = [owner_row]
    for user_id in _member_ids(itinerary.user_id, user_ids):
        row = existing.get(user_id)
        if row is None:
            row = ItineraryParticipant(user_id=user_id, role=ParticipantRole.MEMBER, joined_at=utcnow())
        rows.append(row)
    _renumber(rows)
    itinerary.participants = rows


def update_itinerary(itinerary_id: int, data: ItineraryUpdate, requestor_id: int, db: Session) -> Itinerary:
    """
    Merge the supplied fields into an itinerary.

    Group members may edit trip details and the schedule; only the owner may
    send a participant list.
    """
    changes = data.model_dump(exclude_unset=True)
    changes_participants = data.participants is not None

    def attempt() -> int:
        itinerary = load_itinerary(itinerary_id, db, refresh=True)
        access_policy.ensure_can_update_itinerary(itinerary, requestor_id, changes_participants)

        for field in ("trip_name", "destination", "start_date", "end_date", "is_group_trip"):
            if changes.get(field) is not None:
                setattr(itinerary, field, changes[field])
        if "description" in changes:
            itinerary.description = changes["description"]
        validate_trip_dates(itinerary.start_date, itinerary.end_date)

        if data.items is not None:
            itinerary.items = _build_items(data.items)

        if changes_participants:
            member_ids = _member_ids(itinerary.user_id, data.participants)
            ensure_users_exist(member_ids, db)
            _rebuild_participants(itinerary, member_ids)

        _touch(itinerary)
        commit(db)
        return itinerary.id

    run_with_optimistic_retry(db, attempt)
    logger.info(f"Updated itinerary {itinerary_id} by user {requestor_id}")
    return load_itinerary(itinerary_id, db, refresh=True)


def add_participant(itinerary_id: int, user_id: int, requestor_id: int, db: Session) -> Itinerary:
    """Add a member to an itinerary, turning it into a group trip."""
    def attempt() -> int:
        itinerary = load_itinerary(itinerary_id, db, refresh=True)
        access_policy.ensure_can_manage_participants(itinerary, requestor_id, action="add")

        if access_policy.is_listed_participant(itinerary, user_id):
            raise ValidationError("User is already a participant")
        ensure_users_exist([user_id], db)

        itinerary.participants.append(ItineraryParticipant(
            user_id=user_id,
            role=ParticipantRole.MEMBER,
            joined_at=utcnow(),
            position=len(itinerary.participants),
        ))
        itinerary.is_group_trip = True
        _touch(itinerary)
        commit(db)
        return itinerary.id

    run_with_optimistic_retry(db, attempt)
    logger.info(f"Added user {user_id} to itinerary {itinerary_id}")
    return load_itinerary(itinerary_id, db, refresh=True)


def remove_participant(itinerary_id: int, participant_id: int, requestor_id: int, db: Session) -> Itinerary:
    """Remove a member entry by its id. The owner entry cannot be removed."""
    def attempt() -> int:
        itinerary = load_itinerary(itinerary_id, db, refresh=True)
        access_policy.ensure_can_manage_participants(itinerary, requestor_id, action="remove")

        entry: Optional[ItineraryParticipant] = next(
            (row for row in itinerary.participants if row.id == participant_id), None
        )
        if entry is None:
            raise NotFoundError("Participant not found")
        if entry.role == ParticipantRole.OWNER:
            raise ValidationError("Cannot remove owner")

        itinerary.participants.remove(entry)
        _renumber(itinerary.participants)
        _touch(itinerary)
        commit(db)
        return itinerary.id

    run_with_optimistic_retry(db, attempt)
    logger.info(f"Removed participant entry {participant_id} from itinerary {itinerary_id}")
    return load_itinerary(itinerary_id, db, refresh=True)


def delete_itinerary(itinerary_id: int, requestor_id: int, db: Session) -> None:
    """Delete an itinerary. Only its owner may do so."""
    def attempt() -> None:
        itinerary = load_itinerary(itinerary_id, db, refresh=True)
        if not access_policy.can_delete_itinerary(itinerary, requestor_id):
            raise ForbiddenError("Only owner can delete this itinerary")
        itinerary_repository(db).delete_one(itinerary)

    run_with_optimistic_retry(db, attempt)
    logger.info(f"Deleted itinerary {itinerary_id} by user {requestor_id}")


def is_upcoming(itinerary: Itinerary, today: Optional[date] = None) -> bool:
    """True when the trip has not started yet (or starts today)."""
    today = today or date.today()
    return itinerary.start_date >= today
