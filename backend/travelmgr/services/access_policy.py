"""
Access rules for expenses and itineraries.

The ``can_*`` predicates are pure; the ``ensure_*`` helpers raise
``ForbiddenError`` with the message returned to the client.
"""
from typing import Any

from travelmgr.core.exceptions import ForbiddenError
from travelmgr.core.identity import participant_principal, as_comparable_id, same_principal


def is_listed_participant(record: Any, principal: Any) -> bool:
    """True when the principal has an entry in ``record.participants``."""
    wanted = as_comparable_id(principal)
    if wanted is None:
        return False
    return any(participant_principal(p) == wanted for p in record.participants or [])


# Expenses

def is_expense_owner(expense: Any, principal: Any) -> bool:
    return same_principal(expense.user_id, principal)


def can_read_expense(expense: Any, principal: Any) -> bool:
    return is_expense_owner(expense, principal) or (
        bool(expense.is_split) and is_listed_participant(expense, principal)
    )


def can_update_expense(expense: Any, principal: Any) -> bool:
    return is_expense_owner(expense, principal) or same_principal(expense.paid_by_id, principal)


def can_delete_expense(expense: Any, principal: Any) -> bool:
    return is_expense_owner(expense, principal)


def can_toggle_paid(expense: Any, participant: Any, principal: Any) -> bool:
    return participant_principal(participant) == as_comparable_id(principal) or is_expense_owner(expense, principal)


def ensure_can_update_expense(expense: Any, principal: Any) -> None:
    if not can_update_expense(expense, principal):
        raise ForbiddenError("Access denied")


def ensure_can_toggle_paid(expense: Any, participant: Any, principal: Any) -> None:
    if not can_toggle_paid(expense, participant, principal):
        raise ForbiddenError("Only the participant or the expense owner can change payment status")


# Itineraries

def is_itinerary_owner(itinerary: Any, principal: Any) -> bool:
    return same_principal(itinerary.user_id, principal)


def can_read_itinerary(itinerary: Any, principal: Any) -> bool:
    return is_itinerary_owner(itinerary, principal) or (
        bool(itinerary.is_group_trip) and is_listed_participant(itinerary, principal)
    )


def can_update_itinerary(itinerary: Any, principal: Any, changes_participants: bool = False) -> bool:
    if is_itinerary_owner(itinerary, principal):
        return True
    if changes_participants:
        return False
    return bool(itinerary.is_group_trip) and is_listed_participant(itinerary, principal)


def can_manage_participants(itinerary: Any, principal: Any) -> bool:
    return is_itinerary_owner(itinerary, principal)


def can_delete_itinerary(itinerary: Any, principal: Any) -> bool:
    return is_itinerary_owner(itinerary, principal)


def ensure_can_update_itinerary(itinerary: Any, principal: Any, changes_participants: bool = False) -> None:
    if can_update_itinerary(itinerary, principal):
        if changes_participants and not is_itinerary_owner(itinerary, principal):
            raise ForbiddenError("Only owner can modify participants")
        return
    raise ForbiddenError("Access denied")


def ensure_can_manage_participants(itinerary: Any, principal: Any, action: str = "manage") -> None:
    if not can_manage_participants(itinerary, principal):
        raise ForbiddenError(f"Only owner can {action} participants")
