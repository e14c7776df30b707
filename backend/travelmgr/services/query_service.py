"""
Read side: what a user can see across expenses and itineraries.
"""
from sqlalchemy.orm import Session
from datetime import date, timedelta
from decimal import Decimal
from typing import Dict, List, Optional

from travelmgr.core.exceptions import ForbiddenError
from travelmgr.models.expense import Expense, ExpenseCategory, ExpenseParticipant
from travelmgr.models.itinerary import Itinerary, ItineraryParticipant
from travelmgr.services import access_policy
from travelmgr.services.expense_service import expense_repository, load_expense
from travelmgr.services.itinerary_service import is_upcoming, itinerary_repository, load_itinerary
from travelmgr.services.share_service import resolve_my_share, resolve_participant_share
from travelmgr.services.split_service import to_decimal

RECENT_DAYS = 7
DASHBOARD_LIST_SIZE = 5


def _merge_unique(*groups: List) -> List:
    """Concatenate record lists keeping the first occurrence of each id."""
    seen = set()
    merged = []
    for group in groups:
        for record in group:
            if record.id in seen:
                continue
            seen.add(record.id)
            merged.append(record)
    return merged


def list_visible_expenses(user_id: int, db: Session) -> List[Expense]:
    """Expenses the user owns plus split expenses listing them, newest first."""
    repo = expense_repository(db)
    owned = repo.find_many(Expense.user_id == user_id)
    shared = repo.find_many(
        Expense.is_split.is_(True),
        Expense.participants.any(ExpenseParticipant.user_id == user_id),
    )
    expenses = _merge_unique(owned, shared)
    expenses.sort(key=lambda e: (e.date, e.id), reverse=True)
    return expenses


def list_visible_itineraries(user_id: int, db: Session) -> List[Itinerary]:
    """Itineraries the user owns plus group trips they belong to, latest start first."""
    repo = itinerary_repository(db)
    owned = repo.find_many(Itinerary.user_id == user_id)
    shared = repo.find_many(
        Itinerary.is_group_trip.is_(True),
        Itinerary.participants.any(ItineraryParticipant.user_id == user_id),
    )
    itineraries = _merge_unique(owned, shared)
    itineraries.sort(key=lambda i: (i.start_date, i.id), reverse=True)
    return itineraries


def get_expense(expense_id: int, user_id: int, db: Session) -> Expense:
    expense = load_expense(expense_id, db)
    if not access_policy.can_read_expense(expense, user_id):
        raise ForbiddenError("Access denied")
    return expense


def get_itinerary(itinerary_id: int, user_id: int, db: Session) -> Itinerary:
    itinerary = load_itinerary(itinerary_id, db)
    if not access_policy.can_read_itinerary(itinerary, user_id):
        raise ForbiddenError("Access denied")
    return itinerary


def stats_by_category(user_id: int, db: Session) -> Dict[str, Decimal]:
    """
    Spending per category: the full amount of every owned expense, plus the
    user's own participant entry on split expenses they are listed on.
    """
    repo = expense_repository(db)
    stats: Dict[str, Decimal] = {}

    def add(expense: Expense, amount: Decimal) -> None:
        key = ExpenseCategory(expense.category).value
        stats[key] = stats.get(key, Decimal(0)) + amount

    for expense in repo.find_many(Expense.user_id == user_id):
        add(expense, to_decimal(expense.amount))

    shared = repo.find_many(
        Expense.is_split.is_(True),
        Expense.participants.any(ExpenseParticipant.user_id == user_id),
    )
    for expense in shared:
        share = resolve_participant_share(expense, user_id)
        if share is not None:
            add(expense, share)
    return stats


def dashboard_summary(user_id: int, db: Session, today: Optional[date] = None) -> dict:
    """Totals of the user's shares and short lists for the landing page."""
    today = today or date.today()
    expenses = list_visible_expenses(user_id, db)
    itineraries = list_visible_itineraries(user_id, db)

    week_ago = today - timedelta(days=RECENT_DAYS)
    total = Decimal(0)
    recent_total = Decimal(0)
    for expense in expenses:
        share = resolve_my_share(expense, user_id)
        total += share
        if expense.date >= week_ago:
            recent_total += share

    upcoming = sorted(
        (i for i in itineraries if is_upcoming(i, today)),
        key=lambda i: (i.start_date, i.id),
    )
    return {
        "total_expenses": total,
        "recent_expenses_total": recent_total,
        "total_trips": len(itineraries),
        "recent_expenses": expenses[:DASHBOARD_LIST_SIZE],
        "upcoming_trips": upcoming[:DASHBOARD_LIST_SIZE],
    }

