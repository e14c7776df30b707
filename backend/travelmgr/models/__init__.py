"""Models package - Import all models for SQLAlchemy registration."""
from travelmgr.models.user import User
from travelmgr.models.expense import Expense, ExpenseParticipant, ExpenseCategory, SplitType
from travelmgr.models.itinerary import Itinerary, ItineraryParticipant, ItineraryItem, ParticipantRole

__all__ = [
    "User",
    "Expense",
    "ExpenseParticipant",
    "ExpenseCategory",
    "SplitType",
    "Itinerary",
    "ItineraryParticipant",
    "ItineraryItem",
    "ParticipantRole",
]
