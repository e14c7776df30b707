"""
Pydantic schemas for the dashboard summary.
"""
from pydantic import BaseModel
from typing import List
from decimal import Decimal
from travelmgr.schemas.expense import ExpenseResponse
from travelmgr.schemas.itinerary import ItineraryResponse


class DashboardSummary(BaseModel):
    """Totals and short lists shown on the landing page."""
    total_expenses: Decimal  # Sum of the user's shares across visible expenses
    total_expenses_display: str
    recent_expenses_total: Decimal  # Same, for expenses dated within the last 7 days
    total_trips: int
    recent_expenses: List[ExpenseResponse] = []
    upcoming_trips: List[ItineraryResponse] = []
