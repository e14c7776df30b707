"""
Dashboard route: the user's totals across expenses and trips.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from travelmgr.db.session import get_db
from travelmgr.models.user import User
from travelmgr.schemas.dashboard import DashboardSummary
from travelmgr.schemas.itinerary import ItineraryResponse
from travelmgr.api.dependencies import get_current_user
from travelmgr.api.routes.expenses import build_expense_response
from travelmgr.core.utils import format_inr, round_money
from travelmgr.services import query_service

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("", response_model=DashboardSummary)
def get_dashboard(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Summary of the user's share of spending plus recent expenses and upcoming trips."""
    summary = query_service.dashboard_summary(current_user.id, db)
    return DashboardSummary(
        total_expenses=round_money(summary["total_expenses"]),
        total_expenses_display=format_inr(summary["total_expenses"]),
        recent_expenses_total=round_money(summary["recent_expenses_total"]),
        total_trips=summary["total_trips"],
        recent_expenses=[build_expense_response(e, current_user.id) for e in summary["recent_expenses"]],
        upcoming_trips=[ItineraryResponse.model_validate(i) for i in summary["upcoming_trips"]],
    )
