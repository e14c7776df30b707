"""
Expense management routes.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List

from travelmgr.db.session import get_db
from travelmgr.models.user import User
from travelmgr.models.expense import Expense
from travelmgr.schemas.expense import (
    ExpenseCreate, ExpenseUpdate, ExpenseResponse, ExpenseParticipantResponse, CategoryStatsResponse,
)
from travelmgr.schemas.user import UserSummary
from travelmgr.api.dependencies import get_current_user
from travelmgr.core.utils import round_money
from travelmgr.services import expense_service, query_service
from travelmgr.services.share_service import resolve_my_share
from travelmgr.services.split_service import payer_share

router = APIRouter(prefix="/expenses", tags=["expenses"])


def build_expense_response(expense: Expense, viewer_id: int) -> ExpenseResponse:
    """Expense with payer and participants expanded, from ``viewer_id``'s point of view."""
    if expense.is_split:
        remaining = payer_share(expense.amount, expense.participants)
    else:
        remaining = expense.amount
    return ExpenseResponse(
        id=expense.id,
        user_id=expense.user_id,
        title=expense.title,
        description=expense.description,
        amount=expense.amount,
        category=expense.category,
        date=expense.date,
        is_split=expense.is_split,
        split_type=expense.split_type,
        paid_by=UserSummary.model_validate(expense.paid_by),
        participants=[ExpenseParticipantResponse.model_validate(p) for p in expense.participants],
        my_share=round_money(resolve_my_share(expense, viewer_id)),
        payer_share=round_money(remaining),
        created_at=expense.created_at,
        updated_at=expense.updated_at
    )


@router.get("", response_model=List[ExpenseResponse])
def list_expenses(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """All expenses visible to the current user, newest first."""
    expenses = query_service.list_visible_expenses(current_user.id, db)
    return [build_expense_response(e, current_user.id) for e in expenses]


@router.get("/stats/category", response_model=CategoryStatsResponse)
def get_category_stats(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Spending per category for the current user."""
    return query_service.stats_by_category(current_user.id, db)


@router.get("/{expense_id}", response_model=ExpenseResponse)
def get_expense(
    expense_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get a single expense (owner or split participant)."""
    expense = query_service.get_expense(expense_id, current_user.id, db)
    return build_expense_response(expense, current_user.id)


@router.post("", response_model=ExpenseResponse, status_code=status.HTTP_201_CREATED)
def create_expense(
    expense_data: ExpenseCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Create a new expense, optionally split with other users."""
    expense = expense_service.create_expense(expense_data, current_user.id, db)
    return build_expense_response(expense, current_user.id)


@router.put("/{expense_id}", response_model=ExpenseResponse)
def update_expense(
    expense_id: int,
    expense_data: ExpenseUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Update an expense (owner or payer)."""
    expense = expense_service.update_expense(expense_id, expense_data, current_user.id, db)
    return build_expense_response(expense, current_user.id)


@router.patch("/{expense_id}/participant/{participant_id}/paid", response_model=ExpenseResponse)
def toggle_participant_paid(
    expense_id: int,
    participant_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Mark a participant's share as paid, or unpaid again."""
    expense = expense_service.toggle_participant_paid(expense_id, participant_id, current_user.id, db)
    return build_expense_response(expense, current_user.id)


@router.delete("/{expense_id}")
def delete_expense(
    expense_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Delete an expense (owner only)."""
    expense_service.delete_expense(expense_id, current_user.id, db)
    return {"message": "Expense deleted successfully"}
