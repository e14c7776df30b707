"""
Expense service for expense-related business logic.
"""
from sqlalchemy import update, not_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload, selectinload
from datetime import date
from typing import Any, List, Optional, Sequence
import logging

from travelmgr.core.exceptions import NotFoundError, StoreError, ValidationError
from travelmgr.core.identity import as_comparable_id, participant_principal
from travelmgr.db.base import utcnow
from travelmgr.db.repository import Repository, commit, run_with_optimistic_retry
from travelmgr.models.expense import Expense, ExpenseParticipant, SplitType
from travelmgr.schemas.expense import ExpenseCreate, ExpenseUpdate
from travelmgr.services import access_policy
from travelmgr.services.split_service import (
    ParticipantShare, carry_paid_flags, compute_participant_shares, to_decimal,
)
from travelmgr.services.user_service import ensure_users_exist

logger = logging.getLogger(__name__)


def expense_repository(db: Session) -> Repository[Expense]:
    """Repository loading expenses with payer and participant users expanded."""
    return Repository(db, Expense, load_options=[
        joinedload(Expense.paid_by),
        selectinload(Expense.participants).joinedload(ExpenseParticipant.user),
    ])


def load_expense(expense_id: int, db: Session, refresh: bool = False) -> Expense:
    """Load an expense or raise NotFoundError."""
    expense = expense_repository(db).find_by_id(expense_id, refresh=refresh)
    if not expense:
        raise NotFoundError("Expense not found")
    return expense


def _ensure_payer_not_listed(raw_participants: Sequence[Any], paid_by_id: int) -> None:
    payer = as_comparable_id(paid_by_id)
    if any(participant_principal(raw) == payer for raw in raw_participants):
        raise ValidationError("The payer cannot also be listed as a participant")


def _apply_shares(expense: Expense, shares: List[ParticipantShare]) -> None:
    """Replace the participant rows, reusing the row of every continuing participant."""
    existing = {row.user_id: row for row in expense.participants}
    rows = []
    for position, share in enumerate(shares):
        row = existing.get(share.user_id) or ExpenseParticipant(user_id=share.user_id)
        row.amount = share.amount
        row.percentage = share.percentage
        row.paid = share.paid
        row.position = position
        rows.append(row)
    expense.participants = rows


def create_expense(data: ExpenseCreate, creator_id: int, db: Session) -> Expense:
    """Create an expense owned by ``creator_id`` and compute its split."""
    paid_by_id = data.paid_by or creator_id

    shares: List[ParticipantShare] = []
    if data.is_split and data.participants:
        _ensure_payer_not_listed(data.participants, paid_by_id)
        shares = compute_participant_shares(data.amount, data.split_type, data.participants)

    ensure_users_exist({paid_by_id, *(share.user_id for share in shares)}, db)

    expense = Expense(
        user_id=creator_id,
        paid_by_id=paid_by_id,
        title=data.title,
        description=data.description,
        amount=data.amount,
        category=data.category,
        date=data.date or date.today(),
        is_split=data.is_split,
        split_type=data.split_type,
    )
    _apply_shares(expense, shares)
    expense_repository(db).save(expense)

    logger.info(f"Created expense {expense.id} for user {creator_id} ({len(shares)} participants)")
    return load_expense(expense.id, db, refresh=True)


def _raw_participants_for_update(expense: Expense, changes: dict, amount_changed: bool,
                                 split_type_changed: bool) -> Optional[Sequence[Any]]:
    """Participants to recompute from, or None when the stored split stands."""
    if changes.get("participants") is not None:
        return changes["participants"]
    if (amount_changed or split_type_changed) and expense.participants:
        # Re-derive from the stored entries (ids, amounts or percentages)
        return list(expense.participants)
    return None


def update_expense(expense_id: int, data: ExpenseUpdate, requestor_id: int, db: Session) -> Expense:
    """
    Merge the supplied fields into an expense.

    Participants are recomputed when the participant list, split type or
    amount changes on a split expense; continuing participants keep their
    ``paid`` flag.
    """
    changes = data.model_dump(exclude_unset=True)
    # Keep the parsed participant objects rather than their dumped dicts
    if data.participants is not None:
        changes["participants"] = data.participants

    def attempt() -> int:
        expense = load_expense(expense_id, db, refresh=True)
        access_policy.ensure_can_update_expense(expense, requestor_id)

        for field in ("title", "description", "category", "date"):
            if field in changes and (changes[field] is not None or field == "description"):
                setattr(expense, field, changes[field])

        amount = expense.amount
        amount_changed = data.amount is not None and to_decimal(data.amount) != to_decimal(expense.amount)
        if data.amount is not None:
            amount = data.amount
            expense.amount = data.amount

        split_type = data.split_type or SplitType(expense.split_type)
        split_type_changed = split_type != SplitType(expense.split_type)
        expense.split_type = split_type

        if data.is_split is not None:
            expense.is_split = data.is_split
        if data.paid_by is not None:
            expense.paid_by_id = data.paid_by

        if expense.is_split:
            raw = _raw_participants_for_update(expense, changes, amount_changed, split_type_changed)
            if raw is not None:
                _ensure_payer_not_listed(raw, expense.paid_by_id)
                shares = compute_participant_shares(amount, split_type, raw)
                shares = carry_paid_flags(shares, expense.participants)
                ensure_users_exist({expense.paid_by_id, *(s.user_id for s in shares)}, db)
                _apply_shares(expense, shares)
            else:
                _ensure_payer_not_listed(expense.participants, expense.paid_by_id)
                ensure_users_exist({expense.paid_by_id}, db)
        elif data.paid_by is not None:
            ensure_users_exist({expense.paid_by_id}, db)

        # Always emit a versioned UPDATE on the parent row
        expense.updated_at = utcnow()
        commit(db)
        return expense.id

    run_with_optimistic_retry(db, attempt)
    logger.info(f"Updated expense {expense_id} by user {requestor_id}")
    return load_expense(expense_id, db, refresh=True)


def toggle_participant_paid(expense_id: int, participant_id: int, requestor_id: int, db: Session) -> Expense:
    """Flip the ``paid`` flag of one participant entry."""
    expense = load_expense(expense_id, db)
    participant = next((p for p in expense.participants if p.id == participant_id), None)
    if not participant:
        raise NotFoundError("Participant not found")
    access_policy.ensure_can_toggle_paid(expense, participant, requestor_id)

    participants_table = ExpenseParticipant.__table__
    expenses_table = Expense.__table__
    try:
        # Single-statement flip so concurrent toggles never lose an update
        db.execute(
            update(participants_table)
            .where(participants_table.c.id == participant_id,
                   participants_table.c.expense_id == expense_id)
            .values(paid=not_(participants_table.c.paid))
        )
        # Invalidate in-flight read-modify-write updates of the same expense
        db.execute(
            update(expenses_table)
            .where(expenses_table.c.id == expense_id)
            .values(version_id=expenses_table.c.version_id + 1, updated_at=utcnow())
        )
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to toggle participant {participant_id} on expense {expense_id}: {e}", exc_info=True)
        raise StoreError("A storage error occurred")
    commit(db)

    logger.info(f"Toggled paid flag of participant {participant_id} on expense {expense_id}")
    return load_expense(expense_id, db, refresh=True)


def delete_expense(expense_id: int, requestor_id: int, db: Session) -> None:
    """
    Delete an expense. Deletion is scoped to the owner: for anyone else the
    expense does not exist.
    """
    def attempt() -> None:
        expense = load_expense(expense_id, db, refresh=True)
        if not access_policy.can_delete_expense(expense, requestor_id):
            raise NotFoundError("Expense not found")
        expense_repository(db).delete_one(expense)

    run_with_optimistic_retry(db, attempt)
    logger.info(f"Deleted expense {expense_id} by user {requestor_id}")
