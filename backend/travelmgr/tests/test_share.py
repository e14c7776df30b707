"""
Tests for "my share" resolution.
"""
from decimal import Decimal
from types import SimpleNamespace

from travelmgr.services.share_service import resolve_my_share, resolve_participant_share


def make_expense(amount, is_split=True, paid_by_id=1, participants=()):
    return SimpleNamespace(
        amount=Decimal(amount),
        is_split=is_split,
        paid_by_id=paid_by_id,
        user_id=1,
        participants=list(participants),
    )


def entry(user_id, amount, paid=False):
    return SimpleNamespace(id=user_id * 100, user_id=user_id, amount=Decimal(amount), paid=paid)


def test_unsplit_expense_is_borne_in_full():
    expense = make_expense("120", is_split=False, participants=[entry(2, "60")])
    assert resolve_my_share(expense, 1) == Decimal("120")
    assert resolve_my_share(expense, 2) == Decimal("120")


def test_participant_gets_own_entry():
    expense = make_expense("300", participants=[entry(2, "100"), entry(3, "100")])
    assert resolve_my_share(expense, 2) == Decimal("100")
    assert resolve_my_share(expense, "3") == Decimal("100")


def test_payer_gets_equal_share_estimate():
    expense = make_expense("300", participants=[entry(2, "100"), entry(3, "100")])
    assert resolve_my_share(expense, 1) == Decimal("100")


def test_payer_estimate_matches_participant_share_for_equal_split():
    amount = Decimal("100")
    per_person = amount / Decimal(3)
    expense = make_expense(amount, participants=[entry(2, per_person), entry(3, per_person)])
    assert resolve_my_share(expense, 1) == resolve_my_share(expense, 2)


def test_payer_estimate_ignores_unequal_amounts():
    # Known limitation: the payer's share is estimated as an equal split
    expense = make_expense("100", participants=[entry(2, "70")])
    assert resolve_my_share(expense, 1) == Decimal("50")


def test_third_party_falls_back_to_full_amount():
    expense = make_expense("300", participants=[entry(2, "100")])
    assert resolve_my_share(expense, 42) == Decimal("300")


def test_populated_references_are_matched():
    expense = {
        "amount": 90,
        "is_split": True,
        "paid_by": {"_id": "1", "name": "Alice"},
        "participants": [{"user": {"id": 2, "name": "Bob"}, "amount": 30}],
    }
    assert resolve_my_share(expense, SimpleNamespace(id=2)) == Decimal("30")
    assert resolve_my_share(expense, 1) == Decimal("45")


def test_resolve_participant_share_has_no_payer_fallback():
    expense = make_expense("300", participants=[entry(2, "100")])
    assert resolve_participant_share(expense, 2) == Decimal("100")
    assert resolve_participant_share(expense, 1) is None
