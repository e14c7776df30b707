"""
Tests for split calculation.
"""
from decimal import Decimal
from types import SimpleNamespace

import pytest

from travelmgr.core.exceptions import ValidationError
from travelmgr.models.expense import SplitType
from travelmgr.services.split_service import (
    ParticipantShare, carry_paid_flags, compute_participant_shares, payer_share,
)


def test_equal_split_includes_payer_in_head_count():
    shares = compute_participant_shares(Decimal("300"), SplitType.EQUAL, [2, 3])
    assert [s.user_id for s in shares] == [2, 3]
    assert all(s.amount == Decimal("100") for s in shares)
    assert all(s.paid is False for s in shares)


def test_equal_split_keeps_full_precision():
    shares = compute_participant_shares(Decimal("100"), "equal", [2, 3])
    assert shares[0].amount == Decimal(100) / Decimal(3)
    assert abs(shares[0].amount * 3 - Decimal(100)) < Decimal("1e-20")


def test_equal_split_accepts_populated_references():
    shares = compute_participant_shares(90, SplitType.EQUAL, [{"user": {"id": 7, "name": "Bob"}}, {"userId": "8"}])
    assert [s.user_id for s in shares] == [7, 8]
    assert shares[0].amount == Decimal(30)


def test_no_participants_yields_empty_split():
    assert compute_participant_shares(Decimal("50"), SplitType.EQUAL, []) == []


def test_unequal_split_passes_amounts_through():
    shares = compute_participant_shares(
        Decimal("100"),
        SplitType.UNEQUAL,
        [{"user_id": 2, "amount": 25}, SimpleNamespace(user_id=3, amount=Decimal("40.5"))],
    )
    assert [(s.user_id, s.amount) for s in shares] == [(2, Decimal("25")), (3, Decimal("40.5"))]


def test_unequal_split_rejects_total_above_amount():
    with pytest.raises(ValidationError, match="exceed"):
        compute_participant_shares(
            Decimal("100"), SplitType.UNEQUAL,
            [{"user_id": 2, "amount": 60}, {"user_id": 3, "amount": 41}],
        )


def test_unequal_split_requires_amount():
    with pytest.raises(ValidationError, match="missing an amount"):
        compute_participant_shares(Decimal("100"), SplitType.UNEQUAL, [2])


def test_unequal_split_rejects_negative_amount():
    with pytest.raises(ValidationError):
        compute_participant_shares(Decimal("100"), SplitType.UNEQUAL, [{"user_id": 2, "amount": -1}])


def test_percentage_split():
    shares = compute_participant_shares(
        Decimal("200"), SplitType.PERCENTAGE,
        [{"user_id": 2, "percentage": 25}, {"user_id": 3, "percentage": "12.5"}],
    )
    assert shares[0].amount == Decimal("50")
    assert shares[0].percentage == Decimal("25")
    assert shares[1].amount == Decimal("25")


def test_percentage_split_rejects_more_than_hundred_percent():
    with pytest.raises(ValidationError, match="100"):
        compute_participant_shares(
            Decimal("200"), SplitType.PERCENTAGE,
            [{"user_id": 2, "percentage": 60}, {"user_id": 3, "percentage": 50}],
        )


def test_percentage_split_requires_percentage():
    with pytest.raises(ValidationError, match="percentage"):
        compute_participant_shares(Decimal("200"), SplitType.PERCENTAGE, [{"user_id": 2, "amount": 10}])


def test_duplicate_participants_rejected():
    with pytest.raises(ValidationError, match="once"):
        compute_participant_shares(Decimal("10"), SplitType.EQUAL, [2, "2"])


def test_negative_total_rejected():
    with pytest.raises(ValidationError):
        compute_participant_shares(Decimal("-1"), SplitType.EQUAL, [2])


def test_unknown_split_type_rejected():
    with pytest.raises(ValidationError, match="split type"):
        compute_participant_shares(Decimal("10"), "weighted", [2])


def test_carry_paid_flags_matches_on_principal():
    shares = [ParticipantShare(user_id=2, amount=Decimal(10)), ParticipantShare(user_id=4, amount=Decimal(10))]
    existing = [
        SimpleNamespace(id=99, user_id=2, amount=Decimal(5), paid=True),
        SimpleNamespace(id=100, user_id=3, amount=Decimal(5), paid=True),
    ]
    carried = carry_paid_flags(shares, existing)
    assert [(s.user_id, s.paid) for s in carried] == [(2, True), (4, False)]


def test_payer_share_is_remainder():
    participants = [{"amount": Decimal("30")}, {"amount": Decimal("20")}]
    assert payer_share(Decimal("100"), participants) == Decimal("50")


def test_percentages_rounded_to_stored_scale():
    shares = compute_participant_shares(
        Decimal("300"), SplitType.PERCENTAGE,
        [{"user_id": 2, "percentage": "33.33333"}, {"user_id": 3, "percentage": "33.33333"}],
    )
    assert [s.percentage for s in shares] == [Decimal("33.3333"), Decimal("33.3333")]
    assert shares[0].amount == Decimal("300") * Decimal("33.3333") / 100


def test_percentages_over_hundred_after_rounding_rejected():
    with pytest.raises(ValidationError, match="100"):
        compute_participant_shares(
            Decimal("100"), SplitType.PERCENTAGE,
            [{"user_id": 2, "percentage": "50.00005"}, {"user_id": 3, "percentage": "49.99995"}],
        )
