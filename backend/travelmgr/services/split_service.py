"""
Split calculation: decompose a shared expense into per-participant obligations.

All functions here are pure. Amounts are Decimals at full precision; rounding
to cents happens only when responses are rendered.
"""
from collections.abc import Mapping
from dataclasses import dataclass, replace
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Iterable, List, Optional, Sequence, Union

from travelmgr.core.exceptions import ValidationError
from travelmgr.core.identity import participant_principal, to_principal_id
from travelmgr.models.expense import SplitType

HUNDRED = Decimal(100)
# Scale of the stored percentage column
PERCENT_STEP = Decimal("0.0001")


@dataclass(frozen=True)
class ParticipantShare:
    """Computed obligation of one non-payer participant."""
    user_id: int
    amount: Decimal
    paid: bool = False
    percentage: Optional[Decimal] = None


def to_decimal(value: Any, field: str = "amount") -> Decimal:
    """Convert a numeric input to Decimal, rejecting NaN/inf and garbage."""
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            # str() keeps floats like 33.3 from expanding to binary noise
            result = Decimal(str(value))
        except (InvalidOperation, TypeError, ValueError):
            raise ValidationError(f"Invalid {field}: {value!r}")
    if not result.is_finite():
        raise ValidationError(f"Invalid {field}: {value!r}")
    return result


def _field(raw: Any, *names: str) -> Any:
    for name in names:
        if isinstance(raw, Mapping):
            value = raw.get(name)
        else:
            value = getattr(raw, name, None)
        if value is not None:
            return value
    return None


def _principal(raw: Any) -> int:
    user_id = to_principal_id(participant_principal(raw))
    if user_id is None:
        raise ValidationError(f"Participant reference is missing or invalid: {raw!r}")
    return user_id


def compute_participant_shares(
    amount: Any,
    split_type: Union[SplitType, str],
    raw_participants: Sequence[Any],
) -> List[ParticipantShare]:
    """
    Compute what each listed participant owes.

    ``raw_participants`` holds the parties other than the payer. Items are
    bare user ids for equal splits, or objects/mappings carrying ``user_id``
    plus ``amount`` (unequal) or ``percentage`` (percentage).

    Raises:
        ValidationError: negative totals, missing or negative per-participant
            values, duplicate participants, or shares exceeding the total.
    """
    total = to_decimal(amount)
    if total < 0:
        raise ValidationError("Amount must not be negative")

    try:
        split_type = SplitType(split_type)
    except ValueError:
        raise ValidationError(f"Unknown split type: {split_type!r}")

    participants = list(raw_participants or [])
    principals = [_principal(raw) for raw in participants]
    if len(set(principals)) != len(principals):
        raise ValidationError("A participant may only be listed once")

    if not participants:
        return []

    if split_type is SplitType.EQUAL:
        # The payer is one of the heads
        per_person = total / Decimal(len(participants) + 1)
        return [ParticipantShare(user_id=uid, amount=per_person) for uid in principals]

    if split_type is SplitType.UNEQUAL:
        shares = []
        for uid, raw in zip(principals, participants):
            value = _field(raw, "amount")
            if value is None:
                raise ValidationError(f"Participant {uid} is missing an amount for an unequal split")
            share = to_decimal(value)
            if share < 0:
                raise ValidationError(f"Participant {uid} amount must not be negative")
            shares.append(ParticipantShare(user_id=uid, amount=share))
        validate_shares_within_total(total, shares)
        return shares

    shares = []
    percentage_total = Decimal(0)
    for uid, raw in zip(principals, participants):
        value = _field(raw, "percentage")
        if value is None:
            raise ValidationError(f"Participant {uid} is missing a percentage for a percentage split")
        percentage = to_decimal(value, "percentage")
        if percentage < 0 or percentage > HUNDRED:
            raise ValidationError(f"Participant {uid} percentage must be between 0 and 100")
        percentage = percentage.quantize(PERCENT_STEP, rounding=ROUND_HALF_UP)
        percentage_total += percentage
        shares.append(ParticipantShare(
            user_id=uid,
            amount=total * percentage / HUNDRED,
            percentage=percentage,
        ))
    if percentage_total > HUNDRED:
        raise ValidationError("Percentages must not add up to more than 100")
    return shares


def validate_shares_within_total(total: Decimal, shares: Iterable[ParticipantShare]) -> None:
    """The participants together may never owe more than the expense itself."""
    owed = sum((share.amount for share in shares), Decimal(0))
    if owed > total:
        raise ValidationError(
            f"Participant amounts ({owed}) exceed the expense amount ({total})",
            details={"owed": str(owed), "amount": str(total)},
        )


def carry_paid_flags(shares: Iterable[ParticipantShare], existing: Iterable[Any]) -> List[ParticipantShare]:
    """Keep the ``paid`` flag of participants who were already on the split."""
    paid_by_principal = {
        participant_principal(entry): bool(_field(entry, "paid"))
        for entry in existing
    }
    return [
        replace(share, paid=paid_by_principal.get(str(share.user_id), False))
        for share in shares
    ]


def payer_share(amount: Any, participants: Sequence[Any]) -> Decimal:
    """What remains for the payer after the listed participants' amounts."""
    owed = sum((to_decimal(_field(p, "amount") or 0) for p in participants), Decimal(0))
    return to_decimal(amount) - owed
