"""
Share resolution: how much of an expense a given principal bears.

This is the only place "my share" is derived; list views, detail views and
the dashboard all call ``resolve_my_share``.
"""
from collections.abc import Mapping
from decimal import Decimal
from typing import Any, Optional

from travelmgr.core.identity import participant_principal, as_comparable_id, same_principal
from travelmgr.services.split_service import to_decimal


def _get(obj: Any, name: str, default: Any = None) -> Any:
    if isinstance(obj, Mapping):
        return obj.get(name, default)
    return getattr(obj, name, default)


def _payer(expense: Any) -> Any:
    # Loaded rows expose paid_by_id; serialized documents may carry paid_by
    payer = _get(expense, "paid_by_id")
    if payer is None:
        payer = _get(expense, "paid_by")
    return payer


def resolve_participant_share(expense: Any, principal: Any) -> Optional[Decimal]:
    """Amount on the principal's own participant entry, or None if not listed."""
    wanted = as_comparable_id(principal)
    if wanted is None:
        return None
    for entry in _get(expense, "participants") or []:
        if participant_principal(entry) == wanted:
            return to_decimal(_get(entry, "amount") or 0)
    return None


def resolve_my_share(expense: Any, principal: Any) -> Decimal:
    """
    The principal's share of ``expense``.

    Unsplit expenses are borne in full. For split expenses a participant
    gets their own entry; the payer gets ``amount / (participants + 1)``,
    which is exact only for equal splits. Anyone else gets the full amount.
    """
    amount = to_decimal(_get(expense, "amount") or 0)
    if not _get(expense, "is_split"):
        return amount

    own = resolve_participant_share(expense, principal)
    if own is not None:
        return own

    if same_principal(principal, _payer(expense)):
        participants = _get(expense, "participants") or []
        return amount / Decimal(len(participants) + 1)

    # TODO: third parties with no stake should see zero once the product decides
    return amount
