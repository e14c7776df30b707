"""
Principal identity normalization.

Ids reach the service layer in several shapes: a raw integer from a path
parameter, a string from a JSON body, a loaded ``User`` row, or a mapping
such as ``{"id": 3, "name": ...}``. Every identity comparison in the code base
goes through ``as_comparable_id`` so that all of those compare equal.
"""
from collections.abc import Mapping
from typing import Any, Optional

_MAPPING_ID_KEYS = ("id", "_id")
_PRINCIPAL_KEYS = ("user_id", "userId", "user")


def as_comparable_id(value: Any) -> Optional[str]:
    """Return the canonical string form of a principal reference, or None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, str)):
        text = str(value).strip()
        return text or None
    if isinstance(value, Mapping):
        for key in _MAPPING_ID_KEYS:
            if value.get(key) is not None:
                return as_comparable_id(value[key])
        return None
    ref_id = getattr(value, "id", None)
    if ref_id is not None:
        return as_comparable_id(ref_id)
    # UUIDs, ObjectId-like values
    return as_comparable_id(str(value))


def same_principal(left: Any, right: Any) -> bool:
    """True when both references resolve to the same principal."""
    left_id = as_comparable_id(left)
    return left_id is not None and left_id == as_comparable_id(right)


def participant_principal(entry: Any) -> Optional[str]:
    """
    Principal of a participant entry (expense split row, itinerary member row,
    or raw request item). The entry's own ``id`` is never used here.
    """
    if entry is None or isinstance(entry, bool):
        return None
    if isinstance(entry, (int, str)):
        return as_comparable_id(entry)
    for key in _PRINCIPAL_KEYS:
        if isinstance(entry, Mapping):
            candidate = entry.get(key)
        else:
            candidate = getattr(entry, key, None)
        if candidate is not None:
            return as_comparable_id(candidate)
    return None


def to_principal_id(value: Any) -> Optional[int]:
    """Integer primary key for a principal reference, used for storage."""
    comparable = as_comparable_id(value)
    if comparable is None:
        return None
    try:
        return int(comparable)
    except ValueError:
        return None
