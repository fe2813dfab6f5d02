"""Domain helpers for user records (id allocation, lookups, merges)."""
from __future__ import annotations

import math
import re
from typing import Any, Mapping, Optional, Sequence

REQUIRED_FIELDS = ("name", "age", "email")
IDENTITY_FIELDS = frozenset({"id"})

ID_PREFIX = re.compile(r"\s*([+-]?\d+)")


def _stored_id(user: Any) -> Optional[int]:
    if isinstance(user, Mapping):
        value = user.get("id")
        if type(value) is int:
            return value
    return None


def parse_user_id(value: Any) -> Optional[int]:
    """
    Return the integer id carried by a path segment, or None when it has none.
    Only the leading integer is read, so "1abc" and "1.5" both mean 1.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    match = ID_PREFIX.match(str(value))
    if not match:
        return None
    return int(match.group(1))


def next_user_id(users: Sequence[Mapping[str, Any]]) -> int:
    """
    The last user's id plus one, or 1 for an empty collection.
    A last record without an integer id falls back to the highest id plus one.
    """
    if not users:
        return 1
    last = _stored_id(users[-1])
    if last is not None:
        return last + 1
    ids = [i for i in (_stored_id(u) for u in users) if i is not None]
    return max(ids) + 1 if ids else 1


def find_user_index(users: Sequence[Mapping[str, Any]], user_id: Optional[int]) -> int:
    if user_id is None:
        return -1
    for idx, user in enumerate(users):
        if _stored_id(user) == user_id:
            return idx
    return -1


def is_blank(value: Any) -> bool:
    """None, False, 0, NaN and "" are blank; empty lists and objects are not."""
    if value is None or value is False:
        return True
    if isinstance(value, str):
        return value == ""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value == 0 or math.isnan(value)
    return False


def missing_required_fields(payload: Mapping[str, Any]) -> list[str]:
    return [field for field in REQUIRED_FIELDS if is_blank(payload.get(field))]


def build_user(user_id: int, payload: Mapping[str, Any]) -> dict:
    user = {"id": user_id}
    for field in REQUIRED_FIELDS:
        user[field] = payload[field]
    return user


def merge_user(current: Mapping[str, Any], changes: Mapping[str, Any]) -> dict:
    """Shallow merge of changes over current, never touching identity fields."""
    merged = dict(current)
    for key, value in changes.items():
        if key in IDENTITY_FIELDS:
            continue
        merged[key] = value
    return merged
