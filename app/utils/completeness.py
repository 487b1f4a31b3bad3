"""
Profile completeness calculator
Scoring: name(15) + username(10) + bio(20) + avatar(15) + location(10)
         + website(10) + skills(15) + industries(5) = 100
"""
import math
from typing import Any, Dict, List, Tuple

# (field, weight, kind, tip) - order here is the order tips are returned in
COMPLETENESS_FIELDS = (
    ("name", 15, "text", "Add your full name"),
    ("username", 10, "text", "Choose a unique username"),
    ("bio", 20, "text", "Write a compelling bio"),
    ("image", 15, "text", "Upload a profile photo"),
    ("location", 10, "text", "Add your location"),
    ("website", 10, "text", "Add your website or portfolio"),
    ("skills", 15, "collection", "Add your skills"),
    ("industries", 5, "collection", "Add your industry"),
)


def validate_weights(fields) -> None:
    """Reject weight tables that are negative, non-finite or don't sum to 100"""
    total = 0.0
    for field, weight, _kind, _tip in fields:
        if not isinstance(weight, (int, float)) or isinstance(weight, bool):
            raise ValueError(f"weight for {field!r} must be a number")
        if not math.isfinite(weight) or weight < 0:
            raise ValueError(f"weight for {field!r} must be finite and non-negative")
        total += weight
    if not math.isclose(total, 100):
        raise ValueError(f"completeness weights must sum to 100, got {total}")


validate_weights(COMPLETENESS_FIELDS)


def _get(user: Any, field: str) -> Any:
    if isinstance(user, dict):
        return user.get(field)
    return getattr(user, field, None)


def _is_present(value: Any, kind: str) -> bool:
    if kind == "text":
        return isinstance(value, str) and bool(value.strip())
    # Collections: anything sized and iterable except strings/bytes/dicts
    if value is None or isinstance(value, (str, bytes, dict)):
        return False
    try:
        return len(value) > 0
    except TypeError:
        return False


def completeness_breakdown(user: Any) -> Dict[str, int]:
    """Earned weight per field (0 for absent fields)"""
    breakdown = {}
    for field, weight, kind, _tip in COMPLETENESS_FIELDS:
        breakdown[field] = weight if _is_present(_get(user, field), kind) else 0
    return breakdown


def calculate_completeness(user: Any) -> Tuple[int, List[str]]:
    """
    Calculate profile completeness percentage

    Accepts an ORM row, a pydantic model or a plain dict. Missing or
    malformed fields count as absent; this never raises.

    Returns:
        - completeness: int (0-100)
        - tips: suggestions for every absent field, in table order
    """
    total = 0
    tips = []

    for field, weight, kind, tip in COMPLETENESS_FIELDS:
        if _is_present(_get(user, field), kind):
            total += weight
        else:
            tips.append(tip)

    return int(round(total)), tips
