"""HOTELFEED — Canonical Activity Type Registry.

Maps human-facing activity labels ("Check-In", "Payment") to the canonical
lowercase tags used for filter matching, and defines the selectable type groups.
"""

import re
from enum import Enum
from typing import Dict, List, Optional, Tuple


class SourceKind(str, Enum):
    """Which event source produced a row."""

    ACTIVITY = "activity"
    PAYMENT = "payment"


class TypeGroup:
    """A selectable entry of the type filter."""

    def __init__(self, tag: str, label: str):
        self.tag = tag
        self.label = label

    def __repr__(self) -> str:
        return f"<TypeGroup {self.tag} ({self.label})>"


_NON_ALNUM = re.compile(r"[^a-z0-9]")

PAYMENT_TAG = "payment"
PAYMENT_LABEL = "Payment"


# ─────────────────────────────────────────────
# TYPE GROUPS — order is the filter dropdown order
# ─────────────────────────────────────────────

TYPE_GROUPS: Dict[str, TypeGroup] = {
    "login": TypeGroup("login", "Login"),
    "checkin": TypeGroup("checkin", "Check-In"),
    "checkout": TypeGroup("checkout", "Check-Out"),
    "reservation": TypeGroup("reservation", "Reservation"),
    PAYMENT_TAG: TypeGroup(PAYMENT_TAG, PAYMENT_LABEL),
}

ALL_TYPES_LABEL = "All Types"


# ─────────────────────────────────────────────
# HELPERS
# ─────────────────────────────────────────────


def normalize_type(label: Optional[str]) -> str:
    """Canonical tag for a display label: lowercase, separators removed.

    "Check-In" -> "checkin", "Check Out" -> "checkout".
    """
    if not label:
        return ""
    return _NON_ALNUM.sub("", label.lower())


def matches_type_group(norm_type: str, type_group: Optional[str]) -> bool:
    """Prefix predicate used by the type filter. None matches everything."""
    if type_group is None:
        return True
    return norm_type.startswith(type_group)


def find_prefix_collisions() -> List[Tuple[str, str]]:
    """Return (shorter, longer) tag pairs where one group would prefix-match another."""
    tags = list(TYPE_GROUPS)
    return [
        (a, b)
        for a in tags
        for b in tags
        if a != b and b.startswith(a)
    ]
