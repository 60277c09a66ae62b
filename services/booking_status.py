# services/booking_status.py
"""
Booking status lifecycle.

The dashboard only offers the edges below. Storage accepts any status, so an
owner override (set_booking_status) can still write outside this table.
"""
from typing import Dict, FrozenSet

ACTION_TARGETS: Dict[str, str] = {
    "confirm": "confirmed",
    "cancel": "cancelled",
    "seat": "seated",
    "no_show": "no_show",
    "reset": "pending",
}

ALLOWED_TRANSITIONS: Dict[str, FrozenSet[str]] = {
    "pending": frozenset({"confirmed", "cancelled"}),
    "confirmed": frozenset({"seated", "no_show", "cancelled"}),
    "seated": frozenset({"pending"}),
    "cancelled": frozenset({"pending"}),
    "no_show": frozenset({"pending"}),
    "finished": frozenset({"pending"}),
}

def allowed_transitions(status: str) -> FrozenSet[str]:
    if status not in ALLOWED_TRANSITIONS:
        raise ValueError(f"Unknown booking status '{status}'")
    return ALLOWED_TRANSITIONS[status]

def allowed_actions(status: str) -> list:
    targets = allowed_transitions(status)
    return [action for action, target in ACTION_TARGETS.items() if target in targets]

def is_offered(current: str, target: str) -> bool:
    return target in allowed_transitions(current)

def next_status(current: str, action: str) -> str:
    """Resolve a dashboard action against the current status."""
    if action not in ACTION_TARGETS:
        raise ValueError(f"Unknown booking action '{action}'")
    target = ACTION_TARGETS[action]
    if not is_offered(current, target):
        raise ValueError(f"Action '{action}' is not available for a '{current}' booking")
    return target
