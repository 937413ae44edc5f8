"""
Stake status state machine.

States: available (initial), pending (awaiting payment), confirmed (paid).

    available --reserve--> pending
    pending   --confirm--> confirmed
    pending   --cancel---> available
    confirmed --cancel---> available

Any event fired from a state that has no edge for it is a conflict.
Confirm and cancel are administrator-only events.
"""
from __future__ import annotations

from enum import Enum
from typing import Dict, FrozenSet, Optional

from app.models.stake import StakeStatus


class StakeEvent(str, Enum):
    reserve = "reserve"
    confirm = "confirm"
    cancel = "cancel"


# Closed table: every StakeStatus has an entry, every StakeEvent is listed per status.
TRANSITIONS: Dict[StakeStatus, Dict[StakeEvent, Optional[StakeStatus]]] = {
    StakeStatus.available: {
        StakeEvent.reserve: StakeStatus.pending,
        StakeEvent.confirm: None,
        StakeEvent.cancel: None,
    },
    StakeStatus.pending: {
        StakeEvent.reserve: None,
        StakeEvent.confirm: StakeStatus.confirmed,
        StakeEvent.cancel: StakeStatus.available,
    },
    StakeStatus.confirmed: {
        StakeEvent.reserve: None,
        StakeEvent.confirm: None,
        StakeEvent.cancel: StakeStatus.available,
    },
}

ADMIN_EVENTS: FrozenSet[StakeEvent] = frozenset({StakeEvent.confirm, StakeEvent.cancel})


class StakeLifecycleError(Exception):
    """Base class for stake reservation errors."""


class ReservationValidationError(StakeLifecycleError):
    """Reservant fields missing; rejected before touching the store."""


class StakeNotFoundError(StakeLifecycleError):
    def __init__(self, stake_id: int):
        super().__init__(f"Stake {stake_id} not found")
        self.stake_id = stake_id


class StakeConflictError(StakeLifecycleError):
    """The stake is not in a state that allows the requested event."""

    def __init__(self, stake_id: Optional[int], current: Optional[StakeStatus], event: StakeEvent):
        state = current.value if current is not None else "unknown"
        super().__init__(f"STAKE_CONFLICT: cannot {event.value} stake {stake_id} in status '{state}'")
        self.stake_id = stake_id
        self.current = current
        self.event = event


class AdminRequiredError(StakeLifecycleError):
    """Event is restricted to administrators."""


def coerce_status(value) -> StakeStatus:
    """Normalize a raw DB value ('pending') or enum into StakeStatus."""
    return value if isinstance(value, StakeStatus) else StakeStatus(value)


def source_states(event: StakeEvent) -> FrozenSet[StakeStatus]:
    """All statuses from which the event is allowed."""
    return frozenset(s for s, edges in TRANSITIONS.items() if edges[event] is not None)


def can_transition(current, event: StakeEvent) -> bool:
    return TRANSITIONS[coerce_status(current)][event] is not None


def next_status(current, event: StakeEvent, *, is_admin: bool = False, stake_id: Optional[int] = None) -> StakeStatus:
    """
    Resolve the target status of an event.

    Raises:
        AdminRequiredError: confirm/cancel fired by a non-administrator
        StakeConflictError: no edge from the current status
    """
    if event in ADMIN_EVENTS and not is_admin:
        raise AdminRequiredError(f"{event.value} requires an administrator")
    status = coerce_status(current)
    target = TRANSITIONS[status][event]
    if target is None:
        raise StakeConflictError(stake_id, status, event)
    return target


def validate_reservant(customer_name: Optional[str], customer_phone: Optional[str]) -> tuple:
    """
    Trim and check reservant contact fields.

    No format validation beyond non-empty is applied to the phone.

    Returns:
        (name, phone) trimmed

    Raises:
        ReservationValidationError: either field is missing or blank
    """
    name = (customer_name or "").strip()
    phone = (customer_phone or "").strip()
    if not name or not phone:
        raise ReservationValidationError("customer_name and customer_phone are required")
    return name, phone
