"""
Stake grid presentation model.

Pure derivation from stake rows to grid cells: one cell per stake, colored by
status, with a hover tooltip for taken stakes and admin actions attached to
non-available cells. No database access here.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from app.models.stake import StakeStatus
from app.services.stake_lifecycle import StakeEvent, can_transition, coerce_status

INDICATORS: Dict[StakeStatus, str] = {
    StakeStatus.available: "success",
    StakeStatus.pending: "warning",
    StakeStatus.confirmed: "error",
}

LABELS: Dict[StakeStatus, str] = {
    StakeStatus.available: "Available",
    StakeStatus.pending: "Awaiting payment",
    StakeStatus.confirmed: "Confirmed",
}

# Order in which admin buttons are rendered
ADMIN_ACTIONS = (StakeEvent.confirm, StakeEvent.cancel)


@dataclass
class StakeTooltip:
    name: str
    phone: Optional[str]
    status_label: str


@dataclass
class StakeCell:
    stake_id: int
    number: int
    status: StakeStatus
    indicator: str
    label: str
    selectable: bool
    tooltip: Optional[StakeTooltip] = None
    admin_actions: List[str] = field(default_factory=list)


def legend() -> List[Dict[str, str]]:
    return [{"status": s.value, "indicator": INDICATORS[s], "label": LABELS[s]} for s in StakeStatus]


def build_cell(stake, is_admin: bool = False) -> StakeCell:
    """Derive one cell from anything with id, number, status, reservant_name, reservant_phone."""
    status = coerce_status(stake.status)
    available = status == StakeStatus.available

    tooltip = None
    if not available and stake.reservant_name:
        tooltip = StakeTooltip(name=stake.reservant_name, phone=stake.reservant_phone, status_label=LABELS[status])

    actions: List[str] = []
    if is_admin and not available:
        actions = [a.value for a in ADMIN_ACTIONS if can_transition(status, a)]

    return StakeCell(
        stake_id=stake.id,
        number=stake.number,
        status=status,
        indicator=INDICATORS[status],
        label=LABELS[status],
        selectable=available,
        tooltip=tooltip,
        admin_actions=actions,
    )


def build_stake_grid(stakes: Iterable, is_admin: bool = False) -> List[StakeCell]:
    """One cell per stake, ordered by stake number."""
    return [build_cell(s, is_admin=is_admin) for s in sorted(stakes, key=lambda s: s.number)]


def select_stake(cell: StakeCell) -> Optional[int]:
    """Selecting a cell opens the reservation form only for available stakes; otherwise a no-op."""
    if cell.status == StakeStatus.available:
        return cell.stake_id
    return None
