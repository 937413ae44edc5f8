"""
Dashboard aggregation over a tournament's stakes.

Counts come from a single SELECT so they share one snapshot: a reservation
committing mid-request can never make the status counts disagree with the
total. Revenue is price x confirmed count in Decimal, rounded to cents.
"""
import logging
from dataclasses import asdict, dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import List, Optional

from sqlalchemy import case
from sqlmodel import Session, func, select

from app.models.bird_type import BirdType
from app.models.stake import Stake, StakeStatus
from app.models.tournament import Tournament
from app.utils.sql import scalar_int
from app.utils.tournament_guards import get_active_tournament

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")


@dataclass
class DashboardStats:
    tournament_id: Optional[int]
    tournament_name: Optional[str]
    total_stakes: int
    available: int
    reserved: int  # pending, awaiting payment
    confirmed: int
    total_revenue: Decimal

    def as_dict(self) -> dict:
        return asdict(self)


@dataclass
class BirdTypeAvailability:
    bird_type_id: int
    name: str
    color: str
    total_stakes: int
    available: int


def _status_count(status: StakeStatus):
    return func.coalesce(func.sum(case((Stake.status == status.value, 1), else_=0)), 0)


def compute_revenue(price, confirmed: int) -> Decimal:
    return (Decimal(str(price)) * confirmed).quantize(CENTS, rounding=ROUND_HALF_UP)


def empty_stats(tournament: Optional[Tournament] = None) -> DashboardStats:
    return DashboardStats(
        tournament_id=tournament.id if tournament else None,
        tournament_name=tournament.name if tournament else None,
        total_stakes=0,
        available=0,
        reserved=0,
        confirmed=0,
        total_revenue=Decimal("0.00"),
    )


def get_dashboard_stats(session: Session, tournament_id: Optional[int] = None) -> DashboardStats:
    """
    Aggregate stake counts and revenue for a tournament.

    Args:
        session: Database session
        tournament_id: Tournament to aggregate; defaults to the active tournament

    Returns:
        DashboardStats (all zeros when there is no such tournament)
    """
    if tournament_id is None:
        tournament = get_active_tournament(session)
    else:
        tournament = session.get(Tournament, tournament_id)
    if tournament is None:
        return empty_stats()

    row = session.exec(
        select(
            func.count(Stake.id),
            _status_count(StakeStatus.available),
            _status_count(StakeStatus.pending),
            _status_count(StakeStatus.confirmed),
        )
        .select_from(Stake)
        .join(BirdType, BirdType.id == Stake.bird_type_id)
        .where(BirdType.tournament_id == tournament.id)
    ).one()

    total, available, pending, confirmed = (scalar_int(v) for v in row)
    stats = DashboardStats(
        tournament_id=tournament.id,
        tournament_name=tournament.name,
        total_stakes=total,
        available=available,
        reserved=pending,
        confirmed=confirmed,
        total_revenue=compute_revenue(tournament.stake_price, confirmed),
    )
    if available + pending + confirmed != total:
        # Only possible with a status value outside StakeStatus in the table
        logger.warning(f"Stake status counts do not add up for tournament {tournament.id}: {stats}")
    return stats


def get_bird_type_availability(session: Session, tournament_id: int) -> List[BirdTypeAvailability]:
    """Per bird type total and available stake counts in one grouped query."""
    rows = session.exec(
        select(
            BirdType.id,
            BirdType.name,
            BirdType.color,
            func.count(Stake.id),
            _status_count(StakeStatus.available),
        )
        .select_from(BirdType)
        .outerjoin(Stake, Stake.bird_type_id == BirdType.id)
        .where(BirdType.tournament_id == tournament_id)
        .group_by(BirdType.id, BirdType.name, BirdType.color)
        .order_by(BirdType.name)
    ).all()

    return [
        BirdTypeAvailability(
            bird_type_id=r[0],
            name=r[1],
            color=r[2],
            total_stakes=scalar_int(r[3]),
            available=scalar_int(r[4]),
        )
        for r in rows
    ]
