"""
Lookup guards for tournaments, bird types and stakes.

The *_or_404 helpers are for route handlers; get_active_tournament is plain
and safe to use from services.
"""

from typing import Optional

from fastapi import HTTPException
from sqlmodel import Session, select

from app.models.bird_type import BirdType
from app.models.stake import Stake
from app.models.tournament import Tournament


def get_active_tournament(session: Session) -> Optional[Tournament]:
    """The single active tournament, or None when no tournament is active."""
    return session.exec(
        select(Tournament).where(Tournament.is_active == True).order_by(Tournament.id.desc())  # noqa: E712
    ).first()


def get_tournament_or_404(session: Session, tournament_id: int) -> Tournament:
    tournament = session.get(Tournament, tournament_id)
    if not tournament:
        raise HTTPException(status_code=404, detail="Tournament not found")
    return tournament


def get_bird_type_or_404(session: Session, bird_type_id: int, tournament_id: int = None) -> BirdType:
    """
    Get a bird type or raise 404.

    Args:
        session: Database session
        bird_type_id: Bird type ID
        tournament_id: Optional tournament ID for ownership validation
    """
    bird_type = session.get(BirdType, bird_type_id)
    if not bird_type:
        raise HTTPException(status_code=404, detail="Bird type not found")

    if tournament_id and bird_type.tournament_id != tournament_id:
        raise HTTPException(
            status_code=404, detail=f"Bird type {bird_type_id} does not belong to tournament {tournament_id}"
        )

    return bird_type


def get_stake_or_404(session: Session, stake_id: int) -> Stake:
    stake = session.get(Stake, stake_id)
    if not stake:
        raise HTTPException(status_code=404, detail="Stake not found")
    return stake
