"""
Public read-only endpoints (no auth).

Home view: the active tournament with its bird types and availability.
"""
from datetime import date
from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlmodel import Session

from app.database import get_session
from app.services.dashboard_stats import get_bird_type_availability
from app.services.payment_instructions import format_amount
from app.utils.tournament_guards import get_active_tournament

router = APIRouter()


class PublicTournament(BaseModel):
    id: int
    name: str
    event_date: date
    location: Optional[str] = None
    stake_price: Decimal
    price_display: str


class PublicBirdType(BaseModel):
    id: int
    name: str
    color: str
    total_stakes: int
    available: int


class PublicHomeResponse(BaseModel):
    tournament: Optional[PublicTournament] = None
    bird_types: List[PublicBirdType] = []


@router.get("/public/home", response_model=PublicHomeResponse)
def public_home(session: Session = Depends(get_session)):
    """Active tournament and its bird types; empty when no tournament is active"""
    tournament = get_active_tournament(session)
    if tournament is None:
        return PublicHomeResponse()

    availability = get_bird_type_availability(session, tournament.id)
    return PublicHomeResponse(
        tournament=PublicTournament(
            id=tournament.id,
            name=tournament.name,
            event_date=tournament.event_date,
            location=tournament.location,
            stake_price=tournament.stake_price,
            price_display=format_amount(tournament.stake_price),
        ),
        bird_types=[
            PublicBirdType(
                id=a.bird_type_id,
                name=a.name,
                color=a.color,
                total_stakes=a.total_stakes,
                available=a.available,
            )
            for a in availability
        ],
    )
