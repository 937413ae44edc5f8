import logging
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from sqlmodel import Session, func, select

from app.database import get_session
from app.models.admin_session import AdminSession
from app.models.bird_type import BirdType
from app.models.stake import Stake
from app.models.tournament import Tournament
from app.utils.admin_guards import require_admin
from app.utils.clock import utcnow
from app.utils.sql import scalar_int
from app.utils.tournament_guards import get_active_tournament, get_tournament_or_404

logger = logging.getLogger(__name__)

router = APIRouter()

REQUIRED_TOURNAMENT_FIELDS = ("name", "event_date", "stake_price")


class TournamentCreate(BaseModel):
    name: str
    event_date: date
    stake_price: Decimal = Field(gt=0, max_digits=10, decimal_places=2)
    location: Optional[str] = None
    description: Optional[str] = None
    is_active: bool = False

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if not v or not v.strip():
            raise ValueError("name is required")
        return v.strip()


class TournamentUpdate(BaseModel):
    name: Optional[str] = None
    event_date: Optional[date] = None
    stake_price: Optional[Decimal] = Field(default=None, gt=0, max_digits=10, decimal_places=2)
    location: Optional[str] = None
    description: Optional[str] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if v is not None and not v.strip():
            raise ValueError("name cannot be blank")
        return v.strip() if v else v

    @model_validator(mode="after")
    def reject_null_required_fields(self):
        # Omitted means unchanged; explicit null is rejected
        nulled = sorted(f for f in REQUIRED_TOURNAMENT_FIELDS if f in self.model_fields_set and getattr(self, f) is None)
        if nulled:
            raise ValueError(f"{', '.join(nulled)} cannot be null")
        return self


class TournamentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    event_date: date
    stake_price: Decimal
    location: Optional[str]
    description: Optional[str]
    is_active: bool
    created_at: datetime
    updated_at: datetime


def activate_tournament(session: Session, tournament: Tournament) -> Tournament:
    """Make this the only active tournament (other tournaments are deactivated in the same commit)."""
    others = session.exec(
        select(Tournament).where(Tournament.is_active == True, Tournament.id != tournament.id)  # noqa: E712
    ).all()
    for other in others:
        other.is_active = False
        other.updated_at = utcnow()
        session.add(other)

    tournament.is_active = True
    tournament.updated_at = utcnow()
    session.add(tournament)
    session.commit()
    session.refresh(tournament)

    if others:
        logger.info(f"Tournament {tournament.id} activated; deactivated {[t.id for t in others]}")
    return tournament


def _same_value(current, new) -> bool:
    if isinstance(new, Decimal) and current is not None:
        return Decimal(current) == new
    return current == new


def count_tournament_stakes(session: Session, tournament_id: int) -> int:
    return scalar_int(
        session.exec(
            select(func.count(Stake.id))
            .join(BirdType, BirdType.id == Stake.bird_type_id)
            .where(BirdType.tournament_id == tournament_id)
        ).one()
    )


@router.get("/tournaments", response_model=List[TournamentResponse])
def list_tournaments(session: Session = Depends(get_session)):
    """List all tournaments, most recent event first"""
    return session.exec(select(Tournament).order_by(Tournament.event_date.desc(), Tournament.id.desc())).all()


@router.post("/tournaments", response_model=TournamentResponse, status_code=201)
def create_tournament(
    tournament_data: TournamentCreate,
    session: Session = Depends(get_session),
    admin: AdminSession = Depends(require_admin),
):
    """Create a tournament, optionally making it the active one"""
    data = tournament_data.model_dump()
    make_active = data.pop("is_active")
    tournament = Tournament(**data)
    session.add(tournament)
    session.commit()
    session.refresh(tournament)

    if make_active:
        tournament = activate_tournament(session, tournament)

    logger.info(f"Tournament {tournament.id} '{tournament.name}' created by {admin.username}")
    return tournament


@router.get("/tournaments/active", response_model=TournamentResponse)
def get_active(session: Session = Depends(get_session)):
    """Get the currently active tournament"""
    tournament = get_active_tournament(session)
    if not tournament:
        raise HTTPException(status_code=404, detail="No active tournament")
    return tournament


@router.get("/tournaments/{tournament_id}", response_model=TournamentResponse)
def get_tournament(tournament_id: int, session: Session = Depends(get_session)):
    """Get a tournament by ID"""
    return get_tournament_or_404(session, tournament_id)


@router.put("/tournaments/{tournament_id}", response_model=TournamentResponse)
def update_tournament(
    tournament_id: int,
    tournament_data: TournamentUpdate,
    session: Session = Depends(get_session),
    admin: AdminSession = Depends(require_admin),
):
    """Update tournament details. Frozen once stakes exist (activation flags excepted)."""
    tournament = get_tournament_or_404(session, tournament_id)
    update_data = tournament_data.model_dump(exclude_unset=True)

    changed = {field for field, value in update_data.items() if not _same_value(getattr(tournament, field), value)}
    if changed and count_tournament_stakes(session, tournament_id) > 0:
        raise HTTPException(
            status_code=409,
            detail=f"TOURNAMENT_LOCKED: Cannot change {', '.join(sorted(changed))} once stakes exist for the tournament.",
        )

    for field, value in update_data.items():
        setattr(tournament, field, value)

    tournament.updated_at = utcnow()
    session.add(tournament)
    session.commit()
    session.refresh(tournament)
    return tournament


@router.post("/tournaments/{tournament_id}/activate", response_model=TournamentResponse)
def activate(
    tournament_id: int,
    session: Session = Depends(get_session),
    admin: AdminSession = Depends(require_admin),
):
    """Make a tournament the active one"""
    tournament = get_tournament_or_404(session, tournament_id)
    return activate_tournament(session, tournament)


@router.post("/tournaments/{tournament_id}/deactivate", response_model=TournamentResponse)
def deactivate(
    tournament_id: int,
    session: Session = Depends(get_session),
    admin: AdminSession = Depends(require_admin),
):
    """Deactivate a tournament (always allowed)"""
    tournament = get_tournament_or_404(session, tournament_id)
    tournament.is_active = False
    tournament.updated_at = utcnow()
    session.add(tournament)
    session.commit()
    session.refresh(tournament)
    return tournament
