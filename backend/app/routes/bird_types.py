import logging
from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, Field, field_validator
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, func, select

from app.database import get_session
from app.models.admin_session import AdminSession
from app.models.bird_type import BirdType
from app.models.stake import Stake, StakeStatus
from app.services.dashboard_stats import get_bird_type_availability
from app.services.payment_instructions import format_amount
from app.services.stake_grid import build_stake_grid, legend
from app.utils.admin_guards import optional_admin, require_admin
from app.utils.clock import utcnow
from app.utils.tournament_guards import get_bird_type_or_404, get_tournament_or_404

logger = logging.getLogger(__name__)

router = APIRouter()

MAX_STAKES_PER_BIRD_TYPE = 1000


class BirdTypeCreate(BaseModel):
    name: str
    color: str
    stake_count: int = Field(default=0, ge=0, le=MAX_STAKES_PER_BIRD_TYPE)

    @field_validator("name", "color")
    @classmethod
    def validate_not_blank(cls, v):
        if not v or not v.strip():
            raise ValueError("must not be blank")
        return v.strip()


class BirdTypeUpdate(BaseModel):
    name: Optional[str] = None
    color: Optional[str] = None


class StakesAdd(BaseModel):
    count: int = Field(ge=1, le=MAX_STAKES_PER_BIRD_TYPE)


class BirdTypeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    tournament_id: int
    name: str
    color: str


class BirdTypeSummary(BaseModel):
    bird_type_id: int
    name: str
    color: str
    total_stakes: int
    available: int


class StakeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    bird_type_id: int
    number: int
    status: StakeStatus
    reservant_name: Optional[str] = None
    reservant_phone: Optional[str] = None


class TournamentBrief(BaseModel):
    id: int
    name: str
    stake_price: Decimal
    price_display: str


class StakeTooltipResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    name: str
    phone: Optional[str] = None
    status_label: str


class StakeCellResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    stake_id: int
    number: int
    status: StakeStatus
    indicator: str
    label: str
    selectable: bool
    tooltip: Optional[StakeTooltipResponse] = None
    admin_actions: List[str] = []


class LegendEntry(BaseModel):
    status: str
    indicator: str
    label: str


class StakeGridResponse(BaseModel):
    bird_type: BirdTypeResponse
    tournament: TournamentBrief
    is_admin: bool
    legend: List[LegendEntry]
    cells: List[StakeCellResponse]


def generate_stakes(session: Session, bird_type_id: int, count: int) -> int:
    """Append `count` stakes numbered after the current highest number. Returns the first new number."""
    current_max = session.exec(select(func.max(Stake.number)).where(Stake.bird_type_id == bird_type_id)).one()
    start = (current_max or 0) + 1
    for number in range(start, start + count):
        session.add(Stake(bird_type_id=bird_type_id, number=number, status=StakeStatus.available))
    return start


def list_stakes(session: Session, bird_type_id: int) -> List[Stake]:
    return session.exec(select(Stake).where(Stake.bird_type_id == bird_type_id).order_by(Stake.number)).all()


@router.post("/tournaments/{tournament_id}/bird-types", response_model=BirdTypeResponse, status_code=201)
def create_bird_type(
    tournament_id: int,
    bird_type_data: BirdTypeCreate,
    session: Session = Depends(get_session),
    admin: AdminSession = Depends(require_admin),
):
    """Create a bird type and seed stakes 1..stake_count"""
    get_tournament_or_404(session, tournament_id)

    try:
        bird_type = BirdType(tournament_id=tournament_id, name=bird_type_data.name, color=bird_type_data.color)
        session.add(bird_type)
        session.flush()  # Get the ID

        if bird_type_data.stake_count:
            generate_stakes(session, bird_type.id, bird_type_data.stake_count)

        session.commit()
        session.refresh(bird_type)
    except IntegrityError:
        session.rollback()
        raise HTTPException(
            status_code=409,
            detail=f"Bird type '{bird_type_data.name}' already exists in tournament {tournament_id}",
        )

    logger.info(f"Bird type {bird_type.id} '{bird_type.name}' created with {bird_type_data.stake_count} stakes")
    return bird_type


@router.get("/tournaments/{tournament_id}/bird-types", response_model=List[BirdTypeSummary])
def list_bird_types(tournament_id: int, session: Session = Depends(get_session)):
    """List a tournament's bird types with total/available stake counts"""
    get_tournament_or_404(session, tournament_id)
    return [BirdTypeSummary(**vars(a)) for a in get_bird_type_availability(session, tournament_id)]


@router.get("/bird-types/{bird_type_id}", response_model=BirdTypeResponse)
def get_bird_type(bird_type_id: int, session: Session = Depends(get_session)):
    return get_bird_type_or_404(session, bird_type_id)


@router.put("/bird-types/{bird_type_id}", response_model=BirdTypeResponse)
def update_bird_type(
    bird_type_id: int,
    bird_type_data: BirdTypeUpdate,
    session: Session = Depends(get_session),
    admin: AdminSession = Depends(require_admin),
):
    bird_type = get_bird_type_or_404(session, bird_type_id)
    for field, value in bird_type_data.model_dump(exclude_unset=True).items():
        if value is None or not str(value).strip():
            raise HTTPException(status_code=422, detail=f"{field} must not be blank")
        setattr(bird_type, field, value.strip())

    bird_type.updated_at = utcnow()
    try:
        session.add(bird_type)
        session.commit()
    except IntegrityError:
        session.rollback()
        raise HTTPException(status_code=409, detail=f"Bird type '{bird_type_data.name}' already exists")
    session.refresh(bird_type)
    return bird_type


@router.post("/bird-types/{bird_type_id}/stakes", response_model=List[StakeResponse], status_code=201)
def add_stakes(
    bird_type_id: int,
    stakes_data: StakesAdd,
    session: Session = Depends(get_session),
    admin: AdminSession = Depends(require_admin),
):
    """Append stakes to a bird type, continuing the numbering"""
    get_bird_type_or_404(session, bird_type_id)
    try:
        start = generate_stakes(session, bird_type_id, stakes_data.count)
        session.commit()
    except IntegrityError:
        session.rollback()
        logger.warning(f"Stake numbering collision while appending to bird type {bird_type_id}")
        raise HTTPException(
            status_code=409,
            detail="STAKE_NUMBER_CONFLICT: Stakes were added concurrently for this bird type. Retry the request.",
        )
    return [s for s in list_stakes(session, bird_type_id) if s.number >= start]


@router.get("/bird-types/{bird_type_id}/stakes", response_model=List[StakeResponse])
def get_bird_type_stakes(bird_type_id: int, session: Session = Depends(get_session)):
    """Stakes of a bird type ordered by number"""
    get_bird_type_or_404(session, bird_type_id)
    return list_stakes(session, bird_type_id)


@router.get("/bird-types/{bird_type_id}/grid", response_model=StakeGridResponse)
def get_stake_grid(
    bird_type_id: int,
    session: Session = Depends(get_session),
    admin: Optional[AdminSession] = Depends(optional_admin),
):
    """Grid presentation of a bird type's stakes; admin actions attached when an admin token is sent"""
    bird_type = get_bird_type_or_404(session, bird_type_id)
    tournament = get_tournament_or_404(session, bird_type.tournament_id)
    is_admin = admin is not None

    cells = build_stake_grid(list_stakes(session, bird_type_id), is_admin=is_admin)
    return StakeGridResponse(
        bird_type=BirdTypeResponse.model_validate(bird_type),
        tournament=TournamentBrief(
            id=tournament.id,
            name=tournament.name,
            stake_price=tournament.stake_price,
            price_display=format_amount(tournament.stake_price),
        ),
        is_admin=is_admin,
        legend=[LegendEntry(**entry) for entry in legend()],
        cells=[StakeCellResponse.model_validate(c) for c in cells],
    )
