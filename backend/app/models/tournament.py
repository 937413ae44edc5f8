from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING, List, Optional

from sqlmodel import Field, Relationship, SQLModel

from app.utils.clock import utcnow

if TYPE_CHECKING:
    from app.models.bird_type import BirdType


class Tournament(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    event_date: date
    location: Optional[str] = None
    description: Optional[str] = None
    stake_price: Decimal = Field(max_digits=10, decimal_places=2)
    # At most one active tournament; enforced by the activate endpoint
    is_active: bool = Field(default=False, index=True)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow, sa_column_kwargs={"onupdate": utcnow})

    # Relationships
    bird_types: List["BirdType"] = Relationship(back_populates="tournament")
