from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import String
from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Column, Field, Relationship, SQLModel

from app.utils.clock import utcnow

if TYPE_CHECKING:
    from app.models.bird_type import BirdType
    from app.models.reservation import Reservation


class StakeStatus(str, Enum):
    available = "available"
    pending = "pending"
    confirmed = "confirmed"


class Stake(SQLModel, table=True):
    __table_args__ = (SAUniqueConstraint("bird_type_id", "number", name="uq_bird_type_stake_number"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    bird_type_id: int = Field(foreign_key="bird_type.id", index=True)
    number: int  # 1-based, sequential within the bird type
    status: StakeStatus = Field(default=StakeStatus.available, sa_column=Column(String, nullable=False, index=True))
    reservant_name: Optional[str] = Field(default=None)
    reservant_phone: Optional[str] = Field(default=None)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow, sa_column_kwargs={"onupdate": utcnow})

    # Relationships
    bird_type: "BirdType" = Relationship(back_populates="stakes")
    reservations: List["Reservation"] = Relationship(back_populates="stake")
