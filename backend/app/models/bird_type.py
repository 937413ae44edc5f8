from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

from app.utils.clock import utcnow

if TYPE_CHECKING:
    from app.models.stake import Stake
    from app.models.tournament import Tournament


class BirdType(SQLModel, table=True):
    __tablename__ = "bird_type"
    __table_args__ = (SAUniqueConstraint("tournament_id", "name", name="uq_tournament_bird_type"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    tournament_id: int = Field(foreign_key="tournament.id", index=True)
    name: str
    color: str  # Display color, e.g. "#2e7d32"
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow, sa_column_kwargs={"onupdate": utcnow})

    # Relationships
    tournament: "Tournament" = Relationship(back_populates="bird_types")
    stakes: List["Stake"] = Relationship(back_populates="bird_type")
