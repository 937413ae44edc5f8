"""Reservation record backing a stake's pending/confirmed state."""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Index, String, text
from sqlmodel import Column, Field, Relationship, SQLModel

from app.utils.clock import utcnow

if TYPE_CHECKING:
    from app.models.stake import Stake


class PaymentStatus(str, Enum):
    pending = "pending"
    paid = "paid"
    cancelled = "cancelled"


class Reservation(SQLModel, table=True):
    """One reservant's claim on a stake, from reserve until paid or cancelled."""

    __table_args__ = (
        # A stake can carry only one live (non-cancelled) reservation
        Index(
            "uq_reservation_live_stake",
            "stake_id",
            unique=True,
            sqlite_where=text("payment_status != 'cancelled'"),
            postgresql_where=text("payment_status != 'cancelled'"),
        ),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    stake_id: int = Field(foreign_key="stake.id", index=True)
    customer_name: str
    customer_phone: str
    payment_status: PaymentStatus = Field(
        default=PaymentStatus.pending, sa_column=Column(String, nullable=False)
    )
    amount_paid: Optional[Decimal] = Field(default=None, max_digits=10, decimal_places=2)
    reserved_at: datetime = Field(default_factory=utcnow)
    paid_at: Optional[datetime] = Field(default=None)
    cancelled_at: Optional[datetime] = Field(default=None)
    notes: Optional[str] = Field(default=None)

    # Relationships
    stake: "Stake" = Relationship(back_populates="reservations")
