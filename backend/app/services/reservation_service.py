"""
Reservation transactions on stakes.

Every status change is a single conditional UPDATE guarded by the current
status, so the check-and-set happens inside the database in one statement.
Of N concurrent reserve calls on one available stake exactly one UPDATE
matches a row; the rest match zero rows and surface as conflicts.
"""
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Optional

from sqlalchemy import update
from sqlmodel import Session, select

from app.models.bird_type import BirdType
from app.models.reservation import PaymentStatus, Reservation
from app.models.stake import Stake, StakeStatus
from app.models.tournament import Tournament
from app.services.stake_lifecycle import (
    StakeConflictError,
    StakeEvent,
    StakeNotFoundError,
    coerce_status,
    next_status,
    source_states,
    validate_reservant,
)
from app.utils.clock import utcnow

logger = logging.getLogger(__name__)


@dataclass
class ReserveResult:
    """Mirrors the reserve_stake RPC payload: {success, message, error}."""

    success: bool
    stake_id: int
    stake_number: Optional[int] = None
    reservation_id: Optional[int] = None
    message: Optional[str] = None
    error: Optional[str] = None

    def as_payload(self) -> dict:
        return {"success": self.success, "message": self.message, "error": self.error}


def _guarded_update(session: Session, stake_id: int, event: StakeEvent, allowed: Iterable[StakeStatus], **values) -> int:
    """Apply an UPDATE only if the stake is still in one of the allowed statuses. Returns rowcount."""
    allowed_values = [s.value for s in allowed]
    values["updated_at"] = utcnow()
    result = session.exec(
        update(Stake)
        .where(Stake.id == stake_id, Stake.status.in_(allowed_values))
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    logger.debug("Guarded %s on stake %s matched %s row(s)", event.value, stake_id, result.rowcount)
    return result.rowcount


def _target_status(event: StakeEvent, *, is_admin: bool, stake_id: int) -> StakeStatus:
    """Admin guard plus the target status of the event, which is the same from every allowed source."""
    (target,) = {next_status(s, event, is_admin=is_admin, stake_id=stake_id) for s in source_states(event)}
    return target


def _raise_miss(session: Session, stake_id: int, event: StakeEvent) -> None:
    """Zero rows matched: distinguish a missing stake from a conflicting status."""
    current = session.exec(select(Stake.status).where(Stake.id == stake_id)).first()
    if current is None:
        raise StakeNotFoundError(stake_id)
    raise StakeConflictError(stake_id, coerce_status(current), event)


def _live_reservation(session: Session, stake_id: int) -> Optional[Reservation]:
    return session.exec(
        select(Reservation)
        .where(Reservation.stake_id == stake_id, Reservation.payment_status != PaymentStatus.cancelled.value)
        .order_by(Reservation.id.desc())
    ).first()


def get_stake_price(session: Session, stake_id: int) -> Decimal:
    """Price of the tournament owning the stake."""
    price = session.exec(
        select(Tournament.stake_price)
        .join(BirdType, BirdType.tournament_id == Tournament.id)
        .join(Stake, Stake.bird_type_id == BirdType.id)
        .where(Stake.id == stake_id)
    ).first()
    if price is None:
        raise StakeNotFoundError(stake_id)
    return Decimal(price)


def reserve_stake(session: Session, stake_id: int, customer_name: str, customer_phone: str) -> ReserveResult:
    """
    Atomically move a stake from available to pending and record the reservation.

    Raises:
        ReservationValidationError: blank name or phone (no statement issued)
        StakeNotFoundError: no stake with this id
        StakeConflictError: stake is pending or confirmed (lost the race)
    """
    name, phone = validate_reservant(customer_name, customer_phone)
    event = StakeEvent.reserve
    target = _target_status(event, is_admin=False, stake_id=stake_id)

    try:
        matched = _guarded_update(
            session,
            stake_id,
            event,
            source_states(event),
            status=target.value,
            reservant_name=name,
            reservant_phone=phone,
        )
        if matched != 1:
            _raise_miss(session, stake_id, event)

        reservation = Reservation(
            stake_id=stake_id,
            customer_name=name,
            customer_phone=phone,
            payment_status=PaymentStatus.pending,
        )
        session.add(reservation)
        session.commit()
        session.refresh(reservation)
    except Exception:
        session.rollback()
        raise

    number = session.exec(select(Stake.number).where(Stake.id == stake_id)).first()
    logger.info(f"Stake {stake_id} (#{number}) reserved by '{name}', reservation {reservation.id}")
    return ReserveResult(
        success=True,
        stake_id=stake_id,
        stake_number=number,
        reservation_id=reservation.id,
        message="Stake reserved successfully",
    )


def confirm_payment(session: Session, stake_id: int, notes: Optional[str] = None, *, is_admin: bool = False) -> Stake:
    """
    Admin marks payment received: pending -> confirmed.

    The live reservation becomes paid with amount_paid set to the tournament price.

    Raises:
        AdminRequiredError: is_admin is False
        StakeNotFoundError: no stake with this id
        StakeConflictError: stake is not pending
    """
    event = StakeEvent.confirm
    target = _target_status(event, is_admin=is_admin, stake_id=stake_id)
    try:
        price = get_stake_price(session, stake_id)
        matched = _guarded_update(
            session,
            stake_id,
            event,
            source_states(event),
            status=target.value,
        )
        if matched != 1:
            _raise_miss(session, stake_id, event)

        reservation = _live_reservation(session, stake_id)
        if reservation is not None:
            reservation.payment_status = PaymentStatus.paid
            reservation.amount_paid = price
            reservation.paid_at = utcnow()
            if notes:
                reservation.notes = notes
            session.add(reservation)
        else:
            logger.warning(f"Stake {stake_id} confirmed without a live reservation record")
        session.commit()
    except Exception:
        session.rollback()
        raise

    stake = session.get(Stake, stake_id)
    session.refresh(stake)
    logger.info(f"Stake {stake_id} payment confirmed ({price})")
    return stake


def cancel_reservation(session: Session, stake_id: int, notes: Optional[str] = None, *, is_admin: bool = False) -> Stake:
    """
    Admin cancels a pending or confirmed stake: back to available, reservant cleared.

    Raises:
        AdminRequiredError: is_admin is False
        StakeNotFoundError: no stake with this id
        StakeConflictError: stake is already available
    """
    event = StakeEvent.cancel
    target = _target_status(event, is_admin=is_admin, stake_id=stake_id)
    try:
        matched = _guarded_update(
            session,
            stake_id,
            event,
            source_states(event),
            status=target.value,
            reservant_name=None,
            reservant_phone=None,
        )
        if matched != 1:
            _raise_miss(session, stake_id, event)

        reservation = _live_reservation(session, stake_id)
        if reservation is not None:
            reservation.payment_status = PaymentStatus.cancelled
            reservation.cancelled_at = utcnow()
            if notes:
                reservation.notes = notes
            session.add(reservation)
        session.commit()
    except Exception:
        session.rollback()
        raise

    stake = session.get(Stake, stake_id)
    session.refresh(stake)
    logger.info(f"Stake {stake_id} reservation cancelled")
    return stake
