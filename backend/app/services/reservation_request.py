"""
Reservation request handler.

Takes a user's reservation attempt, validates it locally, runs the atomic
reserve and turns every possible result into a ReservationOutcome. Nothing
raised below this layer escapes: callers only ever see an outcome kind and
a user-facing message.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from sqlmodel import Session, select

from app.models.bird_type import BirdType
from app.models.stake import Stake
from app.models.tournament import Tournament
from app.services.payment_instructions import PaymentInstructions, build_payment_instructions
from app.services.reservation_service import reserve_stake
from app.services.stake_lifecycle import (
    ReservationValidationError,
    StakeConflictError,
    StakeNotFoundError,
    validate_reservant,
)

logger = logging.getLogger(__name__)


class OutcomeKind(str, Enum):
    success = "success"
    validation_error = "validation_error"
    conflict = "conflict"
    not_found = "not_found"
    error = "error"


MESSAGES = {
    OutcomeKind.success: "Stake reserved. Send the payment proof via WhatsApp.",
    OutcomeKind.validation_error: "Please fill in your name and phone number.",
    OutcomeKind.conflict: "This stake is no longer available. Please choose another one.",
    OutcomeKind.not_found: "Stake not found.",
    OutcomeKind.error: "Could not complete the reservation. Please try again.",
}

HTTP_STATUS = {
    OutcomeKind.success: 200,
    OutcomeKind.validation_error: 422,
    OutcomeKind.conflict: 409,
    OutcomeKind.not_found: 404,
    OutcomeKind.error: 500,
}


@dataclass
class ReservationOutcome:
    kind: OutcomeKind
    stake_id: int
    message: str
    stake_number: Optional[int] = None
    reservation_id: Optional[int] = None
    payment: Optional[PaymentInstructions] = None

    @property
    def success(self) -> bool:
        return self.kind == OutcomeKind.success

    @property
    def http_status(self) -> int:
        return HTTP_STATUS[self.kind]

    def as_payload(self) -> dict:
        """RPC-shaped body: {success, message, error} plus payment details on success."""
        return {
            "success": self.success,
            "kind": self.kind.value,
            "message": self.message if self.success else None,
            "error": None if self.success else self.message,
            "stake_id": self.stake_id,
            "stake_number": self.stake_number,
            "reservation_id": self.reservation_id,
            "payment": self.payment.as_dict() if self.payment else None,
        }


def _failure(kind: OutcomeKind, stake_id: int) -> ReservationOutcome:
    return ReservationOutcome(kind=kind, stake_id=stake_id, message=MESSAGES[kind])


def submit_reservation(
    session: Session, stake_id: int, customer_name: Optional[str], customer_phone: Optional[str]
) -> ReservationOutcome:
    """One reservation attempt; at most one reserve statement is issued."""
    try:
        validate_reservant(customer_name, customer_phone)
    except ReservationValidationError:
        return _failure(OutcomeKind.validation_error, stake_id)

    try:
        result = reserve_stake(session, stake_id, customer_name, customer_phone)
    except StakeConflictError as e:
        logger.info(f"Reservation conflict: {e}")
        return _failure(OutcomeKind.conflict, stake_id)
    except StakeNotFoundError:
        return _failure(OutcomeKind.not_found, stake_id)
    except ReservationValidationError:
        return _failure(OutcomeKind.validation_error, stake_id)
    except Exception:
        logger.exception("Unexpected failure reserving stake %s", stake_id)
        return _failure(OutcomeKind.error, stake_id)

    payment = None
    try:
        row = session.exec(
            select(Tournament.name, Tournament.stake_price)
            .join(BirdType, BirdType.tournament_id == Tournament.id)
            .join(Stake, Stake.bird_type_id == BirdType.id)
            .where(Stake.id == stake_id)
        ).first()
        if row is not None:
            payment = build_payment_instructions(result.stake_number, row[0], row[1])
    except Exception:
        # Reservation is committed; instructions are best effort
        logger.exception("Failed to build payment instructions for stake %s", stake_id)

    return ReservationOutcome(
        kind=OutcomeKind.success,
        stake_id=stake_id,
        message=MESSAGES[OutcomeKind.success],
        stake_number=result.stake_number,
        reservation_id=result.reservation_id,
        payment=payment,
    )
