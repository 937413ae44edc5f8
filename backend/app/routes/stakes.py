"""
Stake reservation endpoints.

Public: reserve a stake (and the RPC-shaped reserve_stake).
Admin: confirm payment, cancel, reservation history.
"""
import logging
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict
from sqlmodel import Session, select

from app.database import get_session
from app.models.admin_session import AdminSession
from app.models.reservation import PaymentStatus, Reservation
from app.models.stake import Stake, StakeStatus
from app.services.reservation_request import submit_reservation
from app.services.reservation_service import cancel_reservation, confirm_payment
from app.services.stake_lifecycle import AdminRequiredError, StakeConflictError, StakeNotFoundError
from app.utils.admin_guards import require_admin
from app.utils.tournament_guards import get_stake_or_404

logger = logging.getLogger(__name__)

router = APIRouter()


class ReserveRequest(BaseModel):
    # Blank values are reported by the request handler, not rejected by the schema
    customer_name: Optional[str] = ""
    customer_phone: Optional[str] = ""


class ReserveStakeRpcRequest(ReserveRequest):
    stake_id: int


class AdminActionRequest(BaseModel):
    notes: Optional[str] = None


class StakeDetailResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    bird_type_id: int
    number: int
    status: StakeStatus
    reservant_name: Optional[str] = None
    reservant_phone: Optional[str] = None
    updated_at: datetime


class ReservationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    stake_id: int
    customer_name: str
    customer_phone: str
    payment_status: PaymentStatus
    amount_paid: Optional[Decimal] = None
    reserved_at: datetime
    paid_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    notes: Optional[str] = None


def _reserve(session: Session, stake_id: int, body: ReserveRequest) -> JSONResponse:
    outcome = submit_reservation(session, stake_id, body.customer_name, body.customer_phone)
    return JSONResponse(status_code=outcome.http_status, content=outcome.as_payload())


@router.get("/stakes/{stake_id}", response_model=StakeDetailResponse)
def get_stake(stake_id: int, session: Session = Depends(get_session)):
    return get_stake_or_404(session, stake_id)


@router.post("/stakes/{stake_id}/reserve")
def reserve(stake_id: int, body: ReserveRequest, session: Session = Depends(get_session)):
    """
    Reserve an available stake.

    Returns {success, kind, message, error, payment}. Status codes:
      200 reserved, 422 missing name/phone, 409 stake no longer available,
      404 unknown stake, 500 unexpected failure.
    """
    return _reserve(session, stake_id, body)


@router.post("/rpc/reserve_stake")
def reserve_stake_rpc(body: ReserveStakeRpcRequest, session: Session = Depends(get_session)):
    """reserve_stake(stake_id, customer_name, customer_phone) -> {success, message?, error?}"""
    return _reserve(session, body.stake_id, body)


def _admin_transition(
    action, session: Session, stake_id: int, notes: Optional[str], admin: Optional[AdminSession]
) -> Stake:
    try:
        return action(session, stake_id, notes=notes, is_admin=admin is not None)
    except AdminRequiredError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except StakeNotFoundError:
        raise HTTPException(status_code=404, detail="Stake not found")
    except StakeConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Admin %s failed for stake %s", action.__name__, stake_id)
        raise HTTPException(status_code=500, detail=f"Failed to update stake: {str(e)}")


@router.post("/stakes/{stake_id}/confirm", response_model=StakeDetailResponse)
def confirm(
    stake_id: int,
    body: Optional[AdminActionRequest] = None,
    session: Session = Depends(get_session),
    admin: AdminSession = Depends(require_admin),
):
    """Mark payment received (pending -> confirmed)"""
    stake = _admin_transition(confirm_payment, session, stake_id, body.notes if body else None, admin)
    logger.info(f"Stake {stake_id} confirmed by {admin.username}")
    return stake


@router.post("/stakes/{stake_id}/cancel", response_model=StakeDetailResponse)
def cancel(
    stake_id: int,
    body: Optional[AdminActionRequest] = None,
    session: Session = Depends(get_session),
    admin: AdminSession = Depends(require_admin),
):
    """Cancel a reservation (pending/confirmed -> available)"""
    stake = _admin_transition(cancel_reservation, session, stake_id, body.notes if body else None, admin)
    logger.info(f"Stake {stake_id} cancelled by {admin.username}")
    return stake


@router.get("/stakes/{stake_id}/reservations", response_model=List[ReservationResponse])
def list_reservations(
    stake_id: int,
    session: Session = Depends(get_session),
    admin: AdminSession = Depends(require_admin),
):
    """Reservation history of a stake, newest first"""
    get_stake_or_404(session, stake_id)
    return session.exec(
        select(Reservation).where(Reservation.stake_id == stake_id).order_by(Reservation.id.desc())
    ).all()
