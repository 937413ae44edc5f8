"""
Admin dashboard: aggregate counts/revenue and CSV export of stakes.
"""
import csv
import io
import logging
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from pydantic import BaseModel
from sqlmodel import Session, select

from app.database import get_session
from app.models.admin_session import AdminSession
from app.models.bird_type import BirdType
from app.models.stake import Stake
from app.services.dashboard_stats import get_dashboard_stats
from app.services.stake_grid import LABELS
from app.services.stake_lifecycle import coerce_status
from app.utils.admin_guards import require_admin
from app.utils.tournament_guards import get_active_tournament, get_tournament_or_404

logger = logging.getLogger(__name__)

router = APIRouter()

EXPORT_COLUMNS = ["bird_type", "number", "status", "status_label", "reservant_name", "reservant_phone"]


class DashboardStatsResponse(BaseModel):
    tournament_id: Optional[int] = None
    tournament_name: Optional[str] = None
    total_stakes: int
    available: int
    reserved: int
    confirmed: int
    total_revenue: Decimal


class DashboardRpcResponse(BaseModel):
    total_stakes: int
    available: int
    reserved: int
    confirmed: int
    total_revenue: Decimal


@router.get("/admin/dashboard", response_model=DashboardStatsResponse)
def dashboard(
    tournament_id: Optional[int] = Query(default=None),
    session: Session = Depends(get_session),
    admin: AdminSession = Depends(require_admin),
):
    """Totals per status and confirmed revenue for a tournament (default: the active one)"""
    if tournament_id is not None:
        get_tournament_or_404(session, tournament_id)
    return DashboardStatsResponse(**get_dashboard_stats(session, tournament_id).as_dict())


@router.get("/rpc/get_dashboard_stats", response_model=DashboardRpcResponse)
def get_dashboard_stats_rpc(session: Session = Depends(get_session), admin: AdminSession = Depends(require_admin)):
    """get_dashboard_stats() -> {total_stakes, available, reserved, confirmed, total_revenue}"""
    stats = get_dashboard_stats(session)
    return DashboardRpcResponse(
        total_stakes=stats.total_stakes,
        available=stats.available,
        reserved=stats.reserved,
        confirmed=stats.confirmed,
        total_revenue=stats.total_revenue,
    )


@router.get("/admin/stakes/export.csv")
def export_stakes_csv(session: Session = Depends(get_session), admin: AdminSession = Depends(require_admin)):
    """All stakes of the active tournament as CSV, grouped by bird type"""
    tournament = get_active_tournament(session)
    if tournament is None:
        raise HTTPException(status_code=404, detail="No active tournament")

    rows = session.exec(
        select(BirdType.name, Stake)
        .join(Stake, Stake.bird_type_id == BirdType.id)
        .where(BirdType.tournament_id == tournament.id)
        .order_by(BirdType.name, Stake.number)
    ).all()

    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(EXPORT_COLUMNS)
    for bird_type_name, stake in rows:
        status = coerce_status(stake.status)
        writer.writerow(
            [
                bird_type_name,
                stake.number,
                status.value,
                LABELS[status],
                stake.reservant_name or "",
                stake.reservant_phone or "",
            ]
        )

    logger.info(f"Exported {len(rows)} stakes of tournament {tournament.id} for {admin.username}")
    filename = f"stakes-tournament-{tournament.id}.csv"
    return Response(
        content=buffer.getvalue(),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
