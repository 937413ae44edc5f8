from app.models.admin_session import AdminSession
from app.models.bird_type import BirdType
from app.models.reservation import PaymentStatus, Reservation
from app.models.stake import Stake, StakeStatus
from app.models.tournament import Tournament

__all__ = [
    "Tournament",
    "BirdType",
    "Stake",
    "StakeStatus",
    "Reservation",
    "PaymentStatus",
    "AdminSession",
]
