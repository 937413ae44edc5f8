# Force SQLModel table registration at test discovery time
# This ensures all models are registered before any test database creation
from app.models.admin_session import AdminSession  # noqa: F401
from app.models.bird_type import BirdType  # noqa: F401
from app.models.reservation import Reservation  # noqa: F401
from app.models.stake import Stake  # noqa: F401
from app.models.tournament import Tournament  # noqa: F401
