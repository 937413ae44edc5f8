import logging
import os
import subprocess
from datetime import datetime

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.database import init_db
from app.routes import admin_auth, bird_types, dashboard, public, stakes, tournaments

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

APP_NAME = "Stake Reservation API"

app = FastAPI(title=APP_NAME)


def get_build_info():
    """BUILD_HASH from the deploy environment, else the git commit, else a startup timestamp"""
    deployed = os.getenv("BUILD_HASH", "").strip()
    if deployed:
        return deployed
    try:
        result = subprocess.run(
            ["git", "rev-parse", "--short", "HEAD"],
            cwd=os.path.dirname(os.path.dirname(__file__)),
            capture_output=True,
            text=True,
            timeout=2,
        )
        if result.returncode == 0:
            return result.stdout.strip()
    except Exception:
        logger.debug("git not available, falling back to build timestamp")

    return datetime.now().strftime("%Y%m%d-%H%M%S")


BUILD_HASH = get_build_info()

_cors_origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:5173",
]
_extra = os.getenv("CORS_ORIGINS", "")
if _extra:
    _cors_origins.extend(o.strip() for o in _extra.split(",") if o.strip())

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(tournaments.router, prefix="/api", tags=["tournaments"])
app.include_router(bird_types.router, prefix="/api", tags=["bird-types"])
app.include_router(stakes.router, prefix="/api", tags=["stakes"])

# Public read-only endpoints (no auth)
app.include_router(public.router, prefix="/api", tags=["public"])

# Admin session + dashboard (bearer token)
app.include_router(admin_auth.router, prefix="/api", tags=["admin"])
app.include_router(dashboard.router, prefix="/api", tags=["admin"])


@app.on_event("startup")
def on_startup():
    init_db()
    route_count = sum(1 for r in app.routes if getattr(r, "path", None))
    logger.info(f"{APP_NAME} started: {route_count} routes, build {BUILD_HASH}")


@app.get("/api/health")
def health_check():
    """Diagnostic endpoint to verify which code is running"""
    return {"app_name": APP_NAME, "build_hash": BUILD_HASH, "status": "healthy"}
