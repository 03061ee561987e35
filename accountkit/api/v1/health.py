"""Health check endpoint with account store connectivity."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from accountkit import __version__
from accountkit.core.config import settings
from accountkit.core.database import check_db_connected, get_db
from accountkit.schemas.health import HealthResponse

router = APIRouter()


@router.get("/", response_model=HealthResponse)
def get_health(db: Session = Depends(get_db)) -> HealthResponse:
    """
    Return service health and whether the account database answers.
    Reports "degraded" when the database is unreachable.
    """
    connected = check_db_connected(db)
    return HealthResponse(
        status="ok" if connected else "degraded",
        version=__version__,
        environment=settings.APP_ENV,
        database="connected" if connected else "disconnected",
    )
