"""Health check endpoint reporting account/permission store connectivity."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from retailhub import __version__
from retailhub.core.config import Settings, get_settings
from retailhub.core.database import check_db_connected, get_db
from retailhub.schemas.health import HealthResponse

router = APIRouter()


@router.get("", response_model=HealthResponse)
def get_health(
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> HealthResponse:
    """Used by load balancers and monitoring. Always 200; inspect `status`."""
    connected = check_db_connected(db)
    return HealthResponse(
        status="ok" if connected else "degraded",
        environment=settings.APP_ENV,
        version=__version__,
        database="connected" if connected else "disconnected",
    )
