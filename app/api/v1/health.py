"""Health check endpoint with account-store connectivity check."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.config import Settings, get_settings
from app.core.database import check_db_connected, get_db
from app.schemas.health import HealthResponse

router = APIRouter()


@router.get("/", response_model=HealthResponse)
def get_health(
    db: Annotated[Session, Depends(get_db)],
    app_settings: Annotated[Settings, Depends(get_settings)],
) -> HealthResponse:
    """Service status and database connectivity, for load balancers and monitoring."""
    return HealthResponse(
        status="ok",
        environment=app_settings.APP_ENV,
        database="connected" if check_db_connected(db) else "disconnected",
    )
