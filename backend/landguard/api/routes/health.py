"""Health check endpoints."""

from fastapi import APIRouter, status
from pydantic import BaseModel
from sqlalchemy import text

from landguard.config import get_settings
from landguard.infrastructure import database

router = APIRouter()


class HealthResponse(BaseModel):
    status: str
    version: str


class ReadyResponse(BaseModel):
    status: str
    database: str


@router.get("/health", response_model=HealthResponse)
async def health():
    settings = get_settings()
    return HealthResponse(status="healthy", version=settings.app_version)


@router.get("/health/ready", response_model=ReadyResponse, status_code=status.HTTP_200_OK)
async def ready():
    db_status = "disconnected"

    if database.engine:
        try:
            async with database.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            db_status = "connected"
        except Exception:
            db_status = "error"

    overall = "ready" if db_status == "connected" else "not_ready"
    return ReadyResponse(status=overall, database=db_status)
