"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from landguard.config import get_settings
from landguard.api.routes import fraud, health, listings, parcels
from landguard.infrastructure.database import init_db, close_db


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_db()
    yield
    await close_db()


def create_app() -> FastAPI:
    settings = get_settings()

    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Geospatial integrity and fraud-signal engine for land listings",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health.router, tags=["Health"])
    app.include_router(parcels.router, prefix="/api/v1/parcels", tags=["Parcels"])
    app.include_router(listings.router, prefix="/api/v1/listings", tags=["Listings"])
    app.include_router(fraud.router, prefix="/api/v1/fraud", tags=["Fraud"])

    return app


app = create_app()
