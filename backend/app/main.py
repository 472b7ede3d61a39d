from fastapi import FastAPI
from contextlib import asynccontextmanager

from backend.app.config import AppConfig
from backend.app.api.routes_reformulate import router as reformulate_router
from backend.app.api.routes_database import router as database_router
from backend.app.dependencies import get_reformulation_service


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifecycle hooks.

    Loads the database and initializes the matcher once at startup.
    """
    get_reformulation_service()

    yield


def create_app(config: AppConfig) -> FastAPI:
    app = FastAPI(
        title=config.app_name,
        lifespan=lifespan,
    )

    app.include_router(
        reformulate_router,
        prefix=f"{config.api_prefix}/reformulate",
        tags=["reformulate"],
    )

    app.include_router(
        database_router,
        prefix=f"{config.api_prefix}/database",
        tags=["database"],
    )

    return app


config = AppConfig()
app = create_app(config)
