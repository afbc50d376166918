"""
Main FastAPI application entry point.
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from dailyquiz.api.admin import router as admin_router
from dailyquiz.api.answer import router as answer_router
from dailyquiz.api.auth import router as auth_router
from dailyquiz.api.leaderboard import router as leaderboard_router
from dailyquiz.api.profile import router as profile_router
from dailyquiz.api.today import router as today_router
from dailyquiz.core.config import Settings, get_settings
from dailyquiz.core.database import build_engine, build_session_factory
from dailyquiz.core.errors import install_exception_handlers
from dailyquiz.models.orm import Base
from dailyquiz.services.messaging import ChatMessenger

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = app.state.settings
    logger.info("Starting %s %s (%s)", settings.APP_NAME, settings.APP_VERSION, settings.ENVIRONMENT)
    if settings.CREATE_TABLES:
        Base.metadata.create_all(app.state.engine)
        logger.info("Database tables ensured")
    yield
    logger.info("Shutting down %s", settings.APP_NAME)
    app.state.messenger.close()
    app.state.engine.dispose()


def create_app(settings: Optional[Settings] = None, messenger: Optional[ChatMessenger] = None) -> FastAPI:
    settings = settings or get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    app = FastAPI(title=settings.APP_NAME, version=settings.APP_VERSION, lifespan=lifespan)
    app.state.settings = settings
    app.state.engine = build_engine(settings)
    app.state.session_factory = build_session_factory(app.state.engine)
    app.state.messenger = messenger or ChatMessenger.from_settings(settings)

    app.add_middleware(CORSMiddleware, allow_origins=settings.cors_origins(), allow_credentials=True,
                       allow_methods=["*"], allow_headers=["*"])
    install_exception_handlers(app)

    app.include_router(auth_router, prefix="/v1/auth", tags=["auth"])
    app.include_router(today_router, prefix="/v1/today", tags=["daily"])
    app.include_router(answer_router, prefix="/v1/answer", tags=["daily"])
    app.include_router(profile_router, prefix="/v1/profile", tags=["profile"])
    app.include_router(leaderboard_router, prefix="/v1/leaderboard", tags=["leaderboard"])
    app.include_router(admin_router, prefix="/v1/admin", tags=["admin"])

    @app.get("/health")
    def health(): return {"status": "ok"}

    return app


app = create_app()
