import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from lnacademy.api.errors import register_exception_handlers
from lnacademy.api.routes import auth, books, courses, products, users
from lnacademy.core.config import Settings, get_settings
from lnacademy.core.database import Base, build_engine, build_session_factory, get_db
from lnacademy.core.security import TokenService

# Imported so every table is registered on Base.metadata before create_all
from lnacademy.models import course_content, product, user  # noqa: F401

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup: create missing tables and check the database is reachable.
    In production, use migrations (Alembic) instead of create_all.
    """
    engine = app.state.engine
    Base.metadata.create_all(bind=engine)
    logger.info("Database schema ready")
    yield
    engine.dispose()
    logger.info("Database connections closed")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Composition root: builds the engine, session factory and token issuer once
    and hangs them on app.state, where the request dependencies pick them up.
    """
    settings = settings or get_settings()
    logging.basicConfig(level=settings.LOG_LEVEL)

    app = FastAPI(
        title="LNAcademy API",
        description="Authentication and product catalog for the LNAcademy marketplace",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.engine = build_engine(settings.DATABASE_URL)
    app.state.session_factory = build_session_factory(app.state.engine)
    app.state.token_service = TokenService(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_cors_origins(),
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # All routes are prefixed with /api
    app.include_router(auth.router, prefix="/api")
    app.include_router(users.router, prefix="/api")
    app.include_router(products.router, prefix="/api")
    app.include_router(courses.router, prefix="/api")
    app.include_router(books.router, prefix="/api")

    @app.get("/health")
    def health(db: Session = Depends(get_db)):
        """Liveness and readiness, including database connectivity"""
        try:
            db.execute(text("SELECT 1"))
        except SQLAlchemyError:
            logger.exception("Health check failed: database unreachable")
            return JSONResponse(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                content={"status": "unhealthy", "database": "unreachable"},
            )
        return {"status": "healthy", "database": "ok"}

    return app
