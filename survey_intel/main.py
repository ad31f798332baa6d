# survey_intel/main.py
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from survey_intel.core.config import settings
from survey_intel.core.logging import configure_logging
from survey_intel.db.session import engine
from survey_intel.db.base import Base

# Import models so SQLAlchemy knows about them (for create_all)
from survey_intel.models.user import User  # noqa: F401
from survey_intel.models.survey import Survey, Question  # noqa: F401
from survey_intel.models.response import Response, Answer  # noqa: F401
from survey_intel.models.analysis import Analysis  # noqa: F401

# Routers
from survey_intel.api.routes import router as api_router
from survey_intel.api.survey_routes import router as survey_router
from survey_intel.api.ai_routes import router as ai_router

logger = logging.getLogger(__name__)


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    where = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    return f"{where}: {first.get('msg')}" if where else str(first.get("msg"))


def jsonable_errors(exc: RequestValidationError) -> list:
    # ctx may carry exception objects that JSON can't encode
    return [{k: v for k, v in e.items() if k in ("loc", "msg", "type")} for e in exc.errors()]


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={"detail": _validation_message(exc), "errors": jsonable_errors(exc)},
    )


async def handle_database_error(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error("database error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(title=settings.APP_NAME)

    @app.get("/health")
    def health():
        return {"status": "ok"}

    # CORS
    origins = [o.strip() for o in settings.BACKEND_CORS_ORIGINS.split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins or ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(SQLAlchemyError, handle_database_error)

    # Ensure tables exist
    Base.metadata.create_all(bind=engine)

    # API routes
    app.include_router(api_router)       # /api/register, /api/login, /api/user
    app.include_router(survey_router)    # /api/surveys/*
    app.include_router(ai_router)        # /api/surveys/{id}/analyze, /api/ai/*

    logger.info("%s started (env=%s)", settings.APP_NAME, settings.APP_ENV)
    return app


app = create_app()
