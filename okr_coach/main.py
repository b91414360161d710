"""
OKR Coach API application.

Wires the session, analysis and health routers onto one FastAPI app. The
database schema is applied in the lifespan hook.

Run with: uvicorn okr_coach.main:app --reload
"""

from contextlib import asynccontextmanager
import time
import uuid

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from okr_coach.core.config import settings
from okr_coach.core.logging import configure_logging, get_logger, bind_context, clear_context
from okr_coach.persistence.database import init_database
from okr_coach.api.routes import analysis, health, sessions
from okr_coach.api.exception_handlers import setup_exception_handlers

log = get_logger(__name__)

APP_NAME = "OKR Coach"
APP_VERSION = "0.1.0"
REQUEST_ID_HEADER = "X-Request-ID"


class CorrelationIDMiddleware(BaseHTTPMiddleware):
    """Tag every request with a request_id and log how long it took.

    A caller-supplied X-Request-ID is kept so traces can span services;
    otherwise a UUID4 is issued. The ID is bound into the structlog context
    for the duration of the request and echoed on the response.
    """

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        bind_context(request_id=request_id)
        started = time.monotonic()

        try:
            response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = request_id
            log.debug(
                "request_completed",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                latency_ms=round((time.monotonic() - started) * 1000, 1),
            )
            return response
        finally:
            clear_context()


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    log.info(
        "application_starting",
        debug=settings.debug,
        database_path=str(settings.database_path),
        config_dir=str(settings.config_dir),
    )

    await init_database()
    log.info("application_started")

    yield

    log.info("application_shutting_down")


def create_app() -> FastAPI:
    application = FastAPI(
        title=APP_NAME,
        description="Rule-based OKR coaching: anti-pattern detection, quality scoring and phase guidance",
        version=APP_VERSION,
        lifespan=lifespan,
        debug=settings.debug,
    )

    if settings.debug:
        application.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )
    application.add_middleware(CorrelationIDMiddleware)
    setup_exception_handlers(application)

    application.include_router(health.router, tags=["system"])
    application.include_router(sessions.router)
    application.include_router(analysis.router)

    @application.get("/")
    async def root():
        return {"name": APP_NAME, "version": APP_VERSION, "status": "running"}

    return application


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "okr_coach.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
