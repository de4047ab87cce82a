import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from fastapi.responses import JSONResponse

from cachewarmer.api.payloads import error_payload
from cachewarmer.api.routers import create_systems_router, create_trigger_router

logger = logging.getLogger(__name__)


def create_app(container) -> FastAPI:
    """Build the FastAPI application from a configured container.

    Errors raised as HTTPException are reported in-band as
    `{"status": "error", "msg": ...}` with the exception's status code.
    """
    env = container.config()
    scheduler = container.scheduler_service()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        scheduler.start()
        try:
            yield
        finally:
            scheduler.shutdown(wait=False)

    app = FastAPI(title="Cache Warmer", lifespan=lifespan)

    @app.exception_handler(HTTPException)
    async def http_error(request, exc: HTTPException):
        return JSONResponse(status_code=exc.status_code, content=error_payload(str(exc.detail)))

    app.include_router(
        create_trigger_router(
            env["TRIGGER_PATH"],
            settings_provider=container.settings,
            machine_factory=container.state_machine_factory(),
            renderer=container.page_renderer(),
        )
    )
    app.include_router(create_systems_router(env))
    return app
