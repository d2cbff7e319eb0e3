"""
app entrypoint

run locally with:
    uvicorn careswap.main:app --reload

create_app() builds a fresh app with its own roster state. tests call it
directly so every test gets an isolated roster and repository.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from careswap.api.router import api_router
from careswap.clients.backend import HttpSwapRequestRepository
from careswap.clients.repository import InMemorySwapRequestRepository, SwapRequestRepository
from careswap.core.config import Settings, settings as default_settings
from careswap.core.errors import CareSwapError, status_code_for
from careswap.core.logger import configure_logging
from careswap.core.state import build_state


def build_repository(settings: Settings) -> SwapRequestRepository:
    if settings.backend_url:
        return HttpSwapRequestRepository(
            base_url=settings.backend_url,
            timeout=settings.backend_timeout,
            token=settings.backend_token,
        )
    return InMemorySwapRequestRepository()


async def careswap_error_handler(request: Request, exc: CareSwapError) -> JSONResponse:
    content = {"detail": str(exc), "retryable": exc.retryable}
    errors = getattr(exc, "errors", None)
    if errors:
        content["errors"] = errors
    return JSONResponse(status_code=status_code_for(exc), content=content)


def create_app(
    settings: Settings = default_settings,
    repository: Optional[SwapRequestRepository] = None,
) -> FastAPI:
    logger = configure_logging(settings.log_level, settings.log_file)
    repository = repository or build_repository(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info("%s starting (%s)", settings.app_name, settings.environment)
        yield
        if isinstance(repository, HttpSwapRequestRepository):
            await repository.aclose()

    app = FastAPI(title=settings.app_name, lifespan=lifespan)
    app.state.careswap = build_state(repository)
    app.add_exception_handler(CareSwapError, careswap_error_handler)
    app.include_router(api_router)
    return app


app = create_app()
