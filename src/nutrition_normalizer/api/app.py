"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from nutrition_normalizer.adapters.upstream_client import UpstreamSourceError
from nutrition_normalizer.app_logging import configure_logging
from nutrition_normalizer.containers import AppContainer
from nutrition_normalizer.domain.entries import UnrecognizedSourceShapeError
from nutrition_normalizer.services.normalization import UnknownSourceError


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(logging.DEBUG if container.settings.debug else logging.INFO)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET"],
        allow_headers=["Content-Type"],
        allow_credentials=True,
        max_age=86400,
    )

    @app.exception_handler(UnknownSourceError)
    async def unknown_source(request: Request, exc: UnknownSourceError) -> JSONResponse:
        return _error_response(status.HTTP_400_BAD_REQUEST, "Source Not Found")

    @app.exception_handler(UnrecognizedSourceShapeError)
    async def unrecognized_shape(
        request: Request, exc: UnrecognizedSourceShapeError
    ) -> JSONResponse:
        return _error_response(
            status.HTTP_422_UNPROCESSABLE_ENTITY, "Unrecognized Source Shape"
        )

    @app.exception_handler(UpstreamSourceError)
    async def upstream_unavailable(
        request: Request, exc: UpstreamSourceError
    ) -> JSONResponse:
        logger.error("Upstream fetch failed on %s: %s", request.url.path, exc)
        return _error_response(
            status.HTTP_502_BAD_GATEWAY, "Upstream Source Unavailable"
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/{source}")
    async def normalized_entries(source: str, request: Request) -> dict[str, object]:
        """Return the normalized entries for one source."""
        state_container: AppContainer = request.app.state.container
        entries = await state_container.normalization_service.normalize_source(source)
        return {"data": [entry.to_dict() for entry in entries]}

    return app


def _error_response(status_code: int, status_text: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"status": status_code, "statusText": status_text},
    )
