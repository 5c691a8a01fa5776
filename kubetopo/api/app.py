"""FastAPI application factory for KubeTopo.

Usage::

    from kubetopo.api.app import create_app

    app = create_app(config=config)

The factory is used by both ``kubetopo serve`` and the unit tests.
"""

from __future__ import annotations

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from kubetopo.api.routes import router
from kubetopo.api.schemas import ErrorResponse
from kubetopo.graph.builder import TopologyGraphBuilder
from kubetopo.graph.network import NetworkTopologyBuilder
from kubetopo.models.config import KubeTopoConfig

_log = structlog.get_logger(component="api.app")

_API_PREFIX = "/api/v1"


def create_app(
    config: KubeTopoConfig | None = None,
    builder: TopologyGraphBuilder | None = None,
    network_builder: NetworkTopologyBuilder | None = None,
) -> FastAPI:
    """Create and configure the KubeTopo FastAPI application.

    Args:
        config:          KubeTopoConfig. Supplies the default cluster name and
                         layout limits; defaults when omitted.
        builder:         Graph builder to use; a default one when omitted.
        network_builder: Network view builder; a default one when omitted.

    Returns:
        Configured FastAPI application, ready to be served by uvicorn.
    """
    from kubetopo import __version__

    app = FastAPI(
        title="KubeTopo",
        summary="Kubernetes resource topology API",
        version=__version__,
        description=(
            "KubeTopo turns a snapshot of Kubernetes resources into a typed "
            "relationship graph and positions it with one of four layouts."
        ),
        docs_url="/api/v1/docs",
        redoc_url="/api/v1/redoc",
        openapi_url="/api/v1/openapi.json",
    )

    app.state.config = config or KubeTopoConfig()
    app.state.builder = builder or TopologyGraphBuilder()
    app.state.network_builder = network_builder or NetworkTopologyBuilder()

    app.include_router(router, prefix=_API_PREFIX)

    # -----------------------------------------------------------------------
    # Exception handlers
    # -----------------------------------------------------------------------

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        _request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        """Map Pydantic validation errors to our error envelope."""
        errors = exc.errors()
        detail = ""
        if errors:
            locs = errors[0].get("loc", ())
            field = ".".join(str(loc) for loc in locs[1:]) if len(locs) > 1 else ""
            detail = f"{field}: {errors[0].get('msg', '')}" if field else str(errors[0].get("msg", ""))

        return JSONResponse(
            status_code=400,
            content=ErrorResponse(error="INVALID_REQUEST", detail=detail).model_dump(),
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(
        request: Request,
        exc: Exception,
    ) -> JSONResponse:
        """Catch-all for unhandled exceptions; never expose stack traces."""
        _log.error(
            "unhandled_exception",
            path=str(request.url.path),
            method=request.method,
            error=str(exc),
        )
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(
                error="INTERNAL_ERROR",
                detail="An unexpected error occurred.",
            ).model_dump(),
        )

    return app
