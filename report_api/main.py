"""
FastAPI application for the reporting API.

Registers the route table from ``routes.py`` and exposes auto-generated
OpenAPI documentation at /docs.
"""

import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import Settings, settings
from .data_access import ReportingDataProvider
from .errors import ApiError, RequestTimeoutError
from .log import banner, setup_logging
from .models import ErrorResponse
from .query_builder import Query
from .routes import ROUTES, Route

setup_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

HEALTH_MESSAGE = "✅ API do Grupo 2025 está online!"

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Missing or invalid parameter"},
    404: {"model": ErrorResponse, "description": "No matching data"},
    500: {"model": ErrorResponse, "description": "Database failure"},
    504: {"model": ErrorResponse, "description": "Request timed out"},
}


def error_response(error: ApiError) -> JSONResponse:
    return JSONResponse(
        status_code=error.status_code,
        content=ErrorResponse.build(error.code, error.message),
    )


def make_endpoint(route: Route):
    """
    Build the FastAPI endpoint for one route table entry.

    The endpoint is the error boundary: client errors become their envelope,
    anything else is logged and answered with an opaque 500.
    """
    async def endpoint(request: Request):
        data = request.app.state.data
        timeout = request.app.state.settings.REQUEST_TIMEOUT

        async def run_query(query: Query):
            return await run_in_threadpool(data.query, query.sql, query.params)

        try:
            params = route.extract(request.query_params)
            payload = await asyncio.wait_for(route.execute(run_query, params), timeout)
            return JSONResponse(content=payload)
        except ApiError as e:
            return error_response(e)
        except asyncio.TimeoutError:
            logger.warning(f"{route.path} timed out after {timeout}s")
            return error_response(RequestTimeoutError())
        except Exception as e:
            logger.exception(f"Error in {route.path}: {e}")
            return error_response(ApiError())

    endpoint.__name__ = "get_" + route.path.strip("/").replace("/", "_")
    return endpoint


def create_app(provider: ReportingDataProvider = None, config: Settings = None) -> FastAPI:
    """
    Build the application around an explicitly constructed data provider.

    Args:
        provider: Anything with ``open()``, ``close()`` and
            ``query(sql, params)``; defaults to a ReportingDataProvider
        config: Settings (defaults to the module-level settings)
    """
    config = config or settings
    provider = provider or ReportingDataProvider(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await run_in_threadpool(provider.open)
        banner(config.API_TITLE, [
            ("Version", config.API_VERSION),
            ("Listen", f"{config.HOST}:{config.PORT}"),
            ("Pool", f"{config.DB_POOL_MIN}-{config.DB_POOL_MAX} connections"),
            ("SSL mode", config.DB_SSLMODE),
            ("Request timeout", f"{config.REQUEST_TIMEOUT}s"),
        ])
        try:
            yield
        finally:
            await run_in_threadpool(provider.close)

    app = FastAPI(
        title=config.API_TITLE,
        description=config.API_DESCRIPTION,
        version=config.API_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.data = provider
    app.state.settings = config

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    # ----------------------------------------------------------------
    # Health
    # ----------------------------------------------------------------

    @app.get("/", response_class=PlainTextResponse, tags=["Health"])
    def root():
        """API health check."""
        return HEALTH_MESSAGE

    # ----------------------------------------------------------------
    # Route table
    # ----------------------------------------------------------------

    for route in ROUTES:
        app.add_api_route(
            route.path,
            make_endpoint(route),
            methods=["GET"],
            summary=route.summary,
            tags=[route.tag],
            response_model=route.response_model,
            responses=ERROR_RESPONSES,
            openapi_extra={"parameters": route.openapi_parameters()},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            body = ErrorResponse.build("not_found", "endpoint não encontrado")
        elif exc.status_code == 405:
            body = ErrorResponse.build("method_not_allowed", "método não permitido")
        else:
            body = ErrorResponse.build("http_error", str(exc.detail))
        return JSONResponse(
            status_code=exc.status_code,
            content=body,
            headers=getattr(exc, "headers", None),
        )

    return app


app = create_app()


def run():
    import uvicorn
    uvicorn.run(
        app,
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower()
    )


if __name__ == "__main__":
    run()
