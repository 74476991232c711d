"""Main web application entry point."""

import asyncio
import time
import uuid
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager, suppress

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from licita_brasil.providers.config import Config, ConfigProvider
from licita_brasil.providers.logging import LoggingProvider
from licita_brasil.web.dependencies import ServiceContainer, build_container
from licita_brasil.web.errors import register_error_handlers
from licita_brasil.web.rate_limit import limiter
from licita_brasil.web.routers import auth, companies, health, municipalities, procurements
from slowapi.middleware import SlowAPIMiddleware

REQUEST_ID_HEADER = "X-Request-ID"


async def purge_company_cache(container: ServiceContainer, interval_seconds: float) -> None:
    """Drops expired company lookups from the cache, forever.

    Args:
        container: The container holding the cache.
        interval_seconds: How long to sleep between sweeps.
    """
    logger = LoggingProvider().get_logger()
    while True:
        await asyncio.sleep(interval_seconds)
        removed = container.company_cache.purge_expired()
        if removed:
            logger.info(f"Purged {removed} expired company lookups.")


def create_app(config: Config | None = None, container: ServiceContainer | None = None) -> FastAPI:
    """Builds the FastAPI application and wires its collaborators.

    Args:
        config: The application configuration. Loaded from the environment
            when omitted.
        container: Prebuilt collaborators. Built from `config` when omitted.

    Returns:
        The configured application.
    """
    config = config or ConfigProvider.get_config()
    container = container or build_container(config)
    logger = LoggingProvider().get_logger()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        sweeper = asyncio.create_task(purge_company_cache(container, config.COMPANY_CACHE_TTL_SECONDS))
        try:
            yield
        finally:
            sweeper.cancel()
            with suppress(asyncio.CancelledError):
                await sweeper
            container.close()

    app = FastAPI(title="Licita Brasil", lifespan=lifespan)
    app.state.container = container
    app.state.limiter = limiter
    limiter.enabled = config.RATE_LIMIT_ENABLED

    app.add_middleware(SlowAPIMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def bind_request_id(request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
        correlation_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        request.state.correlation_id = correlation_id
        started = time.monotonic()
        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = correlation_id
        with LoggingProvider().set_correlation_id(correlation_id):
            logger.info(
                f"{request.method} {request.url.path} -> {response.status_code} "
                f"in {(time.monotonic() - started) * 1000:.0f}ms"
            )
        return response

    register_error_handlers(app)

    app.include_router(health.router)
    app.include_router(auth.router)
    app.include_router(companies.router)
    app.include_router(municipalities.router)
    app.include_router(procurements.router)

    return app


app = create_app()
