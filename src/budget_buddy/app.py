from collections.abc import AsyncGenerator, Awaitable, Callable
from contextlib import asynccontextmanager
from time import perf_counter

from fastapi import FastAPI, Request, Response

from budget_buddy.api.routes import export, transactions
from budget_buddy.core import settings
from budget_buddy.domain.formatting import format_duration
from budget_buddy.integration.base import TransactionSource
from budget_buddy.logger import ACCESS_LOGGER, get_logger, setup_logging
from budget_buddy.services.transaction_data import create_source

logger = get_logger(__name__)
access_logger = get_logger(ACCESS_LOGGER)


def create_app(source: TransactionSource | None = None) -> FastAPI:
    setup_logging()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        logger.info("Initializing services...")
        settings.log_environment()

        active_source = source or create_source()
        app.state.source = active_source

        logger.info("Services initialized (source=%s).", active_source.name)
        yield
        await active_source.aclose()
        logger.info("Service shutting down.")

    app = FastAPI(title="Budget Buddy", lifespan=lifespan)
    if source is not None:
        app.state.source = source

    @app.middleware("http")
    async def log_requests(
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        start = perf_counter()
        response = await call_next(request)
        access_logger.info(
            "%s %s -> %d (%s)",
            request.method,
            request.url.path,
            response.status_code,
            format_duration(perf_counter() - start),
        )
        return response

    app.include_router(transactions.router)
    app.include_router(export.router)

    return app


app = create_app()
