"""FastAPI application factory."""

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from gold_monitor.app_logging import configure_logging
from gold_monitor.config import parse_origins
from gold_monitor.containers import AppContainer
from gold_monitor.domain.errors import InvalidParameter, PriceMonitorError
from gold_monitor.domain.prices import SUPPORTED_METALS, snapshot_payload
from gold_monitor.domain.schedule import duration_until_next_midnight
from gold_monitor.services.conversion import unit_label
from gold_monitor.services.quotes import PriceQuery


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container
    app.add_middleware(
        CORSMiddleware,
        allow_origins=parse_origins(container.settings.cors_allow_origins),
        allow_methods=["GET", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    @app.exception_handler(PriceMonitorError)
    async def price_error_handler(
        request: Request, exc: PriceMonitorError
    ) -> JSONResponse:
        logger.warning("Request to %s failed: %s", request.url.path, exc)
        return _error_response(exc.status_code, str(exc))

    @app.exception_handler(Exception)
    async def unexpected_error_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        logger.exception("Unhandled error on %s", request.url.path)
        return _error_response(500, str(exc) or "Failed to fetch gold prices")

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/price")
    async def price(  # noqa: PLR0913
        request: Request,
        metal: str = "XAU",
        currency: str = "USD",
        unit: str = "oz",
        type_: str = Query(default="current", alias="type"),
        date: str | None = None,
        days: str | None = None,
    ) -> JSONResponse:
        """Return current, historical, or ranged prices."""
        state_container: AppContainer = request.app.state.container
        query = PriceQuery(
            metal=metal,
            currency=currency,
            unit=unit,
            type=type_,
            date=date,
            days=days,
        )
        result = await state_container.price_handler.handle(query)
        return JSONResponse(status_code=result.status_code, content=result.body)

    @app.get("/price/multi")
    async def multi_currency_price(
        request: Request, metal: str = "XAU"
    ) -> dict[str, object]:
        """Return the current price in USD, EUR and GBP, omitting failures."""
        state_container: AppContainer = request.app.state.container
        symbol = metal.strip().upper()
        if symbol not in SUPPORTED_METALS:
            raise InvalidParameter(f"Unsupported metal: {metal}")
        snapshots = await state_container.price_provider.get_multi_currency_price(
            symbol
        )
        return {
            "success": True,
            "data": [
                snapshot_payload(snapshot, unit_label(snapshot.unit))
                for snapshot in snapshots
            ],
            "timestamp": _now_ms(),
        }

    @app.get("/news")
    async def news(request: Request) -> dict[str, object]:
        """Return recent gold market news."""
        state_container: AppContainer = request.app.state.container
        return await state_container.news_service.get_news()

    @app.get("/schedule")
    async def schedule(request: Request) -> dict[str, object]:
        """Return the time left until the next daily refresh."""
        state_container: AppContainer = request.app.state.container
        offset = state_container.settings.refresh_utc_offset_hours
        remaining = duration_until_next_midnight(offset)
        return {
            "nextRefreshIn": int(remaining.total_seconds()),
            "utcOffsetHours": offset,
        }

    return app


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": message, "timestamp": _now_ms()},
    )


def _now_ms() -> int:
    return int(time.time() * 1000)
