"""Main application entry point."""

from contextlib import asynccontextmanager
from pathlib import Path

import httpx
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.api.error_handlers import http_exception_handler, validation_exception_handler
from src.api.routes import router
from src.services.coingecko_client import CoinGeckoClient
from src.services.dashboard_session import DashboardSession
from src.services.refresh_scheduler import RefreshScheduler
from src.utils.config import Config, config as default_config
from src.utils.event_store import EventStore
from src.utils.logger import StructuredLogger
from src.utils.metrics import MetricsCalculator

logger = StructuredLogger("App")


def create_app(
    app_config: Config | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
    load_on_startup: bool = True,
) -> FastAPI:
    """
    Build the dashboard application.

    Args:
        app_config: Configuration (defaults to the environment-derived global)
        transport: Optional httpx transport for the CoinGecko client
        load_on_startup: Start the initial asset and chart fetch in the lifespan
    """
    app_config = app_config or default_config

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Manage application lifespan events."""
        # Startup
        try:
            app_config.validate()
        except ValueError as e:
            logger.error("Configuration error", exception=e)
            raise

        client = CoinGeckoClient(app_config.api, transport=transport)
        event_store = EventStore()
        session = DashboardSession(client, app_config.dashboard, event_store=event_store)
        scheduler = RefreshScheduler(session, app_config.dashboard)

        app.state.session = session
        app.state.event_store = event_store
        app.state.metrics_calculator = MetricsCalculator(event_store)

        if load_on_startup:
            session.start()
        scheduler.start()
        yield
        # Shutdown
        scheduler.shutdown()
        await session.aclose()
        await client.aclose()

    app = FastAPI(
        title="Crypto Dashboard",
        description="CoinGecko market data for a browser dashboard",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "PUT", "POST"],
        allow_headers=["*"],
    )

    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)

    app.include_router(router, prefix="/api", tags=["dashboard"])

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy"}

    # Serve the built presentation layer, if present
    frontend_dist = Path(__file__).parent / "frontend" / "dist"
    if frontend_dist.exists():
        app.mount("/", StaticFiles(directory=str(frontend_dist), html=True), name="static")

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
