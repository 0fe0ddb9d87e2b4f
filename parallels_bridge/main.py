"""parallels-bridge API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map BridgeError → structured JSON responses
    - Database and tool dispatcher initialized on startup via lifespan context manager

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Dispatcher lives on app.state and reaches routes through a dependency,
      so tests swap it without patching modules
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from parallels_bridge import __version__
from parallels_bridge.api.error_handlers import register_error_handlers
from parallels_bridge.api.routes import health, tools
from parallels_bridge.config import get_settings
from parallels_bridge.infrastructure.database import init_db
from parallels_bridge.infrastructure.observability import setup_logging
from parallels_bridge.infrastructure.prlctl_executor import PrlctlExecutor
from parallels_bridge.services.tool_dispatch import build_dispatcher

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    manager = init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    await manager.create_all()
    executor = PrlctlExecutor(
        binary=settings.prlctl_binary,
        timeout_seconds=settings.prlctl_timeout_seconds,
        max_output_bytes=settings.prlctl_max_output_bytes,
    )
    app.state.dispatcher = build_dispatcher(
        executor,
        screenshot_dir=settings.screenshot_dir,
        boot_wait_seconds=settings.vm_boot_wait_seconds,
    )
    logger.info("parallels-bridge API started")
    yield
    await manager.dispose()
    logger.info("parallels-bridge API shutting down")


app = FastAPI(
    title="parallels-bridge API", version=__version__, lifespan=lifespan,
)

# Routes: explicit registration
app.include_router(health.router)
app.include_router(tools.router)

register_error_handlers(app)


def run() -> None:
    """Console entry point: serve the HTTP surface with uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run("parallels_bridge.main:app", host=settings.api_host, port=settings.api_port)
