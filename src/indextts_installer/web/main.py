"""FastAPI application entry point for the IndexTTS host service."""

from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from indextts_installer import __version__
from indextts_installer.config import InstallerSettings, load_settings
from indextts_installer.exceptions import ConfigError
from indextts_installer.i18n_manager import set_locale
from indextts_installer.utils.logger import get_logger, initialize

from .api.install import router as install_router
from .api.system import router as system_router
from .core.state import HostState, host_state

logger = get_logger("indextts.web")


def create_app(
    settings: InstallerSettings | None = None, state: HostState | None = None
) -> FastAPI:
    """Create and configure the host service application."""
    state = state or host_state
    if settings is not None:
        state.configure(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting IndexTTS host service")
        yield
        logger.info("Shutting down IndexTTS host service")
        await state.cleanup()

    app = FastAPI(
        title="IndexTTS Host Service",
        description="Host command interface for the IndexTTS installer",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.host = state

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(system_router, prefix="/api/v1/system", tags=["system"])
    app.include_router(install_router, prefix="/api/v1/install", tags=["install"])

    @app.get("/health")
    async def health_check():
        """Health check endpoint, also used by clients to probe the host."""
        return {"status": "ok", "version": __version__}

    return app


def start_host():
    """Entry point for the indextts-host command."""
    import argparse

    parser = argparse.ArgumentParser(description="IndexTTS installer host service")
    parser.add_argument("--config", help="Path to installer settings YAML")
    parser.add_argument("--host", help="Host to bind to")
    parser.add_argument("--port", type=int, help="Port to bind to")
    args = parser.parse_args()

    try:
        settings = load_settings(args.config)
    except ConfigError as e:
        parser.error(str(e))
    initialize(level=settings.log_level, log_dir=settings.log_dir)
    set_locale(settings.locale)

    bind_host = args.host or settings.bind_host
    bind_port = args.port or settings.bind_port

    logger.info(f"Starting host service on {bind_host}:{bind_port}")
    uvicorn.run(create_app(settings), host=bind_host, port=bind_port)


if __name__ == "__main__":
    start_host()
