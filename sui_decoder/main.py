import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from sui_decoder.api.decode import router as decode_router
from sui_decoder.api.relay import router as relay_router
from sui_decoder.core.dependencies import initialize_app_dependencies
from sui_decoder.core.dependency_container import DependencyContainer
from sui_decoder.core.logging import setup_logging
from sui_decoder.settings import Settings

setup_logging()


logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage the lifespan of the application resources.

    Initializes the dependency container (and its shared HTTP client) on startup
    and closes the client on shutdown.

    Args:
        app: The FastAPI application instance.

    Yields:
        None: After startup procedures are complete, allowing the application to run.

    Raises:
        RuntimeError: If application dependencies fail to initialize during startup.
    """
    logger.info("Application startup sequence initiated.")

    app_settings = Settings()
    logger.info("Settings loaded.")

    initialized_dependencies: DependencyContainer | None = None
    try:
        initialized_dependencies = await initialize_app_dependencies(app_settings)
        app.state.dependencies = initialized_dependencies
        logger.info("Core application dependencies initialized and stored in app state.")
    except Exception as init_exc:
        logger.critical(f"Fatal error during application dependency initialization: {init_exc}", exc_info=True)
        raise RuntimeError(
            f"Application startup failed due to dependency initialization error: {init_exc}"
        ) from init_exc

    yield  # Application runs here

    logger.info("Application shutdown sequence initiated.")
    await initialized_dependencies.http_client.aclose()
    logger.info("HTTP Client from DependencyContainer closed.")
    logger.info("Application shutdown complete.")


app = FastAPI(
    title="Sui Decoder",
    description="Fetch a Sui transaction and stream a plain-English explanation of it.",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health", tags=["General"], status_code=200)
async def health_check():
    """Perform a basic health check.

    Returns:
        A dictionary indicating the application status.
    """
    return {"status": "ok"}


app.include_router(relay_router)
app.include_router(decode_router)


@app.get("/")
async def read_root():
    return {"message": "Sui Decoder is running."}


if __name__ == "__main__":
    import uvicorn

    dev_settings = Settings()
    uvicorn.run(
        "sui_decoder.main:app",
        host=dev_settings.get_app_host(),
        port=dev_settings.get_app_port(),
        reload=dev_settings.get_app_reload(),
        log_level=dev_settings.get_log_level().lower(),
    )
