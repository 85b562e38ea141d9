import logging

import httpx
from fastapi import Depends, HTTPException, Request, status

from sui_decoder.core.controller import SessionController
from sui_decoder.core.dependency_container import DependencyContainer
from sui_decoder.settings import Settings

logger = logging.getLogger(__name__)

# --- Dependency Providers --- #


def get_dependencies(request: Request) -> DependencyContainer:
    """Dependency to retrieve the DependencyContainer from application state."""
    dependencies: DependencyContainer | None = getattr(request.app.state, "dependencies", None)
    if dependencies is None:
        logger.critical(
            "DependencyContainer not found in application state. "
            "This indicates a critical setup error in the application lifespan."
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error: Application dependencies not initialized.",
        )
    return dependencies


def get_session_controller(
    dependencies: DependencyContainer = Depends(get_dependencies),
) -> SessionController:
    """Provide a fresh SessionController for one decode request."""
    try:
        return dependencies.create_session_controller()
    except ValueError as e:
        logger.error(f"Cannot build session controller: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Internal server error: {e}",
        )


async def initialize_app_dependencies(app_settings: Settings) -> DependencyContainer:
    """Initialize and configure core application dependencies.

    Args:
        app_settings: The application settings instance.

    Returns:
        A DependencyContainer instance populated with initialized dependencies.

    Raises:
        RuntimeError: If the Dependency Container cannot be created.
    """
    logger.info("Initializing core application dependencies...")

    timeout = httpx.Timeout(5.0, connect=5.0, read=60.0, write=5.0)
    http_client = httpx.AsyncClient(timeout=timeout)
    logger.info("HTTP Client initialized for DependencyContainer.")

    try:
        dependencies = DependencyContainer(settings=app_settings, http_client=http_client)
        logger.info("Dependency Container created successfully.")
        return dependencies
    except Exception as container_exc:
        logger.critical(f"Failed to create Dependency Container instance: {container_exc}", exc_info=True)
        await http_client.aclose()
        logger.info("HTTP client closed due to Dependency Container instantiation failure.")
        raise RuntimeError(f"Failed to create Dependency Container instance: {container_exc}") from container_exc
