"""
Main entry point for running the Sui Decoder server.
"""

import uvicorn

from sui_decoder.settings import Settings


def main():
    """Run the server with settings taken from the environment (.env is loaded by Settings)."""
    settings = Settings()
    uvicorn.run(
        "sui_decoder.main:app",
        host=settings.get_app_host(),
        port=settings.get_app_port(),
        reload=settings.get_app_reload(),
        reload_dirs=["sui_decoder"] if settings.get_app_reload() else None,
        log_level=settings.get_log_level().lower(),
    )


if __name__ == "__main__":
    main()
