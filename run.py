"""
Script to run the Sui Decoder server with hot reload.
"""

import os
from pathlib import Path

import uvicorn


def main():
    """Run the server with hot reload enabled."""
    # Load environment variables from .env file
    env_path = Path(__file__).parent / ".env"
    if env_path.exists():
        from dotenv import load_dotenv

        load_dotenv(env_path)

    host = os.getenv("SUI_DECODER_HOST", "0.0.0.0")
    port = int(os.getenv("SUI_DECODER_PORT", "8000"))
    reload = os.getenv("SUI_DECODER_RELOAD", "true").lower() == "true"

    uvicorn.run(
        "sui_decoder.main:app",
        host=host,
        port=port,
        reload=reload,
        reload_dirs=["sui_decoder"],  # Only watch our package directory
        log_level="debug",
    )


if __name__ == "__main__":
    main()
