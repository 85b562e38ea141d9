import os
from typing import Optional
from urllib.parse import urlparse

from dotenv import load_dotenv

# Load .env file variables into environment
load_dotenv(verbose=True)


class Settings:
    """Application configuration settings loaded from environment variables."""

    # --- Ledger Settings ---
    SUI_RPC_URL: str = "https://fullnode.mainnet.sui.io:443"
    SUI_RPC_UPSTREAM_URL: str = "https://mainnet.sui.rpcpool.com"

    # --- Explainer Settings ---
    EXPLAINER_BASE_URL: str = "https://api.groq.com/openai/v1"
    EXPLAINER_MODEL: str = "llama-3.3-70b-versatile"
    EXPLAINER_TEMPERATURE: float = 0.6
    EXPLAINER_MAX_TOKENS: int = 1024
    EXPLAINER_API_KEY: Optional[str] = None

    @staticmethod
    def _validated_url(env_var: str, default: str) -> str:
        url = os.getenv(env_var, default)
        parsed = urlparse(url)
        if not all([parsed.scheme, parsed.netloc]):
            raise ValueError(f"Invalid {env_var} format: {url}")
        return url

    # --- Ledger Getters ---
    def get_sui_rpc_url(self) -> str:
        """Returns the JSON-RPC endpoint used for transaction lookups (node or relay)."""
        return self._validated_url("SUI_RPC_URL", self.SUI_RPC_URL)

    def get_sui_rpc_upstream_url(self) -> str:
        """Returns the node the /api/sui relay forwards to."""
        return self._validated_url("SUI_RPC_UPSTREAM_URL", self.SUI_RPC_UPSTREAM_URL)

    # --- Explainer Getters ---
    def get_explainer_api_key(self) -> str | None:
        """Returns the text-generation API key, if set. GROQ_API_KEY is accepted as a fallback."""
        return os.getenv("EXPLAINER_API_KEY") or os.getenv("GROQ_API_KEY")

    def get_explainer_base_url(self) -> str:
        """Returns the base URL of the OpenAI-compatible API (without /chat/completions)."""
        return self._validated_url("EXPLAINER_BASE_URL", self.EXPLAINER_BASE_URL).rstrip("/")

    def get_explainer_model(self) -> str:
        return os.getenv("EXPLAINER_MODEL", self.EXPLAINER_MODEL)

    def get_explainer_temperature(self) -> float:
        value = os.getenv("EXPLAINER_TEMPERATURE")
        if value is None:
            return self.EXPLAINER_TEMPERATURE
        try:
            return float(value)
        except ValueError:
            raise ValueError("EXPLAINER_TEMPERATURE environment variable must be a number.")

    def get_explainer_max_tokens(self) -> int:
        value = os.getenv("EXPLAINER_MAX_TOKENS")
        if value is None:
            return self.EXPLAINER_MAX_TOKENS
        try:
            return int(value)
        except ValueError:
            raise ValueError("EXPLAINER_MAX_TOKENS environment variable must be an integer.")

    # --- Logging Settings ---
    def get_log_level(self, default: str = "INFO") -> str:
        """Gets the configured log level, defaulting if not set."""
        return os.getenv("LOG_LEVEL", default).upper()

    # --- Server Settings ---
    def get_app_host(self) -> str:
        return os.getenv("SUI_DECODER_HOST", "0.0.0.0")  # nosec B104

    def get_app_port(self) -> int:
        """Returns the port for uvicorn as an integer."""
        port_str = os.getenv("SUI_DECODER_PORT", "8000")
        try:
            return int(port_str)
        except ValueError:
            raise ValueError("SUI_DECODER_PORT environment variable must be an integer.")

    def get_app_reload(self) -> bool:
        return os.getenv("SUI_DECODER_RELOAD", "false").lower() == "true"
