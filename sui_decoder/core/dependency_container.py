# Dependency Injection Container.

import httpx

from sui_decoder.core.controller import SessionController
from sui_decoder.explainer.streamer import ExplanationStreamer
from sui_decoder.ledger.client import LedgerClient
from sui_decoder.settings import Settings


class DependencyContainer:
    """Holds shared dependencies for the application.

    Every outbound call (ledger node, text-generation service, relay upstream) goes
    through the single `http_client` held here, which keeps external dependencies in
    one place and makes them easy to mock for testing.
    """

    def __init__(self, settings: Settings, http_client: httpx.AsyncClient) -> None:
        """
        Initializes the container.

        Args:
            settings: Application settings.
            http_client: Shared asynchronous HTTP client.
        """
        self.settings = settings
        self.http_client = http_client

    def create_ledger_client(self) -> LedgerClient:
        return LedgerClient(self.http_client, self.settings.get_sui_rpc_url())

    def create_explanation_streamer(self) -> ExplanationStreamer:
        """
        Creates a streamer for the configured OpenAI-compatible endpoint.

        Raises:
            ValueError: If the API key or base URL is missing or invalid.
        """
        return ExplanationStreamer(
            self.http_client,
            base_url=self.settings.get_explainer_base_url(),
            api_key=self.settings.get_explainer_api_key(),
            model=self.settings.get_explainer_model(),
            temperature=self.settings.get_explainer_temperature(),
            max_tokens=self.settings.get_explainer_max_tokens(),
        )

    def create_session_controller(self) -> SessionController:
        return SessionController(self.create_ledger_client(), self.create_explanation_streamer())
