import os
from typing import Any, Dict
from unittest.mock import MagicMock

import httpx
import pytest
from sui_decoder.core.dependency_container import DependencyContainer
from sui_decoder.core.types import TransactionRecord
from sui_decoder.explainer.streamer import ExplanationStreamer
from sui_decoder.ledger.client import LedgerClient
from sui_decoder.settings import Settings

from tests.helpers.mock_http import EXPLAINER_BASE_URL, RPC_URL, VALID_DIGEST, Handler

SETTINGS_ENV_VARS = [
    "SUI_RPC_URL",
    "SUI_RPC_UPSTREAM_URL",
    "EXPLAINER_API_KEY",
    "GROQ_API_KEY",
    "EXPLAINER_BASE_URL",
    "EXPLAINER_MODEL",
    "EXPLAINER_TEMPERATURE",
    "EXPLAINER_MAX_TOKENS",
    "LOG_LEVEL",
    "SUI_DECODER_HOST",
    "SUI_DECODER_PORT",
    "SUI_DECODER_RELOAD",
]


@pytest.fixture(autouse=True)
def isolated_environment():
    """AUTOUSE: Removes settings variables a developer .env may have loaded, restoring them afterwards."""
    original_environ = os.environ.copy()
    for name in SETTINGS_ENV_VARS:
        os.environ.pop(name, None)

    yield

    os.environ.clear()
    os.environ.update(original_environ)


# --- Sample data ---


@pytest.fixture
def transaction_result() -> Dict[str, Any]:
    """An abridged `sui_getTransactionBlock` result."""
    return {
        "digest": VALID_DIGEST,
        "timestampMs": "1700000000000",
        "transaction": {"data": {"sender": "0xabc"}},
        "effects": {
            "executedEpoch": "245",
            "status": {"status": "success"},
            "gasUsed": {
                "computationCost": "750000",
                "storageCost": "1976000",
                "storageRebate": "978120",
                "nonRefundableStorageFee": "9880",
            },
        },
        "events": [],
        "objectChanges": [{"type": "mutated", "objectId": "0x5"}],
        "balanceChanges": [{"owner": {"AddressOwner": "0xabc"}, "coinType": "0x2::sui::SUI", "amount": "-1747880"}],
    }


@pytest.fixture
def transaction_record(transaction_result) -> TransactionRecord:
    return TransactionRecord(data=transaction_result)


# --- Mock HTTP ---


@pytest.fixture
def make_http_client():
    """Factory for httpx.AsyncClient instances backed by httpx.MockTransport."""

    def _make(handler: Handler) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))

    return _make


@pytest.fixture
def make_ledger_client(make_http_client):
    def _make(handler: Handler) -> LedgerClient:
        return LedgerClient(make_http_client(handler), RPC_URL)

    return _make


@pytest.fixture
def make_streamer(make_http_client):
    def _make(handler: Handler) -> ExplanationStreamer:
        return ExplanationStreamer(
            make_http_client(handler),
            base_url=EXPLAINER_BASE_URL,
            api_key="test-key",
            model="test-model",
        )

    return _make


@pytest.fixture
def mock_settings() -> MagicMock:
    """Provides a mock Settings instance pointing at the test endpoints."""
    settings = MagicMock(spec=Settings)
    settings.get_sui_rpc_url.return_value = RPC_URL
    settings.get_sui_rpc_upstream_url.return_value = RPC_URL
    settings.get_explainer_base_url.return_value = EXPLAINER_BASE_URL
    settings.get_explainer_api_key.return_value = "test-key"
    settings.get_explainer_model.return_value = "test-model"
    settings.get_explainer_temperature.return_value = 0.6
    settings.get_explainer_max_tokens.return_value = 1024
    return settings


@pytest.fixture
def make_container(mock_settings, make_http_client):
    def _make(handler: Handler) -> DependencyContainer:
        return DependencyContainer(settings=mock_settings, http_client=make_http_client(handler))

    return _make
