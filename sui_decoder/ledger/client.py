import logging
from typing import Any, Dict

import httpx

from sui_decoder.core.types import TransactionRecord
from sui_decoder.exceptions import (
    DecoderError,
    InvalidIdentifierFormatError,
    NetworkError,
    NotFoundError,
    RemoteError,
)

logger = logging.getLogger(__name__)

GET_TRANSACTION_METHOD = "sui_getTransactionBlock"

# JSON-RPC 2.0 "Invalid params"
INVALID_PARAMS_CODE = -32602

RESPONSE_OPTIONS: Dict[str, bool] = {
    "showInput": True,
    "showEffects": True,
    "showEvents": True,
    "showObjectChanges": True,
    "showBalanceChanges": True,
}

INVALID_FORMAT_MESSAGE = "Invalid Transaction Digest format. Ensure you are not pasting an Object ID or Address."
NOT_FOUND_MESSAGE = "Transaction not found. Please check the digest and try again."
GENERIC_RPC_ERROR_MESSAGE = "Failed to fetch transaction"


def log_record_summary(record: TransactionRecord) -> None:
    """Log the execution outcome and net gas of a fetched record.

    The record is returned unchanged whatever its effects hold, so a section the
    typed views cannot parse is reported here and otherwise left alone.
    """
    try:
        status = record.execution_status
        gas = record.gas_used
        summary = {
            "execution_status": status.status if status else None,
            "execution_error": status.error if status else None,
            "total_gas_cost": gas.total_gas_cost if gas else None,
            "epoch": record.epoch,
            "timestamp_ms": record.timestamp_ms,
        }
    except ValueError as e:
        logger.warning(f"Transaction {record.digest} has effects that could not be summarized: {e}")
        return

    logger.info(f"Received transaction {record.digest}", extra=summary)


def build_get_transaction_request(identifier: str, request_id: int = 1) -> Dict[str, Any]:
    """Build the JSON-RPC body for a maximal transaction lookup."""
    return {
        "jsonrpc": "2.0",
        "id": request_id,
        "method": GET_TRANSACTION_METHOD,
        "params": [identifier, dict(RESPONSE_OPTIONS)],
    }


class LedgerClient:
    """
    Fetches transaction records from a Sui full node over JSON-RPC.

    The endpoint may be the node itself or the same-origin `/api/sui` relay;
    both answer with the node's JSON body and status code. Every call is a single
    round trip: no retries and no caching.

    Attributes:
        http_client (httpx.AsyncClient): Shared client owned by the dependency container.
        rpc_url (str): JSON-RPC endpoint to POST to.
    """

    def __init__(self, http_client: httpx.AsyncClient, rpc_url: str) -> None:
        self.http_client = http_client
        self.rpc_url = rpc_url

    async def fetch_record(self, identifier: str) -> TransactionRecord:
        """
        Look up one transaction by digest.

        Args:
            identifier: A normalized transaction digest.

        Returns:
            The node's `result` object wrapped in a TransactionRecord, unchanged.

        Raises:
            NetworkError: The node could not be reached or returned a non-2xx status.
            InvalidIdentifierFormatError: The node rejected the parameters (code -32602).
            RemoteError: The node returned any other JSON-RPC error, or a body that is not JSON.
            NotFoundError: The response carried neither `result` nor `error`.
        """
        body = build_get_transaction_request(identifier)
        logger.info(f"Fetching transaction {identifier} from {self.rpc_url}")

        try:
            return await self._fetch(body)
        except DecoderError as e:
            logger.error(f"Sui RPC fetch error for {identifier}: {e.__class__.__name__}: {e}")
            raise

    async def _fetch(self, body: Dict[str, Any]) -> TransactionRecord:
        try:
            response = await self.http_client.post(
                self.rpc_url,
                json=body,
                headers={"Content-Type": "application/json"},
            )
        except httpx.HTTPError as e:
            raise NetworkError(f"RPC Error: could not reach the Sui node ({e.__class__.__name__})") from e

        if not response.is_success:
            raise NetworkError(
                f"RPC Error: {response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise RemoteError(
                "RPC Error: the Sui node returned a response that is not JSON",
                status_code=response.status_code,
                body=response.text,
            ) from e

        if not isinstance(data, dict):
            raise RemoteError("RPC Error: unexpected response shape", status_code=response.status_code)

        error = data.get("error")
        if error:
            if isinstance(error, dict) and error.get("code") == INVALID_PARAMS_CODE:
                raise InvalidIdentifierFormatError(INVALID_FORMAT_MESSAGE, status_code=response.status_code)
            message = error.get("message") if isinstance(error, dict) else str(error)
            raise RemoteError(message or GENERIC_RPC_ERROR_MESSAGE, status_code=response.status_code)

        result = data.get("result")
        if not result:
            raise NotFoundError(NOT_FOUND_MESSAGE)
        if not isinstance(result, dict):
            raise RemoteError("RPC Error: transaction result is not an object", status_code=response.status_code)

        record = TransactionRecord(data=result)
        log_record_summary(record)
        return record
