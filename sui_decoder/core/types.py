"""Data model shared by the fetcher, streamer and session controller.

Example `sui_getTransactionBlock` result (abridged):
{
  "digest": "9XFneskU8tW7UxQf7tE5qFRfcN4FadtC2Z3HAZkgeETd",
  "timestampMs": "1700000000000",
  "effects": {
    "executedEpoch": "245",
    "status": {"status": "success"},
    "gasUsed": {
      "computationCost": "750000",
      "storageCost": "1976000",
      "storageRebate": "978120",
      "nonRefundableStorageFee": "9880"
    }
  },
  "events": [...],
  "objectChanges": [...],
  "balanceChanges": [...]
}
"""

import copy
from enum import Enum
from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt, PrivateAttr, model_serializer, model_validator


class Phase(str, Enum):
    """Lifecycle of a single decode request."""

    IDLE = "IDLE"
    FETCHING_RECORD = "FETCHING_RECORD"
    STREAMING_EXPLANATION = "STREAMING_EXPLANATION"
    DONE = "DONE"
    FAILED = "FAILED"


RECORD_PHASES = frozenset({Phase.STREAMING_EXPLANATION, Phase.DONE})


class ExecutionStatus(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: Literal["success", "failure"] = Field()
    error: Optional[str] = Field(default=None)

    @property
    def succeeded(self) -> bool:
        return self.status == "success"


class GasCostSummary(BaseModel):
    """Gas accounting for one transaction, in MIST.

    The node sends each amount as a decimal string; pydantic coerces them.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    computation_cost: NonNegativeInt = Field(alias="computationCost")
    storage_cost: NonNegativeInt = Field(alias="storageCost")
    storage_rebate: NonNegativeInt = Field(alias="storageRebate")
    non_refundable_storage_fee: NonNegativeInt = Field(default=0, alias="nonRefundableStorageFee")

    @property
    def total_gas_cost(self) -> int:
        """Net amount charged: computation plus storage minus the rebate."""
        return self.computation_cost + self.storage_cost - self.storage_rebate


class TransactionRecord(BaseModel):
    """An immutable ledger transaction record.

    The node's `result` object is deep-copied in on construction and deep-copied
    out of `data`, so no holder of a record (or of a snapshot containing one) can
    change what another holder sees. The properties below are typed views over
    the parts the application reads directly.
    """

    model_config = ConfigDict(frozen=True)

    _payload: Dict[str, Any] = PrivateAttr(default_factory=dict)

    def __init__(self, data: Dict[str, Any]) -> None:
        if not isinstance(data, dict):
            raise TypeError(f"Transaction data must be a dict, got {type(data).__name__}")
        super().__init__()
        self._payload = copy.deepcopy(data)

    @model_serializer
    def _serialize(self) -> Dict[str, Any]:
        return {"data": self.data}

    @property
    def data(self) -> Dict[str, Any]:
        """A copy of the node's `result` object, exactly as received."""
        return copy.deepcopy(self._payload)

    @property
    def digest(self) -> Optional[str]:
        return self._payload.get("digest")

    @property
    def effects(self) -> Dict[str, Any]:
        return copy.deepcopy(self._payload.get("effects") or {})

    @property
    def execution_status(self) -> Optional[ExecutionStatus]:
        status = self.effects.get("status")
        if not status:
            return None
        return ExecutionStatus.model_validate(status)

    @property
    def gas_used(self) -> Optional[GasCostSummary]:
        gas = self.effects.get("gasUsed")
        if not gas:
            return None
        return GasCostSummary.model_validate(gas)

    @property
    def epoch(self) -> Optional[int]:
        epoch = self.effects.get("executedEpoch")
        return int(epoch) if epoch is not None else None

    @property
    def timestamp_ms(self) -> Optional[int]:
        timestamp = self._payload.get("timestampMs")
        return int(timestamp) if timestamp is not None else None


class NormalizedInput(BaseModel):
    """Result of cleaning a pasted digest or URL."""

    model_config = ConfigDict(frozen=True)

    identifier: str = Field()
    error: Optional[str] = Field(default=None)


class SessionState(BaseModel):
    """Immutable snapshot of the single decode session.

    Snapshots are replaced wholesale by the controller; consumers never mutate them.
    """

    model_config = ConfigDict(frozen=True)

    identifier: str = Field(default="")
    record: Optional[TransactionRecord] = Field(default=None)
    explanation: str = Field(default="")
    phase: Phase = Field(default=Phase.IDLE)
    error_message: Optional[str] = Field(default=None)
    skipped_lines: int = Field(default=0)

    @model_validator(mode="after")
    def _check_phase_invariants(self) -> "SessionState":
        if self.record is not None and self.phase not in RECORD_PHASES:
            raise ValueError(f"record must be absent in phase {self.phase.value}")
        if self.explanation and self.phase not in RECORD_PHASES:
            raise ValueError(f"explanation must be empty in phase {self.phase.value}")
        if self.error_message is not None and self.phase != Phase.FAILED:
            raise ValueError(f"error_message must be absent in phase {self.phase.value}")
        return self
