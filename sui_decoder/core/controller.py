import logging
from contextlib import aclosing
from typing import Any

from psygnal import Signal

from sui_decoder.core.logging import log_session_transition
from sui_decoder.core.normalizer import validate_identifier
from sui_decoder.core.types import Phase, SessionState
from sui_decoder.exceptions import DecoderError, InputValidationError, StreamDecodeWarning
from sui_decoder.explainer.streamer import ExplanationStreamer
from sui_decoder.ledger.client import LedgerClient

logger = logging.getLogger(__name__)

GENERIC_FAILURE_MESSAGE = "Failed to decode transaction. Please try again."


class SessionController:
    """Owns the decode session and drives it through its phases.

    The controller is the only writer of the session state. Each change replaces
    the current `SessionState` snapshot and emits `state_changed` with it, so
    presentation code can re-render from the signal alone.

    Phases: IDLE -> FETCHING_RECORD -> STREAMING_EXPLANATION -> DONE, with FAILED
    reachable from every non-terminal phase. A new `submit` supersedes whatever
    run is in flight; the older run stops touching the state and closes its
    explanation stream when the next fragment arrives.

    Attributes:
        state_changed: Signal emitted with the new SessionState after every transition.
    """

    state_changed = Signal(SessionState)

    def __init__(self, fetcher: LedgerClient, streamer: ExplanationStreamer) -> None:
        self._fetcher = fetcher
        self._streamer = streamer
        self._state = SessionState()
        self._generation = 0

    @property
    def state(self) -> SessionState:
        return self._state

    def _is_current(self, generation: int) -> bool:
        return generation == self._generation

    def _apply(self, generation: int, **changes: Any) -> bool:
        """Replace the state with a copy carrying `changes`, if `generation` is still current."""
        if not self._is_current(generation):
            return False

        previous = self._state
        self._state = SessionState.model_validate({**dict(previous), **changes})

        if self._state.phase != previous.phase:
            log_session_transition(
                self._state.identifier,
                previous.phase.value,
                self._state.phase.value,
                error=self._state.error_message,
            )
        self.state_changed.emit(self._state)
        return True

    def _fail(self, generation: int, message: str, **changes: Any) -> bool:
        return self._apply(
            generation,
            phase=Phase.FAILED,
            record=None,
            explanation="",
            error_message=message,
            **changes,
        )

    def _count_skipped_line(self, generation: int, warning: StreamDecodeWarning) -> None:
        self._apply(generation, skipped_lines=self._state.skipped_lines + 1)

    def update_input(self, raw: str) -> SessionState:
        """Record edited input. Editing clears a shown error and returns a failed session to IDLE."""
        changes: dict[str, Any] = {"identifier": raw}
        if self._state.phase == Phase.FAILED:
            changes.update(phase=Phase.IDLE, error_message=None)
        self._apply(self._generation, **changes)
        return self._state

    async def submit(self, raw: str | None = None) -> SessionState:
        """
        Decode a transaction: normalize the input, fetch the record, stream the explanation.

        Errors never propagate out of this method; they end the session in FAILED
        with a human-readable `error_message`.

        Args:
            raw: The pasted digest or URL. Defaults to the current identifier.

        Returns:
            The session state once this submission has finished (or been superseded).
        """
        self._generation += 1
        generation = self._generation
        raw_input = raw if raw is not None else self._state.identifier

        try:
            identifier = validate_identifier(raw_input)
        except InputValidationError as e:
            self._fail(generation, e.detail, identifier=raw_input)
            return self._state

        # Show the cleaned digest (e.g. extracted from a URL) before the fetch starts
        if identifier != raw_input:
            self._apply(generation, identifier=identifier)

        self._apply(
            generation,
            identifier=identifier,
            phase=Phase.FETCHING_RECORD,
            record=None,
            explanation="",
            error_message=None,
            skipped_lines=0,
        )

        try:
            record = await self._fetcher.fetch_record(identifier)
        except DecoderError as e:
            self._fail(generation, str(e.detail or e))
            return self._state
        except Exception as e:
            logger.exception(f"Unexpected error fetching transaction {identifier}: {e}")
            self._fail(generation, GENERIC_FAILURE_MESSAGE)
            return self._state

        if not self._apply(generation, phase=Phase.STREAMING_EXPLANATION, record=record):
            return self._state

        try:
            stream = self._streamer.stream_explanation(
                record,
                on_decode_warning=lambda warning: self._count_skipped_line(generation, warning),
            )
            async with aclosing(stream) as fragments:
                async for fragment in fragments:
                    if not self._is_current(generation):
                        logger.info(f"Submission for {identifier} superseded; closing explanation stream")
                        break
                    self._apply(generation, explanation=self._state.explanation + fragment)
        except DecoderError as e:
            self._fail(generation, str(e.detail or e))
            return self._state
        except Exception as e:
            logger.exception(f"Unexpected error streaming explanation for {identifier}: {e}")
            self._fail(generation, GENERIC_FAILURE_MESSAGE)
            return self._state

        self._apply(generation, phase=Phase.DONE)
        return self._state
