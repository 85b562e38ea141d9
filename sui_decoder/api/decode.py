"""Decode endpoint: runs one session and streams its progress as SSE."""

import asyncio
import logging
from typing import Any, AsyncIterator, Dict, Optional

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, Field

from sui_decoder.core.controller import GENERIC_FAILURE_MESSAGE, SessionController
from sui_decoder.core.dependencies import get_session_controller
from sui_decoder.core.types import Phase, SessionState
from sui_decoder.utils.streaming import format_sse_chunk

logger = logging.getLogger(__name__)

router = APIRouter()

STATE_EVENT = "state"
FRAGMENT_EVENT = "fragment"

# Sent once (record) or incrementally (explanation), never with every state event
INCREMENTAL_FIELDS = {"record", "explanation"}


class DecodeRequest(BaseModel):
    digest: str = Field(description="Transaction digest or explorer URL")


def state_payload(state: SessionState, include_record: bool = False) -> Dict[str, Any]:
    payload = state.model_dump(mode="json", exclude=INCREMENTAL_FIELDS)
    if include_record and state.record is not None:
        payload["record"] = state.record.model_dump(mode="json")
    return payload


def session_event(previous: Optional[SessionState], current: SessionState) -> str:
    """Encode the change from `previous` to `current` as one SSE event.

    Explanation growth while streaming becomes a `fragment` event holding only the
    new text. Every other change becomes a `state` event; the record is attached
    only on the transition into STREAMING_EXPLANATION.
    """
    streaming = current.phase == Phase.STREAMING_EXPLANATION
    was_streaming = previous is not None and previous.phase == Phase.STREAMING_EXPLANATION

    if streaming and was_streaming and len(current.explanation) > len(previous.explanation):
        content = current.explanation[len(previous.explanation) :]
        return format_sse_chunk({"content": content}, event=FRAGMENT_EVENT)

    payload = state_payload(current, include_record=streaming and not was_streaming)
    return format_sse_chunk(payload, event=STATE_EVENT)


async def session_events(controller: SessionController, digest: str) -> AsyncIterator[str]:
    """Submit `digest` and yield the resulting session changes as SSE events.

    The sequence ends after the terminal state event (DONE or FAILED). If the
    client goes away the submission task is cancelled, which closes any open
    upstream stream.
    """
    queue: asyncio.Queue[Optional[str]] = asyncio.Queue()
    previous: Optional[SessionState] = None

    def on_state_changed(state: SessionState) -> None:
        nonlocal previous
        queue.put_nowait(session_event(previous, state))
        previous = state

    controller.state_changed.connect(on_state_changed)
    task = asyncio.create_task(controller.submit(digest))
    task.add_done_callback(lambda _: queue.put_nowait(None))

    try:
        while (event := await queue.get()) is not None:
            yield event
        try:
            await task
        except Exception as e:
            logger.exception(f"Decode of {digest!r} ended with an unexpected error: {e}")
            failed = SessionState(identifier=digest, phase=Phase.FAILED, error_message=GENERIC_FAILURE_MESSAGE)
            yield format_sse_chunk(state_payload(failed), event=STATE_EVENT)
    finally:
        controller.state_changed.disconnect(on_state_changed)
        if not task.done():
            logger.info("Decode stream closed by client; cancelling submission")
            task.cancel()


@router.post("/api/decode")
async def decode_transaction(
    body: DecodeRequest,
    controller: SessionController = Depends(get_session_controller),
) -> StreamingResponse:
    """
    Decode one transaction.

    Responds with `text/event-stream` carrying two event types:

    - `state`: `identifier`, `phase`, `error_message` and `skipped_lines`. The
      first STREAMING_EXPLANATION state also carries `record`.
    - `fragment`: `{"content": str}`, the next piece of the explanation.

    Clients append fragments in order; the explanation and record are discarded
    when a FAILED state arrives.
    """
    logger.info("Decode request received", extra={"digest_length": len(body.digest)})
    return StreamingResponse(
        session_events(controller, body.digest),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",  # Disable Nginx buffering
        },
    )
