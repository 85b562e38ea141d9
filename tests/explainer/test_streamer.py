import json
from typing import AsyncIterator

import httpx
import pytest
from sui_decoder.exceptions import NetworkError, RemoteError, StreamDecodeWarning
from sui_decoder.explainer.streamer import ExplanationStreamer

from tests.helpers.mock_http import COMPLETIONS_URL, EXPLAINER_BASE_URL, event_stream, sse_body


async def collect(stream: AsyncIterator[str]) -> list[str]:
    return [fragment async for fragment in stream]


class TrackingStream(httpx.AsyncByteStream):
    """Response body that records whether it was closed."""

    def __init__(self, chunks: list[bytes]):
        self.chunks = chunks
        self.closed = False

    async def __aiter__(self):
        for chunk in self.chunks:
            yield chunk

    async def aclose(self) -> None:
        self.closed = True


class TestStreamExplanation:
    """Tests for ExplanationStreamer.stream_explanation."""

    async def test_two_event_body_yields_fragments_in_order(self, make_streamer, transaction_record):
        body = (
            b'data: {"choices":[{"delta":{"content":"Hel"}}]}\n'
            b'data: {"choices":[{"delta":{"content":"lo"}}]}\n'
            b"data: [DONE]\n"
        )
        streamer = make_streamer(event_stream(body))

        fragments = await collect(streamer.stream_explanation(transaction_record))

        assert fragments == ["Hel", "lo"]

    async def test_malformed_line_is_skipped(self, make_streamer, transaction_record):
        body = b'data: {"choices":[{"delta":\ndata: {"choices":[{"delta":{"content":"ok"}}]}\n'
        warnings: list[StreamDecodeWarning] = []
        streamer = make_streamer(event_stream(body))

        fragments = await collect(streamer.stream_explanation(transaction_record, on_decode_warning=warnings.append))

        assert fragments == ["ok"]
        assert len(warnings) == 1
        assert warnings[0].line.startswith('data: {"choices"')

    async def test_terminator_ends_the_sequence(self, make_streamer, transaction_record):
        body = sse_body("before") + b'data: {"choices":[{"delta":{"content":"after"}}]}\n\n'
        streamer = make_streamer(event_stream(body))

        assert await collect(streamer.stream_explanation(transaction_record)) == ["before"]

    async def test_transport_close_without_terminator_ends_the_sequence(self, make_streamer, transaction_record):
        streamer = make_streamer(event_stream(sse_body("a", "b", done=False)))

        assert await collect(streamer.stream_explanation(transaction_record)) == ["a", "b"]

    async def test_lines_without_content_are_ignored(self, make_streamer, transaction_record):
        body = (
            b": keep-alive\n"
            b"event: message\n"
            b'data: {"choices":[{"delta":{"role":"assistant"}}]}\n'
            b'data: {"choices":[{"delta":{"content":""}}]}\n'
            b'data: {"choices":[]}\n'
            b'data: {"choices":[{"delta":{},"finish_reason":"stop"}]}\n'
            b'data: {"choices":[{"delta":{"content":"text"}}]}\n'
            b"data: [DONE]\n"
        )
        streamer = make_streamer(event_stream(body))

        assert await collect(streamer.stream_explanation(transaction_record)) == ["text"]

    async def test_lines_split_across_chunks_are_reassembled(self, make_streamer, transaction_record):
        body = sse_body("Hel", "lo")
        middle = len(body) // 2
        stream = TrackingStream([body[:middle], body[middle:]])
        streamer = make_streamer(lambda request: httpx.Response(200, stream=stream))

        assert await collect(streamer.stream_explanation(transaction_record)) == ["Hel", "lo"]

    async def test_non_2xx_raises_remote_error_before_yielding(self, make_streamer, transaction_record):
        streamer = make_streamer(event_stream(b'{"error":"invalid api key"}', status_code=401))

        with pytest.raises(RemoteError) as exc_info:
            await collect(streamer.stream_explanation(transaction_record))

        assert exc_info.value.status_code == 401
        assert "401" in str(exc_info.value)
        assert "invalid api key" in str(exc_info.value)

    async def test_connection_failure_raises_network_error(self, make_streamer, transaction_record):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("no route", request=request)

        streamer = make_streamer(handler)

        with pytest.raises(NetworkError):
            await collect(streamer.stream_explanation(transaction_record))

    async def test_sends_streaming_chat_request(self, make_streamer, transaction_record):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return event_stream(sse_body("x"))(request)

        streamer = make_streamer(handler)
        await collect(streamer.stream_explanation(transaction_record))

        assert len(seen) == 1
        request = seen[0]
        assert str(request.url) == COMPLETIONS_URL
        assert request.headers["authorization"] == "Bearer test-key"
        payload = json.loads(request.content)
        assert payload["model"] == "test-model"
        assert payload["stream"] is True
        assert payload["temperature"] == 0.6
        assert payload["max_tokens"] == 1024
        assert payload["messages"][0]["role"] == "user"
        assert transaction_record.digest in payload["messages"][0]["content"]

    async def test_response_is_closed_when_consumer_stops_early(self, make_streamer, transaction_record):
        stream = TrackingStream([sse_body("one", "two", "three")])
        streamer = make_streamer(lambda request: httpx.Response(200, stream=stream))

        fragments = streamer.stream_explanation(transaction_record)
        assert await fragments.__anext__() == "one"
        await fragments.aclose()

        assert stream.closed

    async def test_response_is_closed_after_completion(self, make_streamer, transaction_record):
        stream = TrackingStream([sse_body("one")])
        streamer = make_streamer(lambda request: httpx.Response(200, stream=stream))

        await collect(streamer.stream_explanation(transaction_record))

        assert stream.closed

    async def test_is_lazy(self, make_streamer, transaction_record):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return event_stream(sse_body("x"))(request)

        streamer = make_streamer(handler)
        stream = streamer.stream_explanation(transaction_record)

        assert calls == []
        await collect(stream)
        assert len(calls) == 1


class TestExplanationStreamerInit:
    def test_missing_api_key_is_rejected(self):
        with pytest.raises(ValueError, match="API key"):
            ExplanationStreamer(httpx.AsyncClient(), base_url=EXPLAINER_BASE_URL, api_key=None, model="m")

    def test_missing_base_url_is_rejected(self):
        with pytest.raises(ValueError, match="base URL"):
            ExplanationStreamer(httpx.AsyncClient(), base_url="", api_key="k", model="m")

    def test_trailing_slash_is_dropped(self):
        streamer = ExplanationStreamer(httpx.AsyncClient(), base_url=f"{EXPLAINER_BASE_URL}/", api_key="k", model="m")

        assert streamer.completions_url == COMPLETIONS_URL
