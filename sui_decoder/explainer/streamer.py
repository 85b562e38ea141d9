import json
import logging
from typing import AsyncIterator, Callable, Optional

import httpx

from sui_decoder.core.types import TransactionRecord
from sui_decoder.exceptions import NetworkError, RemoteError, StreamDecodeWarning
from sui_decoder.explainer.prompt import build_prompt
from sui_decoder.explainer.request import ChatCompletionRequest, ChatMessage
from sui_decoder.utils.streaming import extract_delta_content, is_done_sentinel, parse_sse_data_line

logger = logging.getLogger(__name__)

DecodeWarningCallback = Callable[[StreamDecodeWarning], None]


class ExplanationStreamer:
    """
    Streams a plain-English explanation of a transaction from an OpenAI-compatible API.

    Attributes:
        http_client (httpx.AsyncClient): Shared client owned by the dependency container.
        base_url (str): API base URL, e.g. "https://api.groq.com/openai/v1".
        api_key (str): Bearer token for the text-generation service.
        model (str): Chat model name.
        temperature (float): Sampling temperature.
        max_tokens (int): Upper bound on generated tokens.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        base_url: str,
        api_key: str | None,
        model: str,
        temperature: float = 0.6,
        max_tokens: int = 1024,
    ) -> None:
        if not base_url:
            raise ValueError("Explainer base URL is not configured")
        if not api_key:
            raise ValueError("Explainer API key is not configured (set EXPLAINER_API_KEY)")
        self.http_client = http_client
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens

    @property
    def completions_url(self) -> str:
        return f"{self.base_url}/chat/completions"

    def build_request(self, record: TransactionRecord) -> ChatCompletionRequest:
        return ChatCompletionRequest(
            model=self.model,
            messages=[ChatMessage(role="user", content=build_prompt(record))],
            temperature=self.temperature,
            max_tokens=self.max_tokens,
            stream=True,
        )

    async def stream_explanation(
        self,
        record: TransactionRecord,
        on_decode_warning: Optional[DecodeWarningCallback] = None,
    ) -> AsyncIterator[str]:
        """
        Yield explanation fragments in the order the service produces them.

        The response is held open only while the generator runs; it is closed when
        the stream ends, when an error is raised, or when the consumer stops early.

        Args:
            record: The transaction to explain.
            on_decode_warning: Called once per `data:` line whose payload is not valid JSON.

        Yields:
            Non-empty text fragments (`choices[0].delta.content`).

        Raises:
            RemoteError: The service answered with a non-2xx status (before anything is yielded).
            NetworkError: The service could not be reached or the connection dropped.
        """
        payload = self.build_request(record).to_payload()
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "Accept": "text/event-stream",
        }

        logger.info(f"Requesting streaming explanation from '{self.completions_url}' with model '{self.model}'")

        try:
            async with self.http_client.stream("POST", self.completions_url, json=payload, headers=headers) as response:
                if not response.is_success:
                    body = (await response.aread()).decode("utf-8", errors="replace")
                    raise RemoteError(
                        f"Explanation service error {response.status_code}: {body}",
                        status_code=response.status_code,
                        body=body,
                    )

                async for line in response.aiter_lines():
                    data = parse_sse_data_line(line)
                    if data is None:
                        continue
                    if is_done_sentinel(data):
                        logger.debug("Explanation stream terminator received")
                        return

                    try:
                        envelope = json.loads(data)
                    except json.JSONDecodeError as e:
                        warning = StreamDecodeWarning(line, reason=e.msg)
                        logger.debug(str(warning))
                        if on_decode_warning is not None:
                            on_decode_warning(warning)
                        continue

                    content = extract_delta_content(envelope)
                    if content:
                        yield content
        except httpx.HTTPError as e:
            logger.error(f"Connection error during explanation stream: {e}")
            raise NetworkError(f"Could not reach the explanation service ({e.__class__.__name__})") from e
