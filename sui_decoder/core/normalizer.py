"""Cleans pasted digests and explorer URLs into a transaction identifier."""

import re

from sui_decoder.core.types import NormalizedInput
from sui_decoder.exceptions import InputValidationError

ADDRESS_PREFIX = "0x"
MIN_DIGEST_LENGTH = 20

EMPTY_INPUT_MESSAGE = "Please enter a valid transaction digest."
ADDRESS_MESSAGE = (
    "It looks like you pasted an Object ID or Address (starts with '0x'). Please enter a Transaction Digest."
)
TOO_SHORT_MESSAGE = "The digest seems too short. Please check your input."

_URL_SEPARATORS = re.compile(r"[/?#]")


def _looks_like_url(text: str) -> bool:
    return "/" in text or "http" in text


def normalize(raw: str) -> NormalizedInput:
    """Extract a transaction digest from user input.

    Explorer links (Suiscan, SuiVision, ...) are reduced to their final path
    segment, so `https://explorer.example/tx/ABC123?tab=events` gives `ABC123`.
    Problems are reported in `error` next to the cleaned candidate; the caller
    decides whether to block the request.
    """
    cleaned = raw.strip()

    if _looks_like_url(cleaned):
        segments = [segment for segment in _URL_SEPARATORS.split(cleaned) if segment]
        if segments:
            cleaned = segments[-1]

    if cleaned.startswith(ADDRESS_PREFIX):
        return NormalizedInput(identifier=cleaned, error=ADDRESS_MESSAGE)

    if len(cleaned) < MIN_DIGEST_LENGTH:
        return NormalizedInput(identifier=cleaned, error=TOO_SHORT_MESSAGE)

    return NormalizedInput(identifier=cleaned)


def validate_identifier(raw: str | None) -> str:
    """Normalize `raw` and return the identifier, raising InputValidationError on any problem."""
    if not raw or not raw.strip():
        raise InputValidationError(EMPTY_INPUT_MESSAGE, identifier=raw or "")

    result = normalize(raw)
    if result.error:
        raise InputValidationError(result.error, identifier=result.identifier)
    return result.identifier
