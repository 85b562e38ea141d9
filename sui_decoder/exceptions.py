# Decoder Exceptions


class DecoderError(Exception):
    """Base exception for all errors surfaced to the session controller."""

    def __init__(self, *args, status_code: int | None = None, detail: str | None = None):
        super().__init__(*args)
        self.status_code = status_code
        # Use the first arg as detail if detail kwarg is not provided and args exist
        self.detail = detail or (args[0] if args else None)


class InputValidationError(ValueError, DecoderError):
    """Raised when the pasted input is empty, too short, or looks like an address."""

    def __init__(self, detail: str, identifier: str = ""):
        DecoderError.__init__(self, detail, detail=detail)
        self.identifier = identifier


class NetworkError(DecoderError):
    """Raised when a remote service cannot be reached or answers with a non-2xx status."""

    pass


class InvalidIdentifierFormatError(DecoderError):
    """Raised when the ledger node rejects the identifier's shape (JSON-RPC invalid params)."""

    pass


class NotFoundError(DecoderError):
    """Raised when the ledger lookup returns neither a result nor an error."""

    pass


class RemoteError(DecoderError):
    """Raised when a remote service returns a structured error or a failing response body."""

    def __init__(self, *args, status_code: int | None = None, detail: str | None = None, body: str | None = None):
        super().__init__(*args, status_code=status_code, detail=detail)
        self.body = body


class StreamDecodeWarning(Warning):
    """A single malformed event-stream line. Never raised; reported and skipped."""

    def __init__(self, line: str, reason: str):
        super().__init__(f"Skipped malformed stream line ({reason}): {line[:200]}")
        self.line = line
        self.reason = reason
