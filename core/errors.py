# ABOUTME: Exception types shared by the rewrite engine and the API.
# ABOUTME: RequestError -> 400, GenerationError / ExtractionFailed -> 502; ParseFailure stays inside the engine.


class RequestError(ValueError):
    """Bad request shape (missing or empty text, wrong preset id type). Never retried."""


class GenerationError(RuntimeError):
    """Text-generation backend failed: transport, auth, quota, timeout or malformed response."""


class ParseFailure(ValueError):
    """Structured output did not parse as the expected shape."""

    def __init__(self, message: str, raw: str = ""):
        super().__init__(message)
        self.raw = raw


class ExtractionFailed(RuntimeError):
    """No extraction attempt produced parseable output."""

    def __init__(self, message: str, attempts: int):
        super().__init__(message)
        self.attempts = attempts
