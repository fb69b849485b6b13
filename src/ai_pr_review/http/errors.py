class ClassifiedError(Exception):
    """Final failure of a request after classification."""

    def __init__(self, message: str, status: int = 0, body: str | None = None):
        super().__init__(message)
        self.message = message
        self.status = status
        self.body = body


class RequestTimeout(ClassifiedError):
    def __init__(self, timeout_ms: int):
        super().__init__(f"Request timed out after {timeout_ms}ms", status=408)
        self.timeout_ms = timeout_ms


class NetworkError(ClassifiedError):
    """No HTTP status was obtained (DNS, refused connection, reset...)."""

    def __init__(self, message: str):
        super().__init__(message, status=0)


class HttpError(ClassifiedError):
    @property
    def retryable(self) -> bool:
        return is_retryable_status(self.status)


def is_retryable_status(status: int) -> bool:
    """408, 429 and 5xx are worth retrying, other statuses are final."""
    return status in (408, 429) or 500 <= status < 600
