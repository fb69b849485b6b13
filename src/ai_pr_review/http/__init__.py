from .errors import ClassifiedError, HttpError, NetworkError, RequestTimeout, is_retryable_status
from .executor import (
    RequestExecutor,
    RetryableRequest,
    RetryEvent,
    RetryLog,
    calculate_backoff,
    create_http_error,
    parse_response,
)

__all__ = [
    "ClassifiedError",
    "HttpError",
    "NetworkError",
    "RequestTimeout",
    "is_retryable_status",
    "RequestExecutor",
    "RetryableRequest",
    "RetryEvent",
    "RetryLog",
    "calculate_backoff",
    "create_http_error",
    "parse_response",
]
