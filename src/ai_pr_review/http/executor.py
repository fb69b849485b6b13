import asyncio
import json
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Literal

import httpx
from tenacity import AsyncRetrying, RetryCallState, retry_if_exception, stop_after_attempt, wait_exponential

from .errors import ClassifiedError, HttpError, NetworkError, RequestTimeout


DEFAULT_MAX_RETRIES = 3
DEFAULT_BASE_DELAY_MS = 1000
DEFAULT_TIMEOUT_MS = 120_000


@dataclass(frozen=True)
class RetryableRequest:
    """One logical HTTP call together with its deadline and retry budget."""
    method: str
    url: str
    headers: dict[str, str] = field(default_factory=dict)
    json_body: Any = None
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    max_retries: int = DEFAULT_MAX_RETRIES
    base_delay_ms: int = DEFAULT_BASE_DELAY_MS


@dataclass(frozen=True)
class RetryEvent:
    status: int
    attempt: int
    delay_ms: int
    reason: Literal["http", "timeout", "network"]


RetryObserver = Callable[[RetryEvent], None]


class RetryLog:
    """Observer that keeps every retry event of a run."""

    def __init__(self):
        self.events: list[RetryEvent] = []

    def __call__(self, event: RetryEvent) -> None:
        self.events.append(event)


def parse_response(text: str) -> Any:
    """Decode JSON, returning None when the text is not JSON."""
    try:
        return json.loads(text)
    except (TypeError, ValueError):
        return None


def create_http_error(payload: Any, text: str, status: int) -> HttpError:
    """Build an HttpError, preferring error.message, then error, then raw text."""
    message = None
    if isinstance(payload, dict):
        error = payload.get("error")
        if isinstance(error, dict) and error.get("message"):
            message = str(error["message"])
        elif isinstance(error, str) and error:
            message = error
    if not message:
        message = text or f"HTTP {status}"
    return HttpError(message, status=status, body=text)


def calculate_backoff(attempt: int, base_delay_ms: int = DEFAULT_BASE_DELAY_MS) -> int:
    """Delay in ms to wait after the given (1-indexed) failed attempt."""
    return base_delay_ms * 2 ** (attempt - 1)


class RequestExecutor:
    """Runs a RetryableRequest with a per-attempt deadline and exponential backoff.

    Callers only see the decoded JSON body of a successful response or the
    final ClassifiedError. Timeouts, network failures and 408/429/5xx answers
    are retried with the same backoff; any other non-success status is raised
    straight away.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        observer: RetryObserver | None = None,
    ):
        self.client = client
        self.sleep = sleep
        self.observer = observer

    async def execute(self, request: RetryableRequest) -> Any:
        if self.client is not None:
            return await self._retrying(request)(self._attempt, self.client, request)
        async with httpx.AsyncClient() as client:
            return await self._retrying(request)(self._attempt, client, request)

    def _retrying(self, request: RetryableRequest) -> AsyncRetrying:
        return AsyncRetrying(
            retry=retry_if_exception(_is_retryable),
            stop=stop_after_attempt(request.max_retries),
            wait=wait_exponential(multiplier=request.base_delay_ms / 1000, exp_base=2),
            sleep=self.sleep,
            before_sleep=self._notify(request),
            reraise=True,
        )

    async def _attempt(self, client: httpx.AsyncClient, request: RetryableRequest) -> Any:
        try:
            response = await asyncio.wait_for(
                self._send(client, request),
                timeout=request.timeout_ms / 1000,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            raise RequestTimeout(request.timeout_ms) from e
        except httpx.TransportError as e:
            raise NetworkError(str(e) or e.__class__.__name__) from e

        text = response.text
        payload = parse_response(text)
        if response.is_success:
            return payload
        raise create_http_error(payload, text, response.status_code)

    async def _send(self, client: httpx.AsyncClient, request: RetryableRequest) -> httpx.Response:
        # Reading the body inside the deadline keeps slow streams bounded too.
        response = await client.request(
            request.method,
            request.url,
            headers=request.headers,
            json=request.json_body,
            timeout=request.timeout_ms / 1000,
        )
        await response.aread()
        return response

    def _notify(self, request: RetryableRequest) -> Callable[[RetryCallState], None]:
        def before_sleep(retry_state: RetryCallState) -> None:
            if not self.observer:
                return
            error = retry_state.outcome.exception()
            self.observer(RetryEvent(
                status=error.status,
                attempt=retry_state.attempt_number,
                delay_ms=calculate_backoff(retry_state.attempt_number, request.base_delay_ms),
                reason=_retry_reason(error),
            ))
        return before_sleep


def _is_retryable(error: BaseException) -> bool:
    if isinstance(error, (RequestTimeout, NetworkError)):
        return True
    return isinstance(error, HttpError) and error.retryable


def _retry_reason(error: ClassifiedError) -> str:
    if isinstance(error, RequestTimeout):
        return "timeout"
    if isinstance(error, NetworkError):
        return "network"
    return "http"
