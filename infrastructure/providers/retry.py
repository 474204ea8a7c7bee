import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from domain.exceptions.currency import ProviderError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded exponential backoff for a single provider call."""

    max_attempts: int = 3
    base_delay: float = 1.0
    multiplier: float = 2.0
    max_delay: float = 10.0

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.base_delay < 0 or self.max_delay < 0:
            raise ValueError("Retry delays cannot be negative")
        if self.multiplier < 1:
            raise ValueError("multiplier must be >= 1")


NO_RETRY = RetryPolicy(max_attempts=1, base_delay=0, max_delay=0)


def is_transient(error: BaseException) -> bool:
    return isinstance(error, ProviderError) and error.transient


def _log_retry(retry_state: RetryCallState) -> None:
    error = retry_state.outcome.exception() if retry_state.outcome else None
    sleep = retry_state.next_action.sleep if retry_state.next_action else 0
    logger.warning(
        f"Retrying provider call (attempt {retry_state.attempt_number} failed: {error}); "
        f"sleeping {sleep:.2f}s"
    )


async def call_with_retry(
    func: Callable[[], Awaitable[T]],
    policy: RetryPolicy,
    timeout: float | None = None,
    provider_name: str | None = None,
) -> T:
    """Run `func` with a per-attempt timeout, retrying transient provider errors.

    A timed out attempt counts as a transient ProviderError. Permanent errors
    and anything that is not a ProviderError propagate on the first attempt.
    """

    async def attempt() -> T:
        if timeout is None:
            return await func()
        try:
            async with asyncio.timeout(timeout):
                return await func()
        except TimeoutError as e:
            raise ProviderError(
                f"{provider_name or 'Provider'} timed out after {timeout}s",
                provider_name=provider_name,
                transient=True,
            ) from e

    retrying = AsyncRetrying(
        stop=stop_after_attempt(policy.max_attempts),
        wait=wait_exponential(
            multiplier=policy.base_delay, exp_base=policy.multiplier, max=policy.max_delay
        ),
        retry=retry_if_exception(is_transient),
        before_sleep=_log_retry,
        reraise=True,
    )
    async for attempt_state in retrying:
        with attempt_state:
            return await attempt()

    raise RuntimeError("retry loop exited without a result")  # pragma: no cover
