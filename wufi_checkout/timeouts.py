"""Timeout and retry handling for backend calls made during checkout.

Calls are plain callables that take the per-attempt timeout in seconds
and pass it on to the HTTP client. A call that times out is retried with
exponential backoff; any other error propagates on the first attempt.
"""

import time
from dataclasses import dataclass, replace
from typing import Callable, Optional, TypeVar

import httpx
import structlog

from .errors import CheckoutTimeoutError, OperationTimedOutError

logger = structlog.get_logger()

T = TypeVar("T")

Call = Callable[[float], T]


@dataclass(frozen=True)
class TimeoutConfig:
    """Retry settings. Durations are in seconds."""

    timeout: float = 15.0
    retries: int = 3
    backoff_multiplier: float = 2.0
    max_backoff: float = 10.0
    on_timeout: Optional[Callable[[int], None]] = None
    on_retry: Optional[Callable[[int, Exception], None]] = None


def calculate_backoff(attempt: int, backoff_multiplier: float, max_backoff: float) -> float:
    """Delay before retrying after the given (1-based) attempt."""
    return min(1.0 * backoff_multiplier ** (attempt - 1), max_backoff)


def is_timeout_error(error: BaseException) -> bool:
    """Return True if the error means the call ran out of time."""
    if isinstance(error, (CheckoutTimeoutError, httpx.TimeoutException, TimeoutError)):
        return True
    if getattr(error, "is_timeout", False) is True:
        return True
    return "timeout" in str(error).lower()


def with_timeout(
    call: Call,
    config: Optional[TimeoutConfig] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """Run call with per-attempt timeout, retrying timeouts with backoff.

    Raises:
        CheckoutTimeoutError: every attempt timed out
    """
    if config is None:
        config = TimeoutConfig()
    retries = max(config.retries, 1)

    for attempt in range(1, retries + 1):
        try:
            return call(config.timeout)
        except Exception as error:
            if not is_timeout_error(error):
                raise

            if config.on_timeout:
                config.on_timeout(attempt)

            if attempt == retries:
                logger.warning(
                    "checkout_call_timed_out",
                    attempt=attempt,
                    total_attempts=retries,
                    error=str(error),
                )
                raise CheckoutTimeoutError(attempt, retries) from error

            delay = calculate_backoff(attempt, config.backoff_multiplier, config.max_backoff)
            logger.debug(
                "checkout_call_retrying",
                attempt=attempt,
                total_attempts=retries,
                delay_seconds=delay,
                error=str(error),
            )
            if config.on_retry:
                config.on_retry(attempt, error)
            sleep(delay)

    raise AssertionError("unreachable")


CHECKOUT_DEFAULTS = TimeoutConfig(
    timeout=30.0, retries=2, backoff_multiplier=2.0, max_backoff=15.0
)


def checkout_api_call(
    call: Call,
    operation: str,
    sleep: Callable[[float], None] = time.sleep,
    **overrides,
) -> T:
    """Run a named checkout call with the relaxed checkout defaults.

    Keyword ``overrides`` are TimeoutConfig fields laid over CHECKOUT_DEFAULTS;
    fields not named keep the checkout value, and the logging hooks stay
    unless the caller passes its own.

    Raises:
        OperationTimedOutError: the call timed out on every attempt
    """
    log = logger.bind(operation=operation)

    def _on_timeout(attempt: int) -> None:
        log.warning("checkout_operation_timeout", attempt=attempt)

    def _on_retry(attempt: int, error: Exception) -> None:
        log.info("checkout_operation_retry", attempt=attempt, error=str(error))

    fields = {"on_timeout": _on_timeout, "on_retry": _on_retry, **overrides}
    merged = replace(CHECKOUT_DEFAULTS, **fields)

    try:
        return with_timeout(call, merged, sleep=sleep)
    except CheckoutTimeoutError as error:
        log.error("checkout_operation_failed", total_attempts=error.total_attempts)
        raise OperationTimedOutError(operation) from error


def cart_operation(call: Call, operation: str, **kwargs) -> T:
    return checkout_api_call(call, operation, timeout=30.0, retries=1, **kwargs)


def payment_operation(call: Call, operation: str, **kwargs) -> T:
    # Payment authorization can take a while on the provider side.
    return checkout_api_call(call, operation, timeout=60.0, retries=1, **kwargs)


def validation_operation(call: Call, operation: str, **kwargs) -> T:
    return checkout_api_call(call, operation, timeout=12.0, retries=1, **kwargs)
