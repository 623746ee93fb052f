"""
Retry management component for HTTP exchanges.

This module provides TransportRetryManager, which wraps a single exchange
with tenacity retry behaviour when the transport was configured with a
TransportRetryConfig. Retries are off unless explicitly requested.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, TypeVar

import httpx
import tenacity
from tenacity import retry, stop_after_attempt, wait
from tenacity.retry import retry_if_exception

from ..logger import get_logger

if TYPE_CHECKING:
    from collections.abc import Callable

    from ..config import TransportRetryConfig

logger = get_logger("transport_retry")

T = TypeVar("T")


def _is_retryable(value: BaseException) -> bool:
    """
    Check if a failed exchange is worth another attempt.

    Connection-level failures and 5xx responses are retried. 4xx responses
    are final since repeating the same request won't change the outcome.

    Parameters
    ----------
    value : BaseException
        The exception raised by the exchange.

    Returns
    -------
    bool
        True if the exchange should be retried.
    """
    if isinstance(value, httpx.HTTPStatusError):
        return value.response.status_code >= 500
    return isinstance(value, httpx.TransportError)


def _log_retry_attempt(retry_state: tenacity.RetryCallState) -> None:
    """
    Log the exception that triggered a retry.

    Parameters
    ----------
    retry_state : tenacity.RetryCallState
        The current retry state containing exception information.
    """
    outcome = retry_state.outcome
    if outcome is not None:
        logger.warning(
            f"HTTP exchange attempt {retry_state.attempt_number} failed, "
            f"retrying: {outcome.exception()!r}"
        )


class TransportRetryManager:
    """
    Manages retry logic for HTTP exchanges.

    This component encapsulates the tenacity configuration and provides a
    clean interface for wrapping an exchange function with retry behaviour.

    The configuration uses:
    - Random exponential backoff between the configured bounds
    - A hard stop after ``max_attempts``
    - Filtering to skip retries on 4xx responses
    - Logging before each retry
    - Re-raising the final exception if all attempts fail

    Parameters
    ----------
    retry_config : TransportRetryConfig | None, optional
        Retry policy. None disables retries.

    Usage
    -----
    ```python
    retry_mgr = TransportRetryManager(TransportRetryConfig(max_attempts=3))
    response = retry_mgr.wrap(lambda: client.send(request))()
    ```
    """

    def __init__(self, retry_config: TransportRetryConfig | None = None) -> None:
        if retry_config is None:
            self._config: dict[str, Any] | None = None
        else:
            self._config = {
                "wait": wait.wait_random_exponential(
                    min=retry_config.min_wait, max=retry_config.max_wait
                ),
                "stop": stop_after_attempt(retry_config.max_attempts),
                "retry": retry_if_exception(_is_retryable),
                "reraise": True,
                "before_sleep": _log_retry_attempt,
            }

    @property
    def is_enabled(self) -> bool:
        """
        Check if retries are enabled.

        Returns:
            bool: True if retry configuration exists, False if disabled.
        """
        return self._config is not None

    def wrap(self, func: Callable[[], T]) -> Callable[[], T]:
        """
        Wrap an exchange function with retry logic.

        If retries are disabled, returns the original function unchanged.

        Parameters
        ----------
        func : Callable[[], T]
            The function performing one exchange.

        Returns
        -------
        Callable[[], T]
            The wrapped function, or ``func`` itself when retries are off.
        """
        if self._config is None:
            return func
        wrapped_func: Callable[[], T] = retry(**self._config)(func)
        return wrapped_func
