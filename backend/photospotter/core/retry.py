"""
Centralized retry/backoff utilities.

Provides consistent retry behavior for external calls with configurable
strategies and proper logging. A RetryConfig is passed to the components
that need it rather than baked into their loops.
"""

import asyncio
import logging
import random
from typing import Callable, TypeVar, Sequence, Optional

logger = logging.getLogger(__name__)

T = TypeVar('T')


class RetryConfig:
    """Configuration for retry behavior."""

    def __init__(
        self,
        max_attempts: int = 3,
        base_delay: float = 1.0,
        max_delay: float = 30.0,
        exponential_base: float = 2.0,
        jitter: bool = True,
        retryable_exceptions: Sequence[type[Exception]] = (Exception,),
    ):
        """
        Initialize retry configuration.

        Args:
            max_attempts: Maximum number of attempts (including first)
            base_delay: Initial delay between retries in seconds
            max_delay: Maximum delay between retries
            exponential_base: Base for exponential backoff (1.0 gives a fixed delay)
            jitter: Whether to add random jitter to delays
            retryable_exceptions: Exception types that trigger retry
        """
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.exponential_base = exponential_base
        self.jitter = jitter
        self.retryable_exceptions = tuple(retryable_exceptions)

    @classmethod
    def fixed(
        cls,
        max_attempts: int,
        delay: float,
        retryable_exceptions: Sequence[type[Exception]] = (Exception,),
    ) -> "RetryConfig":
        """Build a config that waits the same delay between every attempt."""
        return cls(
            max_attempts=max_attempts,
            base_delay=delay,
            max_delay=delay,
            exponential_base=1.0,
            jitter=False,
            retryable_exceptions=retryable_exceptions,
        )


# Default strategy for retry_async
RETRY_STANDARD = RetryConfig(
    max_attempts=3,
    base_delay=1.0,
    max_delay=10.0,
)


def calculate_delay(
    attempt: int,
    config: RetryConfig,
) -> float:
    """
    Calculate delay for a given attempt number.

    Args:
        attempt: Zero-based attempt number
        config: Retry configuration

    Returns:
        Delay in seconds
    """
    delay = min(
        config.base_delay * (config.exponential_base ** attempt),
        config.max_delay
    )

    if config.jitter:
        # Add ±25% jitter to prevent thundering herd
        jitter_range = delay * 0.25
        delay += random.uniform(-jitter_range, jitter_range)

    return max(0, delay)


async def retry_async(
    func: Callable[..., T],
    *args,
    config: RetryConfig = RETRY_STANDARD,
    operation_name: Optional[str] = None,
    **kwargs,
) -> T:
    """
    Execute an async function with retry logic.

    Args:
        func: Async function to execute
        *args: Positional arguments for func
        config: Retry configuration
        operation_name: Name for logging (defaults to func name)
        **kwargs: Keyword arguments for func

    Returns:
        Result of successful function call

    Raises:
        Last exception if all retries fail

    Example:
        faces = await retry_async(
            directory.index_face,
            image_bytes,
            config=RetryConfig.fixed(max_attempts=3, delay=1.0),
            operation_name="index_face",
        )
    """
    op_name = operation_name or getattr(func, '__name__', 'operation')
    last_exception: Optional[Exception] = None

    for attempt in range(config.max_attempts):
        try:
            return await func(*args, **kwargs)
        except config.retryable_exceptions as e:
            last_exception = e

            if attempt < config.max_attempts - 1:
                delay = calculate_delay(attempt, config)
                logger.warning(
                    f"{op_name} failed (attempt {attempt + 1}/{config.max_attempts}), "
                    f"retrying in {delay:.1f}s: {e}",
                    extra={
                        "event_type": "retry_attempt",
                        "operation": op_name,
                        "attempt": attempt + 1,
                        "max_attempts": config.max_attempts,
                        "delay_seconds": delay,
                        "error": str(e),
                        "error_type": type(e).__name__,
                    }
                )
                await asyncio.sleep(delay)
            else:
                logger.error(
                    f"{op_name} failed after {config.max_attempts} attempts: {e}",
                    extra={
                        "event_type": "retry_exhausted",
                        "operation": op_name,
                        "attempts": config.max_attempts,
                        "final_error": str(e),
                        "error_type": type(e).__name__,
                    }
                )

    if last_exception is not None:
        raise last_exception
    raise RuntimeError(f"{op_name} failed with no exception captured")
