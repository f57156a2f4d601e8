"""
Retry utility with backoff.

This module provides bounded retry logic for transient failures. A
RetryConfig with exponential_base=1.0 gives a constant delay between attempts.
"""

import asyncio
from typing import Awaitable, Callable, TypeVar, Optional
from dataclasses import dataclass
from src.core.logging import get_logger

logger = get_logger(__name__)

T = TypeVar('T')


@dataclass
class RetryConfig:
    """Configuration for retry behavior."""

    max_retries: int = 2
    base_delay: float = 1.5
    max_delay: float = 60.0
    exponential_base: float = 1.0

    def __post_init__(self):
        """Validate configuration."""
        if self.max_retries < 0:
            raise ValueError("max_retries must be non-negative")
        if self.base_delay < 0:
            raise ValueError("base_delay must be non-negative")
        if self.max_delay < self.base_delay:
            raise ValueError("max_delay must be >= base_delay")
        if self.exponential_base < 1:
            raise ValueError("exponential_base must be >= 1")

    @classmethod
    def for_attempts(cls, attempts: int, delay: float) -> "RetryConfig":
        """Constant-delay config allowing `attempts` calls in total."""
        return cls(max_retries=max(attempts - 1, 0), base_delay=delay, max_delay=max(delay, 60.0))

    def delay_for(self, attempt: int) -> float:
        return min(self.base_delay * (self.exponential_base ** attempt), self.max_delay)


async def retry_async(
    func: Callable[[], Awaitable[T]],
    config: Optional[RetryConfig] = None,
    retry_on: tuple = (Exception,),
    on_retry: Optional[Callable[[int, Exception], None]] = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """
    Await a coroutine factory until it succeeds or retries are exhausted.

    Args:
        func: Zero-argument callable returning a fresh awaitable per attempt
        config: Retry configuration (default: 3 attempts, 1.5s apart)
        retry_on: Tuple of exception types to retry on
        on_retry: Optional callback called on each retry (attempt, exception)
        sleep: Awaitable sleep, injectable for tests

    Returns:
        Result from the first successful attempt

    Raises:
        Last exception if all retries are exhausted

    Example:
        >>> async def flaky():
        ...     return "Success"
        >>> # await retry_async(flaky, RetryConfig.for_attempts(3, 1.5)) == "Success"
    """
    if config is None:
        config = RetryConfig()

    for attempt in range(config.max_retries + 1):
        try:
            return await func()
        except retry_on as e:
            if attempt == config.max_retries:
                logger.warning(f"All {config.max_retries + 1} attempts exhausted: {e}")
                raise

            delay = config.delay_for(attempt)
            logger.info(f"Retry {attempt + 1}/{config.max_retries} after {delay:.2f}s: {e}")

            if on_retry:
                on_retry(attempt + 1, e)

            await sleep(delay)

    raise RuntimeError("Retry logic error")
