"""
================================================================================
Retry and Polling Executors
================================================================================

Bounded retry utilities for flaky browser interactions.

Components:
    - RetryPolicy / retry_with_backoff: exponential backoff over failures
    - PollPolicy / retry_until: poll an action until a predicate holds,
      bounded by attempt count AND wall-clock time
    - with_retry: decorator form of retry_with_backoff

Usage:
    >>> await retry_with_backoff(lambda: search.apply_filters(filters))
    >>> count = await retry_until(
    ...     search.get_results_count,
    ...     lambda n: n > 0,
    ...     PollPolicy(max_attempts=5, timeout=10.0, interval=1.0),
    ... )

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from functools import wraps
from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar, Union

from loguru import logger

from .config_loader import ConfigLoader


T = TypeVar("T")

Action = Callable[[], Awaitable[T]]


class WaitTimeoutError(TimeoutError):
    """Raised when a polling budget (attempts or time) is exhausted."""
    pass


@dataclass(frozen=True)
class RetryPolicy:
    """
    Configuration for retry_with_backoff.

    RetryPolicy() holds the built-in defaults; from_config() applies
    config/config.yaml and environment overrides on top.

    Attributes:
        max_attempts: Maximum number of attempts (>= 1)
        initial_delay: Delay after the first failure, in seconds
        backoff_multiplier: Growth factor applied to each following delay
    """
    max_attempts: int = 3
    initial_delay: float = 1.0
    backoff_multiplier: float = 2.0

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {self.max_attempts}")
        if self.initial_delay < 0:
            raise ValueError(f"initial_delay must be >= 0, got {self.initial_delay}")
        if self.backoff_multiplier < 1:
            raise ValueError(
                f"backoff_multiplier must be >= 1, got {self.backoff_multiplier}"
            )

    @classmethod
    def from_config(cls, loader: Optional[ConfigLoader] = None) -> "RetryPolicy":
        """Policy from `retry.*` (RETRY_MAX_ATTEMPTS etc. override)."""
        return (loader or ConfigLoader()).section("retry", cls)

    def delay_after(self, failed_attempts: int) -> float:
        """Delay in seconds after `failed_attempts` consecutive failures."""
        return self.initial_delay * self.backoff_multiplier ** (failed_attempts - 1)


@dataclass(frozen=True)
class PollPolicy:
    """
    Configuration for retry_until.

    Both bounds apply at once; whichever is hit first stops polling.

    Attributes:
        max_attempts: Maximum number of polls (>= 1)
        timeout: Wall-clock budget in seconds, measured from the first poll
        interval: Fixed pause between polls, in seconds
    """
    max_attempts: int = 10
    timeout: float = 30.0
    interval: float = 1.0

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {self.max_attempts}")
        if self.timeout <= 0:
            raise ValueError(f"timeout must be > 0, got {self.timeout}")
        if self.interval < 0:
            raise ValueError(f"interval must be >= 0, got {self.interval}")

    @classmethod
    def from_config(cls, loader: Optional[ConfigLoader] = None) -> "PollPolicy":
        """Policy from `poll.*` (POLL_TIMEOUT etc. override)."""
        return (loader or ConfigLoader()).section("poll", cls)


@dataclass(frozen=True)
class Success(Generic[T]):
    value: T


@dataclass(frozen=True)
class Failure:
    error: BaseException


AttemptOutcome = Union[Success[T], Failure]


async def attempt(action: Action[T]) -> AttemptOutcome[T]:
    """Run `action` once and capture its result or exception."""
    try:
        return Success(await action())
    except Exception as e:
        return Failure(e)


# Indirection points so tests can drive time without a real event-loop sleep.
async def _pause(seconds: float) -> None:
    if seconds > 0:
        await asyncio.sleep(seconds)


def _clock() -> float:
    return time.monotonic()


def _describe(action: Callable[..., Any], description: str) -> str:
    return description or getattr(action, "__name__", "action")


async def retry_with_backoff(
    action: Action[T],
    policy: Optional[RetryPolicy] = None,
    description: str = "",
) -> T:
    """
    Run `action` until it succeeds, backing off exponentially between failures.

    Args:
        action: Zero-argument coroutine function
        policy: Retry configuration (defaults to RetryPolicy.from_config())
        description: Label used in log lines

    Returns:
        The value of the first successful attempt

    Raises:
        The exception raised by the last attempt, unchanged
    """
    policy = policy or RetryPolicy.from_config()
    name = _describe(action, description)
    last_error: Optional[BaseException] = None

    for attempt_no in range(1, policy.max_attempts + 1):
        logger.debug(f"Attempt {attempt_no}/{policy.max_attempts}: {name}")
        outcome = await attempt(action)

        if isinstance(outcome, Success):
            if attempt_no > 1:
                logger.info(f"{name} succeeded on attempt {attempt_no}")
            return outcome.value

        last_error = outcome.error
        if attempt_no < policy.max_attempts:
            delay = policy.delay_after(attempt_no)
            logger.warning(
                f"Attempt {attempt_no}/{policy.max_attempts} failed for {name}: "
                f"{last_error}. Retrying in {delay:.2f}s..."
            )
            await _pause(delay)

    logger.error(f"All {policy.max_attempts} attempts failed for {name}: {last_error}")
    raise last_error


async def retry_until(
    action: Action[T],
    predicate: Callable[[T], bool],
    policy: Optional[PollPolicy] = None,
    description: str = "",
) -> T:
    """
    Poll `action` until `predicate(result)` is true.

    A failed call and a result rejected by the predicate both consume one
    attempt. Polling stops at `policy.max_attempts` attempts or once
    `policy.timeout` seconds have elapsed since the first poll.

    Args:
        action: Zero-argument coroutine function
        predicate: Acceptance test for a successful result
        policy: Polling configuration (defaults to PollPolicy.from_config())
        description: Label used in log lines

    Returns:
        The first result accepted by `predicate`

    Raises:
        Exception: The action's own error when it fails on the last attempt
        WaitTimeoutError: When the attempt or time budget runs out
    """
    policy = policy or PollPolicy.from_config()
    name = _describe(action, description)
    started = _clock()
    attempts = 0
    last_result: Any = None

    while attempts < policy.max_attempts and _clock() - started < policy.timeout:
        outcome = await attempt(action)
        attempts += 1

        if isinstance(outcome, Success):
            if predicate(outcome.value):
                logger.debug(f"Condition met after {attempts} attempts: {name}")
                return outcome.value
            last_result = outcome.value
            logger.debug(
                f"Attempt {attempts}: condition not met for {name}. "
                f"Result: {last_result!r}"
            )
        else:
            if attempts >= policy.max_attempts:
                logger.error(f"Attempt {attempts} failed for {name}: {outcome.error}")
                raise outcome.error
            logger.warning(f"Attempt {attempts} failed for {name}: {outcome.error}")

        if attempts < policy.max_attempts:
            await _pause(policy.interval)

    elapsed = _clock() - started
    error_msg = (
        f"Condition not met for {name} after {attempts} attempts "
        f"({elapsed:.1f}s, limits: {policy.max_attempts} attempts / "
        f"{policy.timeout}s). Last result: {last_result!r}"
    )
    logger.error(error_msg)
    raise WaitTimeoutError(error_msg)


def with_retry(policy: Optional[RetryPolicy] = None):
    """
    Decorator adding retry_with_backoff to an async function or method.

    Usage:
        @with_retry(RetryPolicy(max_attempts=2, initial_delay=0.5))
        async def open_gallery(self): ...
    """
    def decorator(func: Callable[..., Awaitable[T]]):
        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            return await retry_with_backoff(
                lambda: func(*args, **kwargs),
                policy,
                description=func.__name__,
            )
        return wrapper
    return decorator


__all__ = [
    "AttemptOutcome",
    "Failure",
    "PollPolicy",
    "RetryPolicy",
    "Success",
    "WaitTimeoutError",
    "attempt",
    "retry_until",
    "retry_with_backoff",
    "with_retry",
]
