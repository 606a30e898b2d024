"""
Ordered-fallback combinator.

Retrieval transports, text extraction strategies, field patterns and CRM
lookups all follow the same rule: try a list of strategies in order and keep
the first usable result. A strategy fails when it returns None, raises, times
out (async only) or produces a value the ``accept`` check rejects. Strategies
after the winning one are never invoked.

Example:
    >>> strategies = [Strategy("upper", lambda s: s.upper() if s else None)]
    >>> result = first_success(strategies, "abc")
    >>> result.unwrap().value
    'ABC'
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Generic, List, Optional, Sequence, TypeVar

from loguru import logger
from neopipe import Result, Ok, Err

T = TypeVar("T")

Acceptor = Callable[[Any], Optional[str]]


@dataclass(frozen=True)
class Strategy(Generic[T]):
    """A named attempt. ``run`` receives the combinator's positional arguments."""
    name: str
    run: Callable[..., Optional[T]]


@dataclass(frozen=True)
class AsyncStrategy(Generic[T]):
    name: str
    run: Callable[..., Awaitable[Optional[T]]]


@dataclass(frozen=True)
class Failure:
    """Why a single strategy did not produce a usable value."""
    name: str
    reason: str


@dataclass(frozen=True)
class Success(Generic[T]):
    name: str
    value: T
    failures: List[Failure] = field(default_factory=list)


def _rejection(value: Any, accept: Optional[Acceptor]) -> Optional[str]:
    if value is None:
        return "no result"
    if accept is None:
        return None
    return accept(value)


def first_success(
    strategies: Sequence[Strategy[T]],
    *args: Any,
    accept: Optional[Acceptor] = None,
    label: str = "fallback",
) -> Result[Success[T], List[Failure]]:
    """
    Run ``strategies`` in order and return the first accepted value.

    Args:
        strategies: Ordered strategies, most specific first
        *args: Arguments passed to every strategy
        accept: Optional check returning a rejection reason, or None to accept
        label: Name used in log messages

    Returns:
        Result[Success, List[Failure]]: Ok with the winning strategy and value,
        or Err with one Failure per strategy tried
    """
    failures: List[Failure] = []
    for strategy in strategies:
        try:
            value = strategy.run(*args)
        except Exception as e:
            failures.append(Failure(strategy.name, f"{type(e).__name__}: {e}"))
            logger.debug(f"[{label}] {strategy.name} raised {type(e).__name__}: {e}")
            continue

        reason = _rejection(value, accept)
        if reason is None:
            return Ok(Success(name=strategy.name, value=value, failures=failures))
        failures.append(Failure(strategy.name, reason))

    return Err(failures)


async def first_success_async(
    strategies: Sequence[AsyncStrategy[T]],
    *args: Any,
    accept: Optional[Acceptor] = None,
    timeout: Optional[float] = None,
    label: str = "fallback",
) -> Result[Success[T], List[Failure]]:
    """
    Async variant of :func:`first_success`.

    Each strategy runs under ``timeout`` seconds; a timeout counts as that
    strategy's failure and the next one is tried.
    """
    failures: List[Failure] = []
    for strategy in strategies:
        try:
            if timeout is not None:
                value = await asyncio.wait_for(strategy.run(*args), timeout=timeout)
            else:
                value = await strategy.run(*args)
        except asyncio.TimeoutError:
            failures.append(Failure(strategy.name, f"timed out after {timeout}s"))
            logger.warning(f"[{label}] {strategy.name} timed out after {timeout}s")
            continue
        except Exception as e:
            failures.append(Failure(strategy.name, f"{type(e).__name__}: {e}"))
            logger.warning(f"[{label}] {strategy.name} failed: {type(e).__name__}: {e}")
            continue

        reason = _rejection(value, accept)
        if reason is None:
            logger.info(f"[{label}] {strategy.name} succeeded")
            return Ok(Success(name=strategy.name, value=value, failures=failures))
        failures.append(Failure(strategy.name, reason))
        logger.warning(f"[{label}] {strategy.name} rejected: {reason}")

    return Err(failures)
