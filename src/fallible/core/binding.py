"""
Binding blocks: write fallible code top to bottom, fail fast on the first Err.

A binding block is a generator function that ``yield``s a ``Result`` wherever
it needs the value inside. The driver resumes the generator with the unwrapped
value when the result is ``Ok``; on ``Err`` it closes the generator and returns
that ``Err``. Whatever the generator ``return``s becomes ``Ok(value)``.

The driver is a loop that steps the generator once per yielded result, so a
block that binds 100,000 results uses the same stack depth as one that binds
three.

Examples:
    >>> from fallible.core.result import Ok, Err
    >>> @binding
    ... def total(a, b):
    ...     x = yield a
    ...     y = yield b
    ...     return x + y
    >>> total(Ok(1), Ok(2))
    Ok(3)
    >>> total(Ok(1), Err("missing"))
    Err('missing')

Async units are driven by ``run_binding_async``: the block may yield
awaitables, which the driver awaits one at a time before matching, so unit
k+1 is never started before unit k resolved.

Tags:
    binding, generator, coroutine, fail-fast, stack-safe, fallible
"""

from __future__ import annotations

import functools
import inspect
from collections.abc import Awaitable, Callable, Generator, Iterable
from typing import Any, TypeVar, Union

from fallible.core.errors import ContractViolation
from fallible.core.result import Err, Ok, Result


T = TypeVar("T")
E = TypeVar("E")
X = TypeVar("X")

BindingBlock = Generator[Any, Any, T]
AsyncFallibleUnit = Callable[[], Union[Awaitable[Result[T, E]], Result[T, E]]]


def run_binding(block: BindingBlock[T]) -> Result[T, Any]:
    """
    Drive a binding block to completion.

    Args:
        block: A started or fresh generator that yields Results

    Returns:
        Ok of the generator's return value, or the first yielded Err

    Raises:
        ContractViolation: The block yielded something that is not a Result
    """
    send_value: Any = None
    try:
        while True:
            try:
                step = block.send(send_value)
            except StopIteration as stop:
                return Ok(stop.value)
            match step:
                case Ok(value):
                    send_value = value
                case Err():
                    return step
                case other:
                    raise ContractViolation(
                        f"binding block yielded {type(other).__name__}, expected Ok or Err"
                    )
    finally:
        block.close()


def binding(func: Callable[..., BindingBlock[T]]) -> Callable[..., Result[T, Any]]:
    """Turn a generator function into a function returning ``Result``."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Result[T, Any]:
        return run_binding(func(*args, **kwargs))

    return wrapper


def _bind_each(units: Iterable[Callable[[], Any]]) -> BindingBlock[list[Any]]:
    values = []
    for unit in units:
        values.append((yield unit()))
    return values


def sequence_binding(units: Iterable[Callable[[], Result[T, E]]]) -> Result[list[T], E]:
    """
    Sequence units through a binding block.

    Same contract as ``fallible.core.sequence.sequence``; units are pulled
    from ``units`` one at a time.
    """
    return run_binding(_bind_each(units))


async def run_binding_async(block: BindingBlock[T]) -> Result[T, Any]:
    """
    Drive a binding block whose yields may be awaitables.

    Each awaitable is awaited before the block is resumed. If the surrounding
    task is cancelled while a unit is in flight, the cancellation propagates
    and the block is closed, so no further unit starts.
    """
    send_value: Any = None
    try:
        while True:
            try:
                step = block.send(send_value)
            except StopIteration as stop:
                return Ok(stop.value)
            if inspect.isawaitable(step):
                step = await step
            match step:
                case Ok(value):
                    send_value = value
                case Err():
                    return step
                case other:
                    raise ContractViolation(
                        f"binding block yielded {type(other).__name__}, expected Ok or Err"
                    )
    finally:
        block.close()


def async_binding(
    func: Callable[..., BindingBlock[T]],
) -> Callable[..., Awaitable[Result[T, Any]]]:
    """Turn a generator function yielding awaitables into a coroutine function."""

    @functools.wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> Result[T, Any]:
        return await run_binding_async(func(*args, **kwargs))

    return wrapper


async def sequence_async(units: Iterable[AsyncFallibleUnit[T, E]]) -> Result[list[T], E]:
    """
    Sequence async units strictly one after another.

    Units may be coroutine functions or plain functions returning a Result.
    """
    return await run_binding_async(_bind_each(units))


async def traverse_async(
    items: Iterable[X],
    f: Callable[[X], Awaitable[Result[T, E]] | Result[T, E]],
) -> Result[list[T], E]:
    """Apply an async ``f`` to each item in order, fail-fast."""
    return await sequence_async(functools.partial(f, item) for item in items)


__all__ = [
    "AsyncFallibleUnit",
    "BindingBlock",
    "async_binding",
    "binding",
    "run_binding",
    "run_binding_async",
    "sequence_async",
    "sequence_binding",
    "traverse_async",
]
