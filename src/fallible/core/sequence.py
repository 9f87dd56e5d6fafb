"""
Fail-fast sequencing of fallible unit computations.

Turns an ordered collection of units (zero-argument callables returning
``Result``) into one aggregate ``Result``: ``Ok`` of every value in input order,
or the first ``Err`` a unit returned. Units after the first failure are never
invoked.

Both functions here are plain loops with a local list as accumulator, so the
stack depth of a call does not depend on how many units it sequences. Binding
one ``flat_map`` per element through recursion gives the same answers for
small inputs and a ``RecursionError`` for large ones; that variant survives
only as a reference in ``fallible.strategies``.

Manifesto:
    - **Fail-fast:** Stop at the first Err and return it unchanged
    - **Order preserved:** Values come back in input order
    - **Stack-safe:** O(1) auxiliary stack depth for any N
    - **All-or-nothing:** Callers never see a partial list

Architecture:
    ::

        units ──► sequence()       snapshot all units, then loop
              └─► sequence_lazy()  pull one unit, invoke, repeat

        [u0, u1, u2]    u0()=Ok(1)  u1()=Ok(2)  u2()=Ok(3)  ──► Ok([1, 2, 3])
        [u0, u1, u2]    u0()=Ok(1)  u1()=Err(x) u2 not called ─► Err(x)

Examples:
    >>> from fallible.core.result import Ok, Err
    >>> sequence([lambda: Ok(1), lambda: Ok(2), lambda: Ok(3)])
    Ok([1, 2, 3])
    >>> sequence([lambda: Ok(1), lambda: Err("bad"), lambda: Ok(3)])
    Err('bad')
    >>> sequence([])
    Ok([])
    >>> traverse(["1", "2"], lambda s: Ok(int(s)))
    Ok([1, 2])

Guardrails:
    ❌ DON'T: Raise from a unit to report a failure
    ✅ DO: Return Err; raised exceptions propagate as programming errors

    ❌ DON'T: Hand a generator to sequence() when producing units is expensive
    ✅ DO: Use sequence_lazy() so nothing past the failure is produced

Tags:
    sequence, traverse, fail-fast, stack-safe, fallible
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Any, TypeVar

from fallible.core.errors import ContractViolation
from fallible.core.result import Err, Ok, Result


T = TypeVar("T")
E = TypeVar("E")
X = TypeVar("X")

FallibleUnit = Callable[[], Result[T, E]]


def sequence(units: Iterable[FallibleUnit[T, E]]) -> Result[list[T], E]:
    """
    Invoke units in order and collect their values (eager mode).

    The unit collection is snapshotted before the first unit runs, so a
    generator of units is fully produced up front. Invocation still stops at
    the first ``Err``.

    Args:
        units: Zero-argument callables returning Ok or Err

    Returns:
        Ok with all values in input order, or the first Err unchanged

    Raises:
        ContractViolation: A unit returned something other than Ok/Err
    """
    snapshot = tuple(units)
    values: list[T] = []
    for index, unit in enumerate(snapshot):
        match unit():
            case Ok(value):
                values.append(value)
            case Err() as failure:
                return failure
            case other:
                raise _not_a_result(other, index, len(snapshot))
    return Ok(values)


def sequence_lazy(units: Iterable[FallibleUnit[T, E]]) -> Result[list[T], E]:
    """
    Invoke units as they are produced (streaming mode).

    The next unit is pulled from the iterator only after the previous one
    returned ``Ok``. A failure at position k leaves everything after k
    unproduced. The iterator is consumed once.
    """
    iterator = iter(units)
    values: list[T] = []
    index = 0
    while True:
        try:
            unit = next(iterator)
        except StopIteration:
            return Ok(values)
        match unit():
            case Ok(value):
                values.append(value)
            case Err() as failure:
                return failure
            case other:
                raise _not_a_result(other, index)
        index += 1


def traverse(
    items: Iterable[X],
    f: Callable[[X], Result[T, E]],
) -> Result[list[T], E]:
    """Apply ``f`` to each item in order, fail-fast, eager mode."""
    return sequence([_bind_unit(f, item) for item in items])


def traverse_lazy(
    items: Iterable[X],
    f: Callable[[X], Result[T, E]],
) -> Result[list[T], E]:
    """Apply ``f`` to each item as it is pulled from ``items``."""
    return sequence_lazy(_bind_unit(f, item) for item in items)


def _bind_unit(f: Callable[[X], Result[T, E]], item: X) -> FallibleUnit[T, E]:
    return lambda: f(item)


def _not_a_result(value: Any, index: int, units: int | None = None) -> ContractViolation:
    error = ContractViolation(
        f"unit at index {index} returned {type(value).__name__}, expected Ok or Err"
    )
    error.with_context(unit_index=index, units=units)
    return error


__all__ = [
    "FallibleUnit",
    "sequence",
    "sequence_lazy",
    "traverse",
    "traverse_lazy",
]
