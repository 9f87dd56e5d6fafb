"""
Sequencing strategy registry and equivalence harness.

Several ways of sequencing the same units must give the same answer. This
module names them, records which ones are stack-safe, and runs them side by
side.

Manifesto:
    Rewriting the combinator is easy; being sure the rewrite still computes the
    same thing is not. Keeping every strategy callable by name, and comparing
    them on identical inputs, turns "I think it's equivalent" into a check.

    - **One registry:** Strategies are looked up by name, never imported ad hoc
    - **Stack-safety is metadata:** ``stack_safe`` says what a strategy survives
    - **Fresh units per run:** Invocation counts are per strategy, never shared

Architecture:
    ::

        ┌────────────┬────────────┬──────────────────────────────────────┐
        │ name       │ stack_safe │ implementation                        │
        ├────────────┼────────────┼──────────────────────────────────────┤
        │ loop       │ yes        │ core.sequence.sequence                │
        │ lazy       │ yes        │ core.sequence.sequence_lazy           │
        │ fold       │ yes        │ reduce + flat_map, rebound accumulator│
        │ binding    │ yes        │ core.binding.sequence_binding         │
        │ async      │ yes        │ asyncio.run(core.binding.sequence_async)│
        │ recursive  │ NO         │ one flat_map per element, recursion   │
        └────────────┴────────────┴──────────────────────────────────────┘

        compare_strategies(make_units)
            for each strategy: units = make_units() ─► count invocations
                                                  └─► Outcome(result | overrun)
            Comparison.agree = all completed results equal

Examples:
    >>> from fallible.core.result import Ok, Err
    >>> comparison = compare_strategies(lambda: [lambda: Ok(1), lambda: Err("x")])
    >>> comparison.agree
    True
    >>> sorted({o.invocations for o in comparison.outcomes})
    [2]

Tags:
    strategy, registry, equivalence, stack-safety, fallible
"""

from __future__ import annotations

import asyncio
import functools
import inspect
import sys
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from types import TracebackType
from typing import Any, TypeVar

from fallible.core.binding import sequence_async, sequence_binding
from fallible.core.errors import StackOverrun
from fallible.core.logging import get_logger, timed_block
from fallible.core.result import Err, Ok, Result
from fallible.core.sequence import FallibleUnit, sequence, sequence_lazy

logger = get_logger(__name__)

T = TypeVar("T")
E = TypeVar("E")

SequenceFn = Callable[[Sequence[FallibleUnit[Any, Any]]], Result[list[Any], Any]]


@dataclass(frozen=True)
class Strategy:
    """A named sequencing implementation."""

    name: str
    run: SequenceFn
    stack_safe: bool
    description: str = ""


# Global strategy registry
_registry: dict[str, Strategy] = {}


def register_strategy(
    name: str,
    *,
    stack_safe: bool = True,
    description: str = "",
) -> Callable[[SequenceFn], SequenceFn]:
    """Decorator to register a sequencing function under ``name``."""

    def decorator(func: SequenceFn) -> SequenceFn:
        if name in _registry:
            raise ValueError(f"Strategy '{name}' is already registered")
        _registry[name] = Strategy(
            name=name,
            run=func,
            stack_safe=stack_safe,
            description=description or (func.__doc__ or name).strip().splitlines()[0],
        )
        return func

    return decorator


def get_strategy(name: str) -> Strategy:
    """Get a strategy by name."""
    if name not in _registry:
        available = ", ".join(_registry.keys())
        raise KeyError(f"Strategy '{name}' not found. Available: {available}")
    return _registry[name]


def list_strategies(stack_safe: bool | None = None) -> list[Strategy]:
    """List registered strategies in registration order."""
    strategies = list(_registry.values())
    if stack_safe is None:
        return strategies
    return [s for s in strategies if s.stack_safe is stack_safe]


# =============================================================================
# Strategies
# =============================================================================


register_strategy("loop", description="Explicit loop over a snapshot of the units")(sequence)
register_strategy("lazy", description="Explicit loop pulling units one at a time")(sequence_lazy)
register_strategy("binding", description="Generator binding block driven step by step")(sequence_binding)


def _fold_step(
    values: list[T],
    acc: Result[None, E],
    unit: FallibleUnit[T, E],
) -> Result[None, E]:
    return acc.flat_map(lambda _: unit().map(values.append))


@register_strategy("fold", description="reduce() with an accumulator rebound through flat_map")
def sequence_fold(units: Sequence[FallibleUnit[T, E]]) -> Result[list[T], E]:
    """Fold units into one Result by rebinding the accumulator per unit.

    The accumulator carries no payload; values go into a list private to this
    call, which is wrapped in ``Ok`` only once every unit has succeeded.
    """
    values: list[T] = []
    folded = functools.reduce(functools.partial(_fold_step, values), units, Ok(None))
    return folded.map(lambda _: values)


@register_strategy("async", description="Coroutine driver awaiting one unit at a time")
def sequence_async_blocking(units: Sequence[FallibleUnit[T, E]]) -> Result[list[T], E]:
    """Run ``sequence_async`` to completion on a fresh event loop."""
    return asyncio.run(sequence_async(units))


def _stack_depth() -> int:
    depth = 0
    frame = inspect.currentframe()
    while frame is not None:
        depth += 1
        frame = frame.f_back
    return depth


def _traceback_depth(tb: TracebackType | None) -> int:
    depth = 0
    while tb is not None:
        depth += 1
        tb = tb.tb_next
    return depth


@register_strategy(
    "recursive",
    stack_safe=False,
    description="One flat_map per element through recursion (reference only)",
)
def sequence_recursive(units: Sequence[FallibleUnit[T, E]]) -> Result[list[T], E]:
    """
    Sequence by recursive binding.

    Correct for short inputs; needs interpreter stack proportional to the
    number of units. Units invoked before an overrun keep their side effects.

    A ``RecursionError`` counts as an overrun only when it was raised with at
    least half of the recursion limit in use. One raised by a unit with the
    stack mostly free is the unit's own and propagates unchanged.

    Raises:
        StackOverrun: The recursion limit was reached
    """
    snapshot = tuple(units)

    def bind_from(index: int) -> Result[list[T], E]:
        if index == len(snapshot):
            return Ok([])
        return snapshot[index]().flat_map(
            lambda head: bind_from(index + 1).map(lambda tail: [head, *tail])
        )

    try:
        return bind_from(0)
    except RecursionError as exc:
        depth = _stack_depth() + _traceback_depth(exc.__traceback__)
        if depth < sys.getrecursionlimit() // 2:
            raise
        logger.warning("recursive_strategy_overrun", units=len(snapshot), depth=depth)
        raise StackOverrun(
            f"recursive binding overran the interpreter stack at {len(snapshot)} units",
            cause=exc,
        ).with_context(strategy="recursive", units=len(snapshot)) from exc


# =============================================================================
# Equivalence harness
# =============================================================================


@dataclass
class Outcome:
    """What one strategy did with one input."""

    strategy: str
    result: Result[list[Any], Any] | None
    invocations: int
    duration_ms: float
    overrun: StackOverrun | None = None

    @property
    def completed(self) -> bool:
        return self.overrun is None

    @property
    def status(self) -> str:
        match self.result:
            case Ok():
                return "ok"
            case Err():
                return "err"
        return "stack_overrun"


@dataclass
class Comparison:
    """Outcomes of every strategy on the same input."""

    outcomes: list[Outcome] = field(default_factory=list)

    @property
    def completed(self) -> list[Outcome]:
        return [o for o in self.outcomes if o.completed]

    @property
    def overruns(self) -> list[str]:
        return [o.strategy for o in self.outcomes if not o.completed]

    @property
    def agree(self) -> bool:
        """All completed strategies returned equal results and invocation counts."""
        completed = self.completed
        if not completed:
            return True
        first = completed[0]
        return all(
            o.result == first.result and o.invocations == first.invocations
            for o in completed[1:]
        )

    def outcome(self, strategy: str) -> Outcome:
        for o in self.outcomes:
            if o.strategy == strategy:
                return o
        raise KeyError(strategy)


def _counting(units: Sequence[FallibleUnit[T, E]], counter: list[int]) -> list[FallibleUnit[T, E]]:
    def wrap(unit: FallibleUnit[T, E]) -> FallibleUnit[T, E]:
        def counted() -> Result[T, E]:
            counter[0] += 1
            return unit()

        return counted

    return [wrap(unit) for unit in units]


def run_strategy(
    name: str,
    units: Sequence[FallibleUnit[Any, Any]],
) -> Outcome:
    """Run one strategy, counting invocations and catching only StackOverrun."""
    strategy = get_strategy(name)
    counter = [0]
    counted = _counting(units, counter)
    with timed_block(name) as timer:
        try:
            result = strategy.run(counted)
            overrun = None
        except StackOverrun as exc:
            result = None
            overrun = exc
    return Outcome(
        strategy=name,
        result=result,
        invocations=counter[0],
        duration_ms=timer.duration_ms,
        overrun=overrun,
    )


def compare_strategies(
    make_units: Callable[[], Sequence[FallibleUnit[Any, Any]]],
    names: Sequence[str] | None = None,
) -> Comparison:
    """
    Run every (or every named) strategy on fresh units from ``make_units``.

    Args:
        make_units: Factory returning a new unit list per strategy
        names: Strategy names to run (default: all registered)
    """
    selected = list(names) if names is not None else [s.name for s in list_strategies()]
    comparison = Comparison()
    for name in selected:
        comparison.outcomes.append(run_strategy(name, make_units()))

    logger.debug(
        "strategies_compared",
        strategies=len(selected),
        agree=comparison.agree,
        overruns=comparison.overruns,
    )
    return comparison


__all__ = [
    "Comparison",
    "Outcome",
    "Strategy",
    "compare_strategies",
    "get_strategy",
    "list_strategies",
    "register_strategy",
    "run_strategy",
    "sequence_async_blocking",
    "sequence_fold",
    "sequence_recursive",
]
