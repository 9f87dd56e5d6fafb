"""
Result envelope for explicit success/failure values.

Provides a typed ``Result[T, E]`` made of exactly two variants, ``Ok[T]`` and
``Err[E]``. Fallible computations return one of them instead of raising, and
callers compose them with ``map``/``flat_map`` or take them apart with
structural pattern matching.

The error side is not restricted to exceptions: ``Err("bad")``,
``Err(Reason.NOT_FOUND)`` and ``Err(ValueError("x"))`` are all valid. Whatever
a unit computation puts in its ``Err`` is what the caller eventually sees.

Manifesto:
    - **Explicit over Implicit:** Failures are values in the return type
    - **Closed sum type:** Exactly ``Ok`` or ``Err``, matched exhaustively
    - **Functional composition:** map/flat_map without nested try/except
    - **Loud misuse:** ``unwrap()`` on ``Err`` raises ContractViolation

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────┐
        │                     Result[T, E]                             │
        │                    (Type Alias)                              │
        ├─────────────────┬─────────────────┬─────────────────────────┤
        │     Ok[T]       │     Err[E]      │     Utilities           │
        │   (Success)     │   (Failure)     │                         │
        ├─────────────────┼─────────────────┼─────────────────────────┤
        │ • value: T      │ • error: E      │ • try_result()          │
        │ • map()         │ • map_err()     │ • collect_results()     │
        │ • flat_map()    │ • or_else()     │ • partition_results()   │
        │ • unwrap()      │ • unwrap_or()   │ • from_optional()       │
        └─────────────────┴─────────────────┴─────────────────────────┘

Examples:
    >>> from fallible.core.result import Ok, Err, Result
    >>> def divide(a: int, b: int) -> Result[float, str]:
    ...     if b == 0:
    ...         return Err("division by zero")
    ...     return Ok(a / b)
    >>> match divide(10, 2):
    ...     case Ok(value):
    ...         print(f"Result: {value}")
    ...     case Err(error):
    ...         print(f"Error: {error}")
    Result: 5.0

    >>> Ok(10).map(lambda x: x * 2).map(lambda x: x + 1).unwrap()
    21
    >>> Err("oops").map(lambda x: x * 2).unwrap_or(0)
    0

Performance:
    - **O(1)** for every method
    - **Memory:** frozen dataclasses with __slots__
    - **Err short-circuit:** map/flat_map on Err return self without calling f

Guardrails:
    ❌ DON'T: Call unwrap() without checking is_ok() first
    ✅ DO: Use unwrap_or() or pattern matching

    ❌ DON'T: Raise inside flat_map to signal failure
    ✅ DO: Return Err from the function passed to flat_map

Tags:
    result-pattern, error-handling, functional-programming, monadic, fallible
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar, overload

from fallible.core.errors import ContractViolation, FallibleError


T = TypeVar("T")
U = TypeVar("U")
E = TypeVar("E")
F = TypeVar("F")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """
    Successful result containing a value.

    Examples:
        >>> ok = Ok(42)
        >>> ok.is_ok(), ok.is_err()
        (True, False)
        >>> Ok(5).flat_map(lambda x: Ok(x + 1) if x > 0 else Err("neg")).unwrap()
        6
        >>> Ok(42).inspect(lambda x: print(f"Got: {x}")).unwrap()
        Got: 42
        42
    """

    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        """Get the value. Safe for Ok."""
        return self.value

    def expect(self, message: str) -> T:
        """Get the value. Safe for Ok."""
        return self.value

    def unwrap_err(self) -> Any:
        """Ok has no error: always raises ContractViolation."""
        raise ContractViolation(f"unwrap_err() called on Ok({self.value!r})")

    def unwrap_or(self, default: T) -> T:
        """Get value or default (always returns value for Ok)."""
        return self.value

    def unwrap_or_else(self, f: Callable[[Any], T]) -> T:
        """Get value or call f with error (always returns value for Ok)."""
        return self.value

    def map(self, f: Callable[[T], U]) -> Ok[U]:
        """Transform the value."""
        return Ok(f(self.value))

    def flat_map(self, f: Callable[[T], Result[U, E]]) -> Result[U, E]:
        """Chain to another Result-returning function."""
        return f(self.value)

    def and_then(self, f: Callable[[T], Result[U, E]]) -> Result[U, E]:
        """Alias for flat_map."""
        return f(self.value)

    def map_err(self, f: Callable[[Any], Any]) -> Ok[T]:
        """Transform error if Err (no-op for Ok)."""
        return self

    def or_else(self, f: Callable[[Any], Result[T, F]]) -> Ok[T]:
        """Return self if Ok, otherwise call f with error."""
        return self

    def inspect(self, f: Callable[[T], None]) -> Ok[T]:
        """Call f with value for side effects, return self."""
        f(self.value)
        return self

    def inspect_err(self, f: Callable[[Any], None]) -> Ok[T]:
        """Call f with error for side effects (no-op for Ok)."""
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {"ok": True, "value": self.value}

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """
    Failed result containing an error payload.

    ``map`` and ``flat_map`` return the same ``Err`` without calling their
    function, so an error travels through a chain untouched. ``or_else`` and
    ``unwrap_or`` are the recovery points.

    Examples:
        >>> err = Err("something went wrong")
        >>> err.is_err()
        True
        >>> err.unwrap_or("default")
        'default'
        >>> Err("x").or_else(lambda e: Ok("backup")).unwrap()
        'backup'
        >>> Err("raw").map_err(str.upper).error
        'RAW'
    """

    error: E

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self) -> Any:
        """Unwrapping an Err is a contract violation."""
        raise self._violation(f"unwrap() called on Err({self.error!r})")

    def expect(self, message: str) -> Any:
        """Raise ContractViolation with the caller's message."""
        raise self._violation(message)

    def unwrap_err(self) -> E:
        """Get the error. Safe for Err."""
        return self.error

    def unwrap_or(self, default: T) -> T:
        """Get default since this is Err."""
        return default

    def unwrap_or_else(self, f: Callable[[E], T]) -> T:
        """Call f with error to get value."""
        return f(self.error)

    def map(self, f: Callable[[Any], Any]) -> Err[E]:
        """No-op for Err."""
        return self

    def flat_map(self, f: Callable[[Any], Any]) -> Err[E]:
        """No-op for Err."""
        return self

    def and_then(self, f: Callable[[Any], Any]) -> Err[E]:
        """No-op for Err."""
        return self

    def map_err(self, f: Callable[[E], F]) -> Err[F]:
        """Transform the error."""
        return Err(f(self.error))

    def or_else(self, f: Callable[[E], Result[T, F]]) -> Result[T, F]:
        """Call f with error to try recovery."""
        return f(self.error)

    def inspect(self, f: Callable[[Any], None]) -> Err[E]:
        """No-op for Err."""
        return self

    def inspect_err(self, f: Callable[[E], None]) -> Err[E]:
        """Call f with error for side effects, return self."""
        f(self.error)
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        if isinstance(self.error, FallibleError):
            return {"ok": False, "error": self.error.to_dict()}
        if isinstance(self.error, BaseException):
            return {
                "ok": False,
                "error": {
                    "error_type": type(self.error).__name__,
                    "message": str(self.error),
                },
            }
        return {"ok": False, "error": self.error}

    def _violation(self, message: str) -> ContractViolation:
        cause = self.error if isinstance(self.error, BaseException) else None
        violation = ContractViolation(message, cause=cause)
        violation.context.metadata["error"] = repr(self.error)
        return violation

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


# Type alias for Result
Result = Ok[T] | Err[E]


# =============================================================================
# RESULT CONSTRUCTORS AND UTILITIES
# =============================================================================


def try_result(f: Callable[[], T]) -> Result[T, Exception]:
    """
    Execute a function and wrap its outcome in Result.

    The bridge from exception-raising code: a return value becomes ``Ok``, an
    ``Exception`` becomes ``Err`` holding that exception.

    Examples:
        >>> import json
        >>> try_result(lambda: json.loads('{"a": 1}')).unwrap()
        {'a': 1}
        >>> try_result(lambda: json.loads('invalid')).is_err()
        True
    """
    try:
        return Ok(f())
    except Exception as e:
        return Err(e)


def try_result_with(
    f: Callable[[], T],
    error_mapper: Callable[[Exception], F] | None = None,
) -> Result[T, Any]:
    """
    Execute a function and map any exception to a domain error value.

    Examples:
        >>> try_result_with(lambda: 1 / 0, lambda e: "div0").error
        'div0'
        >>> try_result_with(lambda: 1 / 0).error
        ZeroDivisionError('division by zero')
    """
    try:
        return Ok(f())
    except Exception as e:
        if error_mapper:
            return Err(error_mapper(e))
        return Err(e)


def collect_results(results: list[Result[T, E]]) -> Result[list[T], E]:
    """
    Collect already computed Results into a Result of list (fail-fast).

    The first ``Err`` is returned as-is; later ones are never looked at.
    Use ``fallible.core.sequence.sequence`` when the results are still
    unevaluated units.

    Examples:
        >>> collect_results([Ok(1), Ok(2), Ok(3)]).unwrap()
        [1, 2, 3]
        >>> collect_results([Ok(1), Err("a"), Err("b")]).error
        'a'
        >>> collect_results([]).unwrap()
        []
    """
    values = []
    for result in results:
        match result:
            case Ok(value):
                values.append(value)
            case Err():
                return result
            case _:
                raise ContractViolation(
                    f"expected Ok or Err, got {type(result).__name__}"
                )
    return Ok(values)


def partition_results(
    results: list[Result[T, E]],
) -> tuple[list[T], list[E]]:
    """
    Partition results into successes and failures.

    Examples:
        >>> values, errors = partition_results([Ok(1), Err("a"), Ok(2)])
        >>> values, errors
        ([1, 2], ['a'])
    """
    values = []
    errors = []
    for result in results:
        match result:
            case Ok(value):
                values.append(value)
            case Err(error):
                errors.append(error)
    return values, errors


@overload
def from_optional(value: None, error: E) -> Err[E]: ...

@overload
def from_optional(value: T, error: E) -> Result[T, E]: ...

def from_optional(value: T | None, error: E) -> Result[T, E]:
    """
    Convert an optional value to Result.

    Examples:
        >>> cache = {"key1": "value1"}
        >>> from_optional(cache.get("key1"), "cache miss").unwrap()
        'value1'
        >>> from_optional(cache.get("missing"), "cache miss").error
        'cache miss'
    """
    if value is None:
        return Err(error)
    return Ok(value)


def from_bool(
    condition: bool,
    ok_value: T,
    error: E,
) -> Result[T, E]:
    """
    Create Result from boolean condition.

    Examples:
        >>> from_bool(2 > 1, "yes", "no")
        Ok('yes')
        >>> from_bool(1 > 2, "yes", "no")
        Err('no')
    """
    if condition:
        return Ok(ok_value)
    return Err(error)


__all__ = [
    "Ok",
    "Err",
    "Result",
    "try_result",
    "try_result_with",
    "collect_results",
    "partition_results",
    "from_optional",
    "from_bool",
]
