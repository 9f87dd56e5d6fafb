"""
Structured error types for fallible.

Separates the two kinds of failure that meet at a sequencing call:

- **Unit failures** travel as data. A unit returns ``Err(payload)`` and the
  payload (a string, an enum member, an exception, anything) is handed back
  to the caller untouched. There is no wrapper class for it.
- **Local errors** are exceptions from this module. They signal misuse of the
  API (``ContractViolation``), the reference recursive strategy running out of
  interpreter stack (``StackOverrun``), a payload that failed to decode
  (``DecodeError``, usually carried inside an ``Err``), or bad settings
  (``ConfigError``).

Manifesto:
    - **Errors as values for units:** The sequencer never raises on a unit's behalf
    - **Loud on misuse:** Unwrapping an ``Err`` is a bug, not a recoverable event
    - **Rich context:** Local errors carry category, context and cause
    - **Serializable:** ``to_dict()`` for structured logging

Architecture:
    ::

        ┌──────────────────────────────────────────────────────────┐
        │                      FallibleError                        │
        │            (category, context, cause)                     │
        ├──────────────────────────────────────────────────────────┤
        │  ContractViolation   StackOverrun   DecodeError          │
        │  (INTERNAL)          (INTERNAL)     (PARSE)              │
        │                                                           │
        │  ConfigError                                              │
        │  (CONFIG)                                                 │
        └──────────────────────────────────────────────────────────┘

Examples:
    >>> error = ContractViolation("unwrap() called on Err")
    >>> error.category
    <ErrorCategory.INTERNAL: 'INTERNAL'>
    >>> error.with_context(strategy="loop").context.metadata
    {'strategy': 'loop'}

Guardrails:
    ❌ DON'T: Catch ContractViolation to keep going
    ✅ DO: Check ``is_ok()`` or pattern match before unwrapping

    ❌ DON'T: Wrap a unit's error payload in a FallibleError
    ✅ DO: Return the unit's ``Err`` as-is

Tags:
    error-handling, exception-hierarchy, error-context, fallible
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """
    Error categories for classification and routing.

    Attributes:
        PARSE: Payload decoding and validation failures
        CONFIG: Missing or invalid settings
        INTERNAL: API misuse, interpreter limits, unexpected state
        UNKNOWN: Anything not raised by this package
    """

    PARSE = "PARSE"
    CONFIG = "CONFIG"
    INTERNAL = "INTERNAL"
    UNKNOWN = "UNKNOWN"


@dataclass
class ErrorContext:
    """
    Structured metadata attached to a FallibleError.

    Attributes:
        strategy: Sequencing strategy in effect when the error was raised
        unit_index: Position of the unit involved, if any
        units: Number of units in the sequencing call, if known
        metadata: Additional key-value pairs
    """

    strategy: str | None = None
    unit_index: int | None = None
    units: int | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result: dict[str, Any] = {}
        for key in ["strategy", "unit_index", "units"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class FallibleError(Exception):
    """
    Base exception for all errors raised by fallible itself.

    Subclasses set ``default_category``. Every instance carries a message, a
    category, an ``ErrorContext`` and an optional chained cause.

    Examples:
        >>> error = FallibleError("Something went wrong")
        >>> error.to_dict()["category"]
        'INTERNAL'
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: ErrorContext | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> FallibleError:
        """
        Add context to this error (fluent API).

        Usage:
            raise StackOverrun("too deep").with_context(strategy="recursive", units=100_000)
        """
        for key, value in kwargs.items():
            if key != "metadata" and hasattr(self.context, key):
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result: dict[str, Any] = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


class ContractViolation(FallibleError):
    """
    A local API contract was broken.

    Raised by ``unwrap()``/``expect()`` on an ``Err``, ``unwrap_err()`` on an
    ``Ok``, and by the sequencers when a unit returns something that is not a
    ``Result``. It signals a programming error and must not be retried.
    """

    default_category = ErrorCategory.INTERNAL


class StackOverrun(FallibleError):
    """
    The reference recursive strategy exhausted the interpreter stack.

    Only ``fallible.strategies.sequence_recursive`` raises this. The
    production sequencers are loops and cannot overrun.
    """

    default_category = ErrorCategory.INTERNAL


class DecodeError(FallibleError):
    """A structured payload could not be decoded into the requested type."""

    default_category = ErrorCategory.PARSE

    def __init__(
        self,
        message: str,
        *,
        errors: list[dict[str, Any]] | None = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.errors = errors or []

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.errors:
            result["errors"] = self.errors
        return result


class ConfigError(FallibleError):
    """Invalid configuration value."""

    default_category = ErrorCategory.CONFIG


def categorize_error(error: object) -> ErrorCategory:
    """Get the category of an error payload."""
    if isinstance(error, FallibleError):
        return error.category
    if isinstance(error, (ValueError, TypeError)):
        return ErrorCategory.PARSE
    return ErrorCategory.UNKNOWN


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "FallibleError",
    "ContractViolation",
    "StackOverrun",
    "DecodeError",
    "ConfigError",
    "categorize_error",
]
