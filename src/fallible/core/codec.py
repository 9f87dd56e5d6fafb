"""
Decode units: JSON payloads as fallible unit computations.

A decode step is just another unit: invoking it validates one payload with
pydantic and returns ``Ok(model)`` or ``Err(DecodeError)``. Sequencing many of
them with ``decode_all`` stops at the first payload that does not decode.

Examples:
    >>> from pydantic import BaseModel
    >>> class Item(BaseModel):
    ...     id: int
    ...     name: str
    >>> decode_unit('{"id": 1, "name": "a"}', Item)().unwrap().name
    'a'
    >>> decode_unit('{"id": "x"}', Item)().is_err()
    True
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any, TypeVar

from pydantic import TypeAdapter, ValidationError

from fallible.core.errors import DecodeError
from fallible.core.result import Err, Ok, Result
from fallible.core.sequence import FallibleUnit, sequence_lazy


T = TypeVar("T")


@lru_cache(maxsize=128)
def _adapter(target: Any) -> TypeAdapter[Any]:
    return TypeAdapter(target)


def decode(payload: str | bytes, target: type[T]) -> Result[T, DecodeError]:
    """Validate a JSON payload into ``target``."""
    try:
        return Ok(_adapter(target).validate_json(payload))
    except ValidationError as exc:
        name = getattr(target, "__name__", repr(target))
        return Err(
            DecodeError(
                f"payload does not decode as {name}: {exc.error_count()} error(s)",
                errors=exc.errors(include_url=False),
                cause=exc,
            )
        )


def decode_unit(payload: str | bytes, target: type[T]) -> FallibleUnit[T, DecodeError]:
    """Build a unit that decodes ``payload`` when invoked."""
    return lambda: decode(payload, target)


def decode_all(
    payloads: list[str | bytes],
    target: type[T],
) -> Result[list[T], DecodeError]:
    """Decode payloads in order; the first failure wins."""
    return sequence_lazy(decode_unit(payload, target) for payload in payloads)


def encode(value: Any) -> bytes:
    """Serialize a value (model, dataclass, plain data) to JSON bytes."""
    return _adapter(type(value)).dump_json(value)


__all__ = ["decode", "decode_all", "decode_unit", "encode"]
