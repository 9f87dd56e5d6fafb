"""Tests for fallible.core.errors module."""

import pytest

from fallible.core.errors import (
    ConfigError,
    ContractViolation,
    DecodeError,
    ErrorCategory,
    ErrorContext,
    FallibleError,
    StackOverrun,
    categorize_error,
)


class TestErrorContext:
    def test_to_dict_excludes_none(self):
        ctx = ErrorContext(strategy="loop")
        assert ctx.to_dict() == {"strategy": "loop"}

    def test_metadata_is_merged(self):
        ctx = ErrorContext(units=3, metadata={"run": "r1"})
        assert ctx.to_dict() == {"units": 3, "run": "r1"}


class TestFallibleError:
    def test_defaults(self):
        error = FallibleError("Something went wrong")
        assert error.message == "Something went wrong"
        assert error.category == ErrorCategory.INTERNAL
        assert error.cause is None
        assert str(error) == "Something went wrong"

    def test_cause_is_chained(self):
        cause = RecursionError("too deep")
        error = StackOverrun("overrun", cause=cause)
        assert error.__cause__ is cause
        assert error.to_dict()["cause"] == "too deep"

    def test_with_context_sets_known_fields_and_metadata(self):
        error = ContractViolation("bad").with_context(strategy="fold", unit_index=2, extra="x")
        assert error.context.strategy == "fold"
        assert error.context.unit_index == 2
        assert error.context.metadata == {"extra": "x"}

    def test_to_dict(self):
        d = ContractViolation("bad").with_context(units=5).to_dict()
        assert d == {
            "error_type": "ContractViolation",
            "message": "bad",
            "category": "INTERNAL",
            "context": {"units": 5},
        }

    def test_repr(self):
        assert repr(ConfigError("x")) == "ConfigError('x', category=CONFIG)"


class TestSubclasses:
    @pytest.mark.parametrize(
        ("cls", "category"),
        [
            (ContractViolation, ErrorCategory.INTERNAL),
            (StackOverrun, ErrorCategory.INTERNAL),
            (DecodeError, ErrorCategory.PARSE),
            (ConfigError, ErrorCategory.CONFIG),
        ],
    )
    def test_default_categories(self, cls, category):
        error = cls("x")
        assert isinstance(error, FallibleError)
        assert error.category == category

    def test_decode_error_carries_field_errors(self):
        error = DecodeError("bad payload", errors=[{"loc": ["id"], "msg": "int expected"}])
        assert error.to_dict()["errors"][0]["loc"] == ["id"]


class TestCategorize:
    def test_fallible_error(self):
        assert categorize_error(ConfigError("x")) == ErrorCategory.CONFIG

    def test_value_error(self):
        assert categorize_error(ValueError("x")) == ErrorCategory.PARSE

    def test_plain_payload(self):
        assert categorize_error("bad") == ErrorCategory.UNKNOWN
