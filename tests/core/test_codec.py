"""Tests for fallible.core.codec module."""

import json

from pydantic import BaseModel

from fallible.core.codec import decode, decode_all, decode_unit, encode
from fallible.core.errors import DecodeError, ErrorCategory
from fallible.core.result import Ok


class Item(BaseModel):
    id: int
    name: str


class TestDecode:
    def test_decode_ok(self):
        assert decode('{"id": 1, "name": "widget"}', Item) == Ok(Item(id=1, name="widget"))

    def test_decode_bytes(self):
        assert decode(b'{"id": 2, "name": "gadget"}', Item).unwrap().id == 2

    def test_decode_invalid_is_err_not_exception(self):
        result = decode('{"id": "x"}', Item)
        assert result.is_err()
        error = result.error
        assert isinstance(error, DecodeError)
        assert error.category == ErrorCategory.PARSE
        assert "Item" in error.message
        assert {tuple(e["loc"]) for e in error.errors} == {("id",), ("name",)}

    def test_decode_malformed_json(self):
        assert decode("{not json", Item).is_err()

    def test_decode_generic_type(self):
        assert decode("[1, 2, 3]", list[int]) == Ok([1, 2, 3])


class TestDecodeUnits:
    def test_unit_is_deferred(self):
        unit = decode_unit('{"id": 1, "name": "a"}', Item)
        assert callable(unit)
        assert unit().unwrap().name == "a"

    def test_decode_all_ok(self):
        payloads = ['{"id": 1, "name": "a"}', '{"id": 2, "name": "b"}']
        assert [i.id for i in decode_all(payloads, Item).unwrap()] == [1, 2]

    def test_decode_all_first_failure_wins(self):
        payloads = ['{"id": 1, "name": "a"}', '{"id": "bad"}', "{broken"]
        result = decode_all(payloads, Item)
        assert isinstance(result.error, DecodeError)
        assert result.error.errors[0]["loc"] == ("id",)

    def test_encode(self):
        assert json.loads(encode(Item(id=3, name="c"))) == {"id": 3, "name": "c"}
