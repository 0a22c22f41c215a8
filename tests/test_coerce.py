"""
Form-value coercion: raw text + declared ABI type -> typed value.
"""
import pytest

from chain.coerce import EMPTY, as_text, coerce, is_empty


class TestEmpty:
    @pytest.mark.parametrize("type_name", ["bool", "uint256", "address", "bytes32", "string", "uint8[]"])
    def test_empty_string_is_not_supplied(self, type_name):
        assert coerce("", type_name) is EMPTY

    def test_empty_is_distinct_from_false(self):
        assert coerce("", "bool") is not False
        assert coerce("false", "bool") is False
        assert is_empty(coerce("", "bool"))
        assert not is_empty(coerce("false", "bool"))

    def test_sentinel_is_falsy_singleton(self):
        assert not EMPTY
        assert type(EMPTY)() is EMPTY


class TestBoolean:
    @pytest.mark.parametrize("raw", ["true", "TRUE", "True", "tRuE"])
    def test_true_is_case_insensitive(self, raw):
        assert coerce(raw, "bool") is True

    @pytest.mark.parametrize("raw", ["false", "0", "1", "yes", "nope", " true"])
    def test_anything_else_is_false(self, raw):
        assert coerce(raw, "bool") is False

    def test_boolean_alias(self):
        assert coerce("true", "boolean") is True


class TestPassThrough:
    def test_integers_stay_decimal_strings(self):
        big = "115792089237316195423570985008687907853269984665640564039457584007913129639935"
        assert coerce(big, "uint256") == big
        assert coerce("-5", "int8") == "-5"

    def test_address_not_validated(self):
        assert coerce("0xabc", "address") == "0xabc"

    def test_bytes_verbatim(self):
        assert coerce("0x1234abcd", "bytes") == "0x1234abcd"
        assert coerce("0x01", "bytes32") == "0x01"

    def test_other_types_verbatim(self):
        assert coerce("hello", "string") == "hello"
        assert coerce("[1,2,3]", "uint256[]") == "[1,2,3]"
        assert coerce('["0xabc", 1]', "tuple") == '["0xabc", 1]'

    def test_never_raises_on_odd_input(self):
        assert coerce("not-a-number", "uint256") == "not-a-number"
        assert coerce("zz", "bytes4") == "zz"


def test_as_text():
    assert as_text("1000") == "1000"
    assert as_text(1000) == "1000"
    assert as_text(True) == "true"
    assert as_text([1, 2]) == "[1, 2]"


def test_null_is_an_unfilled_field():
    assert as_text(None) == ""
    assert is_empty(coerce(as_text(None), "string"))
    assert is_empty(coerce(as_text(None), "uint256"))
