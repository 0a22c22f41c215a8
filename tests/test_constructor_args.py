import pytest

from chain.abi import AbiFragment, constructor_fragment
from chain.coerce import EMPTY
from chain.constructor_args import (
    encode_constructor_args,
    encode_raw_constructor_args,
    normalize_encoded_args,
)
from errors import EncodingError, ValidationError

OWNER = "0x" + "ab" * 20


@pytest.mark.parametrize("values", [[], ["1"], ["a", "b", "c"], [EMPTY]])
def test_no_parameters_always_empty(values):
    assert encode_constructor_args([], values) == ""


def test_empty_value_means_no_encoding(token_contract):
    params = constructor_fragment(token_contract["abi"]).parameters
    assert encode_constructor_args(params, [OWNER, EMPTY]) == ""


def test_bare_hex_without_selector(token_contract):
    params = constructor_fragment(token_contract["abi"]).parameters
    encoded = encode_constructor_args(params, [OWNER, "1000"])
    assert not encoded.startswith("0x")
    assert len(encoded) == 128
    assert encoded[:64] == "0" * 24 + "ab" * 20
    assert encoded[64:] == "%064x" % 1000


def test_short_address_propagates(token_contract):
    params = constructor_fragment(token_contract["abi"]).parameters
    with pytest.raises(EncodingError):
        encode_constructor_args(params, ["0xabc", "1"])


def test_raw_values_are_coerced(token_contract):
    fragment = constructor_fragment(token_contract["abi"])
    assert encode_raw_constructor_args(fragment, [OWNER, "1000"]) == encode_constructor_args(
        fragment.parameters, [OWNER, "1000"]
    )


def test_raw_empty_field_yields_empty(token_contract):
    fragment = constructor_fragment(token_contract["abi"])
    assert encode_raw_constructor_args(fragment, [OWNER, ""]) == ""


def test_raw_count_mismatch(token_contract):
    fragment = constructor_fragment(token_contract["abi"])
    with pytest.raises(ValidationError) as exc:
        encode_raw_constructor_args(fragment, [OWNER])
    assert (exc.value.expected, exc.value.actual) == (2, 1)


def test_raw_no_arg_constructor_ignores_values():
    fragment = AbiFragment(name="constructor", parameters=(), is_constructor=True)
    assert encode_raw_constructor_args(fragment, ["stray"]) == ""


@pytest.mark.parametrize("raw, expected", [
    ("0xABCDEF", "ABCDEF"),
    ("  0x00ff  ", "00ff"),
    ("00ff", "00ff"),
    ("", ""),
    (None, ""),
])
def test_normalize_encoded_args(raw, expected):
    assert normalize_encoded_args(raw) == expected
