# chain/constructor_args.py
"""
Constructor argument encoding for source verification. Same packing as
calldata arguments, but with no selector and no 0x prefix: the explorer
expects a bare hex payload.
"""
from __future__ import annotations

from typing import Any, List, Sequence

from errors import ValidationError
from .abi import AbiFragment, Parameter
from .coerce import coerce, is_empty
from .encoding import encode_args


def encode_constructor_args(parameters: Sequence[Parameter], values: Sequence[Any]) -> str:
    """
    Returns "" when the constructor takes no parameters or any value is still
    EMPTY; a no-argument constructor must be submitted with an empty field.

    Raises:
        EncodingError when a supplied value cannot be packed.
    """
    if not parameters:
        return ""
    if any(is_empty(v) for v in values):
        return ""
    return encode_args(parameters, values).hex()


def encode_raw_constructor_args(fragment: AbiFragment, raw_values: Sequence[str]) -> str:
    """Coerce form text against the constructor's types, then encode."""
    if fragment.parameters and len(raw_values) != len(fragment.parameters):
        raise ValidationError(0, len(fragment.parameters), len(raw_values), name=fragment.name)
    typed: List[Any] = [coerce(v, p.type_name) for p, v in zip(fragment.parameters, raw_values)]
    return encode_constructor_args(fragment.parameters, typed)


def normalize_encoded_args(encoded: str) -> str:
    """Already-encoded constructor args: strip whitespace and the 0x prefix."""
    s = (encoded or "").strip()
    if s[:2].lower() == "0x":
        s = s[2:]
    return s
