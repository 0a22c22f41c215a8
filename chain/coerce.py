# chain/coerce.py
"""
Form-value coercion. Turns the raw text a user typed for a parameter into the
value the encoders expect, keyed on the declared ABI type.

Coercion never raises. Anything that cannot be interpreted here is passed
through unchanged so the encoder can fail with a type-aware message.
"""
from __future__ import annotations

import json
import logging
from typing import Union

from .abi import ParamKind, kind_of

logger = logging.getLogger(__name__)


class _Empty:
    """Marker for a parameter the user has not filled in yet."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self):
        return "EMPTY"

    def __bool__(self):
        return False


EMPTY = _Empty()

TypedValue = Union[bool, str, _Empty]


def is_empty(value) -> bool:
    return value is EMPTY


def as_text(value) -> str:
    """Form text for a JSON request value (numbers, bools, lists, objects).
    JSON null is an unfilled field, so it becomes "" and coerces to EMPTY."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return json.dumps(value)


def coerce(value: str, type_name: str) -> TypedValue:
    """
    Coerce one raw value for `type_name`.

    - "" -> EMPTY (not supplied), never a type default
    - bool/boolean -> True only for a case-insensitive "true"; any other text is
      False. Lenient on purpose: half-typed form input must not raise.
    - integers, addresses, bytes and everything else stay as text. Integers are
      kept as decimal strings since EVM widths exceed 64 bits.
    """
    if value is None or value == "":
        return EMPTY
    try:
        if kind_of(type_name) is ParamKind.BOOL:
            return str(value).lower() == "true"
        return str(value)
    except Exception as e:
        logger.debug("coerce(%r, %s) fell back to raw value: %s", value, type_name, e)
        return value
