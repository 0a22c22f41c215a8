# chain/encoding.py
"""
Flat ABI argument packing shared by calldata building, constructor argument
encoding and deployment. Coerced form values are turned into the Python
values eth_abi expects; every failure surfaces as errors.EncodingError.
"""
from __future__ import annotations

import json
from typing import Any, List, Sequence

from eth_abi import encode as abi_encode
from eth_abi.exceptions import EncodingError as AbiEncodingError, ParseError
from eth_utils import is_hex_address, to_checksum_address

from errors import EncodingError
from .abi import Parameter, ParamKind, kind_of
from .coerce import EMPTY


def _fail(param: Parameter, value: Any, reason: str = "") -> EncodingError:
    label = param.name or "<unnamed>"
    msg = f"Invalid {param.type_name} value for {label}: {value!r}"
    if reason:
        msg += f" ({reason})"
    return EncodingError(msg, type_name=param.type_name, param_name=param.name)


def _to_int(param: Parameter, value: Any) -> int:
    if isinstance(value, bool):
        raise _fail(param, value, "expected a number")
    if isinstance(value, int):
        return value
    s = str(value).strip()
    try:
        if s.lower().startswith(("0x", "-0x")):
            return int(s, 16)
        return int(s)
    except ValueError:
        raise _fail(param, value, "expected a decimal or 0x-prefixed integer")


def _to_bytes(param: Parameter, value: Any) -> bytes:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    s = str(value).strip()
    if s[:2].lower() == "0x":
        s = s[2:]
    try:
        return bytes.fromhex(s)
    except ValueError:
        raise _fail(param, value, "expected hex bytes")


def _to_address(param: Parameter, value: Any) -> str:
    s = str(value).strip()
    if not is_hex_address(s):
        raise _fail(param, value, "expected a 20-byte hex address")
    return to_checksum_address(s)


def _element(param: Parameter) -> Parameter:
    element_type = param.type_name[: param.type_name.rindex("[")]
    return Parameter(
        name=param.name,
        type_name=element_type,
        kind=kind_of(element_type),
        components=param.components,
    )


def _to_compound(param: Parameter, value: Any) -> Any:
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except ValueError:
            raise _fail(param, value, "expected JSON")

    if param.type_name.endswith("]"):
        if not isinstance(value, (list, tuple)):
            raise _fail(param, value, "expected a list")
        element = _element(param)
        return [prepare_value(element, v) for v in value]

    # tuple
    if isinstance(value, dict):
        value = [value.get(c.name, value.get(str(i))) for i, c in enumerate(param.components)]
    if not isinstance(value, (list, tuple)) or len(value) != len(param.components):
        raise _fail(param, value, f"expected {len(param.components)} component(s)")
    return tuple(prepare_value(c, v) for c, v in zip(param.components, value))


def prepare_value(param: Parameter, value: Any) -> Any:
    """Convert one coerced value into its eth_abi representation."""
    if value is EMPTY or value is None:
        if param.kind is ParamKind.TEXT:
            return ""
        raise EncodingError(
            f"No value supplied for {param.name or '<unnamed>'} ({param.type_name})",
            type_name=param.type_name,
            param_name=param.name,
        )

    if param.kind is ParamKind.BOOL:
        if isinstance(value, bool):
            return value
        return str(value).lower() == "true"
    if param.kind is ParamKind.INTEGER:
        return _to_int(param, value)
    if param.kind is ParamKind.ADDRESS:
        return _to_address(param, value)
    if param.kind is ParamKind.BYTES:
        return _to_bytes(param, value)
    if param.kind is ParamKind.COMPOUND:
        return _to_compound(param, value)
    return str(value)


def prepare_args(parameters: Sequence[Parameter], values: Sequence[Any]) -> List[Any]:
    if len(parameters) != len(values):
        raise EncodingError(
            f"Expected {len(parameters)} value(s), got {len(values)}"
        )
    return [prepare_value(p, v) for p, v in zip(parameters, values)]


def encode_args(parameters: Sequence[Parameter], values: Sequence[Any]) -> bytes:
    """ABI-encode `values` for `parameters`, without any selector."""
    prepared = prepare_args(parameters, values)
    types = [p.canonical_type for p in parameters]
    try:
        return abi_encode(types, prepared)
    except (AbiEncodingError, ParseError, ValueError, TypeError, OverflowError) as e:
        raise EncodingError(f"Could not encode ({','.join(types)}): {e}") from e
