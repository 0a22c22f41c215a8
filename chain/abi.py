# chain/abi.py
"""
Typed view over ABI JSON. Fragments are parsed once, when a stored contract or
transaction record is read, and every parameter is tagged with the category
the coercer and encoders switch on.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from eth_utils import keccak

_INT_RE = re.compile(r"^u?int(\d{1,3})?$")
_BYTES_RE = re.compile(r"^bytes(\d{1,2})?$")


class ParamKind(str, Enum):
    BOOL = "bool"
    INTEGER = "integer"
    ADDRESS = "address"
    BYTES = "bytes"
    TEXT = "text"
    COMPOUND = "compound"


def kind_of(type_name: str) -> ParamKind:
    t = (type_name or "").strip()
    if t.endswith("]") or t.startswith("tuple") or t.startswith("("):
        return ParamKind.COMPOUND
    if t in ("bool", "boolean"):
        return ParamKind.BOOL
    if _INT_RE.match(t):
        return ParamKind.INTEGER
    if t == "address":
        return ParamKind.ADDRESS
    if _BYTES_RE.match(t):
        return ParamKind.BYTES
    return ParamKind.TEXT


@dataclass(frozen=True)
class Parameter:
    name: str
    type_name: str
    kind: ParamKind
    components: Tuple["Parameter", ...] = ()

    @property
    def canonical_type(self) -> str:
        """Type string as used in signatures and by eth_abi."""
        t = self.type_name.strip()
        if t.startswith("tuple"):
            inner = ",".join(c.canonical_type for c in self.components)
            return f"({inner}){t[len('tuple'):]}"
        base, sep, suffix = t.partition("[")
        if base == "boolean":
            base = "bool"
        elif base in ("uint", "int"):
            base += "256"
        return base + sep + suffix


@dataclass(frozen=True)
class AbiFragment:
    name: str
    parameters: Tuple[Parameter, ...]
    is_constructor: bool = False
    target: Optional[str] = None

    @property
    def types(self) -> List[str]:
        return [p.canonical_type for p in self.parameters]

    @property
    def signature(self) -> str:
        return f"{self.name}({','.join(self.types)})"

    @property
    def selector(self) -> bytes:
        return keccak(text=self.signature)[:4]


def parse_parameter(entry: Dict[str, Any]) -> Parameter:
    type_name = entry.get("type")
    if not type_name or not isinstance(type_name, str):
        raise ValueError(f"ABI parameter {entry.get('name', '')!r} has no type")
    components = tuple(parse_parameter(c) for c in entry.get("components") or [])
    if type_name.startswith("tuple") and not components:
        raise ValueError(f"Tuple parameter {entry.get('name', '')!r} has no components")
    return Parameter(
        name=entry.get("name") or "",
        type_name=type_name.strip(),
        kind=kind_of(type_name),
        components=components,
    )


def fragment_from_abi_entry(entry: Dict[str, Any], target: Optional[str] = None) -> AbiFragment:
    """
    Build a fragment from one ABI JSON entry.

    Args:
        entry: a `function` or `constructor` item from an ABI list.
        target: contract address the call is sent to (functions only).

    Raises:
        ValueError if the entry is neither a function nor a constructor, or a
        parameter is malformed.
    """
    kind = entry.get("type", "function")
    if kind not in ("function", "constructor"):
        raise ValueError(f"Unsupported ABI entry type: {kind}")
    is_constructor = kind == "constructor"
    name = entry.get("name") or ("constructor" if is_constructor else "")
    if not name:
        raise ValueError("ABI function entry has no name")
    return AbiFragment(
        name=name,
        parameters=tuple(parse_parameter(p) for p in entry.get("inputs") or []),
        is_constructor=is_constructor,
        target=None if is_constructor else target,
    )


def constructor_fragment(abi: List[Dict[str, Any]]) -> AbiFragment:
    """Constructor of a contract ABI. Contracts without one take no arguments."""
    for entry in abi or []:
        if entry.get("type") == "constructor":
            return fragment_from_abi_entry(entry)
    return AbiFragment(name="constructor", parameters=(), is_constructor=True)


def function_fragment(abi: List[Dict[str, Any]], name: str, target: Optional[str] = None) -> AbiFragment:
    for entry in abi or []:
        if entry.get("type", "function") == "function" and entry.get("name") == name:
            return fragment_from_abi_entry(entry, target=target)
    raise ValueError(f"Function {name!r} not found in ABI")


@dataclass(frozen=True)
class BatchFunction:
    """One function of a stored transaction batch plus its default values."""
    fragment: AbiFragment
    defaults: Tuple[str, ...] = field(default_factory=tuple)


def batch_function_from_record(func: Dict[str, Any]) -> BatchFunction:
    """
    Parse one entry of a transaction record's `functions` list:
    {name, signature, contract, contract_address, params: [{name, type, value}]}.
    """
    params = func.get("params") or []
    fragment = fragment_from_abi_entry(
        {"type": "function", "name": func.get("name"), "inputs": params},
        target=func.get("contract_address"),
    )
    defaults = tuple("" if p.get("value") is None else str(p.get("value")) for p in params)
    return BatchFunction(fragment=fragment, defaults=defaults)
