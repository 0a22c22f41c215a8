# chain/calls.py
"""
Builds call descriptors for one or many ABI fragments. Pure: nothing here
talks to a node; the wallet module broadcasts what this produces.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from errors import ValidationError
from .abi import AbiFragment
from .coerce import coerce
from .encoding import encode_args

ValuesByFragment = Union[Sequence[Sequence[str]], Mapping[int, Sequence[str]]]


@dataclass(frozen=True)
class CallDescriptor:
    target: Optional[str]
    data: str
    value: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {"to": self.target, "data": self.data, "value": self.value}


def encode_call(fragment: AbiFragment, raw_values: Sequence[str]) -> str:
    """
    Coerce `raw_values` against the fragment's declared types and encode them.
    Functions get the 4-byte selector in front; constructors do not.
    """
    typed = [coerce(v, p.type_name) for p, v in zip(fragment.parameters, raw_values)]
    packed = encode_args(fragment.parameters, typed)
    if fragment.is_constructor:
        return "0x" + packed.hex()
    return "0x" + (fragment.selector + packed).hex()


def _values_for(values_by_fragment: ValuesByFragment, index: int) -> Sequence[str]:
    if isinstance(values_by_fragment, Mapping):
        return values_by_fragment.get(index) or []
    if index < len(values_by_fragment):
        return values_by_fragment[index] or []
    return []


def validate_counts(fragments: Sequence[AbiFragment], values_by_fragment: ValuesByFragment):
    """Raise ValidationError for the first fragment whose value count is off."""
    for i, fragment in enumerate(fragments):
        actual = len(_values_for(values_by_fragment, i))
        expected = len(fragment.parameters)
        if actual != expected:
            raise ValidationError(i, expected, actual, name=fragment.name)


def build_calls(
    fragments: Sequence[AbiFragment],
    values_by_fragment: ValuesByFragment,
) -> List[CallDescriptor]:
    """
    Build one CallDescriptor per fragment, in fragment order.

    The whole batch is rejected on the first count mismatch or encoding
    failure; a batch executes as a single multi-call, so partial output is
    never returned.

    Raises:
        ValidationError, EncodingError
    """
    validate_counts(fragments, values_by_fragment)
    calls = []
    for i, fragment in enumerate(fragments):
        data = encode_call(fragment, _values_for(values_by_fragment, i))
        calls.append(CallDescriptor(target=fragment.target, data=data, value=0))
    return calls


def classify_batch_receipts(receipts: Optional[Sequence[Any]]) -> str:
    return "success" if receipts else "failed"
