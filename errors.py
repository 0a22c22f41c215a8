# errors.py
"""
Error taxonomy shared by the call builder, the argument encoder and the
verification flow. Routes map these onto HTTP status codes; nothing here is
fatal to the process.
"""
from __future__ import annotations

from enum import Enum
from typing import Optional


class ValidationError(ValueError):
    """Argument count for a fragment does not match its declared parameters."""

    def __init__(self, fragment_index: int, expected: int, actual: int, name: str = ""):
        self.fragment_index = fragment_index
        self.expected = expected
        self.actual = actual
        self.name = name
        label = f" ({name})" if name else ""
        super().__init__(
            f"Fragment {fragment_index}{label} expects {expected} arg(s), "
            f"but received {actual}."
        )

    def to_dict(self):
        return {
            "fragmentIndex": self.fragment_index,
            "expected": self.expected,
            "actual": self.actual,
        }


class EncodingError(ValueError):
    """A coerced value could not be packed for its declared ABI type."""

    def __init__(self, message: str, type_name: Optional[str] = None, param_name: Optional[str] = None):
        super().__init__(message)
        self.type_name = type_name
        self.param_name = param_name


class SubmissionErrorKind(str, Enum):
    MALFORMED_RESPONSE = "malformed_response"
    REJECTED = "rejected"


class SubmissionError(Exception):
    """The explorer did not accept a verification submission."""

    def __init__(self, kind: SubmissionErrorKind, detail: str):
        super().__init__(detail)
        self.kind = kind
        self.detail = detail


class PollError(Exception):
    """A single status query failed. Absorbed by the poll loop."""


class ContractNotFound(LookupError):
    pass


class WalletError(RuntimeError):
    pass
