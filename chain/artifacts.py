# chain/artifacts.py
"""
Flattens compiler output into the canonical record we store: Foundry
artifacts nest bytecode under `{"object": ...}`, plain exports use strings.
"""
from __future__ import annotations

import json
from typing import Any, Dict


def _bytecode_field(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, dict) and "object" in value:
        return value.get("object") or ""
    return ""


def extract_bytecode(data: Dict[str, Any]) -> str:
    """Creation bytecode, falling back to deployedBytecode."""
    return _bytecode_field(data.get("bytecode")) or _bytecode_field(data.get("deployedBytecode"))


def extract_deployed_bytecode(data: Dict[str, Any]) -> str:
    return _bytecode_field(data.get("deployedBytecode")) or extract_bytecode(data)


def extract_contract_name(data: Dict[str, Any]) -> str:
    if data.get("contractName"):
        return data["contractName"]

    metadata = data.get("metadata")
    if metadata:
        try:
            if isinstance(metadata, str):
                metadata = json.loads(metadata)
            if isinstance(metadata, dict) and metadata.get("contractName"):
                return metadata["contractName"]
        except ValueError:
            pass

    if data.get("contractId"):
        return data["contractId"]

    return "Unknown"


def normalize_contract_data(data: Dict[str, Any]) -> Dict[str, Any]:
    """Copy of `data` with bytecode fields replaced by hex strings."""
    normalized = dict(data)

    bytecode = extract_bytecode(data)
    if bytecode:
        normalized["bytecode"] = bytecode

    deployed = extract_deployed_bytecode(data)
    if deployed:
        normalized["deployedBytecode"] = deployed

    if not normalized.get("contractName"):
        name = extract_contract_name(data)
        if name != "Unknown":
            normalized["contractName"] = name

    return normalized
