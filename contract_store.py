# contract_store.py
"""
Contract and transaction-batch records.

Records are stored as whole JSON documents, with the fields we look up by
copied into columns. Keys are 24 hex chars; anything that is not a well-formed
key is treated as a human-readable name.
"""
from __future__ import annotations

import json
import logging
import re
import secrets
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import text
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

_KEY_RE = re.compile(r"^[0-9a-fA-F]{24}$")


def new_record_id() -> str:
    return secrets.token_hex(12)


def is_record_key(identifier: str) -> bool:
    return bool(identifier) and bool(_KEY_RE.match(identifier))


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _row_to_record(row) -> Dict[str, Any]:
    record = json.loads(row.document)
    record["_id"] = row.id
    record["uploadedAt"] = row.uploaded_at
    record["createdAt"] = row.created_at
    return record


def _json_or_none(value) -> Optional[str]:
    if value is None:
        return None
    return value if isinstance(value, str) else json.dumps(value)


# ────────────────────────────────────────────────────────────
# Contracts
# ────────────────────────────────────────────────────────────

_CONTRACT_COLUMNS = "id, document, uploaded_at, created_at"


def insert_contract(db: Session, document: Dict[str, Any]) -> str:
    abi = document.get("abi")
    if not isinstance(abi, list):
        raise ValueError("Contract document must carry an 'abi' list")

    record_id = new_record_id()
    now = _now()
    db.execute(
        text(
            "INSERT INTO contracts (id, name, contract_name, abi, bytecode, deployed_bytecode, "
            "source, compiler_version, settings, document, uploaded_at, created_at) "
            "VALUES (:id, :name, :cname, :abi, :bc, :dbc, :src, :cv, :settings, :doc, :now, :now)"
        ),
        {
            "id": record_id,
            "name": document.get("name"),
            "cname": document.get("contractName"),
            "abi": json.dumps(abi),
            "bc": _json_or_none(document.get("bytecode")),
            "dbc": _json_or_none(document.get("deployedBytecode")),
            "src": document.get("source") or document.get("sourcePath"),
            "cv": document.get("compilerVersion"),
            "settings": _json_or_none(document.get("settings")),
            "doc": json.dumps(document, default=str),
            "now": now,
        },
    )
    db.commit()
    logger.info("Stored contract id=%s name=%s", record_id, document.get("contractName") or document.get("name"))
    return record_id


def list_contracts(db: Session) -> List[Dict[str, Any]]:
    rows = db.execute(
        text(f"SELECT {_CONTRACT_COLUMNS} FROM contracts ORDER BY created_at")
    ).fetchall()
    return [_row_to_record(r) for r in rows]


def find_contract(db: Session, identifier: str) -> Optional[Dict[str, Any]]:
    """By record key, or by `name` / `contractName` when `identifier` is not a key."""
    if is_record_key(identifier):
        row = db.execute(
            text(f"SELECT {_CONTRACT_COLUMNS} FROM contracts WHERE id = :id"),
            {"id": identifier.lower()},
        ).fetchone()
    else:
        row = db.execute(
            text(
                f"SELECT {_CONTRACT_COLUMNS} FROM contracts "
                "WHERE name = :n OR contract_name = :n ORDER BY created_at LIMIT 1"
            ),
            {"n": identifier},
        ).fetchone()
    return _row_to_record(row) if row else None


def delete_contract(db: Session, identifier: str) -> bool:
    if is_record_key(identifier):
        result = db.execute(text("DELETE FROM contracts WHERE id = :id"), {"id": identifier.lower()})
    else:
        target = db.execute(
            text(
                "SELECT id FROM contracts WHERE name = :n OR contract_name = :n "
                "ORDER BY created_at LIMIT 1"
            ),
            {"n": identifier},
        ).fetchone()
        if not target:
            return False
        result = db.execute(text("DELETE FROM contracts WHERE id = :id"), {"id": target.id})
    db.commit()
    return result.rowcount > 0


# ────────────────────────────────────────────────────────────
# Transaction batches
# ────────────────────────────────────────────────────────────

_TX_COLUMNS = "id, document, uploaded_at, created_at"


def insert_transaction(db: Session, document: Dict[str, Any]) -> str:
    functions = document.get("functions")
    if not isinstance(functions, list) or not functions:
        raise ValueError("Transaction document must carry a non-empty 'functions' list")

    record_id = new_record_id()
    now = _now()
    db.execute(
        text(
            "INSERT INTO transactions (id, name, transaction_name, functions, document, uploaded_at, created_at) "
            "VALUES (:id, :name, :tname, :fns, :doc, :now, :now)"
        ),
        {
            "id": record_id,
            "name": document.get("name"),
            "tname": document.get("transactionName"),
            "fns": json.dumps(functions),
            "doc": json.dumps(document, default=str),
            "now": now,
        },
    )
    db.commit()
    logger.info("Stored transaction batch id=%s functions=%d", record_id, len(functions))
    return record_id


def find_transaction(db: Session, identifier: str) -> Optional[Dict[str, Any]]:
    if is_record_key(identifier):
        row = db.execute(
            text(f"SELECT {_TX_COLUMNS} FROM transactions WHERE id = :id"),
            {"id": identifier.lower()},
        ).fetchone()
    else:
        row = db.execute(
            text(
                f"SELECT {_TX_COLUMNS} FROM transactions "
                "WHERE name = :n OR transaction_name = :n ORDER BY created_at LIMIT 1"
            ),
            {"n": identifier},
        ).fetchone()
    return _row_to_record(row) if row else None


def delete_transaction(db: Session, identifier: str) -> bool:
    if is_record_key(identifier):
        result = db.execute(text("DELETE FROM transactions WHERE id = :id"), {"id": identifier.lower()})
    else:
        target = db.execute(
            text(
                "SELECT id FROM transactions WHERE name = :n OR transaction_name = :n "
                "ORDER BY created_at LIMIT 1"
            ),
            {"n": identifier},
        ).fetchone()
        if not target:
            return False
        result = db.execute(text("DELETE FROM transactions WHERE id = :id"), {"id": target.id})
    db.commit()
    return result.rowcount > 0
