# tx_routes.py
"""
Stored multi-call batches.
Pattern: build every call up front -> send batch -> wait for receipts -> classify.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Response
from pydantic import BaseModel
from sqlalchemy.orm import Session

from chain.abi import BatchFunction, batch_function_from_record
from chain.coerce import as_text
from chain.calls import build_calls, classify_batch_receipts
from config import CORS_HEADERS
from contract_store import delete_transaction, find_transaction, insert_transaction
from db import get_db, session_scope
from errors import EncodingError, ValidationError, WalletError
from wallet import send_batch, wait_for_batch

logger = logging.getLogger(__name__)
router = APIRouter(tags=["transactions"])


class ExecuteRequest(BaseModel):
    # Per-function raw values; omitted -> the values stored with the batch
    values: Optional[List[List[Any]]] = None


def _load_batch(transaction_id: str) -> List[BatchFunction]:
    with session_scope() as db:
        record = find_transaction(db, transaction_id)
    if not record:
        raise HTTPException(404, "Transaction not found")
    try:
        return [batch_function_from_record(f) for f in record.get("functions") or []]
    except ValueError as e:
        raise HTTPException(400, f"Invalid transaction record: {e}")


def _build(functions: List[BatchFunction], values: Optional[List[List[Any]]]):
    if values is None:
        values = [list(f.defaults) for f in functions]
    else:
        values = [[as_text(v) for v in row] for row in values]
    try:
        return build_calls([f.fragment for f in functions], values)
    except ValidationError as e:
        raise HTTPException(400, {"message": str(e), **e.to_dict()})
    except EncodingError as e:
        raise HTTPException(400, str(e))


@router.options("/transactions/{transaction_id}")
def transaction_preflight(transaction_id: str):
    return Response(status_code=200, headers=CORS_HEADERS)


@router.post("/transactions")
def upload_transaction(payload: Dict[str, Any] = Body(...), db: Session = Depends(get_db)):
    try:
        inserted_id = insert_transaction(db, payload)
    except ValueError as e:
        raise HTTPException(400, str(e))
    return {
        "success": True,
        "message": "Transaction data uploaded successfully",
        "insertedId": inserted_id,
    }


@router.get("/transactions/{transaction_id}")
def get_transaction(transaction_id: str, db: Session = Depends(get_db)):
    transaction = find_transaction(db, transaction_id)
    if not transaction:
        raise HTTPException(404, "Transaction not found")
    return {"success": True, "transaction": transaction}


@router.delete("/transactions/{transaction_id}")
def remove_transaction(transaction_id: str, db: Session = Depends(get_db)):
    if not delete_transaction(db, transaction_id):
        raise HTTPException(404, "Transaction not found")
    return {"success": True, "message": "Transaction deleted successfully"}


@router.post("/transactions/{transaction_id}/calls")
def preview_calls(transaction_id: str, req: Optional[ExecuteRequest] = None):
    """Encode the batch without sending it."""
    calls = _build(_load_batch(transaction_id), req.values if req else None)
    return {"success": True, "calls": [c.to_dict() for c in calls]}


@router.post("/transactions/{transaction_id}/execute")
def execute_transaction(transaction_id: str, req: Optional[ExecuteRequest] = None):
    calls = _build(_load_batch(transaction_id), req.values if req else None)
    logger.info("Executing batch %s with %d call(s)", transaction_id, len(calls))

    try:
        batch_id = send_batch(calls)
        receipts = wait_for_batch(batch_id)
    except WalletError as e:
        logger.warning("Batch %s failed: %s", transaction_id, e)
        raise HTTPException(502, str(e))

    status = classify_batch_receipts(receipts)
    return {
        "success": status == "success",
        "batchId": batch_id,
        "status": status,
        "message": (
            "Transaction executed successfully!"
            if status == "success"
            else "Transaction failed or was reverted"
        ),
        "calls": [c.to_dict() for c in calls],
    }
