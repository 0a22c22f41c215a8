# contract_routes.py
"""
Contract artifact upload, lookup, deletion and deployment.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List

from fastapi import APIRouter, Body, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from chain.abi import constructor_fragment
from chain.artifacts import extract_bytecode, normalize_contract_data
from chain.coerce import as_text, coerce
from chain.encoding import prepare_args
from contract_store import delete_contract, find_contract, insert_contract, list_contracts
from db import get_db, session_scope
from errors import EncodingError, WalletError
from wallet import deploy_contract, wait_for_receipt

logger = logging.getLogger(__name__)
router = APIRouter(tags=["contracts"])


class DeployRequest(BaseModel):
    args: List[Any] = Field(default_factory=list)


def _normalize_bytecode(value: str) -> str:
    trimmed = (value or "").strip()
    if not trimmed:
        return ""
    return trimmed if trimmed.startswith("0x") else "0x" + trimmed


@router.post("/contracts")
def upload_contract(payload: Dict[str, Any] = Body(...), db: Session = Depends(get_db)):
    try:
        inserted_id = insert_contract(db, normalize_contract_data(payload))
    except ValueError as e:
        raise HTTPException(400, str(e))
    return {
        "success": True,
        "message": "Contract data uploaded successfully",
        "insertedId": inserted_id,
    }


@router.get("/contracts")
def get_contracts(db: Session = Depends(get_db)):
    return {"success": True, "contracts": list_contracts(db)}


@router.get("/contracts/{contract_id}")
def get_contract(contract_id: str, db: Session = Depends(get_db)):
    contract = find_contract(db, contract_id)
    if not contract:
        raise HTTPException(404, "Contract not found")
    return {"success": True, "contract": contract}


@router.delete("/contracts/{contract_id}")
def remove_contract(contract_id: str, db: Session = Depends(get_db)):
    if not delete_contract(db, contract_id):
        raise HTTPException(404, "Contract not found")
    return {"success": True, "message": "Contract deleted successfully"}


@router.post("/contracts/{contract_id}/deploy")
def deploy(contract_id: str, req: DeployRequest):
    # Release the DB session before waiting on the chain
    with session_scope() as db:
        contract = find_contract(db, contract_id)
    if not contract:
        raise HTTPException(404, "Contract not found")

    try:
        fragment = constructor_fragment(contract.get("abi") or [])
    except ValueError as e:
        raise HTTPException(400, f"Invalid ABI: {e}")

    expected, received = len(fragment.parameters), len(req.args)
    if expected != received:
        raise HTTPException(400, f"Constructor expects {expected} arg(s), but received {received}.")

    bytecode = _normalize_bytecode(extract_bytecode(contract))
    if not bytecode:
        raise HTTPException(400, "Bytecode is required.")

    try:
        typed = [coerce(as_text(a), p.type_name) for p, a in zip(fragment.parameters, req.args)]
        args = prepare_args(fragment.parameters, typed)
    except EncodingError as e:
        raise HTTPException(400, str(e))

    try:
        tx_hash = deploy_contract(contract["abi"], bytecode, args)
        receipt = wait_for_receipt(tx_hash)
    except WalletError as e:
        logger.warning("Deployment of %s failed: %s", contract_id, e)
        raise HTTPException(502, str(e))

    if receipt.status == 0:
        raise HTTPException(400, f"Deployment reverted on-chain (tx {tx_hash})")

    logger.info("Deployed %s at %s tx=%s", contract_id, receipt.contractAddress, tx_hash)
    return {
        "success": True,
        "txHash": tx_hash,
        "contractAddress": receipt.contractAddress,
    }
