# verify_routes.py
"""
Source verification endpoints.
Pattern: load record -> encode constructor args -> submit -> poll until settled.
"""
from __future__ import annotations

import logging
from typing import Any, List, Optional, Union

import requests
from fastapi import APIRouter, Request, Response
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from chain.abi import constructor_fragment
from chain.coerce import as_text
from chain.constructor_args import encode_raw_constructor_args, normalize_encoded_args
from config import CORS_HEADERS, VERIFY_MAX_ATTEMPTS, VERIFY_POLL_INTERVAL
from contract_store import find_contract
from db import session_scope
from errors import EncodingError, PollError, SubmissionError, SubmissionErrorKind, ValidationError
from explorer import fetch_status, submit_verification
from verification import (
    VerificationSession,
    poll_until_abandoned,
    project_response,
    project_session,
)

logger = logging.getLogger(__name__)
router = APIRouter(tags=["verify"])

POLL_INTERVAL = VERIFY_POLL_INTERVAL
MAX_ATTEMPTS = VERIFY_MAX_ATTEMPTS


class VerifyRequest(BaseModel):
    contractId: str = ""
    contractAddress: str = ""
    # Raw constructor values, or an already ABI-encoded hex string
    constructorArgs: Optional[Union[str, List[Any]]] = None


def _reply(body: dict, status_code: int = 200) -> JSONResponse:
    return JSONResponse(body, status_code=status_code, headers=CORS_HEADERS)


def _error(status_code: int, message: str, error: Optional[str] = None) -> JSONResponse:
    body = {"success": False, "message": message}
    if error is not None:
        body["error"] = error
    return _reply(body, status_code)


def _load_contract(contract_id: str):
    with session_scope() as db:
        return find_contract(db, contract_id)


def _encode_args(contract: dict, constructor_args) -> str:
    if constructor_args is None:
        return ""
    if isinstance(constructor_args, str):
        return normalize_encoded_args(constructor_args)
    fragment = constructor_fragment(contract.get("abi") or [])
    return encode_raw_constructor_args(fragment, [as_text(v) for v in constructor_args])


@router.options("/verify")
def verify_preflight():
    return Response(status_code=200, headers=CORS_HEADERS)


@router.post("/verify")
async def verify(body: VerifyRequest, request: Request):
    if not body.contractId or not body.contractAddress:
        return _error(400, "Contract ID and contract address are required")

    try:
        contract = await run_in_threadpool(_load_contract, body.contractId)
    except Exception as e:
        logger.exception("Contract lookup failed")
        return _error(500, "Failed to verify contract", str(e))

    if not contract:
        return _error(404, "Contract not found in database")
    if not contract.get("source") and not contract.get("sourcePath"):
        return _error(400, "Contract source code not found in database")

    try:
        encoded_args = _encode_args(contract, body.constructorArgs)
    except ValidationError as e:
        return _error(400, "Constructor argument count mismatch", str(e))
    except (EncodingError, ValueError) as e:
        return _error(400, "Constructor arguments could not be encoded", str(e))

    logger.info(
        "Submitting verification for contract %s at %s",
        contract.get("contractName") or contract.get("name"), body.contractAddress,
    )
    try:
        guid = await run_in_threadpool(
            submit_verification, contract, body.contractAddress, encoded_args
        )
    except SubmissionError as e:
        if e.kind is SubmissionErrorKind.REJECTED:
            return _error(400, "Verification submission failed", e.detail)
        return _error(502, "Verification service returned a malformed response", e.detail)
    except requests.RequestException as e:
        logger.warning("Verification submission transport error: %s", e)
        return _error(502, "Verification service unreachable", str(e))

    session = VerificationSession(tracking_token=guid)
    await poll_until_abandoned(
        session,
        request.is_disconnected,
        fetch=fetch_status,
        interval=POLL_INTERVAL,
        max_attempts=MAX_ATTEMPTS,
    )

    return _reply({
        "success": True,
        "message": "Verification process completed",
        "guid": guid,
        "status": project_session(session),
    })


@router.get("/verify")
async def verify_status(guid: Optional[str] = None):
    if not guid:
        return _error(400, "GUID parameter is required")

    try:
        response = await run_in_threadpool(fetch_status, guid)
    except PollError as e:
        logger.warning("Status check for %s failed: %s", guid, e)
        return _error(500, "Failed to check verification status", str(e))

    return _reply({
        "success": True,
        "status": project_response(response),
        "raw": response,
    })
