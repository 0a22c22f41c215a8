# explorer.py
"""
Etherscan-compatible verification API client.
Pattern: one form POST to submit -> GUID; GET checkverifystatus per poll.
"""
from __future__ import annotations

import logging
from typing import Any, Dict

import requests

from config import (
    CHAIN_ID,
    DEFAULT_OPTIMIZER_RUNS,
    ETHERSCAN_API_KEY,
    ETHERSCAN_API_URL,
    EXPLORER_HTTP_TIMEOUT,
)
from errors import PollError, SubmissionError, SubmissionErrorKind

logger = logging.getLogger(__name__)

SUCCESS_STATUS = "1"


def _compiler_version(record: Dict[str, Any]) -> str:
    version = str(record.get("compilerVersion") or "").strip()
    return version if version.startswith("v") else f"v{version}"


def build_submission_form(
    record: Dict[str, Any],
    contract_address: str,
    encoded_args: str,
    *,
    chain_id: int = CHAIN_ID,
    api_key: str = ETHERSCAN_API_KEY,
) -> Dict[str, str]:
    """
    Form fields for `verifysourcecode`. Optimizer flags come from the stored
    compiler settings; runs default to DEFAULT_OPTIMIZER_RUNS.
    """
    source = record.get("source") or record.get("sourcePath") or ""
    if not source:
        raise ValueError("No source code found in contract data")

    settings = record.get("settings") or {}
    optimizer = settings.get("optimizer") or {}
    runs = optimizer.get("runs") or DEFAULT_OPTIMIZER_RUNS

    return {
        "apikey": api_key,
        "contractaddress": contract_address,
        "chainid": str(chain_id),
        "module": "contract",
        "action": "verifysourcecode",
        "contractname": str(record.get("contractName") or record.get("name") or "Contract"),
        "codeformat": "solidity-single-file",
        "compilerversion": _compiler_version(record),
        "constructorArguments": encoded_args or "",
        "optimizationUsed": "1" if optimizer.get("enabled") else "0",
        "runs": str(runs),
        "sourceCode": source,
        "evmversion": str(settings.get("evmVersion") or ""),
    }


def submit_verification(
    record: Dict[str, Any],
    contract_address: str,
    encoded_args: str,
    *,
    chain_id: int = CHAIN_ID,
) -> str:
    """
    Submit source for verification and return the tracking GUID.
    Does not poll.

    Raises:
        SubmissionError(MALFORMED_RESPONSE) for a non-JSON body,
        SubmissionError(REJECTED) when status != "1",
        requests.RequestException on transport failure.
    """
    form = build_submission_form(record, contract_address, encoded_args, chain_id=chain_id)
    logger.info(
        "Submitting verification: contract=%s address=%s compiler=%s args=%d chars",
        form["contractname"], contract_address, form["compilerversion"], len(form["constructorArguments"]),
    )

    r = requests.post(
        ETHERSCAN_API_URL,
        params={"chainid": chain_id},
        data=form,
        timeout=EXPLORER_HTTP_TIMEOUT,
    )

    try:
        payload = r.json()
    except ValueError:
        raise SubmissionError(
            SubmissionErrorKind.MALFORMED_RESPONSE,
            "Non-JSON response received: " + r.text[:500],
        )
    if not isinstance(payload, dict):
        raise SubmissionError(
            SubmissionErrorKind.MALFORMED_RESPONSE,
            f"Unexpected response shape: {payload!r}"[:500],
        )

    if str(payload.get("status")) != SUCCESS_STATUS:
        detail = str(payload.get("result") or payload.get("message") or "Unknown error")
        logger.warning("Verification submission rejected: %s", detail)
        raise SubmissionError(SubmissionErrorKind.REJECTED, detail)

    guid = str(payload.get("result") or "")
    if not guid:
        raise SubmissionError(SubmissionErrorKind.MALFORMED_RESPONSE, "Accepted response carried no GUID")
    logger.info("Verification submitted: guid=%s", guid)
    return guid


def fetch_status(guid: str, *, chain_id: int = CHAIN_ID) -> Dict[str, Any]:
    """
    One `checkverifystatus` query.

    Raises:
        PollError on transport failure or a non-JSON body.
    """
    try:
        r = requests.get(
            ETHERSCAN_API_URL,
            params={
                "chainid": chain_id,
                "module": "contract",
                "action": "checkverifystatus",
                "guid": guid,
                "apikey": ETHERSCAN_API_KEY,
            },
            timeout=EXPLORER_HTTP_TIMEOUT,
        )
        payload = r.json()
    except requests.RequestException as e:
        raise PollError(f"Status query failed: {e}") from e
    except ValueError as e:
        raise PollError(f"Non-JSON status response: {e}") from e

    if not isinstance(payload, dict):
        raise PollError(f"Unexpected status response shape: {payload!r}"[:500])
    return payload
