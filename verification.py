# verification.py
"""
Verification session state machine.

    Submitted -> Pending -> {Verified, AlreadyVerified, Failed, TimedOut}

One status query per attempt, a fixed sleep between attempts, and a fixed
attempt budget. A query that errors counts as a null observation: it still
uses up an attempt but never fails the session by itself. TimedOut only means
the budget ran out while the explorer still said pending; the same GUID can be
polled again later.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple

from config import VERIFY_MAX_ATTEMPTS, VERIFY_POLL_INTERVAL
from errors import PollError
from explorer import fetch_status

logger = logging.getLogger(__name__)

PENDING_IN_QUEUE = "Pending in queue"
ALREADY_VERIFIED = "Already Verified"


class VerificationState(str, Enum):
    SUBMITTED = "submitted"
    PENDING = "pending"
    VERIFIED = "verified"
    ALREADY_VERIFIED = "already_verified"
    FAILED = "failed"
    TIMED_OUT = "timeout"


# Final answers from the explorer; a timed-out session can be polled again.
SETTLED = {
    VerificationState.VERIFIED,
    VerificationState.ALREADY_VERIFIED,
    VerificationState.FAILED,
}

_MESSAGES = {
    VerificationState.SUBMITTED: "Verification submitted",
    VerificationState.PENDING: "Verification pending in queue",
    VerificationState.VERIFIED: "Contract verified successfully",
    VerificationState.ALREADY_VERIFIED: "Contract is already verified",
    VerificationState.FAILED: "Verification failed",
    VerificationState.TIMED_OUT: "Verification status check completed after maximum attempts",
}


@dataclass
class VerificationSession:
    tracking_token: str
    submitted_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    attempts_made: int = 0
    state: VerificationState = VerificationState.SUBMITTED
    detail: str = ""

    @property
    def settled(self) -> bool:
        return self.state in SETTLED


def classify(response: Optional[Dict[str, Any]]) -> Tuple[VerificationState, str]:
    """
    Map one status response onto a state. First match wins:
    success flag -> Verified, "Pending in queue" -> Pending,
    "Already Verified" -> AlreadyVerified, anything else -> Failed.
    A missing/empty response stays Pending.
    """
    if not response:
        return VerificationState.PENDING, ""

    result = response.get("result")
    detail = "" if result is None else str(result)

    if str(response.get("status")) == "1":
        return VerificationState.VERIFIED, detail
    if detail == PENDING_IN_QUEUE:
        return VerificationState.PENDING, detail
    if detail == ALREADY_VERIFIED:
        return VerificationState.ALREADY_VERIFIED, detail
    return VerificationState.FAILED, detail or str(response.get("message") or "")


async def poll_verification(
    session: VerificationSession,
    *,
    fetch: Callable[[str], Dict[str, Any]] = fetch_status,
    interval: float = VERIFY_POLL_INTERVAL,
    max_attempts: int = VERIFY_MAX_ATTEMPTS,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
) -> VerificationSession:
    """
    Drive `session` until it settles or the attempt budget runs out.

    `fetch` is blocking (requests) and runs in a worker thread so the event
    loop keeps serving while a query is in flight. Cancelling the awaiting
    task stops the loop before the next query.
    """
    if session.settled:
        return session
    if session.state is VerificationState.TIMED_OUT:
        session.attempts_made = 0

    session.state = VerificationState.PENDING
    while session.attempts_made < max_attempts:
        session.attempts_made += 1
        logger.info(
            "Checking verification status guid=%s (attempt %d/%d)",
            session.tracking_token, session.attempts_made, max_attempts,
        )
        try:
            response = await asyncio.to_thread(fetch, session.tracking_token)
        except PollError as e:
            logger.warning("Status query failed for %s: %s", session.tracking_token, e)
            response = None

        state, detail = classify(response)
        session.state = state
        if detail:
            session.detail = detail

        if state is not VerificationState.PENDING:
            logger.info(
                "Verification %s for guid=%s after %d attempt(s): %s",
                state.value, session.tracking_token, session.attempts_made, session.detail,
            )
            return session

        if session.attempts_made < max_attempts:
            await sleep(interval)

    session.state = VerificationState.TIMED_OUT
    logger.info(
        "Verification still pending for guid=%s after %d attempts",
        session.tracking_token, session.attempts_made,
    )
    return session


async def poll_until_abandoned(
    session: VerificationSession,
    is_abandoned: Callable[[], Awaitable[bool]],
    *,
    check_every: float = 1.0,
    **poll_kwargs,
) -> VerificationSession:
    """
    Run poll_verification as its own task and cancel it as soon as
    `is_abandoned()` reports the caller is gone. An abandoned session is
    returned in whatever non-settled state it had reached.
    """
    task = asyncio.create_task(poll_verification(session, **poll_kwargs))
    try:
        while True:
            done, _ = await asyncio.wait({task}, timeout=check_every)
            if done:
                return task.result()
            if await is_abandoned():
                logger.info("Caller went away; stopping verification poll for %s", session.tracking_token)
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass
                return session
    finally:
        if not task.done():
            task.cancel()


def project(state: VerificationState, detail: str = "") -> Dict[str, Any]:
    """Caller-facing status: {status, message[, result]}."""
    out: Dict[str, Any] = {"status": state.value, "message": _MESSAGES[state]}
    if detail:
        out["result"] = detail
    return out


def project_session(session: VerificationSession) -> Dict[str, Any]:
    out = project(session.state, session.detail)
    out["attempts"] = session.attempts_made
    return out


def project_response(response: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Projection of a single status observation (no polling)."""
    state, detail = classify(response)
    return project(state, detail)
