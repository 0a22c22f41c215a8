# wallet.py
"""
Server-side signer: deploys contracts and sends call batches from the
configured deployer account. Connection and account are created on first use.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

from eth_account import Account
from web3 import Web3

from config import (
    DEPLOYER_ADDRESS,
    DEPLOYER_PRIVATE_KEY,
    MULTICALL3_ADDRESS,
    RECEIPT_TIMEOUT,
    RPC_URL,
)
from errors import WalletError

logger = logging.getLogger(__name__)

_w3 = None
_account = None

# Only aggregate3Value is used; same entry on every Multicall3 deployment
MULTICALL3_ABI = [
    {
        "inputs": [
            {
                "components": [
                    {"name": "target", "type": "address"},
                    {"name": "allowFailure", "type": "bool"},
                    {"name": "value", "type": "uint256"},
                    {"name": "callData", "type": "bytes"},
                ],
                "name": "calls",
                "type": "tuple[]",
            }
        ],
        "name": "aggregate3Value",
        "outputs": [
            {
                "components": [
                    {"name": "success", "type": "bool"},
                    {"name": "returnData", "type": "bytes"},
                ],
                "name": "returnData",
                "type": "tuple[]",
            }
        ],
        "stateMutability": "payable",
        "type": "function",
    }
]


def get_w3() -> Web3:
    global _w3
    if _w3 is None:
        _w3 = Web3(Web3.HTTPProvider(RPC_URL))
    return _w3


def get_account():
    global _account
    if _account is None:
        if not DEPLOYER_PRIVATE_KEY:
            raise WalletError("DEPLOYER_PRIVATE_KEY not set")
        account = Account.from_key(DEPLOYER_PRIVATE_KEY)
        if DEPLOYER_ADDRESS and account.address.lower() != DEPLOYER_ADDRESS.lower():
            raise WalletError("DEPLOYER_PRIVATE_KEY does not match DEPLOYER_ADDRESS")
        _account = account
    return _account


def sign_and_send(tx: dict) -> str:
    w3 = get_w3()
    account = get_account()
    tx = dict(tx)
    tx.pop("gasPrice", None)

    try:
        base_fee = w3.eth.get_block("latest").baseFeePerGas
        priority = w3.eth.max_priority_fee * 150 // 100
        tx["type"] = 2
        tx["maxFeePerGas"] = base_fee * 2 + priority
        tx["maxPriorityFeePerGas"] = priority
    except Exception:
        tx["gasPrice"] = w3.eth.gas_price * 120 // 100

    tx["nonce"] = w3.eth.get_transaction_count(account.address, "pending")
    tx["chainId"] = w3.eth.chain_id

    if "gas" not in tx:
        try:
            tx["gas"] = w3.eth.estimate_gas(tx)
        except Exception as e:
            raise WalletError(f"Gas estimation failed (call would revert?): {e}") from e

    signed = account.sign_transaction(tx)
    return w3.eth.send_raw_transaction(signed.raw_transaction).to_0x_hex()


def deploy_contract(abi: List[Dict[str, Any]], bytecode: str, args: Sequence[Any]) -> str:
    """Send a deployment tx; `args` are already in eth_abi form. Returns tx hash."""
    w3 = get_w3()
    account = get_account()
    contract = w3.eth.contract(abi=abi, bytecode=bytecode)
    try:
        tx = contract.constructor(*args).build_transaction({"from": account.address})
    except Exception as e:
        raise WalletError(f"Could not build deployment transaction: {e}") from e
    tx_hash = sign_and_send(tx)
    logger.info("Deployment submitted: tx=%s args=%d", tx_hash, len(args))
    return tx_hash


def _multicall():
    return get_w3().eth.contract(
        address=Web3.to_checksum_address(MULTICALL3_ADDRESS),
        abi=MULTICALL3_ABI,
    )


def send_batch(calls: Sequence[Any]) -> str:
    """
    Send every call as ONE Multicall3 aggregate3Value transaction, in declared
    order, with no call allowed to fail: a revert anywhere reverts the batch.
    Calls are CallDescriptors (target, data, value). The batch id is the
    transaction hash, so it can be looked up on chain after a restart.
    """
    if not calls:
        raise WalletError("Empty call batch")
    account = get_account()

    packed = []
    for i, call in enumerate(calls):
        if not call.target:
            raise WalletError(f"Call {i} has no target address")
        data = call.data[2:] if call.data.startswith("0x") else call.data
        packed.append((
            Web3.to_checksum_address(call.target),
            False,
            int(call.value or 0),
            bytes.fromhex(data),
        ))
    total_value = sum(p[2] for p in packed)

    # build_transaction simulates the whole batch; nothing is broadcast if any call reverts
    try:
        tx = _multicall().functions.aggregate3Value(packed).build_transaction(
            {"from": account.address, "value": total_value}
        )
    except Exception as e:
        raise WalletError(f"Batch simulation failed (a call would revert?): {e}") from e

    batch_id = sign_and_send(tx)
    logger.info("Batch submitted: id=%s calls=%d", batch_id, len(packed))
    return batch_id


def wait_for_receipt(tx_hash: str, timeout: Optional[int] = None):
    try:
        return get_w3().eth.wait_for_transaction_receipt(tx_hash, timeout=timeout or RECEIPT_TIMEOUT)
    except Exception as e:
        raise WalletError(
            f"Transaction submitted ({tx_hash}) but could not confirm: {e}"
        ) from e


def wait_for_batch(batch_id: str, timeout: Optional[int] = None) -> List[Any]:
    """
    Receipts for the batch transaction, or [] if it reverted.
    """
    receipt = wait_for_receipt(batch_id, timeout=timeout)
    if receipt.status == 0:
        logger.warning("Batch REVERTED: id=%s gasUsed=%d", batch_id, receipt.gasUsed)
        return []
    logger.info("Batch confirmed: id=%s block=%s", batch_id, receipt.blockNumber)
    return [receipt]
