import os
import tempfile

# Point config at a throwaway SQLite file before anything imports it
_DB_DIR = tempfile.mkdtemp(prefix="contract-deployer-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_DB_DIR, 'test.db')}"
os.environ.setdefault("ETHERSCAN_API_KEY", "test-key")

import pytest
from sqlalchemy import text


@pytest.fixture
def db_engine():
    from db import get_engine
    from migrate import run_migrations

    engine = get_engine()
    run_migrations(engine)
    yield engine
    with engine.begin() as conn:
        conn.execute(text("DELETE FROM transactions"))
        conn.execute(text("DELETE FROM contracts"))


@pytest.fixture
def db(db_engine):
    from db import get_session_factory

    session = get_session_factory()()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(db_engine):
    from fastapi.testclient import TestClient
    from main import app

    return TestClient(app)


@pytest.fixture
def token_contract():
    """Stored-record shape for a small ERC20 with a two-arg constructor."""
    return {
        "contractName": "Token",
        "compilerVersion": "0.8.24+commit.e11b9ed9",
        "settings": {"optimizer": {"enabled": True, "runs": 500}, "evmVersion": "paris"},
        "source": "// SPDX-License-Identifier: MIT\npragma solidity ^0.8.24;\ncontract Token {}",
        "bytecode": {"object": "0x6080604052"},
        "deployedBytecode": {"object": "0x60806040"},
        "abi": [
            {
                "type": "constructor",
                "inputs": [
                    {"name": "owner", "type": "address"},
                    {"name": "supply", "type": "uint256"},
                ],
                "stateMutability": "nonpayable",
            },
            {
                "type": "function",
                "name": "mint",
                "inputs": [
                    {"name": "to", "type": "address"},
                    {"name": "amount", "type": "uint256"},
                ],
                "outputs": [],
                "stateMutability": "nonpayable",
            },
        ],
    }
