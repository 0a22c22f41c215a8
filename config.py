# config.py
from dotenv import load_dotenv
import logging
import os

load_dotenv()

logger = logging.getLogger(__name__)

# ------------------------------------------------------------
# Chain / wallet
# ------------------------------------------------------------
CHAIN_ID = int(os.getenv("CHAIN_ID", "84532"))  # Base Sepolia

RPC_URL = os.getenv("RPC_URL", "https://sepolia.base.org")

DEPLOYER_ADDRESS = os.getenv("DEPLOYER_ADDRESS", "")
DEPLOYER_PRIVATE_KEY = os.getenv("DEPLOYER_PRIVATE_KEY", "")

RECEIPT_TIMEOUT = int(os.getenv("RECEIPT_TIMEOUT", "120"))

# Multicall3 is deployed at the same address on every EVM chain
MULTICALL3_ADDRESS = os.getenv("MULTICALL3_ADDRESS", "0xcA11bde05977b3631167028862bE2a173976CA11")

# ------------------------------------------------------------
# Block explorer verification
# ------------------------------------------------------------
ETHERSCAN_API_KEY = os.getenv("ETHERSCAN_API_KEY", "")
ETHERSCAN_API_URL = os.getenv("ETHERSCAN_API_URL", "https://api.etherscan.io/v2/api")

EXPLORER_HTTP_TIMEOUT = float(os.getenv("EXPLORER_HTTP_TIMEOUT", "15"))

VERIFY_POLL_INTERVAL = float(os.getenv("VERIFY_POLL_INTERVAL", "10"))
VERIFY_MAX_ATTEMPTS = int(os.getenv("VERIFY_MAX_ATTEMPTS", "30"))  # 30 x 10s = 5 min

DEFAULT_OPTIMIZER_RUNS = int(os.getenv("DEFAULT_OPTIMIZER_RUNS", "200"))

# ------------------------------------------------------------
# App / DB
# ------------------------------------------------------------
DATABASE_URL = os.getenv("DATABASE_URL", "")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

CORS_HEADERS = {
    "Access-Control-Allow-Origin": os.getenv("CORS_ALLOW_ORIGIN", "*"),
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
}

logger.info(
    "Config loaded: CHAIN_ID=%s RPC_URL=%s EXPLORER=%s DEPLOYER=%s DATABASE_URL=%s",
    CHAIN_ID,
    RPC_URL[:48] + ("…" if len(RPC_URL) > 48 else ""),
    ETHERSCAN_API_URL,
    DEPLOYER_ADDRESS or "<missing>",
    "<set>" if DATABASE_URL else "<missing>",
)
