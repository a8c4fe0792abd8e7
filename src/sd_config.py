# global configuration settings
from dataclasses import dataclass
from decimal import Decimal
from pathlib import Path
from typing import Optional
import logging
import os

# Blockchain settings
RPC_URL = os.environ.get("SMARTDEPLOY_RPC_URL", "http://127.0.0.1:8545")
# optional, deploy from a local key instead of a node-managed account
PRIVATE_KEY = os.environ.get("SMARTDEPLOY_PRIVATE_KEY", "")
CHAIN_ID = 1337

# Compiler settings
SOLC_VERSION = "0.8.30"
EVM_VERSION = "paris"  # <- no PUSH0 opcode for older local nodes
OPTIMIZER_RUNS = 200

# Deployment policy defaults
MAX_ATTEMPTS = 3
RETRY_DELAY = 2.0                  # seconds
MIN_BALANCE_ETHER = Decimal("0.01")
GAS_BUFFER_PERCENT = 30
FALLBACK_GAS_LIMIT = 3_000_000
FALLBACK_GAS_PRICE = 30_000_000_000   # 30 gwei

# Directory paths
BASE_DIR = Path(__file__).resolve().parents[1]
CONTRACTS_DIR = BASE_DIR / "contracts"
ARTIFACTS_DIR = BASE_DIR / "artifacts"
ARTIFACT_FILE = ARTIFACTS_DIR / "artifact.json"
LOGS_DIR = BASE_DIR / "logs"
LOG_FILE = os.path.join(LOGS_DIR, "SmartDeploy.log")


# policy handed to every pipeline stage, override per deployment
@dataclass
class DeployPolicy:
    solc_version: str = SOLC_VERSION
    evm_version: str = EVM_VERSION
    optimizer_runs: int = OPTIMIZER_RUNS
    max_attempts: int = MAX_ATTEMPTS
    retry_delay: float = RETRY_DELAY
    min_balance_ether: Decimal = MIN_BALANCE_ETHER
    gas_buffer_percent: int = GAS_BUFFER_PERCENT
    fallback_gas_limit: int = FALLBACK_GAS_LIMIT
    fallback_gas_price: int = FALLBACK_GAS_PRICE
    chain_id: int = CHAIN_ID
    deploy_timeout: Optional[float] = None

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if self.retry_delay < 0:
            raise ValueError("retry_delay must be >= 0")
        if self.gas_buffer_percent < 0:
            raise ValueError("gas_buffer_percent must be >= 0")


# logs
LOGS_DIR.mkdir(parents=True, exist_ok=True)
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    handlers=[
        logging.FileHandler(LOG_FILE, encoding="utf-8"),
        logging.StreamHandler()
    ]
)

# logger
def get_logger(name=None):
    return logging.getLogger(name)
