# data_bean.py
# values handed between pipeline stages:
# - SourceDocument:    cleaned source + contract name
# - Artifact:          abi + bytecode (no 0x prefix)
# - ChainAccount:      deployer address + balance in wei
# - DeploymentPlan:    constructor args + gas limit/price
# - DeploymentReceipt: final result of a successful deployment

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

HEX_RE = re.compile(r"^[0-9a-fA-F]+$")
LIBRARY_PLACEHOLDER_RE = re.compile(r"__\$\w{34}\$__")


def strip_0x(value: str) -> str:
    if value.startswith(("0x", "0X")):
        return value[2:]
    return value


def is_hex(value: str) -> bool:
    return bool(value) and HEX_RE.match(value) is not None


@dataclass(frozen=True)
class SourceDocument:
    content: str
    contract_name: str

    @property
    def file_name(self) -> str:
        return f"{self.contract_name}.sol"


@dataclass
class Artifact:
    contract_name: str
    abi: List[Dict[str, Any]]
    bytecode: str
    compiler: Dict[str, Any] = field(default_factory=dict)
    warnings: List[str] = field(default_factory=list)

    def constructor_entry(self) -> Optional[Dict[str, Any]]:
        return next((i for i in self.abi if i.get("type") == "constructor"), None)

    def constructor_inputs(self) -> List[Dict[str, Any]]:
        ctor = self.constructor_entry()
        if not ctor:
            return []
        return ctor.get("inputs", [])

    def constructor_mutability(self) -> str:
        ctor = self.constructor_entry() or {}
        return ctor.get("stateMutability", "nonpayable")

    # bytecode as web3 expects it
    @property
    def deploy_data(self) -> str:
        return "0x" + self.bytecode


@dataclass(frozen=True)
class ChainAccount:
    address: str
    balance: int  # wei
    private_key: Optional[str] = field(default=None, repr=False)

    @property
    def is_local(self) -> bool:
        return bool(self.private_key)


@dataclass(frozen=True)
class DeploymentPlan:
    args: tuple
    gas_limit: int
    gas_price: int
    gas_estimated: bool = True
    price_estimated: bool = True

    @property
    def total_cost(self) -> int:
        return self.gas_limit * self.gas_price


@dataclass(frozen=True)
class DeploymentReceipt:
    contract_address: str
    transaction_hash: str
    gas_used: int
    contract_name: str = ""
    block_number: Optional[int] = None
    attempts: int = 1
