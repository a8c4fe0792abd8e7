"""Shared pytest fixtures for SmartDeploy tests."""

from typing import Any, Dict, List, Optional

import pytest

DEMO_SOURCE = (
    "// SPDX-License-Identifier: MIT\n"
    "pragma solidity ^0.8.0;\n"
    "contract Demo { constructor(uint256 x) {} }"
)

DEMO_ABI = [
    {
        "inputs": [{"internalType": "uint256", "name": "x", "type": "uint256"}],
        "stateMutability": "nonpayable",
        "type": "constructor",
    }
]

DEMO_BYTECODE = "6080604052348015600f57600080fd5b50603f80601d6000396000f3fe"

DEPLOYER = "0x90F8bf6A479f320ead074411a4B0e7944Ea8c9C1"
CONTRACT_ADDRESS = "0x5FbDB2315678afecb367f032d93F642f64180aa3"


async def _value(value):
    if isinstance(value, Exception):
        raise value
    return value


class FakeConstructor:
    """Stands in for an AsyncContractConstructor."""

    def __init__(self, chain: "FakeChain", args):
        self.chain = chain
        self.args = args

    async def estimate_gas(self, tx: Dict[str, Any]) -> int:
        self.chain.estimate_calls.append((self.args, tx))
        if self.chain.estimate_error is not None:
            raise self.chain.estimate_error
        return self.chain.gas_estimate

    async def transact(self, tx: Dict[str, Any]) -> bytes:
        self.chain.submissions.append((self.args, dict(tx)))
        if self.chain.submit_failures:
            raise self.chain.submit_failures.pop(0)
        return self.chain.next_tx_hash()

    async def build_transaction(self, tx: Dict[str, Any]) -> Dict[str, Any]:
        self.chain.built.append((self.args, dict(tx)))
        return {**tx, "data": "0x" + DEMO_BYTECODE}


class FakeContractFactory:
    def __init__(self, chain: "FakeChain", abi, bytecode):
        self.chain = chain
        self.abi = abi
        self.bytecode = bytecode

    def constructor(self, *args):
        return FakeConstructor(self.chain, args)


class FakeEth:
    def __init__(self, chain: "FakeChain"):
        self.chain = chain

    @property
    def block_number(self):
        return _value(self.chain.block_number)

    @property
    def accounts(self):
        return _value(self.chain.accounts)

    @property
    def gas_price(self):
        return _value(self.chain.gas_price)

    async def get_balance(self, address):
        return self.chain.balances.get(address, 0)

    async def get_transaction_count(self, address, block="latest"):
        return self.chain.nonce

    async def send_raw_transaction(self, raw) -> bytes:
        self.chain.raw_submissions.append(bytes(raw))
        if self.chain.submit_failures:
            raise self.chain.submit_failures.pop(0)
        return self.chain.next_tx_hash()

    def contract(self, abi=None, bytecode=None, address=None):
        self.chain.contracts.append((abi, bytecode))
        return FakeContractFactory(self.chain, abi, bytecode)

    async def wait_for_transaction_receipt(self, tx_hash):
        self.chain.receipt_waits.append(tx_hash)
        if self.chain.receipt_errors:
            raise self.chain.receipt_errors.pop(0)
        status = self.chain.receipt_statuses.pop(0) if self.chain.receipt_statuses else 1
        return {
            "contractAddress": self.chain.contract_address if status else None,
            "transactionHash": tx_hash,
            "gasUsed": self.chain.gas_used,
            "blockNumber": self.chain.block_number,
            "status": status,
        }


class FakeChain:
    """In-memory JSON-RPC node with knobs for failure injection."""

    def __init__(self):
        self.block_number: Any = 7
        self.accounts: Any = [DEPLOYER]
        self.balances: Dict[str, int] = {DEPLOYER: 100 * 10**18}
        self.gas_price: Any = 2_000_000_000
        self.gas_estimate = 100_000
        self.estimate_error: Optional[Exception] = None
        self.submit_failures: List[Exception] = []
        self.receipt_statuses: List[int] = []
        self.receipt_errors: List[Exception] = []
        self.nonce = 0
        self.contract_address = CONTRACT_ADDRESS
        self.gas_used = 90_000
        self.estimate_calls: List[Any] = []
        self.submissions: List[Any] = []
        self.contracts: List[Any] = []
        self.built: List[Any] = []
        self.raw_submissions: List[bytes] = []
        self.receipt_waits: List[bytes] = []
        self._tx_counter = 0

    def next_tx_hash(self) -> bytes:
        self._tx_counter += 1
        return self._tx_counter.to_bytes(32, "big")


class FakeAsyncWeb3:
    def __init__(self, chain: FakeChain):
        self.chain = chain
        self.eth = FakeEth(chain)


@pytest.fixture
def fake_chain() -> FakeChain:
    """Return a fresh fake node."""
    return FakeChain()


@pytest.fixture
def fake_w3(fake_chain: FakeChain) -> FakeAsyncWeb3:
    """Return a fake AsyncWeb3 bound to fake_chain."""
    return FakeAsyncWeb3(fake_chain)


@pytest.fixture
def solc_output():
    """Return a builder for standard-JSON compiler output."""

    def build(
        contract_name: str = "Demo",
        abi: Optional[List[Dict[str, Any]]] = None,
        bytecode: Optional[str] = DEMO_BYTECODE,
        errors: Optional[List[Dict[str, Any]]] = None,
        file_name: Optional[str] = None,
    ) -> Dict[str, Any]:
        compiled: Dict[str, Any] = {"abi": DEMO_ABI if abi is None else abi}
        if bytecode is not None:
            compiled["evm"] = {"bytecode": {"object": bytecode}}
        output: Dict[str, Any] = {
            "contracts": {file_name or f"{contract_name}.sol": {contract_name: compiled}}
        }
        if errors is not None:
            output["errors"] = errors
        return output

    return build


@pytest.fixture
def fake_compile(solc_output):
    """Return a recording compile function that yields the Demo output."""

    class Recorder:
        def __init__(self):
            self.calls = []
            self.output = solc_output()

        def __call__(self, input_data, solc_version=None):
            self.calls.append((input_data, solc_version))
            if isinstance(self.output, Exception):
                raise self.output
            return self.output

    return Recorder()


@pytest.fixture
def demo_source() -> str:
    return DEMO_SOURCE


@pytest.fixture
def demo_abi() -> List[Dict[str, Any]]:
    return [dict(entry) for entry in DEMO_ABI]


@pytest.fixture
def demo_bytecode() -> str:
    return DEMO_BYTECODE
