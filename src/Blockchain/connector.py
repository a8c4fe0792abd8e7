# connector.py
# connection to the local JSON-RPC node, deployer account and its balance
import os
from typing import Optional

from eth_account import Account
from web3 import AsyncHTTPProvider, AsyncWeb3, Web3

import sd_config as Config
from DataBean.data_bean import ChainAccount
from SmDeployments.exceptions import (
    ChainConnectionError,
    InsufficientPreflightBalance,
    InvalidPrivateKey,
    NoAccountsAvailable,
)


class ChainConnector:
    def __init__(
        self,
        rpc_url: Optional[str] = None,
        policy: Optional[Config.DeployPolicy] = None,
        private_key: Optional[str] = None,
        w3=None,
    ):
        self.rpc_url = rpc_url or Config.RPC_URL
        self.policy = policy or Config.DeployPolicy()
        self.private_key = Config.PRIVATE_KEY if private_key is None else private_key
        self.w3 = w3

        # logger
        self.logger = Config.get_logger(
            os.path.splitext(os.path.basename(__file__))[0])

    # connect and probe the node with a block number query
    async def connect(self):
        if self.w3 is None:
            self.w3 = AsyncWeb3(AsyncHTTPProvider(self.rpc_url))
        try:
            block = await self.w3.eth.block_number
        except Exception as e:
            raise ChainConnectionError(
                f"Cannot connect to blockchain at {self.rpc_url}. "
                "Please ensure a local node is running and reachable "
                "(e.g. `ganache --port 8545` or `anvil --port 8545`)."
            ) from e
        self.logger.info(f"  ✔ Connected to {self.rpc_url} (block {block})")
        return self.w3

    # deployer address: local key if configured, otherwise first node-managed account
    async def getDeployerAddress(self) -> str:
        if self.private_key:
            try:
                return Account.from_key(self.private_key).address
            except (ValueError, TypeError) as e:
                raise InvalidPrivateKey(
                    "The configured deployer private key is invalid. Set "
                    "SMARTDEPLOY_PRIVATE_KEY to a 32-byte hex key, or unset it "
                    "to deploy from the node's first account."
                ) from e
        accounts = await self.w3.eth.accounts
        if not accounts:
            raise NoAccountsAvailable(
                f"No accounts available on {self.rpc_url}. "
                "Please ensure the node has funded, unlocked accounts."
            )
        return accounts[0]

    async def getBalance(self, address) -> int:
        return int(await self.w3.eth.get_balance(address))

    # pre-flight check against the fixed minimum balance
    async def resolveAccount(self, address: Optional[str] = None) -> ChainAccount:
        if self.w3 is None:
            await self.connect()
        if address is None:
            address = await self.getDeployerAddress()
        balance = await self.getBalance(address)
        balance_ether = Web3.from_wei(balance, "ether")
        self.logger.info(f"Using deployer account {address} (balance {balance_ether} ETH)")

        floor = self.policy.min_balance_ether
        if balance_ether < floor:
            raise InsufficientPreflightBalance(
                f"Insufficient balance: {balance_ether} ETH on {address}, "
                f"at least {floor} ETH required",
                address=address,
                balance_wei=balance,
                required_wei=Web3.to_wei(floor, "ether"),
            )
        return ChainAccount(address=address, balance=balance, private_key=self.private_key or None)
