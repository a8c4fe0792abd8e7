# deploy.py
# submit a compiled artifact to the chain, retrying transient failures
import asyncio
import os
from enum import Enum
from typing import Optional, Sequence

from eth_account import Account
from web3 import Web3
from web3.exceptions import Web3ValidationError

import sd_config as Config
from DataBean.data_bean import Artifact, ChainAccount, DeploymentPlan, DeploymentReceipt
from SmDeployments.exceptions import DeploymentFailed, InvalidConstructorArguments
from SmDeployments.gasEstimator import GasEstimator

logger = Config.get_logger(os.path.splitext(os.path.basename(__file__))[0])


class DeployState(Enum):
    IDLE = "idle"
    ESTIMATING = "estimating"
    SUBMITTING = "submitting"
    RETRY_WAIT = "retry_wait"
    SUCCESS = "success"
    FAILED = "failed"


class SubmissionError(Exception):
    """A mined deployment that reverted."""


class Deployer:
    def __init__(
        self,
        policy: Optional[Config.DeployPolicy] = None,
        estimator: Optional[GasEstimator] = None,
    ):
        self.policy = policy or Config.DeployPolicy()
        self.estimator = estimator or GasEstimator(self.policy)
        self.state = DeployState.IDLE
        self.history = [DeployState.IDLE]

    def _enter(self, state: DeployState):
        self.state = state
        self.history.append(state)
        logger.debug(f"deployer -> {state.value}")

    # web3 ABI-encodes the arguments here
    def constructor(self, w3, artifact: Artifact, args: Sequence):
        Contract = w3.eth.contract(abi=artifact.abi, bytecode=artifact.deploy_data)
        try:
            return Contract.constructor(*args)
        except (TypeError, ValueError, Web3ValidationError) as e:
            expected = [p.get("type") for p in artifact.constructor_inputs()]
            raise InvalidConstructorArguments(
                f"Constructor arguments {list(args)!r} cannot be encoded as {expected}: {e}"
            ) from e

    async def deploy(
        self, w3, artifact: Artifact, account: ChainAccount, args: Sequence
    ) -> DeploymentReceipt:
        inputs = artifact.constructor_inputs()
        logger.info(
            f"  • {artifact.contract_name} ctor inputs={len(inputs)} "
            f"mutability={artifact.constructor_mutability()}"
        )
        try:
            constructor = self.constructor(w3, artifact, args)
        except InvalidConstructorArguments:
            self._enter(DeployState.FAILED)
            raise

        self._enter(DeployState.ESTIMATING)
        try:
            plan = await self.estimator.plan(w3, constructor, account, args)
        except Exception:
            self._enter(DeployState.FAILED)
            raise
        return await self.submitWithRetry(w3, constructor, artifact, account, plan)

    # same plan on every attempt, fixed delay between attempts.
    # a broadcast transaction is never sent twice: after a failed receipt wait
    # the next attempt polls the same hash again
    async def submitWithRetry(
        self, w3, constructor, artifact: Artifact, account: ChainAccount, plan: DeploymentPlan
    ) -> DeploymentReceipt:
        last_error = None
        tx_hash = None
        for attempt in range(1, self.policy.max_attempts + 1):
            self._enter(DeployState.SUBMITTING)
            try:
                if tx_hash is None:
                    tx_hash = await self.send(w3, constructor, account, plan)
                else:
                    logger.info(f"  • waiting again for {Web3.to_hex(tx_hash)}")
                rcpt = await self.waitForReceipt(w3, tx_hash)
            except Exception as err:
                last_error = err
                if isinstance(err, SubmissionError):
                    # mined without a contract, the next attempt is a new transaction
                    tx_hash = None
                logger.error(
                    f"  ✖ deployment attempt {attempt}/{self.policy.max_attempts} "
                    f"of {artifact.contract_name} failed: {err}"
                )
                if attempt < self.policy.max_attempts:
                    self._enter(DeployState.RETRY_WAIT)
                    await asyncio.sleep(self.policy.retry_delay)
                continue

            self._enter(DeployState.SUCCESS)
            receipt = DeploymentReceipt(
                contract_address=rcpt["contractAddress"],
                transaction_hash=Web3.to_hex(rcpt["transactionHash"]),
                gas_used=int(rcpt["gasUsed"]),
                contract_name=artifact.contract_name,
                block_number=rcpt.get("blockNumber"),
                attempts=attempt,
            )
            logger.info(f"  ✔ deployed {artifact.contract_name} -> {receipt.contract_address}")
            return receipt

        self._enter(DeployState.FAILED)
        raise DeploymentFailed(
            f"Deployment of {artifact.contract_name} failed after "
            f"{self.policy.max_attempts} attempt(s): {last_error}",
            attempts=self.policy.max_attempts,
            last_error=last_error,
        ) from last_error

    # broadcast one deployment transaction, return its hash
    async def send(self, w3, constructor, account: ChainAccount, plan: DeploymentPlan):
        tx_opts = {
            "from": account.address,
            "gas": plan.gas_limit,
            "gasPrice": plan.gas_price,
        }
        if not account.is_local:
            return await constructor.transact(tx_opts)

        nonce = await w3.eth.get_transaction_count(account.address, "pending")
        tx = await constructor.build_transaction({
            **tx_opts,
            "nonce": nonce,
            "chainId": self.policy.chain_id,
        })
        signed = Account.sign_transaction(tx, account.private_key)
        return await w3.eth.send_raw_transaction(signed.raw_transaction)

    async def waitForReceipt(self, w3, tx_hash):
        rcpt = await w3.eth.wait_for_transaction_receipt(tx_hash)
        if rcpt.get("status") == 0:
            raise SubmissionError(f"transaction {Web3.to_hex(tx_hash)} reverted")
        if not rcpt.get("contractAddress"):
            raise SubmissionError(f"transaction {Web3.to_hex(tx_hash)} created no contract")
        return rcpt
