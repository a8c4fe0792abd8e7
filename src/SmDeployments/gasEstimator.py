# gasEstimator.py
# gas limit/price for the deployment transaction, falling back to fixed values
import os
from typing import Optional

from web3 import Web3

import sd_config as Config
from DataBean.data_bean import ChainAccount, DeploymentPlan
from SmDeployments.exceptions import InsufficientBalanceForCost


# ceil(estimate * (100 + percent) / 100) without float rounding
def buffered_gas_limit(estimate: int, percent: int) -> int:
    return -(-int(estimate) * (100 + percent) // 100)


class GasEstimator:
    def __init__(self, policy: Optional[Config.DeployPolicy] = None):
        self.policy = policy or Config.DeployPolicy()
        self.logger = Config.get_logger(
            os.path.splitext(os.path.basename(__file__))[0])

    async def estimateLimit(self, constructor, account: ChainAccount):
        try:
            estimate = await constructor.estimate_gas({"from": account.address})
        except Exception as e:
            self.logger.warning(
                f"  ⚠ gas estimate failed ({e}), using fallback limit {self.policy.fallback_gas_limit}"
            )
            return self.policy.fallback_gas_limit, False
        limit = buffered_gas_limit(estimate, self.policy.gas_buffer_percent)
        self.logger.info(f"  • gas estimate {estimate} (using {limit})")
        return limit, True

    async def estimatePrice(self, w3):
        try:
            price = int(await w3.eth.gas_price)
        except Exception as e:
            self.logger.warning(
                f"  ⚠ gas price lookup failed ({e}), using fallback "
                f"{Web3.from_wei(self.policy.fallback_gas_price, 'gwei')} Gwei"
            )
            return self.policy.fallback_gas_price, False
        self.logger.info(f"  • gas price {Web3.from_wei(price, 'gwei')} Gwei")
        return price, True

    # limit + price, then check the balance covers limit x price
    async def plan(self, w3, constructor, account: ChainAccount, args) -> DeploymentPlan:
        gas_limit, gas_estimated = await self.estimateLimit(constructor, account)
        gas_price, price_estimated = await self.estimatePrice(w3)
        plan = DeploymentPlan(
            args=tuple(args),
            gas_limit=gas_limit,
            gas_price=gas_price,
            gas_estimated=gas_estimated,
            price_estimated=price_estimated,
        )

        cost_ether = Web3.from_wei(plan.total_cost, "ether")
        balance_ether = Web3.from_wei(account.balance, "ether")
        self.logger.info(f"  • estimated deployment cost {cost_ether} ETH")
        if account.balance < plan.total_cost:
            raise InsufficientBalanceForCost(
                f"Insufficient balance for deployment: {balance_ether} ETH on {account.address}, "
                f"estimated cost {cost_ether} ETH (gas {gas_limit} x {gas_price} wei)",
                address=account.address,
                balance_wei=account.balance,
                required_wei=plan.total_cost,
            )
        return plan
