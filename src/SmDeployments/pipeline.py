# pipeline.py
# source text -> artifact -> on-chain deployment
import asyncio
import os
from typing import Any, Dict, Mapping, Optional, Sequence, Union

import sd_config as Config
from Blockchain.accountLocks import AccountLockRegistry
from Blockchain.connector import ChainConnector
from DataBean.data_bean import Artifact, DeploymentReceipt, SourceDocument
from SmDeployments.artifactStore import ArtifactStore
from SmDeployments.compile import Compiler
from SmDeployments.constructorArgs import ConstructorArgResolver
from SmDeployments.deploy import Deployer
from SmDeployments.exceptions import DeploymentError, DeploymentTimeout
from SmDeployments.preprocess import SourcePreprocessor

logger = Config.get_logger(os.path.splitext(os.path.basename(__file__))[0])


class DeploymentPipeline:
    def __init__(
        self,
        policy: Optional[Config.DeployPolicy] = None,
        preprocessor: Optional[SourcePreprocessor] = None,
        compiler: Optional[Compiler] = None,
        connector: Optional[ChainConnector] = None,
        store: Optional[ArtifactStore] = None,
        resolver: Optional[ConstructorArgResolver] = None,
        locks: Optional[AccountLockRegistry] = None,
    ):
        self.policy = policy or Config.DeployPolicy()
        self.preprocessor = preprocessor or SourcePreprocessor()
        self.compiler = compiler or Compiler(self.policy)
        self.connector = connector or ChainConnector(policy=self.policy)
        self.store = store
        self.resolver = resolver or ConstructorArgResolver()
        self.locks = locks or AccountLockRegistry()

    def prepareSource(self, source_text: str, contract_name: Optional[str] = None) -> SourceDocument:
        return self.preprocessor.prepare(source_text, contract_name)

    def compileSource(self, source_text: str, contract_name: Optional[str] = None) -> Artifact:
        document = self.prepareSource(source_text, contract_name)
        artifact = self.compiler.compile(document)
        if self.store is not None:
            self.store.save(artifact)
        return artifact

    async def deployArtifact(
        self,
        artifact: Artifact,
        constructor_args: Optional[Sequence[Any]] = None,
        overrides: Optional[Mapping[Union[int, str], Any]] = None,
    ) -> DeploymentReceipt:
        if self.policy.deploy_timeout is None:
            return await self._deploy(artifact, constructor_args, overrides)
        try:
            return await asyncio.wait_for(
                self._deploy(artifact, constructor_args, overrides),
                timeout=self.policy.deploy_timeout,
            )
        except asyncio.TimeoutError as e:
            raise DeploymentTimeout(
                f"Deployment of {artifact.contract_name} exceeded {self.policy.deploy_timeout}s"
            ) from e

    async def _deploy(self, artifact, constructor_args, overrides) -> DeploymentReceipt:
        w3 = await self.connector.connect()
        address = await self.connector.getDeployerAddress()
        lock = await self.locks.get(address)
        async with lock:
            account = await self.connector.resolveAccount(address)
            args = self.resolver.resolve(
                artifact.constructor_inputs(), account.address, constructor_args, overrides
            )
            deployer = Deployer(self.policy)
            return await deployer.deploy(w3, artifact, account, args)

    # deploy whatever the store holds, independent of a compile in this process
    async def deployStored(
        self,
        constructor_args: Optional[Sequence[Any]] = None,
        overrides: Optional[Mapping[Union[int, str], Any]] = None,
    ) -> DeploymentReceipt:
        store = self.store or ArtifactStore()
        return await self.deployArtifact(store.load(), constructor_args, overrides)

    async def run(
        self,
        source_text: str,
        contract_name: Optional[str] = None,
        constructor_args: Optional[Sequence[Any]] = None,
        overrides: Optional[Mapping[Union[int, str], Any]] = None,
    ) -> DeploymentReceipt:
        artifact = self.compileSource(source_text, contract_name)
        return await self.deployArtifact(artifact, constructor_args, overrides)


def response_for(receipt: DeploymentReceipt, artifact: Artifact) -> Dict[str, Any]:
    return {
        "message": "Contract deployed successfully!",
        "deployedContract": receipt.contract_address,
        "contractName": artifact.contract_name,
        "abi": artifact.abi,
        "transactionHash": receipt.transaction_hash,
        "gasUsed": receipt.gas_used,
    }


def error_response(error: Exception) -> Dict[str, Any]:
    tag = error.tag if isinstance(error, DeploymentError) else type(error).__name__
    return {
        "message": "Failed to deploy the contract",
        "error": str(error),
        "tag": tag,
    }
