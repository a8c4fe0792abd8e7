# compile.py
# compile one cleaned Solidity source into a validated artifact
import json
import os
from typing import Any, Callable, Dict, List, Optional

from solcx import compile_standard, get_installed_solc_versions, install_solc
from solcx.exceptions import SolcError

import sd_config as Config
from DataBean.data_bean import LIBRARY_PLACEHOLDER_RE, Artifact, SourceDocument, is_hex, strip_0x
from SmDeployments.exceptions import (
    CompilationError,
    CompilerInvocationError,
    ContractNotFound,
    IncompleteArtifact,
)

logger = Config.get_logger(os.path.splitext(os.path.basename(__file__))[0])

OUTPUT_SELECTION = ["abi", "evm.bytecode", "evm.deployedBytecode", "metadata"]


# ---- Standard JSON input ----
def build_input(document: SourceDocument, policy: Config.DeployPolicy) -> Dict[str, Any]:
    return {
        "language": "Solidity",
        "sources": {document.file_name: {"content": document.content}},
        "settings": {
            "optimizer": {"enabled": True, "runs": policy.optimizer_runs},
            "evmVersion": policy.evm_version,
            "outputSelection": {"*": {"*": list(OUTPUT_SELECTION)}},
        },
    }


# ---- Compiler version ----
def ensure_solc(version: str) -> None:
    installed = {str(v) for v in get_installed_solc_versions()}
    if version in installed:
        return
    logger.info(f"Installing solc {version}...")
    try:
        install_solc(version)
    except Exception as e:
        raise CompilerInvocationError(f"Unable to install solc {version}: {e}") from e


def solcx_compile(input_data: Dict[str, Any], solc_version: str) -> Dict[str, Any]:
    ensure_solc(solc_version)
    return compile_standard(input_data, solc_version=solc_version)


def _output_from_solc_error(err: SolcError) -> Optional[Dict[str, Any]]:
    # compile_standard raises on error diagnostics, the JSON document is still on stdout
    stdout = getattr(err, "stdout_data", None)
    if not stdout:
        return None
    try:
        output = json.loads(stdout)
    except (TypeError, ValueError):
        return None
    return output if isinstance(output, dict) else None


def format_diagnostic(entry: Dict[str, Any]) -> str:
    return (entry.get("formattedMessage") or entry.get("message") or "").strip()


def partition_diagnostics(output: Dict[str, Any]):
    errors, warnings = [], []
    for entry in output.get("errors") or []:
        if entry.get("severity") == "error":
            errors.append(entry)
        elif entry.get("severity") == "warning":
            warnings.append(entry)
    return errors, warnings


class Compiler:
    def __init__(
        self,
        policy: Optional[Config.DeployPolicy] = None,
        compile_fn: Optional[Callable[..., Any]] = None,
    ):
        self.policy = policy or Config.DeployPolicy()
        self.compile_fn = compile_fn or solcx_compile

    def invoke(self, input_data: Dict[str, Any]) -> Dict[str, Any]:
        logger.info(
            f"Compiling with solc {self.policy.solc_version} (EVM={self.policy.evm_version})..."
        )
        try:
            output = self.compile_fn(input_data, solc_version=self.policy.solc_version)
        except SolcError as e:
            output = _output_from_solc_error(e)
            if output is None:
                raise CompilerInvocationError(f"Solidity compiler failed: {e}") from e
        except CompilerInvocationError:
            raise
        except Exception as e:
            raise CompilerInvocationError(f"Solidity compiler failed: {e}") from e

        if isinstance(output, (str, bytes)):
            try:
                output = json.loads(output) if output else None
            except ValueError as e:
                raise CompilerInvocationError(f"Unparsable compiler output: {e}") from e
        if not output or not isinstance(output, dict):
            raise CompilerInvocationError("Solidity compiler returned no output")
        return output

    def compile(self, document: SourceDocument) -> Artifact:
        output = self.invoke(build_input(document, self.policy))

        errors, warnings = partition_diagnostics(output)
        if errors:
            message = "\n".join(format_diagnostic(e) for e in errors)
            logger.error(f"  ✖ {len(errors)} compilation error(s) in {document.file_name}")
            raise CompilationError(f"Compilation errors:\n{message}", diagnostics=errors)
        warning_texts = [format_diagnostic(w) for w in warnings]
        for text in warning_texts:
            logger.warning(f"  ⚠ {text}")

        compiled = self.locate(output, document)
        artifact = self.to_artifact(compiled, document, warning_texts)
        logger.info(
            f"  ✔ compiled {document.contract_name} "
            f"(abi entries={len(artifact.abi)}, bytecode={len(artifact.bytecode) // 2} bytes)"
        )
        return artifact

    def locate(self, output: Dict[str, Any], document: SourceDocument) -> Dict[str, Any]:
        contracts = output.get("contracts")
        if not contracts:
            raise ContractNotFound("No contracts found in compilation output", available=[])

        file_name = document.file_name
        if file_name not in contracts:
            available_files = list(contracts.keys())
            raise ContractNotFound(
                f"File {file_name} not found in compilation output. "
                f"Available files: {', '.join(available_files)}",
                available=available_files,
            )

        per_file = contracts[file_name] or {}
        if document.contract_name not in per_file:
            available_contracts = list(per_file.keys())
            raise ContractNotFound(
                f"Contract {document.contract_name} not found. "
                f"Available contracts: {', '.join(available_contracts)}",
                available=available_contracts,
            )
        return per_file[document.contract_name]

    def to_artifact(
        self, compiled: Dict[str, Any], document: SourceDocument, warnings: List[str]
    ) -> Artifact:
        abi = compiled.get("abi")
        if not abi:
            raise IncompleteArtifact(f"Contract ABI not found for {document.contract_name}")

        bytecode = (compiled.get("evm", {}).get("bytecode", {}).get("object", "") or "")
        bytecode = strip_0x(bytecode)
        if not bytecode:
            raise IncompleteArtifact(
                f"Contract bytecode not found for {document.contract_name} "
                "(abstract contract or interface?)"
            )
        placeholders = sorted(set(LIBRARY_PLACEHOLDER_RE.findall(bytecode)))
        if placeholders:
            raise IncompleteArtifact(
                f"{document.contract_name} has unlinked libraries: {placeholders}. Link before deploy."
            )
        if not is_hex(bytecode):
            raise IncompleteArtifact(f"Bytecode of {document.contract_name} is not valid hex")

        return Artifact(
            contract_name=document.contract_name,
            abi=abi,
            bytecode=bytecode,
            compiler={"version": self.policy.solc_version, "evmVersion": self.policy.evm_version},
            warnings=warnings,
        )
