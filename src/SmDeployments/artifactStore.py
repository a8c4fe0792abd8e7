# artifactStore.py
# single JSON record handing an artifact from compile to deploy
import json
import os
from pathlib import Path
from typing import Optional, Union

import sd_config as Config
from DataBean.data_bean import Artifact, is_hex
from SmDeployments.exceptions import ArtifactCorrupt, ArtifactNotFound

logger = Config.get_logger(os.path.splitext(os.path.basename(__file__))[0])


class ArtifactStore:
    def __init__(self, path: Optional[Union[Path, str]] = None):
        self.path = Path(path) if path is not None else Config.ARTIFACT_FILE

    # overwrite whatever was stored before
    def save(self, artifact: Artifact) -> Path:
        record = {
            "contractName": artifact.contract_name,
            "abi": artifact.abi,
            "bytecode": artifact.bytecode,
            "compiler": artifact.compiler,
        }
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(record, indent=2), encoding="utf-8")
        logger.info(f"  ✔ artifact {artifact.contract_name} -> {self.path}")
        return self.path

    def load(self) -> Artifact:
        if not self.path.exists():
            raise ArtifactNotFound(f"No artifact stored at {self.path}. Compile a contract first.")
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            raise ArtifactCorrupt(f"Artifact at {self.path} is not valid JSON: {e}") from e

        if not isinstance(data, dict):
            raise ArtifactCorrupt(f"Artifact at {self.path} is not a JSON object")
        abi = data.get("abi")
        bytecode = data.get("bytecode")
        if not isinstance(abi, list) or not abi:
            raise ArtifactCorrupt(f"Artifact at {self.path} has no ABI")
        if not all(isinstance(entry, dict) for entry in abi):
            raise ArtifactCorrupt(f"Artifact at {self.path} has ABI entries that are not objects")
        if not isinstance(bytecode, str) or not is_hex(bytecode):
            raise ArtifactCorrupt(f"Artifact at {self.path} has missing or non-hex bytecode")

        return Artifact(
            contract_name=data.get("contractName") or self.path.stem,
            abi=abi,
            bytecode=bytecode,
            compiler=data.get("compiler") or {},
        )
