# constructorArgs.py
# best-effort constructor arguments for contracts deployed without caller input
import os
import re
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from web3 import Web3

import sd_config as Config
from SmDeployments.exceptions import InvalidConstructorArguments

logger = Config.get_logger(os.path.splitext(os.path.basename(__file__))[0])

DEFAULT_UINT_FALLBACK = 1_000_000
DEFAULT_INT_FALLBACK = 0
DEFAULT_BYTES_SEED = "default"

UINT_RE = re.compile(r"^uint(\d*)$")
INT_RE = re.compile(r"^int(\d*)$")
FIXED_BYTES_RE = re.compile(r"^bytes(\d+)$")
# outermost dimension last: uint8[2][3] is three uint8[2]
ARRAY_RE = re.compile(r"^(.+)\[(\d*)\]$")


def default_for(param: Dict[str, Any], deployer_address: str) -> Any:
    abi_type = param.get("type", "")
    name = param.get("name") or ""

    match = ARRAY_RE.match(abi_type)
    if match:
        if not match.group(2):
            return []
        element = {"type": match.group(1), "name": name}
        return [default_for(element, deployer_address) for _ in range(int(match.group(2)))]
    if abi_type in ("uint256", "uint"):
        return Web3.to_wei(1, "ether")
    if abi_type == "address":
        return deployer_address
    if abi_type == "string":
        return f"Default{name}" if name else "DefaultValue"
    if abi_type == "bool":
        return True

    match = FIXED_BYTES_RE.match(abi_type)
    if match:
        size = int(match.group(1))
        return bytes(Web3.keccak(text=DEFAULT_BYTES_SEED))[:size]

    match = UINT_RE.match(abi_type)
    if match:
        bits = int(match.group(1) or 256)
        # keep the fallback inside the type's range (uint8, uint16)
        return min(DEFAULT_UINT_FALLBACK, 2 ** bits - 1)
    if INT_RE.match(abi_type):
        return DEFAULT_INT_FALLBACK

    if abi_type == "bytes":
        return b""
    return 0


class ConstructorArgResolver:
    """
    Fills constructor arguments from the ABI.

    Synthesized values are placeholders, not the contract author's intent.
    Callers who need real initial state pass `args` (the full list) or
    `overrides` (by parameter index or name).
    """

    def resolve(
        self,
        inputs: List[Dict[str, Any]],
        deployer_address: str,
        args: Optional[Sequence[Any]] = None,
        overrides: Optional[Mapping[Union[int, str], Any]] = None,
    ) -> List[Any]:
        if args is not None:
            if len(args) != len(inputs):
                raise InvalidConstructorArguments(
                    f"Constructor expects {len(inputs)} argument(s), got {len(args)}"
                )
            resolved = list(args)
        else:
            resolved = [default_for(p, deployer_address) for p in inputs]
            if inputs:
                logger.warning(
                    f"  ⚠ synthesized default constructor arguments for "
                    f"{[p.get('type') for p in inputs]} (best effort)"
                )

        for key, value in (overrides or {}).items():
            resolved[self._index_of(inputs, key)] = value

        for param, value in zip(inputs, resolved):
            logger.info(f"  • ctor arg {param.get('name') or '<unnamed>'} ({param.get('type')}) = {value!r}")
        return resolved

    def _index_of(self, inputs, key) -> int:
        if isinstance(key, int) and not isinstance(key, bool):
            if 0 <= key < len(inputs):
                return key
            raise InvalidConstructorArguments(
                f"Override index {key} out of range for {len(inputs)} constructor parameter(s)"
            )
        for i, param in enumerate(inputs):
            if param.get("name") and param.get("name") == key:
                return i
        names = [p.get("name") for p in inputs]
        raise InvalidConstructorArguments(
            f"No constructor parameter named {key!r}. Available: {names}"
        )
