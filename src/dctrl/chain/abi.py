"""
ABI Loader - Loads contract ABIs and bytecode from compiled artifacts.

Artifacts come from either Hardhat (``artifacts/contracts/**/Name.json``,
bytecode as a hex string) or Foundry (``out/Name.sol/Name.json``, bytecode
under ``bytecode.object``). The directory is taken from ``DCTRL_ARTIFACTS``
or found by searching upward from the working directory.

Also holds the selector / calldata helpers shared by reads and writes.
"""

from __future__ import annotations

import json
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Optional

from eth_abi import decode, encode
from eth_hash.auto import keccak

from ..errors import ArtifactNotFoundError

_ARTIFACT_DIRS = ("artifacts", "out", os.path.join("contracts", "out"))


def keccak256(data: bytes) -> bytes:
    """Compute Keccak-256 (NOT the NIST SHA3-256 of hashlib)."""
    return keccak(data)


def find_artifacts_dir(start: Optional[Path] = None) -> Path:
    """
    Locate the compiled artifacts directory.

    ``DCTRL_ARTIFACTS`` wins; otherwise walk up from ``start`` (default: cwd)
    looking for a Hardhat ``artifacts/`` or Foundry ``out/`` directory.
    """
    configured = os.environ.get("DCTRL_ARTIFACTS")
    if configured:
        path = Path(configured).expanduser()
        if not path.is_dir():
            raise ArtifactNotFoundError(f"DCTRL_ARTIFACTS is not a directory: {path}")
        return path

    current = (start or Path.cwd()).resolve()
    for parent in [current, *current.parents]:
        for name in _ARTIFACT_DIRS:
            candidate = parent / name
            if candidate.is_dir():
                return candidate
    raise ArtifactNotFoundError(
        "Cannot find compiled artifacts. Run 'npx hardhat compile' (or "
        "'forge build') or set DCTRL_ARTIFACTS."
    )


@lru_cache(maxsize=32)
def load_artifact(contract_name: str, artifacts_dir: Optional[Path] = None) -> dict[str, Any]:
    """
    Load the compiled artifact JSON for a contract.

    Args:
        contract_name: Contract name (e.g., "MembershipNFT", "AccountV3")
        artifacts_dir: Artifacts root (default: :func:`find_artifacts_dir`)

    Raises:
        ArtifactNotFoundError: If no artifact with that name exists
    """
    root = artifacts_dir or find_artifacts_dir()
    matches = [
        path for path in root.rglob(f"{contract_name}.json")
        if path.parent.name.endswith(".sol")
    ]
    if not matches:
        raise ArtifactNotFoundError(f"Artifact not found for {contract_name} under {root}")

    # Prefer the shortest path: project sources over vendored copies.
    matches.sort(key=lambda p: len(p.parts))
    with matches[0].open("r", encoding="utf-8") as f:
        return json.load(f)


def load_abi(contract_name: str, artifacts_dir: Optional[Path] = None) -> list[dict[str, Any]]:
    """Load the ABI (list of entries) of a compiled contract."""
    return load_artifact(contract_name, artifacts_dir)["abi"]


def load_bytecode(contract_name: str, artifacts_dir: Optional[Path] = None) -> str:
    """
    Load deployment bytecode for a contract.

    Returns:
        0x-prefixed hex bytecode
    """
    artifact = load_artifact(contract_name, artifacts_dir)
    bytecode = artifact.get("bytecode", "")
    if isinstance(bytecode, dict):
        bytecode = bytecode.get("object", "")
    if not bytecode or bytecode == "0x":
        raise ArtifactNotFoundError(f"No bytecode in artifact for {contract_name}")
    if not bytecode.startswith("0x"):
        bytecode = "0x" + bytecode
    return bytecode


def _canonical_type(param: dict[str, Any]) -> str:
    kind = param["type"]
    if kind.startswith("tuple"):
        inner = ",".join(_canonical_type(c) for c in param.get("components", []))
        return f"({inner}){kind[len('tuple'):]}"
    return kind


def find_function(abi: list, function_name: str) -> dict[str, Any]:
    for entry in abi:
        if entry.get("type") == "function" and entry.get("name") == function_name:
            return entry
    raise ValueError(f"Function {function_name} not found in ABI")


def find_constructor(abi: list) -> Optional[dict[str, Any]]:
    for entry in abi:
        if entry.get("type") == "constructor":
            return entry
    return None


def input_types(entry: dict[str, Any]) -> list[str]:
    return [_canonical_type(inp) for inp in entry.get("inputs", [])]


def function_selector(abi: list, function_name: str) -> bytes:
    """First 4 bytes of keccak256 of the canonical signature."""
    func = find_function(abi, function_name)
    sig = f"{function_name}({','.join(input_types(func))})"
    return keccak256(sig.encode("utf-8"))[:4]


def encode_call(abi: list, function_name: str, args: list) -> bytes:
    """ABI-encode a function call (selector + arguments)."""
    func = find_function(abi, function_name)
    selector = function_selector(abi, function_name)
    if args:
        return selector + encode(input_types(func), args)
    return selector


def encode_constructor_args(abi: list, args: list) -> bytes:
    constructor = find_constructor(abi)
    if constructor is None:
        raise ValueError("Constructor not found in ABI, but constructor_args were provided.")
    return encode(input_types(constructor), args)


def decode_result(abi: list, function_name: str, data: str) -> Any:
    """
    ABI-decode a function call result.

    Returns a single value for one output, a tuple for several, None for none.
    """
    func = find_function(abi, function_name)
    output_types = [_canonical_type(out) for out in func.get("outputs", [])]
    if not output_types:
        return None

    raw = bytes.fromhex(data[2:]) if data.startswith("0x") else bytes.fromhex(data)
    decoded = decode(output_types, raw)

    if len(decoded) == 1:
        return decoded[0]
    return decoded
