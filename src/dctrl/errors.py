"""Error types shared by the chain layer, the lifecycle client and the CLI."""

from __future__ import annotations

from typing import Any, Optional


class DctrlError(RuntimeError):
    exit_code: int = 1


class ConfigError(DctrlError):
    """Missing or invalid configuration (keys, network, chain id)."""

    exit_code = 2


class SignerUnavailableError(DctrlError):
    """No key for the caller address and impersonation is disabled."""

    exit_code = 3

    def __init__(self, address: str) -> None:
        super().__init__(
            f"No signer available for {address}. Add its key to SIGNER_KEYS "
            "or enable impersonation on a local dev node."
        )
        self.address = address


class RpcError(DctrlError):
    """The node answered with a JSON-RPC error object."""

    exit_code = 4

    def __init__(
        self,
        message: str,
        *,
        code: Optional[int] = None,
        data: Any = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.data = data


class TransactionRevertedError(DctrlError):
    """A transaction was mined with status 0."""

    exit_code = 5

    def __init__(self, action: str, tx_hash: str, receipt: Optional[dict] = None) -> None:
        super().__init__(f"{action} reverted (tx {tx_hash})")
        self.action = action
        self.tx_hash = tx_hash
        self.receipt = receipt or {}


class DeploymentError(DctrlError):
    """A step of the contract-set deployment failed."""

    exit_code = 6

    def __init__(self, step: str, cause: Exception) -> None:
        super().__init__(f"Deployment failed at {step}: {cause}")
        self.step = step
        self.cause = cause


class UnknownRoleError(DctrlError):
    exit_code = 7


class ArtifactNotFoundError(DctrlError):
    """Compiled contract artifact (ABI or bytecode) is missing."""

    exit_code = 8
