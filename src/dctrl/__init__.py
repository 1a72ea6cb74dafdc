__all__ = [
    # Registry & deployment
    "ContractRegistry",
    "ContractSet",
    "deploy_contract_set",
    "deploy_fob_mapper",
    # Lifecycle
    "LifecycleClient",
    "FobInfo",
    "MembershipInfo",
    "AccountInfo",
    "TokenBoundExecutor",
    # Roles
    "ContractKind",
    "Role",
    # Signers
    "Signer",
    "SignerBook",
    "LocalKeySigner",
    "ImpersonatedSigner",
    # Config
    "Settings",
    "load_settings",
    # Errors
    "DctrlError",
    "ConfigError",
    "SignerUnavailableError",
    "RpcError",
    "TransactionRevertedError",
    "DeploymentError",
    "UnknownRoleError",
    "ArtifactNotFoundError",
]

from .config import Settings, load_settings
from .deploy import deploy_contract_set, deploy_fob_mapper
from .errors import (
    ArtifactNotFoundError,
    ConfigError,
    DctrlError,
    DeploymentError,
    RpcError,
    SignerUnavailableError,
    TransactionRevertedError,
    UnknownRoleError,
)
from .keys.signers import ImpersonatedSigner, LocalKeySigner, Signer, SignerBook
from .lifecycle import AccountInfo, FobInfo, LifecycleClient, MembershipInfo
from .registry import ContractRegistry, ContractSet
from .roles import ContractKind, Role
from .tokenbound import TokenBoundExecutor
