"""
Deployment - Stand up a fresh contract set and wire its roles.

Order matters: the ERC-6551 registry, forwarder and guardian feed the
AccountV3 template; the minter needs every other address. Role grants
come last:

- Minter: MINTER on MembershipNFT, MINTER + BURNER on FobNFT
- Admin:  TRANSFER on MembershipNFT, BURNER on FobNFT

Any failing step aborts with :class:`DeploymentError`; no registry is
returned for a partial deployment. Running it again deploys a new set.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from .chain.contracts import FOB_ABI, MEMBERSHIP_ABI
from .chain.rpc import read_contract
from .chain.tx import deploy_contract, ensure_success, send_contract_tx
from .config import Settings
from .errors import DeploymentError
from .keys.signers import Signer
from .registry import ContractRegistry, ContractSet
from .utils import format_bytes32_string

logger = logging.getLogger(__name__)

Progress = Callable[[str, str], None]


def _noop_progress(name: str, address: str) -> None:
    pass


def _deploy(
    settings: Settings,
    deployer: Signer,
    contract_name: str,
    constructor_args: Optional[list] = None,
) -> str:
    result = deploy_contract(
        contract_name,
        constructor_args=constructor_args,
        signer=deployer,
        rpc_url=settings.rpc_url,
        chain_id=settings.chain_id,
        artifacts_dir=settings.artifacts_dir,
    )
    ensure_success(result, f"deploy {contract_name}")
    address = result.get("contract_address")
    if not address:
        raise ValueError(f"no contract address in the {contract_name} receipt")
    logger.info("%s deployed at %s", contract_name, address)
    return address


def _grant(
    settings: Settings,
    deployer: Signer,
    contract: str,
    abi: list,
    role_getter: str,
    grantee: str,
) -> None:
    role_hash = read_contract(contract, role_getter, [], abi=abi, rpc_url=settings.rpc_url)
    result = send_contract_tx(
        contract_address=contract,
        function_name="grantRole",
        args=[role_hash, grantee],
        signer=deployer,
        abi=abi,
        rpc_url=settings.rpc_url,
        chain_id=settings.chain_id,
    )
    ensure_success(result, f"grant {role_getter}")
    logger.info("granted %s on %s to %s", role_getter, contract, grantee)


def deploy_contract_set(
    settings: Settings,
    deployer: Signer,
    admin: Optional[str] = None,
    payment_receiver: Optional[str] = None,
    progress: Progress = _noop_progress,
) -> ContractRegistry:
    """
    Deploy the full contract set and return a registry for it.

    Args:
        settings: Network, salts and artifacts location
        deployer: Signs every deployment and role grant (contract owner)
        admin: Custodian / privileged operator (default: deployer)
        payment_receiver: Receives fob payments (default: deployer)
        progress: Called with (contract name, address) after each deploy

    Raises:
        DeploymentError: On the first failing step
    """
    owner = deployer.address
    admin = admin or owner
    payment_receiver = payment_receiver or owner

    step = "setup"
    try:
        def deploy(name: str, args: Optional[list] = None) -> str:
            nonlocal step
            step = name
            address = _deploy(settings, deployer, name, args)
            progress(name, address)
            return address

        registry = deploy("ERC6551Registry")
        forwarder = deploy("Multicall3")
        guardian = deploy("AccountGuardian", [owner])
        template = deploy("AccountV3", [owner, forwarder, registry, guardian])
        membership = deploy("MembershipNFT", [owner])
        fob = deploy("FobNFT", [owner])
        minter = deploy(
            "Minter",
            [
                registry,
                template,
                membership,
                fob,
                payment_receiver,
                admin,
                format_bytes32_string(settings.minter_salt),
            ],
        )

        grants = [
            (membership, MEMBERSHIP_ABI, "MINTER_ROLE", minter),
            (membership, MEMBERSHIP_ABI, "TRANSFER_ROLE", admin),
            (fob, FOB_ABI, "MINTER_ROLE", minter),
            (fob, FOB_ABI, "BURNER_ROLE", minter),
            (fob, FOB_ABI, "BURNER_ROLE", admin),
        ]
        for contract, abi, getter, grantee in grants:
            step = f"grant {getter} to {grantee}"
            _grant(settings, deployer, contract, abi, getter, grantee)

    except Exception as exc:
        raise DeploymentError(step, exc) from exc

    return ContractRegistry(
        contracts=ContractSet(
            registry=registry,
            forwarder=forwarder,
            guardian=guardian,
            account_template=template,
            membership=membership,
            fob=fob,
            minter=minter,
        ),
        admin=admin,
        rpc_url=settings.rpc_url,
        chain_id=settings.chain_id,
        account_salt=format_bytes32_string(settings.account_salt),
    )


def deploy_fob_mapper(settings: Settings, deployer: Signer) -> str:
    """Deploy the standalone FobMapper contract and return its address."""
    try:
        return _deploy(settings, deployer, "FobMapper")
    except Exception as exc:
        raise DeploymentError("FobMapper", exc) from exc
