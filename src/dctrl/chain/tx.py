"""
Transactions - fill, submit and confirm contract calls, transfers and deployments.

The signer decides how a transaction is submitted (local key vs. dev-node
impersonation); this module fills in nonce, gas and chain id, waits for
the receipt and reports the status.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any, Optional

from ..errors import TransactionRevertedError
from .abi import encode_call, encode_constructor_args, keccak256, load_abi, load_bytecode
from .rpc import (
    estimate_gas,
    get_chain_id,
    get_gas_price,
    get_nonce,
    wait_for_receipt,
)

if TYPE_CHECKING:
    from ..keys.signers import Signer

logger = logging.getLogger(__name__)

# Headroom over eth_estimateGas, in percent
GAS_HEADROOM = 20


def to_checksum_address(address: str) -> str:
    """EIP-55 mixed-case form of a 20-byte hex address."""
    hex_part = address[2:] if address[:2].lower() == "0x" else address
    hex_part = hex_part.lower()
    if len(hex_part) != 40 or hex_part.strip("0123456789abcdef"):
        raise ValueError(f"Invalid address: {address!r}")
    digest = keccak256(hex_part.encode("ascii")).hex()
    return "0x" + "".join(
        ch.upper() if ch.isalpha() and int(digest[i], 16) >= 8 else ch
        for i, ch in enumerate(hex_part)
    )


def _fill_tx(
    tx: dict[str, Any],
    signer: "Signer",
    gas_limit: Optional[int],
    rpc_url: Optional[str],
    chain_id: Optional[int],
) -> dict[str, Any]:
    tx["from"] = signer.address
    tx["nonce"] = get_nonce(signer.address, rpc_url=rpc_url)
    tx["gasPrice"] = get_gas_price(rpc_url=rpc_url)
    tx["chainId"] = chain_id or get_chain_id()
    if gas_limit is None:
        estimated = estimate_gas(tx, rpc_url=rpc_url)
        gas_limit = estimated + estimated * GAS_HEADROOM // 100
    tx["gas"] = gas_limit
    return tx


def build_contract_tx(
    contract_address: str,
    function_name: str,
    args: list,
    signer: "Signer",
    contract_name: Optional[str] = None,
    abi: Optional[list] = None,
    value: int = 0,
    gas_limit: Optional[int] = None,
    rpc_url: Optional[str] = None,
    chain_id: Optional[int] = None,
) -> dict:
    """
    Unsigned call to ``function_name`` with nonce, gas price, chain id and gas
    filled in for ``signer``.

    Without ``gas_limit`` the node estimates and GAS_HEADROOM percent is
    added; a call that would revert already fails at the estimate.
    """
    if abi is None:
        if contract_name is None:
            raise ValueError("build_contract_tx needs an abi or a contract_name")
        abi = load_abi(contract_name)

    tx: dict[str, Any] = {
        "to": to_checksum_address(contract_address),
        "data": "0x" + encode_call(abi, function_name, args).hex(),
        "value": value,
    }
    return _fill_tx(tx, signer, gas_limit, rpc_url, chain_id)


def sign_and_send(
    tx: dict,
    signer: "Signer",
    wait: bool = True,
    timeout: int = 120,
    rpc_url: Optional[str] = None,
) -> dict:
    """
    Hand ``tx`` to its signer and, with ``wait``, block on the receipt.

    The result always has ``tx_hash``; ``receipt`` and the integer
    ``status`` are added once mined.
    """
    tx_hash = signer.send_transaction(tx, rpc_url=rpc_url)
    logger.info("sent tx %s from %s to %s", tx_hash, signer.address, tx.get("to", "<create>"))
    result: dict[str, Any] = {"tx_hash": tx_hash}

    if wait:
        receipt = wait_for_receipt(tx_hash, timeout=timeout, rpc_url=rpc_url)
        result["receipt"] = receipt
        result["status"] = int(receipt.get("status", "0x0"), 16)

    return result


def send_contract_tx(
    contract_address: str,
    function_name: str,
    args: list,
    signer: "Signer",
    contract_name: Optional[str] = None,
    abi: Optional[list] = None,
    value: int = 0,
    gas_limit: Optional[int] = None,
    rpc_url: Optional[str] = None,
    chain_id: Optional[int] = None,
    wait: bool = True,
) -> dict:
    """build_contract_tx + sign_and_send."""
    tx = build_contract_tx(
        contract_address=contract_address,
        function_name=function_name,
        args=args,
        signer=signer,
        contract_name=contract_name,
        abi=abi,
        value=value,
        gas_limit=gas_limit,
        rpc_url=rpc_url,
        chain_id=chain_id,
    )
    logger.debug("%s.%s(%s) value=%d", contract_address, function_name, args, value)
    return sign_and_send(tx, signer=signer, wait=wait, rpc_url=rpc_url)


def send_value(
    to: str,
    value: int,
    signer: "Signer",
    rpc_url: Optional[str] = None,
    chain_id: Optional[int] = None,
    wait: bool = True,
) -> dict:
    """Send native currency from the signer to ``to``."""
    tx: dict[str, Any] = {"to": to_checksum_address(to), "data": "0x", "value": value}
    tx = _fill_tx(tx, signer, 21_000, rpc_url, chain_id)
    return sign_and_send(tx, signer=signer, wait=wait, rpc_url=rpc_url)


def deploy_contract(
    contract_name: str,
    constructor_args: Optional[list] = None,
    signer: Optional["Signer"] = None,
    gas_limit: Optional[int] = None,
    rpc_url: Optional[str] = None,
    chain_id: Optional[int] = None,
    artifacts_dir: Optional[Path] = None,
    wait: bool = True,
    timeout: int = 180,
) -> dict:
    """
    Create ``contract_name`` from its compiled artifact.

    Constructor arguments are ABI-encoded onto the bytecode. Once mined the
    result also carries the checksummed ``contract_address``.
    """
    if signer is None:
        raise ValueError("A signer is required to deploy")

    deploy_data = load_bytecode(contract_name, artifacts_dir)
    if constructor_args:
        abi = load_abi(contract_name, artifacts_dir)
        deploy_data += encode_constructor_args(abi, constructor_args).hex()

    tx: dict[str, Any] = {"data": deploy_data, "value": 0}
    tx = _fill_tx(tx, signer, gas_limit, rpc_url, chain_id)

    result = sign_and_send(tx, signer=signer, wait=wait, timeout=timeout, rpc_url=rpc_url)

    created = (result.get("receipt") or {}).get("contractAddress")
    if created:
        result["contract_address"] = to_checksum_address(created)

    return result


def ensure_success(result: dict, action: str) -> dict:
    """Raise :class:`TransactionRevertedError` unless the receipt status is 1."""
    if result.get("status") != 1:
        raise TransactionRevertedError(action, result.get("tx_hash", "unknown"), result.get("receipt"))
    return result
