"""
JSON-RPC Client.

Talks to the node over plain HTTP with httpx and decodes with eth-abi, so
web3.py is not needed. Covers contract reads, account queries, gas
estimation, raw submission and receipt polling.

Node-side failures (reverted ``eth_call`` / ``eth_estimateGas``, unknown
methods, bad params) come back as :class:`RpcError` carrying the node's
error code and data.
"""

from __future__ import annotations

import itertools
import logging
import os
import time
from typing import Any, Optional

import httpx

from ..errors import RpcError
from .abi import decode_result, encode_call, load_abi

logger = logging.getLogger(__name__)

# Hardhat / anvil local node
DEFAULT_RPC_URL = "http://127.0.0.1:8545"
DEFAULT_CHAIN_ID = 31337

RPC_TIMEOUT = 30

_request_ids = itertools.count(1)


def get_rpc_url() -> str:
    return os.environ.get("DCTRL_RPC_URL", DEFAULT_RPC_URL)


def get_chain_id() -> int:
    return int(os.environ.get("CHAIN_ID", DEFAULT_CHAIN_ID))


def rpc_call(method: str, params: list, rpc_url: Optional[str] = None) -> Any:
    """
    Send one JSON-RPC request and return its ``result``.

    Raises:
        RpcError: The node answered with an ``error`` member
        httpx.HTTPError: Transport failure or non-2xx status
    """
    url = rpc_url or get_rpc_url()
    request_id = next(_request_ids)
    logger.debug("rpc #%d %s -> %s", request_id, method, url)

    with httpx.Client(timeout=RPC_TIMEOUT) as client:
        response = client.post(
            url,
            json={"jsonrpc": "2.0", "id": request_id, "method": method, "params": params},
        )
        response.raise_for_status()
        body = response.json()

    error = body.get("error")
    if error is None:
        return body.get("result")
    if isinstance(error, dict):
        raise RpcError(
            f"RPC error: {error.get('message', error)}",
            code=error.get("code"),
            data=error.get("data"),
        )
    raise RpcError(f"RPC error: {error}")


def _quantity(method: str, params: list, rpc_url: Optional[str]) -> int:
    return int(rpc_call(method, params, rpc_url=rpc_url), 16)


def read_contract(
    contract_address: str,
    function_name: str,
    args: Optional[list] = None,
    contract_name: Optional[str] = None,
    abi: Optional[list] = None,
    rpc_url: Optional[str] = None,
) -> Any:
    """
    ``eth_call`` a view function and decode what it returns.

    The ABI is either passed in or loaded from the ``contract_name``
    artifact. An empty return (no code at the address) gives None.
    """
    if abi is None:
        if contract_name is None:
            raise ValueError("read_contract needs an abi or a contract_name")
        abi = load_abi(contract_name)

    call = {
        "to": contract_address,
        "data": "0x" + encode_call(abi, function_name, args or []).hex(),
    }
    raw = rpc_call("eth_call", [call, "latest"], rpc_url=rpc_url)
    if raw in (None, "0x"):
        return None
    return decode_result(abi, function_name, raw)


def get_balance(address: str, rpc_url: Optional[str] = None) -> int:
    """Native balance in wei."""
    return _quantity("eth_getBalance", [address, "latest"], rpc_url)


def get_code(address: str, rpc_url: Optional[str] = None) -> str:
    """Runtime code at ``address``; "0x" when nothing is deployed."""
    return rpc_call("eth_getCode", [address, "latest"], rpc_url=rpc_url) or "0x"


def get_nonce(address: str, rpc_url: Optional[str] = None) -> int:
    # "pending" so back-to-back sends from one signer don't reuse a nonce
    return _quantity("eth_getTransactionCount", [address, "pending"], rpc_url)


def get_gas_price(rpc_url: Optional[str] = None) -> int:
    return _quantity("eth_gasPrice", [], rpc_url)


def get_accounts(rpc_url: Optional[str] = None) -> list[str]:
    """Accounts unlocked on the node (dev nodes expose their test accounts)."""
    return list(rpc_call("eth_accounts", [], rpc_url=rpc_url) or [])


def estimate_gas(tx: dict, rpc_url: Optional[str] = None) -> int:
    """
    Estimate gas for a transaction.

    A call that would revert fails here with the node's revert message.
    """
    call: dict[str, Any] = {"data": tx.get("data", "0x"), "value": hex(tx.get("value", 0))}
    for key in ("from", "to"):
        if tx.get(key):
            call[key] = tx[key]
    return _quantity("eth_estimateGas", [call], rpc_url)


def send_raw_transaction(raw_tx: str, rpc_url: Optional[str] = None) -> str:
    """Submit a signed transaction; returns its hash."""
    return rpc_call("eth_sendRawTransaction", [raw_tx], rpc_url=rpc_url)


def wait_for_receipt(
    tx_hash: str,
    timeout: int = 120,
    poll_interval: float = 2.0,
    rpc_url: Optional[str] = None,
) -> dict:
    """
    Poll until ``tx_hash`` is mined and return its receipt.

    Raises:
        TimeoutError: Not mined within ``timeout`` seconds
    """
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        receipt = rpc_call("eth_getTransactionReceipt", [tx_hash], rpc_url=rpc_url)
        if receipt is not None:
            logger.debug("receipt for %s: status %s", tx_hash, receipt.get("status"))
            return receipt
        time.sleep(poll_interval)
    raise TimeoutError(f"Transaction {tx_hash} not mined within {timeout}s")
