"""
Signers - who a transaction is sent as.

Every lifecycle operation names a ``caller`` address. The address is
resolved to a :class:`Signer` through a :class:`SignerBook`:

- :class:`LocalKeySigner` signs locally with a private key and submits the
  raw transaction. This is the only signer used against real networks.
- :class:`ImpersonatedSigner` asks a local dev node (Hardhat / anvil) to
  send as any address. Only available when impersonation is switched on.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Optional, Protocol

from eth_account import Account
from eth_account.signers.local import LocalAccount

from ..chain.rpc import rpc_call, send_raw_transaction
from ..errors import SignerUnavailableError

logger = logging.getLogger(__name__)


class Signer(Protocol):
    address: str

    def send_transaction(self, tx: dict, rpc_url: Optional[str] = None) -> str:
        """Submit ``tx`` as this signer and return the transaction hash."""
        ...


class LocalKeySigner:
    """Signs with a local secp256k1 key via eth-account."""

    def __init__(self, private_key: str) -> None:
        self._account: LocalAccount = Account.from_key(private_key)
        self.address = self._account.address

    def send_transaction(self, tx: dict, rpc_url: Optional[str] = None) -> str:
        unsigned = {k: v for k, v in tx.items() if k != "from"}
        signed = self._account.sign_transaction(unsigned)
        raw_tx = "0x" + bytes(signed.raw_transaction).hex()
        return send_raw_transaction(raw_tx, rpc_url=rpc_url)

    def __repr__(self) -> str:
        return f"LocalKeySigner({self.address})"


class ImpersonatedSigner:
    """
    Sends as an arbitrary address on a dev node.

    The node must support ``<prefix>_impersonateAccount`` (Hardhat, anvil).
    Never use against a public network.
    """

    def __init__(self, address: str, method: str = "hardhat_impersonateAccount") -> None:
        self.address = address
        self.method = method
        self._impersonating: set[str] = set()

    def _ensure_impersonating(self, rpc_url: Optional[str]) -> None:
        key = rpc_url or ""
        if key in self._impersonating:
            return
        rpc_call(self.method, [self.address], rpc_url=rpc_url)
        self._impersonating.add(key)

    def send_transaction(self, tx: dict, rpc_url: Optional[str] = None) -> str:
        self._ensure_impersonating(rpc_url)
        params: dict[str, Any] = {"from": self.address, "data": tx.get("data", "0x")}
        if tx.get("to"):
            params["to"] = tx["to"]
        for field in ("value", "gas", "gasPrice", "nonce"):
            if tx.get(field) is not None:
                params[field] = hex(tx[field])
        return rpc_call("eth_sendTransaction", [params], rpc_url=rpc_url)

    def __repr__(self) -> str:
        return f"ImpersonatedSigner({self.address})"


class SignerBook:
    """Resolves caller addresses to signers."""

    def __init__(
        self,
        signers: Iterable[LocalKeySigner] = (),
        impersonate: bool = False,
        impersonate_method: str = "hardhat_impersonateAccount",
    ) -> None:
        self._signers: dict[str, Signer] = {s.address.lower(): s for s in signers}
        self._local = set(self._signers)
        self.impersonate = impersonate
        self.impersonate_method = impersonate_method

    @classmethod
    def from_keys(cls, private_keys: Iterable[str], impersonate: bool = False) -> "SignerBook":
        return cls([LocalKeySigner(k) for k in private_keys], impersonate=impersonate)

    def resolve(self, address: str) -> Signer:
        key = address.lower()
        signer = self._signers.get(key)
        if signer is not None:
            return signer
        if not self.impersonate:
            raise SignerUnavailableError(address)
        logger.debug("impersonating %s", address)
        signer = ImpersonatedSigner(address, method=self.impersonate_method)
        self._signers[key] = signer
        return signer

    def local_addresses(self) -> list[str]:
        """Addresses backed by a local key, in insertion order."""
        return [s.address for k, s in self._signers.items() if k in self._local]
