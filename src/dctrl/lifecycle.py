"""
Lifecycle - Issue, reissue, extend, burn and transfer memberships and fobs.

Each mutating call is one signed transaction from the given caller. The
contracts enforce roles, payments and expirations; this client supplies
correctly formed, correctly paid calls and surfaces failures unchanged
(``RpcError`` from the node, ``TransactionRevertedError`` for a mined
revert). Nothing is retried.

Fob payment is always ``fobMonthly() * months`` read from the minter at
call time. A rate change between that read and mining makes the call
revert for insufficient payment; that race is not guarded against.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from .chain.contracts import (
    ACCOUNT_ABI,
    FOB_ABI,
    MEMBERSHIP_ABI,
    MINTER_ABI,
    REGISTRY_ABI,
    TRANSFER_EVENT_TOPIC,
)
from .chain.rpc import get_accounts, get_balance, get_code, read_contract
from .chain.tx import ensure_success, send_contract_tx, send_value, to_checksum_address
from .errors import DctrlError
from .keys.signers import Signer, SignerBook
from .registry import ContractRegistry
from .roles import ContractKind, Role, role_getter
from .utils import name_hash

logger = logging.getLogger(__name__)

_ZERO_TOPIC = "0x" + "0" * 64


@dataclass(frozen=True)
class FobInfo:
    fob_number: int
    owner: str
    token_uri: str
    expiration: int


@dataclass(frozen=True)
class MembershipInfo:
    token_id: int
    holder: str
    creation_timestamp: int
    owner_name: str


@dataclass(frozen=True)
class AccountInfo:
    address: str
    chain_id: int
    token_contract: str
    token_id: int
    owner: str


def _parse_minted_token_id(receipt: dict, token_contract: str) -> Optional[int]:
    """Token id of the ERC-721 mint (Transfer from zero) emitted by ``token_contract``."""
    for log in receipt.get("logs", []):
        topics = log.get("topics", [])
        if (
            str(log.get("address", "")).lower() == token_contract.lower()
            and len(topics) >= 4
            and topics[0].lower() == TRANSFER_EVENT_TOPIC
            and topics[1].lower() == _ZERO_TOPIC
        ):
            return int(topics[3], 16)
    return None


class LifecycleClient:
    """Asset lifecycle operations against one deployed contract set."""

    def __init__(self, registry: ContractRegistry, signers: SignerBook) -> None:
        self.registry = registry
        self.signers = signers

    # ---- plumbing ----

    @property
    def contracts(self):
        return self.registry.contracts

    def _read(self, contract: str, abi: list, function_name: str, args: Optional[list] = None) -> Any:
        return read_contract(contract, function_name, args or [], abi=abi, rpc_url=self.registry.rpc_url)

    def _send(
        self,
        signer: Signer,
        contract: str,
        abi: list,
        function_name: str,
        args: list,
        value: int = 0,
    ) -> dict:
        logger.info("%s -> %s(%s) value=%d", signer.address, function_name, args, value)
        result = send_contract_tx(
            contract_address=contract,
            function_name=function_name,
            args=args,
            signer=signer,
            abi=abi,
            value=value,
            rpc_url=self.registry.rpc_url,
            chain_id=self.registry.chain_id,
        )
        return ensure_success(result, function_name)

    def _admin(self) -> Signer:
        return self.signers.resolve(self.registry.admin)

    # ---- fobs ----

    def fob_payment(self, months: int) -> int:
        """Current price of ``months`` months, read fresh from the minter."""
        monthly = self._read(self.contracts.minter, MINTER_ABI, "fobMonthly")
        return int(monthly) * months

    def _paid_fob_call(self, caller: str, function_name: str, args: list, months: int) -> dict:
        signer = self.signers.resolve(caller)
        payment = self.fob_payment(months)
        result = self._send(signer, self.contracts.minter, MINTER_ABI, function_name, args, value=payment)
        result["payment"] = payment
        return result

    def issue_fob(self, caller: str, receiver: str, fob_number: int, months: int) -> dict:
        """Issue fob ``fob_number`` to ``receiver`` for ``months``; caller pays."""
        return self._paid_fob_call(
            caller, "issueFob", [to_checksum_address(receiver), fob_number, months], months
        )

    def reissue_fob(self, caller: str, receiver: str, fob_number: int, months: int) -> dict:
        """Burn the current holder's fob and issue it to ``receiver``, in one call."""
        return self._paid_fob_call(
            caller, "reissueFob", [to_checksum_address(receiver), fob_number, months], months
        )

    def extend_fob(self, caller: str, fob_number: int, months: int) -> dict:
        return self._paid_fob_call(caller, "extendFob", [fob_number, months], months)

    def burn_fob(self, caller: str, fob_number: int) -> dict:
        """Burn a fob. The caller needs BURNER on the fob contract."""
        signer = self.signers.resolve(caller)
        return self._send(signer, self.contracts.fob, FOB_ABI, "burn", [fob_number])

    def query_fob(self, fob_number: int) -> FobInfo:
        fob = self.contracts.fob
        return FobInfo(
            fob_number=fob_number,
            owner=self._read(fob, FOB_ABI, "ownerOf", [fob_number]),
            token_uri=self._read(fob, FOB_ABI, "tokenURI", [fob_number]),
            expiration=int(self._read(fob, FOB_ABI, "idToExpiration", [fob_number]) or 0),
        )

    # ---- memberships ----

    def custodian(self) -> str:
        admin = self._read(self.contracts.minter, MINTER_ABI, "admin")
        if admin is None:
            raise DctrlError(f"No contract at {self.contracts.minter}")
        return to_checksum_address(admin)

    def issue_membership(self, name: str, receiver: Optional[str] = None) -> int:
        """
        Mint a membership with ``{owner: name}`` and return its token id.

        With no receiver the custodian holds it. The id comes from the mint
        event; ``totalSupply()`` is the fallback, which is only right when
        nobody else mints concurrently. No token-bound account is created.
        """
        receiver = to_checksum_address(receiver) if receiver else self.custodian()
        result = self._send(
            self._admin(), self.contracts.minter, MINTER_ABI, "issueMembership", [receiver, name]
        )
        token_id = _parse_minted_token_id(result.get("receipt", {}), self.contracts.membership)
        if token_id is None:
            token_id = int(self._read(self.contracts.membership, MEMBERSHIP_ABI, "totalSupply"))
        logger.info("membership %d minted to %s", token_id, receiver)
        return token_id

    def transfer_membership(self, caller: str, from_address: str, to_address: str, token_id: int) -> dict:
        """transferFrom as ``caller``; needs TRANSFER or approval by ``from_address``."""
        signer = self.signers.resolve(caller)
        return self._send(
            signer,
            self.contracts.membership,
            MEMBERSHIP_ABI,
            "transferFrom",
            [to_checksum_address(from_address), to_checksum_address(to_address), token_id],
        )

    def query_membership(self, token_id: int) -> MembershipInfo:
        membership = self.contracts.membership
        creation, owner_name = self._read(membership, MEMBERSHIP_ABI, "idToMetadata", [token_id])
        return MembershipInfo(
            token_id=token_id,
            holder=self._read(membership, MEMBERSHIP_ABI, "ownerOf", [token_id]),
            creation_timestamp=int(creation),
            owner_name=owner_name,
        )

    def query_membership_by_name(self, name: str) -> MembershipInfo:
        token_id = int(
            self._read(self.contracts.membership, MEMBERSHIP_ABI, "nameToId", [name_hash(name)]) or 0
        )
        if token_id == 0:
            raise DctrlError(f"No membership found for {name!r}")
        return self.query_membership(token_id)

    # ---- token-bound accounts ----

    def _account_args(self, token_id: int) -> list:
        return [
            self.contracts.account_template,
            self.registry.account_salt,
            self.registry.chain_id,
            self.contracts.membership,
            token_id,
        ]

    def account_address(self, token_id: int) -> str:
        """Derive the token-bound account address (read-only, deterministic)."""
        address = self._read(self.contracts.registry, REGISTRY_ABI, "account", self._account_args(token_id))
        if address is None:
            raise DctrlError(f"No contract at {self.contracts.registry}")
        return to_checksum_address(address)

    def create_token_bound_account(self, token_id: int) -> str:
        """
        Make sure the token-bound account of ``token_id`` exists.

        ``createAccount`` is only sent when nothing is deployed at the
        derived address, so repeating this is a no-op. The local registry
        is updated after success.
        """
        address = self.account_address(token_id)
        code = get_code(address, rpc_url=self.registry.rpc_url)
        if code in ("0x", "0x0", ""):
            self._send(
                self._admin(),
                self.contracts.registry,
                REGISTRY_ABI,
                "createAccount",
                self._account_args(token_id),
            )
        else:
            logger.info("token-bound account %s already deployed", address)
        self.registry.record_account(token_id, address)
        return address

    def query_token_bound_account(self, address: str) -> AccountInfo:
        address = to_checksum_address(address)
        # an empty return means no code at the address
        token = self._read(address, ACCOUNT_ABI, "token")
        if token is None:
            raise DctrlError(f"{address} is not a token-bound account")
        chain_id, token_contract, token_id = token
        return AccountInfo(
            address=address,
            chain_id=int(chain_id),
            token_contract=token_contract,
            token_id=int(token_id),
            owner=self._read(address, ACCOUNT_ABI, "owner"),
        )

    # ---- roles ----

    def grant_role(self, contract: ContractKind, role: Role, address: str) -> dict:
        """
        Grant ``role`` on ``contract`` to ``address`` as the admin.

        Raises:
            UnknownRoleError: ``role`` does not exist on ``contract``;
                raised before anything is sent
        """
        getter = role_getter(contract, role)
        target, abi = {
            ContractKind.MEMBERSHIP: (self.contracts.membership, MEMBERSHIP_ABI),
            ContractKind.FOB: (self.contracts.fob, FOB_ABI),
        }[contract]
        role_hash = self._read(target, abi, getter)
        return self._send(self._admin(), target, abi, "grantRole", [role_hash, to_checksum_address(address)])

    # ---- value & accounts ----

    def send_value(self, sender: str, receiver: str, amount_wei: int) -> dict:
        signer = self.signers.resolve(sender)
        result = send_value(
            receiver,
            amount_wei,
            signer=signer,
            rpc_url=self.registry.rpc_url,
            chain_id=self.registry.chain_id,
        )
        return ensure_success(result, "send value")

    def balance_of(self, address: str) -> int:
        return get_balance(address, rpc_url=self.registry.rpc_url)

    def known_users(self) -> list[str]:
        """Local key addresses, plus the node's accounts when impersonating."""
        users = self.signers.local_addresses()
        if self.signers.impersonate:
            seen = {u.lower() for u in users}
            for account in get_accounts(rpc_url=self.registry.rpc_url):
                if account.lower() not in seen:
                    users.append(to_checksum_address(account))
                    seen.add(account.lower())
        return users
