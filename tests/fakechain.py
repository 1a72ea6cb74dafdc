"""
An in-memory chain standing in for the node.

``FakeChain`` replaces the RPC-facing functions the lifecycle client, the
token-bound adapter and the deployment orchestrator import. It keeps just
enough contract state to enforce what the real contracts enforce: roles,
payments, fob expiration, ERC-721 ownership and token-bound account
control. A reverted transaction leaves every balance and token untouched.
"""

from __future__ import annotations

import copy
import itertools
from typing import Any, Optional

from eth_abi import decode

from dctrl.chain.abi import find_function, function_selector, input_types, keccak256
from dctrl.chain.contracts import FOB_ABI, MEMBERSHIP_ABI, MINTER_ABI, TRANSFER_EVENT_TOPIC
from dctrl.chain.tx import to_checksum_address
from dctrl.errors import RpcError
from dctrl.utils import WEI_PER_ETHER, name_hash

NOW = 1_700_000_000
MONTH = 30 * 24 * 60 * 60
FOB_MONTHLY = WEI_PER_ETHER // 100
STARTING_BALANCE = 100 * WEI_PER_ETHER

ADMIN_KEY = "0x" + "11" * 32
ALICE_KEY = "0x" + "22" * 32
BOB_KEY = "0x" + "33" * 32
MALLORY_KEY = "0x" + "44" * 32

ROLE_HASHES = {name: keccak256(name.encode()) for name in ("MINTER_ROLE", "BURNER_ROLE", "TRANSFER_ROLE")}

_ZERO_TOPIC = "0x" + "0" * 64

_KIND_BY_ARTIFACT = {
    "ERC6551Registry": "registry",
    "MembershipNFT": "membership",
    "FobNFT": "fob",
    "Minter": "minter",
}

_CALLABLE_ABIS = {
    "minter": MINTER_ABI,
    "fob": FOB_ABI,
    "membership": MEMBERSHIP_ABI,
}


class Revert(Exception):
    pass


def _topic(value: int | str) -> str:
    if isinstance(value, str):
        value = int(value, 16)
    return "0x" + format(value, "064x")


class FakeChain:
    """Contract state plus the patched chain functions."""

    def __init__(self) -> None:
        self._addresses = itertools.count(0x1000)
        self._hashes = itertools.count(1)
        self.fob_monthly = FOB_MONTHLY
        self.emit_mint_logs = True
        self.fail_deploy: Optional[str] = None
        self.node_accounts: list[str] = []
        self.deployed: list[tuple[str, list]] = []
        self.transactions: list[dict[str, Any]] = []
        self.s: dict[str, Any] = {
            "balances": {},
            "kinds": {},
            "owners": {},
            "roles": {},
            "memberships": {},
            "name_to_id": {},
            "fobs": {},
            "accounts": {},
            "minter": {},
        }

    # ---- helpers ----

    def fund(self, address: str, amount: int = STARTING_BALANCE) -> None:
        key = address.lower()
        self.s["balances"][key] = self.s["balances"].get(key, 0) + amount

    def balance(self, address: str) -> int:
        return self.s["balances"].get(address.lower(), 0)

    def address_of(self, kind: str) -> str:
        for address, known in self.s["kinds"].items():
            if known == kind:
                return address
        raise KeyError(kind)

    def has_role(self, contract: str, role: str, account: str) -> bool:
        return account.lower() in self.s["roles"].get((contract.lower(), ROLE_HASHES[role]), set())

    def calls(self, function_name: str) -> list[dict[str, Any]]:
        return [tx for tx in self.transactions if tx["function"] == function_name]

    def _new_address(self) -> str:
        return "0x" + format(next(self._addresses), "040x")

    def _tx_hash(self) -> str:
        return "0x" + format(next(self._hashes), "064x")

    def _move(self, sender: str, receiver: str, value: int) -> None:
        if value <= 0:
            return
        balances = self.s["balances"]
        if balances.get(sender, 0) < value:
            raise Revert("insufficient balance")
        balances[sender] -= value
        balances[receiver] = balances.get(receiver, 0) + value

    def _derive_account(self, implementation: str, salt: bytes, chain_id: int, token_contract: str, token_id: int) -> str:
        seed = repr((implementation.lower(), bytes(salt), int(chain_id), token_contract.lower(), int(token_id)))
        return "0x" + keccak256(seed.encode()).hex()[-40:]

    def _membership_owner(self, token_id: int) -> str:
        token = self.s["memberships"].get(int(token_id))
        if token is None:
            raise Revert("ERC721: invalid token ID")
        return token["owner"]

    # ---- transactions ----

    def _transact(self, sender: str, to: Optional[str], value: int, function_name: Optional[str], args: list) -> dict:
        snapshot = copy.deepcopy(self.s)
        record = {"from": sender, "to": to, "value": value, "function": function_name, "args": args}
        self.transactions.append(record)
        try:
            logs = self._dispatch(sender.lower(), (to or "").lower(), value, function_name, args)
            status = 1
        except Revert as exc:
            self.s = snapshot
            record["revert"] = str(exc)
            logs, status = [], 0
        tx_hash = self._tx_hash()
        return {
            "tx_hash": tx_hash,
            "receipt": {"transactionHash": tx_hash, "status": hex(status), "logs": logs},
            "status": status,
        }

    def _dispatch(self, sender: str, to: str, value: int, function_name: Optional[str], args: list) -> list:
        self._move(sender, to, value)
        if function_name is None:
            return []
        kind = self.s["kinds"].get(to)
        handler = getattr(self, f"_{kind}_{function_name}", None)
        if handler is None:
            raise Revert(f"no {function_name} on {to}")
        return handler(sender, to, value, *args) or []

    def _grant(self, sender: str, contract: str, role: bytes, account: str) -> None:
        if sender != self.s["owners"][contract]:
            raise Revert("AccessControl: sender is not admin")
        self.s["roles"].setdefault((contract, bytes(role)), set()).add(account.lower())

    def _require_role(self, contract: str, role: str, account: str) -> None:
        if not self.has_role(contract, role, account):
            raise Revert(f"AccessControl: account {account} is missing role {role}")

    def _pay(self, minter: str, value: int, months: int) -> None:
        if months <= 0:
            raise Revert("months must be positive")
        if value < self.fob_monthly * months:
            raise Revert("insufficient payment")
        self._move(minter, self.s["minter"]["payment_receiver"], value)

    # minter

    def _minter_issueMembership(self, sender, minter, value, receiver, name):
        if sender != self.s["minter"]["admin"]:
            raise Revert("Minter: caller is not admin")
        membership = self.address_of("membership")
        self._require_role(membership, "MINTER_ROLE", minter)
        token_id = len(self.s["memberships"]) + 1
        self.s["memberships"][token_id] = {"owner": receiver.lower(), "name": name, "created": NOW}
        self.s["name_to_id"][name_hash(name)] = token_id
        if not self.emit_mint_logs:
            return []
        return [
            {
                "address": to_checksum_address(membership),
                "topics": [TRANSFER_EVENT_TOPIC, _ZERO_TOPIC, _topic(receiver), _topic(token_id)],
                "data": "0x",
            }
        ]

    def _minter_issueFob(self, sender, minter, value, receiver, fob_id, months):
        existing = self.s["fobs"].get(fob_id)
        if existing is not None and existing["expiration"] > NOW:
            raise Revert("fob already issued")
        self._pay(minter, value, months)
        self.s["fobs"][fob_id] = {"owner": receiver.lower(), "expiration": NOW + months * MONTH}

    def _minter_reissueFob(self, sender, minter, value, receiver, fob_id, months):
        if fob_id not in self.s["fobs"]:
            raise Revert("fob does not exist")
        self._pay(minter, value, months)
        self.s["fobs"][fob_id] = {"owner": receiver.lower(), "expiration": NOW + months * MONTH}

    def _minter_extendFob(self, sender, minter, value, fob_id, months):
        fob = self.s["fobs"].get(fob_id)
        if fob is None:
            raise Revert("fob does not exist")
        self._pay(minter, value, months)
        fob["expiration"] += months * MONTH

    # membership

    def _membership_grantRole(self, sender, contract, value, role, account):
        self._grant(sender, contract, role, account)

    def _membership_transferFrom(self, sender, contract, value, from_address, to_address, token_id):
        owner = self._membership_owner(token_id)
        if owner != from_address.lower():
            raise Revert("ERC721: transfer from incorrect owner")
        if sender != owner and not self.has_role(contract, "TRANSFER_ROLE", sender):
            raise Revert("ERC721: caller is not token owner or approved")
        self.s["memberships"][token_id]["owner"] = to_address.lower()

    # fob

    def _fob_grantRole(self, sender, contract, value, role, account):
        self._grant(sender, contract, role, account)

    def _fob_burn(self, sender, contract, value, fob_id):
        self._require_role(contract, "BURNER_ROLE", sender)
        if fob_id not in self.s["fobs"]:
            raise Revert("ERC721: invalid token ID")
        del self.s["fobs"][fob_id]

    def _fob_safeTransferFrom(self, sender, contract, value, from_address, to_address, fob_id):
        fob = self.s["fobs"].get(fob_id)
        if fob is None:
            raise Revert("ERC721: invalid token ID")
        if fob["owner"] != from_address.lower() or sender != fob["owner"]:
            raise Revert("ERC721: caller is not token owner or approved")
        fob["owner"] = to_address.lower()

    # ERC-6551 registry and accounts

    def _registry_createAccount(self, sender, registry, value, implementation, salt, chain_id, token_contract, token_id):
        address = self._derive_account(implementation, salt, chain_id, token_contract, token_id)
        if address not in self.s["accounts"]:
            self.s["kinds"][address] = "account"
            self.s["accounts"][address] = (int(chain_id), token_contract.lower(), int(token_id))

    def _account_execute(self, sender, account, value, target, inner_value, data, operation):
        _, _, token_id = self.s["accounts"][account]
        if sender != self._membership_owner(token_id):
            raise Revert("Invalid signer")
        target = target.lower()
        data = bytes(data)
        if not data:
            return self._dispatch(account, target, inner_value, None, [])
        abi = _CALLABLE_ABIS.get(self.s["kinds"].get(target))
        if abi is None:
            raise Revert("call to unknown contract")
        for entry in abi:
            if entry.get("type") == "function" and function_selector(abi, entry["name"]) == data[:4]:
                args = list(decode(input_types(find_function(abi, entry["name"])), data[4:]))
                return self._dispatch(account, target, inner_value, entry["name"], args)
        raise Revert("unknown selector")

    # ---- patched chain functions ----

    def deploy_contract(self, contract_name, constructor_args=None, signer=None, gas_limit=None,
                        rpc_url=None, chain_id=None, artifacts_dir=None, wait=True, timeout=180):
        args = list(constructor_args or [])
        self.deployed.append((contract_name, args))
        tx_hash = self._tx_hash()
        if contract_name == self.fail_deploy:
            return {"tx_hash": tx_hash, "receipt": {"status": "0x0"}, "status": 0}

        address = self._new_address()
        kind = _KIND_BY_ARTIFACT.get(contract_name, "other")
        self.s["kinds"][address] = kind
        self.s["owners"][address] = signer.address.lower()
        if kind == "minter":
            self.s["minter"] = {"payment_receiver": args[4].lower(), "admin": args[5].lower(), "salt": args[6]}
        return {
            "tx_hash": tx_hash,
            "receipt": {"status": "0x1", "contractAddress": address},
            "status": 1,
            "contract_address": to_checksum_address(address),
        }

    def send_contract_tx(self, contract_address, function_name, args, signer, contract_name=None, abi=None,
                         value=0, gas_limit=None, rpc_url=None, chain_id=None, wait=True):
        return self._transact(signer.address, contract_address, value, function_name, list(args))

    def send_value(self, to, value, signer, rpc_url=None, chain_id=None, wait=True):
        return self._transact(signer.address, to, value, None, [])

    def get_balance(self, address, rpc_url=None):
        return self.balance(address)

    def get_code(self, address, rpc_url=None):
        return "0x6080" if address.lower() in self.s["kinds"] else "0x"

    def get_accounts(self, rpc_url=None):
        return list(self.node_accounts)

    def read_contract(self, contract_address, function_name, args=None, contract_name=None, abi=None, rpc_url=None):
        address = contract_address.lower()
        args = list(args or [])
        kind = self.s["kinds"].get(address)
        if kind is None:
            # eth_call on an address without code answers "0x"
            return None
        if function_name in ROLE_HASHES and kind in ("membership", "fob"):
            return ROLE_HASHES[function_name]
        reader = getattr(self, f"_read_{kind}_{function_name}", None)
        if reader is None:
            raise RpcError(f"RPC error: execution reverted ({function_name} on {contract_address})", code=3)
        try:
            return reader(address, *args)
        except Revert as exc:
            raise RpcError(f"RPC error: execution reverted: {exc}", code=3) from exc

    def _read_minter_fobMonthly(self, minter):
        return self.fob_monthly

    def _read_minter_admin(self, minter):
        return to_checksum_address(self.s["minter"]["admin"])

    def _read_membership_ownerOf(self, membership, token_id):
        return to_checksum_address(self._membership_owner(token_id))

    def _read_membership_idToMetadata(self, membership, token_id):
        token = self.s["memberships"].get(token_id)
        if token is None:
            return (0, "")
        return (token["created"], token["name"])

    def _read_membership_nameToId(self, membership, hashed):
        return self.s["name_to_id"].get(bytes(hashed), 0)

    def _read_membership_totalSupply(self, membership):
        return len(self.s["memberships"])

    def _read_fob_ownerOf(self, fob, fob_id):
        fob_state = self.s["fobs"].get(fob_id)
        if fob_state is None:
            raise Revert("ERC721: invalid token ID")
        return to_checksum_address(fob_state["owner"])

    def _read_fob_tokenURI(self, fob, fob_id):
        self._read_fob_ownerOf(fob, fob_id)
        return f"https://fobs.dctrl.example/{fob_id}"

    def _read_fob_idToExpiration(self, fob, fob_id):
        fob_state = self.s["fobs"].get(fob_id)
        return fob_state["expiration"] if fob_state else 0

    def _read_registry_account(self, registry, implementation, salt, chain_id, token_contract, token_id):
        return to_checksum_address(self._derive_account(implementation, salt, chain_id, token_contract, token_id))

    def _read_account_token(self, account):
        chain_id, token_contract, token_id = self.s["accounts"][account]
        return (chain_id, to_checksum_address(token_contract), token_id)

    def _read_account_owner(self, account):
        _, _, token_id = self.s["accounts"][account]
        return to_checksum_address(self._membership_owner(token_id))
