"""In-memory record of the deployed contract set and token-bound accounts."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Optional


@dataclass(frozen=True)
class ContractSet:
    """Addresses of one deployment, in deployment order."""

    registry: str  # ERC6551Registry
    forwarder: str  # Multicall3
    guardian: str  # AccountGuardian
    account_template: str  # AccountV3 implementation
    membership: str
    fob: str
    minter: str

    def items(self) -> Iterator[tuple[str, str]]:
        yield "ERC6551Registry", self.registry
        yield "Multicall3", self.forwarder
        yield "AccountGuardian", self.guardian
        yield "AccountV3", self.account_template
        yield "MembershipNFT", self.membership
        yield "FobNFT", self.fob
        yield "Minter", self.minter


@dataclass
class ContractRegistry:
    """
    Local view of chain state for one session.

    Built once by the deployment orchestrator and handed to the lifecycle
    client and the token-bound adapter. Token-bound accounts are added
    only after their creation is confirmed. Nothing here is persisted.
    """

    contracts: ContractSet
    admin: str
    rpc_url: str
    chain_id: int
    account_salt: bytes
    accounts: dict[int, str] = field(default_factory=dict)

    def record_account(self, token_id: int, address: str) -> None:
        self.accounts[token_id] = address

    def account_for(self, token_id: int) -> Optional[str]:
        return self.accounts.get(token_id)
