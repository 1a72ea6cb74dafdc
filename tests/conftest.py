"""Shared fixtures: a deployed contract set on the in-memory chain."""

from __future__ import annotations

import pytest

from dctrl.config import Settings
from dctrl.deploy import deploy_contract_set
from dctrl.keys.signers import LocalKeySigner, SignerBook
from dctrl.lifecycle import LifecycleClient
from dctrl.tokenbound import TokenBoundExecutor
from fakechain import ADMIN_KEY, ALICE_KEY, BOB_KEY, MALLORY_KEY, FakeChain


@pytest.fixture()
def chain(monkeypatch: pytest.MonkeyPatch) -> FakeChain:
    fake = FakeChain()
    for module in ("dctrl.lifecycle", "dctrl.tokenbound", "dctrl.deploy"):
        for name in ("read_contract", "send_contract_tx", "send_value", "get_balance", "get_code",
                     "get_accounts", "deploy_contract"):
            monkeypatch.setattr(f"{module}.{name}", getattr(fake, name), raising=False)
    return fake


@pytest.fixture()
def signers(chain: FakeChain) -> dict[str, LocalKeySigner]:
    accounts = {
        "admin": LocalKeySigner(ADMIN_KEY),
        "alice": LocalKeySigner(ALICE_KEY),
        "bob": LocalKeySigner(BOB_KEY),
        "mallory": LocalKeySigner(MALLORY_KEY),
    }
    for signer in accounts.values():
        chain.fund(signer.address)
    return accounts


@pytest.fixture()
def settings() -> Settings:
    return Settings(network="localhost", rpc_url="http://fake-node:8545", chain_id=31337, private_key=ADMIN_KEY)


@pytest.fixture()
def book(signers: dict[str, LocalKeySigner]) -> SignerBook:
    return SignerBook(signers.values())


@pytest.fixture()
def client(chain: FakeChain, settings: Settings, signers: dict[str, LocalKeySigner], book: SignerBook) -> LifecycleClient:
    registry = deploy_contract_set(settings, signers["admin"])
    return LifecycleClient(registry, book)


@pytest.fixture()
def executor(client: LifecycleClient) -> TokenBoundExecutor:
    return TokenBoundExecutor(client)
