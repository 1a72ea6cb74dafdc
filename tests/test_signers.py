"""Key handling and caller resolution."""

from __future__ import annotations

from pathlib import Path

import pytest
from eth_account import Account

from dctrl.errors import SignerUnavailableError
from dctrl.keys import eth
from dctrl.keys import signers as signers_module
from dctrl.keys.signers import ImpersonatedSigner, LocalKeySigner, SignerBook

KEY_A = "0x" + "22" * 32
KEY_B = "0x" + "33" * 32


class TestKeyFile:
    def test_generate_eoa(self) -> None:
        private_key, address = eth.generate_eoa()
        assert private_key.startswith("0x") and len(private_key) == 66
        assert Account.from_key(private_key).address == address

    def test_save_keeps_other_entries(self, tmp_path: Path) -> None:
        env_path = tmp_path / ".dctrl" / ".env"
        env_path.parent.mkdir()
        env_path.write_text("SIGNER_KEYS=abc\n# comment\n", encoding="utf-8")

        eth.save_private_key(KEY_A, env_path)
        content = env_path.read_text(encoding="utf-8")
        assert "SIGNER_KEYS=abc" in content
        assert f"PRIVATE_KEY={KEY_A}" in content

    def test_load_from_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PRIVATE_KEY", "")
        monkeypatch.delenv("PRIVATE_KEY")
        env_path = tmp_path / ".env"
        eth.save_private_key(KEY_A[2:], env_path)
        assert eth.load_private_key(env_path) == KEY_A

    def test_load_missing(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("PRIVATE_KEY", raising=False)
        with pytest.raises(ValueError, match="PRIVATE_KEY not found"):
            eth.load_private_key(tmp_path / "missing.env")

    def test_extra_keys(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SIGNER_KEYS", f"{KEY_A}, {KEY_B[2:]} ,")
        assert eth.load_extra_keys() == [KEY_A, KEY_B]


class TestLocalKeySigner:
    def test_signs_and_submits(self, monkeypatch: pytest.MonkeyPatch) -> None:
        submitted: list[str] = []

        def fake_send(raw_tx: str, rpc_url=None) -> str:
            submitted.append(raw_tx)
            return "0x" + "ab" * 32

        monkeypatch.setattr(signers_module, "send_raw_transaction", fake_send)
        signer = LocalKeySigner(KEY_A)
        tx_hash = signer.send_transaction(
            {
                "from": signer.address,
                "to": "0x" + "01" * 20,
                "value": 1,
                "data": "0x",
                "nonce": 0,
                "gas": 21_000,
                "gasPrice": 1_000_000_000,
                "chainId": 31337,
            }
        )
        assert tx_hash == "0x" + "ab" * 32
        assert submitted[0].startswith("0x")
        assert Account.recover_transaction(submitted[0]) == signer.address


class TestImpersonation:
    def test_impersonates_once_then_sends(self, monkeypatch: pytest.MonkeyPatch) -> None:
        calls: list[tuple[str, list]] = []

        def fake_rpc(method: str, params: list, rpc_url=None):
            calls.append((method, params))
            return "0x" + "cd" * 32

        monkeypatch.setattr(signers_module, "rpc_call", fake_rpc)
        address = "0x" + "ee" * 20
        signer = ImpersonatedSigner(address)
        transaction = {"to": "0x" + "01" * 20, "data": "0x1234", "value": 16, "gas": 21_000, "nonce": None}

        signer.send_transaction(transaction, rpc_url="http://node")
        signer.send_transaction(transaction, rpc_url="http://node")

        methods = [method for method, _ in calls]
        assert methods == ["hardhat_impersonateAccount", "eth_sendTransaction", "eth_sendTransaction"]
        sent = calls[1][1][0]
        assert sent["from"] == address
        assert sent["value"] == "0x10"
        assert "nonce" not in sent

    def test_anvil_method(self, monkeypatch: pytest.MonkeyPatch) -> None:
        calls: list[str] = []
        monkeypatch.setattr(signers_module, "rpc_call", lambda method, params, rpc_url=None: calls.append(method))
        ImpersonatedSigner("0x" + "ee" * 20, method="anvil_impersonateAccount").send_transaction({"data": "0x"})
        assert calls[0] == "anvil_impersonateAccount"


class TestSignerBook:
    def test_resolves_local_keys_case_insensitively(self) -> None:
        local = LocalKeySigner(KEY_A)
        book = SignerBook([local])
        assert book.resolve(local.address.lower()) is local

    def test_unknown_without_impersonation(self) -> None:
        book = SignerBook([LocalKeySigner(KEY_A)])
        with pytest.raises(SignerUnavailableError) as excinfo:
            book.resolve("0x" + "ee" * 20)
        assert excinfo.value.address == "0x" + "ee" * 20
        assert excinfo.value.exit_code == 3

    def test_unknown_with_impersonation(self) -> None:
        book = SignerBook(impersonate=True)
        signer = book.resolve("0x" + "ee" * 20)
        assert isinstance(signer, ImpersonatedSigner)
        assert book.resolve("0x" + "EE" * 20) is signer
        assert book.local_addresses() == []

    def test_from_keys_keeps_order(self) -> None:
        book = SignerBook.from_keys([KEY_B, KEY_A])
        assert book.local_addresses() == [Account.from_key(KEY_B).address, Account.from_key(KEY_A).address]
