"""
Runtime configuration.

Values come from explicit CLI options first, then the process environment,
then ~/.dctrl/.env (loaded with python-dotenv, never overriding variables
already set), then the network preset.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from eth_account import Account

from .errors import ConfigError
from .keys.eth import DCTRL_ENV, load_extra_keys, load_private_key
from .keys.signers import LocalKeySigner, SignerBook

# name -> (rpc url, chain id)
NETWORKS: dict[str, tuple[str, int]] = {
    "localhost": ("http://127.0.0.1:8545", 31337),
    "sepolia": ("https://ethereum-sepolia.publicnode.com", 11155111),
    "arb": ("https://ethereum-sepolia.publicnode.com", 11155111),
    "op_sepolia": ("https://sepolia.optimism.io", 11155420),
}

DEFAULT_NETWORK = "localhost"
DEFAULT_MINTER_SALT = "DCTRL"
DEFAULT_ACCOUNT_SALT = "0"


def _truthy(value: Optional[str]) -> bool:
    return (value or "").strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    network: str
    rpc_url: str
    chain_id: int
    private_key: Optional[str] = None
    extra_keys: tuple[str, ...] = field(default_factory=tuple)
    impersonate: bool = False
    artifacts_dir: Optional[Path] = None
    minter_salt: str = DEFAULT_MINTER_SALT
    account_salt: str = DEFAULT_ACCOUNT_SALT

    def signer_book(self) -> SignerBook:
        keys = [k for k in (self.private_key, *self.extra_keys) if k]
        return SignerBook.from_keys(keys, impersonate=self.impersonate)

    def deployer(self) -> LocalKeySigner:
        """Signer for deployment and admin calls (the PRIVATE_KEY account)."""
        if not self.private_key:
            raise ConfigError(
                f"PRIVATE_KEY not set. Run 'dctrl keygen' or set it in {DCTRL_ENV}."
            )
        return LocalKeySigner(self.private_key)


def _check_key(name: str, private_key: str) -> None:
    try:
        Account.from_key(private_key)
    except Exception as exc:
        raise ConfigError(f"{name} holds a malformed private key") from exc


def load_settings(
    network: Optional[str] = None,
    rpc_url: Optional[str] = None,
    chain_id: Optional[int] = None,
    impersonate: Optional[bool] = None,
    artifacts_dir: Optional[Path] = None,
    env_path: Optional[Path] = None,
) -> Settings:
    """Resolve settings from options, environment and the .env file."""
    env_path = env_path or DCTRL_ENV
    if env_path.exists():
        load_dotenv(env_path, override=False)

    network = network or os.environ.get("DCTRL_NETWORK", DEFAULT_NETWORK)
    if network not in NETWORKS:
        raise ConfigError(
            f"Unknown network {network!r}. Choose one of: {', '.join(sorted(NETWORKS))}"
        )
    preset_url, preset_chain_id = NETWORKS[network]

    rpc_url = rpc_url or os.environ.get("DCTRL_RPC_URL") or preset_url

    if chain_id is None:
        raw_chain_id = os.environ.get("CHAIN_ID")
        try:
            chain_id = int(raw_chain_id) if raw_chain_id else preset_chain_id
        except ValueError as exc:
            raise ConfigError(f"CHAIN_ID must be an integer, got {raw_chain_id!r}") from exc

    if impersonate is None:
        impersonate = _truthy(os.environ.get("DCTRL_IMPERSONATE"))
    if impersonate and network != "localhost":
        raise ConfigError("Impersonation is only available on the localhost network.")

    if artifacts_dir is None and os.environ.get("DCTRL_ARTIFACTS"):
        artifacts_dir = Path(os.environ["DCTRL_ARTIFACTS"]).expanduser()

    try:
        private_key: Optional[str] = load_private_key(env_path)
    except ValueError:
        private_key = None
    else:
        _check_key("PRIVATE_KEY", private_key)

    extra_keys = tuple(load_extra_keys())
    for key in extra_keys:
        _check_key("SIGNER_KEYS", key)

    return Settings(
        network=network,
        rpc_url=rpc_url,
        chain_id=chain_id,
        private_key=private_key,
        extra_keys=extra_keys,
        impersonate=impersonate,
        artifacts_dir=artifacts_dir,
        minter_salt=os.environ.get("MINTER_SALT", DEFAULT_MINTER_SALT),
        account_salt=os.environ.get("ACCOUNT_SALT", DEFAULT_ACCOUNT_SALT),
    )
