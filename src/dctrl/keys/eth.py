"""
ECDSA / secp256k1 Key Management.

Keys sign every transaction the tool sends: deployment, role grants,
issuance on behalf of a caller, token-bound account execution.

The deployer/admin key is stored in ~/.dctrl/.env as PRIVATE_KEY (hex);
additional caller keys may be listed comma-separated in SIGNER_KEYS.
"""

from __future__ import annotations

import os
import secrets
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv, set_key
from eth_account import Account

DCTRL_DIR = Path.home() / ".dctrl"
DCTRL_ENV = DCTRL_DIR / ".env"


def _with_prefix(private_key: str) -> str:
    key = private_key.strip()
    return key if key.startswith("0x") else "0x" + key


def generate_eoa() -> tuple[str, str]:
    """New random key. Returns (0x-prefixed private key, checksummed address)."""
    private_key = "0x" + secrets.token_hex(32)
    return private_key, Account.from_key(private_key).address


def save_private_key(private_key: str, env_path: Optional[Path] = None) -> Path:
    """
    Write PRIVATE_KEY into the .env file.

    Other entries (SIGNER_KEYS, salts, ...) are left as they are. The file
    is made owner-only where the platform supports it.
    """
    env_path = env_path or DCTRL_ENV
    env_path.parent.mkdir(parents=True, exist_ok=True)
    env_path.touch(exist_ok=True)
    set_key(env_path, "PRIVATE_KEY", _with_prefix(private_key), quote_mode="never")
    if os.name != "nt":
        env_path.chmod(0o600)
    return env_path


def load_private_key(env_path: Optional[Path] = None) -> str:
    """
    Deployer/admin key from the environment, falling back to the .env file.

    Raises:
        ValueError: If PRIVATE_KEY is set nowhere
    """
    env_path = env_path or DCTRL_ENV
    if env_path.exists():
        load_dotenv(env_path, override=False)

    private_key = os.environ.get("PRIVATE_KEY")
    if not private_key:
        raise ValueError(
            f"PRIVATE_KEY not found. Run 'dctrl keygen' or add it to {env_path}"
        )
    return _with_prefix(private_key)


def load_extra_keys() -> list[str]:
    """Additional caller keys from SIGNER_KEYS (comma-separated)."""
    raw = os.environ.get("SIGNER_KEYS", "")
    return [_with_prefix(k) for k in raw.split(",") if k.strip()]


def get_address(private_key: Optional[str] = None) -> str:
    """Checksummed address for a private key (loaded from .env if None)."""
    return Account.from_key(private_key or load_private_key()).address
