from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation

from eth_abi import encode

from .chain.abi import keccak256

WEI_PER_ETHER = 10**18


def format_timestamp(ts: int) -> str:
    if not ts:
        return "never"
    return datetime.fromtimestamp(ts, tz=timezone.utc).isoformat().replace("+00:00", "Z")


def format_ether(wei: int) -> str:
    value = (Decimal(wei) / WEI_PER_ETHER).normalize()
    text = format(value, "f")
    return f"{text} ETH"


def parse_ether(amount: str) -> int:
    """Decimal ether string -> wei. Rejects negatives and sub-wei precision."""
    try:
        value = Decimal(amount.strip())
    except InvalidOperation as exc:
        raise ValueError(f"Not a number: {amount!r}") from exc
    wei = value * WEI_PER_ETHER
    if wei < 0 or wei != wei.to_integral_value():
        raise ValueError(f"Invalid ether amount: {amount!r}")
    return int(wei)


def format_bytes32_string(text: str) -> bytes:
    """UTF-8 text right-padded to bytes32 (at most 31 bytes, null-terminated)."""
    raw = text.encode("utf-8")
    if len(raw) > 31:
        raise ValueError(f"bytes32 string must be less than 32 bytes: {text!r}")
    return raw.ljust(32, b"\x00")


def name_hash(name: str) -> bytes:
    """keccak256(abi.encode(name)) - the key of MembershipNFT.nameToId."""
    return keccak256(encode(["string"], [name]))
