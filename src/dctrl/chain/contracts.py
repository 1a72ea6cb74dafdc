"""
Minimal ABIs for the calls the tool makes.

Only the functions used by the lifecycle client, the token-bound adapter
and the deployment orchestrator are listed, so day-to-day operation does
not depend on compiled artifacts (deployment still needs bytecode).
"""

from __future__ import annotations


def _fn(name: str, inputs: list[tuple[str, str]], outputs: list[str], mutability: str) -> dict:
    return {
        "type": "function",
        "name": name,
        "inputs": [{"name": n, "type": t} for n, t in inputs],
        "outputs": [{"name": "", "type": t} for t in outputs],
        "stateMutability": mutability,
    }


_ACCESS_CONTROL_ABI: list[dict] = [
    _fn("grantRole", [("role", "bytes32"), ("account", "address")], [], "nonpayable"),
    _fn("hasRole", [("role", "bytes32"), ("account", "address")], ["bool"], "view"),
]

_ERC721_ABI: list[dict] = [
    _fn("ownerOf", [("tokenId", "uint256")], ["address"], "view"),
    _fn("tokenURI", [("tokenId", "uint256")], ["string"], "view"),
    _fn("totalSupply", [], ["uint256"], "view"),
    _fn("transferFrom", [("from", "address"), ("to", "address"), ("tokenId", "uint256")], [], "nonpayable"),
    _fn("safeTransferFrom", [("from", "address"), ("to", "address"), ("tokenId", "uint256")], [], "nonpayable"),
]

MINTER_ABI: list[dict] = [
    _fn("fobMonthly", [], ["uint256"], "view"),
    _fn("admin", [], ["address"], "view"),
    _fn("issueMembership", [("receiver", "address"), ("name", "string")], [], "nonpayable"),
    _fn("issueFob", [("receiver", "address"), ("fobId", "uint256"), ("months", "uint256")], [], "payable"),
    _fn("reissueFob", [("receiver", "address"), ("fobId", "uint256"), ("months", "uint256")], [], "payable"),
    _fn("extendFob", [("fobId", "uint256"), ("months", "uint256")], [], "payable"),
]

MEMBERSHIP_ABI: list[dict] = [
    *_ERC721_ABI,
    *_ACCESS_CONTROL_ABI,
    _fn("MINTER_ROLE", [], ["bytes32"], "view"),
    _fn("TRANSFER_ROLE", [], ["bytes32"], "view"),
    _fn("idToMetadata", [("tokenId", "uint256")], ["uint256", "string"], "view"),
    _fn("nameToId", [("name", "bytes32")], ["uint256"], "view"),
]

FOB_ABI: list[dict] = [
    *_ERC721_ABI,
    *_ACCESS_CONTROL_ABI,
    _fn("MINTER_ROLE", [], ["bytes32"], "view"),
    _fn("BURNER_ROLE", [], ["bytes32"], "view"),
    _fn("burn", [("tokenId", "uint256")], [], "nonpayable"),
    _fn("idToExpiration", [("tokenId", "uint256")], ["uint256"], "view"),
]

# ERC6551Registry (v0.3): createAccount / account share the argument list.
_ACCOUNT_ARGS = [
    ("implementation", "address"),
    ("salt", "bytes32"),
    ("chainId", "uint256"),
    ("tokenContract", "address"),
    ("tokenId", "uint256"),
]

REGISTRY_ABI: list[dict] = [
    _fn("createAccount", _ACCOUNT_ARGS, ["address"], "nonpayable"),
    _fn("account", _ACCOUNT_ARGS, ["address"], "view"),
]

# AccountV3.execute(address,uint256,bytes,uint8)
ACCOUNT_ABI: list[dict] = [
    _fn(
        "execute",
        [("to", "address"), ("value", "uint256"), ("data", "bytes"), ("operation", "uint8")],
        ["bytes"],
        "payable",
    ),
    _fn("token", [], ["uint256", "address", "uint256"], "view"),
    _fn("owner", [], ["address"], "view"),
]

# ERC-721 Transfer(address,address,uint256)
TRANSFER_EVENT_TOPIC = "0xddf252ad1be2c89b69c2b068fc378daa952ba7f163c4a11628f55a4df523b3ef"

# Operation code for a plain CALL in AccountV3.execute
OPERATION_CALL = 0
