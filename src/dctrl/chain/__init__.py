"""
Chain - On-chain interaction layer for the dctrl tool.

Provides the JSON-RPC client, ABI/artifact loading, and transaction
utilities for the membership, fob, minter and ERC-6551 contracts.

Uses httpx + eth-account + eth-abi instead of the heavyweight web3.py.
"""
