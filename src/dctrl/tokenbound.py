"""
Token-bound execution - act *as* a membership's ERC-6551 account.

Calls are wrapped in ``account.execute(target, value, data, CALL)`` and
signed by the account's controlling owner, so the account (not the human
signer) is the payer / owner seen by the target contract.

``caller_pays`` decides where the inner call's value comes from: the
outer transaction carries it from the caller, or nothing is attached and
the account's own balance must cover it (otherwise the call reverts).
"""

from __future__ import annotations

import logging

from .chain.abi import encode_call
from .chain.contracts import ACCOUNT_ABI, FOB_ABI, MINTER_ABI, OPERATION_CALL
from .chain.tx import ensure_success, send_contract_tx, to_checksum_address
from .lifecycle import LifecycleClient

logger = logging.getLogger(__name__)


class TokenBoundExecutor:
    def __init__(self, client: LifecycleClient) -> None:
        self.client = client
        self.registry = client.registry

    def execute(
        self,
        account: str,
        caller: str,
        value: int,
        calldata: bytes,
        target: str,
        caller_pays: bool,
    ) -> dict:
        """
        Sign ``account.execute(target, value, calldata, 0)`` from ``caller``.

        When ``caller_pays`` the outer transaction also carries ``value``.
        """
        signer = self.client.signers.resolve(caller)
        account = to_checksum_address(account)
        target = to_checksum_address(target)
        outer_value = value if caller_pays else 0
        logger.info(
            "execute via %s -> %s value=%d (caller pays: %s)", account, target, value, caller_pays
        )
        result = send_contract_tx(
            contract_address=account,
            function_name="execute",
            args=[target, value, calldata, OPERATION_CALL],
            signer=signer,
            abi=ACCOUNT_ABI,
            value=outer_value,
            rpc_url=self.registry.rpc_url,
            chain_id=self.registry.chain_id,
        )
        return ensure_success(result, "execute")

    def issue_fob(
        self,
        account: str,
        caller: str,
        receiver: str,
        fob_number: int,
        months: int,
        caller_pays: bool,
    ) -> dict:
        """Issue a fob with the account as the paying minter caller."""
        payment = self.client.fob_payment(months)
        data = encode_call(MINTER_ABI, "issueFob", [to_checksum_address(receiver), fob_number, months])
        result = self.execute(account, caller, payment, data, self.registry.contracts.minter, caller_pays)
        result["payment"] = payment
        return result

    def extend_fob(
        self,
        account: str,
        caller: str,
        fob_number: int,
        months: int,
        caller_pays: bool,
    ) -> dict:
        payment = self.client.fob_payment(months)
        data = encode_call(MINTER_ABI, "extendFob", [fob_number, months])
        result = self.execute(account, caller, payment, data, self.registry.contracts.minter, caller_pays)
        result["payment"] = payment
        return result

    def transfer_fob(self, account: str, caller: str, from_address: str, to_address: str, fob_number: int) -> dict:
        """safeTransferFrom on the fob contract; ``from_address`` is normally the account."""
        data = encode_call(
            FOB_ABI,
            "safeTransferFrom",
            [to_checksum_address(from_address), to_checksum_address(to_address), fob_number],
        )
        return self.execute(account, caller, 0, data, self.registry.contracts.fob, False)

    def send_ether(self, account: str, caller: str, receiver: str, amount_wei: int) -> dict:
        """Send native currency out of the account's own balance."""
        return self.execute(account, caller, amount_wei, b"", receiver, False)
