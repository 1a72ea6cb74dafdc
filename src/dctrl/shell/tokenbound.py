"""TokenBound Account menu - act as a membership's ERC-6551 account."""

from __future__ import annotations

import click

from ..utils import format_ether
from .menus import Command, Menu, run_menu
from .session import Session, ask, ask_ether, ask_int, ask_yes_no, ok, show


def issue_fob(session: Session) -> None:
    click.echo("  ~~ Issuing Fob as TokenBoundAccount ~~")
    account = ask("Enter TokenBound Account address")
    caller = ask("Enter caller address")
    receiver = ask("Who is receiving the fob?")
    caller_pays = ask_yes_no("Is caller paying?")
    fob_number = ask_int("What is the fob number?")
    months = ask_int("How many months?")
    result = session.executor.issue_fob(account, caller, receiver, fob_number, months, caller_pays)
    ok(f"Fob minted with tokenID: {fob_number} ({format_ether(result['payment'])})")


def extend_fob(session: Session) -> None:
    click.echo("  ~~ Extending Fob as TokenBoundAccount ~~")
    account = ask("Enter TokenBound Account address")
    caller = ask("Enter caller address")
    caller_pays = ask_yes_no("Is caller paying?")
    fob_number = ask_int("What is the fob number?")
    months = ask_int("How many months?")
    result = session.executor.extend_fob(account, caller, fob_number, months, caller_pays)
    ok(f"Fob extended with tokenID: {fob_number} ({format_ether(result['payment'])})")


def transfer_fob(session: Session) -> None:
    click.echo("  ~~ Transferring Fob as TokenBoundAccount ~~")
    account = ask("Enter TokenBound Account address")
    caller = ask("Enter caller address")
    from_address = ask("Sending fob from?")
    to_address = ask("Sending fob to?")
    fob_number = ask_int("What is the fob number?")
    session.executor.transfer_fob(account, caller, from_address, to_address, fob_number)
    ok(f"Fob {fob_number} transferred to {to_address}")


def send_ether(session: Session) -> None:
    click.echo("  ~~ Sending ether as TokenBoundAccount ~~")
    account = ask("Enter TokenBound Account address")
    caller = ask("Enter caller address")
    receiver = ask("Who is receiving the ether?")
    amount = ask_ether("Amount?")
    session.executor.send_ether(account, caller, receiver, amount)
    ok(f"{format_ether(amount)} transferred to {receiver}")


def query_account(session: Session) -> None:
    address = ask("Enter TokenBound Account address")
    info = session.client.query_token_bound_account(address)
    click.echo("  TokenBoundAccount:")
    show("chainId", info.chain_id)
    show("nftContract address", info.token_contract)
    show("tokenId", info.token_id)
    show("owner address", info.owner)


TOKENBOUND_MENU = Menu(
    title="TokenBound Account",
    commands={
        1: Command("Issue Fob as TokenBoundAccount", issue_fob),
        2: Command("Extend Fob as TokenBoundAccount", extend_fob),
        3: Command("Transfer Fob as TokenBoundAccount", transfer_fob),
        4: Command("Send Ether as TokenBoundAccount", send_ether),
        5: Command("Query TokenBoundAccount owner", query_account),
    },
)


def tokenbound_menu(session: Session) -> None:
    run_menu(TOKENBOUND_MENU, session)
