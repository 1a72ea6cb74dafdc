"""
Membership menu - issue, transfer, query memberships and grant roles.

Issued memberships are upgraded to token-bound accounts straight away.
"""

from __future__ import annotations

import click

from ..roles import ContractKind
from ..utils import format_timestamp
from .menus import Command, Menu, run_menu
from .roles import grant_role_menu
from .session import Session, ask, ask_int, ask_yes_no, ok, show


def issue_membership(session: Session) -> None:
    click.echo("  ~~ Issuing new membership ~~")
    self_custody = ask_yes_no("Is this membership self-custody?")
    name = ask("What is the member's name?")

    receiver = ask("What is the self-custody address?") if self_custody else None
    token_id = session.client.issue_membership(name, receiver=receiver)
    ok(f"Membership minted to {receiver or 'custodian'} with tokenId {token_id}")

    account = session.client.create_token_bound_account(token_id)
    ok(f"TokenBound Account address: {account}")


def transfer_membership(session: Session) -> None:
    click.echo("  ~~ Transferring membership ~~")
    token_id = ask_int("Enter membership tokenId")
    caller = ask("Enter caller address")
    from_address = ask("Transfer From")
    to_address = ask("Transfer To")
    session.client.transfer_membership(caller, from_address, to_address, token_id)
    ok(f"Transferred membership {token_id} from {from_address} to {to_address}")


def query_membership(session: Session) -> None:
    click.echo("  ~~ Query membership by TokenId or Name? ~~")
    click.echo("  1. TokenId")
    click.echo("  2. Name")
    by_name = ask_int("Enter number") != 1
    query = ask("Enter query")

    if by_name:
        info = session.client.query_membership_by_name(query)
    else:
        info = session.client.query_membership(int(query))

    show("TokenId", info.token_id)
    show("Holder", info.holder)
    show("Creation Date", format_timestamp(info.creation_timestamp))
    show("Owner", info.owner_name)
    account = session.registry.account_for(info.token_id)
    if account:
        show("TokenBound Account", account)


def grant_role(session: Session) -> None:
    grant_role_menu(session, ContractKind.MEMBERSHIP)


MEMBERSHIP_MENU = Menu(
    title="Membership",
    commands={
        1: Command("Issue new membership", issue_membership),
        2: Command("Transfer existing membership", transfer_membership),
        3: Command("Query existing membership", query_membership),
        4: Command("Grant Role", grant_role),
    },
)


def membership_menu(session: Session) -> None:
    run_menu(MEMBERSHIP_MENU, session)
