"""Role-grant submenu shared by the membership and fob menus."""

from __future__ import annotations

import click

from ..roles import ROLE_TABLE, ContractKind, role_from_choice
from .menus import ask_choice
from .session import Session, ask, ok


def grant_role_menu(session: Session, contract: ContractKind) -> None:
    """
    Grant roles until the user picks 0.

    Numbers that name no role for this contract are ignored: nothing is
    granted, nothing is sent.
    """
    while True:
        click.echo()
        click.secho(f"  ~~ Granting Role for {contract.value} contract ~~", fg="cyan")
        for number, role in ROLE_TABLE[contract].items():
            click.echo(f"  {number}. {role.value}")
        click.echo("  0. Go back")

        choice = ask_choice()
        if choice == 0:
            return
        role = role_from_choice(contract, choice)
        if role is None:
            continue

        address = ask("Grant role to which address?")
        session.client.grant_role(contract, role, address)
        ok(f"{role.value} granted to {address}")
