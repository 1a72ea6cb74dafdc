"""
Top-level shell loop.

Before each main menu the known users and the token-bound accounts are
listed with their balances. Any error raised while handling a choice,
in any submenu, lands here: it is printed and the main menu comes back.
"""

from __future__ import annotations

import click

from ..utils import format_ether
from .fob import fob_menu
from .membership import membership_menu
from .menus import Command, Menu, ask_choice
from .session import Session, ask, ask_ether, ok
from .tokenbound import tokenbound_menu


def send_ether(session: Session) -> None:
    click.echo("  ~~ Sending ether ~~")
    sender = ask("Sender address")
    receiver = ask("Receiver address")
    amount = ask_ether("Amount")
    session.client.send_value(sender, receiver, amount)
    ok(f"{format_ether(amount)} sent")


MAIN_MENU = Menu(
    title="Welcome to DctrlMembership Tool",
    commands={
        1: Command("Membership", membership_menu),
        2: Command("Fob", fob_menu),
        3: Command("TokenBound Account", tokenbound_menu),
        4: Command("Send Ether", send_ether),
    },
    back_label="Quit",
)


def print_deployments(session: Session) -> None:
    for name, address in session.registry.contracts.items():
        click.echo(click.style(f"    {name}: ", dim=True) + address)


def print_status(session: Session) -> None:
    client = session.client
    click.echo()
    click.secho("  Users:", fg="cyan")
    for index, address in enumerate(client.known_users()):
        label = "Admin" if address.lower() == session.registry.admin.lower() else f"User {index}"
        click.echo(f"    {label}, address {address}, ether: {format_ether(client.balance_of(address))}")

    click.secho("  TokenBound Accounts:", fg="cyan")
    if not session.registry.accounts:
        click.echo(click.style("    (none)", dim=True))
    for token_id, address in sorted(session.registry.accounts.items()):
        click.echo(
            f"    TokenId: {token_id}, AccountAddress: {address}, "
            f"ether: {format_ether(client.balance_of(address))}"
        )


def _print_error(exc: Exception) -> None:
    click.echo()
    click.secho("  !!! ERROR !!!", fg="red", bold=True)
    click.secho("  Oops, something went wrong. Let's try again", fg="red")
    click.secho(f"  {type(exc).__name__}: {exc}", fg="red")
    click.secho("  !!! ERROR !!!", fg="red", bold=True)


def run_shell(session: Session) -> None:
    """Run the main menu until the user quits (0)."""
    while True:
        try:
            print_status(session)
            click.echo()
            click.echo(MAIN_MENU.render())
            if not MAIN_MENU.dispatch(ask_choice(), session):
                return
        except click.Abort:
            raise
        except Exception as exc:
            _print_error(exc)
