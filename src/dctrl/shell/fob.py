"""Fob menu - act on fobs directly as an EOA."""

from __future__ import annotations

from ..roles import ContractKind
from ..utils import format_ether, format_timestamp
from .menus import Command, Menu, run_menu
from .roles import grant_role_menu
from .session import Session, ask, ask_int, ok, show


def _ask_issue() -> tuple[str, str, int, int]:
    caller = ask("Who is the caller")
    receiver = ask("Who is receiving the fob?")
    fob_number = ask_int("What is the fob number?")
    months = ask_int("Pay for how many months?")
    return caller, receiver, fob_number, months


def issue_fob(session: Session) -> None:
    caller, receiver, fob_number, months = _ask_issue()
    result = session.client.issue_fob(caller, receiver, fob_number, months)
    ok(f"Paid {format_ether(result['payment'])} to issue Fob {fob_number} for {months} months")


def reissue_fob(session: Session) -> None:
    caller, receiver, fob_number, months = _ask_issue()
    result = session.client.reissue_fob(caller, receiver, fob_number, months)
    ok(f"Paid {format_ether(result['payment'])} to reissue Fob {fob_number} for {months} months")


def extend_fob(session: Session) -> None:
    caller = ask("Who is the caller?")
    fob_number = ask_int("What is the fob number?")
    months = ask_int("Pay for how many months?")
    result = session.client.extend_fob(caller, fob_number, months)
    ok(f"Paid {format_ether(result['payment'])} to extend Fob {fob_number} for {months} months")


def burn_fob(session: Session) -> None:
    caller = ask("Who is the caller?")
    fob_number = ask_int("What is the fob number?")
    session.client.burn_fob(caller, fob_number)
    ok(f"Fob burned with tokenID: {fob_number}")


def query_fob(session: Session) -> None:
    fob_number = ask_int("Enter fob number")
    info = session.client.query_fob(fob_number)
    show(f"Owner of fob {fob_number}", info.owner)
    show(f"TokenUri of fob {fob_number}", info.token_uri)
    show(f"Expiration Date of fob {fob_number}", format_timestamp(info.expiration))


def grant_role(session: Session) -> None:
    grant_role_menu(session, ContractKind.FOB)


FOB_MENU = Menu(
    title="Fob",
    commands={
        1: Command("Issue new fob", issue_fob),
        2: Command("Reissue existing fob", reissue_fob),
        3: Command("Extend existing fob", extend_fob),
        4: Command("Burn existing fob", burn_fob),
        5: Command("Query existing fob", query_fob),
        6: Command("Grant Role", grant_role),
    },
)


def fob_menu(session: Session) -> None:
    run_menu(FOB_MENU, session)
