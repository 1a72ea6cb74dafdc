"""
Menu dispatch tables.

A menu is a numbered table of commands; 0 always leaves. Rendering and
dispatch are plain functions of the table, prompting happens in
:func:`run_menu` only.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Optional

import click

if TYPE_CHECKING:
    from .session import Session

Handler = Callable[["Session"], None]


@dataclass(frozen=True)
class Command:
    label: str
    handler: Handler


@dataclass(frozen=True)
class Menu:
    title: str
    commands: dict[int, Command]
    back_label: str = "Go back"

    def render(self) -> str:
        lines = [click.style(f"  ~~ {self.title} ~~", fg="cyan")]
        for number, command in self.commands.items():
            lines.append(f"  {number}. {command.label}")
        lines.append(f"  0. {self.back_label}")
        return "\n".join(lines)

    def dispatch(self, choice: int, session: "Session") -> bool:
        """Run the command for ``choice``. False means leave the menu.

        Unknown numbers do nothing.
        """
        if choice == 0:
            return False
        command = self.commands.get(choice)
        if command is not None:
            command.handler(session)
        return True


def ask_choice() -> int:
    return click.prompt("Enter number", type=int)


def run_menu(menu: Menu, session: "Session", before: Optional[Handler] = None) -> None:
    """Show ``menu`` until the user picks 0. Errors propagate to the caller."""
    while True:
        if before is not None:
            before(session)
        click.echo()
        click.echo(menu.render())
        if not menu.dispatch(ask_choice(), session):
            return
