"""Shell session state and prompt helpers."""

from __future__ import annotations

from dataclasses import dataclass

import click

from ..lifecycle import LifecycleClient
from ..registry import ContractRegistry
from ..tokenbound import TokenBoundExecutor
from ..utils import parse_ether


@dataclass
class Session:
    client: LifecycleClient
    executor: TokenBoundExecutor

    @property
    def registry(self) -> ContractRegistry:
        return self.client.registry

    @classmethod
    def for_client(cls, client: LifecycleClient) -> "Session":
        return cls(client=client, executor=TokenBoundExecutor(client))


def ask(text: str) -> str:
    return click.prompt(text, type=str).strip()


def ask_int(text: str) -> int:
    return click.prompt(text, type=int)


def ask_yes_no(text: str) -> bool:
    return click.confirm(text)


def ask_ether(text: str) -> int:
    """Prompt for an ether amount until it parses; returns wei."""
    while True:
        raw = ask(text)
        try:
            return parse_ether(raw)
        except ValueError as exc:
            click.secho(f"  {exc}", fg="red")


def ok(message: str) -> None:
    click.secho(f"  {message}", fg="green")


def show(label: str, value: object) -> None:
    click.echo(click.style(f"    {label}: ", dim=True) + str(value))
