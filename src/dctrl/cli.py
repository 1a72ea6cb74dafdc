"""
dctrl CLI

Command-line interface for deploying and operating the membership, fob
and token-bound account contracts.

Commands:
  shell              - Deploy a fresh contract set and open the interactive menus
  deploy             - Deploy a fresh contract set and print the addresses
  deploy-fob-mapper  - Deploy the standalone FobMapper contract
  keygen             - Create the deployer/admin key
  whoami             - Show the deployer/admin address
  info               - Show configuration
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import NoReturn, Optional

import click

from .config import NETWORKS, Settings, load_settings
from .deploy import deploy_contract_set, deploy_fob_mapper
from .errors import DctrlError
from .keys.eth import DCTRL_ENV, generate_eoa, get_address, load_private_key, save_private_key
from .lifecycle import LifecycleClient
from .shell import Session, print_deployments, run_shell


# ============ Constants ============

VERSION = "1.0.0"


# ============ Banner ============


def _print_banner() -> None:
    click.echo()
    click.echo(
        click.style("  ◆ ", fg="cyan")
        + click.style("D C T R L   M E M B E R S H I P", fg="bright_white", bold=True)
        + click.style(f"  v{VERSION}", dim=True)
    )
    click.echo()


def _fail(exc: DctrlError) -> NoReturn:
    click.secho(f"ERROR: {exc}", fg="red")
    sys.exit(exc.exit_code)


def _settings(ctx: click.Context) -> Settings:
    try:
        return load_settings(**ctx.obj)
    except DctrlError as exc:
        _fail(exc)


# ============ Main CLI Group ============


@click.group(invoke_without_command=True)
@click.version_option(version=VERSION, prog_name="dctrl")
@click.option(
    "--network",
    type=click.Choice(sorted(NETWORKS)),
    envvar="DCTRL_NETWORK",
    default=None,
    help="Network preset (default: localhost)",
)
@click.option("--rpc-url", envvar="DCTRL_RPC_URL", default=None, help="RPC URL (overrides the preset)")
@click.option("--chain-id", type=int, default=None, help="Chain id (overrides the preset)")
@click.option(
    "--impersonate/--no-impersonate",
    default=None,
    help="Let the dev node send as any caller address (localhost only)",
)
@click.option(
    "--artifacts",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Compiled contract artifacts directory",
)
@click.option("-v", "--verbose", count=True, help="-v for INFO logs, -vv for DEBUG")
@click.pass_context
def cli(
    ctx: click.Context,
    network: Optional[str],
    rpc_url: Optional[str],
    chain_id: Optional[int],
    impersonate: Optional[bool],
    artifacts: Optional[Path],
    verbose: int,
) -> None:
    """Deploy and operate membership / fob / token-bound account contracts."""
    level = logging.WARNING
    if verbose == 1:
        level = logging.INFO
    elif verbose > 1:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    ctx.obj = {
        "network": network,
        "rpc_url": rpc_url,
        "chain_id": chain_id,
        "impersonate": impersonate,
        "artifacts_dir": artifacts,
    }
    if ctx.invoked_subcommand is None:
        _print_banner()
        click.echo(ctx.get_help())


# ============ Deployment ============


def _deploy_with_progress(settings: Settings):
    deployer = settings.deployer()
    click.echo(f"Deploying contracts to {settings.network} ({settings.rpc_url}) ...")
    registry = deploy_contract_set(
        settings,
        deployer,
        progress=lambda name, address: click.echo(click.style(f"    {name}: ", dim=True) + address),
    )
    click.secho("  Contracts deployed, roles granted.", fg="green")
    return registry


@cli.command()
@click.pass_context
def shell(ctx: click.Context) -> None:
    """Deploy a fresh contract set and open the interactive menus."""
    settings = _settings(ctx)
    try:
        registry = _deploy_with_progress(settings)
        client = LifecycleClient(registry, settings.signer_book())
    except DctrlError as exc:
        _fail(exc)

    run_shell(Session.for_client(client))
    click.echo("Bye.")


@cli.command()
@click.pass_context
def deploy(ctx: click.Context) -> None:
    """Deploy a fresh contract set and print the addresses."""
    settings = _settings(ctx)
    try:
        registry = _deploy_with_progress(settings)
    except DctrlError as exc:
        _fail(exc)

    click.echo()
    session = Session.for_client(LifecycleClient(registry, settings.signer_book()))
    print_deployments(session)


@cli.command("deploy-fob-mapper")
@click.pass_context
def deploy_fob_mapper_cmd(ctx: click.Context) -> None:
    """Deploy the standalone FobMapper contract."""
    settings = _settings(ctx)
    try:
        address = deploy_fob_mapper(settings, settings.deployer())
    except DctrlError as exc:
        _fail(exc)
    click.echo(f"FobMapper deployed: {address}")


# ============ Identity ============


@cli.command()
@click.option("--force", is_flag=True, help="Replace an existing key")
def keygen(force: bool) -> None:
    """Create the deployer/admin key in ~/.dctrl/.env."""
    try:
        existing = load_private_key()
    except ValueError:
        existing = None

    if existing and not force:
        click.echo(f"Key already exists: {get_address(existing)}")
        click.echo("Use --force to replace it.")
        return

    private_key, address = generate_eoa()
    env_path = save_private_key(private_key)
    click.echo(f"Address: {address}")
    click.echo(f"Config:  {env_path}")
    click.secho(f"IMPORTANT: Back up {DCTRL_ENV} - loss is irreversible.", fg="yellow", bold=True)


@cli.command()
def whoami() -> None:
    """Show the deployer/admin address."""
    try:
        pk = load_private_key()
        click.echo(f"Address: {get_address(pk)}")
    except ValueError:
        click.echo("No key found.")
        click.echo("Run 'dctrl keygen' to create one.")
        sys.exit(1)


@cli.command()
@click.pass_context
def info(ctx: click.Context) -> None:
    """Show configuration."""
    settings = _settings(ctx)
    _print_banner()
    click.secho("  Network ────────────────────────────────", fg="cyan")
    click.echo(click.style("  Name:        ", dim=True) + settings.network)
    click.echo(click.style("  RPC:         ", dim=True) + settings.rpc_url)
    click.echo(click.style("  Chain ID:    ", dim=True) + str(settings.chain_id))
    click.echo(click.style("  Impersonate: ", dim=True) + ("on" if settings.impersonate else "off"))
    click.echo()
    click.secho("  Signers ────────────────────────────────", fg="cyan")
    addresses = settings.signer_book().local_addresses()
    if not addresses:
        click.echo(
            click.style("  Deployer:    ", dim=True)
            + click.style("not initialized", fg="yellow")
            + click.style("  (run: dctrl keygen)", dim=True)
        )
    for index, address in enumerate(addresses):
        label = "Deployer:    " if index == 0 else "Signer:      "
        click.echo(click.style(f"  {label}", dim=True) + click.style(address, fg="bright_white"))
    click.echo()


# ============ Entry Points ============


def main() -> None:
    """dctrl CLI entry point."""
    if sys.platform == "win32":
        try:
            sys.stdout.reconfigure(encoding="utf-8")  # type: ignore[union-attr]
            sys.stderr.reconfigure(encoding="utf-8")  # type: ignore[union-attr]
        except (AttributeError, OSError):
            pass
    cli()


if __name__ == "__main__":
    main()
