"""
corenft CLI

Command-line interface for issuing, minting and updating NFTs on a Coreum
node from a single operator account.

Identity = secp256k1 key derived from CORENFT_MNEMONIC. The key lives in
memory only, for the duration of one command.

Commands:
  issue-class  - Issue an NFT class
  mint         - Mint an NFT
  update-data  - Overwrite an NFT's data
  call         - Run an operation from a JSON body
  show         - Read a class or NFT back
  whoami       - Show the operator address
  info         - Show configuration
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

import click

from . import __version__
from .errors import CorenftError
from .sigil.keyring import derive_identity
from .theurgy.runner import CliState, fail


# ============ Constants ============

VERSION = __version__


# ============ Banner ============


def _print_banner() -> None:
    click.echo()
    click.echo(
        click.style("  ◆ ", fg="cyan")
        + click.style("C O R E N F T", fg="bright_white", bold=True)
        + click.style(f"  v{VERSION}", dim=True)
    )
    click.echo()


# ============ Main CLI Group ============


@click.group(invoke_without_command=True)
@click.version_option(version=VERSION, prog_name="corenft")
@click.option(
    "--env-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    envvar="CORENFT_ENV_FILE",
    help="Settings file (default: ~/.corenft/.env)",
)
@click.option("--verbose", "-v", is_flag=True, help="Debug logging")
@click.pass_context
def cli(ctx: click.Context, env_file: Optional[Path], verbose: bool) -> None:
    """corenft - NFT issuance on Coreum."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    state = ctx.ensure_object(CliState)
    if env_file is not None:
        state.env_file = env_file

    if ctx.invoked_subcommand is None:
        _print_banner()
        click.echo(ctx.get_help())


# ============ Top-level Commands ============

from .theurgy.call import call
from .theurgy.issue import issue_class
from .theurgy.mint import mint
from .theurgy.show import show
from .theurgy.update import update_data

cli.add_command(issue_class)
cli.add_command(mint)
cli.add_command(update_data)
cli.add_command(call)
cli.add_command(show)


# ============ Identity ============


@cli.command()
@click.pass_obj
def whoami(state: CliState) -> None:
    """Show the operator account address."""
    try:
        settings = state.settings()
        identity = derive_identity(
            settings.require_mnemonic(),
            key_name=settings.key_name,
            passphrase=settings.passphrase,
            hd_path=settings.hd_path,
            address_prefix=settings.address_prefix,
        )
    except CorenftError as exc:
        fail(exc)

    click.echo(f"Address: {identity.address}")
    click.echo(f"Path:    {identity.hd_path}")
    click.echo(f"PubKey:  {identity.public_key_hex}")


# ============ Info ============


@cli.command()
@click.pass_obj
def info(state: CliState) -> None:
    """Show effective configuration (secrets masked)."""
    _print_banner()

    try:
        settings = state.settings()
    except CorenftError as exc:
        fail(exc)

    click.secho("  Settings ───────────────────────────────", fg="cyan")
    click.echo()
    for key, value in settings.redacted().items():
        click.echo(click.style(f"  {key:<16}", dim=True) + click.style(value, fg="bright_white"))
    click.echo()

    click.secho("  Commands ───────────────────────────────", fg="cyan")
    click.echo()
    commands = [
        ("issue-class", "Issue an NFT class"),
        ("mint       ", "Mint an NFT into a class"),
        ("update-data", "Overwrite an NFT's data"),
        ("call       ", "Run an operation from a JSON body"),
        ("show       ", "Read a class or NFT back"),
        ("whoami     ", "Show the operator address"),
    ]
    for cmd, desc in commands:
        click.echo(
            click.style("  ", dim=True)
            + click.style(cmd, fg="bright_white", bold=True)
            + click.style("  ◇  ", fg="cyan")
            + click.style(desc, dim=True)
        )
    click.echo()


# ============ Entry Points ============


def main() -> None:
    """corenft CLI entry point."""
    # Ensure UTF-8 output on Windows (for the banner symbols)
    if sys.platform == "win32":
        try:
            sys.stdout.reconfigure(encoding="utf-8")  # type: ignore[union-attr]
            sys.stderr.reconfigure(encoding="utf-8")  # type: ignore[union-attr]
        except (AttributeError, OSError):
            pass
    cli()


if __name__ == "__main__":
    main()
