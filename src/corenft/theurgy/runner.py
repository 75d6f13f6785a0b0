"""
Shared plumbing for the operation commands: settings resolution, client
handle lifecycle, Ctrl-C cancellation and result printing.
"""

from __future__ import annotations

import sys
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, NoReturn, Optional

import click
import httpx

from ..config import Settings
from ..errors import CorenftError, ExecutionError, UnknownOutcomeError
from ..operations import OperationResponse
from ..pneuma.context import ClientHandle, setup_client_context


@dataclass
class CliState:
    """Object carried on the click context."""

    env_file: Optional[Path] = None
    transport: Optional[httpx.BaseTransport] = None
    _settings: Optional[Settings] = None

    def settings(self) -> Settings:
        if self._settings is None:
            self._settings = Settings.load(self.env_file)
        return self._settings


def broadcast_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Per-invocation overrides of the broadcast policy."""
    func = click.option(
        "--await-timeout",
        type=float,
        default=None,
        help="Seconds to wait for block inclusion",
    )(func)
    func = click.option(
        "--no-simulate",
        is_flag=True,
        help="Skip the dry-run and use the configured gas limit",
    )(func)
    func = click.option(
        "--no-await",
        is_flag=True,
        help="Return after the mempool check, without waiting for a block",
    )(func)
    return func


def fail(exc: CorenftError) -> NoReturn:
    """Print an error the way every command does and exit with its code."""
    if isinstance(exc, UnknownOutcomeError):
        click.secho(f"  Outcome unknown: {exc.reason}", fg="yellow")
        click.echo(click.style("  TX: ", dim=True) + str(exc.tx_hash))
        click.echo("  Look the transaction up before submitting it again.")
    else:
        click.secho(f"ERROR: {exc}", fg="red")
        if isinstance(exc, ExecutionError) and exc.tx_hash:
            click.echo(click.style("  TX: ", dim=True) + exc.tx_hash)
    sys.exit(exc.exit_code)


def _settings_for(state: CliState, no_await: bool, no_simulate: bool, await_timeout: Optional[float]) -> Settings:
    settings = state.settings()
    return settings.with_overrides(
        await_tx=False if no_await else None,
        simulate=False if no_simulate else None,
        await_timeout=await_timeout,
    )


def _run_cancellable(
    operation: Callable[..., OperationResponse],
    handle: ClientHandle,
    request: Any,
) -> OperationResponse:
    """Run in a worker thread so Ctrl-C can cancel the await step."""
    cancel = threading.Event()
    with ThreadPoolExecutor(max_workers=1) as pool:
        future = pool.submit(operation, handle, request, cancel=cancel)
        try:
            return future.result()
        except KeyboardInterrupt:
            cancel.set()
            click.secho("  Interrupted, abandoning the wait...", fg="yellow")
            return future.result()


def execute(
    state: CliState,
    operation: Callable[..., OperationResponse],
    request: Any,
    *,
    no_await: bool = False,
    no_simulate: bool = False,
    await_timeout: Optional[float] = None,
) -> OperationResponse:
    """Open the client, run one operation, close the client."""
    try:
        settings = _settings_for(state, no_await, no_simulate, await_timeout)
        with setup_client_context(settings, transport=state.transport) as handle:
            return _run_cancellable(operation, handle, request)
    except CorenftError as exc:
        fail(exc)


def print_response(response: OperationResponse) -> None:
    click.echo()
    click.echo(
        click.style("  ◆ ", fg="green")
        + click.style(response.message, fg="green", bold=True)
    )
    click.echo(click.style("  TX:     ", dim=True) + response.tx_hash)
    if response.class_id:
        click.echo(click.style("  Class:  ", dim=True) + response.class_id)
    if response.nft_id:
        click.echo(click.style("  NFT:    ", dim=True) + response.nft_id)
    if response.height is not None:
        click.echo(click.style("  Height: ", dim=True) + str(response.height))
    else:
        click.echo(click.style("  Height: ", dim=True) + "not awaited")
    click.echo()
