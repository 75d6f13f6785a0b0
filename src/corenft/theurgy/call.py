"""
Theurgy Call - run an operation from a JSON request body.

Bodies use the JSON field names of the NFT HTTP API (classSymbol, nftID,
...) and the response is printed as {"message": ..., "txHash": ...}. The
body is decoded before anything connects to the node.

Examples:
  corenft call create-class body.json
  echo '{"classSymbol": "ART", "nftID": "1", "name": "One"}' | corenft call mint
"""

from __future__ import annotations

import json
from typing import IO, Optional

import click

from ..errors import CorenftError
from ..operations import OPERATIONS
from .runner import CliState, broadcast_options, execute, fail


@click.command()
@click.argument("operation", type=click.Choice(sorted(OPERATIONS)))
@click.argument("body_file", type=click.File("rb"), default="-")
@broadcast_options
@click.pass_obj
def call(
    state: CliState,
    operation: str,
    body_file: IO[bytes],
    no_await: bool,
    no_simulate: bool,
    await_timeout: Optional[float],
) -> None:
    """Run OPERATION with the JSON body read from BODY_FILE (default: stdin)."""
    decode, run = OPERATIONS[operation]
    try:
        request = decode(body_file.read())
    except CorenftError as exc:
        fail(exc)

    response = execute(
        state,
        run,
        request,
        no_await=no_await,
        no_simulate=no_simulate,
        await_timeout=await_timeout,
    )
    click.echo(json.dumps(response.to_dict()))
