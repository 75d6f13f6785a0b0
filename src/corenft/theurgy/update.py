"""
Theurgy Update - overwrite data item 0 of an NFT.
"""

from __future__ import annotations

from typing import Optional

import click

from ..operations import update_nft_data
from ..payloads import UpdateNftDataRequest
from .runner import CliState, broadcast_options, execute, print_response


@click.command("update-data")
@click.option("--class-id", required=True, help="Class ID (symbol-issuer)")
@click.option("--nft-id", required=True, help="NFT ID")
@click.option("--name", required=True, help="New name")
@click.option("--description", default="", help="New description")
@broadcast_options
@click.pass_obj
def update_data(
    state: CliState,
    class_id: str,
    nft_id: str,
    name: str,
    description: str,
    no_await: bool,
    no_simulate: bool,
    await_timeout: Optional[float],
) -> None:
    """Replace the data of an NFT.

    The existing data is not read; item 0 is overwritten unconditionally.
    """
    request = UpdateNftDataRequest(
        class_id=class_id, nft_id=nft_id, name=name, description=description
    )
    response = execute(
        state,
        update_nft_data,
        request,
        no_await=no_await,
        no_simulate=no_simulate,
        await_timeout=await_timeout,
    )
    print_response(response)
