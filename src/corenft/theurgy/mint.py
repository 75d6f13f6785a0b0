"""
Theurgy Mint - mint an NFT into a class issued by the operator account.

The NFT gets one dynamic data item holding {"name", "description"},
editable by its owner.
"""

from __future__ import annotations

from typing import Optional

import click

from ..operations import mint_nft
from ..payloads import MintNftRequest
from .runner import CliState, broadcast_options, execute, print_response


@click.command()
@click.option("--class-symbol", required=True, help="Symbol the class was issued with")
@click.option("--nft-id", required=True, help="NFT ID, unique within the class")
@click.option("--name", required=True, help="NFT name")
@click.option("--description", default="", help="NFT description")
@broadcast_options
@click.pass_obj
def mint(
    state: CliState,
    class_symbol: str,
    nft_id: str,
    name: str,
    description: str,
    no_await: bool,
    no_simulate: bool,
    await_timeout: Optional[float],
) -> None:
    """Mint an NFT."""
    request = MintNftRequest(
        class_symbol=class_symbol, nft_id=nft_id, name=name, description=description
    )
    response = execute(
        state,
        mint_nft,
        request,
        no_await=no_await,
        no_simulate=no_simulate,
        await_timeout=await_timeout,
    )
    print_response(response)
