"""
Theurgy Issue - create an NFT class owned by the operator account.

The class ID is derived from the symbol and the issuer address, so the
same symbol can later be used to mint into the class.
"""

from __future__ import annotations

from typing import Optional

import click

from ..operations import issue_class as issue_class_op
from ..payloads import IssueClassRequest
from .runner import CliState, broadcast_options, execute, print_response


@click.command("issue-class")
@click.option("--symbol", required=True, help="Class symbol (unique per issuer)")
@click.option("--name", required=True, help="Display name")
@click.option("--description", default="", help="Class description")
@broadcast_options
@click.pass_obj
def issue_class(
    state: CliState,
    symbol: str,
    name: str,
    description: str,
    no_await: bool,
    no_simulate: bool,
    await_timeout: Optional[float],
) -> None:
    """Issue a new NFT class (freezing enabled)."""
    request = IssueClassRequest(symbol=symbol, name=name, description=description)
    response = execute(
        state,
        issue_class_op,
        request,
        no_await=no_await,
        no_simulate=no_simulate,
        await_timeout=await_timeout,
    )
    print_response(response)
