"""
Theurgy Show - read a class or an NFT back from the node.

Read-only; no key is needed.
"""

from __future__ import annotations

import json
import sys
from typing import Optional

import click

from ..errors import CorenftError
from ..pneuma.rpc import NodeResponseError, NodeTransportError, open_channel
from ..utils import base64_decode
from .runner import CliState, fail


def _decode_data_items(nft: dict) -> None:
    """Render base64 data items of dynamic NFT data as text, in place."""
    data = nft.get("data")
    if not isinstance(data, dict):
        return
    for item in data.get("items", []):
        raw = item.get("data")
        if isinstance(raw, str):
            try:
                item["data"] = base64_decode(raw).decode("utf-8")
            except (ValueError, UnicodeDecodeError):
                pass


@click.command()
@click.option("--class-id", required=True, help="Class ID (symbol-issuer)")
@click.option("--nft-id", default=None, help="NFT ID; omit to show the class")
@click.pass_obj
def show(state: CliState, class_id: str, nft_id: Optional[str]) -> None:
    """Show an NFT class, or one NFT of it."""
    try:
        settings = state.settings()
        with open_channel(
            settings.node_url,
            expected_chain_id=settings.chain_id,
            timeout=settings.request_timeout,
            transport=state.transport,
        ) as channel:
            if nft_id is None:
                result = channel.query_class(class_id)
            else:
                result = channel.query_nft(class_id, nft_id)
                _decode_data_items(result.get("nft", {}))
    except CorenftError as exc:
        fail(exc)
    except NodeResponseError as exc:
        if exc.not_found:
            click.secho(f"Not found: {class_id}{'/' + nft_id if nft_id else ''}", fg="yellow")
        else:
            click.secho(f"ERROR: {exc}", fg="red")
        sys.exit(1)
    except NodeTransportError as exc:
        click.secho(f"ERROR: {exc}", fg="red")
        sys.exit(1)

    click.echo(json.dumps(result, indent=2))
