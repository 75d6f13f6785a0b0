"""
CLI integration tests using Click's test runner.

Every command runs end-to-end against the fake ledger through an injected
httpx transport; no network access.
"""

from __future__ import annotations

import json

import pytest
from click.testing import CliRunner

from corenft.cli import cli
from corenft.pneuma.nft import build_class_id
from corenft.theurgy.runner import CliState

from ..fakes import FakeLedger, make_settings


@pytest.fixture()
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture()
def state(ledger: FakeLedger) -> CliState:
    return CliState(transport=ledger.transport(), _settings=make_settings())


@pytest.fixture()
def class_id(identity) -> str:
    return build_class_id("ART", identity.address)


def _issue(runner: CliRunner, state: CliState):
    return runner.invoke(
        cli,
        ["issue-class", "--symbol", "ART", "--name", "Artworks", "--description", "demo"],
        obj=state,
    )


def _mint(runner: CliRunner, state: CliState, symbol: str = "ART"):
    return runner.invoke(
        cli,
        ["mint", "--class-symbol", symbol, "--nft-id", "1", "--name", "Piece One", "--description", "first"],
        obj=state,
    )


class TestVersionAndInfo:
    def test_version(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output

    def test_banner_without_command(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, [], obj=CliState(_settings=make_settings()))
        assert result.exit_code == 0
        assert "C O R E N F T" in result.output
        assert "issue-class" in result.output

    def test_info_masks_secrets(self, runner: CliRunner, state: CliState) -> None:
        result = runner.invoke(cli, ["info"], obj=state)
        assert result.exit_code == 0
        assert "coreum-devnet-1" in result.output
        assert "<set>" in result.output
        assert "abandon" not in result.output


class TestWhoami:
    def test_whoami(self, runner: CliRunner, state: CliState, identity) -> None:
        result = runner.invoke(cli, ["whoami"], obj=state)
        assert result.exit_code == 0
        assert f"Address: {identity.address}" in result.output
        assert "m/44'/990'/0'/0/0" in result.output

    def test_whoami_without_mnemonic(self, runner: CliRunner) -> None:
        state = CliState(_settings=make_settings().with_overrides(mnemonic=""))
        result = runner.invoke(cli, ["whoami"], obj=state)
        assert result.exit_code == 2
        assert "CORENFT_MNEMONIC" in result.output


class TestOperations:
    def test_issue_mint_update(self, runner: CliRunner, state: CliState, ledger: FakeLedger, class_id: str) -> None:
        result = _issue(runner, state)
        assert result.exit_code == 0, result.output
        assert "NFT class created successfully" in result.output
        assert class_id in result.output
        assert "Height: 101" in result.output

        result = _mint(runner, state)
        assert result.exit_code == 0, result.output
        assert "NFT minted successfully" in result.output

        result = runner.invoke(
            cli,
            ["update-data", "--class-id", class_id, "--nft-id", "1", "--name", "Piece One v2", "--description", "revised"],
            obj=state,
        )
        assert result.exit_code == 0, result.output
        assert "NFT data updated successfully" in result.output
        assert ledger.item_document(class_id, "1")["name"] == "Piece One v2"

    def test_mint_unissued_class(self, runner: CliRunner, state: CliState) -> None:
        result = _mint(runner, state, symbol="GHOST")
        assert result.exit_code == 11
        assert "not found" in result.output
        assert "successfully" not in result.output

    def test_mint_unissued_class_without_simulation(self, runner: CliRunner, state: CliState) -> None:
        result = runner.invoke(
            cli,
            ["mint", "--class-symbol", "GHOST", "--nft-id", "1", "--name", "n", "--no-simulate"],
            obj=state,
        )
        assert result.exit_code == 14
        assert "ERROR" in result.output
        assert "successfully" not in result.output

    def test_no_await(self, runner: CliRunner, state: CliState) -> None:
        result = runner.invoke(
            cli,
            ["issue-class", "--symbol", "ART", "--name", "Artworks", "--no-await"],
            obj=state,
        )
        assert result.exit_code == 0, result.output
        assert "not awaited" in result.output

    def test_await_timeout(self, runner: CliRunner, state: CliState, ledger: FakeLedger) -> None:
        ledger.never_include = True
        result = runner.invoke(
            cli,
            ["issue-class", "--symbol", "ART", "--name", "Artworks", "--await-timeout", "0.05"],
            obj=state,
        )
        assert result.exit_code == 15
        assert "Outcome unknown" in result.output
        (tx_hash,) = ledger.pending
        assert tx_hash in result.output

    def test_simulation_rejected(self, runner: CliRunner, state: CliState, ledger: FakeLedger) -> None:
        ledger.reject_simulation = "out of gas"
        result = _issue(runner, state)
        assert result.exit_code == 11
        assert "out of gas" in result.output

    def test_no_simulate_skips_dry_run(self, runner: CliRunner, state: CliState, ledger: FakeLedger) -> None:
        ledger.reject_simulation = "out of gas"
        result = runner.invoke(
            cli,
            ["issue-class", "--symbol", "ART", "--name", "Artworks", "--no-simulate"],
            obj=state,
        )
        assert result.exit_code == 0, result.output

    def test_unreachable_node(self, runner: CliRunner, ledger: FakeLedger) -> None:
        ledger.unreachable = True
        state = CliState(transport=ledger.transport(), _settings=make_settings())
        result = _issue(runner, state)
        assert result.exit_code == 5
        assert "ERROR" in result.output


class TestCall:
    def test_call_from_stdin(self, runner: CliRunner, state: CliState, class_id: str) -> None:
        body = json.dumps({"classSymbol": "ART", "className": "Artworks", "classDescription": "demo"})
        result = runner.invoke(cli, ["call", "create-class"], input=body, obj=state)
        assert result.exit_code == 0, result.output
        response = json.loads(result.output)
        assert response["message"] == "NFT class created successfully"
        assert response["classID"] == class_id
        assert len(response["txHash"]) == 64

    def test_call_from_file(self, runner: CliRunner, state: CliState, tmp_path) -> None:
        _issue(runner, state)
        body_file = tmp_path / "mint.json"
        body_file.write_text(json.dumps({"classSymbol": "ART", "nftID": "2", "name": "Two"}), encoding="utf-8")
        result = runner.invoke(cli, ["call", "mint", str(body_file)], obj=state)
        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["nftID"] == "2"

    def test_call_bad_body(self, runner: CliRunner, state: CliState, ledger: FakeLedger) -> None:
        result = runner.invoke(cli, ["call", "mint"], input="{oops", obj=state)
        assert result.exit_code == 3
        assert ledger.requests == []

    def test_call_unknown_operation(self, runner: CliRunner, state: CliState) -> None:
        result = runner.invoke(cli, ["call", "burn"], input="{}", obj=state)
        assert result.exit_code != 0


class TestShow:
    def test_show_class_and_nft(self, runner: CliRunner, state: CliState, class_id: str) -> None:
        _issue(runner, state)
        _mint(runner, state)

        result = runner.invoke(cli, ["show", "--class-id", class_id], obj=state)
        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["class"]["symbol"] == "ART"

        result = runner.invoke(cli, ["show", "--class-id", class_id, "--nft-id", "1"], obj=state)
        assert result.exit_code == 0, result.output
        nft = json.loads(result.output)["nft"]
        assert json.loads(nft["data"]["items"][0]["data"]) == {"name": "Piece One", "description": "first"}

    def test_show_missing(self, runner: CliRunner, state: CliState) -> None:
        result = runner.invoke(cli, ["show", "--class-id", "nope-devcore1x"], obj=state)
        assert result.exit_code == 1
        assert "Not found" in result.output
