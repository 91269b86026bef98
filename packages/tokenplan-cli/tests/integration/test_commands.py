"""Integration tests for CLI commands.

These tests verify end-to-end behavior of CLI commands through the
top-level group with real file I/O.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from tokenplan_cli.main import cli

pytestmark = pytest.mark.integration

# Distribution with an environment-provided account address
DISTRIBUTION_YAML = """\
name: integration-test
token:
  contract: Token
  total_supply: 1000000
sale:
  liquidity_percent: "5.7031"
tiers:
  - id: seed
    name: Seed
    supply_percent: "10"
    price: "0.000034"
    affiliate_percent: "10"
    min_per_wallet: "100"
    start: "2024-05-31T15:43:34Z"
    vesting:
      tge_percent: "3"
      cliff_months: 2
      cliff_percent: "10"
      linear_months: 12
  - id: public
    name: Public
    supply_percent: "20"
    price: "0.000057"
pools:
  - id: team
    name: Team Pool
    supply_percent: "18"
    vesting:
      cliff_months: 4
      cliff_percent: "10"
      linear_months: 36
accounts:
  - id: liquidity_cex
    supply_percent: "13.5"
    address_env: CEX_ADDRESS
"""

CEX_ADDRESS = "0x03d1ECec6513Da227C94Ca6E9a04BcB04A777D32"


@pytest.fixture
def project(
    isolated_runner: CliRunner, deployment_env: None, monkeypatch: pytest.MonkeyPatch
) -> Path:
    monkeypatch.setenv("CEX_ADDRESS", CEX_ADDRESS)
    path = Path("distribution.yaml")
    path.write_text(DISTRIBUTION_YAML)
    return path


class TestValidateCommandIntegration:
    """Integration tests for tokenplan validate."""

    def test_validate_then_summary(self, isolated_runner: CliRunner, project: Path) -> None:
        result = isolated_runner.invoke(cli, ["validate", "--json"])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["allocated"] == "615000"
        assert data["remainder"] == "385000"
        seed = data["allocations"][0]
        assert (seed["tokens"], seed["obligation"]) == ("90909", "100000")

    def test_validate_missing_address_variable(
        self, isolated_runner: CliRunner, project: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.delenv("CEX_ADDRESS")

        result = isolated_runner.invoke(cli, ["validate"])

        assert result.exit_code == 1
        assert "CEX_ADDRESS" in result.output


class TestCompileCommandIntegration:
    """Integration tests for tokenplan compile."""

    def test_compile_plan(self, isolated_runner: CliRunner, project: Path) -> None:
        result = isolated_runner.invoke(cli, ["compile"])
        assert result.exit_code == 0

        data = json.loads(Path(".tokenplan/deployment_plan.json").read_text())
        actions = data["plan"]["actions"]
        assert [a["id"] for a in actions] == [
            "payment_asset",
            "sale_contract",
            "team",
            "token",
            "team.set_token",
            "sale_contract.set_token",
            "sale_contract.set_payment_asset",
        ]

        sale = actions[1]
        assert sale["args"][1] == 57031
        assert sale["args"][2] == 385000
        assert sale["args"][3][0]["saleStartTime"] == 1717170214

        owners, amounts = actions[3]["args"]
        assert owners == [
            {"kind": "ref", "action_id": "team"},
            {"kind": "address", "value": CEX_ADDRESS},
            {"kind": "ref", "action_id": "sale_contract"},
        ]
        assert amounts == [180000, 135000, 685000]

    def test_every_ref_points_backwards(self, isolated_runner: CliRunner, project: Path) -> None:
        isolated_runner.invoke(cli, ["compile", "--output", "build"])

        actions = json.loads(Path("build/deployment_plan.json").read_text())["plan"]["actions"]
        seen: set[str] = set()
        for action in actions:
            for ref in _refs(action.get("args", [])) + _refs(action.get("target")):
                assert ref in seen
            seen.add(action["id"])

    def test_recompile_identical_plan(self, isolated_runner: CliRunner, project: Path) -> None:
        isolated_runner.invoke(cli, ["compile", "--output", "first"])
        isolated_runner.invoke(cli, ["compile", "--output", "second"])

        first = json.loads(Path("first/deployment_plan.json").read_text())
        second = json.loads(Path("second/deployment_plan.json").read_text())
        assert first["plan"] == second["plan"]
        assert first["metadata"]["source_hash"] == second["metadata"]["source_hash"]


class TestSchemaCommandIntegration:
    """Integration tests for tokenplan schema."""

    def test_export_both_schemas(self, isolated_runner: CliRunner) -> None:
        assert isolated_runner.invoke(cli, ["schema", "export"]).exit_code == 0
        assert isolated_runner.invoke(cli, ["schema", "export-artifacts"]).exit_code == 0

        assert Path("schemas/distribution.schema.json").exists()
        assert Path("schemas/deployment-artifacts.schema.json").exists()


def _refs(value: object) -> list[str]:
    if isinstance(value, dict):
        if value.get("kind") == "ref":
            return [value["action_id"]]
        return [ref for item in value.values() for ref in _refs(item)]
    if isinstance(value, list):
        return [ref for item in value for ref in _refs(item)]
    return []
