"""
Integration tests for the click CLI.
"""
import json

import pytest
from click.testing import CliRunner

from main import cli


@pytest.fixture
def runner():
    return CliRunner()


@pytest.mark.integration
class TestCli:
    """Tests for the CLI commands."""

    def test_check(self, runner, snapshot_dir):
        result = runner.invoke(cli, ["check", "--data-dir", str(snapshot_dir)])
        assert result.exit_code == 0
        assert "Snapshot Check" in result.output
        assert "requests.csv" in result.output
        assert "(2 loaded)" in result.output

    def test_balance(self, runner, ledger_csv):
        result = runner.invoke(cli, ["balance", str(ledger_csv), "--route", "po"])
        assert result.exit_code == 0
        assert "Balance in hand:  500.00 EUSD" in result.output
        assert "PO committed:" in result.output

    def test_balance_json(self, runner, ledger_csv):
        result = runner.invoke(cli, ["balance", str(ledger_csv), "--route", "po", "--budget", "1200", "--json"])
        assert result.exit_code == 0
        body = json.loads(result.output)
        assert body["balance_in_hand"] == 500.0
        assert body["yet_to_receive"] == 200.0

    def test_balance_rejects_unknown_route(self, runner, ledger_csv):
        result = runner.invoke(cli, ["balance", str(ledger_csv), "--route", "barter"])
        assert result.exit_code != 0

    def test_progress(self, runner, snapshot_dir):
        result = runner.invoke(cli, ["progress", str(snapshot_dir / "po_lines.csv"), "--po", "po-1"])
        assert result.exit_code == 0
        assert "invoiced 73%" in result.output
        assert "partially_invoiced" in result.output

    def test_progress_cancelled(self, runner, snapshot_dir):
        result = runner.invoke(cli, ["progress", str(snapshot_dir / "po_lines.csv"), "--po", "po-1", "--cancelled"])
        assert "This PO has been cancelled" in result.output

    def test_stock_from_snapshot(self, runner, snapshot_dir, monkeypatch):
        monkeypatch.setenv("DATA_DIR", str(snapshot_dir))
        result = runner.invoke(cli, ["stock"])
        assert result.exit_code == 0
        assert "Low-stock alerts (3)" in result.output
        assert "[OUT_OF_STOCK] Cable" in result.output

    def test_stock_threshold_override(self, runner, snapshot_dir):
        result = runner.invoke(cli, ["stock", str(snapshot_dir / "stock_levels.csv"), "--threshold", "0"])
        assert result.exit_code == 0
        assert "Low-stock alerts (1)" in result.output

    def test_stock_all_normal(self, runner, temp_dir):
        levels = temp_dir / "levels.csv"
        levels.write_text("item_id,current_stock\nitem-1,100\n", encoding="utf-8")
        result = runner.invoke(cli, ["stock", str(levels)])
        assert "No low-stock alerts" in result.output

    def test_flow_text(self, runner, snapshot_dir):
        result = runner.invoke(cli, ["flow", "QMRL-2026-00001", "--data-dir", str(snapshot_dir)])
        assert result.exit_code == 0
        assert result.output.startswith("QMRL-2026-00001")
        assert "PO PO-2026-00001" in result.output

    def test_flow_json(self, runner, snapshot_dir):
        result = runner.invoke(cli, ["flow", "qmrl-2026-00001", "--data-dir", str(snapshot_dir), "--format", "json"])
        assert result.exit_code == 0
        assert json.loads(result.output)["node_count"] == 15

    def test_flow_html(self, runner, snapshot_dir):
        result = runner.invoke(cli, ["flow", "QMRL-2026-00001", "--data-dir", str(snapshot_dir), "--format", "html"])
        assert result.exit_code == 0
        assert "<!DOCTYPE html>" in result.output

    def test_flow_not_found(self, runner, snapshot_dir):
        result = runner.invoke(cli, ["flow", "QMRL-1999-99999", "--data-dir", str(snapshot_dir)])
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_flow_strict_fails_on_misrouted_row(self, runner, snapshot_dir):
        # Stock-out movement recorded against the PO-route sub-request
        with open(snapshot_dir / "stock_transactions.csv", "a", encoding="utf-8") as f:
            f.write("st-9,,qh-po,inventory_out,completed,1,2026-01-22,2026-01-22T09:00:00Z\n")

        lenient = runner.invoke(cli, ["flow", "QMRL-2026-00001", "--data-dir", str(snapshot_dir), "--format", "json"])
        assert json.loads(lenient.output)["node_count"] == 15

        result = runner.invoke(cli, ["flow", "QMRL-2026-00001", "--data-dir", str(snapshot_dir), "--strict"])
        assert result.exit_code == 1
        assert "st-9" in result.output
