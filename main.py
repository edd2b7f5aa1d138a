#!/usr/bin/env python3
"""
Procurement Tracker — CLI entry point.

Usage examples:
  python main.py check                                  # Verify data directory and files
  python main.py balance ledger.csv --route po          # Balance of a ledger CSV
  python main.py balance ledger.csv --route expense --budget 1500
  python main.py progress data/po_lines.csv --po PO-1   # Invoiced / received progress
  python main.py stock                                  # Low-stock alerts from the snapshot
  python main.py stock levels.csv --threshold 25
  python main.py flow QMRL-2026-00001                   # Flow tree as text
  python main.py flow QMRL-2026-00001 --format html > flow.html
"""
import json
import logging
import sys
from pathlib import Path

import click

from config import Config
from dashboard.services.report import build_report_payload, render_flow_report, render_flow_text
from procurement.balance import summarize_ledger
from procurement.errors import FlowReferenceError, SnapshotError
from procurement.flow_tree import count_nodes
from procurement.po_status import recompute_po_status, status_tooltip
from procurement.progress import compute_po_progress, progress_for_line
from procurement.snapshot import Snapshot, load_ledger_csv, load_po_lines_csv, load_stock_levels_csv
from procurement.stock import low_stock_alerts


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s  %(levelname)-8s  %(name)s — %(message)s",
        datefmt="%H:%M:%S",
    )


def _echo_json(data, pretty: bool) -> None:
    click.echo(json.dumps(data, indent=2 if pretty else None, default=str))


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """Procurement Tracker — balances, progress, stock alerts and flow tracking."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    _setup_logging(verbose)


# --------------------------------------------------------------------
# check command
# --------------------------------------------------------------------

@cli.command()
@click.option("--data-dir", default=None, type=click.Path(), help="Snapshot data directory")
def check(data_dir: str | None) -> None:
    """Verify that the snapshot data directory and its CSV files are present."""
    config = Config()
    if data_dir:
        config.data_dir = Path(data_dir)

    click.echo("\n=== Snapshot Check ===\n")
    tick = "✓" if config.data_dir.exists() else "✗"
    click.echo(f"  Data directory:               {tick}  {config.data_dir}")
    click.echo()

    snapshot = Snapshot(config.data_dir)
    for name, info in snapshot.file_status().items():
        tick = "✓" if info["exists"] else "✗"
        count_str = f" ({info['count']} loaded)" if info["exists"] else " (file not found)"
        click.echo(f"  {name:<28} {tick}{count_str}")

    click.echo()
    click.echo(f"  Stock warning threshold:      {config.stock_warning_threshold:g}")
    click.echo(f"  Critical ratio:               {config.stock_critical_ratio:g}")
    click.echo(f"  Strict flow references:       {'on' if config.strict_flow_references else 'off'}")
    click.echo()


# --------------------------------------------------------------------
# balance command
# --------------------------------------------------------------------

@cli.command()
@click.argument("ledger_csv", type=click.Path(exists=True, dir_okay=False))
@click.option("--route", "-r", required=True, type=click.Choice(["po", "expense", "item"]), help="Route type")
@click.option("--budget", default=0.0, type=float, help="Requested amount in EUSD (for yet-to-receive)")
@click.option("--json", "as_json", is_flag=True, help="Print the summary as JSON")
def balance(ledger_csv: str, route: str, budget: float, as_json: bool) -> None:
    """
    Compute the balance of LEDGER_CSV.

    \b
    CSV columns: type, amount_eusd, timestamp, is_voided, reference
    type is one of money_in, money_out, po_committed.
    """
    entries = load_ledger_csv(ledger_csv)
    summary = summarize_ledger(entries, route, budget)
    if summary.is_overdrawn:
        logging.getLogger(__name__).warning(
            "Balance is negative: %.2f EUSD", summary.balance_in_hand
        )

    if as_json:
        _echo_json(summary.model_dump(), Config().pretty_json)
        return

    spent_label = "PO committed" if route == "po" else "Money out"
    click.echo()
    click.echo(f"  Entries:          {len(entries)}")
    click.echo(f"  Money in:         {summary.total_money_in:,.2f} EUSD")
    click.echo(f"  {spent_label + ':':<17} {summary.total_spent:,.2f} EUSD")
    click.echo(f"  Balance in hand:  {summary.balance_in_hand:,.2f} EUSD")
    if budget:
        click.echo(f"  Yet to receive:   {summary.yet_to_receive:,.2f} EUSD")
    click.echo()


# --------------------------------------------------------------------
# progress command
# --------------------------------------------------------------------

@cli.command()
@click.argument("po_lines_csv", type=click.Path(exists=True, dir_okay=False))
@click.option("--po", "po_id", default=None, help="Only lines of this PO id")
@click.option("--cancelled", is_flag=True, help="Treat the PO as cancelled")
def progress(po_lines_csv: str, po_id: str | None, cancelled: bool) -> None:
    """
    Show invoiced / received progress for the lines in PO_LINES_CSV.

    \b
    CSV columns: po_id, line_number, item_name, ordered_qty, invoiced_qty, received_qty
    """
    lines = load_po_lines_csv(po_lines_csv)
    if po_id:
        lines = [line for line in lines if line.po_id == po_id]
    if not lines:
        click.echo("No PO lines found.")
        return

    click.echo()
    for line in lines:
        p = progress_for_line(line)
        flag = "  ⚠ over" if (p.over_invoiced or p.over_received) else ""
        name = line.item_name or f"line {line.line_number or '?'}"
        click.echo(
            f"  {name:<30} invoiced {p.invoiced_percent:>3}%  received {p.received_percent:>3}%{flag}"
        )

    total = compute_po_progress(lines)
    status = recompute_po_status(total.total_qty, total.invoiced_qty, total.received_qty, cancelled)
    click.echo()
    click.echo(f"  PO total:  invoiced {total.invoiced_percent}%  received {total.received_percent}%")
    click.echo(f"  Status:    {status}  ({status_tooltip(status, total.total_qty, total.invoiced_qty, total.received_qty)})")
    click.echo()


# --------------------------------------------------------------------
# stock command
# --------------------------------------------------------------------

@cli.command()
@click.argument("levels_csv", required=False, type=click.Path(exists=True, dir_okay=False))
@click.option("--threshold", "-t", default=None, type=float, help="Warning threshold (default: config)")
@click.option("--critical-ratio", default=None, type=float, help="Critical cut as a fraction of threshold")
def stock(levels_csv: str | None, threshold: float | None, critical_ratio: float | None) -> None:
    """List low-stock alerts from LEVELS_CSV (default: the snapshot's stock_levels.csv)."""
    config = Config()
    if threshold is not None:
        config.stock_warning_threshold = threshold
    if critical_ratio is not None:
        config.stock_critical_ratio = critical_ratio

    path = Path(levels_csv) if levels_csv else config.data_file("stock_levels.csv")
    alerts = low_stock_alerts(
        load_stock_levels_csv(path), config.stock_warning_threshold, config.stock_critical_ratio
    )
    if not alerts:
        click.echo("✓ No low-stock alerts")
        return

    icons = {"out_of_stock": "✗", "critical": "!", "warning": "⚠"}
    click.echo(f"\n  Low-stock alerts ({len(alerts)}):")
    for a in alerts:
        where = f" @ {a.warehouse_name}" if a.warehouse_name else ""
        click.echo(
            f"    {icons[a.severity]} [{a.severity.upper()}] {a.item_name or a.item_id}{where}: {a.current_stock:g}"
        )
    click.echo()


# --------------------------------------------------------------------
# flow command
# --------------------------------------------------------------------

@cli.command()
@click.argument("request_number")
@click.option("--data-dir", default=None, type=click.Path(), help="Snapshot data directory")
@click.option("--format", "fmt", default="text", type=click.Choice(["text", "json", "html"]))
@click.option("--strict", is_flag=True, help="Fail on rows that reference a missing parent")
def flow(request_number: str, data_dir: str | None, fmt: str, strict: bool) -> None:
    """Show the full lineage of REQUEST_NUMBER (request → sub-requests → POs → invoices → stock)."""
    config = Config()
    if data_dir:
        config.data_dir = Path(data_dir)
    if strict:
        config.strict_flow_references = True

    try:
        snapshot = Snapshot(config.data_dir)
        tree = snapshot.flow_tree_for(request_number, strict=config.strict_flow_references)
    except (FlowReferenceError, SnapshotError) as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)

    if tree is None:
        click.echo(f"Error: request '{request_number}' not found.", err=True)
        sys.exit(1)

    summaries = {}
    for sub in tree.sub_requests:
        summary = snapshot.summary_for(sub.record.id)
        if summary is not None:
            summaries[sub.record.id] = summary

    if fmt == "json":
        _echo_json(
            {"tree": tree.model_dump(), "node_count": count_nodes(tree)},
            config.pretty_json,
        )
    elif fmt == "html":
        click.echo(render_flow_report(build_report_payload(tree, summaries), config.report_template))
    else:
        click.echo(render_flow_text(tree, summaries))


if __name__ == "__main__":
    cli()
