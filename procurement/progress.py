"""
Invoiced / received progress for purchase-order lines.

  percent = min(100, round_half_up(qty / ordered * 100))   when ordered > 0
          = 0                                              otherwise

A ratio that overflows to infinity clamps to 100 and a NaN ratio gives 0.

Over-fulfilment is capped visually at 100 and flagged on the result; it is
never treated as an error here.
"""
from typing import Iterable

from models.progress import LineItemProgress, LineProgress, POProgress
from .currency import percent_of


def compute_line_progress(ordered: float, invoiced: float, received: float) -> LineProgress:
    if ordered <= 0:
        return LineProgress()
    return LineProgress(
        invoiced_percent=percent_of(invoiced, ordered),
        received_percent=percent_of(received, ordered),
        available_to_invoice=max(0.0, ordered - invoiced),
        available_to_receive=max(0.0, ordered - received),
        over_invoiced=invoiced > ordered,
        over_received=received > ordered,
    )


def progress_for_line(line: LineItemProgress) -> LineProgress:
    return compute_line_progress(line.ordered_qty, line.invoiced_qty, line.received_qty)


def compute_po_progress(lines: Iterable[LineItemProgress]) -> POProgress:
    """Aggregate progress of a PO: sum the lines, then apply the line formula."""
    lines = list(lines)
    total = sum(line.ordered_qty for line in lines)
    invoiced = sum(line.invoiced_qty for line in lines)
    received = sum(line.received_qty for line in lines)
    base = compute_line_progress(total, invoiced, received)
    return POProgress(
        **base.model_dump(),
        line_count=len(lines),
        total_qty=total,
        invoiced_qty=invoiced,
        received_qty=received,
    )
