"""
Procurement Tracker Dashboard — FastAPI backend.

JSON endpoints over the balance, progress, stock and flow-tracking
calculators. POST endpoints compute from the posted rows; GET endpoints
load a fresh CSV snapshot from DATA_DIR on every call (nothing derived is
cached between requests).

Endpoints
---------
  GET  /api/health                          → liveness probe
  POST /api/balance                         → BalanceSummary for posted ledger entries
  POST /api/balance/po-check                → does a PO total fit the available balance?
  POST /api/progress/line                   → invoiced / received percent of one line
  POST /api/progress/po                     → aggregate PO progress + recomputed status
  POST /api/stock/severity                  → severity of one stock level
  POST /api/stock/alerts                    → low-stock alerts for posted levels
  GET  /api/stock/alerts                    → low-stock alerts for the snapshot
  POST /api/flow                            → flow tree for a posted root + rows
  GET  /api/flow/{request_number}           → flow tree from the snapshot
  GET  /api/flow/{request_number}/report    → HTML flow report
  GET  /api/sub-requests/{id}/balance       → snapshot balance + auto status
"""
import logging

from fastapi import Depends, FastAPI, HTTPException
from fastapi.responses import HTMLResponse

from config import Config
from dashboard.models import (
    AlertsRequest,
    BalanceRequest,
    FlowRequest,
    LineProgressRequest,
    POBalanceRequest,
    POProgressRequest,
    SeverityRequest,
)
from dashboard.services.report import build_report_payload, render_flow_report
from procurement.auto_status import auto_status_from_summary
from procurement.balance import check_po_against_balance, summarize_ledger
from procurement.errors import FlowReferenceError
from procurement.flow_tree import build_flow_tree, count_nodes
from procurement.po_status import recompute_po_status, status_tooltip
from procurement.progress import compute_line_progress, compute_po_progress
from procurement.snapshot import Snapshot
from procurement.stock import compute_stock_severity, low_stock_alerts

logger = logging.getLogger(__name__)

app = FastAPI(title="Procurement Tracker Dashboard", docs_url=None, redoc_url=None)


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------

def get_config() -> Config:
    return Config()


def get_snapshot(config: Config = Depends(get_config)) -> Snapshot:
    return Snapshot(config.data_dir)


def _build_or_422(build):
    try:
        return build()
    except FlowReferenceError as exc:
        logger.warning("Flow tree rejected: %s", exc)
        raise HTTPException(status_code=422, detail=str(exc))


def _warn_if_overdrawn(summary, label: str) -> None:
    if summary.is_overdrawn:
        logger.warning("%s is overdrawn: balance %.2f EUSD", label, summary.balance_in_hand)


# ── Routes ───────────────────────────────────────────────────────────────────

@app.get("/api/health")
def health(config: Config = Depends(get_config)):
    return {
        "status": "ok",
        "data_dir": str(config.data_dir),
        "data_dir_exists": config.data_dir.exists(),
    }


@app.post("/api/balance")
def balance(body: BalanceRequest):
    summary = summarize_ledger(body.entries, body.route_type, body.amount_eusd)
    _warn_if_overdrawn(summary, "Posted ledger")
    return summary


@app.post("/api/balance/po-check")
def po_balance_check(body: POBalanceRequest):
    return check_po_against_balance(body.available_balance, body.po_total)


@app.post("/api/progress/line")
def line_progress(body: LineProgressRequest):
    return compute_line_progress(body.ordered, body.invoiced, body.received)


@app.post("/api/progress/po")
def po_progress(body: POProgressRequest):
    progress = compute_po_progress(body.lines)
    status = recompute_po_status(
        progress.total_qty, progress.invoiced_qty, progress.received_qty, body.is_cancelled
    )
    return {
        "progress": progress,
        "status": status,
        "tooltip": status_tooltip(
            status, progress.total_qty, progress.invoiced_qty, progress.received_qty
        ),
    }


@app.post("/api/stock/severity")
def stock_severity(body: SeverityRequest, config: Config = Depends(get_config)):
    threshold = body.threshold if body.threshold is not None else config.stock_warning_threshold
    ratio = body.critical_ratio if body.critical_ratio is not None else config.stock_critical_ratio
    return {
        "current_stock": body.current_stock,
        "threshold": threshold,
        "severity": compute_stock_severity(body.current_stock, threshold, ratio),
    }


@app.post("/api/stock/alerts")
def post_stock_alerts(body: AlertsRequest, config: Config = Depends(get_config)):
    threshold = body.threshold if body.threshold is not None else config.stock_warning_threshold
    ratio = body.critical_ratio if body.critical_ratio is not None else config.stock_critical_ratio
    return low_stock_alerts(body.levels, threshold, ratio)


@app.get("/api/stock/alerts")
def snapshot_stock_alerts(
    config: Config = Depends(get_config),
    snapshot: Snapshot = Depends(get_snapshot),
):
    return low_stock_alerts(
        snapshot.stock_levels, config.stock_warning_threshold, config.stock_critical_ratio
    )


@app.post("/api/flow")
def post_flow(body: FlowRequest, config: Config = Depends(get_config)):
    strict = body.strict if body.strict is not None else config.strict_flow_references
    tree = _build_or_422(lambda: build_flow_tree(body.root, body.rows, strict=strict))
    return {"tree": tree, "node_count": count_nodes(tree)}


@app.get("/api/flow/{request_number}")
def get_flow(
    request_number: str,
    config: Config = Depends(get_config),
    snapshot: Snapshot = Depends(get_snapshot),
):
    tree = _build_or_422(
        lambda: snapshot.flow_tree_for(request_number, strict=config.strict_flow_references)
    )
    if tree is None:
        raise HTTPException(status_code=404, detail=f"Request not found: {request_number}")
    return {"tree": tree, "node_count": count_nodes(tree)}


@app.get("/api/flow/{request_number}/report")
def get_flow_report(
    request_number: str,
    config: Config = Depends(get_config),
    snapshot: Snapshot = Depends(get_snapshot),
):
    tree = _build_or_422(
        lambda: snapshot.flow_tree_for(request_number, strict=config.strict_flow_references)
    )
    if tree is None:
        raise HTTPException(status_code=404, detail=f"Request not found: {request_number}")

    summaries = {}
    for sub in tree.sub_requests:
        summary = snapshot.summary_for(sub.record.id)
        if summary is not None:
            summaries[sub.record.id] = summary
    html = render_flow_report(build_report_payload(tree, summaries), config.report_template)
    return HTMLResponse(content=html)


@app.get("/api/sub-requests/{sub_request_id}/balance")
def sub_request_balance(sub_request_id: str, snapshot: Snapshot = Depends(get_snapshot)):
    summary = snapshot.summary_for(sub_request_id)
    if summary is None:
        raise HTTPException(status_code=404, detail=f"Sub-request not found: {sub_request_id}")
    _warn_if_overdrawn(summary, f"Sub-request {sub_request_id}")

    has_open_po = any(not po.is_cancelled for po in snapshot.purchase_orders_for(sub_request_id))
    return {
        "sub_request_id": sub_request_id,
        "summary": summary,
        "auto_status": auto_status_from_summary(summary, has_non_cancelled_po=has_open_po),
    }
