from .balance import compute_balance, summarize_ledger, check_po_against_balance, ledger_from_transactions
from .progress import compute_line_progress, compute_po_progress
from .stock import compute_stock_severity, low_stock_alerts
from .po_status import recompute_po_status, status_tooltip
from .auto_status import compute_auto_status, AutoStatusParams
from .flow_tree import build_flow_tree, flatten_tree, rows_from_view
from .snapshot import Snapshot
from .errors import ProcurementError, DanglingReferenceError, RouteMismatchError, SnapshotError

__all__ = [
    "compute_balance", "summarize_ledger", "check_po_against_balance", "ledger_from_transactions",
    "compute_line_progress", "compute_po_progress",
    "compute_stock_severity", "low_stock_alerts",
    "recompute_po_status", "status_tooltip",
    "compute_auto_status", "AutoStatusParams",
    "build_flow_tree", "flatten_tree", "rows_from_view",
    "Snapshot",
    "ProcurementError", "DanglingReferenceError", "RouteMismatchError", "SnapshotError",
]
