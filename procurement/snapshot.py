"""
Read-only data snapshot loaded from CSV files.

Stands in for the storage backend: the CLI and the API load one snapshot
per call and hand its rows to the pure calculators.

Files (all in the data directory, all optional):
  requests.csv                id, request_number, title, priority, status, status_color, request_date, created_at
  sub_requests.csv            id, request_id, request_number, line_name, route_type, status, amount_eusd, created_at
  purchase_orders.csv         id, sub_request_id, po_number, status, po_date, expected_delivery_date,
                              supplier_name, total_amount_eusd, created_at
  invoices.csv                id, po_id, invoice_number, status, invoice_date, due_date, is_voided, created_at
  stock_transactions.csv      id, invoice_id, sub_request_id, movement_type, status, quantity,
                              transaction_date, created_at
  financial_transactions.csv  id, sub_request_id, transaction_type, amount, exchange_rate, amount_eusd,
                              is_voided, transaction_date, created_at
  stock_out_requests.csv      id, sub_request_id, request_number, status, created_at
  po_lines.csv                po_id, line_number, item_name, ordered_qty, invoiced_qty, received_qty
  stock_levels.csv            item_id, item_name, item_sku, warehouse_id, warehouse_name, current_stock
"""
import csv
import logging
from pathlib import Path
from typing import Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from models.flow import (
    FinancialTransactionRow,
    FlowRows,
    InvoiceRow,
    PurchaseOrderRow,
    RequestNode,
    RequestRow,
    StockOutRequestRow,
    StockTransactionRow,
    SubRequestRow,
)
from models.ledger import BalanceSummary, LedgerEntry
from models.progress import LineItemProgress, POProgress, StockLevel
from .balance import ledger_from_transactions, summarize_ledger
from .errors import SnapshotError
from .flow_tree import build_flow_tree, normalize_request_number
from .progress import compute_po_progress

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

SNAPSHOT_FILES = (
    "requests.csv",
    "sub_requests.csv",
    "purchase_orders.csv",
    "invoices.csv",
    "stock_transactions.csv",
    "financial_transactions.csv",
    "stock_out_requests.csv",
    "po_lines.csv",
    "stock_levels.csv",
)


def load_csv(path: str | Path, model: Type[M]) -> list[M]:
    """
    Load every row of *path* as *model*.

    Blank cells are omitted so model defaults apply. Rows that fail
    validation are logged and skipped. A missing file loads as [].
    """
    path = Path(path)
    if not path.exists():
        logger.warning("CSV not found: %s — loaded as empty", path)
        return []

    records: list[M] = []
    try:
        with open(path, newline="", encoding="utf-8") as f:
            for line_no, row in enumerate(csv.DictReader(f), start=2):
                cleaned = {
                    k.strip(): v.strip()
                    for k, v in row.items()
                    if k and v is not None and v.strip()
                }
                try:
                    records.append(model.model_validate(cleaned))
                except ValidationError as exc:
                    logger.warning(
                        "%s line %d skipped: %s",
                        path.name, line_no, exc.errors()[0].get("msg", exc),
                    )
    except (OSError, UnicodeDecodeError, csv.Error) as exc:
        raise SnapshotError(f"Could not read {path}: {exc}") from exc

    logger.debug("Loaded %d %s rows from %s", len(records), model.__name__, path)
    return records


def load_ledger_csv(path: str | Path) -> list[LedgerEntry]:
    """Ledger CSV: type, amount_eusd, timestamp, is_voided, reference."""
    return load_csv(path, LedgerEntry)


def load_po_lines_csv(path: str | Path) -> list[LineItemProgress]:
    return load_csv(path, LineItemProgress)


def load_stock_levels_csv(path: str | Path) -> list[StockLevel]:
    return load_csv(path, StockLevel)


class Snapshot:
    """All snapshot tables, indexed for lookups by id and parent id."""

    def __init__(self, data_dir: str | Path):
        self.data_dir = Path(data_dir)
        d = self.data_dir
        self.requests = load_csv(d / "requests.csv", RequestRow)
        self.sub_requests = load_csv(d / "sub_requests.csv", SubRequestRow)
        self.purchase_orders = load_csv(d / "purchase_orders.csv", PurchaseOrderRow)
        self.invoices = load_csv(d / "invoices.csv", InvoiceRow)
        self.stock_transactions = load_csv(d / "stock_transactions.csv", StockTransactionRow)
        self.financial_transactions = load_csv(d / "financial_transactions.csv", FinancialTransactionRow)
        self.stock_out_requests = load_csv(d / "stock_out_requests.csv", StockOutRequestRow)
        self.po_lines = load_csv(d / "po_lines.csv", LineItemProgress)
        self.stock_levels = load_csv(d / "stock_levels.csv", StockLevel)

        self._requests_by_number = {
            normalize_request_number(r.request_number): r for r in self.requests
        }
        self._sub_requests_by_id = {s.id: s for s in self.sub_requests}

        logger.info(
            "Loaded snapshot from %s: %d requests, %d sub-requests, %d POs, %d invoices",
            d, len(self.requests), len(self.sub_requests),
            len(self.purchase_orders), len(self.invoices),
        )

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def find_request(self, request_number: str) -> Optional[RequestRow]:
        """Find a request by its number (case-insensitive) or its id."""
        key = normalize_request_number(request_number)
        found = self._requests_by_number.get(key)
        if found:
            return found
        return next((r for r in self.requests if r.id == request_number.strip()), None)

    def get_sub_request(self, sub_request_id: str) -> Optional[SubRequestRow]:
        return self._sub_requests_by_id.get(sub_request_id)

    def flow_rows_for(self, request: RequestRow) -> FlowRows:
        """
        Every row in the lineage of *request*.

        PO-route money movements stay in the ledger only. Any other row
        whose route does not match is passed through so the tree builder
        can drop it (or reject it in strict mode).
        """
        subs = [s for s in self.sub_requests if s.request_id == request.id]
        sub_ids = {s.id for s in subs}
        po_route_ids = {s.id for s in subs if s.route_type == "po"}

        pos = [p for p in self.purchase_orders if p.sub_request_id in sub_ids]
        po_ids = {p.id for p in pos}
        invoices = [i for i in self.invoices if i.po_id in po_ids]
        invoice_ids = {i.id for i in invoices}
        return FlowRows(
            sub_requests=subs,
            purchase_orders=pos,
            invoices=invoices,
            stock_transactions=[
                t for t in self.stock_transactions
                if t.invoice_id in invoice_ids
                or (not t.invoice_id and t.sub_request_id in sub_ids)
            ],
            financial_transactions=[
                t for t in self.financial_transactions
                if t.sub_request_id in sub_ids and t.sub_request_id not in po_route_ids
            ],
            stock_out_requests=[r for r in self.stock_out_requests if r.sub_request_id in sub_ids],
        )

    def flow_tree_for(self, request_number: str, strict: bool = False) -> Optional[RequestNode]:
        request = self.find_request(request_number)
        if request is None:
            logger.info("Request '%s' not found in snapshot", request_number)
            return None
        return build_flow_tree(request, self.flow_rows_for(request), strict=strict)

    # ------------------------------------------------------------------
    # Derived values
    # ------------------------------------------------------------------

    def purchase_orders_for(self, sub_request_id: str) -> list[PurchaseOrderRow]:
        return [p for p in self.purchase_orders if p.sub_request_id == sub_request_id]

    def ledger_for(self, sub_request_id: str) -> list[LedgerEntry]:
        transactions = [t for t in self.financial_transactions if t.sub_request_id == sub_request_id]
        return ledger_from_transactions(transactions, self.purchase_orders_for(sub_request_id))

    def summary_for(self, sub_request_id: str) -> Optional[BalanceSummary]:
        sub = self.get_sub_request(sub_request_id)
        if sub is None:
            return None
        return summarize_ledger(self.ledger_for(sub.id), sub.route_type, sub.amount_eusd)

    def po_progress_for(self, po_id: str) -> POProgress:
        return compute_po_progress(line for line in self.po_lines if line.po_id == po_id)

    def file_status(self) -> dict[str, dict]:
        """Presence and row count per snapshot file (for `check`)."""
        counts = {
            "requests.csv": len(self.requests),
            "sub_requests.csv": len(self.sub_requests),
            "purchase_orders.csv": len(self.purchase_orders),
            "invoices.csv": len(self.invoices),
            "stock_transactions.csv": len(self.stock_transactions),
            "financial_transactions.csv": len(self.financial_transactions),
            "stock_out_requests.csv": len(self.stock_out_requests),
            "po_lines.csv": len(self.po_lines),
            "stock_levels.csv": len(self.stock_levels),
        }
        return {
            name: {
                "path": str(self.data_dir / name),
                "exists": (self.data_dir / name).exists(),
                "count": counts[name],
            }
            for name in SNAPSHOT_FILES
        }
