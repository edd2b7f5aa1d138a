from .ledger import LedgerEntry, BalanceSummary, POBalanceCheck, RouteType
from .progress import LineItemProgress, LineProgress, POProgress, StockLevel, StockAlert, StockOutCheck
from .flow import (
    RequestRow, SubRequestRow, PurchaseOrderRow, InvoiceRow,
    StockTransactionRow, FinancialTransactionRow, StockOutRequestRow, FlowRows,
    RequestNode, SubRequestNode, PurchaseOrderNode, InvoiceNode,
    StockTransactionNode, FinancialTransactionNode, StockOutRequestNode, FlowNode,
)

__all__ = [
    "LedgerEntry", "BalanceSummary", "POBalanceCheck", "RouteType",
    "LineItemProgress", "LineProgress", "POProgress", "StockLevel", "StockAlert", "StockOutCheck",
    "RequestRow", "SubRequestRow", "PurchaseOrderRow", "InvoiceRow",
    "StockTransactionRow", "FinancialTransactionRow", "StockOutRequestRow", "FlowRows",
    "RequestNode", "SubRequestNode", "PurchaseOrderNode", "InvoiceNode",
    "StockTransactionNode", "FinancialTransactionNode", "StockOutRequestNode", "FlowNode",
]
