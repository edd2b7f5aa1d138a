"""
Label and colour tables for rendering derived values.

Read-only at runtime: every table and every entry is a MappingProxyType.
"""
from types import MappingProxyType

_FALLBACK_COLOR = "#94a3b8"


def _frozen(table: dict) -> MappingProxyType:
    """Read-only view of *table* whose label/colour entries are read-only too."""
    return MappingProxyType({key: MappingProxyType(dict(entry)) for key, entry in table.items()})


STOCK_SEVERITY_DISPLAY = _frozen({
    "out_of_stock": {"label": "Out of Stock", "color": "#ef4444"},
    "critical":     {"label": "Critical",     "color": "#f97316"},
    "warning":      {"label": "Warning",      "color": "#f59e0b"},
    "normal":       {"label": "Normal",       "color": "#10b981"},
})

PO_STATUS_DISPLAY = _frozen({
    "not_started":        {"label": "Not Started",        "color": "#94a3b8"},
    "partially_invoiced": {"label": "Partially Invoiced", "color": "#f59e0b"},
    "awaiting_delivery":  {"label": "Awaiting Delivery",  "color": "#3b82f6"},
    "partially_received": {"label": "Partially Received", "color": "#a855f7"},
    "closed":             {"label": "Closed",             "color": "#10b981"},
    "cancelled":          {"label": "Cancelled",          "color": "#ef4444"},
})

INVOICE_STATUS_DISPLAY = _frozen({
    "draft":              {"label": "Draft",              "color": "#94a3b8"},
    "received":           {"label": "Received",           "color": "#3b82f6"},
    "partially_received": {"label": "Partially Received", "color": "#f59e0b"},
    "completed":          {"label": "Completed",          "color": "#10b981"},
    "voided":             {"label": "Voided",             "color": "#ef4444"},
})

# Pending = amber, processing = blue, done = green, on every route
AUTO_STATUS_DISPLAY = _frozen({
    f"{route}_{phase}": {
        "label": f"{route_label} {phase.capitalize()}",
        "color": color,
    }
    for route, route_label in (("item", "Item"), ("expense", "Expense"), ("po", "PO"))
    for phase, color in (("pending", "#f59e0b"), ("processing", "#3b82f6"), ("done", "#10b981"))
})

MOVEMENT_TYPE_DISPLAY = _frozen({
    "inventory_in":  {"label": "Stock In",  "color": "#10b981"},
    "inventory_out": {"label": "Stock Out", "color": "#ef4444"},
})

TRANSACTION_TYPE_DISPLAY = _frozen({
    "money_in":  {"label": "Money In",  "color": "#10b981"},
    "money_out": {"label": "Money Out", "color": "#ef4444"},
})

ROUTE_TYPE_DISPLAY = _frozen({
    "item":    {"label": "Item",           "color": "#3b82f6"},
    "expense": {"label": "Expense",        "color": "#f59e0b"},
    "po":      {"label": "Purchase Order", "color": "#a855f7"},
})


def display_for(table: MappingProxyType, key: str | None) -> dict:
    """Label/colour for *key*, falling back to the raw key in slate grey."""
    entry = table.get(key or "")
    if entry is None:
        return {"label": key or "—", "color": _FALLBACK_COLOR}
    return dict(entry)
