"""
Stock level helpers: severity classification, availability and WAC.

Severity cut-offs (threshold and critical ratio come from Config):
  current <= 0                      -> out_of_stock
  current <  threshold * ratio      -> critical
  current <  threshold              -> warning
  otherwise                         -> normal   (threshold itself is normal)
"""
import logging
from typing import Iterable, Optional

from models.progress import StockAlert, StockLevel, StockOutCheck, StockSeverity

logger = logging.getLogger(__name__)

DEFAULT_WARNING_THRESHOLD = 10.0
DEFAULT_CRITICAL_RATIO = 0.5

# Alert ordering, most urgent first
SEVERITY_RANK: dict[str, int] = {"out_of_stock": 0, "critical": 1, "warning": 2, "normal": 3}


def compute_stock_severity(
    current_stock: float,
    threshold: float = DEFAULT_WARNING_THRESHOLD,
    critical_ratio: float = DEFAULT_CRITICAL_RATIO,
) -> StockSeverity:
    if current_stock <= 0:
        return "out_of_stock"
    if current_stock < threshold * critical_ratio:
        return "critical"
    if current_stock < threshold:
        return "warning"
    return "normal"


def low_stock_alerts(
    levels: Iterable[StockLevel],
    threshold: float = DEFAULT_WARNING_THRESHOLD,
    critical_ratio: float = DEFAULT_CRITICAL_RATIO,
) -> list[StockAlert]:
    """Every level that is not normal, most urgent first (stable within a severity)."""
    alerts = []
    for level in levels:
        severity = compute_stock_severity(level.current_stock, threshold, critical_ratio)
        if severity == "normal":
            continue
        alerts.append(StockAlert(**level.model_dump(), severity=severity))
    alerts.sort(key=lambda a: SEVERITY_RANK[a.severity])
    logger.debug("%d low-stock alerts at threshold %s", len(alerts), threshold)
    return alerts


def calculate_available_stock(total_in: float, total_out: float) -> float:
    return max(0.0, total_in - total_out)


def validate_stock_out_quantity(requested_qty: float, available_stock: float) -> StockOutCheck:
    if requested_qty <= 0:
        return StockOutCheck(valid=False, message="Quantity must be greater than 0")
    if requested_qty > available_stock:
        return StockOutCheck(
            valid=False,
            message=f"Insufficient stock. Available: {available_stock:,g}",
        )
    return StockOutCheck(valid=True)


def calculate_wac(
    existing_qty: float,
    existing_wac: float,
    new_qty: float,
    new_cost: float,
) -> float:
    """
    Weighted average cost after a receipt:
      (existing_qty * existing_wac + new_qty * new_cost) / (existing_qty + new_qty)
    """
    total_qty = existing_qty + new_qty
    if total_qty <= 0:
        return new_cost
    return (existing_qty * existing_wac + new_qty * new_cost) / total_qty


def calculate_total_value(quantity: float, wac_amount: Optional[float]) -> float:
    if wac_amount is None:
        return 0.0
    return quantity * wac_amount
