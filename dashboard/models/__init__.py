"""
Pydantic models for dashboard API requests.
"""
from pydantic import BaseModel, Field
from typing import List, Optional

from models.flow import FlowRows, RequestRow
from models.ledger import LedgerEntry, RouteType
from models.progress import LineItemProgress, StockLevel


class BalanceRequest(BaseModel):
    entries: List[LedgerEntry] = Field(default_factory=list)
    route_type: RouteType
    amount_eusd: float = 0.0        # requested budget, for yet-to-receive


class POBalanceRequest(BaseModel):
    available_balance: float
    po_total: float


class LineProgressRequest(BaseModel):
    ordered: float = Field(ge=0)
    invoiced: float = Field(default=0.0, ge=0)
    received: float = Field(default=0.0, ge=0)


class POProgressRequest(BaseModel):
    lines: List[LineItemProgress] = Field(default_factory=list)
    is_cancelled: bool = False


class SeverityRequest(BaseModel):
    current_stock: float
    threshold: Optional[float] = None       # defaults to Config
    critical_ratio: Optional[float] = None


class AlertsRequest(BaseModel):
    levels: List[StockLevel] = Field(default_factory=list)
    threshold: Optional[float] = None
    critical_ratio: Optional[float] = None


class FlowRequest(BaseModel):
    root: RequestRow
    rows: FlowRows = Field(default_factory=FlowRows)
    strict: Optional[bool] = None           # defaults to Config
