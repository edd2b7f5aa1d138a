"""
Pytest configuration and shared fixtures for the procurement tracker test suite.
"""
import os
import shutil
import tempfile
from pathlib import Path
from typing import Generator

import pytest

PROJECT_ROOT = Path(__file__).parent.parent
os.chdir(PROJECT_ROOT)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Provide a temporary directory for test files."""
    tmp_path = tempfile.mkdtemp(prefix="procurement_test_")
    yield Path(tmp_path)
    shutil.rmtree(tmp_path, ignore_errors=True)


@pytest.fixture
def test_config(temp_dir: Path) -> "Config":
    """Provide a test configuration with isolated directories."""
    from config import Config

    config = Config()
    config.data_dir = temp_dir / "data"
    config.data_dir.mkdir(parents=True, exist_ok=True)
    config.config_dir = temp_dir / "config"
    config.config_dir.mkdir(parents=True, exist_ok=True)
    config.stock_warning_threshold = 10.0
    config.stock_critical_ratio = 0.5
    config.strict_flow_references = False
    return config


SNAPSHOT_CSVS = {
    "requests.csv": """id,request_number,title,priority,status,status_color,request_date,created_at
req-1,QMRL-2026-00001,Office fit-out,high,In Progress,#3b82f6,2026-01-05,2026-01-05T09:00:00Z
req-2,QMRL-2026-00002,Empty request,low,Draft,,2026-01-06,2026-01-06T09:00:00Z
""",
    "sub_requests.csv": """id,request_id,request_number,line_name,route_type,status,amount_eusd,created_at
qh-po,req-1,QMHQ-2026-00001,Chairs,po,Open,1000,2026-01-06T09:00:00Z
qh-exp,req-1,QMHQ-2026-00002,Travel,expense,Open,300,2026-01-06T10:00:00Z
qh-item,req-1,QMHQ-2026-00003,Cables,item,Open,,2026-01-06T11:00:00Z
""",
    "purchase_orders.csv": """id,sub_request_id,po_number,status,po_date,expected_delivery_date,supplier_name,total_amount_eusd,created_at
po-1,qh-po,PO-2026-00001,partially_invoiced,2026-01-10,2026-02-01,Acme Supplies,300,2026-01-10T09:00:00Z
po-2,qh-po,PO-2026-00002,not_started,2026-01-11,,Acme Supplies,200,2026-01-11T09:00:00Z
po-3,qh-po,PO-2026-00003,cancelled,2026-01-12,,Acme Supplies,150,2026-01-12T09:00:00Z
""",
    "invoices.csv": """id,po_id,invoice_number,status,invoice_date,due_date,is_voided,created_at
inv-1,po-1,INV-2026-00001,received,2026-01-15,2026-02-15,false,2026-01-15T09:00:00Z
inv-2,po-1,INV-2026-00002,voided,2026-01-16,,true,2026-01-16T09:00:00Z
""",
    "stock_transactions.csv": """id,invoice_id,sub_request_id,movement_type,status,quantity,transaction_date,created_at
st-1,inv-1,,inventory_in,completed,5,2026-01-20,2026-01-20T09:00:00Z
st-2,,qh-item,inventory_out,completed,2,2026-01-21,2026-01-21T09:00:00Z
""",
    "financial_transactions.csv": """id,sub_request_id,transaction_type,amount,exchange_rate,amount_eusd,is_voided,transaction_date,created_at
ft-1,qh-po,money_in,1000,1,1000,false,2026-01-07,2026-01-07T09:00:00Z
ft-2,qh-exp,money_in,300,1,300,false,2026-01-07,2026-01-07T10:00:00Z
ft-3,qh-exp,money_out,120,1,120,false,2026-01-08,2026-01-08T09:00:00Z
ft-4,qh-exp,money_out,50,1,50,true,2026-01-09,2026-01-09T09:00:00Z
""",
    "stock_out_requests.csv": """id,sub_request_id,request_number,status,created_at
sor-1,qh-item,SOR-2026-00001,approved,2026-01-20T08:00:00Z
""",
    "po_lines.csv": """po_id,line_number,item_name,ordered_qty,invoiced_qty,received_qty
po-1,1,Office chair,10,6,2
po-1,2,Desk,5,5,5
po-2,1,Lamp,4,,
""",
    "stock_levels.csv": """item_id,item_name,item_sku,warehouse_id,warehouse_name,current_stock
item-1,Cable,SKU-1,wh-1,Main,0
item-2,Chair,SKU-2,wh-1,Main,3
item-3,Desk,SKU-3,wh-1,Main,7
item-4,Lamp,SKU-4,wh-1,Main,10
item-5,Pen,SKU-5,wh-1,Main,50
""",
}


@pytest.fixture
def snapshot_dir(test_config) -> Path:
    """Write a complete sample snapshot into the test data directory."""
    for name, content in SNAPSHOT_CSVS.items():
        (test_config.data_dir / name).write_text(content, encoding="utf-8")
    return test_config.data_dir


@pytest.fixture
def ledger_csv(temp_dir: Path) -> Path:
    """A PO-route ledger: 1000 in, 300 + 200 committed."""
    csv_path = temp_dir / "ledger.csv"
    csv_path.write_text(
        """type,amount_eusd,timestamp,is_voided,reference
money_in,1000,2026-01-07,false,ft-1
po_committed,300,2026-01-10,false,PO-2026-00001
po_committed,200,2026-01-11,false,PO-2026-00002
""",
        encoding="utf-8",
    )
    return csv_path


@pytest.fixture
def sample_root():
    from models.flow import RequestRow
    return RequestRow(id="req-1", request_number="QMRL-2026-00001", title="Office fit-out")


@pytest.fixture
def sample_flow_rows():
    """One sub-request per route with a full chain under the PO route."""
    from models.flow import (
        FinancialTransactionRow, FlowRows, InvoiceRow, PurchaseOrderRow,
        StockOutRequestRow, StockTransactionRow, SubRequestRow,
    )
    return FlowRows(
        sub_requests=[
            SubRequestRow(id="qh-po", request_id="req-1", route_type="po"),
            SubRequestRow(id="qh-exp", request_id="req-1", route_type="expense"),
            SubRequestRow(id="qh-item", request_id="req-1", route_type="item"),
        ],
        purchase_orders=[
            PurchaseOrderRow(id="po-1", sub_request_id="qh-po", total_amount_eusd=300),
            PurchaseOrderRow(id="po-2", sub_request_id="qh-po", total_amount_eusd=200),
        ],
        invoices=[
            InvoiceRow(id="inv-1", po_id="po-1"),
            InvoiceRow(id="inv-2", po_id="po-1"),
        ],
        stock_transactions=[
            StockTransactionRow(id="st-1", invoice_id="inv-1", movement_type="inventory_in"),
            StockTransactionRow(id="st-2", sub_request_id="qh-item", movement_type="inventory_out"),
        ],
        financial_transactions=[
            FinancialTransactionRow(id="ft-1", sub_request_id="qh-exp", transaction_type="money_in", amount_eusd=300),
            FinancialTransactionRow(id="ft-2", sub_request_id="qh-exp", transaction_type="money_out", amount_eusd=120),
        ],
        stock_out_requests=[
            StockOutRequestRow(id="sor-1", sub_request_id="qh-item"),
        ],
    )


@pytest.fixture
def api_client(test_config):
    """FastAPI test client wired to the isolated test configuration."""
    from fastapi.testclient import TestClient
    from dashboard.app import app, get_config

    app.dependency_overrides[get_config] = lambda: test_config
    yield TestClient(app)
    app.dependency_overrides.clear()


# Configure pytest markers
def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")
    config.addinivalue_line("markers", "api: API tests")
