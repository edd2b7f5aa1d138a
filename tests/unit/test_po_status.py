"""
Unit tests for PO and invoice status rules.
"""
import pytest

from procurement.po_status import (
    available_quantity,
    can_cancel_po,
    can_create_invoice,
    can_edit_invoice,
    can_edit_po,
    can_unlock_po,
    can_void_invoice,
    compute_invoice_line_progress,
    recompute_po_status,
    status_tooltip,
)


@pytest.mark.unit
class TestRecomputePOStatus:
    """Tests for recompute_po_status."""

    @pytest.mark.parametrize("total,invoiced,received,expected", [
        (0, 0, 0, "not_started"),
        (10, 0, 0, "not_started"),
        (10, 6, 0, "partially_invoiced"),
        (10, 6, 4, "partially_invoiced"),
        (10, 10, 0, "awaiting_delivery"),
        (10, 10, 4, "partially_received"),
        (10, 10, 10, "closed"),
        (10, 12, 11, "closed"),
    ])
    def test_status_from_quantities(self, total, invoiced, received, expected):
        assert recompute_po_status(total, invoiced, received) == expected

    def test_cancelled_wins(self):
        assert recompute_po_status(10, 10, 10, is_cancelled=True) == "cancelled"


@pytest.mark.unit
class TestStatusTooltip:
    """Tests for status_tooltip."""

    def test_partial(self):
        text = status_tooltip("partially_invoiced", 10, 6, 2)
        assert text == "6/10 invoiced (60%), 2/10 received (20%)"

    def test_cancelled(self):
        assert status_tooltip("cancelled", 10, 0, 0) == "This PO has been cancelled"

    def test_closed(self):
        assert status_tooltip("closed", 10, 10, 10) == "Fully matched: ordered = invoiced = received"

    def test_no_lines(self):
        assert status_tooltip("not_started", 0, 0, 0) == "No line items"


@pytest.mark.unit
class TestPermissions:
    """Tests for the can_* helpers."""

    @pytest.mark.parametrize("status", ["closed", "cancelled"])
    def test_locked_po(self, status):
        assert can_edit_po(status) is False
        assert can_cancel_po(status) is False

    def test_open_po(self):
        assert can_edit_po("partially_invoiced") is True
        assert can_cancel_po("not_started") is True

    def test_unlock_only_closed(self):
        assert can_unlock_po("closed") is True
        assert can_unlock_po("cancelled") is False

    def test_create_invoice(self):
        assert can_create_invoice("not_started") is True
        assert can_create_invoice("awaiting_delivery") is False
        assert can_create_invoice("partially_invoiced", 10, 10) is False
        assert can_create_invoice("partially_invoiced", 10, 6) is True

    def test_invoice_void_and_edit(self):
        assert can_void_invoice("received", False) is True
        assert can_void_invoice("received", True) is False
        assert can_edit_invoice("draft", False) is True
        assert can_edit_invoice("received", False) is False


@pytest.mark.unit
class TestInvoiceLines:
    """Tests for invoice line quantities."""

    def test_available_quantity(self):
        assert available_quantity(10, 4) == 6
        assert available_quantity(10, 12) == 0

    def test_invoice_line_progress(self):
        assert compute_invoice_line_progress(8, 2) == (25, 6)
        assert compute_invoice_line_progress(0, 0) == (0, 0.0)
        assert compute_invoice_line_progress(4, 6) == (100, 0.0)


@pytest.mark.unit
class TestExtremeQuantities:
    """Overflowing ratios never escape as rounding errors."""

    def test_tooltip_with_overflowing_ratio(self):
        text = status_tooltip("partially_invoiced", 1e-308, 1e10, 0)
        assert "invoiced (100%)" in text
        assert "received (0%)" in text

    def test_tooltip_keeps_over_invoicing_visible(self):
        assert "12/10 invoiced (120%)" in status_tooltip("partially_invoiced", 10, 12, 0)

    def test_invoice_line_progress_with_overflowing_ratio(self):
        percent, pending = compute_invoice_line_progress(1e-308, 1e10)
        assert percent == 100
        assert pending == 0.0
