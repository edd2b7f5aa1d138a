"""
Unit tests for the computed sub-request status.
"""
import pytest

from models.ledger import BalanceSummary
from procurement.auto_status import AutoStatusParams, auto_status_from_summary, compute_auto_status


@pytest.mark.unit
class TestComputeAutoStatus:
    """Tests for compute_auto_status."""

    def test_item_route(self):
        assert compute_auto_status(AutoStatusParams(route_type="item")) == "item_pending"
        assert compute_auto_status(AutoStatusParams(
            route_type="item", has_any_sor_approval=True,
        )) == "item_processing"
        assert compute_auto_status(AutoStatusParams(
            route_type="item", has_any_sor_approval=True, all_sor_line_items_executed=True,
        )) == "item_done"

    def test_expense_route(self):
        assert compute_auto_status(AutoStatusParams(route_type="expense")) == "expense_pending"
        assert compute_auto_status(AutoStatusParams(
            route_type="expense", has_any_money_in=True, yet_to_receive_eusd=50,
        )) == "expense_processing"
        assert compute_auto_status(AutoStatusParams(
            route_type="expense", has_any_money_in=True, yet_to_receive_eusd=0,
        )) == "expense_done"

    def test_po_route(self):
        assert compute_auto_status(AutoStatusParams(route_type="po")) == "po_pending"
        assert compute_auto_status(AutoStatusParams(
            route_type="po", has_non_cancelled_po=True, yet_to_receive_eusd=0, balance_in_hand_eusd=500,
        )) == "po_processing"
        assert compute_auto_status(AutoStatusParams(
            route_type="po", has_non_cancelled_po=True, yet_to_receive_eusd=0, balance_in_hand_eusd=0,
        )) == "po_done"

    def test_unknown_route_rejected(self):
        with pytest.raises(ValueError):
            AutoStatusParams(route_type="barter")


@pytest.mark.unit
class TestAutoStatusFromSummary:
    """Tests for auto_status_from_summary."""

    def test_expense_fully_funded(self):
        summary = BalanceSummary(route_type="expense", amount_eusd=300, total_money_in=300)
        assert auto_status_from_summary(summary) == "expense_done"

    def test_po_with_open_po(self):
        summary = BalanceSummary(
            route_type="po", amount_eusd=1000, total_money_in=1000, balance_in_hand=500,
        )
        assert auto_status_from_summary(summary, has_non_cancelled_po=True) == "po_processing"
