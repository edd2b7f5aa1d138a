"""
Unit tests for display tables.
"""
import pytest

from procurement.display import (
    AUTO_STATUS_DISPLAY,
    PO_STATUS_DISPLAY,
    STOCK_SEVERITY_DISPLAY,
    display_for,
)


@pytest.mark.unit
class TestDisplayTables:
    """Tests for label/colour lookups."""

    def test_tables_are_read_only(self):
        with pytest.raises(TypeError):
            STOCK_SEVERITY_DISPLAY["normal"] = {"label": "x", "color": "#000"}

    def test_auto_status_covers_nine_states(self):
        assert len(AUTO_STATUS_DISPLAY) == 9
        assert AUTO_STATUS_DISPLAY["po_done"]["label"] == "PO Done"

    def test_known_key(self):
        assert display_for(PO_STATUS_DISPLAY, "closed") == {"label": "Closed", "color": "#10b981"}

    def test_lookup_returns_copy(self):
        entry = display_for(PO_STATUS_DISPLAY, "closed")
        entry["label"] = "changed"
        assert PO_STATUS_DISPLAY["closed"]["label"] == "Closed"

    def test_unknown_key_falls_back(self):
        assert display_for(PO_STATUS_DISPLAY, "mystery") == {"label": "mystery", "color": "#94a3b8"}
        assert display_for(PO_STATUS_DISPLAY, None)["label"] == "—"


@pytest.mark.unit
class TestDisplayEntriesFrozen:
    """Entries inside the tables are read-only as well."""

    @pytest.mark.parametrize("table", [STOCK_SEVERITY_DISPLAY, PO_STATUS_DISPLAY, AUTO_STATUS_DISPLAY])
    def test_entry_mutation_raises(self, table):
        entry = next(iter(table.values()))
        with pytest.raises(TypeError):
            entry["label"] = "changed"

    def test_entry_survives_attempted_mutation(self):
        with pytest.raises(TypeError):
            STOCK_SEVERITY_DISPLAY["normal"]["label"] = "changed"
        assert display_for(STOCK_SEVERITY_DISPLAY, "normal")["label"] == "Normal"
