"""
Integration tests for the application facade

The full stack is wired by create_app_components with in-memory
storage and a fixed clock.
"""

import pytest
from decimal import Decimal

from pydantic import ValidationError

from conftest import expense, income

from budget_ledger.config import AppSettings, Settings, StorageSettings, validate_all_settings
from budget_ledger.ledger import STATE_CHANGED
from budget_ledger.models import LoadStatus
from budget_ledger.orchestrator import BudgetApp, create_app_components
from budget_ledger.services.storage import InMemoryStorage


@pytest.fixture
def app(clock):
    return create_app_components(storage=InMemoryStorage(), clock=clock)


class TestBudgetApp:
    """End-to-end flows through the facade."""

    def test_factory_wires_components(self, app):
        """Test that the factory returns a ready app."""
        assert isinstance(app, BudgetApp)
        assert app.ledger.events is app.events
        assert app.load().status == LoadStatus.CREATED

    def test_add_then_read(self, app, today):
        """Test a write followed by the dashboard views."""
        app.load()
        app.ledger.add_entry(income(5000, "2024-03-10"))
        app.ledger.add_entry(expense(1200, "2024-03-11"))
        app.ledger.add_savings(300, "Rainy day", "2024-03-12")

        totals = app.current_month_totals(today=today)
        assert totals.income == Decimal("5000")
        assert totals.expense == Decimal("1500")
        assert totals.remaining == Decimal("3500")

        assert len(app.recent_transactions()) == 3
        assert app.expense_chart(today=today)[-1].total == Decimal("1500")
        assert app.savings_chart(today=today)[-1].savings == Decimal("300")

    def test_chart_sizes_follow_settings(self, clock, today):
        """Test that chart windows come from the app settings."""
        settings = Settings()
        app = create_app_components(storage=InMemoryStorage(), clock=clock, settings=settings)
        assert len(app.expense_chart(today=today)) == settings.app.expense_window_months
        assert len(app.savings_chart(today=today)) == settings.app.savings_history_months

    def test_events_reach_subscribers(self, app):
        """Test that the presentation layer is notified of changes."""
        seen = []
        app.events.subscribe(STATE_CHANGED, seen.append)
        app.ledger.add_entry(income(1, "2024-03-10"))
        assert len(seen) == 1

    def test_reset_all(self, app):
        """Test that reset starts over with an empty document."""
        app.ledger.add_entry(income(5000, "2024-03-10"))
        assert app.reset_all()
        assert app.store.document.entries == {}
        assert app.aggregations.total_savings() == Decimal("0")

    def test_backup_and_restore(self, clock):
        """Test moving data between two apps through a snapshot."""
        source = create_app_components(storage=InMemoryStorage(), clock=clock)
        source.ledger.add_entry(income(5000, "2024-03-10"))
        snapshot = source.transfer.export_json()

        target = create_app_components(storage=InMemoryStorage(), clock=clock)
        assert target.transfer.import_snapshot(snapshot, "replace")
        assert target.aggregations.totals_for_month("2024-03").income == Decimal("5000")

    def test_default_storage_is_json_file(self, tmp_path, monkeypatch, clock):
        """Test that the factory falls back to the configured JSON file."""
        monkeypatch.setenv("BUDGET_STORAGE_DATA_DIR", str(tmp_path))
        app = create_app_components(clock=clock, settings=Settings())
        app.load()
        assert (tmp_path / "hb_budget_v1.json").exists()


class TestSettings:
    """Tests for environment-driven configuration."""

    def test_defaults(self):
        """Test the built-in defaults."""
        storage = StorageSettings()
        app = AppSettings()
        assert storage.storage_key == "hb_budget_v1"
        assert storage.max_document_bytes == 5 * 1024 * 1024
        assert app.recent_transactions_limit == 10
        assert app.expense_window_months == 5
        assert app.savings_history_months == 12

    def test_env_override(self, monkeypatch):
        """Test that environment variables override defaults."""
        monkeypatch.setenv("BUDGET_EXPENSE_WINDOW_MONTHS", "6")
        monkeypatch.setenv("BUDGET_STORAGE_STORAGE_KEY", "household")
        assert AppSettings().expense_window_months == 6
        assert StorageSettings().storage_key == "household"

    def test_storage_key_rejects_path(self):
        """Test that the key cannot escape the data directory."""
        with pytest.raises(ValidationError):
            StorageSettings(storage_key="../elsewhere")

    def test_log_level_normalized(self):
        """Test that log levels are upper-cased and checked."""
        assert AppSettings(log_level="debug").log_level == "DEBUG"
        with pytest.raises(ValidationError):
            AppSettings(log_level="loud")

    def test_validate_all_settings(self):
        """Test the startup check."""
        results = validate_all_settings()
        assert results["storage"] is True
        assert results["app"] is True


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
