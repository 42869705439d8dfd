"""
Unit Tests - Configuration, Logging and Data Generation
"""
import json
import logging
from datetime import date

import pytest
import structlog
from pydantic import ValidationError

from sales_analytics.config import Settings
from sales_analytics.config.logging import QUIET_LOGGERS, configure_logging, run_context
from sales_analytics.config.settings import ReportSettings, WarehouseSettings
from sales_analytics.data import CustomerGenerator, ProductGenerator, WarehouseGenerator


class TestSettings:
    """Tests for environment-driven settings"""

    def test_defaults(self, test_settings):
        """Test default values"""
        assert test_settings.app_env == "testing"
        assert not test_settings.is_production
        assert test_settings.reports.price_precision == 1
        assert test_settings.reports.percentage_precision == 2
        assert test_settings.warehouse.file_format == "csv"

    def test_env_overrides(self, monkeypatch):
        """Test prefixed environment variables"""
        monkeypatch.setenv("REPORT_PRICE_PRECISION", "3")
        monkeypatch.setenv("WAREHOUSE_FILE_FORMAT", "PARQUET")

        assert ReportSettings().price_precision == 3
        assert WarehouseSettings().file_format == "parquet"

    def test_invalid_environment(self, monkeypatch):
        """Test unknown environments are rejected"""
        monkeypatch.setenv("APP_ENV", "qa")

        with pytest.raises(ValidationError):
            Settings()

    def test_invalid_output_format(self, monkeypatch):
        """Test unknown output formats are rejected"""
        monkeypatch.setenv("REPORT_OUTPUT_FORMAT", "xlsx")

        with pytest.raises(ValidationError):
            ReportSettings()


class TestLogging:
    """Tests for logging setup"""

    @pytest.fixture(autouse=True)
    def restore_logging(self):
        root_logger = logging.getLogger()
        handlers, level = root_logger.handlers[:], root_logger.level
        library_levels = {name: logging.getLogger(name).level for name in QUIET_LOGGERS}
        yield
        root_logger.handlers = handlers
        root_logger.setLevel(level)
        for name, library_level in library_levels.items():
            logging.getLogger(name).setLevel(library_level)
        structlog.reset_defaults()

    def test_configure_logging(self):
        """Test a single structured handler on the root logger"""
        configure_logging("DEBUG")

        root_logger = logging.getLogger()
        assert root_logger.level == logging.DEBUG
        assert len(root_logger.handlers) == 1
        assert isinstance(root_logger.handlers[0].formatter, structlog.stdlib.ProcessorFormatter)

    def test_library_loggers_quieted(self):
        """Test library loggers stay at WARNING outside DEBUG"""
        configure_logging("INFO")

        assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING

        configure_logging("DEBUG")

        assert logging.getLogger("sqlalchemy.engine").level == logging.DEBUG

    def test_run_context_in_events(self, capsys):
        """Test run context is rendered on events inside the run only"""
        configure_logging("INFO", "json")
        log = structlog.get_logger("sales_analytics.tests")

        with run_context(date(2024, 6, 15), {"sales": 7, "customers": 3, "products": 3}):
            log.info("Computing report")
        log.info("Run finished")

        lines = [json.loads(line) for line in capsys.readouterr().out.splitlines() if line.strip()]
        events = {line["event"]: line for line in lines}
        assert events["Computing report"]["evaluated_at"] == "2024-06-15"
        assert events["Computing report"]["sales_rows"] == 7
        assert events["Computing report"]["products_rows"] == 3
        assert "evaluated_at" not in events["Run finished"]


class TestGenerators:
    """Tests for synthetic warehouse generation"""

    def test_dimensions(self):
        """Test dimension keys"""
        customers = CustomerGenerator(seed=1).generate(10)
        products = ProductGenerator(seed=1).generate(5)

        assert customers["customer_key"].to_list() == list(range(1, 11))
        assert customers["customer_key"].n_unique() == 10
        assert products["product_key"].to_list() == [1, 2, 3, 4, 5]
        assert products["cost"].min() > 0

    def test_reproducible(self):
        """Test the same seed gives the same sales"""
        first = WarehouseGenerator(seed=3).generate(n_customers=20, n_products=5, n_orders=50)
        second = WarehouseGenerator(seed=3).generate(n_customers=20, n_products=5, n_orders=50)

        assert first.sales.equals(second.sales)
        assert first.products.equals(second.products)

    def test_generated_snapshot(self, generated_snapshot):
        """Test generated sales reference the dimensions"""
        sales = generated_snapshot.sales

        assert sales["order_number"].n_unique() == 400
        assert sales["product_key"].is_in(generated_snapshot.products["product_key"].to_list()).all()
        assert sales["quantity"].min() >= 1
