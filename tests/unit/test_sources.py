"""
Unit Tests - Warehouse Sources
"""
from datetime import date

import pytest
import polars as pl

from sales_analytics.database import (
    Base,
    DimCustomer,
    DimProduct,
    FactSales,
    create_warehouse_engine,
    get_session,
    read_snapshot,
)
from sales_analytics.exceptions import DataSourceError, SchemaError
from sales_analytics.ingestion import ExtractConfig, FileFormat, SnapshotLoader
from sales_analytics.reports import build_customer_report, build_product_report
from sales_analytics.schemas import SALES_COLUMNS, conform


class TestConform:
    """Tests for column contracts"""

    def test_missing_column(self, sample_sales_df):
        """Test a missing contract column raises"""
        with pytest.raises(SchemaError, match="quantity"):
            conform(sample_sales_df.drop("quantity"), SALES_COLUMNS, "sales")

    def test_extra_columns_dropped(self, sample_sales_df):
        """Test output has exactly the contract columns"""
        df = sample_sales_df.with_columns(pl.lit("x").alias("notes"))

        result = conform(df, SALES_COLUMNS, "sales")

        assert result.columns == list(SALES_COLUMNS)

    def test_malformed_values_become_null(self):
        """Test values that cannot be cast are nulled"""
        df = pl.DataFrame({
            "order_number": ["SO1", "SO2"],
            "product_key": ["10", "ten"],
            "customer_key": [1, 2],
            "order_date": ["2023-01-10", "not a date"],
            "sales_amount": ["25.5", "n/a"],
            "quantity": [1, 2],
        })

        result = conform(df, SALES_COLUMNS, "sales")

        assert result.schema["order_date"] == pl.Date
        assert result["product_key"].to_list() == [10, None]
        assert result["order_date"].to_list() == [date(2023, 1, 10), None]
        assert result["sales_amount"].to_list() == [25.5, None]


class TestSnapshotLoader:
    """Tests for file extracts"""

    def _write_extracts(self, path, snapshot, file_format: FileFormat):
        frames = {
            "fact_sales": snapshot.sales,
            "dim_customers": snapshot.customers,
            "dim_products": snapshot.products,
        }
        for name, df in frames.items():
            target = path / f"{name}.{file_format.value}"
            if file_format == FileFormat.CSV:
                df.write_csv(target)
            else:
                df.write_parquet(target)

    @pytest.mark.parametrize("file_format", [FileFormat.CSV, FileFormat.PARQUET])
    def test_load(self, tmp_path, sample_snapshot, file_format):
        """Test extracts load into a conformed snapshot"""
        self._write_extracts(tmp_path, sample_snapshot, file_format)

        snapshot = SnapshotLoader(ExtractConfig(source_path=tmp_path, file_format=file_format)).load()

        assert snapshot.row_counts == {"sales": 7, "customers": 3, "products": 3}
        assert snapshot.sales.schema == sample_snapshot.sales.schema
        assert snapshot.sales["order_date"].null_count() == 1
        assert snapshot.customers["customer_number"].to_list() == ["AW00011000", "AW00011001", "AW00011002"]

    def test_loaded_reports_match(self, tmp_path, sample_snapshot, evaluation_date):
        """Test reports over loaded extracts equal reports over the frames"""
        self._write_extracts(tmp_path, sample_snapshot, FileFormat.CSV)

        loaded = SnapshotLoader(ExtractConfig(source_path=tmp_path)).load()

        assert build_customer_report(loaded, evaluation_date).equals(
            build_customer_report(sample_snapshot, evaluation_date)
        )

    def test_missing_extract(self, tmp_path):
        """Test a missing file raises DataSourceError"""
        loader = SnapshotLoader(ExtractConfig(source_path=tmp_path))

        with pytest.raises(DataSourceError, match="fact_sales.csv"):
            loader.load()


class TestWarehouseDatabase:
    """Tests for reading the warehouse tables"""

    @pytest.fixture
    def engine(self):
        engine = create_warehouse_engine("sqlite://")
        Base.metadata.create_all(engine)
        yield engine
        engine.dispose()

    @pytest.fixture
    def populated_engine(self, engine, sample_snapshot):
        with get_session(engine) as session:
            session.add_all([DimCustomer(**row) for row in sample_snapshot.customers.to_dicts()])
            session.add_all([DimProduct(**row) for row in sample_snapshot.products.to_dicts()])
            session.add_all([FactSales(**row) for row in sample_snapshot.sales.to_dicts()])
        return engine

    def test_read_snapshot(self, populated_engine, sample_snapshot):
        """Test tables read into a conformed snapshot"""
        snapshot = read_snapshot(populated_engine)

        assert snapshot.row_counts == sample_snapshot.row_counts
        assert snapshot.sales.schema == sample_snapshot.sales.schema
        assert snapshot.sales["order_date"].null_count() == 1

    def test_reports_match_frames(self, populated_engine, sample_snapshot, evaluation_date):
        """Test reports over tables equal reports over the frames"""
        snapshot = read_snapshot(populated_engine)

        assert build_product_report(snapshot, evaluation_date).equals(
            build_product_report(sample_snapshot, evaluation_date)
        )

    def test_empty_tables(self, engine):
        """Test empty tables give empty extents"""
        snapshot = read_snapshot(engine)

        assert snapshot.row_counts == {"sales": 0, "customers": 0, "products": 0}

    def test_missing_tables(self):
        """Test unreadable tables raise DataSourceError"""
        engine = create_warehouse_engine("sqlite://")

        with pytest.raises(DataSourceError):
            read_snapshot(engine)

    def test_session_rolls_back(self, engine):
        """Test a failing session leaves no rows behind"""
        with pytest.raises(ValueError):
            with get_session(engine) as session:
                session.add(DimProduct(product_key=1, product_name="Helmet"))
                session.flush()
                raise ValueError("abort")

        assert read_snapshot(engine).products.height == 0
