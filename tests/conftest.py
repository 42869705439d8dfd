"""
Test Suite Configuration

The sample warehouse below is small enough to verify by hand:

Customers: 1 John Doe (33), 2 Jane Smith (18), 3 Bob Wilson (54)
Products: 10 Road Bike (cost 1000), 11 Helmet (cost 35), 12 Jersey (cost 100, unsold)
Sales:
    SO1  product 10, customer 1, 2023-01-10, 2000.0 x1
    SO1  product 11, customer 1, 2023-01-10,   50.0 x1
    SO2  product 10, customer 1, 2024-02-05, 4000.0 x2
    SO3  product 11, customer 2, 2024-05-01,  100.0 x2
    SO4  product 11, customer 99 (unknown), 2023-03-03, 50.0 x1
    SO5  product 10, customer 2, undated,    2000.0 x1
    SO6  product 11, customer 3, 2023-12-20,   30.0 x0
"""
from datetime import date

import polars as pl
import pytest

from sales_analytics.config import Settings
from sales_analytics.data import WarehouseGenerator
from sales_analytics.schemas import WarehouseSnapshot


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """Create test settings"""
    return Settings(APP_ENV="testing", DEBUG=True)


@pytest.fixture
def evaluation_date() -> date:
    """Fixed evaluation date for age and recency"""
    return date(2024, 6, 15)


@pytest.fixture
def sample_customers_df() -> pl.DataFrame:
    """Customer dimension"""
    return pl.DataFrame({
        "customer_key": [1, 2, 3],
        "customer_number": ["AW00011000", "AW00011001", "AW00011002"],
        "first_name": ["John", "Jane", "Bob"],
        "last_name": ["Doe", "Smith", "Wilson"],
        "birthdate": [date(1990, 8, 20), date(2006, 6, 15), date(1970, 1, 1)],
    })


@pytest.fixture
def sample_products_df() -> pl.DataFrame:
    """Product dimension"""
    return pl.DataFrame({
        "product_key": [10, 11, 12],
        "product_name": ["Road Bike", "Helmet", "Jersey"],
        "category": ["Bikes", "Accessories", "Clothing"],
        "subcategory": ["Road Bikes", "Helmets", "Jerseys"],
        "cost": [1000.0, 35.0, 100.0],
    })


@pytest.fixture
def sample_sales_df() -> pl.DataFrame:
    """Sales fact table"""
    return pl.DataFrame(
        {
            "order_number": ["SO1", "SO1", "SO2", "SO3", "SO4", "SO5", "SO6"],
            "product_key": [10, 11, 10, 11, 11, 10, 11],
            "customer_key": [1, 1, 1, 2, 99, 2, 3],
            "order_date": [
                date(2023, 1, 10),
                date(2023, 1, 10),
                date(2024, 2, 5),
                date(2024, 5, 1),
                date(2023, 3, 3),
                None,
                date(2023, 12, 20),
            ],
            "sales_amount": [2000.0, 50.0, 4000.0, 100.0, 50.0, 2000.0, 30.0],
            "quantity": [1, 1, 2, 2, 1, 1, 0],
        },
        schema_overrides={"order_date": pl.Date},
    )


@pytest.fixture
def sample_snapshot(sample_sales_df, sample_customers_df, sample_products_df) -> WarehouseSnapshot:
    """Conformed sample warehouse"""
    return WarehouseSnapshot.from_frames(
        sales=sample_sales_df,
        customers=sample_customers_df,
        products=sample_products_df,
    )


@pytest.fixture(scope="session")
def generated_snapshot() -> WarehouseSnapshot:
    """Larger reproducible warehouse"""
    return WarehouseGenerator(seed=7).generate(
        n_customers=60,
        n_products=20,
        n_orders=400,
        undated_share=0.05,
        unknown_customer_share=0.05,
    )


def _make_snapshot(sales_rows, customers=None, products=None) -> WarehouseSnapshot:
    sales = pl.DataFrame(
        sales_rows,
        schema={
            "order_number": pl.Utf8,
            "product_key": pl.Int64,
            "customer_key": pl.Int64,
            "order_date": pl.Date,
            "sales_amount": pl.Float64,
            "quantity": pl.Int64,
        },
        orient="row",
    )
    if customers is None:
        customers = pl.DataFrame(
            schema={
                "customer_key": pl.Int64,
                "customer_number": pl.Utf8,
                "first_name": pl.Utf8,
                "last_name": pl.Utf8,
                "birthdate": pl.Date,
            }
        )
    if products is None:
        products = pl.DataFrame(
            schema={
                "product_key": pl.Int64,
                "product_name": pl.Utf8,
                "category": pl.Utf8,
                "subcategory": pl.Utf8,
                "cost": pl.Float64,
            }
        )
    return WarehouseSnapshot.from_frames(sales=sales, customers=customers, products=products)


@pytest.fixture
def make_snapshot():
    """Snapshot from (order_number, product_key, customer_key, order_date, sales_amount, quantity) tuples"""
    return _make_snapshot
