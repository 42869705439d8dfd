"""
Customer Report

One row per customer with at least one dated sale:

1. Join sales to customers, drop undated sales
2. Aggregate orders, products, sales, quantity and order dates per customer
3. Classify age group and customer segment
4. Derive recency, lifespan and average spend metrics
"""

from datetime import date
from typing import List

import polars as pl
import structlog

from sales_analytics.schemas import WarehouseSnapshot
from sales_analytics.transformation import aggregators as agg
from sales_analytics.transformation.calendar import DateLike, age_in_years, as_date, months_between, months_until
from sales_analytics.transformation.classifiers import AGE_GROUP_RULES, CUSTOMER_SEGMENT_RULES
from sales_analytics.transformation.ratios import per_month, per_order

logger = structlog.get_logger(__name__)


CUSTOMER_KEYS: List[str] = ["customer_key", "customer_number", "customer_name", "age"]

CUSTOMER_METRICS: List[agg.Metric] = [
    agg.count_distinct("order_number", "total_orders"),
    agg.count_distinct("product_key", "total_products"),
    agg.total("sales_amount", "total_sales"),
    agg.total("quantity", "total_quantity"),
    agg.earliest("order_date", "first_order_date"),
    agg.latest("order_date", "last_order_date"),
]

CUSTOMER_REPORT_COLUMNS: List[str] = [
    "customer_key",
    "customer_number",
    "customer_name",
    "age",
    "age_group",
    "customer_segment",
    "last_order_date",
    "recency",
    "total_orders",
    "total_products",
    "total_sales",
    "total_quantity",
    "lifespan",
    "avg_monthly_spend",
    "avg_order_value",
]


def customer_name() -> pl.Expr:
    """'first last', or null when both parts are unknown"""
    first, last = pl.col("first_name"), pl.col("last_name")
    full = pl.concat_str([first, pl.lit(" "), last], ignore_nulls=True).str.strip_chars()
    return pl.when(first.is_null() & last.is_null()).then(None).otherwise(full).alias("customer_name")


def prepare_customer_sales(
    sales: pl.DataFrame,
    customers: pl.DataFrame,
    evaluated_at: DateLike,
) -> pl.DataFrame:
    """Dated sales joined to customer attributes, with name and age resolved"""
    dated = agg.drop_undated(sales)
    joined = agg.join_dimension(dated, customers, key="customer_key")
    return joined.with_columns([
        customer_name(),
        age_in_years(pl.col("birthdate"), evaluated_at).alias("age"),
    ])


def build_customer_report(
    snapshot: WarehouseSnapshot,
    evaluated_at: DateLike,
) -> pl.DataFrame:
    """
    Compute the customer report.

    Args:
        snapshot: Conformed sales, customers and products
        evaluated_at: Evaluation date used for age and recency

    Returns:
        One row per customer_key, sorted by customer_key
    """
    evaluated_on: date = as_date(evaluated_at)
    base = prepare_customer_sales(snapshot.sales, snapshot.customers, evaluated_on)

    report = agg.aggregate(base, CUSTOMER_KEYS, CUSTOMER_METRICS)

    report = report.with_columns(
        months_between(pl.col("first_order_date"), pl.col("last_order_date")).alias("lifespan"),
        months_until(pl.col("last_order_date"), evaluated_on).alias("recency"),
    )
    report = report.with_columns([
        AGE_GROUP_RULES.expression("age_group"),
        CUSTOMER_SEGMENT_RULES.expression("customer_segment"),
        per_month(pl.col("total_sales"), pl.col("lifespan")).alias("avg_monthly_spend"),
        per_order(pl.col("total_sales"), pl.col("total_orders")).alias("avg_order_value"),
    ])

    logger.info(
        "Customer report computed",
        customers=report.height,
        sales_rows=base.height,
        evaluated_at=str(evaluated_on),
    )

    return report.select(CUSTOMER_REPORT_COLUMNS)
