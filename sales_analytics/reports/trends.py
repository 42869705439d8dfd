"""
Trend and Segmentation Queries

Standalone analytical queries reusing the join -> aggregate -> classify
pattern at other granularities:

- Monthly sales trend (chronological and by period label)
- Running sales total restarted every calendar year
- Yearly product performance against the product average and prior year
- Category contribution to overall sales
- Product counts per cost range
- Customer counts per spend segment
"""

from typing import List, Optional

import polars as pl
import structlog

from sales_analytics.config import get_settings
from sales_analytics.schemas import WarehouseSnapshot
from sales_analytics.transformation import aggregators as agg
from sales_analytics.transformation.calendar import months_between
from sales_analytics.transformation.classifiers import (
    COST_RANGE_RULES,
    CUSTOMER_SEGMENT_RULES,
    average_comparison_rules,
    trend_rules,
)
from sales_analytics.transformation.ratios import format_percentage, share_of_total
from sales_analytics.transformation.windows import lookback, partition_mean, running_total

logger = structlog.get_logger(__name__)
settings = get_settings()


MONTHLY_METRICS: List[agg.Metric] = [
    agg.total("sales_amount", "total_sales"),
    agg.count_distinct("customer_key", "total_customers"),
    agg.total("quantity", "total_quantity"),
]

PY_CHANGE_RULES = trend_rules("py_diff", name="py_change")
AVG_CHANGE_RULES = average_comparison_rules("avg_diff", name="avg_change")


def _descending(df: pl.DataFrame, measure: str, tie_breaker: str) -> pl.DataFrame:
    return df.sort([measure, tie_breaker], descending=[True, False], nulls_last=True)


def monthly_sales_trend(snapshot: WarehouseSnapshot) -> pl.DataFrame:
    """Sales, distinct customers and quantity per calendar month, oldest first"""
    dated = agg.drop_undated(snapshot.sales).with_columns([
        pl.col("order_date").dt.year().alias("order_year"),
        pl.col("order_date").dt.month().alias("order_month"),
    ])
    return agg.aggregate(dated, ["order_year", "order_month"], MONTHLY_METRICS)


def monthly_sales_by_period(snapshot: WarehouseSnapshot) -> pl.DataFrame:
    """Monthly metrics keyed by a 'yyyy-Mon' label, largest sales first"""
    dated = agg.drop_undated(snapshot.sales).with_columns(
        pl.col("order_date").dt.strftime("%Y-%b").alias("order_period")
    )
    result = agg.aggregate(dated, ["order_period"], MONTHLY_METRICS)
    return _descending(result, "total_sales", "order_period")


def running_sales_total(snapshot: WarehouseSnapshot) -> pl.DataFrame:
    """
    Monthly sales with a running total that restarts every January.

    Returns:
        order_year, order_month (first day of the month), total_sales,
        running_total in chronological order
    """
    dated = agg.drop_undated(snapshot.sales).with_columns(
        pl.col("order_date").dt.truncate("1mo").alias("order_month")
    ).with_columns(
        pl.col("order_month").dt.year().alias("order_year")
    )
    monthly = agg.aggregate(
        dated,
        ["order_year", "order_month"],
        [agg.total("sales_amount", "total_sales")],
    )
    return running_total(
        monthly,
        value="total_sales",
        partition_by="order_year",
        order_by="order_month",
    )


def yearly_product_performance(snapshot: WarehouseSnapshot) -> pl.DataFrame:
    """
    Yearly sales per product compared with the product's average year and
    with its previous recorded year.

    The prior year is the previous row present for the product, so a gap
    year compares against the last year that had sales.
    """
    dated = agg.drop_undated(snapshot.sales).with_columns(
        pl.col("order_date").dt.year().alias("order_year")
    )
    names = snapshot.products.select(["product_key", "product_name"])
    joined = agg.join_dimension(dated, names, key="product_key")

    yearly = agg.aggregate(
        joined,
        ["product_key", "product_name", "order_year"],
        [agg.total("sales_amount", "current_sales")],
    )
    yearly = partition_mean(yearly, "current_sales", partition_by="product_key", alias="avg_sales")
    yearly = lookback(
        yearly,
        "current_sales",
        partition_by="product_key",
        order_by="order_year",
        alias="py_sales",
    )
    yearly = yearly.with_columns([
        (pl.col("current_sales") - pl.col("avg_sales")).alias("avg_diff"),
        (pl.col("current_sales") - pl.col("py_sales")).alias("py_diff"),
    ])
    yearly = yearly.with_columns([
        AVG_CHANGE_RULES.expression(),
        PY_CHANGE_RULES.expression(),
    ])

    return yearly.select([
        "order_year",
        "product_key",
        "product_name",
        "current_sales",
        "avg_sales",
        "avg_diff",
        "avg_change",
        "py_sales",
        "py_diff",
        "py_change",
    ])


def category_contribution(
    snapshot: WarehouseSnapshot,
    precision: Optional[int] = None,
) -> pl.DataFrame:
    """
    Share of overall sales per product category, largest first.

    Not date-keyed: undated sales count. Sales whose product is unknown are
    grouped under a null category. When overall sales are zero every
    percentage_of_total is null.
    """
    if precision is None:
        precision = settings.reports.percentage_precision

    categories = snapshot.products.select(["product_key", "category"])
    joined = agg.join_dimension(snapshot.sales, categories, key="product_key")
    by_category = agg.aggregate(joined, ["category"], [agg.total("sales_amount", "total_sales")])

    by_category = by_category.with_columns(
        pl.col("total_sales").sum().alias("overall_sales")
    ).with_columns(
        share_of_total(pl.col("total_sales"), pl.col("overall_sales"), precision).alias("share")
    ).with_columns(
        format_percentage(pl.col("share"), precision).alias("percentage_of_total")
    )

    return _descending(by_category, "total_sales", "category").select(
        ["category", "total_sales", "overall_sales", "percentage_of_total"]
    )


def cost_range_segments(snapshot: WarehouseSnapshot) -> pl.DataFrame:
    """Number of products in each cost range, largest first"""
    ranged = snapshot.products.with_columns(COST_RANGE_RULES.expression("cost_range"))
    counts = agg.aggregate(ranged, ["cost_range"], [agg.count("product_key", "total_products")])
    return _descending(counts, "total_products", "cost_range")


def customer_spending(snapshot: WarehouseSnapshot) -> pl.DataFrame:
    """
    Total spend, lifespan and spend segment per customer.

    Not date-keyed: every sale adds to the spend, while lifespan is taken
    from the dated sales only.
    """
    keyed = snapshot.sales.filter(pl.col("customer_key").is_not_null())
    spending = agg.aggregate(
        keyed,
        ["customer_key"],
        [
            agg.total("sales_amount", "total_sales"),
            agg.earliest("order_date", "first_order_date"),
            agg.latest("order_date", "last_order_date"),
        ],
    )
    spending = spending.with_columns(
        months_between(pl.col("first_order_date"), pl.col("last_order_date")).alias("lifespan")
    ).with_columns(
        CUSTOMER_SEGMENT_RULES.expression("customer_segment")
    )
    return spending.select(["customer_key", "total_sales", "lifespan", "customer_segment"])


def customer_spend_segments(snapshot: WarehouseSnapshot) -> pl.DataFrame:
    """Number of customers in each spend segment, largest first"""
    counts = agg.aggregate(
        customer_spending(snapshot),
        ["customer_segment"],
        [agg.count("customer_key", "total_customers")],
    )
    return _descending(counts, "total_customers", "customer_segment")
