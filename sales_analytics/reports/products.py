"""
Product Report

One row per product with at least one dated sale: order, customer and
revenue totals, performance segment, recency and average revenue metrics.
"""

from typing import List, Optional

import polars as pl
import structlog

from sales_analytics.config import get_settings
from sales_analytics.schemas import WarehouseSnapshot
from sales_analytics.transformation import aggregators as agg
from sales_analytics.transformation.calendar import DateLike, as_date, months_between, months_until
from sales_analytics.transformation.classifiers import PRODUCT_SEGMENT_RULES
from sales_analytics.transformation.ratios import per_month, per_order, unit_price

logger = structlog.get_logger(__name__)
settings = get_settings()


PRODUCT_KEYS: List[str] = ["product_key", "product_name", "category", "subcategory", "cost"]

PRODUCT_METRICS: List[agg.Metric] = [
    agg.earliest("order_date", "first_sale_date"),
    agg.latest("order_date", "last_sale_date"),
    agg.count_distinct("order_number", "total_orders"),
    agg.count_distinct("customer_key", "total_customers"),
    agg.total("sales_amount", "total_sales"),
    agg.total("quantity", "total_quantity"),
    agg.mean("unit_price", "avg_selling_price"),
]

PRODUCT_REPORT_COLUMNS: List[str] = [
    "product_key",
    "product_name",
    "category",
    "subcategory",
    "cost",
    "last_sale_date",
    "recency_in_months",
    "product_segment",
    "lifespan",
    "total_orders",
    "total_sales",
    "total_quantity",
    "total_customers",
    "avg_selling_price",
    "avg_order_revenue",
    "avg_monthly_revenue",
]


def build_product_report(
    snapshot: WarehouseSnapshot,
    evaluated_at: DateLike,
    price_precision: Optional[int] = None,
) -> pl.DataFrame:
    """
    Compute the product report.

    Args:
        snapshot: Conformed sales, customers and products
        evaluated_at: Evaluation date used for recency
        price_precision: Decimals kept on avg_selling_price (settings default)

    Returns:
        One row per product_key, sorted by product_key
    """
    evaluated_on = as_date(evaluated_at)
    if price_precision is None:
        price_precision = settings.reports.price_precision

    dated = agg.drop_undated(snapshot.sales)
    base = agg.join_dimension(dated, snapshot.products, key="product_key").with_columns(
        unit_price(pl.col("sales_amount"), pl.col("quantity")).alias("unit_price")
    )

    report = agg.aggregate(base, PRODUCT_KEYS, PRODUCT_METRICS)

    report = report.with_columns([
        months_between(pl.col("first_sale_date"), pl.col("last_sale_date")).alias("lifespan"),
        months_until(pl.col("last_sale_date"), evaluated_on).alias("recency_in_months"),
        pl.col("avg_selling_price").round(price_precision),
        PRODUCT_SEGMENT_RULES.expression("product_segment"),
        per_order(pl.col("total_sales"), pl.col("total_orders")).alias("avg_order_revenue"),
    ])
    report = report.with_columns(
        per_month(pl.col("total_sales"), pl.col("lifespan")).alias("avg_monthly_revenue"),
    )

    logger.info(
        "Product report computed",
        products=report.height,
        sales_rows=base.height,
        evaluated_at=str(evaluated_on),
    )

    return report.select(PRODUCT_REPORT_COLUMNS)
