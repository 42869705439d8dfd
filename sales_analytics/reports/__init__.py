"""
Reporting Module
"""
from .customers import build_customer_report
from .products import build_product_report
from .trends import (
    monthly_sales_trend,
    monthly_sales_by_period,
    running_sales_total,
    yearly_product_performance,
    category_contribution,
    cost_range_segments,
    customer_spend_segments,
)
from .runner import ReportRunner, ReportResult, ReportType

__all__ = [
    "build_customer_report",
    "build_product_report",
    "monthly_sales_trend",
    "monthly_sales_by_period",
    "running_sales_total",
    "yearly_product_performance",
    "category_contribution",
    "cost_range_segments",
    "customer_spend_segments",
    "ReportRunner",
    "ReportResult",
    "ReportType",
]
