"""
Sales Analytics Reporting

Customer, product and trend reports over a star-schema sales warehouse.
"""
from .schemas import WarehouseSnapshot
from .reports import ReportRunner, ReportResult, ReportType, build_customer_report, build_product_report

__version__ = "1.0.0"

__all__ = [
    "WarehouseSnapshot",
    "ReportRunner",
    "ReportResult",
    "ReportType",
    "build_customer_report",
    "build_product_report",
]
