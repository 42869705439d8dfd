"""
Warehouse Column Contracts

Column names and types of the three star-schema extents the reports read:
the sales fact table and the customer and product dimensions. Every frame
entering the reporting core goes through conform() first.
"""

from dataclasses import dataclass
from typing import Dict

import polars as pl
import structlog

from sales_analytics.exceptions import SchemaError

logger = structlog.get_logger(__name__)


SALES_COLUMNS: Dict[str, pl.DataType] = {
    "order_number": pl.Utf8,
    "product_key": pl.Int64,
    "customer_key": pl.Int64,
    "order_date": pl.Date,
    "sales_amount": pl.Float64,
    "quantity": pl.Int64,
}

CUSTOMER_COLUMNS: Dict[str, pl.DataType] = {
    "customer_key": pl.Int64,
    "customer_number": pl.Utf8,
    "first_name": pl.Utf8,
    "last_name": pl.Utf8,
    "birthdate": pl.Date,
}

PRODUCT_COLUMNS: Dict[str, pl.DataType] = {
    "product_key": pl.Int64,
    "product_name": pl.Utf8,
    "category": pl.Utf8,
    "subcategory": pl.Utf8,
    "cost": pl.Float64,
}


def _coerce(column: str, source: pl.DataType, target: pl.DataType) -> pl.Expr:
    expr = pl.col(column)
    if target == pl.Date and source == pl.Utf8:
        return expr.str.to_date("%Y-%m-%d", strict=False)
    return expr.cast(target, strict=False)


def conform(
    df: pl.DataFrame,
    columns: Dict[str, pl.DataType],
    name: str,
) -> pl.DataFrame:
    """
    Conform a frame to a column contract.
    
    Extra columns are dropped and values that cannot be cast to the
    contract type become null instead of failing the whole extent.
    
    Args:
        df: Raw extent
        columns: Column contract (name -> polars type)
        name: Extent name used in errors and logs
        
    Returns:
        Frame with exactly the contract columns, in contract order
        
    Raises:
        SchemaError: If a contract column is missing
    """
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise SchemaError(f"{name} is missing required columns: {missing}")
    
    conformed = df.select([
        _coerce(column, df.schema[column], dtype).alias(column)
        for column, dtype in columns.items()
    ])
    
    coerced = {
        column: conformed[column].null_count() - df[column].null_count()
        for column in columns
    }
    coerced = {column: count for column, count in coerced.items() if count > 0}
    if coerced:
        logger.warning("Malformed values set to null", extent=name, columns=coerced)
    
    return conformed


@dataclass(frozen=True)
class WarehouseSnapshot:
    """Read-only triple of conformed extents the reports are computed over"""
    sales: pl.DataFrame
    customers: pl.DataFrame
    products: pl.DataFrame
    
    @classmethod
    def from_frames(
        cls,
        sales: pl.DataFrame,
        customers: pl.DataFrame,
        products: pl.DataFrame,
    ) -> "WarehouseSnapshot":
        """Build a snapshot, conforming each frame to its contract"""
        return cls(
            sales=conform(sales, SALES_COLUMNS, "sales"),
            customers=conform(customers, CUSTOMER_COLUMNS, "customers"),
            products=conform(products, PRODUCT_COLUMNS, "products"),
        )
    
    @property
    def row_counts(self) -> Dict[str, int]:
        """Row count per extent"""
        return {
            "sales": self.sales.height,
            "customers": self.customers.height,
            "products": self.products.height,
        }
