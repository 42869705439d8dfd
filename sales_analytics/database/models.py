"""
Database Models - Star Schema Design

Gold-layer tables the reports read:

Fact Tables:
- FactSales: One row per sales order line

Dimension Tables:
- DimCustomer: Customer attributes
- DimProduct: Product catalog and cost
"""

from datetime import date
from typing import Optional

from sqlalchemy import Date, Float, Index, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all database models"""
    pass


class DimCustomer(Base):
    """
    Customer Dimension Table
    
    One row per customer, referenced by zero or more sales.
    """
    __tablename__ = "dim_customers"
    
    customer_key: Mapped[int] = mapped_column(Integer, primary_key=True)
    customer_number: Mapped[Optional[str]] = mapped_column(String(50))
    first_name: Mapped[Optional[str]] = mapped_column(String(100))
    last_name: Mapped[Optional[str]] = mapped_column(String(100))
    birthdate: Mapped[Optional[date]] = mapped_column(Date)


class DimProduct(Base):
    """
    Product Dimension Table
    
    Product catalog with category hierarchy and unit cost.
    """
    __tablename__ = "dim_products"
    
    product_key: Mapped[int] = mapped_column(Integer, primary_key=True)
    product_name: Mapped[Optional[str]] = mapped_column(String(200))
    category: Mapped[Optional[str]] = mapped_column(String(100))
    subcategory: Mapped[Optional[str]] = mapped_column(String(100))
    cost: Mapped[Optional[float]] = mapped_column(Float)
    
    __table_args__ = (
        Index("ix_dim_products_category", "category"),
    )


class FactSales(Base):
    """
    Sales Fact Table
    
    Grain: one row per product within a sales order. Keys are not declared
    as foreign keys because the reports tolerate facts whose dimension row
    is missing.
    """
    __tablename__ = "fact_sales"
    
    sales_line_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    order_number: Mapped[str] = mapped_column(String(50), nullable=False)
    product_key: Mapped[Optional[int]] = mapped_column(Integer)
    customer_key: Mapped[Optional[int]] = mapped_column(Integer)
    order_date: Mapped[Optional[date]] = mapped_column(Date)
    sales_amount: Mapped[Optional[float]] = mapped_column(Float)
    quantity: Mapped[Optional[int]] = mapped_column(Integer)
    
    __table_args__ = (
        Index("ix_fact_sales_customer", "customer_key"),
        Index("ix_fact_sales_product", "product_key"),
        Index("ix_fact_sales_order_date", "order_date"),
    )
