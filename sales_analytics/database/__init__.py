"""
Database Module
"""
from .connection import create_warehouse_engine, get_session, read_snapshot
from .models import Base, DimCustomer, DimProduct, FactSales

__all__ = [
    "create_warehouse_engine",
    "get_session",
    "read_snapshot",
    "Base",
    "DimCustomer",
    "DimProduct",
    "FactSales",
]
