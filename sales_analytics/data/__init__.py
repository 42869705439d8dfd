"""
Data Generation Module
"""
from .generators import CustomerGenerator, ProductGenerator, SalesGenerator, WarehouseGenerator

__all__ = [
    "CustomerGenerator",
    "ProductGenerator",
    "SalesGenerator",
    "WarehouseGenerator",
]
