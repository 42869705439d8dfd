"""
Synthetic Warehouse Generator

Generates a small, reproducible star-schema warehouse for development and
tests:
- Customers with names and birthdates
- Products across categories with unit costs
- Sales order lines spread over several years, including a share of
  undated lines and lines pointing at unknown customers
"""

import random
from datetime import date, timedelta
from typing import List, Optional

import numpy as np
import polars as pl
from faker import Faker

from sales_analytics.schemas import WarehouseSnapshot


# =============================================================================
# CONFIGURATION
# =============================================================================

CATEGORIES = [
    ("Bikes", ["Mountain Bikes", "Road Bikes", "Touring Bikes"]),
    ("Components", ["Handlebars", "Wheels", "Frames", "Brakes"]),
    ("Clothing", ["Jerseys", "Gloves", "Caps", "Socks"]),
    ("Accessories", ["Helmets", "Bottles and Cages", "Tires and Tubes"]),
]

COST_RANGES = {
    "Bikes": (300.0, 2200.0),
    "Components": (20.0, 900.0),
    "Clothing": (3.0, 60.0),
    "Accessories": (1.0, 50.0),
}

DEFAULT_START = date(2020, 1, 1)
DEFAULT_END = date(2023, 12, 31)


# =============================================================================
# GENERATORS
# =============================================================================

class CustomerGenerator:
    """Generate customer dimension rows"""

    def __init__(self, seed: int = 42):
        self.fake = Faker()
        self.fake.seed_instance(seed)

    def generate(self, n: int = 200) -> pl.DataFrame:
        """Generate n customers with keys 1..n"""
        return pl.DataFrame({
            "customer_key": list(range(1, n + 1)),
            "customer_number": [f"AW{key:08d}" for key in range(11000, 11000 + n)],
            "first_name": [self.fake.first_name() for _ in range(n)],
            "last_name": [self.fake.last_name() for _ in range(n)],
            "birthdate": [
                self.fake.date_of_birth(minimum_age=16, maximum_age=80) for _ in range(n)
            ],
        })


class ProductGenerator:
    """Generate product dimension rows"""

    def __init__(self, seed: int = 42):
        self.random = random.Random(seed)
        self.fake = Faker()
        self.fake.seed_instance(seed)

    def generate(self, n: int = 50) -> pl.DataFrame:
        """Generate n products with keys 1..n"""
        products = []

        for key in range(1, n + 1):
            category, subcategories = self.random.choice(CATEGORIES)
            subcategory = self.random.choice(subcategories)
            low, high = COST_RANGES[category]

            products.append({
                "product_key": key,
                "product_name": f"{self.fake.word().title()} {subcategory[:-1]}",
                "category": category,
                "subcategory": subcategory,
                "cost": round(self.random.uniform(low, high), 2),
            })

        return pl.DataFrame(products)


class SalesGenerator:
    """Generate sales fact rows over existing customers and products"""

    def __init__(
        self,
        customers_df: pl.DataFrame,
        products_df: pl.DataFrame,
        seed: int = 42,
    ):
        self.customer_keys: List[int] = customers_df["customer_key"].to_list()
        self.product_data = products_df.select(["product_key", "cost"]).to_dicts()
        self.rng = np.random.default_rng(seed)

    def generate(
        self,
        n_orders: int = 1000,
        start_date: date = DEFAULT_START,
        end_date: date = DEFAULT_END,
        undated_share: float = 0.01,
        unknown_customer_share: float = 0.01,
    ) -> pl.DataFrame:
        """Generate n_orders orders of one to three lines each"""
        span_days = (end_date - start_date).days
        unknown_key = max(self.customer_keys, default=0) + 1000
        lines = []

        for order_index in range(n_orders):
            order_number = f"SO{43697 + order_index}"

            if self.rng.random() < unknown_customer_share:
                customer_key = unknown_key
            else:
                customer_key = int(self.rng.choice(self.customer_keys))

            order_date: Optional[date] = start_date + timedelta(days=int(self.rng.integers(0, span_days + 1)))
            if self.rng.random() < undated_share:
                order_date = None

            num_lines = int(self.rng.choice([1, 2, 3], p=[0.6, 0.3, 0.1]))
            num_lines = min(num_lines, len(self.product_data))
            picked = self.rng.choice(len(self.product_data), size=num_lines, replace=False)

            for product_index in picked:
                product = self.product_data[int(product_index)]
                quantity = int(self.rng.choice([1, 2, 3], p=[0.85, 0.1, 0.05]))
                markup = float(self.rng.uniform(1.2, 1.8))
                unit_price = round(product["cost"] * markup)

                lines.append({
                    "order_number": order_number,
                    "product_key": product["product_key"],
                    "customer_key": customer_key,
                    "order_date": order_date,
                    "sales_amount": float(unit_price * quantity),
                    "quantity": quantity,
                })

        return pl.DataFrame(
            lines,
            schema={
                "order_number": pl.Utf8,
                "product_key": pl.Int64,
                "customer_key": pl.Int64,
                "order_date": pl.Date,
                "sales_amount": pl.Float64,
                "quantity": pl.Int64,
            },
        )


class WarehouseGenerator:
    """
    Generate a complete warehouse snapshot.

    Example:
        snapshot = WarehouseGenerator(seed=7).generate(n_customers=100)
    """

    def __init__(self, seed: int = 42):
        self.seed = seed

    def generate(
        self,
        n_customers: int = 200,
        n_products: int = 50,
        n_orders: int = 1000,
        start_date: date = DEFAULT_START,
        end_date: date = DEFAULT_END,
        undated_share: float = 0.01,
        unknown_customer_share: float = 0.01,
    ) -> WarehouseSnapshot:
        customers = CustomerGenerator(self.seed).generate(n_customers)
        products = ProductGenerator(self.seed).generate(n_products)
        sales = SalesGenerator(customers, products, self.seed).generate(
            n_orders=n_orders,
            start_date=start_date,
            end_date=end_date,
            undated_share=undated_share,
            unknown_customer_share=unknown_customer_share,
        )
        return WarehouseSnapshot.from_frames(sales=sales, customers=customers, products=products)
