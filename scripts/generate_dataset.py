"""
Synthetic Warehouse Generator
Writes fact_sales.csv, dim_customers.csv and dim_products.csv for local runs
"""

from pathlib import Path

import structlog

from sales_analytics.config.logging import configure_logging
from sales_analytics.data import WarehouseGenerator

logger = structlog.get_logger(__name__)

OUTPUT_DIR = Path(__file__).parent.parent / "data" / "warehouse"


def main():
    configure_logging()
    OUTPUT_DIR.mkdir(parents=True, exist_ok=True)

    logger.info("Generating sales warehouse", seed=42)
    snapshot = WarehouseGenerator(seed=42).generate(
        n_customers=2000,
        n_products=150,
        n_orders=20000,
    )

    extracts = {
        "fact_sales.csv": snapshot.sales,
        "dim_customers.csv": snapshot.customers,
        "dim_products.csv": snapshot.products,
    }
    for file_name, df in extracts.items():
        df.write_csv(OUTPUT_DIR / file_name)
        logger.info("Extract written", file=file_name, rows=df.height)

    logger.info("Warehouse generated", output=str(OUTPUT_DIR), **snapshot.row_counts)


if __name__ == "__main__":
    main()
