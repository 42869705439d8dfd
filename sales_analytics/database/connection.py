"""
Database Connection Management

SQLAlchemy 2.0 engine and session helpers for reading a warehouse snapshot
out of the gold-layer tables.
"""

from contextlib import contextmanager
from typing import Dict, Generator, Optional, Type

import polars as pl
import structlog
from sqlalchemy import Connection, Engine, create_engine, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from sales_analytics.config import get_settings
from sales_analytics.exceptions import DataSourceError
from sales_analytics.schemas import CUSTOMER_COLUMNS, PRODUCT_COLUMNS, SALES_COLUMNS, WarehouseSnapshot
from .models import Base, DimCustomer, DimProduct, FactSales

logger = structlog.get_logger(__name__)
settings = get_settings()


def create_warehouse_engine(url: Optional[str] = None) -> Engine:
    """
    Create an engine for the warehouse database.
    
    Args:
        url: SQLAlchemy URL (defaults to WAREHOUSE_DATABASE_URL)
        
    Raises:
        DataSourceError: If no URL is configured
    """
    url = url or settings.warehouse.database_url
    if not url:
        raise DataSourceError("No warehouse database URL configured")
    
    engine = create_engine(url, echo=settings.warehouse.echo, pool_pre_ping=True)
    logger.info("Warehouse engine created", dialect=engine.dialect.name)
    return engine


@contextmanager
def get_session(engine: Engine) -> Generator[Session, None, None]:
    """
    Get a database session.
    
    Context manager that provides a session and handles
    commit/rollback/close automatically.
    
    Example:
        with get_session(engine) as session:
            session.add_all(rows)
    """
    session = sessionmaker(bind=engine, expire_on_commit=False)()
    try:
        yield session
        session.commit()
    except Exception as e:
        logger.error("Database session error, rolling back", error=str(e), error_type=type(e).__name__)
        session.rollback()
        raise
    finally:
        session.close()


def read_table(
    conn: Connection,
    model: Type[Base],
    columns: Dict[str, pl.DataType],
) -> pl.DataFrame:
    """Read the contract columns of a table into a frame"""
    table = model.__table__
    query = select(*[table.c[name] for name in columns])
    try:
        rows = conn.execute(query).all()
    except SQLAlchemyError as e:
        raise DataSourceError(f"Failed to read {table.name}: {e}") from e
    
    logger.debug("Table read", table=table.name, rows=len(rows))
    return pl.DataFrame(
        [tuple(row) for row in rows],
        schema=columns,
        orient="row",
    )


def read_snapshot(engine: Engine) -> WarehouseSnapshot:
    """
    Read a consistent snapshot of the three gold-layer tables.
    
    Returns:
        Conformed WarehouseSnapshot
    """
    # One transaction for all three tables
    with engine.connect() as conn, conn.begin():
        frames = {
            "sales": read_table(conn, FactSales, SALES_COLUMNS),
            "customers": read_table(conn, DimCustomer, CUSTOMER_COLUMNS),
            "products": read_table(conn, DimProduct, PRODUCT_COLUMNS),
        }
    snapshot = WarehouseSnapshot.from_frames(**frames)
    logger.info("Snapshot read from warehouse", **snapshot.row_counts)
    return snapshot
