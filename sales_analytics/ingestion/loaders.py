"""
Snapshot Loader

Reads the three warehouse extracts (sales fact, customer and product
dimensions) from a directory of CSV or Parquet files and conforms them into
a WarehouseSnapshot.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Union

import polars as pl
import structlog

from sales_analytics.config import get_settings
from sales_analytics.exceptions import DataSourceError
from sales_analytics.schemas import WarehouseSnapshot

logger = structlog.get_logger(__name__)
settings = get_settings()


class FileFormat(str, Enum):
    """Supported extract formats"""
    CSV = "csv"
    PARQUET = "parquet"


@dataclass
class ExtractConfig:
    """Location and parsing options of the warehouse extracts"""
    source_path: Union[str, Path]
    file_format: FileFormat = FileFormat.CSV
    sales_file: str = "fact_sales"
    customers_file: str = "dim_customers"
    products_file: str = "dim_products"
    delimiter: str = ","
    encoding: str = "utf-8"
    null_values: List[str] = field(default_factory=lambda: ["", "NULL", "null", "None", "NA", "N/A"])

    @classmethod
    def from_settings(cls, source_path: Optional[Union[str, Path]] = None) -> "ExtractConfig":
        """Build the config from WarehouseSettings"""
        warehouse = settings.warehouse
        return cls(
            source_path=source_path or warehouse.source_path,
            file_format=FileFormat(warehouse.file_format),
            sales_file=warehouse.sales_file,
            customers_file=warehouse.customers_file,
            products_file=warehouse.products_file,
        )

    def path_for(self, base_name: str) -> Path:
        return Path(self.source_path) / f"{base_name}.{self.file_format.value}"


class SnapshotLoader:
    """
    Loads a warehouse snapshot from extract files.

    Example:
        loader = SnapshotLoader(ExtractConfig(source_path="data/warehouse"))
        snapshot = loader.load()
    """

    def __init__(self, config: Optional[ExtractConfig] = None):
        self.config = config or ExtractConfig.from_settings()

    def _read_csv(self, path: Path) -> pl.DataFrame:
        """Read CSV file with Polars"""
        return pl.read_csv(
            path,
            separator=self.config.delimiter,
            encoding=self.config.encoding,
            null_values=self.config.null_values,
            try_parse_dates=True,
        )

    def _read_parquet(self, path: Path) -> pl.DataFrame:
        """Read Parquet file"""
        return pl.read_parquet(path)

    def _read_file(self, base_name: str) -> pl.DataFrame:
        """Read one extract based on the configured format"""
        path = self.config.path_for(base_name)
        if not path.exists():
            raise DataSourceError(f"Extract not found: {path}")

        readers = {
            FileFormat.CSV: self._read_csv,
            FileFormat.PARQUET: self._read_parquet,
        }
        reader = readers.get(self.config.file_format)
        if not reader:
            raise DataSourceError(f"Unsupported file format: {self.config.file_format}")

        try:
            df = reader(path)
        except (pl.exceptions.ComputeError, OSError) as e:
            raise DataSourceError(f"Failed to read {path}: {e}") from e

        logger.info("Extract loaded", file=str(path), rows=df.height)
        return df

    def load_frames(self) -> Dict[str, pl.DataFrame]:
        """Read the raw extracts without conforming them"""
        return {
            "sales": self._read_file(self.config.sales_file),
            "customers": self._read_file(self.config.customers_file),
            "products": self._read_file(self.config.products_file),
        }

    def load(self) -> WarehouseSnapshot:
        """Read and conform the three extracts"""
        frames = self.load_frames()
        snapshot = WarehouseSnapshot.from_frames(**frames)
        logger.info("Snapshot loaded", source=str(self.config.source_path), **snapshot.row_counts)
        return snapshot


def load_snapshot(
    source_path: Optional[Union[str, Path]] = None,
    file_format: Optional[FileFormat] = None,
) -> WarehouseSnapshot:
    """
    Convenience function to load a snapshot from a directory.

    Args:
        source_path: Directory holding the extracts (settings default)
        file_format: Extract format (settings default)

    Returns:
        Conformed WarehouseSnapshot
    """
    config = ExtractConfig.from_settings(source_path)
    if file_format is not None:
        config.file_format = FileFormat(file_format)
    return SnapshotLoader(config).load()
