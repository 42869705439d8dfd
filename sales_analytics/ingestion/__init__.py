"""
Data Ingestion Module
"""
from .loaders import ExtractConfig, FileFormat, SnapshotLoader, load_snapshot

__all__ = [
    "ExtractConfig",
    "FileFormat",
    "SnapshotLoader",
    "load_snapshot",
]
