"""Domain-specific exceptions for sales analytics reporting.

All exceptions inherit from AnalyticsError for easy catching. Row-level
problems (malformed values, undated sales, missing dimension matches, zero
denominators) are resolved in place and never raise.
"""


class AnalyticsError(Exception):
    """Base exception for all sales analytics errors."""

    pass


class SchemaError(AnalyticsError):
    """Raised when an input extent is missing a required column."""

    pass


class DataSourceError(AnalyticsError):
    """Raised when a warehouse extract or table cannot be read.

    This exception is raised when:
    - An extract file is missing from the source directory
    - The file format is not supported
    - The warehouse database cannot be queried
    """

    pass


class DataQualityError(AnalyticsError):
    """Raised when input validation fails under strict validation."""

    pass
