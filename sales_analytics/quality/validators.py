"""
Input Validation Module

Rule-based checks over the warehouse extents before reports are computed.
Checks report problems; they never modify or drop rows. Missing dimension
matches and undated sales are warnings because the reports handle them.

Features:
- Null checks on keys
- Uniqueness of dimension keys
- Range checks on numeric measures
- Referential integrity between facts and dimensions
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

import polars as pl
import structlog

from sales_analytics.schemas import WarehouseSnapshot

logger = structlog.get_logger(__name__)


class ValidationSeverity(str, Enum):
    """Severity levels for validation failures"""
    ERROR = "error"
    WARNING = "warning"


class ValidationStatus(str, Enum):
    """Overall validation status"""
    PASSED = "passed"
    FAILED = "failed"
    PARTIAL = "partial"


@dataclass
class ValidationCheck:
    """Single validation check result"""
    name: str
    passed: bool
    severity: ValidationSeverity
    message: str
    details: Optional[Dict[str, Any]] = None
    failed_rows: int = 0
    total_rows: int = 0


@dataclass
class ValidationResult:
    """Complete validation suite result"""
    extent: str
    status: ValidationStatus
    total_checks: int
    passed_checks: int
    failed_checks: int
    warning_count: int
    checks: List[ValidationCheck] = field(default_factory=list)
    completed_at: Optional[datetime] = None

    @property
    def success_rate(self) -> float:
        """Percentage of passed checks"""
        if self.total_checks == 0:
            return 100.0
        return (self.passed_checks / self.total_checks) * 100


Check = Callable[[pl.DataFrame], ValidationCheck]


def _missing_column(name: str, column: str, severity: ValidationSeverity) -> ValidationCheck:
    return ValidationCheck(
        name=name,
        passed=False,
        severity=severity,
        message=f"Column '{column}' not found",
    )


class DataValidator:
    """
    Chainable validator for one warehouse extent.

    Example:
        validator = DataValidator("customers").add_unique_check("customer_key")
        result = validator.validate(customers_df)
    """

    def __init__(self, extent: str, strict_mode: bool = False):
        self.extent = extent
        self.strict_mode = strict_mode  # Warnings fail the suite
        self._checks: List[Check] = []

    def add_not_null_check(
        self,
        column: str,
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "DataValidator":
        """Add check for null values in column"""
        name = f"not_null_{column}"

        def check(df: pl.DataFrame) -> ValidationCheck:
            if column not in df.columns:
                return _missing_column(name, column, severity)

            null_count = df[column].null_count()
            return ValidationCheck(
                name=name,
                passed=null_count == 0,
                severity=severity,
                message=f"Column '{column}' has {null_count} null values",
                details={"null_count": null_count},
                failed_rows=null_count,
                total_rows=df.height,
            )

        self._checks.append(check)
        return self

    def add_unique_check(
        self,
        column: str,
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "DataValidator":
        """Add check for uniqueness of column values"""
        name = f"unique_{column}"

        def check(df: pl.DataFrame) -> ValidationCheck:
            if column not in df.columns:
                return _missing_column(name, column, severity)

            duplicate_count = df.height - df[column].n_unique()
            return ValidationCheck(
                name=name,
                passed=duplicate_count == 0,
                severity=severity,
                message=f"Column '{column}' has {duplicate_count} duplicate values",
                details={"duplicate_count": duplicate_count},
                failed_rows=duplicate_count,
                total_rows=df.height,
            )

        self._checks.append(check)
        return self

    def add_range_check(
        self,
        column: str,
        min_value: Optional[float] = None,
        max_value: Optional[float] = None,
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "DataValidator":
        """Add check for non-null values within [min_value, max_value]"""
        name = f"range_{column}"

        def check(df: pl.DataFrame) -> ValidationCheck:
            if column not in df.columns:
                return _missing_column(name, column, severity)

            condition = pl.lit(False)
            if min_value is not None:
                condition = condition | (pl.col(column) < min_value)
            if max_value is not None:
                condition = condition | (pl.col(column) > max_value)

            out_of_range = df.filter(condition).height
            return ValidationCheck(
                name=name,
                passed=out_of_range == 0,
                severity=severity,
                message=f"Column '{column}' has {out_of_range} values outside [{min_value}, {max_value}]",
                details={"min": min_value, "max": max_value, "out_of_range_count": out_of_range},
                failed_rows=out_of_range,
                total_rows=df.height,
            )

        self._checks.append(check)
        return self

    def add_referential_integrity_check(
        self,
        column: str,
        reference_df: pl.DataFrame,
        reference_column: str,
        severity: ValidationSeverity = ValidationSeverity.WARNING,
    ) -> "DataValidator":
        """Add check that non-null keys exist in the reference dimension"""
        name = f"ref_integrity_{column}"
        reference_keys = reference_df[reference_column].drop_nulls().unique().to_list()

        def check(df: pl.DataFrame) -> ValidationCheck:
            if column not in df.columns:
                return _missing_column(name, column, severity)

            orphans = df.filter(
                pl.col(column).is_not_null() & ~pl.col(column).is_in(reference_keys)
            ).height
            return ValidationCheck(
                name=name,
                passed=orphans == 0,
                severity=severity,
                message=f"Column '{column}' has {orphans} rows without a dimension match",
                details={"orphan_count": orphans},
                failed_rows=orphans,
                total_rows=df.height,
            )

        self._checks.append(check)
        return self

    def validate(self, df: pl.DataFrame) -> ValidationResult:
        """
        Run all validation checks on a frame.

        Args:
            df: Extent to validate

        Returns:
            ValidationResult with all check results
        """
        checks = [check(df) for check in self._checks]

        for result in checks:
            if not result.passed:
                logger.warning(
                    f"Validation failed: {result.name}",
                    extent=self.extent,
                    message=result.message,
                    severity=result.severity.value,
                )

        passed_checks = sum(1 for c in checks if c.passed)
        failed_checks = sum(1 for c in checks if not c.passed and c.severity == ValidationSeverity.ERROR)
        warning_count = sum(1 for c in checks if not c.passed and c.severity == ValidationSeverity.WARNING)

        if failed_checks > 0 or (warning_count > 0 and self.strict_mode):
            status = ValidationStatus.FAILED
        elif warning_count > 0:
            status = ValidationStatus.PARTIAL
        else:
            status = ValidationStatus.PASSED

        return ValidationResult(
            extent=self.extent,
            status=status,
            total_checks=len(checks),
            passed_checks=passed_checks,
            failed_checks=failed_checks,
            warning_count=warning_count,
            checks=checks,
            completed_at=datetime.now(timezone.utc),
        )


def create_sales_validator(customers: pl.DataFrame, products: pl.DataFrame) -> DataValidator:
    """Validator for the sales fact extent"""
    return (
        DataValidator("sales")
        .add_not_null_check("order_number")
        .add_not_null_check("customer_key")
        .add_not_null_check("product_key")
        .add_not_null_check("order_date", severity=ValidationSeverity.WARNING)
        .add_referential_integrity_check("customer_key", customers, "customer_key")
        .add_referential_integrity_check("product_key", products, "product_key")
    )


def create_customers_validator() -> DataValidator:
    """Validator for the customer dimension"""
    return (
        DataValidator("customers")
        .add_not_null_check("customer_key")
        .add_unique_check("customer_key")
    )


def create_products_validator() -> DataValidator:
    """Validator for the product dimension"""
    return (
        DataValidator("products")
        .add_not_null_check("product_key")
        .add_unique_check("product_key")
        .add_range_check("cost", min_value=0, severity=ValidationSeverity.WARNING)
    )


def validate_snapshot(snapshot: WarehouseSnapshot) -> Dict[str, ValidationResult]:
    """Validate all three extents of a snapshot"""
    results = {
        "sales": create_sales_validator(snapshot.customers, snapshot.products).validate(snapshot.sales),
        "customers": create_customers_validator().validate(snapshot.customers),
        "products": create_products_validator().validate(snapshot.products),
    }

    logger.info(
        "Snapshot validated",
        **{name: result.status.value for name, result in results.items()},
    )

    return results
