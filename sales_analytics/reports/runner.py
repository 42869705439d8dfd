"""
Report Runner

Computes every report over one warehouse snapshot and evaluation date,
optionally validating the inputs first and writing the outputs.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, List, Optional

import polars as pl
import structlog

from sales_analytics.config import get_settings
from sales_analytics.config.logging import run_context
from sales_analytics.exceptions import DataQualityError
from sales_analytics.quality.validators import ValidationStatus, validate_snapshot
from sales_analytics.schemas import WarehouseSnapshot
from sales_analytics.transformation.calendar import DateLike, as_date
from . import trends
from .customers import build_customer_report
from .products import build_product_report

logger = structlog.get_logger(__name__)
settings = get_settings()


class ReportType(str, Enum):
    """Reports produced by a run"""
    CUSTOMER_REPORT = "customer_report"
    PRODUCT_REPORT = "product_report"
    MONTHLY_TREND = "monthly_trend"
    MONTHLY_BY_PERIOD = "monthly_by_period"
    RUNNING_TOTAL = "running_total"
    YEARLY_PRODUCT_PERFORMANCE = "yearly_product_performance"
    CATEGORY_CONTRIBUTION = "category_contribution"
    COST_RANGE_SEGMENTS = "cost_range_segments"
    CUSTOMER_SPEND_SEGMENTS = "customer_spend_segments"


@dataclass
class ReportResult:
    """Result of computing one report"""
    report_type: ReportType
    frame: Optional[pl.DataFrame]
    input_rows: int
    output_rows: int
    started_at: datetime
    completed_at: datetime
    duration_seconds: float
    output_path: Optional[str] = None
    errors: List[str] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return not self.errors


class ReportRunner:
    """
    Report pipeline orchestrator.

    Every report is a full recomputation over the snapshot; nothing is
    cached between runs, so repeated runs over the same snapshot and
    evaluation date give identical frames.

    Example:
        runner = ReportRunner(snapshot, evaluated_at=date(2024, 1, 1))
        results = runner.run_all()
        customers = results[ReportType.CUSTOMER_REPORT].frame
    """

    def __init__(
        self,
        snapshot: WarehouseSnapshot,
        evaluated_at: Optional[DateLike] = None,
        output_path: Optional[str] = None,
        validate_inputs: Optional[bool] = None,
    ):
        self.snapshot = snapshot
        self.evaluated_at: date = as_date(evaluated_at or datetime.now(timezone.utc))
        output_path = output_path or settings.reports.output_path
        self.output_path = Path(output_path) if output_path else None
        self.validate_inputs = (
            settings.reports.validate_inputs if validate_inputs is None else validate_inputs
        )

        if self.output_path is not None:
            self.output_path.mkdir(parents=True, exist_ok=True)

        self._builders: Dict[ReportType, Callable[[], pl.DataFrame]] = {
            ReportType.CUSTOMER_REPORT: lambda: build_customer_report(self.snapshot, self.evaluated_at),
            ReportType.PRODUCT_REPORT: lambda: build_product_report(self.snapshot, self.evaluated_at),
            ReportType.MONTHLY_TREND: lambda: trends.monthly_sales_trend(self.snapshot),
            ReportType.MONTHLY_BY_PERIOD: lambda: trends.monthly_sales_by_period(self.snapshot),
            ReportType.RUNNING_TOTAL: lambda: trends.running_sales_total(self.snapshot),
            ReportType.YEARLY_PRODUCT_PERFORMANCE: lambda: trends.yearly_product_performance(self.snapshot),
            ReportType.CATEGORY_CONTRIBUTION: lambda: trends.category_contribution(self.snapshot),
            ReportType.COST_RANGE_SEGMENTS: lambda: trends.cost_range_segments(self.snapshot),
            ReportType.CUSTOMER_SPEND_SEGMENTS: lambda: trends.customer_spend_segments(self.snapshot),
        }

    def _write_output(self, df: pl.DataFrame, name: str) -> str:
        """Write a report frame to the output directory"""
        output_format = settings.reports.output_format
        output_file = self.output_path / f"{name}_{self.evaluated_at:%Y%m%d}.{output_format}"

        if output_format == "csv":
            df.write_csv(output_file)
        else:
            df.write_parquet(output_file)
        logger.info(f"Written {len(df)} rows to {output_file}")

        return str(output_file)

    def _input_rows(self, report_type: ReportType) -> int:
        if report_type == ReportType.COST_RANGE_SEGMENTS:
            return self.snapshot.products.height
        return self.snapshot.sales.height

    def check_inputs(self) -> ValidationStatus:
        """
        Validate the snapshot.

        Failures are logged and the run continues unless strict validation
        is configured.

        Raises:
            DataQualityError: If validation failed under strict validation
        """
        results = validate_snapshot(self.snapshot)
        statuses = {name: result.status for name, result in results.items()}

        if any(status == ValidationStatus.FAILED for status in statuses.values()):
            overall = ValidationStatus.FAILED
        elif any(status == ValidationStatus.PARTIAL for status in statuses.values()):
            overall = ValidationStatus.PARTIAL
        else:
            overall = ValidationStatus.PASSED

        logger.info("Input validation complete", status=overall.value, extents={k: v.value for k, v in statuses.items()})

        if overall == ValidationStatus.FAILED and settings.reports.strict_validation:
            raise DataQualityError(f"Input validation failed: {statuses}")

        return overall

    def run(self, report_type: ReportType) -> ReportResult:
        """Compute a single report"""
        started_at = datetime.now(timezone.utc)
        errors: List[str] = []
        frame: Optional[pl.DataFrame] = None
        output_file = None

        logger.info("Computing report", report=report_type.value, evaluated_at=str(self.evaluated_at))

        try:
            frame = self._builders[report_type]()
            if self.output_path is not None:
                output_file = self._write_output(frame, report_type.value)
        except Exception as e:
            logger.exception("Report failed", report=report_type.value, error=str(e))
            errors.append(str(e))

        completed_at = datetime.now(timezone.utc)

        return ReportResult(
            report_type=report_type,
            frame=frame,
            input_rows=self._input_rows(report_type),
            output_rows=frame.height if frame is not None else 0,
            started_at=started_at,
            completed_at=completed_at,
            duration_seconds=(completed_at - started_at).total_seconds(),
            output_path=output_file,
            errors=errors,
        )

    def run_all(self) -> Dict[ReportType, ReportResult]:
        """
        Compute every report.

        A failing report is recorded in its result and does not stop the
        remaining reports. Every event logged during the run carries the
        evaluation date and the snapshot's row counts.

        Returns:
            Dictionary of report results by type
        """
        with run_context(self.evaluated_at, self.snapshot.row_counts):
            logger.info("Starting report run")

            if self.validate_inputs:
                self.check_inputs()

            results = {report_type: self.run(report_type) for report_type in ReportType}

            failed = [r.report_type.value for r in results.values() if not r.succeeded]
            total_duration = sum(r.duration_seconds for r in results.values())

            logger.info(
                f"Report run complete: {len(results) - len(failed)} succeeded, {len(failed)} failed, "
                f"duration: {total_duration:.2f}s",
                failed=failed,
            )

        return results
