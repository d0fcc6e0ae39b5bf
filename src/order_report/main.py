"""Run bootstrap.

Wires the pipeline for one input file: load settings, set up logging,
load orders, aggregate, render, write both reports, echo to stdout.
Either both reports are produced or none are: every failure raises an
``OrderReportError`` before anything reaches the output files or stdout.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, TextIO

from .aggregation.engine import AggregationEngine, AggregationResult
from .core.config import Settings, load_settings
from .core.file_io import write_reports
from .ingest.loader import load_orders
from .observability.logger import clear_run_context, get_logger, new_run_id, setup_logging
from .reporting.formatter import RenderedReports, ReportFormatter

logger = get_logger(__name__)


@dataclass(frozen=True)
class RunResult:
    aggregation: AggregationResult
    reports: RenderedReports
    written: list[Path]


def run(
    input_path: str | Path,
    config_path: str | Path | None = None,
    overrides: dict[str, Any] | None = None,
    stdout: TextIO | None = None,
) -> RunResult:
    """Main entry point.  Load config, process *input_path*, emit reports."""

    # 1. Load settings
    settings = load_settings(config_path=config_path, overrides=overrides)

    # 2. Set up logging
    setup_logging(
        level=settings.observability.log_level,
        format=settings.observability.log_format,
    )
    new_run_id()
    try:
        return _run(settings, Path(input_path), stdout or sys.stdout)
    finally:
        clear_run_context()


def _run(settings: Settings, input_path: Path, stdout: TextIO) -> RunResult:
    log = logger.bind(input=str(input_path))

    # 3. Ingest
    orders = load_orders(input_path)
    log.info("orders_loaded", orders=len(orders))

    # 4. Aggregate
    engine = AggregationEngine(
        max_workers=settings.aggregation.max_workers,
        price_tolerance=settings.aggregation.price_tolerance,
    )
    result = engine.aggregate(orders)
    log.info(
        "aggregation_complete",
        orders=result.order_count,
        fulfilled=result.fulfilled_count,
        items=result.item_count,
        products=len(result.product_quantities),
        revenue=str(result.total_revenue),
    )

    # 5. Render
    formatter = ReportFormatter(
        product_column_width=settings.report.product_column_width
    )
    reports = formatter.format_result(result)

    # 6. Write files, then echo
    written = write_reports({
        settings.report.details_path: reports.detail,
        settings.report.summary_path: reports.summary,
    })
    log.info("reports_written", paths=[str(p) for p in written])

    if settings.report.echo:
        stdout.write(reports.detail)
        stdout.write(reports.summary)
        stdout.flush()

    return RunResult(aggregation=result, reports=reports, written=written)
