"""CLI entry point for the order report."""

from __future__ import annotations

import click

from .core.errors import OrderReportError


@click.command()
@click.argument(
    "orders_file",
    type=click.Path(exists=True, dir_okay=False, readable=True),
)
@click.option("--config", default="configs/default.toml", help="Config file path")
@click.option("--details-path", default=None, help="Order detail report output path")
@click.option("--summary-path", default=None, help="Summary report output path")
@click.option("--workers", default=None, type=click.IntRange(min=1), help="Aggregation worker threads")
@click.option("--log-level", default=None, help="Log level (DEBUG, INFO, WARNING, ERROR)")
@click.option("--quiet", is_flag=True, help="Write report files without printing them")
def main(
    orders_file: str,
    config: str,
    details_path: str | None,
    summary_path: str | None,
    workers: int | None,
    log_level: str | None,
    quiet: bool,
) -> None:
    """Aggregate ORDERS_FILE into an order-detail and a summary report."""
    from .main import run

    overrides: dict = {}
    if details_path:
        overrides.setdefault("report", {})["details_path"] = details_path
    if summary_path:
        overrides.setdefault("report", {})["summary_path"] = summary_path
    if quiet:
        overrides.setdefault("report", {})["echo"] = False
    if workers:
        overrides.setdefault("aggregation", {})["max_workers"] = workers
    if log_level:
        overrides.setdefault("observability", {})["log_level"] = log_level

    try:
        run(orders_file, config_path=config, overrides=overrides)
    except OrderReportError as exc:
        raise click.ClickException(str(exc)) from exc


if __name__ == "__main__":
    main()
