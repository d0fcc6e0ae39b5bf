"""Report rendering: order-detail and summary text.

Detail report: one block per order, in input order::

    Order Id: O1, Customer: A, Status: shipped
      Product: X, Qty: 2, Price: $ 10.00
      Order Total: $ 20.00

Summary report: a fixed-width product/quantity table followed by the
total revenue of shipped orders.  Per-item and per-order money is
always two decimals; the summary revenue keeps its native ``Decimal``
precision.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING

from ..core.models import Order, exact_arithmetic

if TYPE_CHECKING:
    from ..aggregation.engine import AggregationResult

_CENT = Decimal("0.01")
_RULE = "-" * 18


def format_money(value: Decimal) -> str:
    """Two-decimal rendering, half-up, at any magnitude."""
    with exact_arithmetic():
        return str(value.quantize(_CENT, rounding=ROUND_HALF_UP))


def render_order_detail(order: Order, order_total: Decimal) -> str:
    """Render one order's detail block (newline-terminated)."""
    lines = [
        f"Order Id: {order.order_id}, Customer: {order.customer}, Status: {order.status}"
    ]
    for item in order.items:
        lines.append(
            f"  Product: {item.product}, Qty: {item.quantity}, "
            f"Price: $ {format_money(item.price)}"
        )
    lines.append(f"  Order Total: $ {format_money(order_total)}")
    return "\n".join(lines) + "\n"


@dataclass(frozen=True)
class RenderedReports:
    detail: str
    summary: str


class ReportFormatter:
    """Builds both report texts from aggregation outputs.

    Parameters
    ----------
    product_column_width : int
        Width the product name column is padded to.  Default 20.
    """

    def __init__(self, *, product_column_width: int = 20) -> None:
        if product_column_width < 1:
            raise ValueError(
                f"product_column_width must be >= 1, got {product_column_width}"
            )
        self._width = product_column_width

    def detail_report(self, per_order_detail: Sequence[str]) -> str:
        return "".join(per_order_detail)

    def summary_report(
        self,
        product_quantities: Mapping[str, int],
        total_revenue: Decimal,
    ) -> str:
        w = self._width
        lines = [
            "Total sale product Quantities:",
            _RULE,
            f"{'Product':<{w}} Quantity",
            _RULE,
        ]
        lines.extend(
            f"{product:<{w}} {quantity}"
            for product, quantity in product_quantities.items()
        )
        lines.append(_RULE)
        lines.append(f"Total Revenue: {total_revenue}")
        return "\n".join(lines) + "\n"

    def format(
        self,
        per_order_detail: Sequence[str],
        product_quantities: Mapping[str, int],
        total_revenue: Decimal,
    ) -> RenderedReports:
        return RenderedReports(
            detail=self.detail_report(per_order_detail),
            summary=self.summary_report(product_quantities, total_revenue),
        )

    def format_result(self, result: AggregationResult) -> RenderedReports:
        return self.format(
            result.per_order_detail,
            result.product_quantities,
            result.total_revenue,
        )


def format_reports(
    per_order_detail: Sequence[str],
    product_quantities: Mapping[str, int],
    total_revenue: Decimal,
) -> RenderedReports:
    """Render both reports with the default layout."""
    return ReportFormatter().format(per_order_detail, product_quantities, total_revenue)
