"""Aggregation engine: concurrent fold of orders into report aggregates.

Orders are split into disjoint contiguous batches and processed on a
bounded thread pool.  Each worker, per item:

1. registers the item's price in the shared :class:`PriceRegistry`
   (first writer wins) and fails the run if it differs from the
   canonical price by more than the tolerance;
2. merges the quantity into the shared :class:`QuantityLedger`;
3. adds ``price * quantity`` to an order-local total.

A fulfilled order then adds its total to the :class:`RevenueAccumulator`.
Detail text is rendered per order and re-sequenced to input order, so
the result does not depend on which worker finished first.

Usage::

    engine = AggregationEngine(max_workers=4)
    result = engine.aggregate(orders)
    result.product_quantities  # {"X": 5}
"""

from __future__ import annotations

import logging
import math
import os
import threading
from collections.abc import Sequence
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from decimal import Decimal

from ..core.errors import PriceConsistencyError
from ..core.models import Order, exact_arithmetic
from ..reporting.formatter import render_order_detail
from .ledger import PriceRegistry, QuantityLedger, RevenueAccumulator

logger = logging.getLogger(__name__)

DEFAULT_PRICE_TOLERANCE = Decimal("0.001")

# Batches per worker; more than one keeps workers busy when order sizes vary.
_BATCHES_PER_WORKER = 4


@dataclass(frozen=True)
class AggregationResult:
    """Outputs of one aggregation run."""

    per_order_detail: list[str]
    product_quantities: dict[str, int]
    total_revenue: Decimal
    order_count: int = 0
    fulfilled_count: int = 0
    item_count: int = 0


@dataclass
class _RunState:
    prices: PriceRegistry = field(default_factory=PriceRegistry)
    quantities: QuantityLedger = field(default_factory=QuantityLedger)
    revenue: RevenueAccumulator = field(default_factory=RevenueAccumulator)
    abort: threading.Event = field(default_factory=threading.Event)


def _partition(count: int, parts: int) -> list[range]:
    """Split ``range(count)`` into at most *parts* contiguous ranges."""
    if count == 0:
        return []
    size = math.ceil(count / max(1, parts))
    return [range(start, min(start + size, count)) for start in range(0, count, size)]


def default_worker_count() -> int:
    """Same default as ``ThreadPoolExecutor``."""
    return min(32, (os.cpu_count() or 1) + 4)


class AggregationEngine:
    """Computes per-order detail, product quantities and shipped revenue.

    Parameters
    ----------
    max_workers:
        Thread pool size.  ``None`` uses :func:`default_worker_count`.
        Never more threads than orders are started.
    price_tolerance:
        Largest allowed absolute difference between a product's price
        and its first-recorded price.
    """

    def __init__(
        self,
        max_workers: int | None = None,
        price_tolerance: Decimal = DEFAULT_PRICE_TOLERANCE,
    ) -> None:
        if max_workers is not None and max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {max_workers}")
        if price_tolerance < 0:
            raise ValueError(f"price_tolerance must be >= 0, got {price_tolerance}")
        self._max_workers = max_workers
        self._tolerance = Decimal(price_tolerance)

    @property
    def price_tolerance(self) -> Decimal:
        return self._tolerance

    def aggregate(self, orders: Sequence[Order]) -> AggregationResult:
        """Aggregate *orders*.

        Raises:
            PriceConsistencyError: A product appears at two prices further
                apart than the tolerance.  The whole run is abandoned.
        """
        if not orders:
            return AggregationResult(
                per_order_detail=[],
                product_quantities={},
                total_revenue=Decimal("0.0"),
            )

        workers = min(self._max_workers or default_worker_count(), len(orders))
        batches = _partition(len(orders), workers * _BATCHES_PER_WORKER)
        state = _RunState()
        details: list[str] = [""] * len(orders)

        logger.info(
            "Aggregating %d orders on %d workers in %d batches",
            len(orders), workers, len(batches),
        )

        with ThreadPoolExecutor(
            max_workers=workers, thread_name_prefix="aggregate"
        ) as pool:
            futures = [
                pool.submit(self._process_batch, orders, batch, state, details)
                for batch in batches
            ]
            done, not_done = wait(futures, return_when=FIRST_EXCEPTION)
            for fut in not_done:
                fut.cancel()
            for fut in done:
                exc = fut.exception()
                if exc is not None:
                    state.abort.set()
                    raise exc

        result = AggregationResult(
            per_order_detail=details,
            product_quantities=state.quantities.snapshot(),
            total_revenue=state.revenue.total,
            order_count=len(orders),
            fulfilled_count=sum(1 for o in orders if o.is_fulfilled),
            item_count=sum(len(o.items) for o in orders),
        )
        logger.info(
            "Aggregated %d orders: %d products, revenue %s",
            result.order_count, len(result.product_quantities), result.total_revenue,
        )
        return result

    # ------------------------------------------------------------------ #
    # Workers                                                              #
    # ------------------------------------------------------------------ #

    def _process_batch(
        self,
        orders: Sequence[Order],
        batch: range,
        state: _RunState,
        details: list[str],
    ) -> None:
        for index in batch:
            if state.abort.is_set():
                return
            try:
                details[index] = self._process_order(orders[index], state)
            except PriceConsistencyError:
                state.abort.set()
                raise

    def _process_order(self, order: Order, state: _RunState) -> str:
        order_total = Decimal("0")
        for item in order.items:
            canonical = state.prices.register(item.product, item.price)
            with exact_arithmetic():
                drift = abs(canonical - item.price)
            if drift > self._tolerance:
                logger.error(
                    "Price mismatch in order %s for %r: %s vs recorded %s",
                    order.order_id, item.product, item.price, canonical,
                )
                raise PriceConsistencyError(
                    item.product, found=item.price, previous=canonical
                )
            state.quantities.merge(item.product, item.quantity)
            with exact_arithmetic():
                order_total += item.line_total

        if order.is_fulfilled:
            state.revenue.add(order_total)

        return render_order_detail(order, order_total)


def aggregate(
    orders: Sequence[Order],
    *,
    max_workers: int | None = None,
    price_tolerance: Decimal = DEFAULT_PRICE_TOLERANCE,
) -> AggregationResult:
    """Aggregate *orders* with a one-off :class:`AggregationEngine`."""
    engine = AggregationEngine(max_workers=max_workers, price_tolerance=price_tolerance)
    return engine.aggregate(orders)
