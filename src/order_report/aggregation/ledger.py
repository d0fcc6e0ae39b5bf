"""Concurrency-safe shared state for the aggregation engine.

Every worker of an aggregation run writes into the same three objects:

PriceRegistry       product -> first-recorded unit price
QuantityLedger      product -> cumulative quantity
RevenueAccumulator  running revenue of fulfilled orders

Merge contract: each update is a single atomic step (insert-if-absent,
add-to-key, add-to-total).  Integer and ``Decimal`` addition are
commutative and associative, so any interleaving of workers yields the
same final values.  Swapping the locking strategy must keep that
contract and nothing else.
"""

from __future__ import annotations

import threading
from decimal import Decimal

from ..core.models import exact_arithmetic

_DEFAULT_STRIPES = 16


class _StripedLocks:
    """A fixed pool of locks; a key always maps to the same lock."""

    def __init__(self, stripes: int = _DEFAULT_STRIPES) -> None:
        if stripes < 1:
            raise ValueError(f"stripes must be >= 1, got {stripes}")
        self._locks = tuple(threading.Lock() for _ in range(stripes))

    def for_key(self, key: str) -> threading.Lock:
        return self._locks[hash(key) % len(self._locks)]


class PriceRegistry:
    """First-writer-wins registry of canonical unit prices.

    Thread-safe.  :meth:`register` is a single insert-if-absent: when two
    workers race on a product's first sighting exactly one price is
    stored and both callers get that same price back.
    """

    def __init__(self, stripes: int = _DEFAULT_STRIPES) -> None:
        self._locks = _StripedLocks(stripes)
        self._prices: dict[str, Decimal] = {}

    def register(self, product: str, price: Decimal) -> Decimal:
        """Record *price* if *product* is new; return the canonical price."""
        with self._locks.for_key(product):
            return self._prices.setdefault(product, price)

    def __len__(self) -> int:
        return len(self._prices)


class QuantityLedger:
    """Per-product quantity totals, merged by sum.

    Thread-safe.  Products keep the order in which they were first
    merged, which is the iteration order of :meth:`snapshot`.
    """

    def __init__(self, stripes: int = _DEFAULT_STRIPES) -> None:
        self._locks = _StripedLocks(stripes)
        # Guards key insertion so the dict never resizes under a reader.
        self._insert_lock = threading.Lock()
        self._totals: dict[str, int] = {}

    def merge(self, product: str, quantity: int) -> int:
        """Add *quantity* to *product* and return the new total."""
        with self._locks.for_key(product):
            if product not in self._totals:
                with self._insert_lock:
                    self._totals[product] = 0
            total = self._totals[product] + quantity
            self._totals[product] = total
            return total

    def snapshot(self) -> dict[str, int]:
        with self._insert_lock:
            return dict(self._totals)

    def __len__(self) -> int:
        return len(self._totals)


class RevenueAccumulator:
    """Running ``Decimal`` total of fulfilled-order revenue.  Thread-safe.

    Starts at ``0.0`` so an all-unshipped run still reports one decimal.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._total = Decimal("0.0")

    def add(self, amount: Decimal) -> None:
        with self._lock, exact_arithmetic():
            self._total += amount

    @property
    def total(self) -> Decimal:
        with self._lock:
            return self._total
