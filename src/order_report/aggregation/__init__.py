"""Aggregation engine and its concurrency-safe ledgers."""

from .engine import AggregationEngine, AggregationResult, aggregate
from .ledger import PriceRegistry, QuantityLedger, RevenueAccumulator

__all__ = [
    "AggregationEngine",
    "AggregationResult",
    "aggregate",
    "PriceRegistry",
    "QuantityLedger",
    "RevenueAccumulator",
]
