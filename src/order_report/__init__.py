"""Order report: validate a batch of orders and report on them.

Key components
--------------
Item, Order          Validated order entities (``core.models``)
load_orders          JSON order file -> ``list[Order]`` (``ingest.loader``)
AggregationEngine    Concurrent per-product / revenue fold (``aggregation.engine``)
ReportFormatter      Detail and summary text (``reporting.formatter``)
run                  End-to-end pipeline for one input file (``main``)
"""

__version__ = "0.1.0"
