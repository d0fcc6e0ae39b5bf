"""Shared fixtures for the order-report test suite."""

from __future__ import annotations

import json
from decimal import Decimal
from pathlib import Path

import pytest

from order_report.core.models import Item, Order


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------

@pytest.fixture
def widget_item() -> Item:
    """Return two widgets at 10.00 each."""
    return Item(product="Widget", quantity=2, price=Decimal("10.00"))


@pytest.fixture
def shipped_order(widget_item: Item) -> Order:
    return Order(
        order_id="O1",
        customer="Alice",
        status="shipped",
        items=[widget_item, Item(product="Gadget", quantity=1, price=Decimal("5.50"))],
    )


@pytest.fixture
def scenario_orders() -> list[Order]:
    """O1 shipped with 2 X, O2 pending with 3 X, all at 10.0."""
    return [
        Order(
            order_id="O1", customer="A", status="shipped",
            items=[Item(product="X", quantity=2, price=Decimal("10.0"))],
        ),
        Order(
            order_id="O2", customer="B", status="pending",
            items=[Item(product="X", quantity=3, price=Decimal("10.0"))],
        ),
    ]


# ---------------------------------------------------------------------------
# Input documents
# ---------------------------------------------------------------------------

SCENARIO_DOCUMENT = [
    {
        "orderId": "O1",
        "customer": "A",
        "status": "shipped",
        "items": [{"product": "X", "quantity": 2, "price": 10.0}],
    },
    {
        "orderId": "O2",
        "customer": "B",
        "status": "pending",
        "items": [{"product": "X", "quantity": 3, "price": 10.0}],
    },
]


@pytest.fixture
def scenario_document() -> list[dict]:
    return json.loads(json.dumps(SCENARIO_DOCUMENT))


@pytest.fixture
def orders_file(tmp_path: Path, scenario_document: list[dict]) -> Path:
    """Write the two-order scenario to a JSON file and return its path."""
    path = tmp_path / "orders.json"
    path.write_text(json.dumps(scenario_document), encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep ORDER_REPORT_* variables from the host out of the tests."""
    import os

    for key in list(os.environ):
        if key.startswith("ORDER_REPORT_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture(autouse=True)
def _reset_logging():
    """Drop the handler run() installs; it may point at a closed stream."""
    import logging

    from order_report.observability import logger as log_module

    yield
    if log_module._handler is not None:
        logging.getLogger().removeHandler(log_module._handler)
        log_module._handler = None
