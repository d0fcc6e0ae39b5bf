"""Order document loading.

Turns the input JSON document into validated :class:`Order` objects.
Two failure classes are kept apart:

* ``ParseError``: the document is not JSON, is not an array of
  objects, or a record is missing a field or has a wrong-typed one.
* ``ValidationError``: a field has the right type but breaks a
  business rule (blank customer, zero quantity, negative price, ...).

JSON numbers with a fraction are decoded straight to ``Decimal`` so the
written precision of each price survives into the reports.
"""

from __future__ import annotations

import json
import logging
import os
from decimal import Decimal
from pathlib import Path
from typing import Any

import pydantic

from ..core.errors import InputFileError, ParseError, ValidationError
from ..core.models import Order, describe_errors

logger = logging.getLogger(__name__)

# pydantic error types raised by our own field validators
_RULE_ERROR_TYPES = frozenset({"value_error"})


def check_input_file(path: str | Path) -> Path:
    """Make sure *path* names a readable regular file."""
    p = Path(path)
    if not p.exists():
        raise InputFileError(f"Input file '{path}' does not exist")
    if not p.is_file():
        raise InputFileError(f"'{path}' is not a file")
    if not os.access(p, os.R_OK):
        raise InputFileError(f"Cannot read input file '{path}'")
    return p


def _reject_constant(name: str) -> Any:
    raise ValueError(f"unsupported JSON constant {name}")


def _decode(text: str) -> Any:
    try:
        return json.loads(text, parse_float=Decimal, parse_constant=_reject_constant)
    except json.JSONDecodeError as exc:
        raise ParseError(
            f"Malformed JSON at line {exc.lineno} column {exc.colno}: {exc.msg}"
        ) from exc
    except ValueError as exc:
        raise ParseError(f"Malformed JSON: {exc}") from exc


def _label(index: int, record: dict[str, Any]) -> str:
    order_id = record.get("orderId")
    if isinstance(order_id, str) and order_id.strip():
        return f"record {index} (orderId {order_id!r})"
    return f"record {index}"


def _build_order(index: int, record: Any) -> Order:
    if not isinstance(record, dict):
        raise ParseError(
            f"record {index}: expected an object, got {type(record).__name__}"
        )
    try:
        return Order.model_validate(record)
    except pydantic.ValidationError as exc:
        detail = describe_errors(exc)
        kinds = {err["type"] for err in exc.errors()}
        if kinds <= _RULE_ERROR_TYPES:
            raise ValidationError(f"{_label(index, record)}: {detail}") from exc
        raise ParseError(f"{_label(index, record)}: {detail}") from exc


def parse_orders(text: str) -> list[Order]:
    """Parse a JSON array of order objects.

    Raises:
        ParseError: Malformed JSON, wrong document shape or field types.
        ValidationError: A record breaks an Item/Order rule.
    """
    document = _decode(text)
    if not isinstance(document, list):
        raise ParseError(
            f"Expected a JSON array of orders, got {type(document).__name__}"
        )
    return [_build_order(i, record) for i, record in enumerate(document)]


def load_orders(path: str | Path) -> list[Order]:
    """Check, read and parse the order file at *path*."""
    p = check_input_file(path)
    try:
        text = p.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise InputFileError(f"Cannot read input file '{path}': {exc}") from exc

    orders = parse_orders(text)
    logger.info("Loaded %d orders from %s", len(orders), p)
    return orders
