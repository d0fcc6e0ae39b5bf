"""Validated order entities.

``Item`` and ``Order`` are the canonical records handed to the
aggregation engine.  Both validate on construction *and* on attribute
assignment: a rejected update raises ``ValidationError`` and leaves the
previous value in place, so an entity the engine sees is always valid.
"""

from __future__ import annotations

import decimal
from contextlib import AbstractContextManager
from decimal import Decimal
from typing import Any

import pydantic
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PrivateAttr,
    computed_field,
    field_validator,
)
from pydantic_core import PydanticCustomError

from .errors import ValidationError

SHIPPED_STATUS = "shipped"

# Unbounded precision: money is only added, multiplied and quantized,
# which stay exact and never hit the 28-digit default context.
_EXACT = decimal.Context(
    prec=decimal.MAX_PREC,
    Emax=decimal.MAX_EMAX,
    Emin=decimal.MIN_EMIN,
    traps=[decimal.InvalidOperation, decimal.DivisionByZero, decimal.Overflow],
)


def exact_arithmetic() -> AbstractContextManager[decimal.Context]:
    """Context manager for exact ``Decimal`` money arithmetic."""
    return decimal.localcontext(_EXACT)


_VALUE_ERROR_PREFIX = "Value error, "


def describe_errors(exc: pydantic.ValidationError) -> str:
    """Flatten pydantic error details into ``loc: message`` pairs."""
    parts: list[str] = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err["loc"])
        msg = err["msg"]
        if msg.startswith(_VALUE_ERROR_PREFIX):
            msg = msg[len(_VALUE_ERROR_PREFIX):]
        parts.append(f"{loc}: {msg}" if loc else msg)
    return "; ".join(parts)


def _require_text(value: str, field: str) -> str:
    if not value.strip():
        raise ValueError(f"{field} cannot be empty")
    return value


class _ValidatedModel(BaseModel):
    """Base for entities that re-raise pydantic failures as ``ValidationError``."""

    model_config = ConfigDict(validate_assignment=True, populate_by_name=True)

    def __init__(self, **data: Any) -> None:
        try:
            super().__init__(**data)
        except pydantic.ValidationError as exc:
            raise ValidationError(
                f"Invalid {type(self).__name__}: {describe_errors(exc)}"
            ) from exc

    def __setattr__(self, name: str, value: Any) -> None:
        try:
            super().__setattr__(name, value)
        except pydantic.ValidationError as exc:
            raise ValidationError(
                f"Invalid {type(self).__name__}.{name}: {describe_errors(exc)}"
            ) from exc


# ---------------------------------------------------------------------------
# Item
# ---------------------------------------------------------------------------

class Item(_ValidatedModel):
    """One product line of an order."""

    product: str  # Stored trimmed
    quantity: int = Field(strict=True)
    price: Decimal  # Unit price

    @field_validator("product")
    @classmethod
    def product_must_not_be_blank(cls, v: str) -> str:
        return _require_text(v, "product").strip()

    @field_validator("quantity")
    @classmethod
    def quantity_must_be_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError(f"quantity must be positive, got {v}")
        return v

    @field_validator("price", mode="before")
    @classmethod
    def price_must_be_numeric(cls, v: Any) -> Any:
        # Numeric strings and booleans would otherwise coerce silently.
        if isinstance(v, (str, bool)):
            raise PydanticCustomError(
                "decimal_type", "price must be a number, got {kind}",
                {"kind": type(v).__name__},
            )
        return v

    @field_validator("price")
    @classmethod
    def price_must_not_be_negative(cls, v: Decimal) -> Decimal:
        if v < 0:
            raise ValueError(f"price cannot be negative, got {v}")
        return v

    @property
    def line_total(self) -> Decimal:
        with exact_arithmetic():
            return self.price * self.quantity


# ---------------------------------------------------------------------------
# Order
# ---------------------------------------------------------------------------

class Order(_ValidatedModel):
    """A customer order.

    ``order_total`` is derived from the items once, at construction.
    Mutating an ``Item`` in place afterwards does *not* update it;
    reassigning ``order.items`` re-validates the list and recomputes the
    total.  ``is_fulfilled`` is derived from ``status`` on every read.
    """

    order_id: str = Field(alias="orderId")
    customer: str
    items: list[Item]
    status: str

    _order_total: Decimal = PrivateAttr(default=Decimal("0"))

    @field_validator("order_id")
    @classmethod
    def order_id_must_not_be_blank(cls, v: str) -> str:
        return _require_text(v, "orderId")

    @field_validator("customer")
    @classmethod
    def customer_must_not_be_blank(cls, v: str) -> str:
        return _require_text(v, "customer")

    @field_validator("status")
    @classmethod
    def status_must_not_be_blank(cls, v: str) -> str:
        return _require_text(v, "status")

    @field_validator("items")
    @classmethod
    def items_must_not_be_empty(cls, v: list[Item]) -> list[Item]:
        if not v:
            raise ValueError("items cannot be empty")
        return v

    def model_post_init(self, __context: Any) -> None:
        self._order_total = self._compute_total()

    def __setattr__(self, name: str, value: Any) -> None:
        super().__setattr__(name, value)
        if name == "items":
            self._order_total = self._compute_total()

    def _compute_total(self) -> Decimal:
        with exact_arithmetic():
            return sum((item.line_total for item in self.items), Decimal("0"))

    @computed_field(alias="orderTotal")  # type: ignore[prop-decorator]
    @property
    def order_total(self) -> Decimal:
        return self._order_total

    @property
    def is_fulfilled(self) -> bool:
        """True when the status is ``shipped``, ignoring case."""
        return self.status.casefold() == SHIPPED_STATUS
