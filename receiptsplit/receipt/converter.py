"""Convert raw OCR / manual-entry receipt records into canonical Items."""

from __future__ import annotations

import uuid
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from receiptsplit.domain.item import Item, SplitMode
from receiptsplit.domain.money import ZERO, non_negative_amount
from receiptsplit.runtime.logging import get_logger

logger = get_logger(__name__)

# Ontario HST. Only a placeholder estimate until the receipt's real tax is confirmed.
DEFAULT_TAX_RATE = Decimal("0.13")


def _new_item_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class RawReceiptItem:
    """An item as supplied by OCR or typed in by hand."""

    name: str
    price: Decimal
    quantity: int = 1
    has_tax: bool = False
    discount: Decimal | None = None
    deposit: Decimal | None = None
    tax_amount: Decimal | None = None

    def __post_init__(self) -> None:
        if self.quantity < 1:
            raise ValueError(f"quantity must be a positive integer, got {self.quantity!r}")

    @property
    def effective_price(self) -> Decimal:
        return self.price - (self.discount or ZERO) + (self.deposit or ZERO)

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> RawReceiptItem:
        """Build from an OCR response record (``{name, price, quantity?, hasTax?, ...}``).

        Raises:
            ValueError: If amounts are negative/non-finite or quantity is not positive.
        """
        price = non_negative_amount(data.get("price"), "price", optional=False)
        assert price is not None
        quantity_raw = data.get("quantity")
        return cls(
            name=str(data.get("name") or "").strip(),
            price=price,
            quantity=int(quantity_raw) if quantity_raw else 1,
            has_tax=data.get("hasTax", data.get("has_tax")) is True,
            discount=non_negative_amount(data.get("discount"), "discount"),
            deposit=non_negative_amount(data.get("deposit"), "deposit"),
            tax_amount=non_negative_amount(data.get("taxAmount", data.get("tax_amount")), "taxAmount"),
        )


def parse_raw_items(payload: Any) -> list[RawReceiptItem]:
    """Accept either ``{"items": [...]}`` (OCR response) or a bare list."""
    records = payload.get("items", []) if isinstance(payload, dict) else payload
    if not isinstance(records, list):
        raise ValueError("Expected a list of items")
    if not all(isinstance(record, Mapping) for record in records):
        raise ValueError("Each item must be a JSON object")
    return [RawReceiptItem.from_dict(record) for record in records]


@dataclass(frozen=True)
class ReceiptSummary:
    """Receipt-level totals estimated from raw items."""

    subtotal: Decimal
    total_tax: Decimal
    total_discount: Decimal
    total_deposit: Decimal
    grand_total: Decimal


def convert_raw_item(
    raw: RawReceiptItem,
    default_tax_rate: Decimal = DEFAULT_TAX_RATE,
    id_factory: Callable[[], str] = _new_item_id,
) -> Item:
    """Map a raw record into a fresh, unassigned Item in equal mode.

    Taxable items without an explicit tax amount get an estimate of
    ``effective_price * default_tax_rate``.
    """
    tax_amount: Decimal | None = None
    if raw.has_tax:
        if raw.tax_amount is not None:
            tax_amount = raw.tax_amount
        else:
            tax_amount = raw.effective_price * default_tax_rate
            logger.debug("Estimated tax %s for '%s' at rate %s", tax_amount, raw.name, default_tax_rate)

    return Item(
        id=id_factory(),
        name=raw.name,
        price=raw.price,
        quantity=raw.quantity or 1,
        has_tax=raw.has_tax,
        tax_amount=tax_amount,
        discount=raw.discount,
        deposit=raw.deposit,
        split_mode=SplitMode.EQUAL,
        assignments=[],
    )


def convert_raw_items(
    raws: Iterable[RawReceiptItem],
    default_tax_rate: Decimal = DEFAULT_TAX_RATE,
    id_factory: Callable[[], str] = _new_item_id,
) -> list[Item]:
    return [convert_raw_item(raw, default_tax_rate=default_tax_rate, id_factory=id_factory) for raw in raws]


def summarize_raw_items(
    raws: Iterable[RawReceiptItem],
    default_tax_rate: Decimal = DEFAULT_TAX_RATE,
) -> ReceiptSummary:
    """Estimate receipt totals from raw items.

    Tax is estimated on ``price * quantity`` of taxable items, before
    discounts and deposits, so it can differ slightly from the sum of the
    per-item estimates made by convert_raw_item.
    """
    subtotal = ZERO
    taxable = ZERO
    total_discount = ZERO
    total_deposit = ZERO

    for raw in raws:
        subtotal += raw.line_total
        total_discount += raw.discount or ZERO
        total_deposit += raw.deposit or ZERO
        if raw.has_tax:
            taxable += raw.line_total

    total_tax = taxable * default_tax_rate
    return ReceiptSummary(
        subtotal=subtotal,
        total_tax=total_tax,
        total_discount=total_discount,
        total_deposit=total_deposit,
        grand_total=subtotal + total_tax + total_deposit - total_discount,
    )
