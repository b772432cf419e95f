# tradedocs/services/totals.py
from __future__ import annotations

from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Any, Iterable, List

from tradedocs.models import (
    Currency,
    LineItem,
    MonetaryDocument,
    coerce_non_negative,
    coerce_number,
    line_amount,
    round2,
)

CURRENCY_SYMBOLS = {
    Currency.EUR: "€",
    Currency.USD: "$",
}

ZERO = Decimal("0.00")


@dataclass(frozen=True)
class DocumentTotals:
    subtotal: Decimal = ZERO
    vat_amount: Decimal = ZERO
    total: Decimal = ZERO

    def as_dict(self) -> dict:
        return {
            "subtotal": str(self.subtotal),
            "vatAmount": str(self.vat_amount),
            "total": str(self.total),
        }


def compute_totals(line_items: Iterable[Any], vat_enabled: bool, vat_rate_percent: Any) -> DocumentTotals:
    """
    Subtotal is the sum of per-item amounts, each recomputed from
    quantity x rate and rounded to cents. Items may be LineItem objects or
    raw store dicts. An empty list yields all-zero totals.
    """
    subtotal = ZERO
    for it in (line_items or []):
        if isinstance(it, LineItem):
            subtotal += line_amount(it.quantity, it.rate)
        elif isinstance(it, dict):
            subtotal += line_amount(it.get("quantity"), it.get("rate"))

    vat_amount = ZERO
    if vat_enabled:
        vat_amount = round2(subtotal * Decimal(repr(coerce_non_negative(vat_rate_percent))) / Decimal(100))

    return DocumentTotals(subtotal=subtotal, vat_amount=vat_amount, total=subtotal + vat_amount)


def totals_for(doc: MonetaryDocument) -> DocumentTotals:
    return compute_totals(doc.line_items, doc.vat_enabled, doc.vat_rate_percent)


def _currency(value: Currency | str) -> Currency:
    if isinstance(value, Currency):
        return value
    return Currency.USD if str(value).strip().upper() == "USD" else Currency.EUR


def format_currency(amount: Any, currency: Currency | str = Currency.EUR) -> str:
    symbol = CURRENCY_SYMBOLS[_currency(currency)]
    if isinstance(amount, Decimal):
        value = round2(amount)
    else:
        value = round2(coerce_number(amount))
    return f"{symbol}{value:.2f}"


# =========================
# Line-item editing
# =========================

def update_line_item(item: LineItem, field_name: str, value: Any) -> LineItem:
    """
    Return a copy of item with one field changed. quantity and rate are
    coerced to numbers and amount follows them.
    """
    if field_name in ("quantity", "rate"):
        changed = replace(item, **{field_name: coerce_non_negative(value)})
        return replace(changed, amount=line_amount(changed.quantity, changed.rate))
    if field_name == "amount":
        raise ValueError("amount is derived from quantity and rate")
    if field_name == "unit":
        return LineItem.from_record({**item.to_record(), "unit": value})
    if field_name == "description":
        return replace(item, description="" if value is None else str(value))
    raise ValueError(f"Unknown line item field: {field_name!r}")


def add_line_item(items: List[LineItem]) -> List[LineItem]:
    return [*items, LineItem()]


def remove_line_item(items: List[LineItem], index: int) -> List[LineItem]:
    # a document always keeps at least one line
    if len(items) <= 1:
        return list(items)
    return [it for i, it in enumerate(items) if i != index]


def normalize_invoice_fields(fields: dict) -> dict:
    """
    Always recompute every line amount from quantity x rate before save.
    (The UI computes too, but the stored record must stay consistent.)
    """
    items = fields.get("lineItems")
    if not isinstance(items, list):
        items = []

    normalized = []
    for it in items:
        li = LineItem.from_record(it)
        normalized.append({**(it if isinstance(it, dict) else {}), **li.to_record()})

    # a stored document always has at least one line
    fields["lineItems"] = normalized or [LineItem().to_record()]
    fields["vatRate"] = coerce_non_negative(fields.get("vatRate"))
    return fields
