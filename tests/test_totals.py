# tests/test_totals.py
from __future__ import annotations

from decimal import Decimal

import pytest

from tradedocs.models import Currency, LineItem, MonetaryDocument, coerce_number
from tradedocs.services.totals import (
    add_line_item,
    compute_totals,
    format_currency,
    normalize_invoice_fields,
    remove_line_item,
    totals_for,
    update_line_item,
)


def test_rounds_each_line_before_summing():
    items = [{"quantity": 2, "rate": 50.00}, {"quantity": 1, "rate": 25.005}]
    t = compute_totals(items, True, 20)
    assert t.subtotal == Decimal("125.00")
    assert t.vat_amount == Decimal("25.00")
    assert t.total == Decimal("150.00")


def test_line_order_does_not_change_totals():
    items = [
        {"quantity": 3, "rate": 1.333},
        {"quantity": 7.5, "rate": 19.99},
        {"quantity": 1, "rate": 0.015},
    ]
    forward = compute_totals(items, True, 22)
    backward = compute_totals(list(reversed(items)), True, 22)
    assert forward == backward


def test_vat_disabled_ignores_rate():
    t = compute_totals([{"quantity": 4, "rate": 10}], False, 22)
    assert t.vat_amount == Decimal("0")
    assert t.total == t.subtotal == Decimal("40.00")


def test_empty_list_gives_zero_totals():
    t = compute_totals([], True, 20)
    assert (t.subtotal, t.vat_amount, t.total) == (Decimal("0"), Decimal("0"), Decimal("0"))


@pytest.mark.parametrize("bad", [None, "", "abc", float("nan"), float("inf"), True, [1]])
def test_non_numeric_inputs_count_as_zero(bad):
    assert coerce_number(bad) == 0.0
    t = compute_totals([{"quantity": bad, "rate": 10}, {"quantity": 1, "rate": bad}], True, bad)
    assert t.total == Decimal("0")


def test_numeric_strings_are_accepted():
    t = compute_totals([{"quantity": "2", "rate": " 12.5 "}], True, "10")
    assert t.subtotal == Decimal("25.00")
    assert t.vat_amount == Decimal("2.50")


def test_stored_amount_is_not_trusted():
    doc = MonetaryDocument.from_record({
        "lineItems": [{"quantity": 2, "rate": 3, "amount": 999}],
    })
    assert doc.line_items[0].amount == Decimal("6.00")
    assert totals_for(doc).subtotal == Decimal("6.00")


def test_format_currency():
    assert format_currency(Decimal("150"), Currency.EUR) == "€150.00"
    assert format_currency(1234.5, "USD") == "$1234.50"
    assert format_currency("junk", "EUR") == "€0.00"


def test_update_line_item_recomputes_amount():
    item = LineItem(description="Beef", quantity=2, rate=10)
    item = update_line_item(item, "quantity", "3")
    assert item.quantity == 3.0
    assert item.amount == Decimal("30.00")

    item = update_line_item(item, "rate", "not a number")
    assert item.rate == 0.0
    assert item.amount == Decimal("0.00")


def test_amount_is_not_editable():
    with pytest.raises(ValueError):
        update_line_item(LineItem(), "amount", 5)


def test_last_line_item_cannot_be_removed():
    items = [LineItem(description="only")]
    assert remove_line_item(items, 0) == items

    items = add_line_item(items)
    assert len(items) == 2
    assert [it.description for it in remove_line_item(items, 0)] == [""]


def test_normalize_invoice_fields_recomputes_amounts():
    fields = {
        "vatRate": "22",
        "lineItems": [{"description": "x", "quantity": 2, "rate": 2.5, "amount": 1}],
    }
    out = normalize_invoice_fields(fields)
    assert out["vatRate"] == 22.0
    assert out["lineItems"][0]["amount"] == 5.0
    assert out["lineItems"][0]["description"] == "x"


@pytest.mark.parametrize("fields", [{}, {"lineItems": []}, {"lineItems": None}, {"lineItems": "junk"}])
def test_saved_invoice_always_has_one_line_item(fields):
    out = normalize_invoice_fields(fields)
    assert out["lineItems"] == [LineItem().to_record()]
    assert out["vatRate"] == 0.0


def test_negative_quantity_rate_and_vat_are_clamped_to_zero():
    out = normalize_invoice_fields({"vatRate": -22, "lineItems": [{"quantity": -3, "rate": 10}]})
    item = out["lineItems"][0]
    assert item["quantity"] == 0.0
    assert item["rate"] == 10.0
    assert item["amount"] == 0.0
    assert out["vatRate"] == 0.0

    t = compute_totals([{"quantity": 2, "rate": 10}], True, -20)
    assert t.vat_amount == Decimal("0")
    assert t.total == Decimal("20.00")

    assert compute_totals([{"quantity": 2, "rate": -10}], False, 0).subtotal == Decimal("0")


def test_update_line_item_clamps_negatives():
    item = update_line_item(LineItem(quantity=2, rate=10), "rate", "-5")
    assert item.rate == 0.0
    assert item.amount == Decimal("0.00")
