# tests/test_models.py
from __future__ import annotations

from datetime import date
from decimal import Decimal

from tradedocs.models import (
    DEFAULT_CONTAINER_TYPE,
    DEFAULT_INSPECTION_TIME,
    Currency,
    DocumentType,
    InspectionRequest,
    MonetaryDocument,
    ShippingTerm,
    Supplier,
    Unit,
    round2,
)


def test_monetary_document_defaults_from_empty_record():
    doc = MonetaryDocument.from_record({})
    assert doc.document_type is DocumentType.INVOICE
    assert doc.currency is Currency.EUR
    assert doc.shipping_term is ShippingTerm.CNF
    assert doc.vat_enabled is False
    assert doc.line_items == []
    assert doc.party_from.name == ""
    assert doc.bank_details.iban == ""
    assert doc.date is None


def test_new_document_starts_with_one_line():
    assert len(MonetaryDocument().line_items) == 1


def test_enum_values_and_names_are_accepted():
    doc = MonetaryDocument.from_record({
        "documentType": "PROFORMA",
        "currency": "USD",
        "shippingType": "CIF",
        "lineItems": [{"unit": "KG"}, {"unit": "bogus"}],
    })
    assert doc.is_proforma
    assert doc.currency is Currency.USD
    assert doc.shipping_term is ShippingTerm.CIF
    assert [it.unit for it in doc.line_items] == [Unit.KG, Unit.NONE]


def test_record_round_trip_keeps_store_keys():
    rec = {
        "invoiceNumber": "7",
        "date": "2024-01-31",
        "vatEnabled": "true",
        "vatRate": "22",
        "from": {"name": "A", "piva": "IT1"},
        "to": {"name": "B", "piva": "ignored"},
        "lineItems": [{"description": "d", "quantity": 2, "rate": 1.5}],
        "bankDetails": {"bankName": "X"},
    }
    out = MonetaryDocument.from_record(rec).to_record()
    assert out["date"] == "2024-01-31"
    assert out["vatEnabled"] is True
    assert out["vatRate"] == 22.0
    assert out["from"]["piva"] == "IT1"
    assert "piva" not in out["to"]
    assert out["lineItems"][0]["amount"] == 3.0
    assert out["bankDetails"]["bankName"] == "X"


def test_inspection_request_defaults():
    req = InspectionRequest.from_record({"inspectionDate": "2024-11-18T00:00:00Z", "inspectionTime": "  "})
    assert req.inspection_date == date(2024, 11, 18)
    assert req.inspection_time == DEFAULT_INSPECTION_TIME
    assert req.container_type == DEFAULT_CONTAINER_TYPE


def test_supplier_keys():
    sup = Supplier.from_record({"zipCode": "41121", "vatNumber": "IT9", "stamp": None})
    assert sup.zip_code == "41121"
    assert sup.vat_number == "IT9"
    assert sup.stamp == ""
    assert "stamp" not in sup.to_record()


def test_round2_uses_half_up_on_exact_value():
    assert round2(Decimal("0.125")) == Decimal("0.13")
    assert round2(25.005) == Decimal("25.00")
