# tradedocs/models.py
from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Any, List, Optional, Type, TypeVar

# Store records are schemaless dicts with camelCase keys. Every type below
# builds itself from such a dict with a default for every optional field,
# so rendering code never has to probe for presence.

CENT = Decimal("0.01")

DEFAULT_CONTAINER_TYPE = "40' dry high cube"
DEFAULT_INSPECTION_TIME = "08:00"


class DocumentType(str, Enum):
    INVOICE = "invoice"
    PROFORMA = "proforma"


class Currency(str, Enum):
    EUR = "EUR"
    USD = "USD"


class ShippingTerm(str, Enum):
    CNF = "C&F"
    CIF = "CIF"


class Unit(str, Enum):
    NONE = "None"
    KG = "KG"


E = TypeVar("E", bound=Enum)


# =========================
# Coercion helpers
# =========================

def coerce_number(value: Any) -> float:
    """
    Non-numeric, missing, NaN and infinite values all become 0.0.
    """
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        n = float(str(value).strip()) if isinstance(value, str) else float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(n) or math.isinf(n):
        return 0.0
    return n


def coerce_non_negative(value: Any) -> float:
    # quantities, rates and VAT percentages are never below zero
    return max(0.0, coerce_number(value))


def round2(value: float | Decimal) -> Decimal:
    # Floats are rounded from their exact binary value, so 25.005 (stored as
    # 25.00499999...) rounds to 25.00.
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def line_amount(quantity: Any, rate: Any) -> Decimal:
    return round2(coerce_non_negative(quantity) * coerce_non_negative(rate))


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def _bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes", "on")
    return bool(value)


def _enum(cls: Type[E], value: Any, default: E) -> E:
    if isinstance(value, cls):
        return value
    raw = _text(value).strip()
    for member in cls:
        if raw == member.value or raw.upper() == member.name:
            return member
    return default


def parse_date(value: Any) -> Optional[date]:
    if isinstance(value, date):
        return value
    raw = _text(value).strip()
    if not raw:
        return None
    try:
        return date.fromisoformat(raw[:10])
    except ValueError:
        return None


def _iso(d: Optional[date]) -> str:
    return d.isoformat() if d else ""


def _dict(value: Any) -> dict:
    return value if isinstance(value, dict) else {}


# =========================
# Line items / monetary documents
# =========================

@dataclass
class LineItem:
    description: str = ""
    quantity: float = 0.0
    unit: Unit = Unit.NONE
    rate: float = 0.0
    amount: Decimal = Decimal("0.00")

    @classmethod
    def from_record(cls, rec: Any) -> "LineItem":
        rec = _dict(rec)
        quantity = coerce_non_negative(rec.get("quantity"))
        rate = coerce_non_negative(rec.get("rate"))
        # amount is derived; the stored value is never trusted
        return cls(
            description=_text(rec.get("description")),
            quantity=quantity,
            unit=_enum(Unit, rec.get("unit"), Unit.NONE),
            rate=rate,
            amount=line_amount(quantity, rate),
        )

    def to_record(self) -> dict:
        return {
            "description": self.description,
            "quantity": self.quantity,
            "unit": self.unit.value,
            "rate": self.rate,
            "amount": float(self.amount),
        }


@dataclass
class InvoiceParty:
    name: str = ""
    address: str = ""
    email: str = ""
    phone: str = ""
    country: str = ""
    piva: str = ""
    cf: str = ""

    @classmethod
    def from_record(cls, rec: Any) -> "InvoiceParty":
        rec = _dict(rec)
        return cls(**{k: _text(rec.get(k)) for k in ("name", "address", "email", "phone", "country", "piva", "cf")})

    def to_record(self, *, with_tax_ids: bool = True) -> dict:
        out = {
            "name": self.name,
            "address": self.address,
            "email": self.email,
            "phone": self.phone,
            "country": self.country,
        }
        if with_tax_ids:
            out["piva"] = self.piva
            out["cf"] = self.cf
        return out


@dataclass
class BankDetails:
    bank_name: str = ""
    account_name: str = ""
    iban: str = ""
    bic: str = ""

    @classmethod
    def from_record(cls, rec: Any) -> "BankDetails":
        rec = _dict(rec)
        return cls(
            bank_name=_text(rec.get("bankName")),
            account_name=_text(rec.get("accountName")),
            iban=_text(rec.get("iban")),
            bic=_text(rec.get("bic")),
        )

    def to_record(self) -> dict:
        return {
            "bankName": self.bank_name,
            "accountName": self.account_name,
            "iban": self.iban,
            "bic": self.bic,
        }


@dataclass
class MonetaryDocument:
    id: str = ""
    invoice_number: str = ""
    date: Optional[date] = None
    document_type: DocumentType = DocumentType.INVOICE
    currency: Currency = Currency.EUR
    shipping_term: ShippingTerm = ShippingTerm.CNF
    vat_enabled: bool = False
    vat_rate_percent: float = 0.0
    notes: str = ""
    party_from: InvoiceParty = field(default_factory=InvoiceParty)
    party_to: InvoiceParty = field(default_factory=InvoiceParty)
    line_items: List[LineItem] = field(default_factory=lambda: [LineItem()])
    bank_details: BankDetails = field(default_factory=BankDetails)

    @property
    def is_proforma(self) -> bool:
        return self.document_type is DocumentType.PROFORMA

    @classmethod
    def from_record(cls, rec: Any) -> "MonetaryDocument":
        rec = _dict(rec)
        raw_items = rec.get("lineItems")
        items = [LineItem.from_record(x) for x in raw_items] if isinstance(raw_items, list) else []
        return cls(
            id=_text(rec.get("id")),
            invoice_number=_text(rec.get("invoiceNumber")),
            date=parse_date(rec.get("date")),
            document_type=_enum(DocumentType, rec.get("documentType"), DocumentType.INVOICE),
            currency=_enum(Currency, rec.get("currency"), Currency.EUR),
            shipping_term=_enum(ShippingTerm, rec.get("shippingType"), ShippingTerm.CNF),
            vat_enabled=_bool(rec.get("vatEnabled")),
            vat_rate_percent=coerce_non_negative(rec.get("vatRate")),
            notes=_text(rec.get("notes")),
            party_from=InvoiceParty.from_record(rec.get("from")),
            party_to=InvoiceParty.from_record(rec.get("to")),
            line_items=items,
            bank_details=BankDetails.from_record(rec.get("bankDetails")),
        )

    def to_record(self) -> dict:
        return {
            "invoiceNumber": self.invoice_number,
            "date": _iso(self.date),
            "documentType": self.document_type.value,
            "currency": self.currency.value,
            "shippingType": self.shipping_term.value,
            "vatEnabled": self.vat_enabled,
            "vatRate": self.vat_rate_percent,
            "notes": self.notes,
            "from": self.party_from.to_record(),
            "to": self.party_to.to_record(with_tax_ids=False),
            "lineItems": [it.to_record() for it in self.line_items],
            "bankDetails": self.bank_details.to_record(),
        }


# =========================
# Inspection side
# =========================

@dataclass
class Supplier:
    id: str = ""
    name: str = ""
    address: str = ""
    city: str = ""
    zip_code: str = ""
    country: str = ""
    email: str = ""
    phone: str = ""
    vat_number: str = ""
    cf: str = ""
    # raster data URI once normalized; legacy values may be raw SVG text
    stamp: str = ""

    @classmethod
    def from_record(cls, rec: Any) -> "Supplier":
        rec = _dict(rec)
        return cls(
            id=_text(rec.get("id")),
            name=_text(rec.get("name")),
            address=_text(rec.get("address")),
            city=_text(rec.get("city")),
            zip_code=_text(rec.get("zipCode")),
            country=_text(rec.get("country")),
            email=_text(rec.get("email")),
            phone=_text(rec.get("phone")),
            vat_number=_text(rec.get("vatNumber")),
            cf=_text(rec.get("cf")),
            stamp=_text(rec.get("stamp")),
        )

    def to_record(self) -> dict:
        out = {
            "name": self.name,
            "address": self.address,
            "city": self.city,
            "zipCode": self.zip_code,
            "country": self.country,
            "email": self.email,
            "phone": self.phone,
            "vatNumber": self.vat_number,
            "cf": self.cf,
        }
        if self.stamp:
            out["stamp"] = self.stamp
        return out


@dataclass
class Client:
    id: str = ""
    name: str = ""
    address: str = ""
    city: str = ""
    country: str = ""
    email: str = ""
    phone: str = ""
    license_number: str = ""

    @classmethod
    def from_record(cls, rec: Any) -> "Client":
        rec = _dict(rec)
        return cls(
            id=_text(rec.get("id")),
            name=_text(rec.get("name")),
            address=_text(rec.get("address")),
            city=_text(rec.get("city")),
            country=_text(rec.get("country")),
            email=_text(rec.get("email")),
            phone=_text(rec.get("phone")),
            license_number=_text(rec.get("licenseNumber")),
        )

    def to_record(self) -> dict:
        return {
            "name": self.name,
            "address": self.address,
            "city": self.city,
            "country": self.country,
            "email": self.email,
            "phone": self.phone,
            "licenseNumber": self.license_number,
        }


@dataclass
class InspectionRequest:
    id: str = ""
    supplier_id: str = ""
    client_id: str = ""
    license_number: str = ""
    container_type: str = DEFAULT_CONTAINER_TYPE
    inspection_date: Optional[date] = None
    inspection_time: str = DEFAULT_INSPECTION_TIME
    created_at: str = ""

    @classmethod
    def from_record(cls, rec: Any) -> "InspectionRequest":
        rec = _dict(rec)
        return cls(
            id=_text(rec.get("id")),
            supplier_id=_text(rec.get("supplierId")),
            client_id=_text(rec.get("clientId")),
            license_number=_text(rec.get("licenseNumber")),
            container_type=_text(rec.get("containerType")) or DEFAULT_CONTAINER_TYPE,
            inspection_date=parse_date(rec.get("inspectionDate")),
            inspection_time=_text(rec.get("inspectionTime")).strip() or DEFAULT_INSPECTION_TIME,
            created_at=_text(rec.get("createdAt")),
        )

    def to_record(self) -> dict:
        return {
            "supplierId": self.supplier_id,
            "clientId": self.client_id,
            "licenseNumber": self.license_number,
            "containerType": self.container_type,
            "inspectionDate": _iso(self.inspection_date),
            "inspectionTime": self.inspection_time,
            "createdAt": self.created_at,
        }


@dataclass
class ClientSupplierLicense:
    id: str = ""
    client_id: str = ""
    supplier_id: str = ""
    license_number: str = ""

    @classmethod
    def from_record(cls, rec: Any) -> "ClientSupplierLicense":
        rec = _dict(rec)
        return cls(
            id=_text(rec.get("id")),
            client_id=_text(rec.get("clientId")),
            supplier_id=_text(rec.get("supplierId")),
            license_number=_text(rec.get("licenseNumber")),
        )

    def to_record(self) -> dict:
        return {
            "clientId": self.client_id,
            "supplierId": self.supplier_id,
            "licenseNumber": self.license_number,
        }
