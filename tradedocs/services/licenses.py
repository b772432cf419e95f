# tradedocs/services/licenses.py
from __future__ import annotations

from typing import List

from tradedocs.errors import ValidationError
from tradedocs.models import ClientSupplierLicense, parse_date
from tradedocs.storage.record_store import RecordStore

COLLECTION = "clientSupplierLicenses"


def licenses_for_pair(store: RecordStore, client_id: str, supplier_id: str) -> List[ClientSupplierLicense]:
    if not client_id or not supplier_id:
        return []
    out: List[ClientSupplierLicense] = []
    for rec in store.list(COLLECTION):
        lic = ClientSupplierLicense.from_record(rec)
        if lic.client_id == client_id and lic.supplier_id == supplier_id:
            out.append(lic)
    return out


def add_license(store: RecordStore, client_id: str, supplier_id: str, license_number: str) -> ClientSupplierLicense:
    number = (license_number or "").strip()
    if not number:
        raise ValidationError("License number is required.")
    if not client_id or not supplier_id:
        raise ValidationError("Please select a client and supplier first.")

    rec = store.create(
        COLLECTION,
        ClientSupplierLicense(client_id=client_id, supplier_id=supplier_id, license_number=number).to_record(),
    )
    return ClientSupplierLicense.from_record(rec)


def validate_inspection_record(rec: dict) -> None:
    """
    Checks done on a raw inspection request record before save; the first
    missing field wins.
    """
    def blank(key: str) -> bool:
        return not str(rec.get(key) or "").strip()

    if blank("supplierId"):
        raise ValidationError("Please select a supplier.")
    if blank("clientId"):
        raise ValidationError("Please select a client.")
    if blank("licenseNumber"):
        raise ValidationError("Please select or enter a license number.")
    if parse_date(rec.get("inspectionDate")) is None:
        raise ValidationError("Inspection date is required.")
    if blank("inspectionTime"):
        raise ValidationError("Inspection time is required.")
