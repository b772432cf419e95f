# tests/test_filenames.py
from __future__ import annotations

from datetime import date

from tradedocs.models import Client, InspectionRequest, MonetaryDocument
from tradedocs.services.filenames import (
    clean_component,
    inspection_filename,
    invoice_filename,
    pdf_key,
    short_name,
    utc_day,
)


def test_invoice_filename():
    doc = MonetaryDocument.from_record({
        "date": "2024-11-18",
        "documentType": "proforma",
        "from": {"name": "Alimentari Rossi S.r.l. Parma"},
        "to": {"name": "Kinshasa Import"},
    })
    assert invoice_filename(doc) == "Alimentari_Ross_to_Kinshasa_Import_Proforma_2024-11-18.pdf"


def test_invoice_filename_fallbacks():
    doc = MonetaryDocument.from_record({})
    assert invoice_filename(doc) == f"Company_to_Client_Invoice_{utc_day()}.pdf"


def test_short_name_and_clean_component():
    assert short_name("One Two Three", "x") == "One Two"
    assert short_name("", "fallback") == "fallback"
    assert short_name("Supercalifragilistic Inc", "x") == "Supercalifragil"
    assert clean_component("A&B  Co.") == "A_B_Co_"


def test_inspection_filename():
    request = InspectionRequest(inspection_date=date(2024, 11, 18))
    client = Client(name="Matadi   Imports SARL")
    assert inspection_filename(request, client) == "Inspection_Request_Matadi_Imports_SARL_2024-11-18.pdf"
    assert inspection_filename(InspectionRequest(), None) == "Inspection_Request_Client_N_A.pdf"


def test_pdf_key():
    assert pdf_key("invoices", "abc", "2024-11-18") == "pdfs/invoices/2024-11-18/abc.pdf"
