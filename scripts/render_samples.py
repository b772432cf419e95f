# scripts/render_samples.py
from __future__ import annotations

import argparse
from pathlib import Path

from pypdf import PdfReader

from tradedocs.models import Client, InspectionRequest, MonetaryDocument, Supplier
from tradedocs.services.filenames import inspection_filename, invoice_filename
from tradedocs.services.narrative import generate_inspection_narrative
from tradedocs.services.stamp import StampLimits, stamp_for_render
from tradedocs.services.totals import format_currency, totals_for
from tradedocs.styling.common.layout import register_fonts
from tradedocs.styling.inspection.renderer import render_inspection_request
from tradedocs.styling.invoice.renderer import render_invoice

SAMPLE_STAMP_SVG = (
    '<svg xmlns="http://www.w3.org/2000/svg" width="200" height="100" viewBox="0 0 200 100">'
    '<rect x="4" y="4" width="192" height="92" rx="12" fill="none" stroke="#1d4ed8" stroke-width="6"/>'
    '<text x="100" y="60" font-size="28" text-anchor="middle" fill="#1d4ed8">TIMBRO</text>'
    "</svg>"
)


def _sample_invoice(many_rows: bool) -> MonetaryDocument:
    items = [
        {"description": "Frozen chicken legs, 40' reefer", "quantity": 25, "unit": "KG", "rate": 1.85},
        {"description": "Handling and documentation", "quantity": 1, "unit": "None", "rate": 150},
    ]
    if many_rows:
        items = items + [
            {"description": f"Extra line {i} to check the table continues on the next page", "quantity": i, "rate": 2.5}
            for i in range(1, 60)
        ]

    return MonetaryDocument.from_record({
        "invoiceNumber": "2024-117",
        "date": "2024-11-18",
        "documentType": "proforma",
        "currency": "EUR",
        "shippingType": "CIF",
        "vatEnabled": True,
        "vatRate": 22,
        "notes": "Payment 30% in advance.\nBalance against copy of documents.",
        "from": {"name": "Alimentari Rossi S.r.l.", "address": "Via Roma 1, Parma", "piva": "IT01234567890"},
        "to": {"name": "Kinshasa Import SARL", "country": "Democratic Republic of Congo"},
        "lineItems": items,
        "bankDetails": {"bankName": "Banca Esempio", "iban": "IT60X0542811101000000123456"},
    })


def _sample_supplier() -> Supplier:
    return Supplier.from_record({
        "id": "sup-1",
        "name": "Macelli Riuniti S.p.A.",
        "address": "Via dell'Industria 12",
        "city": "Modena",
        "zipCode": "41121",
        "country": "Italia",
        "email": "export@macelli.example",
        "phone": "+39 059 000000",
        "vatNumber": "IT09876543210",
        "stamp": SAMPLE_STAMP_SVG,
    })


def main() -> None:
    ap = argparse.ArgumentParser(description="Render sample invoice and inspection PDFs")
    ap.add_argument("--out", default="out", help="output folder")
    ap.add_argument("--fonts", default=None, help="folder with DejaVuSans.ttf / DejaVuSans-Bold.ttf")
    ap.add_argument("--many-rows", action="store_true", help="force a multi-page invoice")
    args = ap.parse_args()

    out_dir = Path(args.out)
    out_dir.mkdir(parents=True, exist_ok=True)
    fonts = register_fonts(Path(args.fonts) if args.fonts else None)

    supplier = _sample_supplier()
    stamp = stamp_for_render(supplier.stamp, StampLimits())
    if stamp:
        supplier.stamp = stamp
        print("[OK] stamp converted for render")
    else:
        supplier.stamp = ""
        print("[SKIP] stamp could not be converted, rendering without it")

    doc = _sample_invoice(args.many_rows)
    totals = totals_for(doc)
    inv_path = out_dir / invoice_filename(doc)
    inv_path.write_bytes(render_invoice(doc, supplier, fonts=fonts))
    print(f"[OK] {inv_path} ({len(PdfReader(str(inv_path)).pages)} page(s))")
    print("     total:", format_currency(totals.total, doc.currency))

    client = Client.from_record({"id": "cli-1", "name": "Kinshasa Import SARL"})
    request = InspectionRequest.from_record({
        "supplierId": supplier.id,
        "clientId": client.id,
        "licenseNumber": "LIC-2024-001",
        "inspectionDate": "2024-11-18",
        "inspectionTime": "09:30",
    })
    insp_path = out_dir / inspection_filename(request, client)
    insp_path.write_bytes(render_inspection_request(request, supplier, client, fonts=fonts))
    print(f"[OK] {insp_path}")

    print("\n--- Narrative ---")
    print(generate_inspection_narrative(supplier, client, request))


if __name__ == "__main__":
    main()
