# tradedocs/services/filenames.py
from __future__ import annotations

import re
from datetime import date, datetime, timezone
from typing import Optional

from tradedocs.models import Client, InspectionRequest, MonetaryDocument

NON_ALNUM_RE = re.compile(r"[^a-zA-Z0-9]")
UNDERSCORES_RE = re.compile(r"_+")
WHITESPACE_RE = re.compile(r"\s+")


def utc_day() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%d")


def short_name(name: str, fallback: str) -> str:
    # first 2 words, then at most 15 chars
    if not name:
        return fallback
    return " ".join(name.split(" ")[:2])[:15]


def clean_component(s: str) -> str:
    return UNDERSCORES_RE.sub("_", NON_ALNUM_RE.sub("_", s))


def _day(d: Optional[date]) -> str:
    return d.isoformat() if d else utc_day()


def invoice_filename(doc: MonetaryDocument) -> str:
    """
    FromShort_to_ToShort_Invoice_2024-11-18.pdf
    """
    from_name = clean_component(short_name(doc.party_from.name, "Company"))
    to_name = clean_component(short_name(doc.party_to.name, "Client"))
    kind = "Proforma" if doc.is_proforma else "Invoice"
    return f"{from_name}_to_{to_name}_{kind}_{_day(doc.date)}.pdf"


def inspection_filename(request: InspectionRequest, client: Optional[Client]) -> str:
    client_name = WHITESPACE_RE.sub("_", client.name) if client and client.name else "Client"
    day = request.inspection_date.isoformat() if request.inspection_date else "N_A"
    return f"Inspection_Request_{client_name}_{day}.pdf"


def pdf_key(kind: str, doc_id: str, day: str | None = None) -> str:
    # pdfs/<kind>/YYYY-MM-DD/<doc_id>.pdf
    return f"pdfs/{kind}/{day or utc_day()}/{doc_id}.pdf"
