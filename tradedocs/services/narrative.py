# tradedocs/services/narrative.py
from __future__ import annotations

from datetime import date
from typing import Optional, Tuple

from tradedocs.models import Client, InspectionRequest, Supplier

INSPECTION_TITLE = "RICHIESTA ISPEZIONE"
PREVIEW_MISSING_PARTIES = "Please select a supplier and client to see the preview."

DEFAULT_CLIENT_CITY = "Matadi"
DEFAULT_CLIENT_COUNTRY = "Democratic Republic of Congo"

# fixed English source names, independent of the process locale
ENGLISH_DAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")
ENGLISH_MONTHS = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)

ITALIAN_DAYS = {
    "Monday": "lunedì",
    "Tuesday": "martedì",
    "Wednesday": "mercoledì",
    "Thursday": "giovedì",
    "Friday": "venerdì",
    "Saturday": "sabato",
    "Sunday": "domenica",
}

ITALIAN_MONTHS = {
    "January": "gennaio",
    "February": "febbraio",
    "March": "marzo",
    "April": "aprile",
    "May": "maggio",
    "June": "giugno",
    "July": "luglio",
    "August": "agosto",
    "September": "settembre",
    "October": "ottobre",
    "November": "novembre",
    "December": "dicembre",
}


def italian_day(name: str) -> str:
    return ITALIAN_DAYS.get(name, name.lower())


def italian_month(name: str) -> str:
    return ITALIAN_MONTHS.get(name, name.lower())


def italian_date(d: Optional[date]) -> str:
    """
    "lunedì 18 di novembre 2024". The English day and month names are
    looked up in the tables above.
    """
    if d is None:
        return "N/A"
    day_name = italian_day(ENGLISH_DAYS[d.weekday()])
    month_name = italian_month(ENGLISH_MONTHS[d.month - 1])
    return f"{day_name} {d.day:02d} di {month_name} {d.year:04d}"


def _license(request: InspectionRequest) -> str:
    return request.license_number or "N/A"


def inspection_paragraphs(supplier: Supplier, client: Client, request: InspectionRequest) -> Tuple[str, str]:
    first = (
        f"Richiedo ispezione per un container {request.container_type} destinato alla ditta "
        f"{client.name} - {client.city or DEFAULT_CLIENT_CITY} - {client.country or DEFAULT_CLIENT_COUNTRY}, "
        f"con numero di licenza {_license(request)}."
    )
    second = (
        f"Il container si carica presso {supplier.name} in {supplier.address} - "
        f"{supplier.zip_code} {supplier.city} ({supplier.country}) - "
        f"il {italian_date(request.inspection_date)} alle {request.inspection_time}."
    )
    return first, second


def generate_inspection_narrative(supplier: Supplier, client: Client, request: InspectionRequest) -> str:
    return "\n\n".join(inspection_paragraphs(supplier, client, request))


def attachment_lines(request: InspectionRequest) -> Tuple[str, str, str]:
    return ("Fattura Proforma", f"Licenza {_license(request)}", "Request for information")


def inspection_preview_text(
    supplier: Optional[Supplier],
    client: Optional[Client],
    request: InspectionRequest,
) -> str:
    if supplier is None or client is None:
        return PREVIEW_MISSING_PARTIES

    body = generate_inspection_narrative(supplier, client, request)
    attachments = "\n".join(attachment_lines(request))
    return f"{INSPECTION_TITLE}\n\n{body}\n\nAllegato:\n{attachments}"
