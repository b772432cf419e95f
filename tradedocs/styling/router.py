# tradedocs/styling/router.py
from __future__ import annotations

from typing import Optional

from tradedocs.models import Client, InspectionRequest, MonetaryDocument, Supplier
from tradedocs.styling.common.layout import Fonts
from tradedocs.styling.inspection.renderer import render_inspection_request
from tradedocs.styling.invoice.renderer import render_invoice


def normalize_kind(kind: str | None) -> str:
    k = (kind or "").strip().lower().replace("-", "_")
    if k in ("invoice", "invoices", "inv", "proforma", "proforma_invoice"):
        return "invoice"
    if k in ("inspection", "inspection_request", "inspection_requests", "inspectionrequests", "ispezione"):
        return "inspection"
    raise ValueError(f"Unknown document kind: {kind!r}")


class RendererRouter:
    """
    Single entry point for the document service:
      router.render(kind="invoice|inspection", document=..., supplier=..., client=...)
    """

    def __init__(self, fonts: Fonts | None = None):
        self._fonts = fonts or Fonts()

    def render(
        self,
        *,
        kind: str | None,
        document: MonetaryDocument | InspectionRequest,
        supplier: Optional[Supplier] = None,
        client: Optional[Client] = None,
    ) -> bytes:
        k = normalize_kind(kind)
        if k == "invoice":
            if not isinstance(document, MonetaryDocument):
                raise TypeError("invoice rendering needs a MonetaryDocument")
            return render_invoice(document, supplier, fonts=self._fonts)
        if not isinstance(document, InspectionRequest):
            raise TypeError("inspection rendering needs an InspectionRequest")
        return render_inspection_request(document, supplier, client, fonts=self._fonts)
