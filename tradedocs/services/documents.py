# tradedocs/services/documents.py
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, replace
from typing import Optional

from tradedocs.errors import MissingRequiredEntity
from tradedocs.models import Client, InspectionRequest, MonetaryDocument, Supplier
from tradedocs.services.filenames import inspection_filename, invoice_filename
from tradedocs.services.narrative import inspection_preview_text
from tradedocs.services.stamp import StampLimits, stamp_for_render
from tradedocs.services.totals import DocumentTotals, totals_for
from tradedocs.storage.record_store import RecordStore
from tradedocs.styling.common.layout import Fonts, render_placeholder
from tradedocs.styling.router import RendererRouter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderedPdf:
    filename: str
    content: bytes
    placeholder: bool = False


def _resolve(store: RecordStore, collection: str, record_id: str | None) -> dict:
    rec = store.find(collection, record_id)
    if rec is None:
        raise MissingRequiredEntity(collection, record_id)
    return rec


def _supplier_for_render(rec: dict, limits: StampLimits | None) -> Supplier:
    # legacy SVG stamps are converted here so the renderer only sees rasters
    supplier = Supplier.from_record(rec)
    return replace(supplier, stamp=stamp_for_render(supplier.stamp, limits) or "")


def _placeholder(filename: str, err: MissingRequiredEntity) -> RenderedPdf:
    logger.warning("Rendering placeholder page for %s: %s", filename, err)
    return RenderedPdf(filename=filename, content=render_placeholder(detail=str(err)), placeholder=True)


# =========================
# Invoices
# =========================

def load_invoice(store: RecordStore, invoice_id: str) -> MonetaryDocument:
    return MonetaryDocument.from_record(store.get("invoices", invoice_id))


def invoice_totals(store: RecordStore, invoice_id: str) -> DocumentTotals:
    return totals_for(load_invoice(store, invoice_id))


def generate_invoice_pdf(
    store: RecordStore,
    invoice_id: str,
    supplier_id: str | None = None,
    *,
    limits: StampLimits | None = None,
    fonts: Fonts | None = None,
) -> RenderedPdf:
    """
    Render an invoice. The supplier is optional and only contributes its
    stamp; naming one that does not exist yields the placeholder page.
    RecordNotFound still propagates for an unknown invoice id.
    """
    rec = store.get("invoices", invoice_id)
    doc = MonetaryDocument.from_record(rec)
    filename = invoice_filename(doc)

    supplier_id = supplier_id or rec.get("supplierId") or None
    supplier: Optional[Supplier] = None
    try:
        if supplier_id:
            supplier = _supplier_for_render(_resolve(store, "suppliers", supplier_id), limits)
    except MissingRequiredEntity as e:
        return _placeholder(filename, e)

    content = RendererRouter(fonts).render(kind="invoice", document=doc, supplier=supplier)
    return RenderedPdf(filename=filename, content=content)


# =========================
# Inspection requests
# =========================

def load_inspection_request(store: RecordStore, request_id: str) -> InspectionRequest:
    return InspectionRequest.from_record(store.get("inspectionRequests", request_id))


def generate_inspection_pdf(
    store: RecordStore,
    request_id: str,
    *,
    limits: StampLimits | None = None,
    fonts: Fonts | None = None,
) -> RenderedPdf:
    request = load_inspection_request(store, request_id)
    client_rec = store.find("clients", request.client_id)
    client = Client.from_record(client_rec) if client_rec else None
    filename = inspection_filename(request, client)

    try:
        supplier = _supplier_for_render(_resolve(store, "suppliers", request.supplier_id), limits)
        client = Client.from_record(_resolve(store, "clients", request.client_id))
    except MissingRequiredEntity as e:
        return _placeholder(filename, e)

    content = RendererRouter(fonts).render(kind="inspection", document=request, supplier=supplier, client=client)
    return RenderedPdf(filename=filename, content=content)


def inspection_preview(store: RecordStore, request_id: str) -> str:
    request = load_inspection_request(store, request_id)
    supplier_rec = store.find("suppliers", request.supplier_id)
    client_rec = store.find("clients", request.client_id)
    return inspection_preview_text(
        Supplier.from_record(supplier_rec) if supplier_rec else None,
        Client.from_record(client_rec) if client_rec else None,
        request,
    )


# =========================
# Async entry points
# =========================

async def generate_invoice_pdf_async(store: RecordStore, invoice_id: str, supplier_id: str | None = None, **kw) -> RenderedPdf:
    return await asyncio.to_thread(generate_invoice_pdf, store, invoice_id, supplier_id, **kw)


async def generate_inspection_pdf_async(store: RecordStore, request_id: str, **kw) -> RenderedPdf:
    return await asyncio.to_thread(generate_inspection_pdf, store, request_id, **kw)
