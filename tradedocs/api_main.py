# tradedocs/api_main.py
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator
from urllib.parse import quote

from fastapi import Body, Depends, FastAPI, HTTPException, Query, Response
from fastapi.middleware.cors import CORSMiddleware

from tradedocs.config import get_settings
from tradedocs.errors import RecordNotFound, StampError, ValidationError
from tradedocs.models import MonetaryDocument
from tradedocs.services.documents import (
    RenderedPdf,
    generate_inspection_pdf,
    generate_invoice_pdf,
    inspection_preview,
    invoice_totals,
)
from tradedocs.services.filenames import pdf_key
from tradedocs.services.licenses import add_license, licenses_for_pair, validate_inspection_record
from tradedocs.services.stamp import StampLimits, prepare_stamp_for_save
from tradedocs.services.totals import format_currency, normalize_invoice_fields
from tradedocs.storage.record_store import COLLECTIONS, RecordStore, get_store, new_id, utcnow
from tradedocs.storage.s3_storage import S3Storage, get_storage

logger = logging.getLogger(__name__)

app = FastAPI(title="TradeDocs API")

# CORS for local frontend dev (React/Vite/etc.)
app.add_middleware(
    CORSMiddleware,
    allow_origins=list(get_settings().cors_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@contextmanager
def _http_errors() -> Iterator[None]:
    try:
        yield
    except RecordNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except StampError as e:
        raise HTTPException(status_code=422, detail=str(e))


def _check_collection(collection: str) -> None:
    if collection not in COLLECTIONS:
        raise HTTPException(status_code=404, detail=f"Unknown collection: {collection}")


def _pdf_response(pdf: RenderedPdf) -> Response:
    return Response(
        content=pdf.content,
        media_type="application/pdf",
        headers={
            "Content-Disposition": f"attachment; filename*=UTF-8''{quote(pdf.filename)}",
            "X-Placeholder": "true" if pdf.placeholder else "false",
        },
    )


def _prepare_fields(collection: str, fields: dict, existing: dict | None) -> tuple[dict, str | None]:
    """
    Write-time rules per collection. Returns (fields to store, warning).
    """
    warning = None

    if collection == "invoices":
        # amounts are recomputed over the merged record
        fields = normalize_invoice_fields({**(existing or {}), **fields})

    elif collection == "inspectionRequests":
        if existing is None and not fields.get("createdAt"):
            fields["createdAt"] = utcnow().isoformat()
        validate_inspection_record({**(existing or {}), **fields})

    elif collection == "suppliers" and fields.get("stamp"):
        res = prepare_stamp_for_save(fields["stamp"], StampLimits.from_settings(get_settings()))
        fields["stamp"] = res.value
        warning = res.warning

    return fields, warning


def _saved(record: dict, warning: str | None) -> dict:
    out = {"ok": True, "record": record}
    if warning:
        out["warning"] = warning
    return out


@app.get("/")
def root():
    return {"ok": True, "try": ["/docs", "/api/health", "/api/invoices"]}


@app.get("/api/health")
def health():
    return {"ok": True}


# ------------------------------------------------------------
# Licenses (before the generic collection routes)
# ------------------------------------------------------------
@app.get("/api/licenses")
def list_licenses(
    client_id: str = Query(default=""),
    supplier_id: str = Query(default=""),
    store: RecordStore = Depends(get_store),
):
    items = licenses_for_pair(store, client_id, supplier_id)
    return {"items": [{"id": lic.id, **lic.to_record()} for lic in items]}


@app.post("/api/licenses")
def create_license(body: dict = Body(...), store: RecordStore = Depends(get_store)):
    with _http_errors():
        lic = add_license(
            store,
            str(body.get("clientId") or ""),
            str(body.get("supplierId") or ""),
            str(body.get("licenseNumber") or ""),
        )
    return {"ok": True, "record": {"id": lic.id, **lic.to_record()}}


# ------------------------------------------------------------
# Invoices
# ------------------------------------------------------------
@app.get("/api/invoices/{invoice_id}/totals")
def get_invoice_totals(invoice_id: str, store: RecordStore = Depends(get_store)):
    with _http_errors():
        totals = invoice_totals(store, invoice_id)
        currency = MonetaryDocument.from_record(store.get("invoices", invoice_id)).currency

    return {
        **totals.as_dict(),
        "currency": currency.value,
        "formatted": {
            "subtotal": format_currency(totals.subtotal, currency),
            "vatAmount": format_currency(totals.vat_amount, currency),
            "total": format_currency(totals.total, currency),
        },
    }


@app.get("/api/invoices/{invoice_id}/pdf")
def get_invoice_pdf(
    invoice_id: str,
    supplier_id: str | None = None,
    store: RecordStore = Depends(get_store),
):
    with _http_errors():
        pdf = generate_invoice_pdf(store, invoice_id, supplier_id)
    return _pdf_response(pdf)


@app.post("/api/invoices/{invoice_id}/publish")
def publish_invoice(
    invoice_id: str,
    supplier_id: str | None = None,
    expires_seconds: int = Query(default=3600, ge=60, le=7 * 24 * 3600),
    store: RecordStore = Depends(get_store),
    storage: S3Storage = Depends(get_storage),
):
    with _http_errors():
        pdf = generate_invoice_pdf(store, invoice_id, supplier_id)

    if pdf.placeholder:
        raise HTTPException(status_code=400, detail="Missing required data, nothing to publish")

    key = pdf_key("invoices", invoice_id)
    storage.upload_pdf_bytes(key, pdf.content, filename=pdf.filename)
    logger.info("Published invoice %s as %s", invoice_id, key)
    url = storage.presign_get_url(
        key=key,
        expires_seconds=expires_seconds,
        download_filename=pdf.filename,
        inline=True,
    )
    return {"ok": True, "key": key, "url": url, "filename": pdf.filename}


# ------------------------------------------------------------
# Inspection requests
# ------------------------------------------------------------
@app.get("/api/inspection-requests/{request_id}/pdf")
def get_inspection_pdf(request_id: str, store: RecordStore = Depends(get_store)):
    with _http_errors():
        pdf = generate_inspection_pdf(store, request_id)
    return _pdf_response(pdf)


@app.get("/api/inspection-requests/{request_id}/preview")
def get_inspection_preview(request_id: str, store: RecordStore = Depends(get_store)):
    with _http_errors():
        return {"text": inspection_preview(store, request_id)}


# ------------------------------------------------------------
# Suppliers: stamp upload
# ------------------------------------------------------------
@app.post("/api/suppliers/{supplier_id}/stamp")
def upload_stamp(supplier_id: str, body: dict = Body(...), store: RecordStore = Depends(get_store)):
    """
    body = { "stamp": "<svg ...>" | "data:image/png;base64,..." }
    """
    raw = body.get("stamp")
    if not isinstance(raw, str):
        raise HTTPException(status_code=400, detail="Missing stamp")

    with _http_errors():
        store.get("suppliers", supplier_id)
        res = prepare_stamp_for_save(raw, StampLimits.from_settings(get_settings()))
        record = store.upsert("suppliers", supplier_id, {"stamp": res.value})

    out = {"ok": True, "converted": res.converted, "record": record}
    if res.warning:
        out["warning"] = res.warning
    return out


# ------------------------------------------------------------
# Generic collections
# ------------------------------------------------------------
@app.get("/api/{collection}")
def list_records(collection: str, store: RecordStore = Depends(get_store)):
    _check_collection(collection)
    return {"items": store.list(collection)}


@app.get("/api/{collection}/{record_id}")
def get_record(collection: str, record_id: str, store: RecordStore = Depends(get_store)):
    _check_collection(collection)
    with _http_errors():
        return store.get(collection, record_id)


@app.post("/api/{collection}")
def create_record(collection: str, body: dict = Body(...), store: RecordStore = Depends(get_store)):
    _check_collection(collection)
    with _http_errors():
        fields, warning = _prepare_fields(collection, dict(body), None)
        record = store.upsert(collection, new_id(), fields)
    return _saved(record, warning)


@app.put("/api/{collection}/{record_id}")
def save_record(collection: str, record_id: str, body: dict = Body(...), store: RecordStore = Depends(get_store)):
    _check_collection(collection)
    with _http_errors():
        existing = store.find(collection, record_id)
        fields, warning = _prepare_fields(collection, dict(body), existing)
        record = store.upsert(collection, record_id, fields)
    return _saved(record, warning)


@app.delete("/api/{collection}/{record_id}")
def delete_record(collection: str, record_id: str, store: RecordStore = Depends(get_store)):
    _check_collection(collection)
    if not store.delete(collection, record_id):
        raise HTTPException(status_code=404, detail="Not found")
    return {"ok": True}
