# tradedocs/styling/inspection/renderer.py
from __future__ import annotations

import io
from typing import List, Optional

from reportlab.lib import colors
from reportlab.pdfgen import canvas

from tradedocs.models import Client, InspectionRequest, Supplier
from tradedocs.services.narrative import INSPECTION_TITLE, attachment_lines, inspection_paragraphs
from tradedocs.styling.common.layout import (
    LIGHT_RULE,
    TEXT_DARK,
    Fonts,
    PageFlow,
    PageSpec,
    clean,
    content_w,
    draw_stamp,
    hrule,
    render_placeholder,
    stamp_image,
    wrap_text,
    x0,
    x1,
)

# Supplier header
SUPPLIER_NAME_FS = 14
SUPPLIER_FS = 9
SUPPLIER_LINE_H = 12
HEADER_PAD_BOTTOM = 20
HEADER_MARGIN_BOTTOM = 30

# Title
TITLE_FS = 18
TITLE_MARGIN_BOTTOM = 20
TITLE_UNDERLINE_GAP = 3

# Body
BODY_FS = 11
BODY_LINE_H = BODY_FS * 1.6
PARAGRAPH_GAP = 15

# Attachments
ATTACH_MARGIN_TOP = 30
ATTACH_PAD_TOP = 15
ATTACH_TITLE_FS = 12
ATTACH_FS = 10
ATTACH_LINE_H = 14
ATTACH_INDENT = 10


def supplier_header_lines(supplier: Supplier) -> List[str]:
    lines = [
        clean(supplier.address),
        f"{clean(supplier.zip_code)} {clean(supplier.city)}, {clean(supplier.country)}".strip(" ,"),
        clean(supplier.email),
        clean(supplier.phone),
    ]
    if clean(supplier.vat_number):
        lines.append(f"P.IVA: {clean(supplier.vat_number)}")
    if clean(supplier.cf):
        lines.append(f"CF: {clean(supplier.cf)}")
    return [ln for ln in lines if ln]


def _draw_supplier_header(c: canvas.Canvas, ps: PageSpec, y_top: float, supplier: Supplier, fonts: Fonts) -> float:
    y = y_top - SUPPLIER_NAME_FS
    c.setFillColor(colors.black)
    c.setFont(fonts.bold, SUPPLIER_NAME_FS)
    for ln in wrap_text(supplier.name, fonts.bold, SUPPLIER_NAME_FS, content_w(ps)) or [""]:
        c.drawString(x0(), y, ln)
        y -= SUPPLIER_NAME_FS + 2
    y += SUPPLIER_NAME_FS + 2

    c.setFillColor(TEXT_DARK)
    c.setFont(fonts.regular, SUPPLIER_FS)
    for ln in supplier_header_lines(supplier):
        y -= SUPPLIER_LINE_H
        c.drawString(x0(), y, ln)
    c.setFillColor(colors.black)

    y_rule = y - HEADER_PAD_BOTTOM
    hrule(c, ps, y_rule, 1)
    return y_rule - HEADER_MARGIN_BOTTOM


def _draw_title(c: canvas.Canvas, ps: PageSpec, y_top: float, fonts: Fonts) -> float:
    y = y_top - TITLE_FS
    cx = (x0() + x1(ps)) / 2.0
    c.setFont(fonts.bold, TITLE_FS)
    c.drawCentredString(cx, y, INSPECTION_TITLE)

    w = c.stringWidth(INSPECTION_TITLE, fonts.bold, TITLE_FS)
    c.setLineWidth(1)
    c.line(cx - w / 2.0, y - TITLE_UNDERLINE_GAP, cx + w / 2.0, y - TITLE_UNDERLINE_GAP)
    return y - TITLE_UNDERLINE_GAP - TITLE_MARGIN_BOTTOM


def _draw_paragraphs(flow: PageFlow, paragraphs: List[str], fonts: Fonts) -> None:
    c, ps = flow.c, flow.ps
    for para in paragraphs:
        for ln in wrap_text(para, fonts.regular, BODY_FS, content_w(ps)):
            flow.ensure(BODY_LINE_H)
            flow.y -= BODY_LINE_H
            c.setFillColor(colors.black)
            c.setFont(fonts.regular, BODY_FS)
            c.drawString(x0(), flow.y, ln)
        flow.y -= PARAGRAPH_GAP


def _draw_attachments(flow: PageFlow, request: InspectionRequest, fonts: Fonts) -> None:
    c, ps = flow.c, flow.ps
    items = attachment_lines(request)
    flow.y -= ATTACH_MARGIN_TOP - PARAGRAPH_GAP
    flow.ensure(ATTACH_PAD_TOP + ATTACH_TITLE_FS + len(items) * ATTACH_LINE_H + 6)

    hrule(c, ps, flow.y, 1, LIGHT_RULE)
    flow.y -= ATTACH_PAD_TOP + ATTACH_TITLE_FS

    c.setFillColor(colors.black)
    c.setFont(fonts.bold, ATTACH_TITLE_FS)
    c.drawString(x0(), flow.y, "Allegato:")
    flow.y -= 6

    c.setFont(fonts.regular, ATTACH_FS)
    for item in items:
        flow.y -= ATTACH_LINE_H
        c.drawString(x0() + ATTACH_INDENT, flow.y, item)


def render_inspection_request(
    request: InspectionRequest,
    supplier: Optional[Supplier],
    client: Optional[Client],
    *,
    fonts: Fonts | None = None,
) -> bytes:
    """
    Inspection request letter (Italian). Without both supplier and client
    the output is the "Missing required data" page.
    """
    if supplier is None or client is None:
        return render_placeholder()

    fonts = fonts or Fonts()
    ps = PageSpec()

    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=(ps.w, ps.h))
    c.setTitle(INSPECTION_TITLE.title())

    flow = PageFlow(c, ps)
    flow.y = _draw_supplier_header(c, ps, flow.y, supplier, fonts)
    flow.y = _draw_title(c, ps, flow.y, fonts)

    _draw_paragraphs(flow, list(inspection_paragraphs(supplier, client, request)), fonts)
    _draw_attachments(flow, request, fonts)

    img = stamp_image(supplier.stamp)
    if img is not None:
        draw_stamp(c, ps, img)

    c.showPage()
    c.save()
    buf.seek(0)
    return buf.getvalue()
