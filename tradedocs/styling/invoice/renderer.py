# tradedocs/styling/invoice/renderer.py
from __future__ import annotations

import io
from typing import List, Optional, Tuple

from reportlab.lib import colors
from reportlab.pdfgen import canvas

from tradedocs.models import InvoiceParty, LineItem, MonetaryDocument, Supplier, Unit
from tradedocs.services.totals import DocumentTotals, format_currency, totals_for
from tradedocs.styling.common.layout import (
    LIGHT_RULE,
    TEXT_DARK,
    TEXT_MUTED,
    Fonts,
    PageFlow,
    PageSpec,
    content_w,
    draw_stamp,
    format_date_eu,
    format_number,
    hrule,
    na,
    stamp_image,
    wrap_multiline,
    x0,
    x1,
)


# =========================
# Layout constants
# =========================

SECTION_GAP = 20

# Header
TITLE_FS = 32
TITLE_GAP_BELOW = 10
META_LABEL_FS = 8
META_NUMBER_FS = 10
META_DATE_FS = 9
HEADER_PAD_BOTTOM = 10
HEADER_RULE_W = 2

# Parties
PARTY_COL_FRAC = 0.48
PARTY_TITLE_FS = 11
PARTY_TITLE_GAP = 5
PARTY_FS = 9
PARTY_LINE_H = 12

# Table: Description 40%, Qty/Unit/Rate/Amount 15% each
TABLE_COL_FRACS = (0.40, 0.15, 0.15, 0.15, 0.15)
TABLE_HEADERS = ("Description", "Qty", "Unit", "Rate", "Amount")
TABLE_FS = 9
TABLE_PAD = 8
TABLE_LINE_H = 11
TABLE_HEADER_BG = colors.black
TABLE_HEADER_FG = colors.white

# Totals
TOTALS_FRAC = 0.50
TOTALS_FS = 9
TOTALS_GRAND_FS = 10
TOTALS_ROW_PAD = 5
TOTALS_RULE_W = 2

# Notes
NOTES_TITLE_FS = 11
NOTES_FS = 9
NOTES_LINE_H = 13.5

# Bank footer
BANK_TITLE_FS = 11
BANK_FS = 9
BANK_LINE_H = 12
BANK_PAD_TOP = 15

FROM_PLACEHOLDERS = ("Your Company Name", "Your Address", "your@email.com", "Your Phone", "Your Country")
TO_PLACEHOLDERS = ("Client Name", "Client Address", "client@email.com", "Client Phone", "Client Country")


def document_title(doc: MonetaryDocument) -> str:
    return "PROFORMA INVOICE" if doc.is_proforma else "INVOICE"


def document_label(doc: MonetaryDocument) -> str:
    return "PROFORMA INVOICE DETAILS" if doc.is_proforma else "INVOICE DETAILS"


def unit_label(unit: Unit) -> str:
    return "" if unit is Unit.NONE else unit.value


# =========================
# Header
# =========================

def _draw_header(c: canvas.Canvas, ps: PageSpec, y_top: float, doc: MonetaryDocument, fonts: Fonts) -> float:
    right = x1(ps)

    c.setFillColor(colors.black)
    c.setFont(fonts.bold, TITLE_FS)
    c.drawString(x0(), y_top - TITLE_FS * 0.75, document_title(doc))

    y = y_top - META_LABEL_FS
    c.setFillColor(TEXT_MUTED)
    c.setFont(fonts.regular, META_LABEL_FS)
    c.drawRightString(right, y, document_label(doc))

    y -= META_NUMBER_FS + 2
    c.setFillColor(colors.black)
    c.setFont(fonts.bold, META_NUMBER_FS)
    c.drawRightString(right, y, f"#{doc.invoice_number or 'N/A'}")

    y -= META_DATE_FS + 2
    c.setFillColor(TEXT_MUTED)
    c.setFont(fonts.regular, META_DATE_FS)
    c.drawRightString(right, y, format_date_eu(doc.date))
    c.setFillColor(colors.black)

    block_h = max(TITLE_FS + TITLE_GAP_BELOW, y_top - y)
    y_rule = y_top - block_h - HEADER_PAD_BOTTOM
    hrule(c, ps, y_rule, HEADER_RULE_W)
    return y_rule - SECTION_GAP


# =========================
# Parties
# =========================

def party_lines(party: InvoiceParty, placeholders: Tuple[str, ...], with_tax_ids: bool) -> List[Tuple[str, bool]]:
    """
    (text, bold) lines of a party column. Tax id lines only appear when the
    value is present.
    """
    name_ph, addr_ph, email_ph, phone_ph, country_ph = placeholders
    lines: List[Tuple[str, bool]] = [
        (party.name or name_ph, True),
        (party.address or addr_ph, False),
        (party.email or email_ph, False),
        (party.phone or phone_ph, False),
        (party.country or country_ph, False),
    ]
    if with_tax_ids:
        if party.piva.strip():
            lines.append((f"P.IVA: {party.piva}", False))
        if party.cf.strip():
            lines.append((f"CF: {party.cf}", False))
    return lines


def _draw_party_column(
    c: canvas.Canvas,
    x: float,
    y_top: float,
    col_w: float,
    title: str,
    lines: List[Tuple[str, bool]],
    fonts: Fonts,
) -> float:
    c.setFillColor(colors.black)
    c.setFont(fonts.bold, PARTY_TITLE_FS)
    y = y_top - PARTY_TITLE_FS
    c.drawString(x, y, title)
    y -= PARTY_TITLE_GAP

    for text, bold in lines:
        font = fonts.bold if bold else fonts.regular
        c.setFont(font, PARTY_FS)
        c.setFillColor(colors.black if bold else TEXT_DARK)
        for ln in wrap_multiline(text, font, PARTY_FS, col_w):
            y -= PARTY_LINE_H
            c.drawString(x, y, ln)

    c.setFillColor(colors.black)
    return y


def _draw_parties(c: canvas.Canvas, ps: PageSpec, y_top: float, doc: MonetaryDocument, fonts: Fonts) -> float:
    col_w = content_w(ps) * PARTY_COL_FRAC
    y_from = _draw_party_column(
        c, x0(), y_top, col_w, "From:",
        party_lines(doc.party_from, FROM_PLACEHOLDERS, with_tax_ids=True), fonts,
    )
    y_to = _draw_party_column(
        c, x1(ps) - col_w, y_top, col_w, "To:",
        party_lines(doc.party_to, TO_PLACEHOLDERS, with_tax_ids=False), fonts,
    )
    return min(y_from, y_to) - SECTION_GAP


# =========================
# Line-item table
# =========================

def _table_columns(ps: PageSpec) -> List[Tuple[float, float]]:
    """(left, right) edges of the five columns inside the row padding."""
    inner_x = x0() + TABLE_PAD
    inner_w = content_w(ps) - 2 * TABLE_PAD
    cols: List[Tuple[float, float]] = []
    cur = inner_x
    for frac in TABLE_COL_FRACS:
        w = inner_w * frac
        cols.append((cur, cur + w))
        cur += w
    return cols


def _row_cells(item: LineItem, doc: MonetaryDocument) -> Tuple[str, str, str, str, str]:
    return (
        item.description or "-",
        format_number(item.quantity),
        unit_label(item.unit),
        format_currency(item.rate, doc.currency),
        format_currency(item.amount, doc.currency),
    )


def _header_row_h() -> float:
    return TABLE_FS + 2 * TABLE_PAD


def _draw_table_header(c: canvas.Canvas, ps: PageSpec, y_top: float, fonts: Fonts) -> float:
    h = _header_row_h()
    c.setFillColor(TABLE_HEADER_BG)
    c.rect(x0(), y_top - h, content_w(ps), h, stroke=0, fill=1)

    c.setFillColor(TABLE_HEADER_FG)
    c.setFont(fonts.bold, TABLE_FS)
    baseline = y_top - TABLE_PAD - TABLE_FS * 0.8
    for i, ((left, right), label) in enumerate(zip(_table_columns(ps), TABLE_HEADERS)):
        if i == 0:
            c.drawString(left, baseline, label)
        else:
            c.drawRightString(right, baseline, label)

    c.setFillColor(colors.black)
    return y_top - h


def _description_lines(ps: PageSpec, item: LineItem, fonts: Fonts) -> List[str]:
    left, right = _table_columns(ps)[0]
    return wrap_multiline(item.description or "-", fonts.regular, TABLE_FS, (right - left) - 4) or ["-"]


def _row_h(n_lines: int) -> float:
    return 2 * TABLE_PAD + max(1, n_lines) * TABLE_LINE_H - (TABLE_LINE_H - TABLE_FS)


def _draw_table_row(
    c: canvas.Canvas,
    ps: PageSpec,
    y_top: float,
    item: LineItem,
    desc_lines: List[str],
    doc: MonetaryDocument,
    fonts: Fonts,
) -> float:
    h = _row_h(len(desc_lines))
    cols = _table_columns(ps)
    cells = _row_cells(item, doc)
    baseline = y_top - TABLE_PAD - TABLE_FS * 0.8

    c.setFillColor(colors.black)
    c.setFont(fonts.regular, TABLE_FS)

    yy = baseline
    for ln in desc_lines:
        c.drawString(cols[0][0], yy, ln)
        yy -= TABLE_LINE_H

    for (left, right), value in zip(cols[1:], cells[1:]):
        if value:
            c.drawRightString(right, baseline, value)

    y_bottom = y_top - h
    c.setStrokeColor(LIGHT_RULE)
    c.setLineWidth(1)
    c.line(x0(), y_bottom, x1(ps), y_bottom)
    c.setStrokeColor(colors.black)
    return y_bottom


def _draw_table(flow: PageFlow, doc: MonetaryDocument, fonts: Fonts) -> None:
    c, ps = flow.c, flow.ps

    flow.ensure(_header_row_h() + _row_h(1))
    flow.y = _draw_table_header(c, ps, flow.y, fonts)

    for item in doc.line_items:
        lines = _description_lines(ps, item, fonts)
        if flow.ensure(_row_h(len(lines))):
            # table continues: repeat the header row
            flow.y = _draw_table_header(c, ps, flow.y, fonts)
        flow.y = _draw_table_row(c, ps, flow.y, item, lines, doc, fonts)

    flow.y -= SECTION_GAP


# =========================
# Totals
# =========================

def totals_rows(doc: MonetaryDocument, totals: DocumentTotals) -> List[Tuple[str, str]]:
    rows = [("Subtotal:", format_currency(totals.subtotal, doc.currency))]
    if doc.vat_enabled:
        rows.append((f"VAT ({format_number(doc.vat_rate_percent)}%):", format_currency(totals.vat_amount, doc.currency)))
    rows.append((f"Total {doc.shipping_term.value}:", format_currency(totals.total, doc.currency)))
    return rows


def _totals_row_h(fs: float) -> float:
    return fs + 2 * TOTALS_ROW_PAD


def _totals_height(rows: List[Tuple[str, str]]) -> float:
    return (len(rows) - 1) * _totals_row_h(TOTALS_FS) + _totals_row_h(TOTALS_GRAND_FS)


def _draw_totals(flow: PageFlow, doc: MonetaryDocument, totals: DocumentTotals, fonts: Fonts) -> None:
    c, ps = flow.c, flow.ps
    rows = totals_rows(doc, totals)
    flow.ensure(_totals_height(rows))

    w = content_w(ps) * TOTALS_FRAC
    left = x1(ps) - w
    right = x1(ps)
    y = flow.y

    for label, value in rows[:-1]:
        baseline = y - TOTALS_ROW_PAD - TOTALS_FS * 0.8
        c.setFillColor(TEXT_MUTED)
        c.setFont(fonts.regular, TOTALS_FS)
        c.drawString(left, baseline, label)
        c.setFillColor(colors.black)
        c.setFont(fonts.bold, TOTALS_FS)
        c.drawRightString(right, baseline, value)
        y -= _totals_row_h(TOTALS_FS)

    label, value = rows[-1]
    c.setStrokeColor(colors.black)
    c.setLineWidth(TOTALS_RULE_W)
    c.line(left, y, right, y)

    baseline = y - TOTALS_ROW_PAD - TOTALS_GRAND_FS * 0.8
    c.setFillColor(colors.black)
    c.setFont(fonts.bold, TOTALS_GRAND_FS)
    c.drawString(left, baseline, label)
    c.drawRightString(right, baseline, value)
    y -= _totals_row_h(TOTALS_GRAND_FS)

    flow.y = y - SECTION_GAP


# =========================
# Notes
# =========================

def _draw_notes(flow: PageFlow, doc: MonetaryDocument, fonts: Fonts) -> None:
    if not doc.notes.strip():
        return

    c, ps = flow.c, flow.ps
    lines = wrap_multiline(doc.notes.strip("\n"), fonts.regular, NOTES_FS, content_w(ps))

    flow.ensure(NOTES_TITLE_FS + PARTY_TITLE_GAP + NOTES_LINE_H)
    c.setFillColor(colors.black)
    c.setFont(fonts.bold, NOTES_TITLE_FS)
    flow.y -= NOTES_TITLE_FS
    c.drawString(x0(), flow.y, "Notes:")
    flow.y -= PARTY_TITLE_GAP

    for ln in lines:
        flow.ensure(NOTES_LINE_H)
        flow.y -= NOTES_LINE_H
        if ln:
            c.setFillColor(TEXT_DARK)
            c.setFont(fonts.regular, NOTES_FS)
            c.drawString(x0(), flow.y, ln)

    c.setFillColor(colors.black)
    flow.y -= SECTION_GAP


# =========================
# Bank details
# =========================

def bank_lines(doc: MonetaryDocument) -> List[str]:
    bank = doc.bank_details
    lines: List[str] = []
    if bank.bank_name.strip():
        lines.append(f"Bank: {bank.bank_name}")
    lines.append(f"Account Name: {na(bank.account_name)}")
    lines.append(f"IBAN: {na(bank.iban)}")
    lines.append(f"BIC: {na(bank.bic)}")
    return lines


def _draw_bank_details(flow: PageFlow, doc: MonetaryDocument, fonts: Fonts) -> None:
    c, ps = flow.c, flow.ps
    lines = bank_lines(doc)
    flow.ensure(BANK_PAD_TOP + BANK_TITLE_FS + PARTY_TITLE_GAP + len(lines) * BANK_LINE_H)

    hrule(c, ps, flow.y, 1, LIGHT_RULE)
    flow.y -= BANK_PAD_TOP + BANK_TITLE_FS

    c.setFillColor(colors.black)
    c.setFont(fonts.bold, BANK_TITLE_FS)
    c.drawString(x0(), flow.y, "Bank Details:")
    flow.y -= PARTY_TITLE_GAP

    c.setFillColor(TEXT_DARK)
    c.setFont(fonts.regular, BANK_FS)
    for ln in lines:
        flow.y -= BANK_LINE_H
        c.drawString(x0(), flow.y, ln)
    c.setFillColor(colors.black)


# =========================
# Main render
# =========================

def render_invoice(
    doc: MonetaryDocument,
    supplier: Optional[Supplier] = None,
    *,
    fonts: Fonts | None = None,
) -> bytes:
    """
    Invoice / proforma PDF. Totals are always recomputed from the line
    items. The stamp of the given supplier, when it is a raster data URI,
    goes bottom-right on the last page.
    """
    fonts = fonts or Fonts()
    ps = PageSpec()
    totals = totals_for(doc)

    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=(ps.w, ps.h))
    c.setTitle(f"{document_title(doc).title()} {doc.invoice_number}".strip())

    flow = PageFlow(c, ps)
    flow.y = _draw_header(c, ps, flow.y, doc, fonts)
    flow.y = _draw_parties(c, ps, flow.y, doc, fonts)

    _draw_table(flow, doc, fonts)
    _draw_totals(flow, doc, totals, fonts)
    _draw_notes(flow, doc, fonts)
    _draw_bank_details(flow, doc, fonts)

    img = stamp_image(supplier.stamp if supplier else None)
    if img is not None:
        draw_stamp(c, ps, img)

    c.showPage()
    c.save()
    buf.seek(0)
    return buf.getvalue()
