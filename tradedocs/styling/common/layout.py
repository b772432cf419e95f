# tradedocs/styling/common/layout.py
from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Callable, List, Optional

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.utils import ImageReader
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfbase.ttfonts import TTFont
from reportlab.pdfgen import canvas

from tradedocs.services.stamp import decode_data_uri, is_raster_data_uri

logger = logging.getLogger(__name__)


# =========================
# Page + layout constants (A4, 40pt padding)
# =========================

PAGE_W, PAGE_H = A4
PAGE_PAD = 40

# Stamp: absolute, bottom-right
STAMP_W = 150
STAMP_RIGHT = 40
STAMP_BOTTOM = 30
STAMP_MAX_H = 300

# Colors
TEXT_DARK = colors.HexColor("#333333")
TEXT_MUTED = colors.HexColor("#666666")
LIGHT_RULE = colors.HexColor("#DDDDDD")


@dataclass(frozen=True)
class PageSpec:
    w: float = PAGE_W
    h: float = PAGE_H


@dataclass(frozen=True)
class Fonts:
    regular: str = "Helvetica"
    bold: str = "Helvetica-Bold"


# =========================
# Basics
# =========================

def clean(s: str | None) -> str:
    return (s or "").replace("\u00a0", " ").replace("\x00", "").strip()


def na(s: str | None) -> str:
    return clean(s) or "N/A"


def format_date_eu(d: Optional[date]) -> str:
    return d.strftime("%d/%m/%Y") if d else "N/A"


def format_number(n: float) -> str:
    # 2 -> "2", 2.5 -> "2.5"
    if float(n).is_integer():
        return str(int(n))
    return repr(float(n))


def _split_long_word(word: str, font: str, size: float, max_w: float) -> List[str]:
    # a word wider than the column is cut into column-wide pieces
    pieces = [""]
    for ch in word:
        if pieces[-1] and stringWidth(pieces[-1] + ch, font, size) > max_w:
            pieces.append(ch)
        else:
            pieces[-1] += ch
    return pieces


def wrap_text(text: str, font: str, size: float, max_w: float) -> List[str]:
    """
    Greedy word wrap to max_w points. Leading indentation is repeated on
    every wrapped line; words wider than the column are split by character.
    """
    raw = (text or "").replace("\u00a0", " ").replace("\x00", "").rstrip()
    body = raw.lstrip()
    if not body:
        return []

    indent = raw[: len(raw) - len(body)].replace("\t", "    ")
    avail = max_w - stringWidth(indent, font, size)
    if avail <= stringWidth("M", font, size):
        indent, avail = "", max_w

    lines: List[str] = []
    cur = ""
    for word in body.split():
        test = f"{cur} {word}" if cur else word
        if stringWidth(test, font, size) <= avail:
            cur = test
            continue
        if cur:
            lines.append(cur)
        if stringWidth(word, font, size) <= avail:
            cur = word
        else:
            *full, cur = _split_long_word(word, font, size, avail)
            lines.extend(full)

    if cur:
        lines.append(cur)
    return [indent + ln for ln in lines]


def wrap_multiline(text: str, font: str, size: float, max_w: float) -> List[str]:
    """
    Like wrap_text, but embedded line breaks are kept (blank lines too).
    """
    out: List[str] = []
    for raw in (text or "").replace("\r\n", "\n").replace("\r", "\n").split("\n"):
        wrapped = wrap_text(raw, font, size, max_w)
        out.extend(wrapped or [""])
    return out


# =========================
# Fonts
# =========================

def register_fonts(fonts_dir: Path | None) -> Fonts:
    """
    Use DejaVuSans from fonts_dir when present, Helvetica otherwise.
    """
    if fonts_dir is None:
        return Fonts()

    reg_font = fonts_dir / "DejaVuSans.ttf"
    bold_font = fonts_dir / "DejaVuSans-Bold.ttf"

    font_regular = "Helvetica"
    font_bold = "Helvetica-Bold"

    try:
        if reg_font.exists():
            pdfmetrics.registerFont(TTFont("TradeDocs-Regular", str(reg_font)))
            font_regular = "TradeDocs-Regular"
        if bold_font.exists():
            pdfmetrics.registerFont(TTFont("TradeDocs-Bold", str(bold_font)))
            font_bold = "TradeDocs-Bold"
    except Exception as e:
        logger.warning("Could not register fonts from %s, using Helvetica: %s", fonts_dir, e)
        return Fonts()

    return Fonts(regular=font_regular, bold=font_bold)


# =========================
# Geometry helpers
# =========================

def x0() -> float:
    return PAGE_PAD


def x1(ps: PageSpec) -> float:
    return ps.w - PAGE_PAD


def content_w(ps: PageSpec) -> float:
    return x1(ps) - x0()


def top_y(ps: PageSpec) -> float:
    return ps.h - PAGE_PAD


def content_bottom() -> float:
    return PAGE_PAD


def hrule(c: canvas.Canvas, ps: PageSpec, y: float, width: float, color=colors.black) -> None:
    c.setStrokeColor(color)
    c.setLineWidth(width)
    c.line(x0(), y, x1(ps), y)
    c.setStrokeColor(colors.black)


class PageFlow:
    """
    Top-down cursor over a multi-page canvas. ensure() starts a new page
    when the next block would cross the bottom margin.
    """

    def __init__(self, c: canvas.Canvas, ps: PageSpec, on_new_page: Callable[["PageFlow"], None] | None = None):
        self.c = c
        self.ps = ps
        self.y = top_y(ps)
        self.page_no = 1
        self._on_new_page = on_new_page

    def fits(self, need_h: float) -> bool:
        return (self.y - need_h) >= content_bottom()

    def new_page(self) -> None:
        self.c.showPage()
        self.page_no += 1
        self.y = top_y(self.ps)
        if self._on_new_page is not None:
            self._on_new_page(self)

    def ensure(self, need_h: float) -> bool:
        """True when a page break happened."""
        if self.fits(need_h) or self.y >= top_y(self.ps):
            return False
        self.new_page()
        return True


# =========================
# Stamp overlay
# =========================

def stamp_image(stamp: str | None) -> Optional[ImageReader]:
    """
    Only raster data URIs are drawn. Anything else (legacy SVG text,
    junk) is omitted so the render itself never fails on it.
    """
    if not stamp:
        return None
    if not is_raster_data_uri(stamp):
        logger.warning("Stamp is not a PNG/JPEG data URI, omitting it")
        return None
    try:
        img = ImageReader(io.BytesIO(decode_data_uri(stamp)))
        img.getSize()
        return img
    except Exception as e:
        logger.warning("Stamp image could not be decoded, omitting it: %s", e)
        return None


def draw_stamp(c: canvas.Canvas, ps: PageSpec, img: ImageReader) -> None:
    iw, ih = img.getSize()
    if not iw or not ih:
        return
    w = float(STAMP_W)
    h = w * float(ih) / float(iw)
    if h > STAMP_MAX_H:
        # tall stamps shrink to the cap, right edge stays put
        w, h = w * STAMP_MAX_H / h, float(STAMP_MAX_H)
    c.drawImage(
        img,
        ps.w - STAMP_RIGHT - w,
        STAMP_BOTTOM,
        width=w,
        height=h,
        preserveAspectRatio=True,
        mask="auto",
    )


# =========================
# Placeholder
# =========================

def render_placeholder(message: str = "Missing required data", detail: str = "") -> bytes:
    ps = PageSpec()
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=(ps.w, ps.h))

    c.setFont("Helvetica", 11)
    c.drawString(x0(), top_y(ps) - 11, message)
    if detail:
        c.setFillColor(TEXT_MUTED)
        c.setFont("Helvetica", 9)
        y = top_y(ps) - 30
        for ln in wrap_text(detail, "Helvetica", 9, content_w(ps)):
            c.drawString(x0(), y, ln)
            y -= 12
        c.setFillColor(colors.black)

    c.showPage()
    c.save()
    buf.seek(0)
    return buf.getvalue()
