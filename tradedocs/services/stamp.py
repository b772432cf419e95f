# tradedocs/services/stamp.py
from __future__ import annotations

import asyncio
import base64
import binascii
import io
import logging
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import Optional, Tuple

import cairosvg
from PIL import Image

from tradedocs.config import Settings, get_settings
from tradedocs.errors import DecodeError, StampError, TooLarge, UnsupportedFormat

logger = logging.getLogger(__name__)

RASTER_PREFIXES = ("data:image/png", "data:image/jpeg", "data:image/jpg")

SVG_TAG_RE = re.compile(r"<svg[\s>/]", re.I)
LENGTH_RE = re.compile(r"^\s*([0-9]*\.?[0-9]+(?:e[-+]?[0-9]+)?)\s*([a-z%]*)\s*$", re.I)

# CSS px per unit
UNIT_PX = {
    "": 1.0,
    "px": 1.0,
    "pt": 96.0 / 72.0,
    "pc": 16.0,
    "mm": 96.0 / 25.4,
    "cm": 96.0 / 2.54,
    "in": 96.0,
    "em": 16.0,
    "ex": 8.0,
}


@dataclass(frozen=True)
class StampLimits:
    display_width: int = 150
    oversample: int = 3
    max_raster_bytes: int = 2 * 1024 * 1024
    max_svg_bytes: int = 200 * 1024
    # tallest stamp allowed, as a multiple of its width
    max_aspect_ratio: float = 4.0

    @property
    def raster_width(self) -> int:
        return self.display_width * self.oversample

    @property
    def max_raster_height(self) -> int:
        return int(self.raster_width * self.max_aspect_ratio)

    @classmethod
    def from_settings(cls, s: Settings) -> "StampLimits":
        return cls(
            display_width=s.stamp_display_width,
            oversample=s.stamp_oversample,
            max_raster_bytes=s.stamp_max_raster_bytes,
            max_svg_bytes=s.stamp_max_svg_bytes,
        )


@dataclass(frozen=True)
class StampResult:
    value: str
    converted: bool = False
    warning: Optional[str] = None


# =========================
# Detection
# =========================

def is_raster_data_uri(value: str | None) -> bool:
    if not value or not isinstance(value, str):
        return False
    head = value.lstrip()[:20].lower()
    return head.startswith(RASTER_PREFIXES)


def looks_like_svg(value: str | None) -> bool:
    if not value or not isinstance(value, str):
        return False
    text = value.lstrip("\ufeff").lstrip()
    return text.startswith("<") and bool(SVG_TAG_RE.search(text))


def decode_data_uri(value: str) -> bytes:
    """
    Payload bytes of a data URI (base64 or percent-less plain form).
    """
    head, sep, payload = value.strip().partition(",")
    if not sep:
        raise DecodeError("Data URI has no payload")
    if head.lower().endswith(";base64"):
        try:
            return base64.b64decode(payload, validate=False)
        except (binascii.Error, ValueError) as e:
            raise DecodeError(f"Invalid base64 payload: {e}") from e
    return payload.encode("latin-1", errors="replace")


def raster_size(data_uri: str) -> Tuple[int, int]:
    """(width, height) in pixels of a raster data URI."""
    raw = decode_data_uri(data_uri)
    try:
        with Image.open(io.BytesIO(raw)) as im:
            return im.size
    except Exception as e:
        raise DecodeError(f"Unreadable raster stamp: {e}") from e


# =========================
# SVG geometry
# =========================

def _length_px(value: str | None) -> Optional[float]:
    if not value:
        return None
    m = LENGTH_RE.match(value)
    if not m:
        return None
    num, unit = float(m.group(1)), m.group(2).lower()
    if unit == "%" or unit not in UNIT_PX:
        return None
    px = num * UNIT_PX[unit]
    return px if px > 0 else None


def _viewbox_size(value: str | None) -> Optional[Tuple[float, float]]:
    if not value:
        return None
    parts = [p for p in re.split(r"[\s,]+", value.strip()) if p]
    if len(parts) != 4:
        return None
    try:
        w, h = float(parts[2]), float(parts[3])
    except ValueError:
        return None
    if w <= 0 or h <= 0:
        return None
    return w, h


def svg_aspect_ratio(svg_text: str) -> float:
    """
    Intrinsic height/width of an SVG document. Explicit width/height win,
    then the viewBox; with neither the stamp is treated as square.
    """
    try:
        root = ET.fromstring(svg_text.lstrip("\ufeff").strip().encode("utf-8"))
    except ET.ParseError as e:
        raise DecodeError(f"Malformed SVG: {e}") from e

    if root.tag.rsplit("}", 1)[-1].lower() != "svg":
        raise UnsupportedFormat(f"Root element is <{root.tag}>, not <svg>")

    w = _length_px(root.get("width"))
    h = _length_px(root.get("height"))
    vb = _viewbox_size(root.get("viewBox"))

    if w and h:
        return h / w
    if vb:
        vb_w, vb_h = vb
        return vb_h / vb_w
    return 1.0


# =========================
# Conversion
# =========================

def svg_to_png_bytes(svg_text: str, target_width: int, max_height: int | None = None) -> Tuple[bytes, int, int]:
    ratio = svg_aspect_ratio(svg_text)
    target_height = max(1, int(round(target_width * ratio)))
    if max_height is not None and target_height > max_height:
        raise TooLarge(target_height, max_height, "SVG", unit="px tall")

    try:
        png = cairosvg.svg2png(
            bytestring=svg_text.lstrip("\ufeff").strip().encode("utf-8"),
            output_width=target_width,
            output_height=target_height,
            background_color=None,
        )
    except Exception as e:
        raise DecodeError(f"SVG could not be rasterized: {type(e).__name__}: {e}") from e

    try:
        with Image.open(io.BytesIO(png)) as im:
            im = im.convert("RGBA")
            if im.size != (target_width, target_height):
                im = im.resize((target_width, target_height), Image.Resampling.LANCZOS)
            out = io.BytesIO()
            im.save(out, format="PNG", optimize=True)
    except Exception as e:
        raise DecodeError(f"Rasterized SVG is not a readable PNG: {e}") from e

    return out.getvalue(), target_width, target_height


def png_data_uri(png: bytes) -> str:
    return "data:image/png;base64," + base64.b64encode(png).decode("ascii")


def normalize_stamp(raw: str, limits: StampLimits | None = None) -> str:
    """
    Canonical PDF-embeddable form of an uploaded stamp.

      - PNG/JPEG data URI: returned unchanged (normalizing twice is a no-op)
      - inline SVG document: rasterized to a transparent PNG data URI,
        display width x oversample pixels wide, aspect ratio preserved
      - anything else, including empty input: UnsupportedFormat

    An SVG taller than max_aspect_ratio x its width is TooLarge; nothing
    is handed to the rasterizer.

    Size limits are checked before any decoding work.
    """
    limits = limits or StampLimits.from_settings(get_settings())

    if not isinstance(raw, str) or not raw.strip():
        raise UnsupportedFormat("Stamp is empty")

    if is_raster_data_uri(raw):
        size = len(decode_data_uri(raw))
        if size > limits.max_raster_bytes:
            raise TooLarge(size, limits.max_raster_bytes, "raster")
        if size == 0:
            raise UnsupportedFormat("Raster stamp has an empty payload")
        return raw

    if looks_like_svg(raw):
        size = len(raw.encode("utf-8"))
        if size > limits.max_svg_bytes:
            raise TooLarge(size, limits.max_svg_bytes, "SVG")

        png, w, h = svg_to_png_bytes(raw, limits.raster_width, limits.max_raster_height)
        logger.info("Stamp SVG (%d bytes) rasterized to %dx%d PNG (%d bytes)", size, w, h, len(png))
        return png_data_uri(png)

    raise UnsupportedFormat("Stamp must be an SVG document or a PNG/JPEG data URI")


async def normalize_stamp_async(raw: str, limits: StampLimits | None = None) -> str:
    return await asyncio.to_thread(normalize_stamp, raw, limits)


def prepare_stamp_for_save(raw: str, limits: StampLimits | None = None) -> StampResult:
    """
    Write-time policy: an SVG that fails to decode is kept as raw text with
    a warning instead of blocking the save. TooLarge and UnsupportedFormat
    still reject the upload.
    """
    try:
        value = normalize_stamp(raw, limits)
    except DecodeError as e:
        logger.warning("Stamp conversion failed, storing raw SVG text: %s", e)
        return StampResult(
            value=raw,
            converted=False,
            warning=f"The stamp could not be converted to PNG and will not appear on PDFs ({e}).",
        )
    return StampResult(value=value, converted=(value != raw))


def stamp_for_render(value: str | None, limits: StampLimits | None = None) -> Optional[str]:
    """
    Read-side resolution before a render: raster data URIs pass through,
    legacy SVG text is converted once here, anything unusable becomes None.
    """
    if not value:
        return None
    if is_raster_data_uri(value):
        return value
    if not looks_like_svg(value):
        return None
    try:
        return normalize_stamp(value, limits)
    except StampError as e:
        logger.warning("Legacy SVG stamp could not be converted, omitting it: %s", e)
        return None
