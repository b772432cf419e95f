# tests/test_stamp.py
from __future__ import annotations

import asyncio
import base64

import pytest

from tradedocs.errors import DecodeError, TooLarge, UnsupportedFormat
from tradedocs.services.stamp import (
    StampLimits,
    is_raster_data_uri,
    looks_like_svg,
    normalize_stamp,
    normalize_stamp_async,
    prepare_stamp_for_save,
    raster_size,
    stamp_for_render,
    svg_aspect_ratio,
)


def test_raster_passes_through_unchanged(stamp_png, limits):
    assert normalize_stamp(stamp_png, limits) == stamp_png


def test_svg_is_rasterized_at_display_width_times_oversample(stamp_svg, limits):
    out = normalize_stamp(stamp_svg, limits)
    assert out.startswith("data:image/png;base64,")
    w, h = raster_size(out)
    assert w == 450
    assert abs(h / w - 0.5) <= 0.01


def test_normalizing_twice_is_a_no_op(stamp_svg, limits):
    once = normalize_stamp(stamp_svg, limits)
    assert normalize_stamp(once, limits) == once


def test_aspect_ratio_from_viewbox_only(limits):
    svg = '<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 300 400"><circle cx="150" cy="200" r="100"/></svg>'
    assert svg_aspect_ratio(svg) == pytest.approx(400 / 300)
    w, h = raster_size(normalize_stamp(svg, limits))
    assert w == 450
    assert abs(h / w - 400 / 300) <= 0.01


def test_aspect_ratio_with_units():
    svg = '<svg xmlns="http://www.w3.org/2000/svg" width="40mm" height="20mm"></svg>'
    assert svg_aspect_ratio(svg) == pytest.approx(0.5)


@pytest.mark.parametrize("raw", ["", "   ", "\n"])
def test_empty_input_is_rejected(raw, limits):
    with pytest.raises(UnsupportedFormat):
        normalize_stamp(raw, limits)


def test_empty_raster_payload_is_rejected(limits):
    with pytest.raises(UnsupportedFormat):
        normalize_stamp("data:image/png;base64,", limits)


@pytest.mark.parametrize(
    "raw",
    [
        "hello world",
        "data:image/gif;base64,R0lGODlhAQABAAAAACw=",
        "data:image/svg+xml;base64," + base64.b64encode(b"<svg/>").decode("ascii"),
        "<html><body><svg></svg></body></html>",
    ],
)
def test_unsupported_inputs(raw, limits):
    with pytest.raises(UnsupportedFormat):
        normalize_stamp(raw, limits)


def test_oversized_raster_is_rejected_before_decoding():
    limits = StampLimits(max_raster_bytes=10)
    raw = "data:image/png;base64," + base64.b64encode(b"x" * 11).decode("ascii")
    with pytest.raises(TooLarge) as exc:
        normalize_stamp(raw, limits)
    assert exc.value.size == 11
    assert exc.value.limit == 10


def test_oversized_svg_is_rejected(stamp_svg):
    limits = StampLimits(max_svg_bytes=64)
    with pytest.raises(TooLarge):
        normalize_stamp(stamp_svg, limits)


def test_malformed_svg_raises_decode_error(limits):
    with pytest.raises(DecodeError):
        normalize_stamp("<svg xmlns='http://www.w3.org/2000/svg'><g></svg>", limits)


def test_save_falls_back_to_raw_svg_with_warning(limits):
    broken = "<svg xmlns='http://www.w3.org/2000/svg'><g></svg>"
    res = prepare_stamp_for_save(broken, limits)
    assert res.value == broken
    assert res.converted is False
    assert res.warning


def test_save_converts_valid_svg(stamp_svg, limits):
    res = prepare_stamp_for_save(stamp_svg, limits)
    assert res.converted is True
    assert res.warning is None
    assert is_raster_data_uri(res.value)


def test_save_still_rejects_unsupported(limits):
    with pytest.raises(UnsupportedFormat):
        prepare_stamp_for_save("", limits)


def test_stamp_for_render(stamp_png, stamp_svg, limits):
    assert stamp_for_render(stamp_png, limits) == stamp_png
    assert is_raster_data_uri(stamp_for_render(stamp_svg, limits))
    assert stamp_for_render("<svg><g></svg>", limits) is None
    assert stamp_for_render("not an image", limits) is None
    assert stamp_for_render(None, limits) is None


def test_detection_helpers(stamp_svg, stamp_png):
    assert looks_like_svg(stamp_svg)
    assert looks_like_svg("\ufeff  <svg width='1' height='1'/>")
    assert not looks_like_svg(stamp_png)
    assert is_raster_data_uri("DATA:image/JPEG;base64,abc")
    assert not is_raster_data_uri(stamp_svg)


def test_async_wrapper(stamp_svg, limits):
    out = asyncio.run(normalize_stamp_async(stamp_svg, limits))
    assert raster_size(out)[0] == 450


def test_extreme_aspect_ratio_svg_is_rejected_before_rasterizing(limits):
    tall = "<svg xmlns='http://www.w3.org/2000/svg' width='1' height='2000'><rect width='1' height='2000'/></svg>"
    with pytest.raises(TooLarge) as exc:
        normalize_stamp(tall, limits)
    assert exc.value.size == 900000
    assert exc.value.limit == limits.max_raster_height == 1800
    assert exc.value.unit == "px tall"

    # TooLarge rejects the save instead of falling back to raw text
    with pytest.raises(TooLarge):
        prepare_stamp_for_save(tall, limits)
    assert stamp_for_render(tall, limits) is None


def test_stamp_at_the_aspect_limit_is_converted(limits):
    svg = "<svg xmlns='http://www.w3.org/2000/svg' viewBox='0 0 10 40'><rect width='10' height='40'/></svg>"
    assert raster_size(normalize_stamp(svg, limits)) == (450, 1800)
