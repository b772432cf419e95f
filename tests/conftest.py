# tests/conftest.py
from __future__ import annotations

import base64
import io
from typing import List, Optional, Tuple

import pytest
from PIL import Image
from pypdf import PdfReader

from tradedocs.config import Settings
from tradedocs.services.stamp import StampLimits
from tradedocs.storage.record_store import RecordStore

STAMP_SVG = (
    '<?xml version="1.0" encoding="UTF-8"?>\n'
    '<svg xmlns="http://www.w3.org/2000/svg" width="200" height="100" viewBox="0 0 200 100">'
    '<rect x="5" y="5" width="190" height="90" fill="none" stroke="#0000ff" stroke-width="4"/>'
    "</svg>"
)


def png_data_uri(size: Tuple[int, int] = (300, 150)) -> str:
    im = Image.new("RGBA", size, (200, 0, 0, 160))
    buf = io.BytesIO()
    im.save(buf, format="PNG")
    return "data:image/png;base64," + base64.b64encode(buf.getvalue()).decode("ascii")


def pdf_text(data: bytes) -> str:
    """All page text with whitespace runs collapsed."""
    reader = PdfReader(io.BytesIO(data))
    return " ".join(" ".join((p.extract_text() or "") for p in reader.pages).split())


def pdf_pages(data: bytes) -> List:
    return list(PdfReader(io.BytesIO(data)).pages)


def page_images(page) -> int:
    if "/Resources" not in page:
        return 0
    resources = page["/Resources"].get_object()
    if "/XObject" not in resources:
        return 0
    xobjects = resources["/XObject"].get_object()
    return sum(1 for name in xobjects if xobjects[name].get_object().get("/Subtype") == "/Image")


class FakeDialogs:
    def __init__(self, confirm_answer: bool = True, password: Optional[str] = None):
        self.confirm_answer = confirm_answer
        self.password = password
        self.alerts: list = []
        self.confirms: list = []

    async def alert(self, title, message, kind="alert"):
        self.alerts.append((title, message, kind))

    async def confirm(self, title, message):
        self.confirms.append((title, message))
        return self.confirm_answer

    async def prompt_password(self, title, message):
        return self.password


@pytest.fixture
def store() -> RecordStore:
    return RecordStore.from_url("sqlite:///:memory:")


@pytest.fixture
def limits() -> StampLimits:
    return StampLimits()


@pytest.fixture
def settings() -> Settings:
    return Settings(database_url="sqlite:///:memory:", s3_bucket="test-bucket")


@pytest.fixture
def stamp_svg() -> str:
    return STAMP_SVG


@pytest.fixture
def stamp_png() -> str:
    return png_data_uri()
