# tests/test_narrative.py
from __future__ import annotations

import locale
from datetime import date, timedelta

import pytest

from tradedocs.models import Client, InspectionRequest, Supplier
from tradedocs.services.narrative import (
    PREVIEW_MISSING_PARTIES,
    attachment_lines,
    generate_inspection_narrative,
    inspection_preview_text,
    italian_date,
    italian_day,
    italian_month,
)


def _parties():
    supplier = Supplier(
        id="s1",
        name="Acme Srl",
        address="Via Emilia 10",
        city="Reggio Emilia",
        zip_code="42121",
        country="Italia",
    )
    client = Client(id="c1", name="Matadi Imports", city="Matadi", country="Democratic Republic of Congo")
    request = InspectionRequest(
        supplier_id="s1",
        client_id="c1",
        license_number="LIC-77",
        inspection_date=date(2024, 11, 18),
        inspection_time="08:00",
    )
    return supplier, client, request


def test_narrative_names_monday_and_client():
    supplier, client, request = _parties()
    text = generate_inspection_narrative(supplier, client, request)

    assert "lunedì 18 di novembre 2024 alle 08:00" in text
    assert "container 40' dry high cube destinato alla ditta Matadi Imports" in text
    assert "con numero di licenza LIC-77." in text
    assert "presso Acme Srl in Via Emilia 10 - 42121 Reggio Emilia (Italia)" in text
    assert text.count("\n\n") == 1


def test_narrative_is_deterministic():
    supplier, client, request = _parties()
    assert generate_inspection_narrative(supplier, client, request) == generate_inspection_narrative(
        supplier, client, request
    )


def test_client_city_and_country_defaults():
    supplier, _, request = _parties()
    client = Client(name="Bare Client")
    text = generate_inspection_narrative(supplier, client, request)
    assert "Bare Client - Matadi - Democratic Republic of Congo" in text


def test_missing_license_and_date_render_na():
    supplier, client, request = _parties()
    request.license_number = ""
    request.inspection_date = None
    text = generate_inspection_narrative(supplier, client, request)
    assert "licenza N/A." in text
    assert "il N/A alle 08:00" in text
    assert attachment_lines(request) == ("Fattura Proforma", "Licenza N/A", "Request for information")


def test_unknown_calendar_names_fall_back_to_lowercase():
    assert italian_day("Someday") == "someday"
    assert italian_month("Smarch") == "smarch"
    assert italian_day("Sunday") == "domenica"
    assert italian_month("August") == "agosto"


def test_italian_date_pads_day():
    assert italian_date(date(2025, 3, 2)) == "domenica 02 di marzo 2025"


def test_preview_text():
    supplier, client, request = _parties()
    text = inspection_preview_text(supplier, client, request)
    assert text.startswith("RICHIESTA ISPEZIONE\n\n")
    assert "Allegato:\nFattura Proforma\nLicenza LIC-77\nRequest for information" in text
    assert generate_inspection_narrative(supplier, client, request) in text


def test_preview_without_parties():
    _, client, request = _parties()
    assert inspection_preview_text(None, client, request) == PREVIEW_MISSING_PARTIES


def test_italian_date_covers_every_weekday_and_month():
    monday = date(2024, 11, 18)
    days = [italian_date(monday + timedelta(days=i)).split()[0] for i in range(7)]
    assert days == ["lunedì", "martedì", "mercoledì", "giovedì", "venerdì", "sabato", "domenica"]

    months = [italian_date(date(2024, m, 1)).split()[3] for m in range(1, 13)]
    assert months[0] == "gennaio"
    assert months[7] == "agosto"
    assert months[11] == "dicembre"


@pytest.fixture
def german_locale():
    saved = locale.setlocale(locale.LC_TIME)
    for name in ("de_DE.UTF-8", "de_DE.utf8", "de_DE"):
        try:
            locale.setlocale(locale.LC_TIME, name)
            break
        except locale.Error:
            continue
    else:
        pytest.skip("no German locale installed")
    yield
    locale.setlocale(locale.LC_TIME, saved)


def test_italian_date_ignores_process_locale(german_locale):
    assert italian_date(date(2024, 11, 18)) == "lunedì 18 di novembre 2024"
