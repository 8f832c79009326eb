"""Excel 与文本模板导出。"""

import io
from urllib.parse import quote

from openpyxl import load_workbook
from sqlalchemy.exc import OperationalError

from app.packages.glossary.core.constants import (
    MSG_NOTHING_TO_EXPORT,
    MSG_STORE_ERROR,
    MSG_UNKNOWN_DISCIPLINE,
    XLSX_MEDIA_TYPE,
)
from app.packages.glossary.crud.terms import term_crud
from app.packages.glossary.services.export_service import build_workbook


def _workbook(response):
    assert response.status_code == 200, response.text
    assert response.headers["content-type"] == XLSX_MEDIA_TYPE
    return load_workbook(io.BytesIO(response.content))


def test_template_layout(client):
    workbook = _workbook(client.get("/api/v1/exports/template"))

    assert workbook.sheetnames == ["용어 템플릿", "사용방법"]
    sheet = workbook["용어 템플릿"]
    assert sheet["A1"].value.startswith("SAMOO 하이테크 1본부")
    assert "A1:D1" in [str(merged) for merged in sheet.merged_cells.ranges]
    assert [cell.value for cell in sheet[3]] == ["공종", "EN", "KR", "설명"]
    assert sheet["A4"].value == "Gen"
    assert sheet.column_dimensions["B"].width == 30
    assert sheet.column_dimensions["D"].width == 45
    assert sheet.row_dimensions[1].height == 25
    assert sheet.row_dimensions[3].height == 20
    assert "I&C: Instrument & Control (제어)" in [
        (row[0].value or "").strip() for row in workbook["사용방법"].iter_rows(max_col=1)
    ]


def test_export_selected_terms(client, seed_term):
    valve = seed_term("Valve", "밸브", discipline="Piping", description="유체 제어")
    anchor = seed_term("Anchor", "앵커", discipline="General")
    seed_term("Ignored")

    response = client.post("/api/v1/exports/selected", json={"ids": [valve.id, anchor.id]})

    workbook = _workbook(response)
    disposition = response.headers["content-disposition"]
    assert disposition.startswith("attachment;")
    assert f"filename*=UTF-8''{quote('선택_용어집_')}" in disposition
    sheet = workbook.active
    rows = [[cell.value or "" for cell in row] for row in sheet.iter_rows(min_row=4)]
    assert rows == [["Gen", "Anchor", "앵커", ""], ["Piping", "Valve", "밸브", "유체 제어"]]


def test_export_selected_requires_a_selection(client):
    response = client.post("/api/v1/exports/selected", json={"ids": []})

    assert response.status_code == 400
    assert response.json()["msg"] == MSG_NOTHING_TO_EXPORT


def test_export_selected_reports_store_errors(client, seed_term, monkeypatch):
    valve = seed_term("Valve", "밸브", discipline="Piping")

    def broken_get_by_ids(db, ids):
        raise OperationalError("SELECT", {}, Exception("store unavailable"))

    monkeypatch.setattr(term_crud, "get_by_ids", broken_get_by_ids)

    response = client.post("/api/v1/exports/selected", json={"ids": [valve.id]})

    assert response.status_code == 500
    body = response.json()
    assert body["msg"] == MSG_STORE_ERROR
    assert body["data"]["success"] is False


def test_export_discipline_by_name_or_abbreviation(client, seed_term):
    seed_term("Damper", discipline="HVAC")
    seed_term("Duct", discipline="HVAC", status="pending")
    seed_term("Valve", discipline="Piping")

    by_name = _workbook(client.get("/api/v1/exports/disciplines/HVAC")).active
    assert [row[1].value for row in by_name.iter_rows(min_row=4)] == ["Damper"]

    by_abbreviation = _workbook(client.get("/api/v1/exports/disciplines/piping")).active
    assert [row[1].value for row in by_abbreviation.iter_rows(min_row=4)] == ["Valve"]


def test_export_unknown_discipline(client):
    response = client.get("/api/v1/exports/disciplines/Plumbing")

    assert response.status_code == 404
    assert response.json()["msg"] == MSG_UNKNOWN_DISCIPLINE


def test_export_approved_terms(client, seed_term):
    seed_term("Anode", discipline="Cell")
    seed_term("Pending", status="pending")

    sheet = _workbook(client.get("/api/v1/exports/approved")).active

    assert [row[1].value for row in sheet.iter_rows(min_row=4)] == ["Anode"]


def test_text_template_download(client):
    response = client.get("/api/v1/exports/text-template")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/plain")
    assert "공종/EN/KR/설명" in response.text.splitlines()


def test_workbook_without_title_starts_with_header_and_stripes_odd_rows():
    rows = [["Gen", "A", "에이", ""], ["Gen", "B", "비", ""], ["Gen", "C", "씨", ""]]

    sheet = build_workbook(rows, sheet_name="plain").active

    assert sheet["A1"].value == "공종"
    assert sheet["A2"].fill.fill_type is None
    assert sheet["A3"].fill.start_color.rgb.endswith("F2F2F2")
    assert sheet["A4"].fill.fill_type is None
