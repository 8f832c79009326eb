"""导出服务：把用语列表写成带样式的 Excel 工作簿并以下载形式返回。

工作簿布局（有标题时）：
    第 1 行  标题，跨列合并、加粗 14 号、居中
    第 2 行  空行（间距）
    第 3 行  表头 ``공종 / EN / KR / 설명``
    第 4 行起 数据行，隔行填充底色、自动换行
"""

from __future__ import annotations

import io
from typing import Any, Dict, Iterable, List, Optional, Sequence
from pathlib import PurePath
from urllib.parse import quote

from fastapi.responses import Response, StreamingResponse
from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter
from sqlalchemy.orm import Session

from app.packages.glossary.core.constants import (
    EXPORT_HEADERS,
    HTTP_STATUS_BAD_REQUEST,
    HTTP_STATUS_INTERNAL_ERROR,
    HTTP_STATUS_NOT_FOUND,
    MSG_NOTHING_TO_EXPORT,
    MSG_STORE_ERROR,
    MSG_UNKNOWN_DISCIPLINE,
    TEXT_MEDIA_TYPE,
    WORKBOOK_TITLE_PREFIX,
    XLSX_MEDIA_TYPE,
)
from app.packages.glossary.core.disciplines import (
    DISCIPLINE_ORDER,
    DISCIPLINES,
    abbreviation_for,
    discipline_by_abbreviation,
    is_known_discipline,
)
from app.packages.glossary.core.exceptions import AppException
from app.packages.glossary.core.logger import logger
from app.packages.glossary.core.timezone import today_stamp
from app.packages.glossary.services.import_service import build_text_template
from app.packages.glossary.services.search_service import sort_for_display
from app.packages.glossary.services.term_service import term_service

COLUMN_WIDTHS = (12, 30, 30, 45)
TITLE_ROW_HEIGHT = 25
SPACER_ROW_HEIGHT = 10
HEADER_ROW_HEIGHT = 20
DATA_ROW_HEIGHT = 18

TITLE_FONT = Font(bold=True, size=14)
HEADER_FONT = Font(bold=True, size=12)
DATA_FONT = Font(size=11)
HEADER_FILL = PatternFill(fill_type="solid", start_color="D9E1F2", end_color="D9E1F2")
STRIPE_FILL = PatternFill(fill_type="solid", start_color="F2F2F2", end_color="F2F2F2")
CENTER = Alignment(horizontal="center", vertical="center")

TEMPLATE_FILENAME = "용어집_업로드_템플릿.xlsx"
TEXT_TEMPLATE_FILENAME = "용어집_업로드_템플릿.txt"

_TEMPLATE_ROWS = (
    ("Gen", "Project Management", "프로젝트 관리", "프로젝트 전반적인 관리 업무"),
    ("Arch", "Building Design", "건물 설계", "건축물의 전반적인 설계"),
    ("Elec", "Power Distribution", "전력 분배", "전력을 각 구역으로 분배하는 시스템"),
)


def term_rows(terms: Iterable[Dict[str, Any]]) -> List[List[str]]:
    """序列化后的用语转换为 ``[缩写, EN, KR, 说明]`` 行。"""
    return [
        [
            term.get("abbreviation") or abbreviation_for(term.get("discipline")),
            term.get("en") or "",
            term.get("kr") or "",
            term.get("description") or "",
        ]
        for term in terms
    ]


def build_workbook(
    rows: Sequence[Sequence[Any]],
    *,
    sheet_name: str,
    title: Optional[str] = None,
) -> Workbook:
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = sheet_name
    column_count = len(EXPORT_HEADERS)

    header_row = 1
    if title:
        sheet.append([title])
        sheet.merge_cells(start_row=1, start_column=1, end_row=1, end_column=column_count)
        sheet.cell(row=1, column=1).font = TITLE_FONT
        sheet.cell(row=1, column=1).alignment = CENTER
        sheet.row_dimensions[1].height = TITLE_ROW_HEIGHT
        sheet.append([])
        sheet.row_dimensions[2].height = SPACER_ROW_HEIGHT
        header_row = 3

    sheet.append(list(EXPORT_HEADERS))
    sheet.row_dimensions[header_row].height = HEADER_ROW_HEIGHT
    for column in range(1, column_count + 1):
        cell = sheet.cell(row=header_row, column=column)
        cell.font = HEADER_FONT
        cell.alignment = CENTER
        cell.fill = HEADER_FILL

    for offset, values in enumerate(rows):
        row_index = header_row + 1 + offset
        sheet.append(list(values))
        sheet.row_dimensions[row_index].height = DATA_ROW_HEIGHT
        for column in range(1, column_count + 1):
            cell = sheet.cell(row=row_index, column=column)
            cell.font = DATA_FONT
            cell.alignment = Alignment(
                horizontal="center" if column == 1 else "left",
                vertical="center",
                wrap_text=True,
            )
            if offset % 2 == 1:
                cell.fill = STRIPE_FILL

    for column, width in enumerate(COLUMN_WIDTHS, start=1):
        sheet.column_dimensions[get_column_letter(column)].width = width
    return workbook


def _add_instruction_sheet(workbook: Workbook) -> None:
    sheet = workbook.create_sheet("사용방법")
    lines = [
        f"{WORKBOOK_TITLE_PREFIX} - 용어집 업로드 가이드",
        "",
        "=== 사용 방법 ===",
        "",
        "1. 공종 열에는 다음 약어 중 하나를 정확히 입력하세요:",
    ]
    lines.extend(
        f"   {DISCIPLINES[name].abbreviation}: {name} ({DISCIPLINES[name].korean_name})"
        for name in DISCIPLINE_ORDER
    )
    lines.extend(
        [
            "",
            "2. EN 열에는 영어 용어를 입력하세요.",
            "3. KR 열에는 한국어 용어를 입력하세요.",
            "4. 설명 열에는 용어에 대한 설명을 입력하세요 (선택사항).",
            "",
            "=== 주의사항 ===",
            "- 첫 번째 행(헤더)은 절대 삭제하지 마세요.",
            "- 영어와 한국어 용어는 필수 입력 항목입니다.",
            "- 중복된 용어는 자동으로 건너뛰어집니다.",
        ]
    )
    for line in lines:
        sheet.append([line])
    sheet.column_dimensions["A"].width = 60
    sheet.cell(row=1, column=1).font = TITLE_FONT
    for row in sheet.iter_rows(min_row=2, max_col=1):
        cell = row[0]
        if isinstance(cell.value, str) and "===" in cell.value:
            cell.font = HEADER_FONT
        else:
            cell.alignment = Alignment(wrap_text=True, vertical="center")


def _attachment(filename: str) -> str:
    """非 ASCII 文件名按 RFC 5987 编码，同时给出 ASCII 兜底名称。"""
    fallback = "glossary" + PurePath(filename).suffix
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename)}"


def workbook_response(workbook: Workbook, filename: str) -> StreamingResponse:
    buffer = io.BytesIO()
    workbook.save(buffer)
    buffer.seek(0)
    response = StreamingResponse(buffer, media_type=XLSX_MEDIA_TYPE)
    response.headers["Content-Disposition"] = _attachment(filename)
    return response


class ExportService:
    """生成各类导出文件。"""

    def export_selected(self, db: Session, ids: Sequence[str]) -> StreamingResponse:
        terms = term_service.get_terms_by_ids(db, ids) if ids else []
        if terms is None:
            raise AppException(
                MSG_STORE_ERROR,
                HTTP_STATUS_INTERNAL_ERROR,
                data={"success": False, "message": MSG_STORE_ERROR},
            )
        if not terms:
            raise AppException(
                MSG_NOTHING_TO_EXPORT,
                HTTP_STATUS_BAD_REQUEST,
                data={"success": False, "message": MSG_NOTHING_TO_EXPORT},
            )
        workbook = build_workbook(
            term_rows(sort_for_display(terms)),
            sheet_name="선택 용어",
            title=f"{WORKBOOK_TITLE_PREFIX} - 선택된 용어집",
        )
        logger.info("Exporting %s selected terms", len(terms))
        return workbook_response(workbook, f"선택_용어집_{today_stamp()}.xlsx")

    def export_discipline(self, db: Session, discipline: str) -> StreamingResponse:
        if not is_known_discipline(discipline):
            discipline = discipline_by_abbreviation(discipline) or discipline
        if not is_known_discipline(discipline):
            raise AppException(MSG_UNKNOWN_DISCIPLINE, HTTP_STATUS_NOT_FOUND, data={"discipline": discipline})

        info = DISCIPLINES[discipline]
        terms = [term for term in term_service.get_glossary_terms(db) if term["discipline"] == discipline]
        workbook = build_workbook(
            term_rows(sort_for_display(terms)),
            sheet_name=f"{info.korean_name} 용어",
            title=f"{WORKBOOK_TITLE_PREFIX} - {info.korean_name} 용어집",
        )
        return workbook_response(workbook, f"{info.korean_name}_용어집.xlsx")

    def export_approved(self, db: Session) -> StreamingResponse:
        terms = term_service.get_glossary_terms(db)
        workbook = build_workbook(
            term_rows(sort_for_display(terms)),
            sheet_name="전체 용어",
            title=f"{WORKBOOK_TITLE_PREFIX} - 한영 기술용어집",
        )
        return workbook_response(workbook, f"전체_용어집_{today_stamp()}.xlsx")

    def download_template(self) -> StreamingResponse:
        workbook = build_workbook(
            [list(row) for row in _TEMPLATE_ROWS],
            sheet_name="용어 템플릿",
            title=f"{WORKBOOK_TITLE_PREFIX} - 한영 기술용어집",
        )
        _add_instruction_sheet(workbook)
        return workbook_response(workbook, TEMPLATE_FILENAME)

    def download_text_template(self) -> Response:
        response = Response(content=build_text_template().encode("utf-8"), media_type=TEXT_MEDIA_TYPE)
        response.headers["Content-Disposition"] = _attachment(TEXT_TEMPLATE_FILENAME)
        return response


export_service = ExportService()
