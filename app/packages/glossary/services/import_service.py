"""文本文件导入：解析 ``공종/EN/KR/설명`` 格式的逐行用语列表。

解析规则：
- 表头行 ``공종/EN/KR/설명`` 可选，存在时只解析其后的行；
- 空行与 ``#`` 开头的注释行忽略；
- 少于三段或 EN/KR 为空的行计为跳过；
- 第四段之后的内容视为说明的一部分（说明中允许出现 ``/``）；
- 无法识别的工种缩写回退到 ``General``。
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from app.packages.glossary.core.constants import IMPORT_HEADER_LINE
from app.packages.glossary.core.disciplines import (
    DISCIPLINE_ORDER,
    DISCIPLINES,
    FALLBACK_DISCIPLINE,
    discipline_by_abbreviation,
    is_known_discipline,
)
from app.packages.glossary.core.logger import logger
from app.packages.glossary.utils.text_formatting import (
    format_description,
    format_english_term,
    format_korean_term,
)

_FALLBACK_ENCODINGS = ("utf-8-sig", "cp949")


@dataclass(frozen=True)
class ImportEntry:
    discipline: str
    en: str
    kr: str
    description: str = ""


@dataclass
class ParsedImport:
    entries: List[ImportEntry] = field(default_factory=list)
    skipped: int = 0


def decode_upload(raw: bytes) -> Optional[str]:
    """按 UTF-8（含 BOM）优先、CP949 其次的顺序解码上传的文本文件。"""
    for encoding in _FALLBACK_ENCODINGS:
        try:
            return raw.decode(encoding)
        except UnicodeDecodeError:
            continue
    logger.warning("Uploaded glossary file could not be decoded (%s bytes)", len(raw))
    return None


def _is_header(line: str) -> bool:
    return line.replace(" ", "").upper() == IMPORT_HEADER_LINE.upper()


def _resolve_discipline(token: str) -> str:
    if is_known_discipline(token):
        return token
    return discipline_by_abbreviation(token) or FALLBACK_DISCIPLINE


def parse_import_text(content: str) -> ParsedImport:
    lines = [line.strip() for line in (content or "").lstrip("\ufeff").splitlines()]

    header_index = next((index for index, line in enumerate(lines) if _is_header(line)), None)
    if header_index is not None:
        lines = lines[header_index + 1:]
    else:
        logger.info("Import header '%s' not found, parsing every line as data", IMPORT_HEADER_LINE)

    result = ParsedImport()
    for line in lines:
        if not line or line.startswith("#"):
            continue

        parts = [part.strip() for part in line.split("/")]
        if len(parts) < 3:
            logger.debug("Skipping malformed import line: %s", line)
            result.skipped += 1
            continue

        en = format_english_term(parts[1])
        kr = format_korean_term(parts[2])
        if not en or not kr:
            logger.debug("Skipping import line with empty EN or KR: %s", line)
            result.skipped += 1
            continue

        result.entries.append(
            ImportEntry(
                discipline=_resolve_discipline(parts[0]),
                en=en,
                kr=kr,
                description=format_description("/".join(parts[3:])),
            )
        )
    return result


def build_text_template() -> str:
    """下载用的文本模板，与 ``parse_import_text`` 的格式保持一致。"""
    abbreviations = ", ".join(DISCIPLINES[name].abbreviation for name in DISCIPLINE_ORDER)
    return "\n".join(
        [
            "# 이 파일은 용어집 업로드 템플릿입니다.",
            "# 각 용어는 새 줄에 입력하고, '공종/EN/KR/설명' 형식으로 슬래시(/)로 구분해야 합니다.",
            "# '설명' 필드는 선택 사항이며, 비워둘 수 있습니다.",
            f"# '공종'은 다음 약어 중 하나를 사용해야 합니다: {abbreviations}",
            "",
            IMPORT_HEADER_LINE,
            "Gen/Example Term/예시 용어/이것은 일반 용어의 예시입니다.",
            "Arch/Building Plan/건축 계획/건물의 설계 및 배치 계획.",
            "Elec/Circuit Breaker/회로 차단기/전기 회로를 보호하는 장치.",
            "Piping/Valve/밸브/유체의 흐름을 제어하는 장치.",
            "Civil/Excavation/굴착/땅을 파는 작업.",
            "I&C/Sensor/센서/물리량을 감지하여 신호로 변환하는 장치.",
            "FP/Sprinkler/스프링클러/화재 시 물을 분사하는 소화 장치.",
            "HVAC/Air Duct/공기 덕트/공기를 운반하는 통로.",
            "Struct/Beam/보/수평 하중을 지지하는 구조 부재.",
            "Cell/Anode/음극/배터리에서 전자가 방출되는 전극.",
            "",
        ]
    )
