"""专业分类（공종）静态对照表。

缩写（abbreviation）永远由分类推导，不单独存储或编辑：
- ``abbreviation_for``：分类 → 缩写；
- ``normalize_discipline``：把未知/畸形的分类值回退到 ``General``；
- ``discipline_by_abbreviation``：导入文件时按缩写反查分类（不区分大小写）。
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from app.packages.glossary.core.enums import DisciplineEnum

FALLBACK_DISCIPLINE = DisciplineEnum.GENERAL.value


@dataclass(frozen=True)
class DisciplineInfo:
    name: str
    abbreviation: str
    korean_name: str
    order: int


DISCIPLINES: dict[str, DisciplineInfo] = {
    info.name: info
    for info in (
        DisciplineInfo(DisciplineEnum.GENERAL.value, "Gen", "일반", 0),
        DisciplineInfo(DisciplineEnum.ARCHITECTURE.value, "Arch", "건축", 1),
        DisciplineInfo(DisciplineEnum.ELECTRICAL.value, "Elec", "전기", 2),
        DisciplineInfo(DisciplineEnum.PIPING.value, "Piping", "배관", 3),
        DisciplineInfo(DisciplineEnum.CIVIL.value, "Civil", "토목", 4),
        DisciplineInfo(DisciplineEnum.INSTRUMENT_CONTROL.value, "I&C", "제어", 5),
        DisciplineInfo(DisciplineEnum.FIRE_PROTECTION.value, "FP", "소방", 6),
        DisciplineInfo(DisciplineEnum.HVAC.value, "HVAC", "공조", 7),
        DisciplineInfo(DisciplineEnum.STRUCTURE.value, "Struct", "구조", 8),
        DisciplineInfo(DisciplineEnum.CELL.value, "Cell", "배터리", 9),
    )
}


DISCIPLINE_ORDER: tuple[str, ...] = tuple(
    sorted(DISCIPLINES, key=lambda name: DISCIPLINES[name].order)
)


def is_known_discipline(value: Optional[str]) -> bool:
    return isinstance(value, str) and value in DISCIPLINES


def normalize_discipline(value: Optional[str]) -> str:
    """已知分类原样返回，其余（空值、大小写错误、历史脏数据）一律回退到 ``General``。"""
    if is_known_discipline(value):
        return value  # type: ignore[return-value]
    return FALLBACK_DISCIPLINE


def abbreviation_for(discipline: Optional[str]) -> str:
    return DISCIPLINES[normalize_discipline(discipline)].abbreviation


def discipline_order_index(discipline: Optional[str]) -> int:
    """未知分类排在最后。"""
    info = DISCIPLINES.get(discipline or "")
    return info.order if info is not None else len(DISCIPLINES)


def discipline_by_abbreviation(abbreviation: Optional[str]) -> Optional[str]:
    token = (abbreviation or "").strip().lower()
    if not token:
        return None
    for info in DISCIPLINES.values():
        if info.abbreviation.lower() == token:
            return info.name
    return None


def list_disciplines() -> list[dict[str, object]]:
    return [
        {
            "name": DISCIPLINES[name].name,
            "abbreviation": DISCIPLINES[name].abbreviation,
            "korean_name": DISCIPLINES[name].korean_name,
            "order": DISCIPLINES[name].order,
        }
        for name in DISCIPLINE_ORDER
    ]
