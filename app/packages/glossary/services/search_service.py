"""展示层辅助：排序、按工种分组与关键字搜索，均在内存中处理已序列化的用语。"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

from app.packages.glossary.core.disciplines import (
    DISCIPLINE_ORDER,
    DISCIPLINES,
    discipline_order_index,
)
from app.packages.glossary.core.enums import TermStatusEnum

Term = Dict[str, Any]


def _display_key(term: Term) -> tuple:
    return (discipline_order_index(term.get("discipline")), (term.get("en") or "").lower())


def sort_for_display(terms: Iterable[Term], *, admin_view: bool = False) -> List[Term]:
    """管理视图：待审核在前（按英文排序），其后已批准的按工种顺序与英文排序。

    普通视图直接按工种顺序与英文排序。
    """
    items = list(terms)
    if not admin_view:
        return sorted(items, key=_display_key)

    pending = [term for term in items if term.get("status") == TermStatusEnum.PENDING.value]
    others = [term for term in items if term.get("status") != TermStatusEnum.PENDING.value]
    pending.sort(key=lambda term: (term.get("en") or "").lower())
    others.sort(key=_display_key)
    return pending + others


def group_by_discipline(terms: Iterable[Term]) -> List[Dict[str, Any]]:
    """按固定工种顺序分组，空分组不输出。"""
    buckets: Dict[str, List[Term]] = {name: [] for name in DISCIPLINE_ORDER}
    for term in terms:
        discipline = term.get("discipline")
        if discipline in buckets:
            buckets[discipline].append(term)

    groups = []
    for name in DISCIPLINE_ORDER:
        items = buckets[name]
        if not items:
            continue
        info = DISCIPLINES[name]
        groups.append(
            {
                "discipline": name,
                "abbreviation": info.abbreviation,
                "korean_name": info.korean_name,
                "count": len(items),
                "terms": sorted(items, key=lambda term: (term.get("en") or "").lower()),
            }
        )
    return groups


def search_terms(
    terms: Iterable[Term],
    keyword: Optional[str],
    *,
    include_abbreviation: bool = False,
) -> List[Term]:
    """不区分大小写的子串匹配。

    顶部搜索（``include_abbreviation=False``）在关键字为空时不返回结果；
    管理表格过滤（``include_abbreviation=True``）在关键字为空时返回全部。
    """
    items = list(terms)
    needle = (keyword or "").strip().lower()
    if not needle:
        return items if include_abbreviation else []

    fields = ("en", "kr", "description", "abbreviation") if include_abbreviation else ("en", "kr", "description")
    return [
        term
        for term in items
        if any(needle in str(term.get(name) or "").lower() for name in fields)
    ]
