"""重复用语匹配：待审核用语与已批准用语的 EN 或 KR 相同（忽略大小写）即视为重复。"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Iterable, List, Optional

from app.packages.glossary.core.enums import DuplicateMatchEnum

Term = Dict[str, Any]


@dataclass(frozen=True)
class DuplicatePair:
    pending_term: Term
    existing_term: Term
    match_type: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _match_type(pending: Term, existing: Term) -> Optional[str]:
    en_match = (pending.get("en") or "").lower() == (existing.get("en") or "").lower()
    kr_match = (pending.get("kr") or "").lower() == (existing.get("kr") or "").lower()
    if en_match and kr_match:
        return DuplicateMatchEnum.BOTH.value
    if en_match:
        return DuplicateMatchEnum.EN.value
    if kr_match:
        return DuplicateMatchEnum.KR.value
    return None


def find_duplicate_pairs(pending: Iterable[Term], approved: Iterable[Term]) -> List[DuplicatePair]:
    """逐一比较待审核与已批准用语，每个匹配的已批准用语生成一对结果。"""
    approved_terms = list(approved)
    pairs: List[DuplicatePair] = []
    for candidate in pending:
        for existing in approved_terms:
            match_type = _match_type(candidate, existing)
            if match_type is not None:
                pairs.append(DuplicatePair(candidate, existing, match_type))
    return pairs
