"""重复检测：找出与已批准用语 EN 或 KR 相同（忽略大小写）的待审核用语。

存在重复时审核界面给出提示，全部批准与全部拒绝也会被拦截。
"""

from __future__ import annotations

from sqlalchemy.orm import Session

from app.packages.glossary.core.constants import MSG_DUPLICATES_FOUND, MSG_NO_DUPLICATES
from app.packages.glossary.core.enums import TermStatusEnum
from app.packages.glossary.core.logger import logger
from app.packages.glossary.core.responses import ActionResult
from app.packages.glossary.services.term_service import term_service
from app.packages.glossary.utils.duplicates import find_duplicate_pairs


def detect_duplicates(db: Session) -> ActionResult:
    pending = term_service.get_glossary_terms(db, status=TermStatusEnum.PENDING.value)
    approved = term_service.get_glossary_terms(db, status=TermStatusEnum.APPROVED.value)
    pairs = find_duplicate_pairs(pending, approved)
    if pairs:
        logger.info("Found %s duplicate pairs among %s pending terms", len(pairs), len(pending))
        message = MSG_DUPLICATES_FOUND.format(count=len(pairs))
    else:
        message = MSG_NO_DUPLICATES
    return ActionResult.ok(
        message,
        affected=len(pairs),
        data={"duplicates": [pair.to_dict() for pair in pairs]},
    )
