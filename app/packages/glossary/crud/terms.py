"""用语表的数据库访问方法。"""

from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional, Sequence

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.packages.glossary.core.enums import TermStatusEnum
from app.packages.glossary.crud.base import CRUDBase
from app.packages.glossary.models.term import GlossaryTerm


class CRUDGlossaryTerm(CRUDBase[GlossaryTerm]):
    """提供分页范围查询、按状态统计与按 ID 列表批量变更的能力。"""

    def fetch_page(
        self,
        db: Session,
        *,
        offset: int,
        limit: int,
        status: Optional[str] = None,
    ) -> List[GlossaryTerm]:
        """返回一页按 ``discipline, en, id`` 排序的用语，``status`` 为空时不过滤。"""
        query = self.query(db)
        if status is not None:
            query = query.filter(self.model.status == status)
        return (
            query.order_by(self.model.discipline.asc(), self.model.en.asc(), self.model.id.asc())
            .offset(max(offset, 0))
            .limit(max(limit, 1))
            .all()
        )

    def get_by_ids(self, db: Session, ids: Sequence[str]) -> List[GlossaryTerm]:
        if not ids:
            return []
        return self.query(db).filter(self.model.id.in_(list(ids))).all()

    def exists_with_text(self, db: Session, *, en: str, kr: str) -> bool:
        """任意状态下是否已有 EN 与 KR 都相同（忽略大小写）的用语。"""
        match = self.query(db).filter(
            func.lower(self.model.en) == en.lower(),
            func.lower(self.model.kr) == kr.lower(),
        ).first()
        return match is not None

    def ids_by_status(self, db: Session, status: str) -> List[str]:
        rows = self.query(db).with_entities(self.model.id).filter(self.model.status == status).all()
        return [row[0] for row in rows]

    def all_ids(self, db: Session) -> List[str]:
        return [row[0] for row in self.query(db).with_entities(self.model.id).all()]

    def count_by_status(self, db: Session) -> Dict[str, int]:
        """各状态的条数，未出现的状态补 0。"""
        counts = {item.value: 0 for item in TermStatusEnum}
        rows = (
            db.query(self.model.status, func.count(self.model.id))
            .group_by(self.model.status)
            .all()
        )
        for status, count in rows:
            counts[status] = int(count)
        return counts

    def count_by_discipline(self, db: Session) -> Dict[str, int]:
        rows = (
            db.query(self.model.discipline, func.count(self.model.id))
            .group_by(self.model.discipline)
            .all()
        )
        return {discipline: int(count) for discipline, count in rows}

    def count_created_since(self, db: Session, since: datetime) -> int:
        return self.query(db).filter(self.model.created_at >= since).count()

    def update_status_by_ids(
        self,
        db: Session,
        ids: Sequence[str],
        status: str,
        *,
        auto_commit: bool = True,
    ) -> int:
        """批量更新状态，返回受影响行数。"""
        affected = (
            self.query(db)
            .filter(self.model.id.in_(list(ids)))
            .update({self.model.status: status}, synchronize_session=False)
        )
        if auto_commit:
            db.commit()
        return int(affected or 0)

    def delete_by_ids(self, db: Session, ids: Sequence[str], *, auto_commit: bool = True) -> int:
        """批量物理删除，返回受影响行数。"""
        affected = (
            self.query(db)
            .filter(self.model.id.in_(list(ids)))
            .delete(synchronize_session=False)
        )
        if auto_commit:
            db.commit()
        return int(affected or 0)


term_crud = CRUDGlossaryTerm(GlossaryTerm)
