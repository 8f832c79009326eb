"""用语服务：提交、查询、审核与批量处理用语。

所有触达数据库的操作都在本层捕获 ``SQLAlchemyError``：回滚会话、记录日志，
读操作返回空列表（按 ID 取用语时返回 ``None``），写操作返回 ``success=False`` 的 ``ActionResult``。
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.packages.glossary.core.config import get_settings
from app.packages.glossary.core.constants import (
    ADMIN_ROLE,
    HTTP_STATUS_CONFLICT,
    HTTP_STATUS_FORBIDDEN,
    HTTP_STATUS_INTERNAL_ERROR,
    HTTP_STATUS_NOT_FOUND,
    MSG_BULK_APPROVED,
    MSG_BULK_DELETED,
    MSG_BULK_PARTIAL,
    MSG_BULK_REJECTED,
    MSG_DUPLICATES_BLOCK_BULK,
    MSG_EN_KR_REQUIRED,
    MSG_IMPORT_DONE,
    MSG_IMPORT_DUPLICATES,
    MSG_NO_VALID_TERMS,
    MSG_NOTHING_SELECTED,
    MSG_NOTHING_TO_APPROVE,
    MSG_NOTHING_TO_DELETE,
    MSG_NOTHING_TO_REJECT,
    MSG_ONLY_DUPLICATES_PENDING,
    MSG_PERMISSION_DENIED,
    MSG_REQUIRED_FIELDS,
    MSG_STATS_LOADED,
    MSG_STORE_ERROR,
    MSG_TERM_ADDED,
    MSG_TERM_APPROVED,
    MSG_TERM_DELETED,
    MSG_TERM_EXISTS,
    MSG_TERM_NOT_FOUND,
    MSG_TERM_REJECTED,
    MSG_TERM_UPDATED,
    MSG_UNKNOWN_DISCIPLINE,
)
from app.packages.glossary.core.disciplines import (
    DISCIPLINE_ORDER,
    DISCIPLINES,
    abbreviation_for,
    is_known_discipline,
    normalize_discipline,
)
from app.packages.glossary.core.enums import TermStatusEnum
from app.packages.glossary.core.logger import logger
from app.packages.glossary.core.responses import ActionResult
from app.packages.glossary.core.timezone import format_datetime
from app.packages.glossary.crud.terms import term_crud
from app.packages.glossary.models.term import GlossaryTerm
from app.packages.glossary.models.user_profile import UserProfile
from app.packages.glossary.services.import_service import parse_import_text
from app.packages.glossary.utils.batching import chunked, fetch_in_pages
from app.packages.glossary.utils.duplicates import find_duplicate_pairs

PENDING = TermStatusEnum.PENDING.value
APPROVED = TermStatusEnum.APPROVED.value

# 待审核积压与容量告警阈值
PENDING_BACKLOG_THRESHOLD = 100
NEAR_LIMIT_RATIO = 0.8


def serialize_term(term: GlossaryTerm) -> Dict[str, Any]:
    """把 ORM 对象转换为接口输出；未知工种回退到 ``General`` 并重新推导缩写。"""
    discipline = normalize_discipline(term.discipline)
    if discipline != term.discipline:
        logger.warning(
            "Term %s has unknown discipline %r, falling back to %s",
            term.id,
            term.discipline,
            discipline,
        )
    return {
        "id": term.id,
        "en": term.en,
        "kr": term.kr,
        "description": term.description or "",
        "discipline": discipline,
        "abbreviation": abbreviation_for(discipline),
        "status": term.status,
        "created_at": format_datetime(term.created_at),
        "created_by": term.created_by,
    }


def _clean(value: Optional[str]) -> str:
    return (value or "").strip()


class TermService:
    """封装用语的读写与审核逻辑。"""

    # ------------------------------------------------------------------
    # 查询
    # ------------------------------------------------------------------

    def get_glossary_terms(
        self,
        db: Session,
        *,
        status: Optional[str] = None,
        for_admin: bool = False,
    ) -> List[Dict[str, Any]]:
        """分页拉取全部匹配的用语，按 ``discipline, en, id`` 排序。

        - 非管理员：按 ``status`` 过滤，默认只看已批准；
        - 管理员：返回所有状态；
        - 数据库异常时记录日志并返回空列表。
        """
        effective_status = None if for_admin else (status or APPROVED)
        try:
            rows = self._fetch_rows(db, effective_status)
        except SQLAlchemyError:
            db.rollback()
            logger.exception("Failed to fetch glossary terms (status=%s, admin=%s)", effective_status, for_admin)
            return []
        return [serialize_term(row) for row in rows]

    @staticmethod
    def _fetch_rows(db: Session, status: Optional[str]) -> List[GlossaryTerm]:
        """分页读取，``status`` 为空时不过滤；异常原样抛出。"""
        settings = get_settings()

        def _fetch_page(offset: int, limit: int) -> List[GlossaryTerm]:
            return term_crud.fetch_page(db, offset=offset, limit=limit, status=status)

        rows = fetch_in_pages(
            _fetch_page,
            page_size=settings.fetch_page_size,
            max_rows=settings.fetch_max_rows,
        )
        if len(rows) >= settings.fetch_max_rows:
            logger.warning("Glossary fetch stopped at the %s row ceiling", settings.fetch_max_rows)
        return rows

    def get_terms_by_ids(self, db: Session, ids: Sequence[str]) -> Optional[List[Dict[str, Any]]]:
        """按调用方给定的 ID 返回用语，顺序与 ``ids`` 一致，不存在的 ID 忽略。

        数据库异常时返回 ``None``，与“一条都没找到”的空列表区分开。
        """
        unique_ids = list(dict.fromkeys(ids))
        found: Dict[str, GlossaryTerm] = {}
        try:
            for batch in chunked(unique_ids, get_settings().delete_batch_size):
                for term in term_crud.get_by_ids(db, batch):
                    found[term.id] = term
        except SQLAlchemyError:
            db.rollback()
            logger.exception("Failed to load %s selected terms", len(unique_ids))
            return None
        return [serialize_term(found[term_id]) for term_id in unique_ids if term_id in found]

    def get_glossary_stats(self, db: Session) -> List[Dict[str, Any]]:
        """各工种已批准/待审核数量与批准进度（百分比，保留一位小数）。"""
        stats = {
            name: {
                "discipline": name,
                "abbreviation": DISCIPLINES[name].abbreviation,
                "korean_name": DISCIPLINES[name].korean_name,
                "approved": 0,
                "pending": 0,
            }
            for name in DISCIPLINE_ORDER
        }
        for term in self.get_glossary_terms(db, for_admin=True):
            bucket = stats[term["discipline"]]
            if term["status"] == APPROVED:
                bucket["approved"] += 1
            else:
                bucket["pending"] += 1

        result = []
        for name in DISCIPLINE_ORDER:
            bucket = stats[name]
            total = bucket["approved"] + bucket["pending"]
            bucket["total"] = total
            bucket["progress"] = round(bucket["approved"] * 100 / total, 1) if total else 0.0
            result.append(bucket)
        return result

    def get_database_stats(self, db: Session) -> ActionResult:
        """数据库概况：状态计数、工种分布、近期新增以及分页/容量告警。"""
        settings = get_settings()
        since = datetime.now(timezone.utc) - timedelta(hours=settings.recent_activity_hours)
        try:
            status_counts = term_crud.count_by_status(db)
            raw_disciplines = term_crud.count_by_discipline(db)
            recent = term_crud.count_created_since(db, since)
        except SQLAlchemyError:
            db.rollback()
            logger.exception("Failed to collect database statistics")
            return ActionResult.fail(MSG_STORE_ERROR, code=HTTP_STATUS_INTERNAL_ERROR)

        by_discipline = {name: 0 for name in DISCIPLINE_ORDER}
        for discipline, count in raw_disciplines.items():
            by_discipline[normalize_discipline(discipline)] += count

        total = sum(status_counts.values())
        warnings = {
            "pagination_active": total > settings.fetch_page_size,
            "near_limit": total >= settings.fetch_max_rows * NEAR_LIMIT_RATIO,
            "pending_backlog": status_counts.get(PENDING, 0) > PENDING_BACKLOG_THRESHOLD,
        }
        data = {
            "total": total,
            "status_counts": status_counts,
            "by_discipline": by_discipline,
            "recent_activity": {"hours": settings.recent_activity_hours, "count": recent},
            "limits": {
                "page_size": settings.fetch_page_size,
                "max_rows": settings.fetch_max_rows,
            },
            "warnings": warnings,
        }
        return ActionResult.ok(MSG_STATS_LOADED, data=data)

    # ------------------------------------------------------------------
    # 提交与编辑
    # ------------------------------------------------------------------

    def add_term(
        self,
        db: Session,
        *,
        en: str,
        kr: str,
        discipline: str,
        description: Optional[str] = None,
        created_by: Optional[str] = None,
    ) -> ActionResult:
        """新增用语，状态固定为 ``pending``，等待管理员审核。

        EN 与 KR 都和已有用语相同（忽略大小写，不论状态）时返回 409。
        """
        en, kr, discipline = _clean(en), _clean(kr), _clean(discipline)
        if not en or not kr or not discipline:
            return ActionResult.fail(MSG_REQUIRED_FIELDS)
        if not is_known_discipline(discipline):
            return ActionResult.fail(MSG_UNKNOWN_DISCIPLINE, data={"discipline": discipline})

        try:
            if term_crud.exists_with_text(db, en=en, kr=kr):
                return ActionResult.fail(MSG_TERM_EXISTS, code=HTTP_STATUS_CONFLICT)
            term = term_crud.create(
                db,
                {
                    "en": en,
                    "kr": kr,
                    "description": _clean(description),
                    "discipline": discipline,
                    "status": PENDING,
                    "created_by": created_by,
                },
            )
        except SQLAlchemyError:
            db.rollback()
            logger.exception("Failed to add term %r/%r", en, kr)
            return ActionResult.fail(MSG_STORE_ERROR, code=HTTP_STATUS_INTERNAL_ERROR)

        logger.info("Term %s submitted by %s", term.id, created_by or "anonymous")
        return ActionResult.ok(MSG_TERM_ADDED, affected=1, data={"term": serialize_term(term)})

    def add_terms_from_text(
        self,
        db: Session,
        content: str,
        *,
        created_by: Optional[str] = None,
    ) -> ActionResult:
        """批量导入文本文件中的用语；EN 与 KR 同时与已有用语重复（忽略大小写）时跳过。"""
        parsed = parse_import_text(content)
        if not parsed.entries:
            return ActionResult.fail(MSG_NO_VALID_TERMS, data={"skipped": parsed.skipped})

        seen = {
            (term["en"].lower(), term["kr"].lower())
            for term in self.get_glossary_terms(db, for_admin=True)
        }
        to_insert = []
        duplicates = 0
        for entry in parsed.entries:
            key = (entry.en.lower(), entry.kr.lower())
            if key in seen:
                duplicates += 1
                continue
            seen.add(key)
            to_insert.append(entry)

        counts = {"added": 0, "duplicates": duplicates, "skipped": parsed.skipped}
        if not to_insert:
            return ActionResult.fail(
                MSG_IMPORT_DUPLICATES.format(duplicates=duplicates),
                code=HTTP_STATUS_CONFLICT,
                data=counts,
            )

        try:
            for entry in to_insert:
                term_crud.create(
                    db,
                    {
                        "en": entry.en,
                        "kr": entry.kr,
                        "description": entry.description,
                        "discipline": entry.discipline,
                        "status": PENDING,
                        "created_by": created_by,
                    },
                    auto_commit=False,
                )
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            logger.exception("Failed to import %s terms", len(to_insert))
            return ActionResult.fail(MSG_STORE_ERROR, code=HTTP_STATUS_INTERNAL_ERROR, data=counts)

        counts["added"] = len(to_insert)
        message = MSG_IMPORT_DONE.format(added=len(to_insert))
        if duplicates:
            message = f"{message} {MSG_IMPORT_DUPLICATES.format(duplicates=duplicates)}"
        logger.info("Imported %s terms (%s duplicates, %s skipped)", len(to_insert), duplicates, parsed.skipped)
        return ActionResult.ok(message, affected=len(to_insert), data=counts)

    def update_term(
        self,
        db: Session,
        term_id: str,
        *,
        editor: UserProfile,
        en: Optional[str] = None,
        kr: Optional[str] = None,
        description: Optional[str] = None,
        discipline: Optional[str] = None,
    ) -> ActionResult:
        """管理员或提交者本人可以编辑；修改工种时缩写随之重算。"""
        try:
            term = term_crud.get(db, term_id)
        except SQLAlchemyError:
            db.rollback()
            logger.exception("Failed to load term %s for update", term_id)
            return ActionResult.fail(MSG_STORE_ERROR, code=HTTP_STATUS_INTERNAL_ERROR)
        if term is None:
            return ActionResult.fail(MSG_TERM_NOT_FOUND, code=HTTP_STATUS_NOT_FOUND)
        if editor.role != ADMIN_ROLE and term.created_by != editor.id:
            return ActionResult.fail(MSG_PERMISSION_DENIED, code=HTTP_STATUS_FORBIDDEN)

        # 先校验全部字段，任一失败时不改动已加载的对象
        changes: Dict[str, str] = {}
        for field, value in (("en", en), ("kr", kr)):
            if value is not None:
                if not _clean(value):
                    return ActionResult.fail(MSG_EN_KR_REQUIRED)
                changes[field] = _clean(value)
        if discipline is not None:
            if not is_known_discipline(_clean(discipline)):
                return ActionResult.fail(MSG_UNKNOWN_DISCIPLINE, data={"discipline": discipline})
            changes["discipline"] = _clean(discipline)
        if description is not None:
            changes["description"] = _clean(description)

        for field, value in changes.items():
            setattr(term, field, value)

        try:
            saved = term_crud.save(db, term)
        except SQLAlchemyError:
            db.rollback()
            logger.exception("Failed to update term %s", term_id)
            return ActionResult.fail(MSG_STORE_ERROR, code=HTTP_STATUS_INTERNAL_ERROR)
        return ActionResult.ok(MSG_TERM_UPDATED, affected=1, data={"term": serialize_term(saved)})

    # ------------------------------------------------------------------
    # 单条审核
    # ------------------------------------------------------------------

    def approve_term(self, db: Session, term_id: str) -> ActionResult:
        try:
            term = term_crud.get(db, term_id)
            if term is None:
                return ActionResult.fail(MSG_TERM_NOT_FOUND, code=HTTP_STATUS_NOT_FOUND)
            term.status = APPROVED
            saved = term_crud.save(db, term)
        except SQLAlchemyError:
            db.rollback()
            logger.exception("Failed to approve term %s", term_id)
            return ActionResult.fail(MSG_STORE_ERROR, code=HTTP_STATUS_INTERNAL_ERROR)
        logger.info("Term %s approved", term_id)
        return ActionResult.ok(MSG_TERM_APPROVED, affected=1, data={"term": serialize_term(saved)})

    def reject_term(self, db: Session, term_id: str) -> ActionResult:
        """拒绝即删除，不存在 ``rejected`` 状态。"""
        return self._delete_one(db, term_id, MSG_TERM_REJECTED)

    def delete_term(self, db: Session, term_id: str) -> ActionResult:
        return self._delete_one(db, term_id, MSG_TERM_DELETED)

    def _delete_one(self, db: Session, term_id: str, message: str) -> ActionResult:
        try:
            term = term_crud.get(db, term_id)
            if term is None:
                return ActionResult.fail(MSG_TERM_NOT_FOUND, code=HTTP_STATUS_NOT_FOUND)
            term_crud.hard_delete(db, term)
        except SQLAlchemyError:
            db.rollback()
            logger.exception("Failed to delete term %s", term_id)
            return ActionResult.fail(MSG_STORE_ERROR, code=HTTP_STATUS_INTERNAL_ERROR)
        logger.info("Term %s deleted", term_id)
        return ActionResult.ok(message, affected=1, data={"id": term_id})

    # ------------------------------------------------------------------
    # 批量处理
    # ------------------------------------------------------------------

    def approve_all(self, db: Session, *, exclude_duplicates: bool = False) -> ActionResult:
        """把所有待审核用语分批改为已批准。

        存在与已批准用语重复的待审核用语时返回 409；``exclude_duplicates``
        为真时跳过这些用语，只批准其余部分，被跳过的数量放在 ``skipped``。
        """
        ids, error = self._load_ids(db, lambda: term_crud.ids_by_status(db, PENDING))
        if error is not None:
            return error
        if not ids:
            return ActionResult.fail(MSG_NOTHING_TO_APPROVE)

        duplicate_ids, error = self._load_ids(db, lambda: self._duplicate_pending_ids(db))
        if error is not None:
            return error
        if duplicate_ids and not exclude_duplicates:
            return self._duplicates_blocked(duplicate_ids)
        skipped = set(duplicate_ids)
        ids = [term_id for term_id in ids if term_id not in skipped]
        if not ids:
            return ActionResult.fail(MSG_ONLY_DUPLICATES_PENDING, data={"skipped": len(skipped)})

        result = self._run_batches(
            db,
            ids,
            get_settings().approve_batch_size,
            lambda batch: term_crud.update_status_by_ids(db, batch, APPROVED),
            MSG_BULK_APPROVED,
        )
        if exclude_duplicates:
            result.data = dict(result.data or {}, skipped=len(skipped))
        return result

    def reject_all(self, db: Session) -> ActionResult:
        """删除所有待审核用语；存在重复时返回 409，需先逐条处理重复项。"""
        ids, error = self._load_ids(db, lambda: term_crud.ids_by_status(db, PENDING))
        if error is not None:
            return error
        if not ids:
            return ActionResult.fail(MSG_NOTHING_TO_REJECT)

        duplicate_ids, error = self._load_ids(db, lambda: self._duplicate_pending_ids(db))
        if error is not None:
            return error
        if duplicate_ids:
            return self._duplicates_blocked(duplicate_ids)
        return self._run_batches(
            db,
            ids,
            get_settings().delete_batch_size,
            lambda batch: term_crud.delete_by_ids(db, batch),
            MSG_BULK_REJECTED,
        )

    def delete_multiple(self, db: Session, ids: Sequence[str]) -> ActionResult:
        unique_ids = [term_id for term_id in dict.fromkeys(ids) if term_id]
        if not unique_ids:
            return ActionResult.fail(MSG_NOTHING_SELECTED)
        return self._run_batches(
            db,
            unique_ids,
            get_settings().delete_batch_size,
            lambda batch: term_crud.delete_by_ids(db, batch),
            MSG_BULK_DELETED,
        )

    def delete_all(self, db: Session) -> ActionResult:
        ids, error = self._load_ids(db, lambda: term_crud.all_ids(db))
        if error is not None:
            return error
        if not ids:
            return ActionResult.fail(MSG_NOTHING_TO_DELETE)
        return self._run_batches(
            db,
            ids,
            get_settings().delete_batch_size,
            lambda batch: term_crud.delete_by_ids(db, batch),
            MSG_BULK_DELETED,
        )

    def _duplicate_pending_ids(self, db: Session) -> List[str]:
        """与已批准用语 EN 或 KR 相同的待审核用语 ID，去重后保持原顺序。"""
        pending = [serialize_term(row) for row in self._fetch_rows(db, PENDING)]
        approved = [serialize_term(row) for row in self._fetch_rows(db, APPROVED)]
        pairs = find_duplicate_pairs(pending, approved)
        return list(dict.fromkeys(pair.pending_term["id"] for pair in pairs))

    @staticmethod
    def _duplicates_blocked(duplicate_ids: Sequence[str]) -> ActionResult:
        logger.info("Bulk moderation blocked by %s duplicate pending terms", len(duplicate_ids))
        return ActionResult.fail(
            MSG_DUPLICATES_BLOCK_BULK.format(count=len(duplicate_ids)),
            code=HTTP_STATUS_CONFLICT,
            data={"duplicate_count": len(duplicate_ids)},
        )

    @staticmethod
    def _load_ids(
        db: Session,
        loader: Callable[[], List[str]],
    ) -> Tuple[List[str], Optional[ActionResult]]:
        try:
            return loader(), None
        except SQLAlchemyError:
            db.rollback()
            logger.exception("Failed to load term ids for bulk operation")
            return [], ActionResult.fail(MSG_STORE_ERROR, code=HTTP_STATUS_INTERNAL_ERROR)

    @staticmethod
    def _run_batches(
        db: Session,
        ids: Sequence[str],
        batch_size: int,
        mutate: Callable[[List[str]], int],
        message: str,
    ) -> ActionResult:
        """逐批执行并提交；首个失败的批次终止处理，之前已提交的批次不回滚。"""
        affected = 0
        for index, batch in enumerate(chunked(ids, batch_size), start=1):
            try:
                affected += mutate(batch)
            except SQLAlchemyError:
                db.rollback()
                logger.exception("Bulk operation failed at batch %s (%s rows already applied)", index, affected)
                return ActionResult.fail(
                    MSG_BULK_PARTIAL.format(count=affected),
                    code=HTTP_STATUS_INTERNAL_ERROR,
                    affected=affected,
                )
        logger.info("Bulk operation affected %s of %s terms", affected, len(ids))
        return ActionResult.ok(message.format(count=affected), affected=affected)


term_service = TermService()
