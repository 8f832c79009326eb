"""审核相关路由：仅管理员可访问。"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.packages.glossary.api.v1.schemas.common import ActionResponse
from app.packages.glossary.api.v1.schemas.terms import (
    BulkApproveResponse,
    DatabaseStatsResponse,
    DuplicatesResponse,
    TermDeletionResponse,
    TermIdsRequest,
    TermListResponse,
    TermMutationResponse,
)
from app.packages.glossary.core.constants import MSG_TERMS_LOADED
from app.packages.glossary.core.dependencies import get_db, require_admin
from app.packages.glossary.core.enums import TermStatusEnum
from app.packages.glossary.core.responses import create_response, render_action_result
from app.packages.glossary.services.duplicate_service import detect_duplicates
from app.packages.glossary.services.search_service import search_terms, sort_for_display
from app.packages.glossary.services.term_service import term_service

router = APIRouter(prefix="/moderation", tags=["moderation"], dependencies=[Depends(require_admin)])


@router.get("/terms", response_model=TermListResponse)
def list_all_terms(
    status: Optional[TermStatusEnum] = Query(None, description="按状态过滤"),
    q: Optional[str] = Query(None, description="关键字，额外匹配工种缩写"),
    db: Session = Depends(get_db),
) -> TermListResponse:
    """管理视图：待审核在前，其后按工种顺序排列。"""
    terms = term_service.get_glossary_terms(db, for_admin=True)
    if status is not None:
        terms = [term for term in terms if term["status"] == status.value]
    terms = search_terms(terms, q, include_abbreviation=True)
    return create_response(MSG_TERMS_LOADED, sort_for_display(terms, admin_view=True))


@router.post("/terms/{term_id}/approve", response_model=TermMutationResponse)
def approve_term(term_id: str, db: Session = Depends(get_db)) -> TermMutationResponse:
    return render_action_result(term_service.approve_term(db, term_id))


@router.post("/terms/{term_id}/reject", response_model=TermDeletionResponse)
def reject_term(term_id: str, db: Session = Depends(get_db)) -> TermDeletionResponse:
    """拒绝即删除。"""
    return render_action_result(term_service.reject_term(db, term_id))


@router.post("/approve-all", response_model=BulkApproveResponse)
def approve_all(db: Session = Depends(get_db)) -> BulkApproveResponse:
    """存在与已批准用语重复的待审核用语时返回 409。"""
    return render_action_result(term_service.approve_all(db))


@router.post("/approve-all-excluding-duplicates", response_model=BulkApproveResponse)
def approve_all_excluding_duplicates(db: Session = Depends(get_db)) -> BulkApproveResponse:
    """只批准不重复的待审核用语，跳过的数量见 ``skipped``。"""
    return render_action_result(term_service.approve_all(db, exclude_duplicates=True))


@router.post("/reject-all", response_model=ActionResponse)
def reject_all(db: Session = Depends(get_db)) -> ActionResponse:
    return render_action_result(term_service.reject_all(db))


@router.post("/bulk-delete", response_model=ActionResponse)
def delete_multiple(payload: TermIdsRequest, db: Session = Depends(get_db)) -> ActionResponse:
    return render_action_result(term_service.delete_multiple(db, payload.ids))


@router.delete("/terms", response_model=ActionResponse)
def delete_all(db: Session = Depends(get_db)) -> ActionResponse:
    """删除全部用语（包括已批准）。"""
    return render_action_result(term_service.delete_all(db))


@router.get("/duplicates", response_model=DuplicatesResponse)
def list_duplicates(db: Session = Depends(get_db)) -> DuplicatesResponse:
    return render_action_result(detect_duplicates(db))


@router.get("/stats", response_model=DatabaseStatsResponse)
def database_stats(db: Session = Depends(get_db)) -> DatabaseStatsResponse:
    return render_action_result(term_service.get_database_stats(db))
