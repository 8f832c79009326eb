"""用语浏览、提交与编辑相关的路由定义。"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, File, Query, UploadFile
from sqlalchemy.orm import Session

from app.packages.glossary.api.v1.schemas.terms import (
    DisciplineListResponse,
    DisciplineStatsResponse,
    TermCreateRequest,
    TermDeletionResponse,
    TermGroupResponse,
    TermImportResponse,
    TermListResponse,
    TermMutationResponse,
    TermUpdateRequest,
)
from app.packages.glossary.core.constants import (
    HTTP_STATUS_BAD_REQUEST,
    MSG_EMPTY_FILE,
    MSG_TERMS_LOADED,
    MSG_STATS_LOADED,
)
from app.packages.glossary.core.dependencies import get_current_user, get_db, get_optional_user, require_admin
from app.packages.glossary.core.disciplines import list_disciplines
from app.packages.glossary.core.enums import TermStatusEnum
from app.packages.glossary.core.exceptions import AppException
from app.packages.glossary.core.responses import create_response, render_action_result
from app.packages.glossary.models.user_profile import UserProfile
from app.packages.glossary.services.import_service import decode_upload
from app.packages.glossary.services.search_service import group_by_discipline, search_terms, sort_for_display
from app.packages.glossary.services.term_service import term_service

router = APIRouter(prefix="/terms", tags=["terms"])


@router.get("", response_model=TermListResponse)
def list_terms(
    status: Optional[TermStatusEnum] = Query(None, description="状态过滤，默认只返回已批准"),
    db: Session = Depends(get_db),
) -> TermListResponse:
    """返回按工种顺序与英文排序的用语列表。"""
    terms = term_service.get_glossary_terms(db, status=status.value if status else None)
    return create_response(MSG_TERMS_LOADED, sort_for_display(terms))


@router.get("/grouped", response_model=TermGroupResponse)
def list_grouped_terms(db: Session = Depends(get_db)) -> TermGroupResponse:
    """浏览页：已批准用语按工种分组。"""
    return create_response(MSG_TERMS_LOADED, group_by_discipline(term_service.get_glossary_terms(db)))


@router.get("/search", response_model=TermListResponse)
def search(
    q: Optional[str] = Query(None, description="关键字，匹配 EN、KR 与说明"),
    db: Session = Depends(get_db),
) -> TermListResponse:
    matches = search_terms(term_service.get_glossary_terms(db), q)
    return create_response(MSG_TERMS_LOADED, sort_for_display(matches))


@router.get("/disciplines", response_model=DisciplineListResponse)
def get_disciplines() -> DisciplineListResponse:
    return create_response("OK", list_disciplines())


@router.get("/stats", response_model=DisciplineStatsResponse)
def get_stats(db: Session = Depends(get_db)) -> DisciplineStatsResponse:
    """各工种的批准进度。"""
    return create_response(MSG_STATS_LOADED, term_service.get_glossary_stats(db))


@router.post("", response_model=TermMutationResponse)
def create_term(
    payload: TermCreateRequest,
    db: Session = Depends(get_db),
    current_user: Optional[UserProfile] = Depends(get_optional_user),
) -> TermMutationResponse:
    """提交新用语，匿名提交时 ``created_by`` 为空。"""
    result = term_service.add_term(
        db,
        en=payload.en,
        kr=payload.kr,
        discipline=payload.discipline,
        description=payload.description,
        created_by=current_user.id if current_user else None,
    )
    return render_action_result(result)


@router.post("/import", response_model=TermImportResponse)
def import_terms(
    file: UploadFile = File(..., description="공종/EN/KR/설명 格式的文本文件"),
    db: Session = Depends(get_db),
    current_user: Optional[UserProfile] = Depends(get_optional_user),
) -> TermImportResponse:
    raw = file.file.read()
    content = decode_upload(raw) if raw else None
    if not content or not content.strip():
        raise AppException(MSG_EMPTY_FILE, HTTP_STATUS_BAD_REQUEST)
    result = term_service.add_terms_from_text(
        db,
        content,
        created_by=current_user.id if current_user else None,
    )
    return render_action_result(result)


@router.put("/{term_id}", response_model=TermMutationResponse)
def update_term(
    term_id: str,
    payload: TermUpdateRequest,
    db: Session = Depends(get_db),
    current_user: UserProfile = Depends(get_current_user),
) -> TermMutationResponse:
    """管理员或提交者本人可以编辑。"""
    result = term_service.update_term(
        db,
        term_id,
        editor=current_user,
        en=payload.en,
        kr=payload.kr,
        description=payload.description,
        discipline=payload.discipline,
    )
    return render_action_result(result)


@router.delete("/{term_id}", response_model=TermDeletionResponse)
def delete_term(
    term_id: str,
    db: Session = Depends(get_db),
    _: UserProfile = Depends(require_admin),
) -> TermDeletionResponse:
    return render_action_result(term_service.delete_term(db, term_id))
