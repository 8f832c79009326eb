"""用语相关的请求与响应模型。"""

from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from app.packages.glossary.api.v1.schemas.common import ActionPayload, ResponseEnvelope


# ---------------------------------------------------------------------------
# 请求体
# ---------------------------------------------------------------------------


class TermCreateRequest(BaseModel):
    """提交新用语。空白字段交给服务层校验，以便返回统一的提示文案。"""

    en: str = Field(..., max_length=255, description="English term")
    kr: str = Field(..., max_length=255, description="한국어 용어")
    discipline: str = Field(..., max_length=50, description="工种名称，例如 Piping")
    description: Optional[str] = Field(default=None, description="说明，可留空")


class TermUpdateRequest(BaseModel):
    """只更新传入的字段。"""

    en: Optional[str] = Field(default=None, max_length=255)
    kr: Optional[str] = Field(default=None, max_length=255)
    discipline: Optional[str] = Field(default=None, max_length=50)
    description: Optional[str] = None


class TermIdsRequest(BaseModel):
    ids: List[str] = Field(default_factory=list, description="用语 ID 列表")


# ---------------------------------------------------------------------------
# 响应体
# ---------------------------------------------------------------------------


class TermItem(BaseModel):
    id: str
    en: str
    kr: str
    description: str
    discipline: str
    abbreviation: str
    status: str
    created_at: Optional[str] = None
    created_by: Optional[str] = None


class TermGroupItem(BaseModel):
    discipline: str
    abbreviation: str
    korean_name: str
    count: int
    terms: List[TermItem]


class DisciplineItem(BaseModel):
    name: str
    abbreviation: str
    korean_name: str
    order: int


class DisciplineStatItem(BaseModel):
    discipline: str
    abbreviation: str
    korean_name: str
    approved: int
    pending: int
    total: int
    progress: float


class TermMutationPayload(ActionPayload):
    term: Optional[TermItem] = None


class TermDeletionPayload(ActionPayload):
    id: Optional[str] = None


class TermImportPayload(ActionPayload):
    added: int = 0
    duplicates: int = 0
    skipped: int = 0


class BulkApprovePayload(ActionPayload):
    skipped: int = 0


class DuplicatePairItem(BaseModel):
    pending_term: TermItem
    existing_term: TermItem
    match_type: str


class DuplicatesPayload(ActionPayload):
    duplicates: List[DuplicatePairItem] = Field(default_factory=list)


class RecentActivity(BaseModel):
    hours: int
    count: int


class StoreLimits(BaseModel):
    page_size: int
    max_rows: int


class StoreWarnings(BaseModel):
    pagination_active: bool
    near_limit: bool
    pending_backlog: bool


class DatabaseStatsPayload(ActionPayload):
    total: int
    status_counts: Dict[str, int]
    by_discipline: Dict[str, int]
    recent_activity: RecentActivity
    limits: StoreLimits
    warnings: StoreWarnings


TermListResponse = ResponseEnvelope[List[TermItem]]
TermGroupResponse = ResponseEnvelope[List[TermGroupItem]]
DisciplineListResponse = ResponseEnvelope[List[DisciplineItem]]
DisciplineStatsResponse = ResponseEnvelope[List[DisciplineStatItem]]
TermMutationResponse = ResponseEnvelope[TermMutationPayload]
TermDeletionResponse = ResponseEnvelope[TermDeletionPayload]
TermImportResponse = ResponseEnvelope[TermImportPayload]
BulkApproveResponse = ResponseEnvelope[BulkApprovePayload]
DuplicatesResponse = ResponseEnvelope[DuplicatesPayload]
DatabaseStatsResponse = ResponseEnvelope[DatabaseStatsPayload]
