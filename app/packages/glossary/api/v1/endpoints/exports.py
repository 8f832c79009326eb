"""导出相关路由：返回 Excel 或文本文件下载。"""

from fastapi import APIRouter, Depends
from fastapi.responses import Response, StreamingResponse
from sqlalchemy.orm import Session

from app.packages.glossary.api.v1.schemas.terms import TermIdsRequest
from app.packages.glossary.core.dependencies import get_db
from app.packages.glossary.services.export_service import export_service

router = APIRouter(prefix="/exports", tags=["exports"])


@router.post("/selected")
def export_selected(payload: TermIdsRequest, db: Session = Depends(get_db)) -> StreamingResponse:
    """导出勾选的用语，未勾选任何用语时返回 400。"""
    return export_service.export_selected(db, payload.ids)


@router.get("/disciplines/{discipline}")
def export_discipline(discipline: str, db: Session = Depends(get_db)) -> StreamingResponse:
    """导出单个工种的已批准用语，路径参数可以是工种名称或缩写。"""
    return export_service.export_discipline(db, discipline)


@router.get("/approved")
def export_approved(db: Session = Depends(get_db)) -> StreamingResponse:
    return export_service.export_approved(db)


@router.get("/template")
def download_template() -> StreamingResponse:
    return export_service.download_template()


@router.get("/text-template")
def download_text_template() -> Response:
    return export_service.download_text_template()
