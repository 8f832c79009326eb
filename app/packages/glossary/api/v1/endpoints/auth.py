"""认证相关路由定义。"""

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from app.packages.glossary.api.v1.schemas.auth import (
    SessionResponse,
    SignInRequest,
    SignInResponse,
    SignOutResponse,
    TokenResponse,
)
from app.packages.glossary.core.dependencies import get_current_user, get_db
from app.packages.glossary.models.user_profile import UserProfile
from app.packages.glossary.services.auth_service import auth_service

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/sign-in", response_model=SignInResponse)
def sign_in(payload: SignInRequest) -> SignInResponse:
    """向邮箱发送一次性登录链接。"""
    return auth_service.sign_in(email=payload.email)


@router.get("/callback", response_model=TokenResponse)
def sign_in_callback(
    token: str = Query(..., min_length=1, description="邮件中的登录令牌"),
    db: Session = Depends(get_db),
) -> TokenResponse:
    """兑换登录链接并签发访问令牌。"""
    return auth_service.complete_sign_in(db, token=token)


@router.post("/sign-out", response_model=SignOutResponse)
def sign_out(request: Request, _: UserProfile = Depends(get_current_user)) -> SignOutResponse:
    """删除当前会话，前端需同时清理本地令牌。"""
    return auth_service.sign_out(getattr(request.state, "session_id", None))


@router.get("/session", response_model=SessionResponse)
def get_session(current_user: UserProfile = Depends(get_current_user)) -> SessionResponse:
    return auth_service.get_session(current_user)
