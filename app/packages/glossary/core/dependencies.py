"""依赖注入模块：封装 FastAPI 中复用度高的依赖函数。"""

from collections.abc import Generator
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.packages.glossary.core.constants import (
    ACCESS_TOKEN_TYPE,
    ADMIN_ROLE,
    HTTP_STATUS_FORBIDDEN,
    HTTP_STATUS_UNAUTHORIZED,
    MSG_NOT_AUTHENTICATED,
    MSG_PERMISSION_DENIED,
)
from app.packages.glossary.core.exceptions import AppException
from app.packages.glossary.core.security import (
    create_access_token,
    decode_token,
    store_current_session_id,
    store_refreshed_token,
)
from app.packages.glossary.core.session import touch_session
from app.packages.glossary.crud.user_profiles import user_profile_crud
from app.packages.glossary.db import session as db_session
from app.packages.glossary.models.user_profile import UserProfile
from app.packages.glossary.services.auth_service import auth_service

security_scheme = HTTPBearer(auto_error=False)


def get_db() -> Generator[Session, None, None]:
    """生成一个数据库会话，并在请求结束后自动关闭。"""
    db = db_session.SessionLocal()
    try:
        yield db
    finally:
        db.close()


def _resolve_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials],
    db: Session,
) -> UserProfile:
    if not credentials:
        raise AppException(MSG_NOT_AUTHENTICATED, HTTP_STATUS_UNAUTHORIZED)
    if credentials.scheme.lower() != ACCESS_TOKEN_TYPE:
        raise AppException("인증 방식이 올바르지 않습니다.", HTTP_STATUS_UNAUTHORIZED)

    payload = decode_token(credentials.credentials)
    if payload is None or not payload.get("user_id") or not payload.get("sid"):
        raise AppException("토큰이 유효하지 않거나 만료되었습니다.", HTTP_STATUS_UNAUTHORIZED)

    user = user_profile_crud.get(db, payload["user_id"])
    if user is None:
        raise AppException("사용자를 찾을 수 없습니다.", HTTP_STATUS_UNAUTHORIZED)

    session_id = payload["sid"]
    if not touch_session(session_id, user.id):
        raise AppException("토큰이 유효하지 않거나 만료되었습니다.", HTTP_STATUS_UNAUTHORIZED)

    # 上下文变量不会回传到路由线程，会话 ID 同时写入 request.state
    request.state.session_id = session_id
    store_current_session_id(session_id)

    # 滑动会话：每次认证成功都签发新的访问令牌，客户端可选择替换
    store_refreshed_token(create_access_token({"user_id": user.id, "email": user.email, "sid": session_id}))
    return user


def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security_scheme),
    db: Session = Depends(get_db),
) -> UserProfile:
    """解析 ``Authorization`` 头部并返回当前用户，缺失或非法时抛出 401。"""
    store_current_session_id(None)
    return _resolve_user(request, credentials, db)


def get_optional_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security_scheme),
    db: Session = Depends(get_db),
) -> Optional[UserProfile]:
    """匿名访问时返回 ``None``；携带了令牌但令牌无效时仍然拒绝。"""
    store_current_session_id(None)
    if credentials is None:
        return None
    return _resolve_user(request, credentials, db)


def require_admin(
    current_user: UserProfile = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> UserProfile:
    """审核类接口只允许管理员访问。"""
    if auth_service.get_user_role(db, current_user.id) != ADMIN_ROLE:
        raise AppException(MSG_PERMISSION_DENIED, HTTP_STATUS_FORBIDDEN)
    return current_user
