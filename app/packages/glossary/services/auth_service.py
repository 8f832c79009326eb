"""认证服务：邮件免密登录、会话维护与角色查询。"""

from __future__ import annotations

import re
import smtplib
import time
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from urllib.parse import urlencode

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.packages.glossary.core.config import get_settings
from app.packages.glossary.core.constants import (
    ACCESS_TOKEN_TYPE,
    ADMIN_ROLE,
    DEFAULT_USER_ROLE,
    HTTP_STATUS_BAD_REQUEST,
    HTTP_STATUS_INTERNAL_ERROR,
    HTTP_STATUS_OK,
    HTTP_STATUS_UNAUTHORIZED,
    MSG_INVALID_EMAIL,
    MSG_INVALID_LINK,
    MSG_SIGN_IN_SENT,
    MSG_SIGN_IN_SUCCESS,
    MSG_SIGN_OUT_SUCCESS,
)
from app.packages.glossary.core.exceptions import AppException
from app.packages.glossary.core.logger import logger
from app.packages.glossary.core.responses import create_response
from app.packages.glossary.core.security import (
    create_access_token,
    create_magic_link_token,
    get_current_session_id,
    store_refreshed_token,
    verify_magic_link_token,
)
from app.packages.glossary.core.session import create_session, delete_session, mark_link_used
from app.packages.glossary.core.timezone import format_datetime
from app.packages.glossary.crud.user_profiles import user_profile_crud
from app.packages.glossary.models.user_profile import UserProfile
from app.packages.glossary.services.mailer import send_magic_link

_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
MSG_DELIVERY_FAILED = "로그인 링크를 보내지 못했습니다. 잠시 후 다시 시도해주세요."


def serialize_profile(profile: UserProfile) -> Dict[str, Any]:
    return {
        "id": profile.id,
        "email": profile.email,
        "role": profile.role,
        "is_admin": profile.role == ADMIN_ROLE,
        "created_at": format_datetime(profile.created_at),
        "last_sign_in_at": format_datetime(profile.last_sign_in_at),
    }


class AuthService:
    """邮件登录链接的签发与兑换。"""

    def sign_in(self, *, email: str) -> dict:
        """生成短期登录令牌并投递登录链接。"""
        normalized = (email or "").strip().lower()
        if not _EMAIL_PATTERN.match(normalized):
            raise AppException(MSG_INVALID_EMAIL, HTTP_STATUS_BAD_REQUEST)

        settings = get_settings()
        token = create_magic_link_token(normalized)
        query = urlencode({"token": token})
        link = f"{settings.site_url.rstrip('/')}{settings.api_v1_str}/auth/callback?{query}"
        try:
            send_magic_link(normalized, link)
        except (smtplib.SMTPException, OSError) as exc:
            logger.error("Failed to deliver login link to %s: %s", normalized, exc)
            raise AppException(MSG_DELIVERY_FAILED, HTTP_STATUS_INTERNAL_ERROR) from exc

        return create_response(MSG_SIGN_IN_SENT, {"email": normalized}, HTTP_STATUS_OK)

    def complete_sign_in(self, db: Session, *, token: str) -> dict:
        """兑换登录链接：建立或更新用户资料，开启会话并签发访问令牌。

        每个链接只能兑换一次，重复使用与过期链接一样返回 401。
        """
        claims = verify_magic_link_token(token)
        if claims is None:
            raise AppException(MSG_INVALID_LINK, HTTP_STATUS_UNAUTHORIZED)
        if not mark_link_used(claims.jti, claims.expires_at - int(time.time())):
            logger.warning("Login link %s for %s was already used", claims.jti, claims.email)
            raise AppException(MSG_INVALID_LINK, HTTP_STATUS_UNAUTHORIZED)

        profile = self._upsert_profile(db, claims.email)

        session_id = create_session(profile.id)
        access_token = create_access_token({"user_id": profile.id, "email": profile.email, "sid": session_id})
        store_refreshed_token(access_token)
        logger.info("User %s signed in", profile.email)

        return create_response(
            MSG_SIGN_IN_SUCCESS,
            {
                "access_token": access_token,
                "token_type": ACCESS_TOKEN_TYPE,
                "user": serialize_profile(profile),
            },
            HTTP_STATUS_OK,
        )

    def sign_out(self, session_id: Optional[str] = None) -> dict:
        session_id = session_id or get_current_session_id()
        if session_id:
            delete_session(session_id)
        return create_response(MSG_SIGN_OUT_SUCCESS, None, HTTP_STATUS_OK)

    def get_session(self, profile: UserProfile) -> dict:
        return create_response("OK", {"user": serialize_profile(profile)}, HTTP_STATUS_OK)

    def get_user_role(self, db: Session, user_id: str) -> str:
        """返回用户角色，资料不存在或查询失败时按普通用户处理。"""
        try:
            profile = user_profile_crud.get(db, user_id)
        except SQLAlchemyError:
            db.rollback()
            logger.exception("Failed to load role for user %s", user_id)
            return DEFAULT_USER_ROLE
        if profile is None or not profile.role:
            return DEFAULT_USER_ROLE
        return profile.role

    def _upsert_profile(self, db: Session, email: str) -> UserProfile:
        is_listed_admin = email in get_settings().admin_emails
        profile = user_profile_crud.get_by_email(db, email)
        if profile is None:
            profile = UserProfile(email=email, role=ADMIN_ROLE if is_listed_admin else DEFAULT_USER_ROLE)
        elif is_listed_admin and profile.role != ADMIN_ROLE:
            profile.role = ADMIN_ROLE
        profile.last_sign_in_at = datetime.now(timezone.utc)
        return user_profile_crud.save(db, profile)


auth_service = AuthService()
