"""令牌与请求上下文。

两类 JWT 共用同一密钥：
- 访问令牌：``{user_id, email, sid}``，有效性以会话存储为准，解析时不校验 ``exp``；
- 登录链接令牌：``{email, purpose="magic_link", jti}``，短期有效，必须校验 ``exp``；
  ``jti`` 兑换后记入会话存储，同一链接只能使用一次。
"""

import uuid
from contextvars import ContextVar
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, NamedTuple, Optional

from jose import JWTError, jwt

from .config import get_settings
from .constants import MAGIC_LINK_PURPOSE
from .logger import logger

_refreshed_token_ctx: ContextVar[Optional[str]] = ContextVar("refreshed_token", default=None)
_session_id_ctx: ContextVar[Optional[str]] = ContextVar("session_id", default=None)


class MagicLinkClaims(NamedTuple):
    email: str
    jti: str
    expires_at: int


def _encode(claims: Dict[str, Any], lifetime: timedelta) -> str:
    settings = get_settings()
    payload = dict(claims, exp=datetime.now(timezone.utc) + lifetime)
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def _decode(token: str, *, verify_exp: bool) -> Optional[Dict[str, Any]]:
    settings = get_settings()
    try:
        return jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
            options={"verify_exp": verify_exp},
        )
    except JWTError as exc:
        logger.warning("Rejected JWT: %s", exc)
        return None


def create_access_token(subject: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    lifetime = expires_delta or timedelta(minutes=get_settings().access_token_expire_minutes)
    return _encode(subject, lifetime)


def decode_token(token: str) -> Optional[Dict[str, Any]]:
    """解析访问令牌，签名无效时返回 ``None``。"""
    return _decode(token, verify_exp=False)


def create_magic_link_token(email: str, *, expires_minutes: Optional[int] = None) -> str:
    minutes = get_settings().magic_link_expire_minutes if expires_minutes is None else expires_minutes
    claims = {"email": email, "purpose": MAGIC_LINK_PURPOSE, "jti": uuid.uuid4().hex}
    return _encode(claims, timedelta(minutes=max(int(minutes), 1)))


def verify_magic_link_token(token: str) -> Optional[MagicLinkClaims]:
    """签名错误、已过期、不是登录链接令牌或缺少 ``jti`` 时返回 ``None``。

    这里只校验令牌本身，是否已被使用由调用方对照会话存储判断。
    """
    payload = _decode(token, verify_exp=True)
    if payload is None or payload.get("purpose") != MAGIC_LINK_PURPOSE:
        return None
    email, jti, expires_at = payload.get("email"), payload.get("jti"), payload.get("exp")
    if not (isinstance(email, str) and email and isinstance(jti, str) and jti):
        return None
    if not isinstance(expires_at, (int, float)):
        return None
    return MagicLinkClaims(email, jti, int(expires_at))


def store_refreshed_token(token: Optional[str]) -> None:
    """记录本次请求续签的访问令牌，响应时写入 ``meta`` 与 ``X-Access-Token``。"""
    _refreshed_token_ctx.set(token)


def consume_refreshed_token() -> Optional[str]:
    return _refreshed_token_ctx.get()


def store_current_session_id(session_id: Optional[str]) -> None:
    _session_id_ctx.set(session_id)


def get_current_session_id() -> Optional[str]:
    return _session_id_ctx.get()
