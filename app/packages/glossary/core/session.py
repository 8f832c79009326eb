"""登录会话存储。

访问令牌里只带会话 ID（``sid``），会话本身保存在 Redis 中，键过期即登出；
Redis 无法连接时退回进程内存储（仅适合单进程与测试）。会话只记录所属用户，
角色每次请求都从用户资料重新读取，因此管理员名单变更后无需重新登录。

同一存储还记录已兑换的登录链接 ``jti``，保留到链接本身过期为止。
"""

from __future__ import annotations

import json
import threading
import time
import uuid
from typing import Dict, Optional, Tuple

import redis

from app.packages.glossary.core.config import get_settings
from app.packages.glossary.core.logger import logger


def session_ttl_seconds() -> int:
    """会话空闲超时与访问令牌有效期一致。"""
    return max(get_settings().access_token_expire_minutes, 1) * 60


class SessionBackend:
    def create_session(self, user_id: str, ttl_seconds: int) -> str:  # pragma: no cover - interface
        raise NotImplementedError

    def touch_session(self, session_id: str, user_id: str, ttl_seconds: int) -> bool:  # pragma: no cover
        raise NotImplementedError

    def delete_session(self, session_id: str) -> None:  # pragma: no cover
        raise NotImplementedError

    def mark_link_used(self, jti: str, ttl_seconds: int) -> bool:  # pragma: no cover
        raise NotImplementedError


class RedisSessionBackend(SessionBackend):
    """值为 ``{"user_id", "created_at"}`` 的 JSON 串，每次认证通过后续期。"""

    KEY_PREFIX = "glossary:session:"
    USED_LINK_PREFIX = "glossary:used-link:"

    def __init__(self, url: str) -> None:
        self._client = redis.Redis.from_url(url, decode_responses=True, socket_connect_timeout=1)
        self._client.ping()

    def create_session(self, user_id: str, ttl_seconds: int) -> str:
        session_id = uuid.uuid4().hex
        record = json.dumps({"user_id": user_id, "created_at": int(time.time())})
        self._client.set(self.KEY_PREFIX + session_id, record, ex=ttl_seconds)
        return session_id

    def touch_session(self, session_id: str, user_id: str, ttl_seconds: int) -> bool:
        key = self.KEY_PREFIX + session_id
        raw = self._client.get(key)
        if raw is None:
            return False
        try:
            owner = json.loads(raw).get("user_id")
        except ValueError:
            logger.warning("Discarding malformed session %s", session_id)
            self._client.delete(key)
            return False
        if owner != user_id:
            return False
        return bool(self._client.expire(key, ttl_seconds))

    def delete_session(self, session_id: str) -> None:
        self._client.delete(self.KEY_PREFIX + session_id)

    def mark_link_used(self, jti: str, ttl_seconds: int) -> bool:
        return bool(self._client.set(self.USED_LINK_PREFIX + jti, "1", nx=True, ex=ttl_seconds))


class InMemorySessionBackend(SessionBackend):
    def __init__(self) -> None:
        # session_id -> (user_id, 过期时刻的 monotonic 秒数)
        self._sessions: Dict[str, Tuple[str, float]] = {}
        # jti -> 过期时刻的 monotonic 秒数
        self._used_links: Dict[str, float] = {}
        self._lock = threading.Lock()

    def create_session(self, user_id: str, ttl_seconds: int) -> str:
        session_id = uuid.uuid4().hex
        with self._lock:
            self._sessions[session_id] = (user_id, time.monotonic() + ttl_seconds)
        return session_id

    def touch_session(self, session_id: str, user_id: str, ttl_seconds: int) -> bool:
        now = time.monotonic()
        with self._lock:
            owner, expires_at = self._sessions.get(session_id, (None, 0.0))
            if owner is None or expires_at <= now:
                self._sessions.pop(session_id, None)
                return False
            if owner != user_id:
                return False
            self._sessions[session_id] = (owner, now + ttl_seconds)
            return True

    def delete_session(self, session_id: str) -> None:
        with self._lock:
            self._sessions.pop(session_id, None)

    def mark_link_used(self, jti: str, ttl_seconds: int) -> bool:
        now = time.monotonic()
        with self._lock:
            for key in [key for key, expires_at in self._used_links.items() if expires_at <= now]:
                del self._used_links[key]
            if jti in self._used_links:
                return False
            self._used_links[jti] = now + ttl_seconds
            return True


_backend: Optional[SessionBackend] = None
_backend_lock = threading.Lock()


def get_session_backend() -> SessionBackend:
    """首次使用时探测 Redis，结果在进程内缓存。"""
    global _backend
    with _backend_lock:
        if _backend is None:
            url = get_settings().redis_url
            try:
                _backend = RedisSessionBackend(url)
                logger.info("Session store: Redis at %s", url)
            except redis.RedisError as exc:
                logger.warning("Redis unavailable (%s), sessions are kept in memory", exc)
                _backend = InMemorySessionBackend()
        return _backend


def create_session(user_id: str, ttl_seconds: Optional[int] = None) -> str:
    return get_session_backend().create_session(user_id, ttl_seconds or session_ttl_seconds())


def touch_session(session_id: str, user_id: str, ttl_seconds: Optional[int] = None) -> bool:
    """会话存在且属于该用户时续期并返回 ``True``。"""
    return get_session_backend().touch_session(session_id, user_id, ttl_seconds or session_ttl_seconds())


def delete_session(session_id: str) -> None:
    get_session_backend().delete_session(session_id)


def mark_link_used(jti: str, ttl_seconds: int) -> bool:
    """首次兑换时记录并返回 ``True``；记录仍在时返回 ``False``。"""
    return get_session_backend().mark_link_used(jti, max(int(ttl_seconds), 1))
