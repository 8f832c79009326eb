"""响应封装：构建系统统一的返回结构，以及动作执行结果的载体。"""

from dataclasses import dataclass, field
from typing import Any, Optional

from app.packages.glossary.core.constants import HTTP_STATUS_BAD_REQUEST, HTTP_STATUS_OK
from app.packages.glossary.core.exceptions import AppException
from app.packages.glossary.core.security import consume_refreshed_token


def create_response(msg: str, data: Any = None, code: int = HTTP_STATUS_OK) -> dict[str, Any]:
    """按照 ``msg``、``data``、``code`` 组合出统一响应体。"""
    payload: dict[str, Any] = {"msg": msg, "data": data, "code": code}
    refreshed_token = consume_refreshed_token()
    if refreshed_token:
        payload["meta"] = {"access_token": refreshed_token}
    return payload


@dataclass
class ActionResult:
    """写操作的统一结果：成功与否、提示文案、受影响行数及附加数据。

    存储异常在服务层被转换为 ``success=False`` 的结果，不会向上抛出；
    ``code`` 仅在失败时使用，决定接口层返回的 HTTP 状态码。
    """

    success: bool
    message: str
    affected: int = 0
    data: Optional[dict[str, Any]] = field(default=None)
    code: int = HTTP_STATUS_OK

    @classmethod
    def ok(cls, message: str, *, affected: int = 0, data: Optional[dict[str, Any]] = None) -> "ActionResult":
        return cls(True, message, affected, data)

    @classmethod
    def fail(
        cls,
        message: str,
        *,
        code: int = HTTP_STATUS_BAD_REQUEST,
        affected: int = 0,
        data: Optional[dict[str, Any]] = None,
    ) -> "ActionResult":
        return cls(False, message, affected, data, code)

    def as_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "success": self.success,
            "message": self.message,
            "affected": self.affected,
        }
        if self.data:
            payload.update(self.data)
        return payload


def render_action_result(result: ActionResult) -> dict[str, Any]:
    """成功时返回标准响应，失败时抛出 ``AppException``，载荷保持一致。"""
    if not result.success:
        raise AppException(result.message, result.code, data=result.as_payload())
    return create_response(result.message, result.as_payload())
