"""异常处理模块：定义统一的业务异常，并把各类异常渲染为标准响应结构。"""

from typing import Any

from fastapi import HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.packages.glossary.core.logger import logger
from app.packages.glossary.core.security import consume_refreshed_token


class AppException(HTTPException):
    """携带统一响应结构的业务异常，方便在全局处理中转换响应体。"""

    def __init__(self, msg: str, code: int = status.HTTP_400_BAD_REQUEST, data=None) -> None:
        super().__init__(status_code=code, detail=msg)
        self.data = data


def _envelope(msg: str, data: Any, code: int) -> dict[str, Any]:
    payload: dict[str, Any] = {"msg": msg, "data": data, "code": code}
    token = consume_refreshed_token()
    if token:
        payload["meta"] = {"access_token": token}
    return payload


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """将 ``HTTPException`` 转换为统一响应格式。"""
    return JSONResponse(
        status_code=exc.status_code,
        content=_envelope(exc.detail, getattr(exc, "data", None), exc.status_code),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """请求体验证失败时返回 422，并把错误明细放入 ``data``。"""

    def _serialize(obj: Any) -> Any:
        if isinstance(obj, Exception):
            return str(obj)
        if isinstance(obj, dict):
            return {key: _serialize(value) for key, value in obj.items()}
        if isinstance(obj, (list, tuple)):
            return [_serialize(item) for item in obj]
        return obj

    code = status.HTTP_422_UNPROCESSABLE_ENTITY
    return JSONResponse(status_code=code, content=_envelope("요청 값이 올바르지 않습니다.", _serialize(exc.errors()), code))


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """兜底处理：记录堆栈并返回标准的 500 响应结构。"""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    code = status.HTTP_500_INTERNAL_SERVER_ERROR
    return JSONResponse(status_code=code, content=_envelope("서버 내부 오류가 발생했습니다.", None, code))
