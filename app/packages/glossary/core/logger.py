"""日志配置：控制台与滚动文件两路输出，每条记录都带上请求 ID。

- 控制台默认为彩色文本，``LOG_JSON=true`` 时两路都改为单行 JSON，便于采集；
- 时间戳按 ``Settings.timezone`` 渲染，与导出文件名中的日期保持一致；
- 请求 ID 由 ``RequestIdMiddleware`` 写入上下文变量，经 ``RequestIdFilter`` 注入。
"""

import json
import logging
import logging.config
import sys
from contextvars import ContextVar
from datetime import datetime
from typing import Any, Dict, Optional

from .config import get_settings

LOGGER_NAME = "glossary"
TEXT_FORMAT = "%(asctime)s %(levelname)-7s %(name)s [%(request_id)s] %(message)s"

_request_id_ctx: ContextVar[Optional[str]] = ContextVar("request_id", default=None)


class LocalTimeFormatter(logging.Formatter):
    def formatTime(self, record: logging.LogRecord, datefmt: Optional[str] = None) -> str:  # noqa: N802
        moment = datetime.fromtimestamp(record.created, get_settings().timezone_info)
        return moment.strftime(datefmt) if datefmt else moment.isoformat(sep=" ", timespec="milliseconds")


class ConsoleFormatter(LocalTimeFormatter):
    """按级别给整行着色；输出不是终端时不加颜色码。"""

    LEVEL_COLORS = {
        logging.DEBUG: "36",
        logging.INFO: "32",
        logging.WARNING: "33",
        logging.ERROR: "31",
        logging.CRITICAL: "1;41",
    }

    def __init__(self, fmt: str = TEXT_FORMAT, datefmt: Optional[str] = None, use_colors: Optional[bool] = None) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        self.use_colors = sys.stderr.isatty() if use_colors is None else use_colors

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        color = self.LEVEL_COLORS.get(record.levelno)
        if not (self.use_colors and color):
            return line
        return f"\033[{color}m{line}\033[0m"


class JsonFormatter(LocalTimeFormatter):
    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "time": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "request_id": getattr(record, "request_id", None),
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False)


class RequestIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = _request_id_ctx.get() or "-"
        return True


def _formatter_ref(name: str) -> str:
    return f"{__name__}.{name}"


def setup_logging() -> None:
    """应用 ``dictConfig``，uvicorn 与业务日志共用同一组 handler。"""
    settings = get_settings()
    settings.log_directory.mkdir(parents=True, exist_ok=True)

    level = settings.log_level
    handler_names = ["console", "file"]
    config: Dict[str, Any] = {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {"request_id": {"()": _formatter_ref("RequestIdFilter")}},
        "formatters": {
            "console": {"()": _formatter_ref("ConsoleFormatter")},
            "text": {"()": _formatter_ref("LocalTimeFormatter"), "format": TEXT_FORMAT},
            "json": {"()": _formatter_ref("JsonFormatter")},
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": level,
                "formatter": "json" if settings.log_json else "console",
                "filters": ["request_id"],
            },
            "file": {
                "class": "logging.handlers.TimedRotatingFileHandler",
                "level": level,
                "formatter": "json" if settings.log_json else "text",
                "filename": str(settings.log_file_path),
                "when": "midnight",
                "backupCount": 14,
                "encoding": "utf-8",
                "delay": True,
                "filters": ["request_id"],
            },
        },
        "loggers": {
            name: {"handlers": handler_names, "level": level, "propagate": False}
            for name in (LOGGER_NAME, "uvicorn", "uvicorn.error", "uvicorn.access")
        },
        "root": {"handlers": handler_names, "level": level},
    }
    logging.config.dictConfig(config)


logger = logging.getLogger(LOGGER_NAME)


def set_request_id(request_id: Optional[str]) -> None:
    _request_id_ctx.set(request_id)
