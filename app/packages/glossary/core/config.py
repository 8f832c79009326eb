"""配置模块：负责加载和缓存基于环境变量的应用设置。"""

import os
from functools import lru_cache
from pathlib import Path
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _project_root() -> Path:
    """包含 ``app`` 目录的最近一级祖先目录，即 ``.env`` 所在位置。"""
    here = Path(__file__).resolve()
    return next((parent for parent in here.parents if (parent / "app").is_dir()), here.parent)


BASE_DIR = _project_root()


def _env_files() -> list[tuple[Path, bool]]:
    """按加载顺序返回 ``(路径, 是否覆盖已有变量)``。

    ``ENV_FILE`` 指定时只加载该文件；否则先加载 ``.env``，
    再叠加 ``.env.<ENVIRONMENT>``（``DEBUG`` 打开且未指定环境时视为 ``development``）。
    """
    explicit = os.getenv("ENV_FILE")
    if explicit:
        return [(BASE_DIR / explicit, True)]

    files = [(BASE_DIR / ".env", False)]
    environment = os.getenv("ENVIRONMENT")
    if environment is None and os.getenv("DEBUG", "").strip().lower() in {"1", "true", "yes", "on"}:
        environment = "development"
    if environment:
        name = environment if environment.startswith(".env") else f".env.{environment}"
        files.append((BASE_DIR / name, True))
    return files


for _path, _override in _env_files():
    if _path.exists():
        load_dotenv(_path, override=_override, encoding="utf-8")


class Settings(BaseSettings):
    """
    封装用语集服务运行所需的所有配置项，每个字段都可以通过环境变量重写。
    存储端的分页上限与批量大小同样放在这里，更换存储时只需调整环境变量。
    """

    project_name: str = Field(default="Bilingual Glossary API", alias="PROJECT_NAME")
    api_v1_str: str = Field(default="/api/v1", alias="API_V1_STR")
    debug: bool = Field(default=False, alias="DEBUG")

    database_url_override: Optional[str] = Field(default=None, alias="DATABASE_URL")
    database_host: str = Field(default="localhost", alias="DATABASE_HOST")
    database_port: int = Field(default=5432, alias="DATABASE_PORT")
    database_user: str = Field(default="postgres", alias="DATABASE_USER")
    database_password: str = Field(default="postgres", alias="DATABASE_PASSWORD")
    database_name: str = Field(default="glossary", alias="DATABASE_NAME")
    database_echo: bool = Field(default=False, alias="DATABASE_ECHO")

    redis_host: str = Field(default="localhost", alias="REDIS_HOST")
    redis_port: int = Field(default=6379, alias="REDIS_PORT")
    redis_db: int = Field(default=0, alias="REDIS_DB")

    jwt_secret_key: str = Field(default="changeme", alias="JWT_SECRET_KEY")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(default=60, alias="ACCESS_TOKEN_EXPIRE_MINUTES")
    magic_link_expire_minutes: int = Field(default=15, alias="MAGIC_LINK_EXPIRE_MINUTES")
    site_url: str = Field(default="http://localhost:8000", alias="SITE_URL")

    smtp_host: Optional[str] = Field(default=None, alias="SMTP_HOST")
    smtp_port: int = Field(default=587, alias="SMTP_PORT")
    smtp_user: Optional[str] = Field(default=None, alias="SMTP_USER")
    smtp_password: Optional[str] = Field(default=None, alias="SMTP_PASSWORD")
    smtp_sender: str = Field(default="glossary@localhost", alias="SMTP_SENDER")
    smtp_use_tls: bool = Field(default=True, alias="SMTP_USE_TLS")

    admin_emails_raw: str = Field(default="", alias="ADMIN_EMAILS")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_dir: str = Field(default="log", alias="LOG_DIR")
    log_file_name: str = Field(default="app.log", alias="LOG_FILE_NAME")
    log_json: bool = Field(default=False, alias="LOG_JSON")
    app_port: int = Field(default=8000, alias="APP_PORT")
    timezone: str = Field(default="Asia/Seoul", alias="TIMEZONE")

    # 存储端限制：单次范围查询的最大行数、全量读取的安全上限与批量操作的分批大小
    fetch_page_size: int = Field(default=1000, ge=1, alias="FETCH_PAGE_SIZE")
    fetch_max_rows: int = Field(default=10_000, ge=1, alias="FETCH_MAX_ROWS")
    approve_batch_size: int = Field(default=100, ge=1, alias="APPROVE_BATCH_SIZE")
    delete_batch_size: int = Field(default=1000, ge=1, alias="DELETE_BATCH_SIZE")
    recent_activity_hours: int = Field(default=24, ge=1, alias="RECENT_ACTIVITY_HOURS")

    model_config = SettingsConfigDict(extra="ignore")

    @property
    def sql_database_url(self) -> str:
        """优先使用完整的 ``DATABASE_URL``，否则根据当前设置拼接 PostgreSQL 连接串。"""
        if self.database_url_override:
            return self.database_url_override
        return (
            f"postgresql+psycopg2://{self.database_user}:{self.database_password}"
            f"@{self.database_host}:{self.database_port}/{self.database_name}"
        )

    @property
    def redis_url(self) -> str:
        """根据当前配置生成 Redis 连接地址。"""
        return f"redis://{self.redis_host}:{self.redis_port}/{self.redis_db}"

    @property
    def log_directory(self) -> Path:
        """相对路径以项目根目录为基准。"""
        path = Path(self.log_dir)
        return path if path.is_absolute() else BASE_DIR / path

    @property
    def log_file_path(self) -> Path:
        return self.log_directory / self.log_file_name

    @property
    def timezone_info(self) -> ZoneInfo:
        """``TIMEZONE`` 无法识别时按 UTC 处理。"""
        try:
            return ZoneInfo(self.timezone)
        except ZoneInfoNotFoundError:
            return ZoneInfo("UTC")

    @property
    def admin_emails(self) -> set[str]:
        """``ADMIN_EMAILS`` 为逗号分隔的邮箱列表，统一转为小写。"""
        return {item.strip().lower() for item in (self.admin_emails_raw or "").split(",") if item.strip()}


@lru_cache
def get_settings() -> Settings:
    return Settings()
