"""测试夹具：为 pytest 提供数据库、客户端与登录令牌的共享配置。"""

import os
from typing import Callable, Dict, Generator

TEST_DB_PATH = os.path.join(os.path.dirname(__file__), "test.db")
TEST_DATABASE_URL = f"sqlite:///{TEST_DB_PATH}"
ADMIN_EMAIL = "admin@example.com"

# 配置在首次导入应用前写入环境变量，get_settings 会缓存首次读取的结果
os.environ["DATABASE_URL"] = TEST_DATABASE_URL
os.environ["ADMIN_EMAILS"] = ADMIN_EMAIL

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402

from app.main import app  # noqa: E402
from app.packages.glossary.core.dependencies import get_db  # noqa: E402
from app.packages.glossary.core.security import create_magic_link_token  # noqa: E402
from app.packages.glossary.db import session as db_session  # noqa: E402
from app.packages.glossary.db.init_db import init_db  # noqa: E402
from app.packages.glossary.models import Base, GlossaryTerm  # noqa: E402


@pytest.fixture(scope="session", autouse=True)
def setup_test_database() -> Generator[None, None, None]:
    """创建隔离的 SQLite 测试数据库，并在会话结束后清理。"""
    if os.path.exists(TEST_DB_PATH):
        os.remove(TEST_DB_PATH)

    engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    db_session.engine = engine
    db_session.SessionLocal = TestingSessionLocal

    Base.metadata.create_all(bind=engine)
    init_db()
    yield

    engine.dispose()
    if os.path.exists(TEST_DB_PATH):
        os.remove(TEST_DB_PATH)


@pytest.fixture(autouse=True)
def clean_terms() -> Generator[None, None, None]:
    """每个用例开始前清空用语表，用户资料保留。"""
    session = db_session.SessionLocal()
    try:
        session.query(GlossaryTerm).delete()
        session.commit()
    finally:
        session.close()
    yield


@pytest.fixture()
def db_session_fixture() -> Generator[Session, None, None]:
    """提供给测试用例使用的数据库会话。"""
    session = db_session.SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(db_session_fixture):
    """构建 FastAPI TestClient，并注入测试专用的数据库依赖。"""
    def override_get_db() -> Generator[Session, None, None]:
        session = db_session.SessionLocal()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture()
def login(client) -> Callable[[str], Dict[str, str]]:
    """兑换一次登录链接，返回带 Bearer 令牌的请求头。"""

    def _login(email: str) -> Dict[str, str]:
        token = create_magic_link_token(email)
        response = client.get("/api/v1/auth/callback", params={"token": token})
        assert response.status_code == 200, response.text
        access_token = response.json()["data"]["access_token"]
        return {"Authorization": f"Bearer {access_token}"}

    return _login


@pytest.fixture()
def admin_headers(login) -> Dict[str, str]:
    return login(ADMIN_EMAIL)


@pytest.fixture()
def user_headers(login) -> Dict[str, str]:
    return login("writer@example.com")


@pytest.fixture()
def seed_term(db_session_fixture) -> Callable[..., GlossaryTerm]:
    """直接写库的用语构造器，默认已批准。"""

    def _seed(en: str, kr: str = "용어", *, discipline: str = "General", status: str = "approved", **extra):
        term = GlossaryTerm(en=en, kr=kr, discipline=discipline, status=status, **extra)
        db_session_fixture.add(term)
        db_session_fixture.commit()
        db_session_fixture.refresh(term)
        return term

    return _seed
