"""
pytest配置文件，定义全局fixtures和测试配置
"""
from datetime import datetime, timezone
from pathlib import Path
from typing import Generator
import pytest
from fastapi.testclient import TestClient

from bookshelf.config import Config
from bookshelf.main import create_app
from bookshelf.models.book import Book
from bookshelf.models.database import Database
from bookshelf.repositories.book_repository import BookRepository
from tests.fixtures.sample_data import SAMPLE_BOOKS, make_isbn


@pytest.fixture
def temp_db_path(tmp_path: Path) -> str:
    """临时数据库文件路径"""
    return str(tmp_path / "bookshelf_test.db")


@pytest.fixture
def test_db(temp_db_path: str) -> Database:
    """创建测试数据库实例"""
    return Database(temp_db_path)


@pytest.fixture
def book_repository(test_db: Database) -> BookRepository:
    """基于临时数据库的仓库"""
    return BookRepository(test_db)


@pytest.fixture
def app(temp_db_path: str):
    """使用临时数据库的应用"""
    return create_app(Config(db_path=temp_db_path))


@pytest.fixture
def client(app) -> Generator[TestClient, None, None]:
    """创建FastAPI测试客户端"""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def sample_book_data():
    """示例书籍数据"""
    return dict(SAMPLE_BOOKS[0])


@pytest.fixture
def make_book():
    """构造书籍模型，ISBN按序号生成"""
    def _make(number: int = 1, **overrides) -> Book:
        fields = {
            "title": f"Test Book {number}",
            "author": f"Test Author {number}",
            "isbn": make_isbn(number),
            "published": datetime(2000, 1, 1, tzinfo=timezone.utc),
        }
        fields.update(overrides)
        return Book(**fields)
    return _make


def pytest_configure(config):
    """配置pytest标记"""
    config.addinivalue_line(
        "markers", "unit: 单元测试"
    )
    config.addinivalue_line(
        "markers", "integration: 集成测试"
    )
    config.addinivalue_line(
        "markers", "e2e: 端到端测试"
    )
