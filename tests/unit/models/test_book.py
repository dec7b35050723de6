"""
Book模型单元测试
"""
import pytest
from datetime import datetime, timezone
from pydantic import ValidationError

from bookshelf.models.book import Book, BookPayload, ensure_utc


@pytest.mark.unit
class TestBook:
    """Book模型测试类"""

    def test_book_defaults(self):
        """测试默认值"""
        book = Book()
        assert book.id is None
        assert book.title == ""
        assert book.published is None
        assert book.created_at is None

    def test_to_dict_fields(self):
        """测试JSON结构包含全部字段"""
        ts = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
        book = Book(id=7, title="Dune", author="Frank Herbert",
                    isbn="978-0-441-01359-3", published=ts, created_at=ts, updated_at=ts)
        data = book.to_dict()
        assert set(data) == {"id", "title", "author", "isbn", "published", "created_at", "updated_at"}
        assert data["id"] == 7
        assert data["published"] == "2024-01-02T03:04:05+00:00"

    def test_from_row(self):
        """测试从数据库行构造"""
        row = {
            "id": 1,
            "title": "Dune",
            "author": "Frank Herbert",
            "isbn": "978-0-441-01359-3",
            "published": "1965-01-01T00:00:00+00:00",
            "created_at": "2024-01-01T00:00:00.123456+00:00",
            "updated_at": "2024-01-01T00:00:00.123456+00:00",
        }
        book = Book.from_row(row)
        assert book.id == 1
        assert book.published == datetime(1965, 1, 1, tzinfo=timezone.utc)
        assert book.created_at.microsecond == 123456

    def test_book_repr(self):
        book = Book(id=3, title="计算机网络", isbn="978-7-111-21382-6")
        repr_str = repr(book)
        assert "Book" in repr_str
        assert "978-7-111-21382-6" in repr_str
        assert "计算机网络" in repr_str

    def test_ensure_utc(self):
        assert ensure_utc(None) is None
        assert ensure_utc(datetime(2024, 1, 1)).tzinfo == timezone.utc


@pytest.mark.unit
class TestBookPayload:
    """请求体模型测试类"""

    def test_date_only_published(self):
        """测试只有日期的published"""
        payload = BookPayload.model_validate({
            "title": "Dune", "author": "Herbert",
            "isbn": "9780441013593", "published": "1965-01-01",
        })
        book = payload.to_book()
        assert book.published == datetime(1965, 1, 1, tzinfo=timezone.utc)
        assert book.id is None

    def test_missing_fields_default_empty(self):
        """测试缺省字段交给校验器处理"""
        book = BookPayload.model_validate({}).to_book()
        assert book.title == ""
        assert book.isbn == ""
        assert book.published is None

    def test_server_fields_ignored(self):
        """测试忽略服务端字段"""
        payload = BookPayload.model_validate({
            "id": 99, "title": "Dune", "created_at": "2000-01-01T00:00:00Z",
        })
        book = payload.to_book(book_id=5)
        assert book.id == 5
        assert book.created_at is None

    def test_wrong_types_rejected(self):
        with pytest.raises(ValidationError):
            BookPayload.model_validate({"title": ["not", "a", "string"]})
        with pytest.raises(ValidationError):
            BookPayload.model_validate({"published": "not a date"})
