"""
书籍模型
"""
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel


def utcnow() -> datetime:
    """当前UTC时间"""
    return datetime.now(timezone.utc)


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """无时区的时间按UTC处理"""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    if value is None:
        return None
    return ensure_utc(datetime.fromisoformat(value))


def _format_timestamp(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    return ensure_utc(value).isoformat()


@dataclass
class Book:
    """书籍模型"""
    title: str = ""
    author: str = ""
    isbn: str = ""
    published: Optional[datetime] = None
    id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Book":
        """从数据库行构造"""
        return cls(
            id=row["id"],
            title=row["title"],
            author=row["author"],
            isbn=row["isbn"],
            published=_parse_timestamp(row["published"]),
            created_at=_parse_timestamp(row["created_at"]),
            updated_at=_parse_timestamp(row["updated_at"]),
        )

    def to_dict(self) -> Dict[str, Any]:
        """JSON响应结构"""
        return {
            "id": self.id,
            "title": self.title,
            "author": self.author,
            "isbn": self.isbn,
            "published": _format_timestamp(self.published),
            "created_at": _format_timestamp(self.created_at),
            "updated_at": _format_timestamp(self.updated_at),
        }

    def __repr__(self):
        return f"Book(id={self.id}, isbn='{self.isbn}', title='{self.title}')"


class BookPayload(BaseModel):
    """创建/更新书籍请求体

    缺省字段保持为空值，由校验器给出具体字段的错误信息。
    id、created_at、updated_at 等服务端字段会被忽略。
    """
    title: str = ""
    author: str = ""
    isbn: str = ""
    published: Optional[datetime] = None

    def to_book(self, book_id: Optional[int] = None) -> Book:
        return Book(
            id=book_id,
            title=self.title,
            author=self.author,
            isbn=self.isbn,
            published=ensure_utc(self.published),
        )
