"""
书籍字段校验与ISBN规范化
"""
import re
from datetime import datetime
from typing import Optional

from ..exceptions import BookValidationError
from ..models.book import Book, ensure_utc, utcnow

TITLE_MAX_LENGTH = 200
AUTHOR_MAX_LENGTH = 100
ISBN_LENGTH = 13
# 规范格式 AAA-B-CCC-DDDDD-E
ISBN_GROUPS = (3, 1, 3, 5, 1)

_NON_DIGIT = re.compile(r"\D")


def strip_isbn(isbn: str) -> str:
    """去掉ISBN中的所有非数字字符"""
    return _NON_DIGIT.sub("", isbn or "")


def isbn13_checksum_ok(digits: str) -> bool:
    """ISBN-13校验位检查

    前12位按位置交替乘以1和3求和，校验位为 (10 - sum % 10) % 10。
    """
    if len(digits) != ISBN_LENGTH or not digits.isdigit():
        return False
    total = sum(int(d) * (3 if i % 2 else 1) for i, d in enumerate(digits[:12]))
    return (10 - total % 10) % 10 == int(digits[12])


def format_isbn(digits: str) -> str:
    """按 3-1-3-5-1 分组加连字符"""
    parts = []
    start = 0
    for width in ISBN_GROUPS:
        parts.append(digits[start:start + width])
        start += width
    return "-".join(parts)


def normalize_isbn(isbn: str) -> str:
    """ISBN规范化

    合法的ISBN-13返回规范分组格式，其他输入原样返回交给校验处理。
    对结果再次调用结果不变。
    """
    digits = strip_isbn(isbn)
    if isbn13_checksum_ok(digits):
        return format_isbn(digits)
    return isbn


def validate_isbn(isbn: str) -> None:
    digits = strip_isbn(isbn)
    if len(digits) != ISBN_LENGTH:
        raise BookValidationError("isbn", f"isbn 必须为{ISBN_LENGTH}位数字: {isbn!r}")
    if not isbn13_checksum_ok(digits):
        raise BookValidationError("isbn", f"isbn 校验位无效: {isbn!r}")


def _validate_text(field: str, value: str, max_length: int) -> None:
    if not value:
        raise BookValidationError(field, f"{field} 不能为空")
    if len(value) > max_length:
        raise BookValidationError(field, f"{field} 长度不能超过{max_length}个字符")


def validate_book(book: Book, now: Optional[datetime] = None) -> None:
    """校验书籍字段，遇到第一个无效字段即抛出 BookValidationError

    检查顺序: title, author, isbn, published。
    """
    _validate_text("title", book.title, TITLE_MAX_LENGTH)
    _validate_text("author", book.author, AUTHOR_MAX_LENGTH)
    validate_isbn(book.isbn)

    if book.published is None:
        raise BookValidationError("published", "published 不能为空")
    now = ensure_utc(now) if now is not None else utcnow()
    if ensure_utc(book.published) > now:
        raise BookValidationError("published", "published 不能晚于当前时间")
