#!/usr/bin/env python3
"""
书籍管理路由
"""
import json
import math
import re
from typing import Optional, Tuple
import logging

from fastapi import Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse, Response
from pydantic import ValidationError

from ..exceptions import BadRequestError, BookNotFoundError, StorageError
from ..models.book import BookPayload, utcnow
from ..repositories.book_repository import BookRepository
from ..utils.validators import normalize_isbn, validate_book
from .router import Router

logger = logging.getLogger(__name__)

DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100

INT64_MIN = -2 ** 63
INT64_MAX = 2 ** 63 - 1
INTEGER_PATTERN = re.compile(r"-?[0-9]+")

ROUTE_PREFIXES = ("/books", "/api/books")


def parse_pagination(request: Request) -> Tuple[int, int]:
    """解析分页参数，非法值回落到默认值"""
    page_size = _parse_int(request.query_params.get("page_size"))
    if page_size is None or page_size < 1 or page_size > MAX_PAGE_SIZE:
        page_size = DEFAULT_PAGE_SIZE

    # 偏移量 (page-1)*page_size 必须能存入SQLite INTEGER
    page = _parse_int(request.query_params.get("page"))
    if page is None or page < 1 or (page - 1) * page_size > INT64_MAX:
        page = DEFAULT_PAGE
    return page, page_size


def _parse_int(value: Optional[str]) -> Optional[int]:
    """严格解析64位十进制整数，失败返回None"""
    if value is None or not INTEGER_PATTERN.fullmatch(value):
        return None
    number = int(value)
    if number < INT64_MIN or number > INT64_MAX:
        return None
    return number


def total_pages(total: int, page_size: int) -> int:
    return math.ceil(total / page_size)


def parse_book_id(request: Request) -> int:
    """从路径末段解析书籍ID"""
    raw = request.path_params.get("id", "")
    book_id = _parse_int(raw)
    if book_id is None:
        raise BadRequestError(f"无效的书籍ID: {raw}")
    return book_id


async def read_payload(request: Request) -> BookPayload:
    """解析JSON请求体"""
    try:
        data = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise BadRequestError("无效的书籍数据: 请求体不是合法的JSON")
    if not isinstance(data, dict):
        raise BadRequestError("无效的书籍数据: 请求体必须是JSON对象")
    try:
        return BookPayload.model_validate(data)
    except ValidationError as e:
        details = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise BadRequestError(f"无效的书籍数据: {details}")


def paginated_response(books, total: int, page: int, page_size: int, **extra) -> JSONResponse:
    body = {
        "books": [book.to_dict() for book in books],
        "total_books": total,
        "page": page,
        "page_size": page_size,
        "total_pages": total_pages(total, page_size),
    }
    body.update(extra)
    return JSONResponse(body)


class BookHandlers:
    """书籍相关的请求处理函数

    数据库调用是阻塞的，统一放到线程池中执行。
    """

    def __init__(self, repository: BookRepository):
        self.repository = repository

    async def list_books(self, request: Request) -> Response:
        """获取书籍列表（分页）"""
        page, page_size = parse_pagination(request)
        books, total = await run_in_threadpool(self.repository.list, page, page_size)
        logger.info(f"返回书籍列表: {len(books)} 本, 共 {total} 本")
        return paginated_response(books, total, page, page_size)

    async def search_books(self, request: Request) -> Response:
        """按标题、作者、ISBN搜索书籍"""
        query = request.query_params.get("q", "")
        if not query:
            raise BadRequestError("缺少搜索参数 q")
        page, page_size = parse_pagination(request)
        books, total = await run_in_threadpool(self.repository.search, query, page, page_size)
        logger.info(f"搜索 '{query}': 共 {total} 本")
        return paginated_response(books, total, page, page_size, query=query)

    async def get_book(self, request: Request) -> Response:
        """获取单本书籍"""
        book_id = parse_book_id(request)
        book = await run_in_threadpool(self.repository.get, book_id)
        if book is None:
            raise BookNotFoundError("书籍不存在")
        return JSONResponse(book.to_dict())

    async def create_book(self, request: Request) -> Response:
        """创建新书籍"""
        payload = await read_payload(request)
        book = payload.to_book()
        book.isbn = normalize_isbn(book.isbn)
        validate_book(book)

        created = await run_in_threadpool(self.repository.create, book)
        return JSONResponse(created.to_dict(), status_code=201)

    async def update_book(self, request: Request) -> Response:
        """更新书籍信息（整体替换可变字段）"""
        book_id = parse_book_id(request)
        existing = await run_in_threadpool(self.repository.get, book_id)
        if existing is None:
            raise BookNotFoundError("书籍不存在")

        payload = await read_payload(request)
        book = payload.to_book(book_id=book_id)
        if not book.isbn:
            book.isbn = existing.isbn
        book.isbn = normalize_isbn(book.isbn)
        book.created_at = existing.created_at
        book.updated_at = utcnow()
        validate_book(book)

        await run_in_threadpool(self.repository.update, book)

        updated = await run_in_threadpool(self.repository.get, book_id)
        if updated is None:
            raise StorageError("获取更新后的书籍失败")
        return JSONResponse(updated.to_dict())

    async def delete_book(self, request: Request) -> Response:
        """删除书籍"""
        book_id = parse_book_id(request)
        await run_in_threadpool(self.repository.delete, book_id)
        return Response(status_code=204)

    async def preflight(self, request: Request) -> Response:
        """OPTIONS 请求，通常已被CORS中间件处理"""
        return Response(status_code=200)


def register_book_routes(router: Router, handlers: BookHandlers) -> None:
    """在 /books 和 /api/books 下注册书籍路由"""
    for prefix in ROUTE_PREFIXES:
        collection = prefix
        search = f"{prefix}/search"
        item = f"{prefix}/{{id}}"

        router.get(collection, handlers.list_books)
        router.post(collection, handlers.create_book)
        router.get(search, handlers.search_books)
        router.get(item, handlers.get_book)
        router.put(item, handlers.update_book)
        router.delete(item, handlers.delete_book)

        for path in (collection, search, item):
            router.handle("OPTIONS", path, handlers.preflight)
