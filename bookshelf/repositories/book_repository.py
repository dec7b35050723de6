"""
书籍数据访问层 - books 表的唯一持有者
"""
import sqlite3
from typing import List, Optional, Tuple
import logging

from ..exceptions import BookNotFoundError, DuplicateBookError, StorageError
from ..models.book import Book, utcnow
from ..models.database import Database

logger = logging.getLogger(__name__)

BOOK_COLUMNS = "id, title, author, isbn, published, created_at, updated_at"

# 区分大小写的子串匹配（LIKE 对ASCII不区分大小写）
SEARCH_CONDITION = "instr(title, ?) > 0 OR instr(author, ?) > 0 OR instr(isbn, ?) > 0"


def _is_unique_violation(error: sqlite3.IntegrityError) -> bool:
    return "UNIQUE" in str(error).upper()


class BookRepository:
    """书籍仓库类

    分页参数由调用方保证为正整数，这里不再做校验。
    """

    def __init__(self, database: Database):
        self.db = database

    def create(self, book: Book) -> Book:
        """创建书籍，回填 id 和时间戳"""
        now = utcnow()
        query = """
            INSERT INTO books (title, author, isbn, published, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?)
        """
        params = (book.title, book.author, book.isbn,
                  book.published.isoformat(), now.isoformat(), now.isoformat())
        try:
            book_id = self.db.execute_insert(query, params)
        except sqlite3.IntegrityError as e:
            if _is_unique_violation(e):
                logger.warning(f"ISBN {book.isbn} 已存在，拒绝创建: {book.title}")
                raise DuplicateBookError(f"ISBN {book.isbn} 已存在") from e
            raise StorageError("创建书籍失败", e) from e
        except sqlite3.Error as e:
            logger.error(f"创建书籍失败: {e}")
            raise StorageError("创建书籍失败", e) from e

        book.id = book_id
        book.created_at = now
        book.updated_at = now
        logger.info(f"书籍创建成功: id={book_id}, isbn={book.isbn}")
        return book

    def get(self, book_id: int) -> Optional[Book]:
        """根据ID获取书籍，不存在时返回None"""
        query = f"SELECT {BOOK_COLUMNS} FROM books WHERE id = ?"
        try:
            rows = self.db.execute_query(query, (book_id,))
        except sqlite3.Error as e:
            logger.error(f"查询书籍 {book_id} 失败: {e}")
            raise StorageError("获取书籍失败", e) from e
        if not rows:
            logger.debug(f"书籍 {book_id} 不存在")
            return None
        return Book.from_row(rows[0])

    def update(self, book: Book) -> Book:
        """更新书籍的全部可变字段并刷新 updated_at"""
        try:
            stored_isbn = self.db.execute_scalar(
                "SELECT isbn FROM books WHERE id = ?", (book.id,)
            )
            if stored_isbn is None:
                raise BookNotFoundError(f"书籍 {book.id} 不存在")

            if book.isbn != stored_isbn:
                count = self.db.execute_scalar(
                    "SELECT COUNT(*) FROM books WHERE isbn = ? AND id != ?",
                    (book.isbn, book.id),
                )
                if count:
                    logger.warning(f"ISBN {book.isbn} 已被其他书籍使用")
                    raise DuplicateBookError(f"ISBN {book.isbn} 已存在")

            now = utcnow()
            query = """
                UPDATE books
                SET title = ?, author = ?, isbn = ?, published = ?, updated_at = ?
                WHERE id = ?
            """
            params = (book.title, book.author, book.isbn,
                      book.published.isoformat(), now.isoformat(), book.id)
            affected = self.db.execute_update(query, params)
        except sqlite3.IntegrityError as e:
            if _is_unique_violation(e):
                raise DuplicateBookError(f"ISBN {book.isbn} 已存在") from e
            raise StorageError("更新书籍失败", e) from e
        except sqlite3.Error as e:
            logger.error(f"更新书籍 {book.id} 失败: {e}")
            raise StorageError("更新书籍失败", e) from e

        if affected == 0:
            raise BookNotFoundError(f"书籍 {book.id} 不存在")

        book.updated_at = now
        logger.info(f"书籍更新成功: id={book.id}")
        return book

    def delete(self, book_id: int) -> None:
        """删除书籍，不存在时抛出 BookNotFoundError"""
        if self.get(book_id) is None:
            raise BookNotFoundError(f"书籍 {book_id} 不存在")
        try:
            affected = self.db.execute_update("DELETE FROM books WHERE id = ?", (book_id,))
        except sqlite3.Error as e:
            logger.error(f"删除书籍 {book_id} 失败: {e}")
            raise StorageError("删除书籍失败", e) from e
        if affected == 0:
            raise BookNotFoundError(f"书籍 {book_id} 不存在或已被删除")
        logger.info(f"书籍删除成功: id={book_id}")

    def list(self, page: int, page_size: int) -> Tuple[List[Book], int]:
        """分页获取书籍，按创建时间倒序"""
        return self._paginate("", (), page, page_size)

    def search(self, query: str, page: int, page_size: int) -> Tuple[List[Book], int]:
        """按标题、作者或ISBN子串搜索"""
        return self._paginate(f"WHERE {SEARCH_CONDITION}", (query, query, query),
                              page, page_size)

    def _paginate(self, where_clause: str, params: tuple,
                  page: int, page_size: int) -> Tuple[List[Book], int]:
        offset = (page - 1) * page_size
        count_query = f"SELECT COUNT(*) FROM books {where_clause}"
        page_query = f"""
            SELECT {BOOK_COLUMNS} FROM books
            {where_clause}
            ORDER BY created_at DESC, id DESC
            LIMIT ? OFFSET ?
        """
        try:
            total = self.db.execute_scalar(count_query, params) or 0
            rows = self.db.execute_query(page_query, params + (page_size, offset))
        except sqlite3.Error as e:
            logger.error(f"分页查询书籍失败: {e}")
            raise StorageError("获取书籍列表失败", e) from e

        books = [Book.from_row(row) for row in rows]
        logger.debug(f"分页查询 page={page}, page_size={page_size}: {len(books)}/{total}")
        return books, total
