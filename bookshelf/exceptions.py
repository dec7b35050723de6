"""
业务异常定义
"""
from typing import Optional


class BookshelfException(Exception):
    """基础异常类"""
    error_type = "INTERNAL_SERVER_ERROR"
    status_code = 500

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause

    def __str__(self):
        if self.cause is not None:
            return f"{self.error_type}: {self.message}: {self.cause}"
        return f"{self.error_type}: {self.message}"

    def to_dict(self) -> dict:
        """错误响应体"""
        return {"error": self.error_type, "message": self.message}


class NotFoundError(BookshelfException):
    """资源不存在"""
    error_type = "NOT_FOUND"
    status_code = 404


class BadRequestError(BookshelfException):
    """请求参数错误"""
    error_type = "BAD_REQUEST"
    status_code = 400


class InternalServerError(BookshelfException):
    """服务器内部错误"""
    error_type = "INTERNAL_SERVER_ERROR"
    status_code = 500


class BookNotFoundError(NotFoundError):
    """书籍未找到异常"""
    pass


class BookValidationError(BadRequestError):
    """书籍字段校验失败"""

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field


class DuplicateBookError(BadRequestError):
    """重复ISBN异常"""
    pass


class StorageError(InternalServerError):
    """数据库操作失败"""
    pass
