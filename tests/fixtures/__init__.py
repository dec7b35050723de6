"""
测试fixtures包
"""
from .sample_data import (
    SAMPLE_BOOKS,
    CANONICAL_ISBNS,
    INVALID_ISBNS,
    make_isbn,
)

__all__ = [
    "SAMPLE_BOOKS",
    "CANONICAL_ISBNS",
    "INVALID_ISBNS",
    "make_isbn",
]
