"""
路由中间件
"""
import time
import logging

from fastapi import Request
from fastapi.responses import Response

from .router import Handler

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


def logging_middleware(next_handler: Handler) -> Handler:
    """记录请求开始、结束及耗时"""
    async def handler(request: Request) -> Response:
        start = time.perf_counter()
        logger.info(f"Started {request.method} {request.url.path}")
        response = await next_handler(request)
        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info(
            f"Completed {request.method} {request.url.path} "
            f"{response.status_code} in {elapsed_ms:.2f}ms"
        )
        return response
    return handler


def cors_middleware(next_handler: Handler) -> Handler:
    """添加CORS响应头，OPTIONS预检请求直接返回200"""
    async def handler(request: Request) -> Response:
        if request.method == "OPTIONS":
            return Response(status_code=200, headers=CORS_HEADERS)
        response = await next_handler(request)
        response.headers.update(CORS_HEADERS)
        return response
    return handler


def json_content_type_middleware(next_handler: Handler) -> Handler:
    """有响应体时统一设置 Content-Type: application/json"""
    async def handler(request: Request) -> Response:
        response = await next_handler(request)
        if response.status_code != 204 and response.body:
            response.headers["Content-Type"] = "application/json"
        return response
    return handler
