#!/usr/bin/env python3
"""
简单的请求路由器
支持精确路径、末尾单个路径参数的模板（如 /api/books/{id}）以及中间件链
"""
from typing import Awaitable, Callable, Dict, List, Optional, Tuple
import logging

from fastapi import Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from starlette.routing import get_route_path

from ..exceptions import BookshelfException, InternalServerError, NotFoundError

logger = logging.getLogger(__name__)

Handler = Callable[[Request], Awaitable[Response]]
Middleware = Callable[[Handler], Handler]


def error_response(error: BookshelfException) -> JSONResponse:
    """把业务异常转换为 {"error", "message"} 响应"""
    return JSONResponse(error.to_dict(), status_code=error.status_code)


def _split_template(template: str) -> Optional[Tuple[str, str]]:
    """拆分末尾参数段，返回 (前缀, 参数名)；不是参数模板时返回None"""
    head, sep, last = template.rpartition("/")
    if sep and len(last) > 2 and last.startswith("{") and last.endswith("}"):
        return head + "/", last[1:-1]
    return None


class Router:
    """路由器

    routes: 路径模板 -> {HTTP方法: 处理函数}
    middlewares: 按注册顺序保存，先注册的在最外层
    """

    def __init__(self):
        self.routes: Dict[str, Dict[str, Handler]] = {}
        self.middlewares: List[Middleware] = []

    def use(self, middleware: Middleware) -> None:
        """添加中间件"""
        self.middlewares.append(middleware)

    def handle(self, method: str, path: str, handler: Handler) -> None:
        """注册指定路径和方法的处理函数"""
        self.routes.setdefault(path, {})[method.upper()] = handler

    def get(self, path: str, handler: Handler) -> None:
        self.handle("GET", path, handler)

    def post(self, path: str, handler: Handler) -> None:
        self.handle("POST", path, handler)

    def put(self, path: str, handler: Handler) -> None:
        self.handle("PUT", path, handler)

    def delete(self, path: str, handler: Handler) -> None:
        self.handle("DELETE", path, handler)

    def resolve(self, path: str) -> Tuple[Optional[Dict[str, Handler]], Dict[str, str]]:
        """查找路径对应的处理函数表

        先精确匹配；否则按注册顺序查找末尾带参数的模板，
        模板去掉最后一段后必须是请求路径的前缀，且请求路径更长。
        """
        handlers = self.routes.get(path)
        if handlers is not None:
            return handlers, {}

        for template, template_handlers in self.routes.items():
            split = _split_template(template)
            if split is None:
                continue
            base, name = split
            if path.startswith(base) and len(path) > len(base):
                return template_handlers, {name: path[len(base):]}

        return None, {}

    def build_chain(self, handler: Handler) -> Handler:
        """按注册的逆序包装中间件，使第一个注册的位于最外层"""
        handler = self._guard(handler)
        for middleware in reversed(self.middlewares):
            handler = middleware(handler)
        return handler

    @staticmethod
    def _guard(handler: Handler) -> Handler:
        """把处理函数抛出的异常转换成错误响应"""
        async def guarded(request: Request) -> Response:
            try:
                return await handler(request)
            except BookshelfException as e:
                if e.status_code >= 500:
                    logger.error(f"{request.method} {request.url.path} 失败: {e}")
                return error_response(e)
            except Exception:
                logger.exception(f"{request.method} {request.url.path} 发生未预期的错误")
                return error_response(InternalServerError("服务器内部错误"))
        return guarded

    async def dispatch(self, scope, receive) -> Response:
        path = get_route_path(scope)
        handlers, path_params = self.resolve(path)
        if handlers is None:
            return error_response(NotFoundError(f"路径不存在: {path}"))

        request = Request(dict(scope, path_params=path_params), receive)
        handler = handlers.get(request.method)
        if handler is None:
            return PlainTextResponse(
                "Method not allowed",
                status_code=405,
                headers={"Allow": ", ".join(handlers)},
            )

        try:
            return await self.build_chain(handler)(request)
        except Exception:
            logger.exception(f"{request.method} {path} 中间件处理失败")
            return error_response(InternalServerError("服务器内部错误"))

    async def __call__(self, scope, receive, send) -> None:
        """ASGI入口"""
        if scope["type"] == "lifespan":
            while True:
                message = await receive()
                if message["type"] == "lifespan.startup":
                    await send({"type": "lifespan.startup.complete"})
                elif message["type"] == "lifespan.shutdown":
                    await send({"type": "lifespan.shutdown.complete"})
                    return
        if scope["type"] != "http":
            return

        response = await self.dispatch(scope, receive)
        await response(scope, receive, send)
