#!/usr/bin/env python3
"""
主应用入口
"""
import logging
from typing import Optional

from fastapi import FastAPI
import uvicorn

from .config import Config, load_config
from .models.database import Database
from .repositories.book_repository import BookRepository
from .routes.book_routes import BookHandlers, register_book_routes
from .routes.middleware import cors_middleware, json_content_type_middleware, logging_middleware
from .routes.router import Router

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logging(level: str = "INFO") -> None:
    """配置日志"""
    logging.basicConfig(level=level, format=LOG_FORMAT)
    # 请求日志由中间件记录
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


def create_router(repository: BookRepository) -> Router:
    """创建路由器并注册中间件和书籍路由"""
    router = Router()
    router.use(logging_middleware)
    router.use(cors_middleware)
    router.use(json_content_type_middleware)
    register_book_routes(router, BookHandlers(repository))
    return router


def create_app(config: Optional[Config] = None) -> FastAPI:
    """创建FastAPI应用

    数据库无法打开或初始化时直接抛出异常，终止启动。
    """
    config = config or load_config()
    database = Database(config.db_path)
    repository = BookRepository(database)

    app = FastAPI(
        title="Bookshelf",
        description="书籍目录管理服务",
        version="1.0.0",
    )
    app.state.config = config
    app.state.database = database

    @app.get("/health")
    async def health_check():
        """健康检查接口"""
        return {"status": "healthy", "database": config.db_path}

    app.mount("/", create_router(repository))
    logger.info(f"应用已创建, 数据库: {config.db_path}")
    return app


def run_server(config: Optional[Config] = None) -> None:
    """运行服务器"""
    config = config or load_config()
    setup_logging(config.log_level)
    try:
        app = create_app(config)
    except Exception:
        logger.exception("数据库初始化失败，服务无法启动")
        raise
    logger.info(f"服务启动于 http://{config.host}:{config.port}")
    uvicorn.run(app, host=config.host, port=config.port_number, log_level=config.log_level.lower())


if __name__ == "__main__":
    run_server()
