"""
应用配置
从环境变量读取，未设置时使用默认值
"""
import os
from dataclasses import dataclass

DEFAULT_PORT = "8080"
DEFAULT_HOST = "127.0.0.1"
DEFAULT_DB_PATH = "bookshelf.db"
DEFAULT_LOG_LEVEL = "INFO"


@dataclass(frozen=True)
class Config:
    """运行配置"""
    port: str = DEFAULT_PORT
    db_path: str = DEFAULT_DB_PATH
    host: str = DEFAULT_HOST
    log_level: str = DEFAULT_LOG_LEVEL

    @property
    def port_number(self) -> int:
        return int(self.port)


def _get_env(key: str, default: str) -> str:
    # 空字符串与未设置同等对待
    value = os.getenv(key)
    if not value:
        return default
    return value


def load_config() -> Config:
    """从环境变量加载配置"""
    return Config(
        port=_get_env("PORT", DEFAULT_PORT),
        db_path=_get_env("DB_PATH", DEFAULT_DB_PATH),
        host=_get_env("HOST", DEFAULT_HOST),
        log_level=_get_env("LOG_LEVEL", DEFAULT_LOG_LEVEL).upper(),
    )
