"""
配置加载单元测试
"""
import pytest

from bookshelf.config import Config, load_config


@pytest.mark.unit
class TestConfig:
    """配置测试类"""

    def test_defaults(self, monkeypatch):
        for key in ("PORT", "DB_PATH", "HOST", "LOG_LEVEL"):
            monkeypatch.delenv(key, raising=False)
        config = load_config()
        assert config.port == "8080"
        assert config.db_path == "bookshelf.db"
        assert config.port_number == 8080

    def test_from_environment(self, monkeypatch):
        monkeypatch.setenv("PORT", "9000")
        monkeypatch.setenv("DB_PATH", "/tmp/books.db")
        monkeypatch.setenv("LOG_LEVEL", "debug")
        monkeypatch.delenv("HOST", raising=False)
        config = load_config()
        assert config == Config(port="9000", db_path="/tmp/books.db", log_level="DEBUG")

    def test_empty_value_uses_default(self, monkeypatch):
        """测试空字符串按未设置处理"""
        monkeypatch.setenv("PORT", "")
        assert load_config().port == "8080"
