#!/usr/bin/env python3
"""
启动脚本 - 书籍目录管理服务
使用方法: python run.py
环境变量: PORT, HOST, DB_PATH, LOG_LEVEL
"""
import sys

from bookshelf.main import run_server

if __name__ == "__main__":
    try:
        run_server()
    except KeyboardInterrupt:
        print("\n服务器已停止")
        sys.exit(0)
