"""
haltrain.logging: ログ管理モジュール.

colorlogを使用したロガー生成とレベル管理
"""

from .logger_manager import LoggerManager, LogLevel

__all__ = ["LoggerManager", "LogLevel"]
