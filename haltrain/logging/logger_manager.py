"""
haltrain.logging.logger_manager: ログ管理マネージャー.

Early Stopping の監視ループが出力するログを一元管理します。
colorlogが利用可能な場合はレベル毎に色分けして出力します。
"""

import logging
from enum import Enum
from typing import Dict, List, Optional

try:
    import colorlog

    COLORLOG_AVAILABLE = True
except ImportError:
    COLORLOG_AVAILABLE = False


class LogLevel(Enum):
    """ログレベル列挙型."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"

    def to_logging_level(self) -> int:
        """logging モジュールの数値レベルへ変換."""
        return int(getattr(logging, self.value))


class ShortLevelFormatter(logging.Formatter):
    """WARNING を WARN に短縮して出力するフォーマッター."""

    _SHORT_NAMES = {"WARNING": "WARN", "CRITICAL": "CRIT"}

    def __init__(self, formatter: logging.Formatter) -> None:
        """内部フォーマッターをラップして初期化."""
        super().__init__()
        self._formatter = formatter

    def format(self, record: logging.LogRecord) -> str:
        """ログレコードを整形."""
        record.levelname = self._SHORT_NAMES.get(record.levelname, record.levelname)
        return str(self._formatter.format(record))


class LoggerManager:
    """
    ログ管理マネージャークラス.

    監視ループ・リスナー・セーバーが共有するロガーを名前単位で管理する.
    同一プロセス内では単一インスタンスを共有する.

    Attributes:
        _loggers (Dict[str, logging.Logger]): 管理されているロガーの辞書
        _default_level (LogLevel): 新規ロガーに適用するレベル
    """

    _instance: Optional["LoggerManager"] = None
    _loggers: Dict[str, logging.Logger] = {}

    _PLAIN_FORMAT = "%(asctime)s|%(levelname)-5.5s|%(name)s| %(message)s"
    _COLOR_FORMAT = (
        "%(asctime)s|%(log_color)s%(levelname)-5.5s%(reset)s|%(name)s| %(message)s"
    )
    _DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
    _LOG_COLORS = {
        "DEBUG": "cyan",
        "INFO": "green",
        "WARN": "yellow",
        "ERROR": "red",
        "CRIT": "red,bg_white",
    }

    def __new__(cls) -> "LoggerManager":
        """シングルトンパターンの実装."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self) -> None:
        """LoggerManagerを初期化."""
        if hasattr(self, "_initialized"):
            return
        self._default_level = LogLevel.INFO
        self._initialized = True

    def get_logger(self, name: str, level: Optional[LogLevel] = None) -> logging.Logger:
        """
        指定された名前のロガーを取得または作成.

        Args:
            name (str): ロガー名
            level (LogLevel, optional): ログレベル. 省略時はデフォルトレベル

        Returns:
            logging.Logger: 設定されたロガー
        """
        if name in self._loggers:
            return self._loggers[name]

        logger = logging.getLogger(name)
        logger.setLevel((level or self._default_level).to_logging_level())
        if not logger.handlers:
            logger.addHandler(self._create_handler())
            logger.propagate = False

        self._loggers[name] = logger
        return logger

    def _create_handler(self) -> logging.Handler:
        """コンソール出力用のハンドラーを作成."""
        handler: logging.Handler
        inner: logging.Formatter
        if COLORLOG_AVAILABLE:
            handler = colorlog.StreamHandler()
            inner = colorlog.ColoredFormatter(
                self._COLOR_FORMAT,
                datefmt=self._DATE_FORMAT,
                log_colors=self._LOG_COLORS,
            )
        else:
            handler = logging.StreamHandler()
            inner = logging.Formatter(self._PLAIN_FORMAT, datefmt=self._DATE_FORMAT)

        handler.setFormatter(ShortLevelFormatter(inner))
        return handler

    def set_default_level(self, level: LogLevel) -> None:
        """
        デフォルトのログレベルを設定.

        既に作成済みのロガーにも同じレベルを適用する.

        Args:
            level (LogLevel): 新しいデフォルトレベル
        """
        self._default_level = level
        for logger in self._loggers.values():
            logger.setLevel(level.to_logging_level())

    def set_logger_level(self, name: str, level: LogLevel) -> None:
        """特定のロガーのレベルを設定. 未管理の名前は無視する."""
        if name in self._loggers:
            self._loggers[name].setLevel(level.to_logging_level())

    def get_available_loggers(self) -> List[str]:
        """管理されているロガーの名前一覧を取得."""
        return list(self._loggers.keys())

    def is_colorlog_available(self) -> bool:
        """colorlogが利用可能かチェック."""
        return COLORLOG_AVAILABLE

    @classmethod
    def reset(cls) -> None:
        """シングルトンインスタンスをリセット（主にテスト用）."""
        cls._instance = None
        cls._loggers.clear()
