"""haltrain.listeners: 訓練イベントのリスナー."""

from .base import EarlyStoppingListener
from .logging_listener import LoggingListener
from .score_exporter import ScoreHistoryExporter

__all__ = ["EarlyStoppingListener", "LoggingListener", "ScoreHistoryExporter"]
