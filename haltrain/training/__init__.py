"""haltrain.training: Early Stopping 付き訓練の実行."""

from .result import EarlyStoppingResult, TerminationReason
from .supervisor import TrainingSupervisor

__all__ = ["EarlyStoppingResult", "TerminationReason", "TrainingSupervisor"]
