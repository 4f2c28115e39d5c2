"""haltrain.config: Early Stopping の設定."""

from .early_stopping_config import EarlyStoppingConfiguration
from .sub_configs import TerminationSettings

__all__ = ["EarlyStoppingConfiguration", "TerminationSettings"]
