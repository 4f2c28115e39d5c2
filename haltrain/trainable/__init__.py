"""haltrain.trainable: 監視対象の訓練プロセス."""

from .base import Trainable
from .torch_trainable import TorchTrainable

__all__ = ["TorchTrainable", "Trainable"]
