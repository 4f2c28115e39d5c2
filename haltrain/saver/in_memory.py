"""メモリ上にモデルのコピーを保持するセーバー."""

import copy
from typing import Optional

from torch import nn

from .base import ModelSaver


class InMemoryModelSaver(ModelSaver):
    """モデルのディープコピーをメモリ上に保持するセーバー.

    保存時点のパラメータを固定するため, 訓練が進んでも保存済みモデルは変化しない.
    """

    def __init__(self) -> None:
        """InMemoryModelSaverを初期化."""
        self.best_model: Optional[nn.Module] = None
        self.best_score: Optional[float] = None
        self.latest_model: Optional[nn.Module] = None
        self.latest_score: Optional[float] = None

    def save_best(self, model: nn.Module, score: Optional[float]) -> None:
        """ベストモデルのコピーを保持."""
        self.best_model = copy.deepcopy(model)
        self.best_score = score

    def save_latest(self, model: nn.Module, score: Optional[float]) -> None:
        """最新モデルのコピーを保持."""
        self.latest_model = copy.deepcopy(model)
        self.latest_score = score

    def get_best(self) -> Optional[nn.Module]:
        """ベストモデルを返す."""
        return self.best_model

    def get_latest(self) -> Optional[nn.Module]:
        """最新モデルを返す."""
        return self.latest_model
