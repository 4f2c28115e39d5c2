"""haltrain.saver.base: モデル保存先のインターフェース."""

from abc import ABC, abstractmethod
from typing import Optional

from torch import nn


class ModelSaver(ABC):
    """ベストモデルと最新モデルの2つのスロットを管理する抽象基底クラス.

    Repository パターンに基づき, 保存形式や保存先は実装に委ねる.
    """

    @abstractmethod
    def save_best(self, model: nn.Module, score: Optional[float]) -> None:
        """ベストモデルとして保存(上書き)."""

    @abstractmethod
    def save_latest(self, model: nn.Module, score: Optional[float]) -> None:
        """最新モデルとして保存(上書き)."""

    @abstractmethod
    def get_best(self) -> Optional[nn.Module]:
        """ベストモデルを取得. 未保存の場合はNone."""

    @abstractmethod
    def get_latest(self) -> Optional[nn.Module]:
        """最新モデルを取得. 未保存の場合はNone."""
