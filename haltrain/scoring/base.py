"""haltrain.scoring.base: スコア計算器のインターフェース."""

from abc import ABC, abstractmethod

from torch import nn


class ScoreCalculator(ABC):
    """検証データに対するモデルのスコアを計算する抽象基底クラス.

    スコアは小さいほど良い. 計算は訓練状態を変更してはならず,
    エポック毎に何度呼ばれても後続の訓練ステップに影響しないこと.
    """

    @abstractmethod
    def calculate(self, model: nn.Module) -> float:
        """
        モデルのスコアを計算する.

        Args:
            model (nn.Module): 評価対象のモデル

        Returns:
            float: スコア (小さいほど良い)
        """
