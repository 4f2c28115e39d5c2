"""
haltrain.termination.base: 終了条件の抽象基底クラス.

エポック単位・イテレーション単位の終了条件が実装すべきインターフェースを定義します。
"""

from abc import ABC, abstractmethod
from typing import Optional


class TerminationCondition(ABC):
    """終了条件の共通インターフェース.

    describe() の文字列は EarlyStoppingResult.termination_details に
    そのまま格納されるため, 同じパラメータに対して常に同じ値を返すこと.
    """

    def initialize(self) -> None:
        """訓練開始時に1度だけ呼ばれる. 内部状態をリセットする."""

    @abstractmethod
    def describe(self) -> str:
        """条件名とパラメータを含む文字列を返す."""

    def __str__(self) -> str:
        """describe() と同じ文字列を返す."""
        return self.describe()

    def __repr__(self) -> str:
        """describe() と同じ文字列を返す."""
        return self.describe()


class EpochTerminationCondition(TerminationCondition):
    """エポック終了毎に評価される終了条件."""

    @abstractmethod
    def evaluate(self, epoch: int, score: Optional[float]) -> bool:
        """
        訓練を終了すべきか判定する.

        Args:
            epoch (int): 完了したエポック番号 (0始まり)
            score (float, optional): そのエポックのスコア. 未計算の場合None

        Returns:
            bool: 訓練を終了すべき場合True
        """


class IterationTerminationCondition(TerminationCondition):
    """訓練ステップ毎に評価される終了条件."""

    @abstractmethod
    def evaluate(self, last_score: float) -> bool:
        """
        訓練を終了すべきか判定する.

        Args:
            last_score (float): 直前のステップのミニバッチ損失

        Returns:
            bool: 訓練を終了すべき場合True
        """
