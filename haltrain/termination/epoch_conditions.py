"""
haltrain.termination.epoch_conditions: エポック単位の終了条件.

エポック数の上限, スコア改善の停滞, 目標スコア到達による停止を提供します。
"""

from typing import Optional

from .base import EpochTerminationCondition


class MaxEpochsTerminationCondition(EpochTerminationCondition):
    """
    指定エポック数の訓練が完了した時点で終了する.

    Args:
        max_epochs (int): 最大エポック数
    """

    def __init__(self, max_epochs: int) -> None:
        """MaxEpochsTerminationConditionを初期化."""
        if max_epochs <= 0:
            raise ValueError(
                f"max_epochs は正の整数である必要があります (値: {max_epochs})"
            )
        self.max_epochs = max_epochs

    def evaluate(self, epoch: int, score: Optional[float]) -> bool:
        """完了エポック数が上限に達したか判定."""
        return epoch + 1 >= self.max_epochs

    def describe(self) -> str:
        """条件の説明文字列を返す."""
        return f"MaxEpochsTerminationCondition({self.max_epochs})"


class ScoreImprovementEpochTerminationCondition(EpochTerminationCondition):
    """
    スコアが一定エポック数改善しない場合に終了する.

    最初にスコアが計算されたエポックを初期ベストとし, 以降
    ``score < best - min_improvement`` を満たさないエポックが
    連続で max_epochs_with_no_improvement 回続いた時点で終了する.

    Args:
        max_epochs_with_no_improvement (int): 改善なしの許容エポック数
        min_improvement (float): 改善と見なす最小変化量
    """

    def __init__(
        self, max_epochs_with_no_improvement: int, min_improvement: float = 0.0
    ) -> None:
        """ScoreImprovementEpochTerminationConditionを初期化."""
        if max_epochs_with_no_improvement <= 0:
            raise ValueError(
                "max_epochs_with_no_improvement は正の整数である必要があります "
                f"(値: {max_epochs_with_no_improvement})"
            )
        if min_improvement < 0:
            raise ValueError(
                f"min_improvement は0以上である必要があります (値: {min_improvement})"
            )
        self.max_epochs_with_no_improvement = max_epochs_with_no_improvement
        self.min_improvement = min_improvement

        # 内部状態
        self.best_score: Optional[float] = None
        self.best_epoch = -1
        self.counter = 0

    def initialize(self) -> None:
        """内部状態をリセット."""
        self.best_score = None
        self.best_epoch = -1
        self.counter = 0

    def evaluate(self, epoch: int, score: Optional[float]) -> bool:
        """改善なしのエポック数が許容数に達したか判定."""
        if score is None:
            # スコア未計算のエポックはカウントしない
            return False

        if self.best_score is None or score < self.best_score - self.min_improvement:
            self.best_score = score
            self.best_epoch = epoch
            self.counter = 0
            return False

        self.counter += 1
        return self.counter >= self.max_epochs_with_no_improvement

    def describe(self) -> str:
        """条件の説明文字列を返す."""
        return (
            "ScoreImprovementEpochTerminationCondition("
            f"maxEpochsWithNoImprovement={self.max_epochs_with_no_improvement}, "
            f"minImprovement={self.min_improvement})"
        )


class BestScoreEpochTerminationCondition(EpochTerminationCondition):
    """
    スコアが目標値以下に到達した時点で終了する.

    Args:
        best_expected_score (float): 目標スコア (小さいほど良い)
    """

    def __init__(self, best_expected_score: float) -> None:
        """BestScoreEpochTerminationConditionを初期化."""
        self.best_expected_score = best_expected_score

    def evaluate(self, epoch: int, score: Optional[float]) -> bool:
        """スコアが目標値に到達したか判定."""
        if score is None:
            return False
        return score <= self.best_expected_score

    def describe(self) -> str:
        """条件の説明文字列を返す."""
        return f"BestScoreEpochTerminationCondition({self.best_expected_score})"
