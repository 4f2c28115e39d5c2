"""haltrain.exceptions: 訓練中断を伴う致命的エラーの定義."""

from typing import Optional


class EarlyStoppingError(RuntimeError):
    """Early Stopping 実行中の致命的エラーの基底クラス.

    Args:
        message: エラーメッセージ
        phase: 失敗したフェーズ ("iteration", "epoch", "persistence")
        epoch: 失敗時のエポック番号
    """

    phase = "unknown"

    def __init__(self, message: str, epoch: Optional[int] = None) -> None:
        """エラーを初期化."""
        super().__init__(message)
        self.epoch = epoch

    def __str__(self) -> str:
        """フェーズとエポックを含めたメッセージを返す."""
        base = super().__str__()
        if self.epoch is None:
            return f"[{self.phase}] {base}"
        return f"[{self.phase}] エポック {self.epoch}: {base}"


class TrainingStepError(EarlyStoppingError):
    """訓練ステップ(イテレーション)の実行に失敗した."""

    phase = "iteration"


class ScoreCalculationError(EarlyStoppingError):
    """エポック境界でのスコア計算に失敗した."""

    phase = "epoch"


class PersistenceError(EarlyStoppingError):
    """モデルの保存・読み込みに失敗した."""

    phase = "persistence"
