"""haltrain.training.result: Early Stopping 実行結果の型定義."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional

from torch import nn


class TerminationReason(Enum):
    """訓練が終了した理由."""

    ITERATION_TERMINATION_CONDITION = "IterationTerminationCondition"
    EPOCH_TERMINATION_CONDITION = "EpochTerminationCondition"


@dataclass(frozen=True)
class EarlyStoppingResult:
    """fit() の実行結果.

    Args:
        termination_reason: 終了理由
        termination_details: 終了した条件の describe() 文字列
        score_vs_epoch: エポック番号 → スコアの対応
            (スコアを計算したエポックのみ, 読み取り専用)
        best_model_epoch: ベストスコアのエポック番号. スコア未計算ならNone
        best_model_score: ベストスコア. スコア未計算ならNone
        total_epochs: 完了したエポック数
        best_model: ベストモデル. 改善が無かった場合は終了時点のモデル
        total_iterations: 実行した訓練ステップ数
        elapsed_seconds: fit() の所要時間 (秒)
    """

    termination_reason: TerminationReason
    termination_details: str
    score_vs_epoch: Mapping[int, float]
    best_model_epoch: Optional[int]
    best_model_score: Optional[float]
    total_epochs: int
    best_model: Optional[nn.Module] = field(default=None, repr=False, compare=False)
    total_iterations: int = 0
    elapsed_seconds: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        """モデルを除いた結果をJSON出力用の辞書に変換."""
        return {
            "termination_reason": self.termination_reason.value,
            "termination_details": self.termination_details,
            "total_epochs": self.total_epochs,
            "total_iterations": self.total_iterations,
            "elapsed_seconds": self.elapsed_seconds,
            "best_model_epoch": self.best_model_epoch,
            "best_model_score": self.best_model_score,
            "score_vs_epoch": {str(k): v for k, v in self.score_vs_epoch.items()},
        }
