"""haltrain.config.sub_configs: 終了条件を辞書から組み立てる dataclass 定義."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from haltrain.termination import (
    BestScoreEpochTerminationCondition,
    EpochTerminationCondition,
    InvalidScoreIterationTerminationCondition,
    IterationTerminationCondition,
    MaxEpochsTerminationCondition,
    MaxScoreIterationTerminationCondition,
    MaxTimeIterationTerminationCondition,
    ScoreImprovementEpochTerminationCondition,
)


@dataclass
class TerminationSettings:
    """終了条件の設定.

    None の項目は条件を作成しない.
    """

    max_epochs: Optional[int] = None
    max_time_seconds: Optional[float] = None
    max_score: Optional[float] = None
    patience: Optional[int] = None
    min_delta: float = 0.0
    best_expected_score: Optional[float] = None
    stop_on_invalid_score: bool = False

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "TerminationSettings":
        """Dict から設定を作成. 未知のキーは ValueError."""
        payload = data or {}
        unknown = set(payload) - set(cls.__dataclass_fields__)
        if unknown:
            raise ValueError(f"未知の終了条件設定です: {sorted(unknown)}")
        return cls(
            max_epochs=payload.get("max_epochs"),
            max_time_seconds=payload.get("max_time_seconds"),
            max_score=payload.get("max_score"),
            patience=payload.get("patience"),
            min_delta=payload.get("min_delta", 0.0),
            best_expected_score=payload.get("best_expected_score"),
            stop_on_invalid_score=payload.get("stop_on_invalid_score", False),
        )

    def build_epoch_conditions(self) -> List[EpochTerminationCondition]:
        """エポック終了条件を評価順に作成."""
        conditions: List[EpochTerminationCondition] = []
        if self.max_epochs is not None:
            conditions.append(MaxEpochsTerminationCondition(self.max_epochs))
        if self.patience is not None:
            conditions.append(
                ScoreImprovementEpochTerminationCondition(
                    self.patience, min_improvement=self.min_delta
                )
            )
        if self.best_expected_score is not None:
            conditions.append(
                BestScoreEpochTerminationCondition(self.best_expected_score)
            )
        return conditions

    def build_iteration_conditions(self) -> List[IterationTerminationCondition]:
        """イテレーション終了条件を評価順に作成."""
        conditions: List[IterationTerminationCondition] = []
        if self.max_time_seconds is not None:
            conditions.append(
                MaxTimeIterationTerminationCondition(self.max_time_seconds)
            )
        if self.max_score is not None:
            conditions.append(MaxScoreIterationTerminationCondition(self.max_score))
        if self.stop_on_invalid_score:
            conditions.append(InvalidScoreIterationTerminationCondition())
        return conditions
