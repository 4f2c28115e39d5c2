"""haltrain.config.early_stopping_config: Early Stopping 実行設定の Pydantic モデル."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator

from haltrain.saver import InMemoryModelSaver, ModelSaver
from haltrain.scoring import ScoreCalculator
from haltrain.termination import (
    EpochTerminationCondition,
    IterationTerminationCondition,
)

from .sub_configs import TerminationSettings


class EarlyStoppingConfiguration(BaseModel):
    """TrainingSupervisor の不変な実行設定.

    終了条件はそれぞれ設定順に評価され, 最初に成立した条件で訓練を終了する.
    score_calculator を省略した場合, スコアに基づくベストモデル選択は行わない.
    """

    model_config = ConfigDict(
        frozen=True, arbitrary_types_allowed=True, protected_namespaces=()
    )

    epoch_termination_conditions: Tuple[EpochTerminationCondition, ...] = ()
    iteration_termination_conditions: Tuple[IterationTerminationCondition, ...] = ()
    score_calculator: Optional[ScoreCalculator] = None
    model_saver: ModelSaver = Field(default_factory=InMemoryModelSaver)
    evaluate_every_n_epochs: int = Field(default=1, gt=0)
    logger: Optional[logging.Logger] = None

    @model_validator(mode="after")
    def validate_termination_conditions(self) -> "EarlyStoppingConfiguration":
        """終了条件が1つ以上あることを検証する."""
        if (
            not self.epoch_termination_conditions
            and not self.iteration_termination_conditions
        ):
            raise ValueError(
                "終了条件が設定されていません. "
                "epoch_termination_conditions か iteration_termination_conditions "
                "のいずれかを指定してください"
            )
        return self

    @classmethod
    def from_dict(cls, config: Dict[str, Any]) -> "EarlyStoppingConfiguration":
        """Dict から設定を生成.

        "termination" キーの辞書から終了条件を組み立て,
        明示的に渡された条件リストの後ろに追加する.
        """
        payload = dict(config)
        settings = TerminationSettings.from_dict(payload.pop("termination", None))

        payload["epoch_termination_conditions"] = [
            *payload.get("epoch_termination_conditions", ()),
            *settings.build_epoch_conditions(),
        ]
        payload["iteration_termination_conditions"] = [
            *payload.get("iteration_termination_conditions", ()),
            *settings.build_iteration_conditions(),
        ]

        result: EarlyStoppingConfiguration = cls.model_validate(payload)
        return result
