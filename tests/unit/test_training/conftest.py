"""test_training パッケージ共通フィクスチャ."""

from typing import List, Optional, Sequence

import pytest
import torch
from torch import nn

from haltrain.scoring import ScoreCalculator
from haltrain.trainable import Trainable


class ScriptedTrainable(Trainable):
    """ステップ毎の損失を事前に指定できる訓練プロセス.

    各ステップでモデルのバイアスを 1 増やすため, バイアス値から
    何ステップ目のモデルかを判別できる.
    """

    def __init__(
        self,
        steps_per_epoch: int = 3,
        step_losses: Optional[Sequence[float]] = None,
        fail_at_step: Optional[int] = None,
    ) -> None:
        self.steps_per_epoch = steps_per_epoch
        self.step_losses = list(step_losses or [1.0])
        self.fail_at_step = fail_at_step
        self.total_steps = 0
        self.epochs_started = 0
        self._remaining = 0
        self._model = nn.Linear(1, 1)
        with torch.no_grad():
            self._model.weight.zero_()
            self._model.bias.zero_()

    @property
    def model(self) -> nn.Module:
        return self._model

    def start_epoch(self) -> None:
        self.epochs_started += 1
        self._remaining = self.steps_per_epoch

    def is_epoch_complete(self) -> bool:
        return self._remaining == 0

    def advance_one_step(self) -> float:
        if self.fail_at_step is not None and self.total_steps == self.fail_at_step:
            raise FloatingPointError("損失が発散しました")
        index = min(self.total_steps, len(self.step_losses) - 1)
        with torch.no_grad():
            self._model.bias.add_(1.0)
        self.total_steps += 1
        self._remaining -= 1
        return self.step_losses[index]


class ScriptedScoreCalculator(ScoreCalculator):
    """呼び出し毎に指定したスコアを順に返すスコア計算器."""

    def __init__(self, scores: Sequence[float]) -> None:
        self.scores: List[float] = list(scores)
        self.calls = 0

    def calculate(self, model: nn.Module) -> float:
        index = min(self.calls, len(self.scores) - 1)
        self.calls += 1
        return self.scores[index]


@pytest.fixture
def scripted_trainable():
    """ScriptedTrainableを作成するファクトリフィクスチャ."""
    return ScriptedTrainable


@pytest.fixture
def scripted_scores():
    """ScriptedScoreCalculatorを作成するファクトリフィクスチャ."""
    return ScriptedScoreCalculator
