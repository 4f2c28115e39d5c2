"""EarlyStoppingResultのテスト."""

import dataclasses

import pytest
from torch import nn

from haltrain.training import EarlyStoppingResult, TerminationReason


def _build_result(**overrides) -> EarlyStoppingResult:
    payload = {
        "termination_reason": TerminationReason.EPOCH_TERMINATION_CONDITION,
        "termination_details": "MaxEpochsTerminationCondition(2)",
        "score_vs_epoch": {0: 0.8, 1: 0.6},
        "best_model_epoch": 1,
        "best_model_score": 0.6,
        "total_epochs": 2,
        "best_model": nn.Linear(2, 1),
        "total_iterations": 10,
        "elapsed_seconds": 1.5,
    }
    payload.update(overrides)
    return EarlyStoppingResult(**payload)


class TestEarlyStoppingResult:
    """EarlyStoppingResultのテスト."""

    def test_is_immutable(self):
        """結果が変更不可であることを確認."""
        result = _build_result()
        with pytest.raises(dataclasses.FrozenInstanceError):
            result.total_epochs = 3  # type: ignore[misc]

    def test_to_dict_excludes_model(self):
        """to_dict() がモデルを含まないJSON向けの辞書を返すことを確認."""
        data = _build_result().to_dict()

        assert data == {
            "termination_reason": "EpochTerminationCondition",
            "termination_details": "MaxEpochsTerminationCondition(2)",
            "total_epochs": 2,
            "total_iterations": 10,
            "elapsed_seconds": 1.5,
            "best_model_epoch": 1,
            "best_model_score": 0.6,
            "score_vs_epoch": {"0": 0.8, "1": 0.6},
        }

    def test_termination_reason_values(self):
        """終了理由の値を確認."""
        assert (
            TerminationReason.ITERATION_TERMINATION_CONDITION.value
            == "IterationTerminationCondition"
        )
        assert (
            TerminationReason.EPOCH_TERMINATION_CONDITION.value
            == "EpochTerminationCondition"
        )

    def test_repr_omits_model(self):
        """repr にモデルが含まれないことを確認."""
        assert "best_model=" not in repr(_build_result())
