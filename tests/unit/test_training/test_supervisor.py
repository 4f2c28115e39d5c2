"""TrainingSupervisorのユニットテスト."""

import logging
import math
from unittest.mock import Mock

import pytest
import torch
from pydantic import ValidationError
from torch import nn, optim
from torch.utils.data import DataLoader, TensorDataset

from haltrain.config import EarlyStoppingConfiguration
from haltrain.exceptions import (
    PersistenceError,
    ScoreCalculationError,
    TrainingStepError,
)
from haltrain.listeners import EarlyStoppingListener
from haltrain.logging import LoggerManager
from haltrain.saver import InMemoryModelSaver, ModelSaver
from haltrain.scoring import ScoreCalculator
from haltrain.termination import (
    BestScoreEpochTerminationCondition,
    MaxEpochsTerminationCondition,
    MaxScoreIterationTerminationCondition,
    MaxTimeIterationTerminationCondition,
    ScoreImprovementEpochTerminationCondition,
    StopRequestedIterationTerminationCondition,
)
from haltrain.trainable import TorchTrainable
from haltrain.training import TerminationReason, TrainingSupervisor


def bias_of(model) -> float:
    """nn.Linear のバイアス値を返す."""
    return float(model.bias.item())


def build_config(**overrides) -> EarlyStoppingConfiguration:
    """テスト用の設定を生成する.

    Args:
        **overrides: 上書きする設定値.

    Returns:
        MaxEpochs(5) を持つ設定.
    """
    payload = {
        "epoch_termination_conditions": [MaxEpochsTerminationCondition(5)],
        "model_saver": InMemoryModelSaver(),
        "logger": logging.getLogger("test_supervisor"),
    }
    payload.update(overrides)
    return EarlyStoppingConfiguration(**payload)


class TestEpochTermination:
    """エポック終了条件による終了のテスト."""

    def test_max_epochs(self, scripted_trainable, scripted_scores):
        """MaxEpochs(5) で5エポック訓練して終了することを確認."""
        config = build_config(score_calculator=scripted_scores([1.0]))
        trainable = scripted_trainable(steps_per_epoch=3)

        result = TrainingSupervisor(config, trainable).fit()

        assert result.total_epochs == 5
        assert result.total_iterations == 15
        assert result.termination_reason == TerminationReason.EPOCH_TERMINATION_CONDITION
        assert result.termination_details == "MaxEpochsTerminationCondition(5)"
        assert list(result.score_vs_epoch) == [0, 1, 2, 3, 4]
        assert trainable.epochs_started == 5

    def test_best_model_is_snapshot_of_best_epoch(
        self, scripted_trainable, scripted_scores
    ):
        """最終エポックではなくベストスコアのモデルが返ることを確認."""
        config = build_config(
            score_calculator=scripted_scores([3.0, 2.0, 2.5, 1.5, 4.0])
        )

        result = TrainingSupervisor(config, scripted_trainable(3)).fit()

        assert result.best_model_epoch == 3
        assert result.best_model_score == 1.5
        assert result.score_vs_epoch[result.best_model_epoch] == result.best_model_score
        # エポック3終了時点 = 12ステップ実行後のモデル
        assert bias_of(result.best_model) == 12.0

    def test_plateau_keeps_first_best_epoch(self, scripted_trainable, scripted_scores):
        """同じスコアは改善と見なさず, 最初のエポックがベストのままであることを確認."""
        config = build_config(
            epoch_termination_conditions=[MaxEpochsTerminationCondition(3)],
            score_calculator=scripted_scores([2.0, 2.0, 2.0]),
        )

        result = TrainingSupervisor(config, scripted_trainable(1)).fit()

        assert result.best_model_epoch == 0
        assert bias_of(result.best_model) == 1.0

    def test_nan_score_becomes_initial_best(self, scripted_trainable, scripted_scores):
        """NaNスコアでも最初のエポックがベストとして記録されることを確認."""
        config = build_config(
            epoch_termination_conditions=[MaxEpochsTerminationCondition(3)],
            score_calculator=scripted_scores([math.nan]),
        )

        result = TrainingSupervisor(config, scripted_trainable(3)).fit()

        assert result.best_model_epoch == 0
        assert result.best_model_epoch in result.score_vs_epoch
        assert math.isnan(result.best_model_score)
        # エポック0終了時点 = 3ステップ実行後のモデル
        assert bias_of(result.best_model) == 3.0

    def test_score_history_is_read_only(self, scripted_trainable, scripted_scores):
        """結果のスコア履歴が変更できないことを確認."""
        config = build_config(score_calculator=scripted_scores([1.0]))

        result = TrainingSupervisor(config, scripted_trainable()).fit()

        with pytest.raises(TypeError):
            result.score_vs_epoch[0] = 0.0  # type: ignore[index]
        assert result.score_vs_epoch[0] == 1.0

    def test_no_improvement_in_n_epochs(self, scripted_trainable, scripted_scores):
        """改善なしが5エポック続くと合計6エポックで終了することを確認."""
        condition = ScoreImprovementEpochTerminationCondition(5)
        config = build_config(
            epoch_termination_conditions=[
                MaxEpochsTerminationCondition(100),
                condition,
            ],
            score_calculator=scripted_scores([1.0]),
        )

        result = TrainingSupervisor(config, scripted_trainable()).fit()

        assert result.total_epochs == 6
        assert result.best_model_epoch == 0
        assert result.termination_reason == TerminationReason.EPOCH_TERMINATION_CONDITION
        assert result.termination_details == condition.describe()

    def test_first_matching_condition_wins(self, scripted_trainable, scripted_scores):
        """複数の条件が同時に成立した場合は設定順で最初の条件が採用される."""
        config = build_config(
            epoch_termination_conditions=[
                BestScoreEpochTerminationCondition(10.0),
                MaxEpochsTerminationCondition(1),
            ],
            score_calculator=scripted_scores([1.0]),
        )

        result = TrainingSupervisor(config, scripted_trainable()).fit()

        assert result.termination_details == "BestScoreEpochTerminationCondition(10.0)"

    def test_evaluate_every_n_epochs(self, scripted_trainable, scripted_scores):
        """スコア計算がNエポック毎に行われることを確認."""
        listener = Mock(spec=EarlyStoppingListener)
        config = build_config(
            epoch_termination_conditions=[MaxEpochsTerminationCondition(4)],
            score_calculator=scripted_scores([2.0, 1.0]),
            evaluate_every_n_epochs=2,
        )

        result = TrainingSupervisor(config, scripted_trainable(), [listener]).fit()

        assert result.score_vs_epoch == {1: 2.0, 3: 1.0}
        assert result.best_model_epoch == 3
        scores = [call.args[1] for call in listener.on_epoch.call_args_list]
        assert scores == [None, 2.0, None, 1.0]


class TestIterationTermination:
    """イテレーション終了条件による終了のテスト."""

    def test_max_score_halts_mid_epoch(self, scripted_trainable, scripted_scores):
        """損失の発散でエポック途中に終了することを確認."""
        condition = MaxScoreIterationTerminationCondition(7.5)
        config = build_config(
            epoch_termination_conditions=[MaxEpochsTerminationCondition(5000)],
            iteration_termination_conditions=[condition],
            score_calculator=scripted_scores([2.0]),
        )
        trainable = scripted_trainable(3, step_losses=[1.0, 1.0, 1.0, 1.0, 10.0])

        result = TrainingSupervisor(config, trainable).fit()

        assert result.termination_reason == (
            TerminationReason.ITERATION_TERMINATION_CONDITION
        )
        assert result.termination_details == condition.describe()
        assert result.total_epochs == 1
        assert result.total_iterations == 5
        assert result.best_model_epoch == 0
        assert result.score_vs_epoch == {0: 2.0}
        assert bias_of(result.best_model) == 3.0

    def test_halt_before_first_epoch_returns_model_at_termination(
        self, scripted_trainable, scripted_scores
    ):
        """スコア計算前に終了した場合は終了時点のモデルが返ることを確認."""
        config = build_config(
            iteration_termination_conditions=[
                MaxScoreIterationTerminationCondition(7.5)
            ],
            score_calculator=scripted_scores([1.0]),
        )

        result = TrainingSupervisor(
            config, scripted_trainable(3, step_losses=[10.0])
        ).fit()

        assert result.total_epochs == 0
        assert result.score_vs_epoch == {}
        assert result.best_model_epoch is None
        assert result.best_model_score is None
        assert bias_of(result.best_model) == 1.0

    def test_stop_request_from_callback(self, scripted_trainable):
        """外部フラグによる協調的な停止を確認."""
        trainable = scripted_trainable(3)
        condition = StopRequestedIterationTerminationCondition(
            stop_flag_callback=lambda: trainable.total_steps >= 4
        )
        config = build_config(iteration_termination_conditions=[condition])

        result = TrainingSupervisor(config, trainable).fit()

        assert result.total_iterations == 4
        assert result.termination_details == condition.describe()

    def test_conditions_are_initialized_before_run(self, scripted_trainable):
        """fit() 開始時に条件が初期化され, 以前の停止要求が残らないことを確認."""
        condition = StopRequestedIterationTerminationCondition()
        condition.request_stop()
        config = build_config(
            epoch_termination_conditions=[MaxEpochsTerminationCondition(2)],
            iteration_termination_conditions=[condition],
        )

        result = TrainingSupervisor(config, scripted_trainable()).fit()

        assert result.termination_reason == TerminationReason.EPOCH_TERMINATION_CONDITION
        assert result.total_epochs == 2


class TestWithoutScoreCalculator:
    """スコア計算器なしのテスト."""

    def test_best_model_is_model_at_termination(self, scripted_trainable):
        """スコア関連の値がNoneで, 終了時点のモデルが返ることを確認."""
        listener = Mock(spec=EarlyStoppingListener)
        config = build_config(
            epoch_termination_conditions=[MaxEpochsTerminationCondition(3)]
        )

        result = TrainingSupervisor(config, scripted_trainable(3), [listener]).fit()

        assert result.score_vs_epoch == {}
        assert result.best_model_score is None
        assert result.best_model_epoch is None
        assert bias_of(result.best_model) == 9.0
        assert [call.args[1] for call in listener.on_epoch.call_args_list] == [
            None,
            None,
            None,
        ]


class TestModelSaverCalls:
    """ModelSaverとの連携のテスト."""

    def test_saves_best_only_on_improvement_and_latest_every_epoch(
        self, scripted_trainable, scripted_scores
    ):
        """ベストは改善時のみ, 最新は毎エポック保存されることを確認."""
        saver = Mock(spec=ModelSaver)
        config = build_config(
            epoch_termination_conditions=[MaxEpochsTerminationCondition(4)],
            score_calculator=scripted_scores([3.0, 1.0, 1.0, 2.0]),
            model_saver=saver,
        )

        result = TrainingSupervisor(config, scripted_trainable()).fit()

        assert saver.save_best.call_count == 2
        assert [call.args[1] for call in saver.save_best.call_args_list] == [3.0, 1.0]
        assert saver.save_latest.call_count == 4
        saver.get_best.assert_called_once()
        assert result.best_model is saver.get_best.return_value

    def test_save_failure_raises_persistence_error(
        self, scripted_trainable, scripted_scores
    ):
        """保存失敗は PersistenceError として伝播することを確認."""
        saver = Mock(spec=ModelSaver)
        saver.save_latest.side_effect = OSError("disk full")
        listener = Mock(spec=EarlyStoppingListener)
        config = build_config(
            score_calculator=scripted_scores([1.0]), model_saver=saver
        )

        with pytest.raises(PersistenceError) as exc_info:
            TrainingSupervisor(config, scripted_trainable(), [listener]).fit()

        assert exc_info.value.phase == "persistence"
        assert exc_info.value.epoch == 0
        assert isinstance(exc_info.value.__cause__, OSError)
        listener.on_completion.assert_not_called()

    def test_load_failure_raises_persistence_error(
        self, scripted_trainable, scripted_scores
    ):
        """ベストモデルの読み込み失敗も PersistenceError になることを確認."""
        saver = Mock(spec=ModelSaver)
        saver.get_best.side_effect = FileNotFoundError("missing")
        config = build_config(
            score_calculator=scripted_scores([1.0]), model_saver=saver
        )

        with pytest.raises(PersistenceError):
            TrainingSupervisor(config, scripted_trainable()).fit()


class TestCollaboratorFailures:
    """訓練プロセス・スコア計算器の失敗のテスト."""

    def test_training_step_failure(self, scripted_trainable):
        """訓練ステップの失敗は TrainingStepError として伝播することを確認."""
        config = build_config()

        with pytest.raises(TrainingStepError) as exc_info:
            TrainingSupervisor(config, scripted_trainable(3, fail_at_step=4)).fit()

        assert exc_info.value.phase == "iteration"
        assert exc_info.value.epoch == 1
        assert isinstance(exc_info.value.__cause__, FloatingPointError)
        assert "[iteration]" in str(exc_info.value)

    def test_empty_training_data(self):
        """訓練データが空の場合は TrainingStepError で終了することを確認."""
        dataset = TensorDataset(
            torch.empty((0, 4)), torch.empty((0,), dtype=torch.long)
        )
        model = nn.Linear(4, 3)
        trainable = TorchTrainable(
            model=model,
            optimizer=optim.SGD(model.parameters(), lr=0.1),
            criterion=nn.CrossEntropyLoss(),
            train_loader=DataLoader(dataset, batch_size=4, shuffle=False),
        )
        config = EarlyStoppingConfiguration(
            iteration_termination_conditions=[
                MaxTimeIterationTerminationCondition(0.5)
            ],
            logger=logging.getLogger("test_supervisor"),
        )

        with pytest.raises(TrainingStepError) as exc_info:
            TrainingSupervisor(config, trainable).fit()

        assert exc_info.value.epoch == 0
        assert "訓練データが空" in str(exc_info.value)

    def test_score_calculation_failure(self, scripted_trainable):
        """スコア計算の失敗は ScoreCalculationError として伝播することを確認."""
        calculator = Mock(spec=ScoreCalculator)
        calculator.calculate.side_effect = ValueError("bad data")
        config = build_config(score_calculator=calculator)

        with pytest.raises(ScoreCalculationError) as exc_info:
            TrainingSupervisor(config, scripted_trainable()).fit()

        assert exc_info.value.phase == "epoch"


class TestListeners:
    """リスナー通知のテスト."""

    def test_call_counts(self, scripted_trainable, scripted_scores):
        """開始1回, エポック5回, 完了1回通知されることを確認."""
        listener = Mock(spec=EarlyStoppingListener)
        config = build_config(score_calculator=scripted_scores([1.0]))

        result = TrainingSupervisor(config, scripted_trainable(), [listener]).fit()

        assert listener.on_start.call_count == 1
        assert listener.on_epoch.call_count == 5
        listener.on_completion.assert_called_once_with(result)
        epochs = [call.args[0] for call in listener.on_epoch.call_args_list]
        assert epochs == [0, 1, 2, 3, 4]

    def test_listeners_notified_in_registration_order(
        self, scripted_trainable, scripted_scores
    ):
        """登録順に通知されることを確認."""
        events = []

        class Recorder(EarlyStoppingListener):
            def __init__(self, name):
                self.name = name

            def on_start(self, config, model):
                events.append((self.name, "start"))

            def on_completion(self, result):
                events.append((self.name, "completion"))

        config = build_config(
            epoch_termination_conditions=[MaxEpochsTerminationCondition(1)],
            score_calculator=scripted_scores([1.0]),
        )
        TrainingSupervisor(
            config, scripted_trainable(), [Recorder("a"), Recorder("b")]
        ).fit()

        assert events == [
            ("a", "start"),
            ("b", "start"),
            ("a", "completion"),
            ("b", "completion"),
        ]

    def test_faulty_listener_does_not_abort_training(
        self, scripted_trainable, scripted_scores, caplog
    ):
        """リスナーの例外はログに記録され, 訓練は継続することを確認."""
        faulty = Mock(spec=EarlyStoppingListener)
        faulty.on_start.side_effect = RuntimeError("boom")
        faulty.on_epoch.side_effect = RuntimeError("boom")
        faulty.on_completion.side_effect = RuntimeError("boom")
        healthy = Mock(spec=EarlyStoppingListener)
        config = build_config(score_calculator=scripted_scores([1.0]))

        with caplog.at_level(logging.WARNING, logger="test_supervisor"):
            result = TrainingSupervisor(
                config, scripted_trainable(), [faulty, healthy]
            ).fit()

        assert result.total_epochs == 5
        assert healthy.on_epoch.call_count == 5
        healthy.on_completion.assert_called_once_with(result)
        assert "on_epoch" in caplog.text
        assert "boom" in caplog.text


class TestLoggerSelection:
    """ロガー選択のテスト."""

    def test_injected_logger_is_used(self):
        """設定のロガーが使われることを確認."""
        logger = logging.getLogger("injected")
        config = build_config(logger=logger)
        supervisor = TrainingSupervisor(config, Mock())
        assert supervisor.logger is logger

    def test_default_logger_from_manager(self):
        """ロガー未指定時は LoggerManager のロガーを使うことを確認."""
        LoggerManager.reset()
        config = build_config(logger=None)
        supervisor = TrainingSupervisor(config, Mock())
        assert supervisor.logger.name == "haltrain"
        assert "haltrain" in LoggerManager().get_available_loggers()


class TestConfigurationErrors:
    """設定エラーのテスト."""

    def test_no_termination_conditions_is_rejected(self):
        """終了条件が無い設定は構築時に拒否されることを確認."""
        with pytest.raises(ValidationError):
            build_config(epoch_termination_conditions=[])
