"""haltrain.training.supervisor: Early Stopping 付き訓練ループを管理するモジュール."""

import logging
import math
import time
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Optional, Sequence

from torch import nn

from haltrain.config import EarlyStoppingConfiguration
from haltrain.exceptions import (
    PersistenceError,
    ScoreCalculationError,
    TrainingStepError,
)
from haltrain.listeners import EarlyStoppingListener
from haltrain.logging import LoggerManager
from haltrain.trainable import Trainable

from .result import EarlyStoppingResult, TerminationReason


@dataclass
class _RunState:
    """fit() 1回分の内部状態."""

    start_time: float
    epoch: int = 0
    iteration_count: int = 0
    best_score: float = math.inf
    best_epoch: Optional[int] = None
    score_vs_epoch: Dict[int, float] = field(default_factory=dict)


class TrainingSupervisor:
    """Early Stopping 付きで訓練プロセスを駆動するクラス.

    訓練ステップ毎にイテレーション終了条件を, エポック終了毎にスコア計算・
    ベストモデル保存・エポック終了条件を評価し, いずれかの条件が成立した時点で
    訓練を終了する. 戻り値には最終モデルではなくベストスコアのモデルが入る.

    Args:
        config: Early Stopping 設定.
        trainable: 訓練プロセス. fit() の間はこのクラスが専有する.
        listeners: イベント通知先. 登録順に通知される.
    """

    def __init__(
        self,
        config: EarlyStoppingConfiguration,
        trainable: Trainable,
        listeners: Optional[Sequence[EarlyStoppingListener]] = None,
    ) -> None:
        """TrainingSupervisorを初期化."""
        self.config = config
        self.trainable = trainable
        self.listeners = list(listeners or [])
        self.logger: logging.Logger = config.logger or LoggerManager().get_logger(
            "haltrain"
        )

    @property
    def model(self) -> nn.Module:
        """訓練対象のモデル."""
        return self.trainable.current_model_snapshot()

    def fit(self) -> EarlyStoppingResult:
        """訓練を実行し, 終了条件が成立するまでエポックを繰り返す.

        Returns:
            EarlyStoppingResult: 実行結果.

        Raises:
            TrainingStepError: 訓練ステップが失敗した場合.
            ScoreCalculationError: スコア計算が失敗した場合.
            PersistenceError: モデルの保存・読み込みが失敗した場合.
        """
        for condition in self.config.epoch_termination_conditions:
            condition.initialize()
        for condition in self.config.iteration_termination_conditions:
            condition.initialize()

        self._notify_start()
        state = _RunState(start_time=time.monotonic())

        while True:
            self.logger.debug(f"エポック {state.epoch} を開始")

            details = self._run_iterations(state)
            if details is not None:
                # 終了時点のモデルを最新モデルとして残す
                self._save_latest(state, score=None)
                reason = TerminationReason.ITERATION_TERMINATION_CONDITION
                total_epochs = state.epoch
                break

            score = self._evaluate_epoch(state)
            self._notify_epoch(state.epoch, score)

            details = self._check_epoch_conditions(state.epoch, score)
            if details is not None:
                reason = TerminationReason.EPOCH_TERMINATION_CONDITION
                total_epochs = state.epoch + 1
                break

            state.epoch += 1

        result = self._build_result(state, reason, details, total_epochs)
        self._log_training_result(result)
        self._notify_completion(result)
        return result

    def _run_iterations(self, state: _RunState) -> Optional[str]:
        """1エポック分の訓練ステップを実行.

        Returns:
            Optional[str]: イテレーション終了条件が成立した場合はその説明, なければNone.
        """
        steps_before = state.iteration_count
        self.trainable.start_epoch()
        while not self.trainable.is_epoch_complete():
            try:
                last_score = self.trainable.advance_one_step()
            except Exception as e:
                raise TrainingStepError(
                    f"訓練ステップの実行に失敗しました "
                    f"(イテレーション {state.iteration_count}): {e}",
                    epoch=state.epoch,
                ) from e
            state.iteration_count += 1

            for condition in self.config.iteration_termination_conditions:
                if condition.evaluate(last_score):
                    self.logger.info(
                        f"イテレーション終了条件が成立しました: {condition} "
                        f"(エポック {state.epoch}, "
                        f"イテレーション {state.iteration_count}, "
                        f"スコア: {last_score:.4f})"
                    )
                    return condition.describe()

        if state.iteration_count == steps_before:
            raise TrainingStepError(
                "訓練データが空のため, エポック内で訓練ステップを実行できませんでした",
                epoch=state.epoch,
            )
        return None

    def _evaluate_epoch(self, state: _RunState) -> Optional[float]:
        """エポック境界のスコア計算とモデル保存.

        Returns:
            Optional[float]: このエポックのスコア. 計算しなかった場合はNone.
        """
        score: Optional[float] = None
        calculator = self.config.score_calculator
        if (
            calculator is not None
            and (state.epoch + 1) % self.config.evaluate_every_n_epochs == 0
        ):
            try:
                score = calculator.calculate(self.model)
            except Exception as e:
                raise ScoreCalculationError(
                    f"スコアの計算に失敗しました: {e}", epoch=state.epoch
                ) from e
            state.score_vs_epoch[state.epoch] = score

            # 最初に計算したスコアは値に関わらず初期ベストとする
            if state.best_epoch is None or score < state.best_score:
                self.logger.info(
                    f"エポック {state.epoch}: スコアが改善しました "
                    f"({state.best_score:.4f} -> {score:.4f})"
                )
                state.best_score = score
                state.best_epoch = state.epoch
                self._save_best(state, score)
            else:
                self.logger.info(
                    f"エポック {state.epoch}: スコア {score:.4f} "
                    f"(ベスト: {state.best_score:.4f}, エポック {state.best_epoch})"
                )

        self._save_latest(state, score)
        return score

    def _check_epoch_conditions(
        self, epoch: int, score: Optional[float]
    ) -> Optional[str]:
        """エポック終了条件を設定順に評価し, 成立した条件の説明を返す."""
        for condition in self.config.epoch_termination_conditions:
            if condition.evaluate(epoch, score):
                self.logger.info(
                    f"エポック終了条件が成立しました: {condition} (エポック {epoch})"
                )
                return condition.describe()
        return None

    def _save_best(self, state: _RunState, score: float) -> None:
        """現在のモデルをベストモデルとして保存."""
        try:
            self.config.model_saver.save_best(self.model, score)
        except Exception as e:
            raise PersistenceError(
                f"ベストモデルの保存に失敗しました: {e}", epoch=state.epoch
            ) from e

    def _save_latest(self, state: _RunState, score: Optional[float]) -> None:
        """現在のモデルを最新モデルとして保存."""
        try:
            self.config.model_saver.save_latest(self.model, score)
        except Exception as e:
            raise PersistenceError(
                f"最新モデルの保存に失敗しました: {e}", epoch=state.epoch
            ) from e

    def _build_result(
        self,
        state: _RunState,
        reason: TerminationReason,
        details: str,
        total_epochs: int,
    ) -> EarlyStoppingResult:
        """保存済みのベストモデルを読み込んで実行結果を組み立てる."""
        saver = self.config.model_saver
        try:
            if state.best_epoch is not None:
                best_model = saver.get_best()
            else:
                # 改善したエポックが無い場合は終了時点のモデルを返す
                best_model = saver.get_latest()
        except Exception as e:
            raise PersistenceError(
                f"ベストモデルの読み込みに失敗しました: {e}", epoch=state.epoch
            ) from e

        best_score = state.best_score if state.best_epoch is not None else None
        return EarlyStoppingResult(
            termination_reason=reason,
            termination_details=details,
            score_vs_epoch=MappingProxyType(dict(state.score_vs_epoch)),
            best_model_epoch=state.best_epoch,
            best_model_score=best_score,
            total_epochs=total_epochs,
            best_model=best_model,
            total_iterations=state.iteration_count,
            elapsed_seconds=time.monotonic() - state.start_time,
        )

    def _log_training_result(self, result: EarlyStoppingResult) -> None:
        """訓練完了後のサマリーログを出力."""
        self.logger.info(
            f"訓練を終了しました: {result.termination_reason.value} "
            f"({result.termination_details})"
        )
        self.logger.info(
            f"総エポック数: {result.total_epochs}, "
            f"総イテレーション数: {result.total_iterations}, "
            f"所要時間: {result.elapsed_seconds:.1f}秒"
        )
        if result.best_model_score is not None:
            self.logger.info(
                f"ベストスコア: {result.best_model_score:.4f} "
                f"(エポック {result.best_model_epoch})"
            )

    def _notify_start(self) -> None:
        """全リスナーに訓練開始を通知."""
        for listener in self.listeners:
            try:
                listener.on_start(self.config, self.model)
            except Exception as e:
                self._log_listener_error(listener, "on_start", e)

    def _notify_epoch(self, epoch: int, score: Optional[float]) -> None:
        """全リスナーにエポック終了を通知."""
        for listener in self.listeners:
            try:
                listener.on_epoch(epoch, score, self.config, self.model)
            except Exception as e:
                self._log_listener_error(listener, "on_epoch", e)

    def _notify_completion(self, result: EarlyStoppingResult) -> None:
        """全リスナーに訓練完了を通知."""
        for listener in self.listeners:
            try:
                listener.on_completion(result)
            except Exception as e:
                self._log_listener_error(listener, "on_completion", e)

    def _log_listener_error(
        self, listener: EarlyStoppingListener, event: str, error: Exception
    ) -> None:
        """リスナーの例外を記録. 訓練は継続する."""
        self.logger.warning(
            f"リスナー {type(listener).__name__}.{event} で例外が発生しました "
            f"(訓練は継続します): {error!r}"
        )
