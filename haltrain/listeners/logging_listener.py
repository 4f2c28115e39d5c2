"""訓練イベントをログに出力するリスナー."""

import logging
from typing import TYPE_CHECKING, Optional

from torch import nn

from .base import EarlyStoppingListener

if TYPE_CHECKING:
    from haltrain.config import EarlyStoppingConfiguration
    from haltrain.training.result import EarlyStoppingResult


class LoggingListener(EarlyStoppingListener):
    """
    開始・エポック・完了の各イベントをログ出力する.

    Args:
        logger (logging.Logger): ロガーインスタンス
    """

    def __init__(self, logger: logging.Logger) -> None:
        """LoggingListenerを初期化."""
        self.logger = logger

    def on_start(self, config: "EarlyStoppingConfiguration", model: nn.Module) -> None:
        """終了条件の一覧を出力."""
        total_params = sum(p.numel() for p in model.parameters())
        self.logger.info(f"Early Stopping 開始 (総パラメータ数: {total_params:,})")
        for condition in config.epoch_termination_conditions:
            self.logger.info(f"  エポック終了条件: {condition}")
        for condition in config.iteration_termination_conditions:
            self.logger.info(f"  イテレーション終了条件: {condition}")

    def on_epoch(
        self,
        epoch: int,
        score: Optional[float],
        config: "EarlyStoppingConfiguration",
        model: nn.Module,
    ) -> None:
        """エポックのスコアを出力."""
        if score is None:
            self.logger.info(f"エポック {epoch} 完了")
        else:
            self.logger.info(f"エポック {epoch} 完了 - スコア: {score:.4f}")

    def on_completion(self, result: "EarlyStoppingResult") -> None:
        """終了理由とベストスコアを出力."""
        self.logger.info(
            f"Early Stopping 完了: {result.termination_reason.value} "
            f"({result.termination_details})"
        )
        if result.best_model_score is not None:
            self.logger.info(
                f"ベストスコア: {result.best_model_score:.4f} "
                f"(エポック {result.best_model_epoch})"
            )
