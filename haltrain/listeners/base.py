"""haltrain.listeners.base: Early Stopping イベントのリスナー."""

from typing import TYPE_CHECKING, Optional

from torch import nn

if TYPE_CHECKING:
    from haltrain.config import EarlyStoppingConfiguration
    from haltrain.training.result import EarlyStoppingResult


class EarlyStoppingListener:
    """訓練の開始・各エポック・完了の通知を受け取るリスナー.

    必要なメソッドだけをオーバーライドして使う. リスナー内で発生した例外は
    TrainingSupervisor がログに記録して無視するため, 訓練は中断されない.
    """

    def on_start(self, config: "EarlyStoppingConfiguration", model: nn.Module) -> None:
        """訓練開始時に呼ばれる."""

    def on_epoch(
        self,
        epoch: int,
        score: Optional[float],
        config: "EarlyStoppingConfiguration",
        model: nn.Module,
    ) -> None:
        """各エポックの終了時に呼ばれる. スコア未計算の場合 score は None."""

    def on_completion(self, result: "EarlyStoppingResult") -> None:
        """訓練完了時に呼ばれる."""
