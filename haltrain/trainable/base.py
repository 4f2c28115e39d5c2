"""haltrain.trainable.base: 監視対象となる訓練プロセスのインターフェース."""

from abc import ABC, abstractmethod

from torch import nn


class Trainable(ABC):
    """1ステップずつ駆動できる訓練プロセスの抽象基底クラス.

    TrainingSupervisor は start_epoch() でデータソースを先頭に戻し,
    is_epoch_complete() が True になるまで advance_one_step() を呼び出す.
    """

    @property
    @abstractmethod
    def model(self) -> nn.Module:
        """訓練対象のモデル."""

    @abstractmethod
    def start_epoch(self) -> None:
        """データソースをリセットし, 新しいエポックを開始する."""

    @abstractmethod
    def advance_one_step(self) -> float:
        """
        パラメータ更新を1回実行する.

        Returns:
            float: このステップのミニバッチ損失
        """

    @abstractmethod
    def is_epoch_complete(self) -> bool:
        """現在のエポックのデータを使い切ったか."""

    def current_model_snapshot(self) -> nn.Module:
        """現在のモデルを返す. 保存時のコピーはセーバー側で行う."""
        return self.model
