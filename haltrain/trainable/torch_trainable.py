"""haltrain.trainable.torch_trainable: PyTorch DataLoader 上の訓練プロセス."""

import logging
from typing import Any, Iterator, Optional, Tuple, Union

import torch
import torch.nn as nn
import torch.optim as optim
from torch.utils.data import DataLoader

from .base import Trainable


class TorchTrainable(Trainable):
    """
    DataLoader のバッチ単位でパラメータ更新を行う訓練プロセス.

    次のバッチを先読みしておくことで, ステップ実行前にエポック終了を判定できる.

    Args:
        model: 訓練対象モデル
        optimizer: オプティマイザ
        criterion: 損失関数
        train_loader: 訓練データローダー
        device: 訓練デバイス
        logger: ロガーインスタンス
    """

    def __init__(
        self,
        model: nn.Module,
        optimizer: optim.Optimizer,
        criterion: nn.Module,
        train_loader: DataLoader[Any],
        device: Union[str, torch.device] = "cpu",
        logger: Optional[logging.Logger] = None,
    ) -> None:
        """TorchTrainableを初期化."""
        self.device = torch.device(device)
        self._model = model.to(self.device)
        self.optimizer = optimizer
        self.criterion = criterion
        self.train_loader = train_loader
        self.logger = logger or logging.getLogger(__name__)

        self._iterator: Optional[Iterator[Any]] = None
        self._next_batch: Optional[Tuple[torch.Tensor, torch.Tensor]] = None
        self.batch_index = 0

    @property
    def model(self) -> nn.Module:
        """訓練対象のモデル."""
        return self._model

    def start_epoch(self) -> None:
        """データローダーを先頭から走査し直す."""
        self._iterator = iter(self.train_loader)
        self.batch_index = 0
        self._prefetch()

    def _prefetch(self) -> None:
        """次のバッチを読み込む. 使い切った場合はNone."""
        assert self._iterator is not None
        self._next_batch = next(self._iterator, None)

    def is_epoch_complete(self) -> bool:
        """先読みしたバッチが無ければエポック終了."""
        return self._iterator is None or self._next_batch is None

    def advance_one_step(self) -> float:
        """1バッチ分の順伝播・逆伝播・パラメータ更新を実行."""
        if self._next_batch is None:
            raise RuntimeError(
                "エポックのデータを使い切っています. start_epoch() を呼び出してください"
            )

        data, target = self._next_batch
        data, target = data.to(self.device), target.to(self.device)

        self._model.train()
        self.optimizer.zero_grad()
        output = self._model(data)
        loss = self.criterion(output, target)
        loss.backward()
        self.optimizer.step()

        loss_value = float(loss.item())
        if self.batch_index % 100 == 0:
            self.logger.debug(
                f"バッチ {self.batch_index}/{len(self.train_loader)}, "
                f"損失: {loss_value:.4f}"
            )
        self.batch_index += 1
        self._prefetch()
        return loss_value
