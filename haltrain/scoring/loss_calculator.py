"""検証データローダーを用いた損失・誤り率の計算を担当するモジュール."""

from typing import Any, Iterator, Tuple, Union

import torch
from torch import nn
from torch.utils.data import DataLoader

from .base import ScoreCalculator


class _DataLoaderCalculator(ScoreCalculator):
    """DataLoader を毎回先頭から走査するスコア計算器の共通処理.

    Args:
        data_loader: 検証データローダー
        device: 計算デバイス
    """

    def __init__(
        self,
        data_loader: DataLoader[Any],
        device: Union[str, torch.device] = "cpu",
    ) -> None:
        """共通属性を初期化."""
        self.data_loader = data_loader
        self.device = torch.device(device)

    def _iterate_outputs(
        self, model: nn.Module
    ) -> Iterator[Tuple[torch.Tensor, torch.Tensor]]:
        """評価モードで (出力, 正解) のバッチを順に返す.

        走査後はモデルの train/eval モードを呼び出し前の状態に戻す.
        """
        was_training = model.training
        model.eval()
        try:
            with torch.no_grad():
                for data, target in self.data_loader:
                    data, target = data.to(self.device), target.to(self.device)
                    yield model(data), target
        finally:
            model.train(was_training)


class DataLoaderLossCalculator(_DataLoaderCalculator):
    """
    検証データ全体に対する損失をスコアとして返す.

    Args:
        data_loader: 検証データローダー
        criterion: 損失関数 (バッチ平均を返すもの)
        device: 計算デバイス
        average: Trueならサンプル平均, Falseなら合計を返す
    """

    def __init__(
        self,
        data_loader: DataLoader[Any],
        criterion: nn.Module,
        device: Union[str, torch.device] = "cpu",
        average: bool = True,
    ) -> None:
        """DataLoaderLossCalculatorを初期化."""
        super().__init__(data_loader, device)
        self.criterion = criterion
        self.average = average

    def calculate(self, model: nn.Module) -> float:
        """検証損失を計算."""
        total_loss = 0.0
        total = 0
        for output, target in self._iterate_outputs(model):
            batch_size = target.size(0)
            total_loss += self.criterion(output, target).item() * batch_size
            total += batch_size

        if not self.average:
            return total_loss
        # 空のデータローダーでは0を返す
        return total_loss / total if total > 0 else 0.0


class ClassificationErrorCalculator(_DataLoaderCalculator):
    """分類の誤り率 (1 - 正解率) をスコアとして返す."""

    def calculate(self, model: nn.Module) -> float:
        """誤り率を計算."""
        correct = 0
        total = 0
        for output, target in self._iterate_outputs(model):
            _, predicted = output.max(1)
            total += target.size(0)
            correct += int(predicted.eq(target).sum().item())

        if total == 0:
            return 0.0
        return 1.0 - correct / total
