"""チェックポイントファイルとしてモデルを保存・読み込みするモジュール."""

import logging
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Union

import torch
from torch import nn

from .base import ModelSaver


class LocalFileModelSaver(ModelSaver):
    """チェックポイントをローカルディレクトリに保存するセーバー.

    best_model.pth と latest_model.pth の2ファイルを上書き保存する.
    読み込み時は model_factory で生成したモデルに state_dict を復元する.

    Args:
        directory: チェックポイントの保存先ディレクトリ
        model_factory: 復元先のモデルを生成する関数
        map_location: torch.load に渡すデバイス
        logger: ロガーインスタンス
    """

    BEST_FILENAME = "best_model.pth"
    LATEST_FILENAME = "latest_model.pth"

    def __init__(
        self,
        directory: Union[str, Path],
        model_factory: Callable[[], nn.Module],
        map_location: Union[str, torch.device] = "cpu",
        logger: Optional[logging.Logger] = None,
    ) -> None:
        """LocalFileModelSaverを初期化."""
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)
        self.model_factory = model_factory
        self.map_location = map_location
        self.logger = logger or logging.getLogger(__name__)

    @property
    def best_path(self) -> Path:
        """ベストモデルのファイルパス."""
        return self.directory / self.BEST_FILENAME

    @property
    def latest_path(self) -> Path:
        """最新モデルのファイルパス."""
        return self.directory / self.LATEST_FILENAME

    def _save(self, path: Path, model: nn.Module, score: Optional[float]) -> None:
        """チェックポイントの保存."""
        checkpoint: Dict[str, Any] = {
            "model_state_dict": model.state_dict(),
            "score": score,
        }
        torch.save(checkpoint, path)

    def _load(self, path: Path) -> Optional[nn.Module]:
        """チェックポイントの読み込み. ファイルが無い場合はNone."""
        if not path.exists():
            return None

        checkpoint = torch.load(path, map_location=self.map_location, weights_only=True)
        model = self.model_factory()
        model.load_state_dict(checkpoint["model_state_dict"])
        self.logger.debug(f"チェックポイントを読み込み: {path}")
        return model

    def save_best(self, model: nn.Module, score: Optional[float]) -> None:
        """ベストモデルの保存(上書き)."""
        self._save(self.best_path, model, score)
        self.logger.info(f"ベストモデルを保存: {self.best_path} (スコア: {score})")

    def save_latest(self, model: nn.Module, score: Optional[float]) -> None:
        """最新モデルの保存(上書き)."""
        self._save(self.latest_path, model, score)

    def get_best(self) -> Optional[nn.Module]:
        """ベストモデルの読み込み."""
        return self._load(self.best_path)

    def get_latest(self) -> Optional[nn.Module]:
        """最新モデルの読み込み."""
        return self._load(self.latest_path)

    def load_score(self, best: bool = True) -> Optional[float]:
        """保存済みチェックポイントのスコアを返す. ファイルが無い場合はNone."""
        path = self.best_path if best else self.latest_path
        if not path.exists():
            return None
        checkpoint = torch.load(path, map_location=self.map_location, weights_only=True)
        score: Optional[float] = checkpoint["score"]
        return score
