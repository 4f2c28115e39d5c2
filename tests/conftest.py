"""テスト共通フィクスチャ."""

import logging

import pytest
import torch
from torch.utils.data import DataLoader, TensorDataset


@pytest.fixture
def logger() -> logging.Logger:
    """テスト用ロガー."""
    return logging.getLogger("test")


@pytest.fixture
def create_classification_loader():
    """Iris 相当 (4特徴量, 3クラス) の合成データローダーを作成するファクトリフィクスチャ.

    Returns:
        データローダー作成関数. 引数:
            num_samples: サンプル数 (デフォルト: 150)
            batch_size: バッチサイズ (デフォルト: 150)
            seed: 乱数シード (デフォルト: 12345)

    Example:
        >>> def test_example(create_classification_loader):
        ...     loader = create_classification_loader(batch_size=10)
    """

    def _create(
        num_samples: int = 150,
        *,
        batch_size: int = 150,
        seed: int = 12345,
    ) -> DataLoader:
        generator = torch.Generator().manual_seed(seed)
        labels = torch.arange(num_samples) % 3
        centers = torch.tensor(
            [[1.0, 0.0, 0.0, 0.0], [0.0, 1.0, 0.0, 0.0], [0.0, 0.0, 1.0, 1.0]]
        )
        features = centers[labels] + 0.3 * torch.randn(
            num_samples, 4, generator=generator
        )
        dataset = TensorDataset(features, labels)
        return DataLoader(dataset, batch_size=batch_size, shuffle=False)

    return _create


@pytest.fixture
def create_regression_loader():
    """線形回帰用の合成データローダーを作成するファクトリフィクスチャ.

    目標値は y = 0.5 * x0 で, ゼロ初期化したモデルの初期損失は小さい.
    """

    def _create(
        num_samples: int = 150,
        *,
        batch_size: int = 150,
        seed: int = 12345,
    ) -> DataLoader:
        generator = torch.Generator().manual_seed(seed)
        features = torch.randn(num_samples, 4, generator=generator)
        targets = 0.5 * features[:, :1]
        return DataLoader(
            TensorDataset(features, targets), batch_size=batch_size, shuffle=False
        )

    return _create
