"""haltrain.scoring: 検証スコアの計算."""

from .base import ScoreCalculator
from .loss_calculator import ClassificationErrorCalculator, DataLoaderLossCalculator

__all__ = [
    "ClassificationErrorCalculator",
    "DataLoaderLossCalculator",
    "ScoreCalculator",
]
