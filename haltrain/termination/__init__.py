"""haltrain.termination: 訓練の終了条件."""

from .base import (
    EpochTerminationCondition,
    IterationTerminationCondition,
    TerminationCondition,
)
from .epoch_conditions import (
    BestScoreEpochTerminationCondition,
    MaxEpochsTerminationCondition,
    ScoreImprovementEpochTerminationCondition,
)
from .iteration_conditions import (
    InvalidScoreIterationTerminationCondition,
    MaxScoreIterationTerminationCondition,
    MaxTimeIterationTerminationCondition,
    StopRequestedIterationTerminationCondition,
)

__all__ = [
    "BestScoreEpochTerminationCondition",
    "EpochTerminationCondition",
    "InvalidScoreIterationTerminationCondition",
    "IterationTerminationCondition",
    "MaxEpochsTerminationCondition",
    "MaxScoreIterationTerminationCondition",
    "MaxTimeIterationTerminationCondition",
    "ScoreImprovementEpochTerminationCondition",
    "StopRequestedIterationTerminationCondition",
    "TerminationCondition",
]
