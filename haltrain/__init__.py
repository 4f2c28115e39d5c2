"""
haltrain: 終了条件で訓練を止め, ベストモデルを返す Early Stopping 監視ループ.

Example:
    >>> from haltrain import (
    ...     DataLoaderLossCalculator,
    ...     EarlyStoppingConfiguration,
    ...     MaxEpochsTerminationCondition,
    ...     TorchTrainable,
    ...     TrainingSupervisor,
    ... )
    >>> config = EarlyStoppingConfiguration(
    ...     epoch_termination_conditions=[MaxEpochsTerminationCondition(5)],
    ...     score_calculator=DataLoaderLossCalculator(val_loader, criterion),
    ... )
    >>> trainable = TorchTrainable(model, optimizer, criterion, train_loader)
    >>> result = TrainingSupervisor(config, trainable).fit()
    >>> result.best_model_epoch
"""

from .config import EarlyStoppingConfiguration, TerminationSettings
from .exceptions import (
    EarlyStoppingError,
    PersistenceError,
    ScoreCalculationError,
    TrainingStepError,
)
from .listeners import EarlyStoppingListener, LoggingListener, ScoreHistoryExporter
from .logging import LoggerManager, LogLevel
from .saver import InMemoryModelSaver, LocalFileModelSaver, ModelSaver
from .scoring import (
    ClassificationErrorCalculator,
    DataLoaderLossCalculator,
    ScoreCalculator,
)
from .termination import (
    BestScoreEpochTerminationCondition,
    EpochTerminationCondition,
    InvalidScoreIterationTerminationCondition,
    IterationTerminationCondition,
    MaxEpochsTerminationCondition,
    MaxScoreIterationTerminationCondition,
    MaxTimeIterationTerminationCondition,
    ScoreImprovementEpochTerminationCondition,
    StopRequestedIterationTerminationCondition,
    TerminationCondition,
)
from .trainable import TorchTrainable, Trainable
from .training import EarlyStoppingResult, TerminationReason, TrainingSupervisor

__version__ = "0.1.0"

__all__ = [
    "BestScoreEpochTerminationCondition",
    "ClassificationErrorCalculator",
    "DataLoaderLossCalculator",
    "EarlyStoppingConfiguration",
    "EarlyStoppingError",
    "EarlyStoppingListener",
    "EarlyStoppingResult",
    "EpochTerminationCondition",
    "InMemoryModelSaver",
    "InvalidScoreIterationTerminationCondition",
    "IterationTerminationCondition",
    "LocalFileModelSaver",
    "LogLevel",
    "LoggerManager",
    "LoggingListener",
    "MaxEpochsTerminationCondition",
    "MaxScoreIterationTerminationCondition",
    "MaxTimeIterationTerminationCondition",
    "ModelSaver",
    "PersistenceError",
    "ScoreCalculationError",
    "ScoreCalculator",
    "ScoreHistoryExporter",
    "ScoreImprovementEpochTerminationCondition",
    "StopRequestedIterationTerminationCondition",
    "TerminationCondition",
    "TerminationReason",
    "TerminationSettings",
    "TorchTrainable",
    "Trainable",
    "TrainingStepError",
    "TrainingSupervisor",
]
