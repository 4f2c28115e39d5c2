"""haltrain.saver: ベスト・最新モデルの保存."""

from .base import ModelSaver
from .in_memory import InMemoryModelSaver
from .local_file import LocalFileModelSaver

__all__ = ["InMemoryModelSaver", "LocalFileModelSaver", "ModelSaver"]
