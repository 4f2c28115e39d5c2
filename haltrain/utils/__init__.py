"""haltrain.utils: 共通ユーティリティ."""

from .json_utils import read_json_file, write_json_file

__all__ = ["read_json_file", "write_json_file"]
