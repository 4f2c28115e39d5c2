"""
haltrain.termination.iteration_conditions: イテレーション単位の終了条件.

訓練ステップの合間に評価され, エポックの途中でも訓練を停止できます。
"""

import math
import threading
import time
from typing import Callable, Optional

from .base import IterationTerminationCondition


class MaxTimeIterationTerminationCondition(IterationTerminationCondition):
    """
    訓練開始からの経過時間が上限に達した時点で終了する.

    経過時間はステップ毎に単調時計で計測するため,
    最大で1ステップ分遅れて停止する可能性がある.

    Args:
        max_seconds (float): 最大訓練時間 (秒)
        clock (Callable[[], float]): 現在時刻を返す関数 (秒)
    """

    def __init__(
        self, max_seconds: float, clock: Callable[[], float] = time.monotonic
    ) -> None:
        """MaxTimeIterationTerminationConditionを初期化."""
        if max_seconds <= 0:
            raise ValueError(
                f"max_seconds は正の値である必要があります (値: {max_seconds})"
            )
        self.max_seconds = float(max_seconds)
        self.clock = clock
        self._start_time: Optional[float] = None

    def initialize(self) -> None:
        """計測開始時刻を記録."""
        self._start_time = self.clock()

    def elapsed_seconds(self) -> float:
        """initialize() からの経過秒数を返す."""
        if self._start_time is None:
            # initialize() 前に評価された場合はここから計測を始める
            self._start_time = self.clock()
        return self.clock() - self._start_time

    def evaluate(self, last_score: float) -> bool:
        """経過時間が上限に達したか判定."""
        return self.elapsed_seconds() >= self.max_seconds

    def describe(self) -> str:
        """条件の説明文字列を返す."""
        return f"MaxTimeIterationTerminationCondition({self.max_seconds}s)"


class MaxScoreIterationTerminationCondition(IterationTerminationCondition):
    """
    ミニバッチ損失が閾値を超えた時点で終了する (発散検知).

    Args:
        max_score (float): 許容する最大スコア
    """

    def __init__(self, max_score: float) -> None:
        """MaxScoreIterationTerminationConditionを初期化."""
        self.max_score = max_score

    def evaluate(self, last_score: float) -> bool:
        """スコアが閾値を超えたか判定."""
        return last_score > self.max_score

    def describe(self) -> str:
        """条件の説明文字列を返す."""
        return f"MaxScoreIterationTerminationCondition({self.max_score})"


class InvalidScoreIterationTerminationCondition(IterationTerminationCondition):
    """ミニバッチ損失が NaN または無限大になった時点で終了する."""

    def evaluate(self, last_score: float) -> bool:
        """スコアが有限値でないか判定."""
        return math.isnan(last_score) or math.isinf(last_score)

    def describe(self) -> str:
        """条件の説明文字列を返す."""
        return "InvalidScoreIterationTerminationCondition()"


class StopRequestedIterationTerminationCondition(IterationTerminationCondition):
    """
    外部からの停止要求を受けた時点で終了する.

    request_stop() が呼ばれるか, stop_flag_callback が True を返した
    次のステップ境界で訓練を停止する. Ctrl+C ハンドラーなど別スレッドからの
    要求にも使用できる.

    Args:
        stop_flag_callback (Callable[[], bool], optional): 停止フラグを返す関数
    """

    def __init__(self, stop_flag_callback: Optional[Callable[[], bool]] = None) -> None:
        """StopRequestedIterationTerminationConditionを初期化."""
        self.stop_flag_callback = stop_flag_callback
        self._stop_event = threading.Event()

    def request_stop(self) -> None:
        """停止を要求する."""
        self._stop_event.set()

    def initialize(self) -> None:
        """前回の停止要求をクリア."""
        self._stop_event.clear()

    def evaluate(self, last_score: float) -> bool:
        """停止が要求されているか判定."""
        if self._stop_event.is_set():
            return True
        return bool(self.stop_flag_callback and self.stop_flag_callback())

    def describe(self) -> str:
        """条件の説明文字列を返す."""
        return "StopRequestedIterationTerminationCondition()"
