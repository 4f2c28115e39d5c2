"""
エポック毎のスコア推移をCSV・グラフ・JSONに出力するリスナー.

訓練完了時に score_history.csv, score_history.png, result_summary.json を
出力ディレクトリへ保存します。
"""

import csv
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Union

import matplotlib.pyplot as plt
from torch import nn

from haltrain.utils.json_utils import write_json_file

from .base import EarlyStoppingListener

if TYPE_CHECKING:
    from haltrain.config import EarlyStoppingConfiguration
    from haltrain.training.result import EarlyStoppingResult


class ScoreHistoryExporter(EarlyStoppingListener):
    """
    スコア推移を記録し, 訓練完了時にファイルへ出力するクラス.

    Args:
        output_dir (Path): 出力ディレクトリ
        enable_visualization (bool): グラフ生成を有効にするか
        logger (logging.Logger, optional): ロガーインスタンス
    """

    CSV_HEADERS = ["epoch", "score", "is_best"]

    def __init__(
        self,
        output_dir: Union[str, Path],
        enable_visualization: bool = True,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        """ScoreHistoryExporterを初期化."""
        self.output_dir = Path(output_dir)
        self.enable_visualization = enable_visualization
        self.logger = logger or logging.getLogger(__name__)

        self.history: List[Dict[str, Any]] = []
        self.exported_paths: List[Path] = []

    def on_start(self, config: "EarlyStoppingConfiguration", model: nn.Module) -> None:
        """前回の記録をクリア."""
        self.history = []
        self.exported_paths = []

    def on_epoch(
        self,
        epoch: int,
        score: Optional[float],
        config: "EarlyStoppingConfiguration",
        model: nn.Module,
    ) -> None:
        """エポックのスコアを記録. スコア未計算のエポックは空欄で記録する."""
        self.history.append({"epoch": epoch, "score": score})

    def on_completion(self, result: "EarlyStoppingResult") -> None:
        """CSV・グラフ・JSONサマリーを出力."""
        self.output_dir.mkdir(parents=True, exist_ok=True)

        csv_path = self.export_to_csv(result.best_model_epoch)
        if csv_path is not None:
            self.exported_paths.append(csv_path)

        graph_path = self.generate_graph(result.best_model_epoch)
        if graph_path is not None:
            self.exported_paths.append(graph_path)

        summary_path = write_json_file(
            self.output_dir / "result_summary.json", result.to_dict()
        )
        self.exported_paths.append(summary_path)
        self.logger.info(f"実行結果サマリーを出力: {summary_path}")

    def export_to_csv(
        self, best_epoch: Optional[int], filename: str = "score_history.csv"
    ) -> Optional[Path]:
        """
        スコア推移をCSVファイルに出力.

        Args:
            best_epoch (int, optional): ベストエポック番号
            filename (str): 出力ファイル名

        Returns:
            Optional[Path]: 出力されたCSVファイルのパス（記録がない場合はNone）
        """
        if not self.history:
            self.logger.warning("記録されたスコアがありません")
            return None

        output_path = self.output_dir / filename
        with open(output_path, "w", newline="", encoding="utf-8") as csvfile:
            writer = csv.DictWriter(csvfile, fieldnames=self.CSV_HEADERS)
            writer.writeheader()
            for record in self.history:
                writer.writerow(
                    {
                        "epoch": record["epoch"],
                        "score": "" if record["score"] is None else record["score"],
                        "is_best": record["epoch"] == best_epoch,
                    }
                )

        self.logger.info(f"スコア推移をCSVに出力: {output_path}")
        return output_path

    def generate_graph(
        self, best_epoch: Optional[int], filename: str = "score_history.png"
    ) -> Optional[Path]:
        """
        スコア推移のグラフを生成.

        Args:
            best_epoch (int, optional): ベストエポック番号 (強調表示する)
            filename (str): 出力ファイル名

        Returns:
            Optional[Path]: 出力されたグラフのパス（生成しない場合はNone）
        """
        if not self.enable_visualization:
            self.logger.debug("グラフ生成が無効化されています")
            return None

        scored = [r for r in self.history if r["score"] is not None]
        if not scored:
            self.logger.debug("スコアが計算されていないためグラフを生成しません")
            return None

        epochs = [r["epoch"] for r in scored]
        scores = [r["score"] for r in scored]

        fig, ax = plt.subplots(figsize=(10, 6))
        ax.plot(
            epochs, scores, "b-", linewidth=2, marker="o", markersize=4, label="Score"
        )
        if best_epoch is not None and best_epoch in epochs:
            best_score = scores[epochs.index(best_epoch)]
            ax.scatter(
                [best_epoch],
                [best_score],
                color="tab:red",
                s=80,
                zorder=3,
                label=f"Best (epoch {best_epoch})",
            )
        ax.set_xlabel("Epoch", fontsize=12)
        ax.set_ylabel("Score", fontsize=12)
        ax.set_title("Score vs Epoch", fontsize=14, fontweight="bold")
        ax.grid(True, alpha=0.3)
        ax.legend(loc="upper right", fontsize=11)
        plt.tight_layout()

        output_path = self.output_dir / filename
        plt.savefig(output_path, dpi=150, bbox_inches="tight")
        plt.close(fig)
        self.logger.info(f"スコア推移グラフを生成: {output_path}")
        return output_path
