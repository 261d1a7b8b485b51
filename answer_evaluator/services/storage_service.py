"""
ローカルストレージサービス
評価履歴をローカルのJSONファイルに保存する（新しい順）
"""
import json
import logging
import os
import secrets
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Tuple

from pydantic import ValidationError

from answer_evaluator.config import HISTORY_FILE
from answer_evaluator.errors import HistoryStorageError
from answer_evaluator.models.schemas import AudioClip, EvaluationResult, HistoryEntry
from answer_evaluator.services import audio_codec

logger = logging.getLogger(__name__)


def new_entry_id(submitted_at: datetime) -> str:
    """送信時刻（ミリ秒）と乱数からIDを作成"""
    return f"{int(submitted_at.timestamp() * 1000)}-{secrets.token_hex(4)}"


class HistoryStore:
    """評価履歴を保存・読み込むクラス"""

    def __init__(self, history_file: Path | None = None) -> None:
        """
        初期化処理

        Args:
            history_file: 履歴ファイルのパス（省略時はHISTORY_FILE）
        """
        self.history_file: Path = history_file or HISTORY_FILE
        self.history_file.parent.mkdir(parents=True, exist_ok=True)

    def _load_raw(self) -> List[Dict[str, Any]]:
        if not self.history_file.exists():
            return []
        try:
            with open(self.history_file, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise HistoryStorageError(f"Failed to read the evaluation history: {e}") from e
        if not isinstance(data, list):
            raise HistoryStorageError("The evaluation history file is corrupted.")
        return data

    def _write_raw(self, entries: List[Dict[str, Any]]) -> None:
        # 一時ファイルに書き込んでから置き換える
        tmp_path: Path = self.history_file.with_suffix(".tmp")
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(entries, f, ensure_ascii=False, indent=2)
            os.replace(tmp_path, self.history_file)
        except OSError as e:
            raise HistoryStorageError(f"Failed to save the evaluation history: {e}") from e

    def append(
        self,
        question: str,
        result: EvaluationResult,
        audio: AudioClip | None = None,
    ) -> HistoryEntry:
        """
        評価結果を履歴に追加

        Args:
            question: 質問文
            result: 評価結果
            audio: 送信した音声（オプション）

        Returns:
            追加した履歴
        """
        entry: HistoryEntry = self.create_entry(question, result, audio)
        self.save(entry)
        return entry

    def create_entry(
        self,
        question: str,
        result: EvaluationResult,
        audio: AudioClip | None = None,
    ) -> HistoryEntry:
        """保存前の履歴を作成（IDと送信日時を付与）"""
        submitted_at: datetime = datetime.now()
        return HistoryEntry(
            id=new_entry_id(submitted_at),
            question=question,
            evaluation=result,
            submitted_at=submitted_at,
            audio_encoded=audio_codec.encode(audio) if audio is not None else None,
        )

    def save(self, entry: HistoryEntry) -> None:
        """
        作成済みの履歴をファイルの先頭に追加

        Raises:
            HistoryStorageError: 読み書きに失敗した場合
        """
        entries: List[Dict[str, Any]] = self._load_raw()
        entries.insert(0, entry.model_dump(mode="json"))
        self._write_raw(entries)
        logger.info("評価履歴を保存しました: %s", entry.id)

    def list(self) -> List[HistoryEntry]:
        """
        評価履歴を取得

        Returns:
            履歴のリスト（送信日時の新しい順）
        """
        history: List[HistoryEntry] = []
        for raw in self._load_raw():
            try:
                history.append(HistoryEntry.model_validate(raw))
            except ValidationError as e:
                logger.warning("読み込めない履歴をスキップしました: %s", e)

        history.sort(key=lambda entry: entry.submitted_at, reverse=True)
        return history

    def get(self, entry_id: str) -> HistoryEntry | None:
        """IDで履歴を検索（見つからない場合はNone）"""
        return next((entry for entry in self.list() if entry.id == entry_id), None)

    def clear(self) -> None:
        """評価履歴をすべて削除"""
        try:
            self.history_file.unlink(missing_ok=True)
        except OSError as e:
            raise HistoryStorageError(f"Failed to clear the evaluation history: {e}") from e
        logger.info("評価履歴を削除しました")

    def rehydrate(self, entry: HistoryEntry) -> Tuple[EvaluationResult, AudioClip | None]:
        """
        履歴から評価結果と再生用の音声を復元

        Args:
            entry: 履歴

        Returns:
            (評価結果, 音声データ) 音声が無い場合はNone
        """
        return entry.evaluation, audio_codec.decode(entry.audio_encoded)
