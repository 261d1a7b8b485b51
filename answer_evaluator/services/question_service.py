"""
質問リストサービス
初期の質問リストに生成した質問を追加していく（削除はしない）
"""
import json
import logging
from pathlib import Path
from typing import List

from answer_evaluator.constants import DEFAULT_QUESTIONS
from answer_evaluator.errors import InvalidInputError

logger = logging.getLogger(__name__)


class QuestionCatalog:
    """選択可能な質問のリスト"""

    def __init__(self, questions_file: Path | None = None) -> None:
        """
        初期化処理

        Args:
            questions_file: 保存先ファイル（Noneの場合は保存しない）
        """
        self.questions_file: Path | None = questions_file
        self._questions: List[str] = list(DEFAULT_QUESTIONS)

        if questions_file is not None and questions_file.exists():
            try:
                with open(questions_file, "r", encoding="utf-8") as f:
                    saved = json.load(f)
            except (OSError, ValueError) as e:
                logger.warning("質問リストを読み込めませんでした %s: %s", questions_file, e)
                saved = []
            # 保存されている質問を新しい順に先頭へ
            for question in reversed([q for q in saved if isinstance(q, str)]):
                self._insert(question)

    def questions(self) -> List[str]:
        """質問のリスト（新しく追加したものが先頭）"""
        return list(self._questions)

    def contains(self, question: str) -> bool:
        return question in self._questions

    def _insert(self, question: str) -> bool:
        if question in self._questions:
            return False
        self._questions.insert(0, question)
        return True

    def add(self, question: str) -> bool:
        """
        質問を追加（同じ文面の質問が既にある場合は追加しない）

        Args:
            question: 質問文

        Returns:
            追加した場合True

        Raises:
            InvalidInputError: 空の質問の場合
        """
        if not question.strip():
            raise InvalidInputError("The question is empty.")
        added: bool = self._insert(question)
        if added:
            self._save()
        return added

    def _save(self) -> None:
        if self.questions_file is None:
            return
        generated: List[str] = [q for q in self._questions if q not in DEFAULT_QUESTIONS]
        self.questions_file.parent.mkdir(parents=True, exist_ok=True)
        with open(self.questions_file, "w", encoding="utf-8") as f:
            json.dump(generated, f, ensure_ascii=False, indent=2)
