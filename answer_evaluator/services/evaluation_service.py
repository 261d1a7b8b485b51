"""
評価サービス
回答の検証・採点・履歴保存と、質問の生成をまとめて実行する
"""
import logging

from answer_evaluator.errors import HistoryStorageError, InvalidStateError
from answer_evaluator.models.schemas import AnswerSubmission, AudioClip, EvaluationResult, HistoryEntry
from answer_evaluator.services.openai_service import EvaluationClient
from answer_evaluator.services.question_service import QuestionCatalog
from answer_evaluator.services.storage_service import HistoryStore

logger = logging.getLogger(__name__)


class EvaluationService:
    """回答評価を統合的に実行するサービスクラス"""

    def __init__(
        self,
        client: EvaluationClient,
        history: HistoryStore,
        catalog: QuestionCatalog | None = None,
    ) -> None:
        """
        初期化処理

        Args:
            client: 採点・質問生成クライアント
            history: 評価履歴の保存先
            catalog: 質問リスト
        """
        self.client: EvaluationClient = client
        self.history: HistoryStore = history
        self.catalog: QuestionCatalog = catalog or QuestionCatalog()
        # 採点と質問生成はそれぞれ同時に1件まで
        self.is_evaluating: bool = False
        self.is_generating: bool = False
        # 直近の送信で履歴の保存に失敗した場合のエラー
        self.last_storage_error: HistoryStorageError | None = None

    async def submit(
        self,
        question: str,
        text_answer: str,
        audio: AudioClip | None = None,
    ) -> HistoryEntry:
        """
        回答を採点して履歴に保存

        Args:
            question: 質問文
            text_answer: テキストでの回答（空文字可）
            audio: 録音した音声（オプション）

        Returns:
            評価結果を含む履歴（保存に失敗した場合もlast_storage_errorに記録して返す）

        Raises:
            InvalidStateError: 採点中に再送信した場合
            InvalidInputError: テキストも音声も無い場合
        """
        if self.is_evaluating:
            raise InvalidStateError("An evaluation is already in progress.")

        submission = AnswerSubmission(question=question, text_answer=text_answer, audio=audio)
        submission.ensure_not_empty()

        self.is_evaluating = True
        try:
            result: EvaluationResult = await self.client.evaluate(
                submission.question,
                submission.text_answer,
                submission.audio if submission.has_audio else None,
            )
        finally:
            self.is_evaluating = False

        self.last_storage_error = None
        entry: HistoryEntry = self.history.create_entry(
            submission.question,
            result,
            submission.audio if submission.has_audio else None,
        )
        try:
            self.history.save(entry)
        except HistoryStorageError as e:
            logger.error("評価履歴の保存エラー: %s", e)
            self.last_storage_error = e
        logger.info("評価完了: overall_score=%s", result.score_summary.overall_score)
        return entry

    async def generate_question(self) -> str:
        """
        新しい質問を生成して質問リストに追加

        Returns:
            生成した質問文

        Raises:
            InvalidStateError: 生成中に再度呼び出した場合
        """
        if self.is_generating:
            raise InvalidStateError("A question is already being generated.")

        self.is_generating = True
        try:
            question: str = await self.client.generate_question()
        finally:
            self.is_generating = False

        self.catalog.add(question)
        return question
