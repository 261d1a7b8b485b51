"""
データモデル（スキーマ定義）
"""

from datetime import datetime
from typing import List, Literal

from pydantic import BaseModel, ConfigDict

from answer_evaluator.constants import NOT_APPLICABLE
from answer_evaluator.errors import InvalidInputError


class AudioClip(BaseModel):
    """録音された音声データ（MIMEタイプ付き）"""

    model_config = ConfigDict(frozen=True)

    mime_type: str
    data: bytes

    @property
    def is_empty(self) -> bool:
        return len(self.data) == 0


class AnswerSubmission(BaseModel):
    """1回分の回答（テキストと音声のどちらか、または両方）"""

    model_config = ConfigDict(frozen=True)

    question: str
    text_answer: str = ""
    audio: AudioClip | None = None

    @property
    def has_text(self) -> bool:
        return bool(self.text_answer.strip())

    @property
    def has_audio(self) -> bool:
        return self.audio is not None and not self.audio.is_empty

    def ensure_not_empty(self) -> None:
        """
        テキストも音声も無い場合はInvalidInputErrorを送出

        Raises:
            InvalidInputError: 回答が空の場合
        """
        if not self.has_text and not self.has_audio:
            raise InvalidInputError("The answer is empty: no text and no audio were provided.")


class SpeechDelivery(BaseModel):
    """話し方の評価（音声が無い場合はすべて"N/A"）"""

    model_config = ConfigDict(frozen=True)

    clarity: str  # Clear / Unclear / N/A
    confidence: str  # Confident / Hesitant / N/A
    pronunciation: str  # Correct / Incorrect / N/A
    tone: str  # Appropriate / Inappropriate / N/A
    tone_feedback: str
    feedback: str

    @classmethod
    def not_applicable(cls) -> "SpeechDelivery":
        return cls(
            clarity=NOT_APPLICABLE,
            confidence=NOT_APPLICABLE,
            pronunciation=NOT_APPLICABLE,
            tone=NOT_APPLICABLE,
            tone_feedback=NOT_APPLICABLE,
            feedback=NOT_APPLICABLE,
        )

    @property
    def is_not_applicable(self) -> bool:
        return all(
            value == NOT_APPLICABLE
            for value in (
                self.clarity,
                self.confidence,
                self.pronunciation,
                self.tone,
                self.tone_feedback,
                self.feedback,
            )
        )


class Feedback(BaseModel):
    """各評価軸の説明"""

    model_config = ConfigDict(frozen=True)

    formality_explanation: str
    grammar_explanation: str
    technical_explanation: str


class ScoreSummary(BaseModel):
    """スコア一覧（0〜10）"""

    model_config = ConfigDict(frozen=True)

    formality_score: float
    grammar_score: float
    technical_score: float
    speech_delivery_score: float
    overall_score: float


class EvaluationResult(BaseModel):
    """評価結果のデータモデル"""

    model_config = ConfigDict(frozen=True)

    formality: str  # Formal / Informal
    grammar: str  # Correct / Incorrect
    technical_correctness: str  # Accurate / Inaccurate
    speech_delivery: SpeechDelivery
    feedback: Feedback
    score_summary: ScoreSummary
    follow_up_questions: List[str] = []

    @property
    def has_speech_delivery(self) -> bool:
        """
        話し方の評価を表示すべきかどうか

        テキストのみの回答では、話し方の各項目が"N/A"、スコアが0になる。
        """
        return not (
            self.speech_delivery.is_not_applicable
            and self.score_summary.speech_delivery_score == 0
        )

    @property
    def kind(self) -> Literal["text_only", "multimodal"]:
        return "multimodal" if self.has_speech_delivery else "text_only"

    def with_speech_sentinel(self) -> "EvaluationResult":
        """話し方の評価を"N/A"・0点に置き換えたコピーを返す"""
        if not self.has_speech_delivery:
            return self
        return self.model_copy(
            update={
                "speech_delivery": SpeechDelivery.not_applicable(),
                "score_summary": self.score_summary.model_copy(
                    update={"speech_delivery_score": 0}
                ),
            }
        )


class HistoryEntry(BaseModel):
    """評価履歴の1件"""

    model_config = ConfigDict(frozen=True)

    id: str
    question: str
    evaluation: EvaluationResult
    submitted_at: datetime
    audio_encoded: str | None = None  # data URL形式の音声

    @property
    def has_audio(self) -> bool:
        return bool(self.audio_encoded)
