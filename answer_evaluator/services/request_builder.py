"""
評価リクエスト作成
質問・テキスト回答・音声をプロバイダーに依存しない形式にまとめる
"""

from typing import List, Literal, Union

from pydantic import BaseModel, ConfigDict

from answer_evaluator.constants import NO_TEXT_ANSWER, SYSTEM_PROMPT
from answer_evaluator.models.schemas import AnswerSubmission, AudioClip


class TextPart(BaseModel):
    """テキスト部分"""

    model_config = ConfigDict(frozen=True)

    kind: Literal["text"] = "text"
    text: str


class AudioPart(BaseModel):
    """音声部分"""

    model_config = ConfigDict(frozen=True)

    kind: Literal["audio"] = "audio"
    mime_type: str
    data: bytes


class EvaluationRequest(BaseModel):
    """評価リクエスト（システム指示と入力部分のリスト）"""

    model_config = ConfigDict(frozen=True)

    system_instruction: str
    parts: List[Union[TextPart, AudioPart]]

    @property
    def text_part(self) -> TextPart:
        return next(part for part in self.parts if isinstance(part, TextPart))

    @property
    def audio_part(self) -> AudioPart | None:
        return next((part for part in self.parts if isinstance(part, AudioPart)), None)


def format_answer_text(question: str, text_answer: str) -> str:
    """質問と回答をテキスト部分の形式にまとめる"""
    answer: str = text_answer.strip() or NO_TEXT_ANSWER
    return f"Question: {question}\nUser's Text Answer: {answer}"


def build_evaluation_request(
    question: str,
    text_answer: str,
    audio: AudioClip | None = None,
) -> EvaluationRequest:
    """
    評価リクエストを作成

    Args:
        question: 質問文
        text_answer: テキストでの回答（空文字可）
        audio: 録音した音声（オプション）

    Returns:
        評価リクエスト

    Raises:
        InvalidInputError: テキストも音声も無い場合（通信前に送出）
    """
    submission = AnswerSubmission(question=question, text_answer=text_answer or "", audio=audio)
    submission.ensure_not_empty()

    parts: List[Union[TextPart, AudioPart]] = [
        TextPart(text=format_answer_text(submission.question, submission.text_answer))
    ]
    if submission.has_audio and submission.audio is not None:
        parts.append(AudioPart(mime_type=submission.audio.mime_type, data=submission.audio.data))

    return EvaluationRequest(system_instruction=SYSTEM_PROMPT, parts=parts)
