"""
テスト共通のフィクスチャ
"""
import json
from unittest.mock import Mock

import pytest

from answer_evaluator.models.schemas import AudioClip, EvaluationResult


def make_evaluation_payload(with_speech: bool = False) -> dict:
    """モデルが返す評価結果のJSON（辞書）を作成"""
    if with_speech:
        speech_delivery = {
            "clarity": "Clear",
            "confidence": "Confident",
            "pronunciation": "Correct",
            "tone": "Appropriate",
            "tone_feedback": "Enthusiastic and well paced.",
            "feedback": "Good delivery overall.",
        }
        speech_score = 8
    else:
        speech_delivery = {
            "clarity": "N/A",
            "confidence": "N/A",
            "pronunciation": "N/A",
            "tone": "N/A",
            "tone_feedback": "N/A",
            "feedback": "N/A",
        }
        speech_score = 0
    return {
        "formality": "Formal",
        "grammar": "Correct",
        "technical_correctness": "Accurate",
        "speech_delivery": speech_delivery,
        "feedback": {
            "formality_explanation": "Professional wording.",
            "grammar_explanation": "No grammatical errors.",
            "technical_explanation": "The explanation is accurate.",
        },
        "score_summary": {
            "formality_score": 9,
            "grammar_score": 10,
            "technical_score": 8,
            "speech_delivery_score": speech_score,
            "overall_score": 8.5,
        },
        "follow_up_questions": ["Can you give an example?"],
    }


def make_chat_response(content: str | None) -> Mock:
    """chat.completions.createのモックレスポンスを作成"""
    response = Mock()
    response.choices = [Mock()]
    response.choices[0].message.content = content
    return response


@pytest.fixture
def text_only_payload() -> dict:
    return make_evaluation_payload(with_speech=False)


@pytest.fixture
def multimodal_payload() -> dict:
    return make_evaluation_payload(with_speech=True)


@pytest.fixture
def text_only_result(text_only_payload) -> EvaluationResult:
    return EvaluationResult.model_validate(text_only_payload)


@pytest.fixture
def multimodal_result(multimodal_payload) -> EvaluationResult:
    return EvaluationResult.model_validate(multimodal_payload)


@pytest.fixture
def sample_clip() -> AudioClip:
    # RIFFヘッダ風の先頭と、すべてのバイト値を含むデータ
    return AudioClip(mime_type="audio/wav", data=b"RIFF" + bytes(range(256)) * 4)


@pytest.fixture
def chat_response():
    """JSON文字列からモックレスポンスを作るファクトリ"""

    def _factory(payload) -> Mock:
        content = payload if isinstance(payload, str) or payload is None else json.dumps(payload)
        return make_chat_response(content)

    return _factory
