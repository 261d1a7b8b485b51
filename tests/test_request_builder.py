"""
評価リクエスト作成のテスト
"""
import pytest

from answer_evaluator.constants import SYSTEM_PROMPT
from answer_evaluator.errors import InvalidInputError
from answer_evaluator.models.schemas import AudioClip
from answer_evaluator.services.request_builder import (
    AudioPart,
    TextPart,
    build_evaluation_request,
)


class TestBuildEvaluationRequest:
    """build_evaluation_requestのテストクラス"""

    def test_text_only(self):
        """テキストのみの場合はテキスト部分1つだけ"""
        request = build_evaluation_request("Explain X", "It is Y")

        assert len(request.parts) == 1
        assert isinstance(request.parts[0], TextPart)
        assert "Question: Explain X" in request.parts[0].text
        assert "User's Text Answer: It is Y" in request.parts[0].text
        assert request.audio_part is None
        assert request.system_instruction == SYSTEM_PROMPT

    def test_audio_without_text(self, sample_clip):
        """音声のみの場合はテキストが無いことを明記する"""
        request = build_evaluation_request("Explain X", "", sample_clip)

        assert len(request.parts) == 2
        assert "(No text answer provided)" in request.text_part.text
        audio_part = request.parts[1]
        assert isinstance(audio_part, AudioPart)
        assert audio_part.mime_type == "audio/wav"
        assert audio_part.data == sample_clip.data

    def test_text_and_audio(self, sample_clip):
        """テキストと音声の両方"""
        request = build_evaluation_request("Explain X", "It is Y", sample_clip)

        assert "It is Y" in request.text_part.text
        assert request.audio_part is not None

    @pytest.mark.parametrize("text_answer", ["", "   \n"])
    def test_empty_submission(self, text_answer):
        """テキストも音声も無い場合はInvalidInputError"""
        with pytest.raises(InvalidInputError):
            build_evaluation_request("Explain X", text_answer)

    def test_empty_audio_counts_as_absent(self):
        """空の音声データは音声なしとして扱う"""
        with pytest.raises(InvalidInputError):
            build_evaluation_request("Explain X", "", AudioClip(mime_type="audio/wav", data=b""))
