"""
EvaluatorWindowのメソッドテスト
"""
from unittest.mock import AsyncMock, Mock, patch

import flet as ft
import pytest

from answer_evaluator.constants import DEFAULT_QUESTIONS
from answer_evaluator.errors import HistoryStorageError, MicrophonePermissionError, RateLimited
from answer_evaluator.gui.evaluator_window import EvaluatorWindow
from answer_evaluator.services.audio_service import AudioCaptureService
from answer_evaluator.services.evaluation_service import EvaluationService
from answer_evaluator.services.openai_service import EvaluationClient
from answer_evaluator.services.question_service import QuestionCatalog
from answer_evaluator.services.storage_service import HistoryStore


def _texts(controls) -> list[str]:
    return [c.value for c in controls if isinstance(c, ft.Text)]


class TestEvaluatorWindow:
    """EvaluatorWindowのテストクラス"""

    @pytest.fixture
    def mock_page(self):
        """モックページを作成"""
        page = Mock()
        page.update = Mock()
        page.add = Mock()
        page.run_task = Mock()
        return page

    @pytest.fixture
    def client(self):
        return Mock(spec=EvaluationClient)

    @pytest.fixture
    def audio_service(self):
        service = Mock(spec=AudioCaptureService)
        service.is_recording = False
        service.get_result.return_value = None
        return service

    @pytest.fixture
    def window(self, mock_page, client, audio_service, tmp_path):
        """EvaluatorWindowのインスタンスを作成"""
        service = EvaluationService(client, HistoryStore(tmp_path / "history.json"), QuestionCatalog())
        return EvaluatorWindow(mock_page, service, audio_service)

    def test_init(self, window):
        """初期化テスト"""
        assert window.selected_question == DEFAULT_QUESTIONS[0]
        assert len(window.question_dropdown.options) == len(DEFAULT_QUESTIONS)
        assert window.error_text.visible is False

    def test_build(self, window, mock_page):
        """buildでページにコンテンツを追加する"""
        window.build()

        assert mock_page.add.called
        assert window.history_column.controls == []

    def test_evaluate_click_schedules_task(self, window, mock_page):
        """評価ボタンで非同期タスクを開始する"""
        window._on_evaluate_clicked(Mock())

        mock_page.run_task.assert_called_once_with(window.submit_answer)

    def test_toggle_recording_permission_error(self, window, audio_service):
        """マイクを使えない場合はエラーを表示する"""
        audio_service.start_recording.side_effect = MicrophonePermissionError("Could not access the microphone.")

        window.toggle_recording()

        assert window.error_text.visible is True
        assert "microphone" in window.error_text.value
        assert window.record_button.icon == ft.Icons.MIC

    def test_toggle_recording_start_and_stop(self, window, audio_service):
        """録音の開始と終了"""
        window.toggle_recording()
        audio_service.start_recording.assert_called_once()
        assert window.record_status.value == "Recording..."

        audio_service.is_recording = True
        window.toggle_recording()
        audio_service.stop_recording.assert_called_once()
        assert window.record_status.value == "Audio ready!"

    @pytest.mark.asyncio
    async def test_submit_empty_answer(self, window, client):
        """空の回答はエラー表示のみ"""
        client.evaluate = AsyncMock()
        window.answer_field.value = ""

        await window.submit_answer()

        client.evaluate.assert_not_awaited()
        assert "Please provide an answer" in window.error_text.value
        assert window.evaluate_button.disabled is False

    @pytest.mark.asyncio
    async def test_submit_text_only(self, window, client, text_only_result):
        """テキストのみの結果では話し方の評価を表示しない"""
        client.evaluate = AsyncMock(return_value=text_only_result)
        window.answer_field.value = "It is Y"

        await window.submit_answer()

        texts = _texts(window.result_column.controls)
        assert any(t.startswith("Overall score") for t in texts)
        assert not any(t.startswith("Speech delivery") for t in texts)
        assert "Follow-up: Can you give an example?" in texts
        assert len(window.history_column.controls) == 1
        assert window.error_text.visible is False

    @pytest.mark.asyncio
    async def test_submit_multimodal(self, window, client, audio_service, multimodal_result, sample_clip):
        """音声ありの結果では話し方の評価を表示する"""
        audio_service.get_result.return_value = sample_clip
        client.evaluate = AsyncMock(return_value=multimodal_result)
        window.answer_field.value = ""

        await window.submit_answer()

        assert any(t.startswith("Speech delivery") for t in _texts(window.result_column.controls))
        audio_service.discard.assert_called_once()

    @pytest.mark.asyncio
    async def test_generate_question_error(self, window, client):
        """質問生成エラーはメッセージを表示してボタンを戻す"""
        client.generate_question = AsyncMock(side_effect=RateLimited("The question generation request was rate limited."))

        await window.generate_question()

        assert "wait" in window.error_text.value
        assert window.generate_button.disabled is False

    @pytest.mark.asyncio
    async def test_generate_question_selects_new_question(self, window, client):
        """生成した質問が選択される"""
        client.generate_question = AsyncMock(return_value="Why is the sky blue?")

        await window.generate_question()

        assert window.selected_question == "Why is the sky blue?"
        assert window.question_dropdown.value == "Why is the sky blue?"
        assert len(window.question_dropdown.options) == len(DEFAULT_QUESTIONS) + 1

    @pytest.mark.asyncio
    async def test_submit_history_save_failure_shows_result(self, window, client, text_only_result):
        """履歴の保存に失敗しても評価結果を表示してエラーを知らせる"""
        client.evaluate = AsyncMock(return_value=text_only_result)
        window.answer_field.value = "It is Y"

        with patch.object(
            window.evaluation_service.history,
            "save",
            side_effect=HistoryStorageError("Failed to save the evaluation history."),
        ):
            await window.submit_answer()

        assert any(t.startswith("Overall score") for t in _texts(window.result_column.controls))
        assert window.error_text.visible is True
        assert "history" in window.error_text.value

    def test_build_with_unreadable_history(self, window, mock_page):
        """履歴ファイルが読めない場合も画面を作成してエラーを表示する"""
        window.evaluation_service.history.history_file.write_bytes(b'[{"id": "\xff\xfe"}]')

        window.build()

        assert mock_page.add.called
        assert window.error_text.visible is True
        assert window.history_column.controls == []
