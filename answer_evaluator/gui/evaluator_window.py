"""
回答評価画面のGUIコンポーネント
質問の選択、テキスト/音声での回答、評価結果と履歴の表示を行う
"""

import logging
from typing import List

import flet as ft

from answer_evaluator.errors import EvaluatorError, describe_error
from answer_evaluator.models.schemas import EvaluationResult, HistoryEntry
from answer_evaluator.services.audio_service import AudioCaptureService
from answer_evaluator.services.evaluation_service import EvaluationService

logger = logging.getLogger(__name__)


class EvaluatorWindow:
    """回答評価画面のウィンドウクラス"""

    def __init__(
        self,
        page: ft.Page,
        evaluation_service: EvaluationService,
        audio_service: AudioCaptureService | None = None,
    ) -> None:
        """
        初期化処理

        Args:
            page: Fletのページオブジェクト
            evaluation_service: 評価サービス
            audio_service: 録音サービス
        """
        self.page = page
        self.evaluation_service = evaluation_service
        self.audio_service = audio_service or AudioCaptureService()

        questions: List[str] = self.evaluation_service.catalog.questions()
        self.selected_question: str = questions[0]

        self.question_dropdown = ft.Dropdown(
            label="Question",
            value=self.selected_question,
            options=[ft.dropdown.Option(q) for q in questions],
            on_change=self._on_question_changed,
        )
        self.generate_button = ft.ElevatedButton(
            "Generate question", icon=ft.Icons.AUTO_AWESOME, on_click=self._on_generate_clicked
        )
        self.answer_field = ft.TextField(
            label="Your Answer",
            hint_text="Type your answer here, or use the microphone to record your voice.",
            multiline=True,
            min_lines=4,
        )
        self.record_button = ft.IconButton(icon=ft.Icons.MIC, on_click=self._on_record_clicked)
        self.record_status = ft.Text("")
        self.evaluate_button = ft.ElevatedButton(
            "Evaluate Answer", icon=ft.Icons.SEND, on_click=self._on_evaluate_clicked
        )
        self.error_text = ft.Text("", color=ft.Colors.RED_700, visible=False)
        self.result_column = ft.Column()
        self.history_column = ft.Column()

    def build(self) -> None:
        """ウィジェットの構築"""
        self.page.add(
            ft.Column(
                [
                    ft.Text("Multimodal Conversation Evaluator", size=28, weight=ft.FontWeight.BOLD),
                    ft.Row([self.question_dropdown, self.generate_button]),
                    self.answer_field,
                    ft.Row([self.record_button, self.record_status, self.evaluate_button]),
                    self.error_text,
                    self.result_column,
                    ft.Row(
                        [
                            ft.Text("History", size=20, weight=ft.FontWeight.BOLD),
                            ft.TextButton("Clear history", on_click=self._on_clear_history_clicked),
                        ]
                    ),
                    self.history_column,
                ],
                scroll=ft.ScrollMode.AUTO,
            )
        )
        self.refresh_history()

    def show_error(self, message: str | None) -> None:
        """エラーメッセージを表示（Noneで非表示）"""
        self.error_text.value = message or ""
        self.error_text.visible = bool(message)
        self.page.update()

    def _on_question_changed(self, e: ft.ControlEvent) -> None:
        self.selected_question = self.question_dropdown.value or self.selected_question

    def _on_record_clicked(self, e: ft.ControlEvent) -> None:
        self.toggle_recording()

    def _on_evaluate_clicked(self, e: ft.ControlEvent) -> None:
        self.page.run_task(self.submit_answer)

    def _on_generate_clicked(self, e: ft.ControlEvent) -> None:
        self.page.run_task(self.generate_question)

    def _on_clear_history_clicked(self, e: ft.ControlEvent) -> None:
        try:
            self.evaluation_service.history.clear()
        except EvaluatorError as ex:
            self.show_error(describe_error(ex))
            return
        self.refresh_history()

    def toggle_recording(self) -> None:
        """録音の開始/終了を切り替える"""
        try:
            if self.audio_service.is_recording:
                self.audio_service.stop_recording()
                self.record_button.icon = ft.Icons.MIC
                self.record_status.value = "Audio ready!"
            else:
                self.audio_service.start_recording()
                self.record_button.icon = ft.Icons.STOP
                self.record_status.value = "Recording..."
            self.show_error(None)
        except EvaluatorError as ex:
            logger.error("録音エラー: %s", ex)
            self.record_button.icon = ft.Icons.MIC
            self.record_status.value = ""
            self.show_error(describe_error(ex))

    def _set_busy(self) -> None:
        service = self.evaluation_service
        self.evaluate_button.disabled = service.is_evaluating
        self.evaluate_button.text = "Evaluating..." if service.is_evaluating else "Evaluate Answer"
        self.generate_button.disabled = service.is_generating
        self.page.update()

    async def submit_answer(self) -> None:
        """回答を送信して評価結果を表示"""
        if self.audio_service.is_recording:
            self.toggle_recording()

        self.show_error(None)
        self.result_column.controls.clear()
        pending = self.evaluation_service.submit(
            self.selected_question,
            self.answer_field.value or "",
            self.audio_service.get_result(),
        )
        self.evaluate_button.disabled = True
        self.page.update()
        try:
            entry: HistoryEntry = await pending
        except EvaluatorError as ex:
            logger.error("評価エラー: %s", ex)
            self.show_error(describe_error(ex))
            return
        finally:
            self._set_busy()

        self.audio_service.discard()
        self.record_status.value = ""
        self.result_column.controls.extend(self._result_controls(entry.evaluation))
        self.refresh_history()
        # 採点結果は表示したまま保存の失敗を知らせる
        if self.evaluation_service.last_storage_error is not None:
            self.show_error(describe_error(self.evaluation_service.last_storage_error))

    async def generate_question(self) -> None:
        """新しい質問を生成して選択する"""
        self.show_error(None)
        pending = self.evaluation_service.generate_question()
        self.generate_button.disabled = True
        self.page.update()
        try:
            question: str = await pending
        except EvaluatorError as ex:
            logger.error("質問生成エラー: %s", ex)
            self.show_error(describe_error(ex))
            return
        finally:
            self._set_busy()

        self.question_dropdown.options = [
            ft.dropdown.Option(q) for q in self.evaluation_service.catalog.questions()
        ]
        self.question_dropdown.value = question
        self.selected_question = question
        self.page.update()

    def _result_controls(self, result: EvaluationResult) -> List[ft.Control]:
        """評価結果の表示部品を作成"""
        scores = result.score_summary
        controls: List[ft.Control] = [
            ft.Text(f"Overall score: {scores.overall_score}/10", size=20, weight=ft.FontWeight.BOLD),
            ft.Text(f"Formality: {result.formality} ({scores.formality_score}/10)"),
            ft.Text(result.feedback.formality_explanation),
            ft.Text(f"Grammar: {result.grammar} ({scores.grammar_score}/10)"),
            ft.Text(result.feedback.grammar_explanation),
            ft.Text(f"Technical correctness: {result.technical_correctness} ({scores.technical_score}/10)"),
            ft.Text(result.feedback.technical_explanation),
        ]
        # テキストのみの回答では話し方の評価を表示しない
        if result.has_speech_delivery:
            delivery = result.speech_delivery
            controls.extend(
                [
                    ft.Text(f"Speech delivery ({scores.speech_delivery_score}/10)", weight=ft.FontWeight.BOLD),
                    ft.Text(
                        f"Clarity: {delivery.clarity} / Confidence: {delivery.confidence} / "
                        f"Pronunciation: {delivery.pronunciation} / Tone: {delivery.tone}"
                    ),
                    ft.Text(delivery.tone_feedback),
                    ft.Text(delivery.feedback),
                ]
            )
        for follow_up in result.follow_up_questions:
            controls.append(ft.Text(f"Follow-up: {follow_up}", italic=True))
        return controls

    def refresh_history(self) -> None:
        """履歴一覧を更新"""
        self.history_column.controls.clear()
        try:
            entries: List[HistoryEntry] = self.evaluation_service.history.list()
        except EvaluatorError as ex:
            self.show_error(describe_error(ex))
            return

        for entry in entries:
            row: List[ft.Control] = [
                ft.Text(entry.submitted_at.strftime("%Y-%m-%d %H:%M")),
                ft.Text(entry.question, expand=True),
                ft.Text(f"{entry.evaluation.score_summary.overall_score}/10"),
                ft.TextButton("Show", on_click=lambda e, item=entry: self.show_history_entry(item)),
            ]
            if entry.has_audio:
                row.append(
                    ft.IconButton(
                        icon=ft.Icons.PLAY_ARROW,
                        on_click=lambda e, item=entry: self.replay_history_entry(item),
                    )
                )
            self.history_column.controls.append(ft.Row(row))
        self.page.update()

    def show_history_entry(self, entry: HistoryEntry) -> None:
        """履歴の評価結果を表示"""
        result, _ = self.evaluation_service.history.rehydrate(entry)
        self.result_column.controls.clear()
        self.result_column.controls.append(ft.Text(entry.question, weight=ft.FontWeight.BOLD))
        self.result_column.controls.extend(self._result_controls(result))
        self.page.update()

    def replay_history_entry(self, entry: HistoryEntry) -> None:
        """履歴の音声を再生"""
        _, audio = self.evaluation_service.history.rehydrate(entry)
        if audio is None or not self.audio_service.play(audio):
            self.show_error("The recorded audio could not be played.")
