"""
マルチモーダル回答評価アプリ - メインエントリーポイント
"""
import logging
import sys
from pathlib import Path

import flet as ft

# 環境変数の読み込み
from dotenv import load_dotenv

from answer_evaluator.config import APP_DATA_DIR, QUESTIONS_FILE, load_settings, setup_logging
from answer_evaluator.errors import EvaluatorError, describe_error
from answer_evaluator.gui.evaluator_window import EvaluatorWindow
from answer_evaluator.services.audio_service import AudioCaptureService
from answer_evaluator.services.evaluation_service import EvaluationService
from answer_evaluator.services.openai_service import EvaluationClient
from answer_evaluator.services.question_service import QuestionCatalog
from answer_evaluator.services.storage_service import HistoryStore

# .envファイルの読み込み（実行ファイルのディレクトリまたはカレントディレクトリから）
if getattr(sys, "frozen", False):
    # PyInstallerでビルドされた場合
    application_path = Path(sys.executable).parent
else:
    # 開発環境の場合
    application_path = Path(__file__).parent

env_path = application_path / ".env"
if env_path.exists():
    load_dotenv(env_path)
else:
    load_dotenv()

logger = logging.getLogger(__name__)


class App:
    """アプリケーションのメインクラス"""

    def __init__(self, page: ft.Page) -> None:
        """
        初期化処理

        Args:
            page: Fletのページオブジェクト
        """
        self.page = page
        self.page.title = "Multimodal Conversation Evaluator"
        self.page.window.min_width = 800
        self.page.window.min_height = 600
        self.page.theme_mode = ft.ThemeMode.LIGHT

        # アプリケーションデータディレクトリの作成
        APP_DATA_DIR.mkdir(parents=True, exist_ok=True)

        try:
            client = EvaluationClient(load_settings())
        except EvaluatorError as e:
            # APIキーが無い場合は起動時に表示する
            logger.error("初期化エラー: %s", e)
            self.page.add(ft.Text(describe_error(e), color=ft.Colors.RED_700))
            return

        service = EvaluationService(
            client,
            HistoryStore(),
            QuestionCatalog(QUESTIONS_FILE),
        )
        self.audio_service = AudioCaptureService()
        self.window = EvaluatorWindow(self.page, service, self.audio_service)
        self.window.build()
        self.page.on_disconnect = lambda e: self.audio_service.close()


def main(page: ft.Page) -> None:
    """アプリケーションの起動"""
    App(page)


if __name__ == "__main__":
    setup_logging()
    ft.app(target=main)
