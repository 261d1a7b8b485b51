"""
アプリケーション設定
"""
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any

from pydantic import BaseModel


def get_app_data_dir() -> Path:
    """
    アプリケーションのデータディレクトリを取得

    Returns:
        アプリケーションデータディレクトリのパス
    """
    if sys.platform == "win32":
        # Windowsの場合、AppData\Local\AnswerEvaluatorを使用
        app_data: str | None = os.getenv("LOCALAPPDATA")
        if app_data:
            app_dir: Path = Path(app_data) / "AnswerEvaluator"
            app_dir.mkdir(exist_ok=True)
            return app_dir
    elif sys.platform == "darwin":
        # macOSの場合、~/Library/Application Support/AnswerEvaluatorを使用
        app_support: Path = Path.home() / "Library" / "Application Support" / "AnswerEvaluator"
        app_support.mkdir(parents=True, exist_ok=True)
        return app_support
    # その他のOSまたはフォールバック
    return Path.home() / ".answer_evaluator"


def get_config_file() -> Path:
    """設定ファイルのパスを取得"""
    return get_app_data_dir() / "config.json"


def get_log_file() -> Path:
    """ログファイルのパスを取得"""
    return get_app_data_dir() / "app.log"


# アプリケーションデータディレクトリ
APP_DATA_DIR = get_app_data_dir()

# 設定ファイル
CONFIG_FILE = get_config_file()

# ログファイル
LOG_FILE = get_log_file()

# 評価履歴ファイル
HISTORY_FILE = APP_DATA_DIR / "history.json"

# 質問リストファイル
QUESTIONS_FILE = APP_DATA_DIR / "questions.json"

DEFAULT_EVALUATION_MODEL = "gpt-4o-audio-preview"
DEFAULT_QUESTION_MODEL = "gpt-4o-mini"
DEFAULT_REQUEST_TIMEOUT = 60.0


class Settings(BaseModel):
    """実行時設定"""

    openai_api_key: str | None = None
    evaluation_model: str = DEFAULT_EVALUATION_MODEL
    question_model: str = DEFAULT_QUESTION_MODEL
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT


def load_settings(config_file: Path | None = None) -> Settings:
    """
    設定を読み込む

    config.jsonの値を基本とし、環境変数があればそちらを優先する。

    Args:
        config_file: 設定ファイルのパス（省略時はCONFIG_FILE）

    Returns:
        Settingsオブジェクト
    """
    path: Path = config_file or CONFIG_FILE
    values: dict[str, Any] = {}
    if path.exists():
        try:
            with open(path, "r", encoding="utf-8") as f:
                loaded = json.load(f)
            if isinstance(loaded, dict):
                values.update(loaded)
        except (OSError, ValueError) as e:
            logging.getLogger(__name__).warning("設定ファイルを読み込めませんでした %s: %s", path, e)

    # OPENAI_API_KEYまたはOPENAI_APIのどちらかをサポート
    api_key: str | None = os.getenv("OPENAI_API_KEY") or os.getenv("OPENAI_API")
    if api_key:
        values["openai_api_key"] = api_key
    if os.getenv("OPENAI_EVALUATION_MODEL"):
        values["evaluation_model"] = os.environ["OPENAI_EVALUATION_MODEL"]
    if os.getenv("OPENAI_QUESTION_MODEL"):
        values["question_model"] = os.environ["OPENAI_QUESTION_MODEL"]
    if os.getenv("OPENAI_TIMEOUT"):
        values["request_timeout"] = float(os.environ["OPENAI_TIMEOUT"])

    return Settings(**values)


def setup_logging(level: int = logging.INFO, log_file: Path | None = None) -> None:
    """
    ロギングを設定する（ファイルとコンソールに出力）

    Args:
        level: ログレベル
        log_file: ログファイルのパス（省略時はLOG_FILE）
    """
    path: Path = log_file or LOG_FILE
    path.parent.mkdir(parents=True, exist_ok=True)

    formatter = logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")
    file_handler = logging.FileHandler(path, encoding="utf-8")
    file_handler.setFormatter(formatter)
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)

    root = logging.getLogger()
    root.setLevel(level)
    root.addHandler(file_handler)
    root.addHandler(console_handler)
