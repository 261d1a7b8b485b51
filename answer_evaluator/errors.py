"""
エラー定義
評価パイプラインで発生するエラーの分類
"""


class EvaluatorError(Exception):
    """評価アプリケーションのエラー基底クラス"""

    category: str = "service"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message: str = message


class MicrophonePermissionError(EvaluatorError, PermissionError):
    """マイクへのアクセスが拒否された、またはデバイスが存在しない"""

    category = "permission"


class InvalidStateError(EvaluatorError):
    """録音中の再開始など、状態に合わない操作"""

    category = "state"


class InvalidInputError(EvaluatorError):
    """テキストも音声も無い回答など、入力の不備"""

    category = "input"


class InvalidCredentials(EvaluatorError):
    """APIキーが未設定、または拒否された"""

    category = "credentials"


class RateLimited(EvaluatorError):
    """プロバイダーのレート制限・クォータ超過"""

    category = "retry"


class NetworkFailure(EvaluatorError):
    """接続失敗・タイムアウト"""

    category = "network"


class ServiceError(EvaluatorError):
    """その他のプロバイダー側エラー"""

    category = "service"


class MalformedResponseError(EvaluatorError):
    """モデルの応答がスキーマに合わない"""

    category = "malformed"


class HistoryStorageError(EvaluatorError):
    """評価履歴ファイルの読み書きに失敗"""

    category = "storage"


_ADVICE: dict[str, str] = {
    "permission": "Please allow microphone access and make sure a microphone is connected.",
    "state": "Please finish the current action first.",
    "input": "Please provide an answer either by text or voice.",
    "credentials": "Please check your API key and configuration.",
    "retry": "Too many requests. Please wait a moment and try again.",
    "network": "Please check your internet connection and try again.",
    "service": "The service is temporarily unavailable. Please try again later.",
    "malformed": "The model returned an unexpected response. Please try again.",
    "storage": "The local history could not be accessed.",
}


def describe_error(error: Exception) -> str:
    """
    ユーザー向けのエラーメッセージを作成

    Args:
        error: 発生した例外

    Returns:
        画面に表示するメッセージ
    """
    if isinstance(error, EvaluatorError):
        return f"{error.message} {_ADVICE[error.category]}"
    return f"An unexpected error occurred: {error}"
