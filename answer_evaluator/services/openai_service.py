"""
OpenAI APIサービス
回答の採点と新しい質問の生成を行う
"""

import asyncio
import json
import logging
from typing import Any, Dict, List

import openai
from openai import OpenAI
from pydub.exceptions import CouldntDecodeError

from answer_evaluator.config import Settings, load_settings
from answer_evaluator.constants import QUESTION_GENERATION_PROMPT
from answer_evaluator.errors import (
    InvalidCredentials,
    InvalidInputError,
    NetworkFailure,
    RateLimited,
    ServiceError,
)
from answer_evaluator.models.schemas import AudioClip, EvaluationResult
from answer_evaluator.services import audio_codec, audio_format, response_validator
from answer_evaluator.services.request_builder import (
    AudioPart,
    EvaluationRequest,
    TextPart,
    build_evaluation_request,
)

logger = logging.getLogger(__name__)

EVALUATION = "evaluation"
QUESTION_GENERATION = "question generation"

_STRING = {"type": "string"}
_NUMBER = {"type": "number"}


def _object(properties: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "type": "object",
        "properties": properties,
        "required": list(properties),
        "additionalProperties": False,
    }


# 評価結果のJSONスキーマ（Structured Outputs用）
RESPONSE_SCHEMA: Dict[str, Any] = _object(
    {
        "formality": _STRING,
        "grammar": _STRING,
        "technical_correctness": _STRING,
        "speech_delivery": _object(
            {
                "clarity": _STRING,
                "confidence": _STRING,
                "pronunciation": _STRING,
                "tone": _STRING,
                "tone_feedback": {
                    **_STRING,
                    "description": "Detailed feedback on vocal tone, including enthusiasm, monotony, and conviction.",
                },
                "feedback": _STRING,
            }
        ),
        "feedback": _object(
            {
                "formality_explanation": _STRING,
                "grammar_explanation": _STRING,
                "technical_explanation": _STRING,
            }
        ),
        "score_summary": _object(
            {
                "formality_score": _NUMBER,
                "grammar_score": _NUMBER,
                "technical_score": _NUMBER,
                "speech_delivery_score": _NUMBER,
                "overall_score": _NUMBER,
            }
        ),
        "follow_up_questions": {
            "type": "array",
            "items": _STRING,
            "description": "1-2 relevant follow-up questions based on the user's answer.",
        },
    }
)


def classify_error(error: openai.OpenAIError, operation: str) -> Exception:
    """
    OpenAI SDKの例外をアプリケーションのエラーに変換

    Args:
        error: SDKが送出した例外
        operation: 失敗した処理名（"evaluation" または "question generation"）

    Returns:
        InvalidCredentials / RateLimited / NetworkFailure / ServiceError のいずれか
    """
    if isinstance(error, (openai.AuthenticationError, openai.PermissionDeniedError)):
        return InvalidCredentials(f"The {operation} request was rejected: the API key is invalid.")
    if isinstance(error, openai.RateLimitError):
        return RateLimited(f"The {operation} request was rate limited by the provider.")
    # APITimeoutErrorはAPIConnectionErrorのサブクラス
    if isinstance(error, openai.APITimeoutError):
        return NetworkFailure(f"The {operation} request timed out.")
    if isinstance(error, openai.APIConnectionError):
        return NetworkFailure(f"The {operation} request could not reach the service.")
    if isinstance(error, openai.APIStatusError):
        return ServiceError(f"The {operation} request failed with status {error.status_code}.")
    return ServiceError(f"The {operation} request failed: {error}")


def supports_structured_outputs(model: str) -> bool:
    """
    モデルがStructured Outputs（strictなjson_schema）に対応しているか

    audio-previewモデルは音声入力に対応する代わりにStructured Outputsが使えないため、
    スキーマをシステムプロンプトで指示して応答をResponseValidatorで検証する
    """
    return "audio" not in model.lower()


def _schema_instruction() -> str:
    return (
        "\n\nRespond with a single JSON object only, without markdown, "
        "that matches this JSON schema:\n" + json.dumps(RESPONSE_SCHEMA)
    )


class EvaluationClient:
    """OpenAI APIを使用して回答の採点と質問生成を行うクラス"""

    def __init__(self, settings: Settings | None = None, api_key: str | None = None) -> None:
        """
        初期化処理
        APIキーが無い場合はその場でInvalidCredentialsを送出する
        （OpenAIクライアント自体は最初の呼び出し時に作成する）

        Args:
            settings: 実行時設定（省略時は環境変数・設定ファイルから読み込む）
            api_key: APIキー（設定より優先）
        """
        self.settings: Settings = settings or load_settings()
        self.api_key: str | None = api_key or self.settings.openai_api_key
        if not self.api_key:
            raise InvalidCredentials(
                "OPENAI_API_KEY or OPENAI_API environment variable is not set."
            )
        self._client: OpenAI | None = None

    @property
    def client(self) -> OpenAI:
        """OpenAIクライアント（初回アクセス時に作成して再利用）"""
        if self._client is None:
            # リトライは呼び出し側で判断する
            self._client = OpenAI(
                api_key=self.api_key,
                timeout=self.settings.request_timeout,
                max_retries=0,
            )
        return self._client

    def _build_messages(self, request: EvaluationRequest, structured: bool = True) -> List[Dict[str, Any]]:
        system: str = request.system_instruction
        if not structured:
            system += _schema_instruction()
        content: List[Dict[str, Any]] = []
        for part in request.parts:
            if isinstance(part, TextPart):
                content.append({"type": "text", "text": part.text})
            elif isinstance(part, AudioPart):
                content.append(self._audio_content(AudioClip(mime_type=part.mime_type, data=part.data)))
        return [
            {"role": "system", "content": system},
            {"role": "user", "content": content},
        ]

    def _audio_content(self, clip: AudioClip) -> Dict[str, Any]:
        # input_audioはwavとmp3のみ対応
        audio_type: str | None = audio_format.format_of(clip.mime_type)
        if audio_type not in ("wav", "mp3"):
            try:
                clip = audio_format.transcode_to_wav(clip)
            except (CouldntDecodeError, OSError) as e:
                # 壊れた音声、またはffmpegが見つからない
                logger.error("音声の変換エラー (%s): %s", clip.mime_type, e)
                raise InvalidInputError(
                    f"The audio for the {EVALUATION} request could not be converted ({clip.mime_type})."
                ) from e
            audio_type = "wav"
        _, data = audio_codec.split_payload(clip)
        return {"type": "input_audio", "input_audio": {"data": data, "format": audio_type}}

    async def evaluate(
        self,
        question: str,
        text_answer: str,
        audio: AudioClip | None = None,
    ) -> EvaluationResult:
        """
        回答を採点する

        Args:
            question: 質問文
            text_answer: テキストでの回答（空文字可）
            audio: 録音した音声（オプション）

        Returns:
            評価結果

        Raises:
            InvalidInputError: テキストも音声も無い場合
            InvalidCredentials / RateLimited / NetworkFailure / ServiceError: 通信エラー
            MalformedResponseError: 応答がスキーマに合わない場合
        """
        request: EvaluationRequest = build_evaluation_request(question, text_answer, audio)
        model: str = self.settings.evaluation_model
        structured: bool = supports_structured_outputs(model)
        messages = self._build_messages(request, structured)

        options: Dict[str, Any] = {"model": model, "messages": messages}
        if structured:
            options["response_format"] = {
                "type": "json_schema",
                "json_schema": {
                    "name": "evaluation_result",
                    "strict": True,
                    "schema": RESPONSE_SCHEMA,
                },
            }

        logger.info(
            "評価リクエスト送信 (model=%s, audio=%s, structured=%s)",
            model,
            request.audio_part is not None,
            structured,
        )
        try:
            response = await asyncio.to_thread(self.client.chat.completions.create, **options)
        except openai.OpenAIError as e:
            logger.error("評価リクエストエラー: %s", e)
            raise classify_error(e, EVALUATION) from e

        content: str | None = response.choices[0].message.content
        result: EvaluationResult = response_validator.validate(content)

        if request.audio_part is None and result.has_speech_delivery:
            # 音声が無いのに話し方が評価されている場合は"N/A"・0点に戻す
            logger.warning("テキストのみの回答に話し方の評価が含まれていたため除外しました")
            result = result.with_speech_sentinel()
        return result

    async def generate_question(self) -> str:
        """
        面接形式の新しい質問を1つ生成

        Returns:
            前後の空白を除いた質問文

        Raises:
            InvalidCredentials / RateLimited / NetworkFailure / ServiceError: 通信エラー
        """
        try:
            response = await asyncio.to_thread(
                self.client.chat.completions.create,
                model=self.settings.question_model,
                messages=[{"role": "user", "content": QUESTION_GENERATION_PROMPT}],
            )
        except openai.OpenAIError as e:
            logger.error("質問生成エラー: %s", e)
            raise classify_error(e, QUESTION_GENERATION) from e

        question: str = (response.choices[0].message.content or "").strip()
        if not question:
            raise ServiceError("The question generation request returned an empty response.")
        return question
