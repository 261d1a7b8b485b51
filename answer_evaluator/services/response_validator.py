"""
応答検証サービス
モデルが返したJSONテキストを解析し、評価結果のスキーマに合うか確認する
"""

import json
import logging
import re
from typing import Any

from pydantic import ValidationError

from answer_evaluator.errors import MalformedResponseError
from answer_evaluator.models.schemas import EvaluationResult

logger = logging.getLogger(__name__)

_CODE_FENCE_PATTERN = re.compile(r"^```(?:json)?\s*(?P<body>.*?)\s*```$", re.DOTALL)


def _strip_code_fence(text: str) -> str:
    match = _CODE_FENCE_PATTERN.match(text)
    return match.group("body") if match else text


def validate(text: str | None) -> EvaluationResult:
    """
    JSONテキストを評価結果に変換

    項目の有無と型のみを確認し、値の内容（Formal/Informalなど）は確認しない。

    Args:
        text: モデルの応答テキスト

    Returns:
        評価結果

    Raises:
        MalformedResponseError: JSONとして解析できない、または必須項目が欠けている場合
    """
    if text is None or not text.strip():
        raise MalformedResponseError("The evaluation response was empty.")

    body: str = _strip_code_fence(text.strip())
    try:
        data: Any = json.loads(body)
    except json.JSONDecodeError as e:
        logger.error("JSON解析エラー: %s", body[:500])
        raise MalformedResponseError(f"The evaluation response was not valid JSON ({e.msg}).") from e

    if not isinstance(data, dict):
        raise MalformedResponseError("The evaluation response was not a JSON object.")

    try:
        return EvaluationResult.model_validate(data)
    except ValidationError as e:
        missing: list[str] = [".".join(str(loc) for loc in err["loc"]) for err in e.errors()]
        logger.error("評価結果のスキーマ検証エラー: %s", missing)
        raise MalformedResponseError(
            f"The evaluation response did not match the expected schema: {', '.join(missing)}."
        ) from e
