"""
API接続チェックサービス
OpenAI APIとマイクの利用可否をチェックする
"""
import os
from typing import Dict, List

import openai
import sounddevice as sd
from openai import OpenAI


class APICheckService:
    """API接続状態をチェックするサービスクラス"""

    def check_openai_api(self) -> Dict[str, str]:
        """
        OpenAI APIの接続状態をチェック

        Returns:
            API名と状態を含む辞書
        """
        # OPENAI_API_KEYまたはOPENAI_APIのどちらかをサポート
        api_key: str | None = os.getenv("OPENAI_API_KEY") or os.getenv("OPENAI_API")

        if not api_key:
            return {
                "name": "OpenAI API",
                "status": "unknown",
                "message": "API key is not set",
            }

        try:
            # 簡単なリクエストで接続確認（models.list()を呼び出して確認）
            OpenAI(api_key=api_key, max_retries=0).models.list()
        except openai.AuthenticationError:
            return {
                "name": "OpenAI API",
                "status": "error",
                "message": "API key was rejected",
            }
        except openai.OpenAIError as e:
            return {
                "name": "OpenAI API",
                "status": "error",
                "message": f"Connection error: {e}",
            }
        return {
            "name": "OpenAI API",
            "status": "available",
            "message": "API key is valid",
        }

    def check_microphone(self) -> Dict[str, str]:
        """
        マイクの利用可否をチェック

        Returns:
            デバイス名と状態を含む辞書
        """
        try:
            devices = sd.query_devices()
        except sd.PortAudioError as e:
            return {
                "name": "Microphone",
                "status": "error",
                "message": f"Audio system error: {e}",
            }

        inputs: List[str] = [d["name"] for d in devices if d["max_input_channels"] > 0]
        if not inputs:
            return {
                "name": "Microphone",
                "status": "unavailable",
                "message": "No input device found",
            }
        return {
            "name": "Microphone",
            "status": "available",
            "message": f"{len(inputs)} input device(s): {inputs[0]}",
        }

    def check_all(self) -> List[Dict[str, str]]:
        """
        全ての接続状態をチェック

        Returns:
            状態のリスト
        """
        return [self.check_openai_api(), self.check_microphone()]
