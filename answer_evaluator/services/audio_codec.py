"""
音声エンコードサービス
音声データとdata URL形式（data:<MIMEタイプ>;base64,<データ>）を相互に変換する
履歴の保存とモデルへの送信の両方で同じ形式を使用する
"""

import base64
import binascii
import re

from answer_evaluator.models.schemas import AudioClip

# MIMEタイプはパラメータ（;codecs=opus など）を含めてそのまま保持する
_DATA_URL_PATTERN = re.compile(r"^data:(?P<mime>[^,]*?);base64,(?P<payload>.*)$", re.DOTALL)


def encode(clip: AudioClip) -> str:
    """
    音声データをdata URL文字列に変換

    Args:
        clip: 音声データ

    Returns:
        data URL文字列
    """
    payload: str = base64.b64encode(clip.data).decode("ascii")
    return f"data:{clip.mime_type};base64,{payload}"


def decode(text: str | None) -> AudioClip | None:
    """
    data URL文字列から音声データを復元

    Args:
        text: data URL文字列

    Returns:
        音声データ、空文字や不正な形式の場合はNone
    """
    if not text:
        return None

    match = _DATA_URL_PATTERN.match(text.strip())
    if not match:
        return None

    try:
        data: bytes = base64.b64decode(match.group("payload"), validate=True)
    except (binascii.Error, ValueError):
        return None

    return AudioClip(mime_type=match.group("mime"), data=data)


def split_payload(clip: AudioClip) -> tuple[str, str]:
    """
    リクエスト送信用にMIMEタイプとbase64文字列を取り出す

    Args:
        clip: 音声データ

    Returns:
        (MIMEタイプ, base64文字列)
    """
    return clip.mime_type, base64.b64encode(clip.data).decode("ascii")
