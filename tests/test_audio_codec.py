"""
audio_codecのテスト
"""
import base64

import pytest

from answer_evaluator.models.schemas import AudioClip
from answer_evaluator.services import audio_codec


class TestAudioCodec:
    """audio_codecのテストクラス"""

    def test_encode_is_data_url(self, sample_clip):
        """data URL形式で出力されること"""
        encoded = audio_codec.encode(sample_clip)

        assert encoded.startswith("data:audio/wav;base64,")
        payload = encoded.split(",", 1)[1]
        assert base64.b64decode(payload) == sample_clip.data

    @pytest.mark.parametrize(
        "mime_type",
        ["audio/wav", "audio/webm;codecs=opus", "audio/mpeg", ""],
    )
    def test_round_trip_preserves_bytes_and_mime(self, mime_type):
        """エンコード→デコードでバイト列とMIMEタイプが一致すること"""
        clip = AudioClip(mime_type=mime_type, data=bytes(range(256)) + b"\x00\xff" * 100)

        decoded = audio_codec.decode(audio_codec.encode(clip))

        assert decoded is not None
        assert decoded.data == clip.data
        assert decoded.mime_type == mime_type
        assert decoded == clip

    def test_decode_browser_data_url(self):
        """ブラウザで作成されたdata URLも読み込めること"""
        text = "data:audio/webm;codecs=opus;base64," + base64.b64encode(b"webm-bytes").decode()

        decoded = audio_codec.decode(text)

        assert decoded == AudioClip(mime_type="audio/webm;codecs=opus", data=b"webm-bytes")

    @pytest.mark.parametrize(
        "text",
        [
            None,
            "",
            "not a data url",
            "data:audio/wav,plain",
            "data:;base64,AAAA",
            "data:audio/wav;base64,@@@not-base64@@@",
            "data:audio/wav;base64,AAA",
        ],
    )
    def test_decode_malformed_returns_none(self, text):
        """不正な入力では例外ではなくNoneを返すこと"""
        assert audio_codec.decode(text) is None

    def test_split_payload(self, sample_clip):
        """MIMEタイプとbase64文字列に分割できること"""
        mime_type, data = audio_codec.split_payload(sample_clip)

        assert mime_type == "audio/wav"
        assert base64.b64decode(data) == sample_clip.data
