"""
音声フォーマット変換
pydubを使用して録音データのWAV化・形式変換・再生用のサンプル取得を行う
"""

import io

import numpy as np
from pydub import AudioSegment

from answer_evaluator.models.schemas import AudioClip

WAV_MIME_TYPE = "audio/wav"

# MIMEタイプ → pydub/ffmpegのフォーマット名
_FORMATS: dict[str, str] = {
    "audio/wav": "wav",
    "audio/x-wav": "wav",
    "audio/wave": "wav",
    "audio/mpeg": "mp3",
    "audio/mp3": "mp3",
    "audio/webm": "webm",
    "audio/ogg": "ogg",
    "audio/mp4": "mp4",
    "audio/flac": "flac",
}


def base_mime_type(mime_type: str) -> str:
    """パラメータ（;codecs=...）を除いたMIMEタイプを返す"""
    return mime_type.split(";", 1)[0].strip().lower()


def format_of(mime_type: str) -> str | None:
    """MIMEタイプに対応するフォーマット名、不明な場合はNone"""
    return _FORMATS.get(base_mime_type(mime_type))


def samples_to_wav(samples: np.ndarray, sample_rate: int, channels: int = 1) -> bytes:
    """
    float32の音声サンプル（-1.0〜1.0）を16bit PCMのWAVに変換

    Args:
        samples: 音声サンプル
        sample_rate: サンプリングレート
        channels: チャンネル数

    Returns:
        WAVファイルのバイト列
    """
    pcm = (np.clip(samples, -1.0, 1.0) * 32767).astype(np.int16)
    segment = AudioSegment(
        data=pcm.tobytes(),
        sample_width=2,
        frame_rate=sample_rate,
        channels=channels,
    )
    buffer = io.BytesIO()
    segment.export(buffer, format="wav")
    return buffer.getvalue()


def load_segment(clip: AudioClip) -> AudioSegment:
    """音声データをpydubのAudioSegmentとして読み込む"""
    return AudioSegment.from_file(io.BytesIO(clip.data), format=format_of(clip.mime_type))


def transcode_to_wav(clip: AudioClip) -> AudioClip:
    """
    WAV以外の音声をWAVに変換（webm等の変換にはffmpegが必要）

    Args:
        clip: 音声データ

    Returns:
        WAV形式の音声データ
    """
    if format_of(clip.mime_type) == "wav":
        return clip
    buffer = io.BytesIO()
    load_segment(clip).export(buffer, format="wav")
    return AudioClip(mime_type=WAV_MIME_TYPE, data=buffer.getvalue())


def segment_to_samples(segment: AudioSegment) -> np.ndarray:
    """
    AudioSegmentを再生用のfloat32サンプルに変換

    Returns:
        (フレーム数, チャンネル数) の配列
    """
    samples = np.array(segment.get_array_of_samples(), dtype=np.float32)
    scale = float(1 << (8 * segment.sample_width - 1))
    return (samples / scale).reshape(-1, segment.channels)
