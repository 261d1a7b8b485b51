"""
音声入力/出力サービス
マイクからの録音（idle → recording → idle）と、録音済み音声の再生を行う
"""

import enum
import logging
import threading
from typing import Any, List, Optional

import numpy as np
import sounddevice as sd

from answer_evaluator.errors import InvalidStateError, MicrophonePermissionError
from answer_evaluator.models.schemas import AudioClip
from answer_evaluator.services import audio_format

logger = logging.getLogger(__name__)

# 録音セッションからMIMEタイプが得られない場合の既定値
DEFAULT_MIME_TYPE = audio_format.WAV_MIME_TYPE

# デバイスを開けなかったときにsounddeviceが送出する例外
_DEVICE_ERRORS = (sd.PortAudioError, ValueError, OSError)


class CaptureState(enum.Enum):
    """録音状態"""

    IDLE = "idle"
    RECORDING = "recording"


class AudioCaptureService:
    """マイク録音を管理するサービスクラス（同時に1セッションのみ）"""

    def __init__(self, sample_rate: int = 44100, channels: int = 1) -> None:
        """
        初期化処理

        Args:
            sample_rate: サンプリングレート
            channels: チャンネル数
        """
        self.chunk_size: int = 1024
        self.sample_rate: int = sample_rate
        self.channels: int = channels
        self.dtype: str = "float32"

        self._state: CaptureState = CaptureState.IDLE
        self._stream: Optional[sd.InputStream] = None
        self._chunks: List[np.ndarray] = []
        self._lock = threading.Lock()
        self._mime_type: str | None = None
        self._clip: AudioClip | None = None

    @property
    def state(self) -> CaptureState:
        return self._state

    @property
    def is_recording(self) -> bool:
        return self._state is CaptureState.RECORDING

    def get_result(self) -> AudioClip | None:
        """最後に録音を終えた音声データ（未録音・破棄済みの場合はNone）"""
        return self._clip

    def discard(self) -> None:
        """録音済みの音声データを破棄"""
        self._clip = None

    def list_input_devices(self) -> List[dict]:
        """
        利用可能な入力デバイスを取得

        Returns:
            入力デバイス情報（index, name, channels）のリスト
        """
        devices = sd.query_devices()
        return [
            {
                "index": i,
                "name": device["name"],
                "channels": device["max_input_channels"],
            }
            for i, device in enumerate(devices)
            if device["max_input_channels"] > 0
        ]

    def _candidate_devices(self, kind: str) -> List[Optional[int]]:
        """
        試行するデバイスのリストを作成（既定デバイス → その他 → None）

        Args:
            kind: "input" または "output"
        """
        position = 0 if kind == "input" else 1
        channels_key = f"max_{kind}_channels"
        candidates: List[Optional[int]] = []

        # 1. デフォルトデバイス
        try:
            default_index = sd.default.device[position]
            if default_index is not None and default_index >= 0:
                candidates.append(default_index)
        except _DEVICE_ERRORS as e:
            logger.debug("既定デバイスを取得できませんでした: %s", e)

        # 2. その他の入出力可能なデバイス
        try:
            for i, dev in enumerate(sd.query_devices()):
                if dev[channels_key] > 0 and i not in candidates:
                    candidates.append(i)
        except _DEVICE_ERRORS as e:
            logger.debug("デバイス一覧を取得できませんでした: %s", e)

        # 最後にNoneを追加（デフォルトの挙動を試す）
        if None not in candidates:
            candidates.append(None)
        return candidates

    def _on_audio(self, indata: np.ndarray, frames: int, time_info: Any, status: sd.CallbackFlags) -> None:
        """sounddeviceのコールバック関数"""
        if status:
            logger.warning("Audio callback status: %s", status)
        with self._lock:
            self._chunks.append(indata.copy())

    def start_recording(self) -> None:
        """
        録音を開始

        前回録音して未送信の音声データは破棄される。

        Raises:
            InvalidStateError: 既に録音中の場合
            MicrophonePermissionError: マイクへのアクセスが拒否された、またはデバイスが無い場合
        """
        if self._state is CaptureState.RECORDING:
            raise InvalidStateError("A recording is already in progress.")

        self._clip = None
        with self._lock:
            self._chunks = []

        last_error: Exception | None = None
        for device_index in self._candidate_devices("input"):
            stream: Optional[sd.InputStream] = None
            try:
                stream = sd.InputStream(
                    samplerate=self.sample_rate,
                    channels=self.channels,
                    dtype=self.dtype,
                    blocksize=self.chunk_size,
                    callback=self._on_audio,
                    device=device_index,
                )
                stream.start()
            except _DEVICE_ERRORS as e:
                logger.warning("デバイス %s でのエラー: %s", device_index, e)
                last_error = e
                if stream is not None:
                    stream.close()
                continue

            logger.info("録音を開始しました (Device Index: %s)", device_index)
            self._stream = stream
            self._mime_type = DEFAULT_MIME_TYPE
            self._state = CaptureState.RECORDING
            return

        raise MicrophonePermissionError(
            f"Could not access the microphone: {last_error}"
        ) from last_error

    def _release_stream(self) -> None:
        stream = self._stream
        self._stream = None
        self._state = CaptureState.IDLE
        if stream is None:
            return
        try:
            stream.stop()
        finally:
            stream.close()

    def stop_recording(self) -> AudioClip | None:
        """
        録音を終了して音声データを作成

        録音中でない場合は何もしない。マイクは必ず解放される。

        Returns:
            録音した音声データ（WAV）、録音中でなかった場合はNone
        """
        if self._state is not CaptureState.RECORDING:
            return None

        try:
            self._release_stream()
        finally:
            with self._lock:
                chunks = self._chunks
                self._chunks = []

        if chunks:
            samples = np.concatenate(chunks).reshape(-1)
        else:
            samples = np.zeros(0, dtype=np.float32)

        data: bytes = audio_format.samples_to_wav(samples, self.sample_rate, self.channels)
        self._clip = AudioClip(mime_type=self._mime_type or DEFAULT_MIME_TYPE, data=data)
        logger.info("録音を終了しました (%.1f秒)", len(samples) / (self.sample_rate * self.channels))
        return self._clip

    def play(self, clip: AudioClip) -> bool:
        """
        音声データを再生する

        Args:
            clip: 再生する音声データ

        Returns:
            再生成功時True、すべてのデバイスで失敗した場合False
        """
        segment = audio_format.load_segment(clip)
        samples = audio_format.segment_to_samples(segment)

        for device_index in self._candidate_devices("output"):
            try:
                logger.info("再生を開始します (Device Index: %s)", device_index)
                sd.play(samples, samplerate=segment.frame_rate, device=device_index)
                sd.wait()  # 再生が完了するまで待機
                return True
            except _DEVICE_ERRORS as e:
                logger.warning("再生エラー (Device %s): %s", device_index, e)

        logger.error("すべてのデバイスで再生に失敗しました")
        return False

    def close(self) -> None:
        """録音中であればマイクを解放する（音声データは作成しない）"""
        if self._stream is not None:
            self._release_stream()
            with self._lock:
                self._chunks = []

    def __del__(self) -> None:
        """クリーンアップ"""
        try:
            self.close()
        except _DEVICE_ERRORS:
            pass
