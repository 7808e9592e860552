"""Speech-to-text for note audio via OpenAI Whisper or AssemblyAI."""

from __future__ import annotations

import io
import logging
import os

from openai import OpenAI
from pydub import AudioSegment
from pydub.exceptions import CouldntDecodeError

from voicebrief.config import settings
from voicebrief.errors import InvalidAudio, UpstreamError, translate_error
from voicebrief.pipeline_config import TranscriptionProvider

logger = logging.getLogger(__name__)


def plan_chunks(duration_ms: int, chunk_ms: int) -> list[tuple[int, int]]:
    """Split ``[0, duration_ms)`` into consecutive ``(start, end)`` windows of at most ``chunk_ms``."""
    if chunk_ms <= 0:
        raise ValueError("chunk_ms must be positive")
    return [(start, min(start + chunk_ms, duration_ms)) for start in range(0, duration_ms, chunk_ms)]


def transcribe_file(audio_path: str) -> str:
    """Transcribe an audio file with the configured provider.

    Raises:
        InvalidAudio: the file is missing or cannot be decoded.
        IntelligenceError: on transport, upstream, or parsing failure.
    """
    if not os.path.isfile(audio_path):
        raise InvalidAudio(f"Audio file not found: {audio_path}")

    if settings.transcription_provider is TranscriptionProvider.ASSEMBLYAI:
        return _transcribe_assemblyai(audio_path)
    return _transcribe_whisper(audio_path)


def _whisper_client() -> OpenAI:
    return OpenAI(
        api_key=settings.openai_api_key or None,  # None lets the SDK read OPENAI_API_KEY
        timeout=settings.request_timeout_seconds,
        max_retries=0,
    )


def _transcribe_whisper(audio_path: str) -> str:
    client = _whisper_client()

    size = os.path.getsize(audio_path)
    if size <= settings.transcription_max_bytes:
        try:
            with open(audio_path, "rb") as handle:
                result = client.audio.transcriptions.create(
                    model=settings.whisper_model, file=handle
                )
            return result.text.strip()
        except Exception as exc:
            raise translate_error(exc) from exc

    return _transcribe_whisper_chunked(client, audio_path, size)


def _transcribe_whisper_chunked(client: OpenAI, audio_path: str, size: int) -> str:
    """Split oversized audio into fixed-length chunks and join their transcripts in order."""
    try:
        audio = AudioSegment.from_file(audio_path)
    except (CouldntDecodeError, OSError) as exc:
        raise InvalidAudio(f"Could not decode {audio_path}: {exc}") from exc

    # Mono 16 kHz keeps each ten-minute chunk well under the upload limit
    audio = audio.set_channels(1).set_frame_rate(16000)
    windows = plan_chunks(len(audio), settings.transcription_chunk_seconds * 1000)
    logger.info(
        "Audio %s is %.1f MB; transcribing in %d chunks", audio_path, size / 1e6, len(windows)
    )

    parts: list[str] = []
    for index, (start, end) in enumerate(windows):
        buffer = io.BytesIO()
        audio[start:end].export(buffer, format="wav")
        try:
            result = client.audio.transcriptions.create(
                model=settings.whisper_model,
                file=(f"chunk_{index}.wav", buffer.getvalue()),
            )
        except Exception as exc:
            raise translate_error(exc) from exc
        text = result.text.strip()
        if text:
            parts.append(text)

    return " ".join(parts)


def _transcribe_assemblyai(audio_path: str) -> str:
    """Transcribe via the AssemblyAI SDK, which accepts large files without chunking."""
    import assemblyai as aai  # type: ignore[import-untyped]  # no stubs; import inside function

    aai.settings.api_key = settings.assemblyai_api_key
    aai.settings.http_timeout = settings.request_timeout_seconds
    transcriber = aai.Transcriber()

    try:
        transcript = transcriber.transcribe(audio_path)
    except Exception as exc:
        raise translate_error(exc) from exc

    if transcript.status == aai.TranscriptStatus.error:
        raise UpstreamError(f"Transcription failed: {transcript.error}")
    return (transcript.text or "").strip()
