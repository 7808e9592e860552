"""Tests for Whisper/AssemblyAI transcription with mocked SDK clients."""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import assemblyai as aai
import httpx
import pytest
from openai import APIConnectionError

from voicebrief.config import settings
from voicebrief.errors import InvalidAudio, NetworkUnavailable, UpstreamError
from voicebrief.pipeline_config import TranscriptionProvider
from voicebrief.transcription.transcriber import plan_chunks, transcribe_file


@pytest.fixture
def audio_file(tmp_path):
    path = tmp_path / "note.m4a"
    path.write_bytes(b"\x00" * 64)
    return str(path)


@pytest.fixture
def whisper(monkeypatch):
    monkeypatch.setattr(settings, "transcription_provider", TranscriptionProvider.WHISPER)


class TestPlanChunks:
    def test_exact_multiple(self) -> None:
        assert plan_chunks(1200, 600) == [(0, 600), (600, 1200)]

    def test_short_tail(self) -> None:
        assert plan_chunks(1300, 600) == [(0, 600), (600, 1200), (1200, 1300)]

    def test_empty_audio(self) -> None:
        assert plan_chunks(0, 600) == []

    def test_rejects_non_positive_chunk(self) -> None:
        with pytest.raises(ValueError):
            plan_chunks(1000, 0)


class TestTranscribeFile:
    def test_missing_file_is_invalid_audio(self, tmp_path) -> None:
        with pytest.raises(InvalidAudio):
            transcribe_file(str(tmp_path / "missing.m4a"))

    @patch("voicebrief.transcription.transcriber.OpenAI")
    def test_small_file_single_request(self, mock_openai_cls, audio_file, whisper) -> None:
        create = mock_openai_cls.return_value.audio.transcriptions.create
        create.return_value = SimpleNamespace(text="  Call the bank.  ")

        assert transcribe_file(audio_file) == "Call the bank."
        create.assert_called_once()
        assert create.call_args.kwargs["model"] == settings.whisper_model

    @patch("voicebrief.transcription.transcriber.OpenAI")
    def test_connection_error_is_network_unavailable(
        self, mock_openai_cls, audio_file, whisper
    ) -> None:
        request = httpx.Request("POST", "https://api.openai.com/v1/audio/transcriptions")
        mock_openai_cls.return_value.audio.transcriptions.create.side_effect = (
            APIConnectionError(request=request)
        )

        with pytest.raises(NetworkUnavailable):
            transcribe_file(audio_file)

    @patch("voicebrief.transcription.transcriber.AudioSegment")
    @patch("voicebrief.transcription.transcriber.OpenAI")
    def test_large_file_is_chunked_in_order(
        self, mock_openai_cls, mock_segment_cls, audio_file, whisper, monkeypatch
    ) -> None:
        monkeypatch.setattr(settings, "transcription_max_bytes", 10)
        monkeypatch.setattr(settings, "transcription_chunk_seconds", 600)

        audio = MagicMock()
        audio.__len__.return_value = 1_500_000  # 25 minutes
        mock_segment_cls.from_file.return_value.set_channels.return_value.set_frame_rate.return_value = audio

        create = mock_openai_cls.return_value.audio.transcriptions.create
        create.side_effect = [
            SimpleNamespace(text=" first "),
            SimpleNamespace(text=""),
            SimpleNamespace(text="third"),
        ]

        assert transcribe_file(audio_file) == "first third"
        assert create.call_count == 3
        names = [c.kwargs["file"][0] for c in create.call_args_list]
        assert names == ["chunk_0.wav", "chunk_1.wav", "chunk_2.wav"]

    @patch("assemblyai.Transcriber")
    def test_assemblyai_provider(self, mock_transcriber_cls, audio_file, monkeypatch) -> None:
        monkeypatch.setattr(settings, "transcription_provider", TranscriptionProvider.ASSEMBLYAI)
        mock_transcriber_cls.return_value.transcribe.return_value = SimpleNamespace(
            status=aai.TranscriptStatus.completed, text="Hello there", error=None
        )

        assert transcribe_file(audio_file) == "Hello there"
        mock_transcriber_cls.return_value.transcribe.assert_called_once_with(audio_file)

    @patch("assemblyai.Transcriber")
    def test_assemblyai_error_status(self, mock_transcriber_cls, audio_file, monkeypatch) -> None:
        monkeypatch.setattr(settings, "transcription_provider", TranscriptionProvider.ASSEMBLYAI)
        mock_transcriber_cls.return_value.transcribe.return_value = SimpleNamespace(
            status=aai.TranscriptStatus.error, text=None, error="bad audio"
        )

        with pytest.raises(UpstreamError):
            transcribe_file(audio_file)
