"""Unit tests for transcription backends and the transcription service."""

import sys
import types
import pytest
import numpy as np
from datetime import timedelta
from types import SimpleNamespace
from unittest.mock import MagicMock, Mock, patch

from google.api_core import exceptions as gax_exceptions

from audioscope.config import AudioscopeConfig
from audioscope.errors import TranscriptionError
from audioscope.models.audio import SampleBuffer
from audioscope.models.transcription import TranscriptionSegment
from audioscope.services.transcription_service import TranscriptionService
from audioscope.transcription.google_backend import GoogleSpeechBackend, to_linear16
from audioscope.transcription.whisper_backend import WhisperBackend


@pytest.mark.unit
class TestTranscriptionService:
    """Test cases for TranscriptionService."""

    def test_drops_blank_segments(self, mock_backend_class, sine_buffer):
        backend = mock_backend_class([
            TranscriptionSegment(text=" first", start=0.0, end=1.0),
            TranscriptionSegment(text="   ", start=1.0, end=2.0),
            TranscriptionSegment(text="second", start=2.0, end=3.0),
        ])
        service = TranscriptionService(AudioscopeConfig(), backend=backend)

        segments = service.transcribe(sine_buffer)

        assert [seg.text for seg in segments] == [" first", "second"]

    def test_backend_gets_normalized_16k_audio(self, mock_backend, make_sine):
        buffer = SampleBuffer(samples=make_sine(amplitude=2.0, sample_rate=48000), sample_rate=48000)
        service = TranscriptionService(AudioscopeConfig(), backend=mock_backend)

        service.transcribe(buffer)

        assert mock_backend.received_rate == 16000
        assert len(mock_backend.received_samples) == 16000
        assert np.max(np.abs(mock_backend.received_samples)) <= 1.0

    def test_backend_lifecycle(self, mock_backend, sine_buffer):
        service = TranscriptionService(AudioscopeConfig(), backend=mock_backend)

        service.transcribe(sine_buffer)

        assert mock_backend.initialized
        assert mock_backend.cleaned_up

    def test_empty_buffer_skips_backend(self, mock_backend):
        service = TranscriptionService(AudioscopeConfig(), backend=mock_backend)

        segments = service.transcribe(SampleBuffer(samples=np.zeros(0), sample_rate=0))

        assert segments == []
        assert not mock_backend.initialized

    def test_no_segments(self, mock_backend_class, sine_buffer):
        service = TranscriptionService(AudioscopeConfig(), backend=mock_backend_class([]))

        assert service.transcribe(sine_buffer) == []

    def test_failed_initialize(self, mock_backend_class, sine_buffer):
        backend = mock_backend_class()
        backend.initialize = Mock(return_value=False)
        service = TranscriptionService(AudioscopeConfig(), backend=backend)

        with pytest.raises(TranscriptionError):
            service.transcribe(sine_buffer)

    def test_create_whisper_backend(self):
        config = AudioscopeConfig()
        config.set('whisper.model', 'tiny')

        backend = TranscriptionService(config).create_backend()

        assert isinstance(backend, WhisperBackend)
        assert backend.model_name == 'tiny'
        assert backend.language == 'en'

    def test_create_google_backend(self, temp_data_dir):
        creds = f"{temp_data_dir}/creds.json"
        with open(creds, 'w') as f:
            f.write("{}")
        config = AudioscopeConfig()
        config.set('recognition.backend', 'google')
        config.set('google_cloud.credentials_path', creds)

        backend = TranscriptionService(config).create_backend()

        assert isinstance(backend, GoogleSpeechBackend)
        assert backend.language == 'en-US'

    def test_create_google_backend_without_credentials(self):
        config = AudioscopeConfig()
        config.set('recognition.backend', 'google')

        with pytest.raises(ValueError, match="credentials"):
            TranscriptionService(config).create_backend()

    def test_unknown_backend(self):
        config = AudioscopeConfig()
        config.set('recognition.backend', 'carrier-pigeon')

        with pytest.raises(ValueError, match="Unknown recognition backend"):
            TranscriptionService(config).create_backend()


def word(start: float, end: float):
    return SimpleNamespace(start_time=timedelta(seconds=start), end_time=timedelta(seconds=end))


def recognition_result(transcript: str, words, end: float, confidence: float = 0.9):
    alternative = SimpleNamespace(transcript=transcript, confidence=confidence, words=words)
    return SimpleNamespace(alternatives=[alternative], result_end_time=timedelta(seconds=end))


@pytest.mark.unit
class TestGoogleSpeechBackend:
    """Test cases for GoogleSpeechBackend with a mocked client."""

    @pytest.fixture
    def backend(self):
        backend = GoogleSpeechBackend(credentials_path="creds.json")
        backend.client = MagicMock()
        return backend

    def test_requires_credentials(self):
        with pytest.raises(ValueError):
            GoogleSpeechBackend(credentials_path=None)

    def test_initialize(self):
        backend = GoogleSpeechBackend(credentials_path="creds.json")
        credentials = Mock(project_id="test-project")

        with patch("audioscope.transcription.google_backend.service_account.Credentials."
                   "from_service_account_file", return_value=credentials), \
                patch("audioscope.transcription.google_backend.speech.SpeechClient") as client_class:
            assert backend.initialize() is True

        client_class.assert_called_once_with(credentials=credentials)
        assert backend.project_id == "test-project"

    def test_segments_from_word_offsets(self, backend):
        backend.client.recognize.return_value = SimpleNamespace(results=[
            recognition_result("hello there", [word(0.3, 0.6), word(0.7, 1.1)], end=1.2),
            recognition_result("general kenobi", [word(2.0, 2.4), word(2.5, 3.0)], end=3.1, confidence=0.8),
        ])

        segments = backend.transcribe(np.zeros(16000, dtype=np.float32))

        assert [(s.text, s.start, s.end) for s in segments] == [
            ("hello there", 0.3, 1.1),
            ("general kenobi", 2.0, 3.0),
        ]
        assert segments[1].confidence == 0.8

    def test_segments_without_words_use_result_end(self, backend):
        backend.client.recognize.return_value = SimpleNamespace(results=[
            recognition_result("one", [], end=1.5),
            recognition_result("two", [], end=2.5),
        ])

        segments = backend.transcribe(np.zeros(16000, dtype=np.float32))

        assert [(s.start, s.end) for s in segments] == [(0.0, 1.5), (1.5, 2.5)]

    def test_sends_linear16_at_sample_rate(self, backend):
        backend.client.recognize.return_value = SimpleNamespace(results=[])
        samples = np.array([0.0, 0.5, -1.0], dtype=np.float32)

        backend.transcribe(samples, sample_rate=16000)

        kwargs = backend.client.recognize.call_args.kwargs
        assert kwargs["config"].sample_rate_hertz == 16000
        assert kwargs["config"].language_code == "en-US"
        assert kwargs["audio"].content == to_linear16(samples)

    def test_long_audio_is_split_into_windows(self, backend):
        """Test two minutes of audio goes out as 55 s requests with times shifted per window."""
        backend.client.recognize.side_effect = [
            SimpleNamespace(results=[recognition_result("first", [word(0.5, 1.0)], end=1.2)]),
            SimpleNamespace(results=[recognition_result("second", [word(1.0, 2.0)], end=2.1)]),
            SimpleNamespace(results=[recognition_result("third", [], end=4.0)]),
        ]

        segments = backend.transcribe(np.zeros(16000 * 120, dtype=np.float32), sample_rate=16000)

        request_seconds = [len(c.kwargs["audio"].content) / 2 / 16000
                           for c in backend.client.recognize.call_args_list]
        assert request_seconds == [55.0, 55.0, 10.0]
        assert [(s.text, s.start, s.end) for s in segments] == [
            ("first", 0.5, 1.0),
            ("second", 56.0, 57.0),
            ("third", 110.0, 114.0),
        ]

    def test_window_boundary_has_no_gap_or_overlap(self, backend):
        backend.client.recognize.return_value = SimpleNamespace(results=[])
        samples = np.arange(16000 * 56, dtype=np.float32) / (16000 * 56)

        backend.transcribe(samples, sample_rate=16000)

        sent = b"".join(c.kwargs["audio"].content for c in backend.client.recognize.call_args_list)
        assert backend.client.recognize.call_count == 2
        assert sent == to_linear16(samples)

    def test_failure_in_later_window(self, backend):
        backend.client.recognize.side_effect = [
            SimpleNamespace(results=[]),
            gax_exceptions.ServiceUnavailable("down"),
        ]

        with pytest.raises(TranscriptionError, match="unavailable"):
            backend.transcribe(np.zeros(16000 * 60, dtype=np.float32))

    @pytest.mark.parametrize("error", [
        gax_exceptions.DeadlineExceeded("too slow"),
        gax_exceptions.ServiceUnavailable("down"),
        gax_exceptions.InvalidArgument("bad audio"),
    ])
    def test_api_errors(self, backend, error):
        backend.client.recognize.side_effect = error

        with pytest.raises(TranscriptionError) as exc_info:
            backend.transcribe(np.zeros(100, dtype=np.float32))

        assert exc_info.value.__cause__ is error

    def test_not_initialized(self):
        backend = GoogleSpeechBackend(credentials_path="creds.json")

        with pytest.raises(TranscriptionError):
            backend.transcribe(np.zeros(100, dtype=np.float32))

    def test_to_linear16(self):
        pcm = np.frombuffer(to_linear16(np.array([0.0, 1.0, -1.0, 2.0], dtype=np.float32)), dtype="<i2")

        assert pcm.tolist() == [0, 32767, -32767, 32767]


@pytest.fixture
def fake_faster_whisper(monkeypatch):
    """Install a stub faster_whisper module whose model returns two segments."""
    model = Mock()
    model.transcribe.return_value = (
        iter([
            SimpleNamespace(text=" Hello.", start=0.0, end=1.24),
            SimpleNamespace(text=" Goodbye.", start=1.24, end=2.5),
        ]),
        SimpleNamespace(language="en"),
    )
    module = types.ModuleType("faster_whisper")
    module.WhisperModel = Mock(return_value=model)
    monkeypatch.setitem(sys.modules, "faster_whisper", module)
    return module


@pytest.mark.unit
class TestWhisperBackend:
    """Test cases for WhisperBackend with a stubbed model."""

    def test_initialize_loads_model(self, fake_faster_whisper):
        backend = WhisperBackend(model_name="tiny", device="cpu", compute_type="int8")

        assert backend.initialize() is True

        fake_faster_whisper.WhisperModel.assert_called_once_with("tiny", device="cpu", compute_type="int8")

    def test_transcribe(self, fake_faster_whisper):
        with WhisperBackend() as backend:
            segments = backend.transcribe(np.zeros(16000, dtype=np.float32))
            model = backend.model

        assert [(s.text, s.start, s.end) for s in segments] == [
            (" Hello.", 0.0, 1.24),
            (" Goodbye.", 1.24, 2.5),
        ]
        audio = model.transcribe.call_args.args[0]
        assert audio.dtype == np.float32
        assert model.transcribe.call_args.kwargs["language"] == "en"
        assert backend.model is None

    def test_rejects_other_rates(self, fake_faster_whisper):
        with WhisperBackend() as backend:
            with pytest.raises(ValueError):
                backend.transcribe(np.zeros(100, dtype=np.float32), sample_rate=44100)

    def test_model_failure(self, fake_faster_whisper):
        model = fake_faster_whisper.WhisperModel.return_value
        model.transcribe.side_effect = RuntimeError("out of memory")

        with WhisperBackend() as backend:
            with pytest.raises(TranscriptionError, match="out of memory"):
                backend.transcribe(np.zeros(100, dtype=np.float32))

    def test_model_load_failure(self, fake_faster_whisper):
        fake_faster_whisper.WhisperModel.side_effect = RuntimeError("Unable to download model 'base' (offline)")
        backend = WhisperBackend()

        with pytest.raises(TranscriptionError, match="offline") as exc_info:
            backend.initialize()

        assert isinstance(exc_info.value.__cause__, RuntimeError)
        assert backend.model is None

    def test_missing_dependency(self, monkeypatch):
        monkeypatch.setitem(sys.modules, "faster_whisper", None)

        with pytest.raises(TranscriptionError, match="faster-whisper"):
            WhisperBackend().initialize()

    def test_not_initialized(self):
        with pytest.raises(TranscriptionError):
            WhisperBackend().transcribe(np.zeros(100, dtype=np.float32))
