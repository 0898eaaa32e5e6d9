"""Tests for the command-line interface and live capture helpers."""

import json

import numpy as np
import pytest
import soundfile as sf
from typer.testing import CliRunner

from pluck_tuner.cli import app, cents_needle, render_state, summarize_readings
from pluck_tuner.core import SmoothedResult, TunerState
from pluck_tuner.input import MicrophoneFrameSource

runner = CliRunner()


@pytest.fixture
def a2_wav(tmp_path, pluck, sample_rate):
    path = tmp_path / "a2.wav"
    sf.write(str(path), pluck(110.0, 1.5, sample_rate), sample_rate)
    return path


class TestNoteCommand:
    """Tests for `pluck-tuner note`."""

    def test_maps_frequency(self):
        result = runner.invoke(app, ["note", "110"])
        assert result.exit_code == 0
        assert "A2" in result.output
        assert "+0.0 cents" in result.output

    def test_rejects_zero(self):
        result = runner.invoke(app, ["note", "0"])
        assert result.exit_code == 1


class TestAnalyzeCommand:
    """Tests for `pluck-tuner analyze`."""

    def test_reports_dominant_note(self, a2_wav):
        result = runner.invoke(app, ["analyze", str(a2_wav), "--frame-size", "4096"])
        assert result.exit_code == 0, result.output
        assert "Dominant note: A2" in result.output

    def test_json_output(self, a2_wav):
        result = runner.invoke(app, ["analyze", str(a2_wav), "-f", "4096", "--json"])
        assert result.exit_code == 0, result.output
        assert '"detected_frames"' in result.output
        assert '"note": "A2"' in result.output

    def test_verbose_table(self, a2_wav):
        result = runner.invoke(app, ["analyze", str(a2_wav), "-f", "4096", "-v"])
        assert result.exit_code == 0, result.output
        assert "Detected Readings" in result.output

    def test_missing_file(self, tmp_path):
        result = runner.invoke(app, ["analyze", str(tmp_path / "missing.wav")])
        assert result.exit_code == 1
        assert "File not found" in result.output

    def test_config_file(self, a2_wav, tmp_path):
        config = tmp_path / "tuner.json"
        config.write_text(json.dumps({"frame_size": 4096, "hysteresis_ms": 50}))

        result = runner.invoke(app, ["analyze", str(a2_wav), "--config", str(config)])
        assert result.exit_code == 0, result.output
        assert "Dominant note: A2" in result.output

    def test_invalid_config(self, a2_wav, tmp_path):
        config = tmp_path / "tuner.json"
        config.write_text(json.dumps({"not_a_setting": 1}))

        result = runner.invoke(app, ["analyze", str(a2_wav), "--config", str(config)])
        assert result.exit_code == 1
        assert "Invalid configuration" in result.output

    def test_silence_reports_nothing(self, tmp_path, sample_rate):
        path = tmp_path / "silence.wav"
        sf.write(str(path), np.zeros(sample_rate, dtype=np.float32), sample_rate)

        result = runner.invoke(app, ["analyze", str(path), "-f", "4096"])
        assert result.exit_code == 0
        assert "No stable pitch detected" in result.output


class TestRendering:
    """Tests for display helpers."""

    def test_needle_centered(self):
        needle = cents_needle(0.0, width=11)
        assert needle == "[-----^-----]"

    def test_needle_clamped(self):
        assert cents_needle(80.0, width=11).endswith("^]")
        assert cents_needle(-80.0, width=11).startswith("[^")

    def test_render_listening(self):
        assert "Listening" in render_state(TunerState.listening()).plain

    def test_render_detected(self):
        result = SmoothedResult(frequency=110.0, clarity=0.97, note="A", octave=2, cents=1.5)
        text = render_state(TunerState.detected(result)).plain
        assert "A2" in text
        assert "+1.5" in text

    def test_summarize_readings(self):
        readings = [
            SmoothedResult(110.0, 0.95, "A", 2, 0.0),
            SmoothedResult(110.2, 0.95, "A", 2, 3.0),
            SmoothedResult(116.5, 0.95, "A♯", 2, -1.0),
        ]
        summary = summarize_readings(readings)
        assert summary["note"] == "A2"
        assert summary["readings"] == 2
        assert summary["median_frequency"] == pytest.approx(110.1)

    def test_summarize_empty(self):
        assert summarize_readings([]) is None


class _FakeStream:
    def __init__(self):
        self.active = True


class TestMicrophoneFrameSource:
    """Tests for the rolling capture window (no audio device needed)."""

    def _source(self, frame_size=8, hop_length=4):
        source = MicrophoneFrameSource(
            sample_rate=8000, frame_size=frame_size, hop_length=hop_length, read_timeout=0.01
        )
        source._stream = _FakeStream()
        return source

    def test_read_requires_open(self):
        source = MicrophoneFrameSource(frame_size=8, hop_length=4)
        with pytest.raises(RuntimeError, match="not open"):
            source.read()

    def test_window_keeps_latest_samples(self):
        source = self._source()
        source._callback(np.arange(1, 5, dtype=np.float32).reshape(-1, 1), 4, None, None)

        frame, timestamp = source.read()
        np.testing.assert_array_equal(frame, [0, 0, 0, 0, 1, 2, 3, 4])
        assert timestamp > 0

    def test_drains_queued_blocks(self):
        source = self._source()
        for start in (1, 5, 9):
            block = np.arange(start, start + 4, dtype=np.float32).reshape(-1, 1)
            source._callback(block, 4, None, None)

        frame, _ = source.read()
        np.testing.assert_array_equal(frame, np.arange(5, 13))
        assert source._queue.empty()

    def test_block_larger_than_window(self):
        source = self._source(frame_size=4, hop_length=8)
        source._callback(np.arange(8, dtype=np.float32).reshape(-1, 1), 8, None, None)

        frame, _ = source.read()
        np.testing.assert_array_equal(frame, [4, 5, 6, 7])

    def test_inactive_stream_ends_reading(self):
        source = self._source()
        source._stream.active = False
        assert source.read() is None

    def test_returns_copies(self):
        source = self._source()
        source._callback(np.ones((4, 1), dtype=np.float32), 4, None, None)
        frame, _ = source.read()
        frame[:] = 5
        assert not np.any(source._window == 5)
