"""Tests for note mapping and configuration."""

import json

import pytest

from pluck_tuner.core import (
    NOTE_NAMES,
    TunerConfig,
    frequency_to_note,
    midi_to_frequency,
)


class TestFrequencyToNote:
    """Tests for equal-temperament note mapping."""

    def test_a4_reference(self):
        info = frequency_to_note(440.0)
        assert info.note == "A"
        assert info.octave == 4
        assert info.cents == pytest.approx(0.0, abs=1e-9)
        assert info.frequency == 440.0
        assert info.name == "A4"

    @pytest.mark.parametrize(
        "freq,name",
        [
            (82.41, "E2"),
            (110.0, "A2"),
            (146.83, "D3"),
            (196.0, "G3"),
            (246.94, "B3"),
            (261.63, "C4"),
            (329.63, "E4"),
            (27.5, "A0"),
        ],
    )
    def test_standard_pitches(self, freq, name):
        info = frequency_to_note(freq)
        assert info.name == name
        assert abs(info.cents) < 5

    def test_sharp_spelling(self):
        assert frequency_to_note(466.16).note == "A♯"
        assert frequency_to_note(277.18).note == "C♯"

    def test_cents_sign(self):
        sharp = frequency_to_note(445.0)
        assert sharp.note == "A"
        assert sharp.cents == pytest.approx(19.56, abs=0.01)

        flat = frequency_to_note(435.0)
        assert flat.note == "A"
        assert flat.cents < 0

    def test_rounds_to_nearest_semitone(self):
        # +55 cents above A2 is closer to A#2
        info = frequency_to_note(110.0 * 2 ** (55 / 1200))
        assert info.name == "A♯2"
        assert info.cents == pytest.approx(-45.0, abs=1e-6)

    def test_octave_boundary(self):
        assert frequency_to_note(246.94).octave == 3  # B3
        assert frequency_to_note(261.63).octave == 4  # C4

    def test_cents_range(self):
        for midi in range(40, 90):
            for offset in (-0.49, -0.2, 0.0, 0.3, 0.49):
                cents = frequency_to_note(midi_to_frequency(midi + offset)).cents
                assert -50 <= cents < 50

    def test_non_positive_frequency(self):
        with pytest.raises(ValueError):
            frequency_to_note(0.0)
        with pytest.raises(ValueError):
            frequency_to_note(-110.0)

    def test_midi_to_frequency(self):
        assert midi_to_frequency(69) == 440.0
        assert midi_to_frequency(45) == pytest.approx(110.0)

    def test_note_names(self):
        assert len(NOTE_NAMES) == 12
        assert NOTE_NAMES[0] == "C"
        assert NOTE_NAMES[9] == "A"


class TestTunerConfig:
    """Tests for TunerConfig."""

    def test_defaults(self):
        config = TunerConfig()
        assert config.yin_threshold == 0.15
        assert config.min_clarity == 0.85
        assert config.convergence_cents == 30.0
        assert config.jump_cents == 150.0
        assert config.hysteresis_ms == 100.0
        assert config.ema_alpha == 0.1
        assert config.octave_ratio == 0.5
        assert config.stability_window == 5
        assert config.median_window == 5
        assert (config.min_frequency, config.max_frequency) == (75.0, 1400.0)

    @pytest.mark.parametrize(
        "field,value",
        [
            ("yin_threshold", 0.0),
            ("ema_alpha", 0.0),
            ("ema_alpha", 1.5),
            ("min_clarity", 1.2),
            ("stability_window", 0),
            ("median_window", 0),
            ("jump_cents", -1.0),
            ("hysteresis_ms", -5.0),
            ("sample_rate", 0),
            ("frame_size", 4),
            ("hop_length", 0),
        ],
    )
    def test_rejects_invalid_values(self, field, value):
        with pytest.raises(ValueError, match=field):
            TunerConfig(**{field: value})

    def test_rejects_inverted_range(self):
        with pytest.raises(ValueError):
            TunerConfig(min_frequency=1400.0, max_frequency=75.0)

    def test_from_dict_unknown_key(self):
        with pytest.raises(ValueError, match="Unknown config keys"):
            TunerConfig.from_dict({"yin_threshold": 0.1, "bogus": 1})

    def test_from_file(self, tmp_path):
        path = tmp_path / "tuner.json"
        path.write_text(json.dumps({"yin_threshold": 0.1, "hysteresis_ms": 150}))

        config = TunerConfig.from_file(path)
        assert config.yin_threshold == 0.1
        assert config.hysteresis_ms == 150
        assert config.min_clarity == 0.85

    def test_from_file_missing(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            TunerConfig.from_file(tmp_path / "missing.json")

    def test_from_file_not_an_object(self, tmp_path):
        path = tmp_path / "tuner.json"
        path.write_text("[1, 2, 3]")
        with pytest.raises(ValueError):
            TunerConfig.from_file(path)

    def test_replace_skips_none(self):
        config = TunerConfig().replace(frame_size=4096, hop_length=None)
        assert config.frame_size == 4096
        assert config.hop_length == TunerConfig().hop_length

    def test_to_dict_round_trip(self):
        config = TunerConfig(ema_alpha=0.2)
        assert TunerConfig.from_dict(config.to_dict()) == config
