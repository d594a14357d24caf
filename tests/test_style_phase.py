"""Tests for style tracks, derived transition signals and phase arithmetic."""

import numpy as np
import pytest

from animlab.modules.style_phase import PhaseTrack, StyleTrack, derive_signals, phase_delta, wrap_phase
from animlab.shared.errors import ClipError

from conftest import make_clip


class TestDeriveSignals:

    def test_transition_targets(self):
        values = np.array([[0.0], [0.0], [0.5], [1.0], [1.0]])
        forward, inverse = derive_signals(values)
        assert forward[:, 0].tolist() == [0.0, 1.0, 1.0, 1.0, 1.0]
        assert inverse[:, 0].tolist() == [0.0, 0.0, 0.0, 0.0, 1.0]

    def test_constant_track_signals_equal_values(self):
        values = np.tile([0.3, 0.7], (6, 1))
        forward, inverse = derive_signals(values)
        assert np.array_equal(forward, values)
        assert np.array_equal(inverse, values)

    def test_styles_are_independent(self):
        values = np.array([[0.0, 1.0], [0.5, 1.0], [1.0, 1.0]])
        forward, _ = derive_signals(values)
        assert forward[0].tolist() == [1.0, 1.0]


class TestStyleTrack:

    def setup_method(self):
        self.clip = make_clip(frames=10)
        values = np.zeros((10, 2))
        values[:, 0] = np.linspace(0, 1, 10)
        values[:, 1] = 1 - values[:, 0]
        self.track = StyleTrack(["run", "walk"], values)

    def test_rejects_shape_mismatch(self):
        with pytest.raises(ClipError, match="must be"):
            StyleTrack(["a", "b"], np.zeros((10, 3)))

    def test_rejects_weights_outside_unit_interval(self):
        with pytest.raises(ClipError, match=r"\[0, 1\]"):
            StyleTrack(["a"], np.full((4, 1), 1.5))

    def test_rejects_signal_shape_mismatch(self):
        with pytest.raises(ClipError, match="signals"):
            StyleTrack(["a"], np.zeros((4, 1)), signals=np.zeros((3, 1)))

    def test_point_lookup(self):
        frame = self.clip.frame(3)
        assert self.track.style(frame) == pytest.approx([1 / 3, 2 / 3])
        assert self.track.signal(frame) == pytest.approx([1.0, 0.0])
        assert self.track.inverse_signal(frame) == pytest.approx([0.0, 1.0])

    def test_lookup_returns_copy(self):
        frame = self.clip.frame(3)
        self.track.style(frame)[0] = 9.0
        assert self.track.style(frame)[0] == pytest.approx(1 / 3)

    def test_window_averages_clamped_range(self):
        assert self.track.style(self.clip.frame(0), window=2)[0] == pytest.approx(np.mean([0, 1 / 9, 2 / 9]))
        assert self.track.style(self.clip.frame(5), window=1)[0] == pytest.approx(5 / 9)

    def test_names_are_copied(self):
        names = self.track.names()
        names.append("idle")
        assert self.track.names() == ["run", "walk"]
        assert len(self.track) == 10


class TestPhase:

    def test_wrap_phase(self):
        assert wrap_phase(1.25) == pytest.approx(0.25)
        assert wrap_phase(-0.25) == pytest.approx(0.75)
        assert wrap_phase(1.0) == 0.0

    @pytest.mark.parametrize("start,end,expected", [
        (0.1, 0.3, 0.2),
        (0.9, 0.1, 0.2),
        (0.1, 0.9, -0.2),
        (0.0, 0.5, -0.5),
    ])
    def test_phase_delta(self, start, end, expected):
        assert phase_delta(start, end) == pytest.approx(expected)

    def test_phase_delta_is_shortest_step(self):
        rng = np.random.default_rng(7)
        for start, end in rng.uniform(-3, 3, size=(200, 2)):
            d = phase_delta(start, end)
            assert -0.5 <= d < 0.5
            assert np.cos(2 * np.pi * (start + d)) == pytest.approx(np.cos(2 * np.pi * end), abs=1e-9)
            assert np.sin(2 * np.pi * (start + d)) == pytest.approx(np.sin(2 * np.pi * end), abs=1e-9)

    def test_track_wraps_values(self):
        track = PhaseTrack(np.array([0.5, 1.25, -0.25]))
        assert track.values == pytest.approx([0.5, 0.25, 0.75])

    def test_mirrored_defaults_to_regular(self):
        clip = make_clip(frames=3)
        track = PhaseTrack(np.array([0.1, 0.2, 0.3]))
        assert track.phase(clip.frame(1), mirrored=True) == pytest.approx(0.2)

    def test_mirrored_track_used(self):
        clip = make_clip(frames=3)
        track = PhaseTrack(np.array([0.1, 0.2, 0.3]), mirrored_values=np.array([0.6, 0.7, 0.8]))
        assert track.phase(clip.frame(1)) == pytest.approx(0.2)
        assert track.phase(clip.frame(1), mirrored=True) == pytest.approx(0.7)

    def test_window_mean_across_wrap(self):
        clip = make_clip(frames=3)
        track = PhaseTrack(np.array([0.9, 0.0, 0.1]))
        mean = track.phase(clip.frame(1), window=1)
        assert min(mean, 1 - mean) == pytest.approx(0.0, abs=1e-9)

    def test_mismatched_mirrored_track(self):
        with pytest.raises(ClipError, match="mirrored"):
            PhaseTrack(np.zeros(3), mirrored_values=np.zeros(4))
