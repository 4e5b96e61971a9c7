"""
Tests for look_compat/compatibility/scorer.py.

What we test
------------
base_confidence():
  - low without a selfie, high when both valid, medium otherwise.

score_fit():
  - Identical profiles -> geometry 60, no risk, no bonus, score 60.
  - Eye tilt 0 vs 15: known breakdown per mode; structure <= vibe.
  - Missing selfie: +10 risk, low confidence, fixed-severity geometry.
  - Invalid quality, extreme pose (>= 18 deg) and border cutoff add risk.
  - Risk penalty capped at 25.
  - Half-up rounding of the final score.
  - Score always an integer in 0..100.
"""

from __future__ import annotations

import pytest

from look_compat.compatibility.deltas import compute_deltas
from look_compat.compatibility.scorer import (
    WARNING_LOW_REFERENCE_QUALITY,
    WARNING_LOW_SELFIE_QUALITY,
    WARNING_MISSING_SELFIE,
    _round_half_up,
    base_confidence,
    score_fit,
)
from look_compat.taxonomy.face_taxonomy import Confidence, PreferenceMode


def _score(mode, user, ref):
    return score_fit(mode, user, ref, compute_deltas(user, ref))


class TestBaseConfidence:
    def test_low_without_selfie(self, ref_profile):
        assert base_confidence(None, ref_profile) == Confidence.LOW

    def test_high_when_both_valid(self, ref_profile, selfie_profile):
        assert base_confidence(selfie_profile, ref_profile) == Confidence.HIGH

    def test_medium_when_selfie_invalid(self, make_profile, ref_profile):
        user = make_profile(source="selfie", quality={"valid": False})
        assert base_confidence(user, ref_profile) == Confidence.MEDIUM

    def test_medium_when_reference_invalid(self, make_profile, selfie_profile):
        ref = make_profile(source="reference", quality={"valid": False})
        assert base_confidence(selfie_profile, ref) == Confidence.MEDIUM


class TestIdenticalProfiles:
    @pytest.mark.parametrize("mode", list(PreferenceMode))
    def test_breakdown(self, ref_profile, selfie_profile, mode):
        result = _score(mode, selfie_profile, ref_profile)
        assert result.geometry_fit == 60.0
        assert result.risk_penalty == 0.0
        assert result.adaptability_bonus == 0.0
        assert result.fit_score == 60
        assert result.confidence == Confidence.HIGH
        assert result.warnings == []


class TestEyeTiltMismatch:
    @pytest.fixture
    def pair(self, make_profile):
        ref = make_profile(source="reference", geometry={"eye_tilt_deg": 15.0})
        user = make_profile(source="selfie", geometry={"eye_tilt_deg": 0.0})
        return user, ref

    def test_structure_breakdown(self, pair):
        result = _score(PreferenceMode.STRUCTURE, *pair)
        assert result.geometry_fit == pytest.approx(55.4)
        assert result.adaptability_bonus == pytest.approx(6.4)
        assert result.fit_score == 62

    def test_vibe_breakdown(self, pair):
        result = _score(PreferenceMode.VIBE, *pair)
        assert result.geometry_fit == pytest.approx(56.4)
        assert result.adaptability_bonus == pytest.approx(9.6)
        assert result.fit_score == 66

    def test_ease_breakdown(self, pair):
        result = _score(PreferenceMode.EASE, *pair)
        assert result.fit_score == 64

    def test_structure_not_above_vibe(self, pair):
        structure = _score(PreferenceMode.STRUCTURE, *pair)
        vibe = _score(PreferenceMode.VIBE, *pair)
        assert structure.fit_score <= vibe.fit_score


class TestStructureNeverAboveVibe:
    @pytest.mark.parametrize(
        "geometry",
        [
            {"face_aspect": 1.3},
            {"jaw_to_cheek_ratio": 0.6, "chin_length_ratio": 0.3},
            {"eye_spacing_ratio": 0.35, "lip_fullness_ratio": 0.1},
            {"midface_ratio": 0.3, "eye_openness_ratio": 0.32, "eye_tilt_deg": 9.0},
        ],
    )
    def test_monotonic(self, make_profile, ref_profile, geometry):
        user = make_profile(source="selfie", geometry=geometry)
        structure = _score(PreferenceMode.STRUCTURE, user, ref_profile)
        vibe = _score(PreferenceMode.VIBE, user, ref_profile)
        assert structure.fit_score <= vibe.fit_score

    def test_monotonic_without_selfie(self, ref_profile):
        structure = _score(PreferenceMode.STRUCTURE, None, ref_profile)
        vibe = _score(PreferenceMode.VIBE, None, ref_profile)
        assert structure.fit_score <= vibe.fit_score


class TestMissingSelfie:
    def test_structure_breakdown(self, ref_profile):
        result = _score(PreferenceMode.STRUCTURE, None, ref_profile)
        # 60 - 61 * 1.15 * 0.25 / 2
        assert result.geometry_fit == pytest.approx(51.23)
        assert result.risk_penalty == pytest.approx(10.0)
        assert result.adaptability_bonus == pytest.approx(4.0)
        assert result.fit_score == 45

    def test_low_confidence_and_warning(self, ref_profile):
        result = _score(PreferenceMode.VIBE, None, ref_profile)
        assert result.confidence == Confidence.LOW
        assert result.warnings == [WARNING_MISSING_SELFIE]


class TestRiskPenalty:
    def test_invalid_selfie_quality(self, make_profile, ref_profile):
        user = make_profile(source="selfie", quality={"valid": False})
        result = _score(PreferenceMode.STRUCTURE, user, ref_profile)
        assert result.risk_penalty == pytest.approx(8.0)
        assert result.warnings == [WARNING_LOW_SELFIE_QUALITY]

    def test_invalid_reference_quality(self, make_profile, selfie_profile):
        ref = make_profile(source="reference", quality={"valid": False})
        result = _score(PreferenceMode.STRUCTURE, selfie_profile, ref)
        assert result.risk_penalty == pytest.approx(8.0)
        assert result.warnings == [WARNING_LOW_REFERENCE_QUALITY]

    def test_both_invalid_counts_once(self, make_profile):
        ref = make_profile(source="reference", quality={"valid": False})
        user = make_profile(source="selfie", quality={"valid": False})
        result = _score(PreferenceMode.STRUCTURE, user, ref)
        assert result.risk_penalty == pytest.approx(8.0)

    def test_selfie_pose_at_threshold(self, make_profile, ref_profile):
        user = make_profile(source="selfie", pose={"yaw_deg": 18.0})
        result = _score(PreferenceMode.STRUCTURE, user, ref_profile)
        assert result.risk_penalty == pytest.approx(6.0)

    def test_selfie_pose_below_threshold(self, make_profile, ref_profile):
        user = make_profile(source="selfie", pose={"roll_deg": -17.9})
        result = _score(PreferenceMode.STRUCTURE, user, ref_profile)
        assert result.risk_penalty == 0.0

    def test_reference_pose_ignored_when_selfie_present(self, make_profile, selfie_profile):
        ref = make_profile(source="reference", pose={"pitch_deg": 30.0})
        result = _score(PreferenceMode.STRUCTURE, selfie_profile, ref)
        assert result.risk_penalty == 0.0

    def test_reference_pose_governs_without_selfie(self, make_profile):
        ref = make_profile(source="reference", pose={"pitch_deg": -25.0})
        result = _score(PreferenceMode.STRUCTURE, None, ref)
        assert result.risk_penalty == pytest.approx(16.0)

    def test_border_cutoff(self, make_profile, selfie_profile):
        ref = make_profile(source="reference", occlusion={"face_border_cutoff": True})
        result = _score(PreferenceMode.STRUCTURE, selfie_profile, ref)
        assert result.risk_penalty == pytest.approx(6.0)

    def test_ease_scales_risk_up(self, make_profile, ref_profile):
        user = make_profile(source="selfie", quality={"valid": False})
        result = _score(PreferenceMode.EASE, user, ref_profile)
        assert result.risk_penalty == pytest.approx(8.8)

    @pytest.mark.parametrize("mode", list(PreferenceMode))
    def test_capped_at_25(self, make_profile, mode):
        ref = make_profile(
            source="reference",
            quality={"valid": False},
            pose={"yaw_deg": 40.0},
            occlusion={"face_border_cutoff": True},
        )
        result = _score(mode, None, ref)
        assert result.risk_penalty == 25.0


class TestScoreRange:
    def test_worst_case_stays_in_range(self, make_profile):
        ref = make_profile(
            source="reference",
            quality={"valid": False},
            occlusion={"face_border_cutoff": True},
        )
        user = make_profile(
            source="selfie",
            geometry={
                "face_aspect": 2.0,
                "jaw_to_cheek_ratio": 0.2,
                "chin_length_ratio": 0.6,
                "midface_ratio": 0.9,
                "eye_spacing_ratio": 0.6,
            },
            quality={"valid": False},
            pose={"yaw_deg": 45.0},
        )
        for mode in PreferenceMode:
            result = _score(mode, user, ref)
            assert isinstance(result.fit_score, int)
            assert 0 <= result.fit_score <= 100


class TestRoundHalfUp:
    @pytest.mark.parametrize(
        "value,expected",
        [(72.5, 73), (72.49, 72), (0.5, 1), (61.8, 62), (100.0, 100), (0.0, 0)],
    )
    def test_rounding(self, value, expected):
        assert _round_half_up(value) == expected
