"""
Tests for look_compat/compatibility/deltas.py.

What we test
------------
severity_ramp():
  - 0 at or below the soft threshold.
  - 1 at or above the hard threshold.
  - Linear in between.

compute_deltas():
  - Always 11 deltas, geometry keys in declared order then categorical.
  - Identical profiles -> every severity 0.
  - Signed diff is user - ref; explanation reflects the sign.
  - Eye tilt 0 vs 15 saturates at severity 1.
  - Categorical mismatch uses the per-key severity.
  - Missing selfie -> fixed severities, null user values, missing evidence.
  - Rising |diff| from below soft to above hard moves severity 0 -> 1.
"""

from __future__ import annotations

import pytest

from look_compat.compatibility.deltas import compute_deltas, find_delta, severity_ramp
from look_compat.compatibility.tables import CATEGORICAL_KEYS, GEOMETRY_KEYS

EXPECTED_KEYS = [f"geometry.{k}" for k in GEOMETRY_KEYS] + [
    f"categorical.{k}" for k in CATEGORICAL_KEYS
]


class TestSeverityRamp:
    def test_below_soft_is_zero(self):
        assert severity_ramp(2.9, 3.0, 12.0) == 0.0

    def test_at_soft_is_zero(self):
        assert severity_ramp(3.0, 3.0, 12.0) == 0.0

    def test_at_hard_is_one(self):
        assert severity_ramp(12.0, 3.0, 12.0) == 1.0

    def test_beyond_hard_is_clamped(self):
        assert severity_ramp(40.0, 3.0, 12.0) == 1.0

    def test_midpoint_is_half(self):
        assert severity_ramp(7.5, 3.0, 12.0) == pytest.approx(0.5)


class TestComputeDeltasShape:
    def test_eleven_deltas_in_fixed_order(self, ref_profile, selfie_profile):
        deltas = compute_deltas(selfie_profile, ref_profile)
        assert [d.key for d in deltas] == EXPECTED_KEYS

    def test_identical_profiles_have_zero_severity(self, ref_profile, selfie_profile):
        deltas = compute_deltas(selfie_profile, ref_profile)
        assert all(d.severity == 0.0 for d in deltas)

    def test_default_evidence_paths(self, ref_profile, selfie_profile):
        deltas = compute_deltas(selfie_profile, ref_profile)
        tilt = find_delta(deltas, "geometry.eye_tilt_deg")
        assert tilt.evidence == ["user.geometry.eye_tilt_deg", "ref.geometry.eye_tilt_deg"]
        shape = find_delta(deltas, "categorical.face_shape")
        assert shape.evidence == ["user.categorical.face_shape", "ref.categorical.face_shape"]


class TestGeometryDeltas:
    def test_eye_tilt_saturates(self, make_profile):
        ref = make_profile(source="reference", geometry={"eye_tilt_deg": 15.0})
        user = make_profile(source="selfie", geometry={"eye_tilt_deg": 0.0})
        tilt = find_delta(compute_deltas(user, ref), "geometry.eye_tilt_deg")
        assert tilt.signed_diff == pytest.approx(-15.0)
        assert tilt.severity == 1.0
        assert tilt.explanation_key == "user_lower"

    def test_user_higher_explanation(self, make_profile):
        ref = make_profile(source="reference")
        user = make_profile(source="selfie", geometry={"lip_fullness_ratio": 0.32})
        lip = find_delta(compute_deltas(user, ref), "geometry.lip_fullness_ratio")
        assert lip.signed_diff == pytest.approx(0.10)
        assert lip.severity == pytest.approx(0.6)
        assert lip.explanation_key == "user_higher"

    def test_within_tolerance_explanation(self, make_profile):
        ref = make_profile(source="reference")
        user = make_profile(source="selfie", geometry={"eye_tilt_deg": 4.0})
        tilt = find_delta(compute_deltas(user, ref), "geometry.eye_tilt_deg")
        assert tilt.severity == 0.0
        assert tilt.explanation_key == "within_tolerance"

    def test_soft_boundary_float_noise_reads_as_zero(self, make_profile):
        # 0.26 - 0.22 is not exactly 0.04 in binary floating point.
        ref = make_profile(source="reference", geometry={"lip_fullness_ratio": 0.22})
        user = make_profile(source="selfie", geometry={"lip_fullness_ratio": 0.26})
        lip = find_delta(compute_deltas(user, ref), "geometry.lip_fullness_ratio")
        assert lip.severity == 0.0

    def test_monotonic_from_soft_to_hard(self, make_profile):
        ref = make_profile(source="reference", geometry={"eye_tilt_deg": 0.0})
        severities = []
        for tilt in (1.0, 3.0, 5.0, 8.0, 11.0, 12.0, 20.0):
            user = make_profile(source="selfie", geometry={"eye_tilt_deg": tilt})
            severities.append(find_delta(compute_deltas(user, ref), "geometry.eye_tilt_deg").severity)
        assert severities[0] == 0.0
        assert severities[-1] == 1.0
        assert severities == sorted(severities)
        assert severities[2] < severities[3] < severities[4]


class TestCategoricalDeltas:
    @pytest.mark.parametrize(
        "field,label,expected",
        [
            ("face_shape", "round", 1.0),
            ("eye_type", "hooded", 0.8),
            ("lip_type", "full", 0.7),
        ],
    )
    def test_mismatch_severity(self, make_profile, field, label, expected):
        ref = make_profile(source="reference")
        user = make_profile(source="selfie", categorical={field: label})
        delta = find_delta(compute_deltas(user, ref), f"categorical.{field}")
        assert delta.severity == expected
        assert delta.explanation_key == "category_mismatch"
        assert delta.signed_diff is None
        assert delta.user_value == label

    def test_match_is_zero(self, ref_profile, selfie_profile):
        delta = find_delta(compute_deltas(selfie_profile, ref_profile), "categorical.eye_type")
        assert delta.severity == 0.0
        assert delta.explanation_key == "category_match"


class TestMissingSelfie:
    def test_fixed_severities(self, ref_profile):
        deltas = compute_deltas(None, ref_profile)
        geometry = [d for d in deltas if d.key.startswith("geometry.")]
        categorical = [d for d in deltas if d.key.startswith("categorical.")]
        assert all(d.severity == 0.25 for d in geometry)
        assert all(d.severity == 0.35 for d in categorical)

    def test_user_values_null_and_evidence_marked(self, ref_profile):
        for delta in compute_deltas(None, ref_profile):
            assert delta.user_value is None
            assert delta.signed_diff is None
            assert delta.explanation_key == "missing_selfie"
            assert delta.evidence == ["missing:user_face_profile"]

    def test_ref_values_carried(self, ref_profile):
        deltas = compute_deltas(None, ref_profile)
        assert find_delta(deltas, "geometry.eye_tilt_deg").ref_value == 2.5
        assert find_delta(deltas, "categorical.face_shape").ref_value == "oval"
