"""
Shared pytest fixtures for the look-compat test suite.

Provides:
  - ``build_profile()``: factory for valid ``FaceProfile`` objects with
    per-test overrides of geometry, categorical labels and quality.
  - ``make_profile``: fixture exposing the factory.
  - ``ref_profile`` / ``selfie_profile``: a matching reference/selfie pair.
  - ``make_bundle``: fixture wrapping profiles + report into a ``Bundle``.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable, Optional

import pytest

from look_compat.models.bundle import Bundle
from look_compat.models.face import FaceProfile
from look_compat.models.report import SimilarityReport

BASE_GEOMETRY: dict[str, float] = {
    "face_aspect": 1.0,
    "jaw_to_cheek_ratio": 0.8,
    "chin_length_ratio": 0.24,
    "midface_ratio": 0.38,
    "eye_spacing_ratio": 0.29,
    "eye_tilt_deg": 2.5,
    "eye_openness_ratio": 0.26,
    "lip_fullness_ratio": 0.22,
}

BASE_CATEGORICAL: dict[str, str] = {
    "face_shape": "oval",
    "eye_type": "almond",
    "lip_type": "balanced",
}


def build_profile(
    source: str = "reference",
    geometry: Optional[dict[str, float]] = None,
    categorical: Optional[dict[str, str]] = None,
    quality: Optional[dict[str, Any]] = None,
    pose: Optional[dict[str, float]] = None,
    occlusion: Optional[dict[str, bool]] = None,
    market: str = "US",
) -> FaceProfile:
    """Build a valid ``FaceProfile``; keyword dicts override the defaults."""
    geo = {**BASE_GEOMETRY, **(geometry or {})}
    qual: dict[str, Any] = {
        "valid": True,
        "score": 95.0,
        "face_count": 1,
        "lighting_score": 90.0,
        "sharpness_score": 90.0,
        "pose": {"yaw_deg": 0.0, "pitch_deg": 0.0, "roll_deg": 0.0, **(pose or {})},
        "occlusion_flags": {
            "eyes_occluded": False,
            "mouth_occluded": False,
            "face_border_cutoff": False,
            **(occlusion or {}),
        },
        "reject_reasons": [],
        **(quality or {}),
    }
    return FaceProfile.model_validate({
        "version": "v0",
        "market": market,
        "source": source,
        "locale": "en",
        "quality": qual,
        "geometry": geo,
        "categorical": {**BASE_CATEGORICAL, **(categorical or {})},
        "derived": {"geometry_vector": list(geo.values()), "embedding_version": "geom-v0"},
    })


@pytest.fixture
def make_profile() -> Callable[..., FaceProfile]:
    """Expose ``build_profile`` to tests."""
    return build_profile


@pytest.fixture
def ref_profile() -> FaceProfile:
    """A fully valid reference profile."""
    return build_profile(source="reference")


@pytest.fixture
def selfie_profile() -> FaceProfile:
    """A fully valid selfie identical in geometry to ``ref_profile``."""
    return build_profile(source="selfie")


@pytest.fixture
def make_bundle() -> Callable[..., Bundle]:
    """Factory wrapping profiles and a report into a ``Bundle``."""

    def _make(
        ref: FaceProfile,
        user: Optional[FaceProfile],
        report: SimilarityReport,
    ) -> Bundle:
        return Bundle(
            locale="en",
            preference_mode=report.preference_mode,
            created_at=datetime(2025, 1, 1, tzinfo=timezone.utc),
            user_face_profile=user,
            ref_face_profile=ref,
            similarity_report=report,
        )

    return _make
