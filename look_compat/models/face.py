"""
Face profile models — the structured output of upstream face-geometry extraction.

A ``FaceProfile`` describes one face image: capture quality, eight normalized
geometry ratios/angles, three categorical labels, and an opaque derived
embedding.  Profiles arrive already validated by the caller; these models
re-validate the shape so that the engine can rely on every field being present.

``market`` is intentionally a plain string here.  Market enforcement belongs
to the orchestrator, which fails closed on anything other than ``"US"``.

All models are frozen.
"""

from __future__ import annotations

import math
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, field_validator

from look_compat.taxonomy.face_taxonomy import ProfileSource


class Pose(BaseModel):
    """Head pose angles in degrees."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    yaw_deg: float = 0.0
    pitch_deg: float = 0.0
    roll_deg: float = 0.0


class OcclusionFlags(BaseModel):
    """Occlusion and framing flags from the quality checker."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    eyes_occluded: bool = False
    mouth_occluded: bool = False
    face_border_cutoff: bool = False


class FaceQuality(BaseModel):
    """Capture-quality description of one face image.

    Attributes:
        valid:           Upstream verdict: is this image usable at all?
        score:           Overall quality score, 0–100.
        face_count:      Number of faces detected.
        lighting_score:  Lighting quality, 0–100.
        sharpness_score: Sharpness quality, 0–100.
        pose:            Head pose angles.
        occlusion_flags: Occlusion / framing flags.
        reject_reasons:  Upstream reason codes (e.g. ``"FACE_TOO_SMALL"``).
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    valid: bool
    score: float
    face_count: int = 1
    lighting_score: float
    sharpness_score: float
    pose: Pose = Pose()
    occlusion_flags: OcclusionFlags = OcclusionFlags()
    reject_reasons: list[str] = []

    @field_validator("score", "lighting_score", "sharpness_score")
    @classmethod
    def validate_percent(cls, v: float) -> float:
        if not 0.0 <= v <= 100.0:
            raise ValueError(f"Quality scores must be in [0, 100], got {v}.")
        return v

    @field_validator("face_count")
    @classmethod
    def validate_face_count(cls, v: int) -> int:
        if v < 0:
            raise ValueError(f"face_count must be >= 0, got {v}.")
        return v

    @property
    def max_abs_pose_deg(self) -> float:
        """Largest absolute head-pose angle across yaw, pitch and roll."""
        return max(
            abs(self.pose.yaw_deg),
            abs(self.pose.pitch_deg),
            abs(self.pose.roll_deg),
        )


class FaceGeometry(BaseModel):
    """Eight normalized geometry measurements, in tracked order."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    face_aspect: float
    jaw_to_cheek_ratio: float
    chin_length_ratio: float
    midface_ratio: float
    eye_spacing_ratio: float
    eye_tilt_deg: float
    eye_openness_ratio: float
    lip_fullness_ratio: float

    @field_validator("*")
    @classmethod
    def validate_finite(cls, v: float) -> float:
        if not math.isfinite(v):
            raise ValueError(f"Geometry values must be finite, got {v}.")
        return v


class FaceCategorical(BaseModel):
    """Categorical labels assigned by the upstream classifier."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    face_shape: str
    eye_type: str
    lip_type: str

    @field_validator("face_shape", "eye_type", "lip_type")
    @classmethod
    def validate_not_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Categorical labels must not be empty.")
        return v.strip()


class DerivedEmbedding(BaseModel):
    """Opaque derived vector.  Carried through; no rule reads it."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    geometry_vector: list[float] = []
    embedding_version: str = "geom-v0"


class FaceProfile(BaseModel):
    """Structured description of one face image.

    Attributes:
        version:     Profile schema version, always ``"v0"``.
        market:      Market tag; the engine only accepts ``"US"``.
        source:      ``"reference"`` or ``"selfie"``.
        locale:      Optional locale tag, passed through uninterpreted.
        quality:     Capture quality record.
        geometry:    Normalized geometry measurements.
        categorical: Categorical labels.
        derived:     Opaque embedding (unused by the rules).
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    version: Literal["v0"] = "v0"
    market: str = "US"
    source: ProfileSource
    locale: Optional[str] = None
    quality: FaceQuality
    geometry: FaceGeometry
    categorical: FaceCategorical
    derived: DerivedEmbedding = DerivedEmbedding()
