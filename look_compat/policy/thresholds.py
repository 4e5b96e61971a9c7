"""
Fixed thresholds and reason-code sets for the US gate policy.

Compiled-in, read-only.  ``US_GATE_THRESHOLDS`` is the only instance the
policy uses; tests may construct their own ``GateThresholds`` to probe
boundaries.
"""

from __future__ import annotations

from dataclasses import dataclass

# Upstream quality reject codes that make a reference photo unusable.
HARD_REJECT_REASONS: frozenset[str] = frozenset({
    "FACE_TOO_SMALL",
    "GEOMETRY_FAILED",
    "NO_FACE_DETECTED",
    "MULTIPLE_FACES_DETECTED",
})

# Upstream quality codes that only degrade a selfie.
SOFT_DEGRADE_REASONS: frozenset[str] = frozenset({
    "LIGHTING_LOW_CONFIDENCE",
    "SHARPNESS_LOW_CONFIDENCE",
    "POSE_TOO_STRONG",
    "EYES_OCCLUDED",
    "MOUTH_OCCLUDED",
})


@dataclass(frozen=True)
class GateThresholds:
    """Numeric gate thresholds.

    Attributes:
        min_lighting_score:  Reference lighting below this -> hard reject.
        min_sharpness_score: Reference sharpness below this -> hard reject.
        max_yaw_deg:         Selfie |yaw| above this -> soft degrade.
        max_pitch_deg:       Selfie |pitch| above this -> soft degrade.
        max_roll_deg:        Selfie |roll| above this -> soft degrade.
        required_face_count: Faces that must be detected in each photo.
    """

    min_lighting_score:  float = 35.0
    min_sharpness_score: float = 35.0
    max_yaw_deg:         float = 18.0
    max_pitch_deg:       float = 18.0
    max_roll_deg:        float = 18.0
    required_face_count: int = 1


US_GATE_THRESHOLDS = GateThresholds()
