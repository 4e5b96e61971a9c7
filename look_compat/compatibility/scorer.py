"""
Fit scoring: converts deltas + capture quality into a 0–100 fit score.

Score formula
-------------
    fit_score = round_half_up(clamp(
        geometry_fit - risk_penalty + adaptability_bonus, 0, 100
    ))

Component explanations
----------------------
geometry_fit (0–60):
    Starts at 60.  Every geometry key subtracts
    ``weight * mode.geometry * severity / 2``.

risk_penalty (0–25), each term scaled by ``mode.risk``:
    +10 no selfie supplied
    +8  either profile's ``quality.valid`` is false
    +6  governing pose angle (selfie if present, else reference) >= 18°
    +6  either profile flags ``face_border_cutoff``

adaptability_bonus (0–15):
    Over the adaptable keys (eye tilt, eye openness, lip fullness), sums
    ``weight * mode.adaptability * severity``.  These are the mismatches
    technique can compensate for.

Confidence
----------
    low     no selfie
    high    selfie present and both profiles valid
    medium  otherwise

Pure function: identical inputs always produce identical outputs.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Optional

from look_compat.compatibility.tables import (
    ADAPTABILITY_BONUS_MAX,
    ADAPTABLE_GEOMETRY_KEYS,
    GEOMETRY_FIT_BASE,
    GEOMETRY_FIT_MAX,
    GEOMETRY_SPECS,
    MODE_SCALES,
    RISK_BORDER_CUTOFF,
    RISK_EXTREME_POSE,
    RISK_INVALID_QUALITY,
    RISK_MISSING_SELFIE,
    RISK_PENALTY_MAX,
    RISK_POSE_THRESHOLD_DEG,
)
from look_compat.models.face import FaceProfile
from look_compat.models.report import Delta
from look_compat.taxonomy.face_taxonomy import Confidence, PreferenceMode

WARNING_MISSING_SELFIE = (
    "No selfie was provided, so guidance is based on the reference photo only."
)
WARNING_LOW_REFERENCE_QUALITY = (
    "The reference photo quality is low, so some measurements may be less reliable."
)
WARNING_LOW_SELFIE_QUALITY = (
    "The selfie quality is low, so some measurements may be less reliable."
)


@dataclass(frozen=True)
class FitResult:
    """All outputs of the fit scorer.

    Attributes:
        fit_score:          Final integer score, 0–100.
        confidence:         Report-level confidence.
        geometry_fit:       0–60, rounded to 2 dp.
        risk_penalty:       0–25, rounded to 2 dp.
        adaptability_bonus: 0–15, rounded to 2 dp.
        warnings:           Non-fatal caveats, in emission order.
    """

    fit_score:          int
    confidence:         Confidence
    geometry_fit:       float
    risk_penalty:       float
    adaptability_bonus: float
    warnings:           list[str] = field(default_factory=list)


def base_confidence(
    user_face: Optional[FaceProfile],
    ref_face: FaceProfile,
) -> Confidence:
    """Confidence implied by selfie presence and capture validity."""
    if user_face is None:
        return Confidence.LOW
    if user_face.quality.valid and ref_face.quality.valid:
        return Confidence.HIGH
    return Confidence.MEDIUM


def score_fit(
    preference_mode: PreferenceMode,
    user_face: Optional[FaceProfile],
    ref_face: FaceProfile,
    deltas: list[Delta],
) -> FitResult:
    """Compute the fit score, its breakdown, and the report confidence.

    Args:
        preference_mode: Scoring lens selecting the mode multipliers.
        user_face:       Selfie profile, or ``None``.
        ref_face:        Reference profile.
        deltas:          Output of ``compute_deltas()`` for the same pair.

    Returns:
        FitResult with all fields populated.
    """
    scales = MODE_SCALES[PreferenceMode(preference_mode)]
    severity_by_key = {d.key: d.severity for d in deltas}

    # ── Geometry fit ──────────────────────────────────────────────────────────
    geometry_fit = GEOMETRY_FIT_BASE
    for name, spec in GEOMETRY_SPECS.items():
        sev = severity_by_key.get(f"geometry.{name}", 0.0)
        geometry_fit -= (spec.weight * scales.geometry * sev) / 2.0
    geometry_fit = _clamp(geometry_fit, 0.0, GEOMETRY_FIT_MAX)

    # ── Risk penalty ──────────────────────────────────────────────────────────
    profiles = [p for p in (user_face, ref_face) if p is not None]
    governing = user_face if user_face is not None else ref_face

    risk_penalty = 0.0
    if user_face is None:
        risk_penalty += RISK_MISSING_SELFIE * scales.risk
    if any(not p.quality.valid for p in profiles):
        risk_penalty += RISK_INVALID_QUALITY * scales.risk
    if governing.quality.max_abs_pose_deg >= RISK_POSE_THRESHOLD_DEG:
        risk_penalty += RISK_EXTREME_POSE * scales.risk
    if any(p.quality.occlusion_flags.face_border_cutoff for p in profiles):
        risk_penalty += RISK_BORDER_CUTOFF * scales.risk
    risk_penalty = _clamp(risk_penalty, 0.0, RISK_PENALTY_MAX)

    # ── Adaptability bonus ────────────────────────────────────────────────────
    adaptability_bonus = 0.0
    for name in ADAPTABLE_GEOMETRY_KEYS:
        sev = severity_by_key.get(f"geometry.{name}", 0.0)
        adaptability_bonus += GEOMETRY_SPECS[name].weight * scales.adaptability * sev
    adaptability_bonus = _clamp(adaptability_bonus, 0.0, ADAPTABILITY_BONUS_MAX)

    raw_total = _clamp(geometry_fit - risk_penalty + adaptability_bonus, 0.0, 100.0)
    fit_score = _round_half_up(raw_total)

    # ── Warnings ──────────────────────────────────────────────────────────────
    warnings: list[str] = []
    if user_face is None:
        warnings.append(WARNING_MISSING_SELFIE)
    if not ref_face.quality.valid:
        warnings.append(WARNING_LOW_REFERENCE_QUALITY)
    if user_face is not None and not user_face.quality.valid:
        warnings.append(WARNING_LOW_SELFIE_QUALITY)

    return FitResult(
        fit_score=fit_score,
        confidence=base_confidence(user_face, ref_face),
        geometry_fit=round(geometry_fit, 2),
        risk_penalty=round(risk_penalty, 2),
        adaptability_bonus=round(adaptability_bonus, 2),
        warnings=warnings,
    )


# ── Helpers ───────────────────────────────────────────────────────────────────

def _clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


def _round_half_up(value: float) -> int:
    # Python's round() is banker's rounding; 72.5 must become 73.
    return int(math.floor(value + 0.5))
