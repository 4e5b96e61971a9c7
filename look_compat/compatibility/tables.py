"""
Compiled-in policy tables for the US compatibility engine.

Everything here is read-only for the life of the process: per-attribute
soft/hard thresholds and weights, categorical mismatch severities, preference
mode multipliers, fit-score constants, and the static report metadata.

The numbers are product-tuned.  They are kept as exact named constants so
that outputs stay byte-identical across releases; change them only together
with a bump of ``ENGINE_VERSION``.

Severity ramp (geometry)
------------------------
    |diff| <= soft          -> 0
    soft < |diff| < hard    -> (|diff| - soft) / (hard - soft)
    |diff| >= hard          -> 1
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

from look_compat.taxonomy.face_taxonomy import ImpactArea, PreferenceMode

ENGINE_VERSION = "compat-us-1.0.0"
MARKET = "US"


@dataclass(frozen=True)
class GeometrySpec:
    """Tolerance and weight for one geometry attribute.

    Attributes:
        soft:   |diff| at or below this reads as "same".
        hard:   |diff| at or above this reads as a full mismatch.
        weight: Contribution to geometry fit / adaptability (6–10).
        label:  Human-readable name used in reason copy.
    """

    soft: float
    hard: float
    weight: float
    label: str


# Declaration order is output order.
GEOMETRY_SPECS: Mapping[str, GeometrySpec] = MappingProxyType({
    "face_aspect":        GeometrySpec(soft=0.05, hard=0.20, weight=10.0, label="face length-to-width balance"),
    "jaw_to_cheek_ratio": GeometrySpec(soft=0.04, hard=0.15, weight=9.0,  label="jaw-to-cheek width"),
    "chin_length_ratio":  GeometrySpec(soft=0.03, hard=0.10, weight=7.0,  label="chin length"),
    "midface_ratio":      GeometrySpec(soft=0.03, hard=0.10, weight=7.0,  label="midface length"),
    "eye_spacing_ratio":  GeometrySpec(soft=0.02, hard=0.08, weight=8.0,  label="eye spacing"),
    "eye_tilt_deg":       GeometrySpec(soft=3.0,  hard=12.0, weight=8.0,  label="eye tilt"),
    "eye_openness_ratio": GeometrySpec(soft=0.03, hard=0.10, weight=6.0,  label="eye openness"),
    "lip_fullness_ratio": GeometrySpec(soft=0.04, hard=0.14, weight=6.0,  label="lip fullness"),
})

GEOMETRY_KEYS: tuple[str, ...] = tuple(GEOMETRY_SPECS)

# Keys whose mismatch makeup can compensate for; they earn adaptability credit.
ADAPTABLE_GEOMETRY_KEYS: tuple[str, ...] = (
    "eye_tilt_deg",
    "eye_openness_ratio",
    "lip_fullness_ratio",
)


@dataclass(frozen=True)
class CategoricalSpec:
    """Mismatch severity and display label for one categorical attribute."""

    mismatch_severity: float
    label: str


CATEGORICAL_SPECS: Mapping[str, CategoricalSpec] = MappingProxyType({
    "face_shape": CategoricalSpec(mismatch_severity=1.0, label="face shape"),
    "eye_type":   CategoricalSpec(mismatch_severity=0.8, label="eye shape"),
    "lip_type":   CategoricalSpec(mismatch_severity=0.7, label="lip shape"),
})

CATEGORICAL_KEYS: tuple[str, ...] = tuple(CATEGORICAL_SPECS)

# Severity assigned to every attribute when no selfie was supplied.
MISSING_SELFIE_GEOMETRY_SEVERITY = 0.25
MISSING_SELFIE_CATEGORICAL_SEVERITY = 0.35
MISSING_SELFIE_EVIDENCE = "missing:user_face_profile"


@dataclass(frozen=True)
class ModeScales:
    """Per-mode multipliers for the three fit-score components."""

    geometry: float
    risk: float
    adaptability: float


# structure is at least as harsh as vibe on every component, so for equal
# severities structure never scores above vibe.
MODE_SCALES: Mapping[PreferenceMode, ModeScales] = MappingProxyType({
    PreferenceMode.STRUCTURE: ModeScales(geometry=1.15, risk=1.00, adaptability=0.80),
    PreferenceMode.VIBE:      ModeScales(geometry=0.90, risk=0.90, adaptability=1.20),
    PreferenceMode.EASE:      ModeScales(geometry=0.95, risk=1.10, adaptability=1.00),
})

# ── Fit score constants ──────────────────────────────────────────────────────

GEOMETRY_FIT_BASE = 60.0
GEOMETRY_FIT_MAX = 60.0
RISK_PENALTY_MAX = 25.0
ADAPTABILITY_BONUS_MAX = 15.0

RISK_MISSING_SELFIE = 10.0
RISK_INVALID_QUALITY = 8.0
RISK_EXTREME_POSE = 6.0
RISK_BORDER_CUTOFF = 6.0
RISK_POSE_THRESHOLD_DEG = 18.0

# ── Reason tiers ─────────────────────────────────────────────────────────────

GOOD_FIT_MIN_SCORE = 75
WORKABLE_FIT_MIN_SCORE = 55

# ── Static report metadata ───────────────────────────────────────────────────

RENDER_HINTS: Mapping[ImpactArea, tuple[str, ...]] = MappingProxyType({
    ImpactArea.BASE: ("base_finish", "contour_placement"),
    ImpactArea.EYE:  ("liner_direction", "liner_thickness"),
    ImpactArea.LIP:  ("lip_finish", "lip_line"),
})

MODE_OPTIONS: tuple[tuple[PreferenceMode, str, str], ...] = (
    (
        PreferenceMode.STRUCTURE,
        "Structure",
        "Prioritise matching the reference proportions and placement.",
    ),
    (
        PreferenceMode.VIBE,
        "Vibe",
        "Prioritise the overall feel of the look over exact geometry.",
    ),
    (
        PreferenceMode.EASE,
        "Ease",
        "Prioritise techniques that are quick and forgiving to apply.",
    ),
)


def label_for(delta_key: str) -> str:
    """Return the display label for a ``"<group>.<field>"`` delta key."""
    _, _, name = delta_key.partition(".")
    if name in GEOMETRY_SPECS:
        return GEOMETRY_SPECS[name].label
    if name in CATEGORICAL_SPECS:
        return CATEGORICAL_SPECS[name].label
    return name.replace("_", " ")
