"""
Delta computation: selfie vs. reference, one ``Delta`` per tracked attribute.

Output order is fixed: the eight geometry keys in declaration order, then the
three categorical keys.  Downstream tie-breaks (top deltas, reason citations)
rely on this order.

Geometry
--------
    signed_diff = user - ref            (rounded to 6 dp before the ramp)
    severity    = ramp(|signed_diff|, soft, hard)

Categorical
-----------
    severity = 0 on exact label match, else the per-key mismatch severity.

No selfie
---------
Every attribute gets a fixed "unknown" severity (0.25 geometry, 0.35
categorical), ``user_value=None`` and evidence ``["missing:user_face_profile"]``.

Pure function; does not validate profiles.
"""

from __future__ import annotations

from typing import Optional

from look_compat.compatibility.tables import (
    CATEGORICAL_SPECS,
    GEOMETRY_SPECS,
    MISSING_SELFIE_CATEGORICAL_SEVERITY,
    MISSING_SELFIE_EVIDENCE,
    MISSING_SELFIE_GEOMETRY_SEVERITY,
)
from look_compat.models.face import FaceProfile
from look_compat.models.report import Delta


def severity_ramp(abs_diff: float, soft: float, hard: float) -> float:
    """Map an absolute difference onto [0, 1] with a piecewise-linear ramp.

    Args:
        abs_diff: Absolute difference between user and reference.
        soft:     Tolerance below which severity is 0.
        hard:     Difference at which severity saturates at 1.

    Returns:
        Severity rounded to 4 decimal places.
    """
    if abs_diff <= soft:
        return 0.0
    if abs_diff >= hard:
        return 1.0
    return round(_clamp01((abs_diff - soft) / (hard - soft)), 4)


def compute_deltas(
    user_face: Optional[FaceProfile],
    ref_face: FaceProfile,
) -> list[Delta]:
    """Compare a selfie profile against a reference profile.

    Args:
        user_face: Selfie profile, or ``None`` when the user supplied none.
        ref_face:  Reference profile.

    Returns:
        Eleven ``Delta`` objects in fixed order (8 geometry, 3 categorical).
    """
    deltas: list[Delta] = []

    for name, spec in GEOMETRY_SPECS.items():
        key = f"geometry.{name}"
        ref_value = float(getattr(ref_face.geometry, name))

        if user_face is None:
            deltas.append(_missing_delta(key, ref_value, MISSING_SELFIE_GEOMETRY_SEVERITY))
            continue

        user_value = float(getattr(user_face.geometry, name))
        signed_diff = round(user_value - ref_value, 6)
        severity = severity_ramp(abs(signed_diff), spec.soft, spec.hard)

        if severity == 0.0:
            explanation = "within_tolerance"
        elif signed_diff < 0:
            explanation = "user_lower"
        else:
            explanation = "user_higher"

        deltas.append(
            Delta(
                key=key,
                user_value=user_value,
                ref_value=ref_value,
                severity=severity,
                signed_diff=signed_diff,
                explanation_key=explanation,
                evidence=_default_evidence("geometry", name),
            )
        )

    for name, spec in CATEGORICAL_SPECS.items():
        key = f"categorical.{name}"
        ref_label = getattr(ref_face.categorical, name)

        if user_face is None:
            deltas.append(_missing_delta(key, ref_label, MISSING_SELFIE_CATEGORICAL_SEVERITY))
            continue

        user_label = getattr(user_face.categorical, name)
        matched = user_label == ref_label
        deltas.append(
            Delta(
                key=key,
                user_value=user_label,
                ref_value=ref_label,
                severity=0.0 if matched else spec.mismatch_severity,
                signed_diff=None,
                explanation_key="category_match" if matched else "category_mismatch",
                evidence=_default_evidence("categorical", name),
            )
        )

    return deltas


def find_delta(deltas: list[Delta], key: str) -> Optional[Delta]:
    """Return the delta with ``key``, or ``None``."""
    return next((d for d in deltas if d.key == key), None)


# ── Helpers ───────────────────────────────────────────────────────────────────

def _missing_delta(key: str, ref_value: float | str, severity: float) -> Delta:
    return Delta(
        key=key,
        user_value=None,
        ref_value=ref_value,
        severity=severity,
        signed_diff=None,
        explanation_key="missing_selfie",
        evidence=[MISSING_SELFIE_EVIDENCE],
    )


def _default_evidence(group: str, name: str) -> list[str]:
    return [f"user.{group}.{name}", f"ref.{group}.{name}"]


def _clamp01(value: float) -> float:
    return max(0.0, min(1.0, value))
