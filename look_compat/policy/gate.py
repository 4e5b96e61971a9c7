"""
Gate policy: a stateless second opinion on whether to act on a report.

The gate runs after the engine, over the full ``Bundle``, even when the
caller already gated upstream.  Each call is a fresh evaluation; there are
no transitions between outcomes.

Checks (strict precedence)
--------------------------
1. ``hard_reject`` — reference photo problems.  All reference checks run and
   their reasons accumulate, then the evaluation returns without looking at
   the selfie or the report:
     - quality.valid is false                      REF_QUALITY_INVALID
     - face border cutoff                          REF_FACE_BORDER_CUTOFF
     - lighting score < 35                         REF_LIGHTING_TOO_LOW
     - sharpness score < 35                        REF_SHARPNESS_TOO_LOW
     - reject reason in the hard set               REF_REJECT_REASON:<code>
     - face count != 1                             REF_FACE_COUNT_NOT_ONE
2. ``soft_degrade`` — reasons accumulate:
     - no selfie                                   MISSING_SELFIE
     - selfie invalid / cutoff / hard-flagged      SELFIE_QUALITY_INVALID, ...
     - selfie pose beyond 18° on any axis          SELFIE_POSE_<AXIS>_EXCEEDED
     - selfie soft reason codes                    SELFIE_SOFT_REASON:<code>
     - report confidence "low"                     REPORT_LOW_CONFIDENCE
     - report carries warnings                     REPORT_HAS_WARNINGS
3. ``ok`` — nothing above fired; reasons is empty.

Raising vs returning
--------------------
``evaluate_gate()`` never raises for a schema-valid bundle; it always returns
a ``GateDecision``.  The caller decides what each outcome means.
"""

from __future__ import annotations

import logging

from look_compat.models.bundle import Bundle, GateDecision
from look_compat.models.face import FaceProfile
from look_compat.policy.thresholds import (
    HARD_REJECT_REASONS,
    SOFT_DEGRADE_REASONS,
    US_GATE_THRESHOLDS,
    GateThresholds,
)
from look_compat.taxonomy.face_taxonomy import Confidence, GateOutcome

logger = logging.getLogger(__name__)


def evaluate_gate(
    bundle: Bundle,
    thresholds: GateThresholds = US_GATE_THRESHOLDS,
) -> GateDecision:
    """Decide whether the report in ``bundle`` can be trusted and acted on.

    Args:
        bundle:     Both profiles plus the similarity report.
        thresholds: Numeric thresholds; defaults to the US policy.

    Returns:
        GateDecision with the outcome and its reason codes.
    """
    hard = reference_hard_reasons(bundle.ref_face_profile, thresholds)
    if hard:
        logger.info("Gate hard_reject | reasons=%s", ",".join(hard))
        return GateDecision(gate=GateOutcome.HARD_REJECT, reasons=hard)

    soft: list[str] = []
    soft.extend(selfie_soft_reasons(bundle.user_face_profile, thresholds))

    report = bundle.similarity_report
    if report.confidence == Confidence.LOW:
        soft.append("REPORT_LOW_CONFIDENCE")
    if report.warnings:
        soft.append("REPORT_HAS_WARNINGS")

    if soft:
        logger.info("Gate soft_degrade | reasons=%s", ",".join(soft))
        return GateDecision(gate=GateOutcome.SOFT_DEGRADE, reasons=soft)

    return GateDecision(gate=GateOutcome.OK, reasons=[])


def reference_hard_reasons(
    ref_face: FaceProfile,
    thresholds: GateThresholds = US_GATE_THRESHOLDS,
) -> list[str]:
    """Reason codes that make the reference photo unusable (may be empty)."""
    quality = ref_face.quality
    reasons: list[str] = []

    if not quality.valid:
        reasons.append("REF_QUALITY_INVALID")
    if quality.occlusion_flags.face_border_cutoff:
        reasons.append("REF_FACE_BORDER_CUTOFF")
    if quality.lighting_score < thresholds.min_lighting_score:
        reasons.append("REF_LIGHTING_TOO_LOW")
    if quality.sharpness_score < thresholds.min_sharpness_score:
        reasons.append("REF_SHARPNESS_TOO_LOW")
    for code in _matching_codes(quality.reject_reasons, HARD_REJECT_REASONS):
        reasons.append(f"REF_REJECT_REASON:{code}")
    if quality.face_count != thresholds.required_face_count:
        reasons.append("REF_FACE_COUNT_NOT_ONE")

    return reasons


def selfie_soft_reasons(
    user_face: FaceProfile | None,
    thresholds: GateThresholds = US_GATE_THRESHOLDS,
) -> list[str]:
    """Reason codes that degrade (but do not block) the experience."""
    if user_face is None:
        return ["MISSING_SELFIE"]

    quality = user_face.quality
    reasons: list[str] = []

    if not quality.valid:
        reasons.append("SELFIE_QUALITY_INVALID")
    if quality.occlusion_flags.face_border_cutoff:
        reasons.append("SELFIE_FACE_BORDER_CUTOFF")
    for code in _matching_codes(quality.reject_reasons, HARD_REJECT_REASONS):
        reasons.append(f"SELFIE_REJECT_REASON:{code}")
    if quality.face_count != thresholds.required_face_count:
        reasons.append("SELFIE_FACE_COUNT_NOT_ONE")

    for axis, angle, limit in (
        ("YAW", quality.pose.yaw_deg, thresholds.max_yaw_deg),
        ("PITCH", quality.pose.pitch_deg, thresholds.max_pitch_deg),
        ("ROLL", quality.pose.roll_deg, thresholds.max_roll_deg),
    ):
        if abs(angle) > limit:
            reasons.append(f"SELFIE_POSE_{axis}_EXCEEDED")

    for code in _matching_codes(quality.reject_reasons, SOFT_DEGRADE_REASONS):
        reasons.append(f"SELFIE_SOFT_REASON:{code}")

    return reasons


def _matching_codes(codes: list[str], allowed: frozenset[str]) -> list[str]:
    # Sorted and de-duplicated so reason order does not depend on upstream order.
    return sorted({c for c in codes if c in allowed})
