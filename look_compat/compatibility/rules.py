"""
US adjustment rules and fallbacks, as data.

Each ``Rule`` is an independent predicate + builder pair: it watches one
delta key, fires when that delta's severity reaches ``min_severity``, and
builds one ``Candidate`` for its impact area.  Sign-branched rules carry a
second copy variant that is used when the selfie reads *higher* than the
reference (``signed_diff >= 0``).

Candidate score
---------------
    score = base_score + severity_weight * severity

Rules are evaluated in the order of ``US_RULES``; evaluation never raises:
a missing delta reads as severity 0 and simply does not fire.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional

from look_compat.compatibility.deltas import find_delta
from look_compat.models.report import Delta
from look_compat.taxonomy.face_taxonomy import Confidence, Difficulty, ImpactArea


@dataclass(frozen=True)
class AdjustmentText:
    """User-facing copy for one adjustment."""

    title:       str
    rationale:   str
    instruction: str


@dataclass(frozen=True)
class Candidate:
    """A scored, tagged adjustment proposal for one impact area.

    Attributes:
        candidate_id: Stable id; ascending lexical order breaks score ties.
        impact_area:  Area this candidate addresses.
        score:        Rule score (higher is better).
        difficulty:   Execution difficulty tag.
        confidence:   Confidence inherited from profile quality.
        evidence:     ``"delta:<key>"`` followed by the delta's own evidence.
        text:         Copy to render.
    """

    candidate_id: str
    impact_area:  ImpactArea
    score:        float
    difficulty:   Difficulty
    confidence:   Confidence
    evidence:     tuple[str, ...]
    text:         AdjustmentText


@dataclass(frozen=True)
class Rule:
    """One independently auditable adjustment rule.

    Attributes:
        rule_id:           Stable id, becomes the candidate id.
        impact_area:       Area the rule addresses.
        delta_key:         Delta key whose severity gates the rule.
        min_severity:      Fire when severity >= this value.
        difficulty:        Difficulty tag of the resulting candidate.
        base_score:        Constant part of the candidate score.
        severity_weight:   Severity-scaled part of the candidate score.
        text:              Copy when the selfie reads lower (or the only copy).
        text_user_higher:  Copy when the selfie reads higher; ``None`` = unbranched.
    """

    rule_id:          str
    impact_area:      ImpactArea
    delta_key:        str
    min_severity:     float
    difficulty:       Difficulty
    base_score:       float
    severity_weight:  float
    text:             AdjustmentText
    text_user_higher: Optional[AdjustmentText] = None


US_RULES: tuple[Rule, ...] = (
    Rule(
        rule_id="eye_tilt_liner_direction",
        impact_area=ImpactArea.EYE,
        delta_key="geometry.eye_tilt_deg",
        min_severity=0.35,
        difficulty=Difficulty.EASY,
        base_score=10.0,
        severity_weight=10.0,
        text=AdjustmentText(
            title="Keep the wing shorter and more horizontal",
            rationale=(
                "Your eye tilt is flatter than in the reference, so a steep wing "
                "can overshoot the direction of the look."
            ),
            instruction=(
                "Start the liner at the outer third, keep the wing short, and follow "
                "the angle of the lower lash line instead of aiming upward."
            ),
        ),
        text_user_higher=AdjustmentText(
            title="Lift the wing slightly and keep it clean",
            rationale=(
                "Your eye tilt is more lifted than in the reference, so a slightly "
                "higher wing keeps the direction of the look consistent."
            ),
            instruction=(
                "Start the liner at the outer third, angle the wing a little upward, "
                "and keep the edge crisp."
            ),
        ),
    ),
    Rule(
        rule_id="eye_openness_balance",
        impact_area=ImpactArea.EYE,
        delta_key="geometry.eye_openness_ratio",
        min_severity=0.35,
        difficulty=Difficulty.MEDIUM,
        base_score=8.0,
        severity_weight=8.0,
        text=AdjustmentText(
            title="Keep liner thinner and brighten the center of the lid",
            rationale=(
                "Your eyes read less open than in the reference, and heavy liner "
                "would hide more of the visible lid space."
            ),
            instruction=(
                "Use a thin line, tightline lightly, and add a touch of highlight "
                "to the center of the lid."
            ),
        ),
        text_user_higher=AdjustmentText(
            title="Add a slightly thicker liner at the outer third",
            rationale=(
                "Your eyes read more open than in the reference, so extra definition "
                "at the outer third matches the intensity of the look."
            ),
            instruction=(
                "Thicken the liner at the outer third and blend shadow outward to "
                "carry the emphasis of the look."
            ),
        ),
    ),
    Rule(
        rule_id="lip_fullness_match",
        impact_area=ImpactArea.LIP,
        delta_key="geometry.lip_fullness_ratio",
        min_severity=0.35,
        difficulty=Difficulty.EASY,
        base_score=9.0,
        severity_weight=9.0,
        text=AdjustmentText(
            title="Add fullness with liner and gloss placement",
            rationale=(
                "Your lips read slimmer than in the reference, and placement can "
                "recreate the same sense of fullness."
            ),
            instruction=(
                "Overline very slightly at the cupid's bow and center only, then add "
                "gloss to the middle of the lips."
            ),
        ),
        text_user_higher=AdjustmentText(
            title="Keep lip edges crisp and reduce shine",
            rationale=(
                "Your lips read fuller than in the reference, so crisp edges and "
                "controlled shine keep the shape of the look."
            ),
            instruction=(
                "Line precisely along the natural border and choose a satin finish "
                "over a high-gloss center."
            ),
        ),
    ),
    Rule(
        rule_id="base_shape_balance",
        impact_area=ImpactArea.BASE,
        delta_key="categorical.face_shape",
        min_severity=0.9,
        difficulty=Difficulty.MEDIUM,
        base_score=7.0,
        severity_weight=6.0,
        text=AdjustmentText(
            title="Use placement to echo the structure of the look",
            rationale=(
                "Your face shape differs from the reference, and placement is the "
                "safest way to carry the structure of the look."
            ),
            instruction=(
                "Place blush slightly higher toward the outer cheek and keep contour "
                "subtle, building only where it supports the look."
            ),
        ),
    ),
    Rule(
        rule_id="base_jaw_soften_define",
        impact_area=ImpactArea.BASE,
        delta_key="geometry.jaw_to_cheek_ratio",
        min_severity=0.4,
        difficulty=Difficulty.EASY,
        base_score=6.0,
        severity_weight=6.0,
        text=AdjustmentText(
            title="Match the jaw definition with subtle shading",
            rationale=(
                "Jaw definition reads strongly in this look, and subtle shading can "
                "bring the perceived structure closer."
            ),
            instruction=(
                "Use a soft bronzer under the cheekbone and a light contour near the "
                "jawline, then blend until no edges remain."
            ),
        ),
    ),
)


# ── Fallbacks ─────────────────────────────────────────────────────────────────

FALLBACK_IDS: Mapping[ImpactArea, str] = MappingProxyType({
    ImpactArea.BASE: "fallback_base_thin",
    ImpactArea.EYE:  "fallback_eye_short_wing",
    ImpactArea.LIP:  "fallback_lip_finish",
})

FALLBACK_TEXT: Mapping[ImpactArea, AdjustmentText] = MappingProxyType({
    ImpactArea.BASE: AdjustmentText(
        title="Keep the base thin and build only where needed",
        rationale=(
            "A thin base preserves skin texture and makes the finish of the "
            "reference easier to match."
        ),
        instruction=(
            "Apply a light layer first, spot-conceal only where needed, then "
            "blend again."
        ),
    ),
    ImpactArea.EYE: AdjustmentText(
        title="Start liner at the outer third and keep the wing short",
        rationale=(
            "A short, controlled wing follows the direction of the look without "
            "depending on exact eye geometry."
        ),
        instruction=(
            "Start at the outer third, keep the wing short, and connect back to "
            "the lash line with a thin stroke."
        ),
    ),
    ImpactArea.LIP: AdjustmentText(
        title="Match the finish and stay within a close shade family",
        rationale=(
            "Finish, gloss or satin, changes the result more reliably than "
            "chasing an exact lip shape."
        ),
        instruction=(
            "Pick a similar finish in a close shade family and adjust intensity "
            "with a light blot if needed."
        ),
    ),
})


def evaluate_rule(
    rule: Rule,
    deltas: list[Delta],
    confidence: Confidence,
) -> Optional[Candidate]:
    """Evaluate one rule against the deltas.

    Args:
        rule:       The rule to evaluate.
        deltas:     Deltas for the pairing (selfie present).
        confidence: Confidence to stamp on the candidate.

    Returns:
        A ``Candidate`` if the rule fires, else ``None``.
    """
    delta = find_delta(deltas, rule.delta_key)
    severity = _clamp01(delta.severity) if delta is not None else 0.0
    if delta is None or severity < rule.min_severity:
        return None

    text = rule.text
    if rule.text_user_higher is not None:
        signed_diff = delta.signed_diff if delta.signed_diff is not None else 0.0
        if signed_diff >= 0:
            text = rule.text_user_higher

    return Candidate(
        candidate_id=rule.rule_id,
        impact_area=rule.impact_area,
        score=round(rule.base_score + rule.severity_weight * severity, 4),
        difficulty=rule.difficulty,
        confidence=confidence,
        evidence=(f"delta:{rule.delta_key}", *delta.evidence),
        text=text,
    )


def build_rule_candidates(
    deltas: list[Delta],
    confidence: Confidence,
    rules: tuple[Rule, ...] = US_RULES,
) -> list[Candidate]:
    """Evaluate every rule in order and collect the candidates that fired."""
    candidates: list[Candidate] = []
    for rule in rules:
        candidate = evaluate_rule(rule, deltas, confidence)
        if candidate is not None:
            candidates.append(candidate)
    return candidates


def fallback_candidate(area: ImpactArea, confidence: Confidence) -> Candidate:
    """The fixed safe adjustment for ``area``."""
    return Candidate(
        candidate_id=FALLBACK_IDS[area],
        impact_area=area,
        score=1.0,
        difficulty=Difficulty.EASY,
        confidence=confidence,
        evidence=(f"fallback:{area}",),
        text=FALLBACK_TEXT[area],
    )


def _clamp01(value: float) -> float:
    return max(0.0, min(1.0, value))
