"""
Adjustment selection: exactly one adjustment per impact area.

Usage flow
----------
1. No selfie -> the three fallbacks (confidence "low"), rules skipped.
2. Otherwise ``build_rule_candidates()`` over ``US_RULES``.
3. Per area, ``pick_best_candidate()``:
     - highest score wins; ties broken by candidate_id ascending;
     - under preference mode "ease", the best "easy" candidate wins if any.
4. Areas with no candidate get their fallback (confidence "medium").

The result is always ordered base → eye → lip regardless of rule order.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from look_compat.compatibility.rules import (
    Candidate,
    build_rule_candidates,
    fallback_candidate,
)
from look_compat.compatibility.scorer import base_confidence
from look_compat.models.face import FaceProfile
from look_compat.models.report import Adjustment, Delta
from look_compat.taxonomy.face_taxonomy import (
    IMPACT_AREA_ORDER,
    Confidence,
    Difficulty,
    ImpactArea,
    PreferenceMode,
)

WARNING_FALLBACK_NO_SELFIE = (
    "General-purpose adjustments were used because no selfie was provided."
)


@dataclass(frozen=True)
class SelectionResult:
    """Output of the adjustment selector.

    Attributes:
        adjustments:         Exactly three, ordered base, eye, lip.
        fallback_areas:      Areas that received their fallback adjustment.
        warnings:            Non-fatal caveats about fallback use.
    """

    adjustments:    list[Adjustment]
    fallback_areas: list[ImpactArea] = field(default_factory=list)
    warnings:       list[str] = field(default_factory=list)


def pick_best_candidate(
    candidates: list[Candidate],
    preference_mode: PreferenceMode,
) -> Optional[Candidate]:
    """Choose one candidate from a single area's list.

    Args:
        candidates:      Candidates for one impact area.
        preference_mode: Under ``"ease"`` the best easy candidate is preferred.

    Returns:
        The chosen candidate, or ``None`` if the list is empty.
    """
    if not candidates:
        return None
    # Primary: score descending. Secondary: candidate_id ascending (stable).
    ranked = sorted(candidates, key=lambda c: (-c.score, c.candidate_id))
    if preference_mode == PreferenceMode.EASE:
        easy = next((c for c in ranked if c.difficulty == Difficulty.EASY), None)
        if easy is not None:
            return easy
    return ranked[0]


def select_adjustments(
    preference_mode: PreferenceMode,
    user_face: Optional[FaceProfile],
    ref_face: FaceProfile,
    deltas: list[Delta],
) -> SelectionResult:
    """Produce exactly three adjustments, one per impact area.

    Args:
        preference_mode: Scoring lens; affects difficulty preference only.
        user_face:       Selfie profile, or ``None``.
        ref_face:        Reference profile.
        deltas:          Output of ``compute_deltas()`` for the same pair.

    Returns:
        SelectionResult with adjustments ordered base, eye, lip.
    """
    if user_face is None:
        chosen = [fallback_candidate(area, Confidence.LOW) for area in IMPACT_AREA_ORDER]
        return SelectionResult(
            adjustments=[_to_adjustment(c) for c in chosen],
            fallback_areas=list(IMPACT_AREA_ORDER),
            warnings=[WARNING_FALLBACK_NO_SELFIE],
        )

    confidence = base_confidence(user_face, ref_face)
    candidates = build_rule_candidates(deltas, confidence)

    by_area: dict[ImpactArea, list[Candidate]] = {area: [] for area in IMPACT_AREA_ORDER}
    for candidate in candidates:
        by_area[candidate.impact_area].append(candidate)

    chosen: list[Candidate] = []
    fallback_areas: list[ImpactArea] = []
    for area in IMPACT_AREA_ORDER:
        best = pick_best_candidate(by_area[area], PreferenceMode(preference_mode))
        if best is None:
            best = fallback_candidate(area, Confidence.MEDIUM)
            fallback_areas.append(area)
        chosen.append(best)

    warnings: list[str] = []
    if fallback_areas:
        warnings.append(
            "General-purpose adjustments were used for: "
            f"{', '.join(str(a) for a in fallback_areas)}."
        )

    return SelectionResult(
        adjustments=[_to_adjustment(c) for c in chosen],
        fallback_areas=fallback_areas,
        warnings=warnings,
    )


def _to_adjustment(candidate: Candidate) -> Adjustment:
    return Adjustment(
        impact_area=candidate.impact_area,
        title=candidate.text.title,
        rationale=candidate.text.rationale,
        instruction=candidate.text.instruction,
        confidence=candidate.confidence,
        evidence=list(candidate.evidence),
    )
