"""
Narrative reasons: always exactly three.

1. Overall verdict, tiered by fit score (>= 75 good, >= 55 workable, else careful).
2. Adjustability framing that cites the two most severe deltas.
3. A fixed statement that three actionable adjustments follow.

Copy never describes the user in terms of anyone else's identity; the report
model re-checks this on validation.
"""

from __future__ import annotations

from look_compat.compatibility.tables import (
    GOOD_FIT_MIN_SCORE,
    WORKABLE_FIT_MIN_SCORE,
    label_for,
)
from look_compat.models.report import Delta, Reason

_VERDICTS: tuple[tuple[int, str, str], ...] = (
    (
        GOOD_FIT_MIN_SCORE,
        "Good fit",
        "This look translates well to your features with small tweaks.",
    ),
    (
        WORKABLE_FIT_MIN_SCORE,
        "Workable fit",
        "This look is workable once a few placements are adapted.",
    ),
    (
        0,
        "Needs careful adjustment",
        "This look needs careful adjustment to translate to your features.",
    ),
)


def build_reasons(
    fit_score: int,
    deltas: list[Delta],
    user_missing: bool,
) -> list[Reason]:
    """Build the three report reasons.

    Args:
        fit_score:    Final fit score, 0–100.
        deltas:       All deltas, in fixed computation order.
        user_missing: True when no selfie was supplied.

    Returns:
        Exactly three ``Reason`` objects.
    """
    return [
        _verdict_reason(fit_score, user_missing),
        _adaptability_reason(deltas, user_missing),
        Reason(
            title="Three adjustments to try",
            body=(
                "Below are three actionable adjustments, one each for base, "
                "eyes and lips."
            ),
            evidence=["adjustments:base", "adjustments:eye", "adjustments:lip"],
        ),
    ]


def most_severe(deltas: list[Delta], n: int = 2) -> list[Delta]:
    """Top-``n`` deltas by severity; ties keep computation order."""
    return sorted(deltas, key=lambda d: -d.severity)[:n]


def severity_word(severity: float) -> str:
    if severity >= 0.67:
        return "strong"
    if severity >= 0.34:
        return "moderate"
    if severity > 0.0:
        return "slight"
    return "none"


# ── Helpers ───────────────────────────────────────────────────────────────────

def _verdict_reason(fit_score: int, user_missing: bool) -> Reason:
    title, sentence = next(
        (t, s) for floor, t, s in _VERDICTS if fit_score >= floor
    )
    body = f"Fit score {fit_score}/100. {sentence}"
    if user_missing:
        body += " This estimate is based on the reference photo alone."
    return Reason(
        title=title,
        body=body,
        evidence=[
            "score:fit_score",
            "score:geometry_fit",
            "score:risk_penalty",
            "score:adaptability_bonus",
        ],
    )


def _adaptability_reason(deltas: list[Delta], user_missing: bool) -> Reason:
    top = most_severe(deltas, 2)
    evidence = [f"delta:{d.key}" for d in top] or ["delta:none"]
    labels = [label_for(d.key) for d in top]

    if user_missing:
        body = (
            f"Without a selfie, {' and '.join(labels)} cannot be measured directly, "
            "so the guidance stays general and easy to adapt."
        )
    elif not top or top[0].severity == 0.0:
        body = (
            "Your measured proportions sit within tolerance of the reference, "
            "so the look needs little structural adaptation."
        )
    elif len(top) < 2 or top[1].severity == 0.0:
        body = (
            f"The largest difference is in {labels[0]} ({severity_word(top[0].severity)}); "
            "everything else sits within tolerance, and technique can bridge the gap."
        )
    else:
        body = (
            f"The largest differences are in {labels[0]} ({severity_word(top[0].severity)}) "
            f"and {labels[1]} ({severity_word(top[1].severity)}); both can be adapted "
            "with placement and technique."
        )

    return Reason(title="What to adapt", body=body, evidence=evidence)
