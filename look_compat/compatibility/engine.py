"""
US compatibility engine — the single entry point.

How it works
------------
1. Enforce market preconditions: the call market and every supplied
   profile's market must be ``"US"``.  A mismatch is an integration bug and
   raises ``MarketMismatchError``; it is never downgraded to a warning.
2. ``compute_deltas()`` once; the scorer and the selector share the list.
3. ``score_fit()`` and ``select_adjustments()`` (independent of each other).
4. ``build_reasons()``.
5. Assemble top deltas (5 most severe, ties in computation order), render
   hints for the areas that received adjustments, and static mode metadata.
6. Validate through ``SimilarityReport``.  A validation failure raises
   ``ReportSchemaError``; a malformed report is never returned or repaired.

Everything else that can go wrong with the input (missing selfie, poor
quality, no rule match, out-of-range geometry) is carried as data (severity,
confidence, fallbacks, warnings) and judged later by the gate policy.

The engine is synchronous, stateless, and deterministic: identical input
produces a byte-identical ``model_dump_json()``.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from pydantic import ValidationError

from look_compat.compatibility.deltas import compute_deltas
from look_compat.compatibility.reasons import build_reasons
from look_compat.compatibility.scorer import score_fit
from look_compat.compatibility.selector import select_adjustments
from look_compat.compatibility.tables import ENGINE_VERSION, MARKET, MODE_OPTIONS, RENDER_HINTS
from look_compat.models.face import FaceProfile
from look_compat.models.report import MAX_TOP_DELTAS, Delta, SimilarityReport
from look_compat.taxonomy.face_taxonomy import PreferenceMode

logger = logging.getLogger(__name__)


# ── Custom exceptions ─────────────────────────────────────────────────────────


class MarketMismatchError(ValueError):
    """Raised when the call or a profile targets a market other than US.

    Attributes:
        field: Where the bad market tag was found (e.g. ``"ref_face_profile.market"``).
        value: The offending market tag.
    """

    def __init__(self, field: str, value: str) -> None:
        self.field = field
        self.value = value
        super().__init__(
            f"Market mismatch on '{field}': expected '{MARKET}', got '{value}'.  "
            "This engine only serves the US market."
        )


class ReportSchemaError(RuntimeError):
    """Raised when the assembled report fails its own schema.

    This is a programming error in the engine, not a data-quality condition.
    The underlying ``pydantic.ValidationError`` is chained as ``__cause__``.
    """

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"Assembled similarity report failed validation: {detail}")


# ── Public functions ──────────────────────────────────────────────────────────


def run_compatibility_engine(
    preference_mode: PreferenceMode | str,
    ref_face_profile: FaceProfile,
    user_face_profile: Optional[FaceProfile] = None,
    market: str = MARKET,
    locale: str = "en",
) -> SimilarityReport:
    """Score a reference/selfie pairing and choose three adjustments.

    Args:
        preference_mode:   ``"structure"``, ``"vibe"`` or ``"ease"``.
        ref_face_profile:  Reference profile (required).
        user_face_profile: Selfie profile, or ``None`` when not supplied.
        market:            Call market; must be ``"US"``.
        locale:            Passed through uninterpreted.

    Returns:
        A schema-valid ``SimilarityReport``.

    Raises:
        MarketMismatchError: If the call or any profile market is not ``"US"``.
        ReportSchemaError:   If the assembled report fails validation.
    """
    _assert_market(market, ref_face_profile, user_face_profile)
    mode = PreferenceMode(preference_mode)

    deltas = compute_deltas(user_face_profile, ref_face_profile)
    fit = score_fit(mode, user_face_profile, ref_face_profile, deltas)
    selection = select_adjustments(mode, user_face_profile, ref_face_profile, deltas)
    reasons = build_reasons(fit.fit_score, deltas, user_missing=user_face_profile is None)

    warnings = _merge_warnings(fit.warnings, selection.warnings)
    areas = [adj.impact_area for adj in selection.adjustments]

    payload: dict[str, Any] = {
        "version": "v0",
        "schema_version": "v0",
        "engine_version": ENGINE_VERSION,
        "market": MARKET,
        "preference_mode": mode,
        "confidence": fit.confidence,
        "fit_score": fit.fit_score,
        "score_breakdown": {
            "geometry_fit": fit.geometry_fit,
            "risk_penalty": fit.risk_penalty,
            "adaptability_bonus": fit.adaptability_bonus,
        },
        "reasons": reasons,
        "top_deltas": select_top_deltas(deltas),
        "adjustments": selection.adjustments,
        "render_hints": {area: list(RENDER_HINTS[area]) for area in areas},
        "user_controls": {
            "modes": [
                {"mode": m, "label": label, "description": description}
                for m, label, description in MODE_OPTIONS
            ],
            "default_mode": "structure",
        },
        "warnings": warnings or None,
    }

    try:
        report = SimilarityReport.model_validate(payload)
    except ValidationError as exc:
        logger.error("Similarity report failed schema validation: %s", exc)
        raise ReportSchemaError(str(exc)) from exc

    logger.debug(
        "Compatibility run | mode=%s | fit=%d | confidence=%s | fallback_areas=%s | locale=%s",
        mode, report.fit_score, report.confidence,
        ",".join(str(a) for a in selection.fallback_areas) or "-", locale,
    )
    return report


def select_top_deltas(deltas: list[Delta], n: int = MAX_TOP_DELTAS) -> list[Delta]:
    """Return the ``n`` most severe deltas, descending.

    ``sorted`` is stable, so equal severities keep computation order.
    """
    return sorted(deltas, key=lambda d: -d.severity)[:n]


# ── Helpers ───────────────────────────────────────────────────────────────────

def _assert_market(
    market: str,
    ref_face: FaceProfile,
    user_face: Optional[FaceProfile],
) -> None:
    checks = [("market", market), ("ref_face_profile.market", ref_face.market)]
    if user_face is not None:
        checks.append(("user_face_profile.market", user_face.market))

    for field, value in checks:
        if value != MARKET:
            logger.error("Refusing compatibility run: %s=%r (expected %r)", field, value, MARKET)
            raise MarketMismatchError(field, value)


def _merge_warnings(*groups: list[str]) -> list[str]:
    merged: list[str] = []
    for group in groups:
        for warning in group:
            if warning not in merged:
                merged.append(warning)
    return merged
