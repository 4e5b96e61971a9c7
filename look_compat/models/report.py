"""
Similarity report models — the engine's output contract.

``SimilarityReport`` is the only thing the compatibility engine returns.  The
orchestrator assembles a plain dict and validates it through this model; a
validation failure there is a programming error, never a data-quality
condition.

Shape invariants enforced here
------------------------------
- exactly 3 reasons;
- exactly 3 adjustments, one per impact area, ordered base → eye → lip;
- at most 5 top deltas, severity non-increasing;
- score breakdown components within their caps (60 / 25 / 15);
- no banned identity/resemblance term in any free-text field.

All models are frozen.
"""

from __future__ import annotations

import re
from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from look_compat.policy.content import find_banned_terms, report_free_text
from look_compat.taxonomy.face_taxonomy import (
    IMPACT_AREA_ORDER,
    Confidence,
    ImpactArea,
    PreferenceMode,
)

ENGINE_VERSION_PATTERN = re.compile(r"^compat-us-\d+\.\d+\.\d+$")

MAX_TOP_DELTAS = 5


def _require_text(v: str) -> str:
    if not v or not v.strip():
        raise ValueError("Text fields must not be empty.")
    return v


def _require_evidence(v: list[str]) -> list[str]:
    if not v:
        raise ValueError("evidence must contain at least one entry.")
    return v


class Delta(BaseModel):
    """One attribute comparison between the selfie and the reference.

    Attributes:
        key:             Attribute key, e.g. ``"geometry.eye_tilt_deg"``.
        user_value:      Selfie value, or ``None`` when no selfie was supplied.
        ref_value:       Reference value.
        severity:        How far past tolerance the difference sits, 0–1.
        signed_diff:     ``user - ref`` for geometry keys; ``None`` otherwise.
        explanation_key: Short tag describing the comparison outcome.
        evidence:        Paths of the fields that were compared.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    key: str
    user_value: Union[float, str, None]
    ref_value: Union[float, str]
    severity: float
    signed_diff: Optional[float] = None
    explanation_key: str
    evidence: list[str]

    @field_validator("severity")
    @classmethod
    def validate_severity(cls, v: float) -> float:
        if not 0.0 <= v <= 1.0:
            raise ValueError(f"severity must be in [0, 1], got {v}.")
        return v

    @field_validator("key", "explanation_key")
    @classmethod
    def validate_text(cls, v: str) -> str:
        return _require_text(v)

    @field_validator("evidence")
    @classmethod
    def validate_evidence(cls, v: list[str]) -> list[str]:
        return _require_evidence(v)


class Reason(BaseModel):
    """One narrative reason shown to the user."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    title: str
    body: str
    evidence: list[str]

    @field_validator("title", "body")
    @classmethod
    def validate_text(cls, v: str) -> str:
        return _require_text(v)

    @field_validator("evidence")
    @classmethod
    def validate_evidence(cls, v: list[str]) -> list[str]:
        return _require_evidence(v)


class Adjustment(BaseModel):
    """One recommendation for exactly one impact area.

    Attributes:
        impact_area: ``"base"``, ``"eye"`` or ``"lip"``.
        title:       Short imperative headline.
        rationale:   Why this adjustment helps for this pairing.
        instruction: What to actually do.
        confidence:  How much the engine trusts the underlying signal.
        evidence:    Delta keys / paths (or ``"fallback:<area>"``) supporting it.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    impact_area: ImpactArea
    title: str
    rationale: str
    instruction: str
    confidence: Confidence
    evidence: list[str]

    @field_validator("title", "rationale", "instruction")
    @classmethod
    def validate_text(cls, v: str) -> str:
        return _require_text(v)

    @field_validator("evidence")
    @classmethod
    def validate_evidence(cls, v: list[str]) -> list[str]:
        return _require_evidence(v)


class ScoreBreakdown(BaseModel):
    """Components of the fit score."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    geometry_fit: float
    risk_penalty: float
    adaptability_bonus: float

    @model_validator(mode="after")
    def validate_caps(self) -> "ScoreBreakdown":
        for name, cap in (
            ("geometry_fit", 60.0),
            ("risk_penalty", 25.0),
            ("adaptability_bonus", 15.0),
        ):
            value = getattr(self, name)
            if not 0.0 <= value <= cap:
                raise ValueError(f"{name} must be in [0, {cap:g}], got {value}.")
        return self


class ModeOption(BaseModel):
    """Static description of one preference mode for the UI."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    mode: PreferenceMode
    label: str
    description: str


class UserControls(BaseModel):
    """Static preference-mode metadata attached to every report."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    modes: list[ModeOption]
    default_mode: Literal["structure"] = "structure"

    @field_validator("modes")
    @classmethod
    def validate_modes(cls, v: list[ModeOption]) -> list[ModeOption]:
        if len(v) < 3:
            raise ValueError(f"modes must list at least 3 options, got {len(v)}.")
        return v


class SimilarityReport(BaseModel):
    """Deterministic compatibility report for one reference/selfie pairing."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    version: Literal["v0"] = "v0"
    schema_version: Literal["v0"] = "v0"
    engine_version: str
    market: Literal["US"]
    preference_mode: PreferenceMode
    confidence: Confidence
    fit_score: int
    score_breakdown: ScoreBreakdown
    reasons: list[Reason]
    top_deltas: list[Delta]
    adjustments: list[Adjustment]
    render_hints: dict[ImpactArea, list[str]]
    user_controls: UserControls
    warnings: Optional[list[str]] = None

    @field_validator("engine_version")
    @classmethod
    def validate_engine_version(cls, v: str) -> str:
        if not ENGINE_VERSION_PATTERN.match(v):
            raise ValueError(
                f"engine_version must look like 'compat-us-X.Y.Z', got '{v}'."
            )
        return v

    @field_validator("fit_score")
    @classmethod
    def validate_fit_score(cls, v: int) -> int:
        if not 0 <= v <= 100:
            raise ValueError(f"fit_score must be in [0, 100], got {v}.")
        return v

    @field_validator("reasons")
    @classmethod
    def validate_reasons(cls, v: list[Reason]) -> list[Reason]:
        if len(v) != 3:
            raise ValueError(f"reasons must contain exactly 3 entries, got {len(v)}.")
        return v

    @field_validator("top_deltas")
    @classmethod
    def validate_top_deltas(cls, v: list[Delta]) -> list[Delta]:
        if len(v) > MAX_TOP_DELTAS:
            raise ValueError(
                f"top_deltas must contain at most {MAX_TOP_DELTAS} entries, got {len(v)}."
            )
        for prev, cur in zip(v, v[1:]):
            if cur.severity > prev.severity:
                raise ValueError("top_deltas must be ordered by severity, descending.")
        return v

    @field_validator("adjustments")
    @classmethod
    def validate_adjustments(cls, v: list[Adjustment]) -> list[Adjustment]:
        areas = tuple(a.impact_area for a in v)
        if areas != IMPACT_AREA_ORDER:
            raise ValueError(
                "adjustments must contain exactly one entry per impact area, "
                f"ordered base, eye, lip; got {[str(a) for a in areas]}."
            )
        return v

    @model_validator(mode="after")
    def validate_content_policy(self) -> "SimilarityReport":
        hits = find_banned_terms(report_free_text(self))
        if hits:
            raise ValueError(f"Report text contains banned terms: {sorted(set(hits))}.")
        return self
