"""
Request, bundle, and gate decision models.

``CompatibilityRequest`` is the engine's input envelope.  ``Bundle`` packages
both profiles with the finished report for the gate policy, and
``GateDecision`` is the gate's verdict.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from look_compat.models.face import FaceProfile
from look_compat.models.report import SimilarityReport
from look_compat.taxonomy.face_taxonomy import GateOutcome, PreferenceMode


class CompatibilityRequest(BaseModel):
    """Input to one compatibility run.

    ``market`` is checked by the orchestrator, not here, so that a mismatch
    surfaces as a configuration error instead of a validation error.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    market: str = "US"
    locale: str
    preference_mode: PreferenceMode
    user_face_profile: Optional[FaceProfile] = None
    ref_face_profile: FaceProfile

    @field_validator("locale")
    @classmethod
    def validate_locale(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("locale must not be empty.")
        return v


class Bundle(BaseModel):
    """Both profiles plus the report, as consumed by the gate policy."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    schema_version: Literal["v0"] = "v0"
    market: Literal["US"] = "US"
    locale: str
    preference_mode: PreferenceMode
    created_at: datetime
    user_face_profile: Optional[FaceProfile] = None
    ref_face_profile: FaceProfile
    similarity_report: SimilarityReport


class GateDecision(BaseModel):
    """Verdict of the gate policy.

    Attributes:
        gate:    ``"ok"``, ``"soft_degrade"`` or ``"hard_reject"``.
        reasons: Machine-readable reason codes; empty only when ``gate == "ok"``.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    gate: GateOutcome
    reasons: list[str] = []

    @model_validator(mode="after")
    def validate_reasons_present(self) -> "GateDecision":
        if self.gate != GateOutcome.OK and not self.reasons:
            raise ValueError(f"A '{self.gate}' decision must carry at least one reason.")
        return self
