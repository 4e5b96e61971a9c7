"""
Closed vocabularies shared by the compatibility engine and the gate policy.

Every literal that crosses a module boundary (preference modes, confidence
levels, impact areas, gate outcomes) is defined here once, as a ``StrEnum``,
so that models, rules, and tests agree on spelling.

Usage example::

    from look_compat.taxonomy.face_taxonomy import ImpactArea, PreferenceMode

    area = ImpactArea.EYE
    mode = PreferenceMode.STRUCTURE

This module has NO imports from any other ``look_compat`` package.
"""

from enum import StrEnum


class ProfileSource(StrEnum):
    """Which photo a face profile was extracted from."""

    REFERENCE = "reference"
    """The look the user wants to recreate."""

    SELFIE = "selfie"
    """The user's own face."""


class PreferenceMode(StrEnum):
    """User-selectable scoring lens."""

    STRUCTURE = "structure"
    """Geometry matters most; mismatches are penalised hardest."""

    VIBE = "vibe"
    """Overall feel matters most; adaptable features earn more credit."""

    EASE = "ease"
    """Prefer techniques that are easy to execute."""


class Confidence(StrEnum):
    """Confidence level attached to a report or an adjustment."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class ImpactArea(StrEnum):
    """The three zones every report must address, in output order."""

    BASE = "base"
    EYE = "eye"
    LIP = "lip"


# Output order of adjustments: base → eye → lip.
IMPACT_AREA_ORDER: tuple[ImpactArea, ...] = (
    ImpactArea.BASE,
    ImpactArea.EYE,
    ImpactArea.LIP,
)


class Difficulty(StrEnum):
    """How hard an adjustment is to execute."""

    EASY = "easy"
    MEDIUM = "medium"


class GateOutcome(StrEnum):
    """Terminal states of the gate policy, most severe first."""

    HARD_REJECT = "hard_reject"
    """Reference photo cannot be trusted; stop downstream processing."""

    SOFT_DEGRADE = "soft_degrade"
    """Usable, but the experience should be downgraded or caveated."""

    OK = "ok"
