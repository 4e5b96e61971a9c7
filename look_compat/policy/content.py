"""
Content policy for user-facing copy.

The product never describes a user in terms of another person's identity or
resemblance.  Every free-text field of a report (reason titles and copy,
adjustment titles/rationales/instructions, warnings) is scanned against the
patterns below.  The scan runs twice: inside ``SimilarityReport`` validation,
so a violating report can never be returned, and again in the evaluation
harness as an independent check.

Matching is case-insensitive and word-bounded, so "twin" matches but
"between" does not.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Iterable

if TYPE_CHECKING:
    from look_compat.models.report import SimilarityReport

BANNED_TERM_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"\bcelebrit(?:y|ies)\b", re.IGNORECASE),
    re.compile(r"\blooks?\s+like\b", re.IGNORECASE),
    re.compile(r"\bresembl\w*", re.IGNORECASE),
    re.compile(r"\bdoppel(?:g|-g)(?:a|ä)nger\w*", re.IGNORECASE),
    re.compile(r"\btwins?\b", re.IGNORECASE),
    re.compile(r"\bidentical\b", re.IGNORECASE),
    re.compile(r"\blookalike\w*", re.IGNORECASE),
    re.compile(r"\bsame\s+face\b", re.IGNORECASE),
)


def find_banned_terms(texts: Iterable[str]) -> list[str]:
    """Return every banned phrase found in ``texts``, in scan order.

    Args:
        texts: Free-text strings to scan.

    Returns:
        The matched substrings as they appear in the text (may be empty).
    """
    hits: list[str] = []
    for text in texts:
        for pattern in BANNED_TERM_PATTERNS:
            hits.extend(m.group(0) for m in pattern.finditer(text))
    return hits


def report_free_text(report: "SimilarityReport") -> list[str]:
    """Collect all free-text fields of a report that the policy covers."""
    texts: list[str] = []
    for reason in report.reasons:
        texts.extend([reason.title, reason.body])
    for adj in report.adjustments:
        texts.extend([adj.title, adj.rationale, adj.instruction])
    texts.extend(report.warnings or [])
    return texts
