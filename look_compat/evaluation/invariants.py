"""
Report invariants checked by the evaluation harness.

``SimilarityReport`` validation already enforces these on construction.  The
harness re-checks them independently on finished reports, the same way an
external dataset audit would, and reports violations as strings instead of
raising.
"""

from __future__ import annotations

from look_compat.models.report import MAX_TOP_DELTAS, SimilarityReport
from look_compat.policy.content import find_banned_terms, report_free_text
from look_compat.taxonomy.face_taxonomy import ImpactArea


def check_report_invariants(report: SimilarityReport) -> list[str]:
    """Return a list of invariant violations (empty when the report is clean)."""
    violations: list[str] = []

    if len(report.reasons) != 3:
        violations.append(f"reasons_count:{len(report.reasons)}")

    if len(report.adjustments) != 3:
        violations.append(f"adjustments_count:{len(report.adjustments)}")

    areas = {a.impact_area for a in report.adjustments}
    if areas != set(ImpactArea) or len(report.adjustments) != len(areas):
        violations.append("adjustment_areas:" + ",".join(sorted(str(a) for a in areas)))

    for term in sorted({t.lower() for t in find_banned_terms(report_free_text(report))}):
        violations.append(f"banned_term:{term}")

    if len(report.top_deltas) > MAX_TOP_DELTAS:
        violations.append(f"top_deltas_count:{len(report.top_deltas)}")
    severities = [d.severity for d in report.top_deltas]
    if severities != sorted(severities, reverse=True):
        violations.append("top_deltas_order")

    if not 0 <= report.fit_score <= 100:
        violations.append(f"fit_score_range:{report.fit_score}")

    return violations
