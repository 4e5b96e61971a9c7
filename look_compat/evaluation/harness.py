"""
Dataset-level evaluation harness for the compatibility engine.

How it works
------------
For every sample:
  1. Run the engine ``repeat_calls`` times on the same request.
  2. Compare ``model_dump_json()`` of every run against the first,
     byte-for-byte.  Any difference is a determinism failure.
  3. Check report invariants (shape, areas, banned terms, top-delta order).
  4. Wrap profiles + report in a ``Bundle`` and run the gate policy.

An exception from the engine (e.g. a market mismatch in the dataset) marks
that sample failed with an ``engine_error:<Type>`` violation; the run
continues with the next sample.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from look_compat.compatibility.engine import run_compatibility_engine
from look_compat.evaluation.invariants import check_report_invariants
from look_compat.evaluation.samples import EvaluationSample
from look_compat.models.bundle import Bundle
from look_compat.policy.gate import evaluate_gate

log = logging.getLogger(__name__)


@dataclass
class SampleResult:
    """Evaluation outcome for one sample.

    Attributes:
        sample_id:     Identifier from the dataset.
        deterministic: True if every repeat produced identical JSON.
        violations:    Invariant violations / engine errors (empty = clean).
        gate:          Gate outcome, or ``None`` if the engine failed.
        gate_reasons:  Gate reason codes.
        fit_score:     Fit score of the first run, or ``None``.
        confidence:    Report confidence of the first run, or ``None``.
    """

    sample_id:     str
    deterministic: bool
    violations:    list[str] = field(default_factory=list)
    gate:          Optional[str] = None
    gate_reasons:  list[str] = field(default_factory=list)
    fit_score:     Optional[int] = None
    confidence:    Optional[str] = None

    @property
    def passed(self) -> bool:
        return self.deterministic and not self.violations


@dataclass
class EvaluationSummary:
    """Aggregate result of one evaluation run."""

    total:        int
    passed:       int
    repeat_calls: int
    gate_counts:  dict[str, int]
    results:      list[SampleResult]

    @property
    def failed(self) -> int:
        return self.total - self.passed

    @property
    def all_passed(self) -> bool:
        return self.passed == self.total


def evaluate_sample(sample: EvaluationSample, repeat_calls: int = 2) -> SampleResult:
    """Run the determinism, invariant and gate checks for one sample."""
    try:
        reports = [
            run_compatibility_engine(
                preference_mode=sample.preference_mode,
                ref_face_profile=sample.ref_face_profile,
                user_face_profile=sample.user_face_profile,
                market=sample.market,
                locale=sample.locale,
            )
            for _ in range(repeat_calls)
        ]
    except Exception as exc:
        log.warning("Sample %s: engine raised %s: %s", sample.sample_id, type(exc).__name__, exc)
        return SampleResult(
            sample_id=sample.sample_id,
            deterministic=False,
            violations=[f"engine_error:{type(exc).__name__}"],
        )

    serialized = [r.model_dump_json() for r in reports]
    deterministic = all(s == serialized[0] for s in serialized[1:])

    report = reports[0]
    violations = check_report_invariants(report)
    if not deterministic:
        violations.insert(0, "non_deterministic_output")

    bundle = Bundle(
        locale=sample.locale,
        preference_mode=sample.preference_mode,
        created_at=datetime.now(tz=timezone.utc),
        user_face_profile=sample.user_face_profile,
        ref_face_profile=sample.ref_face_profile,
        similarity_report=report,
    )
    decision = evaluate_gate(bundle)

    if violations:
        log.warning("Sample %s failed: %s", sample.sample_id, ", ".join(violations))

    return SampleResult(
        sample_id=sample.sample_id,
        deterministic=deterministic,
        violations=violations,
        gate=str(decision.gate),
        gate_reasons=list(decision.reasons),
        fit_score=report.fit_score,
        confidence=str(report.confidence),
    )


def run_evaluation(
    samples: list[EvaluationSample],
    repeat_calls: int = 2,
) -> EvaluationSummary:
    """Evaluate every sample and aggregate the results.

    Args:
        samples:      Samples from ``load_samples()``.
        repeat_calls: Engine invocations per sample (>= 2).

    Returns:
        EvaluationSummary with per-sample results in input order.
    """
    if repeat_calls < 2:
        raise ValueError(f"repeat_calls must be >= 2 to check determinism, got {repeat_calls}.")

    results = [evaluate_sample(s, repeat_calls) for s in samples]
    gate_counts = Counter(r.gate for r in results if r.gate is not None)
    passed = sum(1 for r in results if r.passed)

    log.info(
        "Evaluation complete | samples=%d | passed=%d | failed=%d | gates=%s",
        len(results), passed, len(results) - passed, dict(sorted(gate_counts.items())),
    )

    return EvaluationSummary(
        total=len(results),
        passed=passed,
        repeat_calls=repeat_calls,
        gate_counts=dict(sorted(gate_counts.items())),
        results=results,
    )
