"""
Evaluation report writer: JSON output for an ``EvaluationSummary``.

Output file
-----------
  data/outputs/evaluation/
    evaluation_{date}.json   -- totals, gate counts, per-sample results
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict
from datetime import date
from pathlib import Path

from look_compat.compatibility.tables import ENGINE_VERSION
from look_compat.evaluation.harness import EvaluationSummary

logger = logging.getLogger(__name__)


def write_evaluation_json(
    summary: EvaluationSummary,
    output_dir: Path,
    run_date: date | None = None,
) -> Path:
    """Write an evaluation summary to a JSON file.

    Args:
        summary:    Output of ``run_evaluation()``.
        output_dir: Directory to write the file (created if missing).
        run_date:   Date label for the filename. Defaults to today.

    Returns:
        Path to the written JSON file.
    """
    if run_date is None:
        run_date = date.today()

    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    json_path = output_dir / f"evaluation_{run_date}.json"

    payload = {
        "engine_version": ENGINE_VERSION,
        "run_date": str(run_date),
        "repeat_calls": summary.repeat_calls,
        "total": summary.total,
        "passed": summary.passed,
        "failed": summary.failed,
        "gate_counts": summary.gate_counts,
        "results": [
            {**asdict(r), "passed": r.passed}
            for r in summary.results
        ],
    }

    with open(json_path, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2)

    logger.info("Wrote evaluation report: %s (%d samples)", json_path, summary.total)
    return json_path
