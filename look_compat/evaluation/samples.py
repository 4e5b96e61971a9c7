"""
Evaluation sample loading (JSON lines).

Each non-blank line is one ``EvaluationSample``: a ``sample_id`` plus the
fields of a ``CompatibilityRequest``::

    {"sample_id": "s-001", "market": "US", "locale": "en",
     "preference_mode": "structure", "user_face_profile": {...},
     "ref_face_profile": {...}}

Malformed lines are collected and raised together so a dataset can be fixed
in one pass.
"""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import ValidationError

from look_compat.models.bundle import CompatibilityRequest


class EvaluationSample(CompatibilityRequest):
    """One dataset row: a request plus a stable identifier."""

    sample_id: str


class SampleLoadError(ValueError):
    """Raised when one or more sample lines fail to parse or validate.

    Attributes:
        path:   File that was being read.
        errors: ``(line_number, message)`` pairs, 1-based.
    """

    def __init__(self, path: Path, errors: list[tuple[int, str]]) -> None:
        self.path = path
        self.errors = errors
        preview = "; ".join(f"line {n}: {msg}" for n, msg in errors[:5])
        more = f" (and {len(errors) - 5} more)" if len(errors) > 5 else ""
        super().__init__(f"{len(errors)} invalid sample(s) in {path}: {preview}{more}")


def load_samples(path: Path) -> list[EvaluationSample]:
    """Read and validate every sample in a JSON-lines file.

    Args:
        path: Path to the ``.jsonl`` dataset.

    Returns:
        Samples in file order.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        SampleLoadError:   If any line is not valid JSON or fails validation.
    """
    path = Path(path)
    samples: list[EvaluationSample] = []
    errors: list[tuple[int, str]] = []

    with open(path, encoding="utf-8") as f:
        for line_no, line in enumerate(f, start=1):
            if not line.strip():
                continue
            try:
                samples.append(EvaluationSample.model_validate(json.loads(line)))
            except json.JSONDecodeError as exc:
                errors.append((line_no, f"invalid JSON: {exc.msg}"))
            except ValidationError as exc:
                errors.append((line_no, f"{exc.error_count()} validation error(s)"))

    if errors:
        raise SampleLoadError(path, errors)
    return samples
