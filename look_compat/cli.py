"""
look-compat — CLI entry point.

All commands follow this pattern:
  1. Load ``AppConfig`` via ``load_config()``.
  2. Configure logging.
  3. Validate inputs (JSON → pydantic models).
  4. Execute action (engine run, gate evaluation, dataset evaluation).
  5. Report result to stdout.

Exit codes
----------
  0  success
  1  invalid input or configuration (client error)
  2  unexpected engine failure (server error)

Install and run::

    pip install -e .
    look-compat --help
    look-compat validate-config
    look-compat score --request request.json
    look-compat gate --bundle bundle.json
    look-compat evaluate --samples data/samples.jsonl
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Optional

import typer

app = typer.Typer(
    name="look-compat",
    help="Deterministic face-compatibility scoring and gate policy (US market).",
    add_completion=False,
)

logger = logging.getLogger(__name__)


# ── Helpers ───────────────────────────────────────────────────────────────────

def _load_config_or_exit(config_path: Optional[str] = None):
    """Load AppConfig, printing a friendly error and exiting on failure."""
    from look_compat.config import load_config

    try:
        cfg_path = Path(config_path) if config_path else None
        return load_config(cfg_path)
    except FileNotFoundError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)
    except Exception as exc:
        typer.echo(f"[ERROR] Config validation failed: {exc}", err=True)
        raise typer.Exit(code=1)


def _configure_logging(config):
    """Set up logging from config."""
    from look_compat.utils.logging import configure_logging
    configure_logging(config.logging)


def _read_json_or_exit(path: str) -> Any:
    """Read a JSON file, exiting with code 1 on a missing file or bad JSON."""
    json_path = Path(path)
    if not json_path.exists():
        typer.echo(f"[ERROR] File not found: {json_path}", err=True)
        raise typer.Exit(code=1)
    try:
        with open(json_path, encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as exc:
        typer.echo(f"[ERROR] JSON parse error in {json_path}: {exc}", err=True)
        raise typer.Exit(code=1)


def _validate_or_exit(model_cls, data: Any, what: str):
    """Validate ``data`` into ``model_cls``; print errors and exit 1 on failure."""
    from pydantic import ValidationError

    try:
        return model_cls.model_validate(data)
    except ValidationError as exc:
        typer.echo(f"[ERROR] {exc.error_count()} {what} validation error(s):", err=True)
        for err in exc.errors()[:5]:
            loc = ".".join(str(p) for p in err["loc"])
            typer.echo(f"  {loc}: {err['msg']}", err=True)
        if exc.error_count() > 5:
            typer.echo(f"  ... and {exc.error_count() - 5} more.", err=True)
        raise typer.Exit(code=1)


# ── Commands ──────────────────────────────────────────────────────────────────

@app.command("validate-config")
def validate_config(
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file (default: config/default.toml).",
    ),
    show_full: bool = typer.Option(
        False,
        "--full",
        help="Print full config including all fields.",
    ),
) -> None:
    """Validate the configuration file and print parsed values.

    Exits with code 1 if the config fails validation.
    """
    config = _load_config_or_exit(config_path)

    typer.echo("Configuration validated successfully.")
    typer.echo("")
    typer.echo(f"  Market:           {config.engine.market}")
    typer.echo(f"  Default mode:     {config.engine.default_preference_mode}")
    typer.echo(f"  Default locale:   {config.engine.default_locale}")
    typer.echo(f"  Repeat calls:     {config.evaluation.repeat_calls}")
    typer.echo(f"  Log level:        {config.logging.level}")
    typer.echo(f"  Debug mode:       {config.debug}")

    if show_full:
        typer.echo("")
        typer.echo("Full config (JSON):")
        typer.echo(json.dumps(config.model_dump(mode="json"), indent=2))

    typer.echo("")
    typer.echo("[OK] Config valid.")


@app.command("score")
def score(
    request_file: str = typer.Option(
        ...,
        "--request",
        "-r",
        help="Path to a compatibility request JSON file.",
    ),
    output_file: Optional[str] = typer.Option(
        None,
        "--output",
        "-o",
        help="Write the report JSON here instead of stdout.",
    ),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file.",
    ),
) -> None:
    """Run the compatibility engine on one request and print the report JSON.

    Missing ``market`` / ``locale`` / ``preference_mode`` fields are filled
    from the [engine] config section.
    """
    from look_compat.compatibility.engine import (
        MarketMismatchError,
        ReportSchemaError,
        run_compatibility_engine,
    )
    from look_compat.models.bundle import CompatibilityRequest

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    raw = _read_json_or_exit(request_file)
    if not isinstance(raw, dict):
        typer.echo("[ERROR] Request file must contain a JSON object.", err=True)
        raise typer.Exit(code=1)
    raw.setdefault("market", config.engine.market)
    raw.setdefault("locale", config.engine.default_locale)
    raw.setdefault("preference_mode", str(config.engine.default_preference_mode))

    request = _validate_or_exit(CompatibilityRequest, raw, "request")

    try:
        report = run_compatibility_engine(
            preference_mode=request.preference_mode,
            ref_face_profile=request.ref_face_profile,
            user_face_profile=request.user_face_profile,
            market=request.market,
            locale=request.locale,
        )
    except MarketMismatchError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)
    except ReportSchemaError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=2)
    except Exception as exc:
        logger.exception("Unexpected failure scoring %s", request_file)
        typer.echo(f"[ERROR] Unexpected engine failure: {type(exc).__name__}: {exc}", err=True)
        raise typer.Exit(code=2)

    report_json = report.model_dump_json(indent=2)
    if output_file:
        out_path = Path(output_file)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(report_json + "\n", encoding="utf-8")
        typer.echo(f"[OK] Report written to {out_path} (fit_score={report.fit_score}).")
    else:
        typer.echo(report_json)


@app.command("gate")
def gate(
    bundle_file: str = typer.Option(
        ...,
        "--bundle",
        "-b",
        help="Path to a bundle JSON file (profiles + similarity report).",
    ),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file.",
    ),
) -> None:
    """Evaluate the gate policy over a bundle and print the decision JSON."""
    from look_compat.models.bundle import Bundle
    from look_compat.policy.gate import evaluate_gate

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    bundle = _validate_or_exit(Bundle, _read_json_or_exit(bundle_file), "bundle")
    try:
        decision = evaluate_gate(bundle)
    except Exception as exc:
        logger.exception("Unexpected failure gating %s", bundle_file)
        typer.echo(f"[ERROR] Unexpected engine failure: {type(exc).__name__}: {exc}", err=True)
        raise typer.Exit(code=2)
    typer.echo(decision.model_dump_json(indent=2))


@app.command("evaluate")
def evaluate(
    samples_file: str = typer.Option(
        ...,
        "--samples",
        "-s",
        help="Path to a JSON-lines dataset of compatibility requests.",
    ),
    output_dir: Optional[str] = typer.Option(
        None,
        "--output-dir",
        help="Directory for the evaluation report (default from config).",
    ),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file.",
    ),
) -> None:
    """Run the dataset evaluation harness.

    Every sample is scored ``repeat_calls`` times and must produce
    byte-identical output, a well-formed report, and no banned terms.
    Exits with code 1 if any sample fails.
    """
    from look_compat.evaluation.harness import run_evaluation
    from look_compat.evaluation.reporter import write_evaluation_json
    from look_compat.evaluation.samples import SampleLoadError, load_samples

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    samples_path = Path(samples_file)
    if not samples_path.exists():
        typer.echo(f"[ERROR] Samples file not found: {samples_path}", err=True)
        raise typer.Exit(code=1)

    try:
        samples = load_samples(samples_path)
    except SampleLoadError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)

    typer.echo(f"Evaluating {len(samples)} sample(s) from: {samples_path}")
    summary = run_evaluation(samples, repeat_calls=config.evaluation.repeat_calls)

    target_dir = Path(output_dir or config.evaluation.output_dir)
    report_path = write_evaluation_json(summary, target_dir)

    typer.echo(f"  Passed: {summary.passed}/{summary.total}")
    for outcome, count in summary.gate_counts.items():
        typer.echo(f"  Gate {outcome}: {count}")
    for result in summary.results:
        if not result.passed:
            typer.echo(f"  [FAIL] {result.sample_id}: {', '.join(result.violations)}")
    typer.echo(f"  Report: {report_path}")

    if not summary.all_passed:
        typer.echo(f"[FAIL] {summary.failed} sample(s) failed.", err=True)
        raise typer.Exit(code=1)
    typer.echo("[OK] All samples passed.")


if __name__ == "__main__":
    app()
