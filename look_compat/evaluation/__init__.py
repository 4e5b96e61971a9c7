"""
Dataset evaluation for the compatibility engine: repeat-call determinism,
report invariants, banned-phrase scanning, and gate outcome counts.

Modules
-------
samples    : EvaluationSample + load_samples() — JSON-lines datasets.
invariants : check_report_invariants() — pure, no I/O.
harness    : SampleResult / EvaluationSummary + evaluate_sample() + run_evaluation().
reporter   : write_evaluation_json() — file output.
"""
