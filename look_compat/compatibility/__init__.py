"""
US compatibility engine: deterministic face-compatibility scoring and
adjustment selection.

Modules
-------
tables   : Read-only thresholds, weights, mode multipliers, static metadata.
deltas   : compute_deltas() — selfie vs. reference, one Delta per attribute.
scorer   : FitResult + score_fit() + base_confidence() — pure functions.
rules    : Rule / Candidate dataclasses, US_RULES, fallbacks, evaluate_rule().
selector : pick_best_candidate() + select_adjustments() — one per impact area.
reasons  : build_reasons() — exactly three narrative reasons.
engine   : run_compatibility_engine() — orchestrates the above and validates.
"""
