"""
Safety policies applied around the compatibility engine.

Modules
-------
content    : Banned identity/resemblance terms and the free-text scanner.
thresholds : GateThresholds + hard/soft reason-code sets (US).
gate       : evaluate_gate() — ok / soft_degrade / hard_reject over a Bundle.
"""
