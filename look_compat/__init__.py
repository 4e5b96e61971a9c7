"""
look-compat: deterministic face-compatibility scoring, adjustment selection,
and gate policy for the US market.

Entry points::

    from look_compat.compatibility.engine import run_compatibility_engine
    from look_compat.policy.gate import evaluate_gate
"""

__version__ = "1.0.0"
