"""
Pydantic v2 models for face profiles, similarity reports, bundles and gate decisions.

Modules
-------
face   : FaceProfile and its quality / geometry / categorical sub-models.
report : Delta, Reason, Adjustment, ScoreBreakdown, SimilarityReport.
bundle : CompatibilityRequest, Bundle, GateDecision.
"""
