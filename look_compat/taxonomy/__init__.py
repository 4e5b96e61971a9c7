"""
Enumerations for face profiles, reports, and gate decisions.
"""
