"""
Armature - Property-Based Testing Suite

Hypothesis-driven checks of the bootstrap pipeline's ordering and
exactly-once guarantees over randomly generated registration graphs.
"""
