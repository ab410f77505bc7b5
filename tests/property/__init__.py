"""
VerseKit - Property-Based Testing Suite

Hypothesis tests for the addressing invariants: encoding round-trips,
ordering, sort-key monotonicity and expand/compress inversion.
"""
