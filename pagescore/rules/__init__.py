"""Default scoring policy: concrete authority, freshness, structure,
technical and domain-level rules.
"""
