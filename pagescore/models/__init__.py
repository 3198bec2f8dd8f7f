"""Page scoring domain models.

Signals and LLM analysis coming in from collaborators, rule descriptors,
and the results, dimension scores and reports going out.
"""
