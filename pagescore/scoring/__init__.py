"""Rule-based scoring engine.

Rule interface, applicability matching, registry, orchestration with
failure isolation, dimension aggregation and page-level reporting.

Deterministic for a fixed context -- no LLM calls inside the engine.
"""
