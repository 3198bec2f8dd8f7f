"""Dimension aggregation: weighted sum of rule outcomes on a fixed denominator.

Each outcome contributes ``weight * score / max_score``. The sum is divided
by the nominal total weight of the dimension (not by the weight of the rules
that happened to run) and scaled to 0-100, so a page that triggers fewer
category-scoped rules is not inflated. Unscored weight is dropped, never
redistributed.

Deterministic -- no LLM calls.
"""

from __future__ import annotations

from collections.abc import Sequence

from pagescore.models.common import Dimension, ExecutionScope
from pagescore.models.results import (
    DimensionScore,
    PageIssue,
    RuleContribution,
    RuleOutcome,
)


class DimensionAggregator:
    """Combines one dimension's outcomes into a ``DimensionScore``."""

    def __init__(self, nominal_weight: float = 1.0) -> None:
        if nominal_weight <= 0.0:
            msg = f"Nominal dimension weight must be positive, got {nominal_weight}."
            raise ValueError(msg)
        self._nominal_weight = nominal_weight

    def aggregate(
        self,
        dimension: Dimension,
        outcomes: Sequence[RuleOutcome],
        *,
        scope: ExecutionScope = ExecutionScope.PAGE,
        skipped_rule_ids: Sequence[str] = (),
    ) -> DimensionScore:
        """Aggregate outcomes given in canonical (priority) order."""
        contributions: list[RuleContribution] = []
        evidence: list[str] = []
        issues: list[PageIssue] = []
        failed: list[str] = []
        applied_weight = 0.0
        weighted_sum = 0.0

        for outcome in outcomes:
            descriptor = outcome.descriptor
            if descriptor.dimension != dimension:
                msg = (
                    f"Rule {descriptor.id} belongs to {descriptor.dimension.value}, "
                    f"not {dimension.value}."
                )
                raise ValueError(msg)

            normalized = outcome.result.normalized
            points = descriptor.weight * normalized * 100.0
            weighted_sum += points
            applied_weight += descriptor.weight

            contributions.append(
                RuleContribution(
                    rule_id=descriptor.id,
                    weight=descriptor.weight,
                    normalized_score=normalized,
                    points=points,
                )
            )
            evidence.extend(outcome.result.evidence)
            issues.extend(
                PageIssue(
                    severity=issue.severity,
                    title=issue.title,
                    recommendation=issue.recommendation,
                    dimension=dimension,
                    rule_id=descriptor.id,
                )
                for issue in outcome.result.issues
            )
            if outcome.failed:
                failed.append(descriptor.id)

        score = weighted_sum / self._nominal_weight
        score = round(min(100.0, max(0.0, score)), 2)

        return DimensionScore(
            dimension=dimension,
            execution_scope=scope,
            score=score,
            outcomes=list(outcomes),
            contributions=contributions,
            evidence=evidence,
            issues=issues,
            applied_weight=applied_weight,
            nominal_weight=self._nominal_weight,
            unscored_weight=max(0.0, self._nominal_weight - applied_weight),
            skipped_rule_ids=list(skipped_rule_ids),
            failed_rule_ids=failed,
        )
