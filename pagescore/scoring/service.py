"""Page score aggregation service.

Runs the orchestrator for every dimension, aggregates each into a
``DimensionScore``, and combines them into one frozen ``PageScoreReport``
with an overall score, grade, merged issues and severity counts.

One call in, one report out. No exception escapes: a dimension whose
evaluation breaks is reported as score 0 with a failure issue.
Cancellation of the surrounding task still propagates and yields no report.
"""

from __future__ import annotations

import asyncio
import logging
from collections import Counter
from collections.abc import Sequence

import structlog

from pagescore.models.common import Dimension, ExecutionScope, OverallScoreMode, Severity
from pagescore.models.results import DimensionScore, PageIssue, PageScoreReport
from pagescore.models.signals import RuleContext
from pagescore.scoring.aggregator import DimensionAggregator
from pagescore.scoring.config import ScoringConfig
from pagescore.scoring.orchestrator import EvaluationOrchestrator
from pagescore.scoring.registry import (
    RuleRegistry,
    build_default_registry,
    get_default_registry,
)

logger = logging.getLogger(__name__)
report_log: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


class PageScoreAggregator:
    """Scores pages (and domains) against a frozen rule registry.

    Without an explicit registry the process-wide default is used, or a
    default registry built from ``config`` when one is given.
    """

    def __init__(
        self,
        registry: RuleRegistry | None = None,
        config: ScoringConfig | None = None,
    ) -> None:
        if registry is None:
            registry = (
                build_default_registry(config) if config is not None
                else get_default_registry()
            )
        self._config = config or ScoringConfig()
        self._registry = registry
        self._orchestrator = EvaluationOrchestrator(
            registry,
            rule_timeout_seconds=self._config.rule_timeout_seconds,
            concurrent=self._config.concurrent_rules,
        )
        self._aggregator = DimensionAggregator(self._config.nominal_dimension_weight)

    @property
    def registry(self) -> RuleRegistry:
        return self._registry

    # ----- Public API -----

    async def score_page(self, context: RuleContext) -> PageScoreReport:
        """Score one page across every page-scoped dimension."""
        return await self._score(context, ExecutionScope.PAGE)

    async def score_domain(self, context: RuleContext) -> PageScoreReport:
        """Score site-wide signals with the domain-scoped rules only."""
        return await self._score(context, ExecutionScope.DOMAIN)

    def score_page_sync(self, context: RuleContext) -> PageScoreReport:
        """Blocking wrapper for callers outside an event loop."""
        return asyncio.run(self.score_page(context))

    async def score_pages(
        self,
        contexts: Sequence[RuleContext],
        max_concurrency: int | None = None,
    ) -> list[PageScoreReport]:
        """Score many pages in parallel; reports come back in input order."""
        limit = self._config.max_concurrent_pages if max_concurrency is None else max_concurrency
        if limit < 1:
            msg = f"max_concurrency must be >= 1, got {limit}."
            raise ValueError(msg)
        semaphore = asyncio.Semaphore(limit)

        async def _bounded(context: RuleContext) -> PageScoreReport:
            async with semaphore:
                return await self.score_page(context)

        return list(await asyncio.gather(*(_bounded(c) for c in contexts)))

    # ----- Internals -----

    async def _score(self, context: RuleContext, scope: ExecutionScope) -> PageScoreReport:
        dimensions = self._registry.dimensions(scope)
        dimension_scores = list(
            await asyncio.gather(
                *(self._score_dimension(context, d, scope) for d in dimensions)
            )
        )
        report = self._build_report(context, scope, dimension_scores)
        report_log.info(
            "page_scored",
            url=report.url,
            scope=scope.value,
            category=report.category.value,
            overall_score=report.overall_score,
            grade=report.grade.value,
            issues=len(report.issues),
            failed_rules=len(report.failed_rule_ids),
        )
        return report

    async def _score_dimension(
        self,
        context: RuleContext,
        dimension: Dimension,
        scope: ExecutionScope,
    ) -> DimensionScore:
        try:
            applicable, skipped = self._orchestrator.select(context, dimension, scope)
            outcomes = await self._orchestrator.run_rules(applicable, context)
            return self._aggregator.aggregate(
                dimension, outcomes, scope=scope, skipped_rule_ids=skipped,
            )
        except Exception as exc:
            logger.exception(
                "Dimension %s failed on %s: %s", dimension.value, context.url, exc,
            )
            return DimensionScore(
                dimension=dimension,
                execution_scope=scope,
                score=0.0,
                evidence=[f"Dimension evaluation failed: {exc}"],
                issues=[
                    PageIssue(
                        severity=Severity.HIGH,
                        title=f"{dimension.value.title()} scoring failed",
                        recommendation="Review the engine logs for this page and re-run the analysis.",
                        dimension=dimension,
                        rule_id=f"{dimension.value}-aggregation",
                    ),
                ],
                nominal_weight=self._config.nominal_dimension_weight,
                unscored_weight=self._config.nominal_dimension_weight,
            )

    def _overall_score(
        self,
        context: RuleContext,
        dimension_scores: list[DimensionScore],
    ) -> float:
        if not dimension_scores:
            return 0.0
        if self._config.overall_mode == OverallScoreMode.UNWEIGHTED:
            overall = sum(ds.score for ds in dimension_scores) / len(dimension_scores)
        else:
            weights = [
                self._config.effective_dimension_weight(ds.dimension, context.category)
                for ds in dimension_scores
            ]
            total_weight = sum(weights)
            if total_weight <= 0.0:
                return 0.0
            overall = sum(
                ds.score * w for ds, w in zip(dimension_scores, weights)
            ) / total_weight
        return round(min(100.0, max(0.0, overall)), 2)

    def _build_report(
        self,
        context: RuleContext,
        scope: ExecutionScope,
        dimension_scores: list[DimensionScore],
    ) -> PageScoreReport:
        overall = self._overall_score(context, dimension_scores)
        issues = [issue for ds in dimension_scores for issue in ds.issues]
        severity_counts: Counter[Severity] = Counter(issue.severity for issue in issues)
        failed = [rule_id for ds in dimension_scores for rule_id in ds.failed_rule_ids]
        llm_enhanced = [
            outcome.rule_id
            for ds in dimension_scores
            for outcome in ds.outcomes
            if outcome.result.llm_used
        ]
        return PageScoreReport(
            url=context.url,
            category=context.category,
            execution_scope=scope,
            dimension_scores=dimension_scores,
            overall_score=overall,
            grade=self._config.grade_for(overall),
            issues=issues,
            critical_count=severity_counts[Severity.CRITICAL],
            high_count=severity_counts[Severity.HIGH],
            medium_count=severity_counts[Severity.MEDIUM],
            low_count=severity_counts[Severity.LOW],
            failed_rule_ids=failed,
            llm_enhanced_rule_ids=llm_enhanced,
        )
