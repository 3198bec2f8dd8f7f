"""Evaluation orchestrator: select applicable rules, run them in isolation.

For one context and one dimension:
1. Fetch the dimension's rules from the registry in canonical order
2. Keep rules matching the page category and the requested execution scope
3. Run each rule; a failure becomes a zero-score outcome, never an exception
4. Return outcomes in canonical order regardless of completion order

Failures are recorded, not retried: a rule is a pure function of
already-extracted signals, so a retry cannot change the result.
"""

from __future__ import annotations

import asyncio
import inspect
import logging

from pagescore.models.common import Dimension, ExecutionScope, Severity
from pagescore.models.results import RuleOutcome, RuleResult
from pagescore.models.signals import RuleContext
from pagescore.scoring.applicability import matches
from pagescore.scoring.registry import RuleRegistry
from pagescore.scoring.rule import Rule, build_result, make_issue

logger = logging.getLogger(__name__)


def failed_result(rule: Rule, exc: BaseException, message: str | None = None) -> RuleResult:
    """Zero-score result standing in for a rule that could not be evaluated."""
    reason = message or str(exc) or type(exc).__name__
    return build_result(
        0.0,
        [f"Analysis failed: {reason}"],
        details={"error": reason, "error_type": type(exc).__name__},
        issues=[
            make_issue(
                Severity.HIGH,
                f"{rule.descriptor.name} analysis failed",
                "Check the extracted page signals for this rule and re-run the analysis.",
            ),
        ],
    )


class EvaluationOrchestrator:
    """Runs the applicable rules of one dimension for one context."""

    def __init__(
        self,
        registry: RuleRegistry,
        *,
        rule_timeout_seconds: float | None = None,
        concurrent: bool = True,
    ) -> None:
        self._registry = registry
        self._timeout = rule_timeout_seconds
        self._concurrent = concurrent

    def select(
        self,
        context: RuleContext,
        dimension: Dimension,
        scope: ExecutionScope = ExecutionScope.PAGE,
    ) -> tuple[list[Rule], list[str]]:
        """Split the dimension's rules into (applicable rules, skipped rule ids).

        Only rules of ``scope`` are considered at all; a page pass never
        reports domain rules as skipped and vice versa.
        """
        applicable: list[Rule] = []
        skipped: list[str] = []
        for rule in self._registry.rules_for(dimension, scope):
            if matches(rule.descriptor, context.category):
                applicable.append(rule)
            else:
                skipped.append(rule.descriptor.id)
        if skipped:
            logger.debug(
                "%s: skipped %s rules %s for category %s",
                context.url, dimension.value, skipped, context.category.value,
            )
        return applicable, skipped

    async def run_rules(
        self,
        rules: list[Rule],
        context: RuleContext,
    ) -> list[RuleOutcome]:
        """Run ``rules`` and return outcomes in the order given."""
        if self._concurrent:
            # gather preserves argument order, not completion order.
            return list(
                await asyncio.gather(*(self._run_one(rule, context) for rule in rules))
            )
        outcomes: list[RuleOutcome] = []
        for rule in rules:
            outcomes.append(await self._run_one(rule, context))
        return outcomes

    async def evaluate(
        self,
        context: RuleContext,
        dimension: Dimension,
        scope: ExecutionScope = ExecutionScope.PAGE,
    ) -> list[RuleOutcome]:
        """Select and run the dimension's applicable rules."""
        applicable, _ = self.select(context, dimension, scope)
        return await self.run_rules(applicable, context)

    async def _run_one(self, rule: Rule, context: RuleContext) -> RuleOutcome:
        try:
            result = rule.evaluate(context)
            if inspect.isawaitable(result):
                deadline = asyncio.timeout(self._timeout)
                try:
                    async with deadline:
                        result = await result
                except TimeoutError as exc:
                    # Only the deadline counts as a timeout; a TimeoutError
                    # raised by the rule body is an ordinary failure.
                    if not deadline.expired():
                        raise
                    reason = f"timed out after {self._timeout}s"
                    logger.warning(
                        "Rule %s timed out on %s: %s", rule.descriptor.id, context.url, reason,
                    )
                    return RuleOutcome(
                        descriptor=rule.descriptor,
                        result=failed_result(rule, exc, reason),
                        failed=True,
                    )
            if not isinstance(result, RuleResult):
                msg = (
                    f"Rule {rule.descriptor.id} returned "
                    f"{type(result).__name__}, expected RuleResult"
                )
                raise TypeError(msg)
        except Exception as exc:
            logger.exception(
                "Rule %s failed on %s: %s", rule.descriptor.id, context.url, exc,
            )
            return RuleOutcome(
                descriptor=rule.descriptor,
                result=failed_result(rule, exc),
                failed=True,
            )
        return RuleOutcome(descriptor=rule.descriptor, result=result)
