"""Fixed floor rule shared by every dimension."""

from __future__ import annotations

from pagescore.models.results import RuleResult
from pagescore.models.signals import RuleContext
from pagescore.scoring.rule import Rule, build_result


class FloorRule(Rule):
    """Constant full score for a page that exists and was published.

    Registered at ``all`` scope with the highest priority in its dimension,
    so even a page that triggers nothing else keeps a non-zero floor.
    """

    def evaluate(self, context: RuleContext) -> RuleResult:
        return build_result(
            100.0,
            [f"Base {self.descriptor.dimension.value} score for a published page"],
        )
