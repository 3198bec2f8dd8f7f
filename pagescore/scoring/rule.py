"""Abstract base for scoring rules.

Each rule is stateless once constructed. It takes a read-only
``RuleContext`` and returns a fresh ``RuleResult``. No side effects.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Awaitable
from typing import Any, ClassVar

from pydantic import BaseModel

from pagescore.models.common import Severity
from pagescore.models.results import Issue, RuleResult
from pagescore.models.rule import RuleDescriptor
from pagescore.models.signals import RuleContext


class Rule(ABC):
    """One bounded scoring unit contributing to exactly one dimension.

    Subclasses declare a class-level ``DESCRIPTOR`` and implement
    ``evaluate()`` which:
    1. Derives bounded sub-signals from the context
    2. Checks the LLM slot for its dimension when ``llm_eligible``
    3. Combines everything into a 0-100 score with evidence

    Missing signals and LLM unavailability must degrade the score, never
    raise. ``evaluate`` may return an awaitable when the rule waits on an
    external call; the orchestrator awaits it.
    """

    DESCRIPTOR: ClassVar[RuleDescriptor]
    # Rule-constant section of ScoringConfig this rule is built with.
    config_type: ClassVar[type[BaseModel] | None] = None

    def __init__(
        self,
        config: Any = None,
        *,
        descriptor: RuleDescriptor | None = None,
    ) -> None:
        if config is None and self.config_type is not None:
            config = self.config_type()
        self.config = config
        self.descriptor = descriptor or self.DESCRIPTOR

    @property
    def id(self) -> str:
        return self.descriptor.id

    @abstractmethod
    def evaluate(
        self, context: RuleContext,
    ) -> RuleResult | Awaitable[RuleResult]:
        """Score ``context`` for this rule's dimension."""
        ...

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.descriptor.id!r})"


def build_result(
    score: float,
    evidence: list[str],
    *,
    max_score: float = 100.0,
    details: dict[str, object] | None = None,
    issues: list[Issue] | None = None,
    llm_used: bool = False,
) -> RuleResult:
    """Build a RuleResult with the raw score clamped to [0, max_score]."""
    clamped = max(0.0, min(float(score), max_score))
    return RuleResult(
        score=clamped,
        max_score=max_score,
        evidence=list(evidence),
        details=dict(details or {}),
        issues=list(issues or []),
        llm_used=llm_used,
    )


def make_issue(severity: Severity, title: str, recommendation: str) -> Issue:
    return Issue(severity=severity, title=title, recommendation=recommendation)


def walk_thresholds(
    value: float,
    thresholds: list[tuple[int, float]],
    fallback: float,
) -> tuple[float, int | None]:
    """Return the score of the first bracket where ``value <= limit``.

    The matched limit is returned alongside so rules can cite it in
    evidence; ``None`` means the fallback applied.
    """
    for limit, bracket_score in thresholds:
        if value <= limit:
            return bracket_score, limit
    return fallback, None
