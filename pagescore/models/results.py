"""Rule results, dimension scores and the page score report.

Results are produced fresh for every evaluation. A ``PageScoreReport`` is
frozen once built and handed to the caller as an opaque value object.
"""

from __future__ import annotations

from pydantic import Field, model_validator

from pagescore.models.common import (
    Dimension,
    ExecutionScope,
    Grade,
    PageCategory,
    PageScoreBase,
    Severity,
    UTCTimestamp,
    UUIDv7,
    new_uuid7,
    utc_now,
)
from pagescore.models.rule import RuleDescriptor


# ---------------------------------------------------------------------------
# Issues
# ---------------------------------------------------------------------------


class Issue(PageScoreBase):
    """An actionable finding raised by a rule."""

    severity: Severity
    title: str
    recommendation: str


class PageIssue(Issue):
    """An issue merged into a dimension or page report, tagged with its origin."""

    dimension: Dimension
    rule_id: str


# ---------------------------------------------------------------------------
# Rule-level results
# ---------------------------------------------------------------------------


class RuleResult(PageScoreBase):
    """Bounded output of one rule evaluation: ``0 <= score <= max_score``."""

    score: float = Field(ge=0.0)
    max_score: float = Field(default=100.0, gt=0.0)
    evidence: list[str] = Field(default_factory=list)
    details: dict[str, object] = Field(default_factory=dict)
    issues: list[Issue] = Field(default_factory=list)
    llm_used: bool = False

    @model_validator(mode="after")
    def _score_within_max(self) -> RuleResult:
        if self.score > self.max_score:
            raise ValueError(
                f"score {self.score} exceeds max_score {self.max_score}"
            )
        return self

    @property
    def normalized(self) -> float:
        """Score as a 0-1 fraction of ``max_score``."""
        return self.score / self.max_score


class RuleOutcome(PageScoreBase):
    """A (rule, result) pair as returned by the orchestrator."""

    descriptor: RuleDescriptor
    result: RuleResult
    failed: bool = False

    @property
    def rule_id(self) -> str:
        return self.descriptor.id


class RuleContribution(PageScoreBase):
    """Audit row: how much one rule added to its dimension score."""

    rule_id: str
    weight: float
    normalized_score: float = Field(ge=0.0, le=1.0)
    points: float = Field(ge=0.0)


# ---------------------------------------------------------------------------
# Dimension and page level
# ---------------------------------------------------------------------------


class DimensionScore(PageScoreBase):
    """Weighted score of one dimension for one page (or domain)."""

    dimension: Dimension
    execution_scope: ExecutionScope = ExecutionScope.PAGE
    score: float = Field(ge=0.0, le=100.0)
    outcomes: list[RuleOutcome] = Field(default_factory=list)
    contributions: list[RuleContribution] = Field(default_factory=list)
    evidence: list[str] = Field(default_factory=list)
    issues: list[PageIssue] = Field(default_factory=list)
    applied_weight: float = Field(default=0.0, ge=0.0)
    nominal_weight: float = Field(default=1.0, gt=0.0)
    unscored_weight: float = Field(default=0.0, ge=0.0)
    skipped_rule_ids: list[str] = Field(default_factory=list)
    failed_rule_ids: list[str] = Field(default_factory=list)


class PageScoreReport(PageScoreBase, frozen=True):
    """Complete, immutable scoring report for one page or domain."""

    report_id: UUIDv7 = Field(default_factory=new_uuid7)
    url: str
    category: PageCategory = PageCategory.UNCATEGORIZED
    execution_scope: ExecutionScope = ExecutionScope.PAGE
    dimension_scores: list[DimensionScore] = Field(default_factory=list)
    overall_score: float = Field(default=0.0, ge=0.0, le=100.0)
    grade: Grade = Grade.F
    issues: list[PageIssue] = Field(default_factory=list)
    critical_count: int = 0
    high_count: int = 0
    medium_count: int = 0
    low_count: int = 0
    failed_rule_ids: list[str] = Field(default_factory=list)
    llm_enhanced_rule_ids: list[str] = Field(default_factory=list)
    created_at: UTCTimestamp = Field(default_factory=utc_now)

    def dimension(self, dimension: Dimension) -> DimensionScore | None:
        for ds in self.dimension_scores:
            if ds.dimension == dimension:
                return ds
        return None

    def issues_by_dimension(self) -> dict[Dimension, list[PageIssue]]:
        """Issues grouped per dimension, in report order."""
        grouped: dict[Dimension, list[PageIssue]] = {
            ds.dimension: [] for ds in self.dimension_scores
        }
        for issue in self.issues:
            grouped.setdefault(issue.dimension, []).append(issue)
        return grouped
