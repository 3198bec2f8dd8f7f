"""Rule descriptors: identity, dimension, weight and applicability of a rule."""

from __future__ import annotations

from pydantic import Field, model_validator

from pagescore.models.common import (
    ApplicabilityScope,
    Dimension,
    ExecutionScope,
    PageCategory,
    PageScoreBase,
)


class Applicability(PageScoreBase, frozen=True):
    """Declarative predicate gating which pages a rule runs on.

    ``category`` scope needs a non-empty category set; ``all`` scope must not
    declare one.
    """

    scope: ApplicabilityScope = ApplicabilityScope.ALL
    categories: frozenset[PageCategory] = frozenset()

    @model_validator(mode="after")
    def _categories_match_scope(self) -> Applicability:
        if self.scope == ApplicabilityScope.CATEGORY and not self.categories:
            raise ValueError("category-scoped applicability needs at least one category")
        if self.scope == ApplicabilityScope.ALL and self.categories:
            raise ValueError("all-scoped applicability cannot restrict categories")
        return self

    @classmethod
    def all(cls) -> Applicability:
        return cls(scope=ApplicabilityScope.ALL)

    @classmethod
    def only(cls, *categories: PageCategory) -> Applicability:
        return cls(scope=ApplicabilityScope.CATEGORY, categories=frozenset(categories))


class RuleDescriptor(PageScoreBase, frozen=True):
    """Immutable metadata for one rule.

    ``weight`` is the rule's fraction of its dimension total. ``priority``
    only orders evaluation (higher first); it never skips a rule.
    """

    id: str = Field(min_length=1)
    name: str
    description: str = ""
    dimension: Dimension
    weight: float = Field(ge=0.0, le=1.0)
    priority: int = 0
    applicability: Applicability = Field(default_factory=Applicability.all)
    execution_scope: ExecutionScope = ExecutionScope.PAGE
    llm_eligible: bool = False
