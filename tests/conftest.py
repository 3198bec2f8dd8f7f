"""Shared pytest fixtures for the pagescore test suite.

Provides:
- anyio_backend: run async tests on asyncio
- now: fixed evaluation timestamp so time-based rules are reproducible
- make_context: factory for RuleContext with sensible defaults
- rich_llm: an LLMResults bag with every slot available
"""

from datetime import datetime, timezone

import pytest

from pagescore.models.common import PageCategory
from pagescore.models.signals import (
    AuthorityAnalysis,
    Comprehensiveness,
    FreshnessAnalysis,
    GuideTopic,
    GuideType,
    LLMResults,
    PageSignals,
    RuleContext,
    StructureAnalysis,
    TopicDepth,
)

NOW = datetime(2026, 3, 1, tzinfo=timezone.utc)


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def make_context():
    """Build a RuleContext; ``signals`` may be a PageSignals or a dict of fields."""

    def _make(
        url: str = "https://example.com/",
        category: PageCategory | str | None = PageCategory.HOMEPAGE,
        signals: PageSignals | dict | None = None,
        **kwargs,
    ) -> RuleContext:
        if isinstance(signals, dict):
            signals = PageSignals(**signals)
        kwargs.setdefault("evaluated_at", NOW)
        return RuleContext(
            url=url,
            category=category,
            signals=signals or PageSignals(),
            **kwargs,
        )

    return _make


@pytest.fixture
def rich_llm() -> LLMResults:
    return LLMResults(
        authority=AuthorityAnalysis(
            has_author=True,
            author_name="Dana Reyes",
            author_credentials=True,
            citation_count=5,
            trusted_citations=("nature.com", "arxiv.org"),
        ),
        freshness=FreshnessAnalysis(
            is_evergreen=True,
            current_reference_count=3,
            outdated_references=("2018 pricing table",),
        ),
        structure=StructureAnalysis(
            guide_type=GuideType.ULTIMATE_GUIDE,
            comprehensiveness=Comprehensiveness.THOROUGH,
            has_table_of_contents=True,
            has_examples=True,
            has_internal_links=True,
            has_external_references=True,
            industry_focus="horticulture",
            topics=(
                GuideTopic(topic="soil", depth=TopicDepth.COMPREHENSIVE, entity_coverage=80.0),
                GuideTopic(topic="watering", depth=TopicDepth.MODERATE, entity_coverage=80.0),
            ),
        ),
    )
