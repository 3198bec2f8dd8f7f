"""Page signals, LLM analysis variants, and the rule evaluation context.

Everything in this module is supplied by collaborators outside the engine
(content extractor, category classifier, LLM analysis adapter) and is
read-only once built: models are frozen and sequences are tuples, so a rule
cannot mutate the context it is handed.
"""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Annotated, Literal, Union
from urllib.parse import urlparse

from pydantic import Field, field_validator

from pagescore.models.common import (
    Dimension,
    DomainAuthorityLevel,
    PageCategory,
    PageScoreBase,
    UTCTimestamp,
    as_utc,
    utc_now,
)


# ---------------------------------------------------------------------------
# Extracted page signals
# ---------------------------------------------------------------------------


class Heading(PageScoreBase, frozen=True):
    """A single heading element in document order."""

    level: int = Field(ge=1, le=6)
    text: str = ""


class DateSignals(PageScoreBase, frozen=True):
    """Date information found by the extractor (metadata, schema, content)."""

    published_at: datetime | None = None
    modified_at: datetime | None = None
    source: str | None = None
    date_in_url: bool = False
    date_in_title: bool = False
    update_indicators: tuple[str, ...] = ()

    @property
    def has_any(self) -> bool:
        return self.published_at is not None or self.modified_at is not None

    @property
    def last_update(self) -> datetime | None:
        """Modified date when present, otherwise the publish date."""
        if self.modified_at is not None:
            return as_utc(self.modified_at)
        if self.published_at is not None:
            return as_utc(self.published_at)
        return None


class PageSignals(PageScoreBase, frozen=True):
    """Pre-extracted signals for one crawled page.

    ``text`` is the clean visible text; rules may run text heuristics on it
    but never see raw HTML.
    """

    title: str | None = None
    meta_description: str | None = None
    status_code: int | None = None
    redirect_count: int = Field(default=0, ge=0)
    word_count: int = Field(default=0, ge=0)
    text: str = ""
    headings: tuple[Heading, ...] = ()
    list_count: int = Field(default=0, ge=0)
    table_count: int = Field(default=0, ge=0)
    definition_list_count: int = Field(default=0, ge=0)
    has_nested_lists: bool = False
    avg_sentence_words: float | None = Field(default=None, ge=0.0)
    author_name: str | None = None
    author_bio: str | None = None
    outbound_links: tuple[str, ...] = ()
    internal_link_count: int = Field(default=0, ge=0)
    dates: DateSignals = Field(default_factory=DateSignals)
    schema_types: tuple[str, ...] = ()
    image_count: int = Field(default=0, ge=0)
    images_missing_alt: int = Field(default=0, ge=0)
    video_count: int = Field(default=0, ge=0)
    audio_count: int = Field(default=0, ge=0)
    code_block_count: int = Field(default=0, ge=0)

    @property
    def effective_word_count(self) -> int:
        """Extractor word count, or a whitespace split of ``text`` when absent."""
        if self.word_count:
            return self.word_count
        return len(self.text.split())

    def headings_at(self, level: int) -> tuple[Heading, ...]:
        return tuple(h for h in self.headings if h.level == level)

    @property
    def subheadings(self) -> tuple[Heading, ...]:
        """All <h2>-<h6> headings."""
        return tuple(h for h in self.headings if h.level >= 2)


class DomainSignals(PageScoreBase, frozen=True):
    """Site-wide signals consumed by the domain-level pass."""

    domain: str
    authority_level: DomainAuthorityLevel = DomainAuthorityLevel.UNKNOWN
    authority_justification: str | None = None
    has_sitemap: bool = False
    sitemap_url_count: int = Field(default=0, ge=0)
    has_robots_txt: bool = False
    blocked_ai_crawlers: tuple[str, ...] = ()
    has_llms_txt: bool = False


# ---------------------------------------------------------------------------
# LLM analysis variants
# ---------------------------------------------------------------------------


class GuideType(StrEnum):
    """How a page positions itself as guide content."""

    ULTIMATE_GUIDE = "ultimate_guide"
    COMPLETE_GUIDE = "complete_guide"
    PILLAR_PAGE = "pillar_page"
    STANDARD_GUIDE = "standard_guide"
    BASIC_ARTICLE = "basic_article"
    NOT_GUIDE = "not_guide"


class Comprehensiveness(StrEnum):
    """Overall depth and completeness judged by the LLM."""

    EXHAUSTIVE = "exhaustive"
    THOROUGH = "thorough"
    ADEQUATE = "adequate"
    BASIC = "basic"
    INSUFFICIENT = "insufficient"


class TopicDepth(StrEnum):
    SURFACE = "surface"
    MODERATE = "moderate"
    COMPREHENSIVE = "comprehensive"


class LLMUnavailable(PageScoreBase, frozen=True):
    """Explicit "no LLM analysis" variant for a dimension slot."""

    status: Literal["unavailable"] = "unavailable"
    reason: str | None = None


class AuthorityAnalysis(PageScoreBase, frozen=True):
    """LLM judgments about authorship and citations."""

    status: Literal["available"] = "available"
    has_author: bool = False
    author_name: str | None = None
    author_credentials: bool = False
    citation_count: int = Field(default=0, ge=0)
    trusted_citations: tuple[str, ...] = ()


class FreshnessAnalysis(PageScoreBase, frozen=True):
    """LLM judgments about temporal relevance of the content."""

    status: Literal["available"] = "available"
    is_evergreen: bool = False
    current_reference_count: int = Field(default=0, ge=0)
    outdated_references: tuple[str, ...] = ()


class GuideTopic(PageScoreBase, frozen=True):
    topic: str
    depth: TopicDepth = TopicDepth.SURFACE
    entity_coverage: float = Field(default=0.0, ge=0.0, le=100.0)


class StructureAnalysis(PageScoreBase, frozen=True):
    """LLM judgments about guide depth and organisation."""

    status: Literal["available"] = "available"
    guide_type: GuideType = GuideType.NOT_GUIDE
    comprehensiveness: Comprehensiveness = Comprehensiveness.BASIC
    has_table_of_contents: bool = False
    has_examples: bool = False
    has_internal_links: bool = False
    has_external_references: bool = False
    industry_focus: str | None = None
    topics: tuple[GuideTopic, ...] = ()


AuthoritySlot = Annotated[
    Union[AuthorityAnalysis, LLMUnavailable], Field(discriminator="status")
]
FreshnessSlot = Annotated[
    Union[FreshnessAnalysis, LLMUnavailable], Field(discriminator="status")
]
StructureSlot = Annotated[
    Union[StructureAnalysis, LLMUnavailable], Field(discriminator="status")
]

LLMAnalysis = Union[
    AuthorityAnalysis, FreshnessAnalysis, StructureAnalysis, LLMUnavailable
]


class LLMResults(PageScoreBase, frozen=True):
    """Per-dimension LLM analysis, each slot available or explicitly not."""

    authority: AuthoritySlot = Field(default_factory=LLMUnavailable)
    freshness: FreshnessSlot = Field(default_factory=LLMUnavailable)
    structure: StructureSlot = Field(default_factory=LLMUnavailable)

    @classmethod
    def unavailable(cls, reason: str | None = None) -> LLMResults:
        """All slots unavailable, e.g. when the adapter is disabled or failed."""
        missing = LLMUnavailable(reason=reason)
        return cls(authority=missing, freshness=missing, structure=missing)

    def for_dimension(self, dimension: Dimension) -> LLMAnalysis:
        if dimension == Dimension.AUTHORITY:
            return self.authority
        if dimension == Dimension.FRESHNESS:
            return self.freshness
        if dimension == Dimension.STRUCTURE:
            return self.structure
        return LLMUnavailable(reason=f"no LLM analysis for {dimension.value}")


# ---------------------------------------------------------------------------
# Rule context
# ---------------------------------------------------------------------------


class RuleContext(PageScoreBase, frozen=True):
    """Read-only input to one rule evaluation.

    ``evaluated_at`` is the reference "now" for every time-dependent rule, so
    the same context always yields the same results.
    """

    url: str
    category: PageCategory = PageCategory.UNCATEGORIZED
    signals: PageSignals = Field(default_factory=PageSignals)
    domain: DomainSignals | None = None
    llm: LLMResults = Field(default_factory=LLMResults)
    evaluated_at: UTCTimestamp = Field(default_factory=utc_now)

    @field_validator("category", mode="before")
    @classmethod
    def _coerce_category(cls, value: object) -> PageCategory:
        return PageCategory.coerce(value)

    @field_validator("evaluated_at")
    @classmethod
    def _evaluated_at_utc(cls, value: datetime) -> datetime:
        return as_utc(value)

    @property
    def hostname(self) -> str:
        """Lower-cased host of ``url`` without a leading ``www.``."""
        target = self.url if "://" in self.url else f"https://{self.url}"
        host = (urlparse(target).hostname or "").lower()
        return host[4:] if host.startswith("www.") else host
