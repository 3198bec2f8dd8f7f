"""Scoring configuration for the page scoring engine.

Holds dimension weights, grade thresholds, category weight modifiers and
the per-dimension rule constants. Rules receive their section of this
config at construction time; nothing here is read as a global.

Deterministic -- no LLM calls.
"""

from __future__ import annotations

from pydantic import Field

from pagescore.config.settings import Settings
from pagescore.models.common import (
    Dimension,
    Grade,
    OverallScoreMode,
    PageCategory,
    PageScoreBase,
)


# ---------------------------------------------------------------------------
# Per-dimension rule constants
# ---------------------------------------------------------------------------


class AuthorityRuleConfig(PageScoreBase):
    """Constants for the authority rules."""

    trusted_domains: tuple[str, ...] = (
        "wikipedia.org",
        "gov",
        "edu",
        "ieee.org",
        "acm.org",
        "nature.com",
        "sciencedirect.com",
        "pubmed.ncbi.nlm.nih.gov",
        "arxiv.org",
        "springer.com",
        "wiley.com",
    )
    author_credential_keywords: tuple[str, ...] = (
        "PhD",
        "Dr.",
        "Professor",
        "Expert",
        "Specialist",
        "Certified",
        "Licensed",
        "Author",
        "Contributor",
        "Editor",
    )
    min_outbound_citations: int = Field(default=2, ge=0)
    # Points per outbound citation, capped; trusted sources earn on top.
    citation_multiplier: float = Field(default=10.0, ge=0.0)
    citation_points_cap: float = 40.0
    trusted_citation_points: float = 30.0
    trusted_points_cap: float = 60.0
    author_name_points: float = 60.0
    author_bio_points: float = 20.0
    author_credentials_points: float = 20.0


class FreshnessRuleConfig(PageScoreBase):
    """Day thresholds and timeliness constants for the freshness rules."""

    # (max_days, score) brackets walked in order; last bracket is the fallback.
    day_thresholds: list[tuple[int, float]] = Field(
        default_factory=lambda: [
            (90, 100.0),
            (180, 80.0),
            (365, 60.0),
        ],
    )
    stale_score: float = 40.0
    future_tolerance_days: int = Field(default=1, ge=0)
    evergreen_score: float = 60.0
    current_reference_bonus: float = 20.0
    outdated_year_gap: int = Field(default=2, ge=0)
    outdated_reference_penalty: float = 20.0
    max_outdated_penalty: float = 60.0
    # Case-insensitive regexes; each distinct match is one outdated reference.
    outdated_technology_patterns: tuple[str, ...] = (
        r"windows\s*(?:xp|vista|7|8)\b",
        r"internet\s*explorer\s*[6-9]\b",
        r"flash\s*player",
        r"jquery\s*1\.",
        r"angular\s*1\.",
        r"php\s*5\.",
        r"python\s*2\.",
        r"\bjava\s*[6-7]\b",
    )
    # "{year}" is replaced with the evaluation year before compiling.
    current_phrase_patterns: tuple[str, ...] = (
        r"\b{year}\s*(?:update|version|release|edition)",
        r"latest\s*(?:version|update|release)",
        r"recently\s*(?:updated|released|launched)",
        r"new\s*in\s*\d{4}",
    )


class StructureRuleConfig(PageScoreBase):
    """Heading, readability and guide-depth constants for the structure rules."""

    h1_min_words: int = 3
    h1_max_words: int = 10
    h1_descriptive_chars: int = 20
    generic_h1_patterns: tuple[str, ...] = (
        r"^(home|welcome|untitled|page \d+|hello world)$",
        r"^(click here|read more|learn more)$",
    )
    # (max words per subheading, score); denser is better.
    subheading_density_thresholds: list[tuple[int, float]] = Field(
        default_factory=lambda: [
            (100, 90.0),
            (199, 80.0),
            (300, 60.0),
        ],
    )
    sparse_subheading_score: float = 40.0
    no_subheading_score: float = 20.0
    question_heading_bonus: float = 10.0
    structured_elements_excellent: int = 5
    structured_elements_good: int = 3
    definition_list_bonus: float = 10.0
    # (max average words per sentence, score).
    sentence_word_thresholds: list[tuple[int, float]] = Field(
        default_factory=lambda: [
            (20, 100.0),
            (25, 80.0),
            (30, 60.0),
        ],
    )
    long_sentence_score: float = 40.0
    guide_word_count_excellent: int = 3000
    guide_word_count_good: int = 2000
    guide_word_count_basic: int = 1500
    guide_not_present_score: float = 20.0
    guide_url_keywords: tuple[str, ...] = (
        "guide",
        "ultimate",
        "complete",
        "tutorial",
        "how-to",
    )

    # Content-format rules: answers, instructions, definitions, media.
    min_content_chars: int = Field(default=100, ge=0)
    summary_markers: tuple[str, ...] = (
        "tl;dr",
        "tldr",
        "summary",
        "key takeaways",
        "key points",
        "at a glance",
        "overview",
    )
    # Share of the text a summary must start within to count as upfront.
    summary_lead_share: float = Field(default=0.2, gt=0.0, le=1.0)
    answer_indicators: tuple[str, ...] = (
        "the answer is",
        "in short",
        "simply put",
        "in a nutshell",
        "the short answer",
        "to put it simply",
        "the bottom line",
    )
    lead_sentence_count: int = Field(default=3, ge=1)
    how_to_patterns: tuple[str, ...] = (
        r"how\s+to\s+",
        r"step\s+\d+",
        r"step-by-step",
        r"instructions?\s+for",
        r"guide\s+to",
        r"tutorial",
        r"walkthrough",
    )
    action_verbs: tuple[str, ...] = (
        "click", "select", "choose", "enter", "type", "press", "navigate",
        "open", "close", "save", "download", "upload", "install", "configure",
        "set", "enable", "disable", "create", "delete", "update", "modify",
    )
    visual_aid_patterns: tuple[str, ...] = (
        r"screenshot",
        r"diagram",
        r"figure\s+\d+",
        r"image\s+shows",
        r"see\s+the\s+(?:image|screenshot|diagram)",
        r"as\s+shown\s+(?:below|above)",
    )
    outcome_patterns: tuple[str, ...] = (
        r"you\s+will\s+(?:be\s+able|have|see|get)",
        r"after\s+(?:completing|following)\s+(?:these\s+)?(?:steps|instructions)",
        r"result\s+(?:will\s+be|is)",
        r"you\s+should\s+(?:now\s+)?(?:see|have)",
    )
    definitional_url_pattern: str = r"(?:what[_-]is|definition|glossary|terminology|dictionary)"
    # Sentence-initial "X is a ...", "X refers to ..." statements.
    definition_pattern: str = (
        r"^[A-Z][\w'/()-]*(?:\s+[\w'/()-]+){0,5}\s+"
        r"(?:(?:is|are)\s+(?:a|an|the|any)\b|refers\s+to\b|means\b|is\s+defined\s+as\b)"
    )
    definitions_excellent: int = 5
    definitions_good: int = 2
    media_accessibility_markers: tuple[str, ...] = (
        "transcript",
        "closed caption",
        "closed-caption",
        "subtitle",
    )


class TechnicalRuleConfig(PageScoreBase):
    """Constants for the technical rules."""

    schema_types: tuple[str, ...] = (
        "Article",
        "BlogPosting",
        "NewsArticle",
        "FAQPage",
        "HowTo",
        "Recipe",
        "Review",
        "Organization",
        "Product",
        "BreadcrumbList",
        "WebPage",
    )
    soft_404_patterns: tuple[str, ...] = (
        "page not found",
        "404 error",
        "file not found",
        "nothing found",
        "no results found",
        "the page you requested",
        "could not be found",
        "does not exist",
    )
    soft_404_penalty: float = 40.0
    max_redirects: int = 2
    redirect_chain_penalty: float = 20.0
    meta_description_min_chars: int = 120
    meta_description_max_chars: int = 160
    url_lengthy_chars: int = 100
    url_too_long_chars: int = 200
    url_max_params: int = 3
    # (minimum internal links, score), best first; fewer than the last scores 0.
    internal_link_brackets: list[tuple[int, float]] = Field(
        default_factory=lambda: [
            (10, 100.0),
            (5, 80.0),
            (3, 60.0),
            (1, 40.0),
        ],
    )


class DomainRuleConfig(PageScoreBase):
    """Constants for the domain-level rules."""

    authority_level_scores: dict[str, float] = Field(
        default_factory=lambda: {
            "high": 100.0,
            "medium": 60.0,
            "low": 20.0,
            "unknown": 10.0,
        },
    )
    ai_crawlers: tuple[str, ...] = (
        "GPTBot",
        "ChatGPT-User",
        "ClaudeBot",
        "anthropic-ai",
        "PerplexityBot",
        "Google-Extended",
        "CCBot",
    )
    min_sitemap_urls: int = 1


# ---------------------------------------------------------------------------
# Engine-wide config
# ---------------------------------------------------------------------------


class ScoringConfig(PageScoreBase):
    """Configuration for the page scoring engine.

    Controls how dimension scores are weighted into the overall score and
    grade, how the orchestrator runs rules, and the constants each rule
    family is built with.
    """

    dimension_weights: dict[Dimension, float] = Field(
        default_factory=lambda: {
            Dimension.AUTHORITY: 1.0,
            Dimension.FRESHNESS: 2.5,
            Dimension.STRUCTURE: 1.5,
            Dimension.TECHNICAL: 1.5,
        },
    )
    overall_mode: OverallScoreMode = OverallScoreMode.WEIGHTED

    # Multipliers applied on top of dimension_weights for a page category.
    category_weight_modifiers: dict[PageCategory, dict[Dimension, float]] = Field(
        default_factory=lambda: {
            PageCategory.BLOG_ARTICLE: {
                Dimension.AUTHORITY: 1.5,
                Dimension.FRESHNESS: 1.2,
            },
            PageCategory.DOCUMENTATION_HELP: {Dimension.AUTHORITY: 0.7},
            PageCategory.CASE_STUDY: {Dimension.AUTHORITY: 1.3},
            PageCategory.PRICING: {
                Dimension.AUTHORITY: 0.5,
                Dimension.FRESHNESS: 0.5,
            },
            PageCategory.ABOUT_COMPANY: {
                Dimension.AUTHORITY: 0.5,
                Dimension.FRESHNESS: 0.5,
            },
        },
    )

    grade_thresholds: dict[Grade, float] = Field(
        default_factory=lambda: {
            Grade.A: 85.0,
            Grade.B: 70.0,
            Grade.C: 55.0,
            Grade.D: 40.0,
        },
    )

    nominal_dimension_weight: float = Field(default=1.0, gt=0.0)
    rule_timeout_seconds: float | None = Field(default=30.0, gt=0.0)
    concurrent_rules: bool = True
    max_concurrent_pages: int = Field(default=8, ge=1)

    authority: AuthorityRuleConfig = Field(default_factory=AuthorityRuleConfig)
    freshness: FreshnessRuleConfig = Field(default_factory=FreshnessRuleConfig)
    structure: StructureRuleConfig = Field(default_factory=StructureRuleConfig)
    technical: TechnicalRuleConfig = Field(default_factory=TechnicalRuleConfig)
    domain: DomainRuleConfig = Field(default_factory=DomainRuleConfig)

    @classmethod
    def from_settings(cls, settings: Settings) -> ScoringConfig:
        """Build a config whose execution knobs come from environment settings."""
        return cls(
            overall_mode=settings.OVERALL_SCORE_MODE,
            rule_timeout_seconds=settings.RULE_TIMEOUT_SECONDS,
            concurrent_rules=settings.CONCURRENT_RULES,
            max_concurrent_pages=settings.MAX_CONCURRENT_PAGES,
        )

    def effective_dimension_weight(
        self, dimension: Dimension, category: PageCategory,
    ) -> float:
        """Dimension weight after the category modifier is applied."""
        base = self.dimension_weights.get(dimension, 1.0)
        modifier = self.category_weight_modifiers.get(category, {}).get(dimension, 1.0)
        return base * modifier

    def grade_for(self, score: float) -> Grade:
        """Walk thresholds from A downwards; anything below D is F."""
        for grade in (Grade.A, Grade.B, Grade.C, Grade.D):
            threshold = self.grade_thresholds.get(grade)
            if threshold is not None and score >= threshold:
                return grade
        return Grade.F
