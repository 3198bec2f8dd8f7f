"""Default rule set and declared unscored headroom.

Authority and freshness page rules sum to 0.9; the remaining 0.1 of each is
reserved and never scored. All other populated dimensions sum to 1.0.
"""

from __future__ import annotations

from pagescore.models.common import Dimension, ExecutionScope
from pagescore.rules.authority import AUTHORITY_BASE, AuthorPresenceRule, CitationQualityRule
from pagescore.rules.base import FloorRule
from pagescore.rules.content import (
    ConciseAnswersRule,
    DefinitionalContentRule,
    HowToContentRule,
    MultimodalContentRule,
)
from pagescore.rules.domain import AiCrawlerAccessRule, DomainAuthorityRule, XmlSitemapRule
from pagescore.rules.freshness import (
    FRESHNESS_BASE,
    DateSignalsRule,
    TimelinessRule,
    UpdateFrequencyRule,
)
from pagescore.rules.structure import (
    STRUCTURE_BASE,
    InDepthGuideRule,
    ListsTablesRule,
    MainHeadingRule,
    ReadabilityRule,
    SubheadingsRule,
)
from pagescore.rules.technical import (
    TECHNICAL_BASE,
    ImageAltRule,
    InternalLinkingRule,
    MetaDescriptionRule,
    StatusCodeRule,
    StructuredDataRule,
    UrlStructureRule,
)
from pagescore.scoring.config import ScoringConfig
from pagescore.scoring.rule import Rule

# (dimension, scope, reserved weight)
DEFAULT_RESERVATIONS: tuple[tuple[Dimension, ExecutionScope, float], ...] = (
    (Dimension.AUTHORITY, ExecutionScope.PAGE, 0.1),
    (Dimension.FRESHNESS, ExecutionScope.PAGE, 0.1),
)


def default_rules(config: ScoringConfig | None = None) -> list[Rule]:
    """Instantiate every default rule with its section of ``config``."""
    config = config or ScoringConfig()
    return [
        # authority
        FloorRule(descriptor=AUTHORITY_BASE),
        AuthorPresenceRule(config.authority),
        CitationQualityRule(config.authority),
        # freshness
        FloorRule(descriptor=FRESHNESS_BASE),
        DateSignalsRule(config.freshness),
        UpdateFrequencyRule(config.freshness),
        TimelinessRule(config.freshness),
        # structure
        FloorRule(descriptor=STRUCTURE_BASE),
        MainHeadingRule(config.structure),
        SubheadingsRule(config.structure),
        ListsTablesRule(config.structure),
        ReadabilityRule(config.structure),
        InDepthGuideRule(config.structure),
        MultimodalContentRule(config.structure),
        ConciseAnswersRule(config.structure),
        HowToContentRule(config.structure),
        DefinitionalContentRule(config.structure),
        # technical
        FloorRule(descriptor=TECHNICAL_BASE),
        StatusCodeRule(config.technical),
        StructuredDataRule(config.technical),
        MetaDescriptionRule(config.technical),
        ImageAltRule(config.technical),
        UrlStructureRule(config.technical),
        InternalLinkingRule(config.technical),
        # domain pass
        DomainAuthorityRule(config.domain),
        XmlSitemapRule(config.domain),
        AiCrawlerAccessRule(config.domain),
    ]
