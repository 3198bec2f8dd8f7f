"""Domain-scoped rules, evaluated once per site in the domain pass.

They read ``RuleContext.domain`` and never run in the page pass. A context
without domain signals degrades to the lowest scores with evidence saying so.
"""

from __future__ import annotations

from pagescore.models.common import Dimension, ExecutionScope, Severity
from pagescore.models.results import Issue, RuleResult
from pagescore.models.rule import RuleDescriptor
from pagescore.models.signals import RuleContext
from pagescore.scoring.config import DomainRuleConfig
from pagescore.scoring.rule import Rule, build_result, make_issue

_NO_DOMAIN_SIGNALS = "No domain signals supplied"


class DomainAuthorityRule(Rule):
    """Scores the externally researched reputation of the domain."""

    DESCRIPTOR = RuleDescriptor(
        id="domain-authority",
        name="Domain Authority",
        description="Reputation level of the domain.",
        dimension=Dimension.AUTHORITY,
        weight=1.0,
        priority=80,
        execution_scope=ExecutionScope.DOMAIN,
    )
    config_type = DomainRuleConfig

    def evaluate(self, context: RuleContext) -> RuleResult:
        cfg: DomainRuleConfig = self.config
        domain = context.domain
        level = domain.authority_level.value if domain else "unknown"
        score = cfg.authority_level_scores.get(level, 0.0)

        evidence = [_NO_DOMAIN_SIGNALS] if domain is None else []
        evidence.append(f"Domain authority level: {level}")
        if domain and domain.authority_justification:
            evidence.append(domain.authority_justification)

        issues: list[Issue] = []
        if level in ("low", "unknown"):
            issues.append(
                make_issue(
                    Severity.MEDIUM,
                    "Low domain authority",
                    "Earn mentions from reputable publications and keep entity profiles current.",
                )
            )
        return build_result(score, evidence, details={"level": level}, issues=issues)


class XmlSitemapRule(Rule):
    """Checks that the site publishes a non-empty XML sitemap."""

    DESCRIPTOR = RuleDescriptor(
        id="xml-sitemap",
        name="XML Sitemap",
        description="Presence and size of the site's XML sitemap.",
        dimension=Dimension.TECHNICAL,
        weight=0.5,
        priority=90,
        execution_scope=ExecutionScope.DOMAIN,
    )
    config_type = DomainRuleConfig

    def evaluate(self, context: RuleContext) -> RuleResult:
        cfg: DomainRuleConfig = self.config
        domain = context.domain
        if domain is None or not domain.has_sitemap:
            evidence = [_NO_DOMAIN_SIGNALS] if domain is None else []
            evidence.append("No XML sitemap found")
            return build_result(
                0.0,
                evidence,
                details={"sitemap_urls": 0},
                issues=[
                    make_issue(
                        Severity.MEDIUM,
                        "No XML sitemap",
                        "Publish /sitemap.xml and reference it from robots.txt.",
                    ),
                ],
            )

        urls = domain.sitemap_url_count
        if urls >= cfg.min_sitemap_urls:
            return build_result(
                100.0,
                [f"XML sitemap lists {urls} URL(s)"],
                details={"sitemap_urls": urls},
            )
        return build_result(
            50.0,
            ["XML sitemap found but lists no URLs"],
            details={"sitemap_urls": urls},
            issues=[
                make_issue(
                    Severity.LOW,
                    "Empty XML sitemap",
                    "Make sure the sitemap lists every indexable page.",
                ),
            ],
        )


class AiCrawlerAccessRule(Rule):
    """Scores whether AI crawlers may fetch the site and whether llms.txt exists."""

    DESCRIPTOR = RuleDescriptor(
        id="ai-crawler-access",
        name="AI Crawler Access",
        description="robots.txt rules for AI crawlers and llms.txt presence.",
        dimension=Dimension.TECHNICAL,
        weight=0.5,
        priority=80,
        execution_scope=ExecutionScope.DOMAIN,
    )
    config_type = DomainRuleConfig

    def evaluate(self, context: RuleContext) -> RuleResult:
        cfg: DomainRuleConfig = self.config
        domain = context.domain
        if domain is None:
            return build_result(
                0.0,
                [_NO_DOMAIN_SIGNALS],
                details={"blocked": []},
            )

        known = {c.lower(): c for c in cfg.ai_crawlers}
        blocked = sorted(
            {known[b.lower()] for b in domain.blocked_ai_crawlers if b.lower() in known}
        )
        allowed_share = 1.0 - len(blocked) / len(known) if known else 1.0
        score = 90.0 * allowed_share
        evidence: list[str] = []
        issues: list[Issue] = []

        if not domain.has_robots_txt:
            evidence.append("No robots.txt found; crawlers are allowed by default")
        if blocked:
            evidence.append(f"AI crawlers blocked: {', '.join(blocked)}")
            issues.append(
                make_issue(
                    Severity.HIGH,
                    "AI crawlers blocked",
                    "Allow AI crawlers in robots.txt if the site should appear in AI answers.",
                )
            )
        else:
            evidence.append("All known AI crawlers are allowed")

        if domain.has_llms_txt:
            score += 10.0
            evidence.append("llms.txt found")
        else:
            evidence.append("No llms.txt found")
            issues.append(
                make_issue(
                    Severity.LOW,
                    "No llms.txt",
                    "Publish /llms.txt summarising the site's key pages for language models.",
                )
            )

        return build_result(
            score,
            evidence,
            details={"blocked": blocked, "has_llms_txt": domain.has_llms_txt},
            issues=issues,
        )
