"""Tests for the domain-scoped rules."""

import pytest

from pagescore.models.common import DomainAuthorityLevel, ExecutionScope, Severity
from pagescore.models.signals import DomainSignals
from pagescore.rules.domain import AiCrawlerAccessRule, DomainAuthorityRule, XmlSitemapRule


def _site(**fields) -> DomainSignals:
    return DomainSignals(domain="example.com", **fields)


class TestDescriptors:
    @pytest.mark.parametrize("rule_type", [DomainAuthorityRule, XmlSitemapRule, AiCrawlerAccessRule])
    def test_domain_scope(self, rule_type) -> None:
        assert rule_type.DESCRIPTOR.execution_scope == ExecutionScope.DOMAIN


# ===================================================================
# DomainAuthorityRule
# ===================================================================


class TestDomainAuthority:
    @pytest.mark.parametrize(
        ("level", "score", "has_issue"),
        [
            (DomainAuthorityLevel.HIGH, 100.0, False),
            (DomainAuthorityLevel.MEDIUM, 60.0, False),
            (DomainAuthorityLevel.LOW, 20.0, True),
            (DomainAuthorityLevel.UNKNOWN, 10.0, True),
        ],
    )
    def test_levels(self, make_context, level, score: float, has_issue: bool) -> None:
        result = DomainAuthorityRule().evaluate(
            make_context(domain=_site(authority_level=level)),
        )
        assert result.score == score
        assert bool(result.issues) is has_issue

    def test_justification_in_evidence(self, make_context) -> None:
        result = DomainAuthorityRule().evaluate(
            make_context(
                domain=_site(
                    authority_level=DomainAuthorityLevel.HIGH,
                    authority_justification="Cited by national newspapers",
                ),
            ),
        )
        assert result.evidence == [
            "Domain authority level: high",
            "Cited by national newspapers",
        ]

    def test_no_domain_signals(self, make_context) -> None:
        result = DomainAuthorityRule().evaluate(make_context())
        assert result.score == 10.0
        assert result.evidence[0] == "No domain signals supplied"


# ===================================================================
# XmlSitemapRule
# ===================================================================


class TestXmlSitemap:
    def test_populated_sitemap(self, make_context) -> None:
        result = XmlSitemapRule().evaluate(
            make_context(domain=_site(has_sitemap=True, sitemap_url_count=120)),
        )
        assert result.score == 100.0
        assert result.evidence == ["XML sitemap lists 120 URL(s)"]

    def test_empty_sitemap(self, make_context) -> None:
        result = XmlSitemapRule().evaluate(make_context(domain=_site(has_sitemap=True)))
        assert result.score == 50.0
        assert result.issues[0].severity == Severity.LOW

    def test_no_sitemap(self, make_context) -> None:
        result = XmlSitemapRule().evaluate(make_context(domain=_site()))
        assert result.score == 0.0
        assert result.issues[0].title == "No XML sitemap"

    def test_no_domain_signals(self, make_context) -> None:
        result = XmlSitemapRule().evaluate(make_context())
        assert result.score == 0.0
        assert result.evidence[0] == "No domain signals supplied"


# ===================================================================
# AiCrawlerAccessRule
# ===================================================================


class TestAiCrawlerAccess:
    def test_fully_open_with_llms_txt(self, make_context) -> None:
        result = AiCrawlerAccessRule().evaluate(
            make_context(domain=_site(has_robots_txt=True, has_llms_txt=True)),
        )
        assert result.score == 100.0
        assert result.issues == []

    def test_blocked_crawlers(self, make_context) -> None:
        result = AiCrawlerAccessRule().evaluate(
            make_context(
                domain=_site(
                    has_robots_txt=True,
                    blocked_ai_crawlers=("gptbot", "CCBot", "SomeOtherBot"),
                ),
            ),
        )
        assert result.score == pytest.approx(90.0 * 5 / 7)
        assert result.details["blocked"] == ["CCBot", "GPTBot"]
        assert [i.severity for i in result.issues] == [Severity.HIGH, Severity.LOW]

    def test_missing_robots_allows_by_default(self, make_context) -> None:
        result = AiCrawlerAccessRule().evaluate(make_context(domain=_site()))
        assert result.score == 90.0
        assert result.evidence[0].startswith("No robots.txt found")

    def test_no_domain_signals(self, make_context) -> None:
        result = AiCrawlerAccessRule().evaluate(make_context())
        assert result.score == 0.0
        assert result.issues == []
