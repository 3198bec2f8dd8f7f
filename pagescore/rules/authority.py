"""Authority rules: author attribution and citation quality.

Both rules are LLM-eligible. The heuristic branch reads the extracted byline
and outbound links; an available ``AuthorityAnalysis`` can only add to that
score, never take away from it.
"""

from __future__ import annotations

from urllib.parse import urlparse

from pagescore.models.common import Dimension, PageCategory, Severity
from pagescore.models.results import Issue, RuleResult
from pagescore.models.rule import Applicability, RuleDescriptor
from pagescore.models.signals import AuthorityAnalysis, RuleContext
from pagescore.scoring.config import AuthorityRuleConfig
from pagescore.scoring.rule import Rule, build_result, make_issue

AUTHORITY_BASE = RuleDescriptor(
    id="authority-base",
    name="Authority Base",
    description="Floor score for every published page.",
    dimension=Dimension.AUTHORITY,
    weight=0.2,
    priority=100,
)


def host_of(link: str) -> str:
    target = link if "://" in link else f"https://{link}"
    host = (urlparse(target).hostname or "").lower()
    return host[4:] if host.startswith("www.") else host


def is_trusted_host(host: str, trusted_domains: tuple[str, ...]) -> bool:
    """Match exact hosts, subdomains, and bare suffixes such as ``gov``."""
    for domain in trusted_domains:
        domain = domain.lower().lstrip(".")
        if host == domain or host.endswith(f".{domain}"):
            return True
    return False


class AuthorPresenceRule(Rule):
    """Scores author byline, bio and credentials."""

    DESCRIPTOR = RuleDescriptor(
        id="author-presence",
        name="Author Presence",
        description="Author byline, bio and credentials on the page.",
        dimension=Dimension.AUTHORITY,
        weight=0.4,
        priority=90,
        llm_eligible=True,
    )
    config_type = AuthorityRuleConfig

    def evaluate(self, context: RuleContext) -> RuleResult:
        cfg: AuthorityRuleConfig = self.config
        signals = context.signals
        evidence: list[str] = []
        score = 0.0

        author = (signals.author_name or "").strip()
        bio = (signals.author_bio or "").strip()
        has_author = bool(author)
        has_credentials = self._has_credentials(f"{author} {bio}")

        if has_author:
            score += cfg.author_name_points
            evidence.append(f"Author byline found: {author}")
        else:
            evidence.append("No author byline found")
        if bio:
            score += cfg.author_bio_points
            evidence.append("Author bio present")
        if has_credentials:
            score += cfg.author_credentials_points
            evidence.append("Author credentials mentioned")

        llm_used = False
        analysis = context.llm.for_dimension(Dimension.AUTHORITY)
        if isinstance(analysis, AuthorityAnalysis):
            llm_used = True
            if analysis.has_author and not has_author:
                has_author = True
                score += cfg.author_name_points
                name = analysis.author_name or "unnamed author"
                evidence.append(f"LLM identified author: {name}")
            if analysis.author_credentials and not has_credentials:
                has_credentials = True
                score += cfg.author_credentials_points
                evidence.append("LLM identified author credentials")

        issues: list[Issue] = []
        if not has_author:
            issues.append(
                make_issue(
                    Severity.MEDIUM,
                    "No author attribution",
                    "Add a visible author byline with a short bio to build credibility.",
                )
            )
        elif not has_credentials:
            issues.append(
                make_issue(
                    Severity.LOW,
                    "Author credentials not shown",
                    "Mention the author's expertise, role or certifications.",
                )
            )

        return build_result(
            score,
            evidence,
            details={
                "has_author": has_author,
                "has_bio": bool(bio),
                "has_credentials": has_credentials,
            },
            issues=issues,
            llm_used=llm_used,
        )

    def _has_credentials(self, text: str) -> bool:
        lowered = text.lower()
        return any(k.lower() in lowered for k in self.config.author_credential_keywords)


class CitationQualityRule(Rule):
    """Scores outbound citations, with extra credit for trusted sources."""

    DESCRIPTOR = RuleDescriptor(
        id="citation-quality",
        name="Citation Quality",
        description="Outbound citations and how many point at trusted sources.",
        dimension=Dimension.AUTHORITY,
        weight=0.3,
        priority=80,
        applicability=Applicability.only(
            PageCategory.BLOG_ARTICLE,
            PageCategory.DOCUMENTATION_HELP,
            PageCategory.CASE_STUDY,
        ),
        llm_eligible=True,
    )
    config_type = AuthorityRuleConfig

    def evaluate(self, context: RuleContext) -> RuleResult:
        cfg: AuthorityRuleConfig = self.config
        own_host = context.hostname
        external = [
            link for link in context.signals.outbound_links
            if host_of(link) and host_of(link) != own_host
        ]
        trusted = sorted({
            host_of(link) for link in external
            if is_trusted_host(host_of(link), cfg.trusted_domains)
        })

        citations = len(external)
        trusted_count = len(trusted)
        evidence: list[str] = []
        if citations:
            evidence.append(f"{citations} outbound citation(s) found")
        else:
            evidence.append("No outbound citations found")
        if trusted:
            evidence.append(f"Trusted sources cited: {', '.join(trusted)}")

        llm_used = False
        analysis = context.llm.for_dimension(Dimension.AUTHORITY)
        if isinstance(analysis, AuthorityAnalysis):
            llm_used = True
            if analysis.citation_count > citations:
                evidence.append(f"LLM counted {analysis.citation_count} citations in content")
                citations = analysis.citation_count
            if len(analysis.trusted_citations) > trusted_count:
                evidence.append(
                    f"LLM identified trusted citations: {', '.join(analysis.trusted_citations)}"
                )
                trusted_count = len(analysis.trusted_citations)

        score = self._points(citations, trusted_count)

        issues: list[Issue] = []
        if citations < cfg.min_outbound_citations:
            issues.append(
                make_issue(
                    Severity.MEDIUM,
                    "Few outbound citations",
                    f"Cite at least {cfg.min_outbound_citations} reputable sources "
                    "to support key claims.",
                )
            )
        elif trusted_count == 0:
            issues.append(
                make_issue(
                    Severity.LOW,
                    "No trusted sources cited",
                    "Link to research, standards bodies or other authoritative references.",
                )
            )

        return build_result(
            score,
            evidence,
            details={"citations": citations, "trusted_citations": trusted_count},
            issues=issues,
            llm_used=llm_used,
        )

    def _points(self, citations: int, trusted: int) -> float:
        cfg: AuthorityRuleConfig = self.config
        citation_points = min(cfg.citation_points_cap, citations * cfg.citation_multiplier)
        trusted_points = min(cfg.trusted_points_cap, trusted * cfg.trusted_citation_points)
        return citation_points + trusted_points
