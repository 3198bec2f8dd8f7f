"""Technical rules: status code, structured data, meta description, images, URLs, internal links.

Deterministic -- no LLM analysis exists for this dimension.
"""

from __future__ import annotations

import re
from collections import Counter
from urllib.parse import parse_qs, urlparse

from pagescore.models.common import Dimension, Severity
from pagescore.models.results import Issue, RuleResult
from pagescore.models.rule import RuleDescriptor
from pagescore.models.signals import RuleContext
from pagescore.scoring.config import TechnicalRuleConfig
from pagescore.scoring.rule import Rule, build_result, make_issue

TECHNICAL_BASE = RuleDescriptor(
    id="technical-base",
    name="Technical Base",
    description="Floor score for every published page.",
    dimension=Dimension.TECHNICAL,
    weight=0.1,
    priority=100,
)

_FILE_EXTENSION_RE = re.compile(r"\.(html?|php|aspx?|jsp)$", re.IGNORECASE)


class StatusCodeRule(Rule):
    """Scores the HTTP status, soft-404 content and redirect chains."""

    DESCRIPTOR = RuleDescriptor(
        id="status-code",
        name="Status Code",
        description="HTTP status of the final response, soft 404s and redirects.",
        dimension=Dimension.TECHNICAL,
        weight=0.25,
        priority=95,
    )
    config_type = TechnicalRuleConfig

    def evaluate(self, context: RuleContext) -> RuleResult:
        cfg: TechnicalRuleConfig = self.config
        signals = context.signals
        evidence: list[str] = []
        issues: list[Issue] = []

        status = signals.status_code
        if status is None:
            status = 200
            evidence.append("No status code recorded; assuming 200 since content was extracted")

        if 200 <= status < 300:
            score = 100.0
            evidence.append(f"Page returns {status}")
        elif 300 <= status < 400:
            score = 60.0
            evidence.append(f"Page returns redirect status {status}")
            issues.append(
                make_issue(
                    Severity.MEDIUM,
                    "Page is a redirect",
                    "Link directly to the final URL instead of a redirecting one.",
                )
            )
        else:
            score = 0.0
            evidence.append(f"Page returns error status {status}")
            issues.append(
                make_issue(
                    Severity.CRITICAL,
                    f"Page returns HTTP {status}",
                    "Fix or redirect the page; AI crawlers drop pages that return errors.",
                )
            )

        if 200 <= status < 300:
            lowered = signals.text.lower()
            matched = [p for p in cfg.soft_404_patterns if p in lowered]
            if matched:
                score = max(0.0, score - cfg.soft_404_penalty)
                evidence.append(f"Possible soft 404, found: {', '.join(matched)}")
                issues.append(
                    make_issue(
                        Severity.HIGH,
                        "Possible soft 404",
                        "Return a real 404 status for missing pages, or remove the error text.",
                    )
                )

        redirects = signals.redirect_count
        if redirects:
            evidence.append(f"{redirects} redirect(s) before the final response")
            if redirects > cfg.max_redirects:
                score = max(0.0, score - cfg.redirect_chain_penalty)
                issues.append(
                    make_issue(
                        Severity.LOW,
                        "Redirect chain",
                        f"Reduce the chain to at most {cfg.max_redirects} redirects.",
                    )
                )

        return build_result(
            score,
            evidence,
            details={"status_code": status, "redirects": redirects},
            issues=issues,
        )


class StructuredDataRule(Rule):
    """Scores schema.org markup against the recognised types."""

    DESCRIPTOR = RuleDescriptor(
        id="structured-data",
        name="Structured Data",
        description="schema.org types present in JSON-LD or microdata.",
        dimension=Dimension.TECHNICAL,
        weight=0.2,
        priority=90,
    )
    config_type = TechnicalRuleConfig

    def evaluate(self, context: RuleContext) -> RuleResult:
        cfg: TechnicalRuleConfig = self.config
        found = list(dict.fromkeys(context.signals.schema_types))
        if not found:
            return build_result(
                0.0,
                ["No structured data found"],
                details={"schema_types": []},
                issues=[
                    make_issue(
                        Severity.MEDIUM,
                        "No structured data",
                        "Add JSON-LD markup (e.g. Article, FAQPage, Organization).",
                    ),
                ],
            )

        known = {t.lower() for t in cfg.schema_types}
        recognised = [t for t in found if t.lower() in known]
        evidence = [f"Schema types found: {', '.join(found)}"]
        issues: list[Issue] = []
        if len(recognised) >= 2:
            score = 100.0
        elif recognised:
            score = 80.0
        else:
            score = 50.0
            evidence.append("None of the schema types are commonly used for rich results")
            issues.append(
                make_issue(
                    Severity.LOW,
                    "Uncommon schema types only",
                    "Add a widely supported type such as Article or FAQPage.",
                )
            )

        return build_result(
            score,
            evidence,
            details={"schema_types": found, "recognised": recognised},
            issues=issues,
        )


class MetaDescriptionRule(Rule):
    """Scores presence, length, keyword stuffing and uniqueness of the meta description."""

    DESCRIPTOR = RuleDescriptor(
        id="meta-description",
        name="Meta Description",
        description="Meta description length and quality.",
        dimension=Dimension.TECHNICAL,
        weight=0.15,
        priority=85,
    )
    config_type = TechnicalRuleConfig

    def evaluate(self, context: RuleContext) -> RuleResult:
        cfg: TechnicalRuleConfig = self.config
        description = (context.signals.meta_description or "").strip()
        if not description:
            return build_result(
                0.0,
                ["No meta description found"],
                details={"length": 0},
                issues=[
                    make_issue(
                        Severity.HIGH,
                        "Missing meta description",
                        f"Write a {cfg.meta_description_min_chars}-"
                        f"{cfg.meta_description_max_chars} character summary of the page.",
                    ),
                ],
            )

        length = len(description)
        score = 20.0
        evidence = ["Meta description present"]
        issues: list[Issue] = []

        if cfg.meta_description_min_chars <= length <= cfg.meta_description_max_chars:
            score += 50.0
            evidence.append(f"Optimal length ({length} chars)")
        elif 50 <= length < cfg.meta_description_min_chars:
            score += 30.0
            evidence.append(f"Slightly short ({length} chars)")
        elif cfg.meta_description_max_chars < length <= 200:
            score += 30.0
            evidence.append(f"Slightly long ({length} chars)")
        elif length > 200:
            score += 15.0
            evidence.append(f"Too long ({length} chars), will be truncated")
        else:
            score += 10.0
            evidence.append(f"Too short ({length} chars)")

        if not cfg.meta_description_min_chars <= length <= cfg.meta_description_max_chars:
            issues.append(
                make_issue(
                    Severity.LOW,
                    "Meta description length",
                    f"Aim for {cfg.meta_description_min_chars}-"
                    f"{cfg.meta_description_max_chars} characters.",
                )
            )

        counts = Counter(w for w in re.findall(r"[a-z']+", description.lower()) if len(w) > 3)
        stuffed = sorted(w for w, n in counts.items() if n > 2)
        if stuffed:
            evidence.append(f"Possible keyword stuffing: {', '.join(stuffed)}")
            issues.append(
                make_issue(
                    Severity.LOW,
                    "Keyword stuffing in meta description",
                    "Write the description for readers; mention each keyword once.",
                )
            )
        else:
            score += 10.0
            evidence.append("Natural keyword usage")

        title = (context.signals.title or "").strip().lower()
        if title and description.lower() == title:
            evidence.append("Meta description duplicates the title")
            issues.append(
                make_issue(
                    Severity.MEDIUM,
                    "Meta description duplicates title",
                    "Use the description to add detail the title does not carry.",
                )
            )
        else:
            score += 20.0
            evidence.append("Meta description is distinct from the title")

        return build_result(score, evidence, details={"length": length}, issues=issues)


class ImageAltRule(Rule):
    """Scores the share of images carrying alt text."""

    DESCRIPTOR = RuleDescriptor(
        id="image-alt",
        name="Image Alt Attributes",
        description="Share of images with alt text.",
        dimension=Dimension.TECHNICAL,
        weight=0.15,
        priority=80,
    )
    config_type = TechnicalRuleConfig

    def evaluate(self, context: RuleContext) -> RuleResult:
        total = context.signals.image_count
        if total == 0:
            return build_result(100.0, ["No images to check"], details={"images": 0})

        missing = min(context.signals.images_missing_alt, total)
        coverage = (total - missing) / total * 100.0
        evidence = [f"{total - missing} of {total} images have alt text ({coverage:.0f}%)"]
        issues: list[Issue] = []
        if missing:
            issues.append(
                make_issue(
                    Severity.MEDIUM if coverage < 50.0 else Severity.LOW,
                    "Images missing alt text",
                    f"Describe the {missing} image(s) without alt text.",
                )
            )
        return build_result(
            coverage,
            evidence,
            details={"images": total, "missing_alt": missing},
            issues=issues,
        )


class UrlStructureRule(Rule):
    """Scores URL length, HTTPS, readability, special characters and parameters."""

    DESCRIPTOR = RuleDescriptor(
        id="url-structure",
        name="URL Structure",
        description="Short, secure, descriptive URLs.",
        dimension=Dimension.TECHNICAL,
        weight=0.1,
        priority=75,
    )
    config_type = TechnicalRuleConfig

    def evaluate(self, context: RuleContext) -> RuleResult:
        cfg: TechnicalRuleConfig = self.config
        url = context.url
        parsed = urlparse(url if "://" in url else f"https://{url}")
        path = parsed.path or "/"
        segments = [s for s in path.strip("/").split("/") if s]
        score = 100.0
        evidence: list[str] = []
        issues: list[Issue] = []

        if len(url) > cfg.url_too_long_chars:
            score -= 20.0
            evidence.append(f"URL too long ({len(url)} chars)")
        elif len(url) > cfg.url_lengthy_chars:
            score -= 10.0
            evidence.append(f"URL is lengthy ({len(url)} chars)")
        else:
            evidence.append(f"URL length is good ({len(url)} chars)")

        if parsed.scheme != "https":
            score -= 30.0
            evidence.append("Not using HTTPS")
            issues.append(
                make_issue(
                    Severity.HIGH,
                    "Page not served over HTTPS",
                    "Serve the page over HTTPS and redirect HTTP requests.",
                )
            )
        else:
            evidence.append("Using HTTPS")

        if self._is_descriptive(segments):
            evidence.append("URL uses descriptive, readable words")
        else:
            score -= 15.0
            evidence.append("URL could be more descriptive")

        special = []
        if any(c.isupper() for c in path):
            special.append("uppercase letters")
        if "_" in path:
            special.append("underscores")
        if "%20" in path or " " in path:
            special.append("encoded spaces")
        if special:
            score -= 10.0 * len(special)
            evidence.append(f"Problematic characters in URL: {', '.join(special)}")

        if len(segments) > 5:
            score -= 10.0
            evidence.append(f"Deep URL hierarchy ({len(segments)} levels)")

        params = parse_qs(parsed.query)
        if len(params) > cfg.url_max_params:
            score -= 15.0
            evidence.append(f"Too many URL parameters ({len(params)})")
        elif params:
            evidence.append(f"URL has {len(params)} parameter(s)")

        if _FILE_EXTENSION_RE.search(path):
            score -= 5.0
            evidence.append("URL includes a file extension")

        if score < 60.0 and parsed.scheme == "https":
            issues.append(
                make_issue(
                    Severity.LOW,
                    "URL structure could be improved",
                    "Use short, lowercase, hyphenated paths without parameters.",
                )
            )

        return build_result(
            score,
            evidence,
            details={"length": len(url), "segments": len(segments), "params": len(params)},
            issues=issues,
        )

    @staticmethod
    def _is_descriptive(segments: list[str]) -> bool:
        if not segments:
            return True
        words = [w for s in segments for w in re.split(r"[-_.]", s) if len(w) > 2]
        return any(w.isalpha() for w in words)


class InternalLinkingRule(Rule):
    """Scores how many links point to other pages on the same site."""

    DESCRIPTOR = RuleDescriptor(
        id="internal-linking",
        name="Internal Linking",
        description="Links from this page into the rest of the site.",
        dimension=Dimension.TECHNICAL,
        weight=0.05,
        priority=70,
    )
    config_type = TechnicalRuleConfig

    def evaluate(self, context: RuleContext) -> RuleResult:
        cfg: TechnicalRuleConfig = self.config
        links = context.signals.internal_link_count
        score = 0.0
        for minimum, bracket_score in cfg.internal_link_brackets:
            if links >= minimum:
                score = bracket_score
                break

        evidence = [f"{links} internal link(s) found"]
        issues: list[Issue] = []
        if links == 0:
            evidence.append("Page is a dead end for crawlers")
            issues.append(
                make_issue(
                    Severity.MEDIUM,
                    "No internal links",
                    "Link to related pages and the relevant pillar or hub page.",
                )
            )
        elif score < 60.0:
            issues.append(
                make_issue(
                    Severity.LOW,
                    "Few internal links",
                    "Add descriptive links to related content on the same site.",
                )
            )
        return build_result(score, evidence, details={"internal_links": links}, issues=issues)
