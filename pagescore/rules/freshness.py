"""Freshness rules: date signals, update recency and temporal relevance.

Recency is measured against ``RuleContext.evaluated_at``, never the wall
clock, so the same context always scores the same.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from datetime import datetime

from pagescore.models.common import Dimension, Severity, as_utc
from pagescore.models.results import Issue, RuleResult
from pagescore.models.rule import RuleDescriptor
from pagescore.models.signals import FreshnessAnalysis, RuleContext
from pagescore.scoring.config import FreshnessRuleConfig
from pagescore.scoring.rule import Rule, build_result, make_issue, walk_thresholds

FRESHNESS_BASE = RuleDescriptor(
    id="freshness-base",
    name="Freshness Base",
    description="Floor score for every published page.",
    dimension=Dimension.FRESHNESS,
    weight=0.1,
    priority=100,
)

_YEAR_RE = re.compile(r"\b(19\d{2}|20\d{2})\b")

_TIMELESS_MARKERS: tuple[str, ...] = (
    "fundamental",
    "principle",
    "always",
    "timeless",
    "basics",
    "definition",
    "what is",
    "how to",
)


def _fmt(value: datetime) -> str:
    return as_utc(value).date().isoformat()


def _distinct_matches(text: str, patterns: Iterable[str]) -> list[str]:
    """Distinct matched phrases in first-seen order, whitespace collapsed."""
    seen: dict[str, None] = {}
    for pattern in patterns:
        for match in re.finditer(pattern, text, re.IGNORECASE):
            seen.setdefault(" ".join(match.group(0).split()), None)
    return list(seen)


def _span(days: int) -> str:
    if days % 365 == 0:
        years = days // 365
        return "a year" if years == 1 else f"{years} years"
    if days % 30 == 0:
        months = days // 30
        return "a month" if months == 1 else f"{months} months"
    return f"{days} days"


def _overdue_issue(days: int, limits: list[int]) -> Issue | None:
    """Issue for the largest recency bracket ``days`` has outgrown.

    Severity rises towards HIGH as the outgrown bracket nears the last one.
    """
    passed = [i for i, limit in enumerate(limits) if days > limit]
    if not passed:
        return None
    index = passed[-1]
    limit = limits[index]
    if index == len(limits) - 1:
        return make_issue(
            Severity.HIGH,
            f"Content not updated in over {_span(limit)}",
            f"Review and refresh this page; content should be updated within {limit} days.",
        )
    if index == len(limits) - 2:
        return make_issue(
            Severity.MEDIUM,
            f"Content not updated in {_span(limit)}",
            f"Update the content within {limit} days for a better freshness score.",
        )
    return make_issue(
        Severity.LOW,
        f"Content not updated in {_span(limit)}",
        f"Update the content within {limit} days for an optimal freshness score.",
    )


class DateSignalsRule(Rule):
    """Checks that the page exposes publish or modified dates."""

    DESCRIPTOR = RuleDescriptor(
        id="date-signals",
        name="Date Signals",
        description="Publish and modified dates in metadata, schema or content.",
        dimension=Dimension.FRESHNESS,
        weight=0.2,
        priority=95,
    )
    config_type = FreshnessRuleConfig

    def evaluate(self, context: RuleContext) -> RuleResult:
        dates = context.signals.dates
        evidence: list[str] = []
        issues: list[Issue] = []

        if dates.has_any:
            score = 100.0
            evidence.append(f"Date signals found via {dates.source or 'metadata'}")
            if dates.published_at is not None:
                evidence.append(f"Published: {_fmt(dates.published_at)}")
            if dates.modified_at is not None:
                evidence.append(f"Last modified: {_fmt(dates.modified_at)}")
        elif dates.date_in_url or dates.date_in_title:
            score = 50.0
            evidence.append("Date only found in URL or title, not in metadata")
            issues.append(
                make_issue(
                    Severity.LOW,
                    "Dates missing from metadata",
                    "Expose datePublished and dateModified in meta tags or schema.org markup.",
                )
            )
        else:
            score = 0.0
            evidence.append("No date signals found in content or metadata")
            issues.append(
                make_issue(
                    Severity.HIGH,
                    "No date signals",
                    "Show a visible publish or last-updated date and add it to the page metadata.",
                )
            )

        if dates.date_in_url:
            evidence.append("Date found in URL")
        if dates.date_in_title:
            evidence.append("Date found in page title")
        if dates.update_indicators:
            evidence.append(f"Update indicators found: {', '.join(dates.update_indicators)}")

        return build_result(
            score,
            evidence,
            details={"source": dates.source, "has_dates": dates.has_any},
            issues=issues,
        )


class UpdateFrequencyRule(Rule):
    """Scores how recently the content was updated."""

    DESCRIPTOR = RuleDescriptor(
        id="update-frequency",
        name="Update Frequency",
        description="Days since the last update against fixed recency brackets.",
        dimension=Dimension.FRESHNESS,
        weight=0.4,
        priority=90,
    )
    config_type = FreshnessRuleConfig

    def evaluate(self, context: RuleContext) -> RuleResult:
        cfg: FreshnessRuleConfig = self.config
        dates = context.signals.dates
        last_update = dates.last_update
        if last_update is None:
            return build_result(
                0.0,
                ["No publish or modified date available to measure recency"],
                details={"days_since_update": None},
                issues=[
                    make_issue(
                        Severity.MEDIUM,
                        "Update recency unknown",
                        "Publish a last-updated date so freshness can be assessed.",
                    ),
                ],
            )

        days = (context.evaluated_at - last_update).days
        kind = "modified" if dates.modified_at is not None else "publish"
        if days < -cfg.future_tolerance_days:
            return build_result(
                cfg.stale_score,
                [f"{kind.capitalize()} date {_fmt(last_update)} lies in the future"],
                details={"days_since_update": days},
                issues=[
                    make_issue(
                        Severity.LOW,
                        "Future-dated content",
                        "Correct the page's date metadata.",
                    ),
                ],
            )
        days = max(0, days)

        score, limit = walk_thresholds(days, cfg.day_thresholds, cfg.stale_score)
        bracket = f"<= {limit} days" if limit is not None else "stale"
        evidence = [
            f"Content updated {days} days ago ({_fmt(last_update)}) - {bracket}",
            f"Date taken from the {kind} date",
        ]

        issues: list[Issue] = []
        overdue = _overdue_issue(days, [max_days for max_days, _ in cfg.day_thresholds])
        if overdue is not None:
            issues.append(overdue)

        return build_result(
            score,
            evidence,
            details={"days_since_update": days, "date_kind": kind},
            issues=issues,
        )


class TimelinessRule(Rule):
    """Scores references to current years and timeless framing.

    Outdated year and technology references such as Windows XP cost
    points whatever the framing. With an LLM analysis the better of the
    heuristic and LLM-informed scores is kept; LLM-reported outdated
    references are reported only.
    """

    DESCRIPTOR = RuleDescriptor(
        id="timeliness",
        name="Timeliness",
        description="Current-year references and evergreen framing of the content.",
        dimension=Dimension.FRESHNESS,
        weight=0.2,
        priority=80,
        llm_eligible=True,
    )
    config_type = FreshnessRuleConfig

    def evaluate(self, context: RuleContext) -> RuleResult:
        cfg: FreshnessRuleConfig = self.config
        text = context.signals.text
        lowered = text.lower()
        ref_year = context.evaluated_at.year

        mentions = [int(y) for y in _YEAR_RE.findall(text)]
        current_mentions = [y for y in mentions if ref_year - 1 <= y <= ref_year]
        current = sorted(set(current_mentions))
        current_phrases = _distinct_matches(
            lowered,
            [p.replace("{year}", str(ref_year)) for p in cfg.current_phrase_patterns],
        )
        outdated = sorted({
            y for y in mentions if 2000 < y < ref_year - cfg.outdated_year_gap
        })
        outdated_tech = _distinct_matches(lowered, cfg.outdated_technology_patterns)
        outdated_refs = [str(y) for y in outdated] + outdated_tech

        timeless_hits = sum(1 for marker in _TIMELESS_MARKERS if marker in lowered)
        evergreen = timeless_hits >= 3 and not outdated_refs
        current_refs = len(current_mentions) + len(current_phrases)

        evidence: list[str] = []
        if current_mentions:
            evidence.append(
                f"{len(current_mentions)} current reference(s): {', '.join(map(str, current))}"
            )
        else:
            evidence.append("No references to the current or previous year")
        if current_phrases:
            evidence.append(f"Current phrasing: {', '.join(current_phrases)}")
        if outdated:
            evidence.append(f"Outdated year references: {', '.join(map(str, outdated))}")
        if outdated_tech:
            evidence.append(f"Outdated technology references: {', '.join(outdated_tech)}")
        if evergreen:
            evidence.append("Content reads as evergreen")

        penalty = min(
            len(outdated_refs) * cfg.outdated_reference_penalty, cfg.max_outdated_penalty,
        )
        if penalty:
            evidence.append(
                f"{len(outdated_refs)} outdated reference(s) (penalty: -{penalty:.0f})",
            )
        score = max(0.0, self._base(current_refs, evergreen) - penalty)

        llm_used = False
        analysis = context.llm.for_dimension(Dimension.FRESHNESS)
        if isinstance(analysis, FreshnessAnalysis):
            llm_used = True
            current_refs = max(current_refs, analysis.current_reference_count)
            evergreen = evergreen or analysis.is_evergreen
            llm_score = max(0.0, self._base(current_refs, evergreen) - penalty)
            evidence.append(
                f"LLM found {analysis.current_reference_count} current reference(s)"
            )
            if analysis.is_evergreen:
                evidence.append("LLM classified content as evergreen")
            if analysis.outdated_references:
                evidence.append(
                    f"LLM flagged outdated references: {', '.join(analysis.outdated_references)}"
                )
            score = max(score, llm_score)

        issues: list[Issue] = []
        if not evergreen and current_refs == 0:
            issues.append(
                make_issue(
                    Severity.HIGH,
                    "Content lacks temporal references",
                    "Add current year references or recent updates to improve content freshness.",
                )
            )
        if outdated_refs:
            issues.append(
                make_issue(
                    Severity.MEDIUM,
                    f"Content contains outdated references ({', '.join(outdated_refs[:3])})",
                    "Update the content to reflect current information "
                    "and remove outdated references.",
                )
            )

        return build_result(
            score,
            evidence,
            details={
                "current_years": current,
                "current_phrases": current_phrases,
                "outdated_years": outdated,
                "outdated_technology": outdated_tech,
                "evergreen": evergreen,
            },
            issues=issues,
            llm_used=llm_used,
        )

    def _base(self, current_refs: int, evergreen: bool) -> float:
        cfg: FreshnessRuleConfig = self.config
        if evergreen:
            return cfg.evergreen_score + (cfg.current_reference_bonus if current_refs else 0.0)
        if current_refs >= 3:
            return 100.0
        if current_refs == 2:
            return 80.0
        if current_refs == 1:
            return 60.0
        return 0.0
