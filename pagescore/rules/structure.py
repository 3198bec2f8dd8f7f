"""Structure rules: heading hierarchy, lists and tables, readability, guide depth.

All heuristics run over the extracted heading list, element counts and
clean page text. Only the in-depth guide rule is LLM-eligible, and its LLM
branch adds bonus points on top of the heuristic score.
"""

from __future__ import annotations

import re

from pagescore.models.common import Dimension, PageCategory, Severity
from pagescore.models.results import Issue, RuleResult
from pagescore.models.rule import Applicability, RuleDescriptor
from pagescore.models.signals import (
    Comprehensiveness,
    GuideType,
    RuleContext,
    StructureAnalysis,
)
from pagescore.scoring.config import StructureRuleConfig
from pagescore.scoring.rule import Rule, build_result, make_issue, walk_thresholds

STRUCTURE_BASE = RuleDescriptor(
    id="structure-base",
    name="Structure Base",
    description="Floor score for every published page.",
    dimension=Dimension.STRUCTURE,
    weight=0.1,
    priority=100,
)

_SENTENCE_SPLIT_RE = re.compile(r"[.!?]+(?:\s+|$)")


def split_sentences(text: str) -> list[str]:
    return [s for s in _SENTENCE_SPLIT_RE.split(text) if s.strip()]


def average_sentence_words(text: str) -> float | None:
    """Mean words per sentence of ``text``; ``None`` when there is no text."""
    sentences = split_sentences(text)
    if not sentences:
        return None
    return sum(len(s.split()) for s in sentences) / len(sentences)


class MainHeadingRule(Rule):
    """Scores the page's single H1: presence, length, descriptiveness, title fit."""

    DESCRIPTOR = RuleDescriptor(
        id="main-heading",
        name="Main Heading",
        description="Exactly one descriptive, non-generic H1 related to the title.",
        dimension=Dimension.STRUCTURE,
        weight=0.15,
        priority=90,
    )
    config_type = StructureRuleConfig

    def evaluate(self, context: RuleContext) -> RuleResult:
        cfg: StructureRuleConfig = self.config
        h1s = [h.text.strip() for h in context.signals.headings_at(1) if h.text.strip()]
        evidence: list[str] = []
        issues: list[Issue] = []

        if not h1s:
            return build_result(
                0.0,
                ["No H1 tag found"],
                details={"h1_count": 0},
                issues=[
                    make_issue(
                        Severity.HIGH,
                        "Missing H1 heading",
                        f"Add exactly one H1 with {cfg.h1_min_words}-{cfg.h1_max_words} words.",
                    ),
                ],
            )

        primary = h1s[0]
        score = 0.0
        if len(h1s) == 1:
            words = len(primary.split())
            if cfg.h1_min_words <= words <= cfg.h1_max_words:
                score += 60.0
                evidence.append(f"Exactly one H1 tag found - optimal length ({words} words)")
            elif words < cfg.h1_min_words:
                score += 50.0
                evidence.append(f"Exactly one H1 tag found - too short ({words} words)")
            else:
                score += 50.0
                evidence.append(f"Exactly one H1 tag found - too long ({words} words)")
        else:
            score += 10.0
            evidence.append(f"Multiple H1 tags found ({len(h1s)})")
            issues.append(
                make_issue(
                    Severity.MEDIUM,
                    "Multiple H1 headings",
                    "Keep a single H1 and demote the others to H2.",
                )
            )

        if len(primary) > cfg.h1_descriptive_chars:
            score += 20.0
            evidence.append("H1 appears descriptive")
        else:
            score += 10.0
            evidence.append("H1 may lack descriptiveness")

        if any(re.match(p, primary, re.IGNORECASE) for p in cfg.generic_h1_patterns):
            evidence.append("H1 uses generic text")
            issues.append(
                make_issue(
                    Severity.MEDIUM,
                    "Generic H1 heading",
                    "Replace the H1 with specific text describing the page topic.",
                )
            )
        else:
            score += 10.0
            evidence.append("H1 is not generic")

        title = (context.signals.title or "").strip()
        if title:
            h1_lower, title_lower = primary.lower(), title.lower()
            title_words = set(title_lower.split())
            common = [w for w in h1_lower.split() if len(w) > 3 and w in title_words]
            if h1_lower == title_lower:
                evidence.append("H1 exactly matches title tag")
            elif common:
                score += 10.0
                evidence.append("H1 relates to title tag but is unique")
            else:
                evidence.append("H1 and title tag are completely different")

        return build_result(
            score,
            evidence,
            details={"h1_count": len(h1s), "h1": primary},
            issues=issues,
        )


class SubheadingsRule(Rule):
    """Scores subheading density, question-form H2s and hierarchy gaps."""

    DESCRIPTOR = RuleDescriptor(
        id="subheadings",
        name="Subheadings",
        description="Words per subheading, question H2s and heading hierarchy.",
        dimension=Dimension.STRUCTURE,
        weight=0.15,
        priority=85,
    )
    config_type = StructureRuleConfig

    def evaluate(self, context: RuleContext) -> RuleResult:
        cfg: StructureRuleConfig = self.config
        signals = context.signals
        subheadings = signals.subheadings
        words = signals.effective_word_count

        if not subheadings:
            return build_result(
                cfg.no_subheading_score,
                ["No subheadings (H2-H6) found"],
                details={"subheadings": 0, "words": words},
                issues=[
                    make_issue(
                        Severity.MEDIUM,
                        "No subheadings",
                        "Break the content into sections with descriptive H2 and H3 headings.",
                    ),
                ],
            )

        counts = [
            f"{len(signals.headings_at(level))} H{level}"
            for level in range(2, 7)
            if signals.headings_at(level)
        ]
        density = words / len(subheadings)
        score, limit = walk_thresholds(
            density, cfg.subheading_density_thresholds, cfg.sparse_subheading_score,
        )
        evidence = [
            f"Subheadings found: {', '.join(counts)}",
            f"One subheading per {density:.0f} words",
        ]
        issues: list[Issue] = []
        if limit is None and cfg.subheading_density_thresholds:
            every = cfg.subheading_density_thresholds[-1][0]
            issues.append(
                make_issue(
                    Severity.LOW,
                    "Sparse subheadings",
                    f"Add a subheading at least every {every} words.",
                )
            )

        h2s = [h.text.strip() for h in signals.headings_at(2)]
        questions = [t for t in h2s if t.endswith("?")]
        if h2s and questions:
            share = len(questions) / len(h2s)
            bonus = cfg.question_heading_bonus if share >= 0.5 else cfg.question_heading_bonus / 2
            score += bonus
            evidence.append(f"{len(questions)} of {len(h2s)} H2s are phrased as questions")

        if signals.headings_at(4) and not signals.headings_at(3):
            score = max(cfg.no_subheading_score, score - 10.0)
            evidence.append("Heading hierarchy skips from H2 to H4")
            issues.append(
                make_issue(
                    Severity.LOW,
                    "Heading levels skipped",
                    "Use H3 between H2 and H4 to keep a consistent hierarchy.",
                )
            )

        return build_result(
            score,
            evidence,
            details={"subheadings": len(subheadings), "words": words, "density": density},
            issues=issues,
        )


class ListsTablesRule(Rule):
    """Scores use of lists, tables and definition lists."""

    DESCRIPTOR = RuleDescriptor(
        id="lists-tables",
        name="Lists and Tables",
        description="Structured elements that make content easy to extract.",
        dimension=Dimension.STRUCTURE,
        weight=0.1,
        priority=80,
    )
    config_type = StructureRuleConfig

    def evaluate(self, context: RuleContext) -> RuleResult:
        cfg: StructureRuleConfig = self.config
        signals = context.signals
        lists, tables, dls = signals.list_count, signals.table_count, signals.definition_list_count
        total = lists + tables
        evidence: list[str] = []
        issues: list[Issue] = []

        if total == 0:
            score = 0.0
            evidence.append("No lists or tables found")
            issues.append(
                make_issue(
                    Severity.MEDIUM,
                    "No lists or tables",
                    "Present steps, options or comparisons as lists or tables.",
                )
            )
        else:
            evidence.append(f"{lists} list(s) and {tables} table(s) found")
            if total >= cfg.structured_elements_excellent:
                score = 100.0
            elif total >= cfg.structured_elements_good:
                score = 80.0
                issues.append(
                    make_issue(
                        Severity.LOW,
                        "Consider adding more structured elements",
                        f"Reach {cfg.structured_elements_excellent} or more lists and tables "
                        "for an optimal score.",
                    )
                )
            else:
                score = 50.0
                issues.append(
                    make_issue(
                        Severity.MEDIUM,
                        "Few structured elements found",
                        f"Add at least {cfg.structured_elements_good} lists or tables "
                        "to organize the content.",
                    )
                )

        if signals.has_nested_lists and score >= 50.0:
            evidence.append("Nested lists provide hierarchy")
        if dls:
            evidence.append(f"{dls} definition list(s) found")
            score = min(100.0, score + cfg.definition_list_bonus)

        return build_result(
            score,
            evidence,
            details={"lists": lists, "tables": tables, "definition_lists": dls},
            issues=issues,
        )


class ReadabilityRule(Rule):
    """Scores average sentence length."""

    DESCRIPTOR = RuleDescriptor(
        id="readability",
        name="Readability",
        description="Average words per sentence.",
        dimension=Dimension.STRUCTURE,
        weight=0.1,
        priority=75,
    )
    config_type = StructureRuleConfig

    def evaluate(self, context: RuleContext) -> RuleResult:
        cfg: StructureRuleConfig = self.config
        avg = context.signals.avg_sentence_words
        if avg is None:
            avg = average_sentence_words(context.signals.text)
        if avg is None:
            return build_result(
                0.0,
                ["No text available to measure sentence length"],
                details={"avg_sentence_words": None},
            )

        thresholds = cfg.sentence_word_thresholds
        score, limit = walk_thresholds(avg, thresholds, cfg.long_sentence_score)
        evidence = [f"Average sentence length: {avg:.1f} words"]
        issues: list[Issue] = []
        # Beyond every bracket is MEDIUM; landing in the last of several is LOW.
        in_last_bracket = len(thresholds) > 1 and limit == thresholds[-1][0]
        if limit is None or in_last_bracket:
            target = thresholds[0][0] if thresholds else 20
            issues.append(
                make_issue(
                    Severity.MEDIUM if limit is None else Severity.LOW,
                    "Long sentences",
                    f"Keep most sentences under {target} words so answers can be quoted directly.",
                )
            )
        return build_result(
            score,
            evidence,
            details={"avg_sentence_words": round(avg, 2)},
            issues=issues,
        )


class InDepthGuideRule(Rule):
    """Scores long-form guide depth: length, sections and media.

    The LLM branch adds table-of-contents, guide positioning, examples,
    linking, industry focus and topic coverage bonuses. Weak LLM findings
    are reported as issues and never lower the score.
    """

    DESCRIPTOR = RuleDescriptor(
        id="in-depth-guide",
        name="In-Depth Guide",
        description="Comprehensive long-form guide content.",
        dimension=Dimension.STRUCTURE,
        weight=0.15,
        priority=70,
        applicability=Applicability.only(
            PageCategory.BLOG_ARTICLE,
            PageCategory.DOCUMENTATION_HELP,
        ),
        llm_eligible=True,
    )
    config_type = StructureRuleConfig

    def evaluate(self, context: RuleContext) -> RuleResult:
        cfg: StructureRuleConfig = self.config
        signals = context.signals
        words = signals.effective_word_count
        evidence: list[str] = []
        score = 0.0

        url = context.url.lower()
        if any(keyword in url for keyword in cfg.guide_url_keywords):
            score += 5.0
            evidence.append("URL indicates guide content")

        if words < cfg.guide_word_count_basic:
            evidence.append(f"Too short for an in-depth guide ({words} words)")
            return build_result(
                cfg.guide_not_present_score,
                evidence,
                details={"words": words},
                issues=[
                    make_issue(
                        Severity.LOW,
                        "Content too short for a guide",
                        f"Expand the guide beyond {cfg.guide_word_count_basic} words.",
                    ),
                ],
            )

        if words >= cfg.guide_word_count_excellent:
            score += 30.0
            evidence.append(f"Comprehensive length ({words} words)")
        elif words >= cfg.guide_word_count_good:
            score += 20.0
            evidence.append(f"Good length ({words} words)")
        else:
            score += 10.0
            evidence.append(f"Moderate length ({words} words)")

        h2 = len(signals.headings_at(2))
        h3 = len(signals.headings_at(3))
        if h2 + h3 >= 10 and h2 >= 3:
            score += 15.0
            evidence.append(f"Well-structured: {h2} sections, {h3} subsections")
        elif h2 + h3 >= 5:
            score += 10.0
            evidence.append(f"Good structure: {h2 + h3} headings")
        else:
            score += 5.0
            evidence.append(f"Limited structure: {h2 + h3} headings")

        media = signals.image_count + signals.video_count + signals.code_block_count
        if media >= 10:
            score += 10.0
            evidence.append(f"Rich media: {media} elements")
        elif media >= 5:
            score += 5.0
            evidence.append(f"Good media usage: {media} elements")

        issues: list[Issue] = []
        llm_used = False
        analysis = context.llm.for_dimension(Dimension.STRUCTURE)
        if isinstance(analysis, StructureAnalysis):
            llm_used = True
            score += self._llm_bonus(analysis, words, evidence, issues)

        return build_result(
            score,
            evidence,
            details={"words": words, "h2": h2, "h3": h3, "media": media},
            issues=issues,
            llm_used=llm_used,
        )

    def _llm_bonus(
        self,
        analysis: StructureAnalysis,
        words: int,
        evidence: list[str],
        issues: list[Issue],
    ) -> float:
        cfg: StructureRuleConfig = self.config
        bonus = 0.0
        if analysis.has_table_of_contents:
            bonus += 10.0
            evidence.append("Table of contents or navigation present")
        if analysis.guide_type in (GuideType.ULTIMATE_GUIDE, GuideType.COMPLETE_GUIDE):
            bonus += 10.0
            evidence.append(f"Positioned as {analysis.guide_type.value.replace('_', ' ')}")
        elif analysis.guide_type == GuideType.PILLAR_PAGE:
            bonus += 7.0
            evidence.append("Structured as a pillar page")
        if analysis.has_examples:
            bonus += 5.0
            evidence.append("Includes practical examples")
        if analysis.has_internal_links and analysis.has_external_references:
            bonus += 5.0
            evidence.append("Strong linking strategy (internal + external)")
        elif analysis.has_internal_links:
            bonus += 3.0
            evidence.append("Has internal linking")
        if analysis.industry_focus:
            bonus += 5.0
            evidence.append(f"Industry focus: {analysis.industry_focus}")

        evidence.append(f"Comprehensiveness: {analysis.comprehensiveness.value}")
        comprehensive = analysis.comprehensiveness in (
            Comprehensiveness.EXHAUSTIVE,
            Comprehensiveness.THOROUGH,
        )
        if not comprehensive and words >= cfg.guide_word_count_good:
            issues.append(
                make_issue(
                    Severity.LOW,
                    "Long content lacks depth",
                    "Cover each subtopic more thoroughly instead of adding length.",
                )
            )

        if analysis.topics:
            coverage = sum(t.entity_coverage for t in analysis.topics) / len(analysis.topics)
            evidence.append(
                f"Topic coverage: {coverage:.0f}% across {len(analysis.topics)} topics"
            )
            if coverage >= 75.0:
                bonus += 5.0
            elif coverage < 25.0:
                issues.append(
                    make_issue(
                        Severity.MEDIUM,
                        "Low topic coverage",
                        "Address the key concepts readers expect for each topic.",
                    )
                )
        return bonus
