"""Content-format rules scored under the structure dimension.

Concise answers, how-to instructions and definitions only run on the page
categories that carry that kind of content. Multimedia runs everywhere.
Every rule here is a text or count heuristic over the extracted signals.
"""

from __future__ import annotations

import re

from pagescore.models.common import Dimension, PageCategory, Severity
from pagescore.models.results import Issue, RuleResult
from pagescore.models.rule import Applicability, RuleDescriptor
from pagescore.models.signals import RuleContext
from pagescore.rules.structure import split_sentences
from pagescore.scoring.config import StructureRuleConfig
from pagescore.scoring.rule import Rule, build_result, make_issue


def _count_matches(text: str, patterns: tuple[str, ...]) -> int:
    return sum(len(re.findall(p, text, re.IGNORECASE)) for p in patterns)


class MultimodalContentRule(Rule):
    """Scores the amount and variety of images, video and audio."""

    DESCRIPTOR = RuleDescriptor(
        id="multimodal-content",
        name="Multimodal Content",
        description="Media that supports the text.",
        dimension=Dimension.STRUCTURE,
        weight=0.1,
        priority=65,
    )
    config_type = StructureRuleConfig

    def evaluate(self, context: RuleContext) -> RuleResult:
        cfg: StructureRuleConfig = self.config
        signals = context.signals
        media = {
            "images": signals.image_count,
            "videos": signals.video_count,
            "audio": signals.audio_count,
        }
        total = sum(media.values())
        kinds = sum(1 for count in media.values() if count)
        evidence = [
            f"Total media elements: {total}",
            f"Media types used: {kinds} (Images: {media['images']}, "
            f"Videos: {media['videos']}, Audio: {media['audio']})",
        ]

        if total == 0:
            evidence.append("No multimedia content found")
            return build_result(
                0.0,
                evidence,
                details={**media, "types": 0},
                issues=[
                    make_issue(
                        Severity.LOW,
                        "No multimedia content",
                        "Support the text with images, diagrams or short videos.",
                    ),
                ],
            )

        if total >= 10:
            score = 40.0
            evidence.append("Rich multimedia content")
        elif total >= 5:
            score = 30.0
            evidence.append("Good multimedia presence")
        elif total >= 2:
            score = 20.0
            evidence.append("Limited multimedia content")
        else:
            score = 10.0
            evidence.append("Minimal multimedia")

        score += {3: 30.0, 2: 20.0}.get(kinds, 10.0)
        if kinds > 1:
            evidence.append(f"{kinds} different media types")

        if signals.image_count:
            missing = min(signals.images_missing_alt, signals.image_count)
            described = (signals.image_count - missing) / signals.image_count
            if described >= 0.9:
                score += 15.0
                evidence.append(f"Images described with alt text ({described:.0%})")

        lowered = signals.text.lower()
        if any(marker in lowered for marker in cfg.media_accessibility_markers):
            score += 15.0
            evidence.append("Accessibility features (transcripts/captions)")

        return build_result(score, evidence, details={**media, "types": kinds})


class ConciseAnswersRule(Rule):
    """Scores whether answers come first: summary, lists, direct phrasing, short lead."""

    DESCRIPTOR = RuleDescriptor(
        id="concise-answers",
        name="Concise Answers",
        description="Upfront summary, scannable lists and direct answer phrasing.",
        dimension=Dimension.STRUCTURE,
        weight=0.05,
        priority=60,
        applicability=Applicability.only(
            PageCategory.FAQ,
            PageCategory.DOCUMENTATION_HELP,
            PageCategory.BLOG_ARTICLE,
        ),
    )
    config_type = StructureRuleConfig

    def evaluate(self, context: RuleContext) -> RuleResult:
        cfg: StructureRuleConfig = self.config
        signals = context.signals
        text = signals.text.strip()
        if len(text) < cfg.min_content_chars:
            return build_result(
                0.0,
                ["Insufficient content to analyze for concise answers"],
                details={"chars": len(text)},
                issues=[
                    make_issue(
                        Severity.HIGH,
                        "Insufficient content for concise answers",
                        f"Add at least {cfg.min_content_chars} characters of answer content.",
                    ),
                ],
            )

        lowered = text.lower()
        evidence: list[str] = []
        issues: list[Issue] = []
        score = 0.0

        positions = [lowered.find(m) for m in cfg.summary_markers if m in lowered]
        if positions:
            share = min(positions) / len(lowered)
            if share <= cfg.summary_lead_share:
                score += 25.0
                evidence.append("Summary or key points at the beginning")
            else:
                score += 20.0
                evidence.append(f"Summary or key points found {share:.0%} into the text")
                issues.append(
                    make_issue(
                        Severity.LOW,
                        "Summary not at the beginning",
                        "Move the summary or TL;DR to the top of the content.",
                    )
                )
        else:
            evidence.append("No summary or key points section found")
            issues.append(
                make_issue(
                    Severity.MEDIUM,
                    "No summary section",
                    "Add a summary or TL;DR section at the beginning of the content.",
                )
            )

        if signals.list_count:
            score += 20.0
            evidence.append(f"{signals.list_count} list(s) support scanning")
        else:
            evidence.append("No lists to scan")
            issues.append(
                make_issue(
                    Severity.LOW,
                    "No lists for scanning",
                    "Include bullet points or numbered lists early in the content.",
                )
            )

        indicators = [p for p in cfg.answer_indicators if p in lowered]
        if indicators:
            score += 15.0
            evidence.append(f"Direct answer phrasing: {', '.join(indicators[:3])}")
        else:
            evidence.append("No direct answer phrasing")
            issues.append(
                make_issue(
                    Severity.LOW,
                    "No direct answer phrases",
                    'Lead with phrases like "The answer is..." or "In short...".',
                )
            )

        lead = split_sentences(text)[: cfg.lead_sentence_count]
        avg = sum(len(s.split()) for s in lead) / len(lead) if lead else 0.0
        limits = [limit for limit, _ in cfg.sentence_word_thresholds]
        concise_limit = limits[0] if limits else 20
        moderate_limit = limits[1] if len(limits) > 1 else concise_limit
        if avg <= concise_limit:
            score += 20.0
            evidence.append(f"Concise opening sentences (avg {avg:.1f} words)")
        elif avg <= moderate_limit:
            score += 10.0
            evidence.append(f"Moderate opening sentences (avg {avg:.1f} words)")
            issues.append(
                make_issue(
                    Severity.LOW,
                    "Opening sentences could be shorter",
                    f"Keep the opening sentences under {concise_limit} words.",
                )
            )
        else:
            evidence.append(f"Complex opening sentences (avg {avg:.1f} words)")
            issues.append(
                make_issue(
                    Severity.MEDIUM,
                    "Opening sentences too long",
                    f"Break the opening sentences down to {concise_limit} words or fewer.",
                )
            )

        if len(signals.subheadings) >= 2:
            score += 20.0
            evidence.append("Content organized under subheadings")
        else:
            issues.append(
                make_issue(
                    Severity.LOW,
                    "Content lacks structured format",
                    "Organize the answer into clear steps or headed sections.",
                )
            )

        return build_result(
            score,
            evidence,
            details={"lead_sentence_words": round(avg, 2), "answer_indicators": indicators},
            issues=issues,
        )


class HowToContentRule(Rule):
    """Scores instructional content: how-to phrasing, steps, verbs, visuals, outcomes."""

    DESCRIPTOR = RuleDescriptor(
        id="how-to-content",
        name="How-to Content",
        description="Step-by-step instructions with action verbs and stated outcomes.",
        dimension=Dimension.STRUCTURE,
        weight=0.05,
        priority=55,
        applicability=Applicability.only(
            PageCategory.DOCUMENTATION_HELP,
            PageCategory.BLOG_ARTICLE,
        ),
    )
    config_type = StructureRuleConfig

    def evaluate(self, context: RuleContext) -> RuleResult:
        cfg: StructureRuleConfig = self.config
        signals = context.signals
        lowered = signals.text.lower()
        evidence: list[str] = []
        score = 0.0

        patterns = _count_matches(lowered, cfg.how_to_patterns)
        if patterns:
            score += 30.0
            evidence.append(f"Found {patterns} how-to/instructional patterns")
        else:
            evidence.append("No how-to or instructional patterns found")

        if signals.list_count:
            score += 20.0
            evidence.append(f"Found {signals.list_count} list(s) for steps")
        else:
            evidence.append("No structured lists for step-by-step instructions")

        verbs = tuple(cfg.action_verbs)
        action_sentences = sum(
            1 for s in split_sentences(signals.text) if s.strip().lower().startswith(verbs)
        )
        if action_sentences >= 3:
            score += 20.0
            evidence.append(f"Found {action_sentences} sentences starting with action verbs")
        elif action_sentences:
            score += 10.0
            evidence.append(f"Found only {action_sentences} sentence(s) with action verbs")
        else:
            evidence.append("No sentences starting with action verbs")

        visuals = _count_matches(lowered, cfg.visual_aid_patterns)
        if visuals:
            score += 15.0
            evidence.append(f"Found {visuals} references to visual aids")
        else:
            evidence.append("No references to visual aids or screenshots")

        outcomes = _count_matches(lowered, cfg.outcome_patterns)
        if outcomes:
            score += 15.0
            evidence.append(f"Found {outcomes} outcome/result descriptions")
        else:
            evidence.append("No clear outcome or result descriptions")

        issues: list[Issue] = []
        if score < 40.0:
            issues.append(
                make_issue(
                    Severity.MEDIUM,
                    "Lacks instructional structure",
                    "Write numbered steps that start with action verbs "
                    "and state the expected result.",
                )
            )

        return build_result(
            score,
            evidence,
            details={
                "how_to_patterns": patterns,
                "action_sentences": action_sentences,
                "visual_references": visuals,
                "outcomes": outcomes,
            },
            issues=issues,
        )


class DefinitionalContentRule(Rule):
    """Scores "What is X?" content by its direct definitions.

    A page counts as dedicated when its URL, a "What is" heading, definition
    list markup or DefinedTerm schema says so. Only dedicated pages reach
    the top brackets.
    """

    DESCRIPTOR = RuleDescriptor(
        id="definitional-content",
        name="Definitional Content",
        description='Clear "X is..." definitions on glossary and explainer pages.',
        dimension=Dimension.STRUCTURE,
        weight=0.05,
        priority=50,
        applicability=Applicability.only(
            PageCategory.FAQ,
            PageCategory.DOCUMENTATION_HELP,
            PageCategory.BLOG_ARTICLE,
        ),
    )
    config_type = StructureRuleConfig

    def evaluate(self, context: RuleContext) -> RuleResult:
        cfg: StructureRuleConfig = self.config
        signals = context.signals
        evidence: list[str] = []

        cues: list[str] = []
        if re.search(cfg.definitional_url_pattern, context.url, re.IGNORECASE):
            cues.append("URL indicates definitional content")
        headings = [h.text.strip().lower() for h in signals.headings]
        if any(h.startswith(("what is", "what are")) for h in headings):
            cues.append('"What is" heading found')
        if signals.definition_list_count:
            cues.append("Uses definition list markup")
        if any(t in ("DefinedTerm", "DefinedTermSet") for t in signals.schema_types):
            cues.append("Includes DefinedTerm schema markup")
        evidence.extend(cues)
        dedicated = bool(cues)

        text = signals.text.strip()
        if len(text) < cfg.min_content_chars:
            evidence.append("Insufficient content to analyze for definitions")
            return build_result(
                cfg.guide_not_present_score,
                evidence,
                details={"definitions": 0, "dedicated": dedicated},
            )

        definitions = [
            s.strip() for s in split_sentences(text)
            if re.match(cfg.definition_pattern, s.strip())
        ]
        count = len(definitions)
        issues: list[Issue] = []
        if dedicated and count >= cfg.definitions_excellent:
            score = 100.0
            evidence.append(f"Comprehensive definitional page with {count} clear definitions")
        elif dedicated and count >= cfg.definitions_good:
            score = 80.0
            evidence.append(f"Good definitional content with {count} clear definitions")
        elif count:
            score = 60.0
            evidence.append(f"Basic definitional content with {count} definition(s)")
        elif dedicated:
            score = 40.0
            evidence.append("Definitional intent without direct definitions")
        else:
            score = cfg.guide_not_present_score
            evidence.append("No definitional content found")

        if score < 80.0:
            issues.append(
                make_issue(
                    Severity.LOW,
                    "Few clear definitions",
                    f'State at least {cfg.definitions_good} terms directly as "X is..." '
                    "on a dedicated explainer or glossary page.",
                )
            )

        return build_result(
            score,
            evidence,
            details={
                "definitions": count,
                "dedicated": dedicated,
                "examples": definitions[:3],
            },
            issues=issues,
        )
