"""Tests for the structure rules: headings, lists, readability, guide depth."""

import pytest

from pagescore.models.common import PageCategory, Severity
from pagescore.models.signals import (
    Comprehensiveness,
    GuideTopic,
    Heading,
    LLMResults,
    StructureAnalysis,
)
from pagescore.rules.structure import (
    InDepthGuideRule,
    ListsTablesRule,
    MainHeadingRule,
    ReadabilityRule,
    SubheadingsRule,
    average_sentence_words,
)
from pagescore.scoring.config import StructureRuleConfig


def _headings(*pairs: tuple[int, str]) -> tuple[Heading, ...]:
    return tuple(Heading(level=level, text=text) for level, text in pairs)


# ===================================================================
# MainHeadingRule
# ===================================================================


class TestMainHeading:
    def test_descriptive_h1_related_to_title(self, make_context) -> None:
        result = MainHeadingRule().evaluate(
            make_context(
                signals={
                    "title": "How to Grow Tomatoes at Home | Garden Co",
                    "headings": _headings((1, "Complete Guide to Growing Tomatoes")),
                },
            ),
        )
        assert result.score == 100.0
        assert "H1 relates to title tag but is unique" in result.evidence
        assert result.issues == []

    def test_h1_identical_to_title_earns_no_bonus(self, make_context) -> None:
        result = MainHeadingRule().evaluate(
            make_context(
                signals={
                    "title": "Complete Guide to Growing Tomatoes",
                    "headings": _headings((1, "Complete Guide to Growing Tomatoes")),
                },
            ),
        )
        assert result.score == 90.0
        assert "H1 exactly matches title tag" in result.evidence

    def test_multiple_generic_h1s(self, make_context) -> None:
        result = MainHeadingRule().evaluate(
            make_context(signals={"headings": _headings((1, "Welcome"), (1, "Our Products"))}),
        )
        assert result.score == 20.0
        assert [i.title for i in result.issues] == ["Multiple H1 headings", "Generic H1 heading"]

    def test_missing_h1(self, make_context) -> None:
        result = MainHeadingRule().evaluate(
            make_context(signals={"headings": _headings((2, "Section"))}),
        )
        assert result.score == 0.0
        (issue,) = result.issues
        assert issue.severity == Severity.HIGH
        assert issue.title == "Missing H1 heading"

    def test_blank_h1_counts_as_missing(self, make_context) -> None:
        result = MainHeadingRule().evaluate(
            make_context(signals={"headings": _headings((1, "   "))}),
        )
        assert result.score == 0.0

    def test_short_h1(self, make_context) -> None:
        result = MainHeadingRule().evaluate(
            make_context(signals={"headings": _headings((1, "Tomatoes"))}),
        )
        # 50 length + 10 descriptiveness + 10 not generic
        assert result.score == 70.0


# ===================================================================
# SubheadingsRule
# ===================================================================


class TestSubheadings:
    def test_dense_question_headings(self, make_context) -> None:
        h2s = [(2, f"Why does step {i} matter?") for i in range(6)]
        h2s += [(2, f"Step {i}") for i in range(4)]
        result = SubheadingsRule().evaluate(
            make_context(signals={"word_count": 1000, "headings": _headings(*h2s)}),
        )
        assert result.score == 100.0
        assert "6 of 10 H2s are phrased as questions" in result.evidence

    def test_sparse_subheadings(self, make_context) -> None:
        result = SubheadingsRule().evaluate(
            make_context(
                signals={
                    "word_count": 2000,
                    "headings": _headings(*[(2, f"Part {i}") for i in range(5)]),
                },
            ),
        )
        assert result.score == 40.0
        assert [i.title for i in result.issues] == ["Sparse subheadings"]

    def test_skipped_heading_level(self, make_context) -> None:
        headings = _headings(*[(2, f"Part {i}") for i in range(5)], (4, "Detail"))
        result = SubheadingsRule().evaluate(
            make_context(signals={"word_count": 1000, "headings": headings}),
        )
        assert result.score == 70.0
        assert "Heading levels skipped" in [i.title for i in result.issues]

    def test_no_subheadings(self, make_context) -> None:
        result = SubheadingsRule().evaluate(
            make_context(signals={"word_count": 500, "headings": _headings((1, "Title"))}),
        )
        assert result.score == 20.0
        assert result.issues[0].severity == Severity.MEDIUM

    def test_word_count_falls_back_to_text(self, make_context) -> None:
        result = SubheadingsRule().evaluate(
            make_context(signals={"text": "word " * 150, "headings": _headings((2, "Only"))}),
        )
        assert result.details["words"] == 150
        assert result.score == 80.0


# ===================================================================
# ListsTablesRule
# ===================================================================


class TestListsTables:
    @pytest.mark.parametrize(
        ("lists", "tables", "dls", "score"),
        [
            (0, 0, 0, 0.0),
            (3, 2, 0, 100.0),
            (2, 1, 0, 80.0),
            (2, 0, 0, 50.0),
            (2, 0, 1, 60.0),
            (5, 0, 2, 100.0),
        ],
    )
    def test_element_brackets(
        self, make_context, lists: int, tables: int, dls: int, score: float,
    ) -> None:
        result = ListsTablesRule().evaluate(
            make_context(
                signals={"list_count": lists, "table_count": tables, "definition_list_count": dls},
            ),
        )
        assert result.score == score

    @pytest.mark.parametrize(
        ("lists", "tables", "issue"),
        [
            (0, 0, (Severity.MEDIUM, "No lists or tables")),
            (1, 0, (Severity.MEDIUM, "Few structured elements found")),
            (1, 1, (Severity.MEDIUM, "Few structured elements found")),
            (2, 1, (Severity.LOW, "Consider adding more structured elements")),
            (3, 1, (Severity.LOW, "Consider adding more structured elements")),
            (4, 1, None),
        ],
    )
    def test_issue_per_bracket(
        self, make_context, lists: int, tables: int, issue,
    ) -> None:
        result = ListsTablesRule().evaluate(
            make_context(signals={"list_count": lists, "table_count": tables}),
        )
        assert [(i.severity, i.title) for i in result.issues] == ([issue] if issue else [])


# ===================================================================
# ReadabilityRule
# ===================================================================


class TestReadability:
    @pytest.mark.parametrize(
        ("avg", "score", "severities"),
        [
            (18.0, 100.0, []),
            (23.0, 80.0, []),
            (28.0, 60.0, [Severity.LOW]),
            (35.0, 40.0, [Severity.MEDIUM]),
        ],
    )
    def test_sentence_length_brackets(
        self, make_context, avg: float, score: float, severities: list[Severity],
    ) -> None:
        result = ReadabilityRule().evaluate(
            make_context(signals={"avg_sentence_words": avg}),
        )
        assert result.score == score
        assert [i.severity for i in result.issues] == severities

    def test_issues_follow_configured_brackets(self, make_context) -> None:
        config = StructureRuleConfig(sentence_word_thresholds=[(12, 100.0), (16, 70.0)])
        rule = ReadabilityRule(config)

        def severities(avg: float) -> list[Severity]:
            result = rule.evaluate(make_context(signals={"avg_sentence_words": avg}))
            return [i.severity for i in result.issues]

        assert severities(10.0) == []
        assert severities(14.0) == [Severity.LOW]
        assert severities(18.0) == [Severity.MEDIUM]
        result = rule.evaluate(make_context(signals={"avg_sentence_words": 18.0}))
        assert "under 12 words" in result.issues[0].recommendation

    def test_default_middle_bracket_raises_nothing(self, make_context) -> None:
        result = ReadabilityRule().evaluate(make_context(signals={"avg_sentence_words": 24.0}))
        assert result.score == 80.0
        assert result.issues == []

    def test_computed_from_text(self, make_context) -> None:
        result = ReadabilityRule().evaluate(
            make_context(signals={"text": "One two three. Four five six seven."}),
        )
        assert result.score == 100.0
        assert result.details["avg_sentence_words"] == 3.5

    def test_no_text(self, make_context) -> None:
        result = ReadabilityRule().evaluate(make_context())
        assert result.score == 0.0
        assert result.issues == []

    def test_average_sentence_words(self) -> None:
        assert average_sentence_words("Short one! And a longer second sentence?") == 3.5
        assert average_sentence_words("   ") is None


# ===================================================================
# InDepthGuideRule
# ===================================================================


class TestInDepthGuide:
    def _long_guide(self, make_context, llm: LLMResults | None = None):
        headings = _headings(
            *[(2, f"Chapter {i}") for i in range(4)],
            *[(3, f"Section {i}") for i in range(8)],
        )
        kwargs = {"llm": llm} if llm is not None else {}
        return make_context(
            url="https://example.com/blog/ultimate-guide-to-tomatoes",
            category=PageCategory.BLOG_ARTICLE,
            signals={
                "word_count": 3500,
                "headings": headings,
                "image_count": 8,
                "code_block_count": 3,
            },
            **kwargs,
        )

    def test_short_content(self, make_context) -> None:
        result = InDepthGuideRule().evaluate(
            make_context(category=PageCategory.BLOG_ARTICLE, signals={"word_count": 1000}),
        )
        assert result.score == 20.0
        assert result.issues[0].title == "Content too short for a guide"

    def test_heuristic_guide(self, make_context) -> None:
        result = InDepthGuideRule().evaluate(self._long_guide(make_context))
        assert result.score == 60.0
        assert result.llm_used is False
        assert result.details == {"words": 3500, "h2": 4, "h3": 8, "media": 11}

    def test_llm_bonuses(self, make_context, rich_llm) -> None:
        result = InDepthGuideRule().evaluate(self._long_guide(make_context, rich_llm))
        assert result.score == 100.0
        assert result.llm_used is True
        assert "Positioned as ultimate guide" in result.evidence
        assert result.issues == []

    def test_weak_llm_findings_are_issues_not_penalties(self, make_context) -> None:
        weak = LLMResults(
            structure=StructureAnalysis(
                comprehensiveness=Comprehensiveness.BASIC,
                topics=(GuideTopic(topic="soil", entity_coverage=10.0),),
            ),
        )
        baseline = InDepthGuideRule().evaluate(self._long_guide(make_context))
        result = InDepthGuideRule().evaluate(self._long_guide(make_context, weak))
        assert result.score == baseline.score
        assert [i.title for i in result.issues] == [
            "Long content lacks depth",
            "Low topic coverage",
        ]
