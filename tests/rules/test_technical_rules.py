"""Tests for the technical rules."""

import pytest

from pagescore.models.common import Severity
from pagescore.rules.technical import (
    ImageAltRule,
    InternalLinkingRule,
    MetaDescriptionRule,
    StatusCodeRule,
    StructuredDataRule,
    UrlStructureRule,
)


# ===================================================================
# StatusCodeRule
# ===================================================================


class TestStatusCode:
    @pytest.mark.parametrize(
        ("status", "score", "severities"),
        [
            (200, 100.0, []),
            (204, 100.0, []),
            (301, 60.0, [Severity.MEDIUM]),
            (404, 0.0, [Severity.CRITICAL]),
            (500, 0.0, [Severity.CRITICAL]),
        ],
    )
    def test_status_classes(
        self, make_context, status: int, score: float, severities: list[Severity],
    ) -> None:
        result = StatusCodeRule().evaluate(make_context(signals={"status_code": status}))
        assert result.score == score
        assert [i.severity for i in result.issues] == severities

    def test_error_issue_names_status(self, make_context) -> None:
        result = StatusCodeRule().evaluate(make_context(signals={"status_code": 410}))
        assert result.issues[0].title == "Page returns HTTP 410"

    def test_missing_status_assumed_ok(self, make_context) -> None:
        result = StatusCodeRule().evaluate(make_context())
        assert result.score == 100.0
        assert result.details["status_code"] == 200
        assert result.evidence[0].startswith("No status code recorded")

    def test_soft_404(self, make_context) -> None:
        result = StatusCodeRule().evaluate(
            make_context(signals={"status_code": 200, "text": "Sorry, page not found."}),
        )
        assert result.score == 60.0
        assert [i.title for i in result.issues] == ["Possible soft 404"]

    def test_redirect_chain(self, make_context) -> None:
        result = StatusCodeRule().evaluate(
            make_context(signals={"status_code": 200, "redirect_count": 3}),
        )
        assert result.score == 80.0
        assert [i.severity for i in result.issues] == [Severity.LOW]

    def test_short_redirect_chain_is_fine(self, make_context) -> None:
        result = StatusCodeRule().evaluate(
            make_context(signals={"status_code": 200, "redirect_count": 2}),
        )
        assert result.score == 100.0
        assert result.issues == []


# ===================================================================
# StructuredDataRule
# ===================================================================


class TestStructuredData:
    @pytest.mark.parametrize(
        ("types", "score"),
        [
            (("Article", "BreadcrumbList"), 100.0),
            (("Article",), 80.0),
            (("Article", "Article"), 80.0),
            (("CustomThing",), 50.0),
            ((), 0.0),
        ],
    )
    def test_schema_types(self, make_context, types: tuple[str, ...], score: float) -> None:
        result = StructuredDataRule().evaluate(make_context(signals={"schema_types": types}))
        assert result.score == score

    def test_missing_schema_issue(self, make_context) -> None:
        result = StructuredDataRule().evaluate(make_context())
        assert result.issues[0].title == "No structured data"
        assert result.issues[0].severity == Severity.MEDIUM


# ===================================================================
# MetaDescriptionRule
# ===================================================================


class TestMetaDescription:
    def test_optimal_description(self, make_context) -> None:
        description = "abc " * 35
        result = MetaDescriptionRule().evaluate(
            make_context(signals={"meta_description": description}),
        )
        assert result.score == 100.0
        assert result.details["length"] == 139
        assert result.issues == []

    def test_too_short(self, make_context) -> None:
        result = MetaDescriptionRule().evaluate(
            make_context(signals={"meta_description": "Tomatoes."}),
        )
        assert result.score == 60.0
        assert [i.title for i in result.issues] == ["Meta description length"]

    def test_duplicates_title(self, make_context) -> None:
        title = "Grow Tomatoes at Home in Small Spaces"
        result = MetaDescriptionRule().evaluate(
            make_context(signals={"title": title, "meta_description": title}),
        )
        assert result.score == 40.0
        assert "Meta description duplicates title" in [i.title for i in result.issues]

    def test_keyword_stuffing(self, make_context) -> None:
        result = MetaDescriptionRule().evaluate(
            make_context(signals={"meta_description": "tomato tomato tomato tomato"}),
        )
        assert result.score == 50.0
        assert "Possible keyword stuffing: tomato" in result.evidence

    @pytest.mark.parametrize("description", [None, "", "   "])
    def test_missing(self, make_context, description: str | None) -> None:
        result = MetaDescriptionRule().evaluate(
            make_context(signals={"meta_description": description}),
        )
        assert result.score == 0.0
        assert result.issues[0].severity == Severity.HIGH


# ===================================================================
# ImageAltRule
# ===================================================================


class TestImageAlt:
    def test_no_images(self, make_context) -> None:
        result = ImageAltRule().evaluate(make_context())
        assert result.score == 100.0
        assert result.issues == []

    def test_mostly_covered(self, make_context) -> None:
        result = ImageAltRule().evaluate(
            make_context(signals={"image_count": 10, "images_missing_alt": 2}),
        )
        assert result.score == 80.0
        assert [i.severity for i in result.issues] == [Severity.LOW]

    def test_poorly_covered(self, make_context) -> None:
        result = ImageAltRule().evaluate(
            make_context(signals={"image_count": 4, "images_missing_alt": 3}),
        )
        assert result.score == 25.0
        assert [i.severity for i in result.issues] == [Severity.MEDIUM]

    def test_missing_count_capped_at_total(self, make_context) -> None:
        result = ImageAltRule().evaluate(
            make_context(signals={"image_count": 2, "images_missing_alt": 5}),
        )
        assert result.score == 0.0


# ===================================================================
# UrlStructureRule
# ===================================================================


class TestUrlStructure:
    def test_clean_url(self, make_context) -> None:
        result = UrlStructureRule().evaluate(
            make_context(url="https://example.com/blog/how-to-grow-tomatoes"),
        )
        assert result.score == 100.0
        assert result.issues == []

    def test_insecure_messy_url(self, make_context) -> None:
        result = UrlStructureRule().evaluate(
            make_context(url="http://example.com/Blog_Post.php?a=1"),
        )
        # -30 http, -10 uppercase, -10 underscore, -5 extension
        assert result.score == 45.0
        assert [i.severity for i in result.issues] == [Severity.HIGH]

    def test_many_params_and_deep_path(self, make_context) -> None:
        url = "https://example.com/a1/b2/c3/d4/e5/f6?w=1&x=2&y=3&z=4"
        result = UrlStructureRule().evaluate(make_context(url=url))
        # -15 not descriptive, -10 depth, -15 params
        assert result.score == 60.0
        assert result.details == {"length": len(url), "segments": 6, "params": 4}

    def test_overlong_url(self, make_context) -> None:
        url = "https://example.com/" + "-".join(["tomato"] * 40)
        result = UrlStructureRule().evaluate(make_context(url=url))
        assert result.score == 80.0
        assert any("too long" in e for e in result.evidence)


# ===================================================================
# InternalLinkingRule
# ===================================================================


class TestInternalLinking:
    @pytest.mark.parametrize(
        ("links", "score", "issues"),
        [
            (0, 0.0, [(Severity.MEDIUM, "No internal links")]),
            (1, 40.0, [(Severity.LOW, "Few internal links")]),
            (2, 40.0, [(Severity.LOW, "Few internal links")]),
            (3, 60.0, []),
            (5, 80.0, []),
            (12, 100.0, []),
        ],
    )
    def test_brackets(self, make_context, links, score, issues) -> None:
        result = InternalLinkingRule().evaluate(
            make_context(signals={"internal_link_count": links}),
        )
        assert result.score == score
        assert [(i.severity, i.title) for i in result.issues] == issues
        assert result.details == {"internal_links": links}

    def test_dead_end_evidence(self, make_context) -> None:
        result = InternalLinkingRule().evaluate(make_context())
        assert "Page is a dead end for crawlers" in result.evidence
