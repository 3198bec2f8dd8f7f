"""Tests for ScoringConfig: grades, category weights, settings bridge."""

import pytest
from pydantic import ValidationError

from pagescore.config.settings import Settings
from pagescore.models.common import Dimension, Grade, OverallScoreMode, PageCategory
from pagescore.scoring.config import (
    FreshnessRuleConfig,
    ScoringConfig,
    StructureRuleConfig,
)


class TestGradeFor:
    @pytest.mark.parametrize(
        ("score", "grade"),
        [
            (100.0, Grade.A),
            (85.0, Grade.A),
            (84.99, Grade.B),
            (70.0, Grade.B),
            (55.0, Grade.C),
            (40.0, Grade.D),
            (39.99, Grade.F),
            (0.0, Grade.F),
        ],
    )
    def test_default_thresholds(self, score: float, grade: Grade) -> None:
        assert ScoringConfig().grade_for(score) == grade

    def test_custom_thresholds(self) -> None:
        config = ScoringConfig(grade_thresholds={Grade.A: 95.0, Grade.B: 90.0})
        assert config.grade_for(92.0) == Grade.B
        assert config.grade_for(80.0) == Grade.F


class TestEffectiveDimensionWeight:
    def test_unmodified_category(self) -> None:
        config = ScoringConfig()
        assert config.effective_dimension_weight(Dimension.FRESHNESS, PageCategory.HOMEPAGE) == 2.5

    def test_blog_modifiers(self) -> None:
        config = ScoringConfig()
        assert config.effective_dimension_weight(
            Dimension.AUTHORITY, PageCategory.BLOG_ARTICLE,
        ) == pytest.approx(1.5)
        assert config.effective_dimension_weight(
            Dimension.FRESHNESS, PageCategory.BLOG_ARTICLE,
        ) == pytest.approx(3.0)

    def test_missing_dimension_weight_defaults_to_one(self) -> None:
        config = ScoringConfig(dimension_weights={Dimension.AUTHORITY: 2.0})
        assert config.effective_dimension_weight(
            Dimension.TECHNICAL, PageCategory.UNCATEGORIZED,
        ) == 1.0


class TestValidation:
    def test_nominal_weight_positive(self) -> None:
        with pytest.raises(ValidationError):
            ScoringConfig(nominal_dimension_weight=0.0)

    def test_timeout_positive_or_none(self) -> None:
        assert ScoringConfig(rule_timeout_seconds=None).rule_timeout_seconds is None
        with pytest.raises(ValidationError):
            ScoringConfig(rule_timeout_seconds=0.0)

    def test_rule_sections_have_defaults(self) -> None:
        config = ScoringConfig()
        assert config.freshness == FreshnessRuleConfig()
        assert config.structure == StructureRuleConfig()
        assert config.freshness.day_thresholds[0] == (90, 100.0)


class TestFromSettings:
    def test_execution_knobs_copied(self) -> None:
        settings = Settings(
            RULE_TIMEOUT_SECONDS=5.0,
            MAX_CONCURRENT_PAGES=3,
            CONCURRENT_RULES=False,
            OVERALL_SCORE_MODE=OverallScoreMode.UNWEIGHTED,
        )
        config = ScoringConfig.from_settings(settings)
        assert config.rule_timeout_seconds == 5.0
        assert config.max_concurrent_pages == 3
        assert config.concurrent_rules is False
        assert config.overall_mode == OverallScoreMode.UNWEIGHTED
        assert config.dimension_weights[Dimension.FRESHNESS] == 2.5
