"""Shared types, enums, and base models used across pagescore domain models."""

from datetime import datetime, timezone
from enum import StrEnum
from typing import Annotated
from uuid import UUID

from pydantic import BaseModel, Field
from uuid_extensions import uuid7


def utc_now() -> datetime:
    """Return the current UTC timestamp (timezone-aware)."""
    return datetime.now(tz=timezone.utc)


def new_uuid7() -> UUID:
    """Generate a new time-sortable UUID v7."""
    return uuid7()


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC; convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# --- Reusable annotated types ---

UUIDv7 = Annotated[UUID, Field(description="Time-sortable UUID v7.")]
UTCTimestamp = Annotated[
    datetime, Field(description="UTC timezone-aware timestamp.")
]


# --- Shared enums ---


class Dimension(StrEnum):
    """Scoring axes. Declaration order is the report order."""

    AUTHORITY = "authority"
    FRESHNESS = "freshness"
    STRUCTURE = "structure"
    TECHNICAL = "technical"


class Severity(StrEnum):
    """Issue severity levels, most severe first."""

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class PageCategory(StrEnum):
    """Page categories produced by the external category classifier."""

    HOMEPAGE = "homepage"
    BLOG_ARTICLE = "blog_article"
    DOCUMENTATION_HELP = "documentation_help"
    FAQ = "faq"
    PRODUCT_SERVICE = "product_service"
    CASE_STUDY = "case_study"
    LANDING_CAMPAIGN = "landing_campaign"
    PRICING = "pricing"
    ABOUT_COMPANY = "about_company"
    NAVIGATION_CATEGORY = "navigation_category"
    CONTACT = "contact"
    LEGAL_POLICY = "legal_policy"
    LOGIN_ACCOUNT = "login_account"
    SEARCH_RESULTS = "search_results"
    ERROR_404 = "error_404"
    UNCATEGORIZED = "uncategorized"

    @classmethod
    def coerce(cls, value: object) -> "PageCategory":
        """Map any label to a category; unknown or absent labels are uncategorized."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                return cls.UNCATEGORIZED
        return cls.UNCATEGORIZED


class ApplicabilityScope(StrEnum):
    """Whether a rule applies to every page or to a category set."""

    ALL = "all"
    CATEGORY = "category"


class ExecutionScope(StrEnum):
    """Granularity of an evaluation pass."""

    PAGE = "page"
    DOMAIN = "domain"


class DomainAuthorityLevel(StrEnum):
    """Externally researched reputation of a domain."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    UNKNOWN = "unknown"


class Grade(StrEnum):
    """Overall page grades from A (best) to F (worst)."""

    A = "A"
    B = "B"
    C = "C"
    D = "D"
    F = "F"


class OverallScoreMode(StrEnum):
    """How dimension scores combine into the overall page score."""

    WEIGHTED = "weighted"
    UNWEIGHTED = "unweighted"


# --- Base model ---


class PageScoreBase(BaseModel):
    """Base model with common configuration for all pagescore Pydantic models."""

    model_config = {
        "populate_by_name": True,
        "ser_json_timedelta": "iso8601",
        "protected_namespaces": (),
    }
