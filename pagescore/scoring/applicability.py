"""Applicability matching between rule descriptors and page categories."""

from __future__ import annotations

from pagescore.models.common import ApplicabilityScope, PageCategory
from pagescore.models.rule import RuleDescriptor


def matches(descriptor: RuleDescriptor, category: PageCategory | str | None) -> bool:
    """Whether a rule applies to a page of ``category``.

    ``all``-scoped rules match every page. ``category``-scoped rules match
    only when the category is in their declared set, so an unknown or
    missing label (coerced to ``uncategorized``) never matches them.
    """
    applicability = descriptor.applicability
    if applicability.scope == ApplicabilityScope.ALL:
        return True
    page_category = PageCategory.coerce(category)
    if page_category == PageCategory.UNCATEGORIZED:
        return False
    return page_category in applicability.categories
