"""Rule registry: the deployed scoring policy.

Holds every rule grouped by dimension and execution scope, hands them out
in canonical order (descending priority, then registration order), and
checks that each populated dimension's weights plus reserved headroom
add up to exactly 1.0. Registration happens once at startup; after
``freeze()`` the registry is read-only and safe to share across
concurrent evaluations.
"""

from __future__ import annotations

import logging
import math
from collections import defaultdict
from functools import lru_cache

from pydantic import Field

from pagescore.models.common import Dimension, ExecutionScope, PageScoreBase
from pagescore.rules.defaults import DEFAULT_RESERVATIONS, default_rules
from pagescore.scoring.config import ScoringConfig
from pagescore.scoring.rule import Rule

logger = logging.getLogger(__name__)

_WEIGHT_TOLERANCE = 1e-9


class PageScoreError(Exception):
    """Base class for engine configuration errors."""


class RegistryError(PageScoreError, ValueError):
    """Invalid registration: duplicate id, weight overflow, or frozen registry."""


class WeightConservationError(PageScoreError):
    """Registered plus reserved weight of a dimension does not equal 1.0."""


class WeightBudget(PageScoreBase, frozen=True):
    """Weight accounting for one (dimension, execution scope) pair."""

    dimension: Dimension
    execution_scope: ExecutionScope
    registered: float = Field(ge=0.0)
    reserved: float = Field(ge=0.0)

    @property
    def total(self) -> float:
        return self.registered + self.reserved

    @property
    def unscored(self) -> float:
        """Weight that no registered rule can ever earn."""
        return max(0.0, 1.0 - self.registered)

    @property
    def balanced(self) -> bool:
        return math.isclose(self.total, 1.0, abs_tol=_WEIGHT_TOLERANCE)


class RuleRegistry:
    """In-memory registry of scoring rules.

    Rules are keyed by id; iteration order is fixed at registration time so
    evidence and issue order is reproducible for a given input.
    """

    def __init__(self) -> None:
        self._rules: dict[str, Rule] = {}
        self._order: dict[str, int] = {}  # rule_id -> registration index
        self._reserved: dict[tuple[Dimension, ExecutionScope], float] = defaultdict(float)
        self._frozen = False

    # ----- Registration -----

    def register(self, rule: Rule) -> Rule:
        """Add a rule. Returns it so callers can keep a handle."""
        self._ensure_mutable()
        descriptor = rule.descriptor
        if descriptor.id in self._rules:
            msg = f"Rule {descriptor.id!r} already registered."
            raise RegistryError(msg)

        key = (descriptor.dimension, descriptor.execution_scope)
        projected = self._allocated(*key) + descriptor.weight
        if projected > 1.0 + _WEIGHT_TOLERANCE:
            msg = (
                f"Rule {descriptor.id!r} pushes {descriptor.dimension.value}/"
                f"{descriptor.execution_scope.value} weight to {projected:.3f} (> 1.0)."
            )
            raise RegistryError(msg)

        self._order[descriptor.id] = len(self._order)
        self._rules[descriptor.id] = rule
        logger.debug(
            "Registered rule %s (%s, weight=%.2f, priority=%d)",
            descriptor.id, descriptor.dimension.value,
            descriptor.weight, descriptor.priority,
        )
        return rule

    def reserve(
        self,
        dimension: Dimension,
        weight: float,
        scope: ExecutionScope = ExecutionScope.PAGE,
    ) -> None:
        """Declare explicitly unscored headroom for a dimension."""
        self._ensure_mutable()
        if weight < 0.0:
            msg = f"Reserved weight must be non-negative, got {weight}."
            raise RegistryError(msg)
        projected = self._allocated(dimension, scope) + weight
        if projected > 1.0 + _WEIGHT_TOLERANCE:
            msg = (
                f"Reserving {weight} on {dimension.value}/{scope.value} "
                f"exceeds 1.0 ({projected:.3f})."
            )
            raise RegistryError(msg)
        self._reserved[(dimension, scope)] += weight

    def freeze(self) -> None:
        """Fix the rule set for the process lifetime."""
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    # ----- Lookup -----

    def get(self, rule_id: str) -> Rule:
        """Get a rule by id. Raises KeyError if not found."""
        try:
            return self._rules[rule_id]
        except KeyError:
            msg = f"Rule {rule_id!r} not registered."
            raise KeyError(msg) from None

    def __contains__(self, rule_id: object) -> bool:
        return rule_id in self._rules

    def __len__(self) -> int:
        return len(self._rules)

    def rules_for(
        self,
        dimension: Dimension,
        scope: ExecutionScope | None = None,
    ) -> list[Rule]:
        """Rules of a dimension in canonical order.

        ``scope=None`` returns rules of every execution scope; filtering by
        scope is otherwise the orchestrator's job.
        """
        selected = [
            rule for rule in self._rules.values()
            if rule.descriptor.dimension == dimension
            and (scope is None or rule.descriptor.execution_scope == scope)
        ]
        return sorted(selected, key=self._sort_key)

    def dimensions(self, scope: ExecutionScope = ExecutionScope.PAGE) -> list[Dimension]:
        """Dimensions with at least one rule at ``scope``, in enum order."""
        populated = {
            rule.descriptor.dimension
            for rule in self._rules.values()
            if rule.descriptor.execution_scope == scope
        }
        return [d for d in Dimension if d in populated]

    # ----- Weight accounting -----

    def weight_budget(
        self,
        dimension: Dimension,
        scope: ExecutionScope = ExecutionScope.PAGE,
    ) -> WeightBudget:
        registered = sum(
            rule.descriptor.weight for rule in self._rules.values()
            if rule.descriptor.dimension == dimension
            and rule.descriptor.execution_scope == scope
        )
        return WeightBudget(
            dimension=dimension,
            execution_scope=scope,
            registered=registered,
            reserved=self._reserved.get((dimension, scope), 0.0),
        )

    def check_weight_conservation(self) -> list[WeightBudget]:
        """Verify registered + reserved == 1.0 for every populated dimension.

        Returns the budgets checked.

        Raises:
            WeightConservationError: listing every unbalanced dimension.
        """
        budgets: list[WeightBudget] = []
        for scope in ExecutionScope:
            populated = set(self.dimensions(scope)) | {
                d for (d, s), w in self._reserved.items() if s == scope and w > 0.0
            }
            for dimension in Dimension:
                if dimension in populated:
                    budgets.append(self.weight_budget(dimension, scope))

        unbalanced = [b for b in budgets if not b.balanced]
        if unbalanced:
            detail = ", ".join(
                f"{b.dimension.value}/{b.execution_scope.value}="
                f"{b.registered:.3f}+{b.reserved:.3f}"
                for b in unbalanced
            )
            msg = f"Dimension weights do not sum to 1.0: {detail}"
            raise WeightConservationError(msg)
        return budgets

    # ----- Internals -----

    def _allocated(self, dimension: Dimension, scope: ExecutionScope) -> float:
        budget = self.weight_budget(dimension, scope)
        return budget.total

    def _sort_key(self, rule: Rule) -> tuple[int, int]:
        return (-rule.descriptor.priority, self._order[rule.descriptor.id])

    def _ensure_mutable(self) -> None:
        if self._frozen:
            msg = "Registry is frozen; rules are fixed for the process lifetime."
            raise RegistryError(msg)


# ---------------------------------------------------------------------------
# Default registry
# ---------------------------------------------------------------------------


def build_default_registry(config: ScoringConfig | None = None) -> RuleRegistry:
    """Register the default rule set, reserve declared headroom, check, freeze."""
    config = config or ScoringConfig()
    registry = RuleRegistry()
    for rule in default_rules(config):
        registry.register(rule)
    for dimension, scope, weight in DEFAULT_RESERVATIONS:
        registry.reserve(dimension, weight, scope)
    budgets = registry.check_weight_conservation()
    registry.freeze()
    logger.info(
        "Default registry ready: %d rules across %d dimension budgets",
        len(registry), len(budgets),
    )
    return registry


@lru_cache
def get_default_registry() -> RuleRegistry:
    """Process-wide default registry built from the default ScoringConfig."""
    return build_default_registry()
