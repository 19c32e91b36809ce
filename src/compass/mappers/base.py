"""Mapper abstraction shared by all mapper variants."""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping, Protocol, runtime_checkable

from ..models.catalog import Catalog
from ..models.compliance import Compliance
from ..models.evidence import Evidence
from ..models.plan import EvaluationPlan

# Catalogs in scope, keyed by catalog metadata ID
Scope = dict[str, Catalog]


@runtime_checkable
class Mapper(Protocol):
    """Protocol that all mappers must implement."""

    def plugin_name(self) -> str: ...

    def add_evaluation_plan(self, catalog_id: str, *plans: EvaluationPlan) -> None: ...

    def map(self, evidence: Evidence, scope: Scope) -> Compliance: ...


class BaseMapper:
    """Base class holding the per-mapper plan store.

    Plans are added during startup only. ``map`` implementations read the
    store and must never modify it.
    """

    name: str = "base"

    def __init__(self, mapper_id: str | None = None):
        self.mapper_id = mapper_id or self.name
        self._plans: dict[str, list[EvaluationPlan]] = {}

    def plugin_name(self) -> str:
        return self.mapper_id

    @property
    def plans(self) -> Mapping[str, tuple[EvaluationPlan, ...]]:
        return MappingProxyType({catalog_id: tuple(plans) for catalog_id, plans in self._plans.items()})

    def add_evaluation_plan(self, catalog_id: str, *plans: EvaluationPlan) -> None:
        """Append plans under ``catalog_id``; existing plans are kept."""
        self._plans.setdefault(catalog_id, []).extend(plans)

    def plan_count(self) -> int:
        return sum(len(plans) for plans in self._plans.values())

    def map(self, evidence: Evidence, scope: Scope) -> Compliance:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}(mapper_id={self.mapper_id!r}, catalogs={sorted(self._plans)!r})"
