"""Basic mapper: resolves evidence through evaluation plans and catalogs.

Resolution runs in two phases per catalog. The evidence policy rule ID is
looked up among the plan procedures to find the control and requirement it
evidences, then the control is looked up in the catalog to find its family
and framework mappings. The first catalog that resolves both wins.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..models.catalog import Catalog, GuidelineMapping
from ..models.compliance import (
    Compliance,
    ComplianceControl,
    ComplianceFrameworks,
    ComplianceStatus,
    EnrichmentStatus,
)
from ..models.evidence import Evidence
from ..models.plan import EvaluationPlan
from ..utils.logging import get_logger
from .base import BaseMapper, Scope
from .status import normalize_decision

logger = get_logger(__name__)

REASON_CATALOG_NOT_FOUND = "catalog not found"
REASON_RULE_NOT_FOUND = "policy rule not found"
REASON_CONTROL_NOT_FOUND = "control data not found"


@dataclass(frozen=True)
class ProcedureInfo:
    control_id: str
    requirement_id: str
    documentation: Optional[str]


@dataclass(frozen=True)
class ControlInfo:
    mappings: list[GuidelineMapping]
    category: str


def index_procedures(plans: list[EvaluationPlan]) -> dict[str, ProcedureInfo]:
    """Flatten plans into procedure ID -> procedure info. Last write wins."""
    procedures: dict[str, ProcedureInfo] = {}
    for plan in plans:
        for assessment in plan.assessments:
            for procedure in assessment.procedures:
                procedures[procedure.id] = ProcedureInfo(
                    control_id=plan.control.entry_id,
                    requirement_id=assessment.requirement.entry_id,
                    documentation=procedure.documentation,
                )
    return procedures


def index_controls(catalog: Catalog) -> dict[str, ControlInfo]:
    """Flatten control families into control ID -> control info. Last write wins."""
    controls: dict[str, ControlInfo] = {}
    for family in catalog.control_families:
        for control in family.controls:
            controls[control.id] = ControlInfo(
                mappings=control.guideline_mappings,
                category=family.title,
            )
    return controls


def build_compliance(
    catalog_id: str,
    procedure: ProcedureInfo,
    control: ControlInfo,
    status: ComplianceStatus,
) -> Compliance:
    frameworks: list[str] = []
    requirements: list[str] = []
    for mapping in control.mappings:
        frameworks.append(mapping.reference_id)
        for entry in mapping.entries:
            requirements.append(entry.reference_id)

    return Compliance(
        status=status,
        control=ComplianceControl(
            id=procedure.requirement_id,
            catalog_id=catalog_id,
            category=control.category,
            remediation_description=procedure.documentation or None,
        ),
        frameworks=ComplianceFrameworks(
            requirements=requirements,
            frameworks=frameworks,
        ),
        enrichment_status=EnrichmentStatus.SUCCESS,
    )


class BasicMapper(BaseMapper):
    """Default mapper variant, also used as the fallback for unknown sources."""

    name = "basic"

    def map(self, evidence: Evidence, scope: Scope) -> Compliance:
        """Resolve evidence to a compliance finding.

        Catalog IDs are visited in lexicographic order so that a procedure
        planned under several catalogs always resolves to the same one.
        Misses are collected as reasons and logged; they never raise.

        Args:
            evidence: The policy evaluation to resolve.
            scope: Catalogs available for resolution, keyed by catalog ID.

        Returns:
            The resolved Compliance, or the unmapped sentinel.
        """
        status = normalize_decision(evidence.decision)
        reasons: list[str] = []

        for catalog_id in sorted(self._plans):
            catalog = scope.get(catalog_id)
            if catalog is None:
                reasons.append(f"{catalog_id}: {REASON_CATALOG_NOT_FOUND}")
                continue

            procedure = index_procedures(self._plans[catalog_id]).get(evidence.policy_rule_id)
            if procedure is None:
                reasons.append(f"{catalog_id}: {REASON_RULE_NOT_FOUND}")
                continue

            control = index_controls(catalog).get(procedure.control_id)
            if control is None:
                reasons.append(f"{catalog_id}: {REASON_CONTROL_NOT_FOUND}")
                continue

            return build_compliance(catalog_id, procedure, control, status)

        logger.debug(
            "evidence_unmapped",
            mapper=self.mapper_id,
            policy_rule_id=evidence.policy_rule_id,
            reasons=reasons,
        )
        return Compliance.unmapped()
