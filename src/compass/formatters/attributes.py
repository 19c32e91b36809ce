"""Flat telemetry attributes for enriched evidence.

Log pipelines carry evidence as flat attribute maps (``policy.rule.id``,
``policy.engine.name``...). These helpers turn such a map into Evidence and
write the enrichment result back using the compliance attribute names.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, MutableMapping, Optional

from ..core.service import EnrichmentService
from ..errors import CompassError
from ..models.compliance import EnrichmentResponse, EnrichmentStatus
from ..models.evidence import Evidence

POLICY_ENGINE_NAME = "policy.engine.name"
POLICY_RULE_ID = "policy.rule.id"
POLICY_EVALUATION_RESULT = "policy.evaluation.result"

COMPLIANCE_STATUS = "compliance.status"
COMPLIANCE_CONTROL_ID = "compliance.control.id"
COMPLIANCE_CONTROL_CATALOG_ID = "compliance.control.catalog.id"
COMPLIANCE_CONTROL_CATEGORY = "compliance.control.category"
COMPLIANCE_REQUIREMENTS = "compliance.requirements"
COMPLIANCE_FRAMEWORKS = "compliance.frameworks"
COMPLIANCE_REMEDIATION_DESCRIPTION = "compliance.remediation.description"
COMPLIANCE_ENRICHMENT_STATUS = "compliance.enrichment.status"

REQUIRED_ATTRIBUTES = (POLICY_RULE_ID, POLICY_ENGINE_NAME, POLICY_EVALUATION_RESULT)


class MissingAttributesError(CompassError):
    """Evidence attributes needed for enrichment are absent."""

    def __init__(self, missing: list[str]):
        self.missing = missing
        super().__init__(f"missing required attributes: {', '.join(missing)}")


def evidence_from_attributes(
    attrs: MutableMapping[str, Any],
    timestamp: Optional[datetime] = None,
) -> Evidence:
    """Build Evidence from a flat attribute map.

    Raises:
        MissingAttributesError: A required attribute is absent.
    """
    missing = [key for key in REQUIRED_ATTRIBUTES if key not in attrs]
    if missing:
        raise MissingAttributesError(missing)

    fields: dict[str, Any] = {
        "source": str(attrs[POLICY_ENGINE_NAME]),
        "policy_rule_id": str(attrs[POLICY_RULE_ID]),
        "decision": str(attrs[POLICY_EVALUATION_RESULT]),
    }
    if timestamp is not None:
        fields["timestamp"] = timestamp
    return Evidence(**fields)


def apply_attributes(attrs: MutableMapping[str, Any], response: EnrichmentResponse) -> None:
    """Write the enrichment result into ``attrs``.

    The enrichment status is always written. Compliance attributes are only
    written when enrichment succeeded.
    """
    compliance = response.compliance
    attrs[COMPLIANCE_ENRICHMENT_STATUS] = compliance.enrichment_status.value

    if not compliance.is_mapped:
        return

    attrs[COMPLIANCE_STATUS] = compliance.status.value
    attrs[COMPLIANCE_CONTROL_ID] = compliance.control.id
    attrs[COMPLIANCE_CONTROL_CATALOG_ID] = compliance.control.catalog_id
    attrs[COMPLIANCE_CONTROL_CATEGORY] = compliance.control.category
    attrs[COMPLIANCE_REQUIREMENTS] = list(compliance.frameworks.requirements)
    attrs[COMPLIANCE_FRAMEWORKS] = list(compliance.frameworks.frameworks)
    if compliance.control.remediation_description is not None:
        attrs[COMPLIANCE_REMEDIATION_DESCRIPTION] = compliance.control.remediation_description


def enrich_attributes(
    attrs: MutableMapping[str, Any],
    service: EnrichmentService,
    timestamp: Optional[datetime] = None,
    source_id: Optional[str] = None,
) -> EnrichmentResponse:
    """Enrich a flat attribute map in place.

    ``source_id`` selects the mapper instead of the policy engine name.

    Raises:
        MissingAttributesError: A required attribute is absent. The
            enrichment status is set to ``skipped`` before raising.
    """
    try:
        evidence = evidence_from_attributes(attrs, timestamp)
    except MissingAttributesError:
        attrs[COMPLIANCE_ENRICHMENT_STATUS] = EnrichmentStatus.SKIPPED.value
        raise

    response = service.enrich(evidence, source_id=source_id)
    apply_attributes(attrs, response)
    return response
