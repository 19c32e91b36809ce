"""Compliance data models: the enrichment result."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

UNMAPPED = "UNMAPPED"
UNCATEGORIZED = "UNCATEGORIZED"


class ComplianceStatus(str, Enum):
    COMPLIANT = "COMPLIANT"
    NON_COMPLIANT = "NON_COMPLIANT"
    NOT_APPLICABLE = "NOT_APPLICABLE"
    UNKNOWN = "UNKNOWN"


class EnrichmentStatus(str, Enum):
    SUCCESS = "success"
    UNMAPPED = "unmapped"
    SKIPPED = "skipped"


class ComplianceControl(BaseModel):
    """The requirement an evidence record was resolved to."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    catalog_id: str = Field(alias="catalogId")
    category: str
    remediation_description: Optional[str] = Field(default=None, alias="remediationDescription")


class ComplianceFrameworks(BaseModel):
    requirements: list[str] = []
    frameworks: list[str] = []


class Compliance(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    status: ComplianceStatus = ComplianceStatus.UNKNOWN
    control: ComplianceControl
    frameworks: ComplianceFrameworks = ComplianceFrameworks()
    enrichment_status: EnrichmentStatus = Field(alias="enrichmentStatus")

    @classmethod
    def unmapped(cls) -> Compliance:
        """Sentinel returned when no catalog resolves the evidence."""
        return cls(
            status=ComplianceStatus.UNKNOWN,
            control=ComplianceControl(
                id=UNMAPPED,
                catalog_id=UNMAPPED,
                category=UNCATEGORIZED,
            ),
            frameworks=ComplianceFrameworks(),
            enrichment_status=EnrichmentStatus.UNMAPPED,
        )

    @property
    def is_mapped(self) -> bool:
        return self.enrichment_status == EnrichmentStatus.SUCCESS


class EnrichmentResponse(BaseModel):
    compliance: Compliance
