"""Evidence data models: the raw policy evaluation signal."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class EvaluationResult(str, Enum):
    NOT_RUN = "Not Run"
    PASSED = "Passed"
    FAILED = "Failed"
    NEEDS_REVIEW = "Needs Review"
    NOT_APPLICABLE = "Not Applicable"
    UNKNOWN = "Unknown"

    @classmethod
    def parse(cls, decision: Optional[str]) -> EvaluationResult:
        """Parse a free-text policy decision.

        The value is lower-cased, trimmed, and spaces/underscores become
        hyphens before the lookup in ``DECISION_ALIASES``. Anything not in
        the table is ``UNKNOWN``.
        """
        if not decision:
            return cls.UNKNOWN
        key = decision.strip().lower().replace("_", "-").replace(" ", "-")
        return DECISION_ALIASES.get(key, cls.UNKNOWN)


DECISION_ALIASES: dict[str, EvaluationResult] = {
    "passed": EvaluationResult.PASSED,
    "success": EvaluationResult.PASSED,
    "failed": EvaluationResult.FAILED,
    "failure": EvaluationResult.FAILED,
    "not-run": EvaluationResult.NOT_RUN,
    "not-applicable": EvaluationResult.NOT_APPLICABLE,
    "needs-review": EvaluationResult.NEEDS_REVIEW,
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Evidence(BaseModel):
    """A single policy evaluation emitted by a policy engine.

    ``source`` names the policy engine and selects the mapper. ``decision``
    is kept verbatim; use ``evaluation_result`` for the parsed value.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = None
    source: str = Field(
        default="",
        validation_alias=AliasChoices("source", "policyEngineName"),
    )
    policy_rule_id: str = Field(
        validation_alias=AliasChoices("policy_rule_id", "policyRuleId"),
        serialization_alias="policyRuleId",
    )
    decision: str = Field(
        default="",
        validation_alias=AliasChoices("decision", "evaluationStatus", "policyEvaluationStatus"),
    )
    timestamp: datetime = Field(default_factory=_utcnow)
    details: Optional[dict[str, Any]] = None
    subject: Optional[dict[str, Any]] = None

    @property
    def evaluation_result(self) -> EvaluationResult:
        return EvaluationResult.parse(self.decision)


class EnrichmentRequest(BaseModel):
    evidence: Evidence
