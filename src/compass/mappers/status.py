"""Verdict table: policy evaluation result -> compliance status."""

from __future__ import annotations

from typing import Optional

from ..models.compliance import ComplianceStatus
from ..models.evidence import EvaluationResult

VERDICTS: dict[EvaluationResult, ComplianceStatus] = {
    EvaluationResult.PASSED: ComplianceStatus.COMPLIANT,
    EvaluationResult.FAILED: ComplianceStatus.NON_COMPLIANT,
    EvaluationResult.NOT_RUN: ComplianceStatus.NOT_APPLICABLE,
    EvaluationResult.NOT_APPLICABLE: ComplianceStatus.NOT_APPLICABLE,
    EvaluationResult.NEEDS_REVIEW: ComplianceStatus.UNKNOWN,
    EvaluationResult.UNKNOWN: ComplianceStatus.UNKNOWN,
}


def result_to_status(result: EvaluationResult) -> ComplianceStatus:
    return VERDICTS.get(result, ComplianceStatus.UNKNOWN)


def normalize_decision(decision: Optional[str]) -> ComplianceStatus:
    """Normalize a free-text policy decision to a compliance verdict.

    ``passed``/``success`` are COMPLIANT, ``failed``/``failure`` are
    NON_COMPLIANT, ``not-run``/``not-applicable`` are NOT_APPLICABLE.
    Matching is case-insensitive; every other value is UNKNOWN.
    """
    return result_to_status(EvaluationResult.parse(decision))
