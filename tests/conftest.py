"""Shared fixtures for Compass tests."""

from __future__ import annotations

import logging
import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest
import structlog

from compass.mappers.basic import BasicMapper
from compass.models.catalog import Catalog
from compass.models.evidence import Evidence
from compass.models.plan import EvaluationPlan

CATALOG_YAML = """\
metadata:
  id: cat-1
  title: Test Catalog
control-families:
  - id: AC
    title: Access Control
    controls:
      - id: AC-1
        title: Policy and Procedures
        guideline-mappings:
          - reference-id: NIST-800-53
            entries:
              - reference-id: AC-1
  - id: AU
    title: Audit and Accountability
    controls:
      - id: AU-2
        title: Event Logging
        guideline-mappings:
          - reference-id: NIST-800-53
            entries:
              - reference-id: AU-2
              - reference-id: AU-2(3)
          - reference-id: ISO-27001
            entries:
              - reference-id: A.8.15
"""

PLAN_YAML = """\
metadata:
  id: opa-plans
plans:
  - control:
      reference-id: cat-1
      entry-id: AC-1
    assessments:
      - requirement:
          reference-id: cat-1
          entry-id: AC-1-REQ
        procedures:
          - id: proc-1
            documentation: Restrict access to the policy repository.
  - control:
      reference-id: cat-1
      entry-id: AU-2
    assessments:
      - requirement:
          reference-id: cat-1
          entry-id: AU-2-REQ
        procedures:
          - id: proc-2
            documentation: Enable audit logging.
"""


@pytest.fixture(autouse=True)
def _structlog_to_stderr():
    """Route logs to stderr without caching so capture_logs() works."""
    structlog.reset_defaults()
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(logging.WARNING),
        logger_factory=structlog.PrintLoggerFactory(sys.stderr),
        cache_logger_on_first_use=False,
    )
    yield
    structlog.reset_defaults()


def _make_plan(
    catalog_id: str = "cat-1",
    control_id: str = "AC-1",
    requirement_id: str = "AC-1-REQ",
    procedure_id: str = "proc-1",
    documentation: str = "Restrict access to the policy repository.",
) -> EvaluationPlan:
    return EvaluationPlan.model_validate({
        "control": {"reference-id": catalog_id, "entry-id": control_id},
        "assessments": [
            {
                "requirement": {"reference-id": catalog_id, "entry-id": requirement_id},
                "procedures": [{"id": procedure_id, "documentation": documentation}],
            }
        ],
    })


def _make_catalog(
    catalog_id: str = "cat-1",
    family: str = "Access Control",
    control_id: str = "AC-1",
    standard: str = "NIST-800-53",
    entries: tuple[str, ...] = ("AC-1",),
) -> Catalog:
    return Catalog.model_validate({
        "metadata": {"id": catalog_id},
        "control-families": [
            {
                "title": family,
                "controls": [
                    {
                        "id": control_id,
                        "guideline-mappings": [
                            {
                                "reference-id": standard,
                                "entries": [{"reference-id": e} for e in entries],
                            }
                        ],
                    }
                ],
            }
        ],
    })


def _make_evidence(policy_rule_id: str = "proc-1", decision: str = "passed", source: str = "opa") -> Evidence:
    return Evidence(
        source=source,
        policy_rule_id=policy_rule_id,
        decision=decision,
        timestamp=datetime(2025, 1, 1, tzinfo=timezone.utc),
    )


@pytest.fixture
def catalog() -> Catalog:
    return _make_catalog()


@pytest.fixture
def scope(catalog: Catalog) -> dict[str, Catalog]:
    return {"cat-1": catalog}


@pytest.fixture
def mapper() -> BasicMapper:
    """A mapper registered as 'opa' with a single plan under cat-1."""
    m = BasicMapper("opa")
    m.add_evaluation_plan("cat-1", _make_plan())
    return m


@pytest.fixture
def config_dir(tmp_path: Path) -> Path:
    """A deployment directory with a catalog, a plan directory and a config file."""
    (tmp_path / "catalogs").mkdir()
    (tmp_path / "catalogs" / "cat-1.yaml").write_text(CATALOG_YAML, encoding="utf-8")
    plans = tmp_path / "plans" / "opa"
    plans.mkdir(parents=True)
    (plans / "plan.yaml").write_text(PLAN_YAML, encoding="utf-8")
    (plans / "README.md").write_text("not a plan\n", encoding="utf-8")
    (tmp_path / "compass.yaml").write_text(
        "catalog: catalogs/cat-1.yaml\n"
        "plugins:\n"
        "  - id: opa\n"
        "    evaluations-dir: plans/opa\n"
        "  - id: kyverno\n"
        "logging:\n"
        "  level: WARNING\n",
        encoding="utf-8",
    )
    return tmp_path


@pytest.fixture
def make_plan():
    return _make_plan


@pytest.fixture
def make_catalog():
    return _make_catalog


@pytest.fixture
def make_evidence():
    return _make_evidence
