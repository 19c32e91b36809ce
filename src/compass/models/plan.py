"""Evaluation plan data models.

An evaluation plan ties one catalog control to the requirements that assess
it and the procedures (policy rules) that evidence each requirement.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .catalog import Metadata


class Mapping(BaseModel):
    """Reference to an entry (``entry-id``) inside a catalog (``reference-id``)."""

    model_config = ConfigDict(populate_by_name=True)

    reference_id: str = Field(default="", alias="reference-id")
    entry_id: str = Field(default="", alias="entry-id")
    remarks: Optional[str] = None


class AssessmentProcedure(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: Optional[str] = None
    description: Optional[str] = None
    documentation: Optional[str] = None


class Assessment(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    requirement: Mapping
    procedures: list[AssessmentProcedure] = []


class EvaluationPlan(BaseModel):
    """Plan for one control: its requirements and their procedures."""

    model_config = ConfigDict(populate_by_name=True)

    control: Mapping
    assessments: list[Assessment] = []

    @property
    def catalog_id(self) -> str:
        return self.control.reference_id


class PlanDocument(BaseModel):
    """Contents of a single plan file."""

    model_config = ConfigDict(populate_by_name=True)

    metadata: Optional[Metadata] = None
    plans: list[EvaluationPlan] = []
