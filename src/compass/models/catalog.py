"""Control catalog data models.

Catalog documents use kebab-case keys (``control-families``,
``guideline-mappings``, ``reference-id``); attributes are snake_case and
either spelling is accepted on input.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Metadata(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: Optional[str] = None
    version: Optional[str] = None
    description: Optional[str] = None


class MappingEntry(BaseModel):
    """A single requirement referenced by a guideline mapping."""

    model_config = ConfigDict(populate_by_name=True)

    reference_id: str = Field(alias="reference-id")
    strength: Optional[int] = None
    remarks: Optional[str] = None


class GuidelineMapping(BaseModel):
    """Ties a control to a framework or standard (e.g. NIST-800-53)."""

    model_config = ConfigDict(populate_by_name=True)

    reference_id: str = Field(alias="reference-id")
    entries: list[MappingEntry] = []
    remarks: Optional[str] = None


class Control(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: Optional[str] = None
    objective: Optional[str] = None
    guideline_mappings: list[GuidelineMapping] = Field(default=[], alias="guideline-mappings")


class ControlFamily(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = None
    title: str = ""
    description: Optional[str] = None
    controls: list[Control] = []


class Catalog(BaseModel):
    """A control catalog, identified by its metadata ID."""

    model_config = ConfigDict(populate_by_name=True)

    metadata: Metadata
    control_families: list[ControlFamily] = Field(default=[], alias="control-families")

    @property
    def id(self) -> str:
        return self.metadata.id
