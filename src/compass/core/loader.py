"""Catalog and evaluation plan loading.

Runs once at startup. Every failure here is a configuration error and
aborts startup; nothing in this module is used while handling evidence.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, TypeVar

import yaml
from pydantic import BaseModel, ValidationError

from ..errors import ConfigurationError
from ..mappers.base import BaseMapper, Scope
from ..mappers.registry import MapperSet, get_mapper
from ..models.catalog import Catalog
from ..models.plan import PlanDocument
from ..utils.logging import get_logger

logger = get_logger(__name__)

PLAN_SUFFIXES = (".yaml", ".yml", ".json")

ModelT = TypeVar("ModelT", bound=BaseModel)


def _load_document(path: Path, model: type[ModelT]) -> ModelT:
    try:
        content = yaml.safe_load(path.read_text(encoding="utf-8-sig"))
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"Unable to read {path}: {exc}") from exc

    if not isinstance(content, dict):
        raise ConfigurationError(f"{path} does not contain a mapping")

    try:
        return model.model_validate(content)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid {model.__name__} in {path}: {exc}") from exc


def load_catalog(path: Path) -> Catalog:
    """Load a single catalog file."""
    return _load_document(path, Catalog)


def load_plan_document(path: Path) -> PlanDocument:
    """Load a single evaluation plan file."""
    return _load_document(path, PlanDocument)


def new_scope(catalog_paths: Iterable[Path | str]) -> Scope:
    """Load catalogs keyed by their metadata ID."""
    scope: Scope = {}
    for raw_path in catalog_paths:
        path = Path(raw_path)
        if not path.is_file():
            raise ConfigurationError(f"Catalog file not found: {path}")
        catalog = load_catalog(path)
        if catalog.id in scope:
            logger.warning("catalog_replaced", catalog_id=catalog.id, path=str(path))
        scope[catalog.id] = catalog
        logger.info(
            "catalog_loaded",
            catalog_id=catalog.id,
            families=len(catalog.control_families),
            path=str(path),
        )
    return scope


def _plan_files(directory: Path) -> list[Path]:
    return sorted(
        p for p in directory.rglob("*")
        if p.is_file() and p.suffix.lower() in PLAN_SUFFIXES
    )


def new_mapper_from_dir(
    mapper_id: str,
    evaluations_dir: Path,
    mapper_type: str | None = None,
) -> BaseMapper:
    """Create a mapper and load every plan file found under ``evaluations_dir``.

    Plans are registered under the catalog ID of their control reference.
    Plans without a catalog reference are skipped.
    """
    try:
        mapper = get_mapper(mapper_id, mapper_type)
    except ValueError as exc:
        raise ConfigurationError(f"Plugin '{mapper_id}': {exc}") from exc

    for path in _plan_files(evaluations_dir):
        document = load_plan_document(path)
        for plan in document.plans:
            if not plan.catalog_id:
                logger.debug("plan_skipped", mapper=mapper_id, path=str(path), control=plan.control.entry_id)
                continue
            mapper.add_evaluation_plan(plan.catalog_id, plan)

    return mapper


def new_mapper_set(plugins: list[dict]) -> MapperSet:
    """Build the mapper set from validated plugin entries.

    Args:
        plugins: Entries with ``id``, optional ``type`` and ``evaluations-dir``.

    Returns:
        Mapper ID -> mapper. Entries without a plan directory are skipped.
    """
    mapper_set: MapperSet = {}
    for entry in plugins:
        mapper_id = entry["id"]
        evaluations_dir = entry.get("evaluations-dir") or ""
        if not evaluations_dir:
            logger.warning("plugin_skipped", mapper=mapper_id, reason="no evaluations directory")
            continue

        directory = Path(evaluations_dir)
        if not directory.exists():
            raise ConfigurationError(
                f"Evaluations directory {directory} for plugin {mapper_id} does not exist"
            )
        if not directory.is_dir():
            raise ConfigurationError(
                f"Evaluations directory {directory} for plugin {mapper_id} is not a directory"
            )

        mapper = new_mapper_from_dir(mapper_id, directory, entry.get("type"))
        mapper_set[mapper_id] = mapper
        logger.info(
            "mapper_loaded",
            mapper=mapper_id,
            catalogs=sorted(mapper.plans),
            plans=mapper.plan_count(),
        )
    return mapper_set
