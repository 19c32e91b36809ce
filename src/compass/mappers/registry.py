"""Mapper registry: mapper variants by type and the mapper set by ID."""

from __future__ import annotations

from .base import BaseMapper, Mapper
from .basic import BasicMapper

# Mapper ID (policy engine name) -> mapper
MapperSet = dict[str, Mapper]

DEFAULT_MAPPER_TYPE = BasicMapper.name

MAPPER_TYPES: dict[str, type[BaseMapper]] = {
    BasicMapper.name: BasicMapper,
}


def get_mapper(mapper_id: str, mapper_type: str | None = None) -> BaseMapper:
    """Factory function to create a mapper registered under ``mapper_id``."""
    type_name = mapper_type or DEFAULT_MAPPER_TYPE
    mapper_cls = MAPPER_TYPES.get(type_name)
    if mapper_cls is None:
        raise ValueError(f"Unknown mapper type: {type_name}")
    return mapper_cls(mapper_id)


def fallback_mapper() -> BaseMapper:
    """A default mapper with no plans; it resolves everything to unmapped."""
    return MAPPER_TYPES[DEFAULT_MAPPER_TYPE]()
