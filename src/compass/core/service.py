"""Enrichment service: selects a mapper for each evidence record and resolves it."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from ..mappers.base import Mapper, Scope
from ..mappers.registry import MapperSet, fallback_mapper
from ..models.compliance import EnrichmentResponse
from ..models.evidence import EnrichmentRequest, Evidence
from ..utils.logging import get_logger
from .config import get_plugin_configs
from .loader import new_mapper_set, new_scope

logger = get_logger(__name__)


class EnrichmentService:
    """Owns the mapper set and catalog scope for the life of the process.

    Both are built before the service handles any evidence and are only read
    afterwards, so ``enrich`` may be called from any number of threads.
    """

    def __init__(self, mappers: MapperSet, scope: Scope):
        self.mappers = mappers
        self.scope = scope
        self._fallback = fallback_mapper()

    @classmethod
    def from_config(cls, config: dict) -> EnrichmentService:
        """Load catalogs and evaluation plans named by an effective config.

        Raises:
            ConfigurationError: A catalog, plan directory or plan file is
                missing or invalid.
        """
        scope = new_scope(Path(p) for p in config.get("catalogs") or [])
        mappers = new_mapper_set(get_plugin_configs(config))
        return cls(mappers, scope)

    def mapper_for(self, source_id: str) -> Mapper:
        mapper = self.mappers.get(source_id)
        if mapper is None:
            logger.warning("mapper_fallback", source=source_id, fallback=self._fallback.plugin_name())
            return self._fallback
        return mapper

    def enrich(self, evidence: Evidence, source_id: Optional[str] = None) -> EnrichmentResponse:
        """Enrich evidence with compliance context.

        Args:
            evidence: The policy evaluation to enrich.
            source_id: Mapper to use. Defaults to ``evidence.source``.

        Returns:
            The response; unresolvable evidence yields the unmapped sentinel.
        """
        mapper = self.mapper_for(source_id if source_id is not None else evidence.source)
        compliance = mapper.map(evidence, self.scope)
        logger.debug(
            "evidence_enriched",
            mapper=mapper.plugin_name(),
            policy_rule_id=evidence.policy_rule_id,
            result=evidence.evaluation_result.value,
            enrichment_status=compliance.enrichment_status.value,
            status=compliance.status.value,
        )
        return EnrichmentResponse(compliance=compliance)

    def enrich_request(self, request: EnrichmentRequest) -> EnrichmentResponse:
        return self.enrich(request.evidence)
