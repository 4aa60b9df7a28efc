"""
Invoicer Backend — Response Serializer
========================================

What:  Turns one entity (item) or many (collection) into the API envelope,
       and writes envelopes and errors to HTTP responses.
Why:   Every endpoint returns the same shape, so shaping, includes and
       pagination live here once instead of in each route.
How:   Transformers produce flat field mappings; this module walks their
       include resources, renders them in the requested output mode and
       attaches pagination metadata for paginated queries.

Pipeline:
    ┌──────────────┐    ┌──────────────────┐    ┌──────────────┐    ┌────────┐
    │ Select / list│───▶│ paginate (Select)│───▶│ transform +  │───▶│  emit  │
    │   or entity  │    │  COUNT + page    │    │ includes     │    │ (JSON) │
    └──────────────┘    └──────────────────┘    └──────────────┘    └────────┘

Output modes:
    FLAT:   item → {field: value, relation: {...} | [...]}
            collection → [item, ...]
    TYPED:  item → {"data": {"type", "id", "attributes", "relationships"?},
                    "included"?: [...]}
            collection → {"data": [...], "included"?: [...]}

Envelope on the wire (emit):
    index_key="data" → {"data": <payload>, "meta"?: {...}}
    index_key="none" → <payload>            (meta dropped)

Errors from the store (e.g. an include naming a relation the model does not
have) are never caught here; the caller maps them to a 5xx via emit_error.
"""

import json
import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Set, Tuple, Union

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from invoicer.config import settings
from invoicer.services.includes import scope, top_level
from invoicer.transformers.base import (
    CollectionResource,
    EntityTransformer,
    OutputMode,
    Resource,
)

logger = logging.getLogger(__name__)

NO_INDEX = "none"


@dataclass
class Envelope:
    """Serialized payload plus optional metadata (pagination)."""

    payload: Any
    meta: Optional[Dict[str, Any]] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "Envelope":
        """Splits a top-level `meta` key off a plain mapping."""
        data = dict(data)
        meta = data.pop("meta", None)
        return cls(payload=data, meta=meta)


class PrettyJSONResponse(JSONResponse):
    """JSON response rendered with 4-space indentation."""

    def render(self, content: Any) -> bytes:
        return json.dumps(
            jsonable_encoder(content),
            ensure_ascii=False,
            indent=4,
        ).encode("utf-8")


# ══════════════════════════════════════════════════════════════════════════
# Rendering
# ══════════════════════════════════════════════════════════════════════════

class _Renderer:
    """
    Renders entities and their include resources for one envelope.

    In TYPED mode every embedded entity is collected once into `included`
    and referenced from `relationships` by (type, id).
    """

    def __init__(self, mode: OutputMode):
        self.mode = mode
        self.included: List[Dict[str, Any]] = []
        self._included_keys: Set[Tuple[str, str]] = set()

    def relations(self, transformer: EntityTransformer, includes: Set[str]) -> List[str]:
        """Defaults always; available relations only when requested at this level."""
        requested = top_level(includes)
        return sorted(
            transformer.default_includes() | (transformer.available_includes() & requested)
        )

    def item(self, entity: Any, transformer: EntityTransformer, includes: Set[str]) -> Dict[str, Any]:
        if self.mode is OutputMode.TYPED:
            return self._typed(entity, transformer, includes)
        return self._flat(entity, transformer, includes)

    # ── Flat ──────────────────────────────────────────────────────────────

    def _flat(self, entity: Any, transformer: EntityTransformer, includes: Set[str]) -> Dict[str, Any]:
        fields = transformer.transform(entity)
        for relation in self.relations(transformer, includes):
            resource = transformer.include(entity, relation)
            fields[relation] = self._flat_resource(resource, scope(includes, relation))
        return fields

    def _flat_resource(self, resource: Resource, includes: Set[str]) -> Any:
        if isinstance(resource, CollectionResource):
            return [self._flat(e, resource.transformer, includes) for e in resource.entities]
        if resource.entity is None:
            return None
        return self._flat(resource.entity, resource.transformer, includes)

    # ── Typed (JSON:API) ──────────────────────────────────────────────────

    def _typed(self, entity: Any, transformer: EntityTransformer, includes: Set[str]) -> Dict[str, Any]:
        attributes = transformer.transform(entity)
        resource_object: Dict[str, Any] = {
            "type": transformer.entity_type.value,
            "id": str(attributes.pop("id")),
            "attributes": attributes,
        }
        relationships = {}
        for relation in self.relations(transformer, includes):
            resource = transformer.include(entity, relation)
            relationships[relation] = {
                "data": self._linkage(resource, scope(includes, relation)),
            }
        if relationships:
            resource_object["relationships"] = relationships
        return resource_object

    def _linkage(self, resource: Resource, includes: Set[str]) -> Any:
        if isinstance(resource, CollectionResource):
            return [self._include(e, resource.transformer, includes) for e in resource.entities]
        if resource.entity is None:
            return None
        return self._include(resource.entity, resource.transformer, includes)

    def _include(self, entity: Any, transformer: EntityTransformer, includes: Set[str]) -> Dict[str, str]:
        resource_object = self._typed(entity, transformer, includes)
        key = (resource_object["type"], resource_object["id"])
        if key not in self._included_keys:
            self._included_keys.add(key)
            self.included.append(resource_object)
        return {"type": key[0], "id": key[1]}

    def typed_document(self, data: Any) -> Dict[str, Any]:
        document: Dict[str, Any] = {"data": data}
        if self.included:
            document["included"] = self.included
        return document


# ══════════════════════════════════════════════════════════════════════════
# Pagination
# ══════════════════════════════════════════════════════════════════════════

def clamp_page_size(per_page: Optional[int]) -> int:
    """Requested page size bounded to [1, MAX_API_PAGE_SIZE]; default when unset."""
    if per_page is None:
        per_page = settings.default_api_page_size
    return max(1, min(settings.max_api_page_size, per_page))


async def paginate(
    session: AsyncSession,
    query: Select,
    per_page: Optional[int] = None,
    page: int = 1,
) -> Tuple[List[Any], Dict[str, Any]]:
    """
    Fetches one page of `query` and the pagination metadata for it.

    Two statements: COUNT(*) over the filtered query, then the page itself
    with LIMIT/OFFSET. Loader options on `query` apply to the page fetch.
    """
    limit = clamp_page_size(per_page)
    page = max(1, page)

    count_query = select(func.count()).select_from(query.order_by(None).subquery())
    total = (await session.execute(count_query)).scalar_one()

    result = await session.execute(query.limit(limit).offset((page - 1) * limit))
    entities = list(result.scalars().all())

    meta = {
        "total": total,
        "count": len(entities),
        "per_page": limit,
        "current_page": page,
        "last_page": max(1, math.ceil(total / limit)),
    }
    return entities, meta


# ══════════════════════════════════════════════════════════════════════════
# Public operations
# ══════════════════════════════════════════════════════════════════════════

def build_item(
    entity: Any,
    transformer: EntityTransformer,
    mode: OutputMode = OutputMode.FLAT,
    includes: Iterable[str] = (),
) -> Envelope:
    """
    Transforms a single entity.

    Args:
        entity:      ORM entity; never modified
        transformer: Transformer for the entity's type
        mode:        FLAT omits the type tag, TYPED renders a JSON:API document
        includes:    Resolved include paths (see services/includes.py)
    """
    renderer = _Renderer(mode)
    data = renderer.item(entity, transformer, set(includes))
    if mode is OutputMode.TYPED:
        return Envelope(payload=renderer.typed_document(data))
    return Envelope(payload=data)


async def build_collection(
    source: Union[Select, Sequence[Any]],
    transformer: EntityTransformer,
    mode: OutputMode = OutputMode.FLAT,
    includes: Iterable[str] = (),
    *,
    session: Optional[AsyncSession] = None,
    per_page: Optional[int] = None,
    page: int = 1,
) -> Envelope:
    """
    Transforms many entities.

    A `Select` is paginated (needs `session`) and yields pagination meta;
    an already materialized sequence is transformed as-is without meta.
    """
    meta = None
    if isinstance(source, Select):
        if session is None:
            raise ValueError("A database session is required to paginate a query")
        entities, meta = await paginate(session, source, per_page=per_page, page=page)
    else:
        entities = list(source)

    renderer = _Renderer(mode)
    include_set = set(includes)
    data = [renderer.item(entity, transformer, include_set) for entity in entities]

    logger.debug(
        "Built %s collection: %d records, mode=%s",
        transformer.entity_type.value,
        len(data),
        mode.value,
    )

    if mode is OutputMode.TYPED:
        return Envelope(payload=renderer.typed_document(data), meta=meta)
    return Envelope(payload=data, meta=meta)


def api_headers(count: int = 0) -> Dict[str, str]:
    """Fixed header set sent with every API response."""
    return {
        "Content-Type": "application/json",
        "Access-Control-Allow-Origin": "*",
        "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
        "Access-Control-Allow-Headers": (
            f"Origin, X-Requested-With, Content-Type, Accept, {settings.api_token_header}"
        ),
        "Access-Control-Allow-Credentials": "true",
        "X-Total-Count": str(count),
        "X-Api-Version": settings.api_version,
    }


def _record_count(envelope: Envelope) -> int:
    if envelope.meta and "total" in envelope.meta:
        return envelope.meta["total"]
    payload = envelope.payload
    if isinstance(payload, Mapping) and "data" in payload:
        payload = payload["data"]
    if isinstance(payload, list):
        return len(payload)
    return 1 if payload else 0


def emit(
    envelope: Union[Envelope, Mapping[str, Any]],
    index_key: str = "data",
    headers: Optional[Mapping[str, str]] = None,
) -> PrettyJSONResponse:
    """
    Writes an envelope as a 200 response.

    The payload is wrapped under `index_key` with meta as a sibling key;
    index_key "none" sends the bare payload and drops meta.
    """
    if not isinstance(envelope, Envelope):
        envelope = Envelope.from_mapping(envelope)

    if index_key == NO_INDEX:
        body = envelope.payload
    else:
        body = {index_key: envelope.payload}
        if envelope.meta:
            body["meta"] = envelope.meta

    response_headers = api_headers(_record_count(envelope))
    if headers:
        response_headers.update(headers)

    return PrettyJSONResponse(content=body, status_code=200, headers=response_headers)


def emit_error(message: str, status_code: int = 400) -> PrettyJSONResponse:
    """Writes `{"error": message}` with the given status and the API headers."""
    return PrettyJSONResponse(
        content={"error": message},
        status_code=status_code,
        headers=api_headers(),
    )
