"""
Invoicer Backend — Entity Service
===================================

What:  The list/show workflow shared by every entity endpoint.
Why:   Routes stay thin: they name an entity type and hand over the request
       context; this service picks the transformer, resolves includes,
       builds the filtered query and emits the envelope.
How:   Composes the transformer registry, include resolution, list query
       filters and the response serializer.

Workflow (list):
    ┌───────────────┐   ┌──────────────────┐   ┌──────────────────┐   ┌────────┐
    │ transformer + │──▶│ scoped query +   │──▶│ build_collection │──▶│  emit  │
    │ includes      │   │ list filters     │   │ (paginated)      │   │        │
    └───────────────┘   └──────────────────┘   └──────────────────┘   └────────┘

Stateless singleton: every call receives its session and
context, no per-instance state.
"""

import logging
from typing import Any, Iterable, Optional

from fastapi import Response
from sqlalchemy import Select
from sqlalchemy.ext.asyncio import AsyncSession

from invoicer.context import RequestContext
from invoicer.exceptions import NotFoundError
from invoicer.models import MODELS, EntityType
from invoicer.services.includes import resolve_includes
from invoicer.services.query_filters import (
    apply_list_filters,
    apply_visibility,
    eager_load_options,
    scoped_query,
)
from invoicer.services.serializer import build_collection, build_item, emit
from invoicer.transformers.base import EntityTransformer
from invoicer.transformers.registry import get_transformer

logger = logging.getLogger(__name__)


class EntityService:
    """
    Read operations for API entities.

    Responsibilities:
        - list_response(): filtered, paginated collection of one entity type
        - item_response(): one already-loaded entity
        - show_response(): lookup by public id, then item_response()
        - get_entity():    account-scoped lookup by public id
    """

    def transformer_for(self, entity_type: EntityType, ctx: RequestContext) -> EntityTransformer:
        return get_transformer(entity_type, ctx.account, ctx.user)

    def includes_for(self, transformer: EntityTransformer, ctx: RequestContext) -> set:
        return resolve_includes(ctx.params.include, transformer.default_includes())

    async def list_response(
        self,
        db: AsyncSession,
        ctx: RequestContext,
        entity_type: EntityType,
        query: Optional[Select] = None,
    ) -> Response:
        """
        Lists entities of `entity_type` visible to the current user.

        Args:
            db:          Async database session
            ctx:         Request context (user, account, API parameters)
            entity_type: Which entity to list
            query:       Base query; defaults to every row on the account
        """
        model = MODELS[entity_type]
        transformer = self.transformer_for(entity_type, ctx)
        includes = self.includes_for(transformer, ctx)

        if query is None:
            query = scoped_query(model, ctx)
        query = apply_list_filters(query, model, entity_type, ctx, includes)

        envelope = await build_collection(
            query,
            transformer,
            ctx.output_mode,
            includes,
            session=db,
            per_page=ctx.params.per_page,
            page=ctx.params.page,
        )
        return emit(envelope, ctx.params.index)

    def item_response(self, ctx: RequestContext, entity_type: EntityType, entity: Any) -> Response:
        transformer = self.transformer_for(entity_type, ctx)
        includes = self.includes_for(transformer, ctx)
        envelope = build_item(entity, transformer, ctx.output_mode, includes)
        return emit(envelope, ctx.params.index)

    async def get_entity(
        self,
        db: AsyncSession,
        ctx: RequestContext,
        entity_type: EntityType,
        public_id: int,
        includes: Iterable[str] = (),
    ) -> Any:
        """
        Loads one entity by public id with the given includes eager-loaded.

        Raises:
            NotFoundError: No such entity on the account, or not visible
                           to the current user (→ 404)
        """
        model = MODELS[entity_type]
        query = (
            scoped_query(model, ctx)
            .where(model.public_id == public_id)
            .options(*eager_load_options(model, includes))
        )
        query = apply_visibility(query, model, entity_type, ctx)

        result = await db.execute(query)
        entity = result.scalar_one_or_none()
        if entity is None:
            raise NotFoundError(resource=entity_type.value, resource_id=public_id)
        return entity

    async def show_response(
        self,
        db: AsyncSession,
        ctx: RequestContext,
        entity_type: EntityType,
        public_id: int,
    ) -> Response:
        transformer = self.transformer_for(entity_type, ctx)
        includes = self.includes_for(transformer, ctx)
        entity = await self.get_entity(db, ctx, entity_type, public_id, includes)
        logger.debug("Showing %s %s", entity_type.value, public_id)
        return self.item_response(ctx, entity_type, entity)


# ── Singleton Instance ────────────────────────────────────────────────────
entity_service = EntityService()
