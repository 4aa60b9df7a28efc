"""
Invoicer Backend — List Query Filters
=======================================

What:  Builds the account-scoped SELECT a list endpoint hands to the
       serializer: eager loading for the requested includes, the
       `updated_at` and `client_id` filters, and per-user visibility.
Why:   Every list endpoint applies exactly the same policy, so it lives
       here once and the route handlers stay one-liners.
How:   Works on SQLAlchemy 2.0 `Select` objects and relationship metadata,
       so it is generic over every model that has the shared entity columns.

Filter policy (all conditions AND-ed):
    account:     account_id == current account
    updated_at:  row.updated_at >= ts  OR  any included relation path has a
                 row with updated_at >= ts (only paths in the include set)
    client_id:   related client's public_id == client_id
    visibility:  without `view_all`, users only see rows they own
                 (user_id == actor), and only themselves on the users endpoint

Relation paths that do not exist on a model raise sqlalchemy.exc.ArgumentError.
Nothing here catches it: the error reaches the global handler as a 500.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Iterable, List, Set, Type

from sqlalchemy import Select, desc, inspect, or_, select
from sqlalchemy.exc import ArgumentError
from sqlalchemy.orm import RelationshipProperty, selectinload
from sqlalchemy.sql.elements import ColumnElement

from invoicer.context import RequestContext
from invoicer.models.client import Client
from invoicer.models.entity import EntityType
from invoicer.transformers.registry import TRANSFORMERS

logger = logging.getLogger(__name__)


def relationship_for(model: Type[Any], name: str) -> RelationshipProperty:
    relationships = inspect(model).relationships
    if name not in relationships:
        raise ArgumentError(f"{model.__name__} has no relationship named '{name}'")
    return relationships[name]


def expand_nested_defaults(model: Type[Any], includes: Iterable[str]) -> Set[str]:
    """
    Adds the default includes of every related transformer along each path.

    Transformers always embed their defaults, so an included invoice needs
    its invoice_items loaded too; async sessions cannot fetch them lazily.
    """
    expanded: Set[str] = set()
    pending = list(includes)
    while pending:
        path = pending.pop()
        if path in expanded:
            continue
        expanded.add(path)

        current = model
        for name in path.split("."):
            current = relationship_for(current, name).mapper.class_

        entity_type = getattr(current, "entity_type", None)
        transformer_class = TRANSFORMERS.get(entity_type)
        if transformer_class is not None:
            pending.extend(f"{path}.{default}" for default in transformer_class.DEFAULT_INCLUDES)
    return expanded


def eager_load_options(model: Type[Any], includes: Iterable[str]) -> List[Any]:
    """One selectinload chain per include path."""
    options = []
    for path in sorted(expand_nested_defaults(model, includes)):
        loader = None
        current = model
        for name in path.split("."):
            relationship = relationship_for(current, name)
            attribute = getattr(current, name)
            loader = selectinload(attribute) if loader is None else loader.selectinload(attribute)
            current = relationship.mapper.class_
        options.append(loader)
    return options


def updated_since_criterion(model: Type[Any], path: str, threshold: datetime) -> ColumnElement:
    """
    EXISTS test for "some row along `path` was updated at or after threshold".

    "client.contacts" becomes client.has(contacts.any(updated_at >= threshold)).
    """
    names = path.split(".")

    def build(current: Type[Any], index: int) -> ColumnElement:
        relationship = relationship_for(current, names[index])
        attribute = getattr(current, names[index])
        target = relationship.mapper.class_
        if index == len(names) - 1:
            criterion = target.updated_at >= threshold
        else:
            criterion = build(target, index + 1)
        return attribute.any(criterion) if relationship.uselist else attribute.has(criterion)

    return build(model, 0)


def scoped_query(model: Type[Any], ctx: RequestContext) -> Select:
    """All rows of `model` on the current account, archived ones included."""
    return (
        select(model)
        .where(model.account_id == ctx.account.id)
        .order_by(desc(model.created_at), desc(model.id))
    )


def apply_visibility(query: Select, model: Type[Any], entity_type: EntityType, ctx: RequestContext) -> Select:
    if ctx.can_view_all:
        return query
    if entity_type is EntityType.USER:
        return query.where(model.id == ctx.user.id)
    return query.where(model.user_id == ctx.user.id)


def apply_list_filters(
    query: Select,
    model: Type[Any],
    entity_type: EntityType,
    ctx: RequestContext,
    includes: Iterable[str],
) -> Select:
    """
    Applies eager loading and every list filter the request asks for.

    Args:
        query:       Base query, normally from scoped_query()
        model:       ORM class the query selects
        entity_type: Entity type of `model` (decides the visibility column)
        ctx:         Current request context (actor and API parameters)
        includes:    Resolved include paths (see services/includes.py)
    """
    includes = sorted(set(includes))
    params = ctx.params

    query = query.options(*eager_load_options(model, includes))

    if params.updated_at is not None:
        threshold = datetime.fromtimestamp(params.updated_at, tz=timezone.utc)
        query = query.where(
            or_(
                model.updated_at >= threshold,
                *(updated_since_criterion(model, path, threshold) for path in includes),
            )
        )

    if params.client_id is not None:
        relationship_for(model, "client")
        query = query.where(model.client.has(Client.public_id == params.client_id))

    query = apply_visibility(query, model, entity_type, ctx)

    logger.debug(
        "List query for %s: includes=%s updated_at=%s client_id=%s",
        entity_type.value,
        includes,
        params.updated_at,
        params.client_id,
    )
    return query
