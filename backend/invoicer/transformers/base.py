"""
Invoicer Backend — Entity Transformer Base
============================================

What:  The transformer capability every entity type implements: a mapping
       from one ORM entity to the flat field set the API exposes, plus the
       relation names that are always embedded (default includes) and the
       ones a caller may ask for (available includes).
Why:   Keeps "which columns does the API expose, and how are they formatted"
       in one class per entity type, separate from envelope/pagination
       concerns handled by services/serializer.py.
How:   Subclasses implement transform() and one include_<relation>() method
       per relation they can embed. Include methods return resources
       (ItemResource / CollectionResource) that the serializer renders with
       the related entity type's own transformer.

Output mode:
    FLAT  ("array", default):  plain nested mappings, no type tag
    TYPED ("jsonapi"):         JSON:API resource objects with type/id/attributes
"""

import enum
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, ClassVar, Dict, FrozenSet, NamedTuple, Optional, Sequence, Set, Union

from invoicer.models.account import Account, User
from invoicer.models.entity import EntityType


class OutputMode(str, enum.Enum):
    FLAT = "array"
    TYPED = "jsonapi"

    @classmethod
    def from_param(cls, value: Optional[str]) -> "OutputMode":
        """Maps the `serializer` request parameter; anything but "jsonapi" is flat."""
        return cls.TYPED if value == cls.TYPED.value else cls.FLAT


class ItemResource(NamedTuple):
    entity: Optional[Any]
    transformer: "EntityTransformer"


class CollectionResource(NamedTuple):
    entities: Sequence[Any]
    transformer: "EntityTransformer"


Resource = Union[ItemResource, CollectionResource]


def to_timestamp(value: Optional[datetime]) -> Optional[int]:
    """UNIX timestamp for a stored datetime; naive values are taken as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return int(value.timestamp())


def to_date_string(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value else None


def to_float(value: Optional[Decimal]) -> float:
    return float(value) if value is not None else 0.0


class EntityTransformer:
    """
    Base class for all entity transformers.

    Subclasses set ENTITY_TYPE, DEFAULT_INCLUDES and AVAILABLE_INCLUDES and
    implement transform(). A transformer must be total over every entity of
    its type: transform() never raises for a well-formed row.

    Args:
        account: Account the request is made on (its key is echoed in output)
        user:    Current user, used for the `is_owner` flag
    """

    ENTITY_TYPE: ClassVar[EntityType]
    DEFAULT_INCLUDES: ClassVar[FrozenSet[str]] = frozenset()
    AVAILABLE_INCLUDES: ClassVar[FrozenSet[str]] = frozenset()

    def __init__(self, account: Account, user: Optional[User] = None):
        self.account = account
        self.user = user

    @property
    def entity_type(self) -> EntityType:
        return self.ENTITY_TYPE

    def default_includes(self) -> Set[str]:
        return set(self.DEFAULT_INCLUDES)

    def available_includes(self) -> Set[str]:
        return set(self.AVAILABLE_INCLUDES)

    def transform(self, entity: Any) -> Dict[str, Any]:
        raise NotImplementedError

    def include(self, entity: Any, relation: str) -> Resource:
        """Resolves `relation` through the matching include_<relation> method."""
        method = getattr(self, f"include_{relation}", None)
        if method is None:
            raise AttributeError(
                f"{type(self).__name__} does not define include_{relation}()"
            )
        return method(entity)

    # ── Helpers for subclasses ────────────────────────────────────────────

    def include_item(self, entity: Optional[Any], entity_type: EntityType) -> ItemResource:
        return ItemResource(entity, self._related_transformer(entity_type))

    def include_collection(
        self, entities: Sequence[Any], entity_type: EntityType
    ) -> CollectionResource:
        return CollectionResource(list(entities), self._related_transformer(entity_type))

    def _related_transformer(self, entity_type: EntityType) -> "EntityTransformer":
        # Local import: the registry imports every transformer module
        from invoicer.transformers.registry import get_transformer

        return get_transformer(entity_type, self.account, self.user)

    def get_defaults(self, entity: Any) -> Dict[str, Any]:
        """Fields every transformed record carries."""
        owner_id = getattr(entity, "user_id", None)
        return {
            "account_key": self.account.account_key,
            "is_owner": bool(self.user is not None and owner_id == self.user.id),
            "updated_at": to_timestamp(entity.updated_at),
            "archived_at": to_timestamp(entity.deleted_at),
            "is_deleted": bool(entity.is_deleted),
        }
