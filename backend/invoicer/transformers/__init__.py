# Transformers package init
"""
Invoicer Backend — Transformers
=================================

One transformer per entity type, resolved through the static registry.
The serializer (services/serializer.py) walks the resources their include
methods return and renders them in the requested output mode.
"""

from invoicer.transformers.base import (
    CollectionResource,
    EntityTransformer,
    ItemResource,
    OutputMode,
)
from invoicer.transformers.registry import TRANSFORMERS, get_transformer

__all__ = [
    "CollectionResource",
    "EntityTransformer",
    "ItemResource",
    "OutputMode",
    "TRANSFORMERS",
    "get_transformer",
]
