"""Declare how entity properties map to the columns of a tabular data source."""

from fluentmap.enums import Operation
from fluentmap.exceptions import (
    DuplicateMappingError,
    FluentMapError,
    InvalidColumnNameError,
    InvalidSelectorError,
)
from fluentmap.mapping import EntityMap, PropertyMap, PropertyMapSource, entity_map
from fluentmap.reflection import PropertyInfo

__all__ = [
    "DuplicateMappingError",
    "EntityMap",
    "FluentMapError",
    "InvalidColumnNameError",
    "InvalidSelectorError",
    "Operation",
    "PropertyInfo",
    "PropertyMap",
    "PropertyMapSource",
    "entity_map",
]
