"""Mapping declarations: property mappings and the entity mappings that own them."""

from fluentmap.mapping.entity_map import EntityMap, PropertyMapSource, entity_map
from fluentmap.mapping.property_map import PropertyMap

__all__ = ["EntityMap", "PropertyMap", "PropertyMapSource", "entity_map"]
