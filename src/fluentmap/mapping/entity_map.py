"""Per-entity-type collections of property mappings and the factory that builds them."""

import logging
from collections.abc import Callable, Iterator, Sequence
from typing import Any, Generic, Protocol, TypeVar, overload, runtime_checkable

from fluentmap.config import FluentMapSettings, get_settings
from fluentmap.enums import Operation
from fluentmap.exceptions import DuplicateMappingError
from fluentmap.mapping.property_map import PropertyMap
from fluentmap.reflection import resolve_selector

logger = logging.getLogger(__name__)

TEntity = TypeVar("TEntity")

# Held only by `entity_map`; `EntityMap.__init__` rejects any other caller.
_CONSTRUCTION_KEY = object()


@runtime_checkable
class PropertyMapSource(Protocol):
    """The read-only view of a finished mapping that registries and query layers consume."""

    @property
    def entity_type(self) -> type:
        """The entity type the mappings belong to."""
        ...

    @property
    def property_maps(self) -> Sequence[PropertyMap]:
        """The property mappings, in the order they were declared."""
        ...


class EntityMap(Generic[TEntity]):
    """
    The property mappings declared for one entity type.

    Each property can be mapped once. Mappings keep the order of their first
    ``map`` call. Instances are built by :func:`entity_map`.
    """

    def __init__(
        self,
        entity_type: type[TEntity],
        *,
        case_sensitive: bool = True,
        _key: object = None,
    ) -> None:
        """Initialize an empty EntityMap. Use `entity_map` instead of calling this directly."""
        if _key is not _CONSTRUCTION_KEY:
            raise TypeError("EntityMap instances are created with fluentmap.entity_map().")
        self._entity_type = entity_type
        self._case_sensitive = case_sensitive
        self._property_maps: list[PropertyMap] = []

    @property
    def entity_type(self) -> type[TEntity]:
        return self._entity_type

    @property
    def property_maps(self) -> tuple[PropertyMap, ...]:
        return tuple(self._property_maps)

    @property
    def key_maps(self) -> tuple[PropertyMap, ...]:
        """The mappings of the properties flagged as keys."""
        return tuple(m for m in self._property_maps if m.is_key)

    def map(self, selector: Callable[[TEntity], Any] | Any) -> PropertyMap:
        """
        Start the mapping of a property of the entity type.

        Args:
            selector: The property to map, given by reference: a one-argument
                callable such as ``lambda p: p.id``, a SQLAlchemy instrumented
                attribute such as ``Person.id``, or a ``property`` object.

        Returns:
            The new PropertyMap, for further chained configuration.

        Raises:
            InvalidSelectorError: If the selector is not a direct property access.
            DuplicateMappingError: If a property with the same name is already mapped.

        """
        property_info = resolve_selector(self._entity_type, selector)

        existing = self.get(property_info.name)
        if existing is not None:
            raise DuplicateMappingError(existing.property_name, existing.column_name)

        property_map = PropertyMap(property_info, case_sensitive=self._case_sensitive)
        self._property_maps.append(property_map)
        logger.debug("Mapped property %s", property_info)
        return property_map

    def get(self, property_name: str) -> PropertyMap | None:
        """Return the mapping of the named property, if it was mapped."""
        for property_map in self._property_maps:
            if property_map.property_name == property_name:
                return property_map
        return None

    def find_by_column(self, column_name: str) -> PropertyMap | None:
        """Return the first mapping whose column matches ``column_name``."""
        for property_map in self._property_maps:
            if property_map.matches_column(column_name):
                return property_map
        return None

    def participating(self, operation: Operation) -> tuple[PropertyMap, ...]:
        """Return the mappings that take part in ``operation``, in declaration order."""
        return tuple(m for m in self._property_maps if m.participates_in(operation))

    def __iter__(self) -> Iterator[PropertyMap]:
        return iter(self.property_maps)

    def __len__(self) -> int:
        return len(self._property_maps)

    def __contains__(self, property_name: object) -> bool:
        return any(m.property_name == property_name for m in self._property_maps)

    def __repr__(self) -> str:
        columns = ", ".join(f"{m.property_name}->{m.column_name}" for m in self._property_maps)
        return f"EntityMap({self._entity_type.__name__}: {columns})"


Configurator = Callable[[EntityMap[TEntity]], Any]


@overload
def entity_map(
    entity_type: type[TEntity],
    *,
    settings: FluentMapSettings | None = None,
) -> Callable[[Configurator[TEntity]], EntityMap[TEntity]]: ...


@overload
def entity_map(
    entity_type: type[TEntity],
    configure: Configurator[TEntity],
    /,
    *more: Configurator[TEntity],
    settings: FluentMapSettings | None = None,
) -> EntityMap[TEntity]: ...


def entity_map(
    entity_type: type[TEntity],
    *configure: Configurator[TEntity],
    settings: FluentMapSettings | None = None,
) -> EntityMap[TEntity] | Callable[[Configurator[TEntity]], EntityMap[TEntity]]:
    """
    Declare the mapping of an entity type.

    Each ``configure`` callable receives the new EntityMap and maps properties
    on it; they run in order, so shared declarations can be composed::

        def map_audit_columns(m: EntityMap[Person]) -> None:
            m.map(lambda p: p.created_at).ignore_update()

        person_map = entity_map(Person, map_audit_columns, lambda m: m.map(lambda p: p.id).set_key())

    Called with no configurators it returns a decorator, binding the decorated
    name to the finished mapping::

        @entity_map(Person)
        def person_map(m: EntityMap[Person]) -> None:
            m.map(lambda p: p.full_name).set_column_name("full_name")

    Any error raised by a configurator propagates and no mapping is returned.

    Raises:
        TypeError: If ``entity_type`` is not a class.

    """
    if not isinstance(entity_type, type):
        raise TypeError(f"Expected an entity class, got {entity_type!r}.")

    if not configure:

        def decorator(func: Configurator[TEntity]) -> EntityMap[TEntity]:
            return entity_map(entity_type, func, settings=settings)

        return decorator

    if settings is None:
        settings = get_settings()
    mapping = EntityMap(entity_type, case_sensitive=settings.case_sensitive_columns, _key=_CONSTRUCTION_KEY)
    for configure_step in configure:
        configure_step(mapping)

    logger.debug("Built entity mapping for %s with %d properties", entity_type.__name__, len(mapping))
    return mapping
