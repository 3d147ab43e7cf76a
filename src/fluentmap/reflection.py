"""
Property discovery and selector resolution for entity types.

An entity type can be a SQLAlchemy declarative class, a dataclass, a pydantic
model or a plain class that declares its attributes through annotations or
``property`` objects. ``get_properties`` collects those attributes into
``PropertyInfo`` descriptors, and ``resolve_selector`` turns a selector such as
``lambda p: p.id`` or ``Person.id`` into the descriptor it refers to.
"""

import dataclasses
import inspect
import logging
import typing
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Any, ClassVar, get_args, get_origin

from pydantic import BaseModel
from sqlalchemy import inspect as sa_inspect
from sqlalchemy.orm import Mapped, Mapper, QueryableAttribute

from fluentmap.exceptions import InvalidSelectorError

logger = logging.getLogger(__name__)

# Base classes from these packages contribute no entity properties.
_LIBRARY_MODULES = frozenset({"builtins", "pydantic", "sqlalchemy"})


@dataclass(frozen=True)
class PropertyInfo:
    """A named, typed property of an entity type."""

    name: str
    declaring_type: type
    property_type: Any = Any

    def __str__(self) -> str:
        """Return the qualified property name."""
        return f"{self.declaring_type.__name__}.{self.name}"


def _type_hints(entity_type: type) -> dict[str, Any]:
    try:
        return typing.get_type_hints(entity_type)
    except (NameError, TypeError, AttributeError) as e:
        # Forward references that only exist under TYPE_CHECKING end up here.
        logger.debug("Falling back to raw annotations for %s: %s", entity_type.__name__, e)

    hints: dict[str, Any] = {}
    for klass in reversed(entity_type.__mro__):
        hints.update(_own_annotations(klass))
    return hints


def _own_annotations(klass: type) -> dict[str, Any]:
    try:
        return dict(inspect.get_annotations(klass))
    except NameError:
        return dict(vars(klass).get("__annotations__", {}))


def _is_instance_less(hint: Any) -> bool:
    # ClassVar and InitVar annotations never become instance attributes.
    if hint is ClassVar or get_origin(hint) is ClassVar:
        return True
    if hint is dataclasses.InitVar or isinstance(hint, dataclasses.InitVar):
        return True
    if isinstance(hint, str):
        return hint.startswith(("ClassVar", "typing.ClassVar", "InitVar", "dataclasses.InitVar"))
    return False


def _unwrap_mapped(hint: Any) -> Any:
    if get_origin(hint) is Mapped:
        (inner,) = get_args(hint)
        return inner
    return hint


def _is_dunder(name: str) -> bool:
    return name.startswith("__") and name.endswith("__")


def _declaring_type(entity_type: type, name: str) -> type:
    for klass in entity_type.__mro__:
        if name in vars(klass) or name in _own_annotations(klass):
            return klass
    return entity_type


def _is_library_class(klass: type) -> bool:
    return klass is object or klass.__module__.split(".")[0] in _LIBRARY_MODULES


def _iter_class_properties(entity_type: type) -> Iterator[tuple[str, property]]:
    seen: set[str] = set()
    for klass in entity_type.__mro__:
        if _is_library_class(klass):
            continue
        for name in vars(klass):
            if name in seen or name.startswith("_"):
                continue
            seen.add(name)
            # Static lookup so a subclass attribute shadowing a base property wins.
            value = inspect.getattr_static(entity_type, name)
            if isinstance(value, property):
                yield name, value


def _property_return_type(prop: property) -> Any:
    if prop.fget is None:
        return Any
    try:
        return typing.get_type_hints(prop.fget).get("return", Any)
    except (NameError, TypeError):
        return Any


def get_properties(entity_type: type) -> dict[str, PropertyInfo]:
    """
    Collect the mappable properties of an entity type, in declaration order.

    SQLAlchemy mapped classes contribute their column attributes; relationships
    are left out. Other classes contribute dataclass fields, pydantic model
    fields and public, non-``ClassVar`` annotations. ``property`` objects are
    added last in every case. The first occurrence of a name wins.

    Args:
        entity_type: The class to inspect.

    Returns:
        A dictionary from property name to its descriptor.

    Raises:
        TypeError: If ``entity_type`` is not a class.

    """
    if not isinstance(entity_type, type):
        raise TypeError(f"Expected an entity class, got {entity_type!r}.")

    hints = _type_hints(entity_type)
    properties: dict[str, PropertyInfo] = {}

    def add(name: str, property_type: Any = None) -> None:
        if name in properties or _is_dunder(name):
            return
        if property_type is None:
            property_type = hints.get(name, Any)
        properties[name] = PropertyInfo(
            name=name,
            declaring_type=_declaring_type(entity_type, name),
            property_type=_unwrap_mapped(property_type),
        )

    mapper = sa_inspect(entity_type, raiseerr=False)
    if isinstance(mapper, Mapper):
        for column_attr in mapper.column_attrs:
            add(column_attr.key)
    else:
        if dataclasses.is_dataclass(entity_type):
            for field in dataclasses.fields(entity_type):
                if not field.name.startswith("_"):
                    add(field.name)
        if issubclass(entity_type, BaseModel):
            for name, field_info in entity_type.model_fields.items():
                add(name, field_info.annotation)
        for name, hint in hints.items():
            if not name.startswith("_") and not _is_instance_less(hint):
                add(name)

    for name, prop in _iter_class_properties(entity_type):
        add(name, _property_return_type(prop))

    return properties


class _AttributeProbe:
    """Stand-in entity passed to selector callables to record what they access."""

    __slots__ = ("_probe_called", "_probe_path")

    def __init__(self, path: tuple[str, ...] = (), called: bool = False) -> None:
        self._probe_path = path
        self._probe_called = called

    def __getattr__(self, name: str) -> "_AttributeProbe":
        if _is_dunder(name):
            raise AttributeError(name)
        return _AttributeProbe((*self._probe_path, name), self._probe_called)

    def __call__(self, *args: Any, **kwargs: Any) -> "_AttributeProbe":
        return _AttributeProbe(self._probe_path, called=True)


def _is_method(entity_type: type, name: str) -> bool:
    attr = inspect.getattr_static(entity_type, name, None)
    return isinstance(attr, (staticmethod, classmethod)) or callable(attr)


def _is_method_reference(entity_type: type, selector: Callable[..., Any]) -> bool:
    selector_name = getattr(selector, "__name__", None)
    if not selector_name:
        return False
    attr = inspect.getattr_static(entity_type, selector_name, None)
    # Class access unwraps staticmethods and binds classmethods.
    function = getattr(selector, "__func__", selector)
    if attr is selector or attr is function:
        return True
    return isinstance(attr, (staticmethod, classmethod)) and attr.__func__ is function


def _resolve_callable(entity_type: type, selector: Callable[[Any], Any]) -> str:
    if _is_method_reference(entity_type, selector):
        selector_name = selector.__name__
        raise InvalidSelectorError(
            "Selector must access a property, not reference a method.",
            entity_type,
            selector,
            reason=f"'{selector_name}' is a method",
        )

    try:
        result = selector(_AttributeProbe())
    except Exception as e:
        raise InvalidSelectorError(
            "Selector could not be evaluated as a property access.",
            entity_type,
            selector,
            reason=f"{type(e).__name__}: {e}",
        ) from e

    if not isinstance(result, _AttributeProbe):
        reason = "selector computes a value instead of returning a property"
    elif result._probe_called:
        reason = "selector calls a method"
    elif not result._probe_path:
        reason = "selector returns the entity itself"
    elif len(result._probe_path) > 1:
        reason = f"nested access '{'.'.join(result._probe_path)}'"
    else:
        return result._probe_path[0]

    raise InvalidSelectorError("Selector must be a direct property access.", entity_type, selector, reason=reason)


def _resolve_instrumented_attribute(entity_type: type, selector: QueryableAttribute[Any]) -> str:
    owner = selector.class_
    if not (isinstance(owner, type) and issubclass(entity_type, owner)):
        owner_name = getattr(owner, "__name__", repr(owner))
        raise InvalidSelectorError(
            "Selector belongs to a different entity type.",
            entity_type,
            selector,
            reason=f"attribute '{selector.key}' is declared on {owner_name}",
        )
    return selector.key


def _resolve_property_object(entity_type: type, selector: property) -> str:
    for klass in entity_type.__mro__:
        for name, value in vars(klass).items():
            if value is selector:
                return name
    raise InvalidSelectorError(
        "Selector property is not defined on the entity type.",
        entity_type,
        selector,
        reason="property object not found in the class hierarchy",
    )


def resolve_selector(entity_type: type, selector: Any) -> PropertyInfo:
    """
    Resolve a selector to the property of ``entity_type`` it refers to.

    Accepted selectors are a one-argument callable doing a single attribute
    access (``lambda p: p.id``), a SQLAlchemy instrumented attribute
    (``Person.id``) and a ``property`` object declared on the entity type.

    Raises:
        InvalidSelectorError: If the selector is anything other than a direct
            access to a property of ``entity_type``.

    """
    if isinstance(selector, QueryableAttribute):
        name = _resolve_instrumented_attribute(entity_type, selector)
    elif isinstance(selector, property):
        name = _resolve_property_object(entity_type, selector)
    elif callable(selector) and not isinstance(selector, type):
        name = _resolve_callable(entity_type, selector)
    else:
        raise InvalidSelectorError(
            "Selector must reference a property, not name it.",
            entity_type,
            selector,
            reason=f"unsupported selector of type {type(selector).__name__}",
        )

    properties = get_properties(entity_type)
    if name in properties:
        return properties[name]

    reason = f"'{name}' is a method" if _is_method(entity_type, name) else f"'{name}' is not a property"
    raise InvalidSelectorError(
        f"Selector does not resolve to a property of {entity_type.__name__}.",
        entity_type,
        selector,
        reason=reason,
    )
