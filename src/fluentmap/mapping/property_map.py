"""Mapping configuration for a single entity property."""

from typing import Any, Self

from fluentmap.enums import Operation
from fluentmap.exceptions import InvalidColumnNameError
from fluentmap.reflection import PropertyInfo


class PropertyMap:
    """
    Column mapping for one property of an entity type.

    Instances are created by ``EntityMap.map`` and configured through chained
    calls::

        mapping.map(lambda p: p.id).set_column_name("person_id").set_key()

    The column name defaults to the property's own name.
    """

    def __init__(self, property_info: PropertyInfo, *, case_sensitive: bool = True) -> None:
        """Initialize the PropertyMap for the given property."""
        self._property_info = property_info
        self._column_name = property_info.name
        self._case_sensitive = case_sensitive
        self._is_key = False
        self._insert_ignored = False
        self._update_ignored = False
        self._select_ignored = False

    @property
    def property_info(self) -> PropertyInfo:
        """The property this mapping configures."""
        return self._property_info

    @property
    def property_name(self) -> str:
        return self._property_info.name

    @property
    def column_name(self) -> str:
        return self._column_name

    @property
    def case_sensitive(self) -> bool:
        return self._case_sensitive

    @property
    def is_key(self) -> bool:
        return self._is_key

    @property
    def insert_ignored(self) -> bool:
        return self._insert_ignored

    @property
    def update_ignored(self) -> bool:
        return self._update_ignored

    @property
    def select_ignored(self) -> bool:
        return self._select_ignored

    @property
    def is_ignored(self) -> bool:
        """Whether the property is excluded from every operation."""
        return self._insert_ignored and self._update_ignored and self._select_ignored

    def set_column_name(self, name: Any, case_sensitive: bool | None = None) -> Self:
        """
        Map the property to the given column.

        Args:
            name: The column name. Must be a non-empty string.
            case_sensitive: If given, whether column lookups for this property
                compare names case-sensitively.

        Raises:
            InvalidColumnNameError: If ``name`` is None, not a string or blank.

        """
        if not isinstance(name, str) or not name.strip():
            raise InvalidColumnNameError(self.property_name, name)
        self._column_name = name
        if case_sensitive is not None:
            self._case_sensitive = case_sensitive
        return self

    def set_key(self) -> Self:
        """Mark the property as part of the entity's key."""
        self._is_key = True
        return self

    def ignore_insert(self) -> Self:
        """Leave the property out of inserts."""
        self._insert_ignored = True
        return self

    def ignore_update(self) -> Self:
        """Leave the property out of updates."""
        self._update_ignored = True
        return self

    def ignore_select(self) -> Self:
        """Leave the property out of selects."""
        self._select_ignored = True
        return self

    def ignore(self) -> Self:
        """Leave the property out of every operation."""
        return self.ignore_insert().ignore_update().ignore_select()

    def participates_in(self, operation: Operation) -> bool:
        """Return whether the property takes part in the given operation."""
        ignored = {
            Operation.INSERT: self._insert_ignored,
            Operation.UPDATE: self._update_ignored,
            Operation.SELECT: self._select_ignored,
        }
        if operation not in ignored:
            raise ValueError(f"Unknown operation: {operation!r}")
        return not ignored[operation]

    def matches_column(self, column_name: str) -> bool:
        """Return whether ``column_name`` refers to this property's column. Non-strings never match."""
        if not isinstance(column_name, str):
            return False
        if self._case_sensitive:
            return column_name == self._column_name
        return column_name.casefold() == self._column_name.casefold()

    def __repr__(self) -> str:
        flags = [
            name
            for name, enabled in (
                ("key", self._is_key),
                ("ignore_insert", self._insert_ignored),
                ("ignore_update", self._update_ignored),
                ("ignore_select", self._select_ignored),
            )
            if enabled
        ]
        flag_str = f", flags={flags}" if flags else ""
        return f"PropertyMap(property={self._property_info}, column={self._column_name!r}{flag_str})"
