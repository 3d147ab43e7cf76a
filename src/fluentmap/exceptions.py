"""Custom exceptions for the fluentmap mapping declarations."""

from typing import Any


class FluentMapError(Exception):
    """Base class for exceptions raised while declaring a mapping."""

    pass


class DuplicateMappingError(FluentMapError):
    """Raised when a property is mapped more than once for the same entity type."""

    def __init__(self, property_name: str, column_name: str) -> None:
        super().__init__(
            f"Duplicate mapping. Property '{property_name}' is already mapped to column '{column_name}'."
        )
        self.property_name = property_name
        self.column_name = column_name


class InvalidSelectorError(FluentMapError, TypeError):
    """Raised when a selector does not resolve to a single property of the entity type."""

    def __init__(
        self,
        message: str,
        entity_type: type | None = None,
        selector: Any = None,
        reason: str | None = None,
    ) -> None:
        super().__init__(message)
        self.entity_type = entity_type
        self.selector = selector
        self.reason = reason

    def __str__(self) -> str:
        base_str = super().__str__()
        details: list[str] = []
        if self.entity_type is not None:
            details.append(f"Entity: {self.entity_type.__name__}")
        if self.reason:
            details.append(f"Reason: {self.reason}")
        if not details:
            return base_str
        return f"{base_str} ({', '.join(details)})"


class InvalidColumnNameError(FluentMapError, ValueError):
    """Raised when a property is given a null or empty column name."""

    def __init__(self, property_name: str, column_name: Any) -> None:
        super().__init__(f"Invalid column name {column_name!r} for property '{property_name}'.")
        self.property_name = property_name
        self.column_name = column_name
