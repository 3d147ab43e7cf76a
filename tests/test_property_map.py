"""Tests for PropertyMap configuration."""

from dataclasses import dataclass

import pytest

from fluentmap import InvalidColumnNameError, Operation, PropertyInfo, PropertyMap


@dataclass
class Person:
    id: int
    full_name: str


@pytest.fixture
def full_name_map() -> PropertyMap:
    return PropertyMap(PropertyInfo(name="full_name", declaring_type=Person, property_type=str))


def test_defaults(full_name_map: PropertyMap):
    """A new mapping uses the property name as column and has no flags set."""
    assert full_name_map.property_name == "full_name"
    assert full_name_map.column_name == "full_name"
    assert full_name_map.case_sensitive is True
    assert not full_name_map.is_key
    assert not full_name_map.insert_ignored
    assert not full_name_map.update_ignored
    assert not full_name_map.select_ignored
    assert not full_name_map.is_ignored


def test_configuration_calls_chain(full_name_map: PropertyMap):
    """Every configuration call returns the same instance."""
    result = full_name_map.set_column_name("name").set_key().ignore_insert().ignore_update().ignore_select()
    assert result is full_name_map


def test_set_column_name_last_write_wins(full_name_map: PropertyMap):
    """Renaming twice keeps the last name and leaves the flags alone."""
    full_name_map.set_key().ignore_update()
    full_name_map.set_column_name("X")
    full_name_map.set_column_name("X")
    assert full_name_map.column_name == "X"

    full_name_map.set_column_name("person_name")
    assert full_name_map.column_name == "person_name"
    assert full_name_map.is_key
    assert full_name_map.update_ignored
    assert not full_name_map.insert_ignored
    assert not full_name_map.select_ignored


@pytest.mark.parametrize("bad_name", [None, "", "   ", 42])
def test_set_column_name_rejects_invalid_names(full_name_map: PropertyMap, bad_name):
    """Null, blank and non-string column names are rejected without changing the mapping."""
    with pytest.raises(InvalidColumnNameError, match="Invalid column name") as exc_info:
        full_name_map.set_column_name(bad_name)

    assert exc_info.value.property_name == "full_name"
    assert exc_info.value.column_name == bad_name
    assert isinstance(exc_info.value, ValueError)
    assert full_name_map.column_name == "full_name"


def test_ignore_sets_every_exclusion_flag(full_name_map: PropertyMap):
    """ignore() excludes the property from inserts, updates and selects."""
    full_name_map.ignore()
    assert full_name_map.is_ignored
    for operation in Operation:
        assert not full_name_map.participates_in(operation)


def test_participates_in_follows_individual_flags(full_name_map: PropertyMap):
    """Each exclusion flag only affects its own operation."""
    full_name_map.ignore_insert()
    assert not full_name_map.participates_in(Operation.INSERT)
    assert full_name_map.participates_in(Operation.UPDATE)
    assert full_name_map.participates_in(Operation.SELECT)
    assert not full_name_map.is_ignored


def test_participates_in_rejects_unknown_operation(full_name_map: PropertyMap):
    with pytest.raises(ValueError, match="Unknown operation"):
        full_name_map.participates_in("delete")  # type: ignore[arg-type]


def test_matches_column_is_case_sensitive_by_default(full_name_map: PropertyMap):
    """Column lookups compare exactly unless configured otherwise."""
    full_name_map.set_column_name("FullName")
    assert full_name_map.matches_column("FullName")
    assert not full_name_map.matches_column("fullname")


def test_matches_column_case_insensitive(full_name_map: PropertyMap):
    """Passing case_sensitive=False makes column lookups ignore case."""
    full_name_map.set_column_name("FullName", case_sensitive=False)
    assert not full_name_map.case_sensitive
    assert full_name_map.matches_column("FULLNAME")
    assert full_name_map.matches_column("fullname")
    assert not full_name_map.matches_column("full_name")


@pytest.mark.parametrize("case_sensitive", [True, False])
def test_matches_column_is_false_for_non_strings(full_name_map: PropertyMap, case_sensitive: bool):
    full_name_map.set_column_name("FullName", case_sensitive=case_sensitive)
    assert not full_name_map.matches_column(None)  # type: ignore[arg-type]
    assert not full_name_map.matches_column(42)  # type: ignore[arg-type]


def test_property_info_is_read_only(full_name_map: PropertyMap):
    """The configured property cannot be replaced after construction."""
    with pytest.raises(AttributeError):
        full_name_map.property_info = PropertyInfo(name="id", declaring_type=Person)  # type: ignore[misc]
    assert full_name_map.property_info.name == "full_name"


def test_repr_lists_flags(full_name_map: PropertyMap):
    full_name_map.set_key().ignore_select()
    text = repr(full_name_map)
    assert "Person.full_name" in text
    assert "'key'" in text
    assert "'ignore_select'" in text
