import pytest

from igcrest.core.types import (
    container_type_for,
    data_container_child_types,
    is_data_container,
    is_file_related,
    query_property_name,
)


@pytest.mark.parametrize(
    "asset_type, ancestor_type, expected",
    [
        ("term", "category", "parent_category"),
        ("data_class", "data_class", "parent_data_class"),
        ("data_file_record", "host_(engine)", "host"),
        ("data_file_field", "host_(engine)", "host"),
        ("database_column", "host_(engine)", "host_(engine)"),
        ("bi_report", "bi_root_folder", ""),
        ("bi_report", "bi_server", ""),
        ("$MyBundle-Attr", "$MyBundle-Parent", "$Parent"),
        ("database_column", "database_schema", "database_schema"),
    ],
)
def test_query_property_name(asset_type, ancestor_type, expected):
    assert query_property_name(asset_type, ancestor_type) == expected


def test_bundle_type_without_separator_is_kept():
    assert query_property_name("term", "$Orphan") == "$Orphan"


def test_is_file_related():
    assert is_file_related("data_file")
    assert is_file_related("data_file_record")
    assert not is_file_related("database_table")


def test_container_maps():
    assert is_data_container("database_table")
    assert not is_data_container("database_column")
    assert data_container_child_types("data_file_record") == "data_file_fields"
    assert container_type_for("database_column") == "database_table"
    assert container_type_for("term") is None
