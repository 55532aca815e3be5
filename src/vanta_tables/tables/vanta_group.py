"""vanta_group: groups of people in the Vanta organization."""

from vanta_tables.models import Group
from vanta_tables.tables.base import (
    REQUIRED,
    Column,
    ColumnType,
    GetConfig,
    KeyColumn,
    ListConfig,
    QueryData,
    Table,
    deprecated_column,
)


def list_groups(d: QueryData) -> None:
    d.stream_items(d.client.list_groups(page_size=d.page_size))


def get_group(d: QueryData) -> Group | None:
    group_id = d.equals_qual_string("id")
    if not group_id:
        return None
    return d.client.get_group(group_id)


TABLE = Table(
    name="vanta_group",
    description="Groups of people in the Vanta organization.",
    list_config=ListConfig(hydrate=list_groups),
    get_config=GetConfig(hydrate=get_group, key_columns=[KeyColumn("id", REQUIRED)]),
    columns=[
        Column("name", ColumnType.STRING, "The name of the group."),
        Column("id", ColumnType.STRING, "A unique identifier of the group."),
        Column("creation_date", ColumnType.TIMESTAMP, "The creation date of the group."),
        deprecated_column("checklist", ColumnType.JSON, "Describes the security requirements for the group."),
        deprecated_column("embedded_idp_group", ColumnType.JSON, "A list of embedded IDP group."),
        deprecated_column("organization_name", ColumnType.STRING, "The name of the organization."),
    ],
)
