"""vanta_integration: integrations connected to the Vanta organization."""

from vanta_tables.models import Integration
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
from vanta_tables.tables.transforms import from_field, from_value

# /v1/integrations rejects page sizes above 50
MAX_PAGE_SIZE = 50


def list_integrations(d: QueryData) -> None:
    d.stream_items(d.client.list_integrations(page_size=d.page_size))


def get_integration(d: QueryData) -> Integration | None:
    integration_id = d.equals_qual_string("id")
    if not integration_id:
        return None
    return d.client.get_integration(integration_id)


def has_disabled_connection(integration: Integration) -> bool:
    return any(connection.is_disabled for connection in integration.connections)


TABLE = Table(
    name="vanta_integration",
    description="Integrations connected to the Vanta organization.",
    list_config=ListConfig(hydrate=list_integrations, max_page_size=MAX_PAGE_SIZE),
    get_config=GetConfig(hydrate=get_integration, key_columns=[KeyColumn("id", REQUIRED)]),
    columns=[
        Column("display_name", ColumnType.STRING, "The display name of the integration."),
        Column("id", ColumnType.STRING, "A unique identifier of the integration.", from_field("integration_id")),
        Column(
            "scopable_resource",
            ColumnType.JSON,
            "A list of scopable resources (resource kinds).",
            from_field("resource_kinds"),
        ),
        Column("connections", ColumnType.JSON, "A list of connections for this integration."),
        Column(
            "has_disabled_connection",
            ColumnType.BOOL,
            "If true, at least one connection of the integration is disabled.",
            from_value().transform(has_disabled_connection),
        ),
        deprecated_column("description", ColumnType.STRING, "A human-readable description of the integration."),
        deprecated_column("application_url", ColumnType.STRING, "The URL of the application."),
        deprecated_column("installation_url", ColumnType.STRING, "The installation URL of the integration."),
        deprecated_column("logo_slug_id", ColumnType.STRING, "The slug of the logo used for the integration."),
        deprecated_column("credentials", ColumnType.JSON, "The credential metadata of the integration."),
        deprecated_column("integration_categories", ColumnType.JSON, "A list of integration categories."),
        deprecated_column("service_categories", ColumnType.JSON, "A list of service categories."),
        deprecated_column("tests", ColumnType.JSON, "A list of tests defined for monitoring the integrations."),
        deprecated_column("organization_name", ColumnType.STRING, "The name of the organization."),
    ],
)
