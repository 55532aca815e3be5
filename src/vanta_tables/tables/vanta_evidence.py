"""vanta_evidence: evidence attached to an audit."""

from vanta_tables.tables.base import (
    REQUIRED,
    Column,
    ColumnType,
    KeyColumn,
    ListConfig,
    QueryData,
    Table,
    deprecated_column,
)
from vanta_tables.tables.transforms import from_field, from_qual

# /v1/audits/{id}/evidence rejects page sizes above 50
MAX_PAGE_SIZE = 50


def list_evidence(d: QueryData) -> None:
    audit_id = d.equals_qual_string("audit_id")
    if not audit_id:
        return
    d.stream_items(d.client.list_evidence(audit_id, page_size=d.page_size))


TABLE = Table(
    name="vanta_evidence",
    description="Evidence attached to a Vanta audit. Requires an audit_id qual.",
    list_config=ListConfig(
        hydrate=list_evidence,
        key_columns=[KeyColumn("audit_id", REQUIRED)],
        max_page_size=MAX_PAGE_SIZE,
    ),
    columns=[
        Column("audit_id", ColumnType.STRING, "The audit the evidence belongs to.", from_qual("audit_id")),
        Column("id", ColumnType.STRING, "Vanta internal reference to evidence."),
        Column(
            "external_id",
            ColumnType.STRING,
            "A static UUID that maps audit firm controls to Vanta controls.",
        ),
        Column("status", ColumnType.STRING, "Vanta internal status of the audit evidence."),
        Column("name", ColumnType.STRING, "Mutable name for evidence. Not guaranteed to be unique."),
        Column("deletion_date", ColumnType.TIMESTAMP, "The date this audit evidence was deleted."),
        Column("creation_date", ColumnType.TIMESTAMP, "The date this audit evidence was created."),
        Column("status_updated_date", ColumnType.TIMESTAMP, "Point in time that status was last updated."),
        Column("test_status", ColumnType.STRING, "The outcome of the automated test run, for test evidence."),
        Column("evidence_type", ColumnType.STRING, "The type of audit evidence."),
        Column("evidence_id", ColumnType.STRING, "Unique identifier for evidence."),
        Column(
            "description",
            ColumnType.STRING,
            "The description of the evidence. Null if the evidence is deleted.",
        ),
        Column("related_controls", ColumnType.JSON, "The controls associated with this evidence."),
        Column(
            "related_control_names",
            ColumnType.JSON,
            "Names of controls associated with this evidence.",
            from_field("related_control_names"),
        ),
        deprecated_column("title", ColumnType.STRING, "The title of the document."),
        deprecated_column("evidence_request_id", ColumnType.STRING, "A unique identifier for this evidence request."),
        deprecated_column("category", ColumnType.STRING, "Specifies the category of the evidence request."),
        deprecated_column("uid", ColumnType.STRING, "An identifier that is unique across all of Vanta."),
        deprecated_column(
            "app_upload_enabled",
            ColumnType.BOOL,
            "If true, applications can upload documents on behalf of customers for this evidence request.",
        ),
        deprecated_column(
            "restricted",
            ColumnType.BOOL,
            "If true, access to the contents of the evidence documents is restricted.",
        ),
        deprecated_column("dismissed_status", ColumnType.JSON, "Information about the dismissed status of the evidence request."),
        deprecated_column("renewal_metadata", ColumnType.JSON, "Information on the renewal cadence of the evidence request."),
        deprecated_column("organization_name", ColumnType.STRING, "The name of the organization."),
    ],
)
