"""vanta_policy: policy documents and their approval state."""

from vanta_tables.models import Policy
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
from vanta_tables.tables.transforms import from_field


def list_policies(d: QueryData) -> None:
    d.stream_items(d.client.list_policies(page_size=d.page_size))


def get_policy(d: QueryData) -> Policy | None:
    policy_id = d.equals_qual_string("id")
    if not policy_id:
        return None
    return d.client.get_policy(policy_id)


TABLE = Table(
    name="vanta_policy",
    description="Policy documents in the Vanta organization and their approval status.",
    list_config=ListConfig(hydrate=list_policies),
    get_config=GetConfig(hydrate=get_policy, key_columns=[KeyColumn("id", REQUIRED)]),
    columns=[
        Column("title", ColumnType.STRING, "The title of the policy.", from_field("name")),
        Column("id", ColumnType.STRING, "A unique identifier of the policy."),
        Column("description", ColumnType.STRING, "A human-readable description of the policy."),
        Column("status", ColumnType.STRING, "The current status of the policy."),
        Column(
            "approved_at",
            ColumnType.TIMESTAMP,
            "The time when the latest version of the policy was approved.",
            from_field("approved_at_date"),
        ),
        Column(
            "latest_version_status",
            ColumnType.STRING,
            "The status of the latest version of the policy.",
            from_field("latest_version.status"),
        ),
        deprecated_column("policy_type", ColumnType.STRING, "The type of the policy."),
        deprecated_column("created_at", ColumnType.TIMESTAMP, "The time when the policy was created."),
        deprecated_column("updated_at", ColumnType.TIMESTAMP, "The time when the policy was last modified."),
        deprecated_column(
            "employee_acceptance_test_id",
            ColumnType.STRING,
            "The test ID of the control that runs against employees policy acceptance.",
        ),
        deprecated_column("num_users", ColumnType.INT, "The number of users assigned with the policy."),
        deprecated_column("num_users_accepted", ColumnType.INT, "The number of users who accepted the policy."),
        deprecated_column("source", ColumnType.STRING, "The source of the policy."),
        deprecated_column("acceptance_controls", ColumnType.JSON, "Specifies the acceptance controls."),
        deprecated_column("approver", ColumnType.JSON, "The Vanta user who approved the policy."),
        deprecated_column("standards", ColumnType.JSON, "A list of policy standards."),
        deprecated_column("uploaded_doc", ColumnType.JSON, "Specifies the docs uploaded for the policy."),
        deprecated_column("uploader", ColumnType.JSON, "The Vanta user that uploaded the document to Vanta."),
        deprecated_column("organization_name", ColumnType.STRING, "The name of the organization."),
    ],
)
