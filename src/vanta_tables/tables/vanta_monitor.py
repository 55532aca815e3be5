"""
vanta_monitor: automated compliance tests.

Vanta renamed monitors to tests; the table keeps its old name. Quals on
status, category, integration, framework, control and owner_id are sent to
the API as filters, so only matching tests are fetched.
"""

from typing import Any

from vanta_tables.models import Test, TestEntity, TestStatus
from vanta_tables.tables.base import (
    OPTIONAL,
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
from vanta_tables.tables.transforms import ensure_list, from_field, from_qual, from_value

FAILING = "FAILING"
STATUS_VALUES = ", ".join(f"'{status}'" for status in TestStatus)


def list_monitors(d: QueryData) -> None:
    tests = d.client.list_tests(
        page_size=d.page_size,
        status=d.equals_qual_string("status"),
        category=d.equals_qual_string("category"),
        integration=d.equals_qual_string("integration"),
        framework=d.equals_qual_string("framework"),
        control=d.equals_qual_string("control"),
        owner=d.equals_qual_string("owner_id"),
    )
    d.stream_items(tests)


def get_monitor(d: QueryData) -> Test | None:
    test_id = d.equals_qual_string("id")
    if not test_id:
        return None
    return d.client.get_test(test_id)


def list_failing_resource_entities(d: QueryData, test: Any) -> list[TestEntity]:
    """Fetch the resources currently failing the test."""
    if not isinstance(test, Test):
        return []
    return list(d.client.list_test_entities(test.id, entity_status=FAILING))


TABLE = Table(
    name="vanta_monitor",
    description="Automated tests Vanta runs against the organization's infrastructure and people.",
    list_config=ListConfig(
        hydrate=list_monitors,
        key_columns=[
            KeyColumn("status", OPTIONAL),
            KeyColumn("category", OPTIONAL),
            KeyColumn("integration", OPTIONAL),
            KeyColumn("framework", OPTIONAL),
            KeyColumn("control", OPTIONAL),
            KeyColumn("owner_id", OPTIONAL),
        ],
    ),
    get_config=GetConfig(hydrate=get_monitor, key_columns=[KeyColumn("id", REQUIRED)]),
    columns=[
        Column("name", ColumnType.STRING, "A human-readable name of the test."),
        Column("id", ColumnType.STRING, "A unique identifier of the test."),
        Column("category", ColumnType.STRING, "A high-level categorization of the test."),
        Column(
            "status",
            ColumnType.STRING,
            f"Status of the test. Possible values are: {STATUS_VALUES}.",
        ),
        Column("outcome", ColumnType.STRING, "Outcome of the latest test run. Same as status.", from_field("status")),
        Column("test_id", ColumnType.STRING, "A unique identifier for this test. Same as id.", from_field("id")),
        Column("description", ColumnType.STRING, "A human-readable description of the test."),
        Column("failure_description", ColumnType.STRING, "What a failure of this test means."),
        Column("remediation_description", ColumnType.STRING, "How to remediate a failure of this test."),
        Column("last_test_run_date", ColumnType.TIMESTAMP, "The last time the test ran."),
        Column(
            "latest_flip_time",
            ColumnType.TIMESTAMP,
            "The last time the test flipped to a passing or failing state.",
            from_field("latest_flip_date"),
        ),
        Column("version", ColumnType.JSON, "The version of the test definition."),
        Column("integrations", ColumnType.JSON, "The integrations the test evaluates."),
        Column("services", ColumnType.JSON, "A list of services. Same as integrations.", from_field("integrations")),
        Column(
            "disabled_status",
            ColumnType.JSON,
            "Metadata about whether this test is deactivated.",
            from_field("deactivated_status_info"),
        ),
        Column(
            "remediation_status",
            ColumnType.JSON,
            "Specifies the remediation information.",
            from_field("remediation_status_info"),
        ),
        Column("owner", ColumnType.JSON, "The user who owns the test."),
        Column(
            "assignees",
            ColumnType.JSON,
            "A list of users assigned as owner for this test.",
            from_field("owner").transform(ensure_list),
        ),
        Column("owner_id", ColumnType.STRING, "A unique identifier of the test owner.", from_field("owner.id")),
        Column(
            "integration",
            ColumnType.STRING,
            "Integration ID used to filter tests (populated from the qual).",
            from_qual("integration"),
        ),
        Column(
            "framework",
            ColumnType.STRING,
            "Framework ID used to filter tests (populated from the qual).",
            from_qual("framework"),
        ),
        Column(
            "control",
            ColumnType.STRING,
            "Control ID used to filter tests (populated from the qual).",
            from_qual("control"),
        ),
        Column(
            "failing_resource_entities",
            ColumnType.JSON,
            "The resources currently failing the test.",
            from_value(),
            hydrate=list_failing_resource_entities,
        ),
        deprecated_column("compliance_status", ColumnType.STRING, "The compliance status of the test."),
        deprecated_column("controls", ColumnType.JSON, "A list of controls being checked during the test."),
        deprecated_column("organization_name", ColumnType.STRING, "The name of the organization."),
    ],
)
