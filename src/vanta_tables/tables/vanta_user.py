"""vanta_user: people in the Vanta organization."""

from vanta_tables.models import Person
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
from vanta_tables.tables.transforms import from_field


def list_users(d: QueryData) -> None:
    d.stream_items(d.client.list_people(page_size=d.page_size))


def get_user(d: QueryData) -> Person | None:
    person_id = d.equals_qual_string("id")
    if not person_id:
        return None
    return d.client.get_person(person_id)


TABLE = Table(
    name="vanta_user",
    description="People in the Vanta organization, with their employment and security task status.",
    list_config=ListConfig(
        hydrate=list_users,
        key_columns=[KeyColumn("employment_status", OPTIONAL)],
    ),
    get_config=GetConfig(hydrate=get_user, key_columns=[KeyColumn("id", REQUIRED)]),
    columns=[
        Column("display_name", ColumnType.STRING, "The display name of the user.", from_field("name.display")),
        Column("id", ColumnType.STRING, "A unique identifier of the user."),
        Column("email", ColumnType.STRING, "The email of the user.", from_field("email_address")),
        Column(
            "employment_status",
            ColumnType.STRING,
            "The current employment status of the user.",
            from_field("employment.status"),
        ),
        Column("job_title", ColumnType.STRING, "The job title of the user.", from_field("employment.job_title")),
        Column(
            "task_status",
            ColumnType.STRING,
            "The security task status of the user.",
            from_field("tasks_summary.status"),
        ),
        Column(
            "start_date",
            ColumnType.TIMESTAMP,
            "The employment start date of the user.",
            from_field("employment.start_date"),
        ),
        Column(
            "end_date",
            ColumnType.TIMESTAMP,
            "The employment end date of the user.",
            from_field("employment.end_date"),
        ),
        Column("family_name", ColumnType.STRING, "The family name of the user.", from_field("name.last")),
        Column("given_name", ColumnType.STRING, "The given name of the user.", from_field("name.first")),
        Column(
            "is_active",
            ColumnType.BOOL,
            "If true, the user is currently employed.",
            from_field("is_active"),
        ),
        Column("group_ids", ColumnType.JSON, "List of group IDs the user belongs to."),
        Column("employment", ColumnType.JSON, "Employment information including job title and dates."),
        Column("name", ColumnType.JSON, "Name information including display, first, and last name."),
        Column("sources", ColumnType.JSON, "Integrations the user's email and employment data came from."),
        Column("tasks_summary", ColumnType.JSON, "Summary of security task completion status."),
        deprecated_column("is_from_scan", ColumnType.BOOL, "If true, the user was discovered by the security scan."),
        deprecated_column(
            "needs_employee_digest_reminder",
            ColumnType.BOOL,
            "If true, user will get an email digest of their incomplete security tasks.",
        ),
        deprecated_column("is_not_human", ColumnType.BOOL, "If true, the resource is not a human."),
    ],
)
