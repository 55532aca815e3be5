"""vanta_computer: workstations monitored by the Vanta agent or an MDM."""

from vanta_tables.models import Computer, SecurityCheck
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


def list_computers(d: QueryData) -> None:
    d.stream_items(d.client.list_computers(page_size=d.page_size))


def get_computer(d: QueryData) -> Computer | None:
    computer_id = d.equals_qual_string("id")
    if not computer_id:
        return None
    return d.client.get_computer(computer_id)


def check_passed(check: SecurityCheck | None) -> bool | None:
    """PASS is true, any other outcome false, and a missing check null."""
    if check is None or check.outcome is None:
        return None
    return check.passed


TABLE = Table(
    name="vanta_computer",
    description="Computers monitored by Vanta and the outcome of their security checks.",
    list_config=ListConfig(hydrate=list_computers),
    get_config=GetConfig(hydrate=get_computer, key_columns=[KeyColumn("id", REQUIRED)]),
    columns=[
        Column(
            "owner_name",
            ColumnType.STRING,
            "The name of the workstation owner.",
            from_field("owner.display_name"),
        ),
        Column("id", ColumnType.STRING, "A unique Vanta generated identifier of the computer."),
        Column(
            "integration_id",
            ColumnType.STRING,
            "The integration that reports the computer, such as the Vanta agent or an MDM.",
        ),
        Column("serial_number", ColumnType.STRING, "The serial number of the workstation."),
        Column("udid", ColumnType.STRING, "The unique device identifier of the workstation."),
        Column("owner_id", ColumnType.STRING, "A unique identifier of the owner of the workstation.", from_field("owner.id")),
        Column("owner_email", ColumnType.STRING, "The email address of the workstation owner.", from_field("owner.email_address")),
        Column("os_type", ColumnType.STRING, "The OS type of the workstation.", from_field("operating_system.type")),
        Column("os_version", ColumnType.STRING, "The OS version of the workstation.", from_field("operating_system.version")),
        Column("last_check_date", ColumnType.TIMESTAMP, "The time when the computer's checks last ran."),
        Column(
            "screenlock_outcome",
            ColumnType.STRING,
            "Outcome of the screen lock check.",
            from_field("screenlock.outcome"),
        ),
        Column(
            "disk_encryption_outcome",
            ColumnType.STRING,
            "Outcome of the disk encryption check.",
            from_field("disk_encryption.outcome"),
        ),
        Column(
            "password_manager_outcome",
            ColumnType.STRING,
            "Outcome of the password manager check.",
            from_field("password_manager.outcome"),
        ),
        Column(
            "antivirus_outcome",
            ColumnType.STRING,
            "Outcome of the antivirus installation check.",
            from_field("antivirus_installation.outcome"),
        ),
        Column(
            "has_screen_lock",
            ColumnType.BOOL,
            "If true, the workstation has a screen lock configured.",
            from_field("screenlock").transform(check_passed),
        ),
        Column(
            "is_encrypted",
            ColumnType.BOOL,
            "If true, the workstation's hard drive is encrypted.",
            from_field("disk_encryption").transform(check_passed),
        ),
        Column(
            "is_password_manager_installed",
            ColumnType.BOOL,
            "If true, a password manager is installed in the workstation.",
            from_field("password_manager").transform(check_passed),
        ),
        Column("operating_system", ColumnType.JSON, "The operating system type and version."),
        deprecated_column("agent_version", ColumnType.STRING, "The Vanta agent version."),
        deprecated_column("hostname", ColumnType.STRING, "The hostname of the workstation."),
        deprecated_column("host_identifier", ColumnType.STRING, "The host identifier of the workstation."),
        deprecated_column(
            "last_ping",
            ColumnType.TIMESTAMP,
            "The time when the workstation was last scanned by the Vanta agent.",
        ),
        deprecated_column(
            "num_browser_extensions",
            ColumnType.INT,
            "The number of browser extensions installed in the workstation.",
        ),
        deprecated_column("endpoint_applications", ColumnType.JSON, "A list of applications installed on the device."),
        deprecated_column(
            "installed_av_programs",
            ColumnType.JSON,
            "A list of anti-virus programs installed in the workstation.",
        ),
        deprecated_column(
            "installed_password_managers",
            ColumnType.JSON,
            "A list of password managers installed in the workstation.",
        ),
        deprecated_column("unsupported_reasons", ColumnType.JSON, "Specifies the reason for unmonitored computers."),
        deprecated_column("organization_name", ColumnType.STRING, "The name of the organization."),
    ],
)
