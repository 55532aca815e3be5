"""vanta_vendor: third-party vendors and their risk assessment."""

from vanta_tables.models import Vendor
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


def list_vendors(d: QueryData) -> None:
    # /v1/vendors has no risk level filter; severity quals are matched per row
    d.stream_items(d.client.list_vendors(page_size=d.page_size))


def get_vendor(d: QueryData) -> Vendor | None:
    vendor_id = d.equals_qual_string("id")
    if not vendor_id:
        return None
    return d.client.get_vendor(vendor_id)


TABLE = Table(
    name="vanta_vendor",
    description="Third-party vendors tracked in Vanta, with contract and risk details.",
    list_config=ListConfig(
        hydrate=list_vendors,
        key_columns=[KeyColumn("severity", OPTIONAL, case_insensitive=True)],
    ),
    get_config=GetConfig(hydrate=get_vendor, key_columns=[KeyColumn("id", REQUIRED)]),
    columns=[
        Column("name", ColumnType.STRING, "The display name of the vendor."),
        Column("id", ColumnType.STRING, "A unique identifier of the vendor."),
        Column("url", ColumnType.STRING, "The URL of the vendor's website.", from_field("website_url")),
        Column("status", ColumnType.STRING, "The management status of the vendor."),
        Column(
            "severity",
            ColumnType.STRING,
            "The inherent risk level of the vendor.",
            from_field("inherent_risk_level"),
        ),
        Column("inherent_risk_level", ColumnType.STRING, "Risk level before mitigating controls are considered."),
        Column("residual_risk_level", ColumnType.STRING, "Risk level after mitigating controls are considered."),
        Column("account_manager_name", ColumnType.STRING, "The name of the vendor's account manager."),
        Column("account_manager_email", ColumnType.STRING, "The email of the vendor's account manager."),
        Column("services_provided", ColumnType.STRING, "The services the vendor provides."),
        Column("additional_notes", ColumnType.STRING, "Free-form notes about the vendor."),
        Column("security_owner_user_id", ColumnType.STRING, "The user responsible for the vendor's security review."),
        Column("business_owner_user_id", ColumnType.STRING, "The user who owns the business relationship."),
        Column("contract_start_date", ColumnType.TIMESTAMP, "The start date of the vendor contract."),
        Column("contract_renewal_date", ColumnType.TIMESTAMP, "The renewal date of the vendor contract."),
        Column("contract_termination_date", ColumnType.TIMESTAMP, "The termination date of the vendor contract."),
        Column("next_security_review_due_date", ColumnType.TIMESTAMP, "When the next security review is due."),
        Column(
            "latest_security_review_completed_at",
            ColumnType.TIMESTAMP,
            "The time when the security assessment was last reviewed.",
            from_field("last_security_review_completion_date"),
        ),
        Column("is_visible_to_auditors", ColumnType.BOOL, "If true, auditors can see the vendor."),
        Column("is_risk_auto_scored", ColumnType.BOOL, "If true, Vanta scores the vendor's risk automatically."),
        Column("category", ColumnType.STRING, "The vendor category.", from_field("category.display_name")),
        Column("auth_details", ColumnType.JSON, "How users authenticate to the vendor and its password policy."),
        Column("risk_attribute_ids", ColumnType.JSON, "IDs of the risk attributes assigned to the vendor."),
        Column("custom_fields", ColumnType.JSON, "Custom field values set on the vendor."),
        Column("vendor_headquarters", ColumnType.STRING, "The location of the vendor's headquarters."),
        Column("contract_amount", ColumnType.DOUBLE, "The contract amount."),
        deprecated_column("vendor_risk_locked", ColumnType.BOOL, "If true, the vendor risk level is locked."),
        deprecated_column("owner", ColumnType.JSON, "The owner of the vendor."),
        deprecated_column("risk_profile", ColumnType.JSON, "Specifies the risk profile of the vendor."),
        deprecated_column("organization_name", ColumnType.STRING, "The name of the organization."),
    ],
)
