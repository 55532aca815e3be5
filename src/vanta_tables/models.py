"""
Pydantic models for Vanta REST API resources.

The models mirror the JSON returned by ``https://api.vanta.com/v1``. Field
names are snake_case in Python and camelCase on the wire; both spellings are
accepted when validating. Unknown keys are ignored so that new API fields
do not break existing tables.

List endpoints wrap their payload in a common envelope:

    {
        "results": {
            "data": [...],
            "pageInfo": {"hasNextPage": true, "endCursor": "..."}
        }
    }

``parse_page`` unwraps it into a typed ``Page``.
"""

from datetime import datetime
from enum import StrEnum
from typing import Any, Generic, TypeVar

from typing_extensions import override

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class VantaModel(BaseModel):
    """Base model: camelCase aliases, snake_case access, unknown keys ignored."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    @model_validator(mode="before")
    @classmethod
    def drop_nulls(cls, data: Any) -> Any:
        """Treat a JSON null like a missing key, so the field keeps its default."""
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data


# =============================================================================
# Enumerations
# =============================================================================


class EmploymentStatus(StrEnum):
    UPCOMING = "UPCOMING"
    CURRENT = "CURRENT"
    ON_LEAVE = "ON_LEAVE"
    INACTIVE = "INACTIVE"


class TestStatus(StrEnum):
    """Status values accepted by the ``statusFilter`` of ``/v1/tests``."""

    __test__ = False

    OK = "OK"
    DEACTIVATED = "DEACTIVATED"
    NEEDS_ATTENTION = "NEEDS_ATTENTION"
    IN_PROGRESS = "IN_PROGRESS"
    INVALID = "INVALID"
    NOT_APPLICABLE = "NOT_APPLICABLE"


# =============================================================================
# Pagination
# =============================================================================


class PageInfo(VantaModel):
    """Cursor information returned with every list response."""

    has_next_page: bool = False
    end_cursor: str | None = None
    has_previous_page: bool = False
    start_cursor: str | None = None


ItemT = TypeVar("ItemT", bound=BaseModel)


class Page(BaseModel, Generic[ItemT]):
    """
    One page of a list endpoint.

    Attributes:
        data: Items on this page
        page_info: Cursor information for fetching the next page
    """

    data: list[ItemT] = Field(default_factory=list)
    page_info: PageInfo = Field(default_factory=PageInfo)

    @property
    def next_cursor(self) -> str | None:
        """Cursor for the following page, or None if this is the last one."""
        if not self.page_info.has_next_page:
            return None
        return self.page_info.end_cursor or None


def parse_page(payload: dict[str, Any], item_model: type[ItemT]) -> Page[ItemT]:
    """
    Parse a list response into a typed page.

    Args:
        payload: Decoded JSON body of a list endpoint
        item_model: Model used to validate each item in ``data``

    Returns:
        Page of validated items

    Example:
        >>> page = parse_page(response.json(), Person)
        >>> page.page_info.has_next_page
        False
    """
    results: dict[str, Any] = payload.get("results") or {}
    raw_items: list[Any] = results.get("data") or []
    return Page[item_model](  # type: ignore[valid-type]
        data=[item_model.model_validate(item) for item in raw_items],
        page_info=PageInfo.model_validate(results.get("pageInfo") or {}),
    )


# =============================================================================
# People
# =============================================================================


class Employment(VantaModel):
    end_date: datetime | None = None
    job_title: str | None = None
    start_date: datetime | None = None
    status: str | None = None


class PersonName(VantaModel):
    display: str | None = None
    last: str | None = None
    first: str | None = None


class SourceInfo(VantaModel):
    integration_id: str | None = None
    resource_id: str | None = None
    type: str | None = None


class Sources(VantaModel):
    email_address: SourceInfo | None = None
    employment: SourceInfo | None = None


class TaskDetail(VantaModel):
    task_type: str | None = None
    status: str | None = None
    due_date: datetime | None = None
    completion_date: datetime | None = None
    disabled: Any = None


class PolicyRef(VantaModel):
    name: str


class PolicyTask(TaskDetail):
    unaccepted_policies: list[PolicyRef] = Field(default_factory=list)
    accepted_policies: list[PolicyRef] = Field(default_factory=list)


class TasksDetails(VantaModel):
    complete_trainings: TaskDetail | None = None
    complete_custom_tasks: TaskDetail | None = None
    complete_offboarding_custom_tasks: TaskDetail | None = None
    complete_background_checks: TaskDetail | None = None
    accept_policies: PolicyTask | None = None
    install_device_monitoring: TaskDetail | None = None


class TasksSummary(VantaModel):
    completion_date: datetime | None = None
    due_date: datetime | None = None
    status: str | None = None
    details: TasksDetails | None = None


class Person(VantaModel):
    """
    A person in the Vanta organization (``/v1/people``).

    Attributes:
        id: Vanta person ID
        email_address: Primary email address
        employment: Employment dates, job title and status
        name: Display, first and last name
        group_ids: IDs of the groups the person belongs to
        sources: Integrations the email and employment data came from
        tasks_summary: Security task completion summary
    """

    id: str
    email_address: str | None = None
    employment: Employment | None = None
    name: PersonName | None = None
    group_ids: list[str] | None = None
    sources: Sources | None = None
    tasks_summary: TasksSummary | None = None

    @property
    def is_active(self) -> bool:
        """True when the person is currently employed."""
        if self.employment is None or self.employment.status is None:
            return False
        return self.employment.status == EmploymentStatus.CURRENT


# =============================================================================
# Policies and groups
# =============================================================================


class PolicyLatestVersion(VantaModel):
    status: str | None = None


class Policy(VantaModel):
    """A policy document (``/v1/policies``)."""

    id: str
    name: str | None = None
    description: str | None = None
    status: str | None = None
    approved_at_date: datetime | None = None
    latest_version: PolicyLatestVersion | None = None


class Group(VantaModel):
    """A group of people (``/v1/groups``)."""

    id: str
    name: str | None = None
    creation_date: datetime | None = None


# =============================================================================
# Integrations
# =============================================================================


class IntegrationConnection(VantaModel):
    connection_id: str
    is_disabled: bool = False
    connection_error_message: str | None = None


class Integration(VantaModel):
    """A connected integration (``/v1/integrations``)."""

    integration_id: str
    display_name: str | None = None
    resource_kinds: list[str] = Field(default_factory=list)
    connections: list[IntegrationConnection] = Field(default_factory=list)


# =============================================================================
# Computers
# =============================================================================


class ComputerOwner(VantaModel):
    id: str | None = None
    email_address: str | None = None
    display_name: str | None = None


class OperatingSystem(VantaModel):
    type: str | None = None
    version: str | None = None


class SecurityCheck(VantaModel):
    outcome: str | None = None

    @property
    def passed(self) -> bool:
        return self.outcome == "PASS"


class Computer(VantaModel):
    """
    A computer monitored by the Vanta agent or an MDM integration
    (``/v1/monitored-computers``).

    Each security check carries an outcome such as PASS, FAIL or
    IN_PROGRESS; a missing check means Vanta has no data for it.
    """

    id: str
    integration_id: str | None = None
    last_check_date: datetime | None = None
    operating_system: OperatingSystem | None = None
    owner: ComputerOwner | None = None
    serial_number: str | None = None
    udid: str | None = None
    screenlock: SecurityCheck | None = None
    disk_encryption: SecurityCheck | None = None
    password_manager: SecurityCheck | None = None
    antivirus_installation: SecurityCheck | None = None


# =============================================================================
# Vendors
# =============================================================================


class VendorCategory(VantaModel):
    display_name: str | None = None


class VendorAuthDetails(VantaModel):
    method: str | None = None
    password_mfa: bool | None = Field(default=None, alias="passwordMFA")
    password_requires_number: bool | None = None
    password_requires_symbol: bool | None = None
    password_minimum_length: int | None = None


class Vendor(VantaModel):
    """A third-party vendor tracked for risk management (``/v1/vendors``)."""

    id: str
    name: str | None = None
    website_url: str | None = None
    account_manager_name: str | None = None
    account_manager_email: str | None = None
    services_provided: str | None = None
    additional_notes: str | None = None
    security_owner_user_id: str | None = None
    business_owner_user_id: str | None = None
    contract_start_date: datetime | None = None
    contract_renewal_date: datetime | None = None
    contract_termination_date: datetime | None = None
    next_security_review_due_date: datetime | None = None
    last_security_review_completion_date: datetime | None = None
    is_visible_to_auditors: bool = False
    is_risk_auto_scored: bool = False
    category: VendorCategory | None = None
    auth_details: VendorAuthDetails | None = None
    risk_attribute_ids: list[str] = Field(default_factory=list)
    status: str | None = None
    inherent_risk_level: str | None = None
    residual_risk_level: str | None = None
    vendor_headquarters: str | None = None
    contract_amount: float | None = None
    custom_fields: Any = None


# =============================================================================
# Tests
# =============================================================================


class TestVersion(VantaModel):
    __test__ = False

    major: int = 0
    minor: int = 0
    id: str | None = Field(default=None, alias="_id")


class DeactivatedStatusInfo(VantaModel):
    is_deactivated: bool = False
    deactivated_reason: str | None = None
    last_updated_date: datetime | None = None


class RemediationStatusInfo(VantaModel):
    status: str | None = None
    soonest_remediate_by_date: datetime | None = None
    item_count: int = 0


class TestOwner(VantaModel):
    __test__ = False

    id: str | None = None
    email_address: str | None = None
    display_name: str | None = None


class Test(VantaModel):
    """
    An automated compliance test (``/v1/tests``).

    Older releases called these monitors, which is why the table exposing
    them is ``vanta_monitor``.
    """

    __test__ = False

    id: str
    name: str | None = None
    last_test_run_date: datetime | None = None
    latest_flip_date: datetime | None = None
    description: str | None = None
    failure_description: str | None = None
    remediation_description: str | None = None
    version: TestVersion | None = None
    category: str | None = None
    integrations: list[str] = Field(default_factory=list)
    status: str | None = None
    deactivated_status_info: DeactivatedStatusInfo | None = None
    remediation_status_info: RemediationStatusInfo | None = None
    owner: TestOwner | None = None

    @override
    def __str__(self) -> str:
        return f"Test({self.id}, {self.name}, status={self.status})"


class TestEntity(VantaModel):
    """A resource evaluated by a test (``/v1/tests/{id}/entities``)."""

    __test__ = False

    id: str
    entity_status: str | None = None
    display_name: str | None = None
    response_type: str | None = None
    deactivated_reason: str | None = None
    last_updated_date: datetime | None = None
    created_date: datetime | None = None


# =============================================================================
# Audit evidence
# =============================================================================


class RelatedControl(VantaModel):
    name: str
    section_names: list[str] = Field(default_factory=list)


class Evidence(VantaModel):
    """A piece of evidence attached to an audit (``/v1/audits/{id}/evidence``)."""

    id: str
    external_id: str | None = None
    status: str | None = None
    name: str | None = None
    deletion_date: datetime | None = None
    creation_date: datetime | None = None
    status_updated_date: datetime | None = None
    test_status: str | None = None
    evidence_type: str | None = None
    evidence_id: str | None = None
    related_controls: list[RelatedControl] = Field(default_factory=list)
    description: str | None = None

    @property
    def related_control_names(self) -> list[str]:
        return [control.name for control in self.related_controls]
