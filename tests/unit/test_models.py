"""
Unit tests for the Vanta API models.

Tests cover camelCase parsing, derived properties and page envelopes.
"""

from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

import pytest
from pydantic import ValidationError

from vanta_tables.models import (
    Computer,
    Evidence,
    Group,
    Integration,
    Person,
    Test,
    Vendor,
    parse_page,
)


class TestPersonModel:
    """Tests for the Person model."""

    def test_parses_camel_case_payload(self, person_payload: dict[str, Any]) -> None:
        """Test that nested camelCase fields are parsed."""
        person = Person.model_validate(person_payload)

        assert person.email_address == "ada@example.com"
        assert person.name is not None and person.name.display == "Ada Lovelace"
        assert person.employment is not None
        assert person.employment.start_date == datetime(2023, 2, 1, tzinfo=UTC)
        assert person.group_ids == ["group-eng"]
        assert person.tasks_summary is not None
        details = person.tasks_summary.details
        assert details is not None and details.accept_policies is not None
        assert details.accept_policies.unaccepted_policies[0].name == "Acceptable Use Policy"

    def test_is_active(
        self,
        person_payload: dict[str, Any],
        inactive_person_payload: dict[str, Any],
    ) -> None:
        """Test that only CURRENT employees are active."""
        assert Person.model_validate(person_payload).is_active is True
        assert Person.model_validate(inactive_person_payload).is_active is False
        assert Person(id="p-3").is_active is False

    def test_unknown_fields_ignored(self) -> None:
        """Test that new API fields do not break parsing."""
        group = Group.model_validate({"id": "g-1", "name": "Eng", "brandNewField": 1})

        assert group.name == "Eng"


class TestOtherModels:
    """Tests for the remaining resource models."""

    def test_computer_security_checks(self, computer_payload: dict[str, Any]) -> None:
        """Test that security checks parse and report PASS."""
        computer = Computer.model_validate(computer_payload)

        assert computer.screenlock is not None and computer.screenlock.passed is True
        assert computer.disk_encryption is not None and computer.disk_encryption.passed is False
        assert computer.password_manager is None
        assert computer.operating_system is not None and computer.operating_system.type == "MACOS"

    def test_vendor_password_mfa_alias(self, vendor_payload: dict[str, Any]) -> None:
        """Test that the irregular passwordMFA key is mapped."""
        vendor = Vendor.model_validate(vendor_payload)

        assert vendor.auth_details is not None and vendor.auth_details.password_mfa is True
        assert vendor.auth_details.model_dump(by_alias=True)["passwordMFA"] is True
        assert vendor.category is not None and vendor.category.display_name == "Infrastructure"

    def test_test_model(self, monitor_payload: dict[str, Any]) -> None:
        """Test parsing an automated test and its version."""
        test = Test.model_validate(monitor_payload)

        assert test.version is not None and test.version.id == "v-1"
        assert test.owner is not None and test.owner.id == "person-001"
        assert "aws-s3-bucket-encryption" in str(test)

    def test_evidence_related_control_names(self, evidence_payload: dict[str, Any]) -> None:
        """Test that control names are derived from related controls."""
        evidence = Evidence.model_validate(evidence_payload)

        assert evidence.related_control_names == ["Access reviews", "User provisioning"]


class TestNullFields:
    """Tests for JSON nulls in fields that have defaults."""

    def test_vendor_nulls_use_defaults(self) -> None:
        """Test that null lists and bools fall back to empty and false."""
        vendor = Vendor.model_validate(
            {"id": "v1", "riskAttributeIds": None, "isVisibleToAuditors": None, "isRiskAutoScored": None}
        )

        assert vendor.risk_attribute_ids == []
        assert vendor.is_visible_to_auditors is False
        assert vendor.is_risk_auto_scored is False

    def test_nested_nulls(self) -> None:
        """Test nulls inside nested models and lists of models."""
        test = Test.model_validate(
            {
                "id": "t1",
                "integrations": None,
                "version": {"major": None, "minor": None, "_id": None},
                "deactivatedStatusInfo": {"isDeactivated": None},
                "remediationStatusInfo": {"itemCount": None},
            }
        )
        integration = Integration.model_validate(
            {
                "integrationId": "aws",
                "resourceKinds": None,
                "connections": [{"connectionId": "c-1", "isDisabled": None}],
            }
        )
        evidence = Evidence.model_validate({"id": "e1", "relatedControls": None})

        assert test.integrations == []
        assert test.version is not None and test.version.major == 0
        assert test.deactivated_status_info is not None
        assert test.deactivated_status_info.is_deactivated is False
        assert test.remediation_status_info is not None
        assert test.remediation_status_info.item_count == 0
        assert integration.resource_kinds == []
        assert integration.connections[0].is_disabled is False
        assert evidence.related_control_names == []

    def test_null_required_field_rejected(self) -> None:
        """Test that an item without an id still fails validation."""
        with pytest.raises(ValidationError):
            _ = Group.model_validate({"id": None, "name": "Engineering"})


class TestParsePage:
    """Tests for parse_page."""

    def test_parses_envelope(self, page_factory: Callable[..., dict[str, Any]]) -> None:
        """Test unwrapping results.data and results.pageInfo."""
        page = parse_page(page_factory([{"id": "g-1"}, {"id": "g-2"}], True, "abc"), Group)

        assert [g.id for g in page.data] == ["g-1", "g-2"]
        assert page.page_info.has_next_page is True
        assert page.next_cursor == "abc"

    def test_missing_results(self) -> None:
        """Test that an empty payload yields an empty last page."""
        page = parse_page({}, Group)

        assert page.data == []
        assert page.next_cursor is None

    def test_no_cursor_on_last_page(self, page_factory: Callable[..., dict[str, Any]]) -> None:
        """Test that the cursor is ignored when hasNextPage is false."""
        page = parse_page(page_factory([], False, "stale"), Group)

        assert page.next_cursor is None
