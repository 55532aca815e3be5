"""
Unit tests for the plugin entry point.
"""

from collections.abc import Callable
from typing import Any

import pytest
import responses
from responses import matchers

from vanta_tables.config import Settings
from vanta_tables.connection import ConnectionManager
from vanta_tables.errors import ConfigurationError, QueryError, VantaApiError
from vanta_tables.plugin import PLUGIN_NAME, TABLES, VantaPlugin
from vanta_tables.tables.base import QueryContext

BASE_URL = "https://api.vanta.com"

PageFactory = Callable[..., dict[str, Any]]

EXPECTED_TABLES = [
    "vanta_computer",
    "vanta_evidence",
    "vanta_group",
    "vanta_integration",
    "vanta_monitor",
    "vanta_policy",
    "vanta_user",
    "vanta_vendor",
]


class TestRegistry:
    """Tests for table lookup."""

    def test_tables_sorted(self) -> None:
        """Test that every table is registered and sorted by name."""
        plugin = VantaPlugin()

        assert PLUGIN_NAME == "vanta"
        assert [t.name for t in plugin.tables()] == EXPECTED_TABLES
        assert sorted(TABLES) == EXPECTED_TABLES

    def test_unknown_table(self) -> None:
        """Test that an unknown table name lists the available tables."""
        plugin = VantaPlugin()

        with pytest.raises(QueryError) as exc_info:
            _ = plugin.table("vanta_nope")

        assert "vanta_user" in str(exc_info.value)
        assert exc_info.value.table == "vanta_nope"

    def test_every_table_has_id_column(self) -> None:
        """Test that each table exposes an id column."""
        for table in VantaPlugin().tables():
            assert "id" in table.column_names(), table.name


class TestQuery:
    """Tests for running queries through the plugin."""

    @responses.activate
    def test_rows_with_limit(
        self,
        mock_settings: Settings,
        person_payload: dict[str, Any],
        inactive_person_payload: dict[str, Any],
        page_factory: PageFactory,
    ) -> None:
        """Test that the limit caps both page size and emitted rows."""
        _ = responses.add(
            responses.GET,
            f"{BASE_URL}/v1/people",
            json=page_factory([person_payload, inactive_person_payload], has_next_page=True, end_cursor="c2"),
            match=[matchers.query_param_matcher({"pageSize": "1"})],
        )
        plugin = VantaPlugin(settings=mock_settings)

        rows = plugin.rows("vanta_user", QueryContext(limit=1, columns=["id"]))

        assert rows == [{"id": "person-001"}]
        assert len(responses.calls) == 1

    @responses.activate
    def test_query_returns_row_count(
        self,
        mock_settings: Settings,
        person_payload: dict[str, Any],
    ) -> None:
        """Test that the get path is used when an id qual is present."""
        _ = responses.add(responses.GET, f"{BASE_URL}/v1/people/person-001", json=person_payload)
        plugin = VantaPlugin(settings=mock_settings)
        collected: list[dict[str, Any]] = []

        count = plugin.query("vanta_user", QueryContext(quals={"id": "person-001"}), collected.append)

        assert count == 1
        assert collected[0]["email"] == "ada@example.com"

    @responses.activate
    def test_client_reused_across_queries(
        self,
        mock_settings: Settings,
        page_factory: PageFactory,
    ) -> None:
        """Test that queries on one connection share a client."""
        _ = responses.add(responses.GET, f"{BASE_URL}/v1/groups", json=page_factory([]))
        manager = ConnectionManager()
        plugin = VantaPlugin(settings=mock_settings, connection_manager=manager)

        _ = plugin.rows("vanta_group")
        _ = plugin.rows("vanta_group")

        assert len(manager) == 1

    @responses.activate
    def test_shared_manager_across_plugins(
        self,
        mock_settings: Settings,
        page_factory: PageFactory,
    ) -> None:
        """Test that plugins given one empty manager share its clients."""
        _ = responses.add(responses.GET, f"{BASE_URL}/v1/groups", json=page_factory([]))
        manager = ConnectionManager()
        first = VantaPlugin(settings=mock_settings, connection_manager=manager)
        second = VantaPlugin(settings=mock_settings, connection_manager=manager)

        assert first.connection_manager is manager
        assert second.connection_manager is manager

        _ = first.rows("vanta_group")
        _ = second.rows("vanta_group")

        assert len(manager) == 1

    @responses.activate
    def test_api_error_propagates(self, mock_settings: Settings) -> None:
        """Test that API failures reach the caller."""
        _ = responses.add(
            responses.GET,
            f"{BASE_URL}/v1/vendors",
            json={"error": "internal"},
            status=500,
        )
        plugin = VantaPlugin(settings=mock_settings)

        with pytest.raises(VantaApiError) as exc_info:
            _ = plugin.rows("vanta_vendor")

        assert exc_info.value.status_code == 500

    def test_missing_required_qual(self, mock_settings: Settings) -> None:
        """Test that vanta_evidence without audit_id fails before any request."""
        plugin = VantaPlugin(settings=mock_settings)

        with pytest.raises(QueryError):
            _ = plugin.rows("vanta_evidence")

    def test_missing_credentials(self) -> None:
        """Test that settings from an empty environment are rejected."""
        plugin = VantaPlugin()

        with pytest.raises(ConfigurationError):
            _ = plugin.rows("vanta_user")
