"""
Unit tests for table declarations and query execution.

Uses a small in-memory table so the planning rules (get vs list, required
quals, limits, filtering and column hydrates) are tested without HTTP.
"""

from datetime import UTC, datetime
from typing import Any
from unittest.mock import MagicMock

import pytest

from vanta_tables.errors import QueryError, VantaApiError
from vanta_tables.models import Group
from vanta_tables.tables.base import (
    OPTIONAL,
    REQUIRED,
    Column,
    ColumnHydrate,
    ColumnType,
    GetConfig,
    GetHydrate,
    KeyColumn,
    ListConfig,
    QueryContext,
    QueryData,
    Row,
    Table,
    coerce_qual,
    deprecated_column,
)
from vanta_tables.tables.transforms import from_field, from_qual

GROUPS = [
    Group(id="g-1", name="Engineering"),
    Group(id="g-2", name="Sales"),
    Group(id="g-3", name="engineering"),
]


def _make_table(
    get_hydrate: GetHydrate | None = None,
    member_hydrate: ColumnHydrate | None = None,
    list_key_columns: list[KeyColumn] | None = None,
    max_page_size: int = 100,
) -> tuple[Table, list[int]]:
    page_sizes: list[int] = []

    def list_groups(d: QueryData) -> None:
        page_sizes.append(d.page_size)
        d.stream_items(iter(GROUPS))

    def get_group(d: QueryData) -> Group | None:
        wanted = d.equals_qual_string("id")
        return next((g for g in GROUPS if g.id == wanted), None)

    table = Table(
        name="test_group",
        description="Groups for testing",
        list_config=ListConfig(
            hydrate=list_groups,
            key_columns=list_key_columns or [KeyColumn("name", OPTIONAL, case_insensitive=True)],
            max_page_size=max_page_size,
        ),
        get_config=GetConfig(hydrate=get_hydrate or get_group, key_columns=[KeyColumn("id", REQUIRED)]),
        columns=[
            Column("id", ColumnType.STRING, "Group ID"),
            Column("name", ColumnType.STRING, "Group name"),
            Column("upper_name", ColumnType.STRING, "Upper-cased name", from_field("name").transform(str.upper)),
            Column("region", ColumnType.STRING, "Region qual", from_qual("region")),
            Column("members", ColumnType.JSON, "Members", hydrate=member_hydrate or (lambda d, g: [g.id])),
            deprecated_column("organization_name", ColumnType.STRING, "The name of the organization."),
        ],
    )
    return table, page_sizes


def _run(table: Table, context: QueryContext, default_page_size: int = 100) -> list[Row]:
    rows: list[Row] = []
    query_data = QueryData(table, MagicMock(), context, rows.append, default_page_size=default_page_size)
    count = table.execute(query_data)
    assert count == len(rows)
    return rows


class TestTableDeclaration:
    """Tests for Table construction."""

    def test_duplicate_columns_rejected(self) -> None:
        """Test that column names must be unique."""
        with pytest.raises(ValueError):
            _ = Table("t", "d", [Column("a", ColumnType.STRING), Column("a", ColumnType.INT)])

    def test_key_column_must_exist(self) -> None:
        """Test that key columns must be declared columns."""
        with pytest.raises(ValueError):
            _ = Table(
                "t",
                "d",
                [Column("a", ColumnType.STRING)],
                list_config=ListConfig(hydrate=lambda d: None, key_columns=[KeyColumn("b")]),
            )

    def test_unknown_column_raises_query_error(self) -> None:
        """Test that projecting an unknown column fails."""
        table, _ = _make_table()

        with pytest.raises(QueryError) as exc_info:
            _ = _run(table, QueryContext(columns=["nope"]))

        assert exc_info.value.column == "nope"


class TestListExecution:
    """Tests for the list path."""

    def test_streams_all_rows(self) -> None:
        """Test that every item becomes a row with every column."""
        table, _ = _make_table()

        rows = _run(table, QueryContext())

        assert [r["id"] for r in rows] == ["g-1", "g-2", "g-3"]
        assert rows[0] == {
            "id": "g-1",
            "name": "Engineering",
            "upper_name": "ENGINEERING",
            "region": None,
            "members": ["g-1"],
            "organization_name": None,
        }

    def test_limit_stops_streaming(self) -> None:
        """Test that execution stops once the limit is reached."""
        table, page_sizes = _make_table()

        rows = _run(table, QueryContext(limit=2))

        assert len(rows) == 2
        assert page_sizes == [2]

    def test_zero_limit_returns_nothing(self) -> None:
        """Test that a zero limit skips hydration entirely."""
        table, page_sizes = _make_table()

        assert _run(table, QueryContext(limit=0)) == []
        assert page_sizes == []

    def test_page_size_capped_by_table_and_settings(self) -> None:
        """Test the page size is the minimum of settings, table and limit."""
        table, page_sizes = _make_table(max_page_size=50)

        _ = _run(table, QueryContext(), default_page_size=100)
        _ = _run(table, QueryContext(), default_page_size=20)
        _ = _run(table, QueryContext(limit=5), default_page_size=100)

        assert page_sizes == [50, 20, 5]

    def test_optional_qual_filters_case_insensitively(self) -> None:
        """Test that optional key column quals filter rows."""
        table, _ = _make_table()

        rows = _run(table, QueryContext(quals={"name": "ENGINEERING"}))

        assert [r["id"] for r in rows] == ["g-1", "g-3"]

    def test_qual_on_unprojected_column_still_filters(self) -> None:
        """Test that quals apply even when the column is not selected."""
        table, _ = _make_table()

        rows = _run(table, QueryContext(quals={"name": "sales"}, columns=["id"]))

        assert rows == [{"id": "g-2"}]

    def test_filtered_rows_do_not_count_toward_limit(self) -> None:
        """Test that the limit counts emitted rows only."""
        table, _ = _make_table()

        rows = _run(table, QueryContext(quals={"name": "engineering"}, limit=2))

        assert [r["id"] for r in rows] == ["g-1", "g-3"]

    def test_missing_required_qual_raises(self) -> None:
        """Test that a required list key column must be supplied."""
        table, _ = _make_table(list_key_columns=[KeyColumn("region", REQUIRED)])

        with pytest.raises(QueryError) as exc_info:
            _ = _run(table, QueryContext())

        assert "region" in str(exc_info.value)

    def test_required_qual_populates_column(self) -> None:
        """Test that a qual-backed column echoes the qual."""
        table, _ = _make_table(list_key_columns=[KeyColumn("region", REQUIRED)])

        rows = _run(table, QueryContext(quals={"region": "eu"}, columns=["id", "region"]))

        assert rows[0] == {"id": "g-1", "region": "eu"}


class TestColumnHydrate:
    """Tests for per-column hydrate functions."""

    def test_hydrate_only_runs_when_requested(self) -> None:
        """Test that column hydrates are skipped for unselected columns."""
        calls: list[str] = []

        def members(d: QueryData, group: Group) -> list[str]:
            calls.append(group.id)
            return ["u-1"]

        table, _ = _make_table(member_hydrate=members)

        _ = _run(table, QueryContext(columns=["id", "name"]))
        assert calls == []

        rows = _run(table, QueryContext(columns=["members"], limit=1))
        assert calls == ["g-1"]
        assert rows == [{"members": ["u-1"]}]


class TestGetExecution:
    """Tests for the get path."""

    def test_get_used_with_key_qual(self) -> None:
        """Test that an id qual fetches a single item."""
        table, page_sizes = _make_table()

        rows = _run(table, QueryContext(quals={"id": "g-2"}))

        assert [r["name"] for r in rows] == ["Sales"]
        assert page_sizes == []

    def test_get_missing_item_yields_nothing(self) -> None:
        """Test that a get returning None gives zero rows."""
        table, _ = _make_table()

        assert _run(table, QueryContext(quals={"id": "g-404"})) == []

    def test_get_not_found_error_swallowed(self) -> None:
        """Test that not-found errors from a get give zero rows."""

        def get_raises(d: QueryData) -> Group:
            raise VantaApiError("group not found", status_code=404, retryable=False)

        table, _ = _make_table(get_hydrate=get_raises)

        assert _run(table, QueryContext(quals={"id": "g-1"})) == []

    def test_get_other_errors_propagate(self) -> None:
        """Test that other errors from a get are raised."""

        def get_raises(d: QueryData) -> Group:
            raise VantaApiError("server error", status_code=500)

        table, _ = _make_table(get_hydrate=get_raises)

        with pytest.raises(VantaApiError):
            _ = _run(table, QueryContext(quals={"id": "g-1"}))

    def test_get_applies_other_quals(self) -> None:
        """Test that extra quals still filter the fetched item."""
        table, _ = _make_table()

        assert _run(table, QueryContext(quals={"id": "g-2", "name": "Engineering"})) == []


ITEMS: list[dict[str, Any]] = [
    {"id": "a", "amount": 100, "active": False, "seen": datetime(2024, 1, 2, tzinfo=UTC)},
    {"id": "b", "amount": 12.5, "active": True, "seen": None},
    {"id": "c", "amount": 0, "active": True, "seen": datetime(2024, 3, 4, 5, 6, tzinfo=UTC)},
]


def _typed_table() -> Table:
    def list_items(d: QueryData) -> None:
        d.stream_items(iter(ITEMS))

    return Table(
        name="test_typed",
        description="Typed columns for testing",
        list_config=ListConfig(hydrate=list_items),
        columns=[
            Column("id", ColumnType.STRING, "Item ID"),
            Column("amount", ColumnType.DOUBLE, "Amount"),
            Column("active", ColumnType.BOOL, "Active flag"),
            Column("seen", ColumnType.TIMESTAMP, "Last seen"),
        ],
    )


class TestTypedQuals:
    """Tests for quals on non-string columns."""

    @pytest.mark.parametrize(
        ("column_type", "value", "expected"),
        [
            (ColumnType.BOOL, "TRUE", True),
            (ColumnType.BOOL, "f", False),
            (ColumnType.BOOL, False, False),
            (ColumnType.INT, "42", 42.0),
            (ColumnType.DOUBLE, " 1.5 ", 1.5),
            (ColumnType.TIMESTAMP, "2024-01-02T00:00:00Z", datetime(2024, 1, 2, tzinfo=UTC)),
            (ColumnType.TIMESTAMP, "2024-01-02", datetime(2024, 1, 2, tzinfo=UTC)),
            (ColumnType.STRING, "100", "100"),
        ],
    )
    def test_coerce_qual(self, column_type: ColumnType, value: object, expected: object) -> None:
        """Test conversion of host qual values to column types."""
        assert coerce_qual(column_type, value) == expected

    @pytest.mark.parametrize(
        ("quals", "expected_ids"),
        [
            ({"amount": "100"}, ["a"]),
            ({"amount": "12.50"}, ["b"]),
            ({"amount": "0"}, ["c"]),
            ({"active": "false"}, ["a"]),
            ({"active": "true"}, ["b", "c"]),
            ({"seen": "2024-01-02T00:00:00Z"}, ["a"]),
            ({"seen": "2024-03-04T05:06:00+00:00"}, ["c"]),
        ],
    )
    def test_typed_filters(self, quals: dict[str, object], expected_ids: list[str]) -> None:
        """Test that numbers, booleans and timestamps match their text form."""
        rows = _run(_typed_table(), QueryContext(quals=quals, columns=["id"]))

        assert [row["id"] for row in rows] == expected_ids

    @pytest.mark.parametrize(
        "quals",
        [{"amount": "lots"}, {"active": "maybe"}, {"seen": "yesterday"}],
    )
    def test_invalid_typed_qual_raises(self, quals: dict[str, object]) -> None:
        """Test that a qual that cannot be converted is a query error."""
        with pytest.raises(QueryError) as exc_info:
            _ = _run(_typed_table(), QueryContext(quals=quals))

        assert exc_info.value.column == next(iter(quals))
