"""
Table declarations and query execution.

A ``Table`` declares its columns and how to fetch its items:

- ``ListConfig.hydrate`` streams every item (optionally narrowed by quals
  pushed down to the API).
- ``GetConfig.hydrate`` fetches one item by key when the query supplies an
  equality qual for every get key column.
- ``Column.hydrate`` fetches extra data for one row, and only runs when the
  column is part of the query.

``Table.execute`` picks the get or list path, turns each item into a row of
the requested columns, applies equality quals as row filters and hands the
row to the caller's callback until the query limit is reached.

Usage:
    table = Table(
        name="vanta_group",
        description="Groups in the Vanta organization.",
        columns=[Column("id", ColumnType.STRING, "Group ID")],
        list_config=ListConfig(hydrate=list_groups),
        get_config=GetConfig(hydrate=get_group, key_columns=[KeyColumn("id", REQUIRED)]),
    )
"""

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from enum import StrEnum
from typing import Any

from vanta_tables.errors import QueryError, is_not_found_error
from vanta_tables.logging_config import get_logger, log_with_context
from vanta_tables.rest_client import VantaRestClient
from vanta_tables.tables.transforms import (
    Transform,
    TransformData,
    constant,
    default_transform,
    from_value,
    to_json,
)

logger = get_logger(__name__)

Row = dict[str, Any]
RowCallback = Callable[[Row], None]
ListHydrate = Callable[["QueryData"], None]
GetHydrate = Callable[["QueryData"], Any]
ColumnHydrate = Callable[["QueryData", Any], Any]

DEFAULT_MAX_PAGE_SIZE = 100


class ColumnType(StrEnum):
    STRING = "string"
    INT = "int"
    DOUBLE = "double"
    BOOL = "bool"
    TIMESTAMP = "timestamp"
    JSON = "json"


class KeyColumnRequire(StrEnum):
    REQUIRED = "required"
    OPTIONAL = "optional"


REQUIRED = KeyColumnRequire.REQUIRED
OPTIONAL = KeyColumnRequire.OPTIONAL


@dataclass(frozen=True)
class Column:
    """
    Column declaration.

    Attributes:
        name: Column name
        type: Column type reported to the host
        description: Human-readable description
        transform: Value extraction (default: column-name lookup, zero to null)
        hydrate: Per-row fetch whose result the transform reads from
    """

    name: str
    type: ColumnType
    description: str = ""
    transform: Transform | None = None
    hydrate: ColumnHydrate | None = None

    def resolve(self, query_data: "QueryData", item: Any, hydrated: Any = None) -> Any:
        data = TransformData(
            value=hydrated if self.hydrate is not None else item,
            item=item,
            column_name=self.name,
            quals=query_data.context.quals,
        )
        transform = self.transform or (from_value() if self.hydrate is not None else default_transform())
        value = transform(data)
        if self.type is ColumnType.JSON:
            return to_json(value)
        return value


@dataclass(frozen=True)
class KeyColumn:
    """
    A column whose qual is used to fetch data.

    Attributes:
        name: Column name
        require: Whether the qual must be present
        operators: Supported operators (only "=" is pushed down)
        case_insensitive: Compare string values case-insensitively when
            filtering rows
    """

    name: str
    require: KeyColumnRequire = OPTIONAL
    operators: tuple[str, ...] = ("=",)
    case_insensitive: bool = False


@dataclass(frozen=True)
class ListConfig:
    hydrate: ListHydrate
    key_columns: Sequence[KeyColumn] = ()
    max_page_size: int = DEFAULT_MAX_PAGE_SIZE


@dataclass(frozen=True)
class GetConfig:
    hydrate: GetHydrate
    key_columns: Sequence[KeyColumn] = ()


@dataclass
class QueryContext:
    """
    What the host asks of a table.

    Attributes:
        quals: Equality quals keyed by column name
        limit: Maximum rows to return, or None for all
        columns: Requested columns, or None for every column
    """

    quals: dict[str, object] = field(default_factory=dict)
    limit: int | None = None
    columns: list[str] | None = None

    def equals_qual(self, name: str) -> Any:
        return self.quals.get(name)

    def equals_qual_string(self, name: str) -> str | None:
        value = self.quals.get(name)
        if value is None:
            return None
        return str(value)


class QueryData:
    """
    State of one running query, passed to every hydrate function.

    Attributes:
        table: Table being queried
        client: Vanta REST client for the connection
        context: Quals, limit and column projection
        rows_emitted: Rows handed to the callback so far
    """

    def __init__(
        self,
        table: "Table",
        client: VantaRestClient,
        context: QueryContext,
        callback: RowCallback,
        default_page_size: int = DEFAULT_MAX_PAGE_SIZE,
    ) -> None:
        self.table = table
        self.client = client
        self.context = context
        self.rows_emitted: int = 0
        self._callback = callback
        self._default_page_size = default_page_size
        self._columns: list[Column] = table.requested_columns(context.columns)
        # Qual columns are evaluated even when not projected, so rows can be filtered
        self._qual_columns: list[Column] = [table.column(name) for name in context.quals]
        self._typed_quals: dict[str, object] = table.coerce_quals(context.quals)

    def equals_qual(self, name: str) -> Any:
        return self.context.equals_qual(name)

    def equals_qual_string(self, name: str) -> str | None:
        return self.context.equals_qual_string(name)

    @property
    def page_size(self) -> int:
        """Items per API page: the smallest of configured, table and query limits."""
        list_config = self.table.list_config
        max_page_size = list_config.max_page_size if list_config else DEFAULT_MAX_PAGE_SIZE
        size = min(self._default_page_size, max_page_size)
        if self.context.limit is not None and self.context.limit > 0:
            size = min(size, self.context.limit)
        return max(size, 1)

    def rows_remaining(self) -> int | None:
        """Rows still wanted, or None when the query has no limit."""
        if self.context.limit is None:
            return None
        return max(self.context.limit - self.rows_emitted, 0)

    def limit_reached(self) -> bool:
        return self.rows_remaining() == 0

    def stream_item(self, item: Any) -> None:
        """
        Turn an item into a row and emit it if it passes the quals.

        Items streamed after the limit is reached are dropped.
        """
        if self.limit_reached():
            return

        qual_values: Row = {c.name: self._resolve(c, item) for c in self._qual_columns}
        if not self.table.row_matches(qual_values, self._typed_quals):
            return

        row: Row = {}
        for column in self._columns:
            if column.name in qual_values:
                row[column.name] = qual_values[column.name]
            else:
                row[column.name] = self._resolve(column, item)

        self._callback(row)
        self.rows_emitted += 1

    def stream_items(self, items: Any) -> None:
        """Stream items from an iterator until it ends or the limit is reached."""
        for item in items:
            self.stream_item(item)
            if self.limit_reached():
                return

    def _resolve(self, column: Column, item: Any) -> Any:
        hydrated = column.hydrate(self, item) if column.hydrate is not None else None
        return column.resolve(self, item, hydrated)


@dataclass
class Table:
    """
    Table declaration.

    Attributes:
        name: Table name
        description: Human-readable description
        columns: Column declarations in display order
        list_config: How to list every item
        get_config: How to fetch one item by key
    """

    name: str
    description: str
    columns: list[Column]
    list_config: ListConfig | None = None
    get_config: GetConfig | None = None

    def __post_init__(self) -> None:
        self._by_name: dict[str, Column] = {c.name: c for c in self.columns}
        if len(self._by_name) != len(self.columns):
            raise ValueError(f"table {self.name} declares duplicate column names")
        for key_column in self._key_columns():
            if key_column.name not in self._by_name:
                raise ValueError(f"table {self.name} key column {key_column.name} is not a column")

    def _key_columns(self) -> list[KeyColumn]:
        key_columns: list[KeyColumn] = []
        if self.list_config:
            key_columns.extend(self.list_config.key_columns)
        if self.get_config:
            key_columns.extend(self.get_config.key_columns)
        return key_columns

    def column(self, name: str) -> Column:
        """
        Look up a column.

        Raises:
            QueryError: If the table has no such column
        """
        try:
            return self._by_name[name]
        except KeyError:
            raise QueryError(
                f"table {self.name} has no column '{name}'",
                table=self.name,
                column=name,
            ) from None

    def column_names(self) -> list[str]:
        return [c.name for c in self.columns]

    def requested_columns(self, names: list[str] | None) -> list[Column]:
        if not names:
            return list(self.columns)
        return [self.column(name) for name in names]

    def coerce_quals(self, quals: Mapping[str, object]) -> dict[str, object]:
        """
        Convert qual values to the types of their columns.

        Raises:
            QueryError: If a column does not exist or a value cannot be read
                as the column's type
        """
        typed: dict[str, object] = {}
        for name, value in quals.items():
            column = self.column(name)
            if value is None:
                typed[name] = None
                continue
            try:
                typed[name] = coerce_qual(column.type, value)
            except (TypeError, ValueError) as e:
                raise QueryError(
                    f"invalid value for {column.type} column {name}: {e}",
                    table=self.name,
                    column=name,
                ) from e
        return typed

    def row_matches(self, row: Mapping[str, Any], quals: Mapping[str, object]) -> bool:
        """Check a row against equality quals already passed through ``coerce_quals``."""
        case_insensitive = {k.name for k in self._key_columns() if k.case_insensitive}
        for name, expected in quals.items():
            if expected is None:
                continue
            column_type = self._by_name[name].type if name in self._by_name else ColumnType.STRING
            if not _values_equal(row.get(name), expected, column_type, name in case_insensitive):
                return False
        return True

    def _use_get(self, context: QueryContext) -> bool:
        if self.get_config is None or not self.get_config.key_columns:
            return False
        return all(context.quals.get(k.name) is not None for k in self.get_config.key_columns)

    def execute(self, query_data: QueryData) -> int:
        """
        Run a query and stream its rows to the callback.

        Args:
            query_data: Query state created for this table

        Returns:
            Number of rows emitted

        Raises:
            QueryError: If a required key column qual is missing or a
                column does not exist
            VantaApiError: If the API request fails
        """
        context = query_data.context
        if context.limit is not None and context.limit <= 0:
            return 0

        if self.get_config is not None and self._use_get(context):
            try:
                item = self.get_config.hydrate(query_data)
            except Exception as e:
                if not is_not_found_error(e):
                    raise
                log_with_context(
                    logger,
                    "debug",
                    "Item not found, returning no rows",
                    table=self.name,
                    error=str(e),
                )
                item = None
            if item is not None:
                query_data.stream_item(item)
            return query_data.rows_emitted

        if self.list_config is None:
            raise QueryError(
                f"table {self.name} must be queried with a qual on "
                + ", ".join(k.name for k in (self.get_config.key_columns if self.get_config else [])),
                table=self.name,
            )

        for key_column in self.list_config.key_columns:
            if key_column.require is REQUIRED and context.quals.get(key_column.name) is None:
                raise QueryError(
                    f"table {self.name} requires an '=' qual on column {key_column.name}",
                    table=self.name,
                    column=key_column.name,
                )

        self.list_config.hydrate(query_data)
        return query_data.rows_emitted


_TRUE_VALUES = frozenset({"true", "t", "1", "yes"})
_FALSE_VALUES = frozenset({"false", "f", "0", "no"})


def coerce_qual(column_type: ColumnType, value: object) -> object:
    """
    Convert a qual value, usually a string from the host, to a column type.

    BOOL accepts true/false, t/f, 1/0 and yes/no. INT and DOUBLE become
    floats. TIMESTAMP parses ISO 8601, with naive values read as UTC.
    Other types are returned unchanged.

    Raises:
        ValueError: If the value cannot be read as the type
    """
    if column_type is ColumnType.BOOL:
        if isinstance(value, bool):
            return value
        text = str(value).strip().lower()
        if text in _TRUE_VALUES:
            return True
        if text in _FALSE_VALUES:
            return False
        raise ValueError(f"'{value}' is not a boolean")
    if column_type in (ColumnType.INT, ColumnType.DOUBLE):
        if isinstance(value, bool):
            raise ValueError(f"'{value}' is not a number")
        return float(str(value).strip())
    if column_type is ColumnType.TIMESTAMP:
        return _as_utc(value)
    return value


def _as_utc(value: object) -> datetime:
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    else:
        parsed = datetime.fromisoformat(str(value).strip())
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def _is_zero(value: object) -> bool:
    return value is False or value == "" or (isinstance(value, float) and value == 0)


def _values_equal(actual: Any, expected: object, column_type: ColumnType, case_insensitive: bool) -> bool:
    # Default transforms turn zero values into null
    if actual is None:
        return _is_zero(expected)
    try:
        if column_type in (ColumnType.BOOL, ColumnType.INT, ColumnType.DOUBLE):
            return coerce_qual(column_type, actual) == expected
        if column_type is ColumnType.TIMESTAMP:
            return _as_utc(actual) == expected
    except (TypeError, ValueError):
        return False
    left, right = _comparable(actual), _comparable(expected)
    if case_insensitive:
        return left.upper() == right.upper()
    return left == right


def _comparable(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def deprecated_column(name: str, column_type: ColumnType, description: str) -> Column:
    """Declare a column the API no longer populates; it is always null."""
    return Column(name, column_type, f"[DEPRECATED] {description}", transform=constant(None))
