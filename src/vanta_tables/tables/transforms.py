"""
Column transforms.

A transform turns the item produced by a hydrate function into the value of
one column. Transforms are built from a source (where the value comes from)
followed by any number of value functions chained with ``.transform()``:

    Column("owner_name", ColumnType.STRING, "Owner display name",
           transform=from_field("owner.display_name"))

    Column("severity", ColumnType.STRING, "Inherent risk level",
           transform=from_field("inherent_risk_level").transform(to_upper))

Sources read from ``TransformData.value``, which is the row's item, or the
result of the column's own hydrate function when it has one.
"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel
from pydantic.alias_generators import to_camel

from vanta_tables.errors import QueryError


@dataclass
class TransformData:
    """
    Input to a column transform.

    Attributes:
        value: Item the column reads from
        item: Row item returned by the list or get hydrate
        column_name: Name of the column being populated
        quals: Equality quals of the running query
    """

    value: Any
    item: Any
    column_name: str
    quals: Mapping[str, object] = field(default_factory=dict)


class Transform:
    """A composable column transform."""

    def __init__(self, source: Callable[[TransformData], Any], name: str = "transform") -> None:
        self._source = source
        self._functions: tuple[Callable[[Any], Any], ...] = ()
        self.name = name

    def transform(self, fn: Callable[[Any], Any]) -> "Transform":
        """
        Return a copy of this transform with ``fn`` applied to its output.

        Args:
            fn: Function of the current value

        Returns:
            New transform; the original is unchanged
        """
        chained = Transform(self._source, self.name)
        chained._functions = (*self._functions, fn)
        return chained

    def null_if_zero(self) -> "Transform":
        return self.transform(null_if_zero_value)

    def __call__(self, data: TransformData) -> Any:
        value = self._source(data)
        for fn in self._functions:
            value = fn(value)
        return value

    def __repr__(self) -> str:
        return f"Transform({self.name}, functions={len(self._functions)})"


# =============================================================================
# Lookup helpers
# =============================================================================


def _lookup(obj: Any, key: str) -> Any:
    if obj is None:
        return None
    if isinstance(obj, Mapping):
        if key in obj:
            return obj[key]
        return obj.get(to_camel(key))
    return getattr(obj, key, None)


def get_path(obj: Any, path: str) -> Any:
    """
    Resolve a dotted path through attributes and mapping keys.

    A missing segment resolves to None instead of raising.

    Args:
        obj: Model, mapping or plain object
        path: Dotted path such as "owner.email_address"

    Returns:
        Value at the path, or None
    """
    value = obj
    for segment in path.split("."):
        value = _lookup(value, segment)
        if value is None:
            return None
    return value


# =============================================================================
# Sources
# =============================================================================


def from_field(path: str) -> Transform:
    """Read a (dotted) attribute or key of the column's value."""
    return Transform(lambda d: get_path(d.value, path), f"from_field({path})")


def from_camel() -> Transform:
    """Read the camelCase key matching the column name from a mapping."""

    def source(d: TransformData) -> Any:
        if isinstance(d.value, Mapping):
            return d.value.get(to_camel(d.column_name))
        if isinstance(d.value, BaseModel):
            dumped = d.value.model_dump(by_alias=True)
            return dumped.get(to_camel(d.column_name))
        return getattr(d.value, to_camel(d.column_name), None)

    return Transform(source, "from_camel")


def from_qual(name: str | None = None) -> Transform:
    """Read the equality qual on ``name`` (default: the column itself)."""
    return Transform(lambda d: d.quals.get(name or d.column_name), f"from_qual({name or ''})")


def from_value() -> Transform:
    """Use the column's value unchanged."""
    return Transform(lambda d: d.value, "from_value")


def from_column_name() -> Transform:
    return Transform(lambda d: _lookup(d.value, d.column_name), "from_column_name")


def constant(value: Any) -> Transform:
    return Transform(lambda _d: value, f"constant({value!r})")


def default_transform() -> Transform:
    """Column-name lookup with zero values mapped to null."""
    return from_column_name().transform(null_if_zero_value)


# =============================================================================
# Value functions
# =============================================================================


def null_if_zero_value(value: Any) -> Any:
    if value is None or value is False:
        return None
    if isinstance(value, (int, float)) and not isinstance(value, bool) and value == 0:
        return None
    if isinstance(value, (str, list, tuple, dict, set)) and len(value) == 0:
        return None
    return value


def unix_to_timestamp(value: Any) -> datetime | None:
    """
    Convert seconds (or milliseconds) since the epoch to an aware datetime.

    Raises:
        QueryError: If the value is not numeric
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    try:
        seconds = float(value)
    except (TypeError, ValueError) as e:
        raise QueryError(f"cannot convert {value!r} to a timestamp") from e
    if seconds > 1e11:
        seconds /= 1000.0
    return datetime.fromtimestamp(seconds, tz=UTC)


def to_upper(value: Any) -> Any:
    if isinstance(value, str):
        return value.upper()
    return value


def to_json(value: Any) -> Any:
    """
    Convert models (and containers of models) to JSON-compatible values.

    Models are dumped with their wire (camelCase) field names.
    """
    if isinstance(value, BaseModel):
        return value.model_dump(by_alias=True, mode="json")
    if isinstance(value, Mapping):
        return {str(k): to_json(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_json(v) for v in value]
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    return value


def ensure_list(value: Any) -> list[Any] | None:
    """Wrap a single value in a list; None stays None."""
    if value is None:
        return None
    if isinstance(value, list):
        return value
    return [value]
