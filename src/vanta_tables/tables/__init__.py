"""
Table declarations for the Vanta plugin.

Each module declares one table as ``TABLE``; ``ALL_TABLES`` lists them in
registration order.
"""

from vanta_tables.tables import (
    vanta_computer,
    vanta_evidence,
    vanta_group,
    vanta_integration,
    vanta_monitor,
    vanta_policy,
    vanta_user,
    vanta_vendor,
)
from vanta_tables.tables.base import (
    Column,
    ColumnType,
    GetConfig,
    KeyColumn,
    ListConfig,
    QueryContext,
    QueryData,
    Table,
)

ALL_TABLES: list[Table] = [
    vanta_computer.TABLE,
    vanta_evidence.TABLE,
    vanta_group.TABLE,
    vanta_integration.TABLE,
    vanta_monitor.TABLE,
    vanta_policy.TABLE,
    vanta_user.TABLE,
    vanta_vendor.TABLE,
]

__all__ = [
    "ALL_TABLES",
    "Column",
    "ColumnType",
    "GetConfig",
    "KeyColumn",
    "ListConfig",
    "QueryContext",
    "QueryData",
    "Table",
]
