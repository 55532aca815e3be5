"""
Plugin entry point: table registry and query execution.

``VantaPlugin`` is what a host talks to. It resolves table names, obtains
the shared REST client for the configured connection and runs the query,
streaming rows to the host's callback.

Usage:
    from vanta_tables.plugin import VantaPlugin
    from vanta_tables.tables.base import QueryContext

    plugin = VantaPlugin()
    count = plugin.query(
        "vanta_user",
        QueryContext(quals={"employment_status": "CURRENT"}, limit=10),
        print,
    )
"""

import time

from vanta_tables.config import Settings, get_settings
from vanta_tables.connection import ConnectionManager
from vanta_tables.errors import QueryError, VantaTablesError
from vanta_tables.logging_config import QueryLogContext, get_logger, log_with_context
from vanta_tables.tables import ALL_TABLES
from vanta_tables.tables.base import QueryContext, QueryData, Row, RowCallback, Table

logger = get_logger(__name__)

PLUGIN_NAME = "vanta"

TABLES: dict[str, Table] = {table.name: table for table in ALL_TABLES}


class VantaPlugin:
    """
    Query interface over the Vanta tables.

    Attributes:
        connection_manager: Cache of REST clients shared across queries
    """

    name: str = PLUGIN_NAME

    def __init__(
        self,
        settings: Settings | None = None,
        connection_manager: ConnectionManager | None = None,
    ) -> None:
        """
        Initialize the plugin.

        Args:
            settings: Connection settings (default: loaded from environment
                on first query)
            connection_manager: Client cache (default: a new one)
        """
        self._settings: Settings | None = settings
        self.connection_manager: ConnectionManager = (
            connection_manager if connection_manager is not None else ConnectionManager()
        )

    @property
    def settings(self) -> Settings:
        if self._settings is None:
            self._settings = get_settings()
        return self._settings

    def tables(self) -> list[Table]:
        """Return every table, sorted by name."""
        return sorted(TABLES.values(), key=lambda t: t.name)

    def table(self, name: str) -> Table:
        """
        Look up a table by name.

        Raises:
            QueryError: If no table has this name
        """
        table = TABLES.get(name)
        if table is None:
            raise QueryError(
                f"unknown table '{name}'; available tables: {', '.join(sorted(TABLES))}",
                table=name,
            )
        return table

    def query(self, table_name: str, context: QueryContext, callback: RowCallback) -> int:
        """
        Run a query and stream rows to ``callback``.

        Args:
            table_name: Table to query
            context: Quals, limit and column projection
            callback: Called once per row, in API order

        Returns:
            Number of rows emitted

        Raises:
            QueryError: For unknown tables or columns and missing required quals
            ConfigurationError: If no credentials are configured
            VantaApiError: If a Vanta API request fails
        """
        table = self.table(table_name)

        with QueryLogContext():
            log_with_context(
                logger,
                "info",
                "Starting query",
                table=table.name,
                quals=sorted(context.quals),
                limit=context.limit,
            )
            start = time.monotonic()

            try:
                client = self.connection_manager.get_client(self.settings)
                query_data = QueryData(
                    table,
                    client,
                    context,
                    callback,
                    default_page_size=self.settings.page_size,
                )
                rows = table.execute(query_data)
            except VantaTablesError as e:
                log_with_context(
                    logger,
                    "error",
                    "Query failed",
                    table=table.name,
                    error=str(e),
                    error_type=type(e).__name__,
                    retryable=e.retryable,
                )
                raise

            log_with_context(
                logger,
                "info",
                "Query completed",
                table=table.name,
                rows=rows,
                duration_ms=round((time.monotonic() - start) * 1000, 1),
            )
            return rows

    def rows(self, table_name: str, context: QueryContext | None = None) -> list[Row]:
        """Run a query and collect its rows into a list."""
        collected: list[Row] = []
        _ = self.query(table_name, context or QueryContext(), collected.append)
        return collected
