"""
vanta-tables: Vanta compliance data as queryable tables.

vanta-tables reads people, policies, groups, integrations, monitored
computers, vendors, automated tests and audit evidence from the Vanta REST
API and exposes each resource as a table with typed columns. A query names
a table, optional equality quals, a row limit and a column projection; rows
are streamed to a callback as they are fetched.

Key Components:
    - VantaRestClient: Authenticated, paginated access to api.vanta.com
    - ConnectionManager: One shared client per set of credentials
    - Table: Column declarations plus list/get hydrate functions
    - VantaPlugin: Table registry and query entry point

Environment Variables:
    VANTA_CLIENT_ID / VANTA_CLIENT_SECRET: OAuth client credentials
    VANTA_ACCESS_TOKEN: Static bearer token (alternative to OAuth)
    VANTA_BASE_URL: API base URL (default: https://api.vanta.com)
    VANTA_PAGE_SIZE: Items per API page (default: 100)
    LOG_LEVEL: Logging level (default: INFO)

Usage:
    # List available tables
    vanta-tables tables

    # Query a table
    vanta-tables query vanta_monitor --where status=NEEDS_ATTENTION --limit 10

Version: 0.1.0
License: MIT
"""

__version__ = "0.1.0"

__all__ = [
    "__version__",
]
