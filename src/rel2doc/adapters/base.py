"""Database client protocol definition.

Defines the ``DatabaseClient`` Protocol that document generation reads rows
through.  Rows are streamed lazily as mappings from result label to driver
value.

Usage:
    from rel2doc.adapters.base import DatabaseClient

    def dump(client: DatabaseClient) -> None:
        for row in client.stream('SELECT * FROM "STATE" WHERE "code" = :p_0', {"p_0": "SP"}):
            print(row)
        client.close()
"""

from collections.abc import Iterator, Mapping
from typing import Any, Protocol


class DatabaseClient(Protocol):
    """Database client interface that all adapters must implement.

    Only read access is needed: the converter never writes to the source
    database.
    """

    def stream(
        self,
        sql: str,
        params: dict[str, Any] | None = None,
    ) -> Iterator[Mapping[str, Any]]:
        """Execute a query and lazily yield each row.

        Args:
            sql: SQL text with ``:name`` style parameters.
            params: Optional dict of named parameter values.

        Returns:
            Iterator of row mappings keyed by result column label.  The
            iterator is finite and cannot be restarted.

        Raises:
            Exception: If the query cannot be executed.

        Example:
            for row in client.stream("SELECT 1 AS one"):
                assert row["one"] == 1
        """
        ...

    def close(self) -> None:
        """Close database connection and clean up resources."""
        ...
