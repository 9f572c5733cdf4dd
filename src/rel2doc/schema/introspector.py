"""PostgreSQL schema introspection via information_schema.

This module queries the live database to extract the catalog metadata:
- Candidate tables (optionally filtered by a name prefix)
- Column names in ordinal order
- Primary key, foreign key and unique constraints

Foreign keys are returned keyed by referenced table name, with local and
referenced columns paired positionally.

Uses psycopg (v3) for PostgreSQL connections.
"""

import psycopg
from psycopg import Connection

from rel2doc.schema.models import ForeignKeyInfo


class SchemaIntrospector:
    """Introspects PostgreSQL database schema for catalog building.

    Implements the ``CatalogSource`` protocol used by ``build_catalog()``.

    Usage:
        with SchemaIntrospector(database_url, table_prefix="LE") as introspector:
            tables = introspector.list_tables()
            columns = introspector.get_columns(tables[0])
            pks, fks, uniques = introspector.get_constraints(tables[0])
    """

    # Tables to exclude from introspection (system tables)
    EXCLUDED_TABLES = {
        "schema_migrations",
        "pg_stat_statements",
        "spatial_ref_sys",
    }

    def __init__(
        self,
        database_url: str,
        schema_name: str = "public",
        table_prefix: str = "",
        excluded_tables: set[str] | None = None,
    ):
        """Initialize with database connection URL.

        Args:
            database_url: PostgreSQL connection URL
            schema_name: PostgreSQL schema to introspect (default: public)
            table_prefix: Naming convention for candidate tables; only
                tables whose name starts with it are listed
            excluded_tables: Table names to skip (default: EXCLUDED_TABLES)
        """
        self._database_url = database_url
        self._schema_name = schema_name
        self._table_prefix = table_prefix
        self._excluded = (
            excluded_tables if excluded_tables is not None else set(self.EXCLUDED_TABLES)
        )
        self._conn: Connection | None = None

    def __enter__(self) -> "SchemaIntrospector":
        """Context manager entry - opens connection."""
        # Append connect_timeout if not already in URL
        url = self._database_url
        if "connect_timeout" not in url:
            separator = "&" if "?" in url else "?"
            url = f"{url}{separator}connect_timeout=10"

        self._conn = psycopg.connect(url)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit - closes connection."""
        if self._conn:
            self._conn.close()
            self._conn = None

    def _require_connection(self) -> Connection:
        if not self._conn:
            raise RuntimeError("Introspector not connected. Use with statement.")
        return self._conn

    def list_tables(self) -> list[str]:
        """Get candidate table names in schema, ordered by name."""
        conn = self._require_connection()
        query = """
            SELECT table_name
            FROM information_schema.tables
            WHERE table_schema = %s
              AND table_type = 'BASE TABLE'
              AND table_name LIKE %s
            ORDER BY table_name
        """
        pattern = self._table_prefix.replace("%", r"\%").replace("_", r"\_") + "%"
        with conn.cursor() as cur:
            cur.execute(query, (self._schema_name, pattern))
            return [row[0] for row in cur.fetchall() if row[0] not in self._excluded]

    def get_columns(self, table_name: str) -> list[str]:
        """Get column names for a table in ordinal order."""
        conn = self._require_connection()
        query = """
            SELECT column_name
            FROM information_schema.columns
            WHERE table_schema = %s
              AND table_name = %s
            ORDER BY ordinal_position
        """
        with conn.cursor() as cur:
            cur.execute(query, (self._schema_name, table_name))
            return [row[0] for row in cur.fetchall()]

    def get_constraints(
        self, table_name: str
    ) -> tuple[list[str], dict[str, ForeignKeyInfo], list[list[str]]]:
        """Get primary key, foreign keys and unique keys for a table.

        Several foreign key constraints pointing at the same table are merged
        into a single correspondence.

        Returns:
            Tuple of (primary key columns, foreign keys keyed by referenced
            table, unique keys as ordered column lists)
        """
        conn = self._require_connection()
        query = """
            SELECT
                tc.constraint_name,
                tc.constraint_type,
                kcu.column_name,
                rk.table_name AS references_table,
                rk.column_name AS references_column
            FROM information_schema.table_constraints tc
            JOIN information_schema.key_column_usage kcu
                ON tc.constraint_name = kcu.constraint_name
                AND tc.table_schema = kcu.table_schema
                AND tc.table_name = kcu.table_name
            LEFT JOIN information_schema.referential_constraints rc
                ON tc.constraint_name = rc.constraint_name
                AND tc.constraint_schema = rc.constraint_schema
            LEFT JOIN information_schema.key_column_usage rk
                ON rk.constraint_name = rc.unique_constraint_name
                AND rk.constraint_schema = rc.unique_constraint_schema
                AND rk.ordinal_position = kcu.position_in_unique_constraint
            WHERE tc.table_schema = %s
              AND tc.table_name = %s
              AND tc.constraint_type IN ('PRIMARY KEY', 'FOREIGN KEY', 'UNIQUE')
            ORDER BY tc.constraint_name, kcu.ordinal_position
        """
        with conn.cursor() as cur:
            cur.execute(query, (self._schema_name, table_name))
            rows = cur.fetchall()

        primary_key: list[str] = []
        fk_columns: dict[str, tuple[list[str], list[str]]] = {}
        unique_columns: dict[str, list[str]] = {}

        for name, ctype, col_name, ref_table, ref_col in rows:
            if ctype == "PRIMARY KEY":
                primary_key.append(col_name)
            elif ctype == "UNIQUE":
                unique_columns.setdefault(name, []).append(col_name)
            elif ctype == "FOREIGN KEY" and ref_table:
                local, foreign = fk_columns.setdefault(ref_table, ([], []))
                local.append(col_name)
                foreign.append(ref_col)

        foreign_keys = {
            ref_table: ForeignKeyInfo(columns=local, foreign_columns=foreign)
            for ref_table, (local, foreign) in fk_columns.items()
        }
        return primary_key, foreign_keys, list(unique_columns.values())
