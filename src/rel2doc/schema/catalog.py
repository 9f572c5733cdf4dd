"""Build the schema catalog from an introspection source.

The catalog is built once per session.  A table whose metadata cannot be
fetched is skipped (logged) rather than failing the whole build.

Usage:
    from rel2doc.schema.catalog import build_catalog
    from rel2doc.schema.introspector import SchemaIntrospector

    with SchemaIntrospector(database_url, table_prefix="LE") as introspector:
        catalog = build_catalog(introspector)
"""

import logging
from typing import Protocol

from rel2doc.schema.models import Catalog, ForeignKeyInfo, TableInfo

logger = logging.getLogger(__name__)


class CatalogSource(Protocol):
    """Introspection capabilities required to build a catalog."""

    def list_tables(self) -> list[str]:
        """Return candidate table names."""
        ...

    def get_columns(self, table_name: str) -> list[str]:
        """Return column names in ordinal order."""
        ...

    def get_constraints(
        self, table_name: str
    ) -> tuple[list[str], dict[str, ForeignKeyInfo], list[list[str]]]:
        """Return ``(primary_key, foreign_keys, unique_keys)`` for a table."""
        ...


def build_catalog(source: CatalogSource, tables: list[str] | None = None) -> Catalog:
    """Fetch metadata for every candidate table and assemble a ``Catalog``.

    Args:
        source: Introspection source (e.g. ``SchemaIntrospector``).
        tables: Explicit table list.  When ``None``, uses
            ``source.list_tables()``.

    Returns:
        ``Catalog`` holding every table whose metadata fetch succeeded.

    Raises:
        Exception: Whatever ``source.list_tables()`` raises; only per-table
            failures are tolerated.
    """
    if tables is None:
        tables = source.list_tables()

    entries: list[TableInfo] = []
    for table_name in tables:
        try:
            columns = source.get_columns(table_name)
            primary_key, foreign_keys, unique_keys = source.get_constraints(table_name)
        except Exception as e:
            logger.warning("Skipping table %s: metadata fetch failed: %s", table_name, e)
            continue

        entries.append(
            TableInfo(
                name=table_name,
                columns=columns,
                primary_key=primary_key,
                foreign_keys=foreign_keys,
                unique_keys=unique_keys,
            )
        )

    logger.debug("Catalog built with %d of %d tables", len(entries), len(tables))
    return Catalog.from_tables(entries)
