"""Pydantic models for the relational schema catalog.

This module contains catalog-domain models:
- ForeignKeyInfo: positional column correspondence to a referenced table
- TableInfo: ordered columns, primary key, foreign keys, unique keys
- Catalog: all candidate tables of a session, keyed by name

The catalog is built once (see ``rel2doc.schema.catalog.build_catalog``)
and treated as read-only afterwards.
"""

from pydantic import BaseModel, ConfigDict, Field


# ============================================================================
# Table Metadata
# ============================================================================


class ForeignKeyInfo(BaseModel):
    """Foreign key correspondence from a table to a referenced table.

    ``columns[i]`` in the owning table points at ``foreign_columns[i]`` in
    the referenced table.

    Example:
        >>> fk = ForeignKeyInfo(columns=["state_code"], foreign_columns=["code"])
        >>> list(fk.pairs())
        [('state_code', 'code')]
    """

    model_config = ConfigDict(frozen=True)

    columns: list[str] = Field(default_factory=list)
    foreign_columns: list[str] = Field(default_factory=list)

    def pairs(self):
        """Iterate ``(local_column, foreign_column)`` pairs."""
        return zip(self.columns, self.foreign_columns)


class TableInfo(BaseModel):
    """Catalog entry for a single table."""

    model_config = ConfigDict(frozen=True)

    name: str
    columns: list[str] = Field(default_factory=list)  # catalog (ordinal) order
    primary_key: list[str] = Field(default_factory=list)
    foreign_keys: dict[str, ForeignKeyInfo] = Field(default_factory=dict)  # keyed by referenced table
    unique_keys: list[list[str]] = Field(default_factory=list)

    @property
    def non_key_columns(self) -> list[str]:
        """Columns that are not part of the primary key, in catalog order."""
        pk = set(self.primary_key)
        return [col for col in self.columns if col not in pk]


class Catalog(BaseModel):
    """Schema catalog: metadata for every candidate table.

    Example:
        >>> catalog = Catalog.from_tables([
        ...     TableInfo(name="STATE", columns=["code", "name"], primary_key=["code"]),
        ... ])
        >>> catalog.columns("STATE")
        ['code', 'name']
    """

    model_config = ConfigDict(frozen=True)

    tables: dict[str, TableInfo] = Field(default_factory=dict)

    @classmethod
    def from_tables(cls, tables: list[TableInfo]) -> "Catalog":
        """Build a catalog from a list of table entries."""
        return cls(tables={table.name: table for table in tables})

    def __contains__(self, table: str) -> bool:
        return table in self.tables

    def get(self, table: str) -> TableInfo | None:
        """Return the catalog entry for *table*, or ``None``."""
        return self.tables.get(table)

    def columns(self, table: str) -> list[str]:
        info = self.tables.get(table)
        return list(info.columns) if info else []

    def primary_key(self, table: str) -> list[str]:
        info = self.tables.get(table)
        return list(info.primary_key) if info else []

    def fk(self, table: str, foreign_table: str) -> ForeignKeyInfo | None:
        """Return *table*'s foreign key to *foreign_table*, if any."""
        info = self.tables.get(table)
        if info is None:
            return None
        return info.foreign_keys.get(foreign_table)

    @property
    def table_names(self) -> list[str]:
        return sorted(self.tables)
