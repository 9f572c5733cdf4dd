"""Conversion session: the state a front-end works against.

A ``ConversionSession`` owns the catalog, the dependency tree and the
database client of one conversion.  Front-ends (the CLI, or anything else)
keep a session object instead of module-level state.

Usage:
    from rel2doc.session import ConversionSession

    session = ConversionSession(catalog, adapter)
    session.add("STATE", "simple")
    session.add("CITY", "embedded")
    result = session.generate(include_indexes=True)
    session.close()
"""

from pydantic import BaseModel

from rel2doc.adapters.base import DatabaseClient
from rel2doc.schema.models import Catalog
from rel2doc.transform.emitter import ScriptResult, generate_script
from rel2doc.transform.models import TableNode, TransformMode
from rel2doc.transform.tree import DependencyTree


class TableSelection(BaseModel):
    """A table and the mode it should be added with."""

    table: str
    mode: TransformMode

    @classmethod
    def parse(cls, value: str) -> "TableSelection":
        """Parse ``"TABLE:mode"`` (mode defaults to simple).

        Example:
            >>> TableSelection.parse("CITY:embedded").mode
            <TransformMode.EMBEDDED: 'embedded'>
        """
        table, _, mode = value.partition(":")
        table = table.strip()
        if not table:
            raise ValueError(f"Missing table name in '{value}'")
        return cls(table=table, mode=TransformMode.parse(mode or TransformMode.SIMPLE.value))


class ConversionSession:
    """Catalog, dependency tree and client of a single conversion.

    Args:
        catalog: Schema catalog (read-only).
        client: Database client rows are read through.
    """

    def __init__(self, catalog: Catalog, client: DatabaseClient):
        self.catalog = catalog
        self.client = client
        self.tree = DependencyTree(catalog)

    def add(self, table: str, mode: TransformMode | str = TransformMode.SIMPLE) -> TableNode:
        """Add *table* to the dependency tree."""
        return self.tree.add(table, mode)

    def add_all(self, selections: list[TableSelection]) -> None:
        """Add tables in the given order."""
        for selection in selections:
            self.tree.add(selection.table, selection.mode)

    def preview(self) -> str:
        """Text preview of the current dependency tree."""
        return self.tree.describe()

    def generate(self, include_indexes: bool = False) -> ScriptResult:
        """Generate the collection script for every root table."""
        return generate_script(self.tree, self.client, include_indexes=include_indexes)

    def close(self) -> None:
        self.client.close()
