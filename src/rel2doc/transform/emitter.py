"""Collection script emission.

For every root table of a dependency tree (in forest order) emits::

    /* STATE */
    db.createCollection("STATE")
    db.STATE.insert([
    	{_id: {code: "SP"}, name: "Sao Paulo"},
    	{_id: {code: "RJ"}, name: "Rio de Janeiro"}
    ])

optionally followed by one ``createIndex`` statement per primary/unique key.

A table whose bulk query or lookup fails is aborted and reported in
``ScriptResult.errors``; generation continues with the next root table and
the output of completed tables is kept.

Usage:
    from rel2doc.transform.emitter import generate_script

    result = generate_script(tree, client, include_indexes=True)
    print(result.script)
    for table, error in result.errors.items():
        print(table, error)
"""

import logging

from pydantic import BaseModel, Field

from rel2doc.adapters.base import DatabaseClient
from rel2doc.transform.models import TableNode
from rel2doc.transform.projector import ID_FIELD, DocumentProjector
from rel2doc.transform.query import query_for_all
from rel2doc.transform.rows import RowStream
from rel2doc.transform.tree import DependencyTree

logger = logging.getLogger(__name__)


class TableScriptStats(BaseModel):
    """Per-table generation counters."""

    documents: int = 0
    skipped_rows: int = 0


class ScriptResult(BaseModel):
    """Result of script generation.

    Attributes:
        script: Script text for every table that completed.
        tables: Root tables that completed, in forest order.
        errors: Error message per aborted table.
        stats: Counters per completed table.

    Example:
        >>> result = ScriptResult(script="")
        >>> result.success
        True
    """

    script: str = ""
    tables: list[str] = Field(default_factory=list)
    errors: dict[str, str] = Field(default_factory=dict)
    stats: dict[str, TableScriptStats] = Field(default_factory=dict)

    @property
    def success(self) -> bool:
        """True if no table failed."""
        return not self.errors


def index_statements(tree: DependencyTree, table: str) -> list[str]:
    """Build unique ``createIndex`` statements for *table*'s keys.

    The primary key is indexed through the ``_id`` sub-document fields.
    """
    info = tree.catalog.get(table)
    if info is None:
        return []

    statements = []
    if info.primary_key:
        keys = ", ".join(f'"{ID_FIELD}.{col}": 1' for col in info.primary_key)
        statements.append(f"db.{table}.createIndex({{{keys}}}, {{unique: true}})")
    for unique_key in info.unique_keys:
        keys = ", ".join(f"{col}: 1" for col in unique_key)
        statements.append(f"db.{table}.createIndex({{{keys}}}, {{unique: true}})")
    return statements


def collection_script(
    tree: DependencyTree,
    root: TableNode,
    client: DatabaseClient,
    projector: DocumentProjector | None = None,
    include_indexes: bool = False,
) -> tuple[str, TableScriptStats]:
    """Generate the script block for a single root table.

    Raises:
        Exception: If the bulk query or any lookup query fails.
    """
    if projector is None:
        projector = DocumentProjector(tree, client)

    columns = projector.columns_for(root)
    sql = query_for_all(tree, root)
    logger.debug("Bulk query for %s: %s", root.name, sql)

    with RowStream(client.stream(sql)) as stream:
        documents = [projector.render_document(columns, row) for row in stream]

    lines = [
        f"/* {root.name} */",
        f'db.createCollection("{root.name}")',
        f"db.{root.name}.insert([",
    ]
    if documents:
        lines.append(",\n".join(f"\t{doc}" for doc in documents))
    lines.append("])")

    if include_indexes:
        lines.extend(index_statements(tree, root.name))

    stats = TableScriptStats(documents=len(documents), skipped_rows=stream.skipped)
    return "\n".join(lines) + "\n", stats


def generate_script(
    tree: DependencyTree,
    client: DatabaseClient,
    include_indexes: bool = False,
) -> ScriptResult:
    """Generate the collection script for every root table.

    Args:
        tree: Dependency tree (read-only from here on).
        client: Database client to read rows through.
        include_indexes: Append ``createIndex`` statements per table.

    Returns:
        ``ScriptResult`` with the script of completed tables and the error
        of each aborted one.
    """
    result = ScriptResult()
    projector = DocumentProjector(tree, client)
    blocks: list[str] = []

    for root in tree.roots:
        try:
            block, stats = collection_script(
                tree, root, client, projector=projector, include_indexes=include_indexes
            )
        except Exception as e:
            logger.error("Generation for %s aborted: %s", root.name, e)
            result.errors[root.name] = str(e)
            continue

        blocks.append(block)
        result.tables.append(root.name)
        result.stats[root.name] = stats
        logger.info("Generated %d documents for %s", stats.documents, root.name)

    result.script = "\n".join(blocks)
    return result
