"""Nested document projection from flat joined rows.

A column tree mirrors the dependency tree down to individual columns:

- ``LEAF``: a single column, read from the row by its qualified label
- ``GROUP``: an embedded sub-document or a reference (primary key) group
- ``ARRAY``: a junction or one-to-many table, fetched per row by a lookup
  query and rendered as an array of sub-documents

Top-level documents start with an ``_id`` group nesting the primary key
columns.  Empty leaves, groups and arrays are left out entirely.

Usage:
    projector = DocumentProjector(tree, client)
    columns = projector.columns_for(tree.node("STATE"))
    for row in RowStream(client.stream(query_for_all(tree, root))):
        print(projector.render_document(columns, row))
"""

import logging
from dataclasses import dataclass, field
from enum import Enum

from rel2doc.adapters.base import DatabaseClient
from rel2doc.schema.models import ForeignKeyInfo
from rel2doc.transform.models import TableNode
from rel2doc.transform.query import (
    column_label,
    lookup_params,
    qualifier,
    query_for_junction,
)
from rel2doc.transform.rows import Row, RowStream
from rel2doc.transform.tree import DependencyTree
from rel2doc.transform.values import NULL, render_literal

logger = logging.getLogger(__name__)

ID_FIELD = "_id"


class ColumnKind(str, Enum):
    LEAF = "leaf"
    GROUP = "group"
    ARRAY = "array"


@dataclass
class DocColumn:
    """A node of the column tree.

    Attributes:
        kind: Leaf, group or array.
        name: Field name in the rendered document.
        qualifier: Join path qualifier a leaf is read from.
        inner: Child columns of a group, or the per-item columns of an array.
        sql: Lookup query of an array.
        fk: Array table's foreign key to its parent.
        parent_qualifier: Qualifier the parent key values are read from.
    """

    kind: ColumnKind
    name: str
    qualifier: str = ""
    inner: list["DocColumn"] = field(default_factory=list)
    sql: str = ""
    fk: ForeignKeyInfo | None = None
    parent_qualifier: str = ""

    @property
    def label(self) -> str:
        return column_label(self.qualifier, self.name)


def prepare_columns(
    tree: DependencyTree,
    node: TableNode,
    path: tuple[str, ...] | None = None,
    nested: bool = False,
    visited: tuple[int, ...] | None = None,
) -> list[DocColumn]:
    """Build the column tree for *node*.

    Args:
        tree: Dependency tree the node belongs to.
        node: Table to build columns for.
        path: Join path of the node (default: the node alone).
        nested: ``False`` for a top-level document (adds ``_id``).
        visited: Node ids already on the current path.

    Returns:
        Ordered list of columns: key columns, then the remaining columns in
        catalog order with foreign key columns replaced by their groups,
        then arrays.
    """
    catalog = tree.catalog
    if path is None:
        path = (node.name,)
    if visited is None:
        visited = (node.node_id,)
    node_q = qualifier(path)

    # Foreign key columns replaced by a whole sub-document
    embedded_cols: dict[str, TableNode] = {}
    for child_id in node.embedded:
        if child_id in visited:
            continue
        child = tree.get(child_id)
        fk = catalog.fk(node.name, child.name)
        if fk is not None:
            for col in fk.columns:
                embedded_cols[col] = child

    # Foreign key columns replaced by a reference group
    referenced_cols: dict[str, str] = {}
    for referenced in node.referenced:
        fk = catalog.fk(node.name, referenced)
        if fk is not None:
            for col in fk.columns:
                referenced_cols[col] = referenced

    written: set[str] = set()
    cols: list[DocColumn] = []

    def prepare_single(parent: list[DocColumn], col: str) -> None:
        if col in embedded_cols:
            child = embedded_cols[col]
            if child.name not in written:
                written.add(child.name)
                parent.append(
                    DocColumn(
                        kind=ColumnKind.GROUP,
                        name=child.name,
                        inner=prepare_columns(
                            tree,
                            child,
                            path + (child.name,),
                            nested=True,
                            visited=visited + (child.node_id,),
                        ),
                    )
                )
        elif col in referenced_cols:
            referenced = referenced_cols[col]
            if referenced not in written:
                written.add(referenced)
                ref_q = qualifier(path + (referenced,))
                parent.append(
                    DocColumn(
                        kind=ColumnKind.GROUP,
                        name=referenced,
                        inner=[
                            DocColumn(kind=ColumnKind.LEAF, name=pk, qualifier=ref_q)
                            for pk in catalog.primary_key(referenced)
                        ],
                    )
                )
        else:
            parent.append(DocColumn(kind=ColumnKind.LEAF, name=col, qualifier=node_q))

    pk_parent = cols
    if not nested:
        id_column = DocColumn(kind=ColumnKind.GROUP, name=ID_FIELD)
        cols.append(id_column)
        pk_parent = id_column.inner

    info = catalog.get(node.name)
    if info is not None:
        for pk in info.primary_key:
            prepare_single(pk_parent, pk)
        for col in info.non_key_columns:
            prepare_single(cols, col)

    # Arrays: one-to-many embedded tables and junctions, by name
    array_ids = sorted(
        node.embedded_arrays + node.junctions,
        key=lambda i: tree.get(i).name,
    )
    for child_id in array_ids:
        if child_id in visited:
            continue
        child = tree.get(child_id)
        fk = catalog.fk(child.name, node.name)
        if fk is None:
            continue
        cols.append(
            DocColumn(
                kind=ColumnKind.ARRAY,
                name=child.name,
                inner=prepare_columns(
                    tree,
                    child,
                    (child.name,),
                    nested=True,
                    visited=visited + (child_id,),
                ),
                sql=query_for_junction(tree, child, list(fk.columns)),
                fk=fk,
                parent_qualifier=node_q,
            )
        )

    return cols


class DocumentProjector:
    """Renders rows into document literals.

    Array columns issue their lookup query through *client* for every row
    that needs them; a failing lookup propagates to the caller.

    Args:
        tree: Dependency tree being rendered.
        client: Database client used for lookups.
    """

    def __init__(self, tree: DependencyTree, client: DatabaseClient):
        self._tree = tree
        self._client = client
        self._columns: dict[int, list[DocColumn]] = {}

    def columns_for(self, root: TableNode) -> list[DocColumn]:
        """Return (and cache) the top-level column tree for *root*."""
        if root.node_id not in self._columns:
            self._columns[root.node_id] = prepare_columns(self._tree, root)
        return self._columns[root.node_id]

    def render_document(self, columns: list[DocColumn], row: Row) -> str:
        """Render one row as ``{field: value, ...}``."""
        return "{" + ", ".join(self._render_fields(columns, row)) + "}"

    def render_column(self, column: DocColumn, row: Row) -> str:
        """Render a single column, or ``""`` if it is empty."""
        if column.kind is ColumnKind.ARRAY:
            return self._render_array(column, row)

        if column.kind is ColumnKind.GROUP:
            fields = self._render_fields(column.inner, row)
            if not fields:
                return ""
            return f"{column.name}: {{" + ", ".join(fields) + "}"

        literal = render_literal(row.get(column.label, NULL))
        if not literal:
            return ""
        return f"{column.name}: {literal}"

    def _render_fields(self, columns: list[DocColumn], row: Row) -> list[str]:
        fields = []
        for column in columns:
            rendered = self.render_column(column, row)
            if rendered:
                fields.append(rendered)
        return fields

    def _render_array(self, column: DocColumn, row: Row) -> str:
        params = lookup_params(column.parent_qualifier, column.fk, row)
        if params is None:
            return ""

        items: list[str] = []
        with RowStream(self._client.stream(column.sql, params)) as stream:
            for item_row in stream:
                fields = self._render_fields(column.inner, item_row)
                if fields:
                    items.append("{" + ", ".join(fields) + "}")

        if not items:
            return ""
        logger.debug("Rendered %d %s items", len(items), column.name)
        return f"{column.name}: [" + ", ".join(items) + "]"
