"""SQL synthesis for document generation.

Two kinds of queries are produced:

1. ``query_for_all()``: one SELECT per root table that LEFT JOINs every
   embedded descendant (all columns) and every referenced table (primary
   key columns only).
2. ``query_for_junction()``: a parameterized SELECT for a junction or
   one-to-many array table, filtered on the columns pointing back at the
   parent row.  It is issued once per parent row instead of being joined,
   since one parent row can match any number of rows.

Every selected column is labelled ``"<qualifier>.<column>"`` where the
qualifier is the join path from the query's root table (``STATE``,
``STATE/CITY``, ...).  The same table reached through two paths therefore
keeps two sets of columns.  All identifiers are double-quoted.

Usage:
    from rel2doc.transform.query import query_for_all, query_for_junction

    sql = query_for_all(tree, tree.node("STATE"))
    # SELECT "STATE"."code" AS "STATE.code", ... FROM "STATE" LEFT JOIN ...
"""

from collections.abc import Mapping
from typing import Any

from rel2doc.schema.models import ForeignKeyInfo
from rel2doc.transform.models import TableNode
from rel2doc.transform.tree import DependencyTree
from rel2doc.transform.values import RowValue

PATH_SEPARATOR = "/"


def quote_ident(name: str) -> str:
    """Quote an SQL identifier with double quotes."""
    return '"' + name.replace('"', '""') + '"'


def qualifier(path: tuple[str, ...]) -> str:
    """Join a table path into a column qualifier (``STATE/CITY``)."""
    return PATH_SEPARATOR.join(path)


def column_label(qualifier_: str, column: str) -> str:
    """Label under which a column appears in a result row."""
    return f"{qualifier_}.{column}"


def _select_columns(qualifier_: str, columns: list[str]) -> list[str]:
    return [
        f"{quote_ident(qualifier_)}.{quote_ident(col)} AS {quote_ident(column_label(qualifier_, col))}"
        for col in columns
    ]


def _join(table: str, parent_q: str, child_q: str, fk: ForeignKeyInfo) -> str:
    conditions = " AND ".join(
        f"{quote_ident(parent_q)}.{quote_ident(local)} = {quote_ident(child_q)}.{quote_ident(foreign)}"
        for local, foreign in fk.pairs()
    )
    return f" LEFT JOIN {quote_ident(table)} AS {quote_ident(child_q)} ON {conditions}"


def _from(table: str) -> str:
    # Root qualifier equals the table name, so no alias is needed
    return f" FROM {quote_ident(table)}"


def _collect(
    tree: DependencyTree,
    node: TableNode,
    path: tuple[str, ...],
    visited: tuple[int, ...],
    columns: list[str],
    joins: list[str],
) -> None:
    """Append the select list and joins for *node* and its joined children."""
    catalog = tree.catalog
    node_q = qualifier(path)
    columns.extend(_select_columns(node_q, catalog.columns(node.name)))

    for child_id in node.embedded:
        if child_id in visited:
            continue
        child = tree.get(child_id)
        fk = catalog.fk(node.name, child.name)
        if fk is None:
            continue
        child_path = path + (child.name,)
        joins.append(_join(child.name, node_q, qualifier(child_path), fk))
        _collect(tree, child, child_path, visited + (child_id,), columns, joins)

    for referenced in node.referenced:
        fk = catalog.fk(node.name, referenced)
        if fk is None:
            continue
        ref_q = qualifier(path + (referenced,))
        columns.extend(_select_columns(ref_q, catalog.primary_key(referenced)))
        joins.append(_join(referenced, node_q, ref_q, fk))


def query_for_all(tree: DependencyTree, root: TableNode) -> str:
    """Build the bulk query for *root* and its embedded/referenced tables.

    LEFT JOIN keeps parent rows whose related rows are absent.
    """
    columns: list[str] = []
    joins: list[str] = []
    _collect(tree, root, (root.name,), (root.node_id,), columns, joins)
    return "SELECT " + ", ".join(columns) + _from(root.name) + "".join(joins)


def query_for_junction(
    tree: DependencyTree,
    node: TableNode,
    local_columns: list[str],
) -> str:
    """Build the per-parent-row lookup query for a junction or array table.

    Selects all columns of *node* (plus its own joined children) where each
    of *local_columns* equals the parameter ``:p_<i>``.

    Example:
        sql = query_for_junction(tree, tree.node("VOTES"), ["voter_id"])
        # SELECT "VOTES"."voter_id" AS "VOTES.voter_id", ...
        #   FROM "VOTES" WHERE "VOTES"."voter_id" = :p_0
    """
    columns: list[str] = []
    joins: list[str] = []
    _collect(tree, node, (node.name,), (node.node_id,), columns, joins)

    conditions = " AND ".join(
        f"{quote_ident(node.name)}.{quote_ident(col)} = :p_{i}"
        for i, col in enumerate(local_columns)
    )
    where_clause = f" WHERE {conditions}" if conditions else ""
    return "SELECT " + ", ".join(columns) + _from(node.name) + "".join(joins) + where_clause


def lookup_params(
    parent_qualifier: str,
    fk: ForeignKeyInfo,
    row: Mapping[str, RowValue],
) -> dict[str, Any] | None:
    """Collect the parent row's key values for ``query_for_junction()``.

    *fk* is the child table's foreign key to the parent; its
    ``foreign_columns`` are read from the parent's qualified labels.

    Returns:
        ``{"p_0": value, ...}``, or ``None`` when any key value is null
        (no child row can match).
    """
    params: dict[str, Any] = {}
    for i, foreign in enumerate(fk.foreign_columns):
        value = row.get(column_label(parent_qualifier, foreign))
        if value is None or value.is_empty:
            return None
        params[f"p_{i}"] = value.value
    return params
