"""Relational-to-document transformation.

Dependency tree classification, query synthesis, document projection and
script emission.

Usage:
    from rel2doc.transform import DependencyTree, TransformMode, generate_script

    tree = DependencyTree(catalog)
    tree.add("STATE", TransformMode.SIMPLE)
    tree.add("CITY", TransformMode.EMBEDDED)
    result = generate_script(tree, client)
"""

from rel2doc.transform.emitter import ScriptResult, generate_script
from rel2doc.transform.models import RelationKind, TableNode, TransformMode
from rel2doc.transform.projector import DocumentProjector, prepare_columns
from rel2doc.transform.query import query_for_all, query_for_junction
from rel2doc.transform.rows import RowStream
from rel2doc.transform.tree import DependencyTree
from rel2doc.transform.values import RowValue, ValueKind, classify, render_literal

__all__ = [
    "DependencyTree",
    "TableNode",
    "TransformMode",
    "RelationKind",
    "query_for_all",
    "query_for_junction",
    "RowStream",
    "RowValue",
    "ValueKind",
    "classify",
    "render_literal",
    "DocumentProjector",
    "prepare_columns",
    "ScriptResult",
    "generate_script",
]
