"""Dependency tree builder.

Classifies tables into a forest of ``TableNode`` objects according to the
mode each table is added with.  For a pair where table A holds a foreign key
to table B:

- B is JUNCTION: never embedded or referenced (junction wiring only)
- A is EMBEDDED and B is an array member: A becomes an array inside B
- B is EMBEDDED: B is joined into A as a single sub-document
- A or B is REFERENCED: A keeps an id-only link to B
- A is EMBEDDED and B is SIMPLE: A becomes an array of sub-documents in B
- otherwise: no relation

Array members are the EMBEDDED tables holding a foreign key to a SIMPLE
table or to another array member, so one-to-many chains nest as arrays of
arrays (STATE > CITY > STREET).

A junction table is hosted by one of the non-junction tables it holds
foreign keys to, once at least two of them have been added.  Only tables
reachable from the root forest can host; roots are preferred, then names.

Every ``add()`` clears all slots and replays the pairwise test over the
whole addition history, and every slot list is kept sorted by table name,
so the resulting forest does not depend on the order tables were added in.

Usage:
    from rel2doc.transform.tree import DependencyTree
    from rel2doc.transform.models import TransformMode

    tree = DependencyTree(catalog)
    tree.add("STATE", TransformMode.SIMPLE)
    tree.add("CITY", TransformMode.REFERENCED)
    print(tree.describe())
"""

import logging
from collections.abc import Iterator

from rel2doc.schema.models import Catalog
from rel2doc.transform.models import Addition, RelationKind, TableNode, TransformMode

logger = logging.getLogger(__name__)


class DependencyTree:
    """Forest of table nodes built from a catalog and a sequence of additions.

    Nodes live in an arena (``list[TableNode]``) and refer to each other by
    index.  The tree is built single-threaded and is read-only once script
    generation starts.
    """

    def __init__(self, catalog: Catalog):
        self.catalog = catalog
        self._nodes: list[TableNode] = []
        self._by_name: dict[str, int] = {}
        self._roots: list[int] = []
        self._history: list[Addition] = []

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def roots(self) -> list[TableNode]:
        """Root forest (SIMPLE and REFERENCED tables), sorted by name."""
        return [self._nodes[i] for i in self._roots]

    @property
    def history(self) -> list[Addition]:
        return list(self._history)

    def __contains__(self, table: str) -> bool:
        return table in self._by_name

    def __len__(self) -> int:
        return len(self._nodes)

    def node(self, table: str) -> TableNode:
        """Return the node for *table*.

        Raises:
            KeyError: If the table was never added.
        """
        return self._nodes[self._by_name[table]]

    def get(self, node_id: int) -> TableNode:
        """Return the node stored at arena index *node_id*."""
        return self._nodes[node_id]

    def classify(self, owner: str, other: str) -> RelationKind:
        """Return how *other* is wired under *owner*."""
        if owner not in self._by_name or other not in self._by_name:
            return RelationKind.NONE
        node = self.node(owner)
        other_id = self._by_name[other]
        if other_id in node.embedded:
            return RelationKind.EMBEDDED
        if other_id in node.embedded_arrays:
            return RelationKind.EMBEDDED_ARRAY
        if other in node.referenced:
            return RelationKind.REFERENCED
        if other_id in node.junctions:
            return RelationKind.JUNCTION
        return RelationKind.NONE

    def walk(self) -> Iterator[tuple[int, TableNode, RelationKind | None]]:
        """Depth-first walk over the forest.

        Yields ``(depth, node, relation_to_parent)``; roots have relation
        ``None``.  A table already on the current path is not entered again,
        so mutually embedded tables do not recurse forever.
        """
        for root in self.roots:
            yield from self._walk(root, 0, None, (root.node_id,))

    def _walk(
        self,
        node: TableNode,
        depth: int,
        relation: RelationKind | None,
        path: tuple[int, ...],
    ) -> Iterator[tuple[int, TableNode, RelationKind | None]]:
        yield depth, node, relation
        slots = (
            (node.embedded, RelationKind.EMBEDDED),
            (node.embedded_arrays, RelationKind.EMBEDDED_ARRAY),
            (node.junctions, RelationKind.JUNCTION),
        )
        for child_ids, kind in slots:
            for child_id in child_ids:
                if child_id in path:
                    continue
                yield from self._walk(
                    self._nodes[child_id], depth + 1, kind, path + (child_id,)
                )

    def describe(self) -> str:
        """Render an indented text preview of the forest.

        Referenced links are prefixed with ``->``, arrays with ``[]`` and
        junctions with ``(N:N)``.
        """
        markers = {
            None: "",
            RelationKind.EMBEDDED: "",
            RelationKind.EMBEDDED_ARRAY: "[] ",
            RelationKind.JUNCTION: "(N:N) ",
        }
        lines: list[str] = []
        for depth, node, relation in self.walk():
            indent = "  " * depth
            lines.append(f"{indent}{markers[relation]}{node.name}")
            for ref in node.referenced:
                lines.append(f"{indent}  -> {ref}")
        return "\n".join(lines)

    # ------------------------------------------------------------------
    # Building
    # ------------------------------------------------------------------

    def add(self, table: str, mode: TransformMode | str) -> TableNode:
        """Add *table* to the tree under *mode*.

        The whole tree is rewired from the addition history; tables without
        any relation are simply left unwired.

        Args:
            table: Table name (should exist in the catalog).
            mode: Transform mode, or its name.

        Returns:
            The newly created node.

        Raises:
            ValueError: If *table* was already added or *mode* is unknown.
        """
        if not isinstance(mode, TransformMode):
            mode = TransformMode.parse(mode)
        if table in self._by_name:
            raise ValueError(f"Table '{table}' already added to the tree")
        if table not in self.catalog:
            logger.warning("Table %s is not in the catalog; it will not be wired", table)

        node = TableNode(node_id=len(self._nodes), name=table, mode=mode)
        self._nodes.append(node)
        self._by_name[table] = node.node_id

        self._history.append(Addition(table=table, mode=mode))

        if mode.is_root:
            self._roots.append(node.node_id)
            self._roots.sort(key=lambda i: self._nodes[i].name)

        self._rebuild()

        logger.debug("Added %s as %s", table, mode.value)
        return node

    def _rebuild(self) -> None:
        """Rewire every node from scratch so relations do not depend on order."""
        for node in self._nodes:
            node.embedded.clear()
            node.embedded_arrays.clear()
            node.referenced.clear()
            node.junctions.clear()

        array_members = self._array_members()
        for owner in self._nodes:
            for target in self._nodes:
                self._wire(owner, target, array_members)

        self._host_junctions()

    def _array_members(self) -> set[int]:
        """Ids of EMBEDDED tables rendered as arrays under their parent."""
        members: set[int] = set()
        changed = True
        while changed:
            changed = False
            for node in self._nodes:
                if node.mode is not TransformMode.EMBEDDED or node.node_id in members:
                    continue
                for other in self._nodes:
                    if other.node_id == node.node_id:
                        continue
                    if self.catalog.fk(node.name, other.name) is None:
                        continue
                    if other.mode is TransformMode.SIMPLE or other.node_id in members:
                        members.add(node.node_id)
                        changed = True
                        break
        return members

    def _wire(self, owner: TableNode, target: TableNode, array_members: set[int]) -> None:
        """Record the relation implied by *owner*'s foreign key to *target*."""
        if owner.node_id == target.node_id:
            return
        if self.catalog.fk(owner.name, target.name) is None:
            return

        if target.mode is TransformMode.JUNCTION:
            return
        if owner.mode is TransformMode.EMBEDDED and target.node_id in array_members:
            self._insert_node(target.embedded_arrays, owner.node_id)
        elif target.mode is TransformMode.EMBEDDED:
            self._insert_node(owner.embedded, target.node_id)
        elif TransformMode.REFERENCED in (owner.mode, target.mode):
            if target.name not in owner.referenced:
                owner.referenced.append(target.name)
                owner.referenced.sort()
        elif owner.mode is TransformMode.EMBEDDED and target.mode is TransformMode.SIMPLE:
            self._insert_node(target.embedded_arrays, owner.node_id)

    def _host_junctions(self) -> None:
        """Attach every junction under one reachable side, roots first."""
        reachable = {node.node_id for _, node, _ in self.walk()}

        junctions = sorted(
            (n for n in self._nodes if n.mode is TransformMode.JUNCTION),
            key=lambda n: n.name,
        )
        for junction in junctions:
            sides = [
                other
                for other in self._nodes
                if other.mode is not TransformMode.JUNCTION
                and other.node_id != junction.node_id
                and self.catalog.fk(junction.name, other.name) is not None
            ]
            if len(sides) < 2:
                continue

            hosts = sorted(
                (side for side in sides if side.node_id in reachable),
                key=lambda side: (not side.is_root, side.name),
            )
            if not hosts:
                logger.warning(
                    "Junction %s links %s but none of them is reachable from a root",
                    junction.name,
                    ", ".join(sorted(side.name for side in sides)),
                )
                continue
            self._insert_node(hosts[0].junctions, junction.node_id)

    def _insert_node(self, slot: list[int], node_id: int) -> None:
        if node_id in slot:
            return
        slot.append(node_id)
        slot.sort(key=lambda i: self._nodes[i].name)
