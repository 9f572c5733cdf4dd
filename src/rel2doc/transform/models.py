"""Dependency tree data model.

- TransformMode: how a table is turned into documents
- RelationKind: classification of a table pair once wired
- TableNode: a node of the dependency forest, stored in the tree's arena
- Addition: one entry of the tree's addition history

Nodes reference each other by arena index (``node_id``), so detaching a
junction and attaching it elsewhere is a list update on the owning nodes.
"""

from dataclasses import dataclass, field
from enum import Enum


class TransformMode(str, Enum):
    """Relational-to-document strategy for a table."""

    SIMPLE = "simple"  # independent top-level collection
    EMBEDDED = "embedded"  # inlined into related documents only
    REFERENCED = "referenced"  # top-level collection, id-only links on relatives
    JUNCTION = "junction"  # N:N link table, array field on one side

    @classmethod
    def parse(cls, value: str) -> "TransformMode":
        """Parse a mode name case-insensitively (``"Embedded"`` -> EMBEDDED)."""
        try:
            return cls(value.strip().lower())
        except ValueError:
            valid = ", ".join(m.value for m in cls)
            raise ValueError(f"Unknown transform mode '{value}'. Valid modes: {valid}") from None

    @property
    def is_root(self) -> bool:
        """True if tables in this mode become top-level collections."""
        return self in (TransformMode.SIMPLE, TransformMode.REFERENCED)


class RelationKind(str, Enum):
    """How two tables ended up related in the tree."""

    EMBEDDED = "embedded"
    EMBEDDED_ARRAY = "embedded_array"
    REFERENCED = "referenced"
    JUNCTION = "junction"
    NONE = "none"


@dataclass
class TableNode:
    """A table in the dependency forest.

    Attributes:
        node_id: Index of this node in the tree's arena.
        name: Table name.
        mode: Mode the table was added with.
        embedded: Node ids joined in as single sub-documents (this table
            holds the foreign key).
        embedded_arrays: Node ids rendered as arrays of sub-documents (the
            child holds a foreign key to this table).
        referenced: Table names linked by primary key only.
        junctions: Node ids of N:N link tables rendered as arrays.
    """

    node_id: int
    name: str
    mode: TransformMode
    embedded: list[int] = field(default_factory=list)
    embedded_arrays: list[int] = field(default_factory=list)
    referenced: list[str] = field(default_factory=list)
    junctions: list[int] = field(default_factory=list)

    @property
    def is_root(self) -> bool:
        return self.mode.is_root


@dataclass(frozen=True)
class Addition:
    """One ``DependencyTree.add()`` call, kept for replay."""

    table: str
    mode: TransformMode
