"""Schema introspection and the catalog built from it.

Usage:
    from rel2doc.schema import SchemaIntrospector, build_catalog
    from rel2doc.schema import Catalog, TableInfo, ForeignKeyInfo
"""

from rel2doc.schema.catalog import CatalogSource, build_catalog
from rel2doc.schema.introspector import SchemaIntrospector
from rel2doc.schema.models import Catalog, ForeignKeyInfo, TableInfo

__all__ = [
    "build_catalog",
    "CatalogSource",
    "SchemaIntrospector",
    "Catalog",
    "TableInfo",
    "ForeignKeyInfo",
]
