"""rel2doc: Relational schema to document collection converter.

Classifies relational tables into a document model (embedded, referenced,
many-to-many junction arrays) and emits a script that creates and populates
the document collections.

Usage:
    from rel2doc import ConversionSession, get_adapter, load_catalog
    from rel2doc import DependencyTree, TransformMode, generate_script
"""

__version__ = "0.1.0"

# Adapters
from rel2doc.adapters.base import DatabaseClient
from rel2doc.adapters.sql import SQLAdapter

# Config
from rel2doc.config.loader import load_config
from rel2doc.config.models import ConverterConfig, DatabaseProfile

# Factory
from rel2doc.factory import (
    ProfileNotFoundError,
    get_adapter,
    load_catalog,
    resolve_url,
)

# Schema
from rel2doc.schema.catalog import build_catalog
from rel2doc.schema.models import Catalog, ForeignKeyInfo, TableInfo

# Transform
from rel2doc.transform.emitter import ScriptResult, generate_script
from rel2doc.transform.models import TransformMode
from rel2doc.transform.tree import DependencyTree

# Session
from rel2doc.session import ConversionSession, TableSelection

__all__ = [
    # Adapters
    "DatabaseClient",
    "SQLAdapter",
    # Config
    "load_config",
    "ConverterConfig",
    "DatabaseProfile",
    # Factory
    "get_adapter",
    "load_catalog",
    "ProfileNotFoundError",
    "resolve_url",
    # Schema
    "build_catalog",
    "Catalog",
    "TableInfo",
    "ForeignKeyInfo",
    # Transform
    "DependencyTree",
    "TransformMode",
    "generate_script",
    "ScriptResult",
    # Session
    "ConversionSession",
    "TableSelection",
]
