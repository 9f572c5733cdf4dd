"""Configuration management: profiles, TOML loading, and config models.

Usage:
    >>> from rel2doc.config import load_config, DatabaseProfile, ConverterConfig
"""

from rel2doc.config.loader import load_config
from rel2doc.config.models import (
    CatalogSettings,
    ConverterConfig,
    DatabaseProfile,
    ScriptSettings,
)

__all__ = [
    "load_config",
    "ConverterConfig",
    "DatabaseProfile",
    "CatalogSettings",
    "ScriptSettings",
]
