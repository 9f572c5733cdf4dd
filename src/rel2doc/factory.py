"""Database client and catalog factory.

Resolves the active profile from ``rel2doc.toml`` and builds the objects a
conversion session needs:

- ``get_adapter()``: ``SQLAdapter`` for reading rows
- ``load_catalog()``: schema ``Catalog`` introspected from the same profile

Profile selection:
1. Explicit ``profile_name`` argument
2. ``{env_prefix}DB_PROFILE`` environment variable
3. Raise ``ProfileNotFoundError``
"""

import logging
import os
from pathlib import Path
from urllib.parse import quote

from rel2doc.adapters.sql import SQLAdapter
from rel2doc.config.loader import load_config
from rel2doc.config.models import ConverterConfig, DatabaseProfile
from rel2doc.schema.catalog import build_catalog
from rel2doc.schema.introspector import SchemaIntrospector
from rel2doc.schema.models import Catalog

logger = logging.getLogger(__name__)


class ProfileNotFoundError(Exception):
    """Raised when no database profile is configured."""

    pass


# ============================================================================
# Profile Resolution
# ============================================================================


def get_active_profile_name(env_prefix: str = "") -> str:
    """Get active profile name from the environment.

    Args:
        env_prefix: Prefix for the variable (``"APP_"`` reads
            ``APP_DB_PROFILE``).

    Returns:
        Profile name

    Raises:
        ProfileNotFoundError: If the variable is unset or empty
    """
    var_name = f"{env_prefix}DB_PROFILE"
    env_profile = os.environ.get(var_name)
    if env_profile:
        return env_profile

    raise ProfileNotFoundError(
        "No database profile configured.\n"
        f"Run: {var_name}=<name> rel2doc <command>  (or pass --profile)"
    )


def get_profile(
    profile_name: str | None = None,
    env_prefix: str = "",
    config: ConverterConfig | None = None,
    config_path: Path | None = None,
) -> tuple[str, DatabaseProfile]:
    """Get profile name and configuration.

    Returns:
        Tuple of (profile_name, DatabaseProfile)

    Raises:
        ProfileNotFoundError: If no profile is selected
        FileNotFoundError: If rel2doc.toml does not exist
        KeyError: If the profile is not defined in rel2doc.toml
    """
    if profile_name is None:
        profile_name = get_active_profile_name(env_prefix)
    if config is None:
        config = load_config(config_path)

    if profile_name not in config.profiles:
        raise KeyError(
            f"Profile '{profile_name}' not found in rel2doc.toml.\n"
            f"Available profiles: {', '.join(config.profiles.keys())}"
        )

    return profile_name, config.profiles[profile_name]


def resolve_url(profile: DatabaseProfile) -> str:
    """Resolve profile URL with password substitution.

    Args:
        profile: Database profile from config

    Returns:
        Connection URL with password substituted
    """
    url = profile.url
    if profile.db_password and "[YOUR-PASSWORD]" in url:
        url = url.replace("[YOUR-PASSWORD]", quote(profile.db_password, safe=""))
    return url


# ============================================================================
# Factories
# ============================================================================


def get_adapter(
    profile_name: str | None = None,
    env_prefix: str = "",
    config: ConverterConfig | None = None,
    config_path: Path | None = None,
) -> SQLAdapter:
    """Create an ``SQLAdapter`` for the selected profile.

    Example:
        >>> adapter = get_adapter("local")
        >>> rows = list(adapter.stream("SELECT 1 AS one"))
    """
    name, profile = get_profile(profile_name, env_prefix, config, config_path)
    logger.debug("Creating adapter for profile %s", name)
    return SQLAdapter(database_url=resolve_url(profile))


def load_catalog(
    profile_name: str | None = None,
    env_prefix: str = "",
    config: ConverterConfig | None = None,
    config_path: Path | None = None,
) -> Catalog:
    """Introspect the selected profile's database into a ``Catalog``.

    Uses the ``[catalog]`` settings for the schema, the table prefix and an
    optional explicit table list.

    Raises:
        ProfileNotFoundError, FileNotFoundError, KeyError: See ``get_profile()``.
        psycopg.OperationalError: If the database cannot be reached.
    """
    if config is None:
        config = load_config(config_path)
    name, profile = get_profile(profile_name, env_prefix, config)
    settings = config.catalog

    logger.debug("Introspecting profile %s (schema %s)", name, settings.schema_name)
    with SchemaIntrospector(
        resolve_url(profile),
        schema_name=settings.schema_name,
        table_prefix=settings.table_prefix,
    ) as introspector:
        return build_catalog(introspector, tables=settings.tables or None)
