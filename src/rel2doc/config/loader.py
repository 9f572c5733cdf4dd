"""TOML configuration loader.

Loads ``rel2doc.toml`` from an explicit path or from the current working
directory.
"""

import tomllib
from pathlib import Path

from rel2doc.config.models import (
    CatalogSettings,
    ConverterConfig,
    DatabaseProfile,
    ScriptSettings,
)

CONFIG_FILENAME = "rel2doc.toml"


def load_config(config_path: Path | None = None) -> ConverterConfig:
    """Load converter configuration from TOML file.

    Args:
        config_path: Path to rel2doc.toml (default: ./rel2doc.toml)

    Returns:
        ConverterConfig with all profiles and settings

    Raises:
        FileNotFoundError: If config file doesn't exist
        pydantic.ValidationError: If a section has invalid values
    """
    if config_path is None:
        config_path = Path.cwd() / CONFIG_FILENAME

    if not config_path.exists():
        raise FileNotFoundError(
            f"Converter config not found: {config_path}\n"
            f"Create {CONFIG_FILENAME} with at least one [profiles.<name>] section."
        )

    with open(config_path, "rb") as f:
        data = tomllib.load(f)

    # Parse profiles
    profiles = {}
    for name, profile_data in data.get("profiles", {}).items():
        profiles[name] = DatabaseProfile(**profile_data)

    # Parse catalog settings ("schema" in the file, schema_name in the model)
    catalog_data = dict(data.get("catalog", {}))
    if "schema" in catalog_data:
        catalog_data["schema_name"] = catalog_data.pop("schema")

    return ConverterConfig(
        profiles=profiles,
        catalog=CatalogSettings(**catalog_data),
        script=ScriptSettings(**data.get("script", {})),
    )
