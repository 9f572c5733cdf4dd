"""Pydantic models for converter configuration."""

from pydantic import BaseModel, Field


# ============================================================================
# Configuration Models
# ============================================================================


class DatabaseProfile(BaseModel):
    """Database connection profile from rel2doc.toml."""

    url: str
    description: str = ""
    db_password: str | None = None  # For [YOUR-PASSWORD] placeholder substitution
    provider: str = "postgres"  # Defaults to postgres


class CatalogSettings(BaseModel):
    """Which tables the catalog is built from."""

    schema_name: str = "public"
    table_prefix: str = ""  # naming convention for candidate tables
    tables: list[str] = Field(default_factory=list)  # explicit list overrides the prefix


class ScriptSettings(BaseModel):
    """Script output options."""

    include_indexes: bool = False


class ConverterConfig(BaseModel):
    """Complete configuration from rel2doc.toml."""

    profiles: dict[str, DatabaseProfile]
    catalog: CatalogSettings = Field(default_factory=CatalogSettings)
    script: ScriptSettings = Field(default_factory=ScriptSettings)
