"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, shelfctl.toml only contains
overrides. A local setup needs nothing but ``[database] url``.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

# --- shelfctl.toml sections ---


class DatabaseConfig(BaseModel):
    """[database] section."""

    model_config = {"frozen": True}

    url: str = "sqlite+aiosqlite:///shelfctl.db"
    echo: bool = False


class CatalogConfig(BaseModel):
    """[catalog] section."""

    model_config = {"frozen": True}

    default_sort: str = "media.metadata.title"
    sorting_ignore_prefix: bool = False
    default_limit: int = Field(default=50, ge=0)


class ShelvesConfig(BaseModel):
    """[shelves] section."""

    model_config = {"frozen": True}

    default_limit: int = Field(default=10, ge=0)


class ShelfConfig(BaseModel):
    """Root configuration composing all sections."""

    model_config = {"frozen": True}

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    catalog: CatalogConfig = Field(default_factory=CatalogConfig)
    shelves: ShelvesConfig = Field(default_factory=ShelvesConfig)
