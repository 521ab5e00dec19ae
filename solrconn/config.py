"""App configuration loading helpers."""

from __future__ import annotations

import logging
from pathlib import Path

import tomllib

from pydantic import BaseModel, Field, ValidationError

from .models import Scheme, SolrSetup

LOG = logging.getLogger(__name__)

CONFIG_FILE = Path.home() / ".config" / "solrconn" / "config.toml"


class RegistrySettings(BaseModel):
    """Where and how the discovered configuration table is persisted."""

    namespace: str = "tx_solr"
    key: str = "servers"
    store_path: Path | None = None
    filter_duplicates: bool = True


class PageRecord(BaseModel):
    """Page row of the static site tree."""

    uid: int
    pid: int = 0
    title: str = ""
    is_siteroot: bool = False
    deleted: bool = False
    hidden: bool = False


class LanguageRecord(BaseModel):
    """System language row of the static site tree."""

    uid: int
    title: str
    hidden: bool = False


class LanguageOverride(BaseModel):
    """Per-language deviations from a site's Solr setup."""

    enabled: bool | None = None
    scheme: Scheme | None = None
    host: str | None = None
    port: int | None = Field(default=None, ge=1, le=65535)
    path: str | None = None
    username: str | None = None
    password: str | None = None


class SiteSolrConfig(BaseModel):
    """Search configuration attached to one root page."""

    root_page_id: int
    enabled: bool = True
    solr: SolrSetup | None = None
    languages: dict[int, LanguageOverride] = Field(default_factory=dict)


class SiteTreeConfig(BaseModel):
    """Pages, languages and search setups used by the static collaborators."""

    pages: list[PageRecord] = Field(default_factory=list)
    languages: list[LanguageRecord] = Field(default_factory=list)
    sites: list[SiteSolrConfig] = Field(default_factory=list)


class AppConfig(BaseModel):
    """Shape of the application configuration file."""

    registry: RegistrySettings = Field(default_factory=RegistrySettings)
    default_solr: SolrSetup | None = None
    site_tree: SiteTreeConfig = Field(default_factory=SiteTreeConfig)

    def with_store_path(self, path: Path | None) -> AppConfig:
        """Return a copy persisting the registry at ``path``."""

        registry = self.registry.model_copy(update={"store_path": path})
        return self.model_copy(update={"registry": registry})


def load_config(path: Path | None = None) -> AppConfig:
    """Load configuration from disk; fall back to defaults if missing or invalid."""

    config_path = path or CONFIG_FILE
    try:
        with config_path.open("rb") as handle:
            raw = tomllib.load(handle)
    except FileNotFoundError:
        return AppConfig()
    except (tomllib.TOMLDecodeError, OSError) as exc:
        LOG.warning("Ignoring unreadable config file", extra={"path": str(config_path), "error": str(exc)})
        return AppConfig()

    try:
        return AppConfig.model_validate(raw)
    except ValidationError as exc:
        LOG.warning("Ignoring invalid config file", extra={"path": str(config_path), "error": str(exc)})
        return AppConfig()


__all__ = [
    "AppConfig",
    "CONFIG_FILE",
    "LanguageOverride",
    "LanguageRecord",
    "PageRecord",
    "RegistrySettings",
    "SiteSolrConfig",
    "SiteTreeConfig",
    "load_config",
]
