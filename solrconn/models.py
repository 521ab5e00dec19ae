"""Value objects shared across the registry, stores and site collaborators."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

Scheme = Literal["http", "https"]

KEY_SEPARATOR = "|"


def connection_key(root_page_id: int, language_id: int) -> str:
    """Return the table key for a root page / language pair."""

    return f"{root_page_id}{KEY_SEPARATOR}{language_id}"


def normalize_path(path: str) -> str:
    """Wrap a core path in exactly one leading and trailing slash."""

    return "/" + path.strip("/") + "/"


class SolrSetup(BaseModel):
    """Endpoint settings found in a site's ``plugin.tx_solr.solr`` branch."""

    model_config = ConfigDict(frozen=True)

    scheme: Scheme = "http"
    host: str = "localhost"
    port: int = Field(default=8983, ge=1, le=65535)
    path: str = "/solr/"
    username: str = ""
    password: str = ""


class SiteSetup(BaseModel):
    """Effective search configuration of one root page in one language."""

    model_config = ConfigDict(frozen=True)

    solr: SolrSetup | None = None
    enabled: bool = False


class ConnectionConfig(BaseModel):
    """A discovered connection configuration as persisted in the registry."""

    model_config = ConfigDict(frozen=True)

    root_page_title: str
    root_page_id: int
    scheme: Scheme = "http"
    host: str
    port: int = Field(ge=1, le=65535)
    path: str = "/solr/"
    username: str = ""
    password: str = ""
    label: str = ""
    language_id: int = Field(default=0, ge=0)

    @field_validator("path")
    @classmethod
    def _normalize_path(cls, value: str) -> str:
        return normalize_path(value)

    @property
    def connection_key(self) -> str:
        return connection_key(self.root_page_id, self.language_id)

    def signature_fields(self) -> tuple[str, ...]:
        """Stored values identifying the entry, language excluded."""

        return tuple(
            str(value)
            for name, value in self.model_dump().items()
            if name != "language_id"
        )


@dataclass(frozen=True, slots=True)
class RootPage:
    """Partial page record of a site root (uid and title)."""

    uid: int
    title: str


@dataclass(frozen=True, slots=True)
class Site:
    """A website, identified by its root page."""

    root_page_id: int
    title: str = ""


__all__ = [
    "ConnectionConfig",
    "KEY_SEPARATOR",
    "RootPage",
    "Scheme",
    "Site",
    "SiteSetup",
    "SolrSetup",
    "connection_key",
    "normalize_path",
]
