"""Collaborators describing the CMS site tree, plus a static implementation."""

from __future__ import annotations

import logging
from typing import Protocol, Sequence, runtime_checkable

from .config import AppConfig, PageRecord, SiteSolrConfig, SiteTreeConfig
from .models import RootPage, SiteSetup, SolrSetup

LOG = logging.getLogger(__name__)


@runtime_checkable
class PageRepository(Protocol):
    """Page lookups needed to find site roots."""

    def get_root_page_id(self, page_id: int, mount_params: str = "") -> int:
        """Resolve a page to the uid of its site root (0 when there is none)."""

    def get_root_pages(self) -> Sequence[RootPage]:
        """Return every active site root page."""

    def get_root_page(self, root_page_id: int) -> RootPage:
        """Return the record of a single root page."""


@runtime_checkable
class LanguageRepository(Protocol):
    """System language lookups."""

    def get_active_language_ids(self) -> Sequence[int]:
        """Ids of all languages that are not hidden."""

    def get_language_name(self, language_id: int) -> str | None:
        """Title of a language record, ``None`` when there is no record."""


@runtime_checkable
class ConfigurationEvaluator(Protocol):
    """Evaluates a site's inherited search configuration for one language."""

    def evaluate(self, root_page: RootPage, language_id: int) -> SiteSetup:
        """Return the Solr branch and enabled flag effective for the pair."""


@runtime_checkable
class DefaultConfigurationProvider(Protocol):
    """Global endpoint used when a connection is requested without a host."""

    def get_default_setup(self) -> SolrSetup:
        """Return the ambient Solr setup."""


def parse_mount_params(mount_params: str) -> dict[int, int]:
    """Parse ``"<mounted>-<mountpoint>,..."`` into a mounted → mount point map."""

    mounts: dict[int, int] = {}
    for chunk in mount_params.split(","):
        chunk = chunk.strip()
        if not chunk:
            continue
        mounted, _, mount_point = chunk.partition("-")
        try:
            mounts[int(mounted)] = int(mount_point)
        except ValueError:
            LOG.debug("Ignoring malformed mount parameter", extra={"mount": chunk})
    return mounts


class StaticSiteTree:
    """Page, language and configuration collaborators backed by config data."""

    def __init__(self, tree: SiteTreeConfig) -> None:
        self._pages: dict[int, PageRecord] = {page.uid: page for page in tree.pages}
        self._page_order: tuple[int, ...] = tuple(page.uid for page in tree.pages)
        self._languages = tuple(tree.languages)
        self._sites: dict[int, SiteSolrConfig] = {site.root_page_id: site for site in tree.sites}

    @classmethod
    def from_config(cls, config: AppConfig) -> StaticSiteTree:
        return cls(config.site_tree)

    def get_root_page_id(self, page_id: int, mount_params: str = "") -> int:
        mounts = parse_mount_params(mount_params)
        visited: set[int] = set()
        current = page_id
        while current > 0 and current not in visited:
            visited.add(current)
            page = self._page(current)
            if page.is_siteroot:
                return page.uid
            if current in mounts:
                current = mounts[current]
                continue
            current = page.pid
        return 0

    def get_root_pages(self) -> tuple[RootPage, ...]:
        return tuple(
            RootPage(uid=page.uid, title=page.title)
            for page in (self._pages[uid] for uid in self._page_order)
            if page.is_siteroot and not page.deleted and not page.hidden and page.pid != -1
        )

    def get_root_page(self, root_page_id: int) -> RootPage:
        page = self._page(root_page_id)
        return RootPage(uid=page.uid, title=page.title)

    def get_active_language_ids(self) -> tuple[int, ...]:
        return tuple(language.uid for language in self._languages if not language.hidden)

    def get_language_name(self, language_id: int) -> str | None:
        for language in self._languages:
            if language.uid == language_id:
                return language.title
        return None

    def evaluate(self, root_page: RootPage, language_id: int) -> SiteSetup:
        site = self._sites.get(root_page.uid)
        if site is None:
            return SiteSetup()
        solr = site.solr
        enabled = site.enabled
        override = site.languages.get(language_id)
        if override is not None:
            changes = override.model_dump(exclude_none=True)
            enabled = changes.pop("enabled", enabled)
            if changes:
                base = solr.model_dump() if solr is not None else {}
                solr = SolrSetup.model_validate({**base, **changes})
        return SiteSetup(solr=solr, enabled=enabled)

    def _page(self, page_id: int) -> PageRecord:
        try:
            return self._pages[page_id]
        except KeyError:
            raise KeyError(f"Page [{page_id}] does not exist.") from None


class StaticDefaultConfiguration:
    """Default endpoint read from the ``[default_solr]`` config section."""

    def __init__(self, setup: SolrSetup) -> None:
        self._setup = setup

    def get_default_setup(self) -> SolrSetup:
        return self._setup


__all__ = [
    "ConfigurationEvaluator",
    "DefaultConfigurationProvider",
    "LanguageRepository",
    "PageRepository",
    "StaticDefaultConfiguration",
    "StaticSiteTree",
    "parse_mount_params",
]
