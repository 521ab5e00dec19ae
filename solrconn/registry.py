"""Connection registry resolving Solr endpoints per site root and language."""

from __future__ import annotations

import hashlib
import logging
from typing import Any, Mapping

from pydantic import ValidationError

from .config import RegistrySettings
from .connections import ConnectionCache, ConnectionFactory, ConnectionHandle, SolrConnection, endpoint_fingerprint
from .errors import NoSolrConnectionFoundError
from .models import ConnectionConfig, RootPage, Site, SolrSetup, connection_key
from .sites import ConfigurationEvaluator, DefaultConfigurationProvider, LanguageRepository, PageRepository
from .store import RegistryStore

LOG = logging.getLogger(__name__)

DEFAULT_LANGUAGE_ID = 0
DEFAULT_LANGUAGE_NAME = "default"

Configurations = dict[str, ConnectionConfig]


class ConnectionRegistry:
    """Creates Solr connections and keeps track of the configured ones.

    Handles are shared through the injected :class:`ConnectionCache`, so
    asking twice for the same endpoint yields the same object. The table of
    discovered configurations lives in the injected store and is rebuilt by
    :meth:`update_connections` or :meth:`update_connection_by_root_page_id`.
    """

    def __init__(
        self,
        *,
        store: RegistryStore,
        pages: PageRepository,
        languages: LanguageRepository,
        evaluator: ConfigurationEvaluator,
        cache: ConnectionCache | None = None,
        connection_factory: ConnectionFactory | None = None,
        default_provider: DefaultConfigurationProvider | None = None,
        settings: RegistrySettings | None = None,
    ) -> None:
        self._store = store
        self._pages = pages
        self._languages = languages
        self._evaluator = evaluator
        self._cache = cache if cache is not None else ConnectionCache()
        self._connection_factory: ConnectionFactory = connection_factory or SolrConnection
        self._default_provider = default_provider
        self._settings = settings or RegistrySettings()

    @property
    def cache(self) -> ConnectionCache:
        return self._cache

    @property
    def settings(self) -> RegistrySettings:
        return self._settings

    # connections

    def get_connection(
        self,
        host: str = "",
        port: int = 8983,
        path: str = "/solr/",
        scheme: str = "http",
        username: str = "",
        password: str = "",
    ) -> ConnectionHandle:
        """Return the cached handle for an endpoint, creating it on first use."""

        if not host:
            setup = self._default_setup()
            host, port, path, scheme = setup.host, setup.port, setup.path, setup.scheme
            username, password = setup.username, setup.password

        fingerprint = endpoint_fingerprint(scheme, host, port, path, username, password)
        handle = self._cache.get(fingerprint)
        if handle is None:
            handle = self._connection_factory(host, port, path, scheme)
            if username != "":
                handle.set_authentication_credentials(username, password)
            self._cache.store(fingerprint, handle)
            LOG.debug("Created Solr connection", extra={"host": host, "port": port, "path": path, "scheme": scheme})
        return handle

    def get_connection_by_page_id(self, page_id: int, language_id: int = 0, mount_params: str = "") -> ConnectionHandle:
        config = self.get_configuration_by_page_id(page_id, language_id, mount_params)
        return self._connection_from_configuration(config)

    def get_connection_by_root_page_id(self, root_page_id: int, language_id: int = 0) -> ConnectionHandle:
        config = self.get_configuration_by_root_page_id(root_page_id, language_id)
        return self._connection_from_configuration(config)

    def get_all_connections(self) -> list[ConnectionHandle]:
        """One handle per stored configuration entry."""

        return [self._connection_from_configuration(config) for config in self.get_all_configurations().values()]

    def get_connections_by_site(self, site: Site) -> list[ConnectionHandle]:
        return [self._connection_from_configuration(config) for config in self.get_configurations_by_site(site)]

    # configurations

    def get_configuration_by_page_id(
        self,
        page_id: int,
        language_id: int = 0,
        mount_params: str = "",
    ) -> ConnectionConfig:
        """Resolve a page to its site root and return that root's configuration."""

        root_page_id = self._pages.get_root_page_id(page_id, mount_params)
        try:
            return self.get_configuration_by_root_page_id(root_page_id, language_id)
        except NoSolrConnectionFoundError as exc:
            raise NoSolrConnectionFoundError(
                f"{exc.message} Initial page used was [{page_id}]",
                page_id=page_id,
                root_page_id=exc.root_page_id,
                language_id=exc.language_id,
            ) from exc

    def get_configuration_by_root_page_id(self, root_page_id: int, language_id: int = 0) -> ConnectionConfig:
        configurations = self.get_all_configurations()
        try:
            return configurations[connection_key(root_page_id, language_id)]
        except KeyError:
            raise NoSolrConnectionFoundError(
                f"Could not find a Solr connection for root page [{root_page_id}] and language [{language_id}].",
                root_page_id=root_page_id,
                language_id=language_id,
            ) from None

    def get_all_configurations(self) -> Configurations:
        """Read the persisted configuration table."""

        raw = self._store.get(self._settings.namespace, self._settings.key, {})
        return self._deserialize(raw)

    def get_configurations_by_site(self, site: Site) -> list[ConnectionConfig]:
        return [
            config
            for config in self.get_all_configurations().values()
            if config.root_page_id == site.root_page_id
        ]

    # updates

    def update_connections(self) -> Configurations:
        """Rescan every site root and language, replacing the stored table.

        Nothing is written when the scan finds no configuration at all, so a
        broken site tree never wipes a working table.
        """

        configurations = self._reconcile(self._discover_configurations())
        if not configurations:
            LOG.warning("No Solr connections discovered; keeping stored configurations")
            return self.get_all_configurations()
        self._persist(configurations)
        LOG.info("Updated Solr connections", extra={"count": len(configurations)})
        return configurations

    def update_connection_by_root_page_id(self, root_page_id: int) -> Configurations:
        """Rescan one site root and merge the result into the stored table."""

        root_page = self._pages.get_root_page(root_page_id)
        updated: Configurations = {}
        for language_id in self._system_languages():
            config = self._resolve_configuration(root_page, language_id)
            if config is not None:
                updated[config.connection_key] = config

        # Entries that fail validation are carried over as stored.
        raw = self._store.get(self._settings.namespace, self._settings.key, {})
        merged: dict[str, Any] = {str(key): entry for key, entry in raw.items()} if isinstance(raw, Mapping) else {}
        merged.update((key, config.model_dump(mode="json")) for key, config in updated.items())
        valid = self._deserialize(merged)
        configurations = self._reconcile(valid)
        payload = {key: entry for key, entry in merged.items() if key not in valid or key in configurations}
        self._store.set(self._settings.namespace, self._settings.key, payload)
        LOG.info(
            "Updated Solr connections for root page",
            extra={"root_page_id": root_page_id, "discovered": len(updated), "count": len(configurations)},
        )
        return configurations

    def filter_duplicate_connections(self, configurations: Mapping[str, ConnectionConfig]) -> Configurations:
        """Keep the first entry of every group differing only by language."""

        seen: set[str] = set()
        filtered: Configurations = {}
        for key, config in configurations.items():
            signature = hashlib.md5("|".join(config.signature_fields()).encode("utf-8")).hexdigest()
            if signature in seen:
                LOG.debug("Dropping duplicate Solr connection", extra={"connection_key": key})
                continue
            seen.add(signature)
            filtered[key] = config
        return filtered

    def build_connection_label(self, config: ConnectionConfig) -> str:
        """Human readable label, e.g. ``Example (pid: 5, language: default) - localhost:8983/solr/``."""

        language_name = self._language_name(config.language_id)
        return (
            f"{config.root_page_title} (pid: {config.root_page_id}, language: {language_name})"
            f" - {config.host}:{config.port}{config.path}"
        )

    def _discover_configurations(self) -> Configurations:
        configurations: Configurations = {}
        languages = self._system_languages()
        for root_page in self._pages.get_root_pages():
            for language_id in languages:
                config = self._resolve_configuration(root_page, language_id)
                if config is not None:
                    configurations[config.connection_key] = config
        return configurations

    def _resolve_configuration(self, root_page: RootPage, language_id: int) -> ConnectionConfig | None:
        setup = self._evaluator.evaluate(root_page, int(language_id))
        if setup.solr is None or not setup.enabled:
            return None
        solr = setup.solr
        config = ConnectionConfig(
            root_page_title=root_page.title,
            root_page_id=root_page.uid,
            scheme=solr.scheme,
            host=solr.host,
            port=solr.port,
            path=solr.path,
            username=solr.username,
            password=solr.password,
            language_id=int(language_id),
        )
        return config.model_copy(update={"label": self.build_connection_label(config)})

    def _system_languages(self) -> list[int]:
        languages = [DEFAULT_LANGUAGE_ID]
        for language_id in self._languages.get_active_language_ids():
            if int(language_id) not in languages:
                languages.append(int(language_id))
        return languages

    def _language_name(self, language_id: int) -> str:
        name = self._languages.get_language_name(language_id)
        if name is not None:
            return name
        if language_id == DEFAULT_LANGUAGE_ID:
            return DEFAULT_LANGUAGE_NAME
        return ""

    def _reconcile(self, configurations: Configurations) -> Configurations:
        if not self._settings.filter_duplicates:
            return dict(configurations)
        return self.filter_duplicate_connections(configurations)

    def _connection_from_configuration(self, config: ConnectionConfig) -> ConnectionHandle:
        return self.get_connection(
            config.host,
            config.port,
            config.path,
            config.scheme,
            config.username,
            config.password,
        )

    def _default_setup(self) -> SolrSetup:
        if self._default_provider is None:
            raise NoSolrConnectionFoundError(
                "get_connection() called without a host and no default configuration provider is set."
            )
        LOG.warning(
            "get_connection() called with an empty host; using the default configuration, which might be "
            "inaccurate. Always provide a host or use the get_connection_by_* methods."
        )
        return self._default_provider.get_default_setup()

    def _persist(self, configurations: Configurations) -> None:
        payload = {key: config.model_dump(mode="json") for key, config in configurations.items()}
        self._store.set(self._settings.namespace, self._settings.key, payload)

    @staticmethod
    def _deserialize(raw: Any) -> Configurations:
        if not isinstance(raw, Mapping):
            return {}
        configurations: Configurations = {}
        for key, entry in raw.items():
            try:
                configurations[str(key)] = ConnectionConfig.model_validate(entry)
            except ValidationError:
                LOG.warning("Skipping invalid stored Solr configuration", extra={"connection_key": key})
        return configurations


__all__ = [
    "ConnectionRegistry",
    "Configurations",
    "DEFAULT_LANGUAGE_ID",
    "DEFAULT_LANGUAGE_NAME",
]
