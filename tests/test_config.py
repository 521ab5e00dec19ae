"""Tests for AppConfig helpers."""

from __future__ import annotations

from pathlib import Path

import pytest

from solrconn import config as config_module
from solrconn.config import AppConfig, RegistrySettings, load_config
from solrconn.models import ConnectionConfig, SolrSetup


def test_defaults_use_tx_solr_servers_entry() -> None:
    config = AppConfig()

    assert config.registry == RegistrySettings(namespace="tx_solr", key="servers")
    assert config.registry.store_path is None
    assert config.registry.filter_duplicates is True
    assert config.default_solr is None


def test_load_config_returns_defaults_when_missing(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(config_module, "CONFIG_FILE", tmp_path / "config.toml")

    result = load_config()

    assert result == AppConfig()


def test_load_config_reads_values(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    config_path = tmp_path / "config.toml"
    config_path.write_text(
        """
[registry]
store_path = "registry.json"
filter_duplicates = false

[default_solr]
host = "fallback.local"
port = 8984

[[site_tree.pages]]
uid = 1
title = "Example"
is_siteroot = true

[[site_tree.languages]]
uid = 1
title = "German"

[[site_tree.sites]]
root_page_id = 1

[site_tree.sites.solr]
scheme = "https"
host = "localhost"
path = "solr/core_en"

[site_tree.sites.languages.1]
path = "/solr/core_de/"
"""
    )
    monkeypatch.setattr(config_module, "CONFIG_FILE", config_path)

    result = load_config()

    assert result.registry.store_path == Path("registry.json")
    assert result.registry.filter_duplicates is False
    assert result.default_solr == SolrSetup(host="fallback.local", port=8984)
    assert result.site_tree.pages[0].is_siteroot is True
    assert result.site_tree.languages[0].title == "German"
    site = result.site_tree.sites[0]
    assert site.solr is not None and site.solr.scheme == "https"
    assert site.languages[1].path == "/solr/core_de/"


def test_load_config_handles_toml_errors(tmp_path: Path) -> None:
    config_path = tmp_path / "config.toml"
    config_path.write_text("registry = [unterminated")

    assert load_config(config_path) == AppConfig()


def test_load_config_handles_validation_errors(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    config_path = tmp_path / "config.toml"
    config_path.write_text('[default_solr]\nport = 70000\nscheme = "ftp"\n')

    assert load_config(config_path) == AppConfig()
    assert "Ignoring invalid config file" in caplog.text


def test_with_store_path_updates_registry_settings(tmp_path: Path) -> None:
    config = AppConfig(registry=RegistrySettings(filter_duplicates=False))

    updated = config.with_store_path(tmp_path / "registry.json")

    assert updated.registry.store_path == tmp_path / "registry.json"
    assert updated.registry.filter_duplicates is False
    assert config.registry.store_path is None


def test_connection_config_normalizes_path_and_key() -> None:
    config = ConnectionConfig(root_page_title="Example", root_page_id=5, host="localhost", port=8983, path="solr", language_id=2)

    assert config.path == "/solr/"
    assert config.connection_key == "5|2"


def test_connection_config_rejects_out_of_range_port() -> None:
    with pytest.raises(ValueError):
        ConnectionConfig(root_page_title="Example", root_page_id=5, host="localhost", port=0)
