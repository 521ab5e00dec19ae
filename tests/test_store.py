"""Tests for the persisted registry stores."""

from __future__ import annotations

from pathlib import Path

import pytest

from solrconn.config import PageRecord, SiteSolrConfig, SiteTreeConfig
from solrconn.models import SolrSetup
from solrconn.registry import ConnectionRegistry
from solrconn.sites import StaticSiteTree
from solrconn.store import FileRegistryStore, MemoryRegistryStore, RegistryStore, RegistryStoreError


def test_memory_store_is_namespaced() -> None:
    store = MemoryRegistryStore()

    store.set("tx_solr", "servers", {"1|0": {}})

    assert isinstance(store, RegistryStore)
    assert store.get("tx_solr", "servers") == {"1|0": {}}
    assert store.get("other", "servers", "fallback") == "fallback"


def test_file_store_creates_file_on_first_write(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "registry.json"
    store = FileRegistryStore(path)

    assert store.get("tx_solr", "servers", {}) == {}
    assert not path.exists()

    store.set("tx_solr", "servers", {"1|0": {"host": "localhost"}})
    store.set("tx_solr", "other", 1)

    reopened = FileRegistryStore(path)
    assert reopened.get("tx_solr", "servers") == {"1|0": {"host": "localhost"}}
    assert reopened.get("tx_solr", "other") == 1


def test_file_store_rejects_corrupt_file(tmp_path: Path) -> None:
    path = tmp_path / "registry.json"
    path.write_text("{not json")

    with pytest.raises(RegistryStoreError):
        FileRegistryStore(path).get("tx_solr", "servers")


def test_configurations_survive_new_registry_instance(tmp_path: Path) -> None:
    tree = StaticSiteTree(
        SiteTreeConfig(
            pages=[PageRecord(uid=1, title="Example", is_siteroot=True)],
            sites=[SiteSolrConfig(root_page_id=1, solr=SolrSetup(host="localhost", username="solr", password="pw"))],
        )
    )
    path = tmp_path / "registry.json"
    ConnectionRegistry(store=FileRegistryStore(path), pages=tree, languages=tree, evaluator=tree).update_connections()

    empty_tree = StaticSiteTree(SiteTreeConfig())
    registry = ConnectionRegistry(
        store=FileRegistryStore(path),
        pages=empty_tree,
        languages=empty_tree,
        evaluator=empty_tree,
    )

    config = registry.get_configuration_by_root_page_id(1)
    assert config.username == "solr"
    assert config.password == "pw"
    assert config.label == "Example (pid: 1, language: default) - localhost:8983/solr/"


def test_invalid_stored_entries_are_skipped() -> None:
    store = MemoryRegistryStore(
        {
            "tx_solr": {
                "servers": {
                    "1|0": {"root_page_title": "Example", "root_page_id": 1, "host": "localhost", "port": 8983},
                    "2|0": {"root_page_id": 2, "port": 0},
                }
            }
        }
    )
    tree = StaticSiteTree(SiteTreeConfig())
    registry = ConnectionRegistry(store=store, pages=tree, languages=tree, evaluator=tree)

    assert list(registry.get_all_configurations()) == ["1|0"]


def test_file_store_removes_temp_file_when_write_fails(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    path = tmp_path / "registry.json"
    store = FileRegistryStore(path)
    store.set("tx_solr", "servers", {"1|0": {"host": "localhost"}})

    def _broken_replace(self: Path, target: Path) -> Path:
        raise OSError("disk full")

    monkeypatch.setattr(Path, "replace", _broken_replace)

    with pytest.raises(OSError):
        store.set("tx_solr", "servers", {"2|0": {"host": "other"}})

    monkeypatch.undo()
    assert not (tmp_path / "registry.json.tmp").exists()
    assert FileRegistryStore(path).get("tx_solr", "servers") == {"1|0": {"host": "localhost"}}
