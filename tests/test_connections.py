"""Tests for connection handles and the handle cache."""

from __future__ import annotations

from solrconn.connections import ConnectionCache, ConnectionHandle, SolrConnection, endpoint_fingerprint


def test_fingerprint_covers_every_endpoint_field() -> None:
    base = endpoint_fingerprint("http", "localhost", 8983, "/solr/", "", "")

    assert base == endpoint_fingerprint("http", "localhost", 8983, "/solr/")
    assert base != endpoint_fingerprint("https", "localhost", 8983, "/solr/")
    assert base != endpoint_fingerprint("http", "localhost", 8984, "/solr/")
    assert base != endpoint_fingerprint("http", "localhost", 8983, "/solr/", "user", "")
    assert base != endpoint_fingerprint("http", "localhost", 8983, "/solr/", "", "secret")


def test_fingerprint_keeps_fields_apart() -> None:
    assert endpoint_fingerprint("http", "host1", 8983, "/") != endpoint_fingerprint("http", "host", 18983, "/")


def test_solr_connection_satisfies_handle_protocol() -> None:
    connection = SolrConnection("localhost", 8983, "/solr/core_en/", "https")

    assert isinstance(connection, ConnectionHandle)
    assert connection.base_url == "https://localhost:8983/solr/core_en/"
    assert connection.has_credentials is False

    connection.set_authentication_credentials("solr", "secret")

    assert connection.has_credentials is True
    assert "authenticated" in repr(connection)


def test_cache_stores_and_clears_handles() -> None:
    cache = ConnectionCache()
    handle = SolrConnection("localhost")

    cache.store("abc", handle)

    assert "abc" in cache
    assert cache.get("abc") is handle
    assert list(cache) == ["abc"]

    cache.clear()

    assert len(cache) == 0
    assert cache.get("abc") is None
