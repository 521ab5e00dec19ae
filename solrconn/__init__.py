"""Solr connection registry keyed by site root page and language."""

from __future__ import annotations

from .connections import ConnectionCache, ConnectionHandle, SolrConnection, endpoint_fingerprint
from .errors import NoSolrConnectionFoundError
from .models import ConnectionConfig, RootPage, Site, SiteSetup, SolrSetup
from .registry import ConnectionRegistry

__version__ = "0.1.0"

__all__ = [
    "ConnectionCache",
    "ConnectionConfig",
    "ConnectionHandle",
    "ConnectionRegistry",
    "NoSolrConnectionFoundError",
    "RootPage",
    "Site",
    "SiteSetup",
    "SolrConnection",
    "SolrSetup",
    "__version__",
    "endpoint_fingerprint",
]
