"""Connection handles and the per-endpoint handle cache."""

from __future__ import annotations

import hashlib
from typing import Callable, Iterator, Protocol, runtime_checkable


@runtime_checkable
class ConnectionHandle(Protocol):
    """Protocol implemented by live Solr connection objects."""

    host: str
    port: int
    path: str
    scheme: str

    def set_authentication_credentials(self, username: str, password: str) -> None:
        """Attach basic auth credentials used for later requests."""


ConnectionFactory = Callable[[str, int, str, str], ConnectionHandle]


class SolrConnection:
    """Endpoint description of one Solr core.

    Building a connection is cheap; nothing is sent over the wire here.
    """

    def __init__(self, host: str, port: int = 8983, path: str = "/solr/", scheme: str = "http") -> None:
        self.host = host
        self.port = int(port)
        self.path = path
        self.scheme = scheme
        self.username = ""
        self.password = ""

    def set_authentication_credentials(self, username: str, password: str) -> None:
        self.username = username
        self.password = password

    @property
    def base_url(self) -> str:
        return f"{self.scheme}://{self.host}:{self.port}{self.path}"

    @property
    def has_credentials(self) -> bool:
        return bool(self.username)

    def __repr__(self) -> str:
        auth = " (authenticated)" if self.has_credentials else ""
        return f"<SolrConnection {self.base_url}{auth}>"


def endpoint_fingerprint(
    scheme: str,
    host: str,
    port: int,
    path: str,
    username: str = "",
    password: str = "",
) -> str:
    """Hash every field that identifies an endpoint."""

    raw = f"{scheme}://{host}:{port}:{path}:{username}:{password}"
    return hashlib.md5(raw.encode("utf-8")).hexdigest()


class ConnectionCache:
    """Handles keyed by endpoint fingerprint.

    Owned by the composition root and shared by every registry built from it;
    it is never cleared implicitly.
    """

    def __init__(self) -> None:
        self._handles: dict[str, ConnectionHandle] = {}

    def get(self, fingerprint: str) -> ConnectionHandle | None:
        return self._handles.get(fingerprint)

    def store(self, fingerprint: str, handle: ConnectionHandle) -> None:
        self._handles[fingerprint] = handle

    def clear(self) -> None:
        """Drop every cached handle (testing helper)."""

        self._handles.clear()

    def __contains__(self, fingerprint: object) -> bool:
        return fingerprint in self._handles

    def __len__(self) -> int:
        return len(self._handles)

    def __iter__(self) -> Iterator[str]:
        return iter(tuple(self._handles))


__all__ = [
    "ConnectionCache",
    "ConnectionFactory",
    "ConnectionHandle",
    "SolrConnection",
    "endpoint_fingerprint",
]
