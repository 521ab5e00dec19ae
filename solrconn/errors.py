"""Errors raised by the connection registry."""

from __future__ import annotations


class NoSolrConnectionFoundError(LookupError):
    """Raised when no Solr connection is configured for a page or root page."""

    def __init__(
        self,
        message: str,
        *,
        page_id: int | None = None,
        root_page_id: int | None = None,
        language_id: int | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.page_id = page_id
        self.root_page_id = root_page_id
        self.language_id = language_id

    def __str__(self) -> str:
        return self.message


__all__ = ["NoSolrConnectionFoundError"]
