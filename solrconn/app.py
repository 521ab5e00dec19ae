"""Composition root and command line entry point for solrconn."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Sequence

from .config import AppConfig, load_config
from .connections import ConnectionCache
from .errors import NoSolrConnectionFoundError
from .registry import ConnectionRegistry
from .sites import StaticDefaultConfiguration, StaticSiteTree
from .store import FileRegistryStore, MemoryRegistryStore, RegistryStore


def create_store(config: AppConfig) -> RegistryStore:
    """File store when a path is configured, otherwise an in-memory one."""

    if config.registry.store_path is not None:
        return FileRegistryStore(config.registry.store_path.expanduser())
    return MemoryRegistryStore()


def create_registry(
    config: AppConfig,
    *,
    cache: ConnectionCache | None = None,
    store: RegistryStore | None = None,
) -> ConnectionRegistry:
    """Wire a registry from config using the static site tree collaborators."""

    tree = StaticSiteTree.from_config(config)
    default_provider = StaticDefaultConfiguration(config.default_solr) if config.default_solr else None
    return ConnectionRegistry(
        store=store if store is not None else create_store(config),
        pages=tree,
        languages=tree,
        evaluator=tree,
        cache=cache,
        default_provider=default_provider,
        settings=config.registry,
    )


def _error_message(exc: Exception) -> str:
    # KeyError quotes its message in str()
    if isinstance(exc, KeyError) and exc.args:
        return str(exc.args[0])
    return str(exc)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="solrconn", description="Discover and inspect Solr connections.")
    parser.add_argument("--config", type=Path, default=None, help="Path to config.toml.")
    parser.add_argument("--store", type=Path, default=None, help="Override the registry store file.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("list", help="List stored connection configurations.")

    update = commands.add_parser("update", help="Rescan site roots and store their connections.")
    update.add_argument("--root-page", type=int, default=None, help="Only rescan this root page.")

    lookup = commands.add_parser("lookup", help="Resolve the connection used for a page.")
    lookup.add_argument("page_id", type=int)
    lookup.add_argument("--language", type=int, default=0)
    lookup.add_argument("--mount", default="", help="Mount point parameters, e.g. '12-5'.")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run a solrconn command and return the exit code."""

    args = _build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    config = load_config(args.config)
    if args.store is not None:
        config = config.with_store_path(args.store)
    registry = create_registry(config)

    if args.command == "list":
        for key, configuration in registry.get_all_configurations().items():
            print(f"{key}\t{configuration.label}")
        return 0

    if args.command == "update":
        if args.root_page is None:
            configurations = registry.update_connections()
        else:
            try:
                configurations = registry.update_connection_by_root_page_id(args.root_page)
            except KeyError as exc:
                print(_error_message(exc), file=sys.stderr)
                return 1
        print(f"{len(configurations)} connection(s) stored.")
        for configuration in configurations.values():
            print(f"  {configuration.label}")
        return 0

    try:
        connection = registry.get_connection_by_page_id(args.page_id, args.language, args.mount)
    except (NoSolrConnectionFoundError, KeyError) as exc:
        print(_error_message(exc), file=sys.stderr)
        return 1
    print(f"{connection.scheme}://{connection.host}:{connection.port}{connection.path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
