"""Command-line interface for producing the dashboard data.

Provides subcommands: `export`, `fetch`, `build`, and `all`. Each command
is implemented as a `cmd_*` function that accepts an argparse namespace.
"""
from __future__ import annotations

import argparse
import logging
from dataclasses import replace
from pathlib import Path

from fisheries_pipeline.config import Settings, get_settings, require_mongo_uri
from fisheries_pipeline.datasets import DATASETS, get_dataset
from fisheries_pipeline.db import get_client, get_db
from fisheries_pipeline.logging_config import configure_logging
from fisheries_pipeline.lookups import CURRENCY_RATES

# EXPORT
from fisheries_pipeline.export.collections import export_all

# LOAD
from fisheries_pipeline.load.fetch import download_extract
from fisheries_pipeline.load.reader import load_all_datasets

# VIEWS
from fisheries_pipeline.aggregate.build_views import build_views, write_views
from fisheries_pipeline.aggregate.views import ALL_SITES

log = logging.getLogger(__name__)


# --------------------------------------------------
# Helpers
# --------------------------------------------------
def _settings(args: argparse.Namespace) -> Settings:
    """Return the settings with `--data-dir` applied when given."""
    s = get_settings()
    if getattr(args, "data_dir", None):
        s = replace(s, data_dir=Path(args.data_dir))
    return s


def _dataset_names(args: argparse.Namespace) -> list[str]:
    names = getattr(args, "dataset", None) or list(DATASETS)
    for name in names:
        get_dataset(name)
    return names


# --------------------------------------------------
# EXPORT
# --------------------------------------------------
def cmd_export(args: argparse.Namespace) -> None:
    """Export the source MongoDB collections to JSON extracts.

    Args:
        args: argparse namespace with `data_dir` and `dataset`.
    """
    s = _settings(args)
    client = get_client(require_mongo_uri(s))
    try:
        db = get_db(client, s.mongo_db)
        counts = export_all(db, s.data_dir, _dataset_names(args))
    finally:
        client.close()

    for name, count in counts.items():
        log.info("%s: %d documents", name, count)


# --------------------------------------------------
# FETCH
# --------------------------------------------------
def cmd_fetch(args: argparse.Namespace) -> None:
    """Download the extracts published under `DATA_BASE_URL`."""
    s = _settings(args)
    if not s.data_base_url:
        raise RuntimeError("DATA_BASE_URL is required for fetch. Set it in .env.")

    for name in _dataset_names(args):
        download_extract(get_dataset(name), s.data_base_url, s.data_dir, force=args.force)

    log.info("Fetch completed.")


# --------------------------------------------------
# BUILD
# --------------------------------------------------
def cmd_build(args: argparse.Namespace) -> None:
    """Load the extracts, compute the dashboard views and write them as JSON.

    Args:
        args: argparse namespace with `landing_site`, `currency`, `data_dir`.
    """
    s = _settings(args)
    loaded = load_all_datasets(s.data_dir, _dataset_names(args))
    views = build_views(
        {name: ds.records for name, ds in loaded.items()},
        landing_site=args.landing_site,
        currency=args.currency,
    )
    write_views(views, s.views_dir)

    log.info("Views successfully generated.")


# --------------------------------------------------
# ALL
# --------------------------------------------------
def cmd_all(args: argparse.Namespace) -> None:
    """Convenience: run export → build with the provided args."""
    cmd_export(args)
    cmd_build(args)


# --------------------------------------------------
# CLI
# --------------------------------------------------
def build_parser() -> argparse.ArgumentParser:
    """Build and return the top-level argument parser for the CLI.

    The returned parser has subcommands `export`, `fetch`, `build`, and `all`.

    Returns:
        Configured argparse.ArgumentParser instance.
    """
    p = argparse.ArgumentParser(prog="fisheries_pipeline")
    p.add_argument("--data-dir", default=None, help="Override DATA_DIR")
    p.add_argument("--log-file", default="logs/pipeline.log")
    sub = p.add_subparsers(dest="cmd", required=True)

    def _with_datasets(sp: argparse.ArgumentParser) -> None:
        sp.add_argument(
            "--dataset",
            action="append",
            choices=sorted(DATASETS),
            help="Restrict to this dataset (repeatable)",
        )

    def _with_view_options(sp: argparse.ArgumentParser) -> None:
        sp.add_argument("--landing-site", default=ALL_SITES)
        sp.add_argument("--currency", choices=sorted(CURRENCY_RATES), default="MT")

    p_export = sub.add_parser("export")
    _with_datasets(p_export)

    p_fetch = sub.add_parser("fetch")
    _with_datasets(p_fetch)
    p_fetch.add_argument("--force", action="store_true")

    p_build = sub.add_parser("build")
    _with_datasets(p_build)
    _with_view_options(p_build)

    p_all = sub.add_parser("all")
    _with_datasets(p_all)
    _with_view_options(p_all)

    return p


def main() -> None:
    """CLI entry point: parse args, configure logging and dispatch commands."""
    args = build_parser().parse_args()
    s = get_settings()
    configure_logging(Path(args.log_file) if args.log_file else None, s.log_level)

    if args.cmd == "export":
        cmd_export(args)
    elif args.cmd == "fetch":
        cmd_fetch(args)
    elif args.cmd == "build":
        cmd_build(args)
    elif args.cmd == "all":
        cmd_all(args)
    else:
        raise SystemExit(2)


if __name__ == "__main__":
    main()
