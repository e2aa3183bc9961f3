"""Cron entry point for removing stored template assets no row references."""

from __future__ import annotations

import argparse
import sys
from dataclasses import dataclass

from imageai.assets.assets_repository import AssetRepository
from imageai.config import load_config
from imageai.storage.blob_storage import LocalBlobStorage

TEMPLATE_SCOPE = "templates"


@dataclass(slots=True)
class CleanupSummary:
    scanned: int
    orphans_removed: int
    dry_run: bool


def find_orphans(repo: AssetRepository, storage: LocalBlobStorage) -> list[str]:
    referenced = repo.list_urls()
    return sorted(
        url
        for url in (storage.url_for(path) for path in storage.iter_files(TEMPLATE_SCOPE))
        if url not in referenced
    )


def perform_cleanup(
    repo: AssetRepository, storage: LocalBlobStorage, *, dry_run: bool
) -> CleanupSummary:
    """Delete orphaned files (or only count them) and return summary counters."""
    scanned = sum(1 for _ in storage.iter_files(TEMPLATE_SCOPE))
    orphans = find_orphans(repo, storage)
    if dry_run:
        return CleanupSummary(scanned=scanned, orphans_removed=len(orphans), dry_run=True)
    removed = sum(1 for url in orphans if storage.delete_url(url))
    return CleanupSummary(scanned=scanned, orphans_removed=removed, dry_run=False)


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Remove template asset files without a database row.")
    parser.add_argument("--dry-run", action="store_true", help="Only report counts without deleting files.")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv or [])
    try:
        config = load_config()
        summary = perform_cleanup(
            AssetRepository(config.session_factory),
            LocalBlobStorage(config.storage),
            dry_run=args.dry_run,
        )
    except Exception as exc:
        print(f"cleanup failed: {exc}", file=sys.stderr)
        return 2

    if summary.dry_run:
        print(f"cleanup dry-run, scanned={summary.scanned}, orphans={summary.orphans_removed}")
    else:
        print(f"cleanup done, scanned={summary.scanned}, orphans_removed={summary.orphans_removed}")
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
