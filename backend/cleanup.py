"""Cleanup — reports drift between file records and the upload directory.

Run standalone: python cleanup.py [--remove-orphans]
Nothing in the service runs this automatically.
"""

import argparse
import logging
from dataclasses import dataclass, field
from pathlib import Path

import orm  # noqa: F401
from api.files.repositories import files_repository
from api.files.services import storage_service
from config import configure_logging, get_settings
from database import Database

logger = logging.getLogger(__name__)


@dataclass
class CleanupReport:
    orphaned_objects: list[str] = field(default_factory=list)
    missing_objects: list[int] = field(default_factory=list)
    removed: int = 0


def run_cleanup(database: Database, upload_dir: Path, remove_orphans: bool = False) -> CleanupReport:
    """Find objects without records and records without objects.

    Orphaned objects are deleted only when ``remove_orphans`` is set.
    Records are never deleted here.
    """
    report = CleanupReport()

    with database.session() as session:
        records = files_repository.list_all(session)
    known = {r.storage_name for r in records}

    # Records whose object is gone
    for record in records:
        if not storage_service.object_exists(upload_dir, record.storage_name):
            report.missing_objects.append(record.id)

    # Objects on disk but not in DB
    if upload_dir.exists():
        for entry in sorted(upload_dir.iterdir()):
            if entry.is_file() and entry.name not in known:
                report.orphaned_objects.append(entry.name)

    if remove_orphans:
        for name in report.orphaned_objects:
            storage_service.remove_object(upload_dir, name)
            report.removed += 1

    logger.info(
        "Cleanup: %d orphaned objects, %d missing objects, %d removed",
        len(report.orphaned_objects),
        len(report.missing_objects),
        report.removed,
    )
    return report


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Reconcile file records with the upload directory.")
    parser.add_argument("--remove-orphans", action="store_true", help="delete objects that have no record")
    args = parser.parse_args(argv)

    settings = get_settings()
    configure_logging(settings.log_level)
    database = Database(
        settings.resolved_database_url,
        connect_retries=settings.db_connect_retries,
        retry_delay=settings.db_connect_retry_delay,
    )
    database.connect()
    try:
        report = run_cleanup(database, settings.upload_path, remove_orphans=args.remove_orphans)
    finally:
        database.dispose()

    for name in report.orphaned_objects:
        print(f"orphaned object: {name}")
    for file_id in report.missing_objects:
        print(f"missing object for file record {file_id}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
