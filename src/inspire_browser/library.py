"""Local preprint library: PDF files plus a SQLite index of what was fetched."""

from __future__ import annotations

import asyncio
import json
import logging
import sqlite3
from collections.abc import Sequence
from datetime import UTC, datetime
from pathlib import Path

from platformdirs import user_data_dir

from inspire_browser.errors import LibraryError
from inspire_browser.io_actions import open_path, write_bytes_atomic
from inspire_browser.models import CONFIG_APP_NAME, FetchedPreprint, ResultEntry, UserConfig
from inspire_browser.parsing import normalize_arxiv_id

logger = logging.getLogger(__name__)

LIBRARY_DB_FILENAME = "library.db"
PREPRINTS_DIRNAME = "preprints"


def get_data_dir() -> Path:
    """Get the per-user data directory."""
    return Path(user_data_dir(CONFIG_APP_NAME))


def get_library_db_path() -> Path:
    """Get the path to the library SQLite index."""
    return get_data_dir() / LIBRARY_DB_FILENAME


def get_preprint_dir(config: UserConfig) -> Path:
    """Directory holding downloaded PDFs; ``download_dir`` overrides the default."""
    if config.download_dir:
        return Path(config.download_dir).expanduser()
    return get_data_dir() / PREPRINTS_DIRNAME


# ============================================================================
# SQLite Index
# ============================================================================


def init_library_db(db_path: Path) -> None:
    """Create library tables if they don't exist."""
    db_path.parent.mkdir(parents=True, exist_ok=True)
    with sqlite3.connect(str(db_path)) as conn:
        conn.execute(
            "CREATE TABLE IF NOT EXISTS eprints ("
            "  id TEXT NOT NULL,"
            "  version INTEGER NOT NULL,"
            "  filename TEXT NOT NULL,"
            "  downloaded_at TEXT NOT NULL,"
            "  UNIQUE (id, version)"
            ")"
        )
        conn.execute(
            "CREATE TABLE IF NOT EXISTS records ("
            "  control_number TEXT PRIMARY KEY,"
            "  title TEXT NOT NULL,"
            "  authors_json TEXT NOT NULL,"
            "  created TEXT NOT NULL,"
            "  eprint TEXT"
            ")"
        )


def load_latest_eprint(db_path: Path, arxiv_id: str) -> tuple[int, str] | None:
    """Return (version, filename) of the newest stored version of ``arxiv_id``.

    Raises:
        LibraryError: If the index cannot be read.
    """
    if not db_path.exists():
        return None
    try:
        with sqlite3.connect(str(db_path)) as conn:
            row = conn.execute(
                "SELECT version, filename FROM eprints WHERE id = ? "
                "ORDER BY version DESC LIMIT 1",
                (arxiv_id,),
            ).fetchone()
    except sqlite3.Error as exc:
        logger.warning("Failed to read library index for %s", arxiv_id, exc_info=True)
        raise LibraryError(f"Could not read the preprint library: {exc}.") from exc
    if row is None:
        return None
    return int(row[0]), str(row[1])


def save_eprint(db_path: Path, arxiv_id: str, version: int, filename: str) -> None:
    """Record a stored preprint file in the index.

    Raises:
        LibraryError: If the index cannot be written.
    """
    try:
        init_library_db(db_path)
        now = datetime.now(UTC).isoformat()
        with sqlite3.connect(str(db_path)) as conn:
            conn.execute(
                "INSERT OR REPLACE INTO eprints (id, version, filename, downloaded_at) "
                "VALUES (?, ?, ?, ?)",
                (arxiv_id, version, filename, now),
            )
    except (sqlite3.Error, OSError) as exc:
        logger.warning("Failed to index %sv%d", arxiv_id, version, exc_info=True)
        raise LibraryError(f"Could not update the preprint library: {exc}.") from exc


def load_downloaded_versions(db_path: Path) -> dict[str, int]:
    """Map every indexed eprint to its newest stored version; empty on error."""
    if not db_path.exists():
        return {}
    try:
        with sqlite3.connect(str(db_path)) as conn:
            rows = conn.execute("SELECT id, MAX(version) FROM eprints GROUP BY id").fetchall()
    except sqlite3.Error:
        logger.warning("Failed to load library index", exc_info=True)
        return {}
    return {str(arxiv_id): int(version) for arxiv_id, version in rows}


def save_records(db_path: Path, entries: Sequence[ResultEntry]) -> None:
    """Upsert search records into the local cache. Never raises."""
    if not entries:
        return
    rows = [
        (
            entry.id,
            entry.title,
            json.dumps(list(entry.authors), ensure_ascii=False),
            entry.created,
            entry.download_ref,
        )
        for entry in entries
    ]
    try:
        init_library_db(db_path)
        with sqlite3.connect(str(db_path)) as conn:
            conn.executemany(
                "INSERT OR REPLACE INTO records "
                "(control_number, title, authors_json, created, eprint) "
                "VALUES (?, ?, ?, ?, ?)",
                rows,
            )
    except (sqlite3.Error, OSError):
        logger.warning("Failed to cache %d search records", len(rows), exc_info=True)


def _load_record(db_path: Path, control_number: str) -> ResultEntry | None:
    """Read back one cached search record; ``None`` if absent or unreadable."""
    if not db_path.exists():
        return None
    try:
        with sqlite3.connect(str(db_path)) as conn:
            row = conn.execute(
                "SELECT title, authors_json, created, eprint FROM records "
                "WHERE control_number = ?",
                (control_number,),
            ).fetchone()
    except sqlite3.Error:
        logger.warning("Failed to load cached record %s", control_number, exc_info=True)
        return None
    if row is None:
        return None
    title, authors_json, created, eprint = row
    try:
        authors = tuple(str(name) for name in json.loads(authors_json))
    except (TypeError, json.JSONDecodeError):
        authors = ()
    return ResultEntry(
        id=control_number,
        title=title,
        authors=authors,
        created=created,
        eprints=(eprint,) if eprint else (),
        download_ref=eprint,
    )


# ============================================================================
# Preprint sink
# ============================================================================


class PreprintLibrary:
    """Stores fetched preprints on disk and opens them with the viewer.

    Blocking file and SQLite work runs in a worker thread.
    """

    def __init__(self, db_path: Path, preprint_dir: Path, viewer_cmd: str = "") -> None:
        self.db_path = db_path
        self.preprint_dir = preprint_dir
        self.viewer_cmd = viewer_cmd

    @classmethod
    def from_config(cls, config: UserConfig) -> PreprintLibrary:
        return cls(get_library_db_path(), get_preprint_dir(config), config.pdf_viewer)

    def downloaded_versions(self) -> dict[str, int]:
        return load_downloaded_versions(self.db_path)

    def _lookup_sync(self, ref: str) -> Path | None:
        arxiv_id = normalize_arxiv_id(ref)
        found = load_latest_eprint(self.db_path, arxiv_id)
        if found is None:
            return None
        version, filename = found
        path = self.preprint_dir / filename
        if not path.is_file() or path.stat().st_size == 0:
            logger.info("Indexed %sv%d is missing at %s; fetching again", arxiv_id, version, path)
            return None
        return path

    async def lookup(self, ref: str) -> Path | None:
        return await asyncio.to_thread(self._lookup_sync, ref)

    def _store_sync(self, preprint: FetchedPreprint) -> Path:
        path = self.preprint_dir / preprint.filename
        try:
            write_bytes_atomic(path, preprint.content)
        except OSError as exc:
            logger.warning("Failed to write %s", path, exc_info=True)
            raise LibraryError(f"Could not save {preprint.filename}: {exc}.") from exc
        save_eprint(self.db_path, preprint.arxiv_id, preprint.version, preprint.filename)
        logger.debug("Stored %s (%d bytes)", path, len(preprint.content))
        return path

    async def store(self, preprint: FetchedPreprint) -> Path:
        return await asyncio.to_thread(self._store_sync, preprint)

    async def open(self, path: Path) -> None:
        open_path(path, self.viewer_cmd)

    async def record_results(self, entries: Sequence[ResultEntry]) -> None:
        await asyncio.to_thread(save_records, self.db_path, tuple(entries))


__all__ = [
    "LIBRARY_DB_FILENAME",
    "PreprintLibrary",
    "get_data_dir",
    "get_library_db_path",
    "get_preprint_dir",
    "init_library_db",
    "load_downloaded_versions",
    "load_latest_eprint",
    "save_eprint",
    "save_records",
]
