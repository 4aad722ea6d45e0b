"""SQLite-backed metadata store at ``root/db/gaap.db``."""

import logging
import sqlite3
from dataclasses import replace
from datetime import datetime
from pathlib import Path

from gaap.core.errors import AlreadyExistsError, MetadataStoreError, NotFoundError
from gaap.core.store.abc import PackageStore
from gaap.core.store.types import PackageRecord, strictly_after
from gaap.core.time.abc import Time

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS packages (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    owner TEXT NOT NULL,
    repo TEXT NOT NULL,
    version TEXT NOT NULL,
    binary_name TEXT NOT NULL,
    frozen INTEGER NOT NULL DEFAULT 0,
    platform TEXT NOT NULL DEFAULT '',
    installed_at TEXT NOT NULL,
    updated_at TEXT NOT NULL,
    UNIQUE(owner, repo)
);
"""

_COLUMNS = "owner, repo, version, binary_name, frozen, platform, installed_at, updated_at"


def _row_to_record(row: sqlite3.Row) -> PackageRecord:
    return PackageRecord(
        owner=row["owner"],
        repo=row["repo"],
        version=row["version"],
        binary=row["binary_name"],
        frozen=bool(row["frozen"]),
        platform=row["platform"],
        installed_at=datetime.fromisoformat(row["installed_at"]),
        updated_at=datetime.fromisoformat(row["updated_at"]),
    )


class SqlitePackageStore(PackageStore):
    """Production store using the standard library sqlite3 module.

    The connection is opened lazily so constructing a store never touches disk.
    """

    def __init__(self, db_path: Path, time: Time) -> None:
        self._db_path = db_path
        self._time = time
        self._conn: sqlite3.Connection | None = None

    def _connection(self) -> sqlite3.Connection:
        if self._conn is None:
            try:
                self._db_path.parent.mkdir(parents=True, exist_ok=True)
                self._conn = sqlite3.connect(str(self._db_path))
            except (OSError, sqlite3.Error) as e:
                raise MetadataStoreError(f"failed to open database {self._db_path}: {e}") from e
            self._conn.row_factory = sqlite3.Row
        return self._conn

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def initialize(self) -> None:
        conn = self._connection()
        try:
            with conn:
                conn.executescript(SCHEMA)
        except sqlite3.Error as e:
            raise MetadataStoreError(f"failed to create schema: {e}") from e

    def add(self, record: PackageRecord) -> PackageRecord:
        now = self._time.now()
        stored = replace(record, installed_at=now, updated_at=now)
        conn = self._connection()
        try:
            with conn:
                conn.execute(
                    f"INSERT INTO packages ({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
                    (
                        stored.owner,
                        stored.repo,
                        stored.version,
                        stored.binary,
                        int(stored.frozen),
                        stored.platform,
                        now.isoformat(),
                        now.isoformat(),
                    ),
                )
        except sqlite3.IntegrityError as e:
            raise AlreadyExistsError(f"package {record.full_name} is already installed") from e
        except sqlite3.Error as e:
            raise MetadataStoreError(f"failed to insert package {record.full_name}: {e}") from e
        logger.debug("Inserted record %s@%s", stored.full_name, stored.version)
        return stored

    def get(self, owner: str, repo: str) -> PackageRecord | None:
        try:
            row = (
                self._connection()
                .execute(
                    f"SELECT {_COLUMNS} FROM packages WHERE owner = ? AND repo = ?",
                    (owner, repo),
                )
                .fetchone()
            )
        except sqlite3.Error as e:
            raise MetadataStoreError(f"failed to get package {owner}/{repo}: {e}") from e
        if row is None:
            return None
        return _row_to_record(row)

    def list_packages(self) -> list[PackageRecord]:
        try:
            rows = (
                self._connection()
                .execute(f"SELECT {_COLUMNS} FROM packages ORDER BY owner, repo")
                .fetchall()
            )
        except sqlite3.Error as e:
            raise MetadataStoreError(f"failed to list packages: {e}") from e
        return [_row_to_record(row) for row in rows]

    def update(self, record: PackageRecord) -> PackageRecord:
        existing = self.get(record.owner, record.repo)
        if existing is None:
            raise NotFoundError(f"package not found: {record.full_name}")

        updated_at = strictly_after(self._time.now(), existing.updated_at)
        conn = self._connection()
        try:
            with conn:
                cursor = conn.execute(
                    "UPDATE packages SET version = ?, binary_name = ?, frozen = ?, "
                    "platform = ?, updated_at = ? WHERE owner = ? AND repo = ?",
                    (
                        record.version,
                        record.binary,
                        int(record.frozen),
                        record.platform,
                        updated_at.isoformat(),
                        record.owner,
                        record.repo,
                    ),
                )
        except sqlite3.Error as e:
            raise MetadataStoreError(f"failed to update package {record.full_name}: {e}") from e
        if cursor.rowcount == 0:
            raise NotFoundError(f"package not found: {record.full_name}")
        return replace(record, installed_at=existing.installed_at, updated_at=updated_at)

    def delete(self, owner: str, repo: str) -> None:
        conn = self._connection()
        try:
            with conn:
                cursor = conn.execute(
                    "DELETE FROM packages WHERE owner = ? AND repo = ?", (owner, repo)
                )
        except sqlite3.Error as e:
            raise MetadataStoreError(f"failed to delete package {owner}/{repo}: {e}") from e
        if cursor.rowcount == 0:
            raise NotFoundError(f"package not found: {owner}/{repo}")
