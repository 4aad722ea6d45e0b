"""Detect, and optionally repair, drift between the metadata store and disk."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

from gaap.core.config import GaapConfig
from gaap.core.engine import binary_name_for
from gaap.core.errors import IntegrityViolationError, NotFoundError
from gaap.core.store.abc import PackageStore
from gaap.core.store.types import PackageRecord

logger = logging.getLogger(__name__)

IGNORED_BIN_ENTRIES = frozenset({"README.md", "actual"})


@dataclass(frozen=True)
class IntegrityViolation:
    """A record that cannot describe a real installation."""

    record: PackageRecord
    reason: str


@dataclass(frozen=True)
class OrphanArtifact:
    """A file on disk that no record accounts for."""

    path: Path
    kind: Literal["binary", "symlink"]


@dataclass(frozen=True)
class AuditReport:
    violations: list[IntegrityViolation] = field(default_factory=list)
    orphans: list[OrphanArtifact] = field(default_factory=list)
    fixed: bool = False
    removed_records: list[PackageRecord] = field(default_factory=list)
    removed_orphans: list[OrphanArtifact] = field(default_factory=list)

    @property
    def clean(self) -> bool:
        return not self.violations and not self.orphans

    def raise_if_unfixed(self) -> None:
        """Raise IntegrityViolationError while broken records remain in the store."""
        remaining = [v for v in self.violations if v.record not in self.removed_records]
        if remaining:
            names = ", ".join(v.record.full_name for v in remaining)
            raise IntegrityViolationError(f"{len(remaining)} broken record(s): {names}")


class IntegrityAuditor:
    """Classifies records against the binary store naming rules.

    With ``sweep_orphans`` (config), fix mode also deletes unreferenced
    binaries and dangling symlinks; otherwise they are only reported.
    """

    def __init__(self, *, config: GaapConfig, store: PackageStore) -> None:
        self._dirs = config.directories
        self._sweep_orphans = config.sweep_orphans
        self._store = store

    def check_record(self, record: PackageRecord) -> str | None:
        """Return why ``record`` is broken, or None if it looks sound."""
        if not record.binary.strip():
            return "empty or whitespace binary name"

        root = self._dirs.bin_actual.resolve()
        path = (self._dirs.bin_actual / record.binary).resolve()
        if path == root or not path.is_relative_to(root):
            return f"binary path {path} is outside {root}"

        expected = {
            binary_name_for(record.owner, record.repo, record.version, exe=False),
            binary_name_for(record.owner, record.repo, record.version, exe=True),
        }
        if record.binary not in expected:
            return f"binary name '{record.binary}' does not follow owner-repo-version"
        return None

    def find_orphans(self, records: list[PackageRecord]) -> list[OrphanArtifact]:
        """Unreferenced binaries, plus symlinks that dangle or lead to one.

        A crash after linking but before the record write leaves both, so
        they are reported and swept together.
        """
        orphans: list[OrphanArtifact] = []
        referenced = {record.binary for record in records}
        if self._dirs.bin_actual.is_dir():
            for entry in sorted(self._dirs.bin_actual.iterdir()):
                if entry.is_file() and entry.name not in referenced:
                    orphans.append(OrphanArtifact(entry, "binary"))
        if self._dirs.bin.is_dir():
            store_root = self._dirs.bin_actual.resolve()
            for entry in sorted(self._dirs.bin.iterdir()):
                if entry.name in IGNORED_BIN_ENTRIES or not entry.is_symlink():
                    continue
                if not entry.exists():
                    orphans.append(OrphanArtifact(entry, "symlink"))
                    continue
                target = entry.resolve()
                if target.parent == store_root and target.name not in referenced:
                    orphans.append(OrphanArtifact(entry, "symlink"))
        return orphans

    def audit(self, *, fix: bool) -> AuditReport:
        """Check every record; in fix mode delete the broken ones.

        Records are only ever deleted here, never rewritten.
        """
        records = self._store.list_packages()
        violations = []
        for record in records:
            reason = self.check_record(record)
            if reason is not None:
                violations.append(IntegrityViolation(record, reason))
        orphans = self.find_orphans(records)

        if not fix:
            return AuditReport(violations=violations, orphans=orphans)

        removed_records: list[PackageRecord] = []
        for violation in violations:
            try:
                self._store.delete(violation.record.owner, violation.record.repo)
            except NotFoundError:
                logger.debug("Record %s vanished before removal", violation.record.full_name)
                continue
            removed_records.append(violation.record)

        removed_orphans: list[OrphanArtifact] = []
        if self._sweep_orphans:
            for orphan in orphans:
                try:
                    orphan.path.unlink(missing_ok=True)
                except OSError as e:
                    logger.warning("Failed to remove orphan %s: %s", orphan.path, e)
                    continue
                removed_orphans.append(orphan)

        return AuditReport(
            violations=violations,
            orphans=orphans,
            fixed=True,
            removed_records=removed_records,
            removed_orphans=removed_orphans,
        )
