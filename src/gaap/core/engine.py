"""Package transition engine: install, update and remove.

Each transition touches three resources: the binary in ``bin/actual``, the
command symlink in ``bin`` and the metadata record. They cannot be written
atomically together, so the engine writes filesystem artifacts first and the
record last. When the record write fails it removes whatever it created in
this call (symlink, then binary) and re-raises the original error. A crash
between the two still leaves orphaned artifacts; ``gaap doctor`` reports them.
"""

import logging
import os
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path

from gaap.core.asset_selector import select_release_asset
from gaap.core.cancellation import CancellationToken
from gaap.core.config import GaapConfig, ensure_directories
from gaap.core.errors import (
    AlreadyExistsError,
    FilesystemError,
    GaapError,
    InvalidPackageNameError,
    NotFoundError,
    OperationCancelled,
)
from gaap.core.github.abc import GitHub
from gaap.core.github.types import Asset
from gaap.core.platform import Platform
from gaap.core.resolver import RepositoryResolver, parse_query
from gaap.core.store.abc import PackageStore
from gaap.core.store.types import PackageRecord

logger = logging.getLogger(__name__)

EXECUTABLE_MODE = 0o755


def binary_name_for(owner: str, repo: str, version: str, *, exe: bool) -> str:
    """Deterministic binary store file name: ``{owner}-{repo}-{tag}[.exe]``.

    Path separators in tags (e.g. "release/1.0") are replaced so the name
    always stays a single path component.
    """
    safe_version = version.replace("/", "_").replace("\\", "_")
    name = f"{owner}-{repo}-{safe_version}"
    if exe:
        name += ".exe"
    return name


@contextmanager
def _annotated(operation: str, package: str) -> Iterator[None]:
    try:
        yield
    except GaapError as e:
        e.annotate(operation, package)
        raise


def _chmod_executable(path: Path) -> None:
    try:
        path.chmod(EXECUTABLE_MODE)
    except OSError as e:
        raise FilesystemError(f"failed to make {path} executable: {e}") from e


def _replace_symlink(target: Path, link: Path) -> None:
    """Point ``link`` at ``target`` without a moment where ``link`` is missing."""
    temp = link.with_name(f".{link.name}.gaap-tmp")
    try:
        temp.unlink(missing_ok=True)
        os.symlink(target, temp)
        os.replace(temp, link)
    except OSError as e:
        temp.unlink(missing_ok=True)
        raise FilesystemError(f"failed to create symlink {link} -> {target}: {e}") from e


def _unlink_if_present(path: Path, what: str) -> bool:
    """Delete ``path``; a missing file is not an error. Returns True if deleted."""
    try:
        path.unlink()
    except FileNotFoundError:
        return False
    except OSError as e:
        raise FilesystemError(f"failed to remove {what} {path}: {e}") from e
    return True


def _read_symlink(link: Path) -> Path | None:
    if not link.is_symlink():
        return None
    return Path(os.readlink(link))


@dataclass(frozen=True)
class InstallPlan:
    """Everything an install will do, computed before any mutation."""

    owner: str
    repo: str
    version: str
    asset: Asset
    binary_path: Path
    symlink_path: Path
    platform: Platform
    frozen: bool

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"


@dataclass(frozen=True)
class InstallOutcome:
    plan: InstallPlan
    dry_run: bool
    record: PackageRecord | None  # None in dry-run mode


class UpdateStatus(Enum):
    UPDATED = "updated"
    PLANNED = "planned"
    SKIPPED_FROZEN = "skipped_frozen"
    ALREADY_LATEST = "already_latest"
    DECLINED = "declined"


@dataclass(frozen=True)
class UpdateOutcome:
    owner: str
    repo: str
    status: UpdateStatus
    from_version: str
    to_version: str | None = None
    asset: Asset | None = None
    record: PackageRecord | None = None

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"


@dataclass(frozen=True)
class RemoveOutcome:
    record: PackageRecord
    binary_path: Path
    symlink_path: Path
    dry_run: bool
    removed_symlink: bool = False
    removed_binary: bool = False


@dataclass(frozen=True)
class PackageFailure:
    owner: str
    repo: str
    error: GaapError

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"


@dataclass(frozen=True)
class BatchUpdateReport:
    """Per-package results of update_all(); failures never abort the batch."""

    outcomes: list[UpdateOutcome] = field(default_factory=list)
    failures: list[PackageFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    def with_status(self, status: UpdateStatus) -> list[UpdateOutcome]:
        return [o for o in self.outcomes if o.status == status]


class PackageEngine:
    """Drives packages between Absent and Installed.

    Args:
        config: Process configuration (root directory layout)
        github: Release source
        store: Metadata store
        resolver: Turns install input into a repository
        platform: Platform used for asset selection and symlink naming
    """

    def __init__(
        self,
        *,
        config: GaapConfig,
        github: GitHub,
        store: PackageStore,
        resolver: RepositoryResolver,
        platform: Platform,
    ) -> None:
        self._dirs = config.directories
        self._github = github
        self._store = store
        self._resolver = resolver
        self._platform = platform

    def binary_path(self, binary: str) -> Path:
        return self._dirs.bin_actual / binary

    def symlink_path(self, repo: str) -> Path:
        name = f"{repo}.exe" if self._platform.is_windows else repo
        return self._dirs.bin / name

    def _ensure_layout(self) -> None:
        try:
            ensure_directories(self._dirs)
        except OSError as e:
            msg = f"failed to create gaap directories under {self._dirs.root}: {e}"
            raise FilesystemError(msg) from e

    def lookup(self, name: str) -> PackageRecord:
        """Find an installed package by "owner/repo", or by repo name alone.

        Raises:
            NotFoundError: If nothing installed matches
            InvalidPackageNameError: If a bare name matches several packages
        """
        query = parse_query(name)
        if query.owner is not None:
            record = self._store.get(query.owner, query.name)
            if record is None:
                raise NotFoundError(f"package not found: {query.owner}/{query.name}")
            return record

        matches = [r for r in self._store.list_packages() if r.repo == query.name]
        if not matches:
            raise NotFoundError(f"package not found: {query.name}")
        if len(matches) > 1:
            names = ", ".join(r.full_name for r in matches)
            raise InvalidPackageNameError(f"'{query.name}' is ambiguous: {names}")
        return matches[0]

    def _check_command_free(self, owner: str, repo: str) -> None:
        """The symlink is named after the repo, so two owners cannot share a repo name."""
        for record in self._store.list_packages():
            if record.repo == repo and (record.owner, record.repo) != (owner, repo):
                msg = f"command '{repo}' is already provided by {record.full_name}"
                raise AlreadyExistsError(msg)

    def install(
        self,
        query: str,
        *,
        freeze: bool,
        dry_run: bool,
        token: CancellationToken,
        confirm: Callable[[InstallPlan], bool] | None = None,
    ) -> InstallOutcome:
        """Install the latest release of the repository ``query`` names.

        ``confirm`` sees the plan before anything is written; returning False
        cancels the install.

        Raises:
            OperationCancelled: If ``confirm`` declines the plan
            AlreadyExistsError: If the package (or its command name) is taken
            NoSuitableAssetError: If no release asset fits the platform
            UpstreamError: On search, release or download failure
            FilesystemError: If creating, chmodding or linking fails
        """
        with _annotated("install", query):
            repository = self._resolver.resolve(query, token)

        owner, repo = repository.owner, repository.name
        with _annotated("install", f"{owner}/{repo}"):
            if self._store.get(owner, repo) is not None:
                raise AlreadyExistsError(f"package {owner}/{repo} is already installed")
            self._check_command_free(owner, repo)

            release = self._github.get_latest_release(owner, repo, token)
            asset = select_release_asset(self._platform, release.assets)
            exe = asset.name.lower().endswith(".exe")
            plan = InstallPlan(
                owner=owner,
                repo=repo,
                version=release.tag_name,
                asset=asset,
                binary_path=self.binary_path(
                    binary_name_for(owner, repo, release.tag_name, exe=exe)
                ),
                symlink_path=self.symlink_path(repo),
                platform=self._platform,
                frozen=freeze,
            )
            if dry_run:
                return InstallOutcome(plan=plan, dry_run=True, record=None)
            if confirm is not None:
                if not confirm(plan):
                    raise OperationCancelled("installation cancelled by user")
                token.restart()

            record = self._apply_install(plan, token)
        return InstallOutcome(plan=plan, dry_run=False, record=record)

    def _apply_install(self, plan: InstallPlan, token: CancellationToken) -> PackageRecord:
        self._ensure_layout()
        created_binary = False
        created_symlink = False
        try:
            self._github.download_asset(plan.asset, plan.binary_path, token)
            created_binary = True
            _chmod_executable(plan.binary_path)
            _replace_symlink(plan.binary_path, plan.symlink_path)
            created_symlink = True
            return self._store.add(
                PackageRecord(
                    owner=plan.owner,
                    repo=plan.repo,
                    version=plan.version,
                    binary=plan.binary_path.name,
                    frozen=plan.frozen,
                    platform=str(plan.platform),
                )
            )
        except GaapError:
            self._compensate(
                symlink=plan.symlink_path if created_symlink else None,
                binary=plan.binary_path if created_binary else None,
            )
            raise

    def _compensate(self, *, symlink: Path | None, binary: Path | None) -> None:
        """Best-effort removal of artifacts created by a failed transition."""
        for path, what in ((symlink, "symlink"), (binary, "binary")):
            if path is None:
                continue
            try:
                _unlink_if_present(path, what)
            except FilesystemError as e:
                logger.warning("Cleanup after failed operation could not remove %s: %s", path, e)

    def _restore_symlink(self, symlink: Path, previous_target: Path | None) -> None:
        try:
            if previous_target is None:
                _unlink_if_present(symlink, "symlink")
            else:
                _replace_symlink(previous_target, symlink)
        except FilesystemError as e:
            logger.warning("Could not restore symlink %s: %s", symlink, e)

    def update(
        self,
        owner: str,
        repo: str,
        *,
        dry_run: bool,
        token: CancellationToken,
        confirm: Callable[[UpdateOutcome], bool] | None = None,
    ) -> UpdateOutcome:
        """Move an installed package to the latest release.

        Frozen packages and packages already at the latest tag are reported,
        not treated as errors. Frozen packages cause no network traffic.
        ``confirm`` receives the PLANNED outcome before the download.

        Raises:
            NotFoundError: If the package is not installed
            OperationCancelled: If ``confirm`` declines the plan
        """
        with _annotated("update", f"{owner}/{repo}"):
            record = self._store.get(owner, repo)
            if record is None:
                raise NotFoundError(f"package not found: {owner}/{repo}")
            if record.frozen:
                return UpdateOutcome(
                    owner, repo, UpdateStatus.SKIPPED_FROZEN, from_version=record.version
                )

            release = self._github.get_latest_release(owner, repo, token)
            if release.tag_name == record.version:
                return UpdateOutcome(
                    owner,
                    repo,
                    UpdateStatus.ALREADY_LATEST,
                    from_version=record.version,
                    to_version=release.tag_name,
                )

            asset = select_release_asset(self._platform, release.assets)
            planned = UpdateOutcome(
                owner,
                repo,
                UpdateStatus.PLANNED,
                from_version=record.version,
                to_version=release.tag_name,
                asset=asset,
            )
            if dry_run:
                return planned
            if confirm is not None:
                if not confirm(planned):
                    raise OperationCancelled("update cancelled by user")
                token.restart()

            updated = self._apply_update(record, release.tag_name, asset, token)
        return UpdateOutcome(
            owner,
            repo,
            UpdateStatus.UPDATED,
            from_version=record.version,
            to_version=release.tag_name,
            asset=asset,
            record=updated,
        )

    def _apply_update(
        self, record: PackageRecord, version: str, asset: Asset, token: CancellationToken
    ) -> PackageRecord:
        self._ensure_layout()
        exe = asset.name.lower().endswith(".exe")
        old_binary = self.binary_path(record.binary)
        new_binary = self.binary_path(binary_name_for(record.owner, record.repo, version, exe=exe))
        symlink = self.symlink_path(record.repo)
        previous_target = _read_symlink(symlink)

        downloaded = False
        relinked = False
        try:
            self._github.download_asset(asset, new_binary, token)
            downloaded = True
            _chmod_executable(new_binary)
            _replace_symlink(new_binary, symlink)
            relinked = True
            stored = self._store.update(
                replace(
                    record,
                    version=version,
                    binary=new_binary.name,
                    platform=str(self._platform),
                )
            )
        except GaapError:
            if relinked:
                self._restore_symlink(symlink, previous_target)
            if downloaded and new_binary != old_binary:
                self._compensate(symlink=None, binary=new_binary)
            raise

        if new_binary != old_binary:
            try:
                _unlink_if_present(old_binary, "previous binary")
            except FilesystemError as e:
                logger.warning("Updated %s but %s", record.full_name, e)
        return stored

    def update_all(
        self,
        *,
        dry_run: bool,
        token_factory: Callable[[], CancellationToken],
        confirm: Callable[[UpdateOutcome], bool] | None = None,
    ) -> BatchUpdateReport:
        """Update every installed package, one at a time.

        Frozen packages are filtered out before update() is called. A failing
        package is recorded in the report and the batch moves on; a declined
        one is reported as DECLINED.
        """
        report = BatchUpdateReport()
        for record in self._store.list_packages():
            if record.frozen:
                report.outcomes.append(
                    UpdateOutcome(
                        record.owner,
                        record.repo,
                        UpdateStatus.SKIPPED_FROZEN,
                        from_version=record.version,
                    )
                )
                continue
            try:
                outcome = self.update(
                    record.owner,
                    record.repo,
                    dry_run=dry_run,
                    token=token_factory(),
                    confirm=confirm,
                )
            except OperationCancelled:
                report.outcomes.append(
                    UpdateOutcome(
                        record.owner,
                        record.repo,
                        UpdateStatus.DECLINED,
                        from_version=record.version,
                    )
                )
                continue
            except GaapError as e:
                logger.debug("Update of %s failed: %s", record.full_name, e)
                report.failures.append(PackageFailure(record.owner, record.repo, e))
                continue
            report.outcomes.append(outcome)
        return report

    def remove(self, owner: str, repo: str, *, dry_run: bool) -> RemoveOutcome:
        """Delete symlink, binary, then record, in that order.

        Missing symlink or binary files are tolerated; the record must exist.

        Raises:
            NotFoundError: If the package is not installed
            FilesystemError: If a file exists but cannot be deleted
        """
        with _annotated("remove", f"{owner}/{repo}"):
            record = self._store.get(owner, repo)
            if record is None:
                raise NotFoundError(f"package not found: {owner}/{repo}")
            binary = self.binary_path(record.binary)
            symlink = self.symlink_path(repo)
            if dry_run:
                return RemoveOutcome(record, binary, symlink, dry_run=True)

            removed_symlink = _unlink_if_present(symlink, "symlink")
            removed_binary = _unlink_if_present(binary, "binary")
            self._store.delete(owner, repo)
        return RemoveOutcome(
            record,
            binary,
            symlink,
            dry_run=False,
            removed_symlink=removed_symlink,
            removed_binary=removed_binary,
        )

    def set_frozen(self, owner: str, repo: str, frozen: bool) -> PackageRecord:
        """Freeze or unfreeze an installed package."""
        operation = "freeze" if frozen else "unfreeze"
        with _annotated(operation, f"{owner}/{repo}"):
            record = self._store.get(owner, repo)
            if record is None:
                raise NotFoundError(f"package not found: {owner}/{repo}")
            if record.frozen == frozen:
                return record
            return self._store.update(replace(record, frozen=frozen))
