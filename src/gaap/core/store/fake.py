"""In-memory fake implementation of the metadata store."""

from dataclasses import replace

from gaap.core.errors import AlreadyExistsError, GaapError, NotFoundError
from gaap.core.store.abc import PackageStore
from gaap.core.store.types import PackageRecord, strictly_after
from gaap.core.time.abc import Time
from gaap.core.time.fake import FakeTime


class FakePackageStore(PackageStore):
    """In-memory fake implementation for testing.

    All state is provided via constructor. Injected errors are raised before
    any state changes, mimicking a database write that failed.
    """

    def __init__(
        self,
        records: list[PackageRecord] | None = None,
        *,
        time: Time | None = None,
        add_error: GaapError | None = None,
        update_error: GaapError | None = None,
        delete_error: GaapError | None = None,
    ) -> None:
        """Create FakePackageStore with pre-configured state.

        Args:
            records: Initially installed records (stored as given)
            time: Clock for assigned timestamps (default FakeTime)
            add_error: Raised by every add() call
            update_error: Raised by every update() call
            delete_error: Raised by every delete() call
        """
        self._records = {(r.owner, r.repo): r for r in records or []}
        self._time = time or FakeTime()
        self._add_error = add_error
        self._update_error = update_error
        self._delete_error = delete_error
        self._initialize_calls = 0
        self._added: list[PackageRecord] = []
        self._updated: list[PackageRecord] = []
        self._deleted: list[tuple[str, str]] = []

    @property
    def initialize_calls(self) -> int:
        return self._initialize_calls

    @property
    def added(self) -> list[PackageRecord]:
        """Records successfully passed to add(), for test assertions."""
        return self._added

    @property
    def updated(self) -> list[PackageRecord]:
        return self._updated

    @property
    def deleted(self) -> list[tuple[str, str]]:
        return self._deleted

    def initialize(self) -> None:
        self._initialize_calls += 1

    def add(self, record: PackageRecord) -> PackageRecord:
        if self._add_error is not None:
            raise self._add_error
        key = (record.owner, record.repo)
        if key in self._records:
            raise AlreadyExistsError(f"package {record.full_name} is already installed")
        now = self._time.now()
        stored = replace(record, installed_at=now, updated_at=now)
        self._records[key] = stored
        self._added.append(stored)
        return stored

    def get(self, owner: str, repo: str) -> PackageRecord | None:
        return self._records.get((owner, repo))

    def list_packages(self) -> list[PackageRecord]:
        return [self._records[key] for key in sorted(self._records)]

    def update(self, record: PackageRecord) -> PackageRecord:
        if self._update_error is not None:
            raise self._update_error
        key = (record.owner, record.repo)
        existing = self._records.get(key)
        if existing is None:
            raise NotFoundError(f"package not found: {record.full_name}")
        stored = replace(
            record,
            installed_at=existing.installed_at,
            updated_at=strictly_after(self._time.now(), existing.updated_at),
        )
        self._records[key] = stored
        self._updated.append(stored)
        return stored

    def delete(self, owner: str, repo: str) -> None:
        if self._delete_error is not None:
            raise self._delete_error
        if (owner, repo) not in self._records:
            raise NotFoundError(f"package not found: {owner}/{repo}")
        del self._records[(owner, repo)]
        self._deleted.append((owner, repo))
