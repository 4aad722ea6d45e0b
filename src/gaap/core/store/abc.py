"""Abstract interface for the metadata store."""

from abc import ABC, abstractmethod

from gaap.core.store.types import PackageRecord


class PackageStore(ABC):
    """Durable CRUD over installed-package records keyed by (owner, repo)."""

    @abstractmethod
    def initialize(self) -> None:
        """Create the schema. Safe to call on every process start."""
        ...

    @abstractmethod
    def add(self, record: PackageRecord) -> PackageRecord:
        """Insert a new record.

        Returns:
            The stored record with installed_at and updated_at assigned

        Raises:
            AlreadyExistsError: If (owner, repo) is already present
        """
        ...

    @abstractmethod
    def get(self, owner: str, repo: str) -> PackageRecord | None:
        """Return the record, or None when the package is not installed."""
        ...

    @abstractmethod
    def list_packages(self) -> list[PackageRecord]:
        """Return all records ordered by owner, then repo."""
        ...

    @abstractmethod
    def update(self, record: PackageRecord) -> PackageRecord:
        """Overwrite version, binary, frozen and platform of an existing record.

        Returns:
            The stored record with a strictly later updated_at

        Raises:
            NotFoundError: If (owner, repo) is not present
        """
        ...

    @abstractmethod
    def delete(self, owner: str, repo: str) -> None:
        """Delete a record.

        Raises:
            NotFoundError: If (owner, repo) is not present
        """
        ...

    def close(self) -> None:
        """Release any held resources."""
