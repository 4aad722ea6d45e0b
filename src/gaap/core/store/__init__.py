"""Metadata store: the durable record of what is installed."""

from gaap.core.store.abc import PackageStore
from gaap.core.store.fake import FakePackageStore
from gaap.core.store.sqlite import SqlitePackageStore
from gaap.core.store.types import PackageRecord

__all__ = ["FakePackageStore", "PackageRecord", "PackageStore", "SqlitePackageStore"]
