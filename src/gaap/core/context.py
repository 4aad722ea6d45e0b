"""Application context with dependency injection."""

import os
from dataclasses import dataclass

import click

from gaap.cli.output import user_output
from gaap.core.auditor import IntegrityAuditor
from gaap.core.cancellation import CancellationToken
from gaap.core.chooser.abc import RepositoryChooser
from gaap.core.chooser.interactive import InteractiveChooser
from gaap.core.chooser.non_interactive import NonInteractiveChooser
from gaap.core.config import (
    ConfigStore,
    FilesystemConfigStore,
    GaapConfig,
    apply_environment,
)
from gaap.core.engine import PackageEngine
from gaap.core.github.abc import GitHub
from gaap.core.github.real import RealGitHub
from gaap.core.platform import Platform
from gaap.core.resolver import RepositoryResolver
from gaap.core.store.abc import PackageStore
from gaap.core.store.sqlite import SqlitePackageStore
from gaap.core.time.abc import Time
from gaap.core.time.real import RealTime
from gaap.core.user_feedback import InteractiveFeedback, SuppressedFeedback, UserFeedback


@dataclass(frozen=True)
class GaapContext:
    """Immutable context holding all dependencies for gaap operations.

    Created at CLI entry point and threaded through the application.
    Frozen to prevent accidental modification at runtime.
    """

    config: GaapConfig
    config_store: ConfigStore
    github: GitHub
    store: PackageStore
    chooser: RepositoryChooser
    feedback: UserFeedback
    time: Time
    platform: Platform

    def new_token(self) -> CancellationToken:
        """One deadline per operation, sized by the configured timeout."""
        return CancellationToken(self.time, self.config.timeout_seconds)

    def resolver(self, *, non_interactive: bool = False) -> RepositoryResolver:
        chooser = NonInteractiveChooser() if non_interactive else self.chooser
        return RepositoryResolver(self.github, chooser)

    def engine(self, *, non_interactive: bool = False) -> PackageEngine:
        return PackageEngine(
            config=self.config,
            github=self.github,
            store=self.store,
            resolver=self.resolver(non_interactive=non_interactive),
            platform=self.platform,
        )

    def auditor(self) -> IntegrityAuditor:
        return IntegrityAuditor(config=self.config, store=self.store)

    @staticmethod
    def for_test(
        config: GaapConfig | None = None,
        config_store: ConfigStore | None = None,
        github: GitHub | None = None,
        store: PackageStore | None = None,
        chooser: RepositoryChooser | None = None,
        feedback: UserFeedback | None = None,
        time: Time | None = None,
        platform: Platform | None = None,
    ) -> "GaapContext":
        """Create test context with optional pre-configured integration classes.

        Any dependency left as None gets an empty fake. The default config
        points at a sentinel root; tests that touch the filesystem should pass
        a config rooted at ``tmp_path``.

        Example:
            >>> github = FakeGitHub(releases={"cli/cli": [Release(...)]})
            >>> ctx = GaapContext.for_test(github=github, config=config_at(tmp_path))
        """
        from tests.fakes.user_feedback import FakeUserFeedback
        from tests.test_utils import sentinel_path

        from gaap.core.chooser.fake import FakeRepositoryChooser
        from gaap.core.config import InMemoryConfigStore
        from gaap.core.github.fake import FakeGitHub
        from gaap.core.store.fake import FakePackageStore
        from gaap.core.time.fake import FakeTime

        if time is None:
            time = FakeTime()

        if config is None:
            config = GaapConfig(root_dir=sentinel_path(), github_token=None)

        if config_store is None:
            config_store = InMemoryConfigStore(config=config)

        if github is None:
            github = FakeGitHub()

        if store is None:
            store = FakePackageStore(time=time)

        if chooser is None:
            chooser = FakeRepositoryChooser()

        if feedback is None:
            feedback = FakeUserFeedback()

        if platform is None:
            platform = Platform("linux", "amd64")

        return GaapContext(
            config=config,
            config_store=config_store,
            github=github,
            store=store,
            chooser=chooser,
            feedback=feedback,
            time=time,
            platform=platform,
        )


def create_context(*, quiet: bool = False) -> GaapContext:
    """Create production context with real implementations.

    Called at CLI entry point to create the context for the entire
    command execution. Nothing here touches the network or creates
    directories; commands that need the database open it themselves.

    Args:
        quiet: If True, use SuppressedFeedback so only errors are printed
    """
    # 1. Load config (file + environment overrides)
    config_store = FilesystemConfigStore()
    try:
        config = apply_environment(config_store.load(), os.environ)
    except ValueError as e:
        user_output(click.style("Error: ", fg="red") + str(e))
        raise SystemExit(1) from e

    # 2. Create integration classes
    time = RealTime()
    github = RealGitHub(github_token=config.github_token)
    store = SqlitePackageStore(config.directories.database, time)

    # 3. Choose feedback implementation based on mode
    feedback: UserFeedback
    if quiet:
        feedback = SuppressedFeedback()
    else:
        feedback = InteractiveFeedback()

    return GaapContext(
        config=config,
        config_store=config_store,
        github=github,
        store=store,
        chooser=InteractiveChooser(),
        feedback=feedback,
        time=time,
        platform=Platform.current(),
    )
