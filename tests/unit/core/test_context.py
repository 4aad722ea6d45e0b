"""Tests for GaapContext wiring."""

import pytest

from gaap.core.chooser.fake import FakeRepositoryChooser
from gaap.core.config import GaapConfig
from gaap.core.context import GaapContext
from gaap.core.errors import AmbiguousRepositoryError
from gaap.core.github.fake import FakeGitHub
from gaap.core.store.fake import FakePackageStore
from gaap.core.time.fake import FakeTime
from tests.fakes.user_feedback import FakeUserFeedback
from tests.test_utils import sentinel_path
from tests.test_utils.builders import make_repo, search_hit


def test_for_test_provides_fakes() -> None:
    ctx = GaapContext.for_test()

    assert isinstance(ctx.github, FakeGitHub)
    assert isinstance(ctx.store, FakePackageStore)
    assert isinstance(ctx.chooser, FakeRepositoryChooser)
    assert isinstance(ctx.feedback, FakeUserFeedback)
    assert ctx.config.root_dir == sentinel_path()
    assert str(ctx.platform) == "linux-amd64"


def test_new_token_uses_configured_timeout() -> None:
    time = FakeTime()
    config = GaapConfig(root_dir=sentinel_path(), github_token=None, timeout_seconds=7.0)
    ctx = GaapContext.for_test(config=config, time=time)

    token = ctx.new_token()
    time.advance(2.0)

    assert token.remaining() == 5.0


def test_non_interactive_resolver_never_prompts() -> None:
    hits = search_hit(make_repo("a/jq"), make_repo("b/jq"))
    github = FakeGitHub(search_results={"in:name jq sort:stars-desc": hits})
    chooser = FakeRepositoryChooser()
    ctx = GaapContext.for_test(github=github, chooser=chooser)

    with pytest.raises(AmbiguousRepositoryError):
        ctx.resolver(non_interactive=True).resolve("jq", ctx.new_token())
    assert chooser.presented == []

    picked = ctx.resolver().resolve("jq", ctx.new_token())

    assert picked.full_name == "a/jq"
    assert len(chooser.presented) == 1
