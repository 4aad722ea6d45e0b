"""Tests for release asset selection."""

import pytest

from gaap.core.asset_selector import (
    containment_patterns,
    score_name,
    select_asset,
    select_release_asset,
)
from gaap.core.errors import NoSuitableAssetError
from gaap.core.platform import Platform
from tests.test_utils.builders import make_asset

LINUX_AMD64 = Platform("linux", "amd64")
LINUX_ARM = Platform("linux", "arm")
DARWIN_ARM64 = Platform("darwin", "arm64")
WINDOWS_AMD64 = Platform("windows", "amd64")


def test_selects_exact_os_arch_match() -> None:
    names = ["app-windows-amd64.exe", "app-linux-amd64", "app-darwin-amd64"]

    assert select_asset(LINUX_AMD64, names) == "app-linux-amd64"


def test_exact_arch_beats_universal_build() -> None:
    names = ["app-macos-universal", "app-macos-x86_64", "app-macos-arm64"]

    assert select_asset(DARWIN_ARM64, names) == "app-macos-arm64"


def test_no_os_or_arch_token_raises() -> None:
    with pytest.raises(NoSuitableAssetError, match="linux-amd64"):
        select_asset(LINUX_AMD64, ["app.tar.gz", "checksums.txt"])


def test_empty_asset_list_raises() -> None:
    with pytest.raises(NoSuitableAssetError):
        select_asset(LINUX_AMD64, [])


def test_pattern_order_takes_priority_over_name_order() -> None:
    names = ["tool-linux-amd64.tar.gz", "tool_linux_amd64.tar.gz"]

    assert select_asset(LINUX_AMD64, names) == "tool_linux_amd64.tar.gz"


def test_containment_is_case_insensitive() -> None:
    assert select_asset(LINUX_AMD64, ["Tool_Linux_AMD64.zip"]) == "Tool_Linux_AMD64.zip"


def test_os_only_pattern_matches_before_scoring() -> None:
    """A bare OS match in phase A ends selection even when the arch differs."""
    names = ["tool-x86_64.tar.gz", "tool-linux-arm64.tar.gz"]

    assert select_asset(LINUX_AMD64, names) == "tool-linux-arm64.tar.gz"


def test_arm_prefers_generic_name_over_versioned() -> None:
    names = ["tool-linux-armv6", "tool-linux-arm"]

    assert select_asset(LINUX_ARM, names) == "tool-linux-arm"


def test_arm_falls_back_to_versioned_name() -> None:
    assert select_asset(LINUX_ARM, ["tool-linux-armv7"]) == "tool-linux-armv7"


def test_scoring_uses_os_aliases() -> None:
    names = ["tool-src.tar.gz", "tool-win64.zip"]

    assert select_asset(WINDOWS_AMD64, names) == "tool-win64.zip"


def test_exe_suffix_counts_only_without_os_token() -> None:
    assert select_asset(WINDOWS_AMD64, ["tool.tar.gz", "tool.exe"]) == "tool.exe"
    assert score_name(WINDOWS_AMD64, "tool.exe") == 5
    assert score_name(WINDOWS_AMD64, "tool-windows.exe") == 10


def test_exe_suffix_ignored_on_other_platforms() -> None:
    assert score_name(LINUX_AMD64, "tool.exe") == 0


def test_gnu_scores_for_linux_without_linux_token() -> None:
    names = ["tool-x86_64-apple-darwin.tar.gz", "tool-x86_64-unknown-gnu.tar.gz"]

    assert select_asset(LINUX_AMD64, names) == "tool-x86_64-unknown-gnu.tar.gz"
    assert score_name(LINUX_AMD64, "tool-x86_64-unknown-gnu.tar.gz") == 10


def test_source_archives_are_penalized() -> None:
    names = ["tool-src-x86_64.tar.gz", "tool-x86_64.tar.gz"]

    assert select_asset(LINUX_AMD64, names) == "tool-x86_64.tar.gz"
    assert score_name(LINUX_AMD64, "tool-src-x86_64.tar.gz") == -5


def test_versioned_arm_is_penalized_in_scoring() -> None:
    assert score_name(LINUX_ARM, "tool-arm.tar.gz") == 5
    assert score_name(LINUX_ARM, "tool-armv7.tar.gz") == 3
    assert score_name(LINUX_ARM, "tool-arm64.tar.gz") == 0


def test_ties_keep_first_seen() -> None:
    names = ["a-x86_64.zip", "b-x86_64.zip"]

    assert select_asset(LINUX_AMD64, names) == "a-x86_64.zip"


def test_selection_is_deterministic() -> None:
    names = ["app-macos-universal", "app-macos-x86_64", "app-macos-arm64"]

    results = {select_asset(DARWIN_ARM64, names) for _ in range(5)}

    assert results == {"app-macos-arm64"}


def test_containment_patterns_order() -> None:
    assert containment_patterns(LINUX_AMD64) == [
        "linux_amd64",
        "linux-amd64",
        "linux",
        "linuxamd64",
    ]


def test_select_release_asset_returns_asset() -> None:
    assets = [make_asset("app-darwin-amd64"), make_asset("app-linux-amd64", size=42)]

    chosen = select_release_asset(LINUX_AMD64, assets)

    assert chosen.name == "app-linux-amd64"
    assert chosen.size == 42
