"""Pick the release asset that best matches a platform.

Two phases, both pure:

Phase A (pattern containment): try the patterns ``{os}_{arch}``,
``{os}-{arch}``, ``{os}`` and ``{os}{arch}`` in that order against every
case-folded asset name. For 32-bit ARM, names with a versioned ``armv`` suffix
are held back until no generic ARM name matched anywhere.

Phase B (scoring), only when Phase A found nothing: each name is scored
against SCORE_RULES and the highest positive score wins, the first-seen name
winning ties.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Literal

from gaap.core.errors import NoSuitableAssetError
from gaap.core.github.types import Asset
from gaap.core.platform import Platform

RuleKind = Literal["os", "arch", "any"]


@dataclass(frozen=True)
class ScoreRule:
    """One row of the scoring table.

    A rule applies when the platform's os (kind "os") or arch (kind "arch")
    equals ``target``; kind "any" applies to every platform. It matches a
    name containing any of ``tokens`` (or ending with ``suffix``) and none of
    ``unless``. A ``fallback`` rule only counts when no regular rule of the
    same kind matched the name.
    """

    kind: RuleKind
    target: str | None
    tokens: tuple[str, ...]
    points: int
    unless: tuple[str, ...] = ()
    suffix: str | None = None
    fallback: bool = False

    def applies_to(self, platform: Platform) -> bool:
        if self.kind == "os":
            return platform.os == self.target
        if self.kind == "arch":
            return platform.arch == self.target
        return True

    def matches(self, name: str) -> bool:
        if any(token in name for token in self.unless):
            return False
        if self.suffix is not None and name.endswith(self.suffix):
            return True
        return any(token in name for token in self.tokens)


SCORE_RULES: tuple[ScoreRule, ...] = (
    ScoreRule("os", "linux", ("linux",), 10),
    ScoreRule("os", "linux", ("gnu",), 5, fallback=True),
    ScoreRule("os", "darwin", ("darwin", "macos", "osx"), 10),
    ScoreRule("os", "windows", ("windows", "win"), 10),
    ScoreRule("os", "windows", (), 5, suffix=".exe", fallback=True),
    ScoreRule("arch", "amd64", ("amd64", "x86_64", "64"), 5),
    ScoreRule("arch", "386", ("386", "x86", "32"), 5),
    ScoreRule("arch", "arm64", ("arm64", "aarch64"), 5),
    ScoreRule("arch", "arm", ("arm",), 5, unless=("arm64",)),
    # versioned ARM builds are less preferred than generic ones
    ScoreRule("arch", "arm", ("armv",), -2, unless=("arm64",)),
    ScoreRule("any", None, ("src", "source"), -10),
)


def containment_patterns(platform: Platform) -> list[str]:
    os_name, arch = platform.os, platform.arch
    return [f"{os_name}_{arch}", f"{os_name}-{arch}", os_name, f"{os_name}{arch}"]


def _match_patterns(platform: Platform, names: Sequence[str], *, allow_armv: bool) -> int | None:
    for pattern in containment_patterns(platform):
        for index, name in enumerate(names):
            lowered = name.lower()
            if pattern not in lowered:
                continue
            if platform.arch == "arm" and not allow_armv and "armv" in lowered:
                continue
            return index
    return None


def score_name(platform: Platform, name: str, rules: Sequence[ScoreRule] = SCORE_RULES) -> int:
    """Score one asset name against the rule table."""
    lowered = name.lower()
    applicable = [rule for rule in rules if rule.applies_to(platform)]
    matched_kinds = {r.kind for r in applicable if not r.fallback and r.matches(lowered)}

    score = 0
    for rule in applicable:
        if rule.fallback and rule.kind in matched_kinds:
            continue
        if rule.matches(lowered):
            score += rule.points
    return score


def select_asset_index(platform: Platform, names: Sequence[str]) -> int:
    """Return the index of the best asset name for ``platform``.

    Raises:
        NoSuitableAssetError: If no name is usable on this platform
    """
    index = _match_patterns(platform, names, allow_armv=False)
    if index is None and platform.arch == "arm":
        index = _match_patterns(platform, names, allow_armv=True)
    if index is not None:
        return index

    best_index: int | None = None
    best_score = 0
    for position, name in enumerate(names):
        score = score_name(platform, name)
        if score > best_score:
            best_index, best_score = position, score

    if best_index is None:
        msg = f"no suitable asset found for platform {platform}"
        raise NoSuitableAssetError(msg)
    return best_index


def select_asset(platform: Platform, names: Sequence[str]) -> str:
    """Return the best asset name for ``platform``.

    Example:
        >>> select_asset(Platform("linux", "amd64"), ["app-darwin-amd64", "app-linux-amd64"])
        'app-linux-amd64'
    """
    return names[select_asset_index(platform, names)]


def select_release_asset(platform: Platform, assets: Sequence[Asset]) -> Asset:
    """Asset-typed wrapper around select_asset()."""
    return assets[select_asset_index(platform, [a.name for a in assets])]
