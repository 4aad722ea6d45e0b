"""Configuration data structures and loading.

Provides immutable config data loaded from ~/.config/gaap/config.toml once at
the CLI entry point and passed into every component's constructor.
"""

import tomllib
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, replace
from pathlib import Path

import tomlkit

DEFAULT_TIMEOUT_SECONDS = 30.0

BIN_README = """# GAAP Binaries Directory

This directory contains symlinks to installed binaries.
Do not modify the contents of this directory manually.
Use the `gaap` command-line tool to manage packages.
"""


@dataclass(frozen=True)
class GaapDirectories:
    """Filesystem layout derived from the root directory."""

    root: Path
    bin: Path
    bin_actual: Path
    config: Path
    db: Path
    logs: Path

    @staticmethod
    def under(root: Path) -> "GaapDirectories":
        return GaapDirectories(
            root=root,
            bin=root / "bin",
            bin_actual=root / "bin" / "actual",
            config=root / "config",
            db=root / "db",
            logs=root / "logs",
        )

    @property
    def database(self) -> Path:
        return self.db / "gaap.db"


@dataclass(frozen=True)
class GaapConfig:
    """Immutable process configuration.

    All fields are read-only after construction.
    """

    root_dir: Path
    github_token: str | None
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    # Let `doctor --fix` delete unreferenced binaries and dangling symlinks.
    sweep_orphans: bool = False

    @property
    def directories(self) -> GaapDirectories:
        return GaapDirectories.under(self.root_dir)

    @staticmethod
    def default() -> "GaapConfig":
        return GaapConfig(root_dir=Path.home() / "gaap", github_token=None)


def ensure_directories(dirs: GaapDirectories) -> None:
    """Create the full directory layout and the bin README.

    Raises:
        PermissionError: If a directory cannot be created
    """
    for directory in (dirs.root, dirs.bin, dirs.bin_actual, dirs.config, dirs.db, dirs.logs):
        directory.mkdir(parents=True, exist_ok=True)
    readme = dirs.bin / "README.md"
    if not readme.exists():
        readme.write_text(BIN_README, encoding="utf-8")


def expand_root(raw: str) -> Path:
    """Expand ~ and make a user-supplied root directory absolute."""
    return Path(raw).expanduser().resolve()


def apply_environment(config: GaapConfig, environ: Mapping[str, str]) -> GaapConfig:
    """Overlay GAAP_ROOT and GITHUB_TOKEN on stored config.

    The result is for the running process only. Persist changes to what
    ConfigStore.load() returned, not to this.
    """
    root = environ.get("GAAP_ROOT")
    token = environ.get("GITHUB_TOKEN")
    return replace(
        config,
        root_dir=expand_root(root) if root else config.root_dir,
        github_token=token or config.github_token,
    )


class ConfigStore(ABC):
    """Abstract interface for config persistence.

    Enables in-memory implementations for tests without touching the filesystem.
    """

    @abstractmethod
    def exists(self) -> bool:
        """Check if a config file exists."""
        ...

    @abstractmethod
    def load(self) -> GaapConfig:
        """Load config, falling back to defaults when nothing is stored.

        Raises:
            ValueError: If the stored config is malformed
        """
        ...

    @abstractmethod
    def save(self, config: GaapConfig) -> None:
        """Persist config."""
        ...

    @abstractmethod
    def path(self) -> Path:
        """Path to the config file (for messages)."""
        ...


class FilesystemConfigStore(ConfigStore):
    """Production implementation that reads/writes ~/.config/gaap/config.toml."""

    def __init__(self, config_path: Path | None = None) -> None:
        self._path = config_path

    def exists(self) -> bool:
        return self.path().exists()

    def load(self) -> GaapConfig:
        config_path = self.path()
        data: dict[str, object] = {}
        if config_path.exists():
            try:
                data = tomllib.loads(config_path.read_text(encoding="utf-8"))
            except tomllib.TOMLDecodeError as e:
                raise ValueError(f"Malformed config at {config_path}: {e}") from e

        default = GaapConfig.default()
        root = data.get("root_dir")
        token = data.get("github_token")
        timeout = data.get("timeout_seconds", DEFAULT_TIMEOUT_SECONDS)
        if not isinstance(timeout, int | float) or timeout <= 0:
            raise ValueError(f"'timeout_seconds' must be a positive number in {config_path}")

        return GaapConfig(
            root_dir=expand_root(str(root)) if root else default.root_dir,
            github_token=str(token) if token else None,
            timeout_seconds=float(timeout),
            sweep_orphans=bool(data.get("sweep_orphans", False)),
        )

    def save(self, config: GaapConfig) -> None:
        """Write config, preserving comments in an existing file.

        Raises:
            PermissionError: If the directory or file cannot be written
        """
        config_path = self.path()
        parent = config_path.parent

        try:
            parent.mkdir(parents=True, exist_ok=True)
        except PermissionError:
            raise PermissionError(
                f"Cannot create directory: {parent}\n"
                f"Check permissions on your home directory."
            ) from None

        if config_path.exists():
            doc = tomlkit.parse(config_path.read_text(encoding="utf-8"))
        else:
            doc = tomlkit.document()
            doc.add(tomlkit.comment("gaap configuration"))

        doc["root_dir"] = str(config.root_dir)
        if config.github_token:
            doc["github_token"] = config.github_token
        elif "github_token" in doc:
            del doc["github_token"]
        doc["timeout_seconds"] = config.timeout_seconds
        doc["sweep_orphans"] = config.sweep_orphans

        try:
            config_path.write_text(tomlkit.dumps(doc), encoding="utf-8")
        except PermissionError:
            raise PermissionError(
                f"Cannot write to file: {config_path}\n"
                f"Permission denied during write operation."
            ) from None

    def path(self) -> Path:
        if self._path is not None:
            return self._path
        return Path.home() / ".config" / "gaap" / "config.toml"


class InMemoryConfigStore(ConfigStore):
    """Test implementation that stores config in memory."""

    def __init__(self, config: GaapConfig | None = None) -> None:
        """Args:
        config: Initial config state (None = nothing stored, load() gives defaults)
        """
        self._config = config
        self._saved: list[GaapConfig] = []

    @property
    def saved(self) -> list[GaapConfig]:
        """Configs passed to save(), for test assertions."""
        return self._saved

    def exists(self) -> bool:
        return self._config is not None

    def load(self) -> GaapConfig:
        if self._config is None:
            return GaapConfig.default()
        return self._config

    def save(self, config: GaapConfig) -> None:
        self._config = config
        self._saved.append(config)

    def path(self) -> Path:
        return Path("/fake/gaap/config.toml")
