"""Progress and result messages for people at a terminal."""

from abc import ABC, abstractmethod

import click

from gaap.cli.output import user_output


class UserFeedback(ABC):
    """Where commands send "Installed ...", "Skipped ..." and similar lines.

    The implementation is picked once from ``--quiet`` when the context is
    built; machine-readable output goes through machine_output() instead.
    """

    @abstractmethod
    def info(self, message: str) -> None: ...

    @abstractmethod
    def success(self, message: str) -> None: ...

    @abstractmethod
    def error(self, message: str) -> None:
        """Shown even with --quiet."""


class InteractiveFeedback(UserFeedback):
    def info(self, message: str) -> None:
        user_output(message)

    def success(self, message: str) -> None:
        user_output(click.style(message, fg="green"))

    def error(self, message: str) -> None:
        user_output(click.style(message, fg="red"))


class SuppressedFeedback(UserFeedback):
    """--quiet: drops info and success lines."""

    def info(self, message: str) -> None:
        pass

    def success(self, message: str) -> None:
        pass

    def error(self, message: str) -> None:
        user_output(click.style(message, fg="red"))
