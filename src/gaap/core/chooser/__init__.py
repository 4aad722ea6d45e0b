from gaap.core.chooser.abc import RepositoryChooser, SelectionCancelled
from gaap.core.chooser.interactive import InteractiveChooser
from gaap.core.chooser.non_interactive import NonInteractiveChooser

__all__ = ["InteractiveChooser", "NonInteractiveChooser", "RepositoryChooser", "SelectionCancelled"]
