"""Tests for repository choosers."""

import pytest
from rich.console import Console

from gaap.core.chooser.abc import SelectionCancelled
from gaap.core.chooser.fake import FakeRepositoryChooser
from gaap.core.chooser.interactive import build_candidate_table
from gaap.core.chooser.non_interactive import NonInteractiveChooser
from gaap.core.errors import AmbiguousRepositoryError
from tests.test_utils.builders import make_repo


def test_candidate_table_lists_every_candidate() -> None:
    candidates = [
        make_repo("sharkdp/bat", stars=45000, description="A cat(1) clone with wings."),
        make_repo("someone/bat", stars=3, description="x" * 300),
    ]
    console = Console(width=300, record=True)

    table = build_candidate_table("bat", candidates, total=2)
    console.print(table)
    rendered = console.export_text()

    assert table.row_count == 2
    assert "sharkdp/bat" in rendered
    assert "someone/bat" in rendered
    assert "x" * 300 not in rendered
    assert "..." in rendered


def test_non_interactive_chooser_raises_with_candidates() -> None:
    candidates = [make_repo(f"owner{i}/jq") for i in range(7)]

    with pytest.raises(AmbiguousRepositoryError) as exc_info:
        NonInteractiveChooser().present("jq", candidates)

    assert "matches 7 repositories" in str(exc_info.value)
    assert "(+2 more)" in str(exc_info.value)
    assert len(exc_info.value.candidates) == 7


def test_fake_chooser_records_and_cancels() -> None:
    chooser = FakeRepositoryChooser(pick_index=None)
    candidates = [make_repo("a/x"), make_repo("b/x")]

    result = chooser.present("x", candidates)

    assert isinstance(result, SelectionCancelled)
    assert chooser.presented == [("x", candidates)]
