"""Unit tests for git history enrichment."""

import random
from datetime import timedelta
from pathlib import Path
from unittest import mock

import git
import pytest

from fossil.history import HistoryEnricher, enrich_markers, open_repository, relative_to_work_tree
from fossil.models import DebtMarker, ScanConfig
from fossil.scanning import scan_directory


def make_marker(file_path: Path, line_number: int) -> DebtMarker:
    return DebtMarker(
        marker_type="TODO",
        file_path=file_path,
        line_number=line_number,
        line_content="# TODO: test",
    )


def test_open_repository(test_repo, tmp_dir):
    """A work tree is found; a plain directory yields None."""
    repo = open_repository(test_repo)
    assert repo is not None
    repo.close()

    assert open_repository(tmp_dir) is None


def test_open_repository_from_subdirectory(test_repo):
    (test_repo / "sub").mkdir()

    repo = open_repository(test_repo / "sub")

    assert repo is not None
    assert Path(repo.working_tree_dir).resolve() == test_repo.resolve()
    repo.close()


def test_relative_to_work_tree(test_repo, tmp_dir):
    repo = git.Repo(test_repo)
    (test_repo / "sub").mkdir()

    assert relative_to_work_tree(repo, test_repo / "sub" / ".." / "main.py") == "main.py"
    assert relative_to_work_tree(repo, tmp_dir / "elsewhere.py") is None
    repo.close()


def test_enrich_markers(test_repo):
    """Committed lines receive author, commit and age information."""
    repo = git.Repo(test_repo)
    markers = [make_marker(test_repo / "main.py", 2)]

    enriched = enrich_markers(markers, repo)

    assert enriched == 1
    info = markers[0].history_info
    assert info is not None
    assert info.author_name == "Test User"
    assert info.author_email == "test@example.com"
    assert len(info.revision_id) == 7
    assert repo.head.commit.hexsha.startswith(info.revision_id)
    assert info.revision_time.year == 2020
    assert info.revision_time.utcoffset() == timedelta(0)
    assert info.age_days >= 365 * 6
    assert info.age_display.endswith("y")
    repo.close()


def test_enrich_without_repository(tmp_dir):
    """Outside version control every marker keeps history_info = None."""
    path = tmp_dir / "main.py"
    path.write_text("# TODO: untracked\n")
    markers = scan_directory(tmp_dir, ScanConfig())

    repo = open_repository(tmp_dir)
    enriched = enrich_markers(markers, repo)

    assert repo is None
    assert enriched == 0
    assert len(markers) == 1
    assert markers[0].history_info is None


def test_blame_runs_once_per_file(test_repo):
    """Two markers in one file share a single blame and the same commit."""
    repo = git.Repo(test_repo)
    markers = [make_marker(test_repo / "main.py", 2), make_marker(test_repo / "main.py", 4)]
    enricher = HistoryEnricher(repo)

    with mock.patch.object(enricher, "blame_file", wraps=enricher.blame_file) as spy:
        enricher.enrich(markers)

    assert spy.call_count == 1
    assert markers[0].history_info is not None
    assert markers[1].history_info is not None
    assert markers[0].history_info.revision_id == markers[1].history_info.revision_id
    repo.close()


def test_same_line_reuses_cached_record(test_repo):
    """Duplicate markers on one line get the very same record."""
    repo = git.Repo(test_repo)
    markers = [make_marker(test_repo / "main.py", 2), make_marker(test_repo / "main.py", 2)]

    HistoryEnricher(repo).enrich(markers)

    assert markers[0].history_info is markers[1].history_info
    repo.close()


def test_uncommitted_lines_have_no_history(test_repo):
    """Lines added after the last commit are left without history."""
    repo = git.Repo(test_repo)
    with open(test_repo / "main.py", "a") as f:
        f.write("# TODO: not committed yet\n")
    markers = [make_marker(test_repo / "main.py", 2), make_marker(test_repo / "main.py", 5)]

    HistoryEnricher(repo).enrich(markers)

    assert markers[0].history_info is not None
    assert markers[1].history_info is None
    repo.close()


def test_untracked_file_degrades_only_its_group(test_repo):
    """A file git cannot blame does not affect other files."""
    repo = git.Repo(test_repo)
    (test_repo / "scratch.py").write_text("# TODO: scratch\n")
    markers = [make_marker(test_repo / "scratch.py", 1), make_marker(test_repo / "main.py", 2)]

    enriched = HistoryEnricher(repo).enrich(markers)

    assert enriched == 1
    assert markers[0].history_info is None
    assert markers[1].history_info is not None
    repo.close()


def test_file_outside_repository_is_skipped(test_repo, tmp_dir):
    repo = git.Repo(test_repo)
    outside = tmp_dir / "other.py"
    outside.write_text("# TODO: elsewhere\n")
    markers = [make_marker(outside, 1)]

    assert HistoryEnricher(repo).enrich(markers) == 0
    assert markers[0].history_info is None
    repo.close()


def test_line_beyond_end_of_file(test_repo):
    repo = git.Repo(test_repo)
    markers = [make_marker(test_repo / "main.py", 99)]

    HistoryEnricher(repo).enrich(markers)

    assert markers[0].history_info is None
    repo.close()


def test_per_line_attribution(test_repo, commit):
    """Each line is attributed to the commit that last changed it."""
    repo = git.Repo(test_repo)
    first = repo.head.commit
    second = commit(
        repo,
        "main.py",
        "# First line\n# TODO: test marker\n# Third line\n# FIXME: rewritten\n",
        "Rewrite fixme",
    )
    markers = [make_marker(test_repo / "main.py", 2), make_marker(test_repo / "main.py", 4)]

    HistoryEnricher(repo).enrich(markers)

    assert first.hexsha.startswith(markers[0].history_info.revision_id)
    assert second.hexsha.startswith(markers[1].history_info.revision_id)
    assert markers[1].history_info.age_days == 0
    repo.close()


@pytest.mark.parametrize("max_workers", [1, 4])
def test_enrichment_is_order_independent(test_repo, commit, max_workers):
    """Group and marker order do not change the outcome."""
    repo = git.Repo(test_repo)
    for i in range(5):
        commit(repo, f"pkg/mod{i}.py", "x = 1\n# TODO: a\n# TODO: b\n", f"Add mod{i}")

    def build():
        found = scan_directory(test_repo, ScanConfig())
        return sorted(found, key=lambda m: (str(m.file_path), m.line_number))

    baseline = build()
    HistoryEnricher(repo, max_workers=1).enrich(baseline)

    shuffled = build()
    order = list(shuffled)
    random.Random(42).shuffle(order)
    HistoryEnricher(repo, max_workers=max_workers).enrich(order)

    assert len(baseline) == 12
    assert [m.history_info.revision_id for m in baseline] == [m.history_info.revision_id for m in shuffled]
    assert [m.history_info.age_days for m in baseline] == [m.history_info.age_days for m in shuffled]
    repo.close()
