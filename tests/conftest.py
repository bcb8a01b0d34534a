"""Shared fixtures."""

import tempfile
from pathlib import Path
from typing import Optional

import git
import pytest
import structlog

# 2020-01-01T00:00:00Z in git's internal date format
OLD_DATE = "1577836800 +0000"


@pytest.fixture(autouse=True)
def reset_logging():
    """Undo any structlog configuration a test (or the CLI) installed."""
    yield
    structlog.reset_defaults()


@pytest.fixture(autouse=True)
def isolated_git_config(tmp_path_factory, monkeypatch):
    """Keep the user's global git config and excludes file out of the tests."""
    home = tmp_path_factory.mktemp("git-home")
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(home / ".config"))
    return home


def commit_file(repo: git.Repo, relative: str, content: str, message: str, date: Optional[str] = None) -> git.Commit:
    """Write, stage and commit a file, optionally backdated."""
    path = Path(repo.working_tree_dir) / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    repo.index.add([relative])
    if date is not None:
        return repo.index.commit(message, author_date=date, commit_date=date)
    return repo.index.commit(message)


@pytest.fixture
def commit():
    """The commit_file helper, for tests that build their own history."""
    return commit_file


@pytest.fixture
def tmp_dir():
    """Temporary directory that is not under version control."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def test_repo():
    """Create a temporary Git repository with debt markers committed."""
    with tempfile.TemporaryDirectory() as tmpdir:
        repo_path = Path(tmpdir)
        repo = git.Repo.init(repo_path)

        # Configure git
        repo.config_writer().set_value("user", "name", "Test User").release()
        repo.config_writer().set_value("user", "email", "test@example.com").release()

        commit_file(
            repo,
            "main.py",
            "# First line\n# TODO: test marker\n# Third line\n# FIXME: second marker\n",
            "Initial commit",
            date=OLD_DATE,
        )

        yield repo_path
        repo.close()
