"""Locating the git repository that encloses a scan root."""

import os
from pathlib import Path
from typing import List, Optional

import git
import structlog
from git import Repo

logger = structlog.get_logger(__name__)


def open_repository(path: Path) -> Optional[Repo]:
    """Open the git repository containing ``path``, searching parent directories.

    Args:
        path: Any file or directory

    Returns:
        Repo, or None if the path is not under version control (this is okay)
    """
    start = Path(path)
    if start.is_file():
        start = start.parent

    try:
        repo = Repo(start, search_parent_directories=True)
    except (git.exc.InvalidGitRepositoryError, git.exc.NoSuchPathError):
        logger.debug("no_repository", path=str(path))
        return None

    if repo.bare or repo.working_tree_dir is None:
        logger.debug("bare_repository", path=str(path))
        return None
    return repo


def exclude_files(repo: Repo) -> List[Path]:
    """Repository-wide exclude files, lowest precedence first.

    These are ``core.excludesFile`` (or the default
    ``$XDG_CONFIG_HOME/git/ignore``) followed by ``info/exclude`` in the
    common git directory. Files that do not exist are left out.
    """
    configured = None
    reader = repo.config_reader()
    if reader.has_section("core"):
        for name, value in reader.items("core"):
            # Option names are case-insensitive in git
            if name.lower() == "excludesfile" and value:
                configured = value

    if configured:
        global_file = Path(os.path.expanduser(configured))
    else:
        config_home = os.environ.get("XDG_CONFIG_HOME") or os.path.join(os.path.expanduser("~"), ".config")
        global_file = Path(config_home) / "git" / "ignore"

    candidates = [global_file, Path(repo.common_dir) / "info" / "exclude"]
    return [path for path in candidates if path.is_file()]


def relative_to_work_tree(repo: Repo, path: Path) -> Optional[str]:
    """Canonical repository-relative POSIX path for ``path``.

    Returns:
        Relative path, or None if ``path`` lies outside the work tree or
        cannot be resolved
    """
    root = Path(repo.working_tree_dir).resolve()
    try:
        resolved = Path(path).resolve(strict=True)
        return resolved.relative_to(root).as_posix()
    except (OSError, ValueError):
        return None
