"""Parallel directory walk that feeds files to the marker scanner."""

import os
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from typing import Iterator, List, Optional, Tuple

import structlog
from pathspec import PathSpec

from fossil.exceptions import FileScanError, FileTooLargeError, ScanRootError
from fossil.history.repository import exclude_files, open_repository
from fossil.models import DebtMarker, ScanConfig
from fossil.scanning.file_scanner import is_likely_binary, scan_file
from fossil.scanning.patterns import compile_marker_pattern

logger = structlog.get_logger(__name__)

GITIGNORE = ".gitignore"


class IgnoreRules:
    """Git exclude rules, each spec anchored at the (resolved) directory it applies to.

    Specs are added lowest precedence first: the global excludes file,
    ``info/exclude``, then ``.gitignore`` files from the work-tree root
    downwards. Every applicable spec is consulted and the last one with a
    matching pattern decides, so ``!pattern`` in a deeper ``.gitignore``
    re-includes what a shallower one excluded.
    """

    def __init__(self) -> None:
        self._specs: List[Tuple[Path, PathSpec]] = []

    def add_file(self, base: Path, ignore_file: Path) -> None:
        """Load patterns from ``ignore_file``, relative to ``base``, if present."""
        try:
            with open(ignore_file, "r", encoding="utf-8", errors="replace") as f:
                spec = PathSpec.from_lines("gitwildmatch", f)
        except FileNotFoundError:
            return
        except OSError as e:
            logger.debug("ignore_file_unreadable", path=str(ignore_file), error=str(e))
            return
        self._specs.append((base, spec))

    def add_directory(self, directory: Path) -> None:
        """Load ``directory/.gitignore`` if present."""
        self.add_file(directory, directory / GITIGNORE)

    def is_ignored(self, path: Path, is_dir: bool) -> bool:
        ignored = False
        for base, spec in self._specs:
            try:
                relative = path.relative_to(base).as_posix()
            except ValueError:
                continue
            if is_dir:
                relative += "/"
            # include is None when no pattern matched, False for a negation
            result = spec.check_file(relative)
            if result.include is not None:
                ignored = result.include
        return ignored


class TreeWalker:
    """Walks a directory tree and scans every eligible file on a worker pool.

    Entries whose bare name is in ``config.ignored_dirs`` are pruned, hidden
    entries are skipped unless ``config.include_hidden``, and ``.gitignore``
    rules are honored when the root is inside a git work tree. Symlinked
    directories are never followed.
    """

    def __init__(self, config: ScanConfig, max_workers: Optional[int] = None) -> None:
        """Initialize the walker.

        Args:
            config: Scan configuration
            max_workers: Worker threads (None lets the executor decide)

        Raises:
            PatternError: If the marker vocabulary cannot be compiled
        """
        self.config = config
        self.max_workers = max_workers
        self.pattern = compile_marker_pattern(config.markers)
        self._ignored_names = frozenset(config.ignored_dirs)

    def scan(self, root: Path) -> List[DebtMarker]:
        """Scan everything beneath ``root``.

        Blocks until every file has been scanned. Top-level order of the
        result is not defined; each file's markers are in line order.

        Raises:
            ScanRootError: If the root does not exist or is not readable
        """
        root = Path(root)
        if not root.exists():
            raise ScanRootError(root)

        if root.is_file():
            try:
                return scan_file(root, self.pattern, self.config.context_lines)
            except FileTooLargeError as e:
                logger.debug("file_skipped", path=str(root), reason=e.reason)
                return []
            except FileScanError as e:
                raise ScanRootError(root, "is not readable") from e

        if not os.access(root, os.R_OK | os.X_OK):
            raise ScanRootError(root, "is not readable")

        markers: List[DebtMarker] = []
        lock = threading.Lock()

        def scan_one(path: Path) -> None:
            try:
                found = scan_file(path, self.pattern, self.config.context_lines)
            except FileScanError as e:
                logger.debug("file_skipped", path=str(path), reason=e.reason)
                return
            if found:
                with lock:
                    markers.extend(found)

        futures: List[Future] = []
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            for path in self.iter_files(root):
                futures.append(executor.submit(scan_one, path))

        for future in futures:
            # Surface unexpected worker failures
            future.result()

        logger.debug("walk_complete", root=str(root), files=len(futures), markers=len(markers))
        return markers

    def iter_files(self, root: Path) -> Iterator[Path]:
        """Yield every eligible file beneath ``root`` in walk order."""
        resolved_root = root.resolve()
        ignore = self._load_ignore_rules(resolved_root)

        for dirpath, dirnames, filenames in os.walk(root, onerror=self._on_walk_error):
            current = Path(dirpath)
            resolved_dir = resolved_root / current.relative_to(root)
            if ignore is not None and resolved_dir != resolved_root:
                ignore.add_directory(resolved_dir)

            dirnames[:] = [
                name
                for name in dirnames
                if self._is_eligible(name, resolved_dir / name, ignore, is_dir=True)
                and not os.path.islink(current / name)
            ]
            dirnames.sort()

            for name in sorted(filenames):
                path = current / name
                if not self._is_eligible(name, resolved_dir / name, ignore, is_dir=False):
                    continue
                if is_likely_binary(path):
                    continue
                yield path

    def _is_eligible(self, name: str, resolved: Path, ignore: Optional[IgnoreRules], is_dir: bool) -> bool:
        if name in self._ignored_names:
            return False
        if not self.config.include_hidden and name.startswith("."):
            return False
        if ignore is not None and ignore.is_ignored(resolved, is_dir):
            return False
        return True

    def _load_ignore_rules(self, resolved_root: Path) -> Optional[IgnoreRules]:
        """Collect exclude files, then .gitignore files from the work-tree root down to the scan root."""
        repo = open_repository(resolved_root)
        if repo is None:
            return None

        rules = IgnoreRules()
        try:
            repo_root = Path(repo.working_tree_dir).resolve()
            for ignore_file in exclude_files(repo):
                rules.add_file(repo_root, ignore_file)
        finally:
            repo.close()

        chain = [resolved_root, *resolved_root.parents]
        for directory in reversed(chain):
            if directory == repo_root or repo_root in directory.parents:
                rules.add_directory(directory)
        return rules

    @staticmethod
    def _on_walk_error(error: OSError) -> None:
        logger.debug("walk_entry_skipped", path=getattr(error, "filename", None), error=str(error))


def scan_directory(root: Path, config: ScanConfig, max_workers: Optional[int] = None) -> List[DebtMarker]:
    """Scan a directory tree for technical debt markers.

    Args:
        root: Directory (or single file) to scan
        config: Scan configuration
        max_workers: Worker threads for the scan

    Returns:
        All markers found

    Raises:
        PatternError: If the marker vocabulary cannot be compiled
        ScanRootError: If the root does not exist or is not readable
    """
    return TreeWalker(config, max_workers=max_workers).scan(root)
