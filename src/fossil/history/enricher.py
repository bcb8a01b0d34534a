"""Attach git blame information to debt markers, one blame per file."""

from collections import defaultdict
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional

import git
import structlog
from git import Commit, Repo

from fossil.history.repository import relative_to_work_tree
from fossil.models import DebtMarker, HistoryInfo

logger = structlog.get_logger(__name__)

SHORT_HASH_LENGTH = 7


def _is_uncommitted(commit: Commit) -> bool:
    # Working-tree blame attributes uncommitted lines to the all-zero id
    return not commit.hexsha.strip("0")


class HistoryEnricher:
    """Adds authorship and age to markers using git blame.

    Markers are grouped by file so that blame runs once per file no matter
    how many markers the file holds. Failures are per file: a file that
    cannot be blamed leaves its markers without history and the rest of the
    batch carries on.
    """

    def __init__(self, repo: Optional[Repo], max_workers: int = 1) -> None:
        """Initialize the enricher.

        Args:
            repo: Repository handle, or None when the scan root is not under
                version control (enrichment is then a no-op)
            max_workers: Files blamed concurrently
        """
        self.repo = repo
        self.max_workers = max(1, max_workers)

    def enrich(self, markers: List[DebtMarker]) -> int:
        """Set ``history_info`` on every marker whose line has history.

        Args:
            markers: Markers to enrich, modified in place

        Returns:
            Number of markers that received history
        """
        if self.repo is None or not markers:
            return 0

        now = datetime.now(timezone.utc)

        groups: Dict[Path, List[DebtMarker]] = defaultdict(list)
        for marker in markers:
            groups[marker.file_path].append(marker)

        if self.max_workers > 1 and len(groups) > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                counts = list(
                    executor.map(lambda item: self._enrich_file(item[0], item[1], now), groups.items())
                )
        else:
            counts = [self._enrich_file(path, group, now) for path, group in groups.items()]

        enriched = sum(counts)
        logger.debug("enrichment_complete", files=len(groups), markers=len(markers), enriched=enriched)
        return enriched

    def blame_file(self, relative_path: str) -> Dict[int, Commit]:
        """Blame a whole file in the working tree.

        Args:
            relative_path: Path relative to the work-tree root

        Returns:
            Mapping of 1-indexed line number to the commit that last touched
            it. Uncommitted lines are left out.

        Raises:
            git.exc.GitCommandError: If git cannot blame the file (e.g. it
                is untracked)
        """
        table: Dict[int, Commit] = {}
        for entry in self.repo.blame_incremental(None, relative_path):
            if _is_uncommitted(entry.commit):
                continue
            for line_number in entry.linenos:
                table[line_number] = entry.commit
        return table

    def _enrich_file(self, file_path: Path, markers: List[DebtMarker], now: datetime) -> int:
        relative = relative_to_work_tree(self.repo, file_path)
        if relative is None:
            logger.debug("history_skipped", path=str(file_path), reason="outside work tree")
            return 0

        try:
            blame = self.blame_file(relative)
        except (git.exc.GitError, KeyError, ValueError, OSError) as e:
            logger.debug("history_skipped", path=str(file_path), reason=str(e))
            return 0

        cache: Dict[int, Optional[HistoryInfo]] = {}
        enriched = 0
        for marker in markers:
            line_number = marker.line_number
            if line_number not in cache:
                commit = blame.get(line_number)
                cache[line_number] = None if commit is None else self._history_info(commit, now)

            marker.history_info = cache[line_number]
            if marker.history_info is not None:
                enriched += 1
        return enriched

    @staticmethod
    def _history_info(commit: Commit, now: datetime) -> HistoryInfo:
        revision_time = datetime.fromtimestamp(commit.committed_date, tz=timezone.utc)
        return HistoryInfo(
            author_name=commit.author.name or "Unknown",
            author_email=commit.author.email or "unknown@example.com",
            revision_id=commit.hexsha[:SHORT_HASH_LENGTH],
            revision_time=revision_time,
            age_days=max(0, (now - revision_time).days),
        )


def enrich_markers(markers: List[DebtMarker], repo: Optional[Repo], max_workers: int = 1) -> int:
    """Enrich markers with git blame information in place.

    Returns:
        Number of markers that received history
    """
    return HistoryEnricher(repo, max_workers=max_workers).enrich(markers)
