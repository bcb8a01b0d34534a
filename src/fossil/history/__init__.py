"""Git history enrichment for debt markers."""

from fossil.history.enricher import HistoryEnricher, enrich_markers
from fossil.history.repository import exclude_files, open_repository, relative_to_work_tree

__all__ = [
    "HistoryEnricher",
    "enrich_markers",
    "exclude_files",
    "open_repository",
    "relative_to_work_tree",
]
