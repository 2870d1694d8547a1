"""Persistent history of analyses, most recent first."""

import logging
from pathlib import Path
from typing import List, Optional, Union

from benford_analyzer.core.constants import HISTORY_LIMIT
from benford_analyzer.core.exceptions import BenfordAnalyzerException, HistoryEntryNotFoundError
from benford_analyzer.core.results import AnalysisSummary
from benford_analyzer.store.base import ObservableStore

logger = logging.getLogger(__name__)


class HistoryStore(ObservableStore):
    """
    Bounded list of past analyses.

    New analyses are prepended; once the list exceeds ``limit`` the oldest
    entries are dropped. Events: ``added``, ``removed``, ``cleared``.

    Example:
        >>> history = HistoryStore('~/.benford_analyzer/history.json')
        >>> history.add(summary)
        >>> history.entries()[0].id == summary.id
        True
    """

    def __init__(self, path: Optional[Union[str, Path]] = None, limit: int = HISTORY_LIMIT):
        super().__init__(Path(path).expanduser() if path is not None else None)
        self.limit = limit
        self._entries: List[AnalysisSummary] = []
        self._load()

    def _load(self) -> None:
        document = self._read_document()
        if document is None:
            return
        if not isinstance(document, list):
            logger.warning(f"History file {self.path} does not hold a list, starting empty")
            return

        for item in document:
            try:
                self._entries.append(AnalysisSummary.from_dict(item))
            except (KeyError, TypeError, ValueError, BenfordAnalyzerException) as e:
                logger.warning(f"Skipping invalid history entry in {self.path}: {e}")

        del self._entries[self.limit:]

    def _save(self) -> None:
        self._write_document([entry.to_dict() for entry in self._entries])

    def __len__(self) -> int:
        return len(self._entries)

    def entries(self) -> List[AnalysisSummary]:
        """Stored analyses, most recent first."""
        return list(self._entries)

    def get(self, analysis_id: str) -> Optional[AnalysisSummary]:
        for entry in self._entries:
            if entry.id == analysis_id:
                return entry
        return None

    def require(self, analysis_id: str) -> AnalysisSummary:
        """
        Look up an analysis by full id or by an unambiguous id prefix.

        Raises:
            HistoryEntryNotFoundError: No entry, or several entries, match
        """
        entry = self.get(analysis_id)
        if entry is not None:
            return entry
        matches = [entry for entry in self._entries if analysis_id and entry.id.startswith(analysis_id)]
        if len(matches) == 1:
            return matches[0]
        if len(matches) > 1:
            raise HistoryEntryNotFoundError(
                analysis_id,
                details={'reason': f'prefix matches {len(matches)} analyses'}
            )
        raise HistoryEntryNotFoundError(analysis_id)

    def add(self, summary: AnalysisSummary) -> None:
        """Prepend an analysis and drop entries beyond the limit."""
        self._entries.insert(0, summary)
        dropped = self._entries[self.limit:]
        del self._entries[self.limit:]
        if dropped:
            logger.debug(f"History limit {self.limit} reached, dropped {len(dropped)} oldest")
        self._save()
        self._notify('added', summary)

    def remove(self, analysis_id: str) -> bool:
        """
        Remove an analysis by id.

        Returns:
            True if an entry was removed
        """
        remaining = [entry for entry in self._entries if entry.id != analysis_id]
        if len(remaining) == len(self._entries):
            return False
        self._entries = remaining
        self._save()
        self._notify('removed', analysis_id)
        return True

    def clear(self) -> None:
        self._entries = []
        self._save()
        self._notify('cleared', None)

    def search(self, query: str) -> List[AnalysisSummary]:
        """
        Case-insensitive substring search on dataset name and column name.

        An empty query returns every entry.
        """
        needle = (query or '').strip().lower()
        if not needle:
            return self.entries()
        return [
            entry for entry in self._entries
            if needle in entry.name.lower() or needle in entry.column_name.lower()
        ]
