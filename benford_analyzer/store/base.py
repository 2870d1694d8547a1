"""
Observable JSON-file store.

Stores keep their state in memory and rewrite a JSON file on every change.
Subscribers are called synchronously after each change with the event name
and its payload.
"""

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Callable, List, Optional, Union

from benford_analyzer.core.exceptions import HistoryStoreError
from benford_analyzer.utils.json_utils import safe_json_dump

logger = logging.getLogger(__name__)

Subscriber = Callable[[str, Any], None]


class ObservableStore(ABC):
    """
    Base class for persisted, observable state.

    Args:
        path: JSON file backing the store; None keeps the store in memory only
    """

    def __init__(self, path: Optional[Union[str, Path]] = None):
        self.path = Path(path) if path is not None else None
        self._subscribers: List[Subscriber] = []

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """
        Register a change callback.

        Args:
            callback: Called as ``callback(event, payload)`` after each change

        Returns:
            Function that removes the subscription when called
        """
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _notify(self, event: str, payload: Any) -> None:
        for callback in list(self._subscribers):
            callback(event, payload)

    def _read_document(self) -> Any:
        """
        Read the backing file.

        Returns:
            Decoded JSON, or None when there is no file or it is unreadable
        """
        if self.path is None or not self.path.exists():
            return None
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable state file {self.path}: {e}")
            return None

    def _write_document(self, document: Any) -> None:
        if self.path is None:
            return
        try:
            safe_json_dump(document, self.path)
        except OSError as e:
            raise HistoryStoreError(
                f"Could not write state file {self.path}: {e}",
                path=str(self.path),
                original_exception=e
            )

    @abstractmethod
    def _load(self) -> None:
        """Populate in-memory state from the backing file."""
