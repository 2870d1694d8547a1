"""Persisted analyzer state: analysis history and user settings."""

import os
from pathlib import Path
from typing import Optional, Union

from benford_analyzer.core.constants import (
    DEFAULT_STATE_DIR,
    HISTORY_FILE_NAME,
    SETTINGS_FILE_NAME,
    STATE_DIR_ENV_VAR,
)
from benford_analyzer.store.history import HistoryStore
from benford_analyzer.store.settings import SettingsStore


def resolve_state_dir(state_dir: Optional[Union[str, Path]] = None) -> Path:
    """Explicit directory, else $BENFORD_ANALYZER_HOME, else ~/.benford_analyzer."""
    chosen = state_dir or os.environ.get(STATE_DIR_ENV_VAR) or DEFAULT_STATE_DIR
    return Path(chosen).expanduser()


def open_history(state_dir: Optional[Union[str, Path]] = None) -> HistoryStore:
    return HistoryStore(resolve_state_dir(state_dir) / HISTORY_FILE_NAME)


def open_settings(state_dir: Optional[Union[str, Path]] = None) -> SettingsStore:
    return SettingsStore(resolve_state_dir(state_dir) / SETTINGS_FILE_NAME)


__all__ = ['HistoryStore', 'SettingsStore', 'resolve_state_dir', 'open_history', 'open_settings']
