"""Persistent user settings: sensitivity level and negative value handling."""

import logging
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Union

from benford_analyzer.core.constants import DEFAULT_NEGATIVE_HANDLING, DEFAULT_SENSITIVITY_LEVEL
from benford_analyzer.core.exceptions import BenfordAnalyzerException, ParameterValidationError
from benford_analyzer.core.results import NegativeHandling
from benford_analyzer.core.sensitivity import SensitivityLevel
from benford_analyzer.store.base import ObservableStore

logger = logging.getLogger(__name__)

SENSITIVITY_LEVEL = 'sensitivity_level'
NEGATIVE_VALUE_HANDLING = 'negative_value_handling'

# Setting name -> (default value, parser returning an Enum member)
SETTINGS_SCHEMA: Dict[str, tuple] = {
    SENSITIVITY_LEVEL: (DEFAULT_SENSITIVITY_LEVEL, SensitivityLevel.parse),
    NEGATIVE_VALUE_HANDLING: (DEFAULT_NEGATIVE_HANDLING, NegativeHandling.parse),
}


class SettingsStore(ObservableStore):
    """
    Key/value settings with validation.

    Each setting is loaded independently: an invalid or missing value falls
    back to its default without affecting the other setting. Event name for
    subscribers is the setting key; the payload is the new value.
    """

    def __init__(self, path: Optional[Union[str, Path]] = None):
        super().__init__(Path(path).expanduser() if path is not None else None)
        self._values: Dict[str, str] = {key: default for key, (default, _) in SETTINGS_SCHEMA.items()}
        self._load()

    def _load(self) -> None:
        document = self._read_document()
        if document is None:
            return
        if not isinstance(document, dict):
            logger.warning(f"Settings file {self.path} does not hold an object, using defaults")
            return

        for key, (default, parser) in SETTINGS_SCHEMA.items():
            if key not in document:
                continue
            try:
                self._values[key] = parser(document[key]).value
            except BenfordAnalyzerException:
                logger.warning(f"Invalid value {document[key]!r} for setting '{key}', using default '{default}'")

    @staticmethod
    def _parser_for(key: str) -> Callable[[Any], Any]:
        try:
            return SETTINGS_SCHEMA[key][1]
        except KeyError:
            raise ParameterValidationError(
                f"Unknown setting: {key}. Known settings: {', '.join(SETTINGS_SCHEMA)}",
                parameter='key',
                value=key
            )

    def get(self, key: str) -> str:
        self._parser_for(key)
        return self._values[key]

    def set(self, key: str, value: Any) -> None:
        """
        Validate and persist a setting.

        Raises:
            ParameterValidationError: Unknown key or invalid value
        """
        normalized = self._parser_for(key)(value).value
        self._values[key] = normalized
        self._write_document(dict(self._values))
        self._notify(key, normalized)

    def as_dict(self) -> Dict[str, str]:
        return dict(self._values)

    @property
    def sensitivity_level(self) -> SensitivityLevel:
        return SensitivityLevel(self._values[SENSITIVITY_LEVEL])

    @property
    def negative_value_handling(self) -> NegativeHandling:
        return NegativeHandling(self._values[NEGATIVE_VALUE_HANDLING])
