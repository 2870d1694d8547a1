"""Job configuration parsing and validation."""

import os
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from benford_analyzer.core.constants import (
    DEFAULT_NEGATIVE_HANDLING,
    DEFAULT_SENSITIVITY_LEVEL,
    FILE_EXTENSION_MAP,
    MAX_STRING_LENGTH,
    MAX_YAML_FILE_SIZE,
    MAX_YAML_KEY_COUNT,
    MAX_YAML_KEY_LENGTH,
    MAX_YAML_NESTING_DEPTH,
    SUPPORTED_FORMATS,
)
from benford_analyzer.core.exceptions import (
    BenfordAnalyzerException,
    ConfigError,
    ConfigValidationError,
    YAMLSizeError,
)
from benford_analyzer.core.results import AnalysisOptions, NegativeHandling, RiskLevel
from benford_analyzer.core.sensitivity import SensitivityLevel
from benford_analyzer.utils.path_patterns import PathPatternExpander

ROOT_KEY = 'benford_job'


class AnalysisJobConfig:
    """
    Configuration for a batch analysis job.

    Example YAML::

        benford_job:
          name: "Expense audit"
          files:
            - name: "expenses"
              path: "data/expenses.csv"
              columns: ["amount"]
          options:
            negative_handling: "absolute"
            sensitivity: "standard"
          output:
            json_report: "reports/{job_name}_{timestamp}.json"
            fail_on_risk: "high"
    """

    MAX_YAML_FILE_SIZE = MAX_YAML_FILE_SIZE
    MAX_YAML_NESTING_DEPTH = MAX_YAML_NESTING_DEPTH
    MAX_YAML_KEYS = MAX_YAML_KEY_COUNT

    def __init__(
        self,
        config_dict: Dict[str, Any],
        run_timestamp: Optional[datetime] = None,
        base_dir: Optional[Path] = None
    ):
        """
        Initialize from a configuration dictionary.

        Args:
            config_dict: Parsed YAML document
            run_timestamp: Timestamp used for every path pattern of this run
            base_dir: Directory relative file paths are resolved against
        """
        self.raw_config = config_dict
        self.base_dir = base_dir
        self._pattern_expander = PathPatternExpander(run_timestamp=run_timestamp or datetime.now())
        self._parse_config()

    @classmethod
    def from_yaml(cls, config_path: str, run_timestamp: Optional[datetime] = None) -> "AnalysisJobConfig":
        """
        Load a job file with size and structure limits.

        Relative dataset paths are resolved against the directory holding the
        job file.

        Raises:
            ConfigError: File missing or not valid YAML
            YAMLSizeError: File exceeds the size limit
            ConfigValidationError: Structure too deep or too large
        """
        config_file = Path(config_path)
        if not config_file.exists():
            raise ConfigError(f"Configuration file not found: {config_path}")

        file_size = os.path.getsize(config_file)
        if file_size > cls.MAX_YAML_FILE_SIZE:
            raise YAMLSizeError(
                f"Configuration file too large: {file_size:,} bytes. "
                f"Maximum allowed: {cls.MAX_YAML_FILE_SIZE:,} bytes"
            )

        try:
            with open(config_file, 'r', encoding='utf-8') as f:
                config_dict = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Failed to parse YAML file: {e}", original_exception=e)
        except UnicodeDecodeError as e:
            raise ConfigError(f"Invalid file encoding (expected UTF-8): {e}", original_exception=e)

        if config_dict is None:
            raise ConfigError(f"Configuration file is empty: {config_path}")

        cls._validate_yaml_structure(config_dict)

        return cls(config_dict, run_timestamp=run_timestamp, base_dir=config_file.resolve().parent)

    @classmethod
    def _validate_yaml_structure(cls, obj: Any, current_depth: int = 0, total_keys: Optional[List[int]] = None) -> None:
        """
        Reject documents that are too deep or contain too many items.

        Args:
            obj: Node to validate
            current_depth: Nesting depth of ``obj``
            total_keys: Single-element list carrying the running key count
        """
        if total_keys is None:
            total_keys = [0]

        if current_depth > cls.MAX_YAML_NESTING_DEPTH:
            raise ConfigValidationError(
                f"YAML nesting depth exceeds maximum of {cls.MAX_YAML_NESTING_DEPTH} levels"
            )

        if isinstance(obj, dict):
            total_keys[0] += len(obj)
            if total_keys[0] > cls.MAX_YAML_KEYS:
                raise ConfigValidationError(f"YAML structure contains more than {cls.MAX_YAML_KEYS:,} keys/items")
            for key, value in obj.items():
                if isinstance(key, str) and len(key) > MAX_YAML_KEY_LENGTH:
                    raise ConfigValidationError(
                        f"YAML key exceeds maximum length of {MAX_YAML_KEY_LENGTH} characters: '{key[:50]}...'"
                    )
                cls._validate_yaml_structure(value, current_depth + 1, total_keys)

        elif isinstance(obj, list):
            total_keys[0] += len(obj)
            if total_keys[0] > cls.MAX_YAML_KEYS:
                raise ConfigValidationError(f"YAML structure contains more than {cls.MAX_YAML_KEYS:,} keys/items")
            for item in obj:
                cls._validate_yaml_structure(item, current_depth + 1, total_keys)

        elif isinstance(obj, str) and len(obj) > MAX_STRING_LENGTH:
            raise ConfigValidationError(
                f"YAML contains string exceeding maximum length ({MAX_STRING_LENGTH:,}): '{obj[:50]}...'"
            )

    def _parse_config(self) -> None:
        if not isinstance(self.raw_config, dict) or ROOT_KEY not in self.raw_config:
            raise ConfigError(f"Configuration must have '{ROOT_KEY}' key")

        job_config = self.raw_config[ROOT_KEY] or {}
        if not isinstance(job_config, dict):
            raise ConfigError(f"'{ROOT_KEY}' must be a mapping")

        self.job_name: str = str(job_config.get('name', 'Unnamed Benford Job'))
        self.description: Optional[str] = job_config.get('description')

        files_list = job_config.get('files')
        if not files_list or not isinstance(files_list, list):
            raise ConfigError("Configuration must specify at least one file to analyze", field='files')
        self.files = self._parse_files(files_list)

        options = job_config.get('options') or {}
        try:
            negative_handling = NegativeHandling.parse(options.get('negative_handling', DEFAULT_NEGATIVE_HANDLING))
            self.sensitivity = SensitivityLevel.parse(options.get('sensitivity', DEFAULT_SENSITIVITY_LEVEL))
        except BenfordAnalyzerException as e:
            raise ConfigError(e.message, field='options', original_exception=e)
        self.options = AnalysisOptions(
            ignore_zeros=bool(options.get('ignore_zeros', True)),
            negative_handling=negative_handling,
        )

        output = job_config.get('output') or {}
        self._json_report_template: Optional[str] = output.get('json_report')
        self.json_report_path: Optional[str] = None
        if self._json_report_template:
            self.json_report_path = self._pattern_expander.expand(
                self._json_report_template, {'job_name': self.job_name}
            )

        fail_on_risk = output.get('fail_on_risk')
        try:
            self.fail_on_risk: Optional[RiskLevel] = RiskLevel.parse(fail_on_risk) if fail_on_risk else None
        except BenfordAnalyzerException as e:
            raise ConfigError(e.message, field='output.fail_on_risk', original_exception=e)

        history = job_config.get('history') or {}
        self.history_enabled: bool = bool(history.get('enabled', True))
        self.history_path: Optional[str] = history.get('path')

    def _parse_files(self, files_config: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        parsed_files = []

        for idx, file_config in enumerate(files_config):
            if not isinstance(file_config, dict) or 'path' not in file_config:
                raise ConfigError(f"File configuration {idx} missing 'path'", field=f'files[{idx}]')

            path = self._resolve_path(str(file_config['path']))
            format_type = file_config.get('format') or self._infer_format(path)
            if format_type not in SUPPORTED_FORMATS:
                raise ConfigError(
                    f"File configuration {idx} has unsupported format '{format_type}'. "
                    f"Supported formats: {', '.join(SUPPORTED_FORMATS)}",
                    field=f'files[{idx}].format'
                )

            columns = file_config.get('columns')
            if columns is not None:
                if isinstance(columns, str):
                    columns = [columns]
                if not isinstance(columns, list) or not columns:
                    raise ConfigError(
                        f"File configuration {idx} 'columns' must be a non-empty list",
                        field=f'files[{idx}].columns'
                    )
                columns = [str(column) for column in columns]

            parsed_files.append({
                'name': str(file_config.get('name') or Path(path).stem),
                'path': path,
                'format': format_type,
                'columns': columns,
                'delimiter': file_config.get('delimiter'),
                'encoding': file_config.get('encoding'),
                'sheet': file_config.get('sheet'),
            })

        return parsed_files

    def _resolve_path(self, path: str) -> str:
        expanded = Path(path).expanduser()
        if not expanded.is_absolute() and self.base_dir is not None:
            expanded = self.base_dir / expanded
        return str(expanded)

    @staticmethod
    def _infer_format(file_path: str) -> str:
        return FILE_EXTENSION_MAP.get(Path(file_path).suffix.lower(), 'csv')

    def expand_output_path(self, template: str, **context: str) -> str:
        """Expand a CLI-provided output template with this run's timestamp."""
        return self._pattern_expander.expand(template, {'job_name': self.job_name, **context})
