"""
Path pattern expansion for report and log file names.

Supported patterns:
- {date} -> 2025-11-22
- {time} -> 14-30-45
- {timestamp} -> 20251122_143045
- {datetime} -> 2025-11-22_14-30-45
- {job_name} -> Expense_Audit (sanitized)
- {file_name} -> expenses (dataset name)
- {column_name} -> amount
"""

import re
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional

from benford_analyzer.core.logging_config import get_logger

logger = get_logger(__name__)


class PathPatternExpander:
    """
    Expand date/time and context patterns in output paths.

    All expansions made by one expander share a single timestamp, so every
    report written by a run carries the same {timestamp}.

    Examples:
        >>> expander = PathPatternExpander(run_timestamp=datetime(2025, 11, 22, 14, 30, 45))
        >>> expander.expand('reports/{job_name}_{date}.json', {'job_name': 'Expense Audit'})
        'reports/Expense_Audit_2025-11-22.json'
    """

    KNOWN_PATTERNS = {
        'date', 'time', 'timestamp', 'datetime',
        'job_name', 'file_name', 'column_name'
    }

    CONTEXT_PATTERNS = ('job_name', 'file_name', 'column_name')

    # Characters that are invalid in filenames across platforms
    INVALID_FILENAME_CHARS = r'[<>:"/\\|?*\x00-\x1f]'

    MAX_FILENAME_LENGTH = 200

    def __init__(self, run_timestamp: Optional[datetime] = None):
        """
        Args:
            run_timestamp: Timestamp used for every expansion; defaults to the
                time of the first expansion
        """
        self._run_timestamp = run_timestamp

    @property
    def run_timestamp(self) -> datetime:
        if self._run_timestamp is None:
            self._run_timestamp = datetime.now()
        return self._run_timestamp

    def expand(self, path_template: str, context: Optional[Dict[str, str]] = None) -> str:
        """
        Expand patterns in a path template and create its parent directory.

        Args:
            path_template: Path with patterns like {date} or {job_name}
            context: Values for the context patterns

        Returns:
            Expanded path
        """
        if not path_template:
            return path_template

        replacements = self._build_replacements(context or {})

        expanded = path_template
        for pattern, value in replacements.items():
            expanded = expanded.replace(f'{{{pattern}}}', value)

        self._warn_unknown_patterns(expanded, path_template)
        self._ensure_directory(expanded)

        return expanded

    def _build_replacements(self, context: Dict[str, str]) -> Dict[str, str]:
        stamp = self.run_timestamp
        replacements = {
            'date': stamp.strftime('%Y-%m-%d'),
            'time': stamp.strftime('%H-%M-%S'),  # hyphens for filesystem safety
            'timestamp': stamp.strftime('%Y%m%d_%H%M%S'),
            'datetime': stamp.strftime('%Y-%m-%d_%H-%M-%S'),
        }

        for key in self.CONTEXT_PATTERNS:
            if context.get(key):
                replacements[key] = self.sanitize_filename(str(context[key]))

        return replacements

    @classmethod
    def sanitize_filename(cls, name: str) -> str:
        """
        Make a name safe to embed in a file name on any platform.

        Examples:
            >>> PathPatternExpander.sanitize_filename('Q3 Expenses / EMEA (draft)')
            'Q3_Expenses_EMEA_(draft)'
        """
        if not name:
            return name

        sanitized = re.sub(cls.INVALID_FILENAME_CHARS, '_', name)
        sanitized = sanitized.replace(' ', '_')
        sanitized = re.sub(r'_+', '_', sanitized)
        sanitized = sanitized.strip('_')

        if len(sanitized) > cls.MAX_FILENAME_LENGTH:
            sanitized = sanitized[:cls.MAX_FILENAME_LENGTH]
            logger.warning(f"Filename truncated to {cls.MAX_FILENAME_LENGTH} characters: {sanitized}")

        return sanitized

    def _warn_unknown_patterns(self, expanded: str, original: str) -> None:
        remaining = set(re.findall(r'\{(\w+)\}', expanded))
        unknown = remaining - self.KNOWN_PATTERNS
        if unknown:
            logger.warning(
                f"Unknown pattern(s) in path template: {', '.join(sorted(unknown))}. "
                f"Original: {original}. Known patterns: {', '.join(sorted(self.KNOWN_PATTERNS))}"
            )

    def _ensure_directory(self, path: str) -> None:
        parent_dir = Path(path).parent
        if str(parent_dir) == '.':
            return
        try:
            parent_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            # The subsequent write reports the failure with the full path
            logger.error(f"Failed to create directory for {path}: {e}")

    @staticmethod
    def has_patterns(path_template: str) -> bool:
        """True if the template contains any {pattern} placeholder."""
        return bool(re.search(r'\{\w+\}', path_template))


def expand_path_patterns(
    path_template: str,
    context: Optional[Dict[str, str]] = None,
    run_timestamp: Optional[datetime] = None
) -> str:
    """One-off expansion with a fresh expander."""
    return PathPatternExpander(run_timestamp=run_timestamp).expand(path_template, context)
