"""
Benford Analyzer Exception Hierarchy.

Structural failures (unreadable files, bad configuration, unknown columns,
corrupt history) are raised as typed exceptions from this module. Row-level
data problems are never raised: unparsable cells are skipped by the engine.

Exception Severity Levels:
    - FATAL: Stop all processing immediately
    - CRITICAL: Stop processing the current file, continue with other files
    - RECOVERABLE: Log error, skip the affected analysis, continue
    - WARNING: Log warning, processing continues
"""

from typing import Optional, Dict, Any, List
from enum import Enum


class ErrorSeverity(Enum):
    """
    Classify error severity for handling decisions.

    Attributes:
        FATAL: Unrecoverable error, stop all processing
        CRITICAL: File-level error, stop processing this file
        RECOVERABLE: Analysis-level error, continue with other analyses
        WARNING: Non-critical issue, log and continue
    """
    FATAL = "fatal"
    CRITICAL = "critical"
    RECOVERABLE = "recoverable"
    WARNING = "warning"


class BenfordAnalyzerException(Exception):
    """
    Base exception for all analyzer errors.

    Attributes:
        message (str): Human-readable error message
        severity (ErrorSeverity): Error severity level
        details (Dict[str, Any]): Additional context (file path, column, etc.)
        original_exception (Optional[Exception]): Original exception if wrapping

    Example:
        >>> try:
        ...     frame = pd.read_excel(path)
        ... except ValueError as e:
        ...     raise BenfordAnalyzerException(
        ...         "Workbook could not be read",
        ...         severity=ErrorSeverity.CRITICAL,
        ...         details={'file': path},
        ...         original_exception=e
        ...     )
    """

    def __init__(
        self,
        message: str,
        severity: ErrorSeverity = ErrorSeverity.RECOVERABLE,
        details: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None
    ):
        super().__init__(message)
        self.message = message
        self.severity = severity
        self.details = details or {}
        self.original_exception = original_exception

    def to_dict(self) -> Dict[str, Any]:
        """
        Serialize exception to dictionary for logging/reporting.

        Returns:
            Dictionary containing exception details suitable for JSON serialization
        """
        return {
            'type': self.__class__.__name__,
            'message': self.message,
            'severity': self.severity.value,
            'details': self.details,
            'original_error': str(self.original_exception) if self.original_exception else None
        }


# ============================================================================
# Configuration Errors (Fatal)
# ============================================================================

class ConfigError(BenfordAnalyzerException):
    """Job configuration file errors (fatal - stop all processing)."""

    def __init__(self, message: str, field: Optional[str] = None, **kwargs):
        details = kwargs.pop('details', {})
        if field:
            details['field'] = field
        super().__init__(message, severity=ErrorSeverity.FATAL, details=details, **kwargs)


class YAMLSizeError(ConfigError):
    """YAML file exceeds the configured size limit."""


class ConfigValidationError(ConfigError):
    """YAML structure is too deep, too large or otherwise malformed."""


# ============================================================================
# Data Loading Errors (Critical)
# ============================================================================

class DataLoadError(BenfordAnalyzerException):
    """
    A dataset file could not be read (critical - skip this file).

    Example:
        >>> raise DataLoadError(
        ...     "CSV parsing error: inconsistent column count",
        ...     file_path="expenses.csv",
        ...     line_number=1523
        ... )
    """

    def __init__(
        self,
        message: str,
        file_path: Optional[str] = None,
        line_number: Optional[int] = None,
        **kwargs
    ):
        details = kwargs.pop('details', {})
        if file_path:
            details['file_path'] = file_path
        if line_number is not None:
            details['line_number'] = line_number
        super().__init__(message, severity=ErrorSeverity.CRITICAL, details=details, **kwargs)


class DataFileNotFoundError(DataLoadError):
    """Dataset file does not exist."""

    def __init__(self, file_path: str, **kwargs):
        super().__init__(f"File not found: {file_path}", file_path=file_path, **kwargs)


class UnsupportedFormatError(DataLoadError):
    """File extension or requested format has no loader."""

    def __init__(
        self,
        file_path: str,
        format: Optional[str] = None,
        supported_formats: Optional[List[str]] = None,
        **kwargs
    ):
        details = kwargs.pop('details', {})
        if format:
            details['format'] = format
        if supported_formats:
            details['supported_formats'] = list(supported_formats)

        message = f"Unsupported file format: {format or file_path}"
        if supported_formats:
            message += f". Supported formats: {', '.join(supported_formats)}"

        super().__init__(message, file_path=file_path, details=details, **kwargs)


# ============================================================================
# Analysis Errors (Recoverable)
# ============================================================================

class AnalysisError(BenfordAnalyzerException):
    """An analysis could not be carried out (recoverable - skip it)."""

    def __init__(self, message: str, column: Optional[str] = None, **kwargs):
        details = kwargs.pop('details', {})
        if column:
            details['column'] = column
        super().__init__(message, severity=ErrorSeverity.RECOVERABLE, details=details, **kwargs)


class ParameterValidationError(AnalysisError):
    """An option or argument has a value outside its allowed set."""

    def __init__(self, message: str, parameter: Optional[str] = None, value: Any = None, **kwargs):
        details = kwargs.pop('details', {})
        if parameter:
            details['parameter'] = parameter
        if value is not None:
            details['value'] = value
        super().__init__(message, details=details, **kwargs)


class ColumnNotFoundError(AnalysisError):
    """Requested column does not exist in the dataset."""

    def __init__(self, column: str, available_columns: Optional[List[str]] = None, **kwargs):
        details = kwargs.pop('details', {})
        message = f"Column '{column}' not found in dataset"
        if available_columns:
            details['available_columns'] = list(available_columns)
            preview = ', '.join(available_columns[:10])
            if len(available_columns) > 10:
                preview += f", ... ({len(available_columns) - 10} more)"
            message += f". Available columns: {preview}"
        super().__init__(message, column=column, details=details, **kwargs)


# ============================================================================
# History & Settings Store Errors
# ============================================================================

class HistoryStoreError(BenfordAnalyzerException):
    """Persisted analyzer state could not be read or written."""

    def __init__(self, message: str, path: Optional[str] = None, **kwargs):
        details = kwargs.pop('details', {})
        if path:
            details['path'] = path
        super().__init__(message, severity=ErrorSeverity.RECOVERABLE, details=details, **kwargs)


class HistoryEntryNotFoundError(HistoryStoreError):
    """No stored analysis has the requested id."""

    def __init__(self, analysis_id: str, **kwargs):
        details = kwargs.pop('details', {})
        details['analysis_id'] = analysis_id
        super().__init__(f"No analysis with id '{analysis_id}' in history", details=details, **kwargs)


# ============================================================================
# Reporting Errors (Warning)
# ============================================================================

class ReporterError(BenfordAnalyzerException):
    """Report generation failed; the analysis itself is unaffected."""

    def __init__(self, message: str, report_path: Optional[str] = None, **kwargs):
        details = kwargs.pop('details', {})
        if report_path:
            details['report_path'] = report_path
        super().__init__(message, severity=ErrorSeverity.WARNING, details=details, **kwargs)
