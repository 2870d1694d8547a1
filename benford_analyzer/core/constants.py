"""
Benford Analyzer Constants.

This module defines the thresholds, defaults and limits used throughout the
analyzer. Risk classification and deviation scoring constants are part of the
analysis contract: changing them changes every stored result.
"""

from typing import Dict, Tuple

# ============================================================================
# Benford Distribution
# ============================================================================

# Significant leading digits, always reported in ascending order
BENFORD_DIGITS: Tuple[int, ...] = (1, 2, 3, 4, 5, 6, 7, 8, 9)

# Degrees of freedom for the first-digit goodness-of-fit test (9 bins - 1)
CHI_SQUARE_DEGREES_OF_FREEDOM: int = 8


# ============================================================================
# Deviation Score
# ============================================================================

# Mean absolute frequency difference is scaled by this factor
# Rationale: a mean gap of 0.01 (one percentage point) maps to a score of 10
DEVIATION_SCALE_FACTOR: int = 1000

# Upper bound of the deviation score
MAX_DEVIATION_SCORE: int = 100


# ============================================================================
# Risk Classification
# ============================================================================

# Sample sizes above these bounds use chi-square normalized by sample size
# Rationale: raw chi-square grows linearly with n, so large samples would
# almost always be flagged against fixed critical values
LARGE_SAMPLE_THRESHOLD: int = 10_000
MEDIUM_SAMPLE_THRESHOLD: int = 1_000

# Normalized chi-square (chi_square / n) thresholds for n > 10,000
LARGE_SAMPLE_HIGH_RISK: float = 0.003
LARGE_SAMPLE_MEDIUM_RISK: float = 0.002

# Normalized chi-square thresholds for 1,000 < n <= 10,000
MEDIUM_SAMPLE_HIGH_RISK: float = 0.025
MEDIUM_SAMPLE_MEDIUM_RISK: float = 0.020

# Raw chi-square critical values (8 degrees of freedom) for n <= 1,000
# 20.09 is the 1% critical value, 15.51 the 5% critical value
CHI_SQUARE_HIGH_RISK: float = 20.09
CHI_SQUARE_MEDIUM_RISK: float = 15.51


# ============================================================================
# Sensitivity (per-digit deviation flags)
# ============================================================================

# Absolute observed-vs-expected frequency gap that marks a digit as high
SENSITIVITY_THRESHOLDS: Dict[str, float] = {
    'strict': 0.05,
    'standard': 0.10,
    'loose': 0.15,
}

DEFAULT_SENSITIVITY_LEVEL: str = 'standard'

# Fractions of the sensitivity threshold for the lower flag levels
MEDIUM_DEVIATION_RATIO: float = 0.7
INFO_DEVIATION_RATIO: float = 0.4


# ============================================================================
# Comparison
# ============================================================================

# Per-digit observed percentage gap (in percentage points) between two analyses
COMPARISON_HIGH_DELTA: float = 5.0
COMPARISON_MEDIUM_DELTA: float = 2.0


# ============================================================================
# Dataset Handling
# ============================================================================

# Rows inspected when deciding whether a column holds numeric values
NUMERIC_DETECTION_SAMPLE_ROWS: int = 50

# Rows read per chunk by the delimited-file loader
DEFAULT_CHUNK_SIZE: int = 50_000

# Extension to loader format
FILE_EXTENSION_MAP: Dict[str, str] = {
    '.csv': 'csv',
    '.tsv': 'csv',
    '.txt': 'csv',
    '.xlsx': 'excel',
    '.xls': 'excel',
    '.json': 'json',
}

SUPPORTED_FORMATS: Tuple[str, ...] = ('csv', 'excel', 'json')


# ============================================================================
# History & Settings Store
# ============================================================================

# Most recent analyses kept in history; older entries are dropped
HISTORY_LIMIT: int = 50

DEFAULT_NEGATIVE_HANDLING: str = 'absolute'

# State directory resolution: --state-dir, then this variable, then the default
STATE_DIR_ENV_VAR: str = 'BENFORD_ANALYZER_HOME'
DEFAULT_STATE_DIR: str = '~/.benford_analyzer'

HISTORY_FILE_NAME: str = 'history.json'
SETTINGS_FILE_NAME: str = 'settings.json'


# ============================================================================
# Configuration Security Limits
# ============================================================================

# Maximum YAML job file size (10MB)
# Security measure: prevents memory exhaustion while parsing huge files
MAX_YAML_FILE_SIZE: int = 10 * 1024 * 1024

# Maximum YAML nesting depth
MAX_YAML_NESTING_DEPTH: int = 20

# Maximum number of keys/items across the whole YAML document
MAX_YAML_KEY_COUNT: int = 10_000

# Maximum length of a single YAML key
MAX_YAML_KEY_LENGTH: int = 1_000

# Maximum length of a YAML string value (1MB)
MAX_STRING_LENGTH: int = 1024 * 1024


# ============================================================================
# Reporting
# ============================================================================

# Version of the JSON export document layout
EXPORT_FORMAT_VERSION: str = '1.0.0'

# Default export file name; {slug} is the lowercased dataset name
DEFAULT_EXPORT_FILENAME: str = 'benford-analysis-{slug}.json'


# ============================================================================
# Logging
# ============================================================================

LOG_FORMAT: str = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_DATE_FORMAT: str = '%Y-%m-%d %H:%M:%S'
DEFAULT_LOG_LEVEL: str = 'WARNING'
