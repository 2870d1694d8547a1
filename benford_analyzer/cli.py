"""
Command-line interface for the Benford Analyzer.

Provides commands for:
- Analyzing a column of a CSV, Excel or JSON file
- Running batch analysis jobs from YAML configuration
- Browsing, comparing and exporting past analyses
- Managing persisted settings
"""

import sys
import time
from datetime import datetime
from pathlib import Path

import click

from benford_analyzer import __version__
from benford_analyzer.core.comparison import compare_summaries
from benford_analyzer.core.config import AnalysisJobConfig
from benford_analyzer.core.constants import BENFORD_DIGITS, SENSITIVITY_THRESHOLDS, SUPPORTED_FORMATS
from benford_analyzer.core.engine import BenfordAnalyzer, chi_square_p_value, filter_rows_by_leading_digit
from benford_analyzer.core.exceptions import BenfordAnalyzerException, ColumnNotFoundError, DataLoadError
from benford_analyzer.core.logging_config import get_logger, setup_logging
from benford_analyzer.core.pretty_output import PrettyOutput as po
from benford_analyzer.core.results import AnalysisOptions, NegativeHandling, RiskLevel
from benford_analyzer.core.sensitivity import DeviationLevel, SensitivityLevel, flag_deviations
from benford_analyzer.loaders import load_dataset
from benford_analyzer.reporters.json_reporter import JSONReporter, default_export_filename
from benford_analyzer.sample_data import SAMPLE_DATASETS, load_sample
from benford_analyzer.store import open_history, open_settings
from benford_analyzer.store.settings import NEGATIVE_VALUE_HANDLING, SENSITIVITY_LEVEL
from benford_analyzer.utils.path_patterns import PathPatternExpander

logger = get_logger(__name__)

RISK_CHOICES = [level.value for level in RiskLevel]
NEGATIVE_CHOICES = [handling.value for handling in NegativeHandling]
SENSITIVITY_CHOICES = list(SENSITIVITY_THRESHOLDS)

_FLAG_SEVERITY = {
    DeviationLevel.HIGH: "high",
    DeviationLevel.MEDIUM: "medium",
    DeviationLevel.INFO: "info",
}


def log_options(func):
    """Add --log-level and --log-file to a command."""
    func = click.option('--log-file', type=click.Path(), help='Optional log file path')(func)
    func = click.option('--log-level', type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR'], case_sensitive=False),
                        default='WARNING', help='Logging level')(func)
    return func


def state_option(func):
    return click.option('--state-dir', type=click.Path(file_okay=False),
                        help='Directory for history and settings (default: $BENFORD_ANALYZER_HOME '
                             'or ~/.benford_analyzer)')(func)


def _parse_delimiter(delimiter):
    if delimiter is None:
        return None
    return delimiter.encode().decode('unicode_escape')


def _parse_sheet(sheet):
    if sheet is None:
        return None
    return int(sheet) if sheet.isdigit() else sheet


def _fail(message, exc=None):
    po.blank_line()
    po.error(message)
    if exc is not None and exc.details:
        for key, value in exc.details.items():
            po.key_value(key, value, indent=3)
    sys.exit(1)


def _print_summary(summary, sensitivity, dataset_rows=None):
    """Print the headline numbers of one analysis and its digit table."""
    risk = summary.risk.value
    items = [
        ("Dataset", summary.name, po.PRIMARY),
        ("Column", summary.column_name, po.PRIMARY),
        ("Valid observations", f"{summary.total_count:,}", po.PRIMARY),
        ("Chi-square", f"{summary.chi_square:.4f}", po.PRIMARY),
        ("Deviation score", f"{summary.deviation_score:.1f} / 100", po.PRIMARY),
        ("Risk", risk.upper(), po.risk_color(risk)),
    ]
    if dataset_rows is not None:
        items.insert(2, ("Rows", f"{dataset_rows:,}", po.PRIMARY))
    if summary.total_count:
        items.append(("p-value (df=8)", f"{chi_square_p_value(summary.chi_square):.4g}", po.DIM))
    po.summary_box("BENFORD ANALYSIS", items)
    po.key_value("Analysis ID", summary.id, indent=2)
    po.key_value("Created", summary.created_at.strftime('%Y-%m-%d %H:%M:%S UTC'), indent=2)

    _print_digit_table(summary, sensitivity)


def _print_digit_table(summary, sensitivity):
    flags = flag_deviations(summary.results, sensitivity)
    po.section(f"Leading digit distribution (sensitivity: {sensitivity.label})")
    rows = []
    for result in summary.results:
        rows.append([
            result.digit,
            f"{result.observed_count:,}",
            f"{result.observed_freq * 100:6.2f}%",
            f"{result.theoretical_freq * 100:6.2f}%",
            f"{result.difference * 100:+6.2f}",
            po.bar(result.observed_freq / 0.35, width=20),
            flags[result.digit].value,
        ])
    po.table(["Digit", "Count", "Observed", "Expected", "Diff pp", "", "Flag"], rows)

    flagged = [(digit, level) for digit, level in flags.items() if level in _FLAG_SEVERITY]
    if flagged:
        po.blank_line()
        for digit, level in flagged:
            result = summary.result_for(digit)
            direction = "over" if result.difference > 0 else "under"
            po.finding(
                f"Digit {digit} is {direction}-represented by {abs(result.difference) * 100:.2f} percentage points",
                severity=_FLAG_SEVERITY[level],
            )


def _print_drilldown(dataset, column, digit, negative_handling, limit):
    matches = filter_rows_by_leading_digit(dataset.rows, column, digit, negative_handling)
    po.section(f"Rows of '{column}' leading with {digit} ({len(matches):,} rows)")
    if not matches:
        po.info("No rows")
        return
    headers = list(dataset.columns)
    po.table(headers, ([row.get(header, "") for header in headers] for row in matches[:limit]))
    if len(matches) > limit:
        po.info(f"... {len(matches) - limit:,} more rows (use --limit to show more)")


def _risk_triggered(summary, fail_on_risk):
    return fail_on_risk is not None and summary.risk.rank >= RiskLevel.parse(fail_on_risk).rank


@click.group()
@click.version_option(version=__version__, prog_name='benford-analyze')
def cli():
    """
    Benford Analyzer - first-digit anomaly detection for tabular data.

    Compares the leading-digit distribution of a numeric column against
    Benford's law and classifies the deviation into a risk level. Supports
    CSV, Excel and JSON files.
    """


@cli.command()
@click.argument('file_path', type=click.Path(exists=True, dir_okay=False))
@click.option('--column', '-c', help='Column to analyze (default: first numeric column)')
@click.option('--name', '-n', help='Dataset name stored with the analysis (default: file name)')
@click.option('--format', '-f', 'file_format', type=click.Choice(list(SUPPORTED_FORMATS), case_sensitive=False),
              help='File format (default: inferred from extension)')
@click.option('--delimiter', '-d', default=None, help='Column delimiter for CSV files. Use "\\t" for tab.')
@click.option('--sheet', default=None, help='Excel sheet name or index (default: first sheet)')
@click.option('--negative-handling', type=click.Choice(NEGATIVE_CHOICES), default=None,
              help='How to treat negative values (default: saved setting)')
@click.option('--sensitivity', type=click.Choice(SENSITIVITY_CHOICES), default=None,
              help='Per-digit flag sensitivity (default: saved setting)')
@click.option('--json-output', '-j', help='Path for JSON export (supports {date}, {timestamp}, {file_name}, ...)')
@click.option('--drilldown', type=click.IntRange(1, 9), help='List rows whose value leads with this digit')
@click.option('--limit', type=click.IntRange(min=1), default=20, show_default=True, help='Rows shown by --drilldown')
@click.option('--no-history', is_flag=True, help='Do not save the analysis to history')
@click.option('--fail-on-risk', type=click.Choice(RISK_CHOICES), default=None,
              help='Exit with code 1 when risk is at or above this level')
@state_option
@log_options
def analyze(file_path, column, name, file_format, delimiter, sheet, negative_handling, sensitivity, json_output,
            drilldown, limit, no_history, fail_on_risk, state_dir, log_level, log_file):
    """
    Analyze the leading digits of one column.

    FILE_PATH: CSV, Excel or JSON file

    Examples:

    \b
    benford-analyze analyze expenses.csv -c amount

    \b
    benford-analyze analyze ledger.xlsx -c value --negative-handling exclude -j "reports/{file_name}_{date}.json"

    \b
    benford-analyze analyze invoices.json -c total --drilldown 7
    """
    expander = PathPatternExpander(run_timestamp=datetime.now())
    setup_logging(level=log_level, log_file=expander.expand(log_file, {}) if log_file else None)
    logger.info(f"Starting analysis: {file_path}")

    try:
        settings = open_settings(state_dir)
        handling = NegativeHandling.parse(negative_handling) if negative_handling else settings.negative_value_handling
        level = SensitivityLevel.parse(sensitivity) if sensitivity else settings.sensitivity_level

        po.task_start(f"Loading {file_path}")
        started = time.time()
        dataset = load_dataset(
            file_path,
            format=file_format,
            name=name,
            delimiter=_parse_delimiter(delimiter),
            sheet=_parse_sheet(sheet),
        )
        po.task_complete(f"Loaded {dataset.row_count:,} rows, {len(dataset.columns)} columns", time.time() - started)

        analyzer = BenfordAnalyzer(AnalysisOptions(negative_handling=handling))
        summary = analyzer.analyze_dataset(dataset, column)

        _print_summary(summary, level, dataset_rows=dataset.row_count)

        if summary.total_count == 0:
            po.warning(f"No usable numeric values in column '{summary.column_name}'")

        if drilldown:
            _print_drilldown(dataset, summary.column_name, drilldown, handling, limit)

        if not no_history:
            open_history(state_dir).add(summary)
            logger.info(f"Saved analysis {summary.id} to history")

        if json_output:
            output_path = expander.expand(json_output, {
                'file_name': Path(file_path).stem,
                'column_name': summary.column_name,
            })
            written = JSONReporter(level, handling).export(summary, output_path, dataset)
            po.blank_line()
            po.output_file("JSON", written)

    except ColumnNotFoundError as e:
        _fail(e.message)
    except BenfordAnalyzerException as e:
        _fail(e.message, e)

    if _risk_triggered(summary, fail_on_risk):
        po.blank_line()
        po.error(f"Risk {summary.risk.value.upper()} is at or above --fail-on-risk {fail_on_risk}")
        sys.exit(1)


@cli.command()
@click.argument('file_path', type=click.Path(exists=True, dir_okay=False))
@click.option('--format', '-f', 'file_format', type=click.Choice(list(SUPPORTED_FORMATS), case_sensitive=False),
              help='File format (default: inferred from extension)')
@click.option('--delimiter', '-d', default=None, help='Column delimiter for CSV files')
@click.option('--sheet', default=None, help='Excel sheet name or index')
@log_options
def columns(file_path, file_format, delimiter, sheet, log_level, log_file):
    """
    List the columns of a file and mark the numeric ones.

    FILE_PATH: CSV, Excel or JSON file
    """
    setup_logging(level=log_level, log_file=log_file)
    try:
        dataset = load_dataset(file_path, format=file_format, delimiter=_parse_delimiter(delimiter),
                               sheet=_parse_sheet(sheet))
    except BenfordAnalyzerException as e:
        _fail(e.message, e)

    po.section(f"{dataset.name}: {dataset.row_count:,} rows")
    numeric = set(dataset.numeric_columns)
    po.table(
        ["Column", "Numeric", "Sample"],
        [
            [column, "yes" if column in numeric else "no",
             next((row.get(column) for row in dataset.rows if row.get(column) is not None), "")]
            for column in dataset.columns
        ],
    )


@cli.command()
@click.argument('config_file', type=click.Path(exists=True, dir_okay=False))
@click.option('--json-output', '-j', help='Path for the job JSON export (overrides config)')
@click.option('--fail-on-risk', type=click.Choice(RISK_CHOICES), default=None,
              help='Exit with code 1 when any analysis reaches this risk (overrides config)')
@state_option
@log_options
def run(config_file, json_output, fail_on_risk, state_dir, log_level, log_file):
    """
    Run a batch analysis job from a YAML configuration file.

    CONFIG_FILE: Path to YAML job file (see init-config)

    Exit codes: 0 success, 1 risk threshold reached or job could not start,
    2 some files or columns could not be analyzed.
    """
    run_timestamp = datetime.now()
    expander = PathPatternExpander(run_timestamp=run_timestamp)
    setup_logging(level=log_level, log_file=expander.expand(log_file, {}) if log_file else None)

    try:
        config = AnalysisJobConfig.from_yaml(config_file, run_timestamp=run_timestamp)
    except BenfordAnalyzerException as e:
        _fail(f"Invalid configuration: {e.message}", e)

    po.header(f"BENFORD JOB: {config.job_name}")
    analyzer = BenfordAnalyzer(config.options)
    reporter = JSONReporter(config.sensitivity, config.options.negative_handling)
    history = open_history(config.history_path or state_dir) if config.history_enabled else None
    threshold = RiskLevel.parse(fail_on_risk) if fail_on_risk else config.fail_on_risk

    summaries = []
    exports = []
    problems = 0

    for file_config in config.files:
        po.task_start(f"{file_config['name']} ({file_config['path']})")
        try:
            dataset = load_dataset(
                file_config['path'],
                format=file_config['format'],
                name=file_config['name'],
                delimiter=file_config['delimiter'],
                encoding=file_config['encoding'],
                sheet=file_config['sheet'],
            )
        except DataLoadError as e:
            logger.error(f"Skipping {file_config['path']}: {e.message}")
            po.error(e.message, indent=2)
            problems += 1
            continue

        target_columns = file_config['columns'] or dataset.numeric_columns
        if not target_columns:
            po.warning("No numeric columns found", indent=2)
            problems += 1
            continue

        for column in target_columns:
            try:
                summary = analyzer.analyze_dataset(dataset, column)
            except ColumnNotFoundError as e:
                po.error(e.message, indent=2)
                problems += 1
                continue

            summaries.append(summary)
            exports.append(reporter.build_export(summary, dataset))
            if history is not None:
                history.add(summary)

            risk = summary.risk.value
            po.key_value(
                f"  {column}",
                f"{risk.upper():<6} chi-square={summary.chi_square:.2f} "
                f"deviation={summary.deviation_score:.1f} n={summary.total_count:,}",
                value_color=po.risk_color(risk),
            )

    report_path = config.expand_output_path(json_output) if json_output else config.json_report_path
    if report_path and exports:
        try:
            reporter.write(reporter.build_job_export(config.job_name, exports), report_path)
            po.blank_line()
            po.output_file("JSON", report_path)
        except BenfordAnalyzerException as e:
            po.warning(e.message)

    po.summary_box("JOB SUMMARY", [
        ("Analyses", len(summaries), po.PRIMARY),
        ("High risk", sum(1 for s in summaries if s.risk is RiskLevel.HIGH), po.ERROR),
        ("Medium risk", sum(1 for s in summaries if s.risk is RiskLevel.MEDIUM), po.WARNING),
        ("Low risk", sum(1 for s in summaries if s.risk is RiskLevel.LOW), po.SUCCESS),
        ("Problems", problems, po.ERROR if problems else po.SUCCESS),
    ])

    if threshold is not None and any(s.risk.rank >= threshold.rank for s in summaries):
        po.error(f"At least one analysis reached {threshold.value.upper()} risk")
        sys.exit(1)
    if problems:
        po.warning("Job completed with problems")
        sys.exit(2)
    po.success("Job completed")


@cli.command()
@click.argument('left_id')
@click.argument('right_id')
@state_option
def compare(left_id, right_id, state_dir):
    """
    Compare two analyses from history.

    LEFT_ID, RIGHT_ID: analysis ids or unambiguous id prefixes
    """
    history = open_history(state_dir)
    try:
        left = history.require(left_id)
        right = history.require(right_id)
    except BenfordAnalyzerException as e:
        _fail(e.message)

    comparison = compare_summaries(left, right)

    po.section("Comparison")
    po.table(
        ["", "A", "B"],
        [
            ["Dataset", left.name, right.name],
            ["Column", left.column_name, right.column_name],
            ["Observations", f"{left.total_count:,}", f"{right.total_count:,}"],
            ["Chi-square", f"{left.chi_square:.4f}", f"{right.chi_square:.4f}"],
            ["Deviation", f"{left.deviation_score:.1f}", f"{right.deviation_score:.1f}"],
            ["Risk", left.risk.value.upper(), right.risk.value.upper()],
        ],
    )
    po.blank_line()
    po.key_value("Deviation delta", f"{comparison.deviation_delta:.1f}", indent=2)
    if comparison.higher_anomaly is None:
        po.key_value("Higher anomaly", "equal", indent=2)
    else:
        po.key_value("Higher anomaly", "A" if comparison.higher_anomaly == 'left' else "B", indent=2)
    if comparison.risk_consistent:
        po.key_value("Risk agreement", "Synchronized", indent=2, value_color=po.SUCCESS)
    else:
        po.key_value("Risk agreement", "Divergent", indent=2, value_color=po.WARNING)

    po.section("Per-digit observed percentages")
    po.table(
        ["Digit", "A", "B", "Expected", "Delta pp", "Level"],
        [
            [d.digit, f"{d.left_percent:.2f}%", f"{d.right_percent:.2f}%", f"{d.expected_percent:.2f}%",
             f"{d.delta:.2f}", d.level]
            for d in comparison.digit_deltas
        ],
    )


@cli.group()
def history():
    """Browse and manage saved analyses."""


@history.command('list')
@click.option('--search', '-s', default='', help='Filter by dataset or column name (case-insensitive)')
@click.option('--limit', type=click.IntRange(min=1), default=None, help='Show at most N entries')
@state_option
def history_list(search, limit, state_dir):
    """List saved analyses, most recent first."""
    entries = open_history(state_dir).search(search)
    if limit:
        entries = entries[:limit]
    if not entries:
        po.info("No analyses in history" if not search else f"No analyses match '{search}'")
        return
    po.table(
        ["ID", "Created", "Dataset", "Column", "N", "Chi-square", "Risk"],
        [
            [entry.id[:8], entry.created_at.strftime('%Y-%m-%d %H:%M'), entry.name, entry.column_name,
             f"{entry.total_count:,}", f"{entry.chi_square:.2f}", entry.risk.value.upper()]
            for entry in entries
        ],
    )


@history.command('show')
@click.argument('analysis_id')
@click.option('--sensitivity', type=click.Choice(SENSITIVITY_CHOICES), default=None,
              help='Per-digit flag sensitivity (default: saved setting)')
@state_option
def history_show(analysis_id, sensitivity, state_dir):
    """Show a saved analysis."""
    try:
        entry = open_history(state_dir).require(analysis_id)
    except BenfordAnalyzerException as e:
        _fail(e.message)
    level = SensitivityLevel.parse(sensitivity) if sensitivity else open_settings(state_dir).sensitivity_level
    _print_summary(entry, level)


@history.command('remove')
@click.argument('analysis_id')
@state_option
def history_remove(analysis_id, state_dir):
    """Remove a saved analysis."""
    store = open_history(state_dir)
    try:
        entry = store.require(analysis_id)
    except BenfordAnalyzerException as e:
        _fail(e.message)
    store.remove(entry.id)
    po.success(f"Removed analysis {entry.id} ({entry.name} / {entry.column_name})")


@history.command('clear')
@click.option('--yes', is_flag=True, help='Do not ask for confirmation')
@state_option
def history_clear(yes, state_dir):
    """Delete every saved analysis."""
    store = open_history(state_dir)
    if not yes:
        click.confirm(f"Delete {len(store)} saved analyses?", abort=True)
    store.clear()
    po.success("History cleared")


@history.command('export')
@click.argument('analysis_id')
@click.option('--output', '-o', help='Output path (default: benford-analysis-<dataset name>.json)')
@state_option
def history_export(analysis_id, output, state_dir):
    """Export a saved analysis as JSON."""
    try:
        entry = open_history(state_dir).require(analysis_id)
        settings = open_settings(state_dir)
        reporter = JSONReporter(settings.sensitivity_level, settings.negative_value_handling)
        written = reporter.export(entry, output or default_export_filename(entry.name))
    except BenfordAnalyzerException as e:
        _fail(e.message)
    po.output_file("JSON", written)


@cli.group()
def settings():
    """Show or change persisted settings."""


@settings.command('show')
@state_option
def settings_show(state_dir):
    """Show current settings."""
    store = open_settings(state_dir)
    level = store.sensitivity_level
    handling = store.negative_value_handling
    po.key_value(SENSITIVITY_LEVEL, f"{level.value} ({level.threshold:.2f}) - {level.description}")
    po.key_value(NEGATIVE_VALUE_HANDLING, f"{handling.value} - {handling.description}")


@settings.command('set')
@click.argument('key', type=click.Choice([SENSITIVITY_LEVEL, NEGATIVE_VALUE_HANDLING]))
@click.argument('value')
@state_option
def settings_set(key, value, state_dir):
    """
    Change a setting.

    \b
    benford-analyze settings set sensitivity_level strict
    benford-analyze settings set negative_value_handling exclude
    """
    try:
        open_settings(state_dir).set(key, value)
    except BenfordAnalyzerException as e:
        _fail(e.message)
    po.success(f"{key} = {value.strip().lower()}")


@cli.command()
@click.argument('sample_id', type=click.Choice(list(SAMPLE_DATASETS)))
@click.option('--seed', type=int, default=None, help='Random seed for reproducible samples')
@click.option('--sensitivity', type=click.Choice(SENSITIVITY_CHOICES), default=None,
              help='Per-digit flag sensitivity (default: saved setting)')
@click.option('--json-output', '-j', help='Path for JSON export')
@click.option('--no-history', is_flag=True, help='Do not save the analysis to history')
@state_option
@log_options
def demo(sample_id, seed, sensitivity, json_output, no_history, state_dir, log_level, log_file):
    """
    Analyze a generated sample dataset.

    SAMPLE_ID: world_cities, accounting_expenses, manipulated_data or fibonacci_sequence
    """
    setup_logging(level=log_level, log_file=log_file)
    sample = SAMPLE_DATASETS[sample_id]
    po.task_start(f"{sample.title} [{sample.category}]")
    po.info(sample.description, indent=2)

    try:
        settings_store = open_settings(state_dir)
        level = SensitivityLevel.parse(sensitivity) if sensitivity else settings_store.sensitivity_level
        handling = settings_store.negative_value_handling
        dataset = load_sample(sample_id, seed=seed)
        summary = BenfordAnalyzer(AnalysisOptions(negative_handling=handling)).analyze_dataset(dataset, sample.column)
        _print_summary(summary, level, dataset_rows=dataset.row_count)

        if not no_history:
            open_history(state_dir).add(summary)
        if json_output:
            written = JSONReporter(level, handling).export(summary, json_output, dataset)
            po.output_file("JSON", written)
    except BenfordAnalyzerException as e:
        _fail(e.message, e)


@cli.command('init-config')
@click.argument('output_path', type=click.Path())
def init_config(output_path):
    """
    Generate a sample job configuration file.

    OUTPUT_PATH: Path where the sample config should be written
    """
    sample_config = '''# Benford Analyzer job configuration

benford_job:
  name: "Expense Audit"
  description: "Quarterly first-digit screening of payment data"

  files:
    # Analyze selected columns of a CSV file
    - name: "payments"
      path: "data/payments.csv"
      format: "csv"          # optional, inferred from extension
      delimiter: ","         # optional, auto-detected
      columns: ["amount", "tax"]

    # Analyze every numeric column of the first sheet of a workbook
    - name: "ledger"
      path: "data/ledger.xlsx"
      sheet: 0

  options:
    negative_handling: "absolute"   # absolute | exclude
    sensitivity: "standard"         # strict | standard | loose

  output:
    json_report: "reports/{job_name}_{timestamp}.json"
    fail_on_risk: "high"            # low | medium | high (optional)

  history:
    enabled: true
    # path: "~/.benford_analyzer"
'''

    output_file = Path(output_path)
    try:
        output_file.parent.mkdir(parents=True, exist_ok=True)
        output_file.write_text(sample_config, encoding='utf-8')
    except OSError as e:
        _fail(f"Error creating config file: {e}")

    po.success(f"Sample configuration written to: {output_path}")
    click.echo("\nEdit the file to point at your data, then run:")
    click.echo(f"  benford-analyze run {output_path}")


@cli.command()
def version():
    """Display version information."""
    click.echo(f"Benford Analyzer v{__version__}")
    click.echo(f"First-digit analysis over digits {BENFORD_DIGITS[0]}-{BENFORD_DIGITS[-1]}")


if __name__ == '__main__':
    cli()
