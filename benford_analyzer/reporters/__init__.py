from benford_analyzer.reporters.json_reporter import JSONReporter, default_export_filename

__all__ = ['JSONReporter', 'default_export_filename']
