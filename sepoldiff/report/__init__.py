from sepoldiff.config import Config
from sepoldiff.report.common import ReportFormatter
from sepoldiff.report.json import JSONReportFormatter
from sepoldiff.report.plain import PlainReportFormatter
from sepoldiff.types.reports import Report, ReportFormat


def report_formatter_factory(config: Config, report: Report) -> ReportFormatter:
    match config.report_format:
        case ReportFormat.PLAIN:
            return PlainReportFormatter(config, report)
        case ReportFormat.JSON:
            return JSONReportFormatter(config, report)
        case _:
            raise ValueError(f"Invalid report format {config.report_format!r}")
