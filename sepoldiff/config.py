from argparse import Action, ArgumentParser, FileType, Namespace, RawTextHelpFormatter
from collections.abc import Sequence
from dataclasses import dataclass, field
from logging import DEBUG, INFO
from pathlib import Path
from sys import stdout
from typing import Any, TextIO

from sepoldiff.types.reports import ReportFormat
from sepoldiff.utils.logging import parse_level


class ExtendListAction(Action):
    def __call__(
        self,
        parser: ArgumentParser,
        namespace: Namespace,
        values: str | Sequence[Any] | None,
        option_string: str | None = None,
    ) -> None:
        del parser
        del option_string
        if not values:
            return
        if getattr(namespace, self.dest, None) is None:
            setattr(namespace, self.dest, [])
        getattr(namespace, self.dest).extend(values)


def _verbose_filter(string: str) -> list[tuple[str, int]]:
    filters = []
    for item in string.split(","):
        name, _, level = item.partition("=")
        filters.append((name.strip(), parse_level(level) if level else DEBUG))
    return filters


def _workers(string: str) -> int:
    workers = int(string)
    if workers < 1:
        raise ValueError(f"Invalid number of workers '{string}'")
    return workers


@dataclass(kw_only=True, frozen=True)
class Config:
    log_level: int = INFO
    log_levels: dict[str, int] = field(default_factory=dict)

    original_path: Path | None = None
    modified_path: Path | None = None
    type_diff_path: Path | None = None
    workers: int = 1

    report_format: ReportFormat = ReportFormat.PLAIN
    output: TextIO = stdout
    full_report: bool = False

    @staticmethod
    def default() -> "Config":
        return Config()

    @staticmethod
    def parse_args(version: str, args: Sequence[str] | None = None) -> "Config":
        parser = ArgumentParser(
            description="Semantic difference of SELinux access vector "
            "and type enforcement rules between two policies",
            formatter_class=RawTextHelpFormatter,
        )
        parser.register("action", "extend", ExtendListAction)

        parser.add_argument(
            "-V", "--version", action="version", version=version, help="Show version"
        )
        parser.add_argument(
            "-v",
            "--verbose",
            action="store_true",
            default=False,
            help="Verbose program output",
        )
        parser.add_argument(
            "--verbose-filter",
            action="extend",
            type=_verbose_filter,
            default=None,
            help="Comma-separated list of loggers to set to DEBUG, "
            "or to another level with 'logger=LEVEL'.",
        )

        policy_options = parser.add_argument_group("Policy options")
        policy_options.add_argument(
            "original",
            type=Path,
            help="Original policy, either a JSON policy snapshot or a binary policy.\n"
            "Binary policies require setools.",
        )
        policy_options.add_argument(
            "modified",
            type=Path,
            help="Modified policy, either a JSON policy snapshot or a binary policy.",
        )
        policy_options.add_argument(
            "--type-diff",
            action="store",
            type=Path,
            default=None,
            help="JSON type and attribute diff of the two policies.\n"
            "Default: derived from the attribute membership of the policies.",
        )
        policy_options.add_argument(
            "--workers",
            action="store",
            type=_workers,
            default=1,
            help="Number of threads used to build rule indexes.\nDefault: 1.",
        )

        report_options = parser.add_argument_group("Report options")
        report_options.add_argument(
            "--format",
            action="store",
            type=ReportFormat,
            default=ReportFormat.PLAIN,
            help="Report format, possible values: plain, json\nDefault: plain",
        )
        report_options.add_argument(
            "--output",
            action="store",
            type=FileType("w", encoding="locale"),
            default=stdout,
            help="Output the report to this file.\nDefault: stdout",
        )
        report_options.add_argument(
            "--full-report",
            action="store_true",
            default=False,
            help="Output rule families without any differences as well. "
            "Applicable to plain report format.",
        )
        parsed_args = parser.parse_args(args)

        return Config(
            log_level=DEBUG if parsed_args.verbose else INFO,
            log_levels=dict(parsed_args.verbose_filter or ()),
            original_path=parsed_args.original,
            modified_path=parsed_args.modified,
            type_diff_path=parsed_args.type_diff,
            workers=parsed_args.workers,
            report_format=parsed_args.format,
            output=parsed_args.output,
            full_report=parsed_args.full_report,
        )
