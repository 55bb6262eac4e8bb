# Copyright (C) 2025 Juraj Marcin <juraj@jurajmarcin.com>
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.

from collections.abc import Iterable
from logging import getLogger
from typing import Any, TextIO

from sepoldiff.report.common import ReportFormatter, RuleFamilyReportFormatter

_logger = getLogger(__name__)


def _indent(string: str | Any, size: int) -> str:
    return "    " * size + str(string)


class PlainRuleFamilyReportFormatter(RuleFamilyReportFormatter):
    def formatted_lines(self) -> Iterable[str]:
        if not self._shown:
            return
        yield f"{self._title} ({self._stats_message})"
        yield from (_indent(line, 1) for line in self._entry_lines)
        yield ""


class PlainReportFormatter(ReportFormatter):
    def formatted_lines(self) -> Iterable[str]:
        yield self._title
        yield _indent(self._policies_message, 1)
        yield ""
        for family_report in self._family_reports:
            yield from PlainRuleFamilyReportFormatter(
                self._config, family_report
            ).formatted_lines()
        if self._report.diagnostics:
            yield "Diagnostics"
            yield from (
                _indent(diagnostic, 1) for diagnostic in self._report.diagnostics
            )
            yield ""

    def format_report(self, file: TextIO) -> None:
        _logger.info("Generating plain text report")
        return super().format_report(file)
