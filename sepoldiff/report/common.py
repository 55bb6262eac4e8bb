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
from typing import Generic, TextIO, TypeVar

from pydantic import BaseModel

from sepoldiff.config import Config
from sepoldiff.types.policy import RuleFamily
from sepoldiff.types.reports import Report, RuleFamilyReport
from sepoldiff.types.ruldiff import DIFF_FORMS, DiffForm

_logger = getLogger(__name__)

_FORM_TITLES = {
    DiffForm.ADDED: "Added",
    DiffForm.REMOVED: "Removed",
    DiffForm.MODIFIED: "Modified",
    DiffForm.ADD_TYPE: "Added Type",
    DiffForm.REMOVE_TYPE: "Removed Type",
}

_FAMILY_TITLES = {
    RuleFamily.AV: "AV Rules",
    RuleFamily.TE: "TE Rules",
}


ReportT = TypeVar("ReportT", bound=BaseModel)


class BaseReportFormatter(Generic[ReportT]):
    def __init__(self, config: Config, report: "ReportT") -> None:
        self._config = config
        self._report = report

    def formatted_lines(self) -> Iterable[str]:
        return ()

    def format_report(self, file: TextIO) -> None:
        _logger.debug("Formatting the report using formatted_lines from %r", self)
        file.writelines(line + "\n" for line in self.formatted_lines())


class RuleFamilyReportFormatter(BaseReportFormatter[RuleFamilyReport]):
    @property
    def _shown(self) -> bool:
        return self._config.full_report or self._report.contains_changes

    @property
    def _title(self) -> str:
        return _FAMILY_TITLES[self._report.family]

    @property
    def _stats_message(self) -> str:
        return ", ".join(
            f"{_FORM_TITLES[form]} {self._report.stats.get(form, 0)}"
            for form in DIFF_FORMS
        )

    @property
    def _entry_lines(self) -> Iterable[str]:
        return (entry.render() for entry in self._report.entries)


class ReportFormatter(BaseReportFormatter[Report]):
    @property
    def _title(self) -> str:
        return "SELinux Policy Rule Differences"

    @property
    def _policies_message(self) -> str:
        return f"original={self._report.original} modified={self._report.modified}"

    @property
    def _family_reports(self) -> list[RuleFamilyReport]:
        return sorted(
            self._report.families,
            key=lambda family_report: list(RuleFamily).index(family_report.family),
        )
