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

from enum import StrEnum

from pydantic import BaseModel, Field

from sepoldiff.diff.session import DiffSession
from sepoldiff.exceptions import ConflictingDefaultType
from sepoldiff.types.policy import RuleFamily
from sepoldiff.types.ruldiff import DIFF_FORMS, DiffForm, RuleDiffEntry


class ReportFormat(StrEnum):
    PLAIN = "plain"
    JSON = "json"


class RuleFamilyReport(BaseModel):
    family: RuleFamily
    stats: dict[DiffForm, int]
    entries: list[RuleDiffEntry] = Field(default_factory=list)

    @property
    def contains_changes(self) -> bool:
        return len(self.entries) > 0


class Report(BaseModel):
    original: str
    modified: str
    families: list[RuleFamilyReport]
    diagnostics: list[ConflictingDefaultType] = Field(default_factory=list)

    @staticmethod
    def from_session(session: DiffSession) -> "Report":
        return Report(
            original=session.original.policy_id,
            modified=session.modified.policy_id,
            families=[
                RuleFamilyReport(
                    family=family,
                    stats=dict(zip(DIFF_FORMS, session.stats(family))),
                    entries=list(session.entries(family)),
                )
                for family in RuleFamily
            ],
            diagnostics=list(session.diagnostics),
        )
