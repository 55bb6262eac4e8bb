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
from enum import StrEnum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Discriminator, Field

from sepoldiff.exceptions import ConflictingDefaultType
from sepoldiff.types.policy import RuleFamily


class DiffForm(StrEnum):
    ADDED = "added"
    REMOVED = "removed"
    MODIFIED = "modified"
    ADD_TYPE = "add_type"
    REMOVE_TYPE = "remove_type"


# Layout of the statistics array
DIFF_FORMS: tuple[DiffForm, ...] = (
    DiffForm.ADDED,
    DiffForm.REMOVED,
    DiffForm.MODIFIED,
    DiffForm.ADD_TYPE,
    DiffForm.REMOVE_TYPE,
)

_SIGILS = {
    DiffForm.ADDED: "+",
    DiffForm.REMOVED: "-",
    DiffForm.MODIFIED: "*",
    DiffForm.ADD_TYPE: "+",
    DiffForm.REMOVE_TYPE: "-",
}


def _optional_rank(value: str | bool | None) -> tuple[bool, str | bool]:
    if value is None:
        return (False, "")
    return (True, value)


class PseudoRuleKey(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    kind: str
    cls: str = Field(alias="class")
    source: str
    target: str
    cond: str | None = None
    branch: bool | None = None
    name: str | None = None

    @property
    def sort_key(self) -> tuple:
        return (
            self.cls,
            self.source,
            self.target,
            self.kind,
            _optional_rank(self.cond),
            _optional_rank(self.branch),
            _optional_rank(self.name),
        )

    def __str__(self) -> str:
        name_str = f' "{self.name}"' if self.name is not None else ""
        return f"{self.kind} {self.source} {self.target} : {self.cls}{name_str}"


def _names_block(names: Iterable[str]) -> str:
    names = sorted(names)
    if not names:
        return "{ }"
    return "{ " + " ".join(names) + " }"


class RuleDiff(BaseModel):
    model_config = ConfigDict(frozen=True)

    form: DiffForm
    key: PseudoRuleKey
    membership_types: tuple[str, ...] = ()

    @property
    def rule_family(self) -> RuleFamily:
        raise NotImplementedError()

    @property
    def rule_type(self) -> str:
        return self.key.kind

    @property
    def source_type(self) -> str:
        return self.key.source

    @property
    def target_type(self) -> str:
        return self.key.target

    @property
    def object_class(self) -> str:
        return self.key.cls

    @property
    def sigil(self) -> str:
        return _SIGILS[self.form]

    def _body(self) -> str:
        raise NotImplementedError()

    def _annotations(self) -> Iterable[str]:
        if self.key.cond is not None:
            yield f"[cond {self.key.cond}: {'true' if self.key.branch else 'false'}]"
        match self.form:
            case DiffForm.ADD_TYPE:
                yield f"[+type {' '.join(self.membership_types)}]"
            case DiffForm.REMOVE_TYPE:
                yield f"[-type {' '.join(self.membership_types)}]"

    def render(self) -> str:
        return " ".join(
            (
                f"{self.sigil} {self.key.kind} {self.key.source} {self.key.target} "
                f": {self.key.cls}{self._body()};",
                *self._annotations(),
            )
        )

    def __str__(self) -> str:
        return self.render()


class AvRuleDiff(RuleDiff):
    family: Literal["av"] = "av"
    unmodified_perms: tuple[str, ...] = ()
    added_perms: tuple[str, ...] = ()
    removed_perms: tuple[str, ...] = ()

    @property
    def rule_family(self) -> RuleFamily:
        return RuleFamily.AV

    def _body(self) -> str:
        body = f" {_names_block(self.unmodified_perms)}"
        if self.form != DiffForm.MODIFIED:
            return body
        changes = []
        if self.added_perms:
            changes.append(f"+ {_names_block(self.added_perms)}")
        if self.removed_perms:
            changes.append(f"- {_names_block(self.removed_perms)}")
        return f"{body} ({' '.join(changes)})"


class TeRuleDiff(RuleDiff):
    family: Literal["te"] = "te"
    original_default: str | None = None
    modified_default: str | None = None
    conflicts: tuple[ConflictingDefaultType, ...] = ()

    @property
    def rule_family(self) -> RuleFamily:
        return RuleFamily.TE

    def _default_str(self, side: str, default: str | None) -> str:
        if default is not None:
            return default
        for conflict in self.conflicts:
            if conflict.side == side:
                return _names_block(conflict.defaults)
        raise ValueError(f"Diff entry {self.key} has no {side} default type")

    def _body(self) -> str:
        name_str = f' "{self.key.name}"' if self.key.name is not None else ""
        match self.form:
            case DiffForm.ADDED | DiffForm.ADD_TYPE:
                default = self._default_str("modified", self.modified_default)
            case DiffForm.REMOVED | DiffForm.REMOVE_TYPE:
                default = self._default_str("original", self.original_default)
            case DiffForm.MODIFIED:
                default = (
                    f"{self._default_str('original', self.original_default)} -> "
                    f"{self._default_str('modified', self.modified_default)}"
                )
        return f"{name_str} {default}"

    def _annotations(self) -> Iterable[str]:
        yield from super()._annotations()
        if self.conflicts:
            yield "[conflicting defaults]"


RuleDiffEntry = Annotated[AvRuleDiff | TeRuleDiff, Discriminator("family")]
