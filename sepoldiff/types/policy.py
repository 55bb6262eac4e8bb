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

import json
from enum import StrEnum
from functools import cached_property
from hashlib import sha256
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from sepoldiff.exceptions import UnknownIdentifier

SELF = "self"


class RuleFamily(StrEnum):
    AV = "av"
    TE = "te"


class AvRuleKind(StrEnum):
    ALLOW = "allow"
    NEVERALLOW = "neverallow"
    AUDITALLOW = "auditallow"
    DONTAUDIT = "dontaudit"


class TeRuleKind(StrEnum):
    TYPE_TRANSITION = "type_transition"
    TYPE_CHANGE = "type_change"
    TYPE_MEMBER = "type_member"


class IdentifierKind(StrEnum):
    TYPE = "type"
    ALIAS = "alias"
    ATTRIBUTE = "attribute"


def _perms_str(perms) -> str:
    return "{ " + " ".join(sorted(perms)) + " }"


def _canonical(value: Any) -> Any:
    if isinstance(value, dict):
        return {key: _canonical(item) for key, item in sorted(value.items())}
    if isinstance(value, (set, frozenset)):
        return sorted(_canonical(item) for item in value)
    if isinstance(value, (list, tuple)):
        return [_canonical(item) for item in value]
    return value


class RuleBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    source: str
    target: str
    cls: str = Field(alias="class")
    cond: str | None = None
    branch: bool = True
    line: int | None = None

    def _cond_str(self) -> str:
        if self.cond is None:
            return ""
        return f" [cond {self.cond}: {'true' if self.branch else 'false'}]"


class AvRule(RuleBase):
    flavor: Literal["allow", "neverallow", "auditallow", "dontaudit"]
    perms: frozenset[str]

    def __str__(self) -> str:
        return (
            f"{self.flavor} {self.source} {self.target} : {self.cls} "
            f"{_perms_str(self.perms)};{self._cond_str()}"
        )


class TeRule(RuleBase):
    flavor: Literal["type_transition", "type_change", "type_member"]
    default: str
    name: str | None = None

    def __str__(self) -> str:
        name_str = f' "{self.name}"' if self.name is not None else ""
        return (
            f"{self.flavor} {self.source} {self.target} : {self.cls}"
            f"{name_str} {self.default};{self._cond_str()}"
        )


class PolicySnapshot(BaseModel):
    """In-memory view of one policy, as far as the rule diff needs it.

    ``identity`` is the stable identity of the snapshot; when it is not
    supplied by the provider it is derived from the snapshot content, so
    that two loads of an unchanged policy share it.
    """

    model_config = ConfigDict(frozen=True)

    identity: str | None = None
    types: frozenset[str] = frozenset()
    aliases: dict[str, str] = Field(default_factory=dict)
    attributes: dict[str, frozenset[str]] = Field(default_factory=dict)
    classes: dict[str, frozenset[str]] = Field(default_factory=dict)
    avrules: tuple[AvRule, ...] = ()
    terules: tuple[TeRule, ...] = ()

    @cached_property
    def policy_id(self) -> str:
        if self.identity is not None:
            return self.identity
        content = json.dumps(
            _canonical(self.model_dump(exclude={"identity"}, by_alias=True)),
            sort_keys=True,
        )
        return sha256(content.encode()).hexdigest()[:16]

    def identifier_kind(self, name: str) -> IdentifierKind:
        if name in self.types:
            return IdentifierKind.TYPE
        if name in self.aliases:
            return IdentifierKind.ALIAS
        if name in self.attributes:
            return IdentifierKind.ATTRIBUTE
        raise UnknownIdentifier(name, "type or attribute", self.policy_id)

    def lookup_type(self, name: str) -> str:
        if name in self.types:
            return name
        actual = self.aliases.get(name)
        if actual is None or actual not in self.types:
            raise UnknownIdentifier(name, "type", self.policy_id)
        return actual

    def lookup_class(self, name: str) -> str:
        if name not in self.classes:
            raise UnknownIdentifier(name, "class", self.policy_id)
        return name

    def rules(self, family: RuleFamily) -> tuple[AvRule, ...] | tuple[TeRule, ...]:
        match family:
            case RuleFamily.AV:
                return self.avrules
            case RuleFamily.TE:
                return self.terules
