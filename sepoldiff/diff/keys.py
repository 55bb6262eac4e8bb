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
from logging import getLogger

from sepoldiff.exceptions import UnknownIdentifier
from sepoldiff.types.policy import (
    SELF,
    AvRule,
    IdentifierKind,
    PolicySnapshot,
    TeRule,
)
from sepoldiff.types.ruldiff import PseudoRuleKey
from sepoldiff.types.typediff import TypeDiff

_logger = getLogger(__name__)


class DiffSide(StrEnum):
    ORIGINAL = "original"
    MODIFIED = "modified"


# (kind, source, target, class, cond, branch, name) of a literal rule, with
# type endpoints canonicalised and attribute endpoints kept by name
CoverageSignature = tuple[str, str, str, str, str | None, bool | None, str | None]


class TypeEquivalence:
    """Maps each policy's local type names into the shared canonical namespace.

    A renamed original type is known under its modified name, every other
    type keeps its own name.
    """

    def __init__(
        self,
        original: PolicySnapshot,
        modified: PolicySnapshot,
        type_diff: TypeDiff,
    ) -> None:
        self._policies = {
            DiffSide.ORIGINAL: original,
            DiffSide.MODIFIED: modified,
        }
        for old_name, new_name in type_diff.renames.items():
            if old_name not in original.types:
                raise UnknownIdentifier(old_name, "type", original.policy_id)
            if new_name not in modified.types:
                raise UnknownIdentifier(new_name, "type", modified.policy_id)
        self._renames = dict(type_diff.renames)
        self._conditionals = dict(type_diff.conditionals)
        _logger.debug(
            "Type equivalence with %d renames and %d conditional mappings",
            len(self._renames),
            len(self._conditionals),
        )

    def policy(self, side: DiffSide) -> PolicySnapshot:
        return self._policies[side]

    def canonical_type(self, type_name: str, side: DiffSide) -> str:
        policy = self._policies[side]
        if type_name not in policy.types:
            raise UnknownIdentifier(type_name, "type", policy.policy_id)
        if side == DiffSide.ORIGINAL:
            return self._renames.get(type_name, type_name)
        return type_name

    def canonical_cond(self, cond: str | None, side: DiffSide) -> str | None:
        if cond is None or side == DiffSide.MODIFIED:
            return cond
        return self._conditionals.get(cond, cond)

    def canonical_endpoint(self, nominal: str, side: DiffSide) -> str:
        if nominal == SELF:
            return SELF
        policy = self._policies[side]
        if policy.identifier_kind(nominal) == IdentifierKind.ATTRIBUTE:
            return f"@{nominal}"
        return self.canonical_type(policy.lookup_type(nominal), side)


def key_for(
    rule: AvRule | TeRule,
    source: str,
    target: str,
    equivalence: TypeEquivalence,
    side: DiffSide,
) -> PseudoRuleKey:
    cond = equivalence.canonical_cond(rule.cond, side)
    return PseudoRuleKey(
        kind=rule.flavor,
        cls=rule.cls,
        source=equivalence.canonical_type(source, side),
        target=equivalence.canonical_type(target, side),
        cond=cond,
        branch=rule.branch if cond is not None else None,
        name=rule.name if isinstance(rule, TeRule) else None,
    )


def coverage_signature(
    rule: AvRule | TeRule, equivalence: TypeEquivalence, side: DiffSide
) -> CoverageSignature:
    cond = equivalence.canonical_cond(rule.cond, side)
    return (
        rule.flavor,
        equivalence.canonical_endpoint(rule.source, side),
        equivalence.canonical_endpoint(rule.target, side),
        rule.cls,
        cond,
        rule.branch if cond is not None else None,
        rule.name if isinstance(rule, TeRule) else None,
    )
