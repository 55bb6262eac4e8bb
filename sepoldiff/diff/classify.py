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
from itertools import chain
from logging import getLogger

from sepoldiff.diff.index import IndexEntry, RuleIndex
from sepoldiff.diff.keys import DiffSide, TypeEquivalence, coverage_signature
from sepoldiff.diff.perms import diff_perms, one_sided_perms
from sepoldiff.types.policy import (
    SELF,
    AvRule,
    IdentifierKind,
    RuleFamily,
    TeRule,
)
from sepoldiff.types.ruldiff import (
    AvRuleDiff,
    DiffForm,
    PseudoRuleKey,
    RuleDiff,
    TeRuleDiff,
)
from sepoldiff.types.typediff import TypeDiff

_logger = getLogger(__name__)


class RuleClassifier:
    """Matches the original and modified index of one rule family.

    Every key of either index yields at most one diff entry. Keys present in
    a single index are ADD_TYPE / REMOVE_TYPE when every contributing literal
    rule covers the key only because of a type or attribute membership
    change, ADDED / REMOVED otherwise. Keys present in both indexes are
    MODIFIED on a content change, which dominates membership changes, and
    ADD_TYPE / REMOVE_TYPE when only the contributing membership changed.
    """

    def __init__(
        self,
        original: RuleIndex,
        modified: RuleIndex,
        equivalence: TypeEquivalence,
        type_diff: TypeDiff,
    ) -> None:
        if original.family != modified.family:
            raise ValueError(
                f"Cannot match {original.family} rules with {modified.family} rules"
            )
        self._family = original.family
        self._indexes = {DiffSide.ORIGINAL: original, DiffSide.MODIFIED: modified}
        self._equivalence = equivalence
        self._type_diff = type_diff

    @property
    def family(self) -> RuleFamily:
        return self._family

    def _counterpart(self, side: DiffSide) -> RuleIndex:
        if side == DiffSide.ORIGINAL:
            return self._indexes[DiffSide.MODIFIED]
        return self._indexes[DiffSide.ORIGINAL]

    def _fresh_members(self, attribute: str, side: DiffSide) -> frozenset[str]:
        if side == DiffSide.MODIFIED:
            return self._type_diff.attribute_added(attribute)
        return self._type_diff.attribute_removed(attribute)

    def _fresh_types(self, side: DiffSide) -> frozenset[str]:
        if side == DiffSide.MODIFIED:
            return self._type_diff.added_types
        return self._type_diff.removed_types

    def _membership_types(
        self, rule: AvRule | TeRule, key: PseudoRuleKey, side: DiffSide
    ) -> set[str]:
        """Types through which ``rule`` covers ``key`` only on ``side``.

        Empty when the rule would cover the key in the other policy as well,
        or when it is a new literal rule rather than a membership change.
        """
        policy = self._equivalence.policy(side)
        endpoints = [(rule.source, key.source)]
        if rule.target != SELF:
            endpoints.append((rule.target, key.target))
        fresh_types = self._fresh_types(side)
        new_types: set[str] = set()
        member_types: set[str] = set()
        for nominal, type_name in endpoints:
            if type_name in fresh_types:
                new_types.add(type_name)
            elif policy.identifier_kind(
                nominal
            ) == IdentifierKind.ATTRIBUTE and type_name in self._fresh_members(
                nominal, side
            ):
                member_types.add(type_name)
        if new_types:
            return new_types | member_types
        if member_types and (
            coverage_signature(rule, self._equivalence, side)
            in self._counterpart(side).coverage
        ):
            return member_types
        return set()

    def _membership_change(
        self, entry: IndexEntry, side: DiffSide, every_rule: bool
    ) -> tuple[str, ...]:
        changed: set[str] = set()
        for rule in entry.rules:
            types = self._membership_types(rule, entry.key, side)
            if every_rule and not types:
                return ()
            changed |= types
        return tuple(sorted(changed))

    def _conflicts(self, *entries: IndexEntry | None) -> tuple:
        return tuple(
            conflict
            for entry, side in zip(entries, (DiffSide.ORIGINAL, DiffSide.MODIFIED))
            if entry is not None and (conflict := entry.conflict(side)) is not None
        )

    def _same_content(self, original: IndexEntry, modified: IndexEntry) -> bool:
        if self._family == RuleFamily.AV:
            return original.perms == modified.perms
        return original.defaults == modified.defaults

    def _make_entry(
        self,
        form: DiffForm,
        key: PseudoRuleKey,
        original: IndexEntry | None,
        modified: IndexEntry | None,
        membership_types: tuple[str, ...] = (),
    ) -> RuleDiff:
        if self._family == RuleFamily.AV:
            if original is None:
                unmodified, added, removed = one_sided_perms(modified.perms)
            elif modified is None:
                unmodified, added, removed = one_sided_perms(original.perms)
            else:
                unmodified, added, removed = diff_perms(original.perms, modified.perms)
            return AvRuleDiff(
                form=form,
                key=key,
                membership_types=membership_types,
                unmodified_perms=tuple(sorted(unmodified)),
                added_perms=tuple(sorted(added)),
                removed_perms=tuple(sorted(removed)),
            )
        return TeRuleDiff(
            form=form,
            key=key,
            membership_types=membership_types,
            original_default=original.default if original else None,
            modified_default=modified.default if modified else None,
            conflicts=self._conflicts(original, modified),
        )

    def classify(self, key: PseudoRuleKey) -> RuleDiff | None:
        original = self._indexes[DiffSide.ORIGINAL].get(key)
        modified = self._indexes[DiffSide.MODIFIED].get(key)
        if original is None and modified is None:
            raise KeyError(key)
        if original is None:
            types = self._membership_change(modified, DiffSide.MODIFIED, True)
            form = DiffForm.ADD_TYPE if types else DiffForm.ADDED
        elif modified is None:
            types = self._membership_change(original, DiffSide.ORIGINAL, True)
            form = DiffForm.REMOVE_TYPE if types else DiffForm.REMOVED
        elif not self._same_content(original, modified):
            types = ()
            form = DiffForm.MODIFIED
        elif types := self._membership_change(modified, DiffSide.MODIFIED, False):
            form = DiffForm.ADD_TYPE
        elif types := self._membership_change(original, DiffSide.ORIGINAL, False):
            form = DiffForm.REMOVE_TYPE
        else:
            return None
        _logger.debug("Classified %s as %s", key, form)
        return self._make_entry(form, key, original, modified, types)

    def keys(self) -> list[PseudoRuleKey]:
        return sorted(
            set(chain(*self._indexes.values())), key=lambda key: key.sort_key
        )

    def classify_all(self) -> Iterable[RuleDiff]:
        for key in self.keys():
            if (entry := self.classify(key)) is not None:
                yield entry

    def __str__(self) -> str:
        return (
            f"<{self.__class__.__name__} family={self._family} "
            f"original={len(self._indexes[DiffSide.ORIGINAL])} "
            f"modified={len(self._indexes[DiffSide.MODIFIED])}>"
        )

    def __repr__(self) -> str:
        return str(self)
