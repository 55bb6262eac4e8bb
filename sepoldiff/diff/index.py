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

from collections.abc import Iterable, Iterator
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from functools import reduce

from sepoldiff.diff.expand import TypeSetExpander
from sepoldiff.diff.keys import (
    CoverageSignature,
    DiffSide,
    TypeEquivalence,
    coverage_signature,
    key_for,
)
from sepoldiff.exceptions import AllocationFailure, ConflictingDefaultType
from sepoldiff.types.policy import AvRule, RuleFamily, TeRule
from sepoldiff.types.ruldiff import PseudoRuleKey
from sepoldiff.utils import chunked
from sepoldiff.utils.logging import get_logger
from sepoldiff.utils.tracing import trace

_logger = get_logger(__name__)


@dataclass()
class IndexEntry:
    key: PseudoRuleKey
    rules: set[AvRule | TeRule] = field(default_factory=set)
    perms: set[str] = field(default_factory=set)
    defaults: set[str] = field(default_factory=set)

    @property
    def default(self) -> str | None:
        """The asserted default type, ``None`` when indeterminate."""
        if len(self.defaults) != 1:
            return None
        return next(iter(self.defaults))

    @property
    def conflicting(self) -> bool:
        return len(self.defaults) > 1

    def add(self, rule: AvRule | TeRule, default: str | None) -> None:
        self.rules.add(rule)
        if isinstance(rule, AvRule):
            self.perms.update(rule.perms)
        elif default is not None:
            self.defaults.add(default)

    def merged(self, other: "IndexEntry") -> "IndexEntry":
        return IndexEntry(
            self.key,
            self.rules | other.rules,
            self.perms | other.perms,
            self.defaults | other.defaults,
        )

    def conflict(self, side: DiffSide) -> ConflictingDefaultType | None:
        if not self.conflicting:
            return None
        return ConflictingDefaultType(
            side=str(side), key=str(self.key), defaults=tuple(sorted(self.defaults))
        )


@dataclass()
class RuleIndex:
    family: RuleFamily
    side: DiffSide
    entries: dict[PseudoRuleKey, IndexEntry] = field(default_factory=dict)
    coverage: set[CoverageSignature] = field(default_factory=set)

    def __len__(self) -> int:
        return len(self.entries)

    def __contains__(self, key: object) -> bool:
        return key in self.entries

    def __iter__(self) -> Iterator[PseudoRuleKey]:
        return iter(self.entries)

    def get(self, key: PseudoRuleKey) -> IndexEntry | None:
        return self.entries.get(key)

    def insert(
        self, key: PseudoRuleKey, rule: AvRule | TeRule, default: str | None = None
    ) -> IndexEntry:
        entry = self.entries.get(key)
        if entry is None:
            entry = self.entries[key] = IndexEntry(key)
        entry.add(rule, default)
        return entry

    def merge(self, other: "RuleIndex") -> "RuleIndex":
        if (self.family, self.side) != (other.family, other.side):
            raise ValueError(
                f"Cannot merge {other.side} {other.family} index "
                f"into {self.side} {self.family} index"
            )
        merged = RuleIndex(self.family, self.side, dict(self.entries))
        for key, entry in other.entries.items():
            existing = merged.entries.get(key)
            merged.entries[key] = entry if existing is None else existing.merged(entry)
        merged.coverage = self.coverage | other.coverage
        return merged

    def conflicts(self) -> Iterable[ConflictingDefaultType]:
        for key in sorted(self.entries, key=lambda key: key.sort_key):
            if (conflict := self.entries[key].conflict(self.side)) is not None:
                yield conflict


def _build_shard(
    family: RuleFamily,
    rules: list[AvRule | TeRule],
    expander: TypeSetExpander,
    equivalence: TypeEquivalence,
    side: DiffSide,
) -> RuleIndex:
    policy = equivalence.policy(side)
    index = RuleIndex(family, side)
    for rule in rules:
        if policy.classes:
            policy.lookup_class(rule.cls)
        default = None
        if isinstance(rule, TeRule):
            default = equivalence.canonical_type(
                policy.lookup_type(rule.default), side
            )
        index.coverage.add(coverage_signature(rule, equivalence, side))
        pairs = expander.expand(rule.source, rule.target, policy)
        if not pairs:
            _logger.verbose("Rule %s expands to no type pairs", rule)
        for source, target in pairs:
            index.insert(
                key_for(rule, source, target, equivalence, side), rule, default
            )
    return index


@trace(_logger, log_args=False, log_ret=False)
def build_index(
    family: RuleFamily,
    expander: TypeSetExpander,
    equivalence: TypeEquivalence,
    side: DiffSide,
    workers: int = 1,
) -> RuleIndex:
    rules = list(equivalence.policy(side).rules(family))
    shards = chunked(rules, workers)
    _logger.debug(
        "Building %s %s rule index from %d rules in %d shards",
        side,
        family,
        len(rules),
        len(shards),
    )
    try:
        if len(shards) == 1:
            partials = [_build_shard(family, shards[0], expander, equivalence, side)]
        else:
            with ThreadPoolExecutor(max_workers=workers) as executor:
                partials = list(
                    executor.map(
                        lambda shard: _build_shard(
                            family, shard, expander, equivalence, side
                        ),
                        shards,
                    )
                )
        index = reduce(RuleIndex.merge, partials)
    except MemoryError as ex:
        raise AllocationFailure(
            f"Out of memory while building the {side} {family} rule index"
        ) from ex
    _logger.verbose(
        "Built %s %s rule index with %d keys", side, family, len(index)
    )
    return index
