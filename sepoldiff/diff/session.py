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

from collections import Counter
from dataclasses import dataclass
from itertools import chain
from logging import getLogger
from typing import Self, TypeVar

from sepoldiff.diff.classify import RuleClassifier
from sepoldiff.diff.expand import TypeSetExpander
from sepoldiff.diff.index import build_index
from sepoldiff.diff.keys import DiffSide, TypeEquivalence
from sepoldiff.exceptions import ConflictingDefaultType, InvalidSession
from sepoldiff.types.policy import PolicySnapshot, RuleFamily
from sepoldiff.types.ruldiff import (
    DIFF_FORMS,
    AvRuleDiff,
    RuleDiff,
    TeRuleDiff,
)
from sepoldiff.types.typediff import TypeDiff

_logger = getLogger(__name__)

Stats = tuple[int, int, int, int, int]

EntryT = TypeVar("EntryT", bound=RuleDiff)


@dataclass(frozen=True)
class _DiffResult:
    avrules: tuple[AvRuleDiff, ...]
    terules: tuple[TeRuleDiff, ...]
    diagnostics: tuple[ConflictingDefaultType, ...]


class DiffSession:
    """Rule difference of one (original, modified) policy pair.

    A session is either fully built or not usable at all. Entries handed out
    by the accessors are immutable and valid while the session is open; use
    :meth:`materialize` for a copy that outlives it.
    """

    def __init__(
        self,
        original: PolicySnapshot,
        modified: PolicySnapshot,
        type_diff: TypeDiff | None = None,
    ) -> None:
        self._original = original
        self._modified = modified
        self._type_diff = type_diff if type_diff is not None else TypeDiff()
        self._result: _DiffResult | None = None

    @classmethod
    def build(
        cls,
        original: PolicySnapshot,
        modified: PolicySnapshot,
        type_diff: TypeDiff | None = None,
        *,
        workers: int = 1,
    ) -> Self:
        session = cls(original, modified, type_diff)
        session._result = session._run(workers)
        return session

    def _run(self, workers: int) -> _DiffResult:
        _logger.info(
            "Computing rule differences between policies %s and %s",
            self._original.policy_id,
            self._modified.policy_id,
        )
        expanders = {side: TypeSetExpander() for side in DiffSide}
        equivalence = TypeEquivalence(self._original, self._modified, self._type_diff)
        indexes = {
            (family, side): build_index(
                family, expanders[side], equivalence, side, workers
            )
            for family in RuleFamily
            for side in DiffSide
        }
        entries: dict[RuleFamily, tuple[RuleDiff, ...]] = {}
        for family in RuleFamily:
            classifier = RuleClassifier(
                indexes[(family, DiffSide.ORIGINAL)],
                indexes[(family, DiffSide.MODIFIED)],
                equivalence,
                self._type_diff,
            )
            _logger.debug("Classifying keys with %r", classifier)
            entries[family] = tuple(classifier.classify_all())
            _logger.info("Found %d %s rule differences", len(entries[family]), family)
        diagnostics = tuple(chain(*(index.conflicts() for index in indexes.values())))
        for diagnostic in diagnostics:
            _logger.warning("%s", diagnostic)
        for expander in expanders.values():
            expander.clear()
        return _DiffResult(
            avrules=entries[RuleFamily.AV],
            terules=entries[RuleFamily.TE],
            diagnostics=diagnostics,
        )

    def _checked(self) -> _DiffResult:
        if self._result is None:
            raise InvalidSession("The diff session is not built or has been closed")
        return self._result

    @property
    def is_open(self) -> bool:
        return self._result is not None

    @property
    def original(self) -> PolicySnapshot:
        return self._original

    @property
    def modified(self) -> PolicySnapshot:
        return self._modified

    @property
    def avrules(self) -> tuple[AvRuleDiff, ...]:
        return self._checked().avrules

    @property
    def terules(self) -> tuple[TeRuleDiff, ...]:
        return self._checked().terules

    @property
    def diagnostics(self) -> tuple[ConflictingDefaultType, ...]:
        return self._checked().diagnostics

    def entries(self, family: RuleFamily) -> tuple[RuleDiff, ...]:
        match family:
            case RuleFamily.AV:
                return self.avrules
            case RuleFamily.TE:
                return self.terules
        raise ValueError(f"Invalid rule family {family!r}")

    def entry(self, family: RuleFamily, index: int) -> RuleDiff:
        entries = self.entries(family)
        if not 0 <= index < len(entries):
            raise IndexError(
                f"{family} rule difference {index} out of range 0..{len(entries)}"
            )
        return entries[index]

    def stats(self, family: RuleFamily) -> Stats:
        counts = Counter(entry.form for entry in self.entries(family))
        return tuple(counts[form] for form in DIFF_FORMS)  # type: ignore[return-value]

    def render(self, entry: RuleDiff) -> str:
        self._checked()
        return entry.render()

    def materialize(self, entry: EntryT) -> EntryT:
        self._checked()
        return entry.model_copy(deep=True)

    def close(self) -> None:
        if self._result is not None:
            _logger.debug("Closing diff session")
        self._result = None

    def __enter__(self) -> Self:
        self._checked()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
