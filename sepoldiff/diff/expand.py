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

from itertools import product
from threading import Lock

from sepoldiff.exceptions import UnknownIdentifier
from sepoldiff.types.policy import SELF, IdentifierKind, PolicySnapshot
from sepoldiff.utils.logging import get_logger

_logger = get_logger(__name__)

TypePair = tuple[str, str]


class TypeSetExpander:
    """Expands nominal rule endpoints into concrete type pairs.

    Endpoint expansions are cached per policy identity for the lifetime of
    the expander, which serves one side of one diff session only.
    """

    def __init__(self) -> None:
        self._cache: dict[tuple[str, str], frozenset[str]] = {}
        self._lock = Lock()

    def expand_endpoint(self, nominal: str, policy: PolicySnapshot) -> frozenset[str]:
        cache_key = (policy.policy_id, nominal)
        cached = self._cache.get(cache_key)
        if cached is not None:
            return cached
        match policy.identifier_kind(nominal):
            case IdentifierKind.TYPE | IdentifierKind.ALIAS:
                types = frozenset((policy.lookup_type(nominal),))
            case IdentifierKind.ATTRIBUTE:
                types = frozenset(policy.attributes[nominal])
                for member in types:
                    if member not in policy.types:
                        raise UnknownIdentifier(member, "type", policy.policy_id)
                if not types:
                    _logger.verbose(
                        "Attribute %r has no members in policy %s",
                        nominal,
                        policy.policy_id,
                    )
        with self._lock:
            return self._cache.setdefault(cache_key, types)

    def expand(
        self, nominal_source: str, nominal_target: str, policy: PolicySnapshot
    ) -> frozenset[TypePair]:
        sources = self.expand_endpoint(nominal_source, policy)
        if nominal_target == SELF:
            return frozenset((source, source) for source in sources)
        targets = self.expand_endpoint(nominal_target, policy)
        return frozenset(product(sources, targets))

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()
