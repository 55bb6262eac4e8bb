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

from itertools import chain

from pydantic import BaseModel, ConfigDict, Field

from sepoldiff.types.policy import PolicySnapshot

_EMPTY: frozenset[str] = frozenset()


class AttributeMembershipDiff(BaseModel):
    model_config = ConfigDict(frozen=True)

    added: frozenset[str] = frozenset()
    removed: frozenset[str] = frozenset()


class TypeDiff(BaseModel):
    """Result of the type and attribute diff stage.

    All type names except the keys of ``renames`` and ``conditionals`` are in
    the canonical namespace, where a renamed original type is known under its
    modified name.
    """

    model_config = ConfigDict(frozen=True)

    renames: dict[str, str] = Field(default_factory=dict)
    added_types: frozenset[str] = frozenset()
    removed_types: frozenset[str] = frozenset()
    attributes: dict[str, AttributeMembershipDiff] = Field(default_factory=dict)
    conditionals: dict[str, str] = Field(default_factory=dict)

    def attribute_added(self, attribute: str) -> frozenset[str]:
        membership = self.attributes.get(attribute)
        return membership.added if membership else _EMPTY

    def attribute_removed(self, attribute: str) -> frozenset[str]:
        membership = self.attributes.get(attribute)
        return membership.removed if membership else _EMPTY

    @staticmethod
    def between(
        original: PolicySnapshot,
        modified: PolicySnapshot,
        renames: dict[str, str] | None = None,
    ) -> "TypeDiff":
        """Derive plain type and attribute membership deltas of two snapshots.

        Only a stand-in for a full type diff stage: type equivalence beyond
        the explicitly given ``renames`` is not detected.
        """
        renames = dict(renames or {})

        def canonical(types: frozenset[str]) -> frozenset[str]:
            return frozenset(renames.get(type_name, type_name) for type_name in types)

        original_types = canonical(original.types)
        attributes: dict[str, AttributeMembershipDiff] = {}
        for attribute in sorted(
            set(chain(original.attributes.keys(), modified.attributes.keys()))
        ):
            before = canonical(original.attributes.get(attribute, _EMPTY))
            after = modified.attributes.get(attribute, _EMPTY)
            if before != after:
                attributes[attribute] = AttributeMembershipDiff(
                    added=after - before, removed=before - after
                )
        return TypeDiff(
            renames=renames,
            added_types=modified.types - original_types,
            removed_types=original_types - modified.types,
            attributes=attributes,
        )
