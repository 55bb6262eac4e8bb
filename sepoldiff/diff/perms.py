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

from collections.abc import Set

PermsDiff = tuple[frozenset[str], frozenset[str], frozenset[str]]


def diff_perms(original: Set[str], modified: Set[str]) -> PermsDiff:
    """Split two permission sets into (unmodified, added, removed)."""
    original = frozenset(original)
    modified = frozenset(modified)
    return original & modified, modified - original, original - modified


def one_sided_perms(perms: Set[str]) -> PermsDiff:
    """Permission split of a rule present in only one of the policies."""
    return frozenset(perms), frozenset(), frozenset()
