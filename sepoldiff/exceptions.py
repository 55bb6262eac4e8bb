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

from dataclasses import dataclass


class PolicyDiffException(Exception):
    pass


class UnknownIdentifier(PolicyDiffException, LookupError):
    def __init__(self, name: str, kind: str, policy: str | None = None) -> None:
        where = f" in policy {policy!r}" if policy else ""
        super().__init__(f"Unknown {kind} {name!r}{where}")
        self.name = name
        self.kind = kind
        self.policy = policy


class AllocationFailure(PolicyDiffException, MemoryError):
    pass


class InvalidSession(PolicyDiffException, RuntimeError):
    pass


@dataclass(frozen=True)
class ConflictingDefaultType:
    """Non-fatal diagnostic for a TE key asserting more than one default type.

    Attached to the diff entry of the key (if any) and listed in the session
    diagnostics. ``side`` is either ``"original"`` or ``"modified"``.
    """

    side: str
    key: str
    defaults: tuple[str, ...]

    def __str__(self) -> str:
        return (
            f"Conflicting default types {{ {' '.join(self.defaults)} }} "
            f"for {self.key} in the {self.side} policy"
        )
