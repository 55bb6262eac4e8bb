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

from logging import getLogger
from pathlib import Path

from sepoldiff.types.policy import PolicySnapshot
from sepoldiff.types.typediff import TypeDiff
from sepoldiff.utils.policy_file import PolicyFileFormat, detect_format, read_policy_file

_logger = getLogger(__name__)


def load_snapshot(path: str | Path) -> PolicySnapshot:
    data = read_policy_file(path)
    match detect_format(data):
        case PolicyFileFormat.JSON:
            _logger.info("Loading policy snapshot from %s", path)
            return PolicySnapshot.model_validate_json(data)
        case PolicyFileFormat.BINARY:
            # setools is an optional dependency, only needed for binary policies
            from sepoldiff.policy.binary import load_binary_snapshot

            return load_binary_snapshot(path)


def load_type_diff(path: str | Path) -> TypeDiff:
    _logger.info("Loading type diff from %s", path)
    return TypeDiff.model_validate_json(read_policy_file(path))
