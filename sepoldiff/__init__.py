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

from collections.abc import Sequence
from logging import basicConfig, getLogger
from sys import stderr

from sepoldiff.config import Config
from sepoldiff.diff.session import DiffSession
from sepoldiff.exceptions import PolicyDiffException
from sepoldiff.policy import load_snapshot, load_type_diff
from sepoldiff.report import report_formatter_factory
from sepoldiff.types.reports import Report
from sepoldiff.types.typediff import TypeDiff

__version__ = "0.1"


def run(config: Config) -> Report:
    assert config.original_path is not None and config.modified_path is not None
    original = load_snapshot(config.original_path)
    modified = load_snapshot(config.modified_path)
    if config.type_diff_path:
        type_diff = load_type_diff(config.type_diff_path)
    else:
        type_diff = TypeDiff.between(original, modified)
    with DiffSession.build(
        original, modified, type_diff, workers=config.workers
    ) as session:
        return Report.from_session(session)


def main(args: Sequence[str] | None = None) -> int:
    config = Config.parse_args(__version__, args)
    basicConfig(level=config.log_level, stream=stderr)
    _logger = getLogger(__name__)
    for vf, level in config.log_levels.items():
        getLogger(vf).setLevel(level)
    _logger.debug("%r", config)

    try:
        report = run(config)
    except PolicyDiffException as ex:
        _logger.error("Failed to compute policy rule differences: %s", ex)
        return 1
    report_formatter_factory(config, report).format_report(config.output)
    config.output.flush()
    return 0
