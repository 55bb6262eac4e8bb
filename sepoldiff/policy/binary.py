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
from pathlib import Path
from typing import Any

from setools.exception import NoCommon, RuleNotConditional, TERuleNoFilename
from setools.policyrep import SELinuxPolicy

from sepoldiff.types.policy import (
    AvRule,
    AvRuleKind,
    PolicySnapshot,
    TeRule,
    TeRuleKind,
)
from sepoldiff.utils.logging import get_logger

_logger = get_logger(__name__)

_AV_KINDS = frozenset(str(kind) for kind in AvRuleKind)
_TE_KINDS = frozenset(str(kind) for kind in TeRuleKind)


def _rule_common(rule: Any) -> dict[str, Any]:
    common: dict[str, Any] = {
        "source": str(rule.source),
        "target": str(rule.target),
        "class": str(rule.tclass),
    }
    try:
        common["cond"] = str(rule.conditional)
        common["branch"] = bool(rule.conditional_block)
    except RuleNotConditional:
        pass
    return common


def _filename(rule: Any) -> str | None:
    try:
        return str(rule.filename)
    except TERuleNoFilename:
        return None


def _class_perms(policy: SELinuxPolicy) -> Iterable[tuple[str, frozenset[str]]]:
    for cls in policy.classes():
        perms = set(cls.perms)
        try:
            perms.update(cls.common.perms)
        except NoCommon:
            pass
        yield str(cls), frozenset(perms)


def snapshot_from_setools(
    policy: SELinuxPolicy, identity: str | None = None
) -> PolicySnapshot:
    _logger.info("Reading policy snapshot from %s", policy)
    types: set[str] = set()
    aliases: dict[str, str] = {}
    for type_ in policy.types():
        types.add(str(type_))
        for alias in type_.aliases():
            aliases[str(alias)] = str(type_)
    attributes = {
        str(attribute): frozenset(str(member) for member in attribute.expand())
        for attribute in policy.typeattributes()
    }

    avrules: list[AvRule] = []
    terules: list[TeRule] = []
    for rule in policy.terules():
        ruletype = str(rule.ruletype)
        if ruletype in _AV_KINDS:
            avrules.append(
                AvRule.model_validate(
                    {
                        "flavor": ruletype,
                        **_rule_common(rule),
                        "perms": frozenset(str(perm) for perm in rule.perms),
                    }
                )
            )
        elif ruletype in _TE_KINDS:
            terules.append(
                TeRule.model_validate(
                    {
                        "flavor": ruletype,
                        **_rule_common(rule),
                        "default": str(rule.default),
                        "name": _filename(rule),
                    }
                )
            )
        else:
            _logger.verbose("Skipping unsupported %s rule %s", ruletype, rule)
    _logger.debug(
        "Read %d types, %d attributes, %d AV rules and %d TE rules",
        len(types),
        len(attributes),
        len(avrules),
        len(terules),
    )
    return PolicySnapshot(
        identity=identity,
        types=frozenset(types),
        aliases=aliases,
        attributes=attributes,
        classes=dict(_class_perms(policy)),
        avrules=tuple(avrules),
        terules=tuple(terules),
    )


def load_binary_snapshot(path: str | Path) -> PolicySnapshot:
    return snapshot_from_setools(SELinuxPolicy(str(path)))
