from sepoldiff.diff.expand import TypeSetExpander
from sepoldiff.diff.index import RuleIndex, build_index
from sepoldiff.diff.keys import DiffSide, TypeEquivalence, key_for
from sepoldiff.diff.perms import diff_perms
from sepoldiff.diff.session import DiffSession

__all__ = [
    "DiffSession",
    "DiffSide",
    "RuleIndex",
    "TypeEquivalence",
    "TypeSetExpander",
    "build_index",
    "diff_perms",
    "key_for",
]
