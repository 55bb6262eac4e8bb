from sepoldiff.types.policy import PolicySnapshot
from sepoldiff.types.typediff import AttributeMembershipDiff, TypeDiff

ORIGINAL = PolicySnapshot(
    identity="orig",
    types=frozenset({"init_t", "old_t", "gone_t"}),
    attributes={
        "domain": frozenset({"init_t", "old_t"}),
        "file_type": frozenset({"gone_t"}),
        "stale_attr": frozenset({"init_t"}),
    },
)
MODIFIED = PolicySnapshot(
    identity="mod",
    types=frozenset({"init_t", "new_t", "fresh_t"}),
    attributes={
        "domain": frozenset({"init_t", "new_t", "fresh_t"}),
        "file_type": frozenset(),
        "fresh_attr": frozenset({"fresh_t"}),
    },
)


def test_type_diff_between() -> None:
    type_diff = TypeDiff.between(ORIGINAL, MODIFIED, {"old_t": "new_t"})
    assert type_diff.renames == {"old_t": "new_t"}
    assert type_diff.added_types == {"fresh_t"}
    assert type_diff.removed_types == {"gone_t"}
    assert type_diff.attributes == {
        "domain": AttributeMembershipDiff(added=frozenset({"fresh_t"})),
        "file_type": AttributeMembershipDiff(removed=frozenset({"gone_t"})),
        "fresh_attr": AttributeMembershipDiff(added=frozenset({"fresh_t"})),
        "stale_attr": AttributeMembershipDiff(removed=frozenset({"init_t"})),
    }


def test_type_diff_without_renames() -> None:
    type_diff = TypeDiff.between(ORIGINAL, MODIFIED)
    assert type_diff.added_types == {"fresh_t", "new_t"}
    assert type_diff.removed_types == {"gone_t", "old_t"}
    assert type_diff.attribute_added("domain") == {"fresh_t", "new_t"}
    assert type_diff.attribute_removed("domain") == {"old_t"}


def test_attribute_lookups() -> None:
    type_diff = TypeDiff.model_validate_json(
        '{"attributes": {"domain": {"added": ["a_t"]}}, '
        '"conditionals": {"old_bool": "new_bool"}}'
    )
    assert type_diff.attribute_added("domain") == {"a_t"}
    assert type_diff.attribute_removed("domain") == frozenset()
    assert type_diff.attribute_added("unknown") == frozenset()
    assert type_diff.conditionals == {"old_bool": "new_bool"}
