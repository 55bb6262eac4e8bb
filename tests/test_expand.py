import pytest

from sepoldiff.diff.expand import TypeSetExpander
from sepoldiff.exceptions import UnknownIdentifier
from sepoldiff.types.policy import PolicySnapshot

POLICY = PolicySnapshot(
    identity="expand",
    types=frozenset({"a_t", "b_t", "c_t"}),
    aliases={"a_alias": "a_t", "dangling_alias": "gone_t"},
    attributes={
        "domain": frozenset({"a_t", "b_t"}),
        "empty_attr": frozenset(),
        "broken_attr": frozenset({"a_t", "gone_t"}),
    },
)


def test_expand_type_and_alias() -> None:
    expander = TypeSetExpander()
    assert expander.expand_endpoint("c_t", POLICY) == {"c_t"}
    assert expander.expand_endpoint("a_alias", POLICY) == {"a_t"}


def test_expand_attribute() -> None:
    expander = TypeSetExpander()
    assert expander.expand_endpoint("domain", POLICY) == {"a_t", "b_t"}
    assert expander.expand_endpoint("empty_attr", POLICY) == frozenset()
    assert expander.expand("empty_attr", "c_t", POLICY) == frozenset()


def test_expand_pairs() -> None:
    expander = TypeSetExpander()
    assert expander.expand("domain", "c_t", POLICY) == {("a_t", "c_t"), ("b_t", "c_t")}
    assert expander.expand("c_t", "domain", POLICY) == {("c_t", "a_t"), ("c_t", "b_t")}


def test_expand_self_target() -> None:
    expander = TypeSetExpander()
    assert expander.expand("domain", "self", POLICY) == {
        ("a_t", "a_t"),
        ("b_t", "b_t"),
    }
    assert expander.expand("a_alias", "self", POLICY) == {("a_t", "a_t")}


def test_expand_unknown_identifiers() -> None:
    expander = TypeSetExpander()
    with pytest.raises(UnknownIdentifier) as excinfo:
        expander.expand_endpoint("missing_t", POLICY)
    assert excinfo.value.policy == "expand"
    with pytest.raises(UnknownIdentifier):
        expander.expand_endpoint("dangling_alias", POLICY)
    with pytest.raises(UnknownIdentifier) as excinfo:
        expander.expand_endpoint("broken_attr", POLICY)
    assert excinfo.value.name == "gone_t"


def test_expansion_cache() -> None:
    expander = TypeSetExpander()
    first = expander.expand_endpoint("domain", POLICY)
    assert expander.expand_endpoint("domain", POLICY) is first

    other = PolicySnapshot(
        identity="other",
        types=POLICY.types,
        attributes={"domain": frozenset({"c_t"})},
    )
    assert expander.expand_endpoint("domain", other) == {"c_t"}

    expander.clear()
    assert expander.expand_endpoint("domain", POLICY) == first
