import pytest

from sepoldiff.exceptions import ConflictingDefaultType
from sepoldiff.types.ruldiff import AvRuleDiff, DiffForm, PseudoRuleKey, TeRuleDiff

AV_KEY = PseudoRuleKey(kind="allow", cls="file", source="httpd_t", target="etc_t")
COND_KEY = PseudoRuleKey(
    kind="dontaudit",
    cls="file",
    source="httpd_t",
    target="etc_t",
    cond="httpd_quiet",
    branch=False,
)
TE_KEY = PseudoRuleKey(
    kind="type_transition", cls="file", source="httpd_t", target="var_log_t"
)


def test_render_av_entries() -> None:
    assert (
        AvRuleDiff(
            form=DiffForm.ADDED, key=AV_KEY, unmodified_perms=("getattr", "read")
        ).render()
        == "+ allow httpd_t etc_t : file { getattr read };"
    )
    assert (
        AvRuleDiff(
            form=DiffForm.MODIFIED,
            key=AV_KEY,
            added_perms=("write",),
            removed_perms=("read",),
        ).render()
        == "* allow httpd_t etc_t : file { } (+ { write } - { read });"
    )
    assert (
        AvRuleDiff(
            form=DiffForm.MODIFIED,
            key=AV_KEY,
            unmodified_perms=("open",),
            removed_perms=("read", "ioctl"),
        ).render()
        == "* allow httpd_t etc_t : file { open } (- { ioctl read });"
    )


def test_render_conditional_membership_entries() -> None:
    entry = AvRuleDiff(
        form=DiffForm.REMOVE_TYPE,
        key=COND_KEY,
        membership_types=("etc_t",),
        unmodified_perms=("read",),
    )
    assert entry.render() == (
        "- dontaudit httpd_t etc_t : file { read }; "
        "[cond httpd_quiet: false] [-type etc_t]"
    )
    assert str(entry) == entry.render()


def test_render_te_entries() -> None:
    named = TE_KEY.model_copy(update={"name": "access_log"})
    assert (
        TeRuleDiff(
            form=DiffForm.REMOVED, key=named, original_default="httpd_log_t"
        ).render()
        == '- type_transition httpd_t var_log_t : file "access_log" httpd_log_t;'
    )
    assert (
        TeRuleDiff(
            form=DiffForm.ADD_TYPE,
            key=TE_KEY,
            membership_types=("httpd_t",),
            modified_default="httpd_log_t",
        ).render()
        == "+ type_transition httpd_t var_log_t : file httpd_log_t; [+type httpd_t]"
    )


def test_render_conflicting_defaults() -> None:
    conflict = ConflictingDefaultType(
        side="modified",
        key=str(TE_KEY),
        defaults=("httpd_log_t", "var_log_t"),
    )
    entry = TeRuleDiff(
        form=DiffForm.MODIFIED,
        key=TE_KEY,
        original_default="httpd_log_t",
        conflicts=(conflict,),
    )
    assert entry.render() == (
        "* type_transition httpd_t var_log_t : file "
        "httpd_log_t -> { httpd_log_t var_log_t }; [conflicting defaults]"
    )
    assert str(conflict) == (
        "Conflicting default types { httpd_log_t var_log_t } for "
        "type_transition httpd_t var_log_t : file in the modified policy"
    )


def test_render_missing_default() -> None:
    with pytest.raises(ValueError):
        TeRuleDiff(form=DiffForm.ADDED, key=TE_KEY).render()


def test_entry_accessors() -> None:
    entry = TeRuleDiff(form=DiffForm.ADDED, key=TE_KEY, modified_default="x_t")
    assert entry.rule_family == "te"
    assert entry.rule_type == "type_transition"
    assert (entry.source_type, entry.target_type) == ("httpd_t", "var_log_t")
    assert entry.object_class == "file"
    assert entry.sigil == "+"
    assert AvRuleDiff(form=DiffForm.REMOVE_TYPE, key=AV_KEY).sigil == "-"
