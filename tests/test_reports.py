from io import StringIO

from sepoldiff.config import Config
from sepoldiff.diff.session import DiffSession
from sepoldiff.report import report_formatter_factory
from sepoldiff.report.json import JSONReportFormatter
from sepoldiff.report.plain import PlainReportFormatter
from sepoldiff.types.policy import PolicySnapshot
from sepoldiff.types.reports import Report, ReportFormat
from sepoldiff.types.ruldiff import DiffForm, TeRuleDiff

ORIGINAL = PolicySnapshot.model_validate(
    {
        "identity": "orig",
        "types": ["a_t", "b_t", "c_t", "d_t"],
        "terules": [
            {
                "flavor": "type_transition",
                "source": "a_t",
                "target": "b_t",
                "class": "process",
                "default": "c_t",
            },
            {
                "flavor": "type_transition",
                "source": "a_t",
                "target": "b_t",
                "class": "process",
                "default": "d_t",
            },
        ],
    }
)
MODIFIED = PolicySnapshot.model_validate(
    {
        "identity": "mod",
        "types": ["a_t", "b_t", "c_t", "d_t"],
        "avrules": [
            {
                "flavor": "allow",
                "source": "a_t",
                "target": "b_t",
                "class": "file",
                "perms": ["read"],
            }
        ],
        "terules": [
            {
                "flavor": "type_transition",
                "source": "a_t",
                "target": "b_t",
                "class": "process",
                "default": "c_t",
            }
        ],
    }
)


def _report() -> Report:
    with DiffSession.build(ORIGINAL, MODIFIED) as session:
        return Report.from_session(session)


def test_report_from_session() -> None:
    report = _report()
    assert (report.original, report.modified) == ("orig", "mod")
    assert [family_report.family for family_report in report.families] == ["av", "te"]
    assert report.families[0].stats[DiffForm.ADDED] == 1
    assert report.families[1].stats[DiffForm.MODIFIED] == 1
    assert len(report.diagnostics) == 1
    assert report.diagnostics[0].side == "original"


def test_plain_report() -> None:
    output = StringIO()
    report_formatter_factory(Config.default(), _report()).format_report(output)
    assert output.getvalue().splitlines() == [
        "SELinux Policy Rule Differences",
        "    original=orig modified=mod",
        "",
        "AV Rules (Added 1, Removed 0, Modified 0, Added Type 0, Removed Type 0)",
        "    + allow a_t b_t : file { read };",
        "",
        "TE Rules (Added 0, Removed 0, Modified 1, Added Type 0, Removed Type 0)",
        "    * type_transition a_t b_t : process { c_t d_t } -> c_t; "
        "[conflicting defaults]",
        "",
        "Diagnostics",
        "    Conflicting default types { c_t d_t } for "
        "type_transition a_t b_t : process in the original policy",
        "",
    ]


def test_plain_report_hides_unchanged_families() -> None:
    with DiffSession.build(MODIFIED, MODIFIED) as session:
        report = Report.from_session(session)

    output = StringIO()
    PlainReportFormatter(Config.default(), report).format_report(output)
    assert "AV Rules" not in output.getvalue()

    output = StringIO()
    PlainReportFormatter(Config(full_report=True), report).format_report(output)
    assert output.getvalue().splitlines()[3:] == [
        "AV Rules (Added 0, Removed 0, Modified 0, Added Type 0, Removed Type 0)",
        "",
        "TE Rules (Added 0, Removed 0, Modified 0, Added Type 0, Removed Type 0)",
        "",
    ]


def test_json_report() -> None:
    report = _report()
    formatter = report_formatter_factory(
        Config(report_format=ReportFormat.JSON), report
    )
    assert isinstance(formatter, JSONReportFormatter)
    output = StringIO()
    formatter.format_report(output)
    assert '"class":"file"' in output.getvalue()

    loaded = Report.model_validate_json(output.getvalue())
    assert loaded == report
    te_entry = loaded.families[1].entries[0]
    assert isinstance(te_entry, TeRuleDiff)
    assert te_entry.conflicts == tuple(report.diagnostics)
