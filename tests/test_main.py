import json
from pathlib import Path

from sepoldiff import main, run
from sepoldiff.config import Config
from sepoldiff.types.policy import RuleFamily

ORIGINAL = {
    "identity": "orig",
    "types": ["httpd_t", "etc_t", "log_t"],
    "attributes": {"logfile": ["log_t"]},
    "avrules": [
        {
            "flavor": "allow",
            "source": "httpd_t",
            "target": "logfile",
            "class": "file",
            "perms": ["append"],
        }
    ],
}
MODIFIED = {
    "identity": "mod",
    "types": ["httpd_t", "etc_t", "log_t"],
    "attributes": {"logfile": ["log_t", "etc_t"]},
    "avrules": [
        {
            "flavor": "allow",
            "source": "httpd_t",
            "target": "logfile",
            "class": "file",
            "perms": ["append"],
        }
    ],
}


def _write_policies(tmp_path: Path) -> tuple[Path, Path]:
    original = tmp_path / "orig.json"
    modified = tmp_path / "mod.json"
    original.write_text(json.dumps(ORIGINAL))
    modified.write_text(json.dumps(MODIFIED))
    return original, modified


def test_run(tmp_path: Path) -> None:
    original, modified = _write_policies(tmp_path)
    report = run(Config(original_path=original, modified_path=modified, workers=2))
    av_report = next(
        family_report
        for family_report in report.families
        if family_report.family == RuleFamily.AV
    )
    assert [entry.render() for entry in av_report.entries] == [
        "+ allow httpd_t etc_t : file { append }; [+type etc_t]"
    ]


def test_run_with_type_diff(tmp_path: Path) -> None:
    original, modified = _write_policies(tmp_path)
    type_diff = tmp_path / "types.json"
    type_diff.write_text("{}")
    report = run(
        Config(original_path=original, modified_path=modified, type_diff_path=type_diff)
    )
    assert report.families[0].entries[0].form == "added"


def test_main_plain_report(tmp_path: Path) -> None:
    original, modified = _write_policies(tmp_path)
    output = tmp_path / "report.txt"
    assert main([str(original), str(modified), "--output", str(output)]) == 0
    assert "    + allow httpd_t etc_t : file { append }; [+type etc_t]" in (
        output.read_text().splitlines()
    )


def test_main_reports_unknown_identifiers(tmp_path: Path) -> None:
    original, modified = _write_policies(tmp_path)
    broken = dict(ORIGINAL, attributes={})
    original.write_text(json.dumps(broken))
    output = tmp_path / "report.txt"
    assert main([str(original), str(modified), "--output", str(output)]) == 1
    assert output.read_text() == ""
