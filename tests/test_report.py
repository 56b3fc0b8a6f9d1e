from __future__ import annotations

import json
from pathlib import Path

import pytest

from cuefix.errors import ReportError
from cuefix.report import build_run_report, validate_run_report, write_run_report
from cuefix.transcode import AddedCue, RunStats


def _stats() -> RunStats:
    return RunStats(
        tracks_seen=4,
        tracks_changed=1,
        cues_added=2,
        record_added=True,
        added=[AddedCue("Intro", "0.047"), AddedCue("Intro", "32.5")],
    )


def test_built_report_is_valid() -> None:
    report = build_run_report(_stats(), "rekordbox.xml", "/tmp/output.xml")
    assert validate_run_report(report) == []
    assert report["renamed"] is False
    assert report["summary"]["cues_added"] == 2


def test_invalid_report_lists_paths() -> None:
    report = build_run_report(_stats(), "in.xml", "out.xml")
    report["summary"]["cues_added"] = -1
    report["added"][1]["start"] = ""
    problems = validate_run_report(report)
    assert any(p.startswith("$.summary.cues_added:") for p in problems)
    assert any(p.startswith("$.added[1].start:") for p in problems)


def test_write_run_report(tmp_path: Path) -> None:
    out = tmp_path / "report.json"
    write_run_report(build_run_report(_stats(), "in.xml", "out.xml", renamed=True), str(out))
    data = json.loads(out.read_text(encoding="utf-8"))
    assert data["renamed"] is True
    assert data["added"][0] == {"track": "Intro", "start": "0.047"}


def test_write_run_report_rejects_invalid(tmp_path: Path) -> None:
    report = build_run_report(_stats(), "in.xml", "out.xml")
    report["extra"] = 1
    with pytest.raises(ReportError):
        write_run_report(report, str(tmp_path / "report.json"))
    assert not (tmp_path / "report.json").exists()


def test_write_run_report_unwritable(tmp_path: Path) -> None:
    with pytest.raises(ReportError) as exc:
        write_run_report(build_run_report(_stats(), "in.xml", "out.xml"), str(tmp_path / "no" / "r.json"))
    assert exc.value.exit_code == 3
