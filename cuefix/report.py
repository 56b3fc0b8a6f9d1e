"""
report.py: JSON run report for a cue-fixing run.

The report records what was changed so a run can be reviewed after the fact:

    {
      "ok": true,
      "input": "rekordbox.xml",
      "output": "/tmp/output.xml",
      "renamed": false,
      "summary": {"tracks_seen": 812, "tracks_changed": 3, "cues_added": 5},
      "added": [{"track": "Intro", "start": "0.047"}, ...]
    }

Reports are checked against a draft-07 schema before they are written.
"""

from __future__ import annotations

import json
from typing import Any, Dict, List

from jsonschema import Draft7Validator

from .errors import ReportError
from .transcode import RunStats


def get_run_report_schema() -> Dict[str, Any]:
    """Return the JSON Schema (draft-07) for a run report."""
    count = {"type": "integer", "minimum": 0}
    return {
        "$schema": "http://json-schema.org/draft-07/schema#",
        "type": "object",
        "properties": {
            "ok": {"type": "boolean"},
            "input": {"type": "string"},
            "output": {"type": "string"},
            "renamed": {"type": "boolean"},
            "summary": {
                "type": "object",
                "properties": {
                    "tracks_seen": count,
                    "tracks_changed": count,
                    "cues_added": count,
                },
                "required": ["tracks_seen", "tracks_changed", "cues_added"],
                "additionalProperties": False,
            },
            "added": {
                "type": "array",
                "items": {
                    "type": "object",
                    "properties": {
                        "track": {"type": "string"},
                        "start": {"type": "string", "minLength": 1},
                    },
                    "required": ["track", "start"],
                    "additionalProperties": False,
                },
            },
        },
        "required": ["ok", "input", "output", "renamed", "summary", "added"],
        "additionalProperties": False,
    }


def build_run_report(stats: RunStats, input_path: str, output_path: str, renamed: bool = False) -> Dict[str, Any]:
    return {
        "ok": True,
        "input": str(input_path),
        "output": str(output_path),
        "renamed": renamed,
        "summary": {
            "tracks_seen": stats.tracks_seen,
            "tracks_changed": stats.tracks_changed,
            "cues_added": stats.cues_added,
        },
        "added": [{"track": a.track, "start": a.start} for a in stats.added],
    }


def validate_run_report(report: Dict[str, Any]) -> List[str]:
    """Return schema violations as `path: message` strings (empty when valid)."""
    validator = Draft7Validator(get_run_report_schema())
    problems = []
    for err in sorted(validator.iter_errors(report), key=lambda e: [str(p) for p in e.absolute_path]):
        path = "$" + "".join(f"[{p}]" if isinstance(p, int) else f".{p}" for p in err.absolute_path)
        problems.append(f"{path}: {err.message}")
    return problems


def write_run_report(report: Dict[str, Any], output_path: str) -> None:
    """
    Validate `report` and write it to `output_path` as indented JSON.

    Raises:
        ReportError: if the report does not match the schema or cannot be written
    """
    problems = validate_run_report(report)
    if problems:
        raise ReportError(f"Invalid run report: {'; '.join(problems)}")

    try:
        with open(output_path, "w", encoding="utf-8") as f:
            f.write(json.dumps(report, indent=2, ensure_ascii=False))
    except OSError as e:
        raise ReportError(f"Can't write report '{output_path}': {e}") from e
