import subprocess
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]


def _ok(cmd: list[str]) -> bool:
    p = subprocess.run(cmd, capture_output=True, cwd=ROOT)
    return p.returncode == 0


def test_fix_cues_help() -> None:
    assert _ok([sys.executable, "-m", "cuefix.fix_cues", "--help"])
