from __future__ import annotations

import xml.etree.ElementTree as ET
from pathlib import Path

import pytest

from cuefix.fix_cues import fix_cues_file
from cuefix.read_tokens import read_tokens

ROOT = Path(__file__).resolve().parents[2]
SAMPLES = ROOT / "tests" / "samples"


def sample_xml_files():
    return sorted(p for p in SAMPLES.glob("*.xml") if p.stem != "broken") if SAMPLES.exists() else []


def _tokens(path: Path):
    with open(path, "rb") as f:
        return list(read_tokens(f))


def _marks(track: ET.Element):
    return [(m.get("Start"), m.get("Num")) for m in track.findall("POSITION_MARK")]


@pytest.mark.parametrize("sample_path", sample_xml_files(), ids=lambda p: p.stem)
def test_output_is_well_formed_and_idempotent(sample_path: Path, tmp_path: Path) -> None:
    first = tmp_path / "first.xml"
    second = tmp_path / "second.xml"

    fix_cues_file(sample_path, first)
    ET.parse(first)

    stats = fix_cues_file(first, second)
    assert stats.cues_added == 0
    assert stats.tracks_changed == 0
    assert second.read_bytes() == first.read_bytes()


@pytest.mark.parametrize("name", ["rekordbox_clean", "malformed_marker"])
def test_documents_needing_no_cues_are_token_identical(name: str, tmp_path: Path) -> None:
    src = SAMPLES / f"{name}.xml"
    out = tmp_path / "out.xml"
    stats = fix_cues_file(src, out)
    assert stats.cues_added == 0
    assert _tokens(out) == _tokens(src)


def test_basic_library(tmp_path: Path) -> None:
    out = tmp_path / "out.xml"
    stats = fix_cues_file(SAMPLES / "rekordbox_basic.xml", out)
    assert stats.tracks_changed == 2
    assert stats.cues_added == 2

    root = ET.parse(out).getroot()
    tracks = {t.get("TrackID"): t for t in root.find("COLLECTION").findall("TRACK")}

    assert _marks(tracks["1"]) == [("0.047", "0"), ("61.983", "1"), ("61.983", "-1"), ("0.047", "-1")]
    assert _marks(tracks["2"]) == [("12.0", "5"), ("12.0", "-1")]
    assert _marks(tracks["3"]) == []

    added = tracks["2"].findall("POSITION_MARK")[-1]
    assert list(added.attrib.items()) == [("Name", ""), ("Type", "0"), ("Start", "12.0"), ("Num", "-1")]

    # Playlist references are not collection tracks
    refs = root.find("PLAYLISTS").iter("TRACK")
    assert all(list(r) == [] for r in refs)

    # Every other token of the input is still there, in order
    src_tokens = _tokens(SAMPLES / "rekordbox_basic.xml")
    out_tokens = _tokens(out)
    assert len(out_tokens) == len(src_tokens) + 4
    it = iter(out_tokens)
    assert all(any(t == o for o in it) for t in src_tokens)


def test_single_hot_cue_scenario(tmp_path: Path) -> None:
    src = tmp_path / "in.xml"
    src.write_text(
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        "<DJ_PLAYLISTS>\n"
        '  <COLLECTION Entries="1">\n'
        '    <TRACK Name="Solo">\n'
        '      <POSITION_MARK Name="" Type="0" Start="1.0" Num="0"/>\n'
        "    </TRACK>\n"
        "  </COLLECTION>\n"
        "</DJ_PLAYLISTS>\n",
        encoding="utf-8",
    )
    out = tmp_path / "out.xml"
    stats = fix_cues_file(src, out)
    assert (stats.tracks_changed, stats.cues_added) == (1, 1)
    assert (
        '<POSITION_MARK Name="" Type="0" Start="1.0" Num="-1"/></TRACK>'
        in out.read_text(encoding="utf-8")
    )
