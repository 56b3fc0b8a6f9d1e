#!/usr/bin/env python3
"""
fix_cues.py: Add a memory cue under every hot cue that lacks one.

Reads a rekordbox library export, inserts a POSITION_MARK with Num="-1" at each
hot cue position of a collection track that has no memory cue there, and writes
the result to a separate file. With --rename the result then replaces the input,
which is kept as `<input>.bak`.

Usage:
    python -m cuefix.fix_cues --in rekordbox.xml --out /tmp/output.xml
    python -m cuefix.fix_cues --default --rename

The rename is three separate filesystem steps (drop old backup, move input to
backup, move output to input). It is not atomic and is never rolled back: if
the process dies between steps, the input may exist only as `.bak`.
"""

from __future__ import annotations

import argparse
import contextlib
import logging
import os
import shutil
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Optional, Tuple

from .errors import (
    CueFixError,
    FlushError,
    InputOpenError,
    OutputCreateError,
    RenameError,
)
from .read_tokens import read_tokens
from .report import build_run_report, write_run_report
from .transcode import RunStats, transcode
from .write_tokens import TokenWriter

logger = logging.getLogger(__name__)

DEFAULT_INPUT = "rekordbox.xml"
DEFAULT_OUTPUT = "/tmp/output.xml"
BACKUP_SUFFIX = ".bak"


def default_paths() -> Tuple[Path, Path]:
    """(input, output) used by --default: the export and rekordbox's own library file."""
    home = Path.home()
    return (
        home / "Documents" / "rekordbox.xml",
        home / "Library" / "Pioneer" / "rekordbox" / "rekordbox.xml",
    )


@dataclass(frozen=True)
class RunConfig:
    input_path: Path
    output_path: Path
    rename: bool = False
    report_path: Optional[Path] = None
    confirm: bool = True


# --------------------------- Run controller ---------------------------


def fix_cues_stream(fin: BinaryIO, fout: BinaryIO, stats: Optional[RunStats] = None) -> RunStats:
    """
    Transform the document in `fin` into `fout` and flush it.

    Raises:
        TokenReadError: if `fin` is unreadable or not well-formed
        FlushError: if writing to `fout` fails
    """
    if stats is None:
        stats = RunStats()
    writer = TokenWriter(fout)
    for token in transcode(read_tokens(fin), stats):
        writer.write(token)
    writer.flush()
    return stats


def fix_cues_file(input_path, output_path, rename: bool = False, record_added: bool = False) -> RunStats:
    """
    Transform `input_path` into `output_path`, then optionally swap the output in.

    With `record_added` every inserted cue is kept in `RunStats.added` for the
    run report; otherwise only the counters are kept.

    Raises:
        InputOpenError, OutputCreateError, TokenReadError, FlushError, RenameError
    """
    input_path = Path(input_path)
    output_path = Path(output_path)

    try:
        fin = open(input_path, "rb")
    except OSError as e:
        raise InputOpenError(f"Can't open input file '{input_path}': {e}") from e

    with fin:
        if output_path.exists() and output_path.resolve() == input_path.resolve():
            raise OutputCreateError(f"Output file '{output_path}' is the input file; use --rename instead")
        try:
            fout = open(output_path, "wb")
        except OSError as e:
            raise OutputCreateError(f"Can't open output file '{output_path}': {e}") from e

        try:
            stats = fix_cues_stream(fin, fout, RunStats(record_added=record_added))
        except BaseException:
            # Closing retries the failed flush; keep the original error
            with contextlib.suppress(OSError):
                fout.close()
            raise
        try:
            fout.close()
        except OSError as e:
            raise FlushError(f"Can't close output file '{output_path}': {e}") from e

    if rename:
        swap_in_output(input_path, output_path)

    return stats


def swap_in_output(input_path, output_path) -> Path:
    """
    Replace `input_path` with `output_path`, keeping the old input as `.bak`.

    Any existing backup is overwritten. Returns the backup path.

    Raises:
        RenameError: if any step fails; earlier steps are not undone
    """
    input_path = Path(input_path)
    backup = input_path.with_name(input_path.name + BACKUP_SUFFIX)
    try:
        if backup.exists():
            backup.unlink()
        os.rename(input_path, backup)
        # shutil.move copies when the output is on another filesystem (/tmp)
        shutil.move(str(output_path), str(input_path))
    except OSError as e:
        raise RenameError(f"Can't replace '{input_path}' with '{output_path}': {e}") from e
    logger.info(f"Replaced {input_path} (backup at {backup})")
    return backup


# --------------------------- CLI ---------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Add a memory cue to every rekordbox hot cue that doesn't have one."
    )
    parser.add_argument("--default", action="store_true", help="Use default filenames")
    parser.add_argument("--rename", action="store_true", help="Do in place rename of input file")
    parser.add_argument("--in", dest="input", default=DEFAULT_INPUT, help="Input filename")
    parser.add_argument("--out", dest="output", default=DEFAULT_OUTPUT, help="Temporary output filename")
    parser.add_argument("-y", "--yes", action="store_true", help="Don't wait for confirmation")
    parser.add_argument("-r", "--report", help="Write a JSON run report to this path")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def resolve_config(args: argparse.Namespace) -> RunConfig:
    input_path, output_path = Path(args.input), Path(args.output)
    if args.default:
        input_path, output_path = default_paths()
        logger.info("Using Standard Default Values")
    return RunConfig(
        input_path=input_path,
        output_path=output_path,
        rename=args.rename,
        report_path=Path(args.report) if args.report else None,
        confirm=not args.yes,
    )


def wait_for_confirmation() -> bool:
    """Block until a line (or EOF) is read. False if interrupted."""
    try:
        input("\nPress enter to continue or CTRL-C to stop...")
    except EOFError:
        pass
    except KeyboardInterrupt:
        print()
        return False
    return True


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)
    else:
        logging.basicConfig(level=logging.INFO)

    config = resolve_config(args)
    print(f"Input : {config.input_path}")
    print(f"Output: {config.output_path}")

    if config.confirm and not wait_for_confirmation():
        return 130

    try:
        stats = fix_cues_file(
            config.input_path,
            config.output_path,
            rename=config.rename,
            record_added=config.report_path is not None,
        )
        if config.report_path:
            report = build_run_report(stats, str(config.input_path), str(config.output_path), config.rename)
            write_run_report(report, str(config.report_path))
            logger.info(f"Run report written to {config.report_path}")
    except CueFixError as e:
        logger.error(f"Failed: {e}")
        raise SystemExit(e.exit_code) from e

    logger.info(f"Finished  {stats.tracks_changed} tracks changed, {stats.cues_added} cues added")
    return 0


if __name__ == "__main__":
    sys.exit(main())
