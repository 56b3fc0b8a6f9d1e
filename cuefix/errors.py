"""
errors.py: Fatal error taxonomy.

Each error carries the process exit code the CLI uses for it. Library code
raises these; only `fix_cues.main` turns them into an exit.
"""

from __future__ import annotations


class CueFixError(Exception):
    exit_code = 1


class InputOpenError(CueFixError):
    exit_code = 1


class OutputCreateError(CueFixError):
    exit_code = 2


class ReportError(CueFixError):
    exit_code = 3


class TokenReadError(CueFixError):
    exit_code = 10


class FlushError(CueFixError):
    exit_code = 11


class RenameError(CueFixError):
    exit_code = 12
