"""
Diagnostic output for calbook.

Lines go to stderr prefixed with a timestamp and a subsystem tag.
Output is disabled until set_debug(True) is called (the CLI does this
for --debug or when the configuration asks for it).
"""

import sys
from datetime import datetime


_debug_enabled: bool = False


def set_debug(enabled: bool):
    """Enable or disable diagnostic output for the whole application."""
    global _debug_enabled
    _debug_enabled = enabled


def is_debug_enabled() -> bool:
    return _debug_enabled


def debug_print(tag: str, message: str) -> None:
    if not _debug_enabled:
        return
    timestamp = datetime.now().strftime("%H:%M:%S")
    print(f"[{timestamp}] {tag}: {message}", file=sys.stderr)
