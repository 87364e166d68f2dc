"""Library version and build date information."""

from __future__ import annotations

import time
from pathlib import Path

_VERSION_MAJOR = 0
_VERSION_MINOR = 3
_VERSION_PATCH = 1


def _module_date() -> str:
    """Date of this module file in the form 'Mmm dd yyyy' (day space-padded)."""
    try:
        stamp = Path(__file__).stat().st_mtime
    except OSError:
        stamp = time.time()
    moment = time.localtime(stamp)
    month = time.strftime("%b", moment)
    return f"{month} {moment.tm_mday:2d} {moment.tm_year:04d}"


_BUILD_DATE = _module_date()


def get_version() -> str:
    """Return the version as 'major.minor.patch'."""
    return f"{_VERSION_MAJOR}.{_VERSION_MINOR}.{_VERSION_PATCH}"


def get_build_date() -> str:
    """Return the build date in the form 'Mmm dd yyyy'."""
    return _BUILD_DATE